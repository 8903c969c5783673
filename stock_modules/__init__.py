"""
Stock modules: replenishment, branch inventory and stock transfers.

Each module follows the same layout: ``models`` (frozen DTOs), ``orm``
(SQLAlchemy tables), ``selectors`` (read side) and ``service`` (write side,
owning its transaction boundary).  Submodules are not imported here; import
the one you need.
"""
