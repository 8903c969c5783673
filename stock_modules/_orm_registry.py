"""
Module ORM Registry (``stock_modules._orm_registry``).

Responsibility
--------------
Ensure kernel and module SQLAlchemy ORM models are imported so that
``Base.metadata`` contains their table definitions before
``create_tables()`` runs.

Architecture position
---------------------
**Modules layer** -- utility.  Called from
``stock_kernel.db.engine.create_tables`` and from ``tests/conftest.py``.
"""


def import_all_orm_models() -> None:
    """Import every ORM module.  Idempotent."""
    import stock_kernel.services.sequence_service  # noqa: F401
    # fmt: off
    import stock_modules.branch_inventory.orm  # noqa: F401
    import stock_modules.replenishment.orm  # noqa: F401
    import stock_modules.transfers.orm  # noqa: F401
    # fmt: on
