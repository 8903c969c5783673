"""
BaseService -- abstract base for session-bound write services.

Responsibility:
    Provides the common constructor and session-handling contract for
    write-side services.  Subclasses receive a SQLAlchemy ``Session`` that
    they use via ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    Transaction boundaries: services derived from BaseService flush within
    the caller's transaction and never commit or rollback themselves.  The
    module-level orchestrators (transfer service, replenishment service)
    own commit/rollback so that a status change and every ledger write it
    implies land in one transaction.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseService(ABC):
    """
    Abstract base class for flush-only services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide query-only (read) methods -- those belong in
          selectors.
    """

    def __init__(self, session: Session):
        self.session = session
