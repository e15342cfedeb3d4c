"""
BaseService -- abstract base for all write-side services.

Responsibility:
    Common constructor and session-handling contract for every service that
    mutates payroll state.  Services receive a SQLAlchemy ``Session`` and use
    ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    Transaction boundaries: services flush within the caller's transaction
    and never commit or roll back the outer transaction.  SAVEPOINTs they
    open themselves (``session.begin_nested()``) are theirs to release.

Failure modes:
    - A subclass that commits breaks the atomicity of a payroll run: the
      employer lock would be released mid-run.
"""

from abc import ABC

from sqlalchemy.orm import Session

from payroll_kernel.domain.clock import Clock, SystemClock


class BaseService(ABC):
    """
    Abstract base class for write-side services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and an optional
        ``Clock``.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()`` on the caller's transaction.

    Non-goals:
        - Does NOT provide read methods -- those belong in selectors.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()
