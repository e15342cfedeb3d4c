"""
Module: payroll_kernel.selectors.base
Responsibility: Abstract base class for read-only query selectors.  Selectors
    are the read side: employees, open records, year-to-date aggregates,
    summaries and history.
Architecture position: Kernel > Selectors.  Selectors NEVER create, modify,
    or delete data.

Invariants enforced:
    - Read-only access: no session.add/delete/commit/flush.
    - DTO return convention: selectors return frozen dataclasses or computed
      values, not ORM instances.
    - Session ownership: the caller owns the session and its transaction.

Audit relevance:
    Year-to-date totals are derived here from PAID records on every read.
    There are no stored accumulators to drift out of sync.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Accepts a Session from the caller, performs read-only queries, and
        returns DTOs or computed results.
    """

    def __init__(self, session: Session):
        self.session = session
