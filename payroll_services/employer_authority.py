"""
payroll_services.employer_authority -- Employer membership check at the
lifecycle boundary.

Responsibility:
    Decide whether an actor may approve, finalize or void payroll for an
    employer.  An actor is authorized iff a membership row with role OWNER
    or ADMIN links them to the employer.

Architecture position:
    Services layer.  Called by ``PayrollRunStateMachine`` before any
    conditional update is attempted.

Invariants:
    - Identity is resolved by the caller; this module only reads
      ``payroll_employer_members``.
    - VIEWER members and non-members are never authorized.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from payroll_kernel.exceptions import UnauthorizedError
from payroll_kernel.logging_config import get_logger
from payroll_modules.payroll.models import MemberRole
from payroll_modules.payroll.orm import EmployerMemberModel

logger = get_logger("services.employer_authority")

AUTHORIZED_ROLES: frozenset[str] = frozenset({MemberRole.OWNER.value, MemberRole.ADMIN.value})


def is_authorized(session: Session, actor_id: UUID, employer_id: UUID) -> bool:
    """True when the actor holds an OWNER or ADMIN membership in the employer."""
    role = session.scalar(
        select(EmployerMemberModel.role).where(
            EmployerMemberModel.employer_id == employer_id,
            EmployerMemberModel.user_id == actor_id,
        )
    )
    return role in AUTHORIZED_ROLES


def require_authorized(
    session: Session,
    actor_id: UUID,
    employer_id: UUID,
    action: str,
) -> None:
    """Raise ``UnauthorizedError`` unless ``is_authorized`` holds."""
    if is_authorized(session, actor_id, employer_id):
        return
    logger.warning(
        "payroll_action_unauthorized",
        extra={
            "actor_id": str(actor_id),
            "employer_id": str(employer_id),
            "action": action,
        },
    )
    raise UnauthorizedError(
        actor_id=str(actor_id), employer_id=str(employer_id), action=action,
    )
