"""
payroll_services.payroll_state_machine -- Payroll record lifecycle enforcement.

Responsibility:
    Moves payroll records through ``PAYROLL_RECORD_WORKFLOW``:
    approve (DRAFT -> APPROVED), finalize (APPROVED -> PAID) and void
    (DRAFT or APPROVED -> VOID, with a reason).  Each transition is checked
    for authority, applied with a conditional UPDATE, written to the
    transition audit trail and reflected in the owning run's status.

Architecture position:
    Services -- imperative shell over the workflow definition in
    ``payroll_modules.payroll.workflows``.  Called by ``PayrollService``.

Invariants enforced:
    - No double transition: the UPDATE matches ``id`` AND the expected
      status.  When a concurrent transaction got there first the UPDATE
      affects zero rows and the loser gets ``InvalidStateTransitionError``.
    - PAID and VOID are terminal.
    - Only OWNER or ADMIN members of the record's employer may transition.
    - Flush-only: the caller owns commit and rollback.

Failure modes:
    - PayrollRecordNotFoundError: unknown record id.
    - UnauthorizedError: actor lacks authority over the employer.
    - InvalidStateTransitionError: action not legal from the current status.
    - InvalidPayInputError: void without a reason.

Audit relevance:
    Every successful transition appends a ``payroll_record_transitions`` row
    (action, from, to, actor, time, reason) and stamps the matching
    ``*_at`` / ``*_by_id`` columns on the record.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update

from payroll_kernel.exceptions import (
    InvalidPayInputError,
    InvalidStateTransitionError,
    PayrollRecordNotFoundError,
)
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_kernel.services.base import BaseService
from payroll_modules.payroll.models import PayrollRecord, PayrollRunStatus, PayrollStatus
from payroll_modules.payroll.orm import (
    PayrollRecordModel,
    PayrollRecordTransitionModel,
    PayrollRunModel,
)
from payroll_modules.payroll.workflows import (
    APPROVE,
    FINALIZE,
    PAYROLL_RECORD_WORKFLOW,
    VOID,
)
from payroll_services.employer_authority import require_authorized

logger = get_logger("services.payroll_state_machine")


def derive_run_status(statuses: Iterable[PayrollStatus]) -> PayrollRunStatus:
    """
    Summarize a run from its records' statuses.

    VOID records are ignored unless every record is void.  A run with no
    records stays DRAFT.
    """
    statuses = list(statuses)
    if statuses and all(s == PayrollStatus.VOID for s in statuses):
        return PayrollRunStatus.VOID

    live = [s for s in statuses if s != PayrollStatus.VOID]
    if not live:
        return PayrollRunStatus.DRAFT
    if all(s == PayrollStatus.PAID for s in live):
        return PayrollRunStatus.PAID
    if any(s == PayrollStatus.PAID for s in live):
        return PayrollRunStatus.PARTIALLY_PAID
    if all(s == PayrollStatus.APPROVED for s in live):
        return PayrollRunStatus.APPROVED
    if any(s == PayrollStatus.APPROVED for s in live):
        return PayrollRunStatus.PARTIALLY_APPROVED
    return PayrollRunStatus.DRAFT


class PayrollRunStateMachine(BaseService):
    """
    Applies lifecycle actions to payroll records.

    Contract:
        Each public method takes a record id and the acting user and returns
        the record as it stands after the transition.

    Guarantees:
        - At most one of two concurrent identical transitions succeeds.
        - The run status summary is recomputed after every transition.

    Non-goals:
        - Does NOT commit.
        - Does NOT move money; finalize marks a record paid.
    """

    def approve(self, record_id: UUID, actor_id: UUID) -> PayrollRecord:
        now = self.clock.now()
        return self._transition(
            record_id,
            actor_id,
            APPROVE,
            stamp={"approved_at": now, "approved_by_id": actor_id},
            occurred_at=now,
        )

    def finalize(self, record_id: UUID, actor_id: UUID) -> PayrollRecord:
        now = self.clock.now()
        return self._transition(
            record_id,
            actor_id,
            FINALIZE,
            stamp={"paid_at": now, "paid_by_id": actor_id},
            occurred_at=now,
        )

    def void(self, record_id: UUID, actor_id: UUID, reason: str) -> PayrollRecord:
        if not reason or not reason.strip():
            raise InvalidPayInputError(
                field="reason", value=repr(reason), reason="a void requires a reason",
            )
        now = self.clock.now()
        return self._transition(
            record_id,
            actor_id,
            VOID,
            stamp={
                "voided_at": now,
                "voided_by_id": actor_id,
                "void_reason": reason.strip(),
            },
            occurred_at=now,
            reason=reason.strip(),
        )

    # -- internals ---------------------------------------------------------

    def _transition(
        self,
        record_id: UUID,
        actor_id: UUID,
        action: str,
        stamp: dict,
        occurred_at: datetime,
        reason: str | None = None,
    ) -> PayrollRecord:
        record = self.session.get(PayrollRecordModel, record_id)
        if record is None:
            raise PayrollRecordNotFoundError(str(record_id))

        with LogContext.bind(
            record_id=record_id,
            actor_id=actor_id,
            employer_id=record.employer_id,
            run_id=record.run_id,
        ):
            require_authorized(self.session, actor_id, record.employer_id, action)

            expected = PAYROLL_RECORD_WORKFLOW.source_states(action)
            current = record.status
            if current not in expected:
                self._reject(record_id, action, current, expected)

            target = PAYROLL_RECORD_WORKFLOW.target_state(action)
            result = self.session.execute(
                update(PayrollRecordModel)
                .where(
                    PayrollRecordModel.id == record_id,
                    PayrollRecordModel.status == current,
                )
                .values(status=target, updated_by_id=actor_id, **stamp)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                # Another transaction moved the record since it was read.
                self.session.refresh(record, ["status"])
                self._reject(record_id, action, record.status, expected, concurrent=True)

            self.session.add(
                PayrollRecordTransitionModel(
                    record_id=record_id,
                    action=action,
                    from_status=current,
                    to_status=target,
                    actor_id=actor_id,
                    occurred_at=occurred_at,
                    reason=reason,
                    created_by_id=actor_id,
                )
            )
            self.session.flush()
            self.session.refresh(record)

            run_status = self._refresh_run_status(record.run_id, actor_id)

            logger.info(
                f"payroll_record_{_PAST_TENSE[action]}",
                extra={
                    "action": action,
                    "from_status": current,
                    "to_status": target,
                    "run_status": run_status.value,
                    "net_pay": str(record.net_pay),
                },
            )
            return record.to_dto()

    def _refresh_run_status(self, run_id: UUID, actor_id: UUID) -> PayrollRunStatus:
        statuses = self.session.scalars(
            select(PayrollRecordModel.status).where(PayrollRecordModel.run_id == run_id)
        )
        status = derive_run_status(PayrollStatus(s) for s in statuses)
        run = self.session.get(PayrollRunModel, run_id)
        if run is not None and run.status != status.value:
            run.status = status.value
            run.updated_by_id = actor_id
            self.session.flush()
        return status

    def _reject(
        self,
        record_id: UUID,
        action: str,
        current: str,
        expected: tuple[str, ...],
        concurrent: bool = False,
    ) -> None:
        logger.warning(
            "payroll_transition_rejected",
            extra={
                "action": action,
                "current_status": current,
                "expected_statuses": list(expected),
                "concurrent": concurrent,
            },
        )
        raise InvalidStateTransitionError(
            record_id=str(record_id),
            action=action,
            current_status=current,
            expected_statuses=expected,
        )


_PAST_TENSE = {APPROVE: "approved", FINALIZE: "finalized", VOID: "voided"}
