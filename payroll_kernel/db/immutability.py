"""
ORM-Level Immutability Enforcement for payroll records.

===============================================================================
WHY THIS EXISTS
===============================================================================

A paycheck that has been paid is a historical fact: tax filings and W-2s are
computed from it, and the year-to-date totals of every later paycheck of the
same employee are derived from it.  Editing it in place would silently
corrupt all of those.  Corrections happen through new records, never edits.

SQLAlchemy fires mapper events before UPDATE/DELETE statements are emitted
during a flush.  Listeners registered here inspect attribute history and
raise ImmutabilityViolationError, aborting the flush.

    session.flush()
         |
         v
    [before_update] --> _check_*_immutability() --> ImmutabilityViolationError
    [before_delete] --> _check_*_delete()       --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

Bulk ``update()`` statements do not fire mapper events.  The lifecycle state
machine uses exactly such conditional updates for status transitions, and
touches nothing but status and transition audit columns.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity                    | Rule
--------------------------|--------------------------------------------------
PayrollRecord             | Only lifecycle columns may change, and only while
                          | DRAFT or APPROVED.  PAID / VOID: fully frozen.
                          | Never deletable once APPROVED, PAID or VOID.
DeductionItem             | Frozen from creation; never deletable.
PayrollRecordTransition   | Audit trail; frozen from creation; never deletable.

updated_at/updated_by_id are audit metadata and always allowed to change.

===============================================================================
USAGE
===============================================================================

    from payroll_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # create_tables() calls this

    # TESTS ONLY
    unregister_immutability_listeners()
"""

from sqlalchemy import event, inspect
from sqlalchemy.orm.attributes import get_history

from payroll_kernel.exceptions import ImmutabilityViolationError
from payroll_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

_AUDIT_FIELDS = frozenset({"updated_at", "updated_by_id"})

_FROZEN_STATUSES = frozenset({"paid", "void"})

_UNDELETABLE_STATUSES = frozenset({"approved", "paid", "void"})

# Columns the lifecycle is allowed to move while a record is still open.
_RECORD_LIFECYCLE_FIELDS = frozenset({
    "status",
    "approved_at",
    "approved_by_id",
    "paid_at",
    "paid_by_id",
    "voided_at",
    "voided_by_id",
    "void_reason",
})


def _status_value(status) -> str:
    return status.value if hasattr(status, "value") else str(status)


def _changed_fields(target) -> list[str]:
    insp = inspect(target)
    return [
        attr.key
        for attr in insp.attrs
        if attr.key not in _AUDIT_FIELDS and attr.history.has_changes()
    ]


def _block(entity_type: str, entity_id, operation: str, reason: str, **extra) -> None:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "operation": operation,
            **extra,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(entity_id),
        reason=reason,
    )


def _check_payroll_record_immutability(mapper, connection, target):
    """
    Block edits to payroll records outside the lifecycle columns.

    The status before this flush decides: if it was PAID or VOID nothing may
    change at all; otherwise only lifecycle columns may change.
    """
    status_history = get_history(target, "status")
    if status_history.deleted:
        previous_status = _status_value(status_history.deleted[0])
    else:
        previous_status = _status_value(target.status)

    changed = _changed_fields(target)

    if previous_status in _FROZEN_STATUSES and changed:
        _block(
            "PayrollRecord",
            target.id,
            "UPDATE",
            f"Cannot modify field '{changed[0]}' on {previous_status} payroll record",
            field=changed[0],
        )

    for field in changed:
        if field not in _RECORD_LIFECYCLE_FIELDS:
            _block(
                "PayrollRecord",
                target.id,
                "UPDATE",
                f"Field '{field}' is fixed at calculation time",
                field=field,
            )


def _check_payroll_record_delete(mapper, connection, target):
    status = _status_value(target.status)
    if status in _UNDELETABLE_STATUSES:
        _block(
            "PayrollRecord",
            target.id,
            "DELETE",
            f"Payroll records cannot be deleted once {status}",
        )


def _check_deduction_item_immutability(mapper, connection, target):
    changed = _changed_fields(target)
    if changed:
        _block(
            "DeductionItem",
            target.id,
            "UPDATE",
            "Deduction items are immutable after creation",
            field=changed[0],
        )


def _check_deduction_item_delete(mapper, connection, target):
    _block("DeductionItem", target.id, "DELETE", "Deduction items cannot be deleted")


def _check_transition_immutability(mapper, connection, target):
    changed = _changed_fields(target)
    if changed:
        _block(
            "PayrollRecordTransition",
            target.id,
            "UPDATE",
            "Transition audit rows are append-only",
            field=changed[0],
        )


def _check_transition_delete(mapper, connection, target):
    _block(
        "PayrollRecordTransition",
        target.id,
        "DELETE",
        "Transition audit rows cannot be deleted",
    )


def _listeners():
    from payroll_modules.payroll.orm import (
        DeductionItemModel,
        PayrollRecordModel,
        PayrollRecordTransitionModel,
    )

    return (
        (PayrollRecordModel, "before_update", _check_payroll_record_immutability),
        (PayrollRecordModel, "before_delete", _check_payroll_record_delete),
        (DeductionItemModel, "before_update", _check_deduction_item_immutability),
        (DeductionItemModel, "before_delete", _check_deduction_item_delete),
        (PayrollRecordTransitionModel, "before_update", _check_transition_immutability),
        (PayrollRecordTransitionModel, "before_delete", _check_transition_delete),
    )


def register_immutability_listeners() -> None:
    """
    Register all immutability enforcement event listeners.

    Idempotent: listeners already registered are skipped.
    """
    registered = 0
    for target, event_name, fn in _listeners():
        if not event.contains(target, event_name, fn):
            event.listen(target, event_name, fn)
            registered += 1
    if registered:
        logger.debug("immutability_listeners_registered", extra={"count": registered})


def _safe_remove_listener(target, event_name, listener_fn):
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners() -> None:
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests that must perform a forbidden operation.
    """
    for target, event_name, fn in _listeners():
        _safe_remove_listener(target, event_name, fn)
