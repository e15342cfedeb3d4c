"""
Typed Exception Hierarchy for the Payroll Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Payroll errors must be handled precisely. A run that fails for one employee
has to record *which* employee failed and *why*, and an API layer has to map
an unauthorized approval differently from a stale one. Parsing message
strings for that is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        machine.approve(record_id, actor_id)
    except InvalidStateTransitionError as e:
        api_response(code=e.code, current=e.current_status)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollKernelError (base)
    |
    +-- NotFoundError
    |   +-- EmployeeNotFoundError
    |   +-- EmployerNotFoundError
    |   +-- PayrollRecordNotFoundError
    |   +-- PayrollRunNotFoundError
    |
    +-- EmployeeInactiveError
    +-- OverlappingRunError
    +-- NoEligibleEmployeesError
    +-- InvalidStateTransitionError
    +-- UnauthorizedError
    |
    +-- PayrollInputError
    |   +-- InvalidPayPeriodError
    |   +-- MissingHoursError
    |   +-- InvalidPayInputError
    |
    +-- ConfigurationError
    |   +-- TaxTableNotFoundError
    |   +-- InvalidTaxTableError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Lookup          | EMPLOYEE_NOT_FOUND          | Employee ID doesn't exist
                | EMPLOYER_NOT_FOUND          | Employer ID doesn't exist
                | PAYROLL_RECORD_NOT_FOUND    | Record ID doesn't exist
                | PAYROLL_RUN_NOT_FOUND       | Run ID doesn't exist
----------------|-----------------------------|-----------------------------------------
Lifecycle       | EMPLOYEE_INACTIVE           | Paying an inactive employee
                | OVERLAPPING_RUN             | Open record overlaps requested period
                | NO_ELIGIBLE_EMPLOYEES       | Run would contain nobody
                | INVALID_STATE_TRANSITION    | Transition from the wrong status
                | UNAUTHORIZED                | Actor lacks authority over employer
----------------|-----------------------------|-----------------------------------------
Input           | INVALID_PAY_PERIOD          | end < start
                | MISSING_HOURS               | Hourly employee without hours
                | INVALID_PAY_INPUT           | Negative hours, bonus, commission
----------------|-----------------------------|-----------------------------------------
Configuration   | TAX_TABLE_NOT_FOUND         | No tax table set for tax year or payment date
                | INVALID_TAX_TABLE           | Table set fails validation
----------------|-----------------------------|-----------------------------------------
Immutability    | IMMUTABILITY_VIOLATION      | Modifying a finalized record

===============================================================================
HANDLING PATTERNS
===============================================================================

1. Per-employee errors during a run are caught as ``PayrollKernelError``,
   recorded against the run, and the run continues.
2. Everything else aborts the single operation; the caller rolls back.
3. Nothing is silently corrected: bad inputs raise.
"""

from datetime import date


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


# Lookup exceptions


class NotFoundError(PayrollKernelError):
    """Base exception for missing entities."""

    code: str = "NOT_FOUND"


class EmployeeNotFoundError(NotFoundError):
    """Employee with given ID was not found."""

    code: str = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee not found: {employee_id}")


class EmployerNotFoundError(NotFoundError):
    """Employer with given ID was not found."""

    code: str = "EMPLOYER_NOT_FOUND"

    def __init__(self, employer_id: str):
        self.employer_id = employer_id
        super().__init__(f"Employer not found: {employer_id}")


class PayrollRecordNotFoundError(NotFoundError):
    """Payroll record with given ID was not found."""

    code: str = "PAYROLL_RECORD_NOT_FOUND"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Payroll record not found: {record_id}")


class PayrollRunNotFoundError(NotFoundError):
    """Payroll run with given ID was not found."""

    code: str = "PAYROLL_RUN_NOT_FOUND"

    def __init__(self, run_id: str):
        self.run_id = run_id
        super().__init__(f"Payroll run not found: {run_id}")


# Lifecycle exceptions


class EmployeeInactiveError(PayrollKernelError):
    """Only ACTIVE employees may be paid."""

    code: str = "EMPLOYEE_INACTIVE"

    def __init__(self, employee_id: str, status: str):
        self.employee_id = employee_id
        self.status = status
        super().__init__(
            f"Employee {employee_id} is {status}; only active employees can be paid"
        )


class OverlappingRunError(PayrollKernelError):
    """
    An open (DRAFT or APPROVED) record already covers part of the period.

    Two runs for the same employer may never pay the same days twice.
    """

    code: str = "OVERLAPPING_RUN"

    def __init__(
        self,
        employer_id: str,
        period_start: str,
        period_end: str,
        existing_record_id: str,
        existing_start: str,
        existing_end: str,
    ):
        self.employer_id = employer_id
        self.period_start = period_start
        self.period_end = period_end
        self.existing_record_id = existing_record_id
        self.existing_start = existing_start
        self.existing_end = existing_end
        super().__init__(
            f"Payroll period {period_start}..{period_end} for employer "
            f"{employer_id} overlaps open record {existing_record_id} "
            f"({existing_start}..{existing_end})"
        )


class NoEligibleEmployeesError(PayrollKernelError):
    """The employer has no active employees matching the run request."""

    code: str = "NO_ELIGIBLE_EMPLOYEES"

    def __init__(self, employer_id: str):
        self.employer_id = employer_id
        super().__init__(f"No eligible employees for employer {employer_id}")


class InvalidStateTransitionError(PayrollKernelError):
    """
    A lifecycle action was attempted from a status that does not allow it.

    Also raised when a concurrent transition won the race: the conditional
    update affected zero rows.
    """

    code: str = "INVALID_STATE_TRANSITION"

    def __init__(
        self,
        record_id: str,
        action: str,
        current_status: str,
        expected_statuses: tuple[str, ...],
    ):
        self.record_id = record_id
        self.action = action
        self.current_status = current_status
        self.expected_statuses = expected_statuses
        super().__init__(
            f"Cannot {action} payroll record {record_id}: status is "
            f"{current_status}, expected one of {', '.join(expected_statuses)}"
        )


class UnauthorizedError(PayrollKernelError):
    """Actor has no administrative authority over the employer."""

    code: str = "UNAUTHORIZED"

    def __init__(self, actor_id: str, employer_id: str, action: str):
        self.actor_id = actor_id
        self.employer_id = employer_id
        self.action = action
        super().__init__(
            f"Actor {actor_id} is not authorized to {action} for employer {employer_id}"
        )


# Input exceptions


class PayrollInputError(PayrollKernelError):
    """Base exception for rejected calculation inputs."""

    code: str = "PAYROLL_INPUT_ERROR"


class InvalidPayPeriodError(PayrollInputError):
    """Pay period end precedes its start."""

    code: str = "INVALID_PAY_PERIOD"

    def __init__(self, period_start: str, period_end: str):
        self.period_start = period_start
        self.period_end = period_end
        super().__init__(
            f"Invalid pay period: end {period_end} is before start {period_start}"
        )


class MissingHoursError(PayrollInputError):
    """Hourly employees require hours for the period."""

    code: str = "MISSING_HOURS"

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Hours are required for hourly employee {employee_id}")


class InvalidPayInputError(PayrollInputError):
    """A pay input (hours, bonus, commission, rate) is out of range."""

    code: str = "INVALID_PAY_INPUT"

    def __init__(self, field: str, value: str, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value}: {reason}")


# Configuration exceptions


class ConfigurationError(PayrollKernelError):
    """Base exception for configuration problems."""

    code: str = "CONFIGURATION_ERROR"


class TaxTableNotFoundError(ConfigurationError):
    """No tax table set is configured for the requested year."""

    code: str = "TAX_TABLE_NOT_FOUND"

    def __init__(self, tax_year: int, jurisdiction: str, as_of: date | None = None):
        self.tax_year = tax_year
        self.jurisdiction = jurisdiction
        self.as_of = as_of
        message = f"No tax table set for jurisdiction {jurisdiction}, year {tax_year}"
        if as_of is not None:
            message += f" effective on {as_of.isoformat()}"
        super().__init__(message)


class InvalidTaxTableError(ConfigurationError):
    """A tax table set failed structural validation."""

    code: str = "INVALID_TAX_TABLE"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid tax table {source}: {reason}")


# Immutability exceptions


class ImmutabilityError(PayrollKernelError):
    """Base exception for immutability violations."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an immutable record.

    Deduction items are immutable from creation; payroll records are
    immutable outside their status fields, and entirely once PAID or VOID.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
