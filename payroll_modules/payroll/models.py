"""
Payroll Domain Models (``payroll_modules.payroll.models``).

Responsibility
--------------
Frozen dataclass value objects representing the nouns of payroll:
employees, pay periods, pay inputs, year-to-date totals, deductions,
pay breakdowns, payroll records and runs, and the read models built on
top of them.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Returned by
``PayrollService`` and the selectors; persisted through ``orm.py``.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* ``PayPeriod.end >= PayPeriod.start``.
* ``PayBreakdown.net_pay == total_gross - total_deductions`` exactly.

Failure modes
-------------
* ``InvalidPayPeriodError`` for a period ending before it starts.
* ``InvalidPayInputError`` for negative hours, bonuses or commissions.
* ``ValueError`` for inconsistent breakdowns or bad enum values.

Audit relevance
---------------
Payroll records are tax-critical.  Every record carries the deduction
breakdown, employer tax liability and the tax table version that produced
it.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from payroll_engines.employer_tax import EmployerTaxLiability
from payroll_engines.gross_pay import CompensationType, GrossPayResult, HoursWorked
from payroll_engines.periods import PayFrequency
from payroll_kernel.exceptions import InvalidPayInputError, InvalidPayPeriodError
from payroll_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.models")

ZERO = Decimal("0")


class EmployeeStatus(Enum):
    """Employment status. Only ACTIVE employees are paid."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class FilingStatus(Enum):
    """Federal W-4 filing status."""
    SINGLE = "single"
    MARRIED_FILING_JOINTLY = "married_filing_jointly"
    MARRIED_FILING_SEPARATELY = "married_filing_separately"
    HEAD_OF_HOUSEHOLD = "head_of_household"


class PayrollStatus(Enum):
    """Payroll record lifecycle states."""
    DRAFT = "draft"
    APPROVED = "approved"
    PAID = "paid"
    VOID = "void"


class DeductionType(Enum):
    """Kinds of amounts withheld from gross pay."""
    FEDERAL_TAX = "federal_tax"
    SOCIAL_SECURITY = "social_security"
    MEDICARE = "medicare"


class MemberRole(Enum):
    """A user's role within an employer."""
    OWNER = "owner"
    ADMIN = "admin"
    VIEWER = "viewer"


class PayrollRunStatus(Enum):
    """Aggregate status of a run, derived from its records."""
    DRAFT = "draft"
    PARTIALLY_APPROVED = "partially_approved"
    APPROVED = "approved"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    VOID = "void"


@dataclass(frozen=True)
class WithholdingProfile:
    """Employee's W-4 elections."""
    filing_status: FilingStatus = FilingStatus.SINGLE
    allowances: int = 0
    additional_withholding: Decimal = ZERO
    exempt_federal: bool = False
    exempt_fica: bool = False

    def __post_init__(self):
        if self.allowances < 0:
            raise ValueError("allowances cannot be negative")
        if self.additional_withholding < 0:
            raise ValueError("additional_withholding cannot be negative")


@dataclass(frozen=True)
class Employee:
    """An employee for payroll purposes. Read-only to the payroll core."""
    id: UUID
    employer_id: UUID
    employee_number: str
    first_name: str
    last_name: str
    compensation_type: CompensationType
    pay_rate: Decimal  # hourly rate, fixed periodic amount, or annual salary
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    pay_frequency: PayFrequency | None = None
    withholding: WithholdingProfile = field(default_factory=WithholdingProfile)

    def __post_init__(self):
        if self.pay_rate < 0:
            logger.warning(
                "employee_negative_pay_rate",
                extra={
                    "employee_id": str(self.id),
                    "employee_number": self.employee_number,
                    "pay_rate": str(self.pay_rate),
                },
            )
            raise ValueError("pay_rate cannot be negative")

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class PayPeriod:
    """Inclusive pay period plus the date the money moves."""
    start: date
    end: date
    payment_date: date | None = None

    def __post_init__(self):
        if self.end < self.start:
            raise InvalidPayPeriodError(
                period_start=self.start.isoformat(),
                period_end=self.end.isoformat(),
            )

    @property
    def effective_payment_date(self) -> date:
        return self.payment_date or self.end

    @property
    def tax_year(self) -> int:
        """Payroll taxes follow the year the wages are paid."""
        return self.effective_payment_date.year

    def overlaps(self, start: date, end: date) -> bool:
        return self.start <= end and start <= self.end


@dataclass(frozen=True)
class PayInputs:
    """Per-employee variable inputs for one period."""
    hours: HoursWorked | None = None
    bonuses: Decimal = ZERO
    commissions: Decimal = ZERO

    def __post_init__(self):
        for name in ("bonuses", "commissions"):
            value = getattr(self, name)
            if value < 0:
                raise InvalidPayInputError(
                    field=name, value=str(value), reason="cannot be negative"
                )


@dataclass(frozen=True)
class YTDTotals:
    """Amounts paid earlier in the same tax year, before this period."""
    gross: Decimal = ZERO
    federal_tax: Decimal = ZERO
    social_security: Decimal = ZERO
    medicare: Decimal = ZERO


@dataclass(frozen=True)
class DeductionItem:
    """One line withheld from gross pay."""
    type: DeductionType
    description: str
    amount: Decimal


@dataclass(frozen=True)
class PayBreakdown:
    """Complete result of one employee's pay calculation."""
    employee_id: UUID
    period: PayPeriod
    pay_frequency: PayFrequency
    frequency_inferred: bool
    gross: GrossPayResult
    federal_tax: Decimal
    social_security: Decimal
    medicare: Decimal
    additional_medicare: Decimal
    deductions: tuple[DeductionItem, ...]
    total_deductions: Decimal
    net_pay: Decimal
    employer_taxes: EmployerTaxLiability
    ytd: YTDTotals
    tax_table_version: str
    tax_table_checksum: str

    def __post_init__(self):
        if self.total_deductions != sum((d.amount for d in self.deductions), ZERO):
            raise ValueError("total_deductions must equal the sum of deduction items")
        if self.net_pay != self.gross.total_gross - self.total_deductions:
            raise ValueError("net_pay must equal total_gross - total_deductions")

    @property
    def total_gross(self) -> Decimal:
        return self.gross.total_gross


@dataclass(frozen=True)
class PayrollRecord:
    """One employee's payroll for one period, as persisted."""
    id: UUID
    run_id: UUID
    employer_id: UUID
    employee_id: UUID
    period_start: date
    period_end: date
    payment_date: date
    pay_frequency: PayFrequency
    status: PayrollStatus
    gross_pay: Decimal
    bonuses: Decimal
    commissions: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    employer_social_security: Decimal
    employer_medicare: Decimal
    futa: Decimal
    suta: Decimal
    tax_table_version: str
    deductions: tuple[DeductionItem, ...] = ()
    approved_at: datetime | None = None
    approved_by_id: UUID | None = None
    paid_at: datetime | None = None
    paid_by_id: UUID | None = None
    voided_at: datetime | None = None
    voided_by_id: UUID | None = None
    void_reason: str | None = None

    @property
    def employer_tax_total(self) -> Decimal:
        return self.employer_social_security + self.employer_medicare + self.futa + self.suta


@dataclass(frozen=True)
class RunFailure:
    """An employee that could not be calculated during a run."""
    employee_id: UUID
    error_code: str
    message: str


@dataclass(frozen=True)
class PayrollRun:
    """A batch of payroll records for one employer and period."""
    id: UUID
    employer_id: UUID
    period_start: date
    period_end: date
    payment_date: date
    pay_frequency: PayFrequency | None
    status: PayrollRunStatus
    record_count: int
    failed_count: int
    failures: tuple[RunFailure, ...] = ()


@dataclass(frozen=True)
class PayrollRunResult:
    """Outcome of creating a run: partial success is reported, not hidden."""
    run_id: UUID
    created: int
    failed: int
    record_ids: tuple[UUID, ...]
    failures: tuple[RunFailure, ...] = ()


@dataclass(frozen=True)
class PayrollSummaryLine:
    record_id: UUID
    employee_id: UUID
    employee_name: str
    period_start: date
    period_end: date
    status: PayrollStatus
    gross_pay: Decimal
    total_deductions: Decimal
    net_pay: Decimal


@dataclass(frozen=True)
class PayrollSummary:
    """Employer totals over a date window."""
    employer_id: UUID
    period_start: date
    period_end: date
    employee_count: int
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal
    total_employer_taxes: Decimal
    lines: tuple[PayrollSummaryLine, ...] = ()

    @property
    def total_taxes(self) -> Decimal:
        return self.total_gross - self.total_net


@dataclass(frozen=True)
class EmployeePayrollHistory:
    """An employee's records, newest first. Totals exclude VOID records."""
    employee_id: UUID
    year: int | None
    records: tuple[PayrollRecord, ...]
    ytd_gross: Decimal
    ytd_net: Decimal
    ytd_taxes: Decimal
