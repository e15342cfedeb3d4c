"""
Payroll ORM Persistence Models (``payroll_modules.payroll.orm``).

Responsibility:
    SQLAlchemy ORM models that persist the frozen dataclass DTOs defined in
    ``payroll_modules.payroll.models``.  Each ORM class provides ``to_dto()``
    and, where rows are created from DTOs, ``from_dto()``.

Architecture position:
    **Modules layer** -- persistence companions to the pure DTO models.
    Inherits from ``TrackedBase`` (kernel DB base) which provides:
    id (UUID PK), created_at, updated_at, created_by_id (NOT NULL),
    updated_by_id.

Invariants enforced:
    - All monetary fields use Decimal (maps to Numeric(38,9)) -- NEVER float.
    - Enum fields stored as String(50) containing the enum .value string.
    - One employee number per employer (uq_payroll_employee_number).
    - One membership row per (employer, user).
    - Records carry employer_id so the overlap check is a single indexed
      query on (employer_id, status, period_start, period_end).

Audit relevance:
    Records, deduction items and transition rows are protected by the ORM
    immutability listeners in ``payroll_kernel.db.immutability``.  Every
    record stores the tax table version and checksum used.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_engines.employer_tax import EmployerTaxLiability
from payroll_engines.gross_pay import CompensationType
from payroll_engines.money import to_cents
from payroll_engines.periods import PayFrequency
from payroll_kernel.db.base import TrackedBase


def _money(value: Decimal | None) -> Decimal:
    # Numeric columns come back with nine places (float-derived on SQLite).
    return to_cents(Decimal(value if value is not None else 0))


# ---------------------------------------------------------------------------
# EmployerModel / EmployerMemberModel
# ---------------------------------------------------------------------------

class EmployerModel(TrackedBase):
    """
    ORM model for an employer -- the company running payroll.

    Contract:
        The employer row is the lock target that serializes run creation:
        ``SELECT ... FOR UPDATE`` on it before the overlap check.
    """

    __tablename__ = "payroll_employers"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    ein: Mapped[str | None] = mapped_column(String(20), nullable=True)
    state: Mapped[str | None] = mapped_column(String(2), nullable=True)

    members: Mapped[list["EmployerMemberModel"]] = relationship(
        "EmployerMemberModel", back_populates="employer", lazy="select",
    )

    def __repr__(self) -> str:
        return f"<EmployerModel {self.name}>"


class EmployerMemberModel(TrackedBase):
    """
    ORM model for a user's membership in an employer.

    Guarantees:
        - ``role`` stores a ``MemberRole`` .value string.
        - At most one membership per (employer, user).
    """

    __tablename__ = "payroll_employer_members"

    employer_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_employers.id"), nullable=False,
    )
    user_id: Mapped[UUID] = mapped_column(nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False)

    employer: Mapped[EmployerModel] = relationship(
        "EmployerModel", back_populates="members", lazy="select",
    )

    __table_args__ = (
        UniqueConstraint("employer_id", "user_id", name="uq_payroll_employer_member"),
        Index("idx_payroll_member_user", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<EmployerMemberModel user={self.user_id} role={self.role}>"


# ---------------------------------------------------------------------------
# EmployeeModel
# ---------------------------------------------------------------------------

class EmployeeModel(TrackedBase):
    """
    ORM model for ``Employee``.

    Contract:
        Compensation type and pay rate drive gross pay; the W-4 columns
        drive withholding.  ``pay_frequency`` is optional: when absent the
        calculator falls back to inferring it from the period length.

    Guarantees:
        - ``employee_number`` is unique within an employer.
        - ``pay_rate`` is always Decimal (Numeric(38,9)).
    """

    __tablename__ = "payroll_employees"

    employer_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_employers.id"), nullable=False,
    )
    employee_number: Mapped[str] = mapped_column(String(50), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    compensation_type: Mapped[str] = mapped_column(String(50), nullable=False)
    pay_rate: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="active")
    pay_frequency: Mapped[str | None] = mapped_column(String(50), nullable=True)
    filing_status: Mapped[str] = mapped_column(String(50), nullable=False, default="single")
    allowances: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    additional_withholding: Mapped[Decimal] = mapped_column(
        default=Decimal("0"), nullable=False,
    )
    exempt_federal: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    exempt_fica: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        UniqueConstraint("employer_id", "employee_number", name="uq_payroll_employee_number"),
        Index("idx_payroll_employee_employer_status", "employer_id", "status"),
    )

    def to_dto(self):
        from payroll_modules.payroll.models import (
            Employee,
            EmployeeStatus,
            FilingStatus,
            WithholdingProfile,
        )
        return Employee(
            id=self.id,
            employer_id=self.employer_id,
            employee_number=self.employee_number,
            first_name=self.first_name,
            last_name=self.last_name,
            compensation_type=CompensationType(self.compensation_type),
            pay_rate=Decimal(self.pay_rate),
            status=EmployeeStatus(self.status),
            pay_frequency=PayFrequency(self.pay_frequency) if self.pay_frequency else None,
            withholding=WithholdingProfile(
                filing_status=FilingStatus(self.filing_status),
                allowances=self.allowances,
                additional_withholding=_money(self.additional_withholding),
                exempt_federal=self.exempt_federal,
                exempt_fica=self.exempt_fica,
            ),
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "EmployeeModel":
        return cls(
            id=dto.id,
            employer_id=dto.employer_id,
            employee_number=dto.employee_number,
            first_name=dto.first_name,
            last_name=dto.last_name,
            compensation_type=dto.compensation_type.value,
            pay_rate=dto.pay_rate,
            status=dto.status.value,
            pay_frequency=dto.pay_frequency.value if dto.pay_frequency else None,
            filing_status=dto.withholding.filing_status.value,
            allowances=dto.withholding.allowances,
            additional_withholding=dto.withholding.additional_withholding,
            exempt_federal=dto.withholding.exempt_federal,
            exempt_fica=dto.withholding.exempt_fica,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return (
            f"<EmployeeModel {self.employee_number} {self.last_name}, "
            f"{self.first_name} ({self.compensation_type})>"
        )


# ---------------------------------------------------------------------------
# PayrollRunModel / PayrollRunFailureModel
# ---------------------------------------------------------------------------

class PayrollRunModel(TrackedBase):
    """
    ORM model for ``PayrollRun`` -- one batch creation for an employer.

    Contract:
        ``status`` is a summary derived from the run's records and refreshed
        by the state machine after each transition.  It is never the source
        of truth for a record's lifecycle.
    """

    __tablename__ = "payroll_runs"

    employer_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_employers.id"), nullable=False,
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    pay_frequency: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="draft")
    record_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    failed_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    records: Mapped[list["PayrollRecordModel"]] = relationship(
        "PayrollRecordModel", back_populates="run", lazy="select",
    )
    failures: Mapped[list["PayrollRunFailureModel"]] = relationship(
        "PayrollRunFailureModel", back_populates="run", lazy="selectin",
        cascade="all",
    )

    __table_args__ = (
        Index("idx_payroll_run_employer_period", "employer_id", "period_start"),
    )

    def to_dto(self):
        from payroll_modules.payroll.models import PayrollRun, PayrollRunStatus
        return PayrollRun(
            id=self.id,
            employer_id=self.employer_id,
            period_start=self.period_start,
            period_end=self.period_end,
            payment_date=self.payment_date,
            pay_frequency=PayFrequency(self.pay_frequency) if self.pay_frequency else None,
            status=PayrollRunStatus(self.status),
            record_count=self.record_count,
            failed_count=self.failed_count,
            failures=tuple(f.to_dto() for f in self.failures),
        )

    def __repr__(self) -> str:
        return (
            f"<PayrollRunModel employer={self.employer_id} "
            f"{self.period_start}..{self.period_end} status={self.status} "
            f"records={self.record_count} failed={self.failed_count}>"
        )


class PayrollRunFailureModel(TrackedBase):
    """An employee skipped by a run, with the error that skipped them."""

    __tablename__ = "payroll_run_failures"

    run_id: Mapped[UUID] = mapped_column(ForeignKey("payroll_runs.id"), nullable=False)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_employees.id"), nullable=False,
    )
    error_code: Mapped[str] = mapped_column(String(100), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    run: Mapped[PayrollRunModel] = relationship(
        "PayrollRunModel", back_populates="failures", lazy="select",
    )

    __table_args__ = (
        Index("idx_payroll_run_failure_run", "run_id"),
    )

    def to_dto(self):
        from payroll_modules.payroll.models import RunFailure
        return RunFailure(
            employee_id=self.employee_id,
            error_code=self.error_code,
            message=self.message,
        )


# ---------------------------------------------------------------------------
# PayrollRecordModel
# ---------------------------------------------------------------------------

class PayrollRecordModel(TrackedBase):
    """
    ORM model for ``PayrollRecord`` -- one employee, one period.

    Contract:
        Amount columns are fixed at calculation time.  Only the lifecycle
        columns move, and only until PAID or VOID.

    Guarantees:
        - ``status`` stores a ``PayrollStatus`` .value string.
        - ``net_pay == gross_pay - total_deductions``.
    """

    __tablename__ = "payroll_records"

    run_id: Mapped[UUID] = mapped_column(ForeignKey("payroll_runs.id"), nullable=False)
    employer_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_employers.id"), nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_employees.id"), nullable=False,
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    tax_year: Mapped[int] = mapped_column(Integer, nullable=False)
    pay_frequency: Mapped[str] = mapped_column(String(50), nullable=False)
    frequency_inferred: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="draft")

    regular_pay: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    overtime_pay: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    double_time_pay: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    bonuses: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    commissions: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    gross_pay: Mapped[Decimal] = mapped_column(nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(nullable=False)

    employer_social_security: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    employer_medicare: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    futa: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    suta: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    tax_table_version: Mapped[str] = mapped_column(String(100), nullable=False)
    tax_table_checksum: Mapped[str] = mapped_column(String(64), nullable=False)

    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    approved_by_id: Mapped[UUID | None] = mapped_column(nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(nullable=True)
    paid_by_id: Mapped[UUID | None] = mapped_column(nullable=True)
    voided_at: Mapped[datetime | None] = mapped_column(nullable=True)
    voided_by_id: Mapped[UUID | None] = mapped_column(nullable=True)
    void_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    run: Mapped[PayrollRunModel] = relationship(
        "PayrollRunModel", back_populates="records", lazy="select",
    )
    employee: Mapped[EmployeeModel] = relationship("EmployeeModel", lazy="select")
    deduction_items: Mapped[list["DeductionItemModel"]] = relationship(
        "DeductionItemModel", back_populates="record", lazy="selectin",
        cascade="save-update, merge", order_by="DeductionItemModel.sequence",
    )

    __table_args__ = (
        Index(
            "idx_payroll_record_employer_open",
            "employer_id", "status", "period_start", "period_end",
        ),
        Index("idx_payroll_record_employee_year", "employee_id", "tax_year", "status"),
        Index("idx_payroll_record_run", "run_id"),
    )

    def to_dto(self):
        from payroll_modules.payroll.models import PayrollRecord, PayrollStatus
        return PayrollRecord(
            id=self.id,
            run_id=self.run_id,
            employer_id=self.employer_id,
            employee_id=self.employee_id,
            period_start=self.period_start,
            period_end=self.period_end,
            payment_date=self.payment_date,
            pay_frequency=PayFrequency(self.pay_frequency),
            status=PayrollStatus(self.status),
            gross_pay=_money(self.gross_pay),
            bonuses=_money(self.bonuses),
            commissions=_money(self.commissions),
            total_deductions=_money(self.total_deductions),
            net_pay=_money(self.net_pay),
            employer_social_security=_money(self.employer_social_security),
            employer_medicare=_money(self.employer_medicare),
            futa=_money(self.futa),
            suta=_money(self.suta),
            tax_table_version=self.tax_table_version,
            deductions=tuple(d.to_dto() for d in self.deduction_items),
            approved_at=self.approved_at,
            approved_by_id=self.approved_by_id,
            paid_at=self.paid_at,
            paid_by_id=self.paid_by_id,
            voided_at=self.voided_at,
            voided_by_id=self.voided_by_id,
            void_reason=self.void_reason,
        )

    @classmethod
    def from_breakdown(
        cls,
        breakdown,
        run_id: UUID,
        employer_id: UUID,
        created_by_id: UUID,
    ) -> "PayrollRecordModel":
        """Build a DRAFT record (with deduction items) from a calculation."""
        employer_taxes: EmployerTaxLiability = breakdown.employer_taxes
        period = breakdown.period
        record = cls(
            run_id=run_id,
            employer_id=employer_id,
            employee_id=breakdown.employee_id,
            period_start=period.start,
            period_end=period.end,
            payment_date=period.effective_payment_date,
            tax_year=period.tax_year,
            pay_frequency=breakdown.pay_frequency.value,
            frequency_inferred=breakdown.frequency_inferred,
            status="draft",
            regular_pay=breakdown.gross.regular_pay,
            overtime_pay=breakdown.gross.overtime_pay,
            double_time_pay=breakdown.gross.double_time_pay,
            bonuses=breakdown.gross.bonuses,
            commissions=breakdown.gross.commissions,
            gross_pay=breakdown.total_gross,
            total_deductions=breakdown.total_deductions,
            net_pay=breakdown.net_pay,
            employer_social_security=employer_taxes.social_security,
            employer_medicare=employer_taxes.medicare,
            futa=employer_taxes.futa,
            suta=employer_taxes.suta,
            tax_table_version=breakdown.tax_table_version,
            tax_table_checksum=breakdown.tax_table_checksum,
            created_by_id=created_by_id,
        )
        record.deduction_items = [
            DeductionItemModel(
                sequence=i,
                deduction_type=d.type.value,
                description=d.description,
                amount=d.amount,
                created_by_id=created_by_id,
            )
            for i, d in enumerate(breakdown.deductions)
        ]
        return record

    def __repr__(self) -> str:
        return (
            f"<PayrollRecordModel employee={self.employee_id} "
            f"{self.period_start}..{self.period_end} status={self.status} "
            f"net={self.net_pay}>"
        )


# ---------------------------------------------------------------------------
# DeductionItemModel
# ---------------------------------------------------------------------------

class DeductionItemModel(TrackedBase):
    """
    ORM model for ``DeductionItem``.

    Contract:
        Written once, with its record, and never updated or deleted.
    """

    __tablename__ = "payroll_deduction_items"

    record_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_records.id"), nullable=False,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deduction_type: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)

    record: Mapped[PayrollRecordModel] = relationship(
        "PayrollRecordModel", back_populates="deduction_items", lazy="select",
    )

    __table_args__ = (
        Index("idx_payroll_deduction_record", "record_id"),
    )

    def to_dto(self):
        from payroll_modules.payroll.models import DeductionItem, DeductionType
        return DeductionItem(
            type=DeductionType(self.deduction_type),
            description=self.description,
            amount=_money(self.amount),
        )

    def __repr__(self) -> str:
        return f"<DeductionItemModel {self.deduction_type} {self.amount}>"


# ---------------------------------------------------------------------------
# PayrollRecordTransitionModel
# ---------------------------------------------------------------------------

class PayrollRecordTransitionModel(TrackedBase):
    """
    Append-only audit row for each lifecycle transition of a record.
    """

    __tablename__ = "payroll_record_transitions"

    record_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_records.id"), nullable=False,
    )
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    from_status: Mapped[str] = mapped_column(String(50), nullable=False)
    to_status: Mapped[str] = mapped_column(String(50), nullable=False)
    actor_id: Mapped[UUID] = mapped_column(nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_payroll_transition_record", "record_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<PayrollRecordTransitionModel {self.action} "
            f"{self.from_status}->{self.to_status} by {self.actor_id}>"
        )
