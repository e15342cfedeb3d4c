"""
Tests for PayrollRunOrchestrator: batch run creation.

Covers:
- One DRAFT record per eligible employee
- Overlap rejection against DRAFT and APPROVED records
- Partial failure: failing employees are recorded, the rest proceed
- Employer / employee eligibility
- Run-level pay frequency override
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from payroll_engines.gross_pay import CompensationType
from payroll_engines.periods import PayFrequency
from payroll_kernel.exceptions import (
    EmployerNotFoundError,
    InvalidPayPeriodError,
    NoEligibleEmployeesError,
    OverlappingRunError,
)
from payroll_modules.payroll.models import EmployeeStatus, PayrollStatus
from payroll_services.payroll_run_orchestrator import PayrollRunOrchestrator


class TestRunCreation:

    def test_one_record_per_active_employee(
        self, payroll_service, employer_id, make_employee, run_payroll,
    ):
        make_employee(employer_id)
        make_employee(employer_id)

        result = run_payroll(employer_id)

        assert result.created == 2
        assert result.failed == 0
        assert len(result.record_ids) == 2
        run = payroll_service.get_run(result.run_id)
        assert run.record_count == 2
        assert run.failures == ()
        for record_id in result.record_ids:
            record = payroll_service.get_record(record_id)
            assert record.run_id == result.run_id
            assert record.status == PayrollStatus.DRAFT

    def test_inactive_employees_are_skipped(
        self, employer_id, make_employee, run_payroll,
    ):
        make_employee(employer_id)
        make_employee(employer_id, status=EmployeeStatus.INACTIVE)

        result = run_payroll(employer_id)

        assert result.created == 1
        assert result.failed == 0

    def test_employee_filter(self, payroll_service, employer_id, make_employee, run_payroll):
        chosen = make_employee(employer_id)
        make_employee(employer_id)

        result = run_payroll(employer_id, employee_ids=[chosen.id])

        assert result.created == 1
        assert payroll_service.get_record(result.record_ids[0]).employee_id == chosen.id

    def test_empty_filter_pays_everyone(self, employer_id, make_employee, run_payroll):
        make_employee(employer_id)
        make_employee(employer_id)

        result = run_payroll(employer_id, employee_ids=[])

        assert result.created == 2
        assert result.failed == 0

    def test_pay_frequency_override(
        self, payroll_service, employer_id, make_employee, run_payroll,
    ):
        make_employee(employer_id, compensation_type=CompensationType.YEARLY, pay_rate="78000")

        result = run_payroll(employer_id, pay_frequency=PayFrequency.BI_WEEKLY)

        record = payroll_service.get_record(result.record_ids[0])
        assert record.pay_frequency == PayFrequency.BI_WEEKLY
        assert record.gross_pay == Decimal("3000.00")
        assert payroll_service.get_run(result.run_id).pay_frequency == PayFrequency.BI_WEEKLY

    def test_logs_carry_run_context(self, employer_id, make_employee, run_payroll, captured_logs):
        make_employee(employer_id)

        result = run_payroll(employer_id)

        created = [r for r in captured_logs() if r["message"] == "payroll_run_created"]
        assert len(created) == 1
        assert created[0]["records_created"] == 1
        assert created[0]["records_failed"] == 0
        assert created[0]["run_id"] == str(result.run_id)
        assert created[0]["employer_id"] == str(employer_id)


class TestPartialFailure:

    def test_hourly_without_hours_fails_alone(
        self, payroll_service, employer_id, make_employee, run_payroll, captured_logs,
    ):
        make_employee(employer_id)
        hourly = make_employee(
            employer_id,
            compensation_type=CompensationType.HOURLY,
            pay_rate="25",
            pay_frequency=PayFrequency.BI_WEEKLY,
        )

        result = run_payroll(employer_id)

        assert result.created == 1
        assert result.failed == 1
        assert result.failures[0].employee_id == hourly.id
        assert result.failures[0].error_code == "MISSING_HOURS"

        run = payroll_service.get_run(result.run_id)
        assert run.record_count == 1
        assert run.failed_count == 1
        assert [f.error_code for f in run.failures] == ["MISSING_HOURS"]

        failed_logs = [
            r for r in captured_logs() if r["message"] == "payroll_run_employee_failed"
        ]
        assert failed_logs[0]["error_code"] == "MISSING_HOURS"

    def test_rerun_for_failed_employee_blocked_by_open_records(
        self, employer_id, make_employee, run_payroll, hourly_inputs,
    ):
        make_employee(employer_id)
        hourly = make_employee(
            employer_id,
            compensation_type=CompensationType.HOURLY,
            pay_rate="25",
            pay_frequency=PayFrequency.BI_WEEKLY,
        )
        run_payroll(employer_id)

        # The salaried employee's DRAFT record still blocks the period.
        with pytest.raises(OverlappingRunError):
            run_payroll(
                employer_id,
                employee_ids=[hourly.id],
                inputs={hourly.id: hourly_inputs},
            )


class TestOverlap:

    def test_overlapping_draft_rejected(
        self, employer_id, make_employee, run_payroll, captured_logs,
    ):
        make_employee(employer_id)
        first = run_payroll(employer_id)

        with pytest.raises(OverlappingRunError) as exc_info:
            run_payroll(employer_id, date(2024, 1, 10), date(2024, 1, 24))

        assert exc_info.value.existing_record_id == str(first.record_ids[0])
        assert exc_info.value.existing_start == "2024-01-01"
        assert exc_info.value.code == "OVERLAPPING_RUN"
        assert any(r["message"] == "payroll_run_overlap_rejected" for r in captured_logs())

    def test_shared_boundary_day_overlaps(self, employer_id, make_employee, run_payroll):
        make_employee(employer_id)
        run_payroll(employer_id)

        with pytest.raises(OverlappingRunError):
            run_payroll(employer_id, date(2024, 1, 14), date(2024, 1, 27))

    def test_adjacent_period_allowed(self, employer_id, make_employee, run_payroll):
        make_employee(employer_id)
        run_payroll(employer_id)

        result = run_payroll(employer_id, date(2024, 1, 15), date(2024, 1, 28))
        assert result.created == 1

    def test_approved_record_blocks(
        self, payroll_service, employer_id, make_employee, run_payroll, test_actor_id,
    ):
        make_employee(employer_id)
        first = run_payroll(employer_id)
        payroll_service.approve_payroll(first.record_ids[0], test_actor_id)

        with pytest.raises(OverlappingRunError):
            run_payroll(employer_id)

    def test_voided_period_can_be_rerun(
        self, payroll_service, employer_id, make_employee, run_payroll, test_actor_id,
    ):
        make_employee(employer_id)
        first = run_payroll(employer_id)
        payroll_service.void_payroll(first.record_ids[0], test_actor_id, "Wrong hours")

        result = run_payroll(employer_id)
        assert result.created == 1

    def test_paid_period_does_not_block(
        self, employer_id, make_employee, run_payroll, pay_record,
    ):
        make_employee(employer_id)
        first = run_payroll(employer_id)
        pay_record(first.record_ids[0])

        result = run_payroll(employer_id)
        assert result.created == 1

    def test_other_employer_unaffected(
        self, employer_id, make_employer, make_employee, run_payroll,
    ):
        make_employee(employer_id)
        run_payroll(employer_id)

        other = make_employer("Globex Payroll")
        make_employee(other)
        assert run_payroll(other).created == 1


class TestRejections:

    def test_unknown_employer(self, run_payroll):
        with pytest.raises(EmployerNotFoundError):
            run_payroll(uuid4())

    def test_employer_without_employees(self, employer_id, run_payroll):
        with pytest.raises(NoEligibleEmployeesError):
            run_payroll(employer_id)

    def test_only_inactive_employees(self, employer_id, make_employee, run_payroll):
        make_employee(employer_id, status=EmployeeStatus.INACTIVE)
        with pytest.raises(NoEligibleEmployeesError):
            run_payroll(employer_id)

    def test_filter_matching_nobody(self, employer_id, make_employee, run_payroll):
        make_employee(employer_id)
        with pytest.raises(NoEligibleEmployeesError):
            run_payroll(employer_id, employee_ids=[uuid4()])

    def test_reversed_period(self, employer_id, make_employee, run_payroll):
        make_employee(employer_id)
        with pytest.raises(InvalidPayPeriodError):
            run_payroll(employer_id, date(2024, 1, 14), date(2024, 1, 1))


class TestOrchestratorDoesNotCommit:

    def test_rollback_discards_run(self, session, clock, employer_id, make_employee, test_actor_id):
        make_employee(employer_id)
        orchestrator = PayrollRunOrchestrator(session, clock=clock)

        orchestrator.create_run(
            employer_id=employer_id,
            period_start=date(2024, 1, 1),
            period_end=date(2024, 1, 14),
            actor_id=test_actor_id,
        )
        session.rollback()

        # Nothing was committed, so the same period is free again.
        result = orchestrator.create_run(
            employer_id=employer_id,
            period_start=date(2024, 1, 1),
            period_end=date(2024, 1, 14),
            actor_id=test_actor_id,
        )
        assert result.created == 1
