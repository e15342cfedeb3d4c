"""
Tests for engine setup, transactional scope and immutability listener
registration.
"""

import pytest
from sqlalchemy import event, func, select

from payroll_kernel.db.engine import is_postgres, session_scope
from payroll_kernel.db.immutability import (
    _check_payroll_record_immutability,
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from payroll_kernel.exceptions import ImmutabilityViolationError
from payroll_modules.payroll.orm import EmployerModel, PayrollRecordModel


def _employer_count(session) -> int:
    return session.scalar(select(func.count()).select_from(EmployerModel))


class TestSessionScope:

    def test_commits_on_success(self, db_engine, test_actor_id):
        with session_scope() as session:
            session.add(EmployerModel(name="Initech", created_by_id=test_actor_id))

        with session_scope() as session:
            assert _employer_count(session) == 1

    def test_rolls_back_on_error(self, db_engine, test_actor_id, captured_logs):
        with pytest.raises(RuntimeError):
            with session_scope() as session:
                session.add(EmployerModel(name="Initech", created_by_id=test_actor_id))
                session.flush()
                raise RuntimeError("boom")

        with session_scope() as session:
            assert _employer_count(session) == 0
        assert any(r["message"] == "transaction_rolled_back" for r in captured_logs())


class TestEngine:

    def test_dialect_detection(self, db_engine):
        assert is_postgres() is (db_engine.dialect.name == "postgresql")

    def test_amounts_stored_as_numeric(self, db_engine):
        column = PayrollRecordModel.__table__.c.net_pay
        assert column.type.precision == 38
        assert column.type.scale == 9


class TestListenerRegistration:

    def test_registration_is_idempotent(
        self, session, employer_id, make_employee, run_payroll,
    ):
        register_immutability_listeners()
        register_immutability_listeners()

        make_employee(employer_id)
        record_id = run_payroll(employer_id).record_ids[0]
        record = session.get(PayrollRecordModel, record_id)
        record.gross_pay = record.gross_pay + 1
        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        session.rollback()

    def test_unregister_then_register(self, db_engine):
        unregister_immutability_listeners()
        try:
            assert not event.contains(
                PayrollRecordModel, "before_update", _check_payroll_record_immutability,
            )
        finally:
            register_immutability_listeners()
        assert event.contains(
            PayrollRecordModel, "before_update", _check_payroll_record_immutability,
        )
