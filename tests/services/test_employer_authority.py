"""Tests for the employer membership check."""

from uuid import uuid4

import pytest

from payroll_kernel.exceptions import UnauthorizedError
from payroll_modules.payroll.models import MemberRole
from payroll_services.employer_authority import is_authorized, require_authorized


class TestIsAuthorized:

    @pytest.mark.parametrize(
        "role, expected",
        [
            (MemberRole.OWNER, True),
            (MemberRole.ADMIN, True),
            (MemberRole.VIEWER, False),
        ],
    )
    def test_roles(self, session, employer_id, add_member, role, expected):
        user = uuid4()
        add_member(employer_id, user, role)
        assert is_authorized(session, user, employer_id) is expected

    def test_non_member(self, session, employer_id):
        assert is_authorized(session, uuid4(), employer_id) is False

    def test_membership_is_per_employer(self, session, make_employer, test_actor_id):
        make_employer("Acme Payroll Co")
        other = make_employer("Globex Payroll", owner=False)
        assert is_authorized(session, test_actor_id, other) is False


class TestRequireAuthorized:

    def test_passes_for_owner(self, session, employer_id, test_actor_id):
        require_authorized(session, test_actor_id, employer_id, "approve")

    def test_raises_and_logs(self, session, employer_id, captured_logs):
        outsider = uuid4()
        with pytest.raises(UnauthorizedError) as exc_info:
            require_authorized(session, outsider, employer_id, "finalize")

        assert exc_info.value.code == "UNAUTHORIZED"
        assert exc_info.value.actor_id == str(outsider)
        logs = [r for r in captured_logs() if r["message"] == "payroll_action_unauthorized"]
        assert logs[0]["action"] == "finalize"
