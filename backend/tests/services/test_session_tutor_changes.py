"""Tests for SessionService tutor reassignment, reads and replacement suggestions."""

from datetime import timedelta

import pytest
import ulid

from tutorbook.core.constants import SlotStart
from tutorbook.core.enums import RoleName, SessionStatus, UserStatus
from tutorbook.core.exceptions import (
    BusinessRuleException,
    NotFoundException,
    TutorUnavailableException,
    ValidationException,
)
from tutorbook.services.session_service import SessionService


@pytest.fixture
def service(db):
    return SessionService(db)


@pytest.fixture
def roster(builder):
    main, sub1, sub2 = builder.tutor(), builder.tutor(), builder.tutor()
    contract = builder.contract(main_tutor=main, substitute_tutor1=sub1, substitute_tutor2=sub2)
    return contract, main, sub1, sub2


class TestUpdateSessionTutor:
    def test_moves_session_to_substitute(self, service, builder, roster):
        contract, _, sub1, _ = roster
        session = builder.session(contract)
        staff = builder.staff()

        updated = service.update_session_tutor(session.id, sub1.id, staff.id)

        assert updated.tutor_id == sub1.id
        assert updated.updated_at is not None

    def test_reassigning_to_current_tutor_is_allowed(self, service, builder, roster):
        contract, main, _, _ = roster
        session = builder.session(contract)

        updated = service.update_session_tutor(session.id, main.id, "staff")

        assert updated.tutor_id == main.id

    def test_missing_session(self, service):
        with pytest.raises(NotFoundException, match="Session not found."):
            service.update_session_tutor(str(ulid.ULID()), "t", "staff")

    def test_tutor_outside_roster_is_rejected(self, service, builder, roster):
        contract, _, _, _ = roster
        session = builder.session(contract)
        outsider = builder.tutor()

        with pytest.raises(ValidationException) as exc_info:
            service.update_session_tutor(session.id, outsider.id, "staff")

        assert exc_info.value.message == (
            "The selected tutor is not assigned to this contract. "
            "Only the main tutor or substitute tutors can be assigned to sessions."
        )

    @pytest.mark.parametrize("final", [SessionStatus.COMPLETED, SessionStatus.CANCELLED])
    def test_final_sessions_keep_their_tutor(self, service, builder, roster, final):
        contract, _, sub1, _ = roster
        session = builder.session(contract, status=final)

        with pytest.raises(BusinessRuleException) as exc_info:
            service.update_session_tutor(session.id, sub1.id, "staff")

        assert exc_info.value.message.startswith(
            f"Cannot update tutor for a session with status '{final.value}'."
        )

    def test_busy_tutor_is_rejected(self, service, builder, roster):
        contract, _, sub1, _ = roster
        session = builder.session(contract)
        other_contract = builder.contract(main_tutor=sub1)
        builder.session(
            other_contract,
            session_date=session.session_date,
            start_time=session.start_time,
            end_time=session.end_time,
        )

        with pytest.raises(TutorUnavailableException) as exc_info:
            service.update_session_tutor(session.id, sub1.id, "staff")

        assert exc_info.value.message.startswith(
            "The selected tutor is not available at the scheduled session time."
        )


class TestSessionReads:
    def test_visibility_by_role(self, service, builder, roster):
        contract, main, sub1, _ = roster
        session = builder.session(contract)
        stranger = builder.parent()

        assert service.get_session(session.id, contract.parent_id, RoleName.PARENT) is not None
        assert service.get_session(session.id, main.id, RoleName.TUTOR) is not None
        assert service.get_session(session.id, "staff", RoleName.STAFF) is not None
        assert service.get_session(session.id, stranger.id, RoleName.PARENT) is None
        assert service.get_session(session.id, sub1.id, RoleName.TUTOR) is None

    def test_missing_session_reads_as_none(self, service):
        assert service.get_session(str(ulid.ULID()), "u", RoleName.ADMIN) is None

    def test_listings(self, service, builder, roster):
        contract, main, _, _ = roster
        session = builder.session(contract)

        assert [s.id for s in service.list_sessions_for_parent(contract.parent_id)] == [session.id]
        assert [s.id for s in service.list_sessions_for_tutor(main.id)] == [session.id]


class TestReplacementTutors:
    def test_free_substitutes_come_first(self, service, builder, roster):
        contract, main, sub1, sub2 = roster
        session = builder.session(contract)
        builder.tutor()  # free non-substitute, not offered while substitutes qualify

        result = service.get_replacement_tutors(session.id)

        ids = [c["tutor_id"] for c in result["replacement_tutors"]]
        assert set(ids) == {sub1.id, sub2.id}
        assert main.id not in ids
        assert result["has_substitute"] is True
        assert result["total_available"] == 2
        assert all(c["priority"] == "high" for c in result["replacement_tutors"])

    def test_falls_back_to_other_active_tutors(self, service, builder, roster):
        contract, _, sub1, sub2 = roster
        session = builder.session(contract)
        for sub in (sub1, sub2):
            builder.session(
                builder.contract(main_tutor=sub),
                session_date=session.session_date,
                slot=SlotStart.EVENING,
            )
        inactive = builder.tutor(status=UserStatus.INACTIVE)
        free = builder.tutor()

        result = service.get_replacement_tutors(session.id)

        ids = [c["tutor_id"] for c in result["replacement_tutors"]]
        assert sub1.id not in ids and sub2.id not in ids
        assert inactive.id not in ids
        assert free.id in ids
        assert result["has_substitute"] is False
        assert all(c["priority"] == "normal" for c in result["replacement_tutors"])

    def test_final_session_has_no_replacements(self, service, builder, roster):
        contract, _, _, _ = roster
        session = builder.session(
            contract, session_date=builder.today - timedelta(days=1), status=SessionStatus.COMPLETED
        )
        with pytest.raises(
            BusinessRuleException, match="Cannot replace tutor for completed or cancelled session."
        ):
            service.get_replacement_tutors(session.id)
