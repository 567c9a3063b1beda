"""
Tests for SessionService.update_session_status.

Checks run in a fixed order: session exists, caller is its tutor, status
is known, session is today, session is not final.
"""

from datetime import timedelta

import pytest
import ulid

from tutorbook.core.enums import SessionStatus
from tutorbook.core.exceptions import (
    BusinessRuleException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from tutorbook.services.session_service import SessionService


@pytest.fixture
def service(db):
    return SessionService(db)


@pytest.fixture
def todays_session(builder, today):
    return builder.session(builder.contract(), session_date=today)


class TestStatusTransitions:
    def test_tutor_marks_todays_session_processing(self, service, todays_session):
        updated = service.update_session_status(
            todays_session.id, "processing", todays_session.tutor_id
        )

        assert updated.status == SessionStatus.PROCESSING.value
        assert updated.updated_at is not None

    def test_status_value_is_case_insensitive(self, service, todays_session):
        updated = service.update_session_status(
            todays_session.id, "Completed", todays_session.tutor_id
        )
        assert updated.status == "completed"

    def test_same_status_write_still_touches_row(self, service, todays_session):
        assert todays_session.updated_at is None

        updated = service.update_session_status(
            todays_session.id, "scheduled", todays_session.tutor_id
        )

        assert updated.status == "scheduled"
        assert updated.updated_at is not None

    def test_rescheduled_session_can_still_change(self, service, builder, today):
        session = builder.session(
            builder.contract(), session_date=today, status=SessionStatus.RESCHEDULED
        )

        updated = service.update_session_status(session.id, "cancelled", session.tutor_id)

        assert updated.status == "cancelled"

    @pytest.mark.parametrize("final", [SessionStatus.COMPLETED, SessionStatus.CANCELLED])
    @pytest.mark.parametrize("target", ["scheduled", "completed", "cancelled"])
    def test_final_sessions_are_frozen(self, service, builder, today, final, target):
        session = builder.session(builder.contract(), session_date=today, status=final)

        with pytest.raises(BusinessRuleException) as exc_info:
            service.update_session_status(session.id, target, session.tutor_id)

        assert exc_info.value.message == (
            f"Cannot change status from '{final.value}'. "
            "Sessions that are completed or cancelled cannot be modified."
        )


class TestStatusCheckOrder:
    def test_missing_session(self, service):
        with pytest.raises(NotFoundException, match="Session not found."):
            service.update_session_status(str(ulid.ULID()), "completed", "anyone")

    def test_other_tutor_is_forbidden_before_status_validation(
        self, service, todays_session, builder
    ):
        stranger = builder.tutor()
        with pytest.raises(ForbiddenException) as exc_info:
            service.update_session_status(todays_session.id, "bogus", stranger.id)
        assert exc_info.value.message == "You are not the tutor assigned to this session."

    def test_unknown_status_lists_allowed_values(self, service, todays_session):
        with pytest.raises(ValidationException) as exc_info:
            service.update_session_status(todays_session.id, "done", todays_session.tutor_id)
        assert exc_info.value.message == (
            "Invalid status 'done'. Allowed values are: "
            "cancelled, completed, processing, rescheduled, scheduled"
        )

    @pytest.mark.parametrize("offset", [-1, 1])
    def test_only_todays_sessions(self, service, builder, today, offset):
        session_date = today + timedelta(days=offset)
        session = builder.session(builder.contract(), session_date=session_date)

        with pytest.raises(BusinessRuleException) as exc_info:
            service.update_session_status(session.id, "completed", session.tutor_id)

        assert exc_info.value.message == (
            f"You can only update sessions scheduled for today ({today:%d/%m/%Y}). "
            f"This session is on {session_date:%d/%m/%Y}."
        )

    def test_date_check_precedes_final_check(self, service, builder, today):
        session = builder.session(
            builder.contract(),
            session_date=today - timedelta(days=1),
            status=SessionStatus.COMPLETED,
        )
        with pytest.raises(BusinessRuleException, match="only update sessions scheduled for today"):
            service.update_session_status(session.id, "scheduled", session.tutor_id)

    def test_failed_update_leaves_session_untouched(self, service, db, builder, today):
        session = builder.session(
            builder.contract(), session_date=today, status=SessionStatus.COMPLETED
        )
        with pytest.raises(BusinessRuleException):
            service.update_session_status(session.id, "scheduled", session.tutor_id)

        db.refresh(session)
        assert session.status == "completed"
        assert session.updated_at is None
