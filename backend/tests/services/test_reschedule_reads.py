"""Tests for reschedule request reads, substitute discovery and the quota ledger."""

import pytest
import ulid

from tutorbook.core.enums import RescheduleRequestStatus, RoleName, UserStatus
from tutorbook.core.exceptions import ForbiddenException, NotFoundException
from tutorbook.services.contract_quota_service import ContractQuotaService
from tutorbook.services.reschedule_service import RescheduleService


@pytest.fixture
def service(db):
    return RescheduleService(db)


class TestGetRequest:
    @pytest.fixture
    def request_row(self, builder):
        contract = builder.contract(substitute_tutor1=builder.tutor())
        session = builder.session(contract)
        return builder.reschedule_request(
            session, requested_tutor_id=contract.substitute_tutor1_id
        )

    def test_owner_parent_reads_request(self, service, request_row):
        loaded = service.get_request(request_row.id, request_row.parent_id, RoleName.PARENT)
        assert loaded.id == request_row.id
        assert loaded.booking is not None

    def test_other_parent_is_forbidden(self, service, builder, request_row):
        with pytest.raises(ForbiddenException) as exc_info:
            service.get_request(request_row.id, builder.parent().id, RoleName.PARENT)
        assert exc_info.value.message == "You can only view your own reschedule requests."

    def test_session_tutor_and_requested_tutor_may_read(self, service, request_row):
        original_tutor = request_row.booking.tutor_id
        for tutor_id in (original_tutor, request_row.requested_tutor_id):
            assert service.get_request(request_row.id, tutor_id, RoleName.TUTOR)

    def test_unrelated_tutor_is_forbidden(self, service, builder, request_row):
        with pytest.raises(ForbiddenException):
            service.get_request(request_row.id, builder.tutor().id, RoleName.TUTOR)

    @pytest.mark.parametrize("role", [RoleName.STAFF, RoleName.ADMIN])
    def test_staff_reads_any_request(self, service, request_row, role):
        assert service.get_request(request_row.id, "someone", role).id == request_row.id

    def test_missing_request(self, service):
        with pytest.raises(NotFoundException, match="Reschedule request not found."):
            service.get_request(str(ulid.ULID()), "u", RoleName.ADMIN)


class TestListRequests:
    def test_parent_filter_and_status_filter(self, service, builder):
        contract = builder.contract()
        rejected = builder.reschedule_request(
            builder.session(contract), status=RescheduleRequestStatus.REJECTED
        )
        pending = builder.reschedule_request(builder.session(contract))
        builder.reschedule_request(builder.session(builder.contract()))

        mine = service.list_requests(parent_id=contract.parent_id)
        assert [r.id for r in mine] == [pending.id, rejected.id]

        assert len(service.list_requests()) == 3
        only_rejected = service.list_requests(status=RescheduleRequestStatus.REJECTED)
        assert [r.id for r in only_rejected] == [rejected.id]

    def test_tutor_listing(self, service, builder):
        contract = builder.contract()
        request = builder.reschedule_request(builder.session(contract))

        assert [r.id for r in service.list_requests_for_tutor(contract.main_tutor_id)] == [
            request.id
        ]
        assert service.list_requests_for_tutor(builder.tutor().id) == []


class TestAvailableSubTutors:
    def test_lists_free_unbanned_substitutes(self, service, builder):
        free_sub = builder.tutor()
        banned_sub = builder.tutor(status=UserStatus.BANNED)
        contract = builder.contract(substitute_tutor1=free_sub, substitute_tutor2=banned_sub)
        request = builder.reschedule_request(builder.session(contract))

        result = service.get_available_sub_tutors(request.id)

        assert [t["tutor_id"] for t in result["available_tutors"]] == [free_sub.id]
        assert result["total_available"] == 1
        assert result["requested_date"] == request.requested_date

    def test_busy_substitute_is_left_out(self, service, builder):
        busy_sub = builder.tutor()
        contract = builder.contract(substitute_tutor1=busy_sub)
        request = builder.reschedule_request(builder.session(contract))
        builder.session(
            builder.contract(main_tutor=busy_sub),
            session_date=request.requested_date,
            start_time=request.start_time,
            end_time=request.end_time,
        )

        result = service.get_available_sub_tutors(request.id)

        assert result["available_tutors"] == []
        assert result["total_available"] == 0

    def test_substitute_teaching_the_original_session_counts_as_free(self, service, builder):
        sub = builder.tutor()
        contract = builder.contract(substitute_tutor1=sub)
        session = builder.session(contract, tutor=sub)
        request = builder.reschedule_request(
            session,
            requested_date=session.session_date,
            start_time=session.start_time,
            end_time=session.end_time,
        )

        result = service.get_available_sub_tutors(request.id)

        assert [t["tutor_id"] for t in result["available_tutors"]] == [sub.id]

    def test_missing_request(self, service):
        with pytest.raises(NotFoundException):
            service.get_available_sub_tutors(str(ulid.ULID()))


class TestLedger:
    def test_unknown_contract(self, db):
        with pytest.raises(NotFoundException, match="Contract not found."):
            ContractQuotaService(db).get_ledger(str(ulid.ULID()))

    def test_empty_ledger_for_fresh_contract(self, db, builder):
        assert ContractQuotaService(db).get_ledger(builder.contract().id) == []
