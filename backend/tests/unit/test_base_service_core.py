"""Tests for BaseService transactions and operation metrics."""

import pytest
from sqlalchemy.exc import OperationalError

from tutorbook.core.exceptions import NotFoundException, ServiceException
from tutorbook.services.base import BaseService


class _Probe(BaseService):
    @BaseService.measure_operation("ok")
    def ok(self):
        return "done"

    @BaseService.measure_operation("fails")
    def fails(self):
        raise NotFoundException("missing")


class _FakeSession:
    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


class TestTransaction:
    def test_commits_on_success(self):
        db = _FakeSession()
        service = BaseService(db)

        with service.transaction():
            pass

        assert (db.commits, db.rollbacks) == (1, 0)

    def test_domain_errors_roll_back_and_propagate(self):
        db = _FakeSession()
        service = BaseService(db)

        with pytest.raises(NotFoundException):
            with service.transaction():
                raise NotFoundException("gone")

        assert (db.commits, db.rollbacks) == (0, 1)

    def test_database_errors_become_service_exceptions(self):
        db = _FakeSession()
        service = BaseService(db)

        with pytest.raises(ServiceException):
            with service.transaction():
                raise OperationalError("SELECT 1", {}, Exception("locked"))

        assert db.rollbacks == 1


class TestMeasureOperation:
    def test_records_success_and_failure_counts(self):
        BaseService._class_metrics.pop("_Probe", None)
        probe = _Probe(_FakeSession())

        assert probe.ok() == "done"
        with pytest.raises(NotFoundException):
            probe.fails()

        metrics = probe.get_metrics()
        assert metrics["ok"]["count"] == 1
        assert metrics["ok"]["success_rate"] == 1.0
        assert metrics["fails"]["failure_count"] == 1

    def test_wrapper_keeps_operation_name(self):
        assert getattr(_Probe.ok, "_operation_name") == "ok"
