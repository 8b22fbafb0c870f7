"""Transaction and timing helpers shared by services."""

import pytest
from sqlalchemy.exc import OperationalError

from studiobook.core.exceptions import NotFoundException, ServiceException
from studiobook.models.lead import Lead
from studiobook.services.base import BaseService


class ProbeService(BaseService):
    @BaseService.measure_operation("probe")
    def probe(self, fail: bool = False) -> str:
        if fail:
            raise NotFoundException("missing")
        return "ok"


def test_measured_operations_are_counted(db):
    service = ProbeService(db)

    service.probe()
    with pytest.raises(NotFoundException):
        service.probe(fail=True)

    metrics = service.get_metrics()["probe"]
    assert metrics["count"] >= 2
    assert metrics["failure_count"] >= 1


def test_transaction_commits(db):
    service = ProbeService(db)

    with service.transaction():
        db.add(Lead(full_name="Committed Lead"))

    db.rollback()
    assert db.query(Lead).filter_by(full_name="Committed Lead").count() == 1


def test_transaction_rolls_back_domain_errors(db):
    service = ProbeService(db)

    with pytest.raises(NotFoundException):
        with service.transaction():
            db.add(Lead(full_name="Discarded Lead"))
            db.flush()
            raise NotFoundException("nope")

    assert db.query(Lead).filter_by(full_name="Discarded Lead").count() == 0


def test_transaction_wraps_database_errors(db):
    service = ProbeService(db)

    with pytest.raises(ServiceException):
        with service.transaction():
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))
