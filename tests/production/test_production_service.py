from __future__ import annotations

import random

import pytest

from production_tracker.core.enums import Unit
from production_tracker.core.exceptions import AuthorizationError, ValidationError
from production_tracker.offdays.service import OffDayService
from production_tracker.production.service import ProductionService
from production_tracker.storage.backend import InMemoryBackend
from production_tracker.storage.service import StorageService


class FakeBridge:
    def __init__(self):
        self.saved = []

    def is_enabled(self):
        return True

    def fetch(self, action):
        return None

    def save(self, action, payload):
        self.saved.append((action, payload))
        return True


@pytest.fixture
def storage():
    service = StorageService(InMemoryBackend()).open()
    yield service
    service.close()


@pytest.fixture
def service(storage):
    return ProductionService(storage, OffDayService(storage))


def _user(storage, username):
    return next(u for u in storage.get_users() if u.username == username)


def _plan(service, actor, **overrides):
    fields = {
        "date": "2026-02-10",
        "category": "Healthcare",
        "process": "Mixing",
        "product_name": "pain relief gel",
        "plan_quantity": "500",
        "unit": "pcs",
        "remark": "rush order",
    }
    fields.update(overrides)
    return service.create_plan(actor, **fields)


def test_create_plan_normalizes_input_and_logs(storage, service):
    planner = _user(storage, "planner")

    entry = _plan(service, planner)

    assert entry.product_name == "PAIN RELIEF GEL"
    assert entry.remark == "RUSH ORDER"
    assert entry.plan_quantity == 500
    assert entry.actual_quantity == 0
    assert entry.unit == Unit.PCS
    assert entry.last_updated_by == "u3"
    assert storage.get_production_data() == [entry]

    log = storage.get_logs()[0]
    assert log.action == "CREATE_PLAN"
    assert log.details == "Planned 500 PCS for PAIN RELIEF GEL (2026-02-10)"


def test_create_plan_rejections(storage, service):
    planner = _user(storage, "planner")

    with pytest.raises(AuthorizationError):
        _plan(service, _user(storage, "operator"))
    with pytest.raises(ValidationError, match="Christmas Day"):
        _plan(service, planner, date="2025-12-25")
    with pytest.raises(ValidationError):
        _plan(service, planner, date="10/02/2026")
    with pytest.raises(ValidationError):
        _plan(service, planner, category="Bakery")
    with pytest.raises(ValidationError):
        _plan(service, planner, plan_quantity="-5")
    with pytest.raises(ValidationError):
        _plan(service, planner, product_name="  ")

    assert storage.get_production_data() == []


def test_record_actual_updates_plan(storage, service):
    entry = _plan(service, _user(storage, "planner"))
    operator = _user(storage, "operator")

    updated = service.record_actual(operator, entry.entry_id, actual_quantity="480", batch_no="b-1", manpower="5")

    assert updated.actual_quantity == 480
    assert updated.batch_no == "B-1"
    assert updated.manpower == 5
    assert updated.last_updated_by == "u4"
    assert storage.get_production_data() == [updated]
    assert storage.get_logs()[0].action == "RECORD_ACTUAL"


def test_record_actual_limits_operators_to_their_department(storage, service):
    entry = _plan(service, _user(storage, "planner"), category="Healthcare")

    with pytest.raises(AuthorizationError):
        service.record_actual(_user(storage, "operator2"), entry.entry_id, actual_quantity=1)

    # managers are not bound to a department
    service.record_actual(_user(storage, "manager"), entry.entry_id, actual_quantity=1)


def test_record_actual_rejects_missing_plan_and_off_days(storage, service):
    admin = _user(storage, "admin")
    with pytest.raises(ValidationError):
        service.record_actual(admin, "missing", actual_quantity=1)

    entry = _plan(service, admin, date="2026-03-02")
    OffDayService(storage).add_off_day(admin, date="2026-03-02", description="Shutdown")
    with pytest.raises(ValidationError):
        service.record_actual(admin, entry.entry_id, actual_quantity=1)


def test_plans_for_date_filters_operator_department(storage, service):
    planner = _user(storage, "planner")
    _plan(service, planner, category="Healthcare")
    _plan(service, planner, category="Toothpaste")
    _plan(service, planner, category="Toothpaste", date="2026-02-11")

    assert {e.category for e in service.plans_for_date(_user(storage, "operator2"), "2026-02-10")} == {"Toothpaste"}
    assert len(service.plans_for_date(_user(storage, "admin"), "2026-02-10")) == 2


def test_edit_entry(storage, service):
    entry = _plan(service, _user(storage, "planner"))
    manager = _user(storage, "manager")

    with pytest.raises(AuthorizationError):
        service.edit_entry(_user(storage, "planner"), entry.entry_id, plan_quantity=1)
    with pytest.raises(ValidationError):
        service.edit_entry(manager, entry.entry_id, colour="red")

    updated = service.edit_entry(manager, entry.entry_id, plan_quantity="650", product_name="gel", unit="carton", remark=None)

    assert updated.plan_quantity == 650
    assert updated.product_name == "GEL"
    assert updated.unit == Unit.CARTON
    assert updated.remark == "RUSH ORDER"
    assert storage.get_logs()[0].details == "Modified record: GEL (2026-02-10)"


def test_delete_entry(storage, service):
    keep = _plan(service, _user(storage, "planner"))
    drop = _plan(service, _user(storage, "planner"), product_name="vitamin c")

    with pytest.raises(AuthorizationError):
        service.delete_entry(_user(storage, "operator"), drop.entry_id)

    result = service.delete_entry(_user(storage, "admin"), drop.entry_id)
    assert result.deleted == drop
    assert storage.get_production_data() == [keep]
    assert storage.get_logs()[0].action == "DELETE_RECORD"

    logs_before = len(storage.get_logs())
    assert service.delete_entry(_user(storage, "admin"), drop.entry_id).deleted is None
    assert len(storage.get_logs()) == logs_before


def test_delete_entry_waits_for_remote_mirror():
    bridge = FakeBridge()
    with StorageService(InMemoryBackend(), bridge) as storage:
        service = ProductionService(storage, OffDayService(storage))
        admin = _user(storage, "admin")
        entry = _plan(service, admin)

        result = service.delete_entry(admin, entry.entry_id)

        assert result.remote_ok is True
        assert ("saveProduction", []) in bridge.saved


def test_generate_batch_no(service):
    batch = service.generate_batch_no("2026-02-10", rng=random.Random(7))
    assert batch.startswith("B-20260210-")
    assert batch.split("-")[-1].isdigit()


def test_list_entries_filters_and_sorts(storage, service):
    planner = _user(storage, "planner")
    _plan(service, planner, date="2026-02-01", process="Filling")
    _plan(service, planner, date="2026-02-20")
    _plan(service, planner, date="2026-03-05")

    dates = [e.date for e in service.list_entries(start="2026-02-01", end="2026-02-28")]
    assert dates == ["2026-02-20", "2026-02-01"]
    assert [e.process for e in service.list_entries(process="Filling")] == ["Filling"]
