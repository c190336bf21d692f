from datetime import date, datetime, timedelta

import pytest

from autoorganize.errors import ConstraintViolationError, ValidationError
from autoorganize.models.task import TaskCategory, TaskStatus


class FakeClock:
    """Stands in for datetime in the store so created_date is predictable."""
    current = datetime(2025, 6, 1, 8, 0, 0)

    @classmethod
    def now(cls):
        cls.current += timedelta(minutes=1)
        return cls.current


def test_task_status_update_keeps_created_date(store, john, camry):
    task_id = store.add_task(
        {"customer_id": john, "vehicle_id": camry, "title": "Oil Change", "status": "To Do"}
    )
    created = store.get_task(task_id).created_date

    rows = store.update_task(
        task_id,
        {"customer_id": john, "vehicle_id": camry, "title": "Oil Change", "status": "Completed",
         "created_date": "1999-01-01T00:00:00"},
    )

    task = store.get_task(task_id)
    assert rows == 1
    assert task.status == TaskStatus.COMPLETED
    assert task.created_date == created


def test_created_date_is_stamped_by_the_store(store, john, monkeypatch):
    monkeypatch.setattr("autoorganize.store.datetime", FakeClock)
    task_id = store.add_task({"customer_id": john, "title": "Brake check", "created_date": "1999-01-01T00:00:00"})

    assert store.get_task(task_id).created_date == FakeClock.current


def test_get_task_has_customer_and_vehicle_context(store, john, camry):
    task_id = store.add_task(
        {"customer_id": john, "vehicle_id": camry, "title": "Diagnose noise", "category": "Diagnostics",
         "due_date": "2025-07-01"}
    )

    task = store.get_task(task_id)
    assert task.customer_name == "John Doe"
    assert (task.vehicle_make, task.vehicle_model, task.vehicle_year) == ("Toyota", "Camry", 2020)
    assert task.vehicle_vin == "ABC123"
    assert task.category == TaskCategory.DIAGNOSTICS
    assert task.status == TaskStatus.TO_DO
    assert task.due_date == date(2025, 7, 1)


def test_task_without_vehicle_still_lists_with_customer(store, john):
    task_id = store.add_task({"customer_id": john, "title": "Call back about quote"})

    [task] = store.list_tasks()
    assert task.id == task_id
    assert task.customer_name == "John Doe"
    assert task.vehicle_id is None
    assert task.vehicle_make is None


def test_list_tasks_most_recent_first_and_filters(store, john, jane, camry, monkeypatch):
    monkeypatch.setattr("autoorganize.store.datetime", FakeClock)
    first = store.add_task({"customer_id": john, "vehicle_id": camry, "title": "Tire rotation",
                            "category": "Maintenance", "status": "Completed"})
    second = store.add_task({"customer_id": jane, "title": "Engine light", "category": "Diagnostics"})
    third = store.add_task({"customer_id": john, "vehicle_id": camry, "title": "Replace pads",
                            "category": "Repairs", "status": "Awaiting Parts"})

    assert [t.id for t in store.list_tasks()] == [third, second, first]
    assert [t.id for t in store.list_tasks({"customer_id": john})] == [third, first]
    assert [t.id for t in store.list_tasks({"vehicle_id": camry, "status": "Completed"})] == [first]
    assert [t.id for t in store.list_tasks({"category": TaskCategory.DIAGNOSTICS})] == [second]


@pytest.mark.parametrize("data", [
    {"title": ""},
    {"title": "Oil change", "status": "Done"},
    {"title": "Oil change", "category": "Bodywork"},
])
def test_invalid_task_is_rejected(store, data):
    with pytest.raises(ValidationError):
        store.add_task(data)


def test_invalid_filter_value_is_rejected(store):
    with pytest.raises(ValidationError):
        store.list_tasks({"status": "Finished"})


def test_task_for_unknown_vehicle_is_rejected(store, john):
    with pytest.raises(ConstraintViolationError):
        store.add_task({"customer_id": john, "vehicle_id": "nope", "title": "Oil change"})


def test_update_task_with_same_values_returns_zero(store, john, camry):
    task_id = store.add_task({"customer_id": john, "vehicle_id": camry, "title": "Oil Change"})
    current = store.get_task(task_id)

    assert store.update_task(task_id, current.model_dump()) == 0
    assert store.get_task(task_id) == current
