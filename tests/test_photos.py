import pytest

from autoorganize.errors import ConstraintViolationError, ValidationError
from autoorganize.models.photo import CustomerRef, VehicleRef

from conftest import table_counts


def test_photo_keeps_its_tagged_parent(store, camry):
    photo_id = store.add_photo({"parent": {"kind": "vehicle", "id": camry}, "uri": "file:///photos/dent.jpg",
                                "notes": "Rear bumper"})

    photo = store.get_photo(photo_id)
    assert photo.parent == VehicleRef(id=camry)
    assert photo.uri == "file:///photos/dent.jpg"
    assert photo.created_at is not None


def test_list_photos_is_scoped_to_one_parent(store, john, camry):
    # Same id under two kinds must not mix
    store.add_photo({"parent": {"kind": "customer", "id": john}, "uri": "a.jpg"})
    vehicle_photo = store.add_photo({"parent": VehicleRef(id=camry), "uri": "b.jpg"})

    assert [p.id for p in store.list_photos(VehicleRef(id=camry))] == [vehicle_photo]
    assert [p.uri for p in store.list_photos({"kind": "customer", "id": john})] == ["a.jpg"]
    assert store.list_photos(CustomerRef(id=camry)) == []


def test_photo_for_missing_parent_is_rejected(store):
    before = table_counts(store)
    with pytest.raises(ConstraintViolationError):
        store.add_photo({"parent": {"kind": "task", "id": "nope"}, "uri": "c.jpg"})
    assert table_counts(store) == before


@pytest.mark.parametrize("data", [
    {"parent": {"kind": "invoice", "id": "x"}, "uri": "c.jpg"},
    {"parent": {"kind": "customer", "id": "x"}, "uri": ""},
    {"uri": "c.jpg"},
])
def test_invalid_photo_is_rejected(store, data):
    with pytest.raises(ValidationError):
        store.add_photo(data)


def test_list_photos_with_bad_parent_is_rejected(store):
    with pytest.raises(ValidationError):
        store.list_photos({"kind": "garage", "id": "x"})


def test_update_and_delete_photo(store, john):
    photo_id = store.add_photo({"parent": {"kind": "customer", "id": john}, "uri": "a.jpg"})

    assert store.update_photo(photo_id, {"uri": "a.jpg", "notes": "Signed estimate"}) == 1
    assert store.update_photo(photo_id, {"uri": "a.jpg", "notes": "Signed estimate"}) == 0
    assert store.get_photo(photo_id).notes == "Signed estimate"

    assert store.delete_photo(photo_id) == 1
    assert store.delete_photo(photo_id) == 0
    assert store.get_photo(photo_id) is None


# --- Schedule ---

def test_schedule_entries_by_task_in_date_order(store, john):
    task = store.add_task({"customer_id": john, "title": "Timing belt"})
    later = store.add_schedule_entry({"task_id": task, "job_date": "2025-06-20", "start_time": "08:00"})
    earlier = store.add_schedule_entry({"task_id": task, "job_date": "2025-06-18", "start_time": "13:30",
                                        "end_time": "17:00"})
    store.add_schedule_entry({"job_date": "2025-06-19", "notes": "Shop closed"})

    assert [e.id for e in store.list_schedule_entries(task)] == [earlier, later]
    assert len(store.list_schedule_entries()) == 3

    assert store.delete_schedule_entry(later) == 1
    assert [e.id for e in store.list_schedule_entries(task)] == [earlier]


@pytest.mark.parametrize("data", [
    {"start_time": "9am", "job_date": "2025-06-18"},
    {"start_time": "25:00", "job_date": "2025-06-18"},
    {"notes": "no date"},
])
def test_invalid_schedule_entry_is_rejected(store, data):
    with pytest.raises(ValidationError):
        store.add_schedule_entry(data)


def test_schedule_entry_for_unknown_task_is_rejected(store):
    with pytest.raises(ConstraintViolationError):
        store.add_schedule_entry({"task_id": "nope", "job_date": "2025-06-18"})
