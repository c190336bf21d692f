import pytest

from autoorganize.errors import ConstraintViolationError, ValidationError

from conftest import table_counts


def test_vehicle_listing_carries_owner_name(store, john, camry):
    [vehicle] = store.list_vehicles({"customer_id": john})

    assert vehicle.id == camry
    assert vehicle.customer_name == "John Doe"
    assert (vehicle.make, vehicle.model, vehicle.year, vehicle.vin) == ("Toyota", "Camry", 2020, "ABC123")
    assert store.get_vehicle(camry).customer_name == "John Doe"


def test_duplicate_vin_is_a_constraint_violation(store, john, camry):
    before = table_counts(store)

    with pytest.raises(ConstraintViolationError) as excinfo:
        store.add_vehicle({"customer_id": john, "make": "Honda", "model": "Civic", "year": 2018, "vin": "ABC123"})

    assert excinfo.value.cause is not None
    assert table_counts(store) == before


def test_vin_is_normalized_before_the_uniqueness_check(store, john, camry):
    with pytest.raises(ConstraintViolationError):
        store.add_vehicle({"customer_id": john, "make": "Honda", "vin": " abc123 "})


def test_vehicles_without_vin_do_not_collide(store, john):
    store.add_vehicle({"customer_id": john, "make": "Ford", "vin": ""})
    store.add_vehicle({"customer_id": john, "make": "Ford"})

    assert [v.vin for v in store.list_vehicles()] == [None, None]


def test_vehicle_for_unknown_customer_is_rejected(store):
    with pytest.raises(ConstraintViolationError):
        store.add_vehicle({"customer_id": "nope", "make": "Nissan"})


@pytest.mark.parametrize("year", [20, 20201, "twenty"])
def test_malformed_year_is_rejected(store, john, year):
    with pytest.raises(ValidationError):
        store.add_vehicle({"customer_id": john, "make": "Toyota", "year": year})


def test_list_vehicles_filters_and_order(store, john, jane):
    store.add_vehicle({"customer_id": john, "make": "Toyota", "model": "Corolla"})
    store.add_vehicle({"customer_id": john, "make": "Honda", "model": "Civic"})
    store.add_vehicle({"customer_id": jane, "make": "Ford", "model": "F-150"})
    store.add_vehicle({"customer_id": jane, "make": "Toyota", "model": "Camry"})

    assert [(v.make, v.model) for v in store.list_vehicles()] == [
        ("Ford", "F-150"),
        ("Honda", "Civic"),
        ("Toyota", "Camry"),
        ("Toyota", "Corolla"),
    ]
    assert [v.model for v in store.list_vehicles({"make": "toy"})] == ["Camry", "Corolla"]
    assert [v.model for v in store.list_vehicles({"model": "CIV"})] == ["Civic"]
    assert [v.model for v in store.list_vehicles({"customer_id": jane, "make": "toyota"})] == ["Camry"]


def test_substring_filters_treat_wildcards_literally(store, john):
    store.add_vehicle({"customer_id": john, "make": "Toyota"})
    assert store.list_vehicles({"make": "%"}) == []


def test_update_vehicle_changes_owner(store, john, jane, camry):
    rows = store.update_vehicle(
        camry, {"customer_id": jane, "make": "Toyota", "model": "Camry", "year": 2021, "vin": "ABC123"}
    )

    assert rows == 1
    vehicle = store.get_vehicle(camry)
    assert vehicle.customer_name == "Jane Smith"
    assert vehicle.year == 2021


def test_update_vehicle_with_same_values_returns_zero(store, camry):
    current = store.get_vehicle(camry)
    assert store.update_vehicle(camry, current.model_dump()) == 0


def test_update_vehicle_to_a_taken_vin_fails(store, john, camry):
    other = store.add_vehicle({"customer_id": john, "make": "Honda", "vin": "XYZ789"})

    with pytest.raises(ConstraintViolationError):
        store.update_vehicle(other, {"customer_id": john, "make": "Honda", "vin": "ABC123"})
    assert store.get_vehicle(other).vin == "XYZ789"
