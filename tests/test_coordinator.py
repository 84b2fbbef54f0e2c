import pytest
from sqlalchemy.exc import OperationalError

from conftest import make_car
from dealer_api.errors import Forbidden, InsertionFailed, InvalidIdentifier, NotFound, TransactionFailed
from dealer_api.logic.cars import CarStore
from dealer_api.logic.slider import SliderStore

MISSING_ID = "f" * 32


def test_insert_without_slider(coordinator, cars, slider):
    result = coordinator.insert_and_link(make_car(slider=False))
    assert cars.get_by_id(result.car_id).name == "Civic"
    assert result.slider_id is None
    assert slider.list_all() == []
    assert "sliderResult" not in result.to_dict()


def test_insert_and_link_snapshots_car(coordinator, slider):
    result = coordinator.insert_and_link(make_car(slider=True))
    entries = slider.list_all()
    assert len(entries) == 1
    entry = entries[0]
    assert entry.id == result.slider_id
    assert entry.car_id == result.car_id
    assert entry.name == "Civic"
    assert entry.supplier.owner_id == "u1"
    payload = result.to_dict()
    assert payload["sliderResult"]["carId"] == result.car_id
    assert "sliderInsertionFailed" not in payload


def test_insert_keeps_car_when_slider_fails(coordinator, cars, monkeypatch):
    def broken_create(self, entry):
        raise InsertionFailed("slider down")

    monkeypatch.setattr(SliderStore, "create", broken_create)
    result = coordinator.insert_and_link(make_car(slider=True))
    assert result.slider_insertion_failed is True
    assert result.to_dict()["sliderInsertionFailed"] is True
    assert cars.get_by_id(result.car_id).id == result.car_id


def test_insert_failure_leaves_no_state(coordinator, cars, slider, monkeypatch):
    def broken_create(self, car, conn=None):
        raise InsertionFailed("cars down")

    monkeypatch.setattr(CarStore, "create", broken_create)
    with pytest.raises(InsertionFailed):
        coordinator.insert_and_link(make_car(slider=True))
    assert slider.list_all() == []


def test_insert_rejects_foreign_owner(coordinator, cars):
    with pytest.raises(Forbidden):
        coordinator.insert_and_link(make_car("u2"), owner_id="u1")
    assert cars.count() == 0


def test_delete_and_unlink(coordinator, cars, slider):
    keep = coordinator.insert_and_link(make_car(slider=True, name="Keep"))
    gone = coordinator.insert_and_link(make_car(slider=True, name="Gone"))
    assert coordinator.delete_and_unlink(gone.car_id, owner_id="u1") == 1
    with pytest.raises(NotFound):
        cars.get_by_id(gone.car_id)
    assert [entry.car_id for entry in slider.list_all()] == [keep.car_id]


def test_delete_without_slider_entry(coordinator, cars):
    result = coordinator.insert_and_link(make_car())
    assert coordinator.delete_and_unlink(result.car_id) == 0
    assert cars.count() == 0


def test_delete_removes_duplicate_entries(coordinator, slider):
    result = coordinator.insert_and_link(make_car(slider=True))
    entry = slider.list_all()[0]
    entry.id = "a" * 32
    slider.create(entry)
    assert coordinator.delete_and_unlink(result.car_id) == 2
    assert slider.list_all() == []


def test_delete_missing_car_changes_nothing(coordinator, cars, slider):
    coordinator.insert_and_link(make_car(slider=True))
    with pytest.raises(NotFound):
        coordinator.delete_and_unlink(MISSING_ID)
    assert cars.count() == 1
    assert len(slider.list_all()) == 1


def test_delete_invalid_id(coordinator):
    with pytest.raises(InvalidIdentifier):
        coordinator.delete_and_unlink("nope")


def test_delete_by_other_owner_is_forbidden(coordinator, cars, slider):
    result = coordinator.insert_and_link(make_car("u1", slider=True))
    with pytest.raises(Forbidden):
        coordinator.delete_and_unlink(result.car_id, owner_id="u2")
    assert cars.get_by_id(result.car_id)
    assert len(slider.list_all()) == 1


def test_delete_rolls_back_when_car_delete_fails(coordinator, cars, slider, monkeypatch):
    result = coordinator.insert_and_link(make_car(slider=True))

    def broken_delete(self, car_id, conn=None):
        raise OperationalError("DELETE FROM cars", {}, Exception("disk I/O error"))

    monkeypatch.setattr(CarStore, "delete", broken_delete)
    with pytest.raises(TransactionFailed):
        coordinator.delete_and_unlink(result.car_id)
    monkeypatch.undo()
    assert cars.get_by_id(result.car_id).id == result.car_id
    assert [entry.car_id for entry in slider.list_all()] == [result.car_id]


def test_delete_aborts_when_car_vanishes(coordinator, cars, slider, monkeypatch):
    result = coordinator.insert_and_link(make_car(slider=True))
    monkeypatch.setattr(CarStore, "delete", lambda self, car_id, conn=None: 0)
    with pytest.raises(NotFound):
        coordinator.delete_and_unlink(result.car_id)
    assert [entry.car_id for entry in slider.list_all()] == [result.car_id]


def test_restock_checks_owner(coordinator, cars):
    result = coordinator.insert_and_link(make_car("u1", quantity=2))
    with pytest.raises(Forbidden):
        coordinator.restock(result.car_id, 3, owner_id="u2")
    assert coordinator.restock(result.car_id, 3, owner_id="u1").quantity == 5


def test_record_delivery_checks_owner(coordinator, cars):
    result = coordinator.insert_and_link(make_car("u1", quantity=1))
    with pytest.raises(Forbidden):
        coordinator.record_delivery(result.car_id, owner_id="u2")
    assert cars.get_by_id(result.car_id).quantity == 1
    record = coordinator.record_delivery(result.car_id, owner_id="u1")
    assert (record.quantity, record.total_sold) == (0, 1)
