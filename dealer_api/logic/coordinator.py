"""Flows that change the cars and slider tables together."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy.engine import Engine

from dealer_api.db.session import transaction
from dealer_api.errors import Forbidden, InventoryError, NotFound, StoreError, TransactionFailed
from dealer_api.logic.cars import CarStore
from dealer_api.logic.models import CarRecord, NewCar, SliderEntry
from dealer_api.logic.slider import SliderStore
from dealer_api.logic.validation import parse_restock_amount, validate_identifier

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class InsertResult:
    car_id: str
    slider_id: str | None = None
    slider_insertion_failed: bool = False

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"acknowledged": True, "insertedId": self.car_id}
        if self.slider_id:
            payload["sliderResult"] = {"insertedId": self.slider_id, "carId": self.car_id}
        if self.slider_insertion_failed:
            payload["sliderInsertionFailed"] = True
        return payload


class InventoryCoordinator:
    """Keeps slider entries consistent with the cars they advertise."""

    def __init__(
        self,
        engine: Engine,
        cars: CarStore | None = None,
        slider: SliderStore | None = None,
    ) -> None:
        self.engine = engine
        self.cars = cars or CarStore(engine)
        self.slider = slider or SliderStore(engine)

    def insert_and_link(self, car: NewCar, *, owner_id: str | None = None) -> InsertResult:
        """Store a car, then add it to the slider when requested.

        The slider step is best effort. If it fails the car stays stored and
        the result carries ``slider_insertion_failed`` so the link can be
        retried separately.
        """
        if owner_id is not None and car.supplier.owner_id != owner_id:
            raise Forbidden("Supplier does not match the authenticated user")
        car_id = self.cars.create(car)
        result = InsertResult(car_id=car_id)
        if not car.include_in_slider:
            return result
        entry = SliderEntry.snapshot(uuid.uuid4().hex, car_id, car)
        try:
            result.slider_id = self.slider.create(entry)
        except StoreError as exc:
            logger.warning("Car %s stored but slider link failed: %s", car_id, exc)
            result.slider_insertion_failed = True
        return result

    def delete_and_unlink(self, car_id: Any, *, owner_id: str | None = None) -> int:
        """Delete a car and its slider entries in one transaction.

        Returns the number of slider entries removed alongside the car.
        """
        car_id = validate_identifier(car_id)
        try:
            with transaction(self.engine) as conn:
                current = self.cars.get_by_id(car_id, conn=conn)
                if owner_id is not None and current.supplier.owner_id != owner_id:
                    raise Forbidden("Only the supplier may delete this car")
                unlinked = self.slider.delete_by_car_id(car_id, conn=conn)
                if self.cars.delete(car_id, conn=conn) == 0:
                    raise NotFound(f"No car with id {car_id}")
        except InventoryError:
            raise
        except Exception as exc:
            logger.warning("Delete of car %s rolled back: %s", car_id, exc)
            raise TransactionFailed(f"Deleting car {car_id} failed") from exc
        logger.info("Deleted car %s and %s slider entries", car_id, unlinked)
        return unlinked

    def record_delivery(self, car_id: Any, *, owner_id: str) -> CarRecord:
        current = self.cars.get_by_id(car_id)
        if current.supplier.owner_id != owner_id:
            raise Forbidden("Only the supplier may record deliveries for this car")
        return self.cars.record_delivery(current.id, owner_id=owner_id)

    def restock(self, car_id: Any, amount: Any, *, owner_id: str) -> CarRecord:
        amount = parse_restock_amount(amount)
        current = self.cars.get_by_id(car_id)
        if current.supplier.owner_id != owner_id:
            raise Forbidden("Only the supplier may restock this car")
        return self.cars.restock(current.id, amount, owner_id=owner_id)
