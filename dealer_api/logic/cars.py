"""Vehicle record persistence."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from dealer_api.db.tables import cars
from dealer_api.errors import InsertionFailed, NotFound, StoreError, Unavailable
from dealer_api.logic.models import CarRecord, NewCar
from dealer_api.logic.validation import normalize_window, parse_restock_amount, validate_identifier
from dealer_api.utils.dates import utcnow

logger = logging.getLogger(__name__)

SHOWCASE_LIMIT = 6
LATEST_LIMIT = 6


class CarStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create(self, car: NewCar, *, conn: Connection | None = None) -> str:
        car_id = uuid.uuid4().hex
        values = {
            "id": car_id,
            "name": car.name,
            "price": car.price,
            "quantity": car.quantity,
            "image": car.image,
            "description": car.description,
            "supplier_name": car.supplier.name,
            "supplier_owner_id": car.supplier.owner_id,
            "total_sold": 0,
            "last_modified": utcnow(),
        }
        try:
            if conn is not None:
                conn.execute(insert(cars).values(**values))
            else:
                with self.engine.begin() as own:
                    own.execute(insert(cars).values(**values))
        except SQLAlchemyError as exc:
            logger.warning("Inserting car %s failed: %s", car.name, exc)
            raise InsertionFailed("Car could not be inserted") from exc
        logger.info("Inserted car %s for supplier %s", car_id, car.supplier.owner_id)
        return car_id

    def get_by_id(self, car_id: Any, *, conn: Connection | None = None) -> CarRecord:
        car_id = validate_identifier(car_id)
        rows = self._fetch(select(cars).where(cars.c.id == car_id), conn=conn)
        if not rows:
            raise NotFound(f"No car with id {car_id}")
        return rows[0]

    def list_page(self, offset: Any = None, limit: Any = None) -> list[CarRecord]:
        start, size = normalize_window(offset, limit)
        query = select(cars).order_by(cars.c.id).offset(start).limit(size)
        return self._fetch(query)

    def list_by_supplier(self, owner_id: str) -> list[CarRecord]:
        query = select(cars).where(cars.c.supplier_owner_id == owner_id).order_by(cars.c.last_modified.desc())
        return self._fetch(query)

    def list_showcase(self, limit: int = SHOWCASE_LIMIT) -> list[CarRecord]:
        return self._fetch(select(cars).limit(limit))

    def list_latest(self, limit: int = LATEST_LIMIT) -> list[CarRecord]:
        return self._fetch(select(cars).order_by(cars.c.last_modified.desc()).limit(limit))

    def count(self) -> int:
        try:
            with self.engine.connect() as conn:
                return int(conn.execute(select(func.count()).select_from(cars)).scalar_one())
        except SQLAlchemyError as exc:
            raise StoreError("Counting cars failed") from exc

    def record_delivery(self, car_id: Any, *, owner_id: str | None = None) -> CarRecord:
        """Sell one unit: quantity down by one, total sold up by one."""
        car_id = validate_identifier(car_id)
        conditions = [cars.c.id == car_id, cars.c.quantity > 0]
        if owner_id is not None:
            conditions.append(cars.c.supplier_owner_id == owner_id)
        stmt = (
            update(cars)
            .where(*conditions)
            .values(
                quantity=cars.c.quantity - 1,
                total_sold=cars.c.total_sold + 1,
                last_modified=utcnow(),
            )
        )
        try:
            with self.engine.begin() as conn:
                if conn.execute(stmt).rowcount == 0:
                    current = self.get_by_id(car_id, conn=conn)
                    if owner_id is not None and current.supplier.owner_id != owner_id:
                        raise NotFound(f"No car with id {car_id} for supplier {owner_id}")
                    raise Unavailable(f"Car {current.id} is out of stock")
                record = self.get_by_id(car_id, conn=conn)
        except SQLAlchemyError as exc:
            raise StoreError("Recording delivery failed") from exc
        logger.info("Recorded delivery for car %s, %s left", car_id, record.quantity)
        return record

    def restock(self, car_id: Any, amount: Any, *, owner_id: str | None = None) -> CarRecord:
        car_id = validate_identifier(car_id)
        amount = parse_restock_amount(amount)
        conditions = [cars.c.id == car_id]
        if owner_id is not None:
            conditions.append(cars.c.supplier_owner_id == owner_id)
        stmt = (
            update(cars)
            .where(*conditions)
            .values(quantity=cars.c.quantity + amount, last_modified=utcnow())
        )
        try:
            with self.engine.begin() as conn:
                if conn.execute(stmt).rowcount == 0:
                    raise NotFound(f"No car with id {car_id}")
                record = self.get_by_id(car_id, conn=conn)
        except SQLAlchemyError as exc:
            raise StoreError("Restocking failed") from exc
        logger.info("Restocked car %s by %s", car_id, amount)
        return record

    def delete(self, car_id: Any, *, conn: Connection | None = None) -> int:
        car_id = validate_identifier(car_id)
        stmt = delete(cars).where(cars.c.id == car_id)
        if conn is not None:
            return conn.execute(stmt).rowcount
        try:
            with self.engine.begin() as own:
                return own.execute(stmt).rowcount
        except SQLAlchemyError as exc:
            raise StoreError("Deleting car failed") from exc

    def _fetch(self, query, *, conn: Connection | None = None) -> list[CarRecord]:
        if conn is not None:
            return [CarRecord.from_row(row) for row in conn.execute(query).mappings()]
        try:
            with self.engine.connect() as own:
                return [CarRecord.from_row(row) for row in own.execute(query).mappings()]
        except SQLAlchemyError as exc:
            raise StoreError("Reading cars failed") from exc
