"""Promotional slider entries."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete, insert, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from dealer_api.db.tables import slider
from dealer_api.errors import InsertionFailed, StoreError
from dealer_api.logic.models import SliderEntry

logger = logging.getLogger(__name__)


class SliderStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create(self, entry: SliderEntry) -> str:
        values = {
            "id": entry.id,
            "car_id": entry.car_id,
            "name": entry.name,
            "supplier_name": entry.supplier.name,
            "supplier_owner_id": entry.supplier.owner_id,
            "image": entry.image,
        }
        try:
            with self.engine.begin() as conn:
                conn.execute(insert(slider).values(**values))
        except SQLAlchemyError as exc:
            raise InsertionFailed("Slider entry could not be inserted") from exc
        return entry.id

    def list_all(self) -> list[SliderEntry]:
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(select(slider)).mappings().all()
        except SQLAlchemyError as exc:
            raise StoreError("Reading slider failed") from exc
        return [SliderEntry.from_row(row) for row in rows]

    def delete_by_car_id(self, car_id: Any, *, conn: Connection | None = None) -> int:
        """Remove every entry pointing at a car. Zero removed is not an error."""
        stmt = delete(slider).where(slider.c.car_id == car_id)
        if conn is not None:
            deleted = conn.execute(stmt).rowcount
        else:
            try:
                with self.engine.begin() as own:
                    deleted = own.execute(stmt).rowcount
            except SQLAlchemyError as exc:
                raise StoreError("Deleting slider entries failed") from exc
        if deleted > 1:
            logger.warning("Removed %s duplicate slider entries for car %s", deleted, car_id)
        return deleted
