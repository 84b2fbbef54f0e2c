"""Inventory data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping


@dataclass(slots=True)
class Supplier:
    name: str
    owner_id: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "ownerId": self.owner_id}


@dataclass(slots=True)
class NewCar:
    """A validated vehicle submission that has not been stored yet."""

    name: str
    price: float
    quantity: int
    image: str
    description: str
    supplier: Supplier
    include_in_slider: bool = False


@dataclass(slots=True)
class CarRecord:
    id: str
    name: str
    price: float
    quantity: int
    image: str
    description: str
    supplier: Supplier
    total_sold: int
    last_modified: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CarRecord":
        return cls(
            id=row["id"],
            name=row["name"],
            price=float(row["price"]),
            quantity=int(row["quantity"]),
            image=row["image"],
            description=row["description"],
            supplier=Supplier(name=row["supplier_name"], owner_id=row["supplier_owner_id"]),
            total_sold=int(row["total_sold"]),
            last_modified=row["last_modified"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "image": self.image,
            "description": self.description,
            "supplier": self.supplier.to_dict(),
            "totalSold": self.total_sold,
            "lastModified": self.last_modified.isoformat(timespec="microseconds"),
        }


@dataclass(slots=True)
class SliderEntry:
    id: str
    car_id: str
    name: str
    supplier: Supplier
    image: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SliderEntry":
        return cls(
            id=row["id"],
            car_id=row["car_id"],
            name=row["name"],
            supplier=Supplier(name=row["supplier_name"], owner_id=row["supplier_owner_id"]),
            image=row["image"],
        )

    @classmethod
    def snapshot(cls, entry_id: str, car_id: str, car: NewCar) -> "SliderEntry":
        return cls(id=entry_id, car_id=car_id, name=car.name, supplier=car.supplier, image=car.image)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "carId": self.car_id,
            "name": self.name,
            "supplier": self.supplier.to_dict(),
            "image": self.image,
        }
