"""Database helpers and demo inventory."""

from __future__ import annotations

import pathlib

import yaml

from dealer_api.logic.models import NewCar
from dealer_api.logic.validation import parse_new_car

SEED_CARS_PATH = pathlib.Path(__file__).with_name("seed_cars.yml")


def load_seed_cars(limit: int | None = None) -> list[NewCar]:
    data = yaml.safe_load(SEED_CARS_PATH.read_text())
    cars = [parse_new_car(item) for item in data]
    if limit:
        return cars[:limit]
    return cars
