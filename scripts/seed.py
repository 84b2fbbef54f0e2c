"""Seed the database with demo cars and slider entries."""

from __future__ import annotations

from dotenv import load_dotenv

from dealer_api.db import load_seed_cars
from dealer_api.db.migrate import run_migrations
from dealer_api.db.session import create_engine_from_env
from dealer_api.logic.coordinator import InventoryCoordinator


def main() -> None:
    load_dotenv()
    engine = create_engine_from_env()
    run_migrations(engine)
    coordinator = InventoryCoordinator(engine)
    for car in load_seed_cars():
        result = coordinator.insert_and_link(car)
        print(f"Added {car.name} as {result.car_id}")
    print("Seed complete")


if __name__ == "__main__":
    main()
