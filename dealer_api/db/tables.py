"""Table definitions for vehicle records and slider entries."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, Integer, MetaData, String, Table, Text

metadata = MetaData()

cars = Table(
    "cars",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("name", Text, nullable=False),
    Column("price", Float, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("image", Text, nullable=False),
    Column("description", Text, nullable=False),
    Column("supplier_name", Text, nullable=False),
    Column("supplier_owner_id", Text, nullable=False, index=True),
    Column("total_sold", Integer, nullable=False, default=0),
    Column("last_modified", DateTime, nullable=False, index=True),
)

# car_id is deliberately not a foreign key; the coordinator keeps it in step.
slider = Table(
    "slider",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("car_id", String(32), nullable=False, index=True),
    Column("name", Text, nullable=False),
    Column("supplier_name", Text, nullable=False),
    Column("supplier_owner_id", Text, nullable=False),
    Column("image", Text, nullable=False),
)
