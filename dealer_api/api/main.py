"""FastAPI application for the dealership inventory."""

from __future__ import annotations

import asyncio
import functools
import logging
import os
from typing import Any, Callable, TypeVar

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.engine import Engine

from dealer_api.db import session
from dealer_api.errors import (
    Forbidden,
    InsertionFailed,
    InvalidCredential,
    InvalidIdentifier,
    MissingCredential,
    NonNumericValue,
    NotFound,
    StoreError,
    TransactionFailed,
    Unavailable,
    ValidationError,
)
from dealer_api.logic.cars import CarStore
from dealer_api.logic.coordinator import InventoryCoordinator
from dealer_api.logic.slider import SliderStore
from dealer_api.logic.validation import page_to_window, parse_new_car
from dealer_api.utils.tokens import Identity, issue_token, token_from_header, verify_token

logger = logging.getLogger(__name__)

T = TypeVar("T")

app = FastAPI(title="Dealer Inventory API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in os.environ.get("CORS_ORIGINS", "*").split(",")],
    allow_methods=["*"],
    allow_headers=["*"],
)


class LoginRequest(BaseModel):
    email: EmailStr
    uid: str = Field(min_length=1)


class LoginResponse(BaseModel):
    accessToken: str


class AddCarRequest(BaseModel):
    carData: Any = None


class DeleteRequest(BaseModel):
    id: Any = None


class DeliveryRequest(BaseModel):
    postData: Any = None


class RestockRequest(BaseModel):
    postData: Any = None


@app.exception_handler(RequestValidationError)
async def bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse({"message": "Bad request"}, status_code=400)


def get_engine() -> Engine:
    return session.get_engine()


def get_cars(engine: Engine = Depends(get_engine)) -> CarStore:
    return CarStore(engine)


def get_slider(engine: Engine = Depends(get_engine)) -> SliderStore:
    return SliderStore(engine)


def get_coordinator(engine: Engine = Depends(get_engine)) -> InventoryCoordinator:
    return InventoryCoordinator(engine)


def require_identity(authorization: str | None = Header(default=None)) -> Identity:
    try:
        return verify_token(token_from_header(authorization))
    except MissingCredential as exc:
        raise HTTPException(status_code=401, detail="Unauthorized access") from exc
    except InvalidCredential as exc:
        raise HTTPException(status_code=403, detail="Forbidden access") from exc


async def _run(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


@app.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "OK"


@app.post("/api/login", status_code=201, response_model=LoginResponse)
async def login(payload: LoginRequest) -> LoginResponse:
    return LoginResponse(accessToken=issue_token(payload.uid, payload.email))


@app.post("/api/addCar", status_code=201)
async def add_car(
    payload: AddCarRequest,
    identity: Identity = Depends(require_identity),
    coordinator: InventoryCoordinator = Depends(get_coordinator),
) -> dict[str, Any]:
    car_data = payload.carData
    supplier = car_data.get("supplier") if isinstance(car_data, dict) else None
    owner_id = supplier.get("ownerId") if isinstance(supplier, dict) else None
    if owner_id != identity.uid:
        raise HTTPException(status_code=403, detail="Forbidden access")
    try:
        car = parse_new_car(car_data)
    except NonNumericValue as exc:
        raise HTTPException(status_code=406, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    try:
        result = await _run(coordinator.insert_and_link, car, owner_id=identity.uid)
    except InsertionFailed as exc:
        raise HTTPException(status_code=400, detail="Car could not be added") from exc
    return result.to_dict()


@app.get("/api/slider")
async def list_slider(store: SliderStore = Depends(get_slider)) -> list[dict[str, Any]]:
    try:
        entries = await _run(store.list_all)
    except StoreError as exc:
        raise HTTPException(status_code=503, detail="Slider unavailable") from exc
    return [entry.to_dict() for entry in entries]


@app.get("/api/carShowcase")
async def car_showcase(store: CarStore = Depends(get_cars)) -> list[dict[str, Any]]:
    try:
        records = await _run(store.list_showcase)
    except StoreError as exc:
        raise HTTPException(status_code=503, detail="Showcase unavailable") from exc
    return [record.to_dict() for record in records]


@app.get("/api/latestCars")
async def latest_cars(store: CarStore = Depends(get_cars)) -> list[dict[str, Any]]:
    try:
        records = await _run(store.list_latest)
    except StoreError as exc:
        raise HTTPException(status_code=500, detail="Could not load latest cars") from exc
    return [record.to_dict() for record in records]


@app.get("/api/carcount")
async def car_count(store: CarStore = Depends(get_cars)) -> int:
    try:
        return await _run(store.count)
    except StoreError as exc:
        raise HTTPException(status_code=503, detail="Count unavailable") from exc


@app.get("/api/inventory")
async def inventory_page(
    page: str | None = Query(default=None),
    size: str | None = Query(default=None),
    identity: Identity = Depends(require_identity),
    store: CarStore = Depends(get_cars),
) -> list[dict[str, Any]]:
    offset, limit = page_to_window(page, size)
    try:
        records = await _run(store.list_page, offset, limit)
    except StoreError as exc:
        raise HTTPException(status_code=404, detail="Inventory not found") from exc
    return [record.to_dict() for record in records]


@app.get("/api/userInventory")
async def user_inventory(
    uid: str | None = Query(default=None),
    identity: Identity = Depends(require_identity),
    store: CarStore = Depends(get_cars),
) -> list[dict[str, Any]]:
    if uid != identity.uid:
        raise HTTPException(status_code=403, detail="Forbidden access")
    try:
        records = await _run(store.list_by_supplier, uid)
    except StoreError as exc:
        raise HTTPException(status_code=500, detail="Could not load inventory") from exc
    return [record.to_dict() for record in records]


@app.get("/api/inventory/{car_id}")
async def inventory_item(car_id: str, store: CarStore = Depends(get_cars)) -> dict[str, Any]:
    try:
        record = await _run(store.get_by_id, car_id)
    except InvalidIdentifier as exc:
        raise HTTPException(status_code=404, detail="Invalid id format") from exc
    except NotFound as exc:
        raise HTTPException(status_code=406, detail="Incorrect id") from exc
    except StoreError as exc:
        raise HTTPException(status_code=500, detail="Could not load car") from exc
    return record.to_dict()


@app.delete("/api/inventory")
async def delete_car(
    payload: DeleteRequest | None = None,
    identity: Identity = Depends(require_identity),
    coordinator: InventoryCoordinator = Depends(get_coordinator),
) -> dict[str, Any]:
    try:
        unlinked = await _run(coordinator.delete_and_unlink, payload.id if payload else None, owner_id=identity.uid)
    except InvalidIdentifier as exc:
        raise HTTPException(status_code=406, detail=str(exc)) from exc
    except NotFound as exc:
        raise HTTPException(status_code=404, detail="Car not found") from exc
    except Forbidden as exc:
        raise HTTPException(status_code=403, detail="Forbidden access") from exc
    except (TransactionFailed, StoreError) as exc:
        raise HTTPException(status_code=500, detail="Delete failed, nothing was changed") from exc
    return {"message": "Car deleted", "sliderEntriesRemoved": unlinked}


@app.post("/api/updateDelivery")
async def update_delivery(
    payload: DeliveryRequest | None = None,
    identity: Identity = Depends(require_identity),
    coordinator: InventoryCoordinator = Depends(get_coordinator),
) -> dict[str, Any]:
    car_id = payload.postData if payload else None
    try:
        record = await _run(coordinator.record_delivery, car_id, owner_id=identity.uid)
    except InvalidIdentifier as exc:
        raise HTTPException(status_code=406, detail=str(exc)) from exc
    except NotFound as exc:
        raise HTTPException(status_code=404, detail="Car not found") from exc
    except Forbidden as exc:
        raise HTTPException(status_code=403, detail="Forbidden access") from exc
    except Unavailable as exc:
        raise HTTPException(status_code=403, detail="Car is out of stock") from exc
    except StoreError as exc:
        raise HTTPException(status_code=503, detail="Delivery could not be recorded") from exc
    logger.info("Delivery recorded by %s for car %s", identity.uid, record.id)
    return record.to_dict()


@app.post("/api/updateStock")
async def update_stock(
    payload: RestockRequest | None = None,
    identity: Identity = Depends(require_identity),
    coordinator: InventoryCoordinator = Depends(get_coordinator),
) -> dict[str, Any]:
    data = payload.postData if payload else None
    if not isinstance(data, dict):
        raise HTTPException(status_code=406, detail="postData must contain id and restockBy")
    try:
        record = await _run(coordinator.restock, data.get("id"), data.get("restockBy"), owner_id=identity.uid)
    except ValidationError as exc:
        raise HTTPException(status_code=406, detail=str(exc)) from exc
    except NotFound as exc:
        raise HTTPException(status_code=404, detail="Car not found") from exc
    except Forbidden as exc:
        raise HTTPException(status_code=403, detail="Forbidden access") from exc
    except StoreError as exc:
        raise HTTPException(status_code=500, detail="Restock failed") from exc
    return record.to_dict()


def run() -> None:
    import uvicorn

    load_dotenv()
    uvicorn.run(app, host=os.environ.get("HOST", "0.0.0.0"), port=int(os.environ.get("PORT", "5000")))


if __name__ == "__main__":
    run()
