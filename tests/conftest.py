import pytest
import httpx
from sqlalchemy import create_engine

from dealer_api.api import main
from dealer_api.db.migrate import run_migrations
from dealer_api.logic.cars import CarStore
from dealer_api.logic.coordinator import InventoryCoordinator
from dealer_api.logic.models import NewCar, Supplier
from dealer_api.logic.slider import SliderStore
from dealer_api.utils.tokens import issue_token


def make_car(owner_id: str = "u1", *, name: str = "Civic", quantity: int = 3, slider: bool = False) -> NewCar:
    return NewCar(
        name=name,
        price=21000.0,
        quantity=quantity,
        image="https://images.example.com/civic.jpg",
        description="Reliable sedan",
        supplier=Supplier(name="Northside Motors", owner_id=owner_id),
        include_in_slider=slider,
    )


def car_payload(owner_id: str = "u1", **overrides):
    data = {
        "name": "Civic",
        "price": 21000,
        "quantity": 3,
        "image": "https://images.example.com/civic.jpg",
        "description": "Reliable sedan",
        "supplier": {"name": "Northside Motors", "ownerId": owner_id},
        "isSlider": False,
    }
    data.update(overrides)
    return data


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'dealer.db'}", connect_args={"timeout": 30}, future=True)
    run_migrations(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def cars(engine):
    return CarStore(engine)


@pytest.fixture()
def slider(engine):
    return SliderStore(engine)


@pytest.fixture()
def coordinator(engine, cars, slider):
    return InventoryCoordinator(engine, cars=cars, slider=slider)


@pytest.fixture()
def secret(monkeypatch):
    monkeypatch.setenv("ACCESS_TOKEN_SECRET", "test-secret")
    return "test-secret"


@pytest.fixture()
def auth_headers(secret):
    def build(uid: str = "u1", email: str = "a@b.com") -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_token(uid, email)}"}

    return build


@pytest.fixture()
def api_client(engine, secret):
    main.app.dependency_overrides[main.get_engine] = lambda: engine

    def build() -> httpx.AsyncClient:
        transport = httpx.ASGITransport(app=main.app)
        return httpx.AsyncClient(transport=transport, base_url="http://testserver")

    yield build
    main.app.dependency_overrides.clear()
