from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from mhp.auth import hash_password
from mhp.dataservice import DataService
from mhp.db import init_db
from mhp.main import app, get_data_service
from mhp.models import Category, MenuItem
from mhp.shell import Identity, NavShell, SessionEvents

PASSWORD = "correct-horse"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def data(engine) -> DataService:
    return DataService(engine)


@pytest.fixture()
def user(data):
    return data.create_user("diner@example.com", hash_password(PASSWORD), "Dana Diner")


@pytest.fixture()
def identity(user) -> Identity:
    return Identity(id=user.id, email=user.email)


@pytest.fixture()
def shell(data, identity):
    shell = NavShell(data, identity, SessionEvents())
    yield shell
    shell.close()


@pytest.fixture()
def catalog(engine):
    with Session(engine, expire_on_commit=False) as session:
        mains = Category(name="Mains", description="Hearty dishes", display_order=1)
        drinks = Category(name="Drinks", description="Cold drinks", display_order=2)
        session.add_all([drinks, mains])
        session.flush()
        pizza = MenuItem(name="Pizza", price=Decimal("9.50"), category_id=mains.id, display_order=2)
        soup = MenuItem(name="Soup", price=Decimal("6.00"), category_id=mains.id, display_order=1)
        lemonade = MenuItem(name="Lemonade", price=Decimal("3.25"), category_id=drinks.id, display_order=3)
        special = MenuItem(
            name="Secret Special", price=Decimal("20.00"), category_id=mains.id,
            is_available=False, display_order=0,
        )
        session.add_all([pizza, soup, lemonade, special])
        session.commit()
    return SimpleNamespace(mains=mains, drinks=drinks, pizza=pizza, soup=soup, lemonade=lemonade, special=special)


@pytest.fixture()
def client(data, monkeypatch):
    monkeypatch.setattr("mhp.main.init_db", lambda: None)
    monkeypatch.setattr("mhp.main.seed_demo_menu", lambda engine: False)
    app.dependency_overrides[get_data_service] = lambda: data
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def signed_in_client(client, user):
    resp = client.post(
        "/auth/sign-in",
        data={"email": user.email, "password": PASSWORD},
        follow_redirects=False,
    )
    assert resp.status_code == 302
    return client
