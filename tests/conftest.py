"""Shared test fixtures."""
from datetime import date, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from barbershop.config import shop_settings
from barbershop.db import create_db_and_tables, get_session, make_engine
from barbershop.main import app
from barbershop.models import Barber, Service
from barbershop.schemas import BookingRequest

# Saturday before the Monday most scenarios book on
NOW = datetime(2025, 3, 1, 9, 0)
MONDAY = date(2025, 3, 10)


@pytest.fixture(autouse=True)
def default_shop_settings(monkeypatch):
    """Pin the scheduling knobs regardless of the developer's .env."""
    monkeypatch.setitem(shop_settings, "slot_minutes", 15)
    monkeypatch.setitem(shop_settings, "day_start", "08:00")
    monkeypatch.setitem(shop_settings, "day_end", "21:00")
    monkeypatch.setitem(shop_settings, "working_days", [0, 1, 2, 3, 4, 5])
    monkeypatch.setitem(shop_settings, "lock_timeout_seconds", 5)


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so threads get real, separate connections."""
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def shop(engine):
    """Roberto plus a small service menu. Exposes plain ids."""
    with Session(engine) as s:
        roberto = Barber(
            name="Roberto",
            commission_rate_service=0.5,
            commission_rate_product=0.1,
            commission_rate_chemical_service=0.4,
        )
        corte = Service(name="Corte", price=Decimal("45.00"), duration_minutes=30)
        barba = Service(name="Barba", price=Decimal("35.00"), duration_minutes=20)
        luzes = Service(name="Luzes", price=Decimal("120.00"), duration_minutes=90, is_chemical=True)
        s.add_all([roberto, corte, barba, luzes])
        s.commit()
        return SimpleNamespace(
            barber_id=roberto.id,
            corte_id=corte.id,
            barba_id=barba.id,
            luzes_id=luzes.id,
        )


@pytest.fixture
def make_booking(shop):
    """Build a BookingRequest for Roberto, Monday 10:00, Corte + Barba (50 min)."""
    def _make(**overrides) -> BookingRequest:
        data = {
            "client_name": "Maria Souza",
            "client_phone": "(31) 99722-3898",
            "barber_id": shop.barber_id,
            "appointment_datetime": at(MONDAY, 10),
            "service_ids": [shop.corte_id, shop.barba_id],
        }
        data.update(overrides)
        return BookingRequest(**data)
    return _make


@pytest.fixture
def api(engine):
    """FastAPI test client bound to the test database."""
    def _session_override():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


def next_monday(weeks_ahead: int = 1) -> date:
    today = date.today()
    return today + timedelta(days=(7 - today.weekday()) % 7 or 7) + timedelta(weeks=weeks_ahead - 1)


def at(on_date: date, hour: int, minute: int = 0) -> datetime:
    return datetime(on_date.year, on_date.month, on_date.day, hour, minute)
