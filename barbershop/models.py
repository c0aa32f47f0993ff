# barbershop/models.py

from datetime import datetime, date as Date, time
from decimal import Decimal
from typing import Optional

from sqlalchemy import Index
from sqlmodel import SQLModel, Field

from barbershop.core import utc_now


class Barber(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    phone: Optional[str] = None
    email: Optional[str] = None

    # fractions in [0, 1]
    commission_rate_service: float = 0.0
    commission_rate_product: float = 0.0
    commission_rate_chemical_service: float = 0.0

    active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class BarberSchedule(SQLModel, table=True):
    # one row per working weekday; no rows at all means the shop default
    barber_id: int = Field(foreign_key="barber.id", primary_key=True)
    weekday: int = Field(primary_key=True)  # 0=Mon ... 6=Sun
    day_start: time
    day_end: time


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    description: Optional[str] = None
    price: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    duration_minutes: int
    is_chemical: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Client(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    phone: str = Field(index=True, unique=True)  # 11 bare digits
    email: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Appointment(SQLModel, table=True):
    __table_args__ = (
        Index("ix_appointment_barber_date", "barber_id", "appointment_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    client_id: int = Field(foreign_key="client.id", index=True)
    barber_id: int = Field(foreign_key="barber.id")
    appointment_date: Date = Field(index=True)
    start_time: time
    end_time: time
    duration_minutes: int
    status: str = "scheduled"
    total_price: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    note: Optional[str] = None
    payment_method: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class AppointmentService(SQLModel, table=True):
    # catalog values copied at booking time; later catalog edits never reach here
    appointment_id: int = Field(foreign_key="appointment.id", primary_key=True)
    service_id: int = Field(foreign_key="service.id", primary_key=True)
    position: int = 0
    service_name: str
    price_at_booking: Decimal = Field(max_digits=10, decimal_places=2)
    duration_at_booking: int
    commission_rate_applied: float
