# barbershop/schemas.py

from datetime import datetime, date, time
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class AppointmentStatus(str, Enum):
    scheduled = "scheduled"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no_show"


class PaymentMethod(str, Enum):
    money = "money"
    pix = "pix"
    credit_card = "credit_card"
    debit_card = "debit_card"


class UserRole(str, Enum):
    admin = "admin"


# Catalog

class BarberPublic(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    commission_rate_service: float
    commission_rate_product: float
    commission_rate_chemical_service: float
    active: bool


class BarberCreate(BaseModel):
    name: str = Field(min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    commission_rate_service: float = Field(default=0.0, ge=0, le=1)
    commission_rate_product: float = Field(default=0.0, ge=0, le=1)
    commission_rate_chemical_service: float = Field(default=0.0, ge=0, le=1)


class CommissionUpdate(BaseModel):
    commission_rate_service: Optional[float] = Field(default=None, ge=0, le=1)
    commission_rate_product: Optional[float] = Field(default=None, ge=0, le=1)
    commission_rate_chemical_service: Optional[float] = Field(default=None, ge=0, le=1)


class BarberActiveUpdate(BaseModel):
    active: bool


class WorkingDay(BaseModel):
    weekday: int    # 0=Mon, 1=Tues....
    day_start: time
    day_end: time


class WorkingHours(BaseModel):
    days: List[WorkingDay]


class ServicePublic(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    duration_minutes: int
    is_chemical: bool


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: Decimal = Field(ge=0)
    duration_minutes: int = Field(gt=0)
    is_chemical: bool = False


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    is_chemical: Optional[bool] = None


# Availability

class TimeSlot(BaseModel):
    time_slot: time
    available: bool
    duration_minutes: int


# Booking

class BookingRequest(BaseModel):
    client_name: str
    client_phone: str
    client_email: Optional[str] = None
    barber_id: int
    appointment_datetime: datetime
    service_ids: List[int]
    note: Optional[str] = None
    auto_create_client: bool = True


class BookingResponse(BaseModel):
    success: bool
    appointment_id: Optional[int] = None
    client_id: Optional[int] = None
    total_price: Optional[Decimal] = None
    duration_minutes: Optional[int] = None
    message: str
    error_code: Optional[str] = None


# Ledger

class StatusUpdate(BaseModel):
    status: AppointmentStatus
    payment_method: Optional[PaymentMethod] = None


class AppointmentFilters(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    barber_name: Optional[str] = None
    service_name: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    limit: Optional[int] = Field(default=None, gt=0)

    @field_validator("client_name", "client_phone", "barber_name", "service_name")
    @classmethod
    def blank_is_none(cls, value):
        if value is not None and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def check_range(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date cannot be after end_date")
        return self


class AppointmentSummary(BaseModel):
    id: int
    client_id: int
    client_name: str
    client_phone: str
    barber_id: int
    barber_name: str
    appointment_date: date
    appointment_time: time
    appointment_datetime: datetime
    end_time: time
    duration_minutes: int
    services_ids: List[int]
    services_names: str
    status: AppointmentStatus
    total_price: Decimal
    note: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    created_at: datetime


# Reporting

class DashboardStats(BaseModel):
    appointments_today: int
    scheduled_today: int
    completed_today: int
    revenue_today: Decimal
    appointments_month: int
    revenue_month: Decimal
    total_clients: int
    active_barbers: int
