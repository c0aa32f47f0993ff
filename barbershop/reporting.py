# barbershop/reporting.py

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from barbershop.core import local_now
from barbershop.db import read_retry, store_errors
from barbershop.models import Appointment, Barber
from barbershop.schemas import AppointmentStatus, DashboardStats

CANCELLED = AppointmentStatus.cancelled.value
COMPLETED = AppointmentStatus.completed.value
SCHEDULED = AppointmentStatus.scheduled.value


def _count(session: Session, *conditions) -> int:
    stmt = select(func.count()).select_from(Appointment)
    for condition in conditions:
        stmt = stmt.where(condition)
    return session.exec(stmt).one()


def _revenue(session: Session, *conditions) -> Decimal:
    stmt = select(func.coalesce(func.sum(Appointment.total_price), 0))
    for condition in conditions:
        stmt = stmt.where(condition)
    return Decimal(str(session.exec(stmt).one())).quantize(Decimal("0.01"))


@read_retry
def dashboard_stats(session: Session, *, today: Optional[date] = None) -> DashboardStats:
    """
    Headline numbers for the admin dashboard.

    Appointment counts leave out cancelled bookings; revenue only counts
    completed ones.
    """
    today = today or local_now().date()
    month_start = today.replace(day=1)
    if month_start.month == 12:
        next_month = month_start.replace(year=month_start.year + 1, month=1)
    else:
        next_month = month_start.replace(month=month_start.month + 1)

    is_today = Appointment.appointment_date == today
    in_month = (Appointment.appointment_date >= month_start) & (Appointment.appointment_date < next_month)

    with store_errors(session, "dashboard stats"):
        return DashboardStats(
            appointments_today=_count(session, is_today, Appointment.status != CANCELLED),
            scheduled_today=_count(session, is_today, Appointment.status == SCHEDULED),
            completed_today=_count(session, is_today, Appointment.status == COMPLETED),
            revenue_today=_revenue(session, is_today, Appointment.status == COMPLETED),
            appointments_month=_count(session, in_month, Appointment.status != CANCELLED),
            revenue_month=_revenue(session, in_month, Appointment.status == COMPLETED),
            total_clients=session.exec(select(func.count(func.distinct(Appointment.client_id)))).one(),
            active_barbers=session.exec(
                select(func.count()).select_from(Barber).where(Barber.active == True)  # noqa: E712
            ).one(),
        )
