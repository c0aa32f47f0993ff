# barbershop/ledger.py

from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlmodel import Session, col, select

from barbershop.config import SEARCH_DEFAULT_LIMIT, SEARCH_MAX_LIMIT
from barbershop.core import interval_for, overlaps
from barbershop.db import read_retry, store_errors
from barbershop.errors import NotFoundError
from barbershop.models import Appointment, AppointmentService, Barber, Client
from barbershop.phone import format_phone, phone_digits
from barbershop.schemas import AppointmentFilters, AppointmentStatus, AppointmentSummary

# cancelled and no_show free the slot for rebooking
BLOCKING_STATUSES = (
    AppointmentStatus.scheduled.value,
    AppointmentStatus.confirmed.value,
    AppointmentStatus.completed.value,
)


def get_appointment(session: Session, appointment_id: int) -> Appointment:
    appt = session.get(Appointment, appointment_id)
    if appt is None:
        raise NotFoundError(f"Appointment {appointment_id} not found")
    return appt


def appointments_for_day(session: Session, barber_id: int, on_date: date) -> List[Appointment]:
    return list(session.exec(
        select(Appointment)
        .where(Appointment.barber_id == barber_id)
        .where(Appointment.appointment_date == on_date)
        .order_by(Appointment.start_time)
    ).all())


def blocking_intervals(
    session: Session,
    barber_id: int,
    on_date: date,
    exclude_id: Optional[int] = None,
) -> List[tuple[datetime, datetime]]:
    intervals = []
    for a in appointments_for_day(session, barber_id, on_date):
        if a.status not in BLOCKING_STATUSES:
            continue
        if exclude_id is not None and a.id == exclude_id:
            continue
        intervals.append(interval_for(on_date, a.start_time, a.duration_minutes))
    return intervals


def find_conflict(
    session: Session,
    barber_id: int,
    on_date: date,
    start: datetime,
    end: datetime,
    exclude_id: Optional[int] = None,
) -> Optional[tuple[datetime, datetime]]:
    for existing_start, existing_end in blocking_intervals(session, barber_id, on_date, exclude_id):
        if overlaps(start, end, existing_start, existing_end):
            return existing_start, existing_end
    return None


def insert_appointment(
    session: Session,
    *,
    client_id: int,
    barber_id: int,
    on_date: date,
    start: time,
    duration_minutes: int,
    snapshots: Sequence[AppointmentService],
    note: Optional[str] = None,
) -> Appointment:
    """Add the appointment and its link rows to the session. Caller commits."""
    _, end = interval_for(on_date, start, duration_minutes)
    total = sum((s.price_at_booking for s in snapshots), Decimal("0"))

    appt = Appointment(
        client_id=client_id,
        barber_id=barber_id,
        appointment_date=on_date,
        start_time=start,
        end_time=end.time(),
        duration_minutes=duration_minutes,
        status=AppointmentStatus.scheduled.value,
        total_price=total,
        note=note,
    )
    session.add(appt)
    session.flush()  # fills appt.id

    for position, link in enumerate(snapshots):
        link.appointment_id = appt.id
        link.position = position
        session.add(link)
    return appt


def _summaries(session: Session, rows) -> List[AppointmentSummary]:
    ids = [appt.id for appt, _, _ in rows]
    links_by_appt: dict[int, list[AppointmentService]] = {i: [] for i in ids}
    if ids:
        links = session.exec(
            select(AppointmentService)
            .where(col(AppointmentService.appointment_id).in_(ids))
            .order_by(AppointmentService.appointment_id, AppointmentService.position)
        ).all()
        for link in links:
            links_by_appt[link.appointment_id].append(link)

    summaries = []
    for appt, client, barber in rows:
        links = links_by_appt[appt.id]
        summaries.append(AppointmentSummary(
            id=appt.id,
            client_id=client.id,
            client_name=client.name,
            client_phone=format_phone(client.phone),
            barber_id=barber.id,
            barber_name=barber.name,
            appointment_date=appt.appointment_date,
            appointment_time=appt.start_time,
            appointment_datetime=datetime.combine(appt.appointment_date, appt.start_time),
            end_time=appt.end_time,
            duration_minutes=appt.duration_minutes,
            services_ids=[link.service_id for link in links],
            services_names=", ".join(link.service_name for link in links),
            status=appt.status,
            total_price=appt.total_price,
            note=appt.note,
            payment_method=appt.payment_method,
            created_at=appt.created_at,
        ))
    return summaries


def _joined():
    return (
        select(Appointment, Client, Barber)
        .join(Client, Client.id == Appointment.client_id)
        .join(Barber, Barber.id == Appointment.barber_id)
    )


@read_retry
def search_appointments(session: Session, filters: AppointmentFilters) -> List[AppointmentSummary]:
    stmt = _joined()

    if filters.start_date is not None:
        stmt = stmt.where(Appointment.appointment_date >= filters.start_date)
    if filters.end_date is not None:
        stmt = stmt.where(Appointment.appointment_date <= filters.end_date)
    if filters.client_name:
        stmt = stmt.where(col(Client.name).ilike(f"%{filters.client_name.strip()}%"))
    if filters.client_phone:
        digits = phone_digits(filters.client_phone)
        if digits:
            stmt = stmt.where(col(Client.phone).contains(digits))
    if filters.barber_name:
        stmt = stmt.where(col(Barber.name).ilike(f"%{filters.barber_name.strip()}%"))
    if filters.service_name:
        matching = (
            select(AppointmentService.appointment_id)
            .where(col(AppointmentService.service_name).ilike(f"%{filters.service_name.strip()}%"))
        )
        stmt = stmt.where(col(Appointment.id).in_(matching))
    if filters.status is not None:
        stmt = stmt.where(Appointment.status == filters.status.value)

    limit = min(filters.limit or SEARCH_DEFAULT_LIMIT, SEARCH_MAX_LIMIT)
    stmt = stmt.order_by(Appointment.appointment_date, Appointment.start_time, Appointment.id).limit(limit)

    with store_errors(session, "appointment search"):
        rows = session.exec(stmt).all()
        return _summaries(session, rows)


@read_retry
def barber_agenda(session: Session, barber_id: int, on_date: date) -> List[AppointmentSummary]:
    stmt = (
        _joined()
        .where(Appointment.barber_id == barber_id)
        .where(Appointment.appointment_date == on_date)
        .order_by(Appointment.start_time, Appointment.id)
    )
    with store_errors(session, "barber agenda"):
        rows = session.exec(stmt).all()
        return _summaries(session, rows)


def appointment_summary(session: Session, appointment_id: int) -> AppointmentSummary:
    rows = session.exec(_joined().where(Appointment.id == appointment_id)).all()
    if not rows:
        raise NotFoundError(f"Appointment {appointment_id} not found")
    return _summaries(session, rows)[0]
