# barbershop/scheduler.py
# Client upsert, conflict re-check and insert share one transaction.
# Locks are always taken phone first, then (barber_id, date).
# Failures come back as BookingResponse(success=False), never as exceptions.

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from barbershop import catalog
from barbershop.clients import resolve_client
from barbershop.config import shop_settings
from barbershop.core import local_now
from barbershop.errors import SchedulingError, SlotConflictError, TransientStoreError, ValidationError
from barbershop.ledger import find_conflict, insert_appointment
from barbershop.locks import client_locks, slot_locks
from barbershop.logging_config import get_logger
from barbershop.models import AppointmentService
from barbershop.phone import is_valid_brazilian_phone, phone_digits
from barbershop.schemas import BookingRequest, BookingResponse

logger = get_logger(__name__)


def create_appointment(
    session: Session,
    request: BookingRequest,
    *,
    now: Optional[datetime] = None,
) -> BookingResponse:
    try:
        return _create(session, request, now or local_now())
    except SchedulingError as exc:
        return _rejected(session, request, exc)
    except OperationalError:
        # never retried here: the caller must re-submit
        return _rejected(
            session,
            request,
            TransientStoreError("Could not save the appointment right now, please try again"),
        )


def _rejected(session: Session, request: BookingRequest, exc: SchedulingError) -> BookingResponse:
    session.rollback()
    logger.info(
        "booking_rejected",
        barber_id=request.barber_id,
        starts_at=request.appointment_datetime.isoformat(),
        error_code=exc.code,
        reason=exc.message,
    )
    return BookingResponse(success=False, message=exc.message, error_code=exc.code)


def _validate(request: BookingRequest, starts_at: datetime, now: datetime):
    if not request.client_name or not request.client_name.strip():
        raise ValidationError("Client name is required")
    if not request.client_phone or not request.client_phone.strip():
        raise ValidationError("Client phone is required")
    if not is_valid_brazilian_phone(request.client_phone):
        raise ValidationError("Phone must be in the format (31) 97322-3898")
    if not request.service_ids:
        raise ValidationError("Select at least one service")

    if starts_at.date() < now.date():
        raise ValidationError("Cannot book an appointment in the past")
    if starts_at < now:
        raise ValidationError("That time has already passed")


def _create(session: Session, request: BookingRequest, now: datetime) -> BookingResponse:
    # 1) Validate input shape
    starts_at = request.appointment_datetime.replace(tzinfo=None)
    _validate(request, starts_at, now)
    digits = phone_digits(request.client_phone)
    on_date = starts_at.date()

    # 2) Resolve catalog references
    barber = catalog.bookable_barber(session, request.barber_id)
    services = catalog.resolve_services(session, request.service_ids)
    total_minutes = sum(s.duration_minutes for s in services)
    ends_at = starts_at + timedelta(minutes=total_minutes)

    # 3) Working window
    window = catalog.working_window(session, barber, on_date)
    if window is None:
        raise ValidationError(f"{barber.name} is not working on that day")
    work_start, work_end = window
    if starts_at < work_start or ends_at > work_end:
        raise ValidationError("Appointment must be within working hours")
    # same grid the availability walk uses, counted from opening time
    slot_minutes = shop_settings["slot_minutes"]
    if (starts_at - work_start) % timedelta(minutes=slot_minutes):
        raise ValidationError(f"Start time must be in {slot_minutes}-minute increments")

    # 4) Snapshot price and commission now, before anything is written
    snapshots = [
        AppointmentService(
            service_id=s.id,
            service_name=s.name,
            price_at_booking=s.price,
            duration_at_booking=s.duration_minutes,
            commission_rate_applied=catalog.commission_rate_for(barber, s),
        )
        for s in services
    ]

    timeout = shop_settings["lock_timeout_seconds"]
    client_name = request.client_name.strip()
    with client_locks.hold(digits, timeout), slot_locks.hold((barber.id, on_date), timeout):
        # 5) Client upsert by phone
        client = resolve_client(
            session,
            client_name,
            digits,
            email=request.client_email or None,
            auto_create=request.auto_create_client,
        )

        # 6) Re-check against the ledger as it is now
        if find_conflict(session, barber.id, on_date, starts_at, ends_at):
            raise SlotConflictError("That time slot is no longer available, please choose another")

        # 7) Insert and commit as one unit
        appt = insert_appointment(
            session,
            client_id=client.id,
            barber_id=barber.id,
            on_date=on_date,
            start=starts_at.time(),
            duration_minutes=total_minutes,
            snapshots=snapshots,
            note=request.note,
        )
        session.commit()

    logger.info(
        "appointment_created",
        appointment_id=appt.id,
        client_id=client.id,
        barber_id=barber.id,
        date=on_date.isoformat(),
        start=starts_at.time().isoformat(),
        duration_minutes=total_minutes,
        total_price=str(appt.total_price),
    )
    return BookingResponse(
        success=True,
        appointment_id=appt.id,
        client_id=client.id,
        total_price=appt.total_price,
        duration_minutes=total_minutes,
        message="Appointment booked successfully",
    )
