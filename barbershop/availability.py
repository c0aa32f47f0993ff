# barbershop/availability.py

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from sqlmodel import Session

from barbershop.catalog import bookable_barber, resolve_services, working_window
from barbershop.config import shop_settings
from barbershop.core import local_now, overlaps
from barbershop.db import read_retry, store_errors
from barbershop.errors import ValidationError
from barbershop.ledger import blocking_intervals
from barbershop.schemas import TimeSlot


@read_retry
def compute_available_slots(
    session: Session,
    barber_id: int,
    on_date: date,
    service_ids: Iterable[int],
    *,
    now: Optional[datetime] = None,
    slot_minutes: Optional[int] = None,
) -> List[TimeSlot]:
    """
    Candidate start times for booking ``service_ids`` with a barber on a date.

    Every candidate that still finishes by closing time is returned, tagged
    ``available=False`` when it overlaps an existing booking (or has already
    started, for today). A day off or a window too short gives ``[]``.
    """
    now = now or local_now()
    if on_date < now.date():
        raise ValidationError("Cannot check availability for a past date")

    slot_minutes = slot_minutes or shop_settings["slot_minutes"]
    if slot_minutes <= 0:
        raise ValidationError("slot_minutes must be positive")

    with store_errors(session, "availability lookup"):
        # 1) Resolve barber and services
        barber = bookable_barber(session, barber_id)
        services = resolve_services(session, service_ids)
        total_minutes = sum(s.duration_minutes for s in services)
        total_delta = timedelta(minutes=total_minutes)

        # 2) Working window for that weekday
        window = working_window(session, barber, on_date)
        if window is None:
            return []
        work_start, work_end = window

        # 3) Existing bookings that hold their slot
        booked = blocking_intervals(session, barber.id, on_date)

    # 4) Walk the grid; only starts that finish by closing time are candidates
    slots = []
    slot_delta = timedelta(minutes=slot_minutes)
    current = work_start
    while current + total_delta <= work_end:
        slot_start = current
        slot_end = current + total_delta

        available = slot_start >= now
        if available:
            for existing_start, existing_end in booked:
                if overlaps(slot_start, slot_end, existing_start, existing_end):
                    available = False
                    break

        slots.append(TimeSlot(
            time_slot=slot_start.time(),
            available=available,
            duration_minutes=total_minutes,
        ))
        current += slot_delta

    return slots
