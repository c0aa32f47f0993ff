# barbershop/status.py
#
#   scheduled -> confirmed -> completed
#   scheduled | confirmed -> cancelled | no_show
#
# completed, cancelled and no_show are terminal. override_status is the admin
# path that may set any status, but never reactivates into a taken slot.

from typing import Optional

from sqlmodel import Session

from barbershop.config import shop_settings
from barbershop.core import interval_for, utc_now
from barbershop.errors import SlotConflictError, ValidationError
from barbershop.ledger import BLOCKING_STATUSES, find_conflict, get_appointment
from barbershop.locks import slot_locks
from barbershop.logging_config import get_logger
from barbershop.models import Appointment
from barbershop.schemas import AppointmentStatus, PaymentMethod

logger = get_logger(__name__)

S = AppointmentStatus

TRANSITIONS = {
    S.scheduled: {S.confirmed, S.cancelled, S.no_show},
    S.confirmed: {S.completed, S.cancelled, S.no_show},
    S.completed: set(),
    S.cancelled: set(),
    S.no_show: set(),
}

TERMINAL = frozenset(status for status, targets in TRANSITIONS.items() if not targets)


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return target in TRANSITIONS[current]


def _apply(
    session: Session,
    appt: Appointment,
    new_status: AppointmentStatus,
    payment_method: Optional[PaymentMethod],
    actor: str,
    actor_id: Optional[str] = None,
) -> Appointment:
    previous = appt.status
    appt.status = new_status.value
    if payment_method is not None:
        appt.payment_method = payment_method.value
    appt.updated_at = utc_now()
    session.add(appt)
    session.commit()
    session.refresh(appt)
    logger.info(
        "status_changed",
        appointment_id=appt.id,
        previous=previous,
        status=appt.status,
        actor=actor,
        actor_id=actor_id,
    )
    return appt


def transition_status(
    session: Session,
    appointment_id: int,
    new_status: AppointmentStatus,
    payment_method: Optional[PaymentMethod] = None,
) -> Appointment:
    appt = get_appointment(session, appointment_id)
    current = AppointmentStatus(appt.status)

    if current == new_status:
        raise ValidationError(f"Appointment is already {current.value}")
    if current in TERMINAL:
        raise ValidationError(f"Appointment is {current.value} and can no longer change")
    if not can_transition(current, new_status):
        raise ValidationError(f"Cannot change status from {current.value} to {new_status.value}")
    if payment_method is not None and new_status != S.completed:
        raise ValidationError("payment_method can only be set when completing an appointment")

    return _apply(session, appt, new_status, payment_method, actor="lifecycle")


def override_status(
    session: Session,
    appointment_id: int,
    new_status: AppointmentStatus,
    payment_method: Optional[PaymentMethod] = None,
    actor_id: Optional[str] = None,
) -> Appointment:
    """Admin escape hatch: set any status, bypassing the lifecycle table."""
    appt = get_appointment(session, appointment_id)

    reactivating = appt.status not in BLOCKING_STATUSES and new_status.value in BLOCKING_STATUSES
    if not reactivating:
        return _apply(session, appt, new_status, payment_method, actor="admin", actor_id=actor_id)

    key = (appt.barber_id, appt.appointment_date)
    with slot_locks.hold(key, timeout=shop_settings["lock_timeout_seconds"]):
        start, end = interval_for(appt.appointment_date, appt.start_time, appt.duration_minutes)
        if find_conflict(session, appt.barber_id, appt.appointment_date, start, end, exclude_id=appt.id):
            session.rollback()
            raise SlotConflictError("That time slot has been booked by another appointment")
        return _apply(session, appt, new_status, payment_method, actor="admin", actor_id=actor_id)
