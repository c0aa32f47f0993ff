# barbershop/routers/appointments_routes.py

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlmodel import Session

from barbershop.db import get_session
from barbershop.errors import STATUS_BY_CODE
from barbershop.ledger import appointment_summary
from barbershop.scheduler import create_appointment
from barbershop.schemas import AppointmentStatus, AppointmentSummary, BookingRequest, BookingResponse, StatusUpdate
from barbershop.status import transition_status

router = APIRouter(
    prefix="/appointments",
    tags=["appointments"],
)


@router.post("", response_model=BookingResponse, status_code=201)
def book_appointment(
    booking: BookingRequest,
    session: Session = Depends(get_session),
):
    result = create_appointment(session, booking)
    if not result.success:
        # same body shape either way, the UI shows `message`
        return JSONResponse(
            status_code=STATUS_BY_CODE.get(result.error_code, 400),
            content=result.model_dump(mode="json"),
        )
    return result


@router.patch("/{appt_id}/status", response_model=AppointmentSummary)
def change_status(
    appt_id: int,
    update: StatusUpdate,
    session: Session = Depends(get_session),
):
    appt = transition_status(session, appt_id, update.status, update.payment_method)
    return appointment_summary(session, appt.id)


@router.patch("/{appt_id}/cancel", response_model=AppointmentSummary)
def cancel_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
):
    appt = transition_status(session, appt_id, AppointmentStatus.cancelled)
    return appointment_summary(session, appt.id)
