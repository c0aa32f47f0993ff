# barbershop/routers/admin_routes.py

from datetime import date
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from barbershop import catalog
from barbershop.db import get_session
from barbershop.deps import get_current_user, require_role
from barbershop.ledger import appointment_summary, barber_agenda, search_appointments
from barbershop.reporting import dashboard_stats
from barbershop.schemas import (
    AppointmentFilters,
    AppointmentSummary,
    BarberActiveUpdate,
    BarberCreate,
    BarberPublic,
    CommissionUpdate,
    DashboardStats,
    ServiceCreate,
    ServicePublic,
    ServiceUpdate,
    StatusUpdate,
    UserRole,
    WorkingDay,
    WorkingHours,
)
from barbershop.status import override_status


def admin_only(current_user: dict = Depends(get_current_user)) -> dict:
    require_role(current_user, UserRole.admin)
    return current_user


router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(admin_only)],
)


@router.get("/dashboard", response_model=DashboardStats)
def get_dashboard(session: Session = Depends(get_session)):
    return dashboard_stats(session)


@router.get("/appointments", response_model=List[AppointmentSummary])
def list_appointments(
    filters: Annotated[AppointmentFilters, Query()],
    session: Session = Depends(get_session),
):
    return search_appointments(session, filters)


@router.put("/appointments/{appt_id}/status", response_model=AppointmentSummary)
def set_appointment_status(
    appt_id: int,
    update: StatusUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(admin_only),
):
    appt = override_status(
        session, appt_id, update.status, update.payment_method, actor_id=current_user["id"]
    )
    return appointment_summary(session, appt.id)


@router.get("/barbers/{barber_id}/agenda", response_model=List[AppointmentSummary])
def get_barber_agenda(
    barber_id: int,
    on_date: date = Query(alias="date"),
    session: Session = Depends(get_session),
):
    catalog.get_barber(session, barber_id)
    return barber_agenda(session, barber_id, on_date)


@router.post("/barbers", response_model=BarberPublic, status_code=201)
def create_barber(barber: BarberCreate, session: Session = Depends(get_session)):
    return catalog.create_barber(session, barber)


@router.patch("/barbers/{barber_id}/commission", response_model=BarberPublic)
def update_commission(
    barber_id: int,
    rates: CommissionUpdate,
    session: Session = Depends(get_session),
):
    return catalog.update_commission(session, barber_id, rates)


@router.patch("/barbers/{barber_id}/active", response_model=BarberPublic)
def set_barber_active(
    barber_id: int,
    update: BarberActiveUpdate,
    session: Session = Depends(get_session),
):
    return catalog.set_barber_active(session, barber_id, update.active)


@router.put("/barbers/{barber_id}/working-hours", response_model=WorkingHours)
def set_working_hours(
    barber_id: int,
    hours: WorkingHours,
    session: Session = Depends(get_session),
):
    rows = catalog.set_working_hours(session, barber_id, hours.days)
    return WorkingHours(days=[
        WorkingDay(weekday=row.weekday, day_start=row.day_start, day_end=row.day_end)
        for row in rows
    ])


@router.post("/services", response_model=ServicePublic, status_code=201)
def create_service(service: ServiceCreate, session: Session = Depends(get_session)):
    return catalog.create_service(session, service)


@router.patch("/services/{service_id}", response_model=ServicePublic)
def update_service(
    service_id: int,
    changes: ServiceUpdate,
    session: Session = Depends(get_session),
):
    return catalog.update_service(session, service_id, changes)
