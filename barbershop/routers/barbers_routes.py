# barbershop/routers/barbers_routes.py

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from barbershop import catalog
from barbershop.availability import compute_available_slots
from barbershop.db import get_session
from barbershop.schemas import BarberPublic, ServicePublic, TimeSlot

router = APIRouter(
    tags=["catalog"],
)


@router.get("/barbers", response_model=List[BarberPublic])
def list_barbers(session: Session = Depends(get_session)):
    return catalog.get_barbers(session)


@router.get("/services", response_model=List[ServicePublic])
def list_services(session: Session = Depends(get_session)):
    return catalog.get_services(session)


@router.get("/barbers/{barber_id}/availability", response_model=List[TimeSlot])
def barber_availability(
    barber_id: int,
    on_date: date = Query(alias="date"),
    service_ids: List[int] = Query(default=[]),
    session: Session = Depends(get_session),
):
    return compute_available_slots(session, barber_id, on_date, service_ids)
