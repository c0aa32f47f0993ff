# barbershop/catalog.py
# Barbers, services and working hours. Admin writes never touch booked snapshots.

from datetime import date, datetime
from typing import Iterable, List, Optional

from sqlmodel import Session, select

from barbershop.config import shop_settings
from barbershop.core import parse_hhmm, utc_now
from barbershop.errors import NotFoundError, ValidationError
from barbershop.logging_config import get_logger
from barbershop.models import Barber, BarberSchedule, Service
from barbershop.schemas import (
    BarberCreate,
    CommissionUpdate,
    ServiceCreate,
    ServiceUpdate,
    WorkingDay,
)

logger = get_logger(__name__)


def get_barbers(session: Session, active_only: bool = True) -> List[Barber]:
    stmt = select(Barber)
    if active_only:
        stmt = stmt.where(Barber.active == True)  # noqa: E712
    return list(session.exec(stmt.order_by(Barber.name)).all())


def get_services(session: Session) -> List[Service]:
    return list(session.exec(select(Service).order_by(Service.name)).all())


def get_barber(session: Session, barber_id: int) -> Barber:
    barber = session.get(Barber, barber_id)
    if barber is None:
        raise NotFoundError(f"Barber {barber_id} not found")
    return barber


def bookable_barber(session: Session, barber_id: int) -> Barber:
    barber = get_barber(session, barber_id)
    if not barber.active:
        raise ValidationError(f"{barber.name} is not taking appointments")
    return barber


def get_service(session: Session, service_id: int) -> Service:
    service = session.get(Service, service_id)
    if service is None:
        raise NotFoundError(f"Service {service_id} not found")
    return service


def resolve_services(session: Session, service_ids: Iterable[int]) -> List[Service]:
    """Load services in the order requested, collapsing repeated ids."""
    ordered_ids = list(dict.fromkeys(service_ids or []))
    if not ordered_ids:
        raise ValidationError("Select at least one service")

    found = session.exec(select(Service).where(Service.id.in_(ordered_ids))).all()
    by_id = {s.id: s for s in found}
    missing = [sid for sid in ordered_ids if sid not in by_id]
    if missing:
        raise NotFoundError(f"Service(s) not found: {', '.join(str(m) for m in missing)}")
    return [by_id[sid] for sid in ordered_ids]


def commission_rate_for(barber: Barber, service: Service) -> float:
    # chemical services pay the chemical tier, everything else the service tier
    if service.is_chemical:
        return barber.commission_rate_chemical_service
    return barber.commission_rate_service


def working_window(session: Session, barber: Barber, on_date: date) -> Optional[tuple[datetime, datetime]]:
    """Open/close datetimes for the barber on that date, or None on a day off."""
    weekday = on_date.weekday()
    rows = session.exec(
        select(BarberSchedule).where(BarberSchedule.barber_id == barber.id)
    ).all()

    if rows:
        for row in rows:
            if row.weekday == weekday:
                return datetime.combine(on_date, row.day_start), datetime.combine(on_date, row.day_end)
        return None

    if weekday not in shop_settings["working_days"]:
        return None
    day_start = parse_hhmm(shop_settings["day_start"])
    day_end = parse_hhmm(shop_settings["day_end"])
    return datetime.combine(on_date, day_start), datetime.combine(on_date, day_end)


# Admin writes

def create_barber(session: Session, data: BarberCreate) -> Barber:
    barber = Barber(**data.model_dump())
    session.add(barber)
    session.commit()
    session.refresh(barber)
    logger.info("barber_created", barber_id=barber.id, name=barber.name)
    return barber


def set_barber_active(session: Session, barber_id: int, active: bool) -> Barber:
    barber = get_barber(session, barber_id)
    barber.active = active
    barber.updated_at = utc_now()
    session.add(barber)
    session.commit()
    session.refresh(barber)
    logger.info("barber_active_changed", barber_id=barber.id, active=active)
    return barber


def update_commission(session: Session, barber_id: int, data: CommissionUpdate) -> Barber:
    barber = get_barber(session, barber_id)
    for field, value in data.model_dump(exclude_none=True).items():
        setattr(barber, field, value)
    barber.updated_at = utc_now()
    session.add(barber)
    session.commit()
    session.refresh(barber)
    logger.info(
        "commission_updated",
        barber_id=barber.id,
        service=barber.commission_rate_service,
        product=barber.commission_rate_product,
        chemical=barber.commission_rate_chemical_service,
    )
    return barber


def set_working_hours(session: Session, barber_id: int, days: List[WorkingDay]) -> List[BarberSchedule]:
    """Replace the barber's weekly hours. An empty list restores the shop default."""
    barber = get_barber(session, barber_id)

    weekdays = [d.weekday for d in days]
    for weekday in weekdays:
        if not (0 <= weekday <= 6):
            raise ValidationError("weekday must be an integer between 0 and 6")
    if len(weekdays) != len(set(weekdays)):
        raise ValidationError("weekdays cannot contain duplicates")
    for d in days:
        if d.day_start >= d.day_end:
            raise ValidationError("day_start must be before day_end")

    existing = session.exec(
        select(BarberSchedule).where(BarberSchedule.barber_id == barber.id)
    ).all()
    for row in existing:
        session.delete(row)
    session.flush()

    rows = [
        BarberSchedule(barber_id=barber.id, weekday=d.weekday, day_start=d.day_start, day_end=d.day_end)
        for d in sorted(days, key=lambda d: d.weekday)
    ]
    session.add_all(rows)
    session.commit()
    logger.info("working_hours_set", barber_id=barber.id, weekdays=sorted(weekdays))
    return rows


def create_service(session: Session, data: ServiceCreate) -> Service:
    service = Service(**data.model_dump())
    session.add(service)
    session.commit()
    session.refresh(service)
    logger.info("service_created", service_id=service.id, name=service.name)
    return service


def update_service(session: Session, service_id: int, data: ServiceUpdate) -> Service:
    service = get_service(session, service_id)
    for field, value in data.model_dump(exclude_none=True).items():
        setattr(service, field, value)
    service.updated_at = utc_now()
    session.add(service)
    session.commit()
    session.refresh(service)
    logger.info("service_updated", service_id=service.id)
    return service
