# barbershop/data.py

from decimal import Decimal

from sqlmodel import Session, select

from barbershop.logging_config import get_logger
from barbershop.models import Barber, Service

logger = get_logger(__name__)

# name: (price, minutes, chemical)
SERVICES = {
    "Corte": (Decimal("45.00"), 30, False),
    "Barba": (Decimal("35.00"), 20, False),
    "Corte + Barba": (Decimal("70.00"), 50, False),
    "Pezinho": (Decimal("15.00"), 15, False),
    "Sobrancelha": (Decimal("15.00"), 15, False),
    "Luzes": (Decimal("120.00"), 90, True),
    "Progressiva": (Decimal("150.00"), 120, True),
}

BARBERS = [
    {
        "name": "Roberto",
        "commission_rate_service": 0.5,
        "commission_rate_product": 0.1,
        "commission_rate_chemical_service": 0.4,
    },
]


def seed_catalog(session: Session) -> bool:
    """Insert the starter catalog into an empty database. Returns True if seeded."""
    if session.exec(select(Service)).first() is not None:
        return False

    for name, (price, minutes, chemical) in SERVICES.items():
        session.add(Service(name=name, price=price, duration_minutes=minutes, is_chemical=chemical))
    for barber in BARBERS:
        session.add(Barber(**barber))
    session.commit()

    logger.info("catalog_seeded", services=len(SERVICES), barbers=len(BARBERS))
    return True
