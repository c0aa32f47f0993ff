# barbershop/clients.py

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from barbershop.core import utc_now
from barbershop.errors import NotFoundError
from barbershop.logging_config import get_logger
from barbershop.models import Client

logger = get_logger(__name__)


def find_by_phone(session: Session, digits: str) -> Optional[Client]:
    return session.exec(select(Client).where(Client.phone == digits)).first()


def resolve_client(
    session: Session,
    name: str,
    digits: str,
    email: Optional[str] = None,
    auto_create: bool = True,
) -> Client:
    """
    Find the client owning ``digits`` or create it (upsert by phone).

    Must run as the first write of the caller's transaction while holding the
    phone's lock. The UNIQUE constraint on ``Client.phone`` catches writers in
    other processes; on a collision the insert is rolled back and the row the
    other writer created is returned.
    """
    client = find_by_phone(session, digits)
    if client is not None:
        if email and not client.email:
            client.email = email
            client.updated_at = utc_now()
            session.add(client)
        return client

    if not auto_create:
        raise NotFoundError("No client registered with that phone")

    client = Client(name=name, phone=digits, email=email)
    session.add(client)
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        client = find_by_phone(session, digits)
        if client is None:
            raise
        logger.info("client_upsert_collision", client_id=client.id)
        return client

    logger.info("client_created", client_id=client.id)
    return client
