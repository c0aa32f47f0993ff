# barbershop/core.py

from datetime import date, datetime, time, timedelta, timezone


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    # half-open intervals: [a_start, a_end) and [b_start, b_end)
    return start_a < end_b and start_b < end_a


def parse_hhmm(value: str) -> time:
    return datetime.strptime(value.strip(), "%H:%M").time()


def interval_for(on_date: date, start: time, duration_minutes: int) -> tuple[datetime, datetime]:
    start_dt = datetime.combine(on_date, start)
    return start_dt, start_dt + timedelta(minutes=duration_minutes)


def local_now() -> datetime:
    # naive local time, same clock the shop works on
    return datetime.now()


def utc_now() -> datetime:
    # audit timestamps only; appointment times stay on the shop clock
    return datetime.now(timezone.utc)
