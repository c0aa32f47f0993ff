"""Tests for the availability calculator."""
from datetime import date, datetime, time, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from barbershop import availability, catalog
from barbershop.availability import compute_available_slots
from barbershop.errors import NotFoundError, TransientStoreError, ValidationError
from barbershop.models import Barber
from barbershop.scheduler import create_appointment
from barbershop.schemas import AppointmentStatus
from barbershop.status import transition_status
from conftest import MONDAY, NOW, at


def by_time(slots):
    return {s.time_slot: s for s in slots}


class TestRobertoScenario:
    """Corte (30) + Barba (20) = 50 min, open 08:00-21:00, nothing booked."""

    def test_first_slot_is_opening_time(self, session, shop):
        slots = compute_available_slots(session, shop.barber_id, MONDAY, [shop.corte_id, shop.barba_id], now=NOW)
        assert slots[0].time_slot == time(8, 0)
        assert slots[0].available is True
        assert slots[0].duration_minutes == 50

    def test_slots_that_overrun_closing_are_not_returned(self, session, shop):
        slots = compute_available_slots(session, shop.barber_id, MONDAY, [shop.corte_id, shop.barba_id], now=NOW)
        times = [s.time_slot for s in slots]
        assert time(20, 40) not in times
        assert time(20, 15) not in times
        assert times[-1] == time(20, 0)
        assert len(slots) == 49

    def test_twenty_minute_grid_still_excludes_2040(self, session, shop):
        slots = compute_available_slots(
            session, shop.barber_id, MONDAY, [shop.corte_id, shop.barba_id], now=NOW, slot_minutes=20
        )
        times = [s.time_slot for s in slots]
        assert time(20, 0) in times
        assert time(20, 20) not in times
        assert time(20, 40) not in times


class TestClosingTimeProperty:
    @pytest.mark.parametrize("service_keys", [
        ("corte",), ("barba",), ("luzes",), ("corte", "barba"), ("corte", "barba", "luzes"),
    ])
    @pytest.mark.parametrize("slot_minutes", [10, 15, 30])
    def test_every_slot_ends_by_closing(self, session, shop, service_keys, slot_minutes):
        durations = {"corte": 30, "barba": 20, "luzes": 90}
        ids = [getattr(shop, f"{key}_id") for key in service_keys]
        total = sum(durations[key] for key in service_keys)

        slots = compute_available_slots(session, shop.barber_id, MONDAY, ids, now=NOW, slot_minutes=slot_minutes)

        closing = datetime.combine(MONDAY, time(21, 0))
        assert slots
        for slot in slots:
            assert datetime.combine(MONDAY, slot.time_slot) + timedelta(minutes=total) <= closing
            assert slot.duration_minutes == total
        assert [s.time_slot for s in slots] == sorted(s.time_slot for s in slots)


class TestBookedSlots:
    def test_booking_marks_overlapping_starts_unavailable(self, session, shop, make_booking):
        result = create_appointment(session, make_booking(), now=NOW)
        assert result.success

        slots = by_time(compute_available_slots(
            session, shop.barber_id, MONDAY, [shop.corte_id, shop.barba_id], now=NOW
        ))

        for blocked in [time(9, 15), time(9, 30), time(9, 45), time(10, 0), time(10, 15), time(10, 30), time(10, 45)]:
            assert slots[blocked].available is False, blocked
        assert slots[time(9, 0)].available is True
        assert slots[time(11, 0)].available is True

    def test_cancelled_booking_frees_slot(self, session, shop, make_booking):
        result = create_appointment(session, make_booking(), now=NOW)
        transition_status(session, result.appointment_id, AppointmentStatus.cancelled)

        slots = by_time(compute_available_slots(session, shop.barber_id, MONDAY, [shop.corte_id], now=NOW))
        assert slots[time(10, 0)].available is True

    def test_other_barbers_bookings_ignored(self, session, shop, make_booking):
        other = Barber(name="Carlos")
        session.add(other)
        session.commit()
        create_appointment(session, make_booking(barber_id=other.id), now=NOW)

        slots = by_time(compute_available_slots(session, shop.barber_id, MONDAY, [shop.corte_id], now=NOW))
        assert slots[time(10, 0)].available is True

    def test_idempotent_without_writes(self, session, shop, make_booking):
        create_appointment(session, make_booking(), now=NOW)
        ids = [shop.corte_id, shop.barba_id]

        first = compute_available_slots(session, shop.barber_id, MONDAY, ids, now=NOW)
        second = compute_available_slots(session, shop.barber_id, MONDAY, ids, now=NOW)
        assert first == second


class TestEdgeCases:
    def test_past_date_rejected(self, session, shop):
        with pytest.raises(ValidationError):
            compute_available_slots(session, shop.barber_id, date(2025, 2, 28), [shop.corte_id], now=NOW)

    def test_empty_services_rejected(self, session, shop):
        with pytest.raises(ValidationError):
            compute_available_slots(session, shop.barber_id, MONDAY, [], now=NOW)

    def test_unknown_barber(self, session, shop):
        with pytest.raises(NotFoundError):
            compute_available_slots(session, 999, MONDAY, [shop.corte_id], now=NOW)

    def test_unknown_service(self, session, shop):
        with pytest.raises(NotFoundError):
            compute_available_slots(session, shop.barber_id, MONDAY, [999], now=NOW)

    def test_inactive_barber_rejected(self, session, shop):
        catalog.set_barber_active(session, shop.barber_id, False)
        with pytest.raises(ValidationError):
            compute_available_slots(session, shop.barber_id, MONDAY, [shop.corte_id], now=NOW)

    def test_day_off_is_empty(self, session, shop):
        sunday = date(2025, 3, 9)
        assert compute_available_slots(session, shop.barber_id, sunday, [shop.corte_id], now=NOW) == []

    def test_services_longer_than_window_is_empty(self, session, shop, monkeypatch):
        from barbershop.config import shop_settings
        monkeypatch.setitem(shop_settings, "day_end", "09:00")
        assert compute_available_slots(session, shop.barber_id, MONDAY, [shop.luzes_id], now=NOW) == []

    def test_today_past_starts_unavailable(self, session, shop):
        now = at(MONDAY, 12, 5)
        slots = by_time(compute_available_slots(session, shop.barber_id, MONDAY, [shop.corte_id], now=now))
        assert slots[time(12, 0)].available is False
        assert slots[time(12, 15)].available is True


class TestTransientRetry:
    def test_read_retried_after_store_error(self, session, shop, monkeypatch):
        real = availability.blocking_intervals
        calls = []

        def flaky(*args, **kwargs):
            calls.append(1)
            if len(calls) == 1:
                raise OperationalError("SELECT", {}, Exception("database is locked"))
            return real(*args, **kwargs)

        monkeypatch.setattr(availability, "blocking_intervals", flaky)
        slots = compute_available_slots(session, shop.barber_id, MONDAY, [shop.corte_id], now=NOW)

        assert len(calls) == 2
        assert slots[0].time_slot == time(8, 0)

    def test_gives_up_after_bounded_attempts(self, session, shop, monkeypatch):
        calls = []

        def broken(*args, **kwargs):
            calls.append(1)
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(availability, "blocking_intervals", broken)
        with pytest.raises(TransientStoreError):
            compute_available_slots(session, shop.barber_id, MONDAY, [shop.corte_id], now=NOW)
        assert len(calls) == 3
