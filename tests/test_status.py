"""Tests for the appointment status lifecycle and the admin override."""
import pytest

from barbershop.errors import NotFoundError, SlotConflictError, ValidationError
from barbershop.scheduler import create_appointment
from barbershop.schemas import AppointmentStatus, PaymentMethod
from barbershop.status import TERMINAL, can_transition, override_status, transition_status
from conftest import NOW

S = AppointmentStatus


@pytest.fixture
def booked(session, make_booking):
    return create_appointment(session, make_booking(), now=NOW).appointment_id


class TestLifecycleTable:
    @pytest.mark.parametrize("current, target", [
        (S.scheduled, S.confirmed),
        (S.confirmed, S.completed),
        (S.scheduled, S.cancelled),
        (S.confirmed, S.cancelled),
        (S.scheduled, S.no_show),
        (S.confirmed, S.no_show),
    ])
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize("current, target", [
        (S.scheduled, S.completed),
        (S.confirmed, S.scheduled),
        (S.completed, S.cancelled),
        (S.cancelled, S.scheduled),
        (S.no_show, S.confirmed),
    ])
    def test_forbidden(self, current, target):
        assert not can_transition(current, target)

    def test_terminal_states(self):
        assert TERMINAL == {S.completed, S.cancelled, S.no_show}


class TestTransitionStatus:
    def test_full_happy_path(self, session, booked):
        assert transition_status(session, booked, S.confirmed).status == "confirmed"
        appt = transition_status(session, booked, S.completed, PaymentMethod.pix)
        assert appt.status == "completed"
        assert appt.payment_method == "pix"

    def test_cannot_skip_confirmation(self, session, booked):
        with pytest.raises(ValidationError):
            transition_status(session, booked, S.completed)

    def test_terminal_cannot_move(self, session, booked):
        transition_status(session, booked, S.cancelled)
        with pytest.raises(ValidationError):
            transition_status(session, booked, S.confirmed)

    def test_same_status_rejected(self, session, booked):
        with pytest.raises(ValidationError):
            transition_status(session, booked, S.scheduled)

    def test_payment_only_on_completion(self, session, booked):
        with pytest.raises(ValidationError):
            transition_status(session, booked, S.confirmed, PaymentMethod.money)

    def test_unknown_appointment(self, session, shop):
        with pytest.raises(NotFoundError):
            transition_status(session, 999, S.confirmed)


class TestOverride:
    def test_admin_can_jump_straight_to_completed(self, session, booked):
        appt = override_status(session, booked, S.completed, PaymentMethod.credit_card)
        assert appt.status == "completed"
        assert appt.payment_method == "credit_card"

    def test_admin_can_reopen_terminal(self, session, booked):
        override_status(session, booked, S.no_show)
        assert override_status(session, booked, S.scheduled).status == "scheduled"

    def test_reopen_refused_when_slot_was_rebooked(self, session, make_booking, booked):
        transition_status(session, booked, S.cancelled)
        rebooked = create_appointment(session, make_booking(client_phone="(31) 98888-7777"), now=NOW)
        assert rebooked.success

        with pytest.raises(SlotConflictError):
            override_status(session, booked, S.scheduled)
        assert transition_status(session, rebooked.appointment_id, S.confirmed).status == "confirmed"
