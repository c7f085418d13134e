"""
app/services/lifecycle.py
Booking and event-registration status transitions.

Bookings:       confirmed/processing -> completed | cancelled   (completed, cancelled are terminal)
Registrations:  registered -> confirmed | rejected, any non-terminal -> cancelled

Functions mutate the ORM row in place; committing is the caller's job.
"""
from datetime import datetime
from typing import Optional

from app.models.booking import Booking, BookingStatus
from app.models.event import EventRegistration, RegistrationStatus


class InvalidTransition(Exception):
    pass


TERMINAL_BOOKING_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})
ACTIVE_BOOKING_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.PROCESSING)

TERMINAL_REGISTRATION_STATUSES = frozenset({RegistrationStatus.REJECTED, RegistrationStatus.CANCELLED})
# Registrations that hold a seat
ACTIVE_REGISTRATION_STATUSES = (RegistrationStatus.REGISTERED, RegistrationStatus.CONFIRMED)


def parse_booking_status(value) -> BookingStatus:
    try:
        return BookingStatus(value)
    except ValueError:
        raise ValueError("Invalid status value")


def is_terminal(status: BookingStatus) -> bool:
    return BookingStatus(status) in TERMINAL_BOOKING_STATUSES


# ─── Bookings ────────────────────────────────────────────────────────────────

def cancel_booking(booking: Booking, now: Optional[datetime] = None) -> Booking:
    now = now or datetime.utcnow()
    if booking.status == BookingStatus.COMPLETED:
        raise InvalidTransition("Cannot cancel completed orders")
    if booking.status == BookingStatus.CANCELLED:
        raise InvalidTransition("Order is already cancelled")
    booking.status = BookingStatus.CANCELLED
    booking.cancelled_at = now
    booking.updated_at = now
    return booking


def set_booking_status(booking: Booking, value, now: Optional[datetime] = None) -> Booking:
    """
    Seller-side status update. The target must be one of the four statuses;
    a booking that already reached a terminal status can only be re-set to itself.
    """
    target = parse_booking_status(value)
    now = now or datetime.utcnow()

    current = BookingStatus(booking.status)
    if current in TERMINAL_BOOKING_STATUSES and target != current:
        raise InvalidTransition(f"Cannot move a {current.value} order to {target.value}")

    booking.status = target
    booking.updated_at = now
    if target == BookingStatus.COMPLETED:
        booking.completed_at = now
    elif target == BookingStatus.CANCELLED and booking.cancelled_at is None:
        booking.cancelled_at = now
    return booking


def decide_pending_booking(booking: Booking, approve: bool, now: Optional[datetime] = None) -> Booking:
    now = now or datetime.utcnow()
    if booking.status != BookingStatus.PROCESSING:
        raise InvalidTransition("Only pending (processing) requests can be approved or rejected")
    if approve:
        booking.status = BookingStatus.CONFIRMED
    else:
        booking.status = BookingStatus.CANCELLED
        booking.cancelled_at = now
    booking.updated_at = now
    return booking


# ─── Registrations ───────────────────────────────────────────────────────────

def cancel_registration(registration: EventRegistration, now: Optional[datetime] = None) -> EventRegistration:
    if registration.status in TERMINAL_REGISTRATION_STATUSES:
        raise InvalidTransition(f"Registration is already {RegistrationStatus(registration.status).value}")
    registration.status = RegistrationStatus.CANCELLED
    registration.updated_at = now or datetime.utcnow()
    return registration


def decide_registration(registration: EventRegistration, value, now: Optional[datetime] = None) -> EventRegistration:
    try:
        target = RegistrationStatus(value)
    except ValueError:
        raise ValueError("Invalid status value")
    if target not in (RegistrationStatus.CONFIRMED, RegistrationStatus.REJECTED):
        raise ValueError("Status must be confirmed or rejected")
    if registration.status != RegistrationStatus.REGISTERED:
        raise InvalidTransition(
            f"Cannot move a {RegistrationStatus(registration.status).value} registration to {target.value}"
        )
    registration.status = target
    registration.updated_at = now or datetime.utcnow()
    return registration


def reactivate_registration(registration: EventRegistration, now: Optional[datetime] = None) -> EventRegistration:
    """A cancelled registration comes back as a fresh one; anything else is a duplicate."""
    if registration.status != RegistrationStatus.CANCELLED:
        raise InvalidTransition("Already registered for this event")
    now = now or datetime.utcnow()
    registration.status = RegistrationStatus.REGISTERED
    registration.registered_at = now
    registration.updated_at = now
    return registration
