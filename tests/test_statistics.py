from datetime import datetime, timedelta
from types import SimpleNamespace

from app.models import BookingStatus, RegistrationStatus
from app.services.statistics import (
    percent, percentage_change, month_bounds, split_by_month, split_by_window, manager_statistics,
)

NOW = datetime(2026, 3, 15, 12, 0, 0)


def b(email, created_at, status=BookingStatus.CONFIRMED, price=20.0, quantity=1):
    return SimpleNamespace(customer_email=email, created_at=created_at, status=status, price=price, quantity=quantity)


def test_percent_rounds_half_up_and_guards_zero():
    assert percent(1, 3) == 33
    assert percent(1, 8) == 13          # 12.5
    assert percent(0, 0) == 0
    assert percent(5, 0) == 0


def test_percentage_change():
    assert percentage_change(15, 10) == 50
    assert percentage_change(5, 10) == -50
    assert percentage_change(7, 0) == 0
    assert percentage_change(0, 0) == 0


def test_month_bounds_wraps_the_year():
    this_month, previous = month_bounds(datetime(2026, 1, 20, 8, 30))
    assert this_month == datetime(2026, 1, 1)
    assert previous == datetime(2025, 12, 1)


def test_split_by_month():
    dates = [
        datetime(2026, 3, 1),            # this month, first instant
        datetime(2026, 3, 14),
        datetime(2026, 2, 28, 23, 59),   # previous month
        datetime(2026, 1, 31),           # older
        None,
    ]
    assert split_by_month(dates, NOW) == (2, 1)


def test_split_by_window():
    dates = [NOW - timedelta(days=1), NOW - timedelta(days=29), NOW - timedelta(days=31), NOW - timedelta(days=70)]
    assert split_by_window(dates, NOW, days=30) == (2, 1)


def test_manager_statistics():
    bookings = [
        b("a@x.io", datetime(2026, 3, 2)),
        b("a@x.io", datetime(2026, 3, 10), status=BookingStatus.COMPLETED),
        b("b@x.io", datetime(2026, 2, 10), status=BookingStatus.PROCESSING),
        b("c@x.io", datetime(2026, 3, 12), status=BookingStatus.CANCELLED),
    ]
    events = [
        SimpleNamespace(event_date=NOW + timedelta(days=3)),
        SimpleNamespace(event_date=NOW - timedelta(days=3)),
    ]
    registrations = [
        SimpleNamespace(status=RegistrationStatus.CONFIRMED),
        SimpleNamespace(status=RegistrationStatus.REGISTERED),
        SimpleNamespace(status=RegistrationStatus.REJECTED),
    ]

    stats = manager_statistics(["club-1", "club-2"], bookings, events, registrations, now=NOW)

    assert stats["total_clubs"] == 2
    assert stats["total_members"] == 3
    assert stats["total_bookings"] == 4
    # 3 bookings this month vs 1 in February
    assert stats["bookings_trend"] == 200
    # first bookings: a and c in March, b in February
    assert stats["members_trend"] == 100
    assert stats["active_bookings"] == 2
    assert stats["pending_requests"] == 1
    assert stats["completed_bookings"] == 1
    assert stats["cancelled_bookings"] == 1
    assert stats["completion_rate"] == 25
    assert stats["total_revenue"] == 60.0
    assert stats["revenue_trend"] == 100
    assert stats["total_events"] == 2
    assert stats["upcoming_events"] == 1
    assert stats["total_registrations"] == 3
    assert stats["attendance_rate"] == 33


def test_manager_statistics_without_data_is_all_zero():
    stats = manager_statistics([], [], now=NOW)
    assert stats["completion_rate"] == 0
    assert stats["members_trend"] == 0
    assert stats["bookings_trend"] == 0
    assert stats["growth_rate"] == 0
    assert stats["attendance_rate"] == 0
    assert stats["total_revenue"] == 0


def test_trend_is_zero_when_previous_period_is_empty():
    bookings = [b("a@x.io", datetime(2026, 3, 5)), b("b@x.io", datetime(2026, 3, 6))]
    stats = manager_statistics(["club"], bookings, now=NOW)
    assert stats["bookings_trend"] == 0
    assert stats["growth_rate"] == 0
    assert stats["revenue_trend"] == 0
