"""
app/services/statistics.py
Dashboard figures for a manager, derived in memory from the rows already loaded
for their clubs. Nothing here touches the database.
"""
import math
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from app.models.booking import BookingStatus
from app.models.event import RegistrationStatus


def percent(numerator: float, denominator: float) -> int:
    """round(numerator / denominator * 100), half-up; 0 when the denominator is 0."""
    if not denominator:
        return 0
    return int(math.floor(numerator / denominator * 100 + 0.5))


def percentage_change(current: float, previous: float) -> int:
    if previous <= 0:
        return 0
    return percent(current - previous, previous)


def month_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """(start of this month, start of previous month)"""
    this_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if this_month.month == 1:
        previous_month = this_month.replace(year=this_month.year - 1, month=12)
    else:
        previous_month = this_month.replace(month=this_month.month - 1)
    return this_month, previous_month


def split_by_month(dates: Iterable[datetime], now: datetime) -> Tuple[int, int]:
    """Counts (this month so far, previous calendar month)."""
    this_month, previous_month = month_bounds(now)
    current = previous = 0
    for d in dates:
        if d is None:
            continue
        if this_month <= d <= now:
            current += 1
        elif previous_month <= d < this_month:
            previous += 1
    return current, previous


def split_by_window(dates: Iterable[datetime], now: datetime, days: int = 30) -> Tuple[int, int]:
    """Counts (last `days` days, the `days` before that)."""
    recent_start = now - timedelta(days=days)
    older_start = now - timedelta(days=2 * days)
    recent = older = 0
    for d in dates:
        if d is None:
            continue
        if recent_start <= d <= now:
            recent += 1
        elif older_start <= d < recent_start:
            older += 1
    return recent, older


def _revenue(bookings) -> float:
    return round(sum((b.price or 0) * (b.quantity or 1) for b in bookings), 2)


def manager_statistics(
    clubs: List,
    bookings: List,
    events: Optional[List] = None,
    registrations: Optional[List] = None,
    now: Optional[datetime] = None,
) -> dict:
    events = events or []
    registrations = registrations or []
    now = now or datetime.utcnow()

    by_status = {s: 0 for s in BookingStatus}
    for b in bookings:
        by_status[BookingStatus(b.status)] += 1

    total = len(bookings)
    members = {b.customer_email for b in bookings if b.customer_email}

    this_month, previous_month = split_by_month((b.created_at for b in bookings), now)
    recent, older = split_by_window((b.created_at for b in bookings), now, days=30)

    # Members joining: first booking per customer
    first_seen = {}
    for b in bookings:
        if b.created_at is None:
            continue
        seen = first_seen.get(b.customer_email)
        if seen is None or b.created_at < seen:
            first_seen[b.customer_email] = b.created_at
    new_members, previous_new_members = split_by_month(first_seen.values(), now)

    paying = [b for b in bookings if b.status != BookingStatus.CANCELLED]
    month_start, previous_month_start = month_bounds(now)
    revenue_current = _revenue(b for b in paying if b.created_at and month_start <= b.created_at <= now)
    revenue_previous = _revenue(
        b for b in paying if b.created_at and previous_month_start <= b.created_at < month_start
    )

    confirmed_registrations = sum(1 for r in registrations if r.status == RegistrationStatus.CONFIRMED)

    return {
        "total_clubs": len(clubs),
        "total_members": len(members),
        "members_trend": percentage_change(new_members, previous_new_members),
        "total_bookings": total,
        "bookings_trend": percentage_change(this_month, previous_month),
        "growth_rate": percentage_change(recent, older),
        "total_revenue": _revenue(paying),
        "revenue_trend": percentage_change(revenue_current, revenue_previous),
        "active_bookings": by_status[BookingStatus.CONFIRMED] + by_status[BookingStatus.PROCESSING],
        "pending_requests": by_status[BookingStatus.PROCESSING],
        "completed_bookings": by_status[BookingStatus.COMPLETED],
        "cancelled_bookings": by_status[BookingStatus.CANCELLED],
        "completion_rate": percent(by_status[BookingStatus.COMPLETED], total),
        "total_events": len(events),
        "upcoming_events": sum(1 for e in events if e.event_date and e.event_date >= now),
        "total_registrations": len(registrations),
        "attendance_rate": percent(confirmed_registrations, len(registrations)),
    }
