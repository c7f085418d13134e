from app.models.user import User, UserRole
from app.models.club import Club, ClubStatus
from app.models.booking import Booking, BookingStatus
from app.models.event import Event, EventRegistration, RegistrationStatus
from app.models.bookmark import Bookmark, BookmarkType
from app.models.manager_request import ManagerRequest

__all__ = [
    "User", "UserRole",
    "Club", "ClubStatus",
    "Booking", "BookingStatus",
    "Event", "EventRegistration", "RegistrationStatus",
    "Bookmark", "BookmarkType",
    "ManagerRequest",
]
