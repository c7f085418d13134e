import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RESEND_API_KEY"] = ""
os.environ["SENTRY_DSN"] = ""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.models import (
    User, UserRole, Club, ClubStatus, Booking, BookingStatus, Event, EventRegistration, RegistrationStatus,
)
from app.utils.ids import new_id
from main import app


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def db(session_factory):
    """Session for seeding and for reading back what the API wrote."""
    session = session_factory()
    yield session
    session.close()


# ─── Factories ───────────────────────────────────────────────────────────────

@pytest.fixture
def make_user(db):
    def _make(email: str, role: UserRole = UserRole.MEMBER, name: str = None) -> User:
        user = User(id=new_id(), email=email, name=name or email.split("@")[0], role=role)
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture
def make_club(db):
    def _make(seller_email: str, price: float = 0, name: str = "Chess Club",
              status: ClubStatus = ClubStatus.APPROVED, category: str = "games") -> Club:
        club = Club(
            id=new_id(), name=name, category=category, price=price,
            seller_email=seller_email, seller_name="Seller", status=status,
        )
        db.add(club)
        db.commit()
        return club
    return _make


@pytest.fixture
def make_booking(db):
    def _make(club: Club, customer_email: str, status: BookingStatus = BookingStatus.CONFIRMED,
              price: float = 10, created_at: datetime = None, session_id: str = None) -> Booking:
        booking = Booking(
            id=new_id(), club_id=club.id, session_id=session_id,
            customer_email=customer_email, seller_email=club.seller_email,
            name=club.name, status=status, price=price, quantity=1,
            created_at=created_at or datetime.utcnow(),
        )
        db.add(booking)
        db.commit()
        return booking
    return _make


@pytest.fixture
def make_event(db):
    def _make(club: Club, title: str = "Spring Tournament", days_ahead: int = 10,
              event_fee: float = 0, max_attendees: int = None) -> Event:
        event = Event(
            id=new_id(), club_id=club.id, title=title,
            event_date=datetime.utcnow() + timedelta(days=days_ahead),
            is_paid=event_fee > 0, event_fee=event_fee, max_attendees=max_attendees,
            manager_email=club.seller_email,
        )
        db.add(event)
        db.commit()
        return event
    return _make


@pytest.fixture
def make_registration(db):
    def _make(event: Event, user_email: str,
              status: RegistrationStatus = RegistrationStatus.REGISTERED) -> EventRegistration:
        registration = EventRegistration(id=new_id(), event_id=event.id, user_email=user_email, status=status)
        db.add(registration)
        db.commit()
        return registration
    return _make
