from sqlalchemy import Column, String, Integer, Float, Boolean, DateTime, Enum, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from app.database import Base

class RegistrationStatus(str, enum.Enum):
    REGISTERED = "registered"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

class Event(Base):
    __tablename__ = "events"

    id = Column(String, primary_key=True, index=True)
    club_id = Column(String, nullable=False, index=True)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    event_date = Column(DateTime, nullable=False, index=True)
    location = Column(String, nullable=True)
    image = Column(String, nullable=True)

    is_paid = Column(Boolean, default=False)
    event_fee = Column(Float, nullable=False, default=0)
    max_attendees = Column(Integer, nullable=True)  # NULL = unlimited

    manager_email = Column(String, nullable=False, index=True)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    registrations = relationship("EventRegistration", back_populates="event")

    class Config:
        from_attributes = True

class EventRegistration(Base):
    __tablename__ = "event_registrations"

    id = Column(String, primary_key=True, index=True)
    event_id = Column(String, ForeignKey("events.id"), nullable=False, index=True)
    user_email = Column(String, nullable=False, index=True)
    user_name = Column(String, nullable=True)

    status = Column(Enum(RegistrationStatus), nullable=False, default=RegistrationStatus.REGISTERED)

    registered_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True)

    event = relationship("Event", back_populates="registrations")

    __table_args__ = (
        UniqueConstraint("event_id", "user_email", name="uq_registration_event_user"),
    )

    class Config:
        from_attributes = True
