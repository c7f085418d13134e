from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime, timezone
from app.models import UserRole, ClubStatus, BookingStatus, RegistrationStatus, BookmarkType

def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Stored datetimes are naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

def _not_null(value):
    # Optional only so a field can be left out of a PATCH
    if value is None:
        raise ValueError("may not be null")
    return value

# Nested identity blocks
class Person(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None

# User Schemas
class UserUpsert(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    image: Optional[str] = None

class UserResponse(BaseModel):
    id: str
    email: str
    name: Optional[str]
    image: Optional[str]
    role: UserRole
    created_at: datetime
    last_loggedIn: Optional[datetime]

    class Config:
        from_attributes = True

class RoleUpdate(BaseModel):
    email: EmailStr
    role: UserRole

# Club Schemas
class ClubCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    image: Optional[str] = None
    price: float = Field(default=0, ge=0)

class ClubUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    image: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)

    @field_validator("name", "price")
    @classmethod
    def not_null(cls, value):
        return _not_null(value)

class ClubStatusUpdate(BaseModel):
    status: ClubStatus

class ClubResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    category: Optional[str]
    location: Optional[str]
    image: Optional[str]
    price: float
    seller: Person
    status: ClubStatus
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True

# Booking Schemas
class BookingResponse(BaseModel):
    id: str
    session_id: Optional[str]
    transaction_id: Optional[str]
    club_id: str
    customer: Person
    seller: Person
    name: Optional[str]
    category: Optional[str]
    image: Optional[str]
    status: BookingStatus
    price: float
    quantity: int
    created_at: datetime
    updated_at: Optional[datetime]
    completed_at: Optional[datetime]
    cancelled_at: Optional[datetime]

    class Config:
        from_attributes = True

class BookingStatusUpdate(BaseModel):
    # Plain str so an unknown value is a 400 from the state machine, not a 422
    status: str

# Event Schemas
class EventCreate(BaseModel):
    club_id: str
    title: str = Field(min_length=1)
    description: Optional[str] = None
    event_date: datetime
    location: Optional[str] = None
    image: Optional[str] = None
    is_paid: bool = False
    event_fee: float = Field(default=0, ge=0)
    max_attendees: Optional[int] = Field(default=None, ge=1)

    @field_validator("event_date")
    @classmethod
    def event_date_utc(cls, value):
        return _naive_utc(value)

class EventUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    event_date: Optional[datetime] = None
    location: Optional[str] = None
    image: Optional[str] = None
    is_paid: Optional[bool] = None
    event_fee: Optional[float] = Field(default=None, ge=0)
    max_attendees: Optional[int] = Field(default=None, ge=1)

    @field_validator("title", "event_date", "is_paid", "event_fee")
    @classmethod
    def not_null(cls, value):
        return _not_null(value)

    @field_validator("event_date")
    @classmethod
    def event_date_utc(cls, value):
        return _naive_utc(value)

class EventResponse(BaseModel):
    id: str
    club_id: str
    title: str
    description: Optional[str]
    event_date: datetime
    location: Optional[str]
    image: Optional[str]
    is_paid: bool
    event_fee: float
    max_attendees: Optional[int]
    manager_email: str
    created_at: datetime

    class Config:
        from_attributes = True

class RegistrationResponse(BaseModel):
    id: str
    event_id: str
    user_email: str
    user_name: Optional[str]
    status: RegistrationStatus
    registered_at: datetime

    class Config:
        from_attributes = True

class RegistrationDecision(BaseModel):
    status: str

# Bookmark Schemas
class BookmarkResponse(BaseModel):
    id: str
    user_id: str
    target_id: str
    type: BookmarkType
    created_at: datetime

    class Config:
        from_attributes = True
