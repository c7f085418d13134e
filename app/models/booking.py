from sqlalchemy import Column, String, Integer, Float, DateTime, Enum
from datetime import datetime
import enum
from app.database import Base

class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String, primary_key=True, index=True)

    # Stripe, NULL for free-club joins
    session_id = Column(String, unique=True, nullable=True)
    transaction_id = Column(String, nullable=True)
    # "<club_id>:<email>" for free-club joins, NULL for paid bookings
    free_join_key = Column(String, unique=True, nullable=True)

    # No FK: bookings outlive a deleted club as history
    club_id = Column(String, nullable=False, index=True)

    # Customer
    customer_email = Column(String, nullable=False, index=True)
    customer_name = Column(String, nullable=True)
    customer_image = Column(String, nullable=True)

    # Seller, copied from the club at booking time
    seller_email = Column(String, nullable=False, index=True)
    seller_name = Column(String, nullable=True)
    seller_image = Column(String, nullable=True)

    # Snapshot of the club
    name = Column(String, nullable=True)
    category = Column(String, nullable=True)
    image = Column(String, nullable=True)

    status = Column(Enum(BookingStatus), nullable=False, default=BookingStatus.CONFIRMED)
    price = Column(Float, nullable=False, default=0)
    quantity = Column(Integer, nullable=False, default=1)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    @property
    def customer(self):
        return {"name": self.customer_name, "email": self.customer_email, "image": self.customer_image}

    @property
    def seller(self):
        return {"email": self.seller_email, "name": self.seller_name, "image": self.seller_image}

    class Config:
        from_attributes = True
