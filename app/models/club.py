from sqlalchemy import Column, String, Float, DateTime, Enum, Text
from datetime import datetime
import enum
from app.database import Base

class ClubStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class Club(Base):
    __tablename__ = "clubs"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True, index=True)
    location = Column(String, nullable=True)
    image = Column(String, nullable=True)

    # 0 = free club, joined without checkout
    price = Column(Float, nullable=False, default=0)

    # Seller (owning manager)
    seller_email = Column(String, nullable=False, index=True)
    seller_name = Column(String, nullable=True)
    seller_image = Column(String, nullable=True)

    status = Column(Enum(ClubStatus), nullable=False, default=ClubStatus.PENDING)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def seller(self):
        return {"email": self.seller_email, "name": self.seller_name, "image": self.seller_image}

    class Config:
        from_attributes = True
