from sqlalchemy import Column, String, DateTime, Enum
from datetime import datetime
import enum
from app.database import Base

class UserRole(str, enum.Enum):
    MEMBER = "member"
    MANAGER = "manager"
    ADMIN = "admin"

class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    image = Column(String, nullable=True)

    role = Column(Enum(UserRole), nullable=False, default=UserRole.MEMBER)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    last_loggedIn = Column(DateTime, default=datetime.utcnow)

    class Config:
        from_attributes = True
