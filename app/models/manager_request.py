from sqlalchemy import Column, String, DateTime
from datetime import datetime
from app.database import Base

class ManagerRequest(Base):
    __tablename__ = "manager_requests"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    requested_at = Column(DateTime, default=datetime.utcnow)

    class Config:
        from_attributes = True
