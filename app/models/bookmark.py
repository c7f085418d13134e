from sqlalchemy import Column, String, DateTime, Enum, UniqueConstraint
from datetime import datetime
import enum
from app.database import Base

class BookmarkType(str, enum.Enum):
    EVENT = "event"
    CLUB = "club"

class Bookmark(Base):
    __tablename__ = "bookmarks"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)   # principal email
    target_id = Column(String, nullable=False)              # event or club id
    type = Column(Enum(BookmarkType), nullable=False, default=BookmarkType.EVENT)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "target_id", "type", name="uq_bookmark_user_target_type"),
    )

    class Config:
        from_attributes = True
