import uuid
from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from signage.db import Base

class Schedule(Base):
    __tablename__ = "schedules"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    display_id = Column(String(36), ForeignKey("displays.id", ondelete="CASCADE"), nullable=False)
    playlist_id = Column(String(36), ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    always_on = Column(Boolean, nullable=False, default=False)
    priority = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
