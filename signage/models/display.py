import uuid
from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from signage.db import Base

class Display(Base):
    __tablename__ = "displays"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    invite_code = Column(String(6), nullable=False, unique=True)
    access_token = Column(String(64), nullable=True, unique=True)
    client_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    is_linked = Column(Boolean, nullable=False, default=False)
    last_check_in = Column(DateTime, nullable=True)
    assigned_playlist_id = Column(String(36), ForeignKey("playlists.id", ondelete="SET NULL"), nullable=True)
    resolution = Column(String(20), default="1080p")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
