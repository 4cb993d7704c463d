import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from signage.db import Base

class Playlist(Base):
    __tablename__ = "playlists"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    client_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

class PlaylistItem(Base):
    __tablename__ = "playlist_items"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    playlist_id = Column(String(36), ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False)
    media_id = Column(String(36), ForeignKey("media.id", ondelete="CASCADE"), nullable=False)
    order = Column(Integer, nullable=False)
    # Seconds on screen; videos play to their natural end.
    duration = Column(Integer, nullable=False, default=10)
    created_at = Column(DateTime, default=datetime.utcnow)
