from datetime import datetime
from pydantic import Field
from signage.schemas.base import CamelModel

class PlaylistCreateIn(CamelModel):
    name: str = Field(..., min_length=1)

class PlaylistOut(CamelModel):
    id: str
    name: str
    client_id: str
    created_at: datetime | None = None

class PlaylistItemCreateIn(CamelModel):
    playlist_id: str
    media_id: str
    order: int
    duration: int = Field(10, ge=1)

class PlaylistItemOut(CamelModel):
    id: str
    playlist_id: str
    media_id: str
    order: int
    duration: int
    created_at: datetime | None = None
