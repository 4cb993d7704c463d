from datetime import datetime
from signage.schemas.base import CamelModel

class LinkIn(CamelModel):
    invite_code: str | None = None

class LinkOut(CamelModel):
    display_id: str
    access_token: str
    message: str = "Display linked successfully"

class CheckInOut(CamelModel):
    success: bool = True

class MediaRef(CamelModel):
    id: str
    name: str
    type: str
    filename: str
    mime_type: str
    file_size: int

class ActivePlaylistItemOut(CamelModel):
    id: str
    playlist_id: str
    media_id: str
    order: int
    duration: int
    created_at: datetime | None = None
    media: MediaRef
