from datetime import datetime
from pydantic import Field
from signage.schemas.base import CamelModel

class DisplayCreateIn(CamelModel):
    name: str = Field(..., min_length=1)
    resolution: str | None = None

class DisplayOut(CamelModel):
    id: str
    name: str
    invite_code: str
    client_id: str
    is_linked: bool
    last_check_in: datetime | None = None
    assigned_playlist_id: str | None = None
    resolution: str | None = None
    created_at: datetime | None = None
    status: str = "offline"
