from datetime import datetime
from signage.schemas.base import CamelModel

class MediaOut(CamelModel):
    id: str
    name: str
    type: str
    filename: str
    file_size: int
    mime_type: str
    client_id: str
    created_at: datetime | None = None
