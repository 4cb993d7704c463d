from datetime import datetime
from signage.schemas.base import CamelModel

class UserOut(CamelModel):
    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: str
    created_at: datetime | None = None
