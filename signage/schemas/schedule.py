from datetime import datetime
from pydantic import model_validator
from signage.schemas.base import CamelModel

class ScheduleCreateIn(CamelModel):
    display_id: str
    playlist_id: str
    start_date: datetime | None = None
    end_date: datetime | None = None
    always_on: bool = False
    priority: int = 0

    @model_validator(mode="after")
    def _check_window(self):
        if self.start_date and self.end_date and self.start_date >= self.end_date:
            raise ValueError("startDate must be before endDate")
        return self

class ScheduleOut(CamelModel):
    id: str
    display_id: str
    playlist_id: str
    start_date: datetime | None = None
    end_date: datetime | None = None
    always_on: bool
    priority: int | None = 0
    created_at: datetime | None = None
