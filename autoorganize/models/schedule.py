from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ScheduleEntryCreate(BaseModel):
    id: Optional[str] = None
    task_id: Optional[str] = None
    job_date: date
    start_time: Optional[str] = Field(None, pattern=_TIME_PATTERN, description="HH:MM")
    end_time: Optional[str] = Field(None, pattern=_TIME_PATTERN, description="HH:MM")
    notes: Optional[str] = None


class ScheduleEntryRecord(BaseModel):
    id: str
    task_id: Optional[str] = None
    job_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    notes: Optional[str] = None
