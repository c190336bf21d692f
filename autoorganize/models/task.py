from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# ----------------------------------------------------
# 1. TASK ENUMERATORS
# The values are what gets stored in the database.
# ----------------------------------------------------
class TaskStatus(str, Enum):
    """Where a task is in the workshop flow."""
    TO_DO = "To Do"
    IN_PROGRESS = "In Progress"
    AWAITING_PARTS = "Awaiting Parts"
    ON_HOLD = "On Hold"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    REQUIRES_FOLLOW_UP = "Requires Follow-up"


class TaskCategory(str, Enum):
    REPAIRS = "Repairs"
    MAINTENANCE = "Maintenance"
    DIAGNOSTICS = "Diagnostics"


# ----------------------------------------------------
# 2. Task models
# created_date is not in any input model: the store stamps it once.
# ----------------------------------------------------
class TaskUpdate(BaseModel):
    """
    A job done for a customer, usually on one of their vehicles.
    """
    vehicle_id: Optional[str] = Field(None, description="Vehicle the work is done on (optional).")
    customer_id: Optional[str] = Field(None, description="Customer the task belongs to (optional).")

    title: str = Field(..., min_length=1, max_length=255, description="Short title (required).")
    description: Optional[str] = None
    category: Optional[TaskCategory] = None
    status: TaskStatus = Field(TaskStatus.TO_DO, description="Current status of the task.")
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Task title is required.")
        return value


class TaskCreate(TaskUpdate):
    id: Optional[str] = None


class TaskRecord(BaseModel):
    id: str
    vehicle_id: Optional[str] = None
    customer_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    category: Optional[TaskCategory] = None
    status: TaskStatus
    created_date: datetime
    due_date: Optional[date] = None

    # Joined from customers / vehicles (both LEFT JOINs)
    customer_name: Optional[str] = None
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_year: Optional[int] = None
    # Only filled in by get_task
    vehicle_vin: Optional[str] = None
    vehicle_engine_type: Optional[str] = None


class TaskFilters(BaseModel):
    customer_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    status: Optional[TaskStatus] = None
    category: Optional[TaskCategory] = None
