from typing import List, Optional

from fastapi import APIRouter, Depends
from starlette import status

from autoorganize.dependencies import get_store
from autoorganize.models.schedule import ScheduleEntryCreate, ScheduleEntryRecord
from autoorganize.store import WorkshopStore

router = APIRouter(prefix="/schedule", tags=["schedule"])


@router.post("/", name="create_schedule_entry", status_code=status.HTTP_201_CREATED)
def create_schedule_entry(entry: ScheduleEntryCreate, store: WorkshopStore = Depends(get_store)):
    return {"id": store.add_schedule_entry(entry)}


@router.get("/", name="list_schedule_entries", response_model=List[ScheduleEntryRecord])
def list_schedule_entries(task_id: Optional[str] = None, store: WorkshopStore = Depends(get_store)):
    return store.list_schedule_entries(task_id)


@router.delete("/{entry_id}", name="delete_schedule_entry")
def delete_schedule_entry(entry_id: str, store: WorkshopStore = Depends(get_store)):
    return {"rows_affected": store.delete_schedule_entry(entry_id)}
