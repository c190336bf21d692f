from typing import List, Optional

from fastapi import APIRouter, Depends
from starlette import status as status_codes

from autoorganize.dependencies import get_store
from autoorganize.errors import NotFoundError
from autoorganize.models.task import TaskCategory, TaskCreate, TaskFilters, TaskRecord, TaskStatus, TaskUpdate
from autoorganize.store import WorkshopStore

router = APIRouter(prefix="/tasks", tags=["tasks"])


# Route 1: Create a task (created_date is stamped by the store)
@router.post("/", name="create_task", status_code=status_codes.HTTP_201_CREATED)
def create_task(task: TaskCreate, store: WorkshopStore = Depends(get_store)):
    return {"id": store.add_task(task)}


# Route 2: List tasks; the enums reject unknown status/category values with a 422
@router.get("/", name="list_tasks", response_model=List[TaskRecord])
def list_tasks(
    customer_id: Optional[str] = None,
    vehicle_id: Optional[str] = None,
    status: Optional[TaskStatus] = None,
    category: Optional[TaskCategory] = None,
    store: WorkshopStore = Depends(get_store),
):
    filters = TaskFilters(customer_id=customer_id, vehicle_id=vehicle_id, status=status, category=category)
    return store.list_tasks(filters)


# Route 3: Task details, with the vehicle's VIN and engine
@router.get("/{task_id}", name="show_task", response_model=TaskRecord)
def show_task(task_id: str, store: WorkshopStore = Depends(get_store)):
    task = store.get_task(task_id)
    if task is None:
        raise NotFoundError("Task not found.")
    return task


# Route 4: Update
@router.put("/{task_id}", name="update_task")
def update_task(task_id: str, task: TaskUpdate, store: WorkshopStore = Depends(get_store)):
    return {"rows_affected": store.update_task(task_id, task)}


# Route 5: Delete (linked invoices survive, see WorkshopStore.delete_task)
@router.delete("/{task_id}", name="delete_task")
def delete_task(task_id: str, store: WorkshopStore = Depends(get_store)):
    return {"rows_affected": store.delete_task(task_id)}
