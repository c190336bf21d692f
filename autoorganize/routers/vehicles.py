from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from starlette import status

from autoorganize.dependencies import get_store
from autoorganize.errors import NotFoundError
from autoorganize.importer import import_vehicles as import_vehicle_rows
from autoorganize.models.vehicle import VehicleCreate, VehicleFilters, VehicleRecord, VehicleUpdate
from autoorganize.store import WorkshopStore

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.post("/", name="create_vehicle", status_code=status.HTTP_201_CREATED)
def create_vehicle(vehicle: VehicleCreate, store: WorkshopStore = Depends(get_store)):
    # A duplicate VIN comes back as 409 from the ConstraintViolationError handler
    return {"id": store.add_vehicle(vehicle)}


@router.get("/", name="list_vehicles", response_model=List[VehicleRecord])
def list_vehicles(
    customer_id: Optional[str] = None,
    make: Optional[str] = None,
    model: Optional[str] = None,
    store: WorkshopStore = Depends(get_store),
):
    return store.list_vehicles(VehicleFilters(customer_id=customer_id, make=make, model=model))


@router.post("/import", name="import_vehicles")
async def import_vehicles(excel_file: UploadFile = File(...), store: WorkshopStore = Depends(get_store)):
    if not excel_file.filename or not excel_file.filename.endswith(".xlsx"):
        raise HTTPException(status_code=400, detail="Invalid file: an .xlsx workbook is expected.")

    try:
        content = await excel_file.read()
    finally:
        await excel_file.close()

    report = import_vehicle_rows(store, content)
    return {
        "imported": len(report.imported),
        "ids": report.imported,
        "skipped": [{"row": row, "reason": reason} for row, reason in report.skipped],
    }


@router.get("/{vehicle_id}", name="show_vehicle", response_model=VehicleRecord)
def show_vehicle(vehicle_id: str, store: WorkshopStore = Depends(get_store)):
    vehicle = store.get_vehicle(vehicle_id)
    if vehicle is None:
        raise NotFoundError("Vehicle not found")
    return vehicle


@router.put("/{vehicle_id}", name="update_vehicle")
def update_vehicle(vehicle_id: str, vehicle: VehicleUpdate, store: WorkshopStore = Depends(get_store)):
    return {"rows_affected": store.update_vehicle(vehicle_id, vehicle)}


@router.delete("/{vehicle_id}", name="delete_vehicle")
def delete_vehicle(vehicle_id: str, store: WorkshopStore = Depends(get_store)):
    return {"rows_affected": store.delete_vehicle(vehicle_id)}
