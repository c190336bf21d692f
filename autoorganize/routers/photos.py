from typing import List

from fastapi import APIRouter, Depends
from starlette import status

from autoorganize.dependencies import get_store
from autoorganize.errors import NotFoundError
from autoorganize.models.photo import PhotoCreate, PhotoParentType, PhotoRecord, PhotoUpdate
from autoorganize.store import WorkshopStore

router = APIRouter(prefix="/photos", tags=["photos"])


@router.post("/", name="create_photo", status_code=status.HTTP_201_CREATED)
def create_photo(photo: PhotoCreate, store: WorkshopStore = Depends(get_store)):
    return {"id": store.add_photo(photo)}


# Photos of one customer, vehicle or task: /photos/?kind=vehicle&parent_id=...
@router.get("/", name="list_photos", response_model=List[PhotoRecord])
def list_photos(kind: PhotoParentType, parent_id: str, store: WorkshopStore = Depends(get_store)):
    return store.list_photos({"kind": kind.value, "id": parent_id})


@router.get("/{photo_id}", name="show_photo", response_model=PhotoRecord)
def show_photo(photo_id: str, store: WorkshopStore = Depends(get_store)):
    photo = store.get_photo(photo_id)
    if photo is None:
        raise NotFoundError("Photo not found.")
    return photo


@router.put("/{photo_id}", name="update_photo")
def update_photo(photo_id: str, photo: PhotoUpdate, store: WorkshopStore = Depends(get_store)):
    return {"rows_affected": store.update_photo(photo_id, photo)}


@router.delete("/{photo_id}", name="delete_photo")
def delete_photo(photo_id: str, store: WorkshopStore = Depends(get_store)):
    return {"rows_affected": store.delete_photo(photo_id)}
