from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class PhotoParentType(str, Enum):
    CUSTOMER = "customer"
    VEHICLE = "vehicle"
    TASK = "task"


# --- Photo parent: exactly one of customer / vehicle / task ---
class CustomerRef(BaseModel):
    kind: Literal["customer"] = "customer"
    id: str


class VehicleRef(BaseModel):
    kind: Literal["vehicle"] = "vehicle"
    id: str


class TaskRef(BaseModel):
    kind: Literal["task"] = "task"
    id: str


PhotoParent = Annotated[Union[CustomerRef, VehicleRef, TaskRef], Field(discriminator="kind")]

_parent_adapter = TypeAdapter(PhotoParent)


def parse_parent(value):
    """Accepts a CustomerRef/VehicleRef/TaskRef or a {"kind": ..., "id": ...} dict."""
    return _parent_adapter.validate_python(value)


def parent_from_columns(parent_type: str, parent_id: str):
    """Rebuilds the tagged parent from the (parent_type, parent_id) columns."""
    return _parent_adapter.validate_python({"kind": PhotoParentType(parent_type).value, "id": parent_id})


class PhotoUpdate(BaseModel):
    uri: str = Field(..., min_length=1, description="Where the image lives (device storage). The bytes are never stored here.")
    notes: Optional[str] = None


class PhotoCreate(PhotoUpdate):
    id: Optional[str] = None
    parent: PhotoParent


class PhotoRecord(BaseModel):
    id: str
    parent: PhotoParent
    uri: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
