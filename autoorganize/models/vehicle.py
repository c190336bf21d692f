from typing import Optional

from pydantic import BaseModel, Field, field_validator


class VehicleUpdate(BaseModel):
    """Mutable vehicle fields; the owner can be changed."""
    customer_id: str = Field(..., min_length=1, description="ID of the owning customer.")
    make: Optional[str] = None
    model: Optional[str] = None
    # Four-digit model year
    year: Optional[int] = Field(None, ge=1000, le=9999)
    vin: Optional[str] = Field(None, description="Unique across all vehicles when present.")
    engine_type: Optional[str] = None

    @field_validator("vin")
    @classmethod
    def normalize_vin(cls, value: Optional[str]) -> Optional[str]:
        # Standardize the VIN so the uniqueness check is not fooled by case or blanks
        if value is None:
            return None
        value = value.strip().upper()
        return value or None


class VehicleCreate(VehicleUpdate):
    id: Optional[str] = None


class VehicleRecord(BaseModel):
    id: str
    customer_id: str
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    vin: Optional[str] = None
    engine_type: Optional[str] = None

    # Joined from customers
    customer_name: Optional[str] = None


class VehicleFilters(BaseModel):
    customer_id: Optional[str] = None
    make: Optional[str] = Field(None, description="Case-insensitive substring.")
    model: Optional[str] = Field(None, description="Case-insensitive substring.")
