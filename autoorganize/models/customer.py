from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CustomerUpdate(BaseModel):
    """Mutable customer fields. Anything else sent by the caller is ignored."""
    name: str = Field(..., min_length=1, max_length=255, description="Customer name (required).")
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Customer name is required.")
        return value


class CustomerCreate(CustomerUpdate):
    id: Optional[str] = Field(None, description="Generated when not supplied.")


class CustomerRecord(BaseModel):
    id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None


class CustomerFilters(BaseModel):
    name: Optional[str] = Field(None, description="Case-insensitive substring of the name.")
