from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    CANCELLED = "Cancelled"


class LineItemIn(BaseModel):
    """One priced entry as sent by the caller. Totals are never accepted from outside."""
    description: str = Field(..., min_length=1, max_length=500)
    # Same precision as the NUMERIC(10,3) / NUMERIC(12,2) columns, so what is stored is what was priced
    quantity: Decimal = Field(..., gt=0, max_digits=10, decimal_places=3, description="May be fractional (e.g. 1.5 hours).")
    unit_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Line item description is required.")
        return value


class InvoiceUpdate(BaseModel):
    """
    Full replacement of an invoice: header fields plus the whole line-item list.
    total_amount is not an input; it is computed from line_items.
    """
    customer_id: str = Field(..., min_length=1)
    task_id: Optional[str] = None
    invoice_number: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_status: PaymentStatus = PaymentStatus.PENDING
    notes: Optional[str] = None
    line_items: List[LineItemIn] = Field(..., min_length=1)


class InvoiceCreate(InvoiceUpdate):
    id: Optional[str] = None


class LineItemRecord(BaseModel):
    id: str
    invoice_id: str
    position: int
    description: Optional[str] = None
    quantity: Decimal
    unit_price: Decimal
    total_price: Decimal


class InvoiceRecord(BaseModel):
    id: str
    customer_id: str
    task_id: Optional[str] = None
    invoice_number: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    total_amount: Decimal
    payment_status: PaymentStatus
    notes: Optional[str] = None
    line_items: List[LineItemRecord] = []

    # Joined from customers / tasks
    customer_name: Optional[str] = None
    task_title: Optional[str] = None


class InvoiceFilters(BaseModel):
    customer_id: Optional[str] = None
    task_id: Optional[str] = None
    payment_status: Optional[PaymentStatus] = None
