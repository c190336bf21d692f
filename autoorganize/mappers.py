"""
Row -> record mapping, id generation and the money math.

Every record handed back by the store is built here, so the denormalized
display fields (customer name, vehicle make/model/year, task title) and the
invoice totals are shaped in one place.
"""
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from .database_models import Customer, Invoice, InvoiceLineItem, Photo, ScheduleEntry, Task, Vehicle
from .models.customer import CustomerRecord
from .models.invoice import InvoiceRecord, LineItemRecord, PaymentStatus
from .models.photo import PhotoRecord, parent_from_columns
from .models.schedule import ScheduleEntryRecord
from .models.task import TaskCategory, TaskRecord, TaskStatus
from .models.vehicle import VehicleRecord

CENT = Decimal("0.01")


def new_id() -> str:
    """Opaque identifier for a new row."""
    return str(uuid.uuid4())


# --- Money ---

def line_total(quantity: Decimal, unit_price: Decimal) -> Decimal:
    """quantity x unit_price, rounded half-up to cents."""
    return (Decimal(quantity) * Decimal(unit_price)).quantize(CENT, rounding=ROUND_HALF_UP)


def invoice_total(items: Iterable) -> Decimal:
    """Sum of the line totals. Accepts anything with quantity and unit_price."""
    total = Decimal("0.00")
    for item in items:
        total += line_total(item.quantity, item.unit_price)
    return total.quantize(CENT)


# --- Records ---

def customer_record(row: Customer) -> CustomerRecord:
    return CustomerRecord(id=row.id, name=row.name, phone=row.phone, email=row.email, address=row.address)


def vehicle_record(row: Vehicle, customer_name: Optional[str] = None) -> VehicleRecord:
    return VehicleRecord(
        id=row.id,
        customer_id=row.customer_id,
        make=row.make,
        model=row.model,
        year=row.year,
        vin=row.vin,
        engine_type=row.engine_type,
        customer_name=customer_name,
    )


def task_record(
    row: Task,
    customer: Optional[Customer] = None,
    vehicle: Optional[Vehicle] = None,
    with_vehicle_details: bool = False,
) -> TaskRecord:
    record = TaskRecord(
        id=row.id,
        vehicle_id=row.vehicle_id,
        customer_id=row.customer_id,
        title=row.title,
        description=row.description,
        category=TaskCategory(row.category) if row.category else None,
        status=TaskStatus(row.status),
        created_date=row.created_date,
        due_date=row.due_date,
        customer_name=customer.name if customer is not None else None,
    )
    if vehicle is not None:
        record.vehicle_make = vehicle.make
        record.vehicle_model = vehicle.model
        record.vehicle_year = vehicle.year
        if with_vehicle_details:
            record.vehicle_vin = vehicle.vin
            record.vehicle_engine_type = vehicle.engine_type
    return record


def line_item_record(row: InvoiceLineItem) -> LineItemRecord:
    return LineItemRecord(
        id=row.id,
        invoice_id=row.invoice_id,
        position=row.position,
        description=row.description,
        quantity=row.quantity,
        unit_price=row.unit_price,
        total_price=row.total_price,
    )


def invoice_record(
    row: Invoice,
    customer_name: Optional[str] = None,
    task_title: Optional[str] = None,
) -> InvoiceRecord:
    """
    Builds the invoice with its ordered line items (one lazy query per invoice).

    total_amount is derived from the items that were just loaded rather than
    taken from the stored column, so a stale column never reaches the caller.
    """
    items = [line_item_record(item) for item in row.line_items]
    return InvoiceRecord(
        id=row.id,
        customer_id=row.customer_id,
        task_id=row.task_id,
        invoice_number=row.invoice_number,
        issue_date=row.issue_date,
        due_date=row.due_date,
        total_amount=invoice_total(items),
        payment_status=PaymentStatus(row.payment_status),
        notes=row.notes,
        line_items=items,
        customer_name=customer_name,
        task_title=task_title,
    )


def photo_record(row: Photo) -> PhotoRecord:
    return PhotoRecord(
        id=row.id,
        parent=parent_from_columns(row.parent_type, row.parent_id),
        uri=row.uri,
        notes=row.notes,
        created_at=row.created_at,
    )


def schedule_record(row: ScheduleEntry) -> ScheduleEntryRecord:
    return ScheduleEntryRecord(
        id=row.id,
        task_id=row.task_id,
        job_date=row.job_date,
        start_time=row.start_time,
        end_time=row.end_time,
        notes=row.notes,
    )
