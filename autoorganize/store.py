"""
WorkshopStore: the data-access layer of the workshop.

One store wraps one database (engine opened once, reused by every call).
Every operation runs in its own transaction: multi-statement writes and
cascade deletes either apply completely or not at all.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, insert, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import mappers
from .cascade import cascade_delete
from .config import Settings, TaskDeletePolicy
from .database import Base, make_engine, make_session_factory, transaction
from .database_models import Customer, Invoice, InvoiceLineItem, Photo, ScheduleEntry, Task, Vehicle
from .errors import ConstraintViolationError, PaidInvoiceLinkedError, PersistenceError, ValidationError
from .models.customer import CustomerCreate, CustomerFilters, CustomerRecord, CustomerUpdate
from .models.invoice import InvoiceCreate, InvoiceFilters, InvoiceRecord, InvoiceUpdate, PaymentStatus
from .models.photo import PhotoCreate, PhotoParentType, PhotoRecord, PhotoUpdate, parse_parent
from .models.schedule import ScheduleEntryCreate, ScheduleEntryRecord
from .models.task import TaskCreate, TaskFilters, TaskRecord, TaskUpdate
from .models.vehicle import VehicleCreate, VehicleFilters, VehicleRecord, VehicleUpdate

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Columns added after the first release. init_schema() tries each one and
# moves on when the column is already there.
COLUMN_MIGRATIONS = (
    ("invoices", "invoice_number", "VARCHAR(50)"),
    ("invoices", "notes", "TEXT"),
    ("invoice_items", "position", "INTEGER NOT NULL DEFAULT 0"),
    ("photos", "created_at", "DATETIME"),
)

PHOTO_PARENTS = {
    PhotoParentType.CUSTOMER: Customer,
    PhotoParentType.VEHICLE: Vehicle,
    PhotoParentType.TASK: Task,
}


def _validate(model_cls: Type[M], data: Any) -> M:
    """Turns caller data into model_cls, or raises ValidationError before any write."""
    if isinstance(data, model_cls):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return model_cls.model_validate(data or {})
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid {model_cls.__name__}: {e.error_count()} error(s)",
            errors=e.errors(include_url=False, include_context=False, include_input=False),
        ) from e


def _insert_one(db: Session, model: type, values: Dict[str, Any]) -> None:
    result = db.execute(insert(model.__table__).values(**values))
    if result.rowcount != 1:
        # An insert that succeeds always touches exactly one row
        raise PersistenceError(f"Insert into {model.__tablename__} affected {result.rowcount} rows")


def _apply_changes(row: Any, values: Dict[str, Any]) -> int:
    """Sets only the attributes whose value differs. Returns how many changed."""
    changed = 0
    for name, value in values.items():
        if getattr(row, name) != value:
            setattr(row, name, value)
            changed += 1
    return changed


def _contains(column, value: str):
    return func.lower(column).contains(value.lower(), autoescape=True)


class WorkshopStore:
    """Customers, vehicles, tasks, invoices, photos and schedule entries of one workshop."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.engine = make_engine(self.settings.database_url, echo=self.settings.echo_sql)
        self.SessionLocal = make_session_factory(self.engine)

    @classmethod
    def from_url(cls, database_url: str, **settings) -> "WorkshopStore":
        return cls(Settings(database_url=database_url, **settings))

    def close(self) -> None:
        self.engine.dispose()

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def init_schema(self) -> None:
        """Creates missing tables, then adds columns introduced since. Safe on every start."""
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            logger.error("Schema creation failed: %s", e)
            raise PersistenceError(f"Schema creation failed: {e}", cause=e) from e

        for table, column, ddl in COLUMN_MIGRATIONS:
            try:
                with self.engine.begin() as conn:
                    conn.execute(text(f'ALTER TABLE {table} ADD COLUMN "{column}" {ddl}'))
                logger.info("Added column %s.%s", table, column)
            except OperationalError as e:
                if "duplicate column" in str(e.orig).lower():
                    logger.debug("Column %s.%s already present", table, column)
                    continue
                logger.error("Migration of %s.%s failed: %s", table, column, e)
                raise PersistenceError(f"Migration of {table}.{column} failed: {e}", cause=e) from e

        logger.info("Database schema ready (%s)", self.engine.url.render_as_string(hide_password=True))

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    def add_customer(self, data) -> str:
        customer = _validate(CustomerCreate, data)
        customer_id = customer.id or mappers.new_id()
        with transaction(self.SessionLocal, "add customer") as db:
            _insert_one(db, Customer, {"id": customer_id, **customer.model_dump(exclude={"id"})})
        logger.info("Customer %s added", customer_id)
        return customer_id

    def get_customer(self, customer_id: str) -> Optional[CustomerRecord]:
        with transaction(self.SessionLocal, "get customer") as db:
            row = db.get(Customer, customer_id)
            return mappers.customer_record(row) if row is not None else None

    def list_customers(self, filters=None) -> List[CustomerRecord]:
        filters = _validate(CustomerFilters, filters)
        with transaction(self.SessionLocal, "list customers") as db:
            query = db.query(Customer)
            if filters.name:
                query = query.filter(_contains(Customer.name, filters.name))
            rows = query.order_by(Customer.name.asc(), Customer.id.asc()).all()
            return [mappers.customer_record(row) for row in rows]

    def update_customer(self, customer_id: str, data) -> int:
        customer = _validate(CustomerUpdate, data)
        with transaction(self.SessionLocal, "update customer") as db:
            row = db.get(Customer, customer_id)
            if row is None:
                return 0
            return 1 if _apply_changes(row, customer.model_dump()) else 0

    def delete_customer(self, customer_id: str) -> int:
        with transaction(self.SessionLocal, "delete customer") as db:
            counts = cascade_delete(db, Customer, customer_id)
        return counts.get(Customer.__tablename__, 0)

    # ------------------------------------------------------------------
    # Vehicles
    # ------------------------------------------------------------------

    def add_vehicle(self, data) -> str:
        vehicle = _validate(VehicleCreate, data)
        vehicle_id = vehicle.id or mappers.new_id()
        with transaction(self.SessionLocal, "add vehicle") as db:
            _insert_one(db, Vehicle, {"id": vehicle_id, **vehicle.model_dump(exclude={"id"})})
        logger.info("Vehicle %s added for customer %s", vehicle_id, vehicle.customer_id)
        return vehicle_id

    def get_vehicle(self, vehicle_id: str) -> Optional[VehicleRecord]:
        with transaction(self.SessionLocal, "get vehicle") as db:
            found = (
                db.query(Vehicle, Customer.name)
                .join(Customer, Vehicle.customer_id == Customer.id)
                .filter(Vehicle.id == vehicle_id)
                .first()
            )
            if found is None:
                return None
            row, customer_name = found
            return mappers.vehicle_record(row, customer_name)

    def list_vehicles(self, filters=None) -> List[VehicleRecord]:
        """Vehicles with their owner's name, by make then model."""
        filters = _validate(VehicleFilters, filters)
        with transaction(self.SessionLocal, "list vehicles") as db:
            query = db.query(Vehicle, Customer.name).join(Customer, Vehicle.customer_id == Customer.id)
            if filters.customer_id:
                query = query.filter(Vehicle.customer_id == filters.customer_id)
            if filters.make:
                query = query.filter(_contains(Vehicle.make, filters.make))
            if filters.model:
                query = query.filter(_contains(Vehicle.model, filters.model))
            rows = query.order_by(Vehicle.make.asc(), Vehicle.model.asc(), Vehicle.id.asc()).all()
            return [mappers.vehicle_record(row, customer_name) for row, customer_name in rows]

    def update_vehicle(self, vehicle_id: str, data) -> int:
        vehicle = _validate(VehicleUpdate, data)
        with transaction(self.SessionLocal, "update vehicle") as db:
            row = db.get(Vehicle, vehicle_id)
            if row is None:
                return 0
            return 1 if _apply_changes(row, vehicle.model_dump()) else 0

    def delete_vehicle(self, vehicle_id: str) -> int:
        with transaction(self.SessionLocal, "delete vehicle") as db:
            counts = cascade_delete(db, Vehicle, vehicle_id)
        return counts.get(Vehicle.__tablename__, 0)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    @staticmethod
    def _task_columns(task: TaskUpdate) -> Dict[str, Any]:
        return {
            "vehicle_id": task.vehicle_id,
            "customer_id": task.customer_id,
            "title": task.title,
            "description": task.description,
            "category": task.category.value if task.category else None,
            "status": task.status.value,
            "due_date": task.due_date,
        }

    def add_task(self, data) -> str:
        task = _validate(TaskCreate, data)
        task_id = task.id or mappers.new_id()
        with transaction(self.SessionLocal, "add task") as db:
            _insert_one(db, Task, {"id": task_id, "created_date": datetime.now(), **self._task_columns(task)})
        logger.info("Task %s added", task_id)
        return task_id

    def _task_query(self, db: Session):
        return (
            db.query(Task, Customer, Vehicle)
            .outerjoin(Customer, Task.customer_id == Customer.id)
            .outerjoin(Vehicle, Task.vehicle_id == Vehicle.id)
        )

    def get_task(self, task_id: str) -> Optional[TaskRecord]:
        with transaction(self.SessionLocal, "get task") as db:
            found = self._task_query(db).filter(Task.id == task_id).first()
            if found is None:
                return None
            row, customer, vehicle = found
            return mappers.task_record(row, customer, vehicle, with_vehicle_details=True)

    def list_tasks(self, filters=None) -> List[TaskRecord]:
        """Tasks with customer and vehicle context, most recent first."""
        filters = _validate(TaskFilters, filters)
        with transaction(self.SessionLocal, "list tasks") as db:
            query = self._task_query(db)
            if filters.customer_id:
                query = query.filter(Task.customer_id == filters.customer_id)
            if filters.vehicle_id:
                query = query.filter(Task.vehicle_id == filters.vehicle_id)
            if filters.status:
                query = query.filter(Task.status == filters.status.value)
            if filters.category:
                query = query.filter(Task.category == filters.category.value)
            rows = query.order_by(Task.created_date.desc(), Task.id.asc()).all()
            return [mappers.task_record(row, customer, vehicle) for row, customer, vehicle in rows]

    def update_task(self, task_id: str, data) -> int:
        """created_date is never part of the update."""
        task = _validate(TaskUpdate, data)
        with transaction(self.SessionLocal, "update task") as db:
            row = db.get(Task, task_id)
            if row is None:
                return 0
            return 1 if _apply_changes(row, self._task_columns(task)) else 0

    def delete_task(self, task_id: str) -> int:
        """
        Deletes the task with its photos and schedule entries.

        Linked invoices are kept (their task_id is cleared) but their line
        items are removed. With TaskDeletePolicy.REJECT_IF_PAID the delete is
        refused when one of those invoices is already paid.
        """
        with transaction(self.SessionLocal, "delete task") as db:
            if self.settings.task_delete_policy == TaskDeletePolicy.REJECT_IF_PAID:
                paid = (
                    db.query(Invoice.id)
                    .filter(Invoice.task_id == task_id, Invoice.payment_status == PaymentStatus.PAID.value)
                    .count()
                )
                if paid:
                    raise PaidInvoiceLinkedError(f"Task {task_id} has {paid} paid invoice(s) linked to it")
            counts = cascade_delete(db, Task, task_id)
        return counts.get(Task.__tablename__, 0)

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    @staticmethod
    def _invoice_columns(invoice: InvoiceUpdate) -> Dict[str, Any]:
        return {
            "customer_id": invoice.customer_id,
            "task_id": invoice.task_id,
            "invoice_number": invoice.invoice_number,
            "issue_date": invoice.issue_date,
            "due_date": invoice.due_date,
            "total_amount": mappers.invoice_total(invoice.line_items),
            "payment_status": invoice.payment_status.value,
            "notes": invoice.notes,
        }

    @staticmethod
    def _insert_line_items(db: Session, invoice_id: str, invoice: InvoiceUpdate) -> None:
        for position, item in enumerate(invoice.line_items):
            _insert_one(
                db,
                InvoiceLineItem,
                {
                    "id": mappers.new_id(),
                    "invoice_id": invoice_id,
                    "position": position,
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "total_price": mappers.line_total(item.quantity, item.unit_price),
                },
            )

    def add_invoice(self, data) -> str:
        """Inserts the header and every line item in one transaction."""
        invoice = _validate(InvoiceCreate, data)
        invoice_id = invoice.id or mappers.new_id()
        with transaction(self.SessionLocal, "add invoice") as db:
            _insert_one(db, Invoice, {"id": invoice_id, **self._invoice_columns(invoice)})
            self._insert_line_items(db, invoice_id, invoice)
        logger.info("Invoice %s added with %d line item(s)", invoice_id, len(invoice.line_items))
        return invoice_id

    def _invoice_query(self, db: Session):
        return (
            db.query(Invoice, Customer.name, Task.title)
            .join(Customer, Invoice.customer_id == Customer.id)
            .outerjoin(Task, Invoice.task_id == Task.id)
        )

    def get_invoice(self, invoice_id: str) -> Optional[InvoiceRecord]:
        with transaction(self.SessionLocal, "get invoice") as db:
            found = self._invoice_query(db).filter(Invoice.id == invoice_id).first()
            if found is None:
                return None
            row, customer_name, task_title = found
            return mappers.invoice_record(row, customer_name, task_title)

    def list_invoices(self, filters=None) -> List[InvoiceRecord]:
        """Invoices with their line items, newest issue date first."""
        filters = _validate(InvoiceFilters, filters)
        with transaction(self.SessionLocal, "list invoices") as db:
            query = self._invoice_query(db)
            if filters.customer_id:
                query = query.filter(Invoice.customer_id == filters.customer_id)
            if filters.task_id:
                query = query.filter(Invoice.task_id == filters.task_id)
            if filters.payment_status:
                query = query.filter(Invoice.payment_status == filters.payment_status.value)
            rows = query.order_by(
                Invoice.issue_date.desc(), Invoice.invoice_number.desc(), Invoice.id.asc()
            ).all()
            return [mappers.invoice_record(row, customer_name, task_title) for row, customer_name, task_title in rows]

    def update_invoice(self, invoice_id: str, data) -> int:
        """
        Replaces the header and the whole line-item list in one transaction.

        Old line items are deleted and the supplied ones inserted with new ids;
        there is no diffing. Returns 0 when nothing differs from what is stored.
        """
        invoice = _validate(InvoiceUpdate, data)
        with transaction(self.SessionLocal, "update invoice") as db:
            row = db.get(Invoice, invoice_id)
            if row is None:
                return 0

            stored_items = [(item.description, item.quantity, item.unit_price) for item in row.line_items]
            new_items = [(item.description, item.quantity, item.unit_price) for item in invoice.line_items]
            header_changed = _apply_changes(row, self._invoice_columns(invoice))
            if not header_changed and stored_items == new_items:
                return 0

            db.query(InvoiceLineItem).filter(InvoiceLineItem.invoice_id == invoice_id).delete(
                synchronize_session=False
            )
            self._insert_line_items(db, invoice_id, invoice)
        logger.info("Invoice %s updated with %d line item(s)", invoice_id, len(invoice.line_items))
        return 1

    def delete_invoice(self, invoice_id: str) -> int:
        with transaction(self.SessionLocal, "delete invoice") as db:
            counts = cascade_delete(db, Invoice, invoice_id)
        return counts.get(Invoice.__tablename__, 0)

    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------

    def add_photo(self, data) -> str:
        photo = _validate(PhotoCreate, data)
        photo_id = photo.id or mappers.new_id()
        parent_type = PhotoParentType(photo.parent.kind)
        with transaction(self.SessionLocal, "add photo") as db:
            # No FK on photos, so the parent is checked here
            if db.get(PHOTO_PARENTS[parent_type], photo.parent.id) is None:
                raise ConstraintViolationError(f"{parent_type.value} {photo.parent.id} does not exist")
            _insert_one(
                db,
                Photo,
                {
                    "id": photo_id,
                    "parent_type": parent_type.value,
                    "parent_id": photo.parent.id,
                    "uri": photo.uri,
                    "notes": photo.notes,
                    "created_at": datetime.now(),
                },
            )
        return photo_id

    def get_photo(self, photo_id: str) -> Optional[PhotoRecord]:
        with transaction(self.SessionLocal, "get photo") as db:
            row = db.get(Photo, photo_id)
            return mappers.photo_record(row) if row is not None else None

    def list_photos(self, parent) -> List[PhotoRecord]:
        try:
            parent = parse_parent(parent)
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid photo parent",
                errors=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e
        with transaction(self.SessionLocal, "list photos") as db:
            rows = (
                db.query(Photo)
                .filter(Photo.parent_type == parent.kind, Photo.parent_id == parent.id)
                .order_by(Photo.created_at.asc(), Photo.id.asc())
                .all()
            )
            return [mappers.photo_record(row) for row in rows]

    def update_photo(self, photo_id: str, data) -> int:
        photo = _validate(PhotoUpdate, data)
        with transaction(self.SessionLocal, "update photo") as db:
            row = db.get(Photo, photo_id)
            if row is None:
                return 0
            return 1 if _apply_changes(row, photo.model_dump()) else 0

    def delete_photo(self, photo_id: str) -> int:
        with transaction(self.SessionLocal, "delete photo") as db:
            return db.query(Photo).filter(Photo.id == photo_id).delete(synchronize_session=False)

    # ------------------------------------------------------------------
    # Schedule
    # ------------------------------------------------------------------

    def add_schedule_entry(self, data) -> str:
        entry = _validate(ScheduleEntryCreate, data)
        entry_id = entry.id or mappers.new_id()
        with transaction(self.SessionLocal, "add schedule entry") as db:
            _insert_one(db, ScheduleEntry, {"id": entry_id, **entry.model_dump(exclude={"id"})})
        return entry_id

    def list_schedule_entries(self, task_id: Optional[str] = None) -> List[ScheduleEntryRecord]:
        with transaction(self.SessionLocal, "list schedule entries") as db:
            query = db.query(ScheduleEntry)
            if task_id:
                query = query.filter(ScheduleEntry.task_id == task_id)
            rows = query.order_by(
                ScheduleEntry.job_date.asc(), ScheduleEntry.start_time.asc(), ScheduleEntry.id.asc()
            ).all()
            return [mappers.schedule_record(row) for row in rows]

    def delete_schedule_entry(self, entry_id: str) -> int:
        with transaction(self.SessionLocal, "delete schedule entry") as db:
            return db.query(ScheduleEntry).filter(ScheduleEntry.id == entry_id).delete(synchronize_session=False)
