from sqlalchemy import TEXT, Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from .database import Base  # the declarative Base shared by every table

# Money columns come back as Decimal, rounded to cents
MONEY = Numeric(12, 2, asdecimal=True)
QUANTITY = Numeric(10, 3, asdecimal=True)


# 1. Customers: root of the ownership graph
class Customer(Base):
    __tablename__ = "customers"
    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    phone = Column(String(50))
    email = Column(String(255))
    address = Column(String(500))


# 2. Vehicles
class Vehicle(Base):
    __tablename__ = "vehicles"
    id = Column(String(36), primary_key=True)
    make = Column(String(100))
    model = Column(String(100))
    year = Column(Integer)
    vin = Column(String(50), unique=True, index=True)
    engine_type = Column(String(100))

    # Foreign key
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)


# 3. Tasks: both references are optional
class Task(Base):
    __tablename__ = "tasks"
    id = Column(String(36), primary_key=True)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), index=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True)
    title = Column(String(255), nullable=False)
    description = Column(TEXT)
    category = Column(String(50))  # TaskCategory value
    status = Column(String(50), nullable=False)  # TaskStatus value
    created_date = Column(DateTime, nullable=False)
    due_date = Column(Date)


# 4. Invoices
class Invoice(Base):
    __tablename__ = "invoices"
    id = Column(String(36), primary_key=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    task_id = Column(String(36), ForeignKey("tasks.id"), index=True)
    invoice_number = Column(String(50))
    issue_date = Column(Date)
    due_date = Column(Date)
    total_amount = Column(MONEY, nullable=False, default=0)
    payment_status = Column(String(20), nullable=False)  # PaymentStatus value
    notes = Column(TEXT)

    line_items = relationship("InvoiceLineItem", order_by="InvoiceLineItem.position")


# 5. Invoice line items
class InvoiceLineItem(Base):
    __tablename__ = "invoice_items"
    id = Column(String(36), primary_key=True)
    invoice_id = Column(String(36), ForeignKey("invoices.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    description = Column(String(500))
    quantity = Column(QUANTITY, nullable=False)
    unit_price = Column(MONEY, nullable=False)
    total_price = Column(MONEY, nullable=False)


# 6. Schedule entries
class ScheduleEntry(Base):
    __tablename__ = "schedule"
    id = Column(String(36), primary_key=True)
    task_id = Column(String(36), ForeignKey("tasks.id"), index=True)
    job_date = Column(Date)
    start_time = Column(String(5))  # HH:MM
    end_time = Column(String(5))
    notes = Column(TEXT)


# 7. Photos: (parent_type, parent_id) points at a customer, vehicle or task.
# There is no FK here; the cascade walks it through the ownership graph.
class Photo(Base):
    __tablename__ = "photos"
    id = Column(String(36), primary_key=True)
    parent_id = Column(String(36), nullable=False, index=True)
    parent_type = Column(String(20), nullable=False)  # PhotoParentType value
    uri = Column(String(1000), nullable=False)
    notes = Column(TEXT)
    created_at = Column(DateTime)
