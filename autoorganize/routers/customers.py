from typing import List, Optional

from fastapi import APIRouter, Depends
from starlette import status

from autoorganize.dependencies import get_store
from autoorganize.errors import NotFoundError
from autoorganize.models.customer import CustomerCreate, CustomerFilters, CustomerRecord, CustomerUpdate
from autoorganize.store import WorkshopStore

router = APIRouter(prefix="/customers", tags=["customers"])


# Route 1: Create a customer
@router.post("/", name="create_customer", status_code=status.HTTP_201_CREATED)
def create_customer(customer: CustomerCreate, store: WorkshopStore = Depends(get_store)):
    return {"id": store.add_customer(customer)}


# Route 2: List customers (by name)
@router.get("/", name="list_customers", response_model=List[CustomerRecord])
def list_customers(name: Optional[str] = None, store: WorkshopStore = Depends(get_store)):
    return store.list_customers(CustomerFilters(name=name))


# Route 3: Customer details
@router.get("/{customer_id}", name="show_customer", response_model=CustomerRecord)
def show_customer(customer_id: str, store: WorkshopStore = Depends(get_store)):
    customer = store.get_customer(customer_id)
    if customer is None:
        raise NotFoundError("Customer not found.")
    return customer


# Route 4: Update (full replacement of the mutable fields)
@router.put("/{customer_id}", name="update_customer")
def update_customer(customer_id: str, customer: CustomerUpdate, store: WorkshopStore = Depends(get_store)):
    return {"rows_affected": store.update_customer(customer_id, customer)}


# Route 5: Delete, together with everything the customer owns
@router.delete("/{customer_id}", name="delete_customer")
def delete_customer(customer_id: str, store: WorkshopStore = Depends(get_store)):
    return {"rows_affected": store.delete_customer(customer_id)}
