from typing import List, Optional

from fastapi import APIRouter, Depends
from starlette import status

from autoorganize.dependencies import get_store
from autoorganize.errors import NotFoundError
from autoorganize.models.invoice import InvoiceCreate, InvoiceFilters, InvoiceRecord, InvoiceUpdate, PaymentStatus
from autoorganize.store import WorkshopStore

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post("/", name="create_invoice", status_code=status.HTTP_201_CREATED)
def create_invoice(invoice: InvoiceCreate, store: WorkshopStore = Depends(get_store)):
    return {"id": store.add_invoice(invoice)}


@router.get("/", name="list_invoices", response_model=List[InvoiceRecord])
def list_invoices(
    customer_id: Optional[str] = None,
    task_id: Optional[str] = None,
    payment_status: Optional[PaymentStatus] = None,
    store: WorkshopStore = Depends(get_store),
):
    filters = InvoiceFilters(customer_id=customer_id, task_id=task_id, payment_status=payment_status)
    return store.list_invoices(filters)


@router.get("/{invoice_id}", name="show_invoice", response_model=InvoiceRecord)
def show_invoice(invoice_id: str, store: WorkshopStore = Depends(get_store)):
    invoice = store.get_invoice(invoice_id)
    if invoice is None:
        raise NotFoundError("Invoice not found.")
    return invoice


@router.put("/{invoice_id}", name="update_invoice")
def update_invoice(invoice_id: str, invoice: InvoiceUpdate, store: WorkshopStore = Depends(get_store)):
    # The body carries the complete line-item list; it replaces the stored one
    return {"rows_affected": store.update_invoice(invoice_id, invoice)}


@router.delete("/{invoice_id}", name="delete_invoice")
def delete_invoice(invoice_id: str, store: WorkshopStore = Depends(get_store)):
    return {"rows_affected": store.delete_invoice(invoice_id)}
