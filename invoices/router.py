from fastapi import APIRouter, Depends
from typing import List, Optional

from .models import InvoiceCreated, InvoiceDetail, InvoiceMutation, InvoiceSummary, InvoiceWrite
from . import service
from config.settings import Settings, get_app_settings
from database import Database, get_database

router = APIRouter(prefix='/api/invoices', tags=['invoices'])


@router.get('', response_model=List[InvoiceSummary])
def get_invoices(
    client_id: Optional[int] = None,
    status: Optional[str] = None,
    db: Database = Depends(get_database),
):
    """List invoice headers with the client's display name"""
    return service.list_invoices(db, client_id, status)


@router.get('/{invoice_id}', response_model=InvoiceDetail)
def get_invoice(invoice_id: int, db: Database = Depends(get_database)):
    """Get one invoice with its line items"""
    return service.get_invoice(db, invoice_id)


@router.post('', response_model=InvoiceCreated)
def create_invoice(
    invoice: InvoiceWrite,
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_app_settings),
):
    """Create an invoice header and its line items in one transaction"""
    return service.create_invoice(db, invoice, settings)


@router.put('/{invoice_id}', response_model=InvoiceMutation)
def update_invoice(
    invoice_id: int,
    invoice: InvoiceWrite,
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_app_settings),
):
    """Update the header and replace every line item"""
    return service.update_invoice(db, invoice_id, invoice, settings)


@router.delete('/{invoice_id}', response_model=InvoiceMutation)
def delete_invoice(invoice_id: int, db: Database = Depends(get_database)):
    """Delete an invoice and its line items"""
    return service.delete_invoice(db, invoice_id)
