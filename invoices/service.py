from enum import Enum
from typing import Any, Dict, List, Optional

import structlog
from fastapi import HTTPException

from config.settings import Settings
from database import Database, Transaction
from utils.coercion import to_decimal_or_none, to_iso_date, to_text
from .calculations import calculate_total_due, generate_invoice_number, resolve_item_amount
from .models import InvoiceWrite

LOGGER = structlog.get_logger(__name__)

DEFAULT_STATUS = "pending"

HEADER_COLUMNS = """
    i.id,
    i.client_id,
    i.invoice_number,
    i.invoice_date,
    i.status,
    i.total_due,
    CASE WHEN c.id IS NULL THEN NULL
         ELSE TRIM(COALESCE(c.first_name, '') || ' ' || COALESCE(c.last_name, ''))
    END AS client_name
"""


class WriteStage(str, Enum):
    HEADER_WRITTEN = "header_written"
    NUMBER_ASSIGNED = "number_assigned"
    ITEMS_REPLACED = "items_replaced"


def _error_message(exc: Exception) -> str:
    # SQLAlchemy wraps the driver error in .orig
    return str(getattr(exc, "orig", None) or exc)


def _line_items(invoice: InvoiceWrite) -> List[Dict[str, Any]]:
    return [item.model_dump() for item in invoice.line_items or []]


def _replace_line_items(tx: Transaction, invoice_id: int, items: List[Dict[str, Any]],
                        honor_zero: bool) -> None:
    """Delete the invoice's items, then insert the new set in request order."""
    tx.execute("DELETE FROM invoice_line_items WHERE invoice_id = :invoice_id",
               {"invoice_id": invoice_id})

    for item in items:
        tx.execute("""
            INSERT INTO invoice_line_items
            (invoice_id, item_date, activity, description, quantity, rate, amount)
            VALUES (:invoice_id, :item_date, :activity, :description, :quantity, :rate, :amount)
        """, {
            "invoice_id": invoice_id,
            "item_date": to_iso_date(item.get("item_date")),
            "activity": to_text(item.get("activity")),
            "description": to_text(item.get("description")),
            "quantity": to_decimal_or_none(item.get("quantity")),
            "rate": to_decimal_or_none(item.get("rate")),
            "amount": resolve_item_amount(item, honor_zero),
        })


# ============================================================
# LIST INVOICES
# ============================================================

def list_invoices(db: Database, client_id: Optional[int] = None,
                  status: Optional[str] = None) -> List[dict]:
    query = f"""
        SELECT {HEADER_COLUMNS}
        FROM invoices i
        LEFT JOIN clients c ON i.client_id = c.id
        WHERE 1=1
    """
    params: Dict[str, Any] = {}

    if client_id is not None:
        query += " AND i.client_id = :client_id"
        params["client_id"] = client_id
    if status:
        query += " AND i.status = :status"
        params["status"] = status

    query += " ORDER BY i.id"

    try:
        return db.execute(query, params).rows
    except Exception as e:
        LOGGER.exception("invoice_list_failed")
        raise HTTPException(status_code=500, detail=f"Failed to fetch invoices: {_error_message(e)}")


# ============================================================
# GET INVOICE + LINE ITEMS
# ============================================================

def get_invoice(db: Database, invoice_id: int) -> dict:
    try:
        invoice = db.execute(f"""
            SELECT {HEADER_COLUMNS}
            FROM invoices i
            LEFT JOIN clients c ON i.client_id = c.id
            WHERE i.id = :id
        """, {"id": invoice_id}).first()

        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")

        invoice["line_items"] = db.execute(
            "SELECT * FROM invoice_line_items WHERE invoice_id = :id ORDER BY id",
            {"id": invoice_id},
        ).rows
        return invoice

    except HTTPException:
        raise
    except Exception as e:
        LOGGER.exception("invoice_fetch_failed", invoice_id=invoice_id)
        raise HTTPException(status_code=500, detail=f"Failed to fetch invoice: {_error_message(e)}")


# ============================================================
# CREATE INVOICE (header + number + items, one transaction)
# ============================================================

def create_invoice(db: Database, invoice: InvoiceWrite, settings: Settings) -> dict:
    try:
        items = _line_items(invoice)
        total_due = calculate_total_due(items, settings.honor_zero_amount)

        with db.transaction("create_invoice") as tx:
            header = tx.execute("""
                INSERT INTO invoices
                (client_id, invoice_number, invoice_date, status, total_due)
                VALUES (:client_id, '', :invoice_date, :status, :total_due)
                RETURNING id
            """, {
                "client_id": invoice.client_id,
                "invoice_date": to_iso_date(invoice.invoice_date),
                "status": invoice.status or DEFAULT_STATUS,
                "total_due": total_due,
            }).first()
            invoice_id = header["id"]
            tx.stage = WriteStage.HEADER_WRITTEN.value

            # The number is derived from the id, so it can only be set after the insert
            invoice_number = generate_invoice_number(
                invoice_id,
                settings.invoice_number_prefix,
                settings.invoice_number_offset,
            )
            tx.execute("UPDATE invoices SET invoice_number = :number WHERE id = :id",
                       {"number": invoice_number, "id": invoice_id})
            tx.stage = WriteStage.NUMBER_ASSIGNED.value

            _replace_line_items(tx, invoice_id, items, settings.honor_zero_amount)
            tx.stage = WriteStage.ITEMS_REPLACED.value

    except Exception as e:
        LOGGER.exception("invoice_create_failed", client_id=invoice.client_id)
        raise HTTPException(status_code=500, detail=f"Failed to create invoice: {_error_message(e)}")

    LOGGER.info("invoice_created", invoice_id=invoice_id, invoice_number=invoice_number,
                items=len(items), total_due=str(total_due))
    return {"message": "Invoice created", "id": invoice_id, "invoice_number": invoice_number}


# ============================================================
# UPDATE INVOICE (header + replace items, one transaction)
# ============================================================

def update_invoice(db: Database, invoice_id: int, invoice: InvoiceWrite, settings: Settings) -> dict:
    try:
        items = _line_items(invoice)
        total_due = calculate_total_due(items, settings.honor_zero_amount)

        with db.transaction("update_invoice") as tx:
            # invoice_number is bound at creation and never rewritten
            result = tx.execute("""
                UPDATE invoices
                SET client_id = :client_id,
                    invoice_date = :invoice_date,
                    status = :status,
                    total_due = :total_due
                WHERE id = :id
            """, {
                "client_id": invoice.client_id,
                "invoice_date": to_iso_date(invoice.invoice_date),
                "status": invoice.status or DEFAULT_STATUS,
                "total_due": total_due,
                "id": invoice_id,
            })

            if result.rowcount == 0:
                tx.rollback()
                LOGGER.info("invoice_not_found", invoice_id=invoice_id, operation="update")
                raise HTTPException(status_code=404, detail="Invoice not found")
            tx.stage = WriteStage.HEADER_WRITTEN.value

            _replace_line_items(tx, invoice_id, items, settings.honor_zero_amount)
            tx.stage = WriteStage.ITEMS_REPLACED.value

    except HTTPException:
        raise
    except Exception as e:
        LOGGER.exception("invoice_update_failed", invoice_id=invoice_id)
        raise HTTPException(status_code=500, detail=f"Failed to update invoice: {_error_message(e)}")

    LOGGER.info("invoice_updated", invoice_id=invoice_id, items=len(items), total_due=str(total_due))
    return {"message": "Invoice updated", "affectedRows": result.rowcount}


# ============================================================
# DELETE INVOICE
# ============================================================

def delete_invoice(db: Database, invoice_id: int) -> dict:
    try:
        # Items first: they reference the header. Safe even if the invoice is gone.
        db.execute("DELETE FROM invoice_line_items WHERE invoice_id = :id", {"id": invoice_id})
        result = db.execute("DELETE FROM invoices WHERE id = :id", {"id": invoice_id})
    except Exception as e:
        LOGGER.exception("invoice_delete_failed", invoice_id=invoice_id)
        raise HTTPException(status_code=500, detail=f"Delete failed: {_error_message(e)}")

    if result.rowcount == 0:
        LOGGER.info("invoice_not_found", invoice_id=invoice_id, operation="delete")
        raise HTTPException(status_code=404, detail="Invoice not found")

    LOGGER.info("invoice_deleted", invoice_id=invoice_id)
    return {"message": "Invoice deleted", "affectedRows": result.rowcount}
