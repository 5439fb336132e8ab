from pydantic import BaseModel
from typing import Any, List, Optional
from datetime import date


# -----------------------------
# Request bodies
# -----------------------------
# Line item fields accept any JSON scalar; utils.coercion decides
# what malformed values become.
class LineItemWrite(BaseModel):
    item_date: Any = None
    activity: Any = None
    description: Any = None
    quantity: Any = None
    rate: Any = None
    amount: Any = None


class InvoiceWrite(BaseModel):
    client_id: Optional[int] = None
    invoice_date: Any = None
    status: Optional[str] = None
    line_items: Optional[List[LineItemWrite]] = None


# -----------------------------
# Responses
# -----------------------------
class LineItem(BaseModel):
    id: int
    invoice_id: int
    item_date: Optional[date] = None
    activity: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[float] = None
    rate: Optional[float] = None
    amount: float

    class Config:
        from_attributes = True


class InvoiceSummary(BaseModel):
    id: int
    client_id: Optional[int] = None
    invoice_number: str
    invoice_date: Optional[date] = None
    status: str
    total_due: float
    client_name: Optional[str] = None

    class Config:
        from_attributes = True


class InvoiceDetail(InvoiceSummary):
    line_items: List[LineItem] = []


class InvoiceCreated(BaseModel):
    message: str
    id: int
    invoice_number: str


class InvoiceMutation(BaseModel):
    message: str
    affectedRows: int
