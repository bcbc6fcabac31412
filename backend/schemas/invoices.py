from pydantic import BaseModel
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from models.invoices import InvoiceStatus, InvoiceType


class InvoiceItem(BaseModel):
    id: int
    sales_order_item_id: int
    product_id: Optional[int] = None
    description: Optional[str] = None
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal
    paid_amount: Decimal

    class Config:
        from_attributes = True

class Invoice(BaseModel):
    id: int
    tenant_id: Optional[str] = None
    company_id: int
    customer_company_id: int
    sales_order_id: int
    intercompany_transaction_id: Optional[int] = None
    invoice_number: str
    invoice_date: date
    due_date: date
    description: Optional[str] = None
    invoice_type: InvoiceType
    total: Decimal
    amount_paid: Decimal
    amount_credited: Decimal
    balance_due: Decimal
    status: InvoiceStatus
    journal_entry_id: Optional[int] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[InvoiceItem] = []

    class Config:
        from_attributes = True
