from pydantic import BaseModel
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from models.bills import BillStatus


class BillItem(BaseModel):
    id: int
    purchase_order_item_id: Optional[int] = None
    invoice_item_id: Optional[int] = None
    product_id: Optional[int] = None
    description: Optional[str] = None
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal
    paid_amount: Decimal

    class Config:
        from_attributes = True

class Bill(BaseModel):
    id: int
    tenant_id: Optional[str] = None
    company_id: int
    vendor_company_id: int
    purchase_order_id: int
    reference_invoice_id: Optional[int] = None
    intercompany_transaction_id: Optional[int] = None
    bill_number: str
    bill_date: date
    due_date: date
    description: Optional[str] = None
    total: Decimal
    amount_paid: Decimal
    amount_credited: Decimal
    balance_due: Decimal
    status: BillStatus
    journal_entry_id: Optional[int] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[BillItem] = []

    class Config:
        from_attributes = True
