from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

class Payment(BaseModel):
    id: int
    tenant_id: Optional[str] = None
    company_id: int
    bill_id: int
    receipt_id: Optional[int] = None
    intercompany_transaction_id: Optional[int] = None
    payment_number: str
    payment_date: date
    amount: Decimal
    payment_method: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    is_partial: bool
    debit_account_id: int
    credit_account_id: int
    journal_entry_id: Optional[int] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
