from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal


class NoteItemCreate(BaseModel):
    product_id: Optional[int] = None
    quantity: Optional[Decimal] = Field(None, gt=0, decimal_places=3)
    unit_price: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    reason: Optional[str] = None

class NoteItem(BaseModel):
    id: int
    product_id: Optional[int] = None
    quantity: Optional[Decimal] = None
    unit_price: Optional[Decimal] = None
    amount: Decimal
    reason: Optional[str] = None

    class Config:
        from_attributes = True

class CreditNoteCreate(BaseModel):
    company_id: int
    customer_company_id: int
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    reason: Optional[str] = None
    credit_note_date: Optional[date] = None
    items: List[NoteItemCreate] = []

class CreditNote(BaseModel):
    id: int
    tenant_id: Optional[str] = None
    company_id: int
    customer_company_id: int
    invoice_id: Optional[int] = None
    intercompany_transaction_id: Optional[int] = None
    credit_note_number: str
    credit_note_date: date
    amount: Decimal
    reason: Optional[str] = None
    status: str
    journal_entry_id: Optional[int] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[NoteItem] = []

    class Config:
        from_attributes = True
