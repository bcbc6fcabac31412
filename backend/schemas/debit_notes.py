from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from schemas.credit_notes import NoteItem, NoteItemCreate


class DebitNoteCreate(BaseModel):
    company_id: int
    vendor_company_id: int
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    reason: Optional[str] = None
    debit_note_date: Optional[date] = None
    items: List[NoteItemCreate] = []

class DebitNote(BaseModel):
    id: int
    tenant_id: Optional[str] = None
    company_id: int
    vendor_company_id: int
    bill_id: Optional[int] = None
    intercompany_transaction_id: Optional[int] = None
    debit_note_number: str
    debit_note_date: date
    amount: Decimal
    reason: Optional[str] = None
    status: str
    journal_entry_id: Optional[int] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[NoteItem] = []

    class Config:
        from_attributes = True
