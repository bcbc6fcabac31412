from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import date
from .journal_item import JournalItemCreate, JournalItem

class JournalEntryBase(BaseModel):
    date: date
    description: Optional[str] = None
    reference_document: Optional[str] = None

class JournalEntryCreate(JournalEntryBase):
    company_id: int
    items: List[JournalItemCreate]

    @field_validator('items')
    @classmethod
    def check_debits_equal_credits(cls, items):
        for item in items:
            if (item.debit > 0) == (item.credit > 0):
                raise ValueError('Each journal line must carry either a debit or a credit amount.')
        total_debit = sum(item.debit for item in items)
        total_credit = sum(item.credit for item in items)
        if total_debit != total_credit:
            raise ValueError('The sum of debits must equal the sum of credits.')
        if total_debit == 0 and total_credit == 0:
            raise ValueError('A journal entry must have non-zero debit and credit amounts.')
        return items

class JournalEntry(JournalEntryBase):
    id: int
    tenant_id: str
    company_id: int
    entry_number: str
    source_type: str
    source_id: Optional[int] = None
    counterparty_company_id: Optional[int] = None
    intercompany_transaction_id: Optional[int] = None
    items: List[JournalItem] = []

    class Config:
        from_attributes = True
