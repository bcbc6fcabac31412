from sqlalchemy.orm import Session, selectinload
from models.journal_entry import JournalEntry
from models.accounts import Account
from schemas.journal_entry import JournalEntryCreate
from crud.companies import require_company
from crud.exceptions import InvalidInput
from crud.ledger import post_journal_entry
from typing import Optional
from datetime import date
import logging

logger = logging.getLogger("journal_entries")

def create_journal_entry(db: Session, entry: JournalEntryCreate, tenant_id: str, actor: str = "system"):
    """
    Creates a manual journal entry and its items.

    Balance validation happens twice: in the JournalEntryCreate schema and again
    in the ledger, which also checks that every account belongs to the company.
    """
    company = require_company(db, entry.company_id, tenant_id)

    account_ids = {item.account_id for item in entry.items}
    accounts = {
        account.id: account
        for account in db.query(Account).filter(Account.id.in_(account_ids), Account.tenant_id == tenant_id).all()
    }
    lines = []
    for item in entry.items:
        account = accounts.get(item.account_id)
        if account is None:
            raise InvalidInput(f"Account {item.account_id} not found.")
        lines.append({"account": account, "debit": item.debit, "credit": item.credit, "description": item.description})

    db_entry = post_journal_entry(
        db,
        tenant_id=tenant_id,
        company_id=company.id,
        entry_date=entry.date,
        description=entry.description,
        lines=lines,
        source_type="manual",
        reference_document=entry.reference_document,
        actor=actor,
    )
    db.commit()
    db.refresh(db_entry)
    return db_entry

def get_journal_entry(db: Session, entry_id: int, tenant_id: str):
    """
    Retrieves a single journal entry by its ID.
    """
    return db.query(JournalEntry).options(selectinload(JournalEntry.items)).filter(
        JournalEntry.id == entry_id,
        JournalEntry.tenant_id == tenant_id
    ).first()

def get_journal_entries(
    db: Session,
    tenant_id: str,
    company_id: Optional[int] = None,
    source_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100
):
    """
    Retrieves a list of journal entries with optional company and date filtering.
    """
    query = db.query(JournalEntry).options(selectinload(JournalEntry.items)).filter(
        JournalEntry.tenant_id == tenant_id
    )

    if company_id:
        query = query.filter(JournalEntry.company_id == company_id)
    if source_type:
        query = query.filter(JournalEntry.source_type == source_type)
    if start_date:
        query = query.filter(JournalEntry.date >= start_date)
    if end_date:
        query = query.filter(JournalEntry.date <= end_date)

    return query.order_by(JournalEntry.date.desc(), JournalEntry.id.desc()).offset(skip).limit(limit).all()
