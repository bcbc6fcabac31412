from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
import logging
from database import get_db
from schemas.journal_entry import JournalEntry, JournalEntryCreate
from crud import journal_entry as journal_entry_crud
from crud.exceptions import NotFoundError
from utils.tenancy import get_tenant_id, get_actor

router = APIRouter(
    prefix="/journal-entries",
    tags=["Journal Entries"],
)
logger = logging.getLogger("journal_entries")

@router.post("/", response_model=JournalEntry, status_code=status.HTTP_201_CREATED)
def create_journal_entry(
    entry: JournalEntryCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    """
    Create a new manual journal entry.
    Debits must equal credits; this is checked by the JournalEntryCreate schema and again by the ledger.
    """
    try:
        return journal_entry_crud.create_journal_entry(db=db, entry=entry, tenant_id=tenant_id, actor=actor)
    except NotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        db.rollback()
        logger.exception(f"Error creating journal entry for tenant {tenant_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An unexpected error occurred.")


@router.get("/", response_model=List[JournalEntry])
def get_journal_entries(
    company_id: Optional[int] = Query(None, alias="companyId"),
    source_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """
    Retrieve a list of journal entries.
    """
    return journal_entry_crud.get_journal_entries(
        db=db,
        tenant_id=tenant_id,
        company_id=company_id,
        source_type=source_type,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit
    )

@router.get("/{entry_id}", response_model=JournalEntry)
def get_journal_entry(
    entry_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """
    Retrieve a single journal entry by its ID.
    """
    db_entry = journal_entry_crud.get_journal_entry(db=db, entry_id=entry_id, tenant_id=tenant_id)
    if db_entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Journal entry not found")
    return db_entry
