from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from crud import notes as crud_notes
from crud.exceptions import NotFoundError
from schemas.debit_notes import DebitNote, DebitNoteCreate
from utils.tenancy import get_tenant_id, get_actor

router = APIRouter(prefix="/debit-notes", tags=["Debit Notes"])
logger = logging.getLogger("debit_notes")

@router.post("/", response_model=DebitNote, status_code=status.HTTP_201_CREATED)
def create_debit_note(
    debit_note: DebitNoteCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    """Raise a debit note against a vendor company and post it to the issuer's ledger."""
    try:
        return crud_notes.create_debit_note(db, debit_note, tenant_id, actor)
    except NotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        db.rollback()
        logger.exception(f"Error creating debit note for company {debit_note.company_id} for tenant {tenant_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An unexpected error occurred.")

@router.get("/", response_model=List[DebitNote])
def read_debit_notes(
    company_id: Optional[int] = Query(None, alias="companyId"),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud_notes.get_debit_notes(db, tenant_id, company_id=company_id, skip=skip, limit=limit)

@router.get("/{debit_note_id}", response_model=DebitNote)
def read_debit_note(debit_note_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    db_debit_note = crud_notes.get_debit_note(db, debit_note_id, tenant_id)
    if db_debit_note is None:
        raise HTTPException(status_code=404, detail="Debit note not found")
    return db_debit_note
