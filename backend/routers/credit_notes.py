from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from crud import notes as crud_notes
from crud.exceptions import NotFoundError
from schemas.credit_notes import CreditNote, CreditNoteCreate
from utils.tenancy import get_tenant_id, get_actor

router = APIRouter(prefix="/credit-notes", tags=["Credit Notes"])
logger = logging.getLogger("credit_notes")

@router.post("/", response_model=CreditNote, status_code=status.HTTP_201_CREATED)
def create_credit_note(
    credit_note: CreditNoteCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    """
    Raise a credit note against a customer company and post it to the issuer's ledger.
    Only the issuer is booked; use /intercompany-adjustment to book both sides of a pair.
    """
    try:
        return crud_notes.create_credit_note(db, credit_note, tenant_id, actor)
    except NotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        db.rollback()
        logger.exception(f"Error creating credit note for company {credit_note.company_id} for tenant {tenant_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An unexpected error occurred.")

@router.get("/", response_model=List[CreditNote])
def read_credit_notes(
    company_id: Optional[int] = Query(None, alias="companyId"),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud_notes.get_credit_notes(db, tenant_id, company_id=company_id, skip=skip, limit=limit)

@router.get("/{credit_note_id}", response_model=CreditNote)
def read_credit_note(credit_note_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    db_credit_note = crud_notes.get_credit_note(db, credit_note_id, tenant_id)
    if db_credit_note is None:
        raise HTTPException(status_code=404, detail="Credit note not found")
    return db_credit_note
