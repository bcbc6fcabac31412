from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from crud import companies as crud_companies
from crud import accounts as crud_accounts
from crud.exceptions import ConflictError
from models.companies import CompanyType
from schemas.companies import Company, CompanyCreate, CompanyUpdate
from schemas.accounts import Account
from utils.tenancy import get_tenant_id, get_actor

router = APIRouter(prefix="/companies", tags=["Companies"])
logger = logging.getLogger("companies")

@router.post("/", response_model=Company, status_code=status.HTTP_201_CREATED)
def create_company(
    company: CompanyCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    """Create a company together with its default chart of accounts."""
    try:
        return crud_companies.create_company(db, company, tenant_id, actor)
    except ConflictError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception as e:
        db.rollback()
        logger.exception(f"Error creating company {company.code} for tenant {tenant_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An unexpected error occurred.")

@router.get("/", response_model=List[Company])
def read_companies(
    company_type: Optional[CompanyType] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud_companies.get_companies(db, tenant_id, company_type=company_type, skip=skip, limit=limit)

@router.get("/{company_id}", response_model=Company)
def read_company(company_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    db_company = crud_companies.get_company(db, company_id, tenant_id)
    if db_company is None:
        raise HTTPException(status_code=404, detail="Company not found")
    return db_company

@router.patch("/{company_id}", response_model=Company)
def update_company(
    company_id: int,
    company: CompanyUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    db_company = crud_companies.update_company(db, company_id, company, tenant_id, actor)
    if db_company is None:
        raise HTTPException(status_code=404, detail="Company not found")
    return db_company

@router.get("/{company_id}/accounts", response_model=List[Account])
def read_company_accounts(
    company_id: int,
    account_type: Optional[str] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """Chart of accounts of one company, with the ledger balance of every account."""
    if crud_companies.get_company(db, company_id, tenant_id) is None:
        raise HTTPException(status_code=404, detail="Company not found")
    return crud_accounts.get_accounts(db, tenant_id, company_id=company_id, account_type=account_type, limit=1000)
