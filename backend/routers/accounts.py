from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from crud import accounts as crud_accounts
from crud.exceptions import ConflictError, NotFoundError
from schemas.accounts import Account, AccountCreate, AccountUpdate
from utils.tenancy import get_tenant_id, get_actor

router = APIRouter(
    prefix="/accounts",
    tags=["Accounts"],
)

@router.post("/", response_model=Account, status_code=status.HTTP_201_CREATED)
def create_account(
    account: AccountCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    try:
        return crud_accounts.create_account(db, account, tenant_id, actor)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.get("/", response_model=List[Account])
def get_accounts(
    company_id: Optional[int] = Query(None, alias="companyId"),
    account_type: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud_accounts.get_accounts(db, tenant_id, company_id=company_id, account_type=account_type, skip=skip, limit=limit)

@router.get("/{account_id}", response_model=Account)
def get_account(account_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    db_account = crud_accounts.get_account(db, account_id, tenant_id)
    if db_account is None:
        raise HTTPException(status_code=404, detail="Account not found")
    return db_account

@router.patch("/{account_id}", response_model=Account)
def update_account(
    account_id: int,
    account: AccountUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    """Rename, describe or deactivate an account. Balances are never edited here."""
    db_account = crud_accounts.update_account(db, account_id, account, tenant_id, actor)
    if db_account is None:
        raise HTTPException(status_code=404, detail="Account not found")
    return db_account
