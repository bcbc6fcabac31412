from sqlalchemy.orm import Session
from typing import Optional
from models.accounts import Account
from models.companies import Company
from schemas.accounts import AccountCreate, AccountUpdate
from crud.exceptions import ConflictError, NotFoundError
import logging

logger = logging.getLogger("accounts")

DEFAULT_ACCOUNTS = [
    {"account_code": "1000", "account_name": "Cash", "account_type": "Asset"},
    {"account_code": "1100", "account_name": "Accounts Receivable", "account_type": "Asset"},
    {"account_code": "1150", "account_name": "Intercompany Receivable", "account_type": "Asset"},
    {"account_code": "1200", "account_name": "Inventory", "account_type": "Asset"},
    {"account_code": "1300", "account_name": "Prepaid Expenses", "account_type": "Asset"},
    {"account_code": "1500", "account_name": "Equipment", "account_type": "Asset"},
    {"account_code": "2000", "account_name": "Accounts Payable", "account_type": "Liability"},
    {"account_code": "2050", "account_name": "Intercompany Payable", "account_type": "Liability"},
    {"account_code": "2100", "account_name": "Accrued Liabilities", "account_type": "Liability"},
    {"account_code": "3000", "account_name": "Owner's Capital", "account_type": "Equity"},
    {"account_code": "3100", "account_name": "Retained Earnings", "account_type": "Equity"},
    {"account_code": "4000", "account_name": "Sales Revenue", "account_type": "Revenue"},
    {"account_code": "4100", "account_name": "Service Revenue", "account_type": "Revenue"},
    {"account_code": "4200", "account_name": "Intercompany Revenue", "account_type": "Revenue"},
    {"account_code": "5000", "account_name": "Cost of Goods Sold", "account_type": "Expense"},
    {"account_code": "6000", "account_name": "Operating Expenses", "account_type": "Expense"},
]

def get_account(db: Session, account_id: int, tenant_id: str):
    return db.query(Account).filter(
        Account.id == account_id,
        Account.tenant_id == tenant_id
    ).first()

def get_account_by_code(db: Session, company_id: int, account_code: str, tenant_id: str):
    return db.query(Account).filter(
        Account.company_id == company_id,
        Account.account_code == account_code,
        Account.tenant_id == tenant_id
    ).first()

def get_accounts(db: Session, tenant_id: str, company_id: Optional[int] = None, account_type: str = None, skip: int = 0, limit: int = 100):
    query = db.query(Account).filter(
        Account.tenant_id == tenant_id,
        Account.is_active == True
    )

    if company_id:
        query = query.filter(Account.company_id == company_id)
    if account_type:
        query = query.filter(Account.account_type == account_type)

    return query.order_by(Account.company_id, Account.account_code).offset(skip).limit(limit).all()

def create_account(db: Session, account: AccountCreate, tenant_id: str, actor: str = "system"):
    company = db.query(Company).filter(Company.id == account.company_id, Company.tenant_id == tenant_id).first()
    if not company:
        raise NotFoundError(f"Company {account.company_id} not found.")
    if get_account_by_code(db, account.company_id, account.account_code, tenant_id):
        raise ConflictError(f"Account code {account.account_code} already exists for company {account.company_id}.")

    db_account = Account(**account.model_dump(), tenant_id=tenant_id, balance=0, created_by=actor)
    db.add(db_account)
    db.commit()
    db.refresh(db_account)
    logger.info(f"Account {db_account.account_code} created for company {db_account.company_id} by {actor} for tenant {tenant_id}")
    return db_account

def update_account(db: Session, account_id: int, account_update: AccountUpdate, tenant_id: str, actor: str = "system"):
    db_account = get_account(db, account_id, tenant_id)
    if not db_account:
        return None

    update_data = account_update.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(db_account, key, value)
    db_account.updated_by = actor

    db.commit()
    db.refresh(db_account)
    return db_account

def initialize_default_accounts(db: Session, company: Company, actor: str = "system"):
    """Seed the default chart of accounts for a new company. Flushes, does not commit."""
    existing_codes = {
        code for (code,) in db.query(Account.account_code).filter(Account.company_id == company.id).all()
    }
    created = []
    for account_data in DEFAULT_ACCOUNTS:
        if account_data["account_code"] in existing_codes:
            continue
        db_account = Account(
            **account_data,
            tenant_id=company.tenant_id,
            company_id=company.id,
            balance=0,
            is_active=True,
            created_by=actor,
        )
        db.add(db_account)
        created.append(db_account)
    db.flush()
    return created
