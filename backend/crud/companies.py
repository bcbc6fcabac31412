from sqlalchemy.orm import Session
from typing import Optional
import logging
from models.companies import Company, CompanyType
from schemas.companies import CompanyCreate, CompanyUpdate
from schemas.audit_log import AuditLogCreate
from crud.audit_log import create_audit_log
from crud.accounts import initialize_default_accounts
from crud.exceptions import ConflictError, NotFoundError
from utils import sqlalchemy_to_dict

logger = logging.getLogger("companies")

def get_company(db: Session, company_id: int, tenant_id: str):
    return db.query(Company).filter(Company.id == company_id, Company.tenant_id == tenant_id).first()

def require_company(db: Session, company_id: int, tenant_id: str) -> Company:
    company = get_company(db, company_id, tenant_id)
    if company is None:
        raise NotFoundError(f"Company {company_id} not found.")
    return company

def get_companies(db: Session, tenant_id: str, company_type: Optional[CompanyType] = None, skip: int = 0, limit: int = 100):
    query = db.query(Company).filter(Company.tenant_id == tenant_id)
    if company_type:
        query = query.filter(Company.company_type == company_type)
    return query.order_by(Company.id).offset(skip).limit(limit).all()

def create_company(db: Session, company: CompanyCreate, tenant_id: str, actor: str = "system"):
    """Create a company and its default chart of accounts in one transaction."""
    duplicate = db.query(Company).filter(Company.tenant_id == tenant_id, Company.code == company.code).first()
    if duplicate:
        raise ConflictError(f"Company code '{company.code}' is already used in this tenant.")

    db_company = Company(**company.model_dump(), tenant_id=tenant_id, is_active=True, created_by=actor)
    db.add(db_company)
    db.flush()

    accounts = initialize_default_accounts(db, db_company, actor)
    create_audit_log(db, AuditLogCreate(
        tenant_id=tenant_id,
        table_name="companies",
        record_id=db_company.id,
        changed_by=actor,
        action="INSERT",
        new_values=sqlalchemy_to_dict(db_company)
    ))
    db.commit()
    db.refresh(db_company)
    logger.info(f"Company {db_company.code} (ID: {db_company.id}) created with {len(accounts)} accounts by {actor} for tenant {tenant_id}")
    return db_company

def update_company(db: Session, company_id: int, company_update: CompanyUpdate, tenant_id: str, actor: str = "system"):
    db_company = get_company(db, company_id, tenant_id)
    if not db_company:
        return None

    old_values = sqlalchemy_to_dict(db_company)
    for key, value in company_update.model_dump(exclude_unset=True).items():
        setattr(db_company, key, value)
    db_company.updated_by = actor
    db.flush()

    create_audit_log(db, AuditLogCreate(
        tenant_id=tenant_id,
        table_name="companies",
        record_id=db_company.id,
        changed_by=actor,
        action="UPDATE",
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_company)
    ))
    db.commit()
    db.refresh(db_company)
    logger.info(f"Company ID {company_id} updated by {actor} for tenant {tenant_id}")
    return db_company
