from sqlalchemy.orm import Session
from typing import Optional
import logging
from models.products import Product
from schemas.products import ProductCreate
from crud.companies import require_company
from crud.exceptions import ConflictError

logger = logging.getLogger("products")

def get_product(db: Session, product_id: int, tenant_id: str):
    return db.query(Product).filter(Product.id == product_id, Product.tenant_id == tenant_id).first()

def get_products(db: Session, tenant_id: str, company_id: Optional[int] = None, skip: int = 0, limit: int = 100):
    query = db.query(Product).filter(Product.tenant_id == tenant_id, Product.is_active == True)
    if company_id:
        query = query.filter(Product.company_id == company_id)
    return query.order_by(Product.id).offset(skip).limit(limit).all()

def create_product(db: Session, product: ProductCreate, tenant_id: str, actor: str = "system"):
    require_company(db, product.company_id, tenant_id)
    duplicate = db.query(Product).filter(Product.company_id == product.company_id, Product.code == product.code).first()
    if duplicate:
        raise ConflictError(f"Product code '{product.code}' already exists for company {product.company_id}.")

    db_product = Product(**product.model_dump(), tenant_id=tenant_id, is_active=True, created_by=actor)
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    logger.info(f"Product {db_product.code} (ID: {db_product.id}) created for company {db_product.company_id} for tenant {tenant_id}")
    return db_product
