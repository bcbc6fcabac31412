from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from crud import products as crud_products
from crud.exceptions import ConflictError, NotFoundError
from schemas.products import Product, ProductCreate
from utils.tenancy import get_tenant_id, get_actor

router = APIRouter(prefix="/products", tags=["Products"])

@router.post("/", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(
    product: ProductCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    try:
        return crud_products.create_product(db, product, tenant_id, actor)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.get("/", response_model=List[Product])
def read_products(
    company_id: Optional[int] = Query(None, alias="companyId"),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud_products.get_products(db, tenant_id, company_id=company_id, skip=skip, limit=limit)

@router.get("/{product_id}", response_model=Product)
def read_product(product_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    db_product = crud_products.get_product(db, product_id, tenant_id)
    if db_product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return db_product
