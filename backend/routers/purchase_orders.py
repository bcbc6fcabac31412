from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional
from datetime import date

from database import get_db
from models.purchase_orders import PurchaseOrder as PurchaseOrderModel, PurchaseOrderStatus
from schemas.purchase_orders import PurchaseOrder as PurchaseOrderSchema
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/purchase-orders", tags=["Purchase Orders"])

@router.get("/", response_model=List[PurchaseOrderSchema])
def read_purchase_orders(
    company_id: Optional[int] = Query(None, alias="companyId"),
    vendor_company_id: Optional[int] = Query(None, alias="vendorCompanyId"),
    status: Optional[PurchaseOrderStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """Retrieve a list of purchase orders with various filters."""
    query = db.query(PurchaseOrderModel).filter(PurchaseOrderModel.tenant_id == tenant_id)

    if company_id:
        query = query.filter(PurchaseOrderModel.company_id == company_id)
    if vendor_company_id:
        query = query.filter(PurchaseOrderModel.vendor_company_id == vendor_company_id)
    if status:
        query = query.filter(PurchaseOrderModel.status == status)
    if start_date:
        query = query.filter(PurchaseOrderModel.order_date >= start_date)
    if end_date:
        query = query.filter(PurchaseOrderModel.order_date <= end_date)

    return query.order_by(PurchaseOrderModel.order_date.desc(), PurchaseOrderModel.id.desc()).options(
        selectinload(PurchaseOrderModel.items)
    ).offset(skip).limit(limit).all()

@router.get("/{po_id}", response_model=PurchaseOrderSchema)
def read_purchase_order(po_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    db_po = db.query(PurchaseOrderModel).options(
        selectinload(PurchaseOrderModel.items)
    ).filter(PurchaseOrderModel.id == po_id, PurchaseOrderModel.tenant_id == tenant_id).first()
    if db_po is None:
        raise HTTPException(status_code=404, detail="Purchase Order not found")
    return db_po
