from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional

from database import get_db
from models.bills import Bill as BillModel, BillStatus
from schemas.bills import Bill as BillSchema
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/bills", tags=["Bills"])

@router.get("/", response_model=List[BillSchema])
def read_bills(
    company_id: Optional[int] = Query(None, alias="companyId"),
    purchase_order_id: Optional[int] = Query(None, alias="purchaseOrderId"),
    status: Optional[BillStatus] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    query = db.query(BillModel).filter(BillModel.tenant_id == tenant_id)
    if company_id:
        query = query.filter(BillModel.company_id == company_id)
    if purchase_order_id:
        query = query.filter(BillModel.purchase_order_id == purchase_order_id)
    if status:
        query = query.filter(BillModel.status == status)

    return query.order_by(BillModel.bill_date.desc(), BillModel.id.desc()).options(
        selectinload(BillModel.items)
    ).offset(skip).limit(limit).all()

@router.get("/{bill_id}", response_model=BillSchema)
def read_bill(bill_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    db_bill = db.query(BillModel).options(
        selectinload(BillModel.items)
    ).filter(BillModel.id == bill_id, BillModel.tenant_id == tenant_id).first()
    if db_bill is None:
        raise HTTPException(status_code=404, detail="Bill not found")
    return db_bill
