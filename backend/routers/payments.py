from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from models.payments import Payment as PaymentModel
from schemas.payments import Payment as PaymentSchema
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/payments", tags=["Payments"])

@router.get("/", response_model=List[PaymentSchema])
def read_payments(
    company_id: Optional[int] = Query(None, alias="companyId"),
    bill_id: Optional[int] = Query(None, alias="billId"),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """Payments made by the buying company, newest first."""
    query = db.query(PaymentModel).filter(PaymentModel.tenant_id == tenant_id)
    if company_id:
        query = query.filter(PaymentModel.company_id == company_id)
    if bill_id:
        query = query.filter(PaymentModel.bill_id == bill_id)
    return query.order_by(PaymentModel.payment_date.desc(), PaymentModel.id.desc()).offset(skip).limit(limit).all()

@router.get("/{payment_id}", response_model=PaymentSchema)
def read_payment(payment_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    db_payment = db.query(PaymentModel).filter(
        PaymentModel.id == payment_id,
        PaymentModel.tenant_id == tenant_id
    ).first()
    if db_payment is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    return db_payment
