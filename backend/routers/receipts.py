from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from models.receipts import Receipt as ReceiptModel
from schemas.receipts import Receipt as ReceiptSchema
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/receipts", tags=["Receipts"])

@router.get("/", response_model=List[ReceiptSchema])
def read_receipts(
    company_id: Optional[int] = Query(None, alias="companyId"),
    invoice_id: Optional[int] = Query(None, alias="invoiceId"),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """Receipts recorded by the selling company, newest first."""
    query = db.query(ReceiptModel).filter(ReceiptModel.tenant_id == tenant_id)
    if company_id:
        query = query.filter(ReceiptModel.company_id == company_id)
    if invoice_id:
        query = query.filter(ReceiptModel.invoice_id == invoice_id)
    return query.order_by(ReceiptModel.receipt_date.desc(), ReceiptModel.id.desc()).offset(skip).limit(limit).all()

@router.get("/{receipt_id}", response_model=ReceiptSchema)
def read_receipt(receipt_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    db_receipt = db.query(ReceiptModel).filter(
        ReceiptModel.id == receipt_id,
        ReceiptModel.tenant_id == tenant_id
    ).first()
    if db_receipt is None:
        raise HTTPException(status_code=404, detail="Receipt not found")
    return db_receipt
