from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional

from database import get_db
from models.invoices import Invoice as InvoiceModel, InvoiceStatus
from schemas.invoices import Invoice as InvoiceSchema
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/invoices", tags=["Invoices"])

@router.get("/", response_model=List[InvoiceSchema])
def read_invoices(
    company_id: Optional[int] = Query(None, alias="companyId"),
    sales_order_id: Optional[int] = Query(None, alias="salesOrderId"),
    status: Optional[InvoiceStatus] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    query = db.query(InvoiceModel).filter(InvoiceModel.tenant_id == tenant_id)
    if company_id:
        query = query.filter(InvoiceModel.company_id == company_id)
    if sales_order_id:
        query = query.filter(InvoiceModel.sales_order_id == sales_order_id)
    if status:
        query = query.filter(InvoiceModel.status == status)

    return query.order_by(InvoiceModel.invoice_date.desc(), InvoiceModel.id.desc()).options(
        selectinload(InvoiceModel.items)
    ).offset(skip).limit(limit).all()

@router.get("/{invoice_id}", response_model=InvoiceSchema)
def read_invoice(invoice_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    db_invoice = db.query(InvoiceModel).options(
        selectinload(InvoiceModel.items)
    ).filter(InvoiceModel.id == invoice_id, InvoiceModel.tenant_id == tenant_id).first()
    if db_invoice is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return db_invoice
