from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional
from datetime import date

from database import get_db
from models.sales_orders import SalesOrder as SalesOrderModel, SalesOrderStatus
from schemas.sales_orders import SalesOrder as SalesOrderSchema
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/sales-orders", tags=["Sales Orders"])

@router.get("/", response_model=List[SalesOrderSchema])
def read_sales_orders(
    company_id: Optional[int] = Query(None, alias="companyId"),
    customer_company_id: Optional[int] = Query(None, alias="customerCompanyId"),
    status: Optional[SalesOrderStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """Retrieve a list of sales orders with various filters."""
    query = db.query(SalesOrderModel).filter(SalesOrderModel.tenant_id == tenant_id)

    if company_id:
        query = query.filter(SalesOrderModel.company_id == company_id)
    if customer_company_id:
        query = query.filter(SalesOrderModel.customer_company_id == customer_company_id)
    if status:
        query = query.filter(SalesOrderModel.status == status)
    if start_date:
        query = query.filter(SalesOrderModel.order_date >= start_date)
    if end_date:
        query = query.filter(SalesOrderModel.order_date <= end_date)

    return query.order_by(SalesOrderModel.order_date.desc(), SalesOrderModel.id.desc()).options(
        selectinload(SalesOrderModel.items)
    ).offset(skip).limit(limit).all()

@router.get("/{so_id}", response_model=SalesOrderSchema)
def read_sales_order(so_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    """Retrieve a single sales order with its lines and their fulfillment counters."""
    db_so = db.query(SalesOrderModel).options(
        selectinload(SalesOrderModel.items)
    ).filter(SalesOrderModel.id == so_id, SalesOrderModel.tenant_id == tenant_id).first()
    if db_so is None:
        raise HTTPException(status_code=404, detail="Sales Order not found")
    return db_so
