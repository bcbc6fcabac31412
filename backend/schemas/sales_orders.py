from pydantic import BaseModel
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from models.sales_orders import SalesOrderStatus
from models.sales_order_items import FulfillmentStatus


class SalesOrderItem(BaseModel):
    id: int
    product_id: Optional[int] = None
    description: Optional[str] = None
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal
    invoiced_quantity: Decimal
    paid_quantity: Decimal
    remaining_quantity: Decimal
    fulfillment_status: FulfillmentStatus

    class Config:
        from_attributes = True

class SalesOrder(BaseModel):
    id: int
    tenant_id: Optional[str] = None
    company_id: int
    customer_company_id: int
    order_number: str
    reference_number: Optional[str] = None
    order_date: date
    expected_date: Optional[date] = None
    description: Optional[str] = None
    total: Decimal
    status: SalesOrderStatus
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[SalesOrderItem] = []

    class Config:
        from_attributes = True
