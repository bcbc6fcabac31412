from pydantic import BaseModel
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from models.purchase_orders import PurchaseOrderStatus
from models.sales_order_items import FulfillmentStatus


class PurchaseOrderItem(BaseModel):
    id: int
    sales_order_item_id: Optional[int] = None
    product_id: Optional[int] = None
    description: Optional[str] = None
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal
    billed_quantity: Decimal
    remaining_quantity: Decimal
    fulfillment_status: FulfillmentStatus

    class Config:
        from_attributes = True

class PurchaseOrder(BaseModel):
    id: int
    tenant_id: Optional[str] = None
    company_id: int
    vendor_company_id: int
    order_number: str
    reference_number: Optional[str] = None
    order_date: date
    expected_date: Optional[date] = None
    description: Optional[str] = None
    total: Decimal
    status: PurchaseOrderStatus
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    # Items are part of the detailed view
    items: List[PurchaseOrderItem] = []

    class Config:
        from_attributes = True
