from sqlalchemy import Column, Integer, Numeric, ForeignKey, String, Enum
from sqlalchemy.orm import relationship
from database import Base
from models.sales_order_items import FulfillmentStatus

class PurchaseOrderItem(Base):
    __tablename__ = "purchase_order_items"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    purchase_order_id = Column(Integer, ForeignKey("purchase_orders.id"), nullable=False)
    sales_order_item_id = Column(Integer, ForeignKey("sales_order_items.id"), nullable=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    description = Column(String, nullable=True)
    quantity = Column(Numeric(12, 3), nullable=False)
    unit_price = Column(Numeric(14, 2), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    billed_quantity = Column(Numeric(12, 3), default=0, server_default='0', nullable=False)
    fulfillment_status = Column(Enum(FulfillmentStatus), default=FulfillmentStatus.OPEN, nullable=False)

    # Relationships
    purchase_order = relationship("PurchaseOrder", back_populates="items")
    sales_order_item = relationship("SalesOrderItem")
    product = relationship("Product")

    @property
    def remaining_quantity(self):
        return self.quantity - (self.billed_quantity or 0)
