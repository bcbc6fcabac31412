from sqlalchemy import Column, Integer, Numeric, ForeignKey, String, Enum
from sqlalchemy.orm import relationship
from database import Base
import enum

class FulfillmentStatus(enum.Enum):
    OPEN = "Open"
    PARTIALLY_FULFILLED = "Partially Fulfilled"
    FULFILLED = "Fulfilled"

class SalesOrderItem(Base):
    __tablename__ = "sales_order_items"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    sales_order_id = Column(Integer, ForeignKey("sales_orders.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    description = Column(String, nullable=True)
    quantity = Column(Numeric(12, 3), nullable=False)
    unit_price = Column(Numeric(14, 2), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False) # quantity * unit_price
    invoiced_quantity = Column(Numeric(12, 3), default=0, server_default='0', nullable=False)
    paid_quantity = Column(Numeric(12, 3), default=0, server_default='0', nullable=False)
    fulfillment_status = Column(Enum(FulfillmentStatus), default=FulfillmentStatus.OPEN, nullable=False)

    # Relationships
    sales_order = relationship("SalesOrder", back_populates="items")
    product = relationship("Product")

    @property
    def remaining_quantity(self):
        return self.quantity - (self.invoiced_quantity or 0)

    @property
    def product_name(self):
        if self.product is not None:
            return self.product.name
        return self.description
