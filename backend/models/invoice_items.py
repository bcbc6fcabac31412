from sqlalchemy import Column, Integer, Numeric, ForeignKey, String
from sqlalchemy.orm import relationship
from database import Base

class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False)
    sales_order_item_id = Column(Integer, ForeignKey("sales_order_items.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    description = Column(String, nullable=True)
    quantity = Column(Numeric(12, 3), nullable=False)
    unit_price = Column(Numeric(14, 2), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    paid_amount = Column(Numeric(14, 2), default=0, server_default='0', nullable=False)

    invoice = relationship("Invoice", back_populates="items")
    sales_order_item = relationship("SalesOrderItem")
