from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import AuditMixin

class PurchaseOrderStatus(enum.Enum):
    OPEN = "Open"
    PARTIALLY_BILLED = "Partially Billed"
    BILLED = "Billed"
    CLOSED = "Closed"

class PurchaseOrder(Base, AuditMixin):
    __tablename__ = "purchase_orders"
    __table_args__ = (UniqueConstraint('company_id', 'sequence_number', name='_company_po_sequence_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    vendor_company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    sequence_number = Column(Integer, nullable=False) # Company-specific sequential number
    order_number = Column(String(50), nullable=False, index=True) # PO-<companyId>-<sequence>
    reference_number = Column(String(50), nullable=True, index=True)
    order_date = Column(Date, nullable=False)
    expected_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    total = Column(Numeric(14, 2), default=0, nullable=False)
    status = Column(Enum(PurchaseOrderStatus), default=PurchaseOrderStatus.OPEN, nullable=False)

    # Relationships
    company = relationship("Company", foreign_keys=[company_id])
    vendor_company = relationship("Company", foreign_keys=[vendor_company_id])
    items = relationship("PurchaseOrderItem", back_populates="purchase_order", cascade="all, delete-orphan", order_by="PurchaseOrderItem.id")
    bills = relationship("Bill", back_populates="purchase_order", order_by="Bill.id")
