from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import AuditMixin

class SalesOrderStatus(enum.Enum):
    OPEN = "Open"
    PARTIALLY_INVOICED = "Partially Invoiced"
    INVOICED = "Invoiced"
    CLOSED = "Closed"

class SalesOrder(Base, AuditMixin):
    __tablename__ = "sales_orders"
    __table_args__ = (UniqueConstraint('company_id', 'sequence_number', name='_company_so_sequence_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    customer_company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    sequence_number = Column(Integer, nullable=False) # Company-specific sequential number
    order_number = Column(String(50), nullable=False, index=True) # SO-<companyId>-<sequence>
    reference_number = Column(String(50), nullable=True, index=True) # Shared with the paired purchase order
    order_date = Column(Date, nullable=False)
    expected_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    total = Column(Numeric(14, 2), default=0, nullable=False)
    status = Column(Enum(SalesOrderStatus), default=SalesOrderStatus.OPEN, nullable=False)

    # Relationships
    company = relationship("Company", foreign_keys=[company_id])
    customer_company = relationship("Company", foreign_keys=[customer_company_id])
    items = relationship("SalesOrderItem", back_populates="sales_order", cascade="all, delete-orphan", order_by="SalesOrderItem.id")
    invoices = relationship("Invoice", back_populates="sales_order", order_by="Invoice.id")
