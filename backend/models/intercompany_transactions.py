from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin

class IntercompanyTransactionStatus(enum.Enum):
    CREATED = "Created"
    PROCESSING = "Processing"
    COMPLETED = "Completed"

class IntercompanyTransaction(Base, TimestampMixin):
    __tablename__ = "intercompany_transactions"
    __table_args__ = (UniqueConstraint('tenant_id', 'sequence_number', name='_tenant_ic_sequence_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    source_company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    target_company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    source_order_id = Column(Integer, ForeignKey("sales_orders.id"), nullable=False, index=True)
    target_order_id = Column(Integer, ForeignKey("purchase_orders.id"), nullable=False, index=True)
    # Latest invoice/bill pair. These point back at tables that reference this one.
    source_invoice_id = Column(Integer, ForeignKey("invoices.id", use_alter=True, name="fk_ic_source_invoice"), nullable=True)
    target_bill_id = Column(Integer, ForeignKey("bills.id", use_alter=True, name="fk_ic_target_bill"), nullable=True)
    sequence_number = Column(Integer, nullable=False) # Tenant-specific sequential number
    reference_number = Column(String(50), nullable=False, index=True) # IC-<sequence>
    transaction_date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(14, 2), nullable=False) # Order total
    status = Column(Enum(IntercompanyTransactionStatus), default=IntercompanyTransactionStatus.CREATED, nullable=False)

    # Relationships
    source_company = relationship("Company", foreign_keys=[source_company_id])
    target_company = relationship("Company", foreign_keys=[target_company_id])
    source_order = relationship("SalesOrder", foreign_keys=[source_order_id])
    target_order = relationship("PurchaseOrder", foreign_keys=[target_order_id])
    source_invoice = relationship("Invoice", foreign_keys=[source_invoice_id], post_update=True)
    target_bill = relationship("Bill", foreign_keys=[target_bill_id], post_update=True)
    events = relationship("IntercompanyEvent", back_populates="transaction", order_by="IntercompanyEvent.id")
