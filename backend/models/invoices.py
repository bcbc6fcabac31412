from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import AuditMixin

class InvoiceStatus(enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"

class InvoiceType(enum.Enum):
    FULL = "full"
    PARTIAL = "partial"

class Invoice(Base, AuditMixin):
    __tablename__ = "invoices"
    __table_args__ = (UniqueConstraint('company_id', 'sequence_number', name='_company_invoice_sequence_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    customer_company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    sales_order_id = Column(Integer, ForeignKey("sales_orders.id"), nullable=False, index=True)
    intercompany_transaction_id = Column(Integer, ForeignKey("intercompany_transactions.id"), nullable=True, index=True)
    sequence_number = Column(Integer, nullable=False)
    invoice_number = Column(String(50), nullable=False, index=True) # INV-<companyId>-<sequence>
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    invoice_type = Column(Enum(InvoiceType), default=InvoiceType.FULL, nullable=False)
    total = Column(Numeric(14, 2), nullable=False)
    amount_paid = Column(Numeric(14, 2), default=0, server_default='0', nullable=False)
    amount_credited = Column(Numeric(14, 2), default=0, server_default='0', nullable=False) # Credit/debit notes applied
    balance_due = Column(Numeric(14, 2), nullable=False)
    status = Column(Enum(InvoiceStatus), default=InvoiceStatus.PENDING, nullable=False)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)

    # Relationships
    sales_order = relationship("SalesOrder", back_populates="invoices")
    customer_company = relationship("Company", foreign_keys=[customer_company_id])
    items = relationship("InvoiceItem", back_populates="invoice", cascade="all, delete-orphan", order_by="InvoiceItem.id")
    receipts = relationship("Receipt", back_populates="invoice", order_by="Receipt.id")
