from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import AuditMixin

class BillStatus(enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"

class Bill(Base, AuditMixin):
    __tablename__ = "bills"
    __table_args__ = (UniqueConstraint('company_id', 'sequence_number', name='_company_bill_sequence_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    vendor_company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    purchase_order_id = Column(Integer, ForeignKey("purchase_orders.id"), nullable=False, index=True)
    reference_invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True, index=True) # Counterpart invoice on the vendor side
    intercompany_transaction_id = Column(Integer, ForeignKey("intercompany_transactions.id"), nullable=True, index=True)
    sequence_number = Column(Integer, nullable=False)
    bill_number = Column(String(50), nullable=False, index=True) # BILL-<companyId>-<sequence>
    bill_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    total = Column(Numeric(14, 2), nullable=False)
    amount_paid = Column(Numeric(14, 2), default=0, server_default='0', nullable=False)
    amount_credited = Column(Numeric(14, 2), default=0, server_default='0', nullable=False) # Credit/debit notes applied
    balance_due = Column(Numeric(14, 2), nullable=False)
    status = Column(Enum(BillStatus), default=BillStatus.PENDING, nullable=False)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)

    # Relationships
    purchase_order = relationship("PurchaseOrder", back_populates="bills")
    vendor_company = relationship("Company", foreign_keys=[vendor_company_id])
    reference_invoice = relationship("Invoice", foreign_keys=[reference_invoice_id])
    items = relationship("BillItem", back_populates="bill", cascade="all, delete-orphan", order_by="BillItem.id")
    payments = relationship("Payment", back_populates="bill", order_by="Payment.id")
