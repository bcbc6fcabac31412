from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin

class CreditNote(Base, AuditMixin):
    """Reduces what a customer company owes the issuing company."""
    __tablename__ = "credit_notes"
    __table_args__ = (UniqueConstraint('company_id', 'sequence_number', name='_company_credit_note_sequence_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    customer_company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True, index=True)
    intercompany_transaction_id = Column(Integer, ForeignKey("intercompany_transactions.id"), nullable=True, index=True)
    sequence_number = Column(Integer, nullable=False)
    credit_note_number = Column(String(50), nullable=False, index=True) # CN-<companyId>-<sequence>
    credit_note_date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    reason = Column(Text, nullable=True)
    status = Column(String(20), default="active", nullable=False)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)

    # Relationships
    customer_company = relationship("Company", foreign_keys=[customer_company_id])
    items = relationship("CreditNoteItem", back_populates="credit_note", cascade="all, delete-orphan", order_by="CreditNoteItem.id")
