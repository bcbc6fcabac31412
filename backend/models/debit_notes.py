from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin

class DebitNote(Base, AuditMixin):
    """Raised by a buying company against its vendor; reduces what it owes that vendor."""
    __tablename__ = "debit_notes"
    __table_args__ = (UniqueConstraint('company_id', 'sequence_number', name='_company_debit_note_sequence_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    vendor_company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=True, index=True)
    intercompany_transaction_id = Column(Integer, ForeignKey("intercompany_transactions.id"), nullable=True, index=True)
    sequence_number = Column(Integer, nullable=False)
    debit_note_number = Column(String(50), nullable=False, index=True) # DN-<companyId>-<sequence>
    debit_note_date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    reason = Column(Text, nullable=True)
    status = Column(String(20), default="active", nullable=False)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)

    # Relationships
    vendor_company = relationship("Company", foreign_keys=[vendor_company_id])
    items = relationship("DebitNoteItem", back_populates="debit_note", cascade="all, delete-orphan", order_by="DebitNoteItem.id")
