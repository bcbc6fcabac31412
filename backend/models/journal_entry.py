from sqlalchemy import Column, Integer, String, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin

class JournalEntry(Base, AuditMixin):
    __tablename__ = "journal_entries"
    __table_args__ = (UniqueConstraint('company_id', 'sequence_number', name='_company_je_sequence_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    sequence_number = Column(Integer, nullable=False)
    entry_number = Column(String(50), nullable=False) # JE-<companyId>-<sequence>
    date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    reference_document = Column(String, nullable=True)
    source_type = Column(String(20), nullable=False, default="manual") # invoice, bill, receipt, payment, credit_note, debit_note, adjustment, manual
    source_id = Column(Integer, nullable=True)
    counterparty_company_id = Column(Integer, ForeignKey("companies.id"), nullable=True, index=True)
    intercompany_transaction_id = Column(Integer, ForeignKey("intercompany_transactions.id"), nullable=True, index=True)

    # Relationships
    items = relationship("JournalItem", back_populates="journal_entry", cascade="all, delete-orphan", order_by="JournalItem.id")
