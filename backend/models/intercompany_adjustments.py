from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin

class IntercompanyAdjustment(Base, AuditMixin):
    """A credit note on the source company paired with a debit note on the target company."""
    __tablename__ = "intercompany_adjustments"
    __table_args__ = (UniqueConstraint('tenant_id', 'sequence_number', name='_tenant_adjustment_sequence_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    source_company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    target_company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    intercompany_transaction_id = Column(Integer, ForeignKey("intercompany_transactions.id"), nullable=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=True)
    sequence_number = Column(Integer, nullable=False) # Tenant-specific sequential number
    reference_number = Column(String(50), nullable=False, index=True) # ADJ-<sequence>
    adjustment_date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    reason = Column(Text, nullable=True)
    credit_note_id = Column(Integer, ForeignKey("credit_notes.id"), nullable=False)
    debit_note_id = Column(Integer, ForeignKey("debit_notes.id"), nullable=False)
    status = Column(String(20), default="active", nullable=False)

    # Relationships
    source_company = relationship("Company", foreign_keys=[source_company_id])
    target_company = relationship("Company", foreign_keys=[target_company_id])
    credit_note = relationship("CreditNote")
    debit_note = relationship("DebitNote")

    @property
    def credit_note_number(self):
        return self.credit_note.credit_note_number if self.credit_note is not None else None

    @property
    def debit_note_number(self):
        return self.debit_note.debit_note_number if self.debit_note is not None else None
