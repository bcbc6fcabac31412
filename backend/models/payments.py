from sqlalchemy import Column, Integer, Numeric, Date, String, ForeignKey, Text, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin

class Payment(Base, AuditMixin):
    __tablename__ = "payments"
    __table_args__ = (UniqueConstraint('company_id', 'sequence_number', name='_company_payment_sequence_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False, index=True)
    receipt_id = Column(Integer, ForeignKey("receipts.id"), nullable=True) # Counterpart receipt on the vendor side
    intercompany_transaction_id = Column(Integer, ForeignKey("intercompany_transactions.id"), nullable=True, index=True)
    sequence_number = Column(Integer, nullable=False)
    payment_number = Column(String(50), nullable=False, index=True) # PAY-<companyId>-<sequence>
    payment_date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    payment_method = Column(String, nullable=True)
    reference = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    is_partial = Column(Boolean, default=False, nullable=False)
    debit_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    credit_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)

    # Relationships
    bill = relationship("Bill", back_populates="payments")
    receipt = relationship("Receipt")
