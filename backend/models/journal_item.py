from sqlalchemy import Column, Integer, Numeric, ForeignKey, CheckConstraint, String
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class JournalItem(Base, TimestampMixin):
    __tablename__ = "journal_items"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    description = Column(String, nullable=True)
    debit = Column(Numeric(14, 2), CheckConstraint('debit >= 0'), nullable=False, default=0)
    credit = Column(Numeric(14, 2), CheckConstraint('credit >= 0'), nullable=False, default=0)

    # Relationships
    journal_entry = relationship("JournalEntry", back_populates="items")
    account = relationship("Account")

    __table_args__ = (
        CheckConstraint(
            '(debit > 0 AND credit = 0) OR (debit = 0 AND credit > 0)',
            name='check_debit_or_credit_exclusive'
        ),
    )
