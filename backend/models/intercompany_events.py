from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey, Enum
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin

class IntercompanyEventType(enum.Enum):
    ORDER_CREATED = "ORDER_CREATED"
    INVOICED = "INVOICED"
    SETTLED = "SETTLED"
    ADJUSTED = "ADJUSTED"

class IntercompanyEvent(Base, TimestampMixin):
    """Append-only history of one intercompany transaction. Rows are never updated."""
    __tablename__ = "intercompany_events"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    transaction_id = Column(Integer, ForeignKey("intercompany_transactions.id"), nullable=False, index=True)
    event_type = Column(Enum(IntercompanyEventType), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=True)
    receipt_id = Column(Integer, ForeignKey("receipts.id"), nullable=True)
    payment_id = Column(Integer, ForeignKey("payments.id"), nullable=True)
    adjustment_id = Column(Integer, ForeignKey("intercompany_adjustments.id"), nullable=True) # Set for credit/debit note adjustments only
    source_journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)
    target_journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)
    note = Column(Text, nullable=True)

    transaction = relationship("IntercompanyTransaction", back_populates="events")
