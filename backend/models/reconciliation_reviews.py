from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, Enum, JSON
from database import Base
import enum
from models.audit_mixin import TimestampMixin

class ReviewStatus(enum.Enum):
    NEEDS_REVIEW = "needs_review"
    RESOLVED = "resolved"

class ReconciliationReview(Base, TimestampMixin):
    __tablename__ = "reconciliation_reviews"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    source_company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    target_company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    source_receivable = Column(Numeric(14, 2), nullable=False)
    target_payable = Column(Numeric(14, 2), nullable=False)
    expected_balance = Column(Numeric(14, 2), nullable=False)
    difference = Column(Numeric(14, 2), nullable=False)
    drift_side = Column(String(10), nullable=False) # source, target, both, unknown
    findings = Column(JSON, nullable=True)
    adjustment_journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)
    status = Column(Enum(ReviewStatus), default=ReviewStatus.NEEDS_REVIEW, nullable=False)
    resolution_note = Column(Text, nullable=True)
    resolved_by = Column(String, nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
