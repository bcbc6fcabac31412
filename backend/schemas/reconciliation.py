from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from pydantic import Field
from models.reconciliation_reviews import ReviewStatus
from schemas.intercompany import CamelModel


class ReconcileRequest(CamelModel):
    source_company_id: int
    target_company_id: int
    apply: bool = False

class ReconciliationFinding(CamelModel):
    kind: str
    side: str  # source, target, both
    message: str
    document_id: Optional[int] = None
    amount: Optional[Decimal] = None

class ReconciliationReport(CamelModel):
    source_company_id: int
    target_company_id: int
    source_receivable: Decimal
    target_payable: Decimal
    expected_balance: Decimal
    difference: Decimal
    is_reconciled: bool
    drift_side: Optional[str] = None
    findings: List[ReconciliationFinding] = []
    adjustment_journal_entry_id: Optional[int] = None
    review_id: Optional[int] = None

class ReconciliationReview(CamelModel):
    id: int
    source_company_id: int
    target_company_id: int
    source_receivable: Decimal
    target_payable: Decimal
    expected_balance: Decimal
    difference: Decimal
    drift_side: str
    findings: Optional[List[dict]] = None
    adjustment_journal_entry_id: Optional[int] = None
    status: ReviewStatus
    resolution_note: Optional[str] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

class ReviewResolve(CamelModel):
    resolution_note: str = Field(..., min_length=1)
