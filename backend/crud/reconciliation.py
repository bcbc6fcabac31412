"""
Receivable/payable reconciliation between two companies of a tenant.

The expected open balance of a pair comes from the intercompany event log
(everything invoiced minus everything settled). Each side's ledger balance is
compared against it, so a mismatch can be attributed to the side that drifted
instead of simply copying one side onto the other.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from crud import ledger
from crud.audit_log import create_audit_log
from crud.companies import require_company
from crud.exceptions import InvalidInput, NotFoundError
from models.bills import Bill
from models.intercompany_events import IntercompanyEvent, IntercompanyEventType
from models.intercompany_transactions import IntercompanyTransaction
from models.invoices import Invoice
from models.journal_entry import JournalEntry
from models.journal_item import JournalItem
from models.payments import Payment
from models.receipts import Receipt
from models.reconciliation_reviews import ReconciliationReview, ReviewStatus
from models.audit_mixin import now_in_app_timezone
from schemas.audit_log import AuditLogCreate
from utils import format_currency, sqlalchemy_to_dict, to_money
from utils.formatting import MONEY_TOLERANCE

logger = logging.getLogger("reconciliation")

ZERO = Decimal("0.00")


def _finding(kind: str, side: str, message: str, document_id: Optional[int] = None, amount=None) -> dict:
    return {
        "kind": kind,
        "side": side,
        "message": message,
        "document_id": document_id,
        "amount": str(to_money(amount)) if amount is not None else None,
    }


def _pair_transactions(db: Session, tenant_id: str, source_company_id: int, target_company_id: int):
    return db.query(IntercompanyTransaction).filter(
        IntercompanyTransaction.tenant_id == tenant_id,
        IntercompanyTransaction.source_company_id == source_company_id,
        IntercompanyTransaction.target_company_id == target_company_id
    ).order_by(IntercompanyTransaction.id).all()


def _expected_balance(db: Session, transaction_ids: List[int]) -> Decimal:
    """Invoiced minus settled minus credited through adjustments, across the pair's event log."""
    if not transaction_ids:
        return ZERO
    credited = and_(IntercompanyEvent.event_type == IntercompanyEventType.ADJUSTED, IntercompanyEvent.adjustment_id.isnot(None))
    invoiced, settled, adjusted = db.query(
        func.coalesce(func.sum(case((IntercompanyEvent.event_type == IntercompanyEventType.INVOICED, IntercompanyEvent.amount), else_=0)), 0),
        func.coalesce(func.sum(case((IntercompanyEvent.event_type == IntercompanyEventType.SETTLED, IntercompanyEvent.amount), else_=0)), 0),
        func.coalesce(func.sum(case((credited, IntercompanyEvent.amount), else_=0)), 0)
    ).filter(IntercompanyEvent.transaction_id.in_(transaction_ids)).one()
    return to_money(Decimal(str(invoiced)) - Decimal(str(settled)) - Decimal(str(adjusted)))


def _scan_documents(db: Session, tenant_id: str, source_company_id: int, target_company_id: int) -> List[dict]:
    findings = []

    invoices = db.query(Invoice).filter(
        Invoice.tenant_id == tenant_id,
        Invoice.company_id == source_company_id,
        Invoice.customer_company_id == target_company_id
    ).order_by(Invoice.id).all()
    for invoice in invoices:
        bill = db.query(Bill).filter(
            Bill.reference_invoice_id == invoice.id,
            Bill.company_id == target_company_id
        ).first()
        if bill is None:
            findings.append(_finding(
                "missing_bill", "target",
                f"Invoice {invoice.invoice_number} has no counterpart bill.",
                invoice.id, invoice.total
            ))
            continue
        if bill.total != invoice.total:
            findings.append(_finding(
                "total_mismatch", "both",
                f"Invoice {invoice.invoice_number} totals {format_currency(invoice.total)} but bill {bill.bill_number} totals {format_currency(bill.total)}.",
                invoice.id, invoice.total - bill.total
            ))
        if bill.amount_paid != invoice.amount_paid:
            findings.append(_finding(
                "settlement_mismatch", "both",
                f"Invoice {invoice.invoice_number} has {format_currency(invoice.amount_paid)} received but bill {bill.bill_number} has {format_currency(bill.amount_paid)} paid.",
                invoice.id, invoice.amount_paid - bill.amount_paid
            ))
        if (bill.amount_credited or 0) != (invoice.amount_credited or 0):
            findings.append(_finding(
                "credit_mismatch", "both",
                f"Invoice {invoice.invoice_number} has {format_currency(invoice.amount_credited)} credited but bill {bill.bill_number} has {format_currency(bill.amount_credited)}.",
                invoice.id, (invoice.amount_credited or 0) - (bill.amount_credited or 0)
            ))
        if invoice.journal_entry_id is None:
            findings.append(_finding(
                "missing_journal_entry", "source",
                f"Invoice {invoice.invoice_number} was never posted to the ledger.",
                invoice.id, invoice.total
            ))
        if bill.journal_entry_id is None:
            findings.append(_finding(
                "missing_journal_entry", "target",
                f"Bill {bill.bill_number} was never posted to the ledger.",
                bill.id, bill.total
            ))

    orphan_receipts = db.query(Receipt).join(
        Invoice, Receipt.invoice_id == Invoice.id
    ).outerjoin(
        Payment, Payment.receipt_id == Receipt.id
    ).filter(
        Receipt.tenant_id == tenant_id,
        Invoice.company_id == source_company_id,
        Invoice.customer_company_id == target_company_id,
        Payment.id.is_(None)
    ).order_by(Receipt.id).all()
    for receipt in orphan_receipts:
        findings.append(_finding(
            "missing_payment", "target",
            f"Receipt {receipt.receipt_number} has no counterpart payment.",
            receipt.id, receipt.amount
        ))

    unbalanced = db.query(
        JournalEntry.id,
        JournalEntry.entry_number,
        JournalEntry.company_id,
        func.sum(JournalItem.debit) - func.sum(JournalItem.credit)
    ).join(
        JournalItem, JournalItem.journal_entry_id == JournalEntry.id
    ).filter(
        JournalEntry.tenant_id == tenant_id,
        JournalEntry.deleted_at.is_(None),
        ((JournalEntry.company_id == source_company_id) & (JournalEntry.counterparty_company_id == target_company_id)) |
        ((JournalEntry.company_id == target_company_id) & (JournalEntry.counterparty_company_id == source_company_id))
    ).group_by(
        JournalEntry.id, JournalEntry.entry_number, JournalEntry.company_id
    ).having(
        func.sum(JournalItem.debit) != func.sum(JournalItem.credit)
    ).all()
    for entry_id, entry_number, company_id, gap in unbalanced:
        findings.append(_finding(
            "unbalanced_entry", "source" if company_id == source_company_id else "target",
            f"Journal entry {entry_number} is out of balance by {format_currency(gap)}.",
            entry_id, gap
        ))

    return findings


def _drift_side(has_transactions: bool, source_drifted: bool, target_drifted: bool) -> Optional[str]:
    if not has_transactions:
        return "unknown"
    if source_drifted and target_drifted:
        return "both"
    if source_drifted:
        return "source"
    if target_drifted:
        return "target"
    # Each side agrees with the event log yet they differ from each other
    return "unknown"


def _post_correction(db: Session, tenant_id: str, company_id: int, counterparty_id: int, adjust_code: str,
                     offset_code: str, delta: Decimal, transaction_id: Optional[int], label: str, actor: str):
    """Move `adjust_code` by `delta` in its normal direction, offsetting against `offset_code`."""
    adjust = ledger.require_account(db, company_id, adjust_code)
    offset = ledger.require_account(db, company_id, offset_code)
    amount = abs(delta)
    increase_debit = (delta > 0) == adjust.is_debit_normal
    if increase_debit:
        lines = [ledger.debit_line(adjust, amount), ledger.credit_line(offset, amount)]
    else:
        lines = [ledger.debit_line(offset, amount), ledger.credit_line(adjust, amount)]
    return ledger.post_journal_entry(
        db, tenant_id, company_id, date.today(),
        f"Reconciliation adjustment of {label} against company {counterparty_id}",
        lines,
        source_type="adjustment",
        counterparty_company_id=counterparty_id,
        intercompany_transaction_id=transaction_id,
        actor=actor,
    )


def get_intercompany_balances(db: Session, tenant_id: str, source_company_id: int, target_company_id: int) -> dict:
    if source_company_id == target_company_id:
        raise InvalidInput("Source and target company must be different.")
    require_company(db, source_company_id, tenant_id)
    require_company(db, target_company_id, tenant_id)
    receivable = ledger.counterparty_balance(db, source_company_id, ledger.ACCOUNTS_RECEIVABLE, target_company_id)
    payable = ledger.counterparty_balance(db, target_company_id, ledger.ACCOUNTS_PAYABLE, source_company_id)
    difference = to_money(receivable - payable)
    return {
        "source_company_id": source_company_id,
        "target_company_id": target_company_id,
        "source_receivable": receivable,
        "target_payable": payable,
        "difference": difference,
        "is_reconciled": abs(difference) < MONEY_TOLERANCE,
    }


def reconcile_pair(db: Session, tenant_id: str, source_company_id: int, target_company_id: int,
                   apply: bool = False, actor: str = "system") -> dict:
    """
    Compare the source's receivable and the target's payable for the pair and explain any gap.

    With `apply`, every drifted side gets a correcting journal entry that brings it back
    to the balance implied by the event log, an ADJUSTED event is appended to the
    pair's latest transaction and a review is opened. Nothing is committed here.
    """
    balances = get_intercompany_balances(db, tenant_id, source_company_id, target_company_id)
    receivable = balances["source_receivable"]
    payable = balances["target_payable"]

    transactions = _pair_transactions(db, tenant_id, source_company_id, target_company_id)
    expected = _expected_balance(db, [t.id for t in transactions])

    report = {
        "source_company_id": source_company_id,
        "target_company_id": target_company_id,
        "source_receivable": receivable,
        "target_payable": payable,
        "expected_balance": expected,
        "difference": balances["difference"],
        "is_reconciled": balances["is_reconciled"],
        "drift_side": None,
        "findings": [],
        "adjustment_journal_entry_id": None,
        "review_id": None,
    }
    if report["is_reconciled"]:
        return report

    source_drifted = abs(receivable - expected) >= MONEY_TOLERANCE
    target_drifted = abs(payable - expected) >= MONEY_TOLERANCE
    findings = []
    if transactions and source_drifted:
        findings.append(_finding(
            "receivable_drift", "source",
            f"Receivable on company {source_company_id} is {format_currency(receivable)}, expected {format_currency(expected)}.",
            amount=receivable - expected
        ))
    if transactions and target_drifted:
        findings.append(_finding(
            "payable_drift", "target",
            f"Payable on company {target_company_id} is {format_currency(payable)}, expected {format_currency(expected)}.",
            amount=payable - expected
        ))
    findings.extend(_scan_documents(db, tenant_id, source_company_id, target_company_id))

    drift_side = _drift_side(bool(transactions), source_drifted, target_drifted)
    report["drift_side"] = drift_side
    report["findings"] = findings
    logger.warning(
        f"Intercompany mismatch between companies {source_company_id} and {target_company_id} for tenant {tenant_id}: "
        f"receivable {receivable}, payable {payable}, expected {expected}, drift side {drift_side}"
    )

    if not apply:
        return report

    latest_transaction = transactions[-1] if transactions else None
    transaction_id = latest_transaction.id if latest_transaction else None
    entries = []
    adjusted = ZERO
    if drift_side == "unknown":
        corrections = [(target_company_id, source_company_id, ledger.ACCOUNTS_PAYABLE, ledger.INVENTORY,
                        receivable - payable, "accounts payable")]
    else:
        corrections = []
        if drift_side in ("source", "both"):
            corrections.append((source_company_id, target_company_id, ledger.ACCOUNTS_RECEIVABLE, ledger.SALES_REVENUE,
                                expected - receivable, "accounts receivable"))
        if drift_side in ("target", "both"):
            corrections.append((target_company_id, source_company_id, ledger.ACCOUNTS_PAYABLE, ledger.INVENTORY,
                                expected - payable, "accounts payable"))
    for company_id, counterparty_id, adjust_code, offset_code, delta, label in corrections:
        entries.append(_post_correction(
            db, tenant_id, company_id, counterparty_id, adjust_code, offset_code,
            delta, transaction_id, label, actor
        ))
        adjusted += abs(delta)

    if latest_transaction is not None:
        db.add(IntercompanyEvent(
            tenant_id=tenant_id,
            transaction_id=latest_transaction.id,
            event_type=IntercompanyEventType.ADJUSTED,
            amount=to_money(adjusted),
            source_journal_entry_id=next((e.id for e in entries if e.company_id == source_company_id), None),
            target_journal_entry_id=next((e.id for e in entries if e.company_id == target_company_id), None),
            note=f"Reconciliation ({drift_side}): receivable {receivable}, payable {payable}, expected {expected}",
            created_by=actor,
        ))

    review = flag_for_review(db, tenant_id, report, actor, adjustment_journal_entry_id=entries[-1].id)
    db.flush()

    after = get_intercompany_balances(db, tenant_id, source_company_id, target_company_id)
    report.update({
        "source_receivable": after["source_receivable"],
        "target_payable": after["target_payable"],
        "difference": after["difference"],
        "is_reconciled": after["is_reconciled"],
        "adjustment_journal_entry_id": entries[-1].id,
        "review_id": review.id,
    })
    logger.info(
        f"Posted {len(entries)} reconciliation adjustment(s) for companies {source_company_id}/{target_company_id} "
        f"by {actor} for tenant {tenant_id}; review {review.id} opened"
    )
    return report


def flag_for_review(db: Session, tenant_id: str, report: dict, actor: str = "system",
                    adjustment_journal_entry_id: Optional[int] = None) -> ReconciliationReview:
    review = ReconciliationReview(
        tenant_id=tenant_id,
        source_company_id=report["source_company_id"],
        target_company_id=report["target_company_id"],
        source_receivable=report["source_receivable"],
        target_payable=report["target_payable"],
        expected_balance=report["expected_balance"],
        difference=report["difference"],
        drift_side=report["drift_side"] or "unknown",
        findings=report["findings"],
        adjustment_journal_entry_id=adjustment_journal_entry_id,
        status=ReviewStatus.NEEDS_REVIEW,
        created_by=actor,
    )
    db.add(review)
    db.flush()
    create_audit_log(db, AuditLogCreate(
        tenant_id=tenant_id,
        table_name="reconciliation_reviews",
        record_id=review.id,
        changed_by=actor,
        action="ADJUST" if adjustment_journal_entry_id else "INSERT",
        new_values=sqlalchemy_to_dict(review)
    ))
    return review


def get_open_review(db: Session, tenant_id: str, source_company_id: int, target_company_id: int) -> Optional[ReconciliationReview]:
    return db.query(ReconciliationReview).filter(
        ReconciliationReview.tenant_id == tenant_id,
        ReconciliationReview.source_company_id == source_company_id,
        ReconciliationReview.target_company_id == target_company_id,
        ReconciliationReview.status == ReviewStatus.NEEDS_REVIEW
    ).first()


def list_reviews(db: Session, tenant_id: str, status: Optional[ReviewStatus] = None, skip: int = 0, limit: int = 100):
    query = db.query(ReconciliationReview).filter(ReconciliationReview.tenant_id == tenant_id)
    if status:
        query = query.filter(ReconciliationReview.status == status)
    return query.order_by(ReconciliationReview.id.desc()).offset(skip).limit(limit).all()


def resolve_review(db: Session, review_id: int, tenant_id: str, resolution_note: str, actor: str = "system") -> ReconciliationReview:
    review = db.query(ReconciliationReview).filter(
        ReconciliationReview.id == review_id,
        ReconciliationReview.tenant_id == tenant_id
    ).with_for_update().first()
    if review is None:
        raise NotFoundError(f"Reconciliation review {review_id} not found.")
    if review.status == ReviewStatus.RESOLVED:
        raise InvalidInput(f"Reconciliation review {review_id} is already resolved.")

    old_values = sqlalchemy_to_dict(review)
    review.status = ReviewStatus.RESOLVED
    review.resolution_note = resolution_note
    review.resolved_by = actor
    review.resolved_at = now_in_app_timezone()
    review.updated_by = actor
    db.flush()
    create_audit_log(db, AuditLogCreate(
        tenant_id=tenant_id,
        table_name="reconciliation_reviews",
        record_id=review.id,
        changed_by=actor,
        action="UPDATE",
        old_values=old_values,
        new_values=sqlalchemy_to_dict(review)
    ))
    logger.info(f"Reconciliation review {review_id} resolved by {actor} for tenant {tenant_id}")
    return review


def intercompany_pairs(db: Session):
    """Every (tenant, source, target) combination that has at least one intercompany transaction."""
    return db.query(
        IntercompanyTransaction.tenant_id,
        IntercompanyTransaction.source_company_id,
        IntercompanyTransaction.target_company_id
    ).distinct().order_by(
        IntercompanyTransaction.tenant_id,
        IntercompanyTransaction.source_company_id,
        IntercompanyTransaction.target_company_id
    ).all()
