import logging
from sqlalchemy.orm import Session

from database import SessionLocal
from crud import reconciliation as crud_reconciliation

logger = logging.getLogger(__name__)


def run_reconciliation_scan(db: Session = None) -> dict:
    """
    Compares receivables and payables of every intercompany pair of every tenant.

    Nothing is corrected here. A mismatched pair gets a `needs_review` review,
    unless one is already open for it, and waits for an operator to reconcile it.

    Args:
        db: Optional session. When omitted the scan opens and closes its own.

    Returns:
        Counts of scanned pairs, mismatches and newly opened reviews.
    """
    owns_session = db is None
    if owns_session:
        db = SessionLocal()
    summary = {"pairs": 0, "mismatched": 0, "flagged": 0}
    logger.info("Starting intercompany reconciliation scan.")
    try:
        for tenant_id, source_company_id, target_company_id in crud_reconciliation.intercompany_pairs(db):
            summary["pairs"] += 1
            report = crud_reconciliation.reconcile_pair(db, tenant_id, source_company_id, target_company_id, apply=False)
            if report["is_reconciled"]:
                continue
            summary["mismatched"] += 1
            if crud_reconciliation.get_open_review(db, tenant_id, source_company_id, target_company_id):
                logger.info(f"Pair {source_company_id}/{target_company_id} for tenant {tenant_id} already has an open review.")
                continue
            crud_reconciliation.flag_for_review(db, tenant_id, report, actor="scheduler")
            summary["flagged"] += 1
            db.commit()
        logger.info(
            f"Reconciliation scan finished: {summary['pairs']} pairs, "
            f"{summary['mismatched']} mismatched, {summary['flagged']} flagged."
        )
        return summary
    except Exception as e:
        db.rollback()
        logger.error(f"Reconciliation scan failed: {e}", exc_info=True)
        raise
    finally:
        if owns_session:
            db.close()
