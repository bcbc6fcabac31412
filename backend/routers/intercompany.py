from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Callable, List, Optional, Union
import logging

from database import get_db
from crud import idempotency as crud_idempotency
from crud import intercompany as crud_intercompany
from crud import reconciliation as crud_reconciliation
from crud.exceptions import ConflictError, InvalidInput, NotFoundError
from models.intercompany_transactions import IntercompanyTransactionStatus
from models.reconciliation_reviews import ReviewStatus
from schemas.intercompany import (
    IntercompanyAdjustment,
    IntercompanyAdjustmentCreate,
    IntercompanyAdjustmentResponse,
    IntercompanyBalances,
    IntercompanyPaymentCreate,
    IntercompanyPaymentResponse,
    IntercompanyTransaction,
    IntercompanyTransactionDetail,
    InvoiceBillCreate,
    InvoiceBillResponse,
    OrderPairCreate,
    OrderPairResponse,
    ReceiptEligibleTransaction,
    TenantBalanceSummary,
)
from schemas.reconciliation import ReconcileRequest, ReconciliationReport, ReconciliationReview, ReviewResolve
from utils.tenancy import get_tenant_id, get_actor

router = APIRouter(tags=["Intercompany"])
logger = logging.getLogger("intercompany")


def _raise_http(db: Session, e: Exception, action: str, tenant_id: str):
    db.rollback()
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if isinstance(e, InvalidInput):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, IntegrityError):
        logger.warning(f"Integrity error during {action} for tenant {tenant_id}: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="The request conflicts with a concurrent change. Retry it.")
    logger.exception(f"Error during {action} for tenant {tenant_id}: {e}")
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An unexpected error occurred.")


def _run_idempotent(db: Session, tenant_id: str, endpoint: str, key: Optional[str], request, operation: Callable):
    """
    Run a lifecycle operation once per Idempotency-Key.

    The response body is stored with the documents it describes and commits with
    them, so a retried request gets the original response back.
    """
    request_hash = crud_idempotency.request_fingerprint(request.model_dump(mode="json"))
    try:
        replay = crud_idempotency.find_replay(db, tenant_id, endpoint, key, request_hash)
        if replay is not None:
            return JSONResponse(status_code=replay.status_code, content=replay.response_body)

        response = operation()
        body = response.model_dump(mode="json", by_alias=True)
        crud_idempotency.store_response(db, tenant_id, endpoint, key, request_hash, status.HTTP_201_CREATED, body)
        db.commit()
        return JSONResponse(status_code=status.HTTP_201_CREATED, content=body)
    except Exception as e:
        _raise_http(db, e, endpoint, tenant_id)


@router.post("/intercompany/sales-purchase", response_model=OrderPairResponse, status_code=status.HTTP_201_CREATED)
def create_sales_purchase(
    request: OrderPairCreate,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    """Create a sales order on the source company and the mirrored purchase order on the target company."""
    def operation():
        result = crud_intercompany.create_order_pair(db, request, tenant_id, actor)
        return OrderPairResponse.model_validate(result)
    return _run_idempotent(db, tenant_id, "sales-purchase", idempotency_key, request, operation)


@router.post("/intercompany/invoice-bill", response_model=InvoiceBillResponse, status_code=status.HTTP_201_CREATED)
def create_invoice_bill(
    request: InvoiceBillCreate,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    """
    Invoice a sales order (fully or partially) and book the matching bill on the buying company.

    Send an Idempotency-Key to make retries safe. Without one, a repeated partial
    request is a new invoice for the same quantities, as long as the order has them left.
    A repeated full request is refused once the order is fully invoiced.
    """
    def operation():
        result = crud_intercompany.create_invoice_and_bill(db, request, tenant_id, actor)
        return InvoiceBillResponse.model_validate(result)
    return _run_idempotent(db, tenant_id, "invoice-bill", idempotency_key, request, operation)


@router.post("/intercompany/payment", response_model=IntercompanyPaymentResponse, status_code=status.HTTP_201_CREATED)
def create_payment(
    request: IntercompanyPaymentCreate,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    """Record a receipt on the source company and the counterpart payment on the target company."""
    def operation():
        result = crud_intercompany.create_receipt_and_payment(db, request, tenant_id, actor)
        return IntercompanyPaymentResponse.model_validate(result)
    return _run_idempotent(db, tenant_id, "payment", idempotency_key, request, operation)


@router.post("/intercompany-adjustment", response_model=IntercompanyAdjustmentResponse, status_code=status.HTTP_201_CREATED)
def create_adjustment(
    request: IntercompanyAdjustmentCreate,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    """Credit note on the source company and debit note on the target company for the same amount."""
    def operation():
        result = crud_intercompany.create_adjustment(db, request, tenant_id, actor)
        return IntercompanyAdjustmentResponse.model_validate(result)
    return _run_idempotent(db, tenant_id, "adjustment", idempotency_key, request, operation)


@router.get("/intercompany-adjustments", response_model=List[IntercompanyAdjustment])
def get_adjustments(
    company_id: Optional[int] = Query(None, alias="companyId"),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud_intercompany.get_adjustments(db, tenant_id, company_id=company_id, skip=skip, limit=limit)


@router.get("/intercompany/balances", response_model=Union[IntercompanyBalances, TenantBalanceSummary])
def get_balances(
    source_company_id: Optional[int] = Query(None, alias="sourceCompanyId"),
    target_company_id: Optional[int] = Query(None, alias="targetCompanyId"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """
    Receivable of the source against the target and payable of the target against the source.
    Without companies, returns receivables and payables of every company in the tenant.
    """
    if source_company_id is None and target_company_id is None:
        return TenantBalanceSummary.model_validate(crud_intercompany.get_tenant_balance_summary(db, tenant_id))
    if source_company_id is None or target_company_id is None:
        raise HTTPException(status_code=400, detail="Provide both sourceCompanyId and targetCompanyId, or neither.")
    try:
        balances = crud_reconciliation.get_intercompany_balances(db, tenant_id, source_company_id, target_company_id)
    except (NotFoundError, InvalidInput) as e:
        _raise_http(db, e, "balances", tenant_id)
    return IntercompanyBalances.model_validate(balances)


@router.get("/intercompany-receipt-eligible-transactions", response_model=List[ReceiptEligibleTransaction])
def get_receipt_eligible_transactions(
    company_id: int = Query(..., alias="companyId"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """Processing intercompany transactions of the company that still have an invoice to settle."""
    try:
        return crud_intercompany.get_receipt_eligible_transactions(db, tenant_id, company_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/intercompany/transactions", response_model=List[IntercompanyTransaction])
def get_transactions(
    company_id: Optional[int] = Query(None, alias="companyId"),
    status: Optional[IntercompanyTransactionStatus] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud_intercompany.get_transactions(db, tenant_id, company_id=company_id, status=status, skip=skip, limit=limit)


@router.get("/intercompany/transactions/{transaction_id}", response_model=IntercompanyTransactionDetail)
def get_transaction(transaction_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    transaction = crud_intercompany.get_transaction(db, transaction_id, tenant_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Intercompany transaction not found")
    return transaction


def _reconcile(db: Session, request: ReconcileRequest, apply: bool, tenant_id: str, actor: str):
    try:
        report = crud_reconciliation.reconcile_pair(
            db, tenant_id, request.source_company_id, request.target_company_id, apply=apply, actor=actor
        )
        response = ReconciliationReport.model_validate(report)
        if apply:
            db.commit()
        return response
    except Exception as e:
        _raise_http(db, e, "reconciliation", tenant_id)


@router.post("/intercompany/reconcile", response_model=ReconciliationReport)
def reconcile(
    request: ReconcileRequest,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    """Explain any gap between the pair's receivable and payable; with `apply`, correct it and open a review."""
    return _reconcile(db, request, request.apply, tenant_id, actor)


@router.post("/intercompany-balances/fix-mismatch", response_model=ReconciliationReport)
def fix_mismatch(
    request: ReconcileRequest,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    return _reconcile(db, request, True, tenant_id, actor)


@router.get("/intercompany/reconciliation-reviews", response_model=List[ReconciliationReview])
def get_reconciliation_reviews(
    status: Optional[ReviewStatus] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud_reconciliation.list_reviews(db, tenant_id, status=status, skip=skip, limit=limit)


@router.patch("/intercompany/reconciliation-reviews/{review_id}", response_model=ReconciliationReview)
def resolve_reconciliation_review(
    review_id: int,
    request: ReviewResolve,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    actor: str = Depends(get_actor)
):
    try:
        review = crud_reconciliation.resolve_review(db, review_id, tenant_id, request.resolution_note, actor)
        response = ReconciliationReview.model_validate(review)
        db.commit()
        return response
    except Exception as e:
        _raise_http(db, e, "review resolution", tenant_id)
