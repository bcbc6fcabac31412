"""
Intercompany transaction lifecycle.

An intercompany transaction pairs a sales order on the selling (source)
company with a purchase order on the buying (target) company. Invoices and
bills are derived from the pair, fully or partially, and receipts/payments
settle them. Every step books a journal entry on both ledgers, tagged with the
counterparty, and appends an event to the transaction's log.

Functions here flush but never commit: the router owns the transaction so
that a request persists everything it produced or nothing at all.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from crud import ledger
from crud.audit_log import create_audit_log
from crud.companies import require_company
from crud.exceptions import ConflictError, InvalidInput, NotFoundError
from crud.notes import issue_credit_note, issue_debit_note
from crud.sequences import next_sequence_number
from models.accounts import Account
from models.bill_items import BillItem
from models.bills import Bill, BillStatus
from models.companies import Company
from models.intercompany_adjustments import IntercompanyAdjustment
from models.intercompany_events import IntercompanyEvent, IntercompanyEventType
from models.intercompany_transactions import IntercompanyTransaction, IntercompanyTransactionStatus
from models.invoice_items import InvoiceItem
from models.invoices import Invoice, InvoiceStatus, InvoiceType
from models.payments import Payment
from models.products import Product
from models.purchase_order_items import PurchaseOrderItem
from models.purchase_orders import PurchaseOrder, PurchaseOrderStatus
from models.receipts import Receipt
from models.sales_order_items import FulfillmentStatus, SalesOrderItem
from models.sales_orders import SalesOrder, SalesOrderStatus
from schemas.audit_log import AuditLogCreate
from schemas.intercompany import IntercompanyAdjustmentCreate, IntercompanyPaymentCreate, InvoiceBillCreate, OrderPairCreate
from utils import sqlalchemy_to_dict, to_money, to_quantity

logger = logging.getLogger("intercompany")

ORDER_LEAD_DAYS = 7
PAYMENT_TERMS_DAYS = 30
ZERO = Decimal("0.00")


# --- helpers -----------------------------------------------------------------

def _require_pair(db: Session, tenant_id: str, source_company_id: int, target_company_id: int):
    if source_company_id == target_company_id:
        raise InvalidInput("Source and target company must be different.")
    source = require_company(db, source_company_id, tenant_id)
    target = require_company(db, target_company_id, tenant_id)
    return source, target


def _fulfillment_status(total: Decimal, done: Decimal) -> FulfillmentStatus:
    if done <= 0:
        return FulfillmentStatus.OPEN
    if done >= total:
        return FulfillmentStatus.FULFILLED
    return FulfillmentStatus.PARTIALLY_FULFILLED


def _sales_order_status(lines) -> SalesOrderStatus:
    states = {line.fulfillment_status for line in lines}
    if states == {FulfillmentStatus.FULFILLED}:
        return SalesOrderStatus.INVOICED
    if states == {FulfillmentStatus.OPEN}:
        return SalesOrderStatus.OPEN
    return SalesOrderStatus.PARTIALLY_INVOICED


def _purchase_order_status(lines) -> PurchaseOrderStatus:
    states = {line.fulfillment_status for line in lines}
    if states == {FulfillmentStatus.FULFILLED}:
        return PurchaseOrderStatus.BILLED
    if states == {FulfillmentStatus.OPEN}:
        return PurchaseOrderStatus.OPEN
    return PurchaseOrderStatus.PARTIALLY_BILLED


def _append_event(db: Session, transaction: IntercompanyTransaction, event_type: IntercompanyEventType, amount, actor: str, **refs):
    event = IntercompanyEvent(
        tenant_id=transaction.tenant_id,
        transaction_id=transaction.id,
        event_type=event_type,
        amount=to_money(amount),
        created_by=actor,
        **refs
    )
    db.add(event)
    return event


def _audit_insert(db: Session, tenant_id: str, table_name: str, record, actor: str):
    create_audit_log(db, AuditLogCreate(
        tenant_id=tenant_id,
        table_name=table_name,
        record_id=record.id,
        changed_by=actor,
        action="INSERT",
        new_values=sqlalchemy_to_dict(record)
    ))


def _remaining_item(line: SalesOrderItem) -> dict:
    return {
        "id": line.id,
        "product_id": line.product_id,
        "product_name": line.product_name,
        "total_quantity": line.quantity,
        "invoiced_quantity": line.invoiced_quantity,
        "remaining_quantity": line.remaining_quantity,
        "fully_invoiced": line.fulfillment_status == FulfillmentStatus.FULFILLED,
    }


def get_pair_balances(db: Session, source_company_id: int, target_company_id: int) -> dict:
    """AR of the source against the target and AP of the target against the source, from the ledger."""
    return {
        "source_receivable": ledger.counterparty_balance(db, source_company_id, ledger.ACCOUNTS_RECEIVABLE, target_company_id),
        "target_payable": ledger.counterparty_balance(db, target_company_id, ledger.ACCOUNTS_PAYABLE, source_company_id),
    }


def _transaction_for_order(db: Session, tenant_id: str, sales_order_id: int) -> Optional[IntercompanyTransaction]:
    return db.query(IntercompanyTransaction).filter(
        IntercompanyTransaction.tenant_id == tenant_id,
        IntercompanyTransaction.source_order_id == sales_order_id
    ).with_for_update().first()


def _refresh_transaction_status(db: Session, transaction: IntercompanyTransaction):
    """Completed once the order is fully invoiced and every invoice against it is paid."""
    db.flush()
    lines = db.query(SalesOrderItem).filter(SalesOrderItem.sales_order_id == transaction.source_order_id).all()
    invoices = db.query(Invoice).filter(Invoice.sales_order_id == transaction.source_order_id).all()
    fully_invoiced = bool(lines) and all(line.fulfillment_status == FulfillmentStatus.FULFILLED for line in lines)
    all_paid = bool(invoices) and all(invoice.status == InvoiceStatus.PAID for invoice in invoices)
    if fully_invoiced and all_paid:
        if transaction.status != IntercompanyTransactionStatus.COMPLETED:
            transaction.status = IntercompanyTransactionStatus.COMPLETED
            logger.info(f"Intercompany transaction {transaction.reference_number} completed for tenant {transaction.tenant_id}")
    elif transaction.status == IntercompanyTransactionStatus.CREATED:
        transaction.status = IntercompanyTransactionStatus.PROCESSING


# --- order pair ----------------------------------------------------------------

def create_order_pair(db: Session, request: OrderPairCreate, tenant_id: str, actor: str = "system"):
    """Create the sales order (source), its mirrored purchase order (target) and the transaction that joins them."""
    source, target = _require_pair(db, tenant_id, request.source_company_id, request.target_company_id)

    order_date = request.order_date or date.today()
    expected_date = request.expected_date or order_date + timedelta(days=ORDER_LEAD_DAYS)
    if expected_date < order_date:
        raise InvalidInput("expectedDate cannot be earlier than the order date.")

    so_items = []
    po_items = []
    total = ZERO
    for item in request.items:
        product = None
        if item.product_id is not None:
            product = db.query(Product).filter(
                Product.id == item.product_id,
                Product.company_id == source.id,
                Product.tenant_id == tenant_id
            ).first()
            if product is None:
                raise NotFoundError(f"Product {item.product_id} not found for company {source.id}.")

        quantity = to_quantity(item.quantity)
        unit_price = to_money(item.unit_price)
        amount = to_money(quantity * unit_price)
        if amount <= 0:
            raise InvalidInput(f"Line of {quantity} x {unit_price} is worth less than one cent.")
        total += amount
        description = item.description or (product.name if product else None)

        so_item = SalesOrderItem(
            tenant_id=tenant_id,
            product_id=item.product_id,
            description=description,
            quantity=quantity,
            unit_price=unit_price,
            amount=amount,
            invoiced_quantity=Decimal("0"),
            paid_quantity=Decimal("0"),
            fulfillment_status=FulfillmentStatus.OPEN,
        )
        so_items.append(so_item)
        po_items.append(PurchaseOrderItem(
            tenant_id=tenant_id,
            sales_order_item=so_item,
            product_id=item.product_id,
            description=description,
            quantity=quantity,
            unit_price=unit_price,
            amount=amount,
            billed_quantity=Decimal("0"),
            fulfillment_status=FulfillmentStatus.OPEN,
        ))

    ic_sequence = next_sequence_number(db, IntercompanyTransaction, tenant_id=tenant_id)
    reference_number = f"IC-{ic_sequence:05d}"
    so_sequence = next_sequence_number(db, SalesOrder, company_id=source.id)
    po_sequence = next_sequence_number(db, PurchaseOrder, company_id=target.id)

    sales_order = SalesOrder(
        tenant_id=tenant_id,
        company_id=source.id,
        customer_company_id=target.id,
        sequence_number=so_sequence,
        order_number=f"SO-{source.id}-{so_sequence}",
        reference_number=reference_number,
        order_date=order_date,
        expected_date=expected_date,
        description=request.description,
        total=total,
        status=SalesOrderStatus.OPEN,
        created_by=actor,
        items=so_items,
    )
    purchase_order = PurchaseOrder(
        tenant_id=tenant_id,
        company_id=target.id,
        vendor_company_id=source.id,
        sequence_number=po_sequence,
        order_number=f"PO-{target.id}-{po_sequence}",
        reference_number=reference_number,
        order_date=order_date,
        expected_date=expected_date,
        description=request.description,
        total=total,
        status=PurchaseOrderStatus.OPEN,
        created_by=actor,
        items=po_items,
    )
    db.add(sales_order)
    db.add(purchase_order)
    db.flush()

    transaction = IntercompanyTransaction(
        tenant_id=tenant_id,
        source_company_id=source.id,
        target_company_id=target.id,
        source_order_id=sales_order.id,
        target_order_id=purchase_order.id,
        sequence_number=ic_sequence,
        reference_number=reference_number,
        transaction_date=order_date,
        description=request.description,
        amount=total,
        status=IntercompanyTransactionStatus.CREATED,
        created_by=actor,
    )
    db.add(transaction)
    db.flush()

    # Both orders exist now
    transaction.status = IntercompanyTransactionStatus.PROCESSING
    _append_event(
        db, transaction, IntercompanyEventType.ORDER_CREATED, total, actor,
        note=f"{sales_order.order_number} / {purchase_order.order_number}"
    )
    _audit_insert(db, tenant_id, "intercompany_transactions", transaction, actor)
    db.flush()

    logger.info(
        f"Intercompany order {reference_number} ({sales_order.order_number} / {purchase_order.order_number}) "
        f"for {total} created by {actor} for tenant {tenant_id}"
    )
    return {
        "source_order": sales_order,
        "target_order": purchase_order,
        "transaction_id": transaction.id,
    }


# --- invoice / bill ------------------------------------------------------------

def _resolve_purchase_order(db: Session, tenant_id: str, request: InvoiceBillCreate, sales_order: SalesOrder,
                            target: Company, transaction: Optional[IntercompanyTransaction]) -> PurchaseOrder:
    query = db.query(PurchaseOrder).filter(PurchaseOrder.tenant_id == tenant_id)
    if request.purchase_order_id is not None:
        purchase_order = query.filter(PurchaseOrder.id == request.purchase_order_id).with_for_update().first()
    elif transaction is not None:
        purchase_order = query.filter(PurchaseOrder.id == transaction.target_order_id).with_for_update().first()
    elif sales_order.reference_number:
        purchase_order = query.filter(
            PurchaseOrder.company_id == target.id,
            PurchaseOrder.vendor_company_id == sales_order.company_id,
            PurchaseOrder.reference_number == sales_order.reference_number
        ).with_for_update().first()
    else:
        purchase_order = None

    if purchase_order is None or purchase_order.company_id != target.id:
        raise NotFoundError(f"No purchase order on company {target.id} matches sales order {sales_order.order_number}.")
    if purchase_order.vendor_company_id != sales_order.company_id:
        raise InvalidInput(f"Purchase order {purchase_order.order_number} is not placed with company {sales_order.company_id}.")
    return purchase_order


def _match_order_line(item, so_lines, requested_totals) -> SalesOrderItem:
    if item.sales_order_item_id is not None:
        for line in so_lines:
            if line.id == item.sales_order_item_id:
                return line
        raise NotFoundError(f"Order line {item.sales_order_item_id} does not belong to this sales order.")

    if item.product_id is None:
        raise InvalidInput("Each invoice item needs a productId or a salesOrderItemId.")

    candidates = [line for line in so_lines if line.product_id == item.product_id]
    if not candidates:
        raise NotFoundError(f"Product {item.product_id} is not on this sales order.")
    for line in candidates:
        if line.remaining_quantity - requested_totals.get(line.id, 0) > 0:
            return line
    # Nothing left on any matching line; the quantity check reports it
    return candidates[0]


def _select_lines(request: InvoiceBillCreate, sales_order: SalesOrder, so_lines) -> list:
    """Order lines to invoice as (line, quantity, unit_price) triples."""
    if request.invoice_type == InvoiceType.FULL:
        selections = [
            (line, line.remaining_quantity, line.unit_price)
            for line in so_lines
            if line.remaining_quantity > 0
        ]
        if not selections:
            raise ConflictError(f"Sales order {sales_order.order_number} is already fully invoiced.")
        return selections

    if not request.items:
        raise InvalidInput("A partial invoice needs at least one item.")

    selections = []
    requested_totals = {}
    for item in request.items:
        line = _match_order_line(item, so_lines, requested_totals)
        quantity = to_quantity(item.quantity)
        already = requested_totals.get(line.id, Decimal("0"))
        if already + quantity > line.remaining_quantity:
            raise ConflictError(
                f"Cannot invoice {already + quantity} of order line {line.id}; "
                f"only {line.remaining_quantity} of {line.quantity} remain."
            )
        requested_totals[line.id] = already + quantity
        unit_price = to_money(item.unit_price) if item.unit_price is not None else line.unit_price
        selections.append((line, quantity, unit_price))
    return selections


def create_invoice_and_bill(db: Session, request: InvoiceBillCreate, tenant_id: str, actor: str = "system"):
    """
    Invoice (part of) a sales order and mirror it as a bill on the buying company.

    The sales order and its lines are locked first, so two concurrent partial
    invoices of the same order are serialised and cannot both consume the same
    remaining quantity.
    """
    source, target = _require_pair(db, tenant_id, request.source_company_id, request.target_company_id)

    sales_order = db.query(SalesOrder).filter(
        SalesOrder.id == request.sales_order_id,
        SalesOrder.tenant_id == tenant_id
    ).with_for_update().first()
    if sales_order is None or sales_order.company_id != source.id:
        raise NotFoundError(f"Sales order {request.sales_order_id} not found for company {source.id}.")
    if sales_order.customer_company_id != target.id:
        raise InvalidInput(f"Sales order {sales_order.order_number} was not raised against company {target.id}.")

    so_lines = db.query(SalesOrderItem).filter(
        SalesOrderItem.sales_order_id == sales_order.id
    ).order_by(SalesOrderItem.id).with_for_update().all()

    transaction = _transaction_for_order(db, tenant_id, sales_order.id)
    purchase_order = _resolve_purchase_order(db, tenant_id, request, sales_order, target, transaction)
    po_lines = db.query(PurchaseOrderItem).filter(
        PurchaseOrderItem.purchase_order_id == purchase_order.id
    ).order_by(PurchaseOrderItem.id).with_for_update().all()
    po_line_by_so_line = {line.sales_order_item_id: line for line in po_lines if line.sales_order_item_id}
    if not po_line_by_so_line and len(po_lines) == len(so_lines):
        # Orders created outside the intercompany flow: pair lines by position
        po_line_by_so_line = {so_line.id: po_line for so_line, po_line in zip(so_lines, po_lines)}

    receivable = ledger.require_account(db, source.id, ledger.ACCOUNTS_RECEIVABLE)
    revenue = ledger.require_account(db, source.id, ledger.SALES_REVENUE)
    inventory = ledger.require_account(db, target.id, ledger.INVENTORY)
    payable = ledger.require_account(db, target.id, ledger.ACCOUNTS_PAYABLE)

    selections = _select_lines(request, sales_order, so_lines)

    invoice_date = request.invoice_date or date.today()
    due_date = request.due_date or invoice_date + timedelta(days=PAYMENT_TERMS_DAYS)
    if due_date < invoice_date:
        raise InvalidInput("dueDate cannot be earlier than the invoice date.")

    invoice_items = []
    bill_items = []
    total = ZERO
    for line, quantity, unit_price in selections:
        po_line = po_line_by_so_line.get(line.id)
        if po_line is None:
            raise ConflictError(f"Purchase order {purchase_order.order_number} has no line matching order line {line.id}.")

        amount = to_money(quantity * unit_price)
        if amount <= 0:
            raise InvalidInput(f"Invoicing {quantity} of order line {line.id} is worth less than one cent.")
        total += amount
        invoice_items.append(InvoiceItem(
            tenant_id=tenant_id,
            sales_order_item_id=line.id,
            product_id=line.product_id,
            description=line.description,
            quantity=quantity,
            unit_price=unit_price,
            amount=amount,
            paid_amount=ZERO,
        ))
        bill_items.append(BillItem(
            tenant_id=tenant_id,
            purchase_order_item_id=po_line.id,
            product_id=po_line.product_id,
            description=po_line.description,
            quantity=quantity,
            unit_price=unit_price,
            amount=amount,
            paid_amount=ZERO,
        ))

        line.invoiced_quantity = to_quantity(line.invoiced_quantity + quantity)
        line.fulfillment_status = _fulfillment_status(line.quantity, line.invoiced_quantity)
        po_line.billed_quantity = to_quantity(po_line.billed_quantity + quantity)
        po_line.fulfillment_status = _fulfillment_status(po_line.quantity, po_line.billed_quantity)

    sales_order.status = _sales_order_status(so_lines)
    purchase_order.status = _purchase_order_status(po_lines)
    transaction_id = transaction.id if transaction is not None else None

    invoice_sequence = next_sequence_number(db, Invoice, company_id=source.id)
    invoice = Invoice(
        tenant_id=tenant_id,
        company_id=source.id,
        customer_company_id=target.id,
        sales_order_id=sales_order.id,
        intercompany_transaction_id=transaction_id,
        sequence_number=invoice_sequence,
        invoice_number=f"INV-{source.id}-{invoice_sequence}",
        invoice_date=invoice_date,
        due_date=due_date,
        description=request.description or f"Intercompany invoice for {sales_order.order_number}",
        invoice_type=request.invoice_type,
        total=total,
        amount_paid=ZERO,
        amount_credited=ZERO,
        balance_due=total,
        status=InvoiceStatus.PENDING,
        created_by=actor,
        items=invoice_items,
    )
    db.add(invoice)
    db.flush()

    bill_sequence = next_sequence_number(db, Bill, company_id=target.id)
    bill = Bill(
        tenant_id=tenant_id,
        company_id=target.id,
        vendor_company_id=source.id,
        purchase_order_id=purchase_order.id,
        reference_invoice_id=invoice.id,
        intercompany_transaction_id=transaction_id,
        sequence_number=bill_sequence,
        bill_number=f"BILL-{target.id}-{bill_sequence}",
        bill_date=invoice_date,
        due_date=due_date,
        description=f"Bill for {invoice.invoice_number} from {source.name}",
        total=total,
        amount_paid=ZERO,
        amount_credited=ZERO,
        balance_due=total,
        status=BillStatus.PENDING,
        created_by=actor,
        items=bill_items,
    )
    db.add(bill)
    db.flush()
    for invoice_item, bill_item in zip(invoice_items, bill_items):
        bill_item.invoice_item_id = invoice_item.id

    source_entry = ledger.post_journal_entry(
        db, tenant_id, source.id, invoice_date,
        f"Intercompany invoice {invoice.invoice_number} to {target.name}",
        [ledger.debit_line(receivable, total), ledger.credit_line(revenue, total)],
        source_type="invoice", source_id=invoice.id, reference_document=invoice.invoice_number,
        counterparty_company_id=target.id, intercompany_transaction_id=transaction_id, actor=actor,
    )
    target_entry = ledger.post_journal_entry(
        db, tenant_id, target.id, invoice_date,
        f"Intercompany bill {bill.bill_number} from {source.name}",
        [ledger.debit_line(inventory, total), ledger.credit_line(payable, total)],
        source_type="bill", source_id=bill.id, reference_document=bill.bill_number,
        counterparty_company_id=source.id, intercompany_transaction_id=transaction_id, actor=actor,
    )
    invoice.journal_entry_id = source_entry.id
    bill.journal_entry_id = target_entry.id

    if transaction is not None:
        transaction.source_invoice_id = invoice.id
        transaction.target_bill_id = bill.id
        _append_event(
            db, transaction, IntercompanyEventType.INVOICED, total, actor,
            invoice_id=invoice.id, bill_id=bill.id,
            source_journal_entry_id=source_entry.id, target_journal_entry_id=target_entry.id,
        )
        _refresh_transaction_status(db, transaction)

    _audit_insert(db, tenant_id, "invoices", invoice, actor)
    _audit_insert(db, tenant_id, "bills", bill, actor)
    db.flush()

    logger.info(
        f"Invoice {invoice.invoice_number} / bill {bill.bill_number} ({request.invoice_type.value}) for {total} "
        f"on order {sales_order.order_number} created by {actor} for tenant {tenant_id}"
    )
    return {
        "source_invoice": invoice,
        "target_bill": bill,
        "balances": get_pair_balances(db, source.id, target.id),
        "remaining_items": [_remaining_item(line) for line in so_lines],
        "invoice_type": request.invoice_type,
        "is_partial": any(line.remaining_quantity > 0 for line in so_lines),
        "transaction_id": transaction_id,
    }


# --- receipt / payment -----------------------------------------------------------

def _resolve_receipt_accounts(db: Session, source: Company, request: IntercompanyPaymentCreate):
    def _own_account(account_id: int, role: str) -> Account:
        account = db.query(Account).filter(
            Account.id == account_id,
            Account.company_id == source.id,
            Account.is_active == True
        ).first()
        if account is None:
            raise InvalidInput(f"{role} account {account_id} does not belong to company {source.id}.")
        return account

    if request.debit_account_id is not None:
        cash = _own_account(request.debit_account_id, "Debit")
    else:
        cash = ledger.require_account(db, source.id, ledger.CASH)
    if request.credit_account_id is not None:
        receivable = _own_account(request.credit_account_id, "Credit")
    else:
        receivable = ledger.require_account(db, source.id, ledger.ACCOUNTS_RECEIVABLE)
    if cash.id == receivable.id:
        raise InvalidInput("Debit and credit accounts must be different.")
    return cash, receivable


def _allocate(document_items, amount: Decimal) -> list:
    """Spread a settlement over document lines in line order. Returns (line, share) pairs."""
    remaining = amount
    allocations = []
    for item in document_items:
        if remaining <= 0:
            break
        open_amount = item.amount - item.paid_amount
        if open_amount <= 0:
            continue
        share = min(open_amount, remaining)
        item.paid_amount = to_money(item.paid_amount + share)
        remaining -= share
        allocations.append((item, share))
    return allocations


def _refresh_balance_due(document, paid_status, partial_status):
    document.balance_due = to_money(document.total - document.amount_paid - (document.amount_credited or 0))
    document.status = paid_status if document.balance_due <= 0 else partial_status


def _settle(document, amount: Decimal, paid_status, partial_status):
    document.amount_paid = to_money(document.amount_paid + amount)
    _refresh_balance_due(document, paid_status, partial_status)


def _credit(document, amount: Decimal, paid_status, partial_status):
    document.amount_credited = to_money((document.amount_credited or 0) + amount)
    _refresh_balance_due(document, paid_status, partial_status)


def create_receipt_and_payment(db: Session, request: IntercompanyPaymentCreate, tenant_id: str, actor: str = "system"):
    """
    Record a receipt on the source company and the matching payment on the target company
    for one or more invoice/bill pairs.
    """
    source, target = _require_pair(db, tenant_id, request.source_company_id, request.target_company_id)
    cash, receivable = _resolve_receipt_accounts(db, source, request)
    target_payable = ledger.require_account(db, target.id, ledger.ACCOUNTS_PAYABLE)
    target_cash = ledger.require_account(db, target.id, ledger.CASH)
    payment_date = request.payment_date or date.today()

    items = request.payment_items()
    results = []
    receipt = payment = invoice = bill = None
    touched_transactions = {}

    for item in items:
        invoice = db.query(Invoice).filter(
            Invoice.id == item.invoice_id,
            Invoice.tenant_id == tenant_id
        ).with_for_update().first()
        if invoice is None or invoice.company_id != source.id:
            raise NotFoundError(f"Invoice {item.invoice_id} not found for company {source.id}.")
        bill = db.query(Bill).filter(
            Bill.id == item.bill_id,
            Bill.tenant_id == tenant_id
        ).with_for_update().first()
        if bill is None or bill.company_id != target.id:
            raise NotFoundError(f"Bill {item.bill_id} not found for company {target.id}.")
        if bill.reference_invoice_id != invoice.id:
            raise InvalidInput(f"Bill {bill.bill_number} is not the counterpart of invoice {invoice.invoice_number}.")

        amount = to_money(item.amount)
        if amount > invoice.balance_due:
            raise ConflictError(
                f"Payment amount ({amount}) exceeds remaining due amount ({invoice.balance_due}) for invoice {invoice.invoice_number}."
            )
        if amount > bill.balance_due:
            raise ConflictError(
                f"Payment amount ({amount}) exceeds remaining due amount ({bill.balance_due}) for bill {bill.bill_number}."
            )

        is_partial = amount < invoice.balance_due
        transaction_id = invoice.intercompany_transaction_id

        receipt_sequence = next_sequence_number(db, Receipt, company_id=source.id)
        receipt = Receipt(
            tenant_id=tenant_id,
            company_id=source.id,
            invoice_id=invoice.id,
            intercompany_transaction_id=transaction_id,
            sequence_number=receipt_sequence,
            receipt_number=f"REC-{source.id}-{receipt_sequence}",
            receipt_date=payment_date,
            amount=amount,
            payment_method=request.payment_method,
            reference=request.reference,
            notes=request.notes,
            is_partial=is_partial,
            debit_account_id=cash.id,
            credit_account_id=receivable.id,
            created_by=actor,
        )
        db.add(receipt)
        db.flush()

        payment_sequence = next_sequence_number(db, Payment, company_id=target.id)
        payment = Payment(
            tenant_id=tenant_id,
            company_id=target.id,
            bill_id=bill.id,
            receipt_id=receipt.id,
            intercompany_transaction_id=transaction_id,
            sequence_number=payment_sequence,
            payment_number=f"PAY-{target.id}-{payment_sequence}",
            payment_date=payment_date,
            amount=amount,
            payment_method=request.payment_method,
            reference=request.reference,
            notes=request.notes,
            is_partial=is_partial,
            debit_account_id=target_payable.id,
            credit_account_id=target_cash.id,
            created_by=actor,
        )
        db.add(payment)
        db.flush()

        source_entry = ledger.post_journal_entry(
            db, tenant_id, source.id, payment_date,
            f"Receipt {receipt.receipt_number} for {invoice.invoice_number} from {target.name}",
            [ledger.debit_line(cash, amount), ledger.credit_line(receivable, amount)],
            source_type="receipt", source_id=receipt.id, reference_document=receipt.receipt_number,
            counterparty_company_id=target.id, intercompany_transaction_id=transaction_id, actor=actor,
        )
        target_entry = ledger.post_journal_entry(
            db, tenant_id, target.id, payment_date,
            f"Payment {payment.payment_number} for {bill.bill_number} to {source.name}",
            [ledger.debit_line(target_payable, amount), ledger.credit_line(target_cash, amount)],
            source_type="payment", source_id=payment.id, reference_document=payment.payment_number,
            counterparty_company_id=source.id, intercompany_transaction_id=transaction_id, actor=actor,
        )
        receipt.journal_entry_id = source_entry.id
        payment.journal_entry_id = target_entry.id

        _settle(invoice, amount, InvoiceStatus.PAID, InvoiceStatus.PARTIAL)
        _settle(bill, amount, BillStatus.PAID, BillStatus.PARTIAL)

        for invoice_item, share in _allocate(invoice.items, amount):
            line = invoice_item.sales_order_item
            paid_quantity = to_quantity(line.paid_quantity + share / invoice_item.unit_price)
            line.paid_quantity = min(paid_quantity, line.invoiced_quantity)
        _allocate(bill.items, amount)

        if transaction_id is not None:
            transaction = touched_transactions.get(transaction_id)
            if transaction is None:
                transaction = db.query(IntercompanyTransaction).filter(
                    IntercompanyTransaction.id == transaction_id
                ).with_for_update().first()
                touched_transactions[transaction_id] = transaction
            _append_event(
                db, transaction, IntercompanyEventType.SETTLED, amount, actor,
                invoice_id=invoice.id, bill_id=bill.id, receipt_id=receipt.id, payment_id=payment.id,
                source_journal_entry_id=source_entry.id, target_journal_entry_id=target_entry.id,
            )

        _audit_insert(db, tenant_id, "receipts", receipt, actor)
        _audit_insert(db, tenant_id, "payments", payment, actor)

        results.append({
            "invoice_id": invoice.id,
            "bill_id": bill.id,
            "original_amount": invoice.total,
            "amount_paid": amount,
            "remaining_amount": invoice.balance_due,
            "payment_status": "full" if invoice.balance_due <= 0 else "partial",
        })
        logger.info(
            f"Receipt {receipt.receipt_number} / payment {payment.payment_number} of {amount} against "
            f"{invoice.invoice_number} by {actor} for tenant {tenant_id}"
        )

    for transaction in touched_transactions.values():
        _refresh_transaction_status(db, transaction)
    db.flush()

    balances = get_pair_balances(db, source.id, target.id)
    balances.update({
        "remaining_invoice_amount": invoice.balance_due,
        "remaining_bill_amount": bill.balance_due,
        "payment_status": results[-1]["payment_status"],
    })
    return {
        "source_receipt": receipt,
        "target_payment": payment,
        "remaining_balance": invoice.balance_due,
        "balances": balances,
        "items": results,
        "is_multi_payment": len(items) > 1,
    }


# --- adjustments -----------------------------------------------------------------

def create_adjustment(db: Session, request: IntercompanyAdjustmentCreate, tenant_id: str, actor: str = "system"):
    """
    Reduce what the target owes the source with a credit note on the source and a
    debit note on the target, linked by one adjustment record.

    With an invoiceId the notes are applied to that invoice and its bill. Without
    one they reduce the pair's open balance and are logged on its latest transaction.
    """
    source, target = _require_pair(db, tenant_id, request.source_company_id, request.target_company_id)
    amount = to_money(request.amount)
    adjustment_date = request.adjustment_date or date.today()

    invoice = bill = transaction = None
    if request.invoice_id is not None:
        invoice = db.query(Invoice).filter(
            Invoice.id == request.invoice_id,
            Invoice.tenant_id == tenant_id
        ).with_for_update().first()
        if invoice is None or invoice.company_id != source.id or invoice.customer_company_id != target.id:
            raise NotFoundError(f"Invoice {request.invoice_id} not found between companies {source.id} and {target.id}.")
        bill = db.query(Bill).filter(
            Bill.reference_invoice_id == invoice.id,
            Bill.company_id == target.id
        ).with_for_update().first()
        if bill is None:
            raise ConflictError(f"Invoice {invoice.invoice_number} has no counterpart bill to adjust.")
        open_amount = min(invoice.balance_due, bill.balance_due)
        if amount > open_amount:
            raise ConflictError(
                f"Adjustment amount ({amount}) exceeds remaining due amount ({open_amount}) for invoice {invoice.invoice_number}."
            )
        if invoice.intercompany_transaction_id is not None:
            transaction = db.query(IntercompanyTransaction).filter(
                IntercompanyTransaction.id == invoice.intercompany_transaction_id
            ).with_for_update().first()
    else:
        balances = get_pair_balances(db, source.id, target.id)
        open_amount = min(balances["source_receivable"], balances["target_payable"])
        if amount > open_amount:
            raise ConflictError(
                f"Adjustment amount ({amount}) exceeds the open balance ({max(open_amount, ZERO)}) between companies {source.id} and {target.id}."
            )
        transaction = db.query(IntercompanyTransaction).filter(
            IntercompanyTransaction.tenant_id == tenant_id,
            IntercompanyTransaction.source_company_id == source.id,
            IntercompanyTransaction.target_company_id == target.id
        ).order_by(IntercompanyTransaction.id.desc()).with_for_update().first()

    transaction_id = transaction.id if transaction is not None else None
    note_reason = f"Intercompany adjustment: {request.reason}" if request.reason else "Intercompany adjustment"
    credit_note = issue_credit_note(
        db, tenant_id, source, target, amount, adjustment_date, note_reason, request.items, actor,
        invoice_id=invoice.id if invoice else None, intercompany_transaction_id=transaction_id,
    )
    debit_note = issue_debit_note(
        db, tenant_id, target, source, amount, adjustment_date, note_reason, request.items, actor,
        bill_id=bill.id if bill else None, intercompany_transaction_id=transaction_id,
    )
    if invoice is not None:
        _credit(invoice, amount, InvoiceStatus.PAID, InvoiceStatus.PARTIAL)
        _credit(bill, amount, BillStatus.PAID, BillStatus.PARTIAL)

    sequence = next_sequence_number(db, IntercompanyAdjustment, tenant_id=tenant_id)
    adjustment = IntercompanyAdjustment(
        tenant_id=tenant_id,
        source_company_id=source.id,
        target_company_id=target.id,
        intercompany_transaction_id=transaction_id,
        invoice_id=invoice.id if invoice else None,
        bill_id=bill.id if bill else None,
        sequence_number=sequence,
        reference_number=f"ADJ-{sequence:05d}",
        adjustment_date=adjustment_date,
        amount=amount,
        reason=request.reason,
        credit_note_id=credit_note.id,
        debit_note_id=debit_note.id,
        status="active",
        created_by=actor,
    )
    db.add(adjustment)
    db.flush()

    if transaction is not None:
        _append_event(
            db, transaction, IntercompanyEventType.ADJUSTED, amount, actor,
            invoice_id=adjustment.invoice_id, bill_id=adjustment.bill_id, adjustment_id=adjustment.id,
            source_journal_entry_id=credit_note.journal_entry_id, target_journal_entry_id=debit_note.journal_entry_id,
            note=f"{adjustment.reference_number}: {credit_note.credit_note_number} / {debit_note.debit_note_number}",
        )
        _refresh_transaction_status(db, transaction)

    _audit_insert(db, tenant_id, "intercompany_adjustments", adjustment, actor)
    db.flush()

    logger.info(
        f"Intercompany adjustment {adjustment.reference_number} of {amount} between companies {source.id} and {target.id} "
        f"({credit_note.credit_note_number} / {debit_note.debit_note_number}) by {actor} for tenant {tenant_id}"
    )
    return {
        "adjustment": adjustment,
        "credit_note": credit_note,
        "debit_note": debit_note,
        "balances": get_pair_balances(db, source.id, target.id),
    }


def get_adjustments(db: Session, tenant_id: str, company_id: Optional[int] = None,
                    skip: int = 0, limit: int = 100) -> List[IntercompanyAdjustment]:
    query = db.query(IntercompanyAdjustment).filter(IntercompanyAdjustment.tenant_id == tenant_id)
    if company_id:
        query = query.filter(or_(
            IntercompanyAdjustment.source_company_id == company_id,
            IntercompanyAdjustment.target_company_id == company_id
        ))
    return query.order_by(IntercompanyAdjustment.id.desc()).offset(skip).limit(limit).all()


# --- read models -------------------------------------------------------------------

def get_transactions(db: Session, tenant_id: str, company_id: Optional[int] = None,
                     status: Optional[IntercompanyTransactionStatus] = None, skip: int = 0, limit: int = 100) -> List[IntercompanyTransaction]:
    query = db.query(IntercompanyTransaction).filter(IntercompanyTransaction.tenant_id == tenant_id)
    if company_id:
        query = query.filter(or_(
            IntercompanyTransaction.source_company_id == company_id,
            IntercompanyTransaction.target_company_id == company_id
        ))
    if status:
        query = query.filter(IntercompanyTransaction.status == status)
    return query.order_by(IntercompanyTransaction.transaction_date.desc(), IntercompanyTransaction.id.desc()).offset(skip).limit(limit).all()


def get_transaction(db: Session, transaction_id: int, tenant_id: str) -> Optional[IntercompanyTransaction]:
    return db.query(IntercompanyTransaction).filter(
        IntercompanyTransaction.id == transaction_id,
        IntercompanyTransaction.tenant_id == tenant_id
    ).first()


def get_receipt_eligible_transactions(db: Session, tenant_id: str, company_id: int) -> List[dict]:
    """Processing transactions touching the company, one row per invoice that still has a balance due."""
    require_company(db, company_id, tenant_id)
    transactions = db.query(IntercompanyTransaction).filter(
        IntercompanyTransaction.tenant_id == tenant_id,
        IntercompanyTransaction.status == IntercompanyTransactionStatus.PROCESSING,
        or_(
            IntercompanyTransaction.source_company_id == company_id,
            IntercompanyTransaction.target_company_id == company_id
        )
    ).order_by(IntercompanyTransaction.transaction_date.desc(), IntercompanyTransaction.id.desc()).all()

    rows = []
    for transaction in transactions:
        open_invoices = db.query(Invoice).filter(
            Invoice.intercompany_transaction_id == transaction.id,
            Invoice.status != InvoiceStatus.PAID
        ).order_by(Invoice.id).all()
        for invoice in open_invoices:
            bill = db.query(Bill).filter(Bill.reference_invoice_id == invoice.id).first()
            rows.append({
                "transaction_id": transaction.id,
                "reference_number": transaction.reference_number,
                "source_company_id": transaction.source_company_id,
                "source_company_name": transaction.source_company.name,
                "target_company_id": transaction.target_company_id,
                "target_company_name": transaction.target_company.name,
                "description": transaction.description,
                "amount": transaction.amount,
                "transaction_date": transaction.transaction_date,
                "source_invoice_id": invoice.id,
                "source_invoice_number": invoice.invoice_number,
                "target_bill_id": bill.id if bill else None,
                "target_bill_number": bill.bill_number if bill else None,
                "invoice_total": invoice.total,
                "paid_amount": invoice.amount_paid,
                "remaining_amount": invoice.balance_due,
                "is_intercompany": True,
            })
    return rows


def get_tenant_balance_summary(db: Session, tenant_id: str) -> dict:
    """Receivables (1100) and payables (2000) of every company in the tenant, from the ledger."""
    companies = db.query(Company).filter(Company.tenant_id == tenant_id).order_by(Company.id).all()
    rows = []
    total_receivables = ZERO
    total_payables = ZERO
    for company in companies:
        ar_account = ledger.get_account_by_code(db, company.id, ledger.ACCOUNTS_RECEIVABLE)
        ap_account = ledger.get_account_by_code(db, company.id, ledger.ACCOUNTS_PAYABLE)
        receivables = ledger.account_balance(db, ar_account) if ar_account else ZERO
        payables = ledger.account_balance(db, ap_account) if ap_account else ZERO
        total_receivables += receivables
        total_payables += payables
        rows.append({
            "company_id": company.id,
            "company_name": company.name,
            "receivables": receivables,
            "payables": payables,
            "net": to_money(receivables - payables),
        })
    return {
        "companies": rows,
        "total_receivables": to_money(total_receivables),
        "total_payables": to_money(total_payables),
        "net": to_money(total_receivables - total_payables),
    }
