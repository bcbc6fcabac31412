from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from models.invoices import InvoiceType
from models.intercompany_transactions import IntercompanyTransactionStatus
from models.intercompany_events import IntercompanyEventType
from schemas.sales_orders import SalesOrder
from schemas.purchase_orders import PurchaseOrder
from schemas.invoices import Invoice
from schemas.bills import Bill
from schemas.receipts import Receipt
from schemas.payments import Payment
from schemas.credit_notes import CreditNote
from schemas.debit_notes import DebitNote


class CamelModel(BaseModel):
    """Intercompany payloads are exchanged in camelCase; snake_case is accepted too."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# --- Order pair -------------------------------------------------------------

class OrderItemRequest(CamelModel):
    product_id: Optional[int] = None
    description: Optional[str] = None
    quantity: Decimal = Field(..., gt=0, decimal_places=3)
    unit_price: Decimal = Field(..., gt=0, decimal_places=2)

class OrderPairCreate(CamelModel):
    source_company_id: int
    target_company_id: int
    order_date: Optional[date] = Field(None, alias="date")
    expected_date: Optional[date] = None
    description: Optional[str] = None
    items: List[OrderItemRequest] = Field(..., min_length=1)

class OrderPairResponse(CamelModel):
    success: bool = True
    source_order: SalesOrder
    target_order: PurchaseOrder
    transaction_id: int


# --- Invoice / bill -----------------------------------------------------------

class InvoiceItemRequest(CamelModel):
    product_id: Optional[int] = None
    sales_order_item_id: Optional[int] = None
    quantity: Decimal = Field(..., gt=0, decimal_places=3)
    unit_price: Optional[Decimal] = Field(None, gt=0, decimal_places=2)

class InvoiceBillCreate(CamelModel):
    source_company_id: int
    target_company_id: int
    sales_order_id: int
    purchase_order_id: Optional[int] = None
    items: List[InvoiceItemRequest] = []
    invoice_type: InvoiceType = InvoiceType.FULL
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    description: Optional[str] = None

class RemainingItem(CamelModel):
    id: int
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    total_quantity: Decimal
    invoiced_quantity: Decimal
    remaining_quantity: Decimal
    fully_invoiced: bool

class PairBalances(CamelModel):
    source_receivable: Decimal
    target_payable: Decimal

class InvoiceBillResponse(CamelModel):
    success: bool = True
    source_invoice: Invoice
    target_bill: Bill
    balances: PairBalances
    remaining_items: List[RemainingItem]
    invoice_type: InvoiceType
    is_partial: bool
    transaction_id: Optional[int] = None


# --- Receipt / payment ----------------------------------------------------------

class PaymentItemRequest(CamelModel):
    invoice_id: int
    bill_id: int
    amount: Decimal = Field(..., gt=0, decimal_places=2)

class IntercompanyPaymentCreate(CamelModel):
    source_company_id: int
    target_company_id: int
    invoice_id: Optional[int] = None
    bill_id: Optional[int] = None
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    items: Optional[List[PaymentItemRequest]] = None
    debit_account_id: Optional[int] = None   # source cash/bank, defaults to 1000
    credit_account_id: Optional[int] = None  # source receivable, defaults to 1100
    payment_date: Optional[date] = None
    payment_method: Optional[str] = "Bank Transfer"
    reference: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_single_or_multiple(self):
        if self.items:
            return self
        if self.invoice_id is None or self.bill_id is None or self.amount is None:
            raise ValueError("Provide invoiceId, billId and amount, or a non-empty items list.")
        return self

    def payment_items(self) -> List[PaymentItemRequest]:
        if self.items:
            return list(self.items)
        return [PaymentItemRequest(invoice_id=self.invoice_id, bill_id=self.bill_id, amount=self.amount)]

class PaymentResultItem(CamelModel):
    invoice_id: int
    bill_id: int
    original_amount: Decimal
    amount_paid: Decimal
    remaining_amount: Decimal
    payment_status: str  # partial | full

class PaymentBalances(CamelModel):
    source_receivable: Decimal
    target_payable: Decimal
    remaining_invoice_amount: Decimal
    remaining_bill_amount: Decimal
    payment_status: str

class IntercompanyPaymentResponse(CamelModel):
    success: bool = True
    source_receipt: Receipt
    target_payment: Payment
    remaining_balance: Decimal
    balances: PaymentBalances
    items: List[PaymentResultItem] = []
    is_multi_payment: bool = False


# --- Adjustments --------------------------------------------------------------

class AdjustmentItemRequest(CamelModel):
    product_id: Optional[int] = None
    quantity: Optional[Decimal] = Field(None, gt=0, decimal_places=3)
    unit_price: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    reason: Optional[str] = None

class IntercompanyAdjustmentCreate(CamelModel):
    source_company_id: int
    target_company_id: int
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    reason: Optional[str] = None
    adjustment_date: Optional[date] = None
    invoice_id: Optional[int] = None  # source invoice to credit; its bill gets the debit note
    items: List[AdjustmentItemRequest] = []

class IntercompanyAdjustment(CamelModel):
    id: int
    reference_number: str
    source_company_id: int
    target_company_id: int
    intercompany_transaction_id: Optional[int] = None
    invoice_id: Optional[int] = None
    bill_id: Optional[int] = None
    adjustment_date: date
    amount: Decimal
    reason: Optional[str] = None
    credit_note_id: int
    debit_note_id: int
    credit_note_number: Optional[str] = None
    debit_note_number: Optional[str] = None
    status: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

class IntercompanyAdjustmentResponse(CamelModel):
    success: bool = True
    adjustment: IntercompanyAdjustment
    credit_note: CreditNote
    debit_note: DebitNote
    balances: PairBalances


# --- Read models ------------------------------------------------------------------

class IntercompanyBalances(CamelModel):
    source_company_id: int
    target_company_id: int
    source_receivable: Decimal
    target_payable: Decimal
    difference: Decimal
    is_reconciled: bool

class CompanyBalance(CamelModel):
    company_id: int
    company_name: str
    receivables: Decimal
    payables: Decimal
    net: Decimal

class TenantBalanceSummary(CamelModel):
    companies: List[CompanyBalance]
    total_receivables: Decimal
    total_payables: Decimal
    net: Decimal

class ReceiptEligibleTransaction(CamelModel):
    transaction_id: int
    reference_number: str
    source_company_id: int
    source_company_name: str
    target_company_id: int
    target_company_name: str
    description: Optional[str] = None
    amount: Decimal
    transaction_date: date
    source_invoice_id: int
    source_invoice_number: str
    target_bill_id: Optional[int] = None
    target_bill_number: Optional[str] = None
    invoice_total: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    is_intercompany: bool = True

class IntercompanyEvent(CamelModel):
    id: int
    event_type: IntercompanyEventType
    amount: Decimal
    invoice_id: Optional[int] = None
    bill_id: Optional[int] = None
    receipt_id: Optional[int] = None
    payment_id: Optional[int] = None
    adjustment_id: Optional[int] = None
    source_journal_entry_id: Optional[int] = None
    target_journal_entry_id: Optional[int] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

class IntercompanyTransaction(CamelModel):
    id: int
    reference_number: str
    source_company_id: int
    target_company_id: int
    source_order_id: int
    target_order_id: int
    source_invoice_id: Optional[int] = None
    target_bill_id: Optional[int] = None
    transaction_date: date
    description: Optional[str] = None
    amount: Decimal
    status: IntercompanyTransactionStatus

class IntercompanyTransactionDetail(IntercompanyTransaction):
    events: List[IntercompanyEvent] = []
