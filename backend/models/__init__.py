from models.audit_log import AuditLog
from models.companies import Company
from models.accounts import Account
from models.products import Product
from models.sales_orders import SalesOrder
from models.sales_order_items import SalesOrderItem
from models.purchase_orders import PurchaseOrder
from models.purchase_order_items import PurchaseOrderItem
from models.invoices import Invoice
from models.invoice_items import InvoiceItem
from models.bills import Bill
from models.bill_items import BillItem
from models.receipts import Receipt
from models.payments import Payment
from models.intercompany_transactions import IntercompanyTransaction
from models.intercompany_events import IntercompanyEvent
from models.journal_entry import JournalEntry
from models.journal_item import JournalItem
from models.idempotency_keys import IdempotencyKey
from models.reconciliation_reviews import ReconciliationReview
from models.credit_notes import CreditNote
from models.credit_note_items import CreditNoteItem
from models.debit_notes import DebitNote
from models.debit_note_items import DebitNoteItem
from models.intercompany_adjustments import IntercompanyAdjustment
