"""intercompany_ledger_schema

Revision ID: a1c3e5f7b901
Revises:
Create Date: 2026-10-16 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c3e5f7b901'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

company_type = sa.Enum('MANUFACTURER', 'DISTRIBUTOR', 'PLANT', name='companytype')
sales_order_status = sa.Enum('OPEN', 'PARTIALLY_INVOICED', 'INVOICED', 'CLOSED', name='salesorderstatus')
purchase_order_status = sa.Enum('OPEN', 'PARTIALLY_BILLED', 'BILLED', 'CLOSED', name='purchaseorderstatus')
fulfillment_status = sa.Enum('OPEN', 'PARTIALLY_FULFILLED', 'FULFILLED', name='fulfillmentstatus')
invoice_status = sa.Enum('PENDING', 'PARTIAL', 'PAID', name='invoicestatus')
invoice_type = sa.Enum('FULL', 'PARTIAL', name='invoicetype')
bill_status = sa.Enum('PENDING', 'PARTIAL', 'PAID', name='billstatus')
transaction_status = sa.Enum('CREATED', 'PROCESSING', 'COMPLETED', name='intercompanytransactionstatus')
event_type = sa.Enum('ORDER_CREATED', 'INVOICED', 'SETTLED', 'ADJUSTED', name='intercompanyeventtype')
review_status = sa.Enum('NEEDS_REVIEW', 'RESOLVED', name='reviewstatus')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def _soft_delete():
    return [
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_by', sa.String(), nullable=True),
    ]


def _order_line_columns():
    return [
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=True),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('quantity', sa.Numeric(12, 3), nullable=False),
        sa.Column('unit_price', sa.Numeric(14, 2), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=True, index=True),
        sa.Column('table_name', sa.String(), nullable=False),
        sa.Column('record_id', sa.Integer(), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('changed_by', sa.String(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
    )

    op.create_table(
        'companies',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('code', sa.String(20), nullable=False),
        sa.Column('company_type', company_type, nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('base_currency', sa.String(3), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'code', name='_tenant_company_code_uc'),
    )

    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('account_code', sa.String(20), nullable=False, index=True),
        sa.Column('account_name', sa.String(100), nullable=False),
        sa.Column('account_type', sa.String(20), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('balance', sa.Numeric(14, 2), server_default='0', nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('company_id', 'account_code', name='_company_account_code_uc'),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('code', sa.String(50), nullable=False),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sales_price', sa.Numeric(14, 2), nullable=False),
        sa.Column('purchase_price', sa.Numeric(14, 2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('company_id', 'code', name='_company_product_code_uc'),
    )

    op.create_table(
        'sales_orders',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('customer_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('order_number', sa.String(50), nullable=False, index=True),
        sa.Column('reference_number', sa.String(50), nullable=True, index=True),
        sa.Column('order_date', sa.Date(), nullable=False),
        sa.Column('expected_date', sa.Date(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('total', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', sales_order_status, nullable=False),
        *_timestamps(),
        *_soft_delete(),
        sa.UniqueConstraint('company_id', 'sequence_number', name='_company_so_sequence_uc'),
    )

    op.create_table(
        'sales_order_items',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=True, index=True),
        sa.Column('sales_order_id', sa.Integer(), sa.ForeignKey('sales_orders.id'), nullable=False),
        *_order_line_columns(),
        sa.Column('invoiced_quantity', sa.Numeric(12, 3), server_default='0', nullable=False),
        sa.Column('paid_quantity', sa.Numeric(12, 3), server_default='0', nullable=False),
        sa.Column('fulfillment_status', fulfillment_status, nullable=False),
    )

    op.create_table(
        'purchase_orders',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('vendor_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('order_number', sa.String(50), nullable=False, index=True),
        sa.Column('reference_number', sa.String(50), nullable=True, index=True),
        sa.Column('order_date', sa.Date(), nullable=False),
        sa.Column('expected_date', sa.Date(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('total', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', purchase_order_status, nullable=False),
        *_timestamps(),
        *_soft_delete(),
        sa.UniqueConstraint('company_id', 'sequence_number', name='_company_po_sequence_uc'),
    )

    op.create_table(
        'purchase_order_items',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=True, index=True),
        sa.Column('purchase_order_id', sa.Integer(), sa.ForeignKey('purchase_orders.id'), nullable=False),
        sa.Column('sales_order_item_id', sa.Integer(), sa.ForeignKey('sales_order_items.id'), nullable=True),
        *_order_line_columns(),
        sa.Column('billed_quantity', sa.Numeric(12, 3), server_default='0', nullable=False),
        sa.Column('fulfillment_status', fulfillment_status, nullable=False),
    )

    op.create_table(
        'intercompany_transactions',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('source_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('target_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('source_order_id', sa.Integer(), sa.ForeignKey('sales_orders.id'), nullable=False, index=True),
        sa.Column('target_order_id', sa.Integer(), sa.ForeignKey('purchase_orders.id'), nullable=False, index=True),
        # Foreign keys to invoices/bills are added once those tables exist
        sa.Column('source_invoice_id', sa.Integer(), nullable=True),
        sa.Column('target_bill_id', sa.Integer(), nullable=True),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('reference_number', sa.String(50), nullable=False, index=True),
        sa.Column('transaction_date', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', transaction_status, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'sequence_number', name='_tenant_ic_sequence_uc'),
    )

    op.create_table(
        'journal_entries',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('entry_number', sa.String(50), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('reference_document', sa.String(), nullable=True),
        sa.Column('source_type', sa.String(20), nullable=False),
        sa.Column('source_id', sa.Integer(), nullable=True),
        sa.Column('counterparty_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=True, index=True),
        sa.Column('intercompany_transaction_id', sa.Integer(), sa.ForeignKey('intercompany_transactions.id'), nullable=True, index=True),
        *_timestamps(),
        *_soft_delete(),
        sa.UniqueConstraint('company_id', 'sequence_number', name='_company_je_sequence_uc'),
    )

    op.create_table(
        'journal_items',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('journal_entry_id', sa.Integer(), sa.ForeignKey('journal_entries.id'), nullable=False, index=True),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('accounts.id'), nullable=False, index=True),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('debit', sa.Numeric(14, 2), sa.CheckConstraint('debit >= 0'), nullable=False),
        sa.Column('credit', sa.Numeric(14, 2), sa.CheckConstraint('credit >= 0'), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('(debit > 0 AND credit = 0) OR (debit = 0 AND credit > 0)', name='check_debit_or_credit_exclusive'),
    )

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('customer_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('sales_order_id', sa.Integer(), sa.ForeignKey('sales_orders.id'), nullable=False, index=True),
        sa.Column('intercompany_transaction_id', sa.Integer(), sa.ForeignKey('intercompany_transactions.id'), nullable=True, index=True),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('invoice_number', sa.String(50), nullable=False, index=True),
        sa.Column('invoice_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('invoice_type', invoice_type, nullable=False),
        sa.Column('total', sa.Numeric(14, 2), nullable=False),
        sa.Column('amount_paid', sa.Numeric(14, 2), server_default='0', nullable=False),
        sa.Column('balance_due', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', invoice_status, nullable=False),
        sa.Column('journal_entry_id', sa.Integer(), sa.ForeignKey('journal_entries.id'), nullable=True),
        *_timestamps(),
        *_soft_delete(),
        sa.UniqueConstraint('company_id', 'sequence_number', name='_company_invoice_sequence_uc'),
    )

    op.create_table(
        'invoice_items',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=True, index=True),
        sa.Column('invoice_id', sa.Integer(), sa.ForeignKey('invoices.id'), nullable=False),
        sa.Column('sales_order_item_id', sa.Integer(), sa.ForeignKey('sales_order_items.id'), nullable=False),
        *_order_line_columns(),
        sa.Column('paid_amount', sa.Numeric(14, 2), server_default='0', nullable=False),
    )

    op.create_table(
        'bills',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('vendor_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('purchase_order_id', sa.Integer(), sa.ForeignKey('purchase_orders.id'), nullable=False, index=True),
        sa.Column('reference_invoice_id', sa.Integer(), sa.ForeignKey('invoices.id'), nullable=True, index=True),
        sa.Column('intercompany_transaction_id', sa.Integer(), sa.ForeignKey('intercompany_transactions.id'), nullable=True, index=True),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('bill_number', sa.String(50), nullable=False, index=True),
        sa.Column('bill_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('total', sa.Numeric(14, 2), nullable=False),
        sa.Column('amount_paid', sa.Numeric(14, 2), server_default='0', nullable=False),
        sa.Column('balance_due', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', bill_status, nullable=False),
        sa.Column('journal_entry_id', sa.Integer(), sa.ForeignKey('journal_entries.id'), nullable=True),
        *_timestamps(),
        *_soft_delete(),
        sa.UniqueConstraint('company_id', 'sequence_number', name='_company_bill_sequence_uc'),
    )

    op.create_table(
        'bill_items',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=True, index=True),
        sa.Column('bill_id', sa.Integer(), sa.ForeignKey('bills.id'), nullable=False),
        sa.Column('purchase_order_item_id', sa.Integer(), sa.ForeignKey('purchase_order_items.id'), nullable=True),
        sa.Column('invoice_item_id', sa.Integer(), sa.ForeignKey('invoice_items.id'), nullable=True),
        *_order_line_columns(),
        sa.Column('paid_amount', sa.Numeric(14, 2), server_default='0', nullable=False),
    )

    op.create_foreign_key('fk_ic_source_invoice', 'intercompany_transactions', 'invoices', ['source_invoice_id'], ['id'])
    op.create_foreign_key('fk_ic_target_bill', 'intercompany_transactions', 'bills', ['target_bill_id'], ['id'])

    for table_name, document_column, document_table, number_column in (
        ('receipts', 'invoice_id', 'invoices', 'receipt_number'),
        ('payments', 'bill_id', 'bills', 'payment_number'),
    ):
        date_column = 'receipt_date' if table_name == 'receipts' else 'payment_date'
        extra = []
        if table_name == 'payments':
            extra.append(sa.Column('receipt_id', sa.Integer(), sa.ForeignKey('receipts.id'), nullable=True))
        op.create_table(
            table_name,
            sa.Column('id', sa.Integer(), primary_key=True, index=True),
            sa.Column('tenant_id', sa.String(), nullable=False, index=True),
            sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
            sa.Column(document_column, sa.Integer(), sa.ForeignKey(f'{document_table}.id'), nullable=False, index=True),
            *extra,
            sa.Column('intercompany_transaction_id', sa.Integer(), sa.ForeignKey('intercompany_transactions.id'), nullable=True, index=True),
            sa.Column('sequence_number', sa.Integer(), nullable=False),
            sa.Column(number_column, sa.String(50), nullable=False, index=True),
            sa.Column(date_column, sa.Date(), nullable=False),
            sa.Column('amount', sa.Numeric(14, 2), nullable=False),
            sa.Column('payment_method', sa.String(), nullable=True),
            sa.Column('reference', sa.String(), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('is_partial', sa.Boolean(), nullable=False),
            sa.Column('debit_account_id', sa.Integer(), sa.ForeignKey('accounts.id'), nullable=False),
            sa.Column('credit_account_id', sa.Integer(), sa.ForeignKey('accounts.id'), nullable=False),
            sa.Column('journal_entry_id', sa.Integer(), sa.ForeignKey('journal_entries.id'), nullable=True),
            *_timestamps(),
            *_soft_delete(),
            sa.UniqueConstraint('company_id', 'sequence_number', name=f'_company_{table_name[:-1]}_sequence_uc'),
        )

    op.create_table(
        'intercompany_events',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('intercompany_transactions.id'), nullable=False, index=True),
        sa.Column('event_type', event_type, nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('invoice_id', sa.Integer(), sa.ForeignKey('invoices.id'), nullable=True),
        sa.Column('bill_id', sa.Integer(), sa.ForeignKey('bills.id'), nullable=True),
        sa.Column('receipt_id', sa.Integer(), sa.ForeignKey('receipts.id'), nullable=True),
        sa.Column('payment_id', sa.Integer(), sa.ForeignKey('payments.id'), nullable=True),
        sa.Column('source_journal_entry_id', sa.Integer(), sa.ForeignKey('journal_entries.id'), nullable=True),
        sa.Column('target_journal_entry_id', sa.Integer(), sa.ForeignKey('journal_entries.id'), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'idempotency_keys',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('endpoint', sa.String(100), nullable=False),
        sa.Column('key', sa.String(255), nullable=False),
        sa.Column('request_hash', sa.String(64), nullable=False),
        sa.Column('status_code', sa.Integer(), nullable=False),
        sa.Column('response_body', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'endpoint', 'key', name='_tenant_endpoint_key_uc'),
    )

    op.create_table(
        'reconciliation_reviews',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('source_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('target_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('source_receivable', sa.Numeric(14, 2), nullable=False),
        sa.Column('target_payable', sa.Numeric(14, 2), nullable=False),
        sa.Column('expected_balance', sa.Numeric(14, 2), nullable=False),
        sa.Column('difference', sa.Numeric(14, 2), nullable=False),
        sa.Column('drift_side', sa.String(10), nullable=False),
        sa.Column('findings', sa.JSON(), nullable=True),
        sa.Column('adjustment_journal_entry_id', sa.Integer(), sa.ForeignKey('journal_entries.id'), nullable=True),
        sa.Column('status', review_status, nullable=False),
        sa.Column('resolution_note', sa.Text(), nullable=True),
        sa.Column('resolved_by', sa.String(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_constraint('fk_ic_target_bill', 'intercompany_transactions', type_='foreignkey')
    op.drop_constraint('fk_ic_source_invoice', 'intercompany_transactions', type_='foreignkey')
    for table_name in (
        'reconciliation_reviews', 'idempotency_keys', 'intercompany_events', 'payments', 'receipts',
        'bill_items', 'bills', 'invoice_items', 'invoices', 'journal_items', 'journal_entries',
        'intercompany_transactions', 'purchase_order_items', 'purchase_orders', 'sales_order_items',
        'sales_orders', 'products', 'accounts', 'companies', 'audit_log',
    ):
        op.drop_table(table_name)
    bind = op.get_bind()
    for enum_type in (
        review_status, event_type, transaction_status, bill_status, invoice_type, invoice_status,
        fulfillment_status, purchase_order_status, sales_order_status, company_type,
    ):
        enum_type.drop(bind, checkfirst=True)
