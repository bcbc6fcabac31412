"""credit/debit notes and intercompany adjustments

Revision ID: c4e8a2b6d913
Revises: a1c3e5f7b901
Create Date: 2026-10-16 14:05:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c4e8a2b6d913'
down_revision: Union[str, None] = 'a1c3e5f7b901'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_by', sa.String(), nullable=True),
    ]


def _note_item_columns():
    return [
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=True, index=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=True),
        sa.Column('quantity', sa.Numeric(12, 3), nullable=True),
        sa.Column('unit_price', sa.Numeric(14, 2), nullable=True),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column('invoices', sa.Column('amount_credited', sa.Numeric(14, 2), server_default='0', nullable=False))
    op.add_column('bills', sa.Column('amount_credited', sa.Numeric(14, 2), server_default='0', nullable=False))

    op.create_table(
        'credit_notes',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('customer_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('invoice_id', sa.Integer(), sa.ForeignKey('invoices.id'), nullable=True, index=True),
        sa.Column('intercompany_transaction_id', sa.Integer(), sa.ForeignKey('intercompany_transactions.id'), nullable=True, index=True),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('credit_note_number', sa.String(50), nullable=False, index=True),
        sa.Column('credit_note_date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('journal_entry_id', sa.Integer(), sa.ForeignKey('journal_entries.id'), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('company_id', 'sequence_number', name='_company_credit_note_sequence_uc'),
    )
    op.create_table(
        'credit_note_items',
        *_note_item_columns(),
        sa.Column('credit_note_id', sa.Integer(), sa.ForeignKey('credit_notes.id'), nullable=False),
    )

    op.create_table(
        'debit_notes',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('vendor_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('bill_id', sa.Integer(), sa.ForeignKey('bills.id'), nullable=True, index=True),
        sa.Column('intercompany_transaction_id', sa.Integer(), sa.ForeignKey('intercompany_transactions.id'), nullable=True, index=True),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('debit_note_number', sa.String(50), nullable=False, index=True),
        sa.Column('debit_note_date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('journal_entry_id', sa.Integer(), sa.ForeignKey('journal_entries.id'), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('company_id', 'sequence_number', name='_company_debit_note_sequence_uc'),
    )
    op.create_table(
        'debit_note_items',
        *_note_item_columns(),
        sa.Column('debit_note_id', sa.Integer(), sa.ForeignKey('debit_notes.id'), nullable=False),
    )

    op.create_table(
        'intercompany_adjustments',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.String(), nullable=False, index=True),
        sa.Column('source_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('target_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False, index=True),
        sa.Column('intercompany_transaction_id', sa.Integer(), sa.ForeignKey('intercompany_transactions.id'), nullable=True, index=True),
        sa.Column('invoice_id', sa.Integer(), sa.ForeignKey('invoices.id'), nullable=True),
        sa.Column('bill_id', sa.Integer(), sa.ForeignKey('bills.id'), nullable=True),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('reference_number', sa.String(50), nullable=False, index=True),
        sa.Column('adjustment_date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('credit_note_id', sa.Integer(), sa.ForeignKey('credit_notes.id'), nullable=False),
        sa.Column('debit_note_id', sa.Integer(), sa.ForeignKey('debit_notes.id'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'sequence_number', name='_tenant_adjustment_sequence_uc'),
    )

    op.add_column('intercompany_events', sa.Column('adjustment_id', sa.Integer(), nullable=True))
    op.create_foreign_key('fk_event_adjustment', 'intercompany_events', 'intercompany_adjustments', ['adjustment_id'], ['id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_constraint('fk_event_adjustment', 'intercompany_events', type_='foreignkey')
    op.drop_column('intercompany_events', 'adjustment_id')
    for table_name in ('intercompany_adjustments', 'debit_note_items', 'debit_notes', 'credit_note_items', 'credit_notes'):
        op.drop_table(table_name)
    op.drop_column('bills', 'amount_credited')
    op.drop_column('invoices', 'amount_credited')
