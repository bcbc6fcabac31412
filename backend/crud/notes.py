"""
Credit notes (seller side) and debit notes (buyer side).

A credit note reduces the issuer's receivable from its customer and a debit
note reduces the issuer's payable to its vendor. Both are posted to the ledger
tagged with the counterparty, so a note raised on one side only shows up as
drift when the pair is reconciled.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from crud import ledger
from crud.audit_log import create_audit_log
from crud.companies import require_company
from crud.exceptions import InvalidInput
from crud.sequences import next_sequence_number
from models.companies import Company
from models.credit_note_items import CreditNoteItem
from models.credit_notes import CreditNote
from models.debit_note_items import DebitNoteItem
from models.debit_notes import DebitNote
from schemas.audit_log import AuditLogCreate
from schemas.credit_notes import CreditNoteCreate
from schemas.debit_notes import DebitNoteCreate
from utils import sqlalchemy_to_dict, to_money, to_quantity

logger = logging.getLogger("notes")


def _note_lines(items, amount: Decimal, tenant_id: str, model) -> list:
    lines = []
    for item in items or []:
        lines.append(model(
            tenant_id=tenant_id,
            product_id=item.product_id,
            quantity=to_quantity(item.quantity) if item.quantity is not None else None,
            unit_price=to_money(item.unit_price) if item.unit_price is not None else None,
            amount=to_money(item.amount),
            reason=item.reason,
        ))
    if lines and to_money(sum(line.amount for line in lines)) != amount:
        raise InvalidInput(f"Line amounts add up to {to_money(sum(line.amount for line in lines))}, not {amount}.")
    return lines


def _require_counterparty(db: Session, tenant_id: str, company_id: int, counterparty_id: int):
    if company_id == counterparty_id:
        raise InvalidInput("A note cannot be raised against the issuing company.")
    return require_company(db, company_id, tenant_id), require_company(db, counterparty_id, tenant_id)


def issue_credit_note(db: Session, tenant_id: str, company: Company, customer: Company, amount, note_date: date,
                      reason: Optional[str], items, actor: str, invoice_id: Optional[int] = None,
                      intercompany_transaction_id: Optional[int] = None) -> CreditNote:
    """Book a credit note: Dr sales revenue, Cr accounts receivable against the customer."""
    amount = to_money(amount)
    revenue = ledger.require_account(db, company.id, ledger.SALES_REVENUE)
    receivable = ledger.require_account(db, company.id, ledger.ACCOUNTS_RECEIVABLE)

    sequence = next_sequence_number(db, CreditNote, company_id=company.id)
    credit_note = CreditNote(
        tenant_id=tenant_id,
        company_id=company.id,
        customer_company_id=customer.id,
        invoice_id=invoice_id,
        intercompany_transaction_id=intercompany_transaction_id,
        sequence_number=sequence,
        credit_note_number=f"CN-{company.id}-{sequence}",
        credit_note_date=note_date,
        amount=amount,
        reason=reason,
        status="active",
        created_by=actor,
        items=_note_lines(items, amount, tenant_id, CreditNoteItem),
    )
    db.add(credit_note)
    db.flush()

    entry = ledger.post_journal_entry(
        db, tenant_id, company.id, note_date,
        f"Credit note {credit_note.credit_note_number} to {customer.name}",
        [ledger.debit_line(revenue, amount), ledger.credit_line(receivable, amount)],
        source_type="credit_note", source_id=credit_note.id, reference_document=credit_note.credit_note_number,
        counterparty_company_id=customer.id, intercompany_transaction_id=intercompany_transaction_id, actor=actor,
    )
    credit_note.journal_entry_id = entry.id
    create_audit_log(db, AuditLogCreate(
        tenant_id=tenant_id,
        table_name="credit_notes",
        record_id=credit_note.id,
        changed_by=actor,
        action="INSERT",
        new_values=sqlalchemy_to_dict(credit_note)
    ))
    logger.info(f"Credit note {credit_note.credit_note_number} of {amount} to company {customer.id} by {actor} for tenant {tenant_id}")
    return credit_note


def issue_debit_note(db: Session, tenant_id: str, company: Company, vendor: Company, amount, note_date: date,
                     reason: Optional[str], items, actor: str, bill_id: Optional[int] = None,
                     intercompany_transaction_id: Optional[int] = None) -> DebitNote:
    """Book a debit note: Dr accounts payable against the vendor, Cr inventory."""
    amount = to_money(amount)
    payable = ledger.require_account(db, company.id, ledger.ACCOUNTS_PAYABLE)
    inventory = ledger.require_account(db, company.id, ledger.INVENTORY)

    sequence = next_sequence_number(db, DebitNote, company_id=company.id)
    debit_note = DebitNote(
        tenant_id=tenant_id,
        company_id=company.id,
        vendor_company_id=vendor.id,
        bill_id=bill_id,
        intercompany_transaction_id=intercompany_transaction_id,
        sequence_number=sequence,
        debit_note_number=f"DN-{company.id}-{sequence}",
        debit_note_date=note_date,
        amount=amount,
        reason=reason,
        status="active",
        created_by=actor,
        items=_note_lines(items, amount, tenant_id, DebitNoteItem),
    )
    db.add(debit_note)
    db.flush()

    entry = ledger.post_journal_entry(
        db, tenant_id, company.id, note_date,
        f"Debit note {debit_note.debit_note_number} to {vendor.name}",
        [ledger.debit_line(payable, amount), ledger.credit_line(inventory, amount)],
        source_type="debit_note", source_id=debit_note.id, reference_document=debit_note.debit_note_number,
        counterparty_company_id=vendor.id, intercompany_transaction_id=intercompany_transaction_id, actor=actor,
    )
    debit_note.journal_entry_id = entry.id
    create_audit_log(db, AuditLogCreate(
        tenant_id=tenant_id,
        table_name="debit_notes",
        record_id=debit_note.id,
        changed_by=actor,
        action="INSERT",
        new_values=sqlalchemy_to_dict(debit_note)
    ))
    logger.info(f"Debit note {debit_note.debit_note_number} of {amount} to company {vendor.id} by {actor} for tenant {tenant_id}")
    return debit_note


def create_credit_note(db: Session, request: CreditNoteCreate, tenant_id: str, actor: str = "system") -> CreditNote:
    company, customer = _require_counterparty(db, tenant_id, request.company_id, request.customer_company_id)
    credit_note = issue_credit_note(
        db, tenant_id, company, customer, request.amount, request.credit_note_date or date.today(),
        request.reason, request.items, actor
    )
    db.commit()
    db.refresh(credit_note)
    return credit_note


def create_debit_note(db: Session, request: DebitNoteCreate, tenant_id: str, actor: str = "system") -> DebitNote:
    company, vendor = _require_counterparty(db, tenant_id, request.company_id, request.vendor_company_id)
    debit_note = issue_debit_note(
        db, tenant_id, company, vendor, request.amount, request.debit_note_date or date.today(),
        request.reason, request.items, actor
    )
    db.commit()
    db.refresh(debit_note)
    return debit_note


def get_credit_notes(db: Session, tenant_id: str, company_id: Optional[int] = None,
                     skip: int = 0, limit: int = 100) -> List[CreditNote]:
    query = db.query(CreditNote).filter(CreditNote.tenant_id == tenant_id)
    if company_id:
        query = query.filter(CreditNote.company_id == company_id)
    return query.order_by(CreditNote.credit_note_date.desc(), CreditNote.id.desc()).offset(skip).limit(limit).all()


def get_credit_note(db: Session, credit_note_id: int, tenant_id: str) -> Optional[CreditNote]:
    return db.query(CreditNote).filter(CreditNote.id == credit_note_id, CreditNote.tenant_id == tenant_id).first()


def get_debit_notes(db: Session, tenant_id: str, company_id: Optional[int] = None,
                    skip: int = 0, limit: int = 100) -> List[DebitNote]:
    query = db.query(DebitNote).filter(DebitNote.tenant_id == tenant_id)
    if company_id:
        query = query.filter(DebitNote.company_id == company_id)
    return query.order_by(DebitNote.debit_note_date.desc(), DebitNote.id.desc()).offset(skip).limit(limit).all()


def get_debit_note(db: Session, debit_note_id: int, tenant_id: str) -> Optional[DebitNote]:
    return db.query(DebitNote).filter(DebitNote.id == debit_note_id, DebitNote.tenant_id == tenant_id).first()
