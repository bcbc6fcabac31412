"""
Double-entry posting and ledger-derived balances.

Journal items are the only source of truth for money. `Account.balance` is a
projection that is reassigned from the ledger sum after every posting; it is
never incremented in place, so a missed or repeated call cannot skew it.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from crud.exceptions import InvalidInput, UnbalancedEntryError
from crud.sequences import next_sequence_number
from models.accounts import Account, DEBIT_NORMAL_TYPES
from models.journal_entry import JournalEntry
from models.journal_item import JournalItem
from utils import to_money

logger = logging.getLogger("ledger")

# Posting accounts used by the intercompany flow
CASH = "1000"
ACCOUNTS_RECEIVABLE = "1100"
INVENTORY = "1200"
ACCOUNTS_PAYABLE = "2000"
SALES_REVENUE = "4000"

ZERO = Decimal("0.00")


def debit_line(account: Account, amount, description: Optional[str] = None) -> dict:
    return {"account": account, "debit": to_money(amount), "credit": ZERO, "description": description}


def credit_line(account: Account, amount, description: Optional[str] = None) -> dict:
    return {"account": account, "debit": ZERO, "credit": to_money(amount), "description": description}


def get_account_by_code(db: Session, company_id: int, account_code: str) -> Optional[Account]:
    return db.query(Account).filter(
        Account.company_id == company_id,
        Account.account_code == account_code,
        Account.is_active == True
    ).first()


def require_account(db: Session, company_id: int, account_code: str) -> Account:
    account = get_account_by_code(db, company_id, account_code)
    if account is None:
        raise InvalidInput(f"Company {company_id} has no active account with code {account_code}.")
    return account


def signed_balance(account_type: str, debit_total: Decimal, credit_total: Decimal) -> Decimal:
    """Balance in the account's normal direction (positive AR, positive AP, positive revenue)."""
    if account_type in DEBIT_NORMAL_TYPES:
        return to_money(debit_total - credit_total)
    return to_money(credit_total - debit_total)


def ledger_totals(
    db: Session,
    account_ids: Iterable[int],
    as_of_date: Optional[date] = None,
    start_date: Optional[date] = None,
    counterparty_company_id: Optional[int] = None,
) -> Dict[int, Tuple[Decimal, Decimal]]:
    """Sum of debits and credits per account, in one query."""
    account_ids = list(account_ids)
    if not account_ids:
        return {}

    query = db.query(
        JournalItem.account_id,
        func.coalesce(func.sum(JournalItem.debit), 0),
        func.coalesce(func.sum(JournalItem.credit), 0)
    ).join(
        JournalEntry, JournalItem.journal_entry_id == JournalEntry.id
    ).filter(
        JournalItem.account_id.in_(account_ids),
        JournalEntry.deleted_at.is_(None)
    )

    if as_of_date:
        query = query.filter(JournalEntry.date <= as_of_date)
    if start_date:
        query = query.filter(JournalEntry.date >= start_date)
    if counterparty_company_id is not None:
        query = query.filter(JournalEntry.counterparty_company_id == counterparty_company_id)

    rows = query.group_by(JournalItem.account_id).all()
    return {account_id: (to_money(debit), to_money(credit)) for account_id, debit, credit in rows}


def account_balance(db: Session, account: Account, **filters) -> Decimal:
    debit, credit = ledger_totals(db, [account.id], **filters).get(account.id, (ZERO, ZERO))
    return signed_balance(account.account_type, debit, credit)


def counterparty_balance(db: Session, company_id: int, account_code: str, counterparty_company_id: int) -> Decimal:
    """Balance of one account restricted to entries booked against a given counterparty company."""
    account = get_account_by_code(db, company_id, account_code)
    if account is None:
        return ZERO
    return account_balance(db, account, counterparty_company_id=counterparty_company_id)


def refresh_account_balances(db: Session, account_ids: Iterable[int]) -> List[Account]:
    """Reassign the balance projection of the given accounts from the ledger."""
    account_ids = set(account_ids)
    if not account_ids:
        return []
    accounts = db.query(Account).filter(Account.id.in_(account_ids)).all()
    totals = ledger_totals(db, account_ids)
    for account in accounts:
        debit, credit = totals.get(account.id, (ZERO, ZERO))
        account.balance = signed_balance(account.account_type, debit, credit)
    return accounts


def post_journal_entry(
    db: Session,
    tenant_id: str,
    company_id: int,
    entry_date: date,
    description: str,
    lines: List[dict],
    source_type: str = "manual",
    source_id: Optional[int] = None,
    reference_document: Optional[str] = None,
    counterparty_company_id: Optional[int] = None,
    intercompany_transaction_id: Optional[int] = None,
    actor: str = "system",
) -> JournalEntry:
    """
    Validates and inserts a balanced journal entry for one company.

    Every line must carry exactly one non-zero side and reference an account
    of `company_id`. The touched accounts have their balance projection
    refreshed before returning. Nothing is committed here.
    """
    if len(lines) < 2:
        raise UnbalancedEntryError("A journal entry needs at least one debit and one credit line.")

    total_debit = ZERO
    total_credit = ZERO
    for line in lines:
        account = line["account"]
        if account.company_id != company_id:
            raise InvalidInput(f"Account {account.account_code} does not belong to company {company_id}.")
        debit, credit = line["debit"], line["credit"]
        if debit < 0 or credit < 0 or (debit > 0) == (credit > 0):
            raise UnbalancedEntryError("Each journal line must carry either a debit or a credit amount.")
        total_debit += debit
        total_credit += credit

    if total_debit != total_credit:
        raise UnbalancedEntryError(
            f"The sum of debits ({total_debit}) must equal the sum of credits ({total_credit})."
        )

    sequence_number = next_sequence_number(db, JournalEntry, company_id=company_id)
    db_entry = JournalEntry(
        tenant_id=tenant_id,
        company_id=company_id,
        sequence_number=sequence_number,
        entry_number=f"JE-{company_id}-{sequence_number}",
        date=entry_date,
        description=description,
        reference_document=reference_document,
        source_type=source_type,
        source_id=source_id,
        counterparty_company_id=counterparty_company_id,
        intercompany_transaction_id=intercompany_transaction_id,
        created_by=actor,
    )
    db.add(db_entry)
    db.flush()  # Flush to get the ID for the parent entry before creating children

    for line in lines:
        db.add(JournalItem(
            tenant_id=tenant_id,
            journal_entry_id=db_entry.id,
            account_id=line["account"].id,
            description=line.get("description"),
            debit=line["debit"],
            credit=line["credit"],
            created_by=actor,
        ))
    db.flush()

    refresh_account_balances(db, [line["account"].id for line in lines])
    logger.info(
        f"Posted {db_entry.entry_number} ({source_type}) for {total_debit} on company {company_id} for tenant {tenant_id}"
    )
    return db_entry


def is_entry_balanced(entry: JournalEntry) -> bool:
    total_debit = sum((item.debit for item in entry.items), ZERO)
    total_credit = sum((item.credit for item in entry.items), ZERO)
    return len(entry.items) > 0 and total_debit == total_credit
