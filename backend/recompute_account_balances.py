#!/usr/bin/env python3
"""
Script to reassign every account balance from the journal.

Account.balance is only a projection of journal items. Run this after a
restore or a manual database edit to bring the projection back in line.
"""

from sqlalchemy.orm import Session
from database import SessionLocal
from models.accounts import Account
from crud.ledger import ledger_totals, signed_balance, ZERO
import argparse

def recompute_account_balances(tenant_id: str = None, dry_run: bool = False):
    """Refresh Account.balance for all accounts (optionally of one tenant) and print every corrected account."""
    db: Session = SessionLocal()
    try:
        query = db.query(Account)
        if tenant_id:
            query = query.filter(Account.tenant_id == tenant_id)
        accounts = query.order_by(Account.company_id, Account.account_code).all()
        totals = ledger_totals(db, [account.id for account in accounts])

        corrected_count = 0
        for account in accounts:
            debit, credit = totals.get(account.id, (ZERO, ZERO))
            ledger_balance = signed_balance(account.account_type, debit, credit)
            if account.balance != ledger_balance:
                print(f"Company {account.company_id} account {account.account_code} ({account.account_name}): {account.balance} -> {ledger_balance}")
                account.balance = ledger_balance
                corrected_count += 1

        if dry_run:
            db.rollback()
            print(f"\nDry run: {corrected_count} of {len(accounts)} accounts would be corrected.")
        else:
            db.commit()
            print(f"\nSuccessfully corrected {corrected_count} of {len(accounts)} accounts.")
        return corrected_count

    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Recompute account balances from the journal.")
    parser.add_argument("--tenant", help="Only recompute accounts of this tenant")
    parser.add_argument("--dry-run", action="store_true", help="Report drift without writing")
    args = parser.parse_args()
    recompute_account_balances(tenant_id=args.tenant, dry_run=args.dry_run)
