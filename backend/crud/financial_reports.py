from sqlalchemy.orm import Session
from datetime import date
from decimal import Decimal
from typing import List, Optional
from models.accounts import Account
from schemas.financial_reports import AccountBalanceLine, BalanceSheet, ProfitAndLoss
from crud.companies import require_company
from crud.exceptions import InvalidInput
from crud.ledger import ledger_totals, signed_balance
from utils import to_money

ZERO = Decimal("0.00")


def _account_lines(db: Session, company_id: int, account_types: List[str], as_of_date: date, start_date: Optional[date] = None) -> dict:
    """Ledger balances grouped by account type, one line per account with activity or a non-zero balance."""
    accounts = db.query(Account).filter(
        Account.company_id == company_id,
        Account.account_type.in_(account_types)
    ).order_by(Account.account_code).all()
    totals = ledger_totals(db, [a.id for a in accounts], as_of_date=as_of_date, start_date=start_date)

    grouped = {account_type: [] for account_type in account_types}
    for account in accounts:
        debit, credit = totals.get(account.id, (ZERO, ZERO))
        if not account.is_active and debit == credit:
            continue
        grouped[account.account_type].append(AccountBalanceLine(
            account_id=account.id,
            account_code=account.account_code,
            account_name=account.account_name,
            balance=signed_balance(account.account_type, debit, credit)
        ))
    return grouped


def _total(lines: List[AccountBalanceLine]) -> Decimal:
    return to_money(sum((line.balance for line in lines), ZERO))


def get_profit_and_loss(db: Session, company_id: int, start_date: date, end_date: date, tenant_id: str) -> ProfitAndLoss:
    require_company(db, company_id, tenant_id)
    if start_date > end_date:
        raise InvalidInput("startDate cannot be after endDate.")

    grouped = _account_lines(db, company_id, ["Revenue", "Expense"], as_of_date=end_date, start_date=start_date)
    total_revenue = _total(grouped["Revenue"])
    total_expenses = _total(grouped["Expense"])

    return ProfitAndLoss(
        company_id=company_id,
        start_date=start_date,
        end_date=end_date,
        revenue=grouped["Revenue"],
        expenses=grouped["Expense"],
        total_revenue=total_revenue,
        total_expenses=total_expenses,
        net_income=to_money(total_revenue - total_expenses)
    )


def get_balance_sheet(db: Session, company_id: int, as_of_date: date, tenant_id: str) -> BalanceSheet:
    require_company(db, company_id, tenant_id)

    grouped = _account_lines(db, company_id, ["Asset", "Liability", "Equity", "Revenue", "Expense"], as_of_date=as_of_date)
    total_assets = _total(grouped["Asset"])
    total_liabilities = _total(grouped["Liability"])
    # Revenue and expenses are not closed into retained earnings, so they count as equity here
    current_period_earnings = to_money(_total(grouped["Revenue"]) - _total(grouped["Expense"]))
    total_equity = to_money(_total(grouped["Equity"]) + current_period_earnings)

    return BalanceSheet(
        company_id=company_id,
        as_of_date=as_of_date,
        assets=grouped["Asset"],
        liabilities=grouped["Liability"],
        equity=grouped["Equity"],
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        current_period_earnings=current_period_earnings,
        total_equity=total_equity,
        is_balanced=total_assets == to_money(total_liabilities + total_equity)
    )
