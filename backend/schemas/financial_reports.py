from pydantic import BaseModel
from typing import List
from datetime import date
from decimal import Decimal

class AccountBalanceLine(BaseModel):
    account_id: int
    account_code: str
    account_name: str
    balance: Decimal

class BalanceSheet(BaseModel):
    company_id: int
    as_of_date: date
    assets: List[AccountBalanceLine]
    liabilities: List[AccountBalanceLine]
    equity: List[AccountBalanceLine]
    total_assets: Decimal
    total_liabilities: Decimal
    current_period_earnings: Decimal  # revenue - expenses not yet closed to retained earnings
    total_equity: Decimal
    is_balanced: bool

class ProfitAndLoss(BaseModel):
    company_id: int
    start_date: date
    end_date: date
    revenue: List[AccountBalanceLine]
    expenses: List[AccountBalanceLine]
    total_revenue: Decimal
    total_expenses: Decimal
    net_income: Decimal
