from decimal import Decimal

from crud import ledger
from models.accounts import Account
from recompute_account_balances import recompute_account_balances
from conftest import TENANT_ID


def D(value):
    return Decimal(str(value))


def test_reports_after_settled_lifecycle(client, create_order, create_invoice, pay, source_company, target_company):
    pay(create_invoice(create_order(quantity="10", unit_price="100.00")), "1000.00")

    pnl = client.get("/api/reports/profit-and-loss", params={
        "companyId": source_company["id"], "startDate": "2026-01-01", "endDate": "2026-01-31"
    }).json()
    assert D(pnl["total_revenue"]) == D("1000.00")
    assert D(pnl["net_income"]) == D("1000.00")
    assert [line["account_code"] for line in pnl["revenue"] if D(line["balance"])] == ["4000"]

    for company in (source_company, target_company):
        sheet = client.get("/api/reports/balance-sheet", params={
            "companyId": company["id"], "asOfDate": "2026-01-31"
        }).json()
        assert sheet["is_balanced"] is True

    source_sheet = client.get("/api/reports/balance-sheet", params={
        "companyId": source_company["id"], "asOfDate": "2026-01-31"
    }).json()
    assert D(source_sheet["total_assets"]) == D("1000.00")
    assert D(source_sheet["current_period_earnings"]) == D("1000.00")


def test_balance_sheet_respects_as_of_date(client, create_order, create_invoice, pay, source_company):
    pay(create_invoice(create_order(quantity="1", unit_price="300.00")), "300.00")

    before_receipt = client.get("/api/reports/balance-sheet", params={
        "companyId": source_company["id"], "asOfDate": "2026-01-15"
    }).json()
    lines = {line["account_code"]: D(line["balance"]) for line in before_receipt["assets"]}
    assert lines["1100"] == D("300.00")
    assert lines["1000"] == D("0")


def test_profit_and_loss_rejects_inverted_period(client, source_company):
    response = client.get("/api/reports/profit-and-loss", params={
        "companyId": source_company["id"], "startDate": "2026-02-01", "endDate": "2026-01-01"
    })
    assert response.status_code == 400


def test_recompute_restores_projection_from_journal(db, create_order, create_invoice, source_company):
    create_invoice(create_order(quantity="2", unit_price="100.00"))
    receivable = ledger.require_account(db, source_company["id"], ledger.ACCOUNTS_RECEIVABLE)
    receivable.balance = D("999.00")
    db.commit()

    assert recompute_account_balances(tenant_id=TENANT_ID, dry_run=True) == 1
    db.expire_all()
    assert db.get(Account, receivable.id).balance == D("999.00")

    assert recompute_account_balances(tenant_id=TENANT_ID) == 1
    db.expire_all()
    assert db.get(Account, receivable.id).balance == D("200.00")
    assert recompute_account_balances(tenant_id=TENANT_ID) == 0
