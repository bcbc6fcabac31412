from decimal import Decimal

import pytest

from crud import ledger
from crud.exceptions import InvalidInput, UnbalancedEntryError
from conftest import TENANT_ID


def D(value):
    return Decimal(str(value))


def accounts_by_code(client, company_id):
    return {a["account_code"]: a for a in client.get("/api/accounts/", params={"companyId": company_id}).json()}


def test_manual_entry_updates_account_balances(client, source_company):
    accounts = accounts_by_code(client, source_company["id"])
    response = client.post("/api/journal-entries/", json={
        "company_id": source_company["id"],
        "date": "2026-01-02",
        "description": "Owner contribution",
        "items": [
            {"account_id": accounts["1000"]["id"], "debit": "5000.00"},
            {"account_id": accounts["3000"]["id"], "credit": "5000.00"},
        ],
    })
    assert response.status_code == 201, response.text
    entry = response.json()
    assert entry["source_type"] == "manual"
    assert entry["entry_number"] == f"JE-{source_company['id']}-1"
    assert entry["counterparty_company_id"] is None

    accounts = accounts_by_code(client, source_company["id"])
    assert D(accounts["1000"]["balance"]) == D("5000.00")
    assert D(accounts["3000"]["balance"]) == D("5000.00")


def test_unbalanced_entry_is_rejected_by_validation(client, source_company):
    accounts = accounts_by_code(client, source_company["id"])
    response = client.post("/api/journal-entries/", json={
        "company_id": source_company["id"],
        "date": "2026-01-02",
        "items": [
            {"account_id": accounts["1000"]["id"], "debit": "100.00"},
            {"account_id": accounts["3000"]["id"], "credit": "90.00"},
        ],
    })
    assert response.status_code == 422
    assert client.get("/api/journal-entries/").json() == []


def test_entry_with_foreign_account_is_rejected(client, source_company, target_company):
    own = accounts_by_code(client, source_company["id"])
    foreign = accounts_by_code(client, target_company["id"])
    response = client.post("/api/journal-entries/", json={
        "company_id": source_company["id"],
        "date": "2026-01-02",
        "items": [
            {"account_id": own["1000"]["id"], "debit": "100.00"},
            {"account_id": foreign["3000"]["id"], "credit": "100.00"},
        ],
    })
    assert response.status_code == 400
    assert "does not belong" in response.json()["detail"]


def test_journal_entries_filter_by_source_type(client, create_order, create_invoice, pay, source_company):
    pay(create_invoice(create_order(quantity="1", unit_price="40.00")), "40.00")

    entries = client.get("/api/journal-entries/", params={"companyId": source_company["id"]}).json()
    assert sorted(entry["source_type"] for entry in entries) == ["invoice", "receipt"]
    receipts = client.get("/api/journal-entries/", params={"source_type": "receipt"}).json()
    assert [entry["company_id"] for entry in receipts] == [source_company["id"]]
    payments = client.get("/api/journal-entries/", params={"source_type": "payment"}).json()
    assert len(payments) == 1
    assert payments[0]["company_id"] != source_company["id"]
    assert client.get("/api/journal-entries/9999").status_code == 404


def test_ledger_rejects_one_sided_lines(db, source_company):
    cash = ledger.require_account(db, source_company["id"], ledger.CASH)
    capital = ledger.require_account(db, source_company["id"], "3000")

    with pytest.raises(UnbalancedEntryError):
        ledger.post_journal_entry(db, TENANT_ID, source_company["id"], None, "one line",
                                  [ledger.debit_line(cash, "10.00")])
    with pytest.raises(UnbalancedEntryError):
        ledger.post_journal_entry(db, TENANT_ID, source_company["id"], None, "lopsided",
                                  [ledger.debit_line(cash, "10.00"), ledger.credit_line(capital, "9.99")])
    with pytest.raises(UnbalancedEntryError):
        ledger.post_journal_entry(db, TENANT_ID, source_company["id"], None, "both sides", [
            {"account": cash, "debit": D("5.00"), "credit": D("5.00")},
            ledger.credit_line(capital, "0.00"),
        ])


def test_ledger_requires_active_account(db, client, source_company):
    accounts = accounts_by_code(client, source_company["id"])
    client.patch(f"/api/accounts/{accounts['1300']['id']}", json={"is_active": False})
    db.expire_all()

    with pytest.raises(InvalidInput):
        ledger.require_account(db, source_company["id"], "1300")
