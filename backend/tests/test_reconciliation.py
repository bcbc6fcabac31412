from datetime import date
from decimal import Decimal

from crud import ledger
from tasks.reconciliation_tasks import run_reconciliation_scan
from conftest import TENANT_ID


def D(value):
    return Decimal(str(value))


def post_stray_entry(db, company_id, counterparty_id, debit_code, credit_code, amount):
    """Book an entry against the counterparty outside the intercompany flow."""
    entry = ledger.post_journal_entry(
        db, TENANT_ID, company_id, date(2026, 1, 15), "Manual correction",
        [
            ledger.debit_line(ledger.require_account(db, company_id, debit_code), D(amount)),
            ledger.credit_line(ledger.require_account(db, company_id, credit_code), D(amount)),
        ],
        counterparty_company_id=counterparty_id,
    )
    db.commit()
    return entry


def reconcile(client, source_company, target_company, path="/api/intercompany/reconcile", apply=False):
    response = client.post(path, json={
        "sourceCompanyId": source_company["id"],
        "targetCompanyId": target_company["id"],
        "apply": apply,
    })
    assert response.status_code == 200, response.text
    return response.json()


def test_matching_pair_is_reconciled(client, create_order, create_invoice, source_company, target_company):
    create_invoice(create_order(quantity="4", unit_price="25.00"))

    report = reconcile(client, source_company, target_company)

    assert report["isReconciled"] is True
    assert D(report["expectedBalance"]) == D("100.00")
    assert report["driftSide"] is None
    assert report["findings"] == []


def test_drift_on_target_is_reported_without_changes(client, db, create_order, create_invoice, source_company, target_company):
    create_invoice(create_order(quantity="10", unit_price="100.00"))
    post_stray_entry(db, target_company["id"], source_company["id"], ledger.ACCOUNTS_PAYABLE, ledger.INVENTORY, "150.00")

    report = reconcile(client, source_company, target_company)

    assert report["isReconciled"] is False
    assert report["driftSide"] == "target"
    assert D(report["sourceReceivable"]) == D("1000.00")
    assert D(report["targetPayable"]) == D("850.00")
    assert D(report["difference"]) == D("150.00")
    kinds = [finding["kind"] for finding in report["findings"]]
    assert kinds == ["payable_drift"]
    assert D(report["findings"][0]["amount"]) == D("-150.00")
    assert report["reviewId"] is None

    # Reporting alone leaves the ledger untouched
    balances = client.get("/api/intercompany/balances", params={
        "sourceCompanyId": source_company["id"], "targetCompanyId": target_company["id"]
    }).json()
    assert balances["isReconciled"] is False
    assert client.get("/api/intercompany/reconciliation-reviews").json() == []


def test_fix_mismatch_corrects_drifted_side_and_opens_review(client, db, create_order, create_invoice, source_company, target_company):
    order = create_order(quantity="10", unit_price="100.00")
    create_invoice(order)
    post_stray_entry(db, target_company["id"], source_company["id"], ledger.ACCOUNTS_PAYABLE, ledger.INVENTORY, "150.00")

    report = reconcile(client, source_company, target_company, path="/api/intercompany-balances/fix-mismatch")

    assert report["isReconciled"] is True
    assert report["driftSide"] == "target"
    assert D(report["sourceReceivable"]) == D(report["targetPayable"]) == D("1000.00")

    adjustment = client.get(f"/api/journal-entries/{report['adjustmentJournalEntryId']}").json()
    assert adjustment["company_id"] == target_company["id"]
    assert adjustment["source_type"] == "adjustment"
    assert adjustment["intercompany_transaction_id"] == order["transactionId"]

    reviews = client.get("/api/intercompany/reconciliation-reviews", params={"status": "needs_review"}).json()
    assert [review["id"] for review in reviews] == [report["reviewId"]]
    assert reviews[0]["driftSide"] == "target"
    assert D(reviews[0]["difference"]) == D("150.00")

    events = client.get(f"/api/intercompany/transactions/{order['transactionId']}").json()["events"]
    assert events[-1]["eventType"] == "ADJUSTED"
    assert D(events[-1]["amount"]) == D("150.00")
    assert events[-1]["targetJournalEntryId"] == adjustment["id"]


def test_drift_on_source_is_reversed_on_receivable(client, db, create_order, create_invoice, source_company, target_company):
    create_invoice(create_order(quantity="10", unit_price="100.00"))
    post_stray_entry(db, source_company["id"], target_company["id"], ledger.ACCOUNTS_RECEIVABLE, ledger.SALES_REVENUE, "50.00")

    report = reconcile(client, source_company, target_company, apply=True)

    assert report["driftSide"] == "source"
    assert report["isReconciled"] is True
    adjustment = client.get(f"/api/journal-entries/{report['adjustmentJournalEntryId']}").json()
    assert adjustment["company_id"] == source_company["id"]
    accounts = {a["id"]: a["account_code"] for a in client.get("/api/accounts/", params={"companyId": source_company["id"]}).json()}
    credited = [accounts[item["account_id"]] for item in adjustment["items"] if D(item["credit"]) > 0]
    assert credited == ["1100"]


def test_drift_without_transactions_aligns_payable(client, db, source_company, target_company):
    post_stray_entry(db, source_company["id"], target_company["id"], ledger.ACCOUNTS_RECEIVABLE, ledger.SALES_REVENUE, "75.00")

    report = reconcile(client, source_company, target_company)
    assert report["driftSide"] == "unknown"

    report = reconcile(client, source_company, target_company, apply=True)
    assert report["isReconciled"] is True
    assert D(report["targetPayable"]) == D("75.00")


def test_resolve_review_once(client, db, create_order, create_invoice, source_company, target_company):
    create_invoice(create_order(quantity="1", unit_price="10.00"))
    post_stray_entry(db, target_company["id"], source_company["id"], ledger.ACCOUNTS_PAYABLE, ledger.INVENTORY, "5.00")
    report = reconcile(client, source_company, target_company, apply=True)
    review_id = report["reviewId"]

    response = client.patch(
        f"/api/intercompany/reconciliation-reviews/{review_id}",
        json={"resolutionNote": "Write-down was booked against the wrong vendor."}
    )
    assert response.status_code == 200, response.text
    review = response.json()
    assert review["status"] == "resolved"
    assert review["resolvedBy"] == "pytest"
    assert review["resolvedAt"] is not None

    again = client.patch(f"/api/intercompany/reconciliation-reviews/{review_id}", json={"resolutionNote": "again"})
    assert again.status_code == 400
    missing = client.patch("/api/intercompany/reconciliation-reviews/9999", json={"resolutionNote": "n/a"})
    assert missing.status_code == 404
    assert client.get("/api/intercompany/reconciliation-reviews", params={"status": "needs_review"}).json() == []


def test_scheduled_scan_flags_each_mismatch_once(client, db, create_order, create_invoice, source_company, target_company):
    create_invoice(create_order(quantity="2", unit_price="100.00"))
    post_stray_entry(db, target_company["id"], source_company["id"], ledger.ACCOUNTS_PAYABLE, ledger.INVENTORY, "20.00")

    assert run_reconciliation_scan(db) == {"pairs": 1, "mismatched": 1, "flagged": 1}
    assert run_reconciliation_scan(db) == {"pairs": 1, "mismatched": 1, "flagged": 0}

    reviews = client.get("/api/intercompany/reconciliation-reviews").json()
    assert len(reviews) == 1
    assert reviews[0]["adjustmentJournalEntryId"] is None
    # The scan only reports; balances are left as they are
    assert D(reviews[0]["targetPayable"]) == D("180.00")
