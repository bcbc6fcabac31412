from decimal import Decimal

from fastapi.testclient import TestClient

from crud import ledger
from crud.audit_log import get_audit_logs
from main import app
from models.accounts import Account
from models.journal_entry import JournalEntry
from conftest import TENANT_ID


def D(value):
    return Decimal(str(value))


def assert_ledger_consistent(db):
    """Every entry balances and every account projection equals its ledger balance."""
    db.expire_all()
    for entry in db.query(JournalEntry).all():
        assert ledger.is_entry_balanced(entry), entry.entry_number
    for account in db.query(Account).all():
        assert account.balance == ledger.account_balance(db, account), account.account_code


def test_order_pair_creates_mirrored_orders(client, create_order, source_company, target_company):
    result = create_order(quantity="10", unit_price="100.00")

    sales_order = result["sourceOrder"]
    purchase_order = result["targetOrder"]
    assert result["success"] is True
    assert sales_order["company_id"] == source_company["id"]
    assert sales_order["customer_company_id"] == target_company["id"]
    assert purchase_order["company_id"] == target_company["id"]
    assert purchase_order["vendor_company_id"] == source_company["id"]
    assert sales_order["order_number"] == f"SO-{source_company['id']}-1"
    assert purchase_order["order_number"] == f"PO-{target_company['id']}-1"
    assert sales_order["reference_number"] == purchase_order["reference_number"] == "IC-00001"
    assert D(sales_order["total"]) == D(purchase_order["total"]) == D("1000.00")
    assert sales_order["expected_date"] == "2026-01-12"
    assert sales_order["items"][0]["fulfillment_status"] == "Open"
    assert D(sales_order["items"][0]["remaining_quantity"]) == D("10")

    transaction = client.get(f"/api/intercompany/transactions/{result['transactionId']}").json()
    assert transaction["status"] == "Processing"
    assert [event["eventType"] for event in transaction["events"]] == ["ORDER_CREATED"]
    assert D(transaction["events"][0]["amount"]) == D("1000.00")


def test_order_pair_rejects_same_company(client, source_company, product):
    response = client.post("/api/intercompany/sales-purchase", json={
        "sourceCompanyId": source_company["id"],
        "targetCompanyId": source_company["id"],
        "items": [{"productId": product["id"], "quantity": "1", "unitPrice": "10"}],
    })
    assert response.status_code == 400
    assert "different" in response.json()["detail"]


def test_order_pair_rejects_non_positive_quantity(client, source_company, target_company, product):
    response = client.post("/api/intercompany/sales-purchase", json={
        "sourceCompanyId": source_company["id"],
        "targetCompanyId": target_company["id"],
        "items": [{"productId": product["id"], "quantity": "0", "unitPrice": "10"}],
    })
    assert response.status_code == 422


def test_order_pair_rejects_values_below_stored_precision(client, source_company, target_company, product):
    def post_items(items):
        return client.post("/api/intercompany/sales-purchase", json={
            "sourceCompanyId": source_company["id"],
            "targetCompanyId": target_company["id"],
            "items": items,
        })

    assert post_items([{"productId": product["id"], "quantity": "0.0004", "unitPrice": "100.00"}]).status_code == 422
    assert post_items([{"productId": product["id"], "quantity": "5", "unitPrice": "0.004"}]).status_code == 422

    # Both values are representable but the line is worth less than a cent
    response = post_items([{"productId": product["id"], "quantity": "0.001", "unitPrice": "0.01"}])
    assert response.status_code == 400
    assert "less than one cent" in response.json()["detail"]

    assert client.get("/api/sales-orders/").json() == []
    assert client.get("/api/intercompany/transactions").json() == []


def test_order_pair_unknown_company_is_not_found(client, source_company, product):
    response = client.post("/api/intercompany/sales-purchase", json={
        "sourceCompanyId": source_company["id"],
        "targetCompanyId": 999,
        "items": [{"productId": product["id"], "quantity": "1", "unitPrice": "10"}],
    })
    assert response.status_code == 404


def test_partial_then_full_lifecycle_keeps_sides_in_step(client, db, create_order, create_invoice, pay, product):
    order = create_order(quantity="10", unit_price="100.00")

    first = create_invoice(order, items=[{"productId": product["id"], "quantity": "6"}])
    assert D(first["sourceInvoice"]["total"]) == D("600.00")
    assert D(first["targetBill"]["total"]) == D("600.00")
    assert first["targetBill"]["reference_invoice_id"] == first["sourceInvoice"]["id"]
    assert first["isPartial"] is True
    remaining = first["remainingItems"][0]
    assert D(remaining["remainingQuantity"]) == D("4")
    assert remaining["fullyInvoiced"] is False
    assert D(first["balances"]["sourceReceivable"]) == D(first["balances"]["targetPayable"]) == D("600.00")
    assert_ledger_consistent(db)

    payment = pay(first, "600.00")
    assert payment["items"][0]["paymentStatus"] == "full"
    assert D(payment["remainingBalance"]) == D("0")
    assert D(payment["balances"]["sourceReceivable"]) == D(payment["balances"]["targetPayable"]) == D("0")
    assert client.get(f"/api/invoices/{first['sourceInvoice']['id']}").json()["status"] == "paid"
    assert client.get(f"/api/bills/{first['targetBill']['id']}").json()["status"] == "paid"

    transaction_id = order["transactionId"]
    assert client.get(f"/api/intercompany/transactions/{transaction_id}").json()["status"] == "Processing"

    second = create_invoice(order)
    assert D(second["sourceInvoice"]["total"]) == D("400.00")
    assert second["isPartial"] is False
    assert second["remainingItems"][0]["fullyInvoiced"] is True
    assert D(second["balances"]["sourceReceivable"]) == D(second["balances"]["targetPayable"]) == D("400.00")

    pay(second, "400.00")
    transaction = client.get(f"/api/intercompany/transactions/{transaction_id}").json()
    assert transaction["status"] == "Completed"
    assert [event["eventType"] for event in transaction["events"]] == [
        "ORDER_CREATED", "INVOICED", "SETTLED", "INVOICED", "SETTLED"
    ]

    sales_order = client.get(f"/api/sales-orders/{order['sourceOrder']['id']}").json()
    assert sales_order["status"] == "Invoiced"
    assert D(sales_order["items"][0]["paid_quantity"]) == D("10")
    purchase_order = client.get(f"/api/purchase-orders/{order['targetOrder']['id']}").json()
    assert purchase_order["status"] == "Billed"
    assert_ledger_consistent(db)


def test_invoice_posts_both_ledgers(client, create_order, create_invoice, source_company, target_company):
    order = create_order(quantity="2", unit_price="250.00")
    result = create_invoice(order)

    source_entry = client.get(f"/api/journal-entries/{result['sourceInvoice']['journal_entry_id']}").json()
    target_entry = client.get(f"/api/journal-entries/{result['targetBill']['journal_entry_id']}").json()

    assert source_entry["company_id"] == source_company["id"]
    assert source_entry["counterparty_company_id"] == target_company["id"]
    assert source_entry["source_type"] == "invoice"
    assert target_entry["company_id"] == target_company["id"]
    assert target_entry["counterparty_company_id"] == source_company["id"]
    assert target_entry["source_type"] == "bill"

    accounts = {a["id"]: a for a in client.get("/api/accounts/", params={"limit": 500}).json()}
    source_lines = {accounts[i["account_id"]]["account_code"]: i for i in source_entry["items"]}
    target_lines = {accounts[i["account_id"]]["account_code"]: i for i in target_entry["items"]}
    assert D(source_lines["1100"]["debit"]) == D("500.00")
    assert D(source_lines["4000"]["credit"]) == D("500.00")
    assert D(target_lines["1200"]["debit"]) == D("500.00")
    assert D(target_lines["2000"]["credit"]) == D("500.00")


def test_balances_endpoint_reports_pair_and_tenant_matrix(client, create_order, create_invoice, source_company, target_company):
    order = create_order(quantity="3", unit_price="100.00")
    create_invoice(order)

    pair = client.get("/api/intercompany/balances", params={
        "sourceCompanyId": source_company["id"], "targetCompanyId": target_company["id"]
    }).json()
    assert D(pair["sourceReceivable"]) == D(pair["targetPayable"]) == D("300.00")
    assert pair["isReconciled"] is True

    summary = client.get("/api/intercompany/balances").json()
    by_company = {row["companyId"]: row for row in summary["companies"]}
    assert D(by_company[source_company["id"]]["receivables"]) == D("300.00")
    assert D(by_company[target_company["id"]]["payables"]) == D("300.00")
    assert D(summary["totalReceivables"]) == D(summary["totalPayables"]) == D("300.00")
    assert D(summary["net"]) == D("0")

    response = client.get("/api/intercompany/balances", params={"sourceCompanyId": source_company["id"]})
    assert response.status_code == 400


def test_receipt_eligible_transactions_lists_open_invoices(client, create_order, create_invoice, pay, source_company, target_company, product):
    order = create_order(quantity="10", unit_price="100.00")
    first = create_invoice(order, items=[{"productId": product["id"], "quantity": "5"}])
    pay(first, "200.00")

    rows = client.get("/api/intercompany-receipt-eligible-transactions", params={"companyId": target_company["id"]}).json()
    assert len(rows) == 1
    row = rows[0]
    assert row["transactionId"] == order["transactionId"]
    assert row["sourceCompanyName"] == source_company["name"]
    assert row["targetCompanyName"] == target_company["name"]
    assert row["sourceInvoiceId"] == first["sourceInvoice"]["id"]
    assert row["targetBillId"] == first["targetBill"]["id"]
    assert D(row["invoiceTotal"]) == D("500.00")
    assert D(row["paidAmount"]) == D("200.00")
    assert D(row["remainingAmount"]) == D("300.00")
    assert row["isIntercompany"] is True

    pay(first, "300.00")
    rows = client.get("/api/intercompany-receipt-eligible-transactions", params={"companyId": source_company["id"]}).json()
    assert rows == []


def test_tenants_are_isolated(client, create_order):
    order = create_order()
    other = client.get(
        f"/api/sales-orders/{order['sourceOrder']['id']}",
        headers={"X-Tenant-ID": "tenant-b"}
    )
    assert other.status_code == 404
    assert client.get("/api/intercompany/transactions", headers={"X-Tenant-ID": "tenant-b"}).json() == []
    assert len(client.get("/api/intercompany/transactions").json()) == 1


def test_missing_tenant_header_is_rejected(client):
    bare_client = TestClient(app)
    response = bare_client.get("/api/companies/")
    assert response.status_code == 422


def test_lifecycle_is_audited(db, create_order, create_invoice):
    order = create_order()
    result = create_invoice(order)
    logs = get_audit_logs(db, TENANT_ID, "invoices", result["sourceInvoice"]["id"])
    assert len(logs) == 1
    assert logs[0].action == "INSERT"
    assert logs[0].changed_by == "pytest"
    assert logs[0].new_values["invoice_number"] == result["sourceInvoice"]["invoice_number"]
