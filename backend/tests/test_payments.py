from decimal import Decimal


def D(value):
    return Decimal(str(value))


def account_by_code(client, company_id, code):
    accounts = client.get("/api/accounts/", params={"companyId": company_id}).json()
    return next(a for a in accounts if a["account_code"] == code)


def test_partial_payment_leaves_balance_open(client, create_order, create_invoice, pay):
    order = create_order(quantity="10", unit_price="100.00")
    invoice = create_invoice(order)

    result = pay(invoice, "300.00")

    assert result["items"][0]["paymentStatus"] == "partial"
    assert result["balances"]["paymentStatus"] == "partial"
    assert D(result["remainingBalance"]) == D("700.00")
    assert D(result["balances"]["remainingInvoiceAmount"]) == D(result["balances"]["remainingBillAmount"]) == D("700.00")
    assert D(result["balances"]["sourceReceivable"]) == D(result["balances"]["targetPayable"]) == D("700.00")
    assert result["isMultiPayment"] is False

    receipt = result["sourceReceipt"]
    payment = result["targetPayment"]
    assert receipt["is_partial"] is True
    assert payment["receipt_id"] == receipt["id"]
    assert receipt["receipt_number"] == f"REC-{order['sourceOrder']['company_id']}-1"
    assert payment["payment_number"] == f"PAY-{order['targetOrder']['company_id']}-1"

    stored = client.get(f"/api/invoices/{invoice['sourceInvoice']['id']}").json()
    assert stored["status"] == "partial"
    assert D(stored["amount_paid"]) == D("300.00")
    assert D(stored["balance_due"]) == D("700.00")
    sales_order = client.get(f"/api/sales-orders/{order['sourceOrder']['id']}").json()
    assert D(sales_order["items"][0]["paid_quantity"]) == D("3")


def test_overpayment_is_rejected(client, create_order, create_invoice, pay):
    order = create_order(quantity="10", unit_price="100.00")
    invoice = create_invoice(order)
    pay(invoice, "600.00")

    response = pay(invoice, "400.01", expected_status=409)
    assert "exceeds remaining due amount" in response["detail"]

    receipts = client.get("/api/receipts/", params={"companyId": order["sourceOrder"]["company_id"]}).json()
    assert len(receipts) == 1


def test_payment_needs_amount_or_items(client, source_company, target_company):
    response = client.post("/api/intercompany/payment", json={
        "sourceCompanyId": source_company["id"],
        "targetCompanyId": target_company["id"],
        "invoiceId": 1,
    })
    assert response.status_code == 422


def test_payment_against_unrelated_bill_is_rejected(create_order, create_invoice, pay):
    first = create_invoice(create_order(quantity="1", unit_price="100.00"))
    second = create_invoice(create_order(quantity="1", unit_price="100.00"))

    mixed = {"sourceInvoice": first["sourceInvoice"], "targetBill": second["targetBill"]}
    response = pay(mixed, "50.00", expected_status=400)
    assert "not the counterpart" in response["detail"]


def test_multi_item_payment_settles_each_invoice(client, create_order, create_invoice, product, source_company, target_company):
    order = create_order(quantity="10", unit_price="100.00")
    first = create_invoice(order, items=[{"productId": product["id"], "quantity": "4"}])
    second = create_invoice(order)

    response = client.post("/api/intercompany/payment", json={
        "sourceCompanyId": source_company["id"],
        "targetCompanyId": target_company["id"],
        "paymentDate": "2026-01-25",
        "items": [
            {"invoiceId": first["sourceInvoice"]["id"], "billId": first["targetBill"]["id"], "amount": "400.00"},
            {"invoiceId": second["sourceInvoice"]["id"], "billId": second["targetBill"]["id"], "amount": "100.00"},
        ],
    })
    assert response.status_code == 201, response.text
    result = response.json()

    assert result["isMultiPayment"] is True
    assert [item["paymentStatus"] for item in result["items"]] == ["full", "partial"]
    assert D(result["items"][1]["remainingAmount"]) == D("500.00")
    assert D(result["balances"]["sourceReceivable"]) == D(result["balances"]["targetPayable"]) == D("500.00")

    transaction = client.get(f"/api/intercompany/transactions/{order['transactionId']}").json()
    settled = [event for event in transaction["events"] if event["eventType"] == "SETTLED"]
    assert [D(event["amount"]) for event in settled] == [D("400.00"), D("100.00")]
    assert transaction["status"] == "Processing"


def test_custom_receipt_accounts(client, create_order, create_invoice, pay, source_company):
    bank = client.post("/api/accounts/", json={
        "company_id": source_company["id"],
        "account_code": "1010",
        "account_name": "Operating Bank",
        "account_type": "Asset",
    }).json()

    invoice = create_invoice(create_order(quantity="1", unit_price="250.00"))
    result = pay(invoice, "250.00", debitAccountId=bank["id"], creditAccountId=account_by_code(client, source_company["id"], "1100")["id"])

    assert result["sourceReceipt"]["debit_account_id"] == bank["id"]
    assert D(client.get(f"/api/accounts/{bank['id']}").json()["balance"]) == D("250.00")
    assert D(account_by_code(client, source_company["id"], "1000")["balance"]) == D("0")


def test_receipt_accounts_must_belong_to_source(client, create_order, create_invoice, pay, target_company):
    invoice = create_invoice(create_order(quantity="1", unit_price="250.00"))
    foreign_cash = account_by_code(client, target_company["id"], "1000")

    response = pay(invoice, "100.00", debitAccountId=foreign_cash["id"], expected_status=400)
    assert "does not belong" in response["detail"]


def test_receipt_accounts_must_differ(client, create_order, create_invoice, pay, source_company):
    invoice = create_invoice(create_order(quantity="1", unit_price="250.00"))
    receivable = account_by_code(client, source_company["id"], "1100")

    pay(invoice, "100.00", debitAccountId=receivable["id"], expected_status=400)


def test_payment_posts_cash_on_both_sides(client, create_order, create_invoice, pay, source_company, target_company):
    invoice = create_invoice(create_order(quantity="2", unit_price="100.00"))
    pay(invoice, "200.00")

    assert D(account_by_code(client, source_company["id"], "1000")["balance"]) == D("200.00")
    assert D(account_by_code(client, source_company["id"], "1100")["balance"]) == D("0")
    # Target cash is credit-heavy: the distributor paid without any opening balance
    assert D(account_by_code(client, target_company["id"], "1000")["balance"]) == D("-200.00")
    assert D(account_by_code(client, target_company["id"], "2000")["balance"]) == D("0")


def test_payment_amount_below_one_cent_is_rejected(client, create_order, create_invoice, pay):
    invoice = create_invoice(create_order(quantity="1", unit_price="100.00"))

    pay(invoice, "0.004", expected_status=422)
    pay(invoice, "0.00", expected_status=422)

    stored = client.get(f"/api/invoices/{invoice['sourceInvoice']['id']}").json()
    assert D(stored["amount_paid"]) == D("0")
    assert stored["status"] == "pending"
