from decimal import Decimal


def D(value):
    return Decimal(str(value))


def balances_by_code(client, company_id):
    accounts = client.get("/api/accounts/", params={"companyId": company_id}).json()
    return {account["account_code"]: D(account["balance"]) for account in accounts}


def reconcile(client, source_company, target_company):
    response = client.post("/api/intercompany/reconcile", json={
        "sourceCompanyId": source_company["id"],
        "targetCompanyId": target_company["id"],
    })
    assert response.status_code == 200, response.text
    return response.json()


def adjust(client, source_company, target_company, amount, expected_status=201, headers=None, **extra):
    payload = {
        "sourceCompanyId": source_company["id"],
        "targetCompanyId": target_company["id"],
        "amount": amount,
        "adjustmentDate": "2026-01-15",
    }
    payload.update(extra)
    response = client.post("/api/intercompany-adjustment", json=payload, headers=headers or {})
    assert response.status_code == expected_status, response.text
    return response.json()


def test_adjustment_on_invoice_keeps_receivable_equal_to_payable(client, create_order, create_invoice, source_company, target_company):
    order = create_order(quantity="10", unit_price="100.00")
    invoice = create_invoice(order)

    result = adjust(client, source_company, target_company, "150.00",
                    invoiceId=invoice["sourceInvoice"]["id"], reason="Damaged goods")

    adjustment = result["adjustment"]
    assert adjustment["referenceNumber"] == "ADJ-00001"
    assert adjustment["billId"] == invoice["targetBill"]["id"]
    assert result["creditNote"]["credit_note_number"] == f"CN-{source_company['id']}-1"
    assert result["creditNote"]["reason"] == "Intercompany adjustment: Damaged goods"
    assert result["debitNote"]["debit_note_number"] == f"DN-{target_company['id']}-1"
    assert D(result["balances"]["sourceReceivable"]) == D(result["balances"]["targetPayable"]) == D("850.00")

    stored_invoice = client.get(f"/api/invoices/{invoice['sourceInvoice']['id']}").json()
    assert D(stored_invoice["amount_credited"]) == D("150.00")
    assert D(stored_invoice["balance_due"]) == D("850.00")
    stored_bill = client.get(f"/api/bills/{invoice['targetBill']['id']}").json()
    assert D(stored_bill["balance_due"]) == D("850.00")

    source = balances_by_code(client, source_company["id"])
    target = balances_by_code(client, target_company["id"])
    assert source["1100"] == source["4000"] == D("850.00")
    assert target["2000"] == target["1200"] == D("850.00")

    events = client.get(f"/api/intercompany/transactions/{order['transactionId']}").json()["events"]
    assert events[-1]["eventType"] == "ADJUSTED"
    assert events[-1]["adjustmentId"] == adjustment["id"]
    assert D(events[-1]["amount"]) == D("150.00")

    report = reconcile(client, source_company, target_company)
    assert report["isReconciled"] is True
    assert D(report["expectedBalance"]) == D("850.00")


def test_credited_invoice_completes_after_remaining_payment(client, create_order, create_invoice, pay, source_company, target_company):
    order = create_order(quantity="2", unit_price="100.00")
    invoice = create_invoice(order)
    adjust(client, source_company, target_company, "50.00", invoiceId=invoice["sourceInvoice"]["id"])

    pay(invoice, "200.00", expected_status=409)
    result = pay(invoice, "150.00")

    assert result["items"][0]["paymentStatus"] == "full"
    assert D(result["balances"]["sourceReceivable"]) == D(result["balances"]["targetPayable"]) == D("0")
    transaction = client.get(f"/api/intercompany/transactions/{order['transactionId']}").json()
    assert transaction["status"] == "Completed"


def test_adjustment_cannot_exceed_open_invoice_amount(client, create_order, create_invoice, source_company, target_company):
    invoice = create_invoice(create_order(quantity="1", unit_price="100.00"))

    response = adjust(client, source_company, target_company, "100.01",
                      invoiceId=invoice["sourceInvoice"]["id"], expected_status=409)
    assert "exceeds remaining due amount" in response["detail"]

    assert client.get("/api/credit-notes/").json() == []
    assert client.get("/api/debit-notes/").json() == []
    assert client.get("/api/intercompany-adjustments").json() == []


def test_adjustment_amount_below_one_cent_is_rejected(client, create_order, create_invoice, source_company, target_company):
    invoice = create_invoice(create_order(quantity="1", unit_price="100.00"))
    adjust(client, source_company, target_company, "0.004", invoiceId=invoice["sourceInvoice"]["id"], expected_status=422)


def test_pair_adjustment_without_invoice(client, create_order, create_invoice, source_company, target_company):
    order = create_order(quantity="3", unit_price="100.00")
    create_invoice(order)

    result = adjust(client, source_company, target_company, "100.00", reason="Volume rebate")

    assert result["adjustment"]["invoiceId"] is None
    assert result["adjustment"]["intercompanyTransactionId"] == order["transactionId"]
    assert D(result["balances"]["sourceReceivable"]) == D(result["balances"]["targetPayable"]) == D("200.00")

    report = reconcile(client, source_company, target_company)
    assert report["isReconciled"] is True
    assert D(report["expectedBalance"]) == D("200.00")


def test_pair_adjustment_needs_open_balance(client, source_company, target_company):
    response = adjust(client, source_company, target_company, "10.00", expected_status=409)
    assert "exceeds the open balance" in response["detail"]


def test_adjustments_are_listed_with_note_numbers(client, create_order, create_invoice, source_company, target_company):
    invoice = create_invoice(create_order(quantity="1", unit_price="80.00"))
    adjust(client, source_company, target_company, "30.00", invoiceId=invoice["sourceInvoice"]["id"])

    adjustments = client.get("/api/intercompany-adjustments", params={"companyId": target_company["id"]}).json()
    assert len(adjustments) == 1
    assert adjustments[0]["creditNoteNumber"] == f"CN-{source_company['id']}-1"
    assert adjustments[0]["debitNoteNumber"] == f"DN-{target_company['id']}-1"

    credit_notes = client.get("/api/credit-notes/", params={"companyId": source_company["id"]}).json()
    assert credit_notes[0]["invoice_id"] == invoice["sourceInvoice"]["id"]
    assert client.get(f"/api/credit-notes/{credit_notes[0]['id']}").status_code == 200
    assert client.get("/api/debit-notes/9999").status_code == 404


def test_adjustment_is_replayed_for_same_key(client, create_order, create_invoice, source_company, target_company):
    invoice = create_invoice(create_order(quantity="1", unit_price="100.00"))
    headers = {"Idempotency-Key": "adj-0001"}

    first = adjust(client, source_company, target_company, "25.00", headers=headers, invoiceId=invoice["sourceInvoice"]["id"])
    second = adjust(client, source_company, target_company, "25.00", headers=headers, invoiceId=invoice["sourceInvoice"]["id"])

    assert first == second
    assert len(client.get("/api/credit-notes/").json()) == 1


def test_one_sided_credit_note_shows_as_receivable_drift(client, create_order, create_invoice, source_company, target_company):
    create_invoice(create_order(quantity="4", unit_price="100.00"))

    response = client.post("/api/credit-notes/", json={
        "company_id": source_company["id"],
        "customer_company_id": target_company["id"],
        "amount": "40.00",
        "reason": "Late delivery",
        "credit_note_date": "2026-01-12",
        "items": [{"amount": "40.00", "reason": "Late delivery"}],
    })
    assert response.status_code == 201, response.text
    credit_note = response.json()
    assert credit_note["credit_note_number"] == f"CN-{source_company['id']}-1"
    assert credit_note["journal_entry_id"] is not None
    assert len(credit_note["items"]) == 1

    report = reconcile(client, source_company, target_company)
    assert report["isReconciled"] is False
    assert report["driftSide"] == "source"
    assert [finding["kind"] for finding in report["findings"]] == ["receivable_drift"]
    assert D(report["sourceReceivable"]) == D("360.00")


def test_debit_note_validation(client, source_company, target_company):
    base = {"company_id": target_company["id"], "vendor_company_id": source_company["id"], "amount": "20.00"}

    assert client.post("/api/debit-notes/", json={**base, "vendor_company_id": target_company["id"]}).status_code == 400
    assert client.post("/api/debit-notes/", json={**base, "vendor_company_id": 9999}).status_code == 404
    mismatched = client.post("/api/debit-notes/", json={**base, "items": [{"amount": "15.00"}]})
    assert mismatched.status_code == 400
    assert "add up to" in mismatched.json()["detail"]

    response = client.post("/api/debit-notes/", json=base)
    assert response.status_code == 201, response.text
    assert response.json()["debit_note_number"] == f"DN-{target_company['id']}-1"
    assert balances_by_code(client, target_company["id"])["2000"] == D("-20.00")
