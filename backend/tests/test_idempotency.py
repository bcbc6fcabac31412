from decimal import Decimal


def invoice_payload(order, source_company, target_company):
    return {
        "sourceCompanyId": source_company["id"],
        "targetCompanyId": target_company["id"],
        "salesOrderId": order["sourceOrder"]["id"],
        "invoiceDate": "2026-01-10",
    }


def test_retry_with_same_key_replays_original_response(client, create_order, source_company, target_company):
    order = create_order()
    payload = invoice_payload(order, source_company, target_company)
    headers = {"Idempotency-Key": "invoice-7f3a"}

    first = client.post("/api/intercompany/invoice-bill", json=payload, headers=headers)
    retry = client.post("/api/intercompany/invoice-bill", json=payload, headers=headers)

    assert first.status_code == retry.status_code == 201
    assert retry.json() == first.json()
    invoices = client.get("/api/invoices/", params={"companyId": source_company["id"]}).json()
    assert len(invoices) == 1


def test_key_reused_with_different_body_is_conflict(client, create_order, create_invoice, source_company, target_company):
    order = create_order(quantity="10", unit_price="100.00")
    invoice = create_invoice(order)
    headers = {"Idempotency-Key": "pay-0001"}
    payload = {
        "sourceCompanyId": source_company["id"],
        "targetCompanyId": target_company["id"],
        "invoiceId": invoice["sourceInvoice"]["id"],
        "billId": invoice["targetBill"]["id"],
        "amount": "100.00",
    }

    assert client.post("/api/intercompany/payment", json=payload, headers=headers).status_code == 201
    response = client.post("/api/intercompany/payment", json={**payload, "amount": "150.00"}, headers=headers)

    assert response.status_code == 409
    assert "different request body" in response.json()["detail"]
    stored = client.get(f"/api/invoices/{invoice['sourceInvoice']['id']}").json()
    assert Decimal(stored["amount_paid"]) == Decimal("100.00")


def test_requests_without_key_are_not_deduplicated(client, create_order, source_company, target_company):
    order = create_order()
    payload = invoice_payload(order, source_company, target_company)

    assert client.post("/api/intercompany/invoice-bill", json=payload).status_code == 201
    # The order is fully invoiced, so a plain retry runs again and is refused
    assert client.post("/api/intercompany/invoice-bill", json=payload).status_code == 409


def test_repeated_partial_request_without_key_invoices_again(client, create_order, create_invoice, source_company, product):
    order = create_order(quantity="10", unit_price="100.00")
    items = [{"productId": product["id"], "quantity": "2"}]

    first = create_invoice(order, items=items)
    second = create_invoice(order, items=items)

    assert first["sourceInvoice"]["id"] != second["sourceInvoice"]["id"]
    invoices = client.get("/api/invoices/", params={"companyId": source_company["id"]}).json()
    assert [Decimal(invoice["total"]) for invoice in invoices] == [Decimal("200.00"), Decimal("200.00")]


def test_keys_are_scoped_per_tenant(client, company_factory, product, create_order):
    headers = {"Idempotency-Key": "shared-key"}
    create_order(headers=headers)

    other_source = company_factory("MFG", tenant_id="tenant-b")
    other_target = company_factory("DIST", company_type="distributor", tenant_id="tenant-b")
    response = client.post("/api/intercompany/sales-purchase", json={
        "sourceCompanyId": other_source["id"],
        "targetCompanyId": other_target["id"],
        "items": [{"description": "Consulting hours", "quantity": "5", "unitPrice": "80.00"}],
    }, headers={**headers, "X-Tenant-ID": "tenant-b"})

    assert response.status_code == 201, response.text
    assert response.json()["sourceOrder"]["company_id"] == other_source["id"]
