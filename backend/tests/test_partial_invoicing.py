from decimal import Decimal


def D(value):
    return Decimal(str(value))


def test_partial_invoice_cannot_exceed_remaining_quantity(client, create_order, create_invoice, product):
    order = create_order(quantity="10", unit_price="100.00")
    create_invoice(order, items=[{"productId": product["id"], "quantity": "7"}])

    response = create_invoice(order, items=[{"productId": product["id"], "quantity": "4"}], expected_status=409)
    assert "only 3" in response["detail"]

    # Nothing from the rejected request was persisted
    invoices = client.get("/api/invoices/", params={"companyId": order["sourceOrder"]["company_id"]}).json()
    assert len(invoices) == 1
    bills = client.get("/api/bills/", params={"companyId": order["targetOrder"]["company_id"]}).json()
    assert len(bills) == 1


def test_full_invoice_of_fully_invoiced_order_is_conflict(create_order, create_invoice):
    order = create_order(quantity="2", unit_price="50.00")
    create_invoice(order)
    response = create_invoice(order, expected_status=409)
    assert "fully invoiced" in response["detail"]


def test_partial_invoice_without_items_is_rejected(create_order, create_invoice):
    order = create_order()
    create_invoice(order, items=[], expected_status=400)


def test_invoice_by_order_line_id(client, create_order, create_invoice, product):
    order = create_order(items=[
        {"productId": product["id"], "quantity": "5", "unitPrice": "100.00"},
        {"productId": product["id"], "quantity": "3", "unitPrice": "120.00"},
    ])
    second_line = order["sourceOrder"]["items"][1]

    result = create_invoice(order, items=[{"salesOrderItemId": second_line["id"], "quantity": "2"}])

    assert D(result["sourceInvoice"]["total"]) == D("240.00")
    assert result["sourceInvoice"]["items"][0]["sales_order_item_id"] == second_line["id"]
    remaining = {item["id"]: item for item in result["remainingItems"]}
    assert D(remaining[second_line["id"]]["remainingQuantity"]) == D("1")
    assert D(remaining[order["sourceOrder"]["items"][0]["id"]]["remainingQuantity"]) == D("5")


def test_product_quantity_spills_onto_next_matching_line(create_order, create_invoice, product):
    order = create_order(items=[
        {"productId": product["id"], "quantity": "5", "unitPrice": "100.00"},
        {"productId": product["id"], "quantity": "3", "unitPrice": "120.00"},
    ])
    result = create_invoice(order, items=[
        {"productId": product["id"], "quantity": "5"},
        {"productId": product["id"], "quantity": "2"},
    ])
    assert D(result["sourceInvoice"]["total"]) == D("740.00")
    assert D(result["targetBill"]["total"]) == D("740.00")
    assert result["remainingItems"][0]["fullyInvoiced"] is True
    assert result["remainingItems"][1]["fullyInvoiced"] is False


def test_unknown_order_line_is_not_found(create_order, create_invoice):
    order = create_order()
    create_invoice(order, items=[{"salesOrderItemId": 9999, "quantity": "1"}], expected_status=404)


def test_partial_invoice_moves_order_statuses(client, create_order, create_invoice, product):
    order = create_order(quantity="10", unit_price="100.00")
    create_invoice(order, items=[{"productId": product["id"], "quantity": "4"}])

    sales_order = client.get(f"/api/sales-orders/{order['sourceOrder']['id']}").json()
    assert sales_order["status"] == "Partially Invoiced"
    line = sales_order["items"][0]
    assert line["fulfillment_status"] == "Partially Fulfilled"
    assert D(line["invoiced_quantity"]) == D("4")
    assert D(line["remaining_quantity"]) == D("6")

    purchase_order = client.get(f"/api/purchase-orders/{order['targetOrder']['id']}").json()
    assert purchase_order["status"] == "Partially Billed"
    assert D(purchase_order["items"][0]["billed_quantity"]) == D("4")


def test_bill_lines_point_at_invoice_lines(create_order, create_invoice):
    order = create_order(quantity="3", unit_price="10.00")
    result = create_invoice(order)
    invoice_item = result["sourceInvoice"]["items"][0]
    bill_item = result["targetBill"]["items"][0]
    assert bill_item["invoice_item_id"] == invoice_item["id"]
    assert D(bill_item["amount"]) == D(invoice_item["amount"]) == D("30.00")
    assert result["sourceInvoice"]["due_date"] == "2026-02-09"


def test_partial_invoice_quantity_below_precision_is_rejected(client, create_order, create_invoice, product):
    order = create_order(quantity="10", unit_price="100.00")

    create_invoice(order, items=[{"productId": product["id"], "quantity": "0.0004"}], expected_status=422)
    create_invoice(order, items=[{"productId": product["id"], "quantity": "1", "unitPrice": "0.004"}], expected_status=422)

    sales_order = client.get(f"/api/sales-orders/{order['sourceOrder']['id']}").json()
    assert D(sales_order["items"][0]["invoiced_quantity"]) == D("0")
    assert sales_order["items"][0]["fulfillment_status"] == "Open"
