"""
Test configuration and fixtures.

Every test gets a fresh in-memory SQLite schema and a TestClient whose
requests share the test's session, so assertions can read what a request
committed.
"""
import os
import tempfile

# Must be set before the application modules are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"
os.environ["ENABLE_SCHEDULER"] = "false"
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "intercompany-test-logs"))

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine, get_db
from main import app

TENANT_ID = "tenant-a"
OTHER_TENANT_ID = "tenant-b"


# ======================
# Database / client
# ======================

@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, headers={"X-Tenant-ID": TENANT_ID, "X-User": "pytest"}) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ======================
# Master data
# ======================

@pytest.fixture
def company_factory(client):
    def _create(code, name=None, company_type="manufacturer", tenant_id=TENANT_ID):
        response = client.post(
            "/api/companies/",
            json={"name": name or f"{code} Ltd", "code": code, "company_type": company_type},
            headers={"X-Tenant-ID": tenant_id},
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _create


@pytest.fixture
def source_company(company_factory):
    return company_factory("MFG", "Northwind Manufacturing")


@pytest.fixture
def target_company(company_factory):
    return company_factory("DIST", "Northwind Distribution", company_type="distributor")


@pytest.fixture
def product(client, source_company):
    response = client.post("/api/products/", json={
        "company_id": source_company["id"],
        "code": "WID-100",
        "name": "Widget",
        "sales_price": "100.00",
        "purchase_price": "60.00",
    })
    assert response.status_code == 201, response.text
    return response.json()


# ======================
# Intercompany flow helpers
# ======================

@pytest.fixture
def create_order(client, source_company, target_company, product):
    """Order `quantity` widgets at `unit_price` from the source company for the target company."""
    def _create(quantity="10", unit_price="100.00", items=None, headers=None):
        payload = {
            "sourceCompanyId": source_company["id"],
            "targetCompanyId": target_company["id"],
            "date": "2026-01-05",
            "description": "Widgets for the eastern warehouse",
            "items": items or [{"productId": product["id"], "quantity": quantity, "unitPrice": unit_price}],
        }
        response = client.post("/api/intercompany/sales-purchase", json=payload, headers=headers or {})
        assert response.status_code == 201, response.text
        return response.json()
    return _create


@pytest.fixture
def create_invoice(client, source_company, target_company):
    def _create(order, items=None, invoice_type=None, expected_status=201, headers=None):
        payload = {
            "sourceCompanyId": source_company["id"],
            "targetCompanyId": target_company["id"],
            "salesOrderId": order["sourceOrder"]["id"],
            "invoiceDate": "2026-01-10",
        }
        if items is not None:
            payload["items"] = items
            payload["invoiceType"] = invoice_type or "partial"
        elif invoice_type:
            payload["invoiceType"] = invoice_type
        response = client.post("/api/intercompany/invoice-bill", json=payload, headers=headers or {})
        assert response.status_code == expected_status, response.text
        return response.json()
    return _create


@pytest.fixture
def pay(client, source_company, target_company):
    def _pay(invoice_result, amount, expected_status=201, **extra):
        payload = {
            "sourceCompanyId": source_company["id"],
            "targetCompanyId": target_company["id"],
            "invoiceId": invoice_result["sourceInvoice"]["id"],
            "billId": invoice_result["targetBill"]["id"],
            "amount": amount,
            "paymentDate": "2026-01-20",
        }
        payload.update(extra)
        response = client.post("/api/intercompany/payment", json=payload)
        assert response.status_code == expected_status, response.text
        return response.json()
    return _pay
