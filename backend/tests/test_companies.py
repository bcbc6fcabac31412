from decimal import Decimal

from crud.accounts import DEFAULT_ACCOUNTS
from crud.audit_log import get_audit_logs
from conftest import TENANT_ID


def test_new_company_gets_default_chart_of_accounts(client, source_company):
    accounts = client.get(f"/api/companies/{source_company['id']}/accounts").json()
    assert len(accounts) == len(DEFAULT_ACCOUNTS) == 16
    codes = {account["account_code"] for account in accounts}
    assert {"1000", "1100", "1200", "2000", "4000"} <= codes
    assert all(Decimal(account["balance"]) == 0 for account in accounts)


def test_company_codes_are_unique_per_tenant(client, company_factory):
    company_factory("MFG")
    response = client.post("/api/companies/", json={"name": "Duplicate", "code": "MFG"})
    assert response.status_code == 409

    # The same code is free in another tenant
    company_factory("MFG", tenant_id="tenant-b")


def test_update_company_is_audited(client, db, source_company):
    response = client.patch(f"/api/companies/{source_company['id']}", json={"phone": "+1 555 0100"})
    assert response.status_code == 200
    assert response.json()["phone"] == "+1 555 0100"
    assert response.json()["name"] == source_company["name"]

    logs = get_audit_logs(db, TENANT_ID, "companies", source_company["id"])
    assert [log.action for log in logs] == ["INSERT", "UPDATE"]
    assert client.patch("/api/companies/9999", json={"phone": "x"}).status_code == 404


def test_companies_are_listed_per_tenant(client, source_company, target_company, company_factory):
    company_factory("PLANT", company_type="plant", tenant_id="tenant-b")

    names = [company["name"] for company in client.get("/api/companies/").json()]
    assert names == [source_company["name"], target_company["name"]]
    distributors = client.get("/api/companies/", params={"company_type": "distributor"}).json()
    assert [company["id"] for company in distributors] == [target_company["id"]]
    assert client.get("/api/companies/9999").status_code == 404


def test_products_belong_to_company(client, source_company, product):
    assert client.get(f"/api/products/{product['id']}").json()["code"] == "WID-100"
    response = client.post("/api/products/", json={
        "company_id": 9999, "code": "X", "name": "Ghost", "sales_price": "1.00"
    })
    assert response.status_code == 404
