from pharmaflow.core.navigation import PAGE_REGISTRY
from pharmaflow.models.shift import Shift
from tests.conftest import auth_headers


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_login_sets_cookie_and_returns_token(client, make_employee):
    make_employee("cashier", username="nour", password="s3cret-pass")
    response = client.post("/auth/login", json={"username": "nour", "password": "s3cret-pass"})
    assert response.status_code == 200
    assert response.json()["access_token"]
    assert "pharmaflow_token" in response.cookies

    me = client.get("/auth/me")
    assert me.json()["username"] == "nour"


def test_login_failure_is_generic(client, make_employee):
    make_employee("cashier", username="nour", password="s3cret-pass")
    wrong_password = client.post("/auth/login", json={"username": "nour", "password": "nope-nope"})
    unknown_user = client.post("/auth/login", json={"username": "ghost", "password": "nope-nope"})
    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()


def test_inactive_employee_cannot_log_in(client, db, make_employee):
    employee = make_employee("cashier", username="nour", password="s3cret-pass")
    employee.status = "inactive"
    db.commit()
    response = client.post("/auth/login", json={"username": "nour", "password": "s3cret-pass"})
    assert response.status_code == 401


def test_requests_without_token_are_rejected(client):
    assert client.get("/inventory").status_code == 401


def test_navigation_by_role(client, make_employee):
    cashier = make_employee("cashier")
    admin = make_employee("admin")

    cashier_nav = client.get("/auth/navigation", headers=auth_headers(cashier)).json()
    admin_nav = client.get("/auth/navigation", headers=auth_headers(admin)).json()

    cashier_pages = {p["key"] for p in cashier_nav["pages"]}
    assert {"dashboard", "pos", "inventory", "assistant"} <= cashier_pages
    assert "pending-approval" not in cashier_pages
    assert "employees" not in cashier_pages
    assert len(admin_nav["pages"]) == len(PAGE_REGISTRY)


def test_officeboy_sees_only_open_pages(client, make_employee):
    officeboy = make_employee("officeboy")
    nav = client.get("/auth/navigation", headers=auth_headers(officeboy)).json()
    assert nav["permissions"] == []
    assert {p["key"] for p in nav["pages"]} == {"dashboard", "assistant"}


def test_permission_denied(client, make_employee, make_drug):
    cashier = make_employee("cashier")
    drug = make_drug()
    response = client.post(f"/inventory/{drug.id}/restock", json={"packs": 2}, headers=auth_headers(cashier))
    assert response.status_code == 403
    assert client.get("/reports/summary", headers=auth_headers(cashier)).status_code == 403


def test_inventory_crud(client, make_employee):
    pharmacist = make_employee("pharmacist")
    headers = auth_headers(pharmacist)

    created = client.post("/inventory", json={
        "name": "Brufen 400mg", "price": 58, "cost_price": 46.5, "stock": 50, "units_per_pack": 20,
    }, headers=headers)
    assert created.status_code == 201
    drug = created.json()
    assert drug["internal_code"] == "000001"
    assert drug["stock_display"] == "2.5 Packs"

    restocked = client.post(f"/inventory/{drug['id']}/restock", json={"packs": 2}, headers=headers)
    assert restocked.json()["stock"] == 90

    bad = client.post("/inventory", json={"name": "X", "price": 1}, headers=headers)
    assert bad.status_code == 400

    movements = client.get(f"/inventory/{drug['id']}/movements", headers=headers).json()
    assert [m["movement_type"] for m in movements] == ["restock"]


def test_checkout_flow(client, make_employee, make_drug):
    cashier = make_employee("cashier")
    drug = make_drug(stock=48, units_per_pack=24, price=48)
    cart = [{"drug_id": drug.id, "quantity": 1, "price": 48, "is_unit": False}]

    check = client.post("/sales/check-stock", json={"items": cart}, headers=auth_headers(cashier))
    assert check.json() == {"available": True, "problems": []}

    response = client.post("/sales", json={"items": cart, "total": 48}, headers=auth_headers(cashier))
    assert response.status_code == 201
    sale = response.json()
    assert sale["id"] == "100001"
    assert sale["sold_by_employee_id"] == cashier.id

    stock = client.get(f"/inventory/{drug.id}", headers=auth_headers(cashier)).json()["stock"]
    assert stock == 24


def test_back_dated_checkout_returns_400(client, make_employee, make_drug):
    cashier = make_employee("cashier")
    drug = make_drug(stock=100)
    cart = [{"drug_id": drug.id, "quantity": 1, "price": 48}]
    first = client.post("/sales", json={"items": cart, "total": 48, "date": "2026-03-01T12:00:00"},
                        headers=auth_headers(cashier))
    assert first.status_code == 201
    second = client.post("/sales", json={"items": cart, "total": 48, "date": "2026-03-01T11:00:00"},
                         headers=auth_headers(cashier))
    assert second.status_code == 400
    assert "before the last transaction" in second.json()["detail"]


def test_cancel_needs_cancel_permission(client, make_employee, make_drug):
    cashier = make_employee("cashier")
    senior = make_employee("senior_cashier")
    drug = make_drug(stock=100)
    sale = client.post("/sales", json={"items": [{"drug_id": drug.id, "quantity": 1, "price": 48}], "total": 48},
                       headers=auth_headers(cashier)).json()

    denied = client.patch(f"/sales/{sale['id']}", json={"status": "cancelled"}, headers=auth_headers(cashier))
    assert denied.status_code == 403
    allowed = client.patch(f"/sales/{sale['id']}", json={"status": "cancelled"}, headers=auth_headers(senior))
    assert allowed.status_code == 200
    assert allowed.json()["status"] == "cancelled"


def test_return_and_receipt_endpoints(client, make_employee, make_drug):
    senior = make_employee("senior_cashier")
    headers = auth_headers(senior)
    drug = make_drug(stock=100, units_per_pack=10, price=50)
    sale = client.post("/sales", json={"items": [{"drug_id": drug.id, "quantity": 2, "price": 50}], "total": 100},
                       headers=headers).json()

    returned = client.post("/returns", json={
        "sale_id": sale["id"],
        "items": [{"drug_id": drug.id, "quantity_returned": 1, "refund_amount": 50}],
    }, headers=headers)
    assert returned.status_code == 201
    assert client.get(f"/sales/{sale['id']}", headers=headers).json()["net_total"] == 50

    missing = client.post("/returns", json={"sale_id": "1", "items": []}, headers=headers)
    assert missing.status_code == 404

    pdf = client.get(f"/sales/{sale['id']}/receipt.pdf", headers=headers)
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")


def test_purchase_approval_flow(client, make_employee, make_drug):
    pharmacist = make_employee("pharmacist")
    manager = make_employee("manager")
    drug = make_drug(stock=0, units_per_pack=20)
    supplier = client.post("/suppliers", json={"name": "Ibnsina Pharma"}, headers=auth_headers(manager)).json()

    body = {"supplier_id": supplier["id"], "items": [{"drug_id": drug.id, "quantity": 10, "cost_price": 35}]}
    created = client.post("/purchases", json=body, headers=auth_headers(pharmacist))
    assert created.status_code == 201
    purchase = created.json()

    # pharmacists cannot approve, nor skip approval
    assert client.post(f"/purchases/{purchase['id']}/approve", headers=auth_headers(pharmacist)).status_code == 403
    completed = client.post("/purchases", json={**body, "status": "completed"}, headers=auth_headers(pharmacist))
    assert completed.status_code == 403

    approved = client.post(f"/purchases/{purchase['id']}/approve", headers=auth_headers(manager))
    assert approved.status_code == 200
    assert approved.json()["approved_by"] == manager.name
    assert client.get(f"/inventory/{drug.id}", headers=auth_headers(manager)).json()["stock"] == 200

    again = client.post(f"/purchases/{purchase['id']}/approve", headers=auth_headers(manager))
    assert again.status_code == 400


def test_shift_endpoints(client, make_employee, db):
    senior = make_employee("senior_cashier")
    headers = auth_headers(senior)

    assert client.get("/shifts/current", headers=headers).json() is None
    opened = client.post("/shifts/open", json={"opening_balance": 500}, headers=headers)
    assert opened.status_code == 201
    assert client.post("/shifts/open", json={"opening_balance": 10}, headers=headers).status_code == 400

    cash = client.post("/shifts/cash", json={"type": "out", "amount": 40, "reason": "Courier"}, headers=headers)
    assert cash.status_code == 201
    assert client.get("/shifts/current/expected", headers=headers).json()["expected_balance"] == 460

    closed = client.post("/shifts/close", json={"closing_balance": 460}, headers=headers).json()
    assert closed["status"] == "closed"
    assert closed["difference"] == 0
    assert db.query(Shift).count() == 1


def test_customer_endpoints(client, make_employee):
    cashier = make_employee("cashier")
    headers = auth_headers(cashier)
    created = client.post("/customers", json={"name": "Mona Adel", "phone": "01001234567"}, headers=headers)
    assert created.status_code == 201
    assert created.json()["code"] == "00001"

    duplicate = client.post("/customers", json={"name": "Other", "code": "00001"}, headers=headers)
    assert duplicate.status_code == 409

    found = client.get("/customers/lookup/1", headers=headers)
    assert found.json()["name"] == "Mona Adel"
    assert found.json()["total_purchases"] == 0


def test_employee_management(client, make_employee):
    admin = make_employee("admin")
    manager = make_employee("manager")

    body = {"name": "New Cashier", "username": "New.Cashier", "password": "long-enough-1", "role": "cashier"}
    assert client.post("/employees", json=body, headers=auth_headers(manager)).status_code == 403
    created = client.post("/employees", json=body, headers=auth_headers(admin))
    assert created.status_code == 201
    assert created.json()["username"] == "new.cashier"

    short = client.post("/employees", json={**body, "username": "x", "password": "short"}, headers=auth_headers(admin))
    assert short.status_code == 422
    bad_role = client.post("/employees", json={**body, "username": "y", "role": "owner"}, headers=auth_headers(admin))
    assert bad_role.status_code == 422

    login = client.post("/auth/login", json={"username": "new.cashier", "password": "long-enough-1"})
    assert login.status_code == 200


def test_delete_restocked_drug(client, make_employee, make_drug):
    headers = auth_headers(make_employee("manager"))
    drug = make_drug(stock=20, units_per_pack=10)
    client.post(f"/inventory/{drug.id}/restock", json={"packs": 1}, headers=headers)

    deleted = client.delete(f"/inventory/{drug.id}", headers=headers)
    assert deleted.status_code == 200
    assert client.get(f"/inventory/{drug.id}", headers=headers).status_code == 404
