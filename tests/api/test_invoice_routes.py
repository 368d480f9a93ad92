"""
API tests for invoice numbering and management
"""
from datetime import date

import pytest

from app.api.routes.invoices import next_invoice_number


@pytest.fixture
def places(fake_db):
    fake_db.tables["places"] = [
        {"id": "place-mall", "name": "Emporium Mall", "branch_id": "branch-khi"},
        {"id": "place-orphan", "name": "Unassigned Site", "branch_id": None},
    ]


def invoice_body(**overrides):
    body = {
        "place_id": "place-mall",
        "invoice_number": "INV-202603-0001",
        "invoice_date": "2026-03-01",
        "due_date": "",
        "subtotal": 50000,
        "tax_rate": 16,
        "tax_amount": 8000,
        "total": 58000,
        "line_items": [
            {"description": "Day shift guards", "quantity": 2, "unit_price": 15000, "amount": 30000},
            {"description": "Night shift guard", "quantity": 1, "unit_price": 20000, "amount": 20000},
        ],
    }
    body.update(overrides)
    return body


# ============================================================================
# NUMBERING
# ============================================================================

def test_next_number_continues_this_months_sequence(fake_db):
    fake_db.tables["invoices"] = [
        {"id": "i1", "invoice_number": "INV-202603-0002"},
        {"id": "i2", "invoice_number": "INV-202603-0007"},
        {"id": "i3", "invoice_number": "INV-202602-0099"},
    ]

    assert next_invoice_number(fake_db, today=date(2026, 3, 15)) == "INV-202603-0008"


def test_next_number_restarts_each_month(fake_db):
    fake_db.tables["invoices"] = [{"id": "i1", "invoice_number": "INV-202602-0099"}]

    assert next_invoice_number(fake_db, today=date(2026, 3, 1)) == "INV-202603-0001"


def test_next_number_route(branch_admin_client):
    response = branch_admin_client.get("/api/dashboard/invoices/next-number")

    assert response.status_code == 200
    assert response.json() == {"invoice_number": f"INV-{date.today():%Y%m}-0001"}


def test_invoice_routes_require_session(client):
    response = client.post("/api/dashboard/invoices", json=invoice_body())

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


# ============================================================================
# CREATE
# ============================================================================

def test_create_invoice_under_admins_branch(branch_admin_client, fake_db, places):
    response = branch_admin_client.post("/api/dashboard/invoices", json=invoice_body())

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["invoice_number"] == "INV-202603-0001"

    invoice = fake_db.tables["invoices"][0]
    assert invoice["id"] == body["id"]
    assert invoice["branch_id"] == "branch-lhr"
    assert invoice["created_by"] == "user-admin"
    assert invoice["status"] == "draft"
    assert invoice["invoice_date"] == "2026-03-01"
    assert invoice["due_date"] is None

    items = fake_db.tables["invoice_line_items"]
    assert [item["description"] for item in items] == ["Day shift guards", "Night shift guard"]
    assert [item["sort_order"] for item in items] == [0, 1]
    assert all(item["invoice_id"] == body["id"] for item in items)


def test_super_admin_invoice_uses_place_branch(super_admin_client, fake_db, places):
    response = super_admin_client.post("/api/dashboard/invoices", json=invoice_body())

    assert response.status_code == 200
    assert fake_db.tables["invoices"][0]["branch_id"] == "branch-khi"


def test_super_admin_invoice_without_branch(super_admin_client, fake_db, places):
    response = super_admin_client.post("/api/dashboard/invoices", json=invoice_body(place_id="place-orphan"))

    assert response.status_code == 400
    assert response.json() == {"error": "Could not determine branch"}


def test_create_invoice_duplicate_number(branch_admin_client, fake_db, places):
    fake_db.tables["invoices"] = [{"id": "existing", "invoice_number": "INV-202603-0001"}]

    response = branch_admin_client.post("/api/dashboard/invoices", json=invoice_body())

    assert response.status_code == 409
    assert response.json() == {"error": "Invoice number already exists"}


@pytest.mark.parametrize("overrides,field", [
    ({"invoice_number": ""}, "invoice_number"),
    ({"tax_rate": 150}, "tax_rate"),
    ({"status": "void"}, "status"),
    ({"line_items": [{"description": "Guard", "quantity": 0, "unit_price": 100}]}, "quantity"),
])
def test_create_invoice_validation(branch_admin_client, places, overrides, field):
    response = branch_admin_client.post("/api/dashboard/invoices", json=invoice_body(**overrides))

    assert response.status_code == 400
    assert field in response.json()["error"]


def test_create_invoice_line_item_failure(branch_admin_client, fake_db, places):
    fake_db.fail("invoice_line_items", RuntimeError("insert failed"), "insert")

    response = branch_admin_client.post("/api/dashboard/invoices", json=invoice_body())

    assert response.status_code == 500
    assert response.json() == {"error": "Invoice created but failed to add line items"}
    assert len(fake_db.tables["invoices"]) == 1


# ============================================================================
# UPDATE / STATUS / DELETE
# ============================================================================

@pytest.fixture
def invoice(fake_db):
    fake_db.tables["invoices"] = [
        {"id": "inv-1", "invoice_number": "INV-202603-0001", "status": "draft", "branch_id": "branch-lhr"},
        {"id": "inv-2", "invoice_number": "INV-202603-0002", "status": "paid", "branch_id": "branch-lhr"},
    ]
    fake_db.tables["invoice_line_items"] = [
        {"id": "li-1", "invoice_id": "inv-1", "description": "Old line", "sort_order": 0},
        {"id": "li-2", "invoice_id": "inv-2", "description": "Paid line", "sort_order": 0},
    ]


def test_update_invoice_replaces_line_items(branch_admin_client, fake_db, places, invoice):
    body = invoice_body(total=30000, line_items=[
        {"description": "Revised guards", "quantity": 2, "unit_price": 15000, "amount": 30000},
    ])

    response = branch_admin_client.put("/api/dashboard/invoices/inv-1", json=body)

    assert response.status_code == 200
    updated = fake_db.tables["invoices"][0]
    assert updated["total"] == 30000
    assert updated["updated_at"] is not None

    items = {item["description"]: item["invoice_id"] for item in fake_db.tables["invoice_line_items"]}
    assert items == {"Paid line": "inv-2", "Revised guards": "inv-1"}


def test_update_invoice_number_taken_by_another(branch_admin_client, places, invoice):
    response = branch_admin_client.put(
        "/api/dashboard/invoices/inv-1",
        json=invoice_body(invoice_number="INV-202603-0002"),
    )

    assert response.status_code == 409
    assert response.json() == {"error": "Invoice number already exists"}


def test_update_invoice_status(branch_admin_client, fake_db, invoice):
    response = branch_admin_client.patch("/api/dashboard/invoices/inv-1/status", json={"status": "sent"})

    assert response.status_code == 200
    assert fake_db.tables["invoices"][0]["status"] == "sent"


def test_update_invoice_status_rejects_unknown(branch_admin_client, fake_db, invoice):
    response = branch_admin_client.patch("/api/dashboard/invoices/inv-1/status", json={"status": "void"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid status"}
    assert fake_db.tables["invoices"][0]["status"] == "draft"


def test_delete_invoice_removes_line_items(branch_admin_client, fake_db, invoice):
    response = branch_admin_client.delete("/api/dashboard/invoices/inv-1")

    assert response.status_code == 200
    assert [row["id"] for row in fake_db.tables["invoices"]] == ["inv-2"]
    assert [row["id"] for row in fake_db.tables["invoice_line_items"]] == ["li-2"]


def test_paid_invoice_cannot_be_deleted(branch_admin_client, fake_db, invoice):
    response = branch_admin_client.delete("/api/dashboard/invoices/inv-2")

    assert response.status_code == 400
    assert response.json() == {"error": "Cannot delete a paid invoice"}
    assert len(fake_db.tables["invoices"]) == 2


def test_delete_missing_invoice(branch_admin_client, invoice):
    response = branch_admin_client.delete("/api/dashboard/invoices/nope")

    assert response.status_code == 404
    assert response.json() == {"error": "Invoice not found"}
