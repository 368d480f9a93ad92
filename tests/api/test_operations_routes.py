"""
API tests for branch, guard assignment and inventory management
"""
import pytest


class UniqueViolation(Exception):
    code = "23505"


# ============================================================================
# BRANCHES
# ============================================================================

BRANCH_FORM = {"name": "Islamabad", "city": "Islamabad", "address": "Blue Area, Jinnah Avenue", "phone": "04235761234"}


def test_branch_routes_are_super_admin_only(branch_admin_client, fake_db):
    response = branch_admin_client.post("/api/dashboard/branches", json=BRANCH_FORM)

    assert response.status_code == 403
    assert response.json() == {"error": "Unauthorized"}
    assert len(fake_db.tables["branches"]) == 2


def test_create_branch(super_admin_client, fake_db):
    response = super_admin_client.post("/api/dashboard/branches", json=BRANCH_FORM)

    assert response.status_code == 200
    created = fake_db.tables["branches"][-1]
    assert created["id"] == response.json()["id"]
    assert created["city"] == "Islamabad"


def test_create_branch_rejects_bad_phone(super_admin_client):
    response = super_admin_client.post("/api/dashboard/branches", json={**BRANCH_FORM, "phone": "12345"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid phone number format"}


def test_update_branch(super_admin_client, fake_db):
    response = super_admin_client.put("/api/dashboard/branches/branch-khi", json={**BRANCH_FORM, "name": "Karachi South"})

    assert response.status_code == 200
    assert fake_db.tables["branches"][1]["name"] == "Karachi South"


def test_branch_with_places_cannot_be_deleted(super_admin_client, fake_db):
    fake_db.tables["places"] = [{"id": "place-1", "branch_id": "branch-khi"}]

    response = super_admin_client.delete("/api/dashboard/branches/branch-khi")

    assert response.status_code == 400
    assert response.json() == {"error": "Cannot delete branch with existing places or guards"}


def test_delete_empty_branch(super_admin_client, fake_db):
    fake_db.tables["guards"] = [{"id": "guard-1", "branch_id": "branch-lhr"}]

    response = super_admin_client.delete("/api/dashboard/branches/branch-khi")

    assert response.status_code == 200
    assert [row["id"] for row in fake_db.tables["branches"]] == ["branch-lhr"]


# ============================================================================
# GUARD ASSIGNMENTS
# ============================================================================

ASSIGNMENT_FORM = {
    "guard_id": "guard-1",
    "place_id": "place-1",
    "start_date": "2026-03-01",
    "end_date": "",
    "shift_type": "night",
}


@pytest.fixture
def staff(fake_db):
    fake_db.tables["guards"] = [{"id": "guard-1", "name": "Aslam Khan", "branch_id": "branch-khi"}]
    fake_db.tables["assignments"] = [
        {"id": "asg-1", "guard_id": "guard-1", "place_id": "place-1", "status": "active", "start_date": "2026-01-01"},
    ]
    fake_db.tables["attendance"] = []


def test_create_assignment(branch_admin_client, fake_db, staff):
    response = branch_admin_client.post("/api/dashboard/assignments", json=ASSIGNMENT_FORM)

    assert response.status_code == 200
    created = fake_db.tables["assignments"][-1]
    assert created["id"] == response.json()["id"]
    assert created["branch_id"] == "branch-lhr"
    assert created["status"] == "active"
    assert created["end_date"] is None
    assert created["shift_type"] == "night"

    assert fake_db.rpc_calls == [("check_assignment_overlap", {
        "p_guard_id": "guard-1",
        "p_start_date": "2026-03-01",
        "p_end_date": None,
        "p_exclude_id": None,
    })]


def test_super_admin_assignment_uses_guard_branch(super_admin_client, fake_db, staff):
    response = super_admin_client.post("/api/dashboard/assignments", json=ASSIGNMENT_FORM)

    assert response.status_code == 200
    assert fake_db.tables["assignments"][-1]["branch_id"] == "branch-khi"


def test_overlapping_assignment_is_rejected(branch_admin_client, fake_db, staff):
    fake_db.rpc_results["check_assignment_overlap"] = True

    response = branch_admin_client.post("/api/dashboard/assignments", json=ASSIGNMENT_FORM)

    assert response.status_code == 409
    assert response.json() == {"error": "This assignment overlaps with an existing assignment for this guard"}
    assert len(fake_db.tables["assignments"]) == 1


def test_failed_overlap_check_does_not_block(branch_admin_client, fake_db, staff):
    fake_db.fail("rpc", RuntimeError("function missing"), "check_assignment_overlap")

    response = branch_admin_client.post("/api/dashboard/assignments", json=ASSIGNMENT_FORM)

    assert response.status_code == 200
    assert len(fake_db.tables["assignments"]) == 2


def test_assignment_end_before_start(branch_admin_client, staff):
    response = branch_admin_client.post(
        "/api/dashboard/assignments",
        json={**ASSIGNMENT_FORM, "end_date": "2026-02-01"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "End date must be after start date"}


def test_update_assignment_excludes_itself_from_overlap(branch_admin_client, fake_db, staff):
    response = branch_admin_client.put(
        "/api/dashboard/assignments/asg-1",
        json={**ASSIGNMENT_FORM, "status": "cancelled"},
    )

    assert response.status_code == 200
    assert fake_db.tables["assignments"][0]["status"] == "cancelled"
    assert fake_db.rpc_calls[0][1]["p_exclude_id"] == "asg-1"


def test_update_missing_assignment(branch_admin_client, staff):
    response = branch_admin_client.put("/api/dashboard/assignments/nope", json=ASSIGNMENT_FORM)

    assert response.status_code == 404
    assert response.json() == {"error": "Assignment not found"}


def test_end_assignment(branch_admin_client, fake_db, staff):
    response = branch_admin_client.post("/api/dashboard/assignments/asg-1/end", json={"end_date": "2026-03-31"})

    assert response.status_code == 200
    row = fake_db.tables["assignments"][0]
    assert row["status"] == "completed"
    assert row["end_date"] == "2026-03-31"


def test_end_assignment_requires_date(branch_admin_client, staff):
    response = branch_admin_client.post("/api/dashboard/assignments/asg-1/end", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "End date is required"}


def test_assignment_with_attendance_cannot_be_deleted(branch_admin_client, fake_db, staff):
    fake_db.tables["attendance"] = [{"id": "att-1", "assignment_id": "asg-1"}]

    response = branch_admin_client.delete("/api/dashboard/assignments/asg-1")

    assert response.status_code == 400
    assert "marking it as completed" in response.json()["error"]
    assert len(fake_db.tables["assignments"]) == 1


def test_delete_assignment(branch_admin_client, fake_db, staff):
    response = branch_admin_client.delete("/api/dashboard/assignments/asg-1")

    assert response.status_code == 200
    assert fake_db.tables["assignments"] == []


# ============================================================================
# INVENTORY
# ============================================================================

@pytest.fixture
def stock(fake_db):
    fake_db.tables["inventory_items"] = [
        {"id": "item-radio", "name": "Radio", "branch_id": "branch-khi", "total_quantity": 10},
        {"id": "item-gun", "name": "Shotgun", "branch_id": "branch-khi", "total_quantity": 0},
    ]
    fake_db.tables["inventory_units"] = [
        {"id": "unit-1", "item_id": "item-gun", "serial_number": "SG-001", "branch_id": "branch-khi", "status": "available"},
    ]
    fake_db.tables["inventory_assignments"] = []


def test_branch_admin_unit_is_created_in_own_branch(branch_admin_client, fake_db, stock):
    response = branch_admin_client.post("/api/dashboard/inventory/units", json={
        "item_id": "item-gun", "serial_number": "SG-002", "branch_id": "branch-khi",
    })

    assert response.status_code == 200
    created = fake_db.tables["inventory_units"][-1]
    assert created["branch_id"] == "branch-lhr"
    assert created["status"] == "available"


def test_super_admin_unit_requires_branch(super_admin_client, stock):
    response = super_admin_client.post("/api/dashboard/inventory/units", json={
        "item_id": "item-gun", "serial_number": "SG-002",
    })

    assert response.status_code == 400
    assert response.json() == {"error": "Branch is required"}


def test_duplicate_serial_number(super_admin_client, fake_db, stock):
    fake_db.fail("inventory_units", UniqueViolation("duplicate key"), "insert")

    response = super_admin_client.post("/api/dashboard/inventory/units", json={
        "item_id": "item-gun", "serial_number": "SG-001", "branch_id": "branch-khi",
    })

    assert response.status_code == 409
    assert response.json() == {"error": "Serial number already exists"}


def test_update_unit(super_admin_client, fake_db, stock):
    response = super_admin_client.put("/api/dashboard/inventory/units/unit-1", json={
        "item_id": "item-gun", "serial_number": "SG-001A", "branch_id": "branch-khi", "status": "maintenance",
    })

    assert response.status_code == 200
    unit = fake_db.tables["inventory_units"][0]
    assert unit["serial_number"] == "SG-001A"
    assert unit["status"] == "maintenance"


def test_assign_quantity_item_draws_down_stock(branch_admin_client, fake_db, stock):
    response = branch_admin_client.post("/api/dashboard/inventory/assignments", json={
        "item_id": "item-radio", "guard_id": "guard-1", "quantity": 3, "condition": "good",
    })

    assert response.status_code == 200
    assignment = fake_db.tables["inventory_assignments"][0]
    assert assignment["assigned_to_type"] == "guard"
    assert assignment["quantity"] == 3
    assert assignment["branch_id"] == "branch-lhr"
    assert assignment["unit_id"] is None
    assert fake_db.tables["inventory_items"][0]["total_quantity"] == 7


def test_assign_more_than_in_stock(branch_admin_client, fake_db, stock):
    response = branch_admin_client.post("/api/dashboard/inventory/assignments", json={
        "item_id": "item-radio", "place_id": "place-1", "quantity": 11,
    })

    assert response.status_code == 400
    assert response.json() == {"error": "Not enough quantity available"}
    assert fake_db.tables["inventory_items"][0]["total_quantity"] == 10


@pytest.mark.parametrize("body,error", [
    ({"guard_id": "guard-1"}, "Either item or unit must be selected"),
    ({"item_id": "item-radio"}, "Either place or guard must be selected"),
])
def test_assign_requires_item_and_target(branch_admin_client, stock, body, error):
    response = branch_admin_client.post("/api/dashboard/inventory/assignments", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": error}


def test_unit_assignment_and_return(super_admin_client, fake_db, stock):
    response = super_admin_client.post("/api/dashboard/inventory/assignments", json={
        "unit_id": "unit-1", "place_id": "place-1", "quantity": 5,
    })

    assert response.status_code == 200
    assignment = fake_db.tables["inventory_assignments"][0]
    assert assignment["item_id"] == "item-gun"
    assert assignment["quantity"] == 1
    assert assignment["assigned_to_type"] == "place"
    assert assignment["branch_id"] == "branch-khi"
    assert fake_db.tables["inventory_units"][0]["status"] == "assigned"

    again = super_admin_client.post("/api/dashboard/inventory/assignments", json={
        "unit_id": "unit-1", "guard_id": "guard-1",
    })
    assert again.status_code == 400
    assert again.json() == {"error": "This unit is already assigned. Return it first."}

    blocked = super_admin_client.delete("/api/dashboard/inventory/units/unit-1")
    assert blocked.status_code == 400
    assert blocked.json() == {"error": "Cannot delete unit that is currently assigned. Return it first."}

    returned = super_admin_client.post(f"/api/dashboard/inventory/assignments/{assignment['id']}/return")
    assert returned.status_code == 200
    assert fake_db.tables["inventory_assignments"][0]["returned_at"] is not None
    assert fake_db.tables["inventory_units"][0]["status"] == "available"

    twice = super_admin_client.post(f"/api/dashboard/inventory/assignments/{assignment['id']}/return")
    assert twice.status_code == 400
    assert twice.json() == {"error": "Already returned"}

    deleted = super_admin_client.delete("/api/dashboard/inventory/units/unit-1")
    assert deleted.status_code == 200
    assert fake_db.tables["inventory_units"] == []


def test_returning_quantity_restores_stock(branch_admin_client, fake_db, stock):
    fake_db.tables["inventory_assignments"] = [
        {"id": "ia-1", "item_id": "item-radio", "unit_id": None, "quantity": 4, "returned_at": None},
    ]

    response = branch_admin_client.post("/api/dashboard/inventory/assignments/ia-1/return")

    assert response.status_code == 200
    assert fake_db.tables["inventory_items"][0]["total_quantity"] == 14
