"""
API tests for attendance marking
"""
import pytest


GUARD = {"id": "guard-1", "name": "Aslam Khan", "guard_code": "G-001", "photo_url": None}


@pytest.fixture
def roster(fake_db):
    """Assignments at the mall: day, both shifts, night, ended, and another place"""
    base = {"place_id": "place-mall", "branch_id": "branch-lhr", "status": "active", "end_date": None}
    fake_db.tables["places"] = [{"id": "place-mall", "name": "Emporium Mall", "branch_id": "branch-lhr"}]
    fake_db.tables["assignments"] = [
        {**base, "id": "a-day", "guard_id": "guard-1", "guard": dict(GUARD), "shift_type": "day", "start_date": "2026-01-01"},
        {**base, "id": "a-both", "guard_id": "guard-2", "shift_type": "both", "start_date": "2026-03-01"},
        {**base, "id": "a-night", "guard_id": "guard-3", "shift_type": "night", "start_date": "2026-01-01"},
        {**base, "id": "a-ended", "guard_id": "guard-4", "shift_type": "day", "start_date": "2026-01-01", "end_date": "2026-02-01"},
        {**base, "id": "a-future", "guard_id": "guard-5", "shift_type": "day", "start_date": "2026-04-01"},
        {**base, "id": "a-elsewhere", "guard_id": "guard-6", "place_id": "place-bank", "shift_type": "day", "start_date": "2026-01-01"},
    ]
    fake_db.tables["attendance"] = [
        {"id": "att-1", "assignment_id": "a-day", "date": "2026-03-10", "shift": "day", "status": "late", "notes": None},
        {"id": "att-2", "assignment_id": "a-day", "date": "2026-03-09", "shift": "day", "status": "present", "notes": None},
    ]


# ============================================================================
# ASSIGNMENTS FOR A SHEET
# ============================================================================

def test_assignments_for_day_shift(branch_admin_client, roster):
    response = branch_admin_client.get(
        "/api/dashboard/attendance/assignments",
        params={"place_id": "place-mall", "date": "2026-03-10", "shift": "day"},
    )

    assert response.status_code == 200
    assignments = {row["id"]: row for row in response.json()["assignments"]}
    assert set(assignments) == {"a-day", "a-both"}
    assert assignments["a-day"]["guard"]["name"] == "Aslam Khan"
    assert assignments["a-day"]["attendance"]["status"] == "late"
    assert assignments["a-both"]["attendance"] is None


def test_assignments_for_night_shift(branch_admin_client, roster):
    response = branch_admin_client.get(
        "/api/dashboard/attendance/assignments",
        params={"place_id": "place-mall", "date": "2026-03-10", "shift": "night"},
    )

    ids = {row["id"] for row in response.json()["assignments"]}
    assert ids == {"a-both", "a-night"}


def test_assignments_rejects_unknown_shift(branch_admin_client, roster):
    response = branch_admin_client.get(
        "/api/dashboard/attendance/assignments",
        params={"place_id": "place-mall", "date": "2026-03-10", "shift": "evening"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid shift"}


def test_assignments_requires_place(branch_admin_client, roster):
    response = branch_admin_client.get(
        "/api/dashboard/attendance/assignments",
        params={"date": "2026-03-10", "shift": "day"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request"}


# ============================================================================
# MARK
# ============================================================================

def test_mark_attendance_inserts_record(branch_admin_client, fake_db, roster):
    response = branch_admin_client.post("/api/dashboard/attendance", json={
        "assignment_id": "a-both",
        "date": "2026-03-10",
        "shift": "night",
        "status": "present",
        "check_in_time": "20:05",
        "check_out_time": "",
    })

    assert response.status_code == 200
    record = fake_db.tables["attendance"][-1]
    assert record["assignment_id"] == "a-both"
    assert record["guard_id"] == "guard-2"
    assert record["place_id"] == "place-mall"
    assert record["branch_id"] == "branch-lhr"
    assert record["date"] == "2026-03-10"
    assert record["shift"] == "night"
    assert record["check_in_time"] == "20:05"
    assert record["check_out_time"] is None
    assert record["marked_by"] == "user-admin"


def test_mark_attendance_updates_existing_record(branch_admin_client, fake_db, roster):
    response = branch_admin_client.post("/api/dashboard/attendance", json={
        "assignment_id": "a-day",
        "date": "2026-03-10",
        "shift": "day",
        "status": "half_day",
        "half_day_hours": 4,
    })

    assert response.status_code == 200
    records = [row for row in fake_db.tables["attendance"] if row["date"] == "2026-03-10"]
    assert len(records) == 1
    assert records[0]["id"] == "att-1"
    assert records[0]["status"] == "half_day"
    assert records[0]["half_day_hours"] == 4
    assert records[0]["updated_at"] is not None


def test_half_day_requires_hours(branch_admin_client, roster):
    response = branch_admin_client.post("/api/dashboard/attendance", json={
        "assignment_id": "a-day", "date": "2026-03-10", "shift": "day", "status": "half_day",
    })

    assert response.status_code == 400
    assert response.json() == {"error": "Half day hours required when status is half_day"}


def test_mark_attendance_unknown_assignment(branch_admin_client, roster):
    response = branch_admin_client.post("/api/dashboard/attendance", json={
        "assignment_id": "missing", "date": "2026-03-10", "shift": "day", "status": "present",
    })

    assert response.status_code == 404
    assert response.json() == {"error": "Assignment not found"}


def test_mark_attendance_backend_failure(branch_admin_client, fake_db, roster):
    fake_db.fail("attendance", RuntimeError("insert failed"), "insert")

    response = branch_admin_client.post("/api/dashboard/attendance", json={
        "assignment_id": "a-both", "date": "2026-03-10", "shift": "day", "status": "absent",
    })

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to mark attendance"}


# ============================================================================
# BULK
# ============================================================================

def test_bulk_attendance_marks_every_entry(branch_admin_client, fake_db, roster):
    response = branch_admin_client.post("/api/dashboard/attendance/bulk", json={
        "date": "2026-03-10",
        "shift": "day",
        "place_id": "place-mall",
        "attendance": [
            {"assignment_id": "a-day", "status": "present"},
            {"assignment_id": "a-both", "status": "absent", "notes": "Sick"},
        ],
    })

    assert response.status_code == 200
    assert response.json() == {"success": True, "count": 2}

    on_date = {row["assignment_id"]: row for row in fake_db.tables["attendance"] if row["date"] == "2026-03-10"}
    assert on_date["a-day"]["id"] == "att-1"
    assert on_date["a-day"]["status"] == "present"
    assert on_date["a-both"]["status"] == "absent"
    assert on_date["a-both"]["notes"] == "Sick"
    assert on_date["a-both"]["branch_id"] == "branch-lhr"


def test_bulk_attendance_counts_failures(branch_admin_client, fake_db, roster):
    response = branch_admin_client.post("/api/dashboard/attendance/bulk", json={
        "date": "2026-03-11",
        "shift": "day",
        "place_id": "place-mall",
        "attendance": [
            {"assignment_id": "a-day", "status": "present"},
            {"assignment_id": "missing", "status": "present"},
        ],
    })

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to mark 1 attendance records"}
    assert [row["assignment_id"] for row in fake_db.tables["attendance"] if row["date"] == "2026-03-11"] == ["a-day"]


def test_bulk_attendance_unknown_place(branch_admin_client, roster):
    response = branch_admin_client.post("/api/dashboard/attendance/bulk", json={
        "date": "2026-03-10", "shift": "day", "place_id": "nowhere", "attendance": [],
    })

    assert response.status_code == 404
    assert response.json() == {"error": "Place not found"}


def test_delete_attendance(branch_admin_client, fake_db, roster):
    response = branch_admin_client.delete("/api/dashboard/attendance/att-2")

    assert response.status_code == 200
    assert [row["id"] for row in fake_db.tables["attendance"]] == ["att-1"]
