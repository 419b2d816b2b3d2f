from __future__ import annotations

from madrasa_ledger.core.exceptions import SourceUnavailable

from conftest import ADMIN_PASSWORD, SUBSTITUTE_PASSWORD, TEACHER_PASSWORD


def login(client, login_id, password):
    return client.post("/api/login", json={"login_id": login_id, "password": password})


def as_admin(client):
    assert login(client, "admin", ADMIN_PASSWORD).status_code == 200
    return client


def test_login_and_me(client):
    assert client.get("/api/me").status_code == 401

    res = login(client, "ahmed", TEACHER_PASSWORD)
    assert res.status_code == 200
    assert res.get_json()["user"]["role"] == "TEACHER"
    assert client.get("/api/me").get_json()["user"]["teacher_id"] == "T-1"

    client.post("/api/logout")
    assert client.get("/api/me").status_code == 401


def test_bad_login_is_401(client):
    res = login(client, "ahmed", "wrong")
    assert res.status_code == 401
    assert res.get_json()["ok"] is False


def test_teacher_sees_only_own_students_and_no_fees(client):
    login(client, "ahmed", TEACHER_PASSWORD)
    res = client.get("/api/students")
    ids = [s["student_id"] for s in res.get_json()["students"]]
    assert ids == ["S-1", "S-3"]
    assert res.get_json()["students"][0]["assigned_teacher_ids"] == ["T-1"]

    assert client.get("/api/students/S-2").status_code == 403
    assert client.get("/api/ledger/fees/settlements?month=2025-06").status_code == 403
    assert client.post("/api/ledger/fees", json={}).status_code == 403


def test_teacher_list_never_exposes_password_hash(client):
    as_admin(client)
    teachers = client.get("/api/teachers").get_json()["teachers"]
    assert teachers
    assert all("password_hash" not in t for t in teachers)


def test_fee_payment_flow_and_receipt(client):
    as_admin(client)
    res = client.post(
        "/api/ledger/fees",
        json={"subject_id": "S-1", "period_month": "2025-06", "amount": "2000", "payment_mode": "Cash"},
    )
    assert res.status_code == 200
    txn = res.get_json()["transaction"]
    assert txn["resulting_status"] == "Partial"
    assert txn["amount"] == "2000.00"

    s = client.get("/api/ledger/fees/settlements/S-1?month=2025-06").get_json()["settlement"]
    assert (s["status"], s["balance"], s["balance_label"]) == ("Partial", "3000.00", "3000.00")

    assert client.get(f"/api/receipts/{txn['receipt_no']}").get_json()["transaction"]["subject_id"] == "S-1"
    assert client.get("/api/ledger/fees/suggested/S-1?month=2025-06").get_json()["amount"] == "3000.00"


def test_month_and_range_together_is_400(client):
    as_admin(client)
    res = client.get("/api/ledger/fees/settlements?month=2025-06&start=2025-06-01&end=2025-06-30")
    assert res.status_code == 400


def test_closed_month_answers_409(client):
    as_admin(client)
    assert client.put("/api/periods/2025-06", json={"closed": True}).status_code == 200

    res = client.post(
        "/api/ledger/fees",
        json={"subject_id": "S-1", "period_month": "2025-06", "amount": "100", "payment_mode": "Cash"},
    )
    assert res.status_code == 409
    body = res.get_json()
    assert (body["code"], body["period"]) == ("period_locked", "2025-06")

    res = client.post(
        "/api/attendance",
        json={"records": [{"subjectKind": "Student", "subjectId": "S-1", "date": "2025-06-09", "status": "Present"}]},
    )
    assert res.status_code == 409

    assert client.get("/api/periods/2025-06").get_json()["period"]["is_closed"] is True
    assert client.put("/api/periods/2025-06", json={"closed": "yes"}).status_code == 400


def test_attendance_batch_errors_carry_indices(client):
    as_admin(client)
    res = client.post(
        "/api/attendance",
        json={
            "records": [
                {"subjectKind": "Student", "subjectId": "S-1", "date": "2025-06-09", "status": "Present"},
                {"subjectKind": "Student", "subjectId": "S-404", "date": "2025-06-09", "status": "Present"},
            ]
        },
    )
    assert res.status_code == 400
    assert [e["index"] for e in res.get_json()["errors"]] == [1]


def test_substitute_marks_covered_students_only(client):
    login(client, "yusuf", SUBSTITUTE_PASSWORD)
    ok = client.post(
        "/api/attendance",
        json={"records": [{"studentId": "S-1", "courseId": "C-1", "date": "2025-06-09", "status": "Late"}]},
    )
    assert ok.status_code == 200
    assert ok.get_json()["inserted"] == 1

    denied = client.post(
        "/api/attendance",
        json={"records": [{"studentId": "N/A", "courseId": "STAFF", "teacherId": "T-3", "date": "2025-06-09", "status": "Present"}]},
    )
    assert denied.status_code == 403

    rows = client.get("/api/attendance?from=2025-06-01&to=2025-06-30").get_json()["records"]
    assert [r["subject_id"] for r in rows] == ["S-1"]


def test_fee_report_csv(client):
    as_admin(client)
    res = client.get("/api/reports/fees.csv?month=2025-06")
    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    assert "fees_2025-06.csv" in res.headers["Content-Disposition"]
    text = res.data.decode("utf-8-sig")
    assert text.splitlines()[0].startswith("id,name,course,parent_phone,period")
    assert "Abdullah" in text


def test_settings_put_requires_whole_record(client):
    as_admin(client)
    current = client.get("/api/settings").get_json()["settings"]
    assert client.put("/api/settings", json={"currency": "USD"}).status_code == 400

    current["currency"] = "USD"
    res = client.put("/api/settings", json=current)
    assert res.status_code == 200
    assert res.get_json()["settings"]["currency"] == "USD"


def test_reload_failure_is_503_and_marks_stale(client, db):
    as_admin(client)
    db.fetch_error = SourceUnavailable("connection refused")

    res = client.post("/api/store/reload")
    assert res.status_code == 503
    body = res.get_json()
    assert (body["code"], body["stale"]) == ("source_unavailable", True)

    status = client.get("/api/store/status").get_json()
    assert status["stale"] is True
    assert status["counts"]["students"] == 4


def test_dashboard_is_admin_only(client):
    login(client, "ahmed", TEACHER_PASSWORD)
    assert client.get("/api/dashboard?month=2025-06").status_code == 403
    client.post("/api/logout")

    as_admin(client)
    stats = client.get("/api/dashboard?month=2025-06").get_json()["dashboard"]
    assert stats["active_students"] == 3
    assert stats["revenue"] == "0.00"


def test_teacher_malformed_rows_get_per_index_400(client):
    login(client, "ahmed", TEACHER_PASSWORD)
    res = client.post(
        "/api/attendance",
        json={
            "records": [
                {"subjectKind": "Student", "subjectId": "S-1", "date": "2025-06-09", "status": "Present"},
                "not-a-row",
                {"subjectKind": "Student", "date": "2025-06-09", "status": "Present"},
            ]
        },
    )
    assert res.status_code == 400
    assert [e["index"] for e in res.get_json()["errors"]] == [1, 2]


def test_teacher_cannot_mark_other_courses(client):
    login(client, "ahmed", TEACHER_PASSWORD)
    res = client.post(
        "/api/attendance",
        json={"records": [{"subjectKind": "Student", "subjectId": "S-2", "date": "2025-06-09", "status": "Present"}]},
    )
    assert res.status_code == 403
