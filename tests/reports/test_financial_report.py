from __future__ import annotations

from datetime import date


def _today_range():
    today = date.today().isoformat()
    return {"startDate": today, "endDate": today}


def test_financial_summary(admin_client, ids):
    payment = admin_client.post(
        "/api/admin/finances/payments",
        json={"schoolId": ids["school"], "month": 5, "year": 2025, "agreedAmount": 5000},
    ).get_json()
    admin_client.put(f"/api/admin/finances/payments/{payment['id']}", json={"paidAmount": 3000})

    res = admin_client.post("/api/admin/reports/financial", json={**_today_range(), "reportType": "summary"})
    assert res.status_code == 200
    report = res.get_json()
    assert report["paymentData"]["analytics"]["totalRevenue"] == 5000.0
    assert report["paymentData"]["analytics"]["totalReceived"] == 3000.0
    summary = report["summary"]
    assert summary["totalIncome"] == 3000.0
    assert summary["totalExpenses"] == 0
    assert summary["netResult"] == 3000.0
    assert summary["netMargin"] == 100.0
    assert summary["outstandingReceivables"] == 5000.0


def test_financial_wages_csv(admin_client):
    admin_client.post("/api/admin/finances/wages", json={"month": 5, "year": 2025})
    res = admin_client.post(
        "/api/admin/reports/financial", json={**_today_range(), "reportType": "wages", "format": "csv"}
    )
    assert res.status_code == 200
    lines = res.get_data(as_text=True).split("\n")
    assert lines[0].startswith('"Teacher Name","Email","Month"')
    assert '"teacher1@example.com"' in lines[1]


def test_principal_sees_only_own_school(admin_client, login, ids):
    other = admin_client.post("/api/admin/schools", json={"name": "Other School", "district": "West"}).get_json()
    for school_id in (ids["school"], other["id"]):
        admin_client.post(
            "/api/admin/finances/payments",
            json={"schoolId": school_id, "month": 6, "year": 2025, "agreedAmount": 1000},
        )

    login("principal1")
    res = admin_client.post(
        "/api/admin/reports/financial",
        json={**_today_range(), "reportType": "payments", "schoolId": other["id"]},
    )
    assert res.status_code == 200
    records = res.get_json()["paymentData"]["records"]
    assert [r["schoolId"] for r in records] == [ids["school"]]
