# backend/tests/test_dashboard_api.py
from __future__ import annotations

from datetime import datetime, timedelta

import jwt

from app.config import settings
from app.db import SessionLocal
from app.models import RentPayment

from factories import mk_allocation, mk_bed, mk_cycle, mk_member, mk_org, mk_property, mk_tenant


def _headers(org_slug: str, role: str = "owner", email: str = "owner@pg.local") -> dict[str, str]:
    return {
        "X-Org-Slug": org_slug,
        "X-User-Email": email,
        "X-User-Role": role,
    }


def _seed_march() -> int:
    db = SessionLocal()
    try:
        org = mk_org(db, "org_a")
        p = mk_property(db, org)
        t = mk_tenant(db, p, "A")
        mk_allocation(db, t, datetime(2026, 3, 1), datetime(2026, 3, 10), 6000.0)
        mk_allocation(db, t, datetime(2026, 3, 11), None, 7500.0)
        mk_cycle(db, t, datetime(2026, 3, 1), datetime(2026, 3, 30), "MIDMONTH")
        db.add(RentPayment(property_id=p.id, tenant_id=t.id, payment_date=datetime(2026, 3, 3), amount_paid=7000.0, status="PAID"))
        db.commit()
        return int(p.id)
    finally:
        db.close()


def test_monthly_metrics_explicit_window(client):
    pid = _seed_march()
    r = client.get(
        "/api/dashboard/monthly-metrics",
        params={"property_id": pid, "month_start": "2026-03-01T00:00:00Z", "month_end": "2026-04-01T00:00:00Z"},
        headers=_headers("org_a"),
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["property_id"] == pid
    m = body["monthly_metrics"]
    assert m["month_start"] == "2026-03-01T00:00:00"
    assert m["cash_received"] == 7000.0
    assert m["rent_earned"] == 7000.0
    assert m["mrr_value"] == 13500.0
    cycles = m["rent_earned_breakdown"]["cycles"]
    assert len(cycles) == 1
    assert [s["earned"] for s in cycles[0]["segments"]] == [2000.0, 5000.0]
    assert cycles[0]["total_cycle_days"] == 30
    assert m["rent_earned_breakdown"]["formula_version"] == settings.metrics_formula_version
    assert r.headers.get("X-Request-ID")


def test_monthly_metrics_month_label(client):
    pid = _seed_march()
    r = client.get("/api/dashboard/monthly-metrics", params={"property_id": pid, "month": "2026-03"}, headers=_headers("org_a"))
    assert r.status_code == 200, r.text
    assert r.json()["monthly_metrics"]["rent_earned"] == 7000.0


def test_monthly_metrics_defaults_to_current_month(client):
    pid = _seed_march()
    r = client.get("/api/dashboard/monthly-metrics", params={"property_id": pid}, headers=_headers("org_a"))
    assert r.status_code == 200, r.text
    m = r.json()["monthly_metrics"]
    now = datetime.utcnow()
    assert m["month_start"].startswith(f"{now.year:04d}-{now.month:02d}-01")


def test_monthly_metrics_rejects_bad_windows(client):
    pid = _seed_march()
    h = _headers("org_a")
    url = "/api/dashboard/monthly-metrics"

    only_start = client.get(url, params={"property_id": pid, "month_start": "2026-03-01"}, headers=h)
    assert only_start.status_code == 400

    garbage = client.get(url, params={"property_id": pid, "month_start": "yesterday", "month_end": "2026-04-01"}, headers=h)
    assert garbage.status_code == 400

    backwards = client.get(url, params={"property_id": pid, "month_start": "2026-04-01", "month_end": "2026-03-01"}, headers=h)
    assert backwards.status_code == 400

    bad_label = client.get(url, params={"property_id": pid, "month": "2026-13"}, headers=h)
    assert bad_label.status_code == 400

    far_label = client.get(url, params={"property_id": pid, "month": "9999-12"}, headers=h)
    assert far_label.status_code == 400

    far_instant = client.get(
        url, params={"property_id": pid, "month_start": "2026-03-01", "month_end": "9999-12-31T23:00:00-05:00"}, headers=h
    )
    assert far_instant.status_code == 400

    both = client.get(
        url,
        params={"property_id": pid, "month": "2026-03", "month_start": "2026-03-01", "month_end": "2026-04-01"},
        headers=h,
    )
    assert both.status_code == 400


def test_monthly_metrics_is_org_scoped(client):
    pid = _seed_march()
    r = client.get("/api/dashboard/monthly-metrics", params={"property_id": pid, "month": "2026-03"}, headers=_headers("org_b"))
    assert r.status_code == 404


def test_monthly_metrics_requires_manager_role(client):
    pid = _seed_march()
    r = client.get(
        "/api/dashboard/monthly-metrics",
        params={"property_id": pid, "month": "2026-03"},
        headers=_headers("org_a", role="staff", email="staff@pg.local"),
    )
    assert r.status_code == 403


def test_missing_org_header_is_unauthorized(client):
    pid = _seed_march()
    r = client.get("/api/dashboard/monthly-metrics", params={"property_id": pid})
    assert r.status_code == 401


def test_bearer_token_auth(client):
    db = SessionLocal()
    try:
        org = mk_org(db, "org_jwt")
        user = mk_member(db, org, "manager@pg.local", role="manager")
        p = mk_property(db, org)
        pid, uid = int(p.id), int(user.id)
    finally:
        db.close()

    token = jwt.encode(
        {"uid": uid, "org": "org_jwt", "exp": datetime.utcnow() + timedelta(minutes=5)},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    ok = client.get(
        "/api/dashboard/monthly-metrics",
        params={"property_id": pid, "month": "2026-03"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert ok.status_code == 200, ok.text
    assert ok.json()["monthly_metrics"]["rent_earned"] == 0

    bad = client.get(
        "/api/dashboard/monthly-metrics",
        params={"property_id": pid, "month": "2026-03"},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert bad.status_code == 401


def test_summary_bed_metrics(client):
    db = SessionLocal()
    try:
        org = mk_org(db, "org_a")
        p = mk_property(db, org)
        b1 = mk_bed(db, p, "A", 9000.0, room_no="101")
        mk_bed(db, p, "B", 7500.0, room_no="102")
        b3 = mk_bed(db, p, "C", 8000.0, room_no="103")
        mk_tenant(db, p, "In bed", bed_id=b1.id)
        mk_tenant(db, p, "Checked out", status="INACTIVE", bed_id=b3.id)
        pid = int(p.id)
    finally:
        db.close()

    r = client.get("/api/dashboard/summary", params={"property_id": pid}, headers=_headers("org_a", role="staff"))
    assert r.status_code == 200, r.text
    bm = r.json()["bed_metrics"]
    assert bm["total_beds"] == 3
    assert bm["total_property_value"] == 24500.0
    assert bm["occupied_beds"] == 1
    assert bm["occupancy_rate"] == 33.33

    wa = r.json()["tenant_status"]["without_advance"]
    assert wa["count"] == 1
    assert [t["full_name"] for t in wa["tenants"]] == ["In bed"]


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True
