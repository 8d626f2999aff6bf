# backend/app/cli/seed_demo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.db import SessionLocal, init_db
from app.domain.intervals import month_window_from_label
from app.models import (
    AdvancePayment,
    AppUser,
    Bed,
    Expense,
    OrgMembership,
    Organization,
    Property,
    RentPayment,
    Room,
    Tenant,
    TenantAllocation,
    TenantRentCycle,
)


@dataclass(frozen=True)
class SeedResult:
    org_slug: str
    user_email: str
    property_id: Optional[int]
    month: str


def _get_or_create_org(db: Session, slug: str, name: str) -> Organization:
    row = db.query(Organization).filter(Organization.slug == slug).one_or_none()
    if row:
        return row
    row = Organization(slug=slug, name=name)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _get_or_create_user(db: Session, email: str, display_name: str) -> AppUser:
    row = db.query(AppUser).filter(AppUser.email == email).one_or_none()
    if row:
        return row
    row = AppUser(email=email, display_name=display_name)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _ensure_membership(db: Session, org_id: int, user_id: int, role: str = "owner") -> None:
    existing = db.query(OrgMembership).filter(
        OrgMembership.org_id == int(org_id),
        OrgMembership.user_id == int(user_id),
    ).one_or_none()
    if existing:
        return
    db.add(OrgMembership(org_id=int(org_id), user_id=int(user_id), role=str(role)))
    db.commit()


def _seed_property(db: Session, *, org_id: int, year: int, month: int) -> int:
    """
    One PG with two rooms and three beds for `year-month`:
    - a CALENDAR tenant paying 9000 for the whole month
    - a MIDMONTH tenant whose price goes 6000 -> 7500 ten days into the cycle
    - one empty bed
    """
    first = date(year, month, 1)

    prop = Property(org_id=org_id, name="Demo PG", address="12 Lake Road", rent_cycle_type="CALENDAR")
    db.add(prop)
    db.flush()

    r1 = Room(property_id=prop.id, room_no="101")
    r2 = Room(property_id=prop.id, room_no="102")
    db.add_all([r1, r2])
    db.flush()

    b1 = Bed(property_id=prop.id, room_id=r1.id, bed_no="101-A", bed_price=9000.0)
    b2 = Bed(property_id=prop.id, room_id=r1.id, bed_no="101-B", bed_price=7500.0)
    b3 = Bed(property_id=prop.id, room_id=r2.id, bed_no="102-A", bed_price=8000.0)
    db.add_all([b1, b2, b3])
    db.flush()

    t1 = Tenant(property_id=prop.id, bed_id=b1.id, full_name="Asha Rao", status="ACTIVE")
    t2 = Tenant(property_id=prop.id, bed_id=b2.id, full_name="Vikram Shah", status="ACTIVE")
    db.add_all([t1, t2])
    db.flush()

    def at(d: date) -> datetime:
        return datetime(d.year, d.month, d.day)

    # calendar tenant: whole month at one price
    next_first = (first + timedelta(days=32)).replace(day=1)
    db.add(TenantAllocation(property_id=prop.id, tenant_id=t1.id, bed_id=b1.id, effective_from=at(first), bed_price_snapshot=9000.0))
    db.add(
        TenantRentCycle(
            tenant_id=t1.id,
            cycle_type="CALENDAR",
            anchor_day=1,
            cycle_start=at(first),
            cycle_end=at(next_first - timedelta(days=1)),
        )
    )

    # mid-month tenant: 30-day cycle from the 1st, price change on day 11
    cycle_start = first
    cycle_end = first + timedelta(days=29)
    change = first + timedelta(days=10)
    db.add_all(
        [
            TenantAllocation(
                property_id=prop.id,
                tenant_id=t2.id,
                bed_id=b2.id,
                effective_from=at(cycle_start),
                effective_to=at(change - timedelta(days=1)),
                bed_price_snapshot=6000.0,
            ),
            TenantAllocation(property_id=prop.id, tenant_id=t2.id, bed_id=b2.id, effective_from=at(change), bed_price_snapshot=7500.0),
            TenantRentCycle(tenant_id=t2.id, cycle_type="MIDMONTH", anchor_day=1, cycle_start=at(cycle_start), cycle_end=at(cycle_end)),
        ]
    )

    db.add_all(
        [
            RentPayment(property_id=prop.id, tenant_id=t1.id, payment_date=at(first) + timedelta(days=2), amount_paid=9000.0, status="PAID"),
            RentPayment(property_id=prop.id, tenant_id=t2.id, payment_date=at(first) + timedelta(days=4), amount_paid=4000.0, status="PARTIAL"),
            AdvancePayment(property_id=prop.id, tenant_id=t2.id, payment_date=at(first), amount_paid=7500.0, status="PAID"),
            Expense(property_id=prop.id, paid_date=at(first) + timedelta(days=7), amount=1250.0, category="utilities"),
        ]
    )
    db.commit()
    return int(prop.id)


def seed_demo(
    *,
    org_slug: str = "demo",
    org_name: str = "demo",
    user_email: str = "owner@demo.local",
    user_name: str = "Owner",
    month: Optional[str] = None,
    create_sample_property: bool = True,
) -> SeedResult:
    label = month or datetime.utcnow().strftime("%Y-%m")
    first = month_window_from_label(label).month_start
    year, mon = first.year, first.month
    init_db()

    db = SessionLocal()
    try:
        org = _get_or_create_org(db, org_slug, org_name)
        user = _get_or_create_user(db, user_email, user_name)
        _ensure_membership(db, org_id=int(org.id), user_id=int(user.id), role="owner")

        property_id = None
        if create_sample_property:
            property_id = _seed_property(db, org_id=int(org.id), year=year, month=mon)

        return SeedResult(org_slug=str(org.slug), user_email=str(user.email), property_id=property_id, month=label)
    finally:
        db.close()
