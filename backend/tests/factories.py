# backend/tests/factories.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.models import (
    AppUser,
    Bed,
    OrgMembership,
    Organization,
    Property,
    Room,
    Tenant,
    TenantAllocation,
    TenantRentCycle,
)


def mk_org(db: Session, slug: str = "t-org") -> Organization:
    org = Organization(slug=slug, name=slug)
    db.add(org)
    db.commit()
    db.refresh(org)
    return org


def mk_member(db: Session, org: Organization, email: str, role: str = "owner") -> AppUser:
    user = AppUser(email=email, display_name=email.split("@")[0])
    db.add(user)
    db.commit()
    db.refresh(user)
    db.add(OrgMembership(org_id=org.id, user_id=user.id, role=role))
    db.commit()
    return user


def mk_property(db: Session, org: Organization, name: str = "PG One") -> Property:
    p = Property(org_id=org.id, name=name, address="1 Main St")
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


def mk_bed(db: Session, prop: Property, bed_no: str, price: float, room_no: str = "101") -> Bed:
    room = Room(property_id=prop.id, room_no=room_no)
    db.add(room)
    db.flush()
    bed = Bed(property_id=prop.id, room_id=room.id, bed_no=bed_no, bed_price=price)
    db.add(bed)
    db.commit()
    db.refresh(bed)
    return bed


def mk_tenant(
    db: Session,
    prop: Property,
    name: str,
    *,
    status: str = "ACTIVE",
    is_deleted: bool = False,
    bed_id: Optional[int] = None,
) -> Tenant:
    t = Tenant(property_id=prop.id, full_name=name, status=status, is_deleted=is_deleted, bed_id=bed_id)
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


def mk_allocation(
    db: Session,
    tenant: Tenant,
    effective_from: datetime,
    effective_to: Optional[datetime],
    price: float,
) -> TenantAllocation:
    a = TenantAllocation(
        property_id=tenant.property_id,
        tenant_id=tenant.id,
        effective_from=effective_from,
        effective_to=effective_to,
        bed_price_snapshot=price,
    )
    db.add(a)
    db.commit()
    db.refresh(a)
    return a


def mk_cycle(
    db: Session,
    tenant: Tenant,
    cycle_start: datetime,
    cycle_end: datetime,
    cycle_type: Optional[str] = "CALENDAR",
) -> TenantRentCycle:
    c = TenantRentCycle(tenant_id=tenant.id, cycle_type=cycle_type, cycle_start=cycle_start, cycle_end=cycle_end)
    db.add(c)
    db.commit()
    db.refresh(c)
    return c
