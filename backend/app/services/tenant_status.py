# backend/app/services/tenant_status.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import and_, exists, or_, select
from sqlalchemy.orm import Session

from ..models import AdvancePayment, Tenant


@dataclass(frozen=True)
class TenantBrief:
    tenant_id: int
    full_name: str
    phone: Optional[str]
    bed_id: Optional[int]
    check_in_date: Optional[datetime]

    def as_dict(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "full_name": self.full_name,
            "phone": self.phone,
            "bed_id": self.bed_id,
            "check_in_date": self.check_in_date.isoformat() if self.check_in_date else None,
        }


@dataclass(frozen=True)
class TenantWidget:
    tenants: tuple[TenantBrief, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return len(self.tenants)

    def as_dict(self) -> dict[str, Any]:
        return {"count": self.count, "tenants": [t.as_dict() for t in self.tenants]}


def tenants_without_advance(db: Session, *, property_id: int) -> TenantWidget:
    """
    ACTIVE, non-deleted tenants with no PAID advance on record.
    Soft-deleted advances do not count; newest tenants first.
    """
    paid_advance = exists().where(
        and_(
            AdvancePayment.tenant_id == Tenant.id,
            AdvancePayment.status == "PAID",
            or_(AdvancePayment.is_deleted.is_(False), AdvancePayment.is_deleted.is_(None)),
        )
    )
    rows = db.scalars(
        select(Tenant)
        .where(Tenant.property_id == property_id)
        .where(Tenant.is_deleted.is_(False), Tenant.status == "ACTIVE")
        .where(~paid_advance)
        .order_by(Tenant.created_at.desc(), Tenant.id.desc())
    ).all()

    return TenantWidget(
        tenants=tuple(
            TenantBrief(
                tenant_id=int(t.id),
                full_name=str(t.full_name),
                phone=t.phone,
                bed_id=t.bed_id,
                check_in_date=t.check_in_date,
            )
            for t in rows
        )
    )
