# backend/app/services/bed_metrics.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..domain.intervals import round_money
from ..models import Bed, Tenant


@dataclass(frozen=True)
class BedMetrics:
    property_id: int
    total_beds: int
    total_property_value: float
    occupied_beds: int
    occupancy_rate: float  # percent

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_bed_metrics(db: Session, *, property_id: int) -> BedMetrics:
    """
    Bed inventory for the dashboard summary card.

    - total_beds / total_property_value: non-deleted beds and the sum of their list prices
    - occupied_beds: ACTIVE, non-deleted tenants currently assigned to a bed
    """
    total_beds, total_value = db.execute(
        select(func.count(Bed.id), func.coalesce(func.sum(Bed.bed_price), 0.0))
        .where(Bed.property_id == property_id)
        .where(Bed.is_deleted.is_(False))
    ).one()

    occupied = db.scalar(
        select(func.count())
        .select_from(Tenant)
        .where(Tenant.property_id == property_id)
        .where(Tenant.is_deleted.is_(False), Tenant.status == "ACTIVE")
        .where(Tenant.bed_id.is_not(None))
    )

    total_beds = int(total_beds or 0)
    occupied = int(occupied or 0)
    rate = (occupied / total_beds) * 100 if total_beds > 0 else 0.0

    return BedMetrics(
        property_id=property_id,
        total_beds=total_beds,
        total_property_value=round_money(float(total_value or 0.0)),
        occupied_beds=occupied,
        occupancy_rate=round_money(rate),
    )
