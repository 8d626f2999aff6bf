# backend/app/routers/dashboard.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal, require_manager
from ..db import get_db
from ..domain.intervals import as_naive_utc, month_window_from_label
from ..schemas import DashboardSummaryOut, MonthlyMetricsResponse
from ..services.bed_metrics import compute_bed_metrics
from ..services.monthly_metrics import compute_monthly_metrics, compute_this_month_metrics
from ..services.ownership import must_get_property
from ..services.tenant_status import tenants_without_advance

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _parse_instant(raw: str, field: str) -> datetime:
    s = (raw or "").strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return as_naive_utc(datetime.fromisoformat(s))
    except (ValueError, OverflowError):
        raise HTTPException(status_code=400, detail=f"Invalid {field} format (expected ISO-8601 date or datetime)")


@router.get("/summary", response_model=DashboardSummaryOut)
def dashboard_summary(
    property_id: int = Query(..., ge=1),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    must_get_property(db, org_id=p.org_id, property_id=property_id)
    metrics = compute_bed_metrics(db, property_id=property_id)
    without_advance = tenants_without_advance(db, property_id=property_id)
    return {
        "property_id": property_id,
        "bed_metrics": metrics.as_dict(),
        "tenant_status": {"without_advance": without_advance.as_dict()},
    }


@router.get("/monthly-metrics", response_model=MonthlyMetricsResponse)
def monthly_metrics(
    property_id: int = Query(..., ge=1),
    month_start: Optional[str] = Query(default=None, description="ISO date/datetime, inclusive"),
    month_end: Optional[str] = Query(default=None, description="ISO date/datetime, exclusive"),
    month: Optional[str] = Query(default=None, description="YYYY-MM shorthand for a whole calendar month"),
    db: Session = Depends(get_db),
    p: Principal = Depends(require_manager),
):
    """
    Cash vs accrual revenue for one property.

    - month_start + month_end: explicit half-open window (both or neither)
    - month=YYYY-MM: that calendar month
    - nothing: the current UTC month
    """
    must_get_property(db, org_id=p.org_id, property_id=property_id)

    if month and (month_start or month_end):
        raise HTTPException(status_code=400, detail="Use either month or month_start/month_end, not both")
    if bool(month_start) != bool(month_end):
        raise HTTPException(status_code=400, detail="Both month_start and month_end must be provided together")

    if month:
        try:
            window = month_window_from_label(month)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        report = compute_monthly_metrics(
            db, property_id=property_id, month_start=window.month_start, month_end=window.month_end
        )
    elif month_start and month_end:
        ms = _parse_instant(month_start, "month_start")
        me = _parse_instant(month_end, "month_end")
        if me <= ms:
            raise HTTPException(status_code=400, detail="month_end must be after month_start")
        report = compute_monthly_metrics(db, property_id=property_id, month_start=ms, month_end=me)
    else:
        report = compute_this_month_metrics(db, property_id=property_id)

    return {"property_id": property_id, "monthly_metrics": report.as_dict()}
