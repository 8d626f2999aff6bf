# backend/app/schemas.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


# -------------------- Monthly metrics --------------------

class PriceSegmentOut(BaseModel):
    start: str
    end: str
    days: int
    price: float
    earned: float


class CycleEarningsOut(BaseModel):
    cycle_id: Optional[int] = None
    tenant_id: int
    cycle_type: Optional[str] = None
    cycle_start: str
    cycle_end: str
    overlap_start: str
    overlap_end: str
    overlap_days: int
    total_cycle_days: int
    monthly_price: float
    segments: list[PriceSegmentOut] = Field(default_factory=list)
    earned: float


class RentEarnedBreakdownOut(BaseModel):
    formula: str
    formula_version: str
    cycles: list[CycleEarningsOut] = Field(default_factory=list)


class MonthlyMetricsOut(BaseModel):
    month_start: str
    month_end: str
    cash_received: float = 0.0
    refunds_paid: float = 0.0
    advance_paid: float = 0.0
    expenses_paid: float = 0.0
    rent_earned: float = 0.0
    mrr_value: float = 0.0
    rent_earned_breakdown: RentEarnedBreakdownOut


class MonthlyMetricsResponse(BaseModel):
    property_id: int
    monthly_metrics: MonthlyMetricsOut


# -------------------- Summary --------------------

class BedMetricsOut(BaseModel):
    property_id: int
    total_beds: int
    total_property_value: float
    occupied_beds: int
    occupancy_rate: float


class TenantBriefOut(BaseModel):
    tenant_id: int
    full_name: str
    phone: Optional[str] = None
    bed_id: Optional[int] = None
    check_in_date: Optional[str] = None


class TenantWidgetOut(BaseModel):
    count: int = 0
    tenants: list[TenantBriefOut] = Field(default_factory=list)


class TenantStatusOut(BaseModel):
    without_advance: TenantWidgetOut


class DashboardSummaryOut(BaseModel):
    property_id: int
    bed_metrics: BedMetricsOut
    tenant_status: TenantStatusOut
