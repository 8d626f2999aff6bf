# backend/app/services/monthly_metrics.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from ..config import settings
from ..domain.intervals import DateLike, MonthWindow, as_naive_utc, month_window_for
from ..domain.revenue_recognition import (
    BillingCycle,
    CashTotals,
    MonthlyMetricsReport,
    PriceAllocation,
    build_report,
)
from ..models import (
    AdvancePayment,
    Expense,
    RefundPayment,
    RentPayment,
    Tenant,
    TenantAllocation,
    TenantRentCycle,
)

log = logging.getLogger("pgstay.metrics")

RENT_COUNTED_STATUSES = ("PAID", "PARTIAL")
ADVANCE_COUNTED_STATUS = "PAID"
ACTIVE_TENANT_STATUS = "ACTIVE"


def _not_deleted(col: Any):
    # is_deleted is nullable on payment tables; NULL means "not deleted"
    return or_(col.is_(False), col.is_(None))


def _sum_or_zero(db: Session, stmt) -> float:
    s = db.scalar(stmt)
    return float(s or 0.0)


def _cash_received(db: Session, *, property_id: int, window: MonthWindow) -> float:
    """
    Rent actually collected in the window:
    - payment_date in [month_start, month_end)
    - status PAID or PARTIAL
    - not soft-deleted
    """
    return _sum_or_zero(
        db,
        select(func.coalesce(func.sum(RentPayment.amount_paid), 0.0))
        .where(RentPayment.property_id == property_id)
        .where(RentPayment.payment_date >= window.month_start, RentPayment.payment_date < window.month_end)
        .where(RentPayment.status.in_(RENT_COUNTED_STATUSES))
        .where(_not_deleted(RentPayment.is_deleted)),
    )


def _refunds_paid(db: Session, *, property_id: int, window: MonthWindow) -> float:
    return _sum_or_zero(
        db,
        select(func.coalesce(func.sum(RefundPayment.amount_paid), 0.0))
        .where(RefundPayment.property_id == property_id)
        .where(RefundPayment.payment_date >= window.month_start, RefundPayment.payment_date < window.month_end)
        .where(_not_deleted(RefundPayment.is_deleted)),
    )


def _advance_paid(db: Session, *, property_id: int, window: MonthWindow) -> float:
    return _sum_or_zero(
        db,
        select(func.coalesce(func.sum(AdvancePayment.amount_paid), 0.0))
        .where(AdvancePayment.property_id == property_id)
        .where(AdvancePayment.payment_date >= window.month_start, AdvancePayment.payment_date < window.month_end)
        .where(AdvancePayment.status == ADVANCE_COUNTED_STATUS)
        .where(_not_deleted(AdvancePayment.is_deleted)),
    )


def _expenses_paid(db: Session, *, property_id: int, window: MonthWindow) -> float:
    return _sum_or_zero(
        db,
        select(func.coalesce(func.sum(Expense.amount), 0.0))
        .where(Expense.property_id == property_id)
        .where(Expense.paid_date >= window.month_start, Expense.paid_date < window.month_end)
        .where(_not_deleted(Expense.is_deleted)),
    )


def _mrr_value(db: Session, *, property_id: int, window: MonthWindow) -> float:
    """
    Committed recurring revenue: every allocation that is in effect at some
    point of the window, for active, non-deleted tenants. A snapshot, not a
    proration; compare with rent_earned.
    """
    return _sum_or_zero(
        db,
        select(func.coalesce(func.sum(TenantAllocation.bed_price_snapshot), 0.0))
        .join(Tenant, Tenant.id == TenantAllocation.tenant_id)
        .where(TenantAllocation.property_id == property_id)
        .where(TenantAllocation.effective_from < window.month_end)
        .where(
            or_(
                TenantAllocation.effective_to.is_(None),
                TenantAllocation.effective_to >= window.month_start,
            )
        )
        .where(Tenant.is_deleted.is_(False), Tenant.status == ACTIVE_TENANT_STATUS),
    )


def _to_billing_cycle(row: TenantRentCycle) -> BillingCycle:
    allocations = [
        PriceAllocation.of(a.effective_from, a.effective_to, a.bed_price_snapshot)
        for a in (row.tenant.allocations if row.tenant else [])
    ]
    return BillingCycle.of(
        tenant_id=row.tenant_id,
        cycle_start=row.cycle_start,
        cycle_end=row.cycle_end,
        cycle_type=row.cycle_type,
        cycle_id=row.id,
        allocations=allocations,
    )


def load_billing_cycles(db: Session, *, property_id: int, window: MonthWindow) -> list[BillingCycle]:
    """
    Cycles intersecting the window for active tenants of the property, each
    carrying the tenant's full allocation history (needed for segmentation).
    """
    rows = db.scalars(
        select(TenantRentCycle)
        .join(Tenant, Tenant.id == TenantRentCycle.tenant_id)
        .where(Tenant.property_id == property_id)
        .where(Tenant.is_deleted.is_(False), Tenant.status == ACTIVE_TENANT_STATUS)
        .where(TenantRentCycle.cycle_start < window.month_end)
        .where(TenantRentCycle.cycle_end >= window.month_start)
        .options(selectinload(TenantRentCycle.tenant).selectinload(Tenant.allocations))
        .order_by(TenantRentCycle.cycle_start, TenantRentCycle.id)
    ).all()
    return [_to_billing_cycle(r) for r in rows]


def load_cash_totals(db: Session, *, property_id: int, window: MonthWindow) -> CashTotals:
    return CashTotals(
        cash_received=_cash_received(db, property_id=property_id, window=window),
        refunds_paid=_refunds_paid(db, property_id=property_id, window=window),
        advance_paid=_advance_paid(db, property_id=property_id, window=window),
        expenses_paid=_expenses_paid(db, property_id=property_id, window=window),
    )


def compute_monthly_metrics(
    db: Session,
    *,
    property_id: int,
    month_start: DateLike,
    month_end: Optional[DateLike] = None,
    now: Optional[datetime] = None,
) -> MonthlyMetricsReport:
    """
    Cash + accrual view of one property for [month_start, month_end).

    When month_end is omitted it is the start of the calendar month after
    `now` (UTC), not the month after month_start.
    """
    start = as_naive_utc(month_start)
    end = month_window_for(now).month_end if month_end is None else as_naive_utc(month_end)
    window = MonthWindow(month_start=start, month_end=end)

    # Independent reads; all of them finish before proration runs.
    cash = load_cash_totals(db, property_id=property_id, window=window)
    mrr = _mrr_value(db, property_id=property_id, window=window)
    cycles = load_billing_cycles(db, property_id=property_id, window=window)

    report = build_report(
        window=window,
        cash=cash,
        mrr_value=mrr,
        cycles=cycles,
        formula_version=settings.metrics_formula_version,
    )

    skipped = len(cycles) - len(report.cycles)
    if skipped:
        log.debug(
            "monthly_metrics skipped %s cycle(s) with no earnable overlap",
            skipped,
            extra={"property_id": property_id, "month_start": window.month_start.isoformat()},
        )

    log.info(
        "monthly_metrics computed: rent_earned=%s mrr=%s cycles=%s",
        report.rent_earned,
        report.mrr_value,
        len(report.cycles),
        extra={
            "property_id": property_id,
            "month_start": window.month_start.isoformat(),
            "month_end": window.month_end.isoformat(),
        },
    )
    return report


def compute_this_month_metrics(
    db: Session,
    *,
    property_id: int,
    now: Optional[datetime] = None,
) -> MonthlyMetricsReport:
    window = month_window_for(now)
    return compute_monthly_metrics(
        db,
        property_id=property_id,
        month_start=window.month_start,
        month_end=window.month_end,
    )
