# backend/app/domain/revenue_recognition.py
"""
Accrual-basis rent recognition for one property and one reporting window.

For every billing cycle that touches the window we:
  1. intersect the cycle with the window (the "overlap"),
  2. pick the denominator: days in the reporting window for CALENDAR cycles,
     the cycle's own length for everything else,
  3. split the overlap into segments, one per price allocation in effect,
  4. earn round(price * segment_days / denominator) per segment.

Segment days always add up to the overlap days covered by allocations, so a
price change inside a cycle is neither double counted nor dropped.

Nothing in here raises on bad data: a reversed cycle, an empty overlap or a
zero denominator contributes 0 and is left out of the breakdown.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional, Sequence

from .intervals import DateLike, DateSpan, MonthWindow, inclusive_day_count, intersect, round_money, to_calendar_day

CYCLE_CALENDAR = "CALENDAR"
CYCLE_MIDMONTH = "MIDMONTH"

EARNED_FORMULA = (
    "rent_earned = Σ_cycles Σ_segments round2( segment_price × segment_days ÷ denominator_days ); "
    "denominator_days = days in reporting month (CALENDAR) or total cycle days (MIDMONTH)"
)
FORMULA_VERSION = "segmented.v2"


@dataclass(frozen=True)
class PriceAllocation:
    effective_from: date
    effective_to: Optional[date]  # inclusive; None = still in effect
    price_snapshot: float

    @classmethod
    def of(cls, effective_from: DateLike, effective_to: Optional[DateLike], price_snapshot: Any) -> "PriceAllocation":
        return cls(
            effective_from=to_calendar_day(effective_from),
            effective_to=to_calendar_day(effective_to) if effective_to is not None else None,
            price_snapshot=float(price_snapshot or 0.0),
        )

    def contains(self, day: date) -> bool:
        if self.effective_from > day:
            return False
        if self.effective_to is not None and self.effective_to < day:
            return False
        return True


@dataclass(frozen=True)
class BillingCycle:
    tenant_id: int
    cycle_start: date
    cycle_end: date  # inclusive
    cycle_type: Optional[str] = None
    cycle_id: Optional[int] = None
    allocations: tuple[PriceAllocation, ...] = ()

    @classmethod
    def of(
        cls,
        *,
        tenant_id: int,
        cycle_start: DateLike,
        cycle_end: DateLike,
        cycle_type: Optional[str] = None,
        cycle_id: Optional[int] = None,
        allocations: Iterable[PriceAllocation] = (),
    ) -> "BillingCycle":
        return cls(
            tenant_id=int(tenant_id),
            cycle_start=to_calendar_day(cycle_start),
            cycle_end=to_calendar_day(cycle_end),
            cycle_type=(cycle_type or "").strip().upper() or None,
            cycle_id=cycle_id,
            allocations=tuple(sorted(allocations, key=lambda a: a.effective_from)),
        )

    @property
    def span(self) -> DateSpan:
        return DateSpan(start=self.cycle_start, end=self.cycle_end)

    @property
    def is_calendar(self) -> bool:
        return self.cycle_type == CYCLE_CALENDAR


@dataclass(frozen=True)
class PriceSegment:
    start: date
    end: date
    days: int
    price: float
    earned: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "days": self.days,
            "price": round_money(self.price),
            "earned": self.earned,
        }


@dataclass(frozen=True)
class CycleEarnings:
    cycle: BillingCycle
    overlap: DateSpan
    denominator_days: int
    monthly_price: float
    segments: tuple[PriceSegment, ...]
    earned: float

    @property
    def segment_days(self) -> int:
        return sum(s.days for s in self.segments)

    def as_dict(self) -> dict[str, Any]:
        return {
            "cycle_id": self.cycle.cycle_id,
            "tenant_id": self.cycle.tenant_id,
            "cycle_type": self.cycle.cycle_type,
            "cycle_start": self.cycle.cycle_start.isoformat(),
            "cycle_end": self.cycle.cycle_end.isoformat(),
            "overlap_start": self.overlap.start.isoformat(),
            "overlap_end": self.overlap.end.isoformat(),
            "overlap_days": self.overlap.days,
            "total_cycle_days": self.denominator_days,
            "monthly_price": round_money(self.monthly_price),
            "segments": [s.as_dict() for s in self.segments],
            "earned": self.earned,
        }


@dataclass(frozen=True)
class CashTotals:
    cash_received: float = 0.0
    refunds_paid: float = 0.0
    advance_paid: float = 0.0
    expenses_paid: float = 0.0


@dataclass(frozen=True)
class MonthlyMetricsReport:
    window: MonthWindow
    cash: CashTotals
    mrr_value: float
    rent_earned: float
    cycles: tuple[CycleEarnings, ...] = field(default_factory=tuple)
    formula: str = EARNED_FORMULA
    formula_version: str = FORMULA_VERSION

    def as_dict(self) -> dict[str, Any]:
        return {
            "month_start": self.window.month_start.isoformat(),
            "month_end": self.window.month_end.isoformat(),
            "cash_received": round_money(self.cash.cash_received),
            "refunds_paid": round_money(self.cash.refunds_paid),
            "advance_paid": round_money(self.cash.advance_paid),
            "expenses_paid": round_money(self.cash.expenses_paid),
            "rent_earned": round_money(self.rent_earned),
            "mrr_value": round_money(self.mrr_value),
            "rent_earned_breakdown": {
                "formula": self.formula,
                "formula_version": self.formula_version,
                "cycles": [c.as_dict() for c in self.cycles],
            },
        }


def pick_current_price(allocations: Sequence[PriceAllocation], cycle_start: DateLike) -> float:
    """Price of the earliest allocation in effect on `cycle_start`; 0 when none is. Display only."""
    day = to_calendar_day(cycle_start)
    for a in sorted(allocations, key=lambda x: x.effective_from):
        if a.contains(day):
            return float(a.price_snapshot)
    return 0.0


def denominator_days(cycle: BillingCycle, window: MonthWindow) -> int:
    # CALENDAR cycles are weighted against the reporting month, not the cycle's own month.
    if cycle.is_calendar:
        return window.days
    return inclusive_day_count(cycle.cycle_start, cycle.cycle_end)


def segment_overlap(
    allocations: Sequence[PriceAllocation],
    overlap: DateSpan,
    denominator: int,
) -> list[PriceSegment]:
    if denominator <= 0:
        return []

    segments: list[PriceSegment] = []
    for a in sorted(allocations, key=lambda x: x.effective_from):
        clipped = intersect(DateSpan(start=a.effective_from, end=a.effective_to or date.max), overlap)
        if clipped is None:
            continue
        days = clipped.days
        segments.append(
            PriceSegment(
                start=clipped.start,
                end=clipped.end,
                days=days,
                price=a.price_snapshot,
                earned=round_money(a.price_snapshot * days / denominator),
            )
        )
    return segments


def earn_cycle(cycle: BillingCycle, window: MonthWindow) -> Optional[CycleEarnings]:
    """Earnings for one cycle inside `window`, or None when it contributes nothing."""
    overlap = intersect(cycle.span, window.span)
    if overlap is None:
        return None

    denominator = denominator_days(cycle, window)
    if denominator <= 0:
        return None

    segments = segment_overlap(cycle.allocations, overlap, denominator)
    return CycleEarnings(
        cycle=cycle,
        overlap=overlap,
        denominator_days=denominator,
        monthly_price=pick_current_price(cycle.allocations, cycle.cycle_start),
        segments=tuple(segments),
        earned=round_money(sum(s.earned for s in segments)),
    )


def recognize_rent(cycles: Iterable[BillingCycle], window: MonthWindow) -> tuple[float, list[CycleEarnings]]:
    """Returns (rent_earned, per-cycle breakdown) for all cycles touching the window."""
    breakdown: list[CycleEarnings] = []
    for c in cycles:
        earned = earn_cycle(c, window)
        if earned is not None:
            breakdown.append(earned)
    return round_money(sum(c.earned for c in breakdown)), breakdown


def build_report(
    *,
    window: MonthWindow,
    cash: CashTotals,
    mrr_value: float,
    cycles: Iterable[BillingCycle],
    formula_version: str = FORMULA_VERSION,
) -> MonthlyMetricsReport:
    rent_earned, breakdown = recognize_rent(cycles, window)
    return MonthlyMetricsReport(
        window=window,
        cash=CashTotals(
            cash_received=round_money(cash.cash_received),
            refunds_paid=round_money(cash.refunds_paid),
            advance_paid=round_money(cash.advance_paid),
            expenses_paid=round_money(cash.expenses_paid),
        ),
        mrr_value=round_money(mrr_value),
        rent_earned=rent_earned,
        cycles=tuple(breakdown),
        formula_version=formula_version,
    )
