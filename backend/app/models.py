# backend/app/models.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


# -----------------------------
# Multitenant RBAC tables
# -----------------------------
class Organization(Base):
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(80), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    properties: Mapped[List["Property"]] = relationship(back_populates="organization")


class AppUser(Base):
    __tablename__ = "app_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class OrgMembership(Base):
    __tablename__ = "org_memberships"
    __table_args__ = (UniqueConstraint("org_id", "user_id", name="uq_org_memberships_org_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), index=True, nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("app_users.id"), index=True, nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="owner")  # owner|manager|staff
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


# -----------------------------
# PG locations, rooms, beds
# -----------------------------
class Property(Base):
    """A PG location. Everything below is scoped to one of these."""

    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rent_cycle_type: Mapped[str] = mapped_column(String(20), nullable=False, default="CALENDAR")  # CALENDAR|MIDMONTH
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    organization: Mapped["Organization"] = relationship(back_populates="properties")
    rooms: Mapped[List["Room"]] = relationship(back_populates="property", cascade="all, delete-orphan")
    tenants: Mapped[List["Tenant"]] = relationship(back_populates="property")


class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    room_no: Mapped[str] = mapped_column(String(40), nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    property: Mapped["Property"] = relationship(back_populates="rooms")
    beds: Mapped[List["Bed"]] = relationship(back_populates="room", cascade="all, delete-orphan")


class Bed(Base):
    __tablename__ = "beds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    room_id: Mapped[int] = mapped_column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)

    bed_no: Mapped[str] = mapped_column(String(40), nullable=False)
    bed_price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    room: Mapped["Room"] = relationship(back_populates="beds")


# -----------------------------
# Tenants + pricing history
# -----------------------------
class Tenant(Base):
    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    bed_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("beds.id"), nullable=True, index=True)

    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")  # ACTIVE|INACTIVE|CHECKED_OUT
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    check_in_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    property: Mapped["Property"] = relationship(back_populates="tenants")
    allocations: Mapped[List["TenantAllocation"]] = relationship(
        back_populates="tenant",
        cascade="all, delete-orphan",
        order_by="TenantAllocation.effective_from",
    )
    rent_cycles: Mapped[List["TenantRentCycle"]] = relationship(
        back_populates="tenant",
        cascade="all, delete-orphan",
        order_by="TenantRentCycle.cycle_start",
    )


class TenantAllocation(Base):
    """
    Time-bounded bed price locked for a tenant. A price change closes the
    previous row's effective_to and opens a new row; rows are never deleted.
    """

    __tablename__ = "tenant_allocations"
    __table_args__ = (Index("ix_tenant_allocations_tenant_from", "tenant_id", "effective_from"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    bed_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("beds.id"), nullable=True)

    effective_from: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    effective_to: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)  # inclusive; NULL = current
    bed_price_snapshot: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    tenant: Mapped["Tenant"] = relationship(back_populates="allocations")


class TenantRentCycle(Base):
    __tablename__ = "tenant_rent_cycles"
    __table_args__ = (Index("ix_tenant_rent_cycles_window", "cycle_start", "cycle_end"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )

    cycle_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # CALENDAR|MIDMONTH
    anchor_day: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    cycle_start: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    cycle_end: Mapped[datetime] = mapped_column(DateTime, nullable=False)  # inclusive

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    tenant: Mapped["Tenant"] = relationship(back_populates="rent_cycles")


# -----------------------------
# Money movements (soft-deleted, never removed)
# -----------------------------
class RentPayment(Base):
    __tablename__ = "rent_payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[int] = mapped_column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    cycle_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("tenant_rent_cycles.id"), nullable=True)

    payment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    amount_paid: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    actual_rent_amount: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    payment_method: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PAID")  # PAID|PARTIAL|PENDING|VOIDED
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_deleted: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, default=False)


class RefundPayment(Base):
    __tablename__ = "refund_payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[int] = mapped_column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)

    payment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    amount_paid: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_deleted: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, default=False)


class AdvancePayment(Base):
    __tablename__ = "advance_payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[int] = mapped_column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)

    payment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    amount_paid: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PAID")  # PAID|PENDING|VOIDED
    is_deleted: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, default=False)


class Expense(Base):
    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )

    paid_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    category: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    memo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_deleted: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, default=False)
