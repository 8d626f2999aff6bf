# backend/app/services/ownership.py
from __future__ import annotations

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Property


def must_get_property(db: Session, *, org_id: int, property_id: int) -> Property:
    row = db.scalar(
        select(Property).where(
            Property.id == property_id,
            Property.org_id == org_id,
            Property.is_deleted.is_(False),
        )
    )
    if not row:
        raise HTTPException(status_code=404, detail="property not found")
    return row
