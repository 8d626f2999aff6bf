# backend/app/auth.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import jwt
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from .config import settings
from .db import get_db
from .models import AppUser, Organization, OrgMembership


@dataclass(frozen=True)
class Principal:
    org_id: int
    org_slug: str
    user_id: int
    email: str
    role: str  # owner | manager | staff


ROLE_ORDER = {"staff": 1, "manager": 2, "owner": 3}


def _require_role(principal: Principal, min_role: str) -> None:
    if ROLE_ORDER.get(principal.role, 0) < ROLE_ORDER.get(min_role, 999):
        raise HTTPException(status_code=403, detail=f"Requires role >= {min_role}")


# -------------------------
# JWT helpers
# -------------------------
def decode_access_token(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


# -------------------------
# Org + membership helpers
# -------------------------
def _resolve_org(db: Session, org_slug: str) -> Organization:
    org = db.scalar(select(Organization).where(Organization.slug == org_slug))
    if org:
        return org
    raise HTTPException(status_code=401, detail="Unknown org")


def _get_membership(db: Session, org_id: int, user_id: int) -> OrgMembership | None:
    return db.scalar(select(OrgMembership).where(OrgMembership.org_id == org_id, OrgMembership.user_id == user_id))


def _principal_from_claims(db: Session, *, org_slug: str, claims: dict[str, Any]) -> Principal:
    uid = claims.get("uid") or claims.get("sub")
    try:
        user_id = int(uid)
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Token missing uid")

    user = db.scalar(select(AppUser).where(AppUser.id == user_id))
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")

    org = _resolve_org(db, org_slug=org_slug)
    mem = _get_membership(db, org_id=int(org.id), user_id=int(user.id))
    if mem is None:
        raise HTTPException(status_code=403, detail="Not a member of this org")

    return Principal(org_id=int(org.id), org_slug=str(org.slug), user_id=int(user.id), email=str(user.email), role=str(mem.role))


def _dev_principal(db: Session, *, org_slug: str, email: str, role_hint: str) -> Principal:
    org = db.scalar(select(Organization).where(Organization.slug == org_slug))
    if org is None and settings.dev_auto_provision:
        org = Organization(slug=org_slug, name=org_slug)
        db.add(org)
        db.commit()
        db.refresh(org)

    user = db.scalar(select(AppUser).where(AppUser.email == email))
    if user is None and settings.dev_auto_provision:
        user = AppUser(email=email, display_name=email.split("@")[0])
        db.add(user)
        db.commit()
        db.refresh(user)

    if org is None or user is None:
        raise HTTPException(status_code=401, detail="Dev auth could not provision user/org")

    mem = _get_membership(db, org_id=int(org.id), user_id=int(user.id))
    if mem is None and settings.dev_auto_provision:
        mem = OrgMembership(org_id=int(org.id), user_id=int(user.id), role=role_hint if role_hint in ROLE_ORDER else "owner")
        db.add(mem)
        db.commit()
    if mem is None:
        raise HTTPException(status_code=403, detail="Not a member of this org")

    return Principal(org_id=int(org.id), org_slug=str(org.slug), user_id=int(user.id), email=str(user.email), role=str(mem.role))


def get_principal(
    request: Request,
    db: Session = Depends(get_db),
    x_org_slug: Optional[str] = Header(default=None, alias="X-Org-Slug"),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> Principal:
    """
    Auth modes supported (in priority order):
      1) Authorization: Bearer <token> (HS256, claims: uid, org, role)
      2) dev header spoofing (ONLY if settings.auth_mode == "dev")
    """
    org_slug = str(x_org_slug or "").strip()

    if authorization and str(authorization).lower().startswith("bearer "):
        claims = decode_access_token(str(authorization).split(" ", 1)[1].strip())
        org_slug = org_slug or str(claims.get("org") or "").strip()
        if not org_slug:
            raise HTTPException(status_code=401, detail="Missing X-Org-Slug (active org context).")
        return _principal_from_claims(db, org_slug=org_slug, claims=claims)

    if not org_slug:
        raise HTTPException(status_code=401, detail="Missing X-Org-Slug (active org context).")

    if settings.auth_mode == "dev":
        email = (request.headers.get(settings.dev_header_user_email) or "").strip().lower()
        role_hint = (request.headers.get(settings.dev_header_user_role) or "owner").strip().lower()
        if not email:
            raise HTTPException(status_code=401, detail="Missing X-User-Email for dev auth")
        return _dev_principal(db, org_slug=org_slug, email=email, role_hint=role_hint)

    raise HTTPException(status_code=401, detail="Not authenticated")


def require_manager(p: Principal = Depends(get_principal)) -> Principal:
    _require_role(p, "manager")
    return p
