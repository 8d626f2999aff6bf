# backend/app/cli/__main__.py
from __future__ import annotations

import argparse
import json
from typing import Optional, Sequence

from app.cli.seed_demo import seed_demo
from app.db import SessionLocal, init_db
from app.domain.intervals import month_window_from_label
from app.logging_config import configure_logging
from app.services.monthly_metrics import compute_monthly_metrics, compute_this_month_metrics


def _month_label(raw: str) -> str:
    try:
        month_window_from_label(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))
    return raw.strip()


def _cmd_seed_demo(args: argparse.Namespace) -> dict:
    out = seed_demo(
        org_slug=args.org_slug,
        org_name=args.org_name,
        user_email=args.user_email,
        user_name=args.user_name,
        month=args.month,
        create_sample_property=(not args.no_sample_property),
    )
    return {
        "ok": True,
        "org_slug": out.org_slug,
        "user_email": out.user_email,
        "sample_property_id": out.property_id,
        "month": out.month,
    }


def _cmd_monthly_metrics(args: argparse.Namespace) -> dict:
    db = SessionLocal()
    try:
        if args.month:
            window = month_window_from_label(args.month)
            report = compute_monthly_metrics(
                db, property_id=args.property_id, month_start=window.month_start, month_end=window.month_end
            )
        else:
            report = compute_this_month_metrics(db, property_id=args.property_id)
        return {"property_id": args.property_id, "monthly_metrics": report.as_dict()}
    finally:
        db.close()


def _cmd_init_db(args: argparse.Namespace) -> dict:
    init_db()
    return {"ok": True}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="python -m app.cli")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("init-db", help="create tables")
    s.set_defaults(func=_cmd_init_db)

    s = sub.add_parser("seed-demo", help="seed a demo org + PG with cycles and payments")
    s.add_argument("--org-slug", default="demo")
    s.add_argument("--org-name", default="demo")
    s.add_argument("--user-email", default="owner@demo.local")
    s.add_argument("--user-name", default="Owner")
    s.add_argument("--month", type=_month_label, default=None, help="YYYY-MM (default: current UTC month)")
    s.add_argument("--no-sample-property", action="store_true")
    s.set_defaults(func=_cmd_seed_demo)

    s = sub.add_parser("monthly-metrics", help="print cash vs accrual metrics as JSON")
    s.add_argument("--property-id", type=int, required=True)
    s.add_argument("--month", type=_month_label, default=None, help="YYYY-MM (default: current UTC month)")
    s.set_defaults(func=_cmd_monthly_metrics)

    return p


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging("WARNING")
    print(json.dumps(args.func(args), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
