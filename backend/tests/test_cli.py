# backend/tests/test_cli.py
from __future__ import annotations

import json

import pytest

from app.cli.__main__ import main
from app.cli.seed_demo import seed_demo


def test_seed_demo_then_monthly_metrics(capsys):
    out = seed_demo(org_slug="demo", month="2026-03")
    assert out.property_id is not None

    main(["monthly-metrics", "--property-id", str(out.property_id), "--month", "2026-03"])
    body = json.loads(capsys.readouterr().out)
    m = body["monthly_metrics"]

    # calendar tenant 9000 + mid-month tenant 2000 + 5000
    assert m["rent_earned"] == 16000.0
    assert m["cash_received"] == 13000.0
    assert m["advance_paid"] == 7500.0
    assert m["expenses_paid"] == 1250.0
    assert len(m["rent_earned_breakdown"]["cycles"]) == 2


def test_seed_demo_is_idempotent_for_org_and_user():
    a = seed_demo(org_slug="demo", month="2026-03", create_sample_property=False)
    b = seed_demo(org_slug="demo", month="2026-03", create_sample_property=False)
    assert a.org_slug == b.org_slug == "demo"
    assert a.property_id is None


@pytest.mark.parametrize("cmd", [["monthly-metrics", "--property-id", "1"], ["seed-demo"]])
@pytest.mark.parametrize("bad", ["2026-13", "march", "9999-12"])
def test_bad_month_is_reported_by_argparse(cmd, bad, capsys):
    with pytest.raises(SystemExit) as exc:
        main(cmd + ["--month", bad])
    assert exc.value.code == 2
    err = capsys.readouterr().err
    assert "--month" in err
    assert bad in err


def test_seed_demo_rejects_bad_month():
    with pytest.raises(ValueError):
        seed_demo(org_slug="demo", month="2026-3-1")
