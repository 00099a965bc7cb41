"""Tests for report, formatting and export modules."""
import csv
import json

import pytest

from kingdomengine.export import export_csv, export_json
from kingdomengine.formatting import format_text_report
from kingdomengine.report import MetricsCollector, build_report
from kingdomengine.state import GameState


def _collector() -> MetricsCollector:
    c = MetricsCollector(snapshot_interval=10.0)
    state = GameState(resources={"gold": 5.0}, lifetime={"gold": 8.0})
    for t in (0.0, 5.0, 10.0, 15.0, 20.0):
        c.record_tick(t, state, {"gold": 1.5})
    c.record_purchase(4.0, "building", "farm", {"gold": 10})
    c.record_purchase(10.0, "technology", "agriculture", {"gold": 50})
    c.record_purchase(30.0, "building", "farm", {"gold": 12})
    c.record_achievement(10.0, "firstFarm", 1)
    c.record_achievement(25.0, "hoarder", 1)
    c.record_achievement(40.0, "hoarder", 2)
    c.record_event(12.0, "merchant", 0)
    c.record_prestige(50.0, 3, 50.0)
    return c


def _report():
    state = GameState(
        resources={"gold": 1234.5, "prestige": 3.0},
        buildings={"farm": 2, "mine": 0},
        clicks=17,
    )
    return build_report(
        collector=_collector(),
        state=state,
        game_name="Medieval Kingdom",
        strategy_description="GreedyCheapest",
        outcome="Time limit reached",
        total_time=60.0,
        technologies=["agriculture"],
    )


def test_snapshots_respect_interval():
    c = _collector()
    assert [s.time for s in c.resource_snapshots] == [0.0, 10.0, 20.0]
    assert c.resource_snapshots[0].rate == 1.5
    assert c.resource_snapshots[0].lifetime == 8.0


def test_derived_metrics():
    report = _report()
    assert report.purchase_gaps == [4.0, 6.0, 20.0]
    assert report.max_purchase_gap == 20.0
    assert report.mean_purchase_gap == pytest.approx(10.0)
    assert report.purchases_per_minute == pytest.approx(3.0)
    assert report.achievement_time("hoarder") == 25.0
    assert report.achievement_time("nope") is None
    assert report.clicks == 17
    assert report.rate_series("gold") == [(0.0, 1.5), (10.0, 1.5), (20.0, 1.5)]


def test_empty_collector():
    report = build_report(MetricsCollector(), GameState(), "X", "Idle", "Time limit reached", 0.0, [])
    assert report.max_purchase_gap == 0.0
    assert report.purchases_per_minute == 0.0


def test_text_report_sections():
    text = format_text_report(_report())
    assert "Medieval Kingdom Simulation Report" in text
    assert "Strategy: GreedyCheapest" in text
    assert "Result: Time limit reached at 60.0s" in text
    assert "RESOURCES:" in text
    assert "1,234.5" in text
    assert "BUILDINGS:" in text
    assert "mine" not in text.split("BUILDINGS:")[1].split("TECHNOLOGIES")[0]
    assert "TECHNOLOGIES: agriculture" in text
    assert "hoarder (level 2)" in text
    assert "Total: 3" in text
    assert "EVENTS: 1 resolved" in text
    assert "+3 at 50.0s (run 50.0s)" in text


def test_export_csv(tmp_path):
    base = tmp_path / "run"
    export_csv(_report(), base)
    with open(f"{base}_resources.csv") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["time", "resource", "value", "rate", "lifetime"]
    assert len(rows) == 4
    with open(f"{base}_purchases.csv") as f:
        rows = list(csv.DictReader(f))
    assert json.loads(rows[1]["cost_json"]) == {"gold": 50}
    with open(f"{base}_achievements.csv") as f:
        assert len(list(csv.reader(f))) == 4


def test_export_json(tmp_path):
    path = tmp_path / "run.json"
    export_json(_report(), path)
    data = json.loads(path.read_text())
    assert data["game"] == "Medieval Kingdom"
    assert data["purchase_count"] == 3
    assert data["final_buildings"] == {"farm": 2, "mine": 0}
    assert data["events"] == [{"time": 12.0, "event_key": "merchant", "choice_index": 0}]
    assert data["prestiges"][0]["gain"] == 3
