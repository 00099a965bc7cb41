from __future__ import annotations

import csv
import json
from pathlib import Path

from kingdomengine.report import SimulationReport


def export_csv(report: SimulationReport, path: str | Path) -> None:
    """Export simulation data as CSV files.

    Creates three files:
      - {path}_resources.csv
      - {path}_purchases.csv
      - {path}_achievements.csv
    """
    base = str(path)

    with open(f"{base}_resources.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["time", "resource", "value", "rate", "lifetime"])
        for s in report.resource_snapshots:
            writer.writerow([s.time, s.resource, s.value, s.rate, s.lifetime])

    with open(f"{base}_purchases.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["time", "kind", "key", "cost_json"])
        for p in report.purchases:
            writer.writerow([p.time, p.kind, p.key, json.dumps(p.cost_paid)])

    with open(f"{base}_achievements.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["time", "achievement_key", "level"])
        for a in report.achievements:
            writer.writerow([a.time, a.achievement_key, a.level])


def export_json(report: SimulationReport, path: str | Path) -> None:
    """Export the simulation summary as JSON."""
    data = {
        "game": report.game_name,
        "strategy": report.strategy_description,
        "outcome": report.outcome,
        "total_time": report.total_time,
        "clicks": report.clicks,
        "final_resources": report.final_resources,
        "final_buildings": report.final_buildings,
        "technologies": report.technologies,
        "achievement_times": report.achievement_times,
        "purchase_count": len(report.purchases),
        "purchases_per_minute": report.purchases_per_minute,
        "max_purchase_gap": report.max_purchase_gap,
        "mean_purchase_gap": report.mean_purchase_gap,
        "events": [
            {"time": e.time, "event_key": e.event_key, "choice_index": e.choice_index}
            for e in report.events
        ],
        "prestiges": [
            {"time": p.time, "gain": p.gain, "run_duration": p.run_duration}
            for p in report.prestiges
        ],
        "purchases": [
            {"time": p.time, "kind": p.kind, "key": p.key, "cost_paid": p.cost_paid}
            for p in report.purchases
        ],
    }
    with open(str(path), "w") as f:
        json.dump(data, f, indent=2)
