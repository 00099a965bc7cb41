from __future__ import annotations

from kingdomengine.report import SimulationReport


def _fmt_amount(value: float) -> str:
    if abs(value) >= 1e6:
        return f"{value:.3e}"
    return f"{value:,.1f}"


def format_text_report(report: SimulationReport) -> str:
    """Format a simulation report for console output."""
    lines: list[str] = []

    title = f" {report.game_name or 'Kingdom'} Simulation Report "
    lines.append("=" * 30 + title + "=" * 30)
    lines.append(f"Strategy: {report.strategy_description}")
    lines.append(f"Result: {report.outcome} at {report.total_time:.1f}s")
    lines.append(f"Clicks: {report.clicks}")
    lines.append("")

    lines.append("RESOURCES:")
    for key, value in report.final_resources.items():
        lines.append(f"  {key:.<30s} {_fmt_amount(value)}")
    lines.append("")

    built = {k: v for k, v in report.final_buildings.items() if v > 0}
    if built:
        lines.append("BUILDINGS:")
        for key, count in built.items():
            lines.append(f"  {key:.<30s} {count}")
        lines.append("")

    if report.technologies:
        lines.append(f"TECHNOLOGIES: {', '.join(report.technologies)}")
        lines.append("")

    if report.achievements:
        lines.append("ACHIEVEMENTS:")
        for a in report.achievements:
            suffix = f" (level {a.level})" if a.level > 1 else ""
            lines.append(f"  * {a.achievement_key + suffix:.<30s} {a.time:.1f}s")
        lines.append("")

    lines.append("PURCHASES:")
    lines.append(f"  Total: {len(report.purchases)}")
    lines.append(f"  Rate: {report.purchases_per_minute:.1f}/min")
    lines.append(f"  Max gap: {report.max_purchase_gap:.1f}s")
    lines.append(f"  Mean gap: {report.mean_purchase_gap:.1f}s")

    if report.events:
        lines.append("")
        lines.append(f"EVENTS: {len(report.events)} resolved")

    if report.prestiges:
        lines.append("")
        lines.append("PRESTIGES:")
        for p in report.prestiges:
            lines.append(f"  +{p.gain} at {p.time:.1f}s (run {p.run_duration:.1f}s)")

    return "\n".join(lines)
