from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

from kingdomengine import save
from kingdomengine.definition import GameConfig
from kingdomengine.economy import get_per_sec
from kingdomengine.formatting import format_text_report
from kingdomengine.prestige import prestige_gain
from kingdomengine.simulation import Simulation
from kingdomengine.strategy import ClickProfile, GreedyCheapest, Idle, Strategy


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kingdomengine",
        description="Medieval kingdom idle game simulation CLI",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    sim = sub.add_parser("simulate", help="Run a headless simulation")
    sim.add_argument("game_module", help="Python module with define_game()")
    sim.add_argument(
        "--strategy",
        default="greedy_cheapest",
        choices=["greedy_cheapest", "idle"],
        help="Strategy to use (default: greedy_cheapest)",
    )
    sim.add_argument("--cps", type=float, default=0.0, help="Clicks per second")
    sim.add_argument(
        "--tick-resolution", type=float, default=1.0, help="Seconds per tick"
    )
    sim.add_argument("--seed", type=int, default=None, help="Random seed")
    sim.add_argument(
        "--duration", type=float, default=3600, help="Simulated time (s)"
    )
    sim.add_argument(
        "--prestige-at",
        type=int,
        default=None,
        help="Prestige once the gain reaches this amount",
    )
    sim.add_argument("--export-csv", default=None, help="CSV export path prefix")
    sim.add_argument("--export-json", default=None, help="JSON export path")
    sim.add_argument("--plot", default=None, help="Plot output path (PNG)")

    insp = sub.add_parser("inspect", help="Summarise a save file")
    insp.add_argument("game_module", help="Python module with define_game()")
    insp.add_argument("save_path", help="JSON save file or base64 export")

    return parser


def load_game(module_path: str) -> GameConfig:
    """Import module and call define_game()."""
    mod = importlib.import_module(module_path)
    if not hasattr(mod, "define_game"):
        print(f"Error: module {module_path!r} has no define_game() function")
        sys.exit(1)
    return mod.define_game()


def build_strategy(name: str, cps: float, prestige_at: int | None = None) -> Strategy:
    click_profile = ClickProfile(cps=cps) if cps > 0 else None
    if name == "idle":
        return Idle(click_profile=click_profile)
    return GreedyCheapest(click_profile=click_profile, prestige_at=prestige_at)


def _run_simulate(args: argparse.Namespace) -> None:
    config = load_game(args.game_module)
    strategy = build_strategy(args.strategy, args.cps, args.prestige_at)
    sim = Simulation(
        config=config,
        strategy=strategy,
        duration=args.duration,
        tick_resolution=args.tick_resolution,
        seed=args.seed,
    )
    report = sim.run()
    print(format_text_report(report))

    if args.export_csv:
        from kingdomengine.export import export_csv
        export_csv(report, args.export_csv)
        print(f"\nCSV exported to {args.export_csv}_*.csv")

    if args.export_json:
        from kingdomengine.export import export_json
        export_json(report, args.export_json)
        print(f"\nJSON exported to {args.export_json}")

    if args.plot:
        from kingdomengine.visualization import plot_simulation
        plot_simulation(report, args.plot)
        print(f"\nPlot saved to {args.plot}")


def _run_inspect(args: argparse.Namespace) -> None:
    config = load_game(args.game_module)
    path = Path(args.save_path)
    if not path.exists():
        print(f"Error: no such file {str(path)!r}")
        sys.exit(1)
    text = path.read_text().strip()
    if text.startswith("{"):
        state = save.deserialize(config, text)
    else:
        state = save.import_save(config, text)
    if state is None:
        print("Error: save is corrupt or from an incompatible version")
        sys.exit(1)

    rates = get_per_sec(config, state)
    print(f"{config.name} save, version {state.version}")
    print(f"Clock: {state.t:.1f}s  Play time: {state.play_time:.1f}s  Prestiges: {state.prestige_count}")
    print("RESOURCES:")
    for key, value in state.resources.items():
        print(f"  {key:.<30s} {value:,.1f} ({rates.get(key, 0.0):+.2f}/s)")
    built = {k: v for k, v in state.buildings.items() if v > 0}
    if built:
        print("BUILDINGS:")
        for key, count in built.items():
            print(f"  {key:.<30s} {count}")
    print(f"Achievements: {state.achievements.stats.unlocked_count}"
          f" unlocked, {state.achievements.total_points} points")
    print(f"Prestige available: {prestige_gain(config, state)}")


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "simulate":
        _run_simulate(args)
    elif args.command == "inspect":
        _run_inspect(args)


if __name__ == "__main__":
    main()
