from __future__ import annotations

from kingdomengine.report import SimulationReport


def plot_simulation(
    report: SimulationReport,
    output_path: str | None = None,
) -> None:
    """Generate a 4-panel matplotlib visualization of simulation results.

    Requires matplotlib (optional dependency).
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError(
            "matplotlib is required for visualization. "
            "Install with: pip install kingdomengine[viz]"
        )

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle(f"{report.game_name}: {report.strategy_description}", fontsize=14)

    # 1. Resource balances over time (log scale)
    ax1 = axes[0][0]
    resources = sorted({s.resource for s in report.resource_snapshots})
    for key in resources:
        series = report.resource_series(key)
        if series:
            times, values = zip(*series)
            ax1.plot(times, [max(v, 1e-10) for v in values], label=key)
    ax1.set_yscale("log")
    ax1.set_xlabel("Time (s)")
    ax1.set_ylabel("Amount")
    ax1.set_title("Resources")
    ax1.legend(fontsize=8)
    ax1.grid(True, alpha=0.3)

    # 2. Net rates over time
    ax2 = axes[0][1]
    for key in resources:
        series = report.rate_series(key)
        if series:
            times, rates = zip(*series)
            if any(r != 0 for r in rates):
                ax2.plot(times, rates, label=key)
    ax2.axhline(0, color="black", linewidth=0.5)
    ax2.set_xlabel("Time (s)")
    ax2.set_ylabel("Rate (/s)")
    ax2.set_title("Net Production")
    ax2.legend(fontsize=8)
    ax2.grid(True, alpha=0.3)

    # 3. Purchase timeline
    ax3 = axes[1][0]
    if report.purchases:
        times = [p.time for p in report.purchases]
        keys = [p.key for p in report.purchases]
        key_types = sorted(set(keys))
        y_map = {k: i for i, k in enumerate(key_types)}
        ax3.scatter(times, [y_map[k] for k in keys], s=10, alpha=0.6)
        ax3.set_yticks(range(len(key_types)))
        ax3.set_yticklabels(key_types, fontsize=7)
        ax3.set_xlabel("Time (s)")
        ax3.set_title("Purchase Timeline")
        ax3.grid(True, alpha=0.3)

    # 4. Achievement unlock times
    ax4 = axes[1][1]
    if report.achievements:
        ax4.step(
            [a.time for a in report.achievements],
            range(1, len(report.achievements) + 1),
            where="post",
        )
        ax4.set_xlabel("Time (s)")
        ax4.set_ylabel("Unlocks")
        ax4.set_title("Achievements")
        ax4.grid(True, alpha=0.3)

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150)
    else:
        plt.show()
