import argparse
import logging
from pathlib import Path

import pandas as pd
from rich.console import Console
from rich.table import Table

from nodepower.common.log import info, ok, setup_logging, warn
from nodepower.config import ABS_ENERGY_IN_PLATFORM, IDLE_ENERGY_IN_PLATFORM, load_config
from nodepower.energy import EnergyIntegrator, SourceAggregator
from nodepower.models import ModelSelector
from nodepower.stats import NodeStats


def main(args):
    cfg = load_config(args.config)
    if args.model:
        cfg["models"]["node_platform_power"]["init_url"] = args.model
    setup_logging(cfg["logging"].get("dir"), getattr(logging, str(cfg["logging"]["level"]).upper(), logging.INFO))

    usage_path = Path(args.usage)
    if not usage_path.exists():
        raise SystemExit(f"Missing usage CSV at {usage_path}. Run scripts/00_make_demo_model.py first.")
    usage = pd.read_csv(usage_path)
    feature_cols = [c for c in usage.columns if c != "interval"]

    selector = ModelSelector(cfg)
    meta_names = ["cpu_architecture"] if args.cpu_arch else []
    meta_values = [args.cpu_arch] if args.cpu_arch else []
    selector.create_model(feature_cols, meta_names, meta_values)
    if not selector.is_enabled():
        warn("Platform power estimator is disabled; counters will stay at zero.")

    period = selector.sample_period_sec
    aggregator = SourceAggregator(EnergyIntegrator(selector))
    stats = NodeStats(feature_cols, sample_period_sec=period)

    info(f"Replaying {len(usage)} intervals of {period}s ...")
    for _, row in usage.iterrows():
        for col in feature_cols:
            stats.set_resource_usage(col, float(row[col]))
        aggregator.apply_idle_energy(stats)
        aggregator.apply_absolute_energy(stats)

    table = Table(title="Platform energy (J)")
    table.add_column("source")
    table.add_column("idle", justify="right")
    table.add_column("absolute", justify="right")
    idle = stats.energy_usage[IDLE_ENERGY_IN_PLATFORM]
    absolute = stats.energy_usage[ABS_ENERGY_IN_PLATFORM]
    for source in sorted(set(idle.keys()) | set(absolute.keys())):
        table.add_row(
            source,
            str(idle[source].aggr if source in idle else 0),
            str(absolute[source].aggr if source in absolute else 0),
        )
    Console().print(table)
    ok("Replay done.")


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", type=str, default="configs/config.yaml",
                    help="Settings file (default: configs/config.yaml)")
    ap.add_argument("--usage", type=str, default="results/usage.csv",
                    help="Resource usage CSV, one row per interval")
    ap.add_argument("--model", type=str, default=None,
                    help="Override the model artifact location (path or URL)")
    ap.add_argument("--cpu-arch", type=str, default="Sapphire Rapids",
                    help="System metadata value for cpu_architecture")
    args = ap.parse_args()
    main(args)
