import argparse
import random
from pathlib import Path

import numpy as np
import pandas as pd

from nodepower.common.io import ensure_dir, write_json
from nodepower.common.log import info, ok

FEATURES = ["cpu_cycles", "cpu_instructions", "cache_miss", "bpf_cpu_time_ms"]


def demo_artifact(num_sockets: int) -> dict:
    # Fixed weights; per-second rates are scaled before the dot product
    domains = {}
    for s in range(num_sockets):
        domains[str(s)] = {
            "intercept": 95.0 + 5.0 * s,
            "coefficients": {
                "cpu_cycles": 12.0,
                "cpu_instructions": 6.0,
                "cache_miss": 2.5,
                "bpf_cpu_time_ms": 8.0,
            },
            "categorical_weights": {"cpu_architecture": {"Sapphire Rapids": 10.0, "Ice Lake": 6.0}},
        }
    return {
        "model_name": "LinearRegressionTrainer",
        "output_type": "AbsPower",
        "energy_source": "platform",
        "features": FEATURES,
        "scaler": {
            "mean": [2.0e9, 3.0e9, 1.0e6, 1500.0],
            "scale": [1.0e9, 1.5e9, 5.0e5, 800.0],
        },
        "domains": domains,
    }


def main(args):
    rng = random.Random(args.seed)
    np_rng = np.random.RandomState(args.seed)

    model_path = Path(args.model_out)
    write_json(demo_artifact(args.sockets), model_path)

    rows = []
    for i in range(args.num_intervals):
        load = rng.choice([0.05, 0.2, 0.5, 0.8, 1.0])
        period = args.sample_period
        rows.append({
            "interval": i,
            "cpu_cycles": int(load * 4.0e9 * period * (1 + 0.05 * np_rng.randn())),
            "cpu_instructions": int(load * 6.0e9 * period * (1 + 0.05 * np_rng.randn())),
            "cache_miss": int(load * 2.0e6 * period),
            "bpf_cpu_time_ms": int(load * 3000 * period),
        })
    usage_path = Path(args.usage_out)
    ensure_dir(usage_path.parent)
    pd.DataFrame(rows).to_csv(usage_path, index=False)

    info(f"Sockets: {args.sockets}, intervals: {args.num_intervals}")
    ok(f"Demo model → {model_path}, usage → {usage_path}")


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--model-out", type=str, default="results/models/platform_linear.json",
                    help="Where to write the linear model artifact")
    ap.add_argument("--usage-out", type=str, default="results/usage.csv",
                    help="Where to write the synthetic resource usage")
    ap.add_argument("--sockets", type=int, default=2, help="Number of power domains")
    ap.add_argument("--num-intervals", type=int, default=20, help="How many sampling intervals")
    ap.add_argument("--sample-period", type=int, default=3, help="Seconds per interval")
    ap.add_argument("--seed", type=int, default=42, help="Random seed for reproducibility")
    args = ap.parse_args()
    main(args)
