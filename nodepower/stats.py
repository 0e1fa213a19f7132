"""
Node metrics containers.

Resource usage is stored per feature name and energy per energy bucket; both
are ``StatMap`` collections of per-key counters with a delta part (current
interval, cleared on export) and an aggregated part (lifetime total).
"""

from typing import Dict, Iterable, List, Optional

from nodepower.config import ABS_ENERGY_IN_PLATFORM, IDLE_ENERGY_IN_PLATFORM


class StatValue:
    def __init__(self):
        self.delta = 0
        self.aggr = 0

    def add_delta(self, value):
        if value < 0:
            raise ValueError(f"delta must be non-negative, got {value}")
        self.delta += value
        self.aggr += value

    def set_delta(self, value):
        if value < 0:
            raise ValueError(f"delta must be non-negative, got {value}")
        self.delta = value
        self.aggr += value

    def reset_delta(self):
        self.delta = 0

    def __repr__(self):
        return f"StatValue(delta={self.delta}, aggr={self.aggr})"


class StatMap:
    """Keyed counters, e.g. one per socket or per energy source."""

    def __init__(self):
        self.stats: Dict[str, StatValue] = {}

    def _get(self, key: str) -> StatValue:
        if key not in self.stats:
            self.stats[key] = StatValue()
        return self.stats[key]

    def add_delta_stat(self, key: str, value):
        """Accumulate ``value`` onto ``key``; repeated calls add up."""
        self._get(key).add_delta(value)

    def set_delta_stat(self, key: str, value):
        """Record ``value`` as this interval's delta for ``key``."""
        self._get(key).set_delta(value)

    def sum_all_delta_values(self):
        return sum(v.delta for v in self.stats.values())

    def sum_all_aggr_values(self):
        return sum(v.aggr for v in self.stats.values())

    def reset_delta_values(self):
        for v in self.stats.values():
            v.reset_delta()

    def __getitem__(self, key: str) -> StatValue:
        return self.stats[key]

    def __contains__(self, key: str) -> bool:
        return key in self.stats

    def __len__(self):
        return len(self.stats)

    def keys(self):
        return self.stats.keys()

    def items(self):
        return self.stats.items()

    def __repr__(self):
        return f"StatMap({self.stats!r})"


class NodeStats:
    """Per-node resource usage and energy buckets for one sampling loop."""

    def __init__(self, resource_names: Iterable[str] = (),
                 energy_keys: Iterable[str] = (ABS_ENERGY_IN_PLATFORM, IDLE_ENERGY_IN_PLATFORM),
                 sample_period_sec: int = 3):
        if sample_period_sec <= 0:
            raise ValueError(f"sample_period_sec must be positive, got {sample_period_sec}")
        self.sample_period_sec = sample_period_sec
        self.resource_usage: Dict[str, StatMap] = {name: StatMap() for name in resource_names}
        self.energy_usage: Dict[str, StatMap] = {key: StatMap() for key in energy_keys}

    def set_resource_usage(self, name: str, value, key: str = "all"):
        if name not in self.resource_usage:
            self.resource_usage[name] = StatMap()
        self.resource_usage[name].set_delta_stat(key, value)

    def to_estimator_values(self, feature_names: List[str], normalize: bool = True) -> List[float]:
        """
        Build one feature row in ``feature_names`` order.

        Args:
            feature_names: Feature order expected by the estimator
            normalize: Divide each delta by the sample period (per-second rate)

        Returns:
            List of floats, one per feature; unknown features read as 0.0
        """
        row = []
        for name in feature_names:
            usage: Optional[StatMap] = self.resource_usage.get(name)
            value = float(usage.sum_all_delta_values()) if usage is not None else 0.0
            if normalize:
                value = value / float(self.sample_period_sec)
            row.append(value)
        return row

    def reset_delta_values(self):
        for usage in self.resource_usage.values():
            usage.reset_delta_values()
        for energy in self.energy_usage.values():
            energy.reset_delta_values()
