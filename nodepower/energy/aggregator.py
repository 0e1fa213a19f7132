from nodepower.common.log import get_logger
from nodepower.config import ABS_ENERGY_IN_PLATFORM, IDLE_ENERGY_IN_PLATFORM
from nodepower.energy.integrator import EnergyIntegrator
from nodepower.models.types import PowerMode
from nodepower.stats import NodeStats, StatMap

logger = get_logger(__name__)


class SourceAggregator:
    """
    Folds estimated platform power into the node's energy buckets.

    Energy is ``power * metrics.sample_period_sec``, the same period used to
    normalize the feature row.
    """

    def __init__(self, integrator: EnergyIntegrator):
        self.integrator = integrator

    def _apply(self, metrics: NodeStats, mode: PowerMode, energy_key: str):
        platform_power = self.integrator.get_platform_power(metrics, mode)
        invalid = {s: p for s, p in platform_power.items() if not isinstance(p, int) or p < 0}
        if invalid:
            # All sources or none
            logger.error("Discarding %s platform power with invalid values: %s", mode.value, invalid)
            return
        bucket = metrics.energy_usage.setdefault(energy_key, StatMap())
        for source, power in platform_power.items():
            bucket.add_delta_stat(source, power * metrics.sample_period_sec)

    def apply_absolute_energy(self, metrics: NodeStats):
        self._apply(metrics, PowerMode.ABSOLUTE, ABS_ENERGY_IN_PLATFORM)

    def apply_idle_energy(self, metrics: NodeStats):
        self._apply(metrics, PowerMode.IDLE, IDLE_ENERGY_IN_PLATFORM)
