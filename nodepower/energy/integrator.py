from typing import Dict, Union

from nodepower.common.log import get_logger
from nodepower.models.selector import ModelSelector
from nodepower.models.types import PowerMode
from nodepower.stats import NodeStats

logger = get_logger(__name__)

ESTIMATOR_SOURCE_ID = "estimator"


def source_id(domain: int) -> str:
    return f"{ESTIMATOR_SOURCE_ID}{domain}"


class EnergyIntegrator:
    """
    Runs one estimation round against the selector's estimator.

    Callers sharing an estimator across threads must hold a lock around
    ``get_platform_power``: the reset, add and predict steps use one buffer.
    """

    def __init__(self, selector: ModelSelector):
        self.selector = selector

    def get_platform_power(self, metrics: NodeStats, mode: Union[PowerMode, bool]) -> Dict[str, int]:
        """
        Estimate platform power per source.

        Args:
            metrics: Node metrics providing the feature row
            mode: PowerMode, or a bool where True means idle

        Returns:
            Mapping of source id (``estimator<N>``) to Watts; empty on failure
        """
        if isinstance(mode, bool):
            mode = PowerMode.from_flag(mode)
        platform_power: Dict[str, int] = {}

        estimator = self.selector.estimator
        if estimator is None:
            logger.error("Node Platform Power Model was not created")
            return platform_power

        try:
            if mode is PowerMode.ABSOLUTE:
                # New round: the idle path must not consume a sample
                estimator.reset_sample_buffer()
                feature_values = metrics.to_estimator_values(estimator.feature_names(), True)
                estimator.add_feature_row(feature_values)
            powers = estimator.predict(mode.is_idle)
        except Exception as e:
            logger.error("Failed to get node platform %s power: %s", mode.value, e)
            return platform_power

        for domain, power in powers.items():
            platform_power[source_id(domain)] = power
        return platform_power
