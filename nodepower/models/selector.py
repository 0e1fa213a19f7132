"""
Selection and lifecycle of the node platform power estimator.
"""

from typing import Any, Callable, Dict, List, Optional

from nodepower.common.log import get_logger
from nodepower.config import DEFAULTS, NODE_PLATFORM_POWER_KEY, get_default_power_model_url, merge_config
from nodepower.models.estimator import PowerEstimator
from nodepower.models.regressors import build_estimator
from nodepower.models.types import (
    PLATFORM_ENERGY_SOURCE,
    EstimatorState,
    ModelConfig,
    ModelOutputType,
    ModelType,
)
from nodepower.sensors.platform import is_system_collection_supported

logger = get_logger(__name__)


def create_power_model_config(power_key: str, cfg: Optional[Dict[str, Any]] = None) -> ModelConfig:
    """
    Build a model config from the settings of one power key.

    Args:
        power_key: Entry under ``models`` in the settings
        cfg: Settings dictionary (built-in defaults if None)

    Returns:
        ModelConfig without node features filled in
    """
    cfg = cfg or DEFAULTS
    model_cfg = cfg["models"].get(power_key)
    if model_cfg is None:
        raise KeyError(f"No model settings for {power_key}")
    return ModelConfig(
        model_type=ModelType(model_cfg.get("model_type", ModelType.LINEAR_REGRESSION.value)),
        output_type=ModelOutputType(model_cfg.get("output_type", ModelOutputType.ABS_POWER.value)),
        model_name=model_cfg.get("model_name") or "",
        init_model_url=model_cfg.get("init_url") or "",
    )


class ModelSelector:
    """
    Owns at most one platform power estimator.

    The estimator is built by ``create_model`` and never replaced; if building
    fails the selector stays disabled.
    """

    def __init__(self, cfg: Optional[Dict[str, Any]] = None,
                 estimator_factory: Callable[[ModelConfig], PowerEstimator] = build_estimator,
                 system_collection_supported: Callable[[], bool] = is_system_collection_supported):
        # Partial settings fall back to the built-in defaults
        self.cfg = merge_config(DEFAULTS, cfg or {})
        self.estimator_factory = estimator_factory
        self.system_collection_supported = system_collection_supported
        self.model_config: Optional[ModelConfig] = None
        self.estimator: Optional[PowerEstimator] = None
        self.state = EstimatorState.UNINITIALIZED

    @property
    def sample_period_sec(self) -> int:
        return int(self.cfg.get("sample_period_sec", DEFAULTS["sample_period_sec"]))

    def create_model(self, node_feature_names: List[str],
                     system_meta_feature_names: List[str],
                     system_meta_feature_values: List[str]) -> None:
        if self.state is not EstimatorState.UNINITIALIZED:
            logger.warning("Node Platform Power Model already %s, ignoring new request", self.state.value)
            return

        if self.system_collection_supported():
            logger.info("Platform power collection is supported on this node; "
                        "the Node Platform Power Model is created anyway")

        try:
            model_config = create_power_model_config(NODE_PLATFORM_POWER_KEY, self.cfg)
            if not model_config.init_model_url:
                model_config.init_model_filepath = get_default_power_model_url(
                    model_config.output_type.value, PLATFORM_ENERGY_SOURCE, self.cfg,
                    model_name=model_config.model_name or None,
                )
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Failed to build Node Platform Power Model config: %s", e)
            self.state = EstimatorState.DISABLED
            return

        model_config.node_feature_names = list(node_feature_names)
        model_config.system_meta_feature_names = list(system_meta_feature_names)
        model_config.system_meta_feature_values = list(system_meta_feature_values)
        model_config.is_node_power_model = True
        self.model_config = model_config

        try:
            self.estimator = self.estimator_factory(model_config)
        except Exception as e:
            logger.error("Failed to create %s/%s Model to estimate Node Platform Power: %s",
                         model_config.model_type.value, model_config.output_type.value, e)
            self.estimator = None
            self.state = EstimatorState.DISABLED
            return

        self.state = EstimatorState.ENABLED if self.estimator.is_ready() else EstimatorState.DISABLED
        logger.info("Using the %s/%s Model to estimate Node Platform Power",
                    model_config.model_type.value, model_config.output_type.value)

    def is_enabled(self) -> bool:
        if self.estimator is None:
            return False
        return self.estimator.is_ready()
