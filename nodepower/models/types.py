from dataclasses import dataclass, field
from enum import Enum
from typing import List

PLATFORM_ENERGY_SOURCE = "platform"


class ModelType(str, Enum):
    LINEAR_REGRESSION = "linear_regression"
    SKLEARN = "sklearn"


class ModelOutputType(str, Enum):
    ABS_POWER = "AbsPower"
    DYN_POWER = "DynPower"

    def __str__(self):
        return self.value


class PowerMode(Enum):
    IDLE = "idle"
    ABSOLUTE = "absolute"

    @classmethod
    def from_flag(cls, is_idle: bool) -> "PowerMode":
        return cls.IDLE if is_idle else cls.ABSOLUTE

    @property
    def is_idle(self) -> bool:
        return self is PowerMode.IDLE


class EstimatorState(Enum):
    UNINITIALIZED = "uninitialized"
    DISABLED = "disabled"
    ENABLED = "enabled"


@dataclass
class ModelConfig:
    model_type: ModelType
    output_type: ModelOutputType
    model_name: str = ""
    init_model_url: str = ""
    init_model_filepath: str = ""
    node_feature_names: List[str] = field(default_factory=list)
    system_meta_feature_names: List[str] = field(default_factory=list)
    system_meta_feature_values: List[str] = field(default_factory=list)
    is_node_power_model: bool = False

    @property
    def model_location(self) -> str:
        return self.init_model_url or self.init_model_filepath
