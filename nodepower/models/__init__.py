"""Platform power estimators and their selection."""

from .estimator import EstimatorError, ModelConstructionError, PowerEstimator, PredictionError
from .regressors import LinearRegressor, SklearnRegressor, build_estimator
from .selector import ModelSelector, create_power_model_config
from .types import EstimatorState, ModelConfig, ModelOutputType, ModelType, PowerMode

__all__ = [
    'EstimatorError', 'ModelConstructionError', 'PowerEstimator', 'PredictionError',
    'LinearRegressor', 'SklearnRegressor', 'build_estimator',
    'ModelSelector', 'create_power_model_config',
    'EstimatorState', 'ModelConfig', 'ModelOutputType', 'ModelType', 'PowerMode',
]
