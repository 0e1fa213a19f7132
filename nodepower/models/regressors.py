from abc import abstractmethod
from typing import Dict, List, Optional, Sequence

import numpy as np

from nodepower.common.io import load_joblib_artifact, load_json_artifact
from nodepower.common.log import get_logger
from nodepower.models.estimator import ModelConstructionError, PowerEstimator, PredictionError
from nodepower.models.types import ModelConfig, ModelType

logger = get_logger(__name__)


# ----------------------------
# Helpers
# ----------------------------
def _system_meta(model_config: Optional[ModelConfig]) -> Dict[str, str]:
    if model_config is None:
        return {}
    return dict(zip(model_config.system_meta_feature_names, model_config.system_meta_feature_values))


def _warn_missing_features(model_features: List[str], model_config: Optional[ModelConfig]):
    if model_config is None or not model_config.node_feature_names:
        return
    missing = [f for f in model_features if f not in model_config.node_feature_names]
    if missing:
        logger.warning("Model features not collected on this node, they will read as 0: %s", missing)


def _to_watts(value: float) -> int:
    if not np.isfinite(value):
        raise PredictionError(f"non-finite power prediction: {value}")
    return int(round(max(float(value), 0.0)))


class _BufferedRegressor(PowerEstimator):
    """Row buffer and idle/absolute dispatch shared by the regressors."""

    def __init__(self, feature_names: Sequence[str], domains: Sequence[int]):
        if not domains:
            raise ModelConstructionError("model defines no power domains")
        self._feature_names = list(feature_names)
        self._domains = sorted(int(d) for d in domains)
        self._rows: List[List[float]] = []
        self._ready = True

    def reset_sample_buffer(self) -> None:
        self._rows = []

    def feature_names(self) -> List[str]:
        return list(self._feature_names)

    def add_feature_row(self, values: Sequence[float]) -> None:
        if len(values) != len(self._feature_names):
            raise ValueError(f"expected {len(self._feature_names)} feature values, got {len(values)}")
        self._rows.append([float(v) for v in values])

    def is_ready(self) -> bool:
        return self._ready

    @abstractmethod
    def _predict_domain(self, domain: int, X: np.ndarray) -> np.ndarray:
        """Raw predictions of one domain for each row of X."""

    def predict(self, is_idle: bool) -> Dict[int, int]:
        if not self._ready:
            raise PredictionError("estimator is not ready")
        if is_idle:
            # Baseline: no workload signal
            X = np.zeros((1, len(self._feature_names)), dtype=float)
        else:
            if not self._rows:
                raise PredictionError("no feature rows added since the last reset")
            X = np.asarray(self._rows, dtype=float)

        powers = {}
        for domain in self._domains:
            try:
                pred = np.asarray(self._predict_domain(domain, X), dtype=float).reshape(-1)
            except PredictionError:
                raise
            except Exception as e:
                raise PredictionError(f"domain {domain}: {e}") from e
            # Rows of one round describe the same node; average them
            powers[domain] = _to_watts(float(pred.mean()))
        return powers


# ----------------------------
# Backends
# ----------------------------
class LinearRegressor(_BufferedRegressor):
    """
    Linear model read from a JSON artifact:

        {
          "features": ["cpu_cycles", ...],
          "scaler": {"mean": [...], "scale": [...]},          # optional
          "domains": {
            "0": {"intercept": 90.0,
                  "coefficients": {"cpu_cycles": 1.2e-9, ...},  # or a list
                  "categorical_weights": {"cpu_architecture": {"Sapphire Rapids": 4.0}}}
          }
        }

    Categorical weights are resolved once against the node's system metadata
    and folded into each domain's intercept.
    """

    def __init__(self, artifact: dict, model_config: Optional[ModelConfig] = None):
        try:
            features = list(artifact["features"])
            domains_cfg = artifact["domains"]
        except (KeyError, TypeError) as e:
            raise ModelConstructionError(f"invalid linear model artifact: {e}") from e
        super().__init__(features, [int(d) for d in domains_cfg])

        n = len(features)
        self.scaler_mean = np.zeros(n)
        self.scaler_scale = np.ones(n)
        scaler = artifact.get("scaler")
        if scaler:
            self.scaler_mean = np.asarray(scaler["mean"], dtype=float)
            self.scaler_scale = np.asarray(scaler["scale"], dtype=float)
            if self.scaler_mean.shape != (n,) or self.scaler_scale.shape != (n,):
                raise ModelConstructionError("scaler size does not match feature count")
            self.scaler_scale[self.scaler_scale == 0] = 1.0  # Avoid division by zero

        meta = _system_meta(model_config)
        self.intercepts: Dict[int, float] = {}
        self.coefficients: Dict[int, np.ndarray] = {}
        for key, dcfg in domains_cfg.items():
            domain = int(key)
            coefs = dcfg.get("coefficients", {})
            if isinstance(coefs, dict):
                unknown = set(coefs) - set(features)
                if unknown:
                    raise ModelConstructionError(f"coefficients for unknown features: {sorted(unknown)}")
                coefs = [coefs.get(f, 0.0) for f in features]
            coefs = np.asarray(coefs, dtype=float)
            if coefs.shape != (n,):
                raise ModelConstructionError(f"domain {domain}: expected {n} coefficients, got {coefs.size}")
            offset = 0.0
            for meta_name, weights in dcfg.get("categorical_weights", {}).items():
                offset += float(weights.get(meta.get(meta_name, ""), 0.0))
            self.intercepts[domain] = float(dcfg.get("intercept", 0.0)) + offset
            self.coefficients[domain] = coefs

        _warn_missing_features(features, model_config)

    @classmethod
    def from_config(cls, model_config: ModelConfig) -> "LinearRegressor":
        location = model_config.model_location
        if not location:
            raise ModelConstructionError("no model location configured")
        try:
            artifact = load_json_artifact(location)
        except Exception as e:
            raise ModelConstructionError(f"failed to load {location}: {e}") from e
        return cls(artifact, model_config)

    def _predict_domain(self, domain: int, X: np.ndarray) -> np.ndarray:
        X_norm = (X - self.scaler_mean) / self.scaler_scale
        return X_norm @ self.coefficients[domain] + self.intercepts[domain]


class SklearnRegressor(_BufferedRegressor):
    """
    Fitted scikit-learn regressors read with joblib.

    The artifact is either a dict ``{"feature_names", "models": {domain: reg},
    "scaler"}`` or a bare regressor, which is used as domain 0 over the node's
    feature names.
    """

    def __init__(self, artifact, model_config: Optional[ModelConfig] = None):
        if isinstance(artifact, dict):
            features = artifact.get("feature_names")
            models = artifact.get("models") or {}
            scaler = artifact.get("scaler")
        else:
            features = None
            models = {0: artifact}
            scaler = None
        if features is None and model_config is not None:
            features = model_config.node_feature_names
        if not features:
            raise ModelConstructionError("sklearn artifact has no feature names")
        for domain, reg in models.items():
            if not hasattr(reg, "predict"):
                raise ModelConstructionError(f"domain {domain}: object has no predict()")
        super().__init__(features, [int(d) for d in models])
        self.models = {int(d): reg for d, reg in models.items()}
        self.scaler = scaler
        _warn_missing_features(self._feature_names, model_config)

    @classmethod
    def from_config(cls, model_config: ModelConfig) -> "SklearnRegressor":
        location = model_config.model_location
        if not location:
            raise ModelConstructionError("no model location configured")
        try:
            artifact = load_joblib_artifact(location)
        except Exception as e:
            raise ModelConstructionError(f"failed to load {location}: {e}") from e
        return cls(artifact, model_config)

    def _predict_domain(self, domain: int, X: np.ndarray) -> np.ndarray:
        if self.scaler is not None:
            X = self.scaler.transform(X)
        return self.models[domain].predict(X)


_BACKENDS = {
    ModelType.LINEAR_REGRESSION: LinearRegressor,
    ModelType.SKLEARN: SklearnRegressor,
}


def build_estimator(model_config: ModelConfig) -> PowerEstimator:
    try:
        model_type = ModelType(model_config.model_type)
    except ValueError as e:
        raise ModelConstructionError(f"Unknown model type: {model_config.model_type}") from e
    return _BACKENDS[model_type].from_config(model_config)
