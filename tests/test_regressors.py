import json

import joblib
import numpy as np
import pytest
from sklearn.linear_model import LinearRegression
from sklearn.preprocessing import StandardScaler

from nodepower.models import (
    LinearRegressor,
    ModelConfig,
    ModelConstructionError,
    ModelOutputType,
    ModelType,
    PredictionError,
    SklearnRegressor,
    build_estimator,
)

ARTIFACT = {
    "features": ["a", "b"],
    "domains": {
        "0": {"intercept": 10.0, "coefficients": {"a": 2.0, "b": 1.0},
              "categorical_weights": {"cpu_architecture": {"Ice Lake": 4.0}}},
        "1": {"intercept": 5.0, "coefficients": [1.0, 0.0]},
    },
}


def _config(model_type, filepath="", url=""):
    return ModelConfig(model_type=model_type, output_type=ModelOutputType.ABS_POWER,
                       init_model_filepath=filepath, init_model_url=url,
                       node_feature_names=["a", "b"],
                       system_meta_feature_names=["cpu_architecture"],
                       system_meta_feature_values=["Ice Lake"])


def test_linear_absolute_and_idle():
    est = LinearRegressor(ARTIFACT)
    assert est.is_ready()
    assert est.feature_names() == ["a", "b"]
    est.reset_sample_buffer()
    est.add_feature_row([3.0, 4.0])
    assert est.predict(False) == {0: 20, 1: 8}
    assert est.predict(True) == {0: 10, 1: 5}


def test_linear_categorical_weight_from_system_meta():
    est = LinearRegressor(ARTIFACT, _config(ModelType.LINEAR_REGRESSION))
    assert est.predict(True) == {0: 14, 1: 5}


def test_linear_needs_rows_for_absolute():
    est = LinearRegressor(ARTIFACT)
    est.add_feature_row([1.0, 1.0])
    est.reset_sample_buffer()
    with pytest.raises(PredictionError):
        est.predict(False)


def test_linear_clamps_negative_power():
    art = {"features": ["a"], "domains": {"0": {"intercept": 1.0, "coefficients": [-5.0]}}}
    est = LinearRegressor(art)
    est.add_feature_row([10.0])
    assert est.predict(False) == {0: 0}


def test_linear_rejects_bad_artifact():
    with pytest.raises(ModelConstructionError):
        LinearRegressor({"features": ["a"], "domains": {"0": {"coefficients": {"zzz": 1.0}}}})
    with pytest.raises(ModelConstructionError):
        LinearRegressor({"domains": {}})


def test_linear_from_file_and_missing_file(tmp_path):
    path = tmp_path / "platform.json"
    path.write_text(json.dumps(ARTIFACT))
    est = build_estimator(_config(ModelType.LINEAR_REGRESSION, filepath=str(path)))
    assert isinstance(est, LinearRegressor)
    with pytest.raises(ModelConstructionError):
        build_estimator(_config(ModelType.LINEAR_REGRESSION, filepath=str(tmp_path / "nope.json")))


def test_linear_from_url(monkeypatch):
    class _Resp:
        content = json.dumps(ARTIFACT).encode("utf-8")

        def raise_for_status(self):
            pass

    seen = {}

    def fake_get(url, timeout):
        seen["url"] = url
        return _Resp()

    monkeypatch.setattr("nodepower.common.io.requests.get", fake_get)
    est = build_estimator(_config(ModelType.LINEAR_REGRESSION, url="https://models/platform.json"))
    assert seen["url"] == "https://models/platform.json"
    assert est.predict(True)[1] == 5


def test_sklearn_artifact_with_scaler(tmp_path):
    X = np.array([[0.0], [1.0], [2.0]])
    scaler = StandardScaler().fit(X)
    reg0 = LinearRegression().fit(scaler.transform(X), np.array([10.0, 12.0, 14.0]))
    reg1 = LinearRegression().fit(scaler.transform(X), np.array([20.0, 20.0, 20.0]))
    path = tmp_path / "platform.pkl"
    joblib.dump({"feature_names": ["a"], "models": {0: reg0, 1: reg1}, "scaler": scaler}, path)

    est = build_estimator(_config(ModelType.SKLEARN, filepath=str(path)))
    assert isinstance(est, SklearnRegressor)
    est.reset_sample_buffer()
    est.add_feature_row([3.0])
    assert est.predict(False) == {0: 16, 1: 20}
    assert est.predict(True) == {0: 10, 1: 20}


def test_sklearn_bare_regressor_uses_node_features():
    reg = LinearRegression().fit(np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 0.0]]), np.array([50.0, 53.0, 54.0]))
    est = SklearnRegressor(reg, _config(ModelType.SKLEARN))
    assert est.feature_names() == ["a", "b"]
    assert est.predict(True) == {0: 50}


def test_unknown_model_type():
    with pytest.raises(ModelConstructionError):
        build_estimator(_config("ratio"))


def test_backend_must_define_domain_prediction():
    from nodepower.models.regressors import _BufferedRegressor

    class NoPrediction(_BufferedRegressor):
        pass

    with pytest.raises(TypeError):
        NoPrediction(["a"], [0])
