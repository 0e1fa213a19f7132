import logging

from nodepower.config import NODE_PLATFORM_POWER_KEY, load_config
from nodepower.models import EstimatorState, ModelConstructionError, ModelSelector, ModelType


class _Ready:
    def __init__(self, ready=True):
        self.ready = ready

    def is_ready(self):
        return self.ready


def _selector(factory, supported=False, env=None):
    cfg = load_config(environ=env or {})
    return ModelSelector(cfg, estimator_factory=factory, system_collection_supported=lambda: supported)


def test_disabled_before_creation():
    sel = _selector(lambda mc: _Ready())
    assert sel.state is EstimatorState.UNINITIALIZED
    assert sel.is_enabled() is False


def test_create_model_builds_node_config():
    seen = []
    sel = _selector(lambda mc: seen.append(mc) or _Ready())
    sel.create_model(["cpu_cycles"], ["cpu_architecture"], ["Ice Lake"])
    assert sel.is_enabled() is True
    assert sel.state is EstimatorState.ENABLED
    mc = seen[0]
    assert mc.is_node_power_model is True
    assert mc.model_type is ModelType.LINEAR_REGRESSION
    assert mc.node_feature_names == ["cpu_cycles"]
    assert mc.system_meta_feature_values == ["Ice Lake"]
    assert mc.init_model_filepath.endswith("/platform/AbsPower/LinearRegressionTrainer.json")


def test_configured_url_skips_default_location():
    seen = []
    sel = _selector(lambda mc: seen.append(mc) or _Ready(),
                    env={"NODEPOWER_NODE_PLATFORM_POWER_INIT_URL": "http://models/p.json"})
    sel.create_model([], [], [])
    assert seen[0].init_model_url == "http://models/p.json"
    assert seen[0].init_model_filepath == ""


def test_construction_failure_leaves_disabled(caplog):
    def boom(mc):
        raise ModelConstructionError("no artifact")

    sel = _selector(boom)
    with caplog.at_level(logging.ERROR, logger="nodepower"):
        sel.create_model(["cpu_cycles"], [], [])
    assert sel.estimator is None
    assert sel.is_enabled() is False
    assert sel.state is EstimatorState.DISABLED
    assert "Failed to create" in caplog.text


def test_enabled_follows_estimator_readiness():
    est = _Ready(ready=False)
    sel = _selector(lambda mc: est)
    sel.create_model([], [], [])
    assert sel.is_enabled() is False
    est.ready = True
    assert sel.is_enabled() is True


def test_system_collection_supported_still_builds(caplog):
    calls = []
    sel = _selector(lambda mc: calls.append(mc) or _Ready(), supported=True)
    with caplog.at_level(logging.INFO, logger="nodepower"):
        sel.create_model([], [], [])
    assert len(calls) == 1
    assert sel.is_enabled() is True
    assert "collection is supported" in caplog.text


def test_estimator_never_replaced():
    first, second = _Ready(), _Ready()
    made = [first, second]
    sel = _selector(lambda mc: made.pop(0))
    sel.create_model([], [], [])
    sel.create_model(["x"], [], [])
    assert sel.estimator is first
    assert made == [second]


def test_unknown_model_type_in_settings_disables():
    sel = _selector(lambda mc: _Ready(), env={"NODEPOWER_NODE_PLATFORM_POWER_MODEL_TYPE": "ratio"})
    sel.create_model([], [], [])
    assert sel.state is EstimatorState.DISABLED
    assert sel.cfg["models"][NODE_PLATFORM_POWER_KEY]["model_type"] == "ratio"


def test_local_path_in_init_url_is_model_location():
    seen = []
    sel = _selector(lambda mc: seen.append(mc) or _Ready(),
                    env={"NODEPOWER_NODE_PLATFORM_POWER_INIT_URL": "/local/model.json"})
    sel.create_model([], [], [])
    assert seen[0].model_location == "/local/model.json"


def test_partial_settings_use_default_location():
    seen = []
    cfg = {"sample_period_sec": 3, "models": {NODE_PLATFORM_POWER_KEY: {"model_type": "sklearn"}}}
    sel = ModelSelector(cfg, estimator_factory=lambda mc: seen.append(mc) or _Ready(),
                        system_collection_supported=lambda: False)
    sel.create_model([], [], [])
    assert sel.state is EstimatorState.ENABLED
    assert seen[0].model_type is ModelType.SKLEARN
    assert seen[0].init_model_filepath.endswith("/platform/AbsPower/LinearRegressionTrainer.json")


def test_broken_model_server_settings_disable(caplog):
    sel = ModelSelector({"model_server": None}, estimator_factory=lambda mc: _Ready(),
                        system_collection_supported=lambda: False)
    with caplog.at_level(logging.ERROR, logger="nodepower"):
        sel.create_model([], [], [])
    assert sel.state is EstimatorState.DISABLED
    assert sel.estimator is None
    assert "Failed to build Node Platform Power Model config" in caplog.text
