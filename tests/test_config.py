import pytest

from acfengine import PlacementConfig


def test_defaults():
    config = PlacementConfig()

    assert config.max_depth == 7
    assert config.root_max_children == 1
    assert config.default_max_children == 5
    assert config.tie_break == "fair"
    assert config.max_attempts == config.max_retries + 1


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_depth": 0},
        {"tie_break": "random"},
        {"max_retries": -1},
        {"retry_backoff_seconds": -0.1},
        {"min_max_children": 4, "max_max_children": 2},
        {"default_max_children": -1},
        {"default_max_children": 6},
        {"default_max_children": 2, "min_max_children": 3},
    ],
)
def test_invalid_values_raise(overrides):
    with pytest.raises(ValueError):
        PlacementConfig(**overrides)


def test_from_env(monkeypatch):
    monkeypatch.setenv("ACF_MAX_DEPTH", "5")
    monkeypatch.setenv("ACF_TIE_BREAK", "earliest")
    monkeypatch.setenv("ACF_ROOT_ID", "25AAA0001")
    monkeypatch.delenv("ACF_MAX_RETRIES", raising=False)

    config = PlacementConfig.from_env()

    assert config.max_depth == 5
    assert config.tie_break == "earliest"
    assert config.acf_root_id == "25AAA0001"
    assert config.max_retries == 8


def test_accepting_toggles_default_on():
    config = PlacementConfig()

    assert config.respect_accepting is True
    assert config.default_accepting is True


def test_from_env_reads_admin_bounds_and_toggles(monkeypatch):
    monkeypatch.setenv("ACF_MIN_MAX_CHILDREN", "2")
    monkeypatch.setenv("ACF_MAX_MAX_CHILDREN", "4")
    monkeypatch.setenv("ACF_DEFAULT_MAX_CHILDREN", "3")
    monkeypatch.setenv("ACF_RESPECT_ACCEPTING", "false")
    monkeypatch.setenv("ACF_DEFAULT_ACCEPTING", "0")

    config = PlacementConfig.from_env()

    assert (config.min_max_children, config.max_max_children) == (2, 4)
    assert config.default_max_children == 3
    assert config.respect_accepting is False
    assert config.default_accepting is False
