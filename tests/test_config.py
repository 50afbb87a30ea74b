"""Tests for environment-driven engine configuration."""

import pytest
from pydantic import ValidationError

from schemaloom.config import EngineConfig, get_config, load_config


def test_defaults(monkeypatch):
    for name in ("SCHEMALOOM_BRIDGE", "SCHEMALOOM_CACHE_VALIDATORS", "SCHEMALOOM_MAX_ISSUES"):
        monkeypatch.delenv(name, raising=False)

    config = load_config()

    assert config.bridge_enabled is True
    assert config.cache_validators is True
    assert config.max_issues == 100


@pytest.mark.parametrize("raw,expected", [
    ("off", False),
    ("0", False),
    ("false", False),
    ("auto", True),
    ("on", True),
    ("TRUE", True),
    ("garbage", True),
])
def test_bridge_flag_parsing(monkeypatch, raw, expected):
    monkeypatch.setenv("SCHEMALOOM_BRIDGE", raw)

    assert load_config().bridge_enabled is expected


@pytest.mark.parametrize("raw,expected", [("5", 5), ("0", 100), ("-3", 100), ("many", 100)])
def test_max_issues_falls_back_on_bad_values(monkeypatch, raw, expected):
    monkeypatch.setenv("SCHEMALOOM_MAX_ISSUES", raw)

    assert load_config().max_issues == expected


def test_get_config_is_memoized(monkeypatch):
    first = get_config()
    monkeypatch.setenv("SCHEMALOOM_MAX_ISSUES", "7")

    assert get_config() is first

    get_config.cache_clear()
    assert get_config().max_issues == 7


def test_config_is_frozen_and_strict():
    config = EngineConfig()

    with pytest.raises(ValidationError):
        config.max_issues = 3
    with pytest.raises(ValidationError):
        EngineConfig(max_issues=0)
    with pytest.raises(ValidationError):
        EngineConfig(unknown=True)
