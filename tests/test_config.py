"""Configuration: YAML loading, merging and validation."""

import pytest
import yaml

from pow_core.config import config, Config, DEFAULT_CONFIG
from pow_core.constants import DEFAULT_COST, DEFAULT_METER
from pow_core.exceptions import ConfigurationError


def test_config_is_singleton():
    assert Config() is config


def test_defaults_without_file(tmp_path):
    config.load(str(tmp_path / "missing.yaml"))
    assert config.get('puzzle.cost') == DEFAULT_COST
    assert config.get('puzzle.meter') == DEFAULT_METER
    assert config.get('search.timeout') is None
    assert not (tmp_path / "missing.yaml").exists()


def test_user_values_merge_with_defaults(tmp_path):
    path = tmp_path / "pow.yaml"
    path.write_text("puzzle:\n  cost: 12\nsearch:\n  workers: 3\n", encoding="utf-8")

    config.load(str(path))

    assert config.get('puzzle.cost') == 12
    assert config.get('puzzle.meter') == DEFAULT_METER
    assert config.get('search.workers') == 3
    assert config.get('logging.level') == "INFO"


def test_load_does_not_mutate_defaults(tmp_path):
    path = tmp_path / "pow.yaml"
    path.write_text("puzzle:\n  cost: 3\n", encoding="utf-8")
    config.load(str(path))
    assert DEFAULT_CONFIG['puzzle']['cost'] == DEFAULT_COST


def test_get_missing_path_returns_default():
    assert config.get('puzzle.nope', default=7) == 7
    assert config.get('puzzle.cost.deeper') is None


def test_malformed_yaml_raises(tmp_path):
    path = tmp_path / "pow.yaml"
    path.write_text("puzzle: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        config.load(str(path))


def test_non_mapping_raises(tmp_path):
    path = tmp_path / "pow.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        config.load(str(path))


@pytest.mark.parametrize("body, key", [
    ("puzzle:\n  cost: -1\n", "puzzle.cost"),
    ("puzzle:\n  meter: lots\n", "puzzle.meter"),
    ("search:\n  workers: true\n", "search.workers"),
    ("search:\n  timeout: 0\n", "search.timeout"),
    ("logging:\n  level: LOUD\n", "logging.level"),
])
def test_invalid_values_raise(tmp_path, body, key):
    path = tmp_path / "pow.yaml"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigurationError) as exc_info:
        config.load(str(path))
    assert exc_info.value.key == key


def test_save_round_trips_through_yaml(tmp_path):
    path = tmp_path / "out.yaml"
    config.set('puzzle.cost', 9)
    config.save(str(path))

    saved = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert saved['puzzle']['cost'] == 9

    config.reset()
    config.load(str(path))
    assert config.get('puzzle.cost') == 9


def test_save_to_unwritable_path_raises(tmp_path):
    with pytest.raises(ConfigurationError):
        config.save(str(tmp_path / "no" / "such" / "dir" / "pow.yaml"))
