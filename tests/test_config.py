"""Tests for process configuration."""

import yaml

from pulso.core.config import Config


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.delenv("PULSO_LOG_LEVEL", raising=False)

    config = Config.load(tmp_path / "missing.yaml")

    assert config.log_level == "INFO"
    assert config.tick_interval_seconds == 1.0
    assert config.db_path.name == "pulso.db"


def test_yaml_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"data_dir": str(tmp_path / "data"), "log_level": "DEBUG"}))

    config = Config.load(path)

    assert config.data_dir == tmp_path / "data"
    assert config.db_path == tmp_path / "data" / "pulso.db"
    assert config.log_level == "DEBUG"


def test_environment_overrides_file(monkeypatch, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"log_level": "DEBUG"}))
    monkeypatch.setenv("PULSO_LOG_LEVEL", "ERROR")

    config = Config.load(path)

    assert config.log_level == "ERROR"


def test_save_round_trip(tmp_path):
    config = Config(
        data_dir=tmp_path / "data",
        log_dir=tmp_path / "logs",
        config_dir=tmp_path / "conf",
        tick_interval_seconds=0.5,
    )

    path = config.save()

    assert path == tmp_path / "conf" / "config.yaml"
    loaded = Config.load(path)
    assert loaded.tick_interval_seconds == 0.5
    assert loaded.data_dir == tmp_path / "data"


def test_ensure_directories(tmp_path):
    config = Config(
        data_dir=tmp_path / "data",
        log_dir=tmp_path / "logs",
        config_dir=tmp_path / "conf",
    )

    config.ensure_directories()

    assert config.data_dir.is_dir()
    assert config.log_dir.is_dir()
    assert config.config_dir.is_dir()
