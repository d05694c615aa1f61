"""Tests for configuration loading."""

import json

import pytest

from face_trainer.config import (
    ensure_data_home,
    get_config_path,
    get_data_home,
    get_default_config,
    load_config,
    write_default_config,
)


@pytest.fixture(autouse=True)
def data_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    monkeypatch.setenv("FACE_TRAINER_DATA_HOME", str(home))
    return home


def test_data_home_from_env(data_home):
    assert get_data_home() == data_home
    assert get_config_path() == data_home / "config.json"


def test_ensure_data_home(data_home):
    assert not data_home.exists()
    assert ensure_data_home() == data_home
    assert data_home.is_dir()


def test_defaults_without_file(data_home):
    config = load_config()
    assert config == get_default_config()
    assert config["database"]["url"] == f"sqlite:///{data_home / 'face_trainer.db'}"
    assert config["cache"]["lock_timeout"] is None


def test_file_merged_over_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("DB_DIR", str(tmp_path / "db"))
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "database": {"url": "sqlite:///$DB_DIR/faces.db"},
        "classifier": {"max_iter": 50},
    }))

    config = load_config(path)

    assert config["database"]["url"] == f"sqlite:///{tmp_path / 'db' / 'faces.db'}"
    assert config["classifier"] == {"c": 1.0, "max_iter": 50}
    assert config["logging"]["level"] == "INFO"


def test_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ValueError):
        load_config(path)


def test_write_default_config(data_home):
    path = write_default_config()
    assert json.loads(path.read_text()) == get_default_config()

    path.write_text(json.dumps({"logging": {"level": "DEBUG"}}))
    write_default_config()
    assert load_config()["logging"]["level"] == "DEBUG"
