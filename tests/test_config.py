import json

import pytest

import config
from autoplay import AutoplaySettings


@pytest.fixture
def no_default_files(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "_default_config_candidates", lambda: [tmp_path / "absent.json"])


def write_config(tmp_path, payload):
    config_path = tmp_path / "catch_autoplay_config.json"
    config_path.write_text(json.dumps(payload), encoding="utf-8")
    return config_path


def test_defaults_when_no_file(no_default_files):
    app_config, resolved_path = config.load_config()
    assert resolved_path is None
    assert app_config.autoplay.dash_speed == pytest.approx(1.0 / 512.0)
    assert app_config.autoplay.catcher_half_width == 0.1
    assert app_config.autoplay.start_time == -100000.0
    assert app_config.logging.level == "WARNING"


def test_load_explicit_file(tmp_path):
    config_path = write_config(
        tmp_path,
        {"autoplay": {"dash_speed": 0.5, "catcher_half_width": 0.05}, "logging": {"level": "debug"}},
    )
    app_config, resolved_path = config.load_config(config_path)
    assert resolved_path == config_path
    assert app_config.autoplay.dash_speed == 0.5
    assert app_config.autoplay.catcher_half_width == 0.05
    assert app_config.logging.level == "DEBUG"


def test_environment_path_and_overrides(tmp_path, monkeypatch):
    config_path = write_config(tmp_path, {"autoplay": {"dash_speed": 0.5}})
    monkeypatch.setenv("CATCH_AUTOPLAY_CONFIG_PATH", str(config_path))
    monkeypatch.setenv("CATCH_AUTOPLAY_CATCHER_HALF_WIDTH", "0.2")
    monkeypatch.setenv("CATCH_AUTOPLAY_OUTPUT_INCLUDE_SCORES", "no")
    monkeypatch.setenv("CATCH_AUTOPLAY_OUTPUT_INDENT", "not-a-number")

    app_config, resolved_path = config.load_config()
    assert resolved_path == config_path
    assert app_config.autoplay.dash_speed == 0.5
    assert app_config.autoplay.catcher_half_width == 0.2
    assert app_config.output.include_scores is False
    assert app_config.output.indent == 2


@pytest.mark.parametrize(
    "payload",
    [
        {"autoplay": {"dash_speed": 0}},
        {"autoplay": {"catcher_half_width": 0.8}},
        {"logging": {"level": "loud"}},
        {"output": {"indent": -1}},
    ],
)
def test_validation_errors(tmp_path, payload):
    with pytest.raises(ValueError):
        config.load_config(write_config(tmp_path, payload))


def test_invalid_json(tmp_path):
    config_path = tmp_path / "bad.json"
    config_path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        config.load_config(config_path)


def test_to_settings(no_default_files):
    app_config, _resolved_path = config.load_config()
    settings = config.to_settings(app_config)
    assert settings == AutoplaySettings(dash_speed=1.0 / 512.0, catcher_half_width=0.1, start_time=-100000.0)
