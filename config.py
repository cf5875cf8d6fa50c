"""
config.py

Typed configuration loading and validation for catch autoplay.

Design goals
- Load at most one UTF-8 JSON config file
- Validate with pydantic (defaults included)
- Support environment variable overrides
- No other I/O beyond reading the config file (no directory creation)

Config file location
- If CATCH_AUTOPLAY_CONFIG_PATH is set, that file is used.
- Otherwise these paths are searched in order and the first one that exists is used:
  1) ./catch_autoplay_config.json (current working directory)
  2) <user config dir>/CatchAutoplay/catch_autoplay_config.json
  3) <user config dir>/CatchAutoplay/config.json
- If none exists, built-in defaults are used.

Example config file (catch_autoplay_config.json)
{
  "autoplay": {
    "dash_speed": 0.001953125,
    "catcher_half_width": 0.1,
    "start_time": -100000
  },
  "output": {
    "indent": 2,
    "include_scores": true
  },
  "logging": {
    "level": "INFO"
  }
}

Units
- Positions are normalized playfield widths in [0, 1].
- Times are milliseconds, so dash_speed is playfield widths per millisecond.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator

from autoplay import AutoplaySettings
from catch_models import SENTINEL_TIME


class AutoplayConfig(BaseModel):
    dash_speed: float = Field(default=1.0 / 512.0, gt=0, allow_inf_nan=False, description="Dash speed in playfield widths per millisecond.")
    catcher_half_width: float = Field(default=0.1, ge=0, le=0.5, allow_inf_nan=False, description="Half of the catcher width, normalized.")
    start_time: float = Field(default=SENTINEL_TIME, allow_inf_nan=False, description="Time of the synthetic start object and sentinel keyframe.")


class OutputConfig(BaseModel):
    indent: int = Field(default=2, ge=0, description="JSON indentation for trajectory output.")
    include_scores: bool = Field(default=True, description="Include total_score and caught_value in output.")


class LoggingConfig(BaseModel):
    level: str = Field(default="WARNING", description="DEBUG, INFO, WARNING, or ERROR")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        normalized = (value or "").strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if normalized not in allowed:
            raise ValueError("level must be one of: DEBUG, INFO, WARNING, ERROR")
        return normalized


class AppConfig(BaseModel):
    autoplay: AutoplayConfig = Field(default_factory=AutoplayConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _default_config_candidates() -> List[Path]:
    config_directory = Path(user_config_dir("CatchAutoplay", appauthor=False))
    return [
        Path.cwd() / "catch_autoplay_config.json",
        config_directory / "catch_autoplay_config.json",
        config_directory / "config.json",
    ]


def _resolve_config_path() -> Optional[Path]:
    explicit_path_text = os.environ.get("CATCH_AUTOPLAY_CONFIG_PATH", "").strip()
    if explicit_path_text:
        return Path(explicit_path_text)

    for candidate_path in _default_config_candidates():
        if candidate_path.exists():
            return candidate_path

    return None


def _read_json_file_utf8(config_path: Path) -> Dict[str, Any]:
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except OSError as exception:
        raise OSError(f"Failed to read config file: {config_path}. Error: {exception}") from exception

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exception:
        raise ValueError(f"Config file is not valid JSON: {config_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise ValueError(f"Config file root must be a JSON object: {config_path}")

    return parsed


def _apply_environment_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Environment overrides are optional. The config file is the primary source of truth.

    Override variables:
    - CATCH_AUTOPLAY_DASH_SPEED
    - CATCH_AUTOPLAY_CATCHER_HALF_WIDTH
    - CATCH_AUTOPLAY_START_TIME
    - CATCH_AUTOPLAY_OUTPUT_INDENT
    - CATCH_AUTOPLAY_OUTPUT_INCLUDE_SCORES
    - CATCH_AUTOPLAY_LOG_LEVEL
    """
    def ensure_nested(config_root: Dict[str, Any], section_name: str) -> Dict[str, Any]:
        section = config_root.get(section_name)
        if isinstance(section, dict):
            section = dict(section)
        else:
            section = {}
        config_root[section_name] = section
        return section

    updated_config = dict(config_dict)

    autoplay_section = ensure_nested(updated_config, "autoplay")
    output_section = ensure_nested(updated_config, "output")
    logging_section = ensure_nested(updated_config, "logging")

    def override_string(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "")
        if value_text.strip():
            target_dict[key_name] = value_text.strip()

    def override_int(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = int(value_text)
        except ValueError:
            return

    def override_float(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = float(value_text)
        except ValueError:
            return

    def override_bool(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip().lower()
        if not value_text:
            return
        truthy = {"1", "true", "yes", "on"}
        falsy = {"0", "false", "no", "off"}
        if value_text in truthy:
            target_dict[key_name] = True
        elif value_text in falsy:
            target_dict[key_name] = False

    override_float("CATCH_AUTOPLAY_DASH_SPEED", autoplay_section, "dash_speed")
    override_float("CATCH_AUTOPLAY_CATCHER_HALF_WIDTH", autoplay_section, "catcher_half_width")
    override_float("CATCH_AUTOPLAY_START_TIME", autoplay_section, "start_time")

    override_int("CATCH_AUTOPLAY_OUTPUT_INDENT", output_section, "indent")
    override_bool("CATCH_AUTOPLAY_OUTPUT_INCLUDE_SCORES", output_section, "include_scores")

    override_string("CATCH_AUTOPLAY_LOG_LEVEL", logging_section, "level")

    return updated_config


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, Optional[Path]]:
    resolved_path = config_path if config_path is not None else _resolve_config_path()
    json_dict = _read_json_file_utf8(resolved_path) if resolved_path is not None else {}
    json_dict = _apply_environment_overrides(json_dict)

    try:
        config = AppConfig.model_validate(json_dict)
    except ValidationError as exception:
        source_text = str(resolved_path) if resolved_path is not None else "(defaults)"
        raise ValueError(f"Config validation failed for {source_text}:\n{exception}") from exception

    return config, resolved_path


def to_settings(config: AppConfig) -> AutoplaySettings:
    return AutoplaySettings(
        dash_speed=float(config.autoplay.dash_speed),
        catcher_half_width=float(config.autoplay.catcher_half_width),
        start_time=float(config.autoplay.start_time),
    )


def main() -> int:
    try:
        config, resolved_path = load_config()
    except Exception as exception:
        error_payload = {"ok": False, "error": str(exception)}
        print(json.dumps(error_payload, ensure_ascii=False, indent=2))
        return 2

    output_payload = {
        "ok": True,
        "config_path": str(resolved_path) if resolved_path is not None else None,
        "config": config.model_dump(),
    }
    print(json.dumps(output_payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
