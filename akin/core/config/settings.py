from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import yaml


DEFAULT_SETTINGS: dict[str, Any] = {
    # Surface syntax; keep these stable, golden tests depend on them.
    "decl_keyword": "let",
    "decl_sigil": "&",
    "ref_marker": "*",
    "joint_marker": "~",
    "none_marker": "NONE",
    # Serialization.
    "separator": " ",
    "interpolate_strings": True,
    # Upper bound on the number of values an `a..b` range may expand to.
    "max_range_values": 65536,
}

_MARKER_KEYS = ("decl_sigil", "ref_marker", "joint_marker")
_WORD_KEYS = ("decl_keyword", "none_marker")
_FORBIDDEN_MARKERS = set("()[]{}\"'_")


class SettingsError(ValueError):
    pass


@dataclass(frozen=True)
class Settings:
    decl_keyword: str = DEFAULT_SETTINGS["decl_keyword"]
    decl_sigil: str = DEFAULT_SETTINGS["decl_sigil"]
    ref_marker: str = DEFAULT_SETTINGS["ref_marker"]
    joint_marker: str = DEFAULT_SETTINGS["joint_marker"]
    none_marker: str = DEFAULT_SETTINGS["none_marker"]
    separator: str = DEFAULT_SETTINGS["separator"]
    interpolate_strings: bool = DEFAULT_SETTINGS["interpolate_strings"]
    max_range_values: int = DEFAULT_SETTINGS["max_range_values"]

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_settings_file(path: str | Path) -> dict[str, Any]:
    """Load setting overrides from a YAML file.

    Format:
      <key>: <value>

    Only keys of DEFAULT_SETTINGS are accepted. Returns the raw overrides;
    call merged_settings() to validate them against the defaults.
    """
    p = Path(path)
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise SettingsError(f"settings file is not valid YAML: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SettingsError("settings file must be a mapping of key -> value")

    out: dict[str, Any] = {}
    for k, v in raw.items():
        if not isinstance(k, str) or k not in DEFAULT_SETTINGS:
            raise SettingsError(
                f"unknown setting: {k} (choose from: {', '.join(sorted(DEFAULT_SETTINGS))})"
            )
        out[k] = v
    return out


def merged_settings(overrides: dict[str, Any] | None = None) -> Settings:
    """Return DEFAULT_SETTINGS merged with optional overrides, validated.

    Overrides replace defaults of the same name.
    """
    merged = dict(DEFAULT_SETTINGS)
    if overrides:
        merged.update(overrides)
    _validate(merged)
    return Settings(**merged)


def load_and_merge(settings_file: str | None) -> Settings:
    if not settings_file:
        return merged_settings()
    overrides = load_settings_file(settings_file)
    return merged_settings(overrides)


def _validate(values: dict[str, Any]) -> None:
    for key in _MARKER_KEYS:
        v = values[key]
        if not isinstance(v, str) or len(v) != 1:
            raise SettingsError(f"'{key}' must be a single character")
        if v.isalnum() or v.isspace() or v in _FORBIDDEN_MARKERS:
            raise SettingsError(f"'{key}' must be a punctuation character other than brackets and quotes")

    markers = [values[k] for k in _MARKER_KEYS]
    if len(set(markers)) != len(markers):
        raise SettingsError(f"{', '.join(_MARKER_KEYS)} must be distinct")

    for key in _WORD_KEYS:
        v = values[key]
        if not isinstance(v, str) or not v.isidentifier():
            raise SettingsError(f"'{key}' must be an identifier")

    sep = values["separator"]
    if not isinstance(sep, str) or not sep or not sep.isspace():
        raise SettingsError("'separator' must be a non-empty whitespace string")

    if not isinstance(values["interpolate_strings"], bool):
        raise SettingsError("'interpolate_strings' must be a boolean")

    limit = values["max_range_values"]
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise SettingsError("'max_range_values' must be a positive integer")
