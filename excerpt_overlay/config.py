"""Configuration helpers for Excerpt Overlay."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from excerpt_overlay.host import SurfaceStyle

CONFIG_ENV_VAR = "EXCERPT_OVERLAY_CONFIG"
CONFIG_FILENAME = "settings.json"


@dataclass(frozen=True)
class ExcerptConfig:
    """Pure-data settings passed into the registry and the Qt host."""

    width_ratio: float = 0.45
    height_ratio: float = 0.6
    border_color: str = "#5f87af"
    active_transparency: int = 100
    inactive_transparency: int = 85
    name_prefix: str = "excerpt: "
    name_separator: str = " | "
    max_label_length: int = 40
    region_header_template: str = "{source} [{start}-{end}] {label}"

    def to_style(self) -> SurfaceStyle:
        return SurfaceStyle(
            border_color=self.border_color,
            active_transparency=self.active_transparency,
            inactive_transparency=self.inactive_transparency,
        )


def _float(value: Any, fallback: float) -> float:
    if value is None or isinstance(value, bool):
        return fallback
    try:
        return float(value)
    except (TypeError, ValueError):
        return fallback


def _int(value: Any, fallback: int, *, minimum: Optional[int] = None, maximum: Optional[int] = None) -> int:
    if value is None or isinstance(value, bool):
        return fallback
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        return fallback
    if minimum is not None:
        numeric = max(minimum, numeric)
    if maximum is not None:
        numeric = min(maximum, numeric)
    return numeric


def _str(value: Any, fallback: str) -> str:
    return value if isinstance(value, str) else fallback


def config_from_mapping(data: Dict[str, Any]) -> ExcerptConfig:
    """Build a config from a decoded JSON object, keeping defaults for bad values."""
    defaults = ExcerptConfig()
    return replace(
        defaults,
        width_ratio=_float(data.get("width_ratio"), defaults.width_ratio),
        height_ratio=_float(data.get("height_ratio"), defaults.height_ratio),
        border_color=_str(data.get("border_color"), defaults.border_color),
        active_transparency=_int(
            data.get("active_transparency"), defaults.active_transparency, minimum=0, maximum=100
        ),
        inactive_transparency=_int(
            data.get("inactive_transparency"), defaults.inactive_transparency, minimum=0, maximum=100
        ),
        name_prefix=_str(data.get("name_prefix"), defaults.name_prefix),
        name_separator=_str(data.get("name_separator"), defaults.name_separator),
        max_label_length=_int(data.get("max_label_length"), defaults.max_label_length, minimum=1),
        region_header_template=_str(data.get("region_header_template"), defaults.region_header_template),
    )


def load_config(path: Path) -> ExcerptConfig:
    """Read settings.json if it exists; malformed content falls back to defaults."""
    try:
        raw = path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return ExcerptConfig()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return ExcerptConfig()
    if not isinstance(data, dict):
        return ExcerptConfig()
    return config_from_mapping(data)


def config_as_dict(config: ExcerptConfig) -> Dict[str, Any]:
    return {field.name: getattr(config, field.name) for field in fields(config)}


def resolve_config_path(arg_path: Optional[str] = None) -> Path:
    if arg_path:
        return Path(arg_path).expanduser().resolve()
    env_override = os.getenv(CONFIG_ENV_VAR)
    if env_override:
        return Path(env_override).expanduser().resolve()
    config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return config_home / "excerpt-overlay" / CONFIG_FILENAME
