from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .utils import load_json


@dataclass(frozen=True)
class EngineConfig:
    booklet: dict[str, Any] = field(default_factory=dict)
    share_card: dict[str, Any] = field(default_factory=dict)
    catalog: dict[str, Any] = field(default_factory=dict)


def load_config(config_path: str | Path | None = None) -> EngineConfig:
    """Load engine settings; every knob has a default at its use site."""
    if config_path is None:
        return EngineConfig()
    try:
        data = load_json(config_path)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"cannot read config {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config must be a JSON object: {config_path}")

    sections = {}
    for name in ("booklet", "share_card", "catalog"):
        section = data.get(name, {})
        if not isinstance(section, dict):
            raise ConfigError(f"config section {name!r} must be an object")
        sections[name] = section
    return EngineConfig(**sections)
