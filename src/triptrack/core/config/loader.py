"""Config loading."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from triptrack.core.contracts.config import TripTrackConfig
from triptrack.core.contracts.exceptions import ConfigError


def _resolve_path(value: Path, *, base_dir: Path) -> Path:
    expanded = value.expanduser()
    if expanded.is_absolute():
        return expanded
    return (base_dir / expanded).resolve()


def load_config(path: str | Path) -> TripTrackConfig:
    """Load and validate config from JSON, resolving relative paths against the config directory."""
    config_path = Path(path).expanduser().resolve()
    config_dir = config_path.parent

    try:
        raw_payload: Any = json.loads(config_path.read_text(encoding="utf-8"))
        parsed = TripTrackConfig.model_validate(raw_payload)
    except OSError as exc:
        raise ConfigError(f"failed reading config file: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config file: {config_path}") from exc
    except ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc

    return parsed.model_copy(update={"data_path": _resolve_path(parsed.data_path, base_dir=config_dir)})


def write_config(config: TripTrackConfig, path: str | Path) -> Path:
    config_path = Path(path).expanduser()
    payload = config.model_dump(mode="json", exclude_none=True)
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed writing config file: {config_path}") from exc
    return config_path


__all__ = ["load_config", "write_config"]
