"""Configuration loading and defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


_DEFAULT_CACHE_PATH = Path.home() / "Library/Application Support/Granola/cache-v3.json"
_DEFAULT_OUTPUT_DIR = Path.home() / "meetings"
_DEFAULT_CONFIG_DIR = Path.home() / ".config" / "granola-to-markdown"
_DEFAULT_CONFIG_PATH = _DEFAULT_CONFIG_DIR / "config.yaml"


@dataclass
class Config:
    output_dir: Path = field(default_factory=lambda: _DEFAULT_OUTPUT_DIR)
    cache_path: Path = field(default_factory=lambda: _DEFAULT_CACHE_PATH)
    days: int | None = None
    force: bool = False
    dry_run: bool = False


def validate_days(days: object) -> int | None:
    """Return ``days`` as a positive int (or None), raising ValueError otherwise."""
    if days is None:
        return None
    if isinstance(days, bool):
        raise ValueError("Days must be a positive number")
    try:
        value = int(days)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        raise ValueError("Days must be a positive number") from None
    if value < 1:
        raise ValueError("Days must be a positive number")
    return value


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML, falling back to defaults where possible.

    A missing default config file is fine; a missing file that was asked for
    explicitly is not.
    """
    path = Path(config_path or _DEFAULT_CONFIG_PATH).expanduser()

    if not path.exists():
        if config_path is not None:
            raise FileNotFoundError(f"Config file not found: {path}")
        return Config()

    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return Config()
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid config file: {path}")

    kwargs: dict = {}
    if "output_dir" in raw:
        kwargs["output_dir"] = Path(raw["output_dir"]).expanduser()
    if "cache_path" in raw:
        kwargs["cache_path"] = Path(raw["cache_path"]).expanduser()
    if "days" in raw:
        kwargs["days"] = validate_days(raw["days"])
    for key in ("force", "dry_run"):
        if key in raw:
            kwargs[key] = bool(raw[key])

    return Config(**kwargs)
