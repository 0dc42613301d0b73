"""Converter settings from .dayone-obsidian.toml, the environment and CLI flags.

Later sources win: built-in defaults, then the TOML file, then
``DAYONE_OBSIDIAN_*`` environment variables, then flags given on the
command line.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".dayone-obsidian.toml"
CONFIG_SEARCH_PATHS = [Path(".")]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "dayone-obsidian" / "config.toml"

_TRUTHY = ("true", "1", "yes")

# CLI keyword -> (section, field)
_CLI_FIELDS: dict[str, tuple[str, str]] = {
    "output_directory": ("output", "directory"),
    "entries_dir": ("output", "entries_dir"),
    "attachments_dir": ("output", "attachments_dir"),
    "deduplicate": ("conversion", "deduplicate"),
}


class OutputConfig(BaseModel):
    """Where the vault goes and how its two folders are named."""

    directory: str = "./vault"
    entries_dir: str = "entries"
    attachments_dir: str = "attachments"


class ConversionSectionConfig(BaseModel):
    """[conversion] section."""

    deduplicate: bool = True


class ConverterConfig(BaseModel):
    """Top-level configuration model."""

    output: OutputConfig = Field(default_factory=OutputConfig)
    conversion: ConversionSectionConfig = Field(default_factory=ConversionSectionConfig)


def load_config(path: str | Path | None = None) -> ConverterConfig:
    """Build the effective configuration.

    An explicit *path* is used on its own; a missing file only logs a
    warning. Without one, ``.dayone-obsidian.toml`` is looked up in the
    search paths and then ``~/.config/dayone-obsidian/config.toml``.
    Environment variables are applied on top.
    """
    if path is not None:
        config_file: Path | None = Path(path)
        if not config_file.exists():
            logger.warning("Config file %s does not exist, using defaults", config_file)
            config_file = None
    else:
        config_file = _find_config_file()

    data = _read_toml(config_file) if config_file is not None else {}
    config = ConverterConfig.model_validate(data)
    return _apply_env_vars(config)


def merge_cli_overrides(config: ConverterConfig, **cli_kwargs: object) -> ConverterConfig:
    """Return *config* with the flags the user actually passed applied.

    ``None`` means the flag was not given and leaves the setting alone.
    Keywords that do not name a setting are ignored.
    """
    data = config.model_dump()
    for key, value in cli_kwargs.items():
        if value is None or key not in _CLI_FIELDS:
            continue
        section, name = _CLI_FIELDS[key]
        data[section][name] = value
    return ConverterConfig.model_validate(data)


def _find_config_file() -> Path | None:
    for directory in CONFIG_SEARCH_PATHS:
        candidate = directory / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    if GLOBAL_CONFIG_PATH.exists():
        return GLOBAL_CONFIG_PATH
    return None


def _read_toml(path: Path) -> dict[str, object]:
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}
    logger.info("Using config %s", path)
    return data


def _apply_env_vars(config: ConverterConfig) -> ConverterConfig:
    """Overlay DAYONE_OBSIDIAN_OUTPUT_DIR and DAYONE_OBSIDIAN_DEDUPLICATE."""
    output_dir = os.environ.get("DAYONE_OBSIDIAN_OUTPUT_DIR")
    dedup_raw = os.environ.get("DAYONE_OBSIDIAN_DEDUPLICATE")
    if output_dir is None and dedup_raw is None:
        return config

    data = config.model_dump()
    if output_dir is not None:
        data["output"]["directory"] = output_dir
    if dedup_raw is not None:
        data["conversion"]["deduplicate"] = dedup_raw.strip().lower() in _TRUTHY
    return ConverterConfig.model_validate(data)
