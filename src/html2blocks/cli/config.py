#  Copyright (c) 2025 Tom Villani, Ph.D.

"""Configuration file discovery and loading for the html2blocks CLI.

This module handles automatic discovery of configuration files, loading
configs from TOML, YAML or JSON, merging them with command line overrides
and building a configured :class:`~html2blocks.converter.BlockConverter`.

A configuration has up to five top-level keys::

    [options]
    upload_media = false
    force_https = true
    auto_paragraph = true
    html_parser = "html.parser"

    [media]
    endpoint = "https://example.com"
    username = "editor"

    [allowed_tags]
    aside = ["data-kind"]

    [mapping]
    aside = "acme/callout"

    remove_mapping = ["table"]

Unknown top-level keys are ignored with a warning.
"""

import json
import logging
import sys
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]
from typing import Any, Dict, Optional

import yaml

from html2blocks.converter import BlockConverter
from html2blocks.exceptions import ConfigError, ValidationError
from html2blocks.media import WordPressMediaStore
from html2blocks.options import ConverterOptions, MediaOptions

logger = logging.getLogger(__name__)

DEDICATED_CONFIG_FILENAMES = [".html2blocks.toml", ".html2blocks.yaml", ".html2blocks.yml", ".html2blocks.json"]
CONFIG_FILENAMES = DEDICATED_CONFIG_FILENAMES + ["pyproject.toml"]

CONFIG_SECTIONS = ("options", "media", "allowed_tags", "mapping", "remove_mapping")


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    """Load the [tool.html2blocks] table from pyproject.toml.

    Returns an empty dict when the table is absent.

    Raises
    ------
    ConfigError
        If pyproject.toml cannot be parsed or the table is not a table

    """
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(
            f"Invalid TOML in {pyproject_path}: {e}", config_path=str(pyproject_path), original_error=e
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Error reading {pyproject_path}: {e}", config_path=str(pyproject_path), original_error=e
        ) from e

    config = data.get("tool", {}).get("html2blocks")
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(
            f"[tool.html2blocks] section in {pyproject_path} must be a table, got {type(config).__name__}",
            config_path=str(pyproject_path),
        )
    return config


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find a configuration file by searching parent directories.

    Each directory from ``start_dir`` up to the filesystem root is checked
    for the dedicated config files, then for a pyproject.toml with a
    ``[tool.html2blocks]`` table.

    Parameters
    ----------
    start_dir : Path, optional
        Starting directory, defaults to the current working directory

    Returns
    -------
    Path or None
        First config file found

    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for filename in DEDICATED_CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        pyproject_path = current / "pyproject.toml"
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except ConfigError:
                # Invalid pyproject.toml, keep searching
                logger.debug("Skipping unreadable %s", pyproject_path)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def discover_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Discover a configuration file in the standard locations.

    The parent directory search runs first; the user's home directory is
    checked for the dedicated config files last.
    """
    found = find_config_in_parents(start_dir)
    if found:
        return found

    home = Path.home()
    for filename in DEDICATED_CONFIG_FILENAMES:
        config_path = home / filename
        if config_path.is_file():
            return config_path

    return None


def _load_toml_config(config_path: Path) -> Dict[str, Any]:
    with open(config_path, "rb") as f:
        return tomllib.load(f)


def _load_json_config(config_path: Path) -> Dict[str, Any]:
    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


def _load_yaml_config(config_path: Path) -> Dict[str, Any]:
    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load configuration from a TOML, YAML, JSON or pyproject.toml file.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file; the format follows the extension

    Returns
    -------
    dict
        Configuration dictionary

    Raises
    ------
    ConfigError
        If the file is missing, unreadable, malformed or not a mapping

    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Configuration file does not exist: {config_path}", config_path=str(config_path))
    if not config_path.is_file():
        raise ConfigError(f"Configuration path is not a file: {config_path}", config_path=str(config_path))

    if config_path.name.lower() == "pyproject.toml":
        return _load_pyproject_section(config_path)

    ext = config_path.suffix.lower()
    loaders = {
        ".toml": _load_toml_config,
        ".yaml": _load_yaml_config,
        ".yml": _load_yaml_config,
        ".json": _load_json_config,
    }
    if ext not in loaders:
        raise ConfigError(
            f"Unsupported config file format: {ext or '(none)'}. Use .toml, .yaml or .json",
            config_path=str(config_path),
        )

    try:
        config = loaders[ext](config_path)
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(
            f"Invalid config file {config_path}: {e}", config_path=str(config_path), original_error=e
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(
            f"Error reading config file {config_path}: {e}", config_path=str(config_path), original_error=e
        ) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(
            f"Config file {config_path} must contain a mapping at root level, got {type(config).__name__}",
            config_path=str(config_path),
        )
    return config


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two configuration dictionaries with deep merging.

    The override dictionary takes precedence over base for conflicting keys.
    Nested dictionaries are merged recursively, not replaced entirely.

    Examples
    --------
    >>> merge_configs({"options": {"force_https": True}}, {"options": {"upload_media": True}})
    {'options': {'force_https': True, 'upload_media': True}}

    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def load_config_with_priority(explicit_path: Optional[str] = None) -> Dict[str, Any]:
    """Load the explicit config file if given, else a discovered one, else ``{}``."""
    if explicit_path:
        return load_config_file(explicit_path)

    discovered_path = discover_config_file()
    if discovered_path:
        logger.debug("Using configuration file %s", discovered_path)
        return load_config_file(discovered_path)

    return {}


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = config.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{name}' must be a table, got {type(value).__name__}")
    return value


def build_converter_options(config: Dict[str, Any]) -> ConverterOptions:
    """Build converter options from the ``options`` section.

    Raises
    ------
    ValidationError
        If the section names an unknown option or holds an invalid value

    """
    return ConverterOptions().create_updated(**_section(config, "options"))


def build_media_options(config: Dict[str, Any]) -> Optional[MediaOptions]:
    """Build media store settings from the ``media`` section, or None if it has no endpoint."""
    media = dict(_section(config, "media"))
    if not media.get("endpoint"):
        return None
    if media.get("allowed_hosts") is not None:
        media["allowed_hosts"] = tuple(media["allowed_hosts"])
    return MediaOptions().create_updated(**media)


def build_converter(config: Dict[str, Any]) -> BlockConverter:
    """Create a converter configured from a configuration dictionary.

    Parameters
    ----------
    config : dict
        Merged configuration

    Returns
    -------
    BlockConverter
        Converter with options, media store, allow-list and mapping applied

    Raises
    ------
    ConfigError
        If a section has the wrong shape
    ValidationError
        If an option or table entry is invalid

    """
    for key in config:
        if key not in CONFIG_SECTIONS:
            logger.warning("Ignoring unknown configuration key '%s'", key)

    media_options = build_media_options(config)
    converter = BlockConverter(
        options=build_converter_options(config),
        media_store=WordPressMediaStore(media_options) if media_options is not None else None,
    )

    for tag, attributes in _section(config, "allowed_tags").items():
        converter.add_allowed_tag(tag, attributes or ())

    for tag, block_name in _section(config, "mapping").items():
        if not isinstance(block_name, str):
            raise ValidationError(
                f"Mapping for '{tag}' must be a block name", parameter_name="mapping", parameter_value=block_name
            )
        converter.add_dom_mapping(tag, block_name)

    remove_mapping = config.get("remove_mapping") or []
    if not isinstance(remove_mapping, list):
        raise ConfigError("'remove_mapping' must be a list of tag names")
    for tag in remove_mapping:
        converter.remove_dom_mapping(tag)

    return converter


def get_config_search_paths() -> list[Path]:
    """Return representative paths in the order configuration is searched."""
    cwd = Path.cwd()
    home = Path.home()
    paths = [cwd / filename for filename in CONFIG_FILENAMES]
    paths.extend(home / filename for filename in DEDICATED_CONFIG_FILENAMES)
    return paths


__all__ = [
    "CONFIG_FILENAMES",
    "build_converter",
    "build_converter_options",
    "build_media_options",
    "discover_config_file",
    "find_config_in_parents",
    "get_config_search_paths",
    "load_config_file",
    "load_config_with_priority",
    "merge_configs",
]
