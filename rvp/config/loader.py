"""
TOML / JSON configuration loader with validation.

Loads Configuration files with:
- Environment variable substitution
- Schema validation (required keys, unique selector names, CSS syntax)
- Saving back to either format
"""

import json
import os
import re
import tomllib
from pathlib import Path
from typing import Optional, Union

import structlog
import tomli_w

from rvp.core.exceptions import ConfigurationError
from rvp.core.models import Configuration, ResourceSpec, SelectorSpec
from rvp.core.selectors import validate_selector

logger = structlog.get_logger(__name__)

FORMATS = ("toml", "json")


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variables in text.

    Supports formats:
    - ${VAR_NAME} - required, warning and empty string if missing
    - ${VAR_NAME:-default} - optional with default

    Args:
        text: Text with env var placeholders

    Returns:
        Text with substituted values
    """
    def replace(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)
        else:
            value = os.getenv(var_expr)
            if value is None:
                logger.warning("env_var_not_set", var=var_expr)
                return ""
            return value

    return re.sub(r"\$\{([^}]+)\}", replace, text)


def detect_format(path: Union[str, Path]) -> str:
    """
    Detect config format from file extension.

    Raises:
        ConfigurationError: If the extension is not .toml or .json
    """
    suffix = Path(path).suffix.lower().lstrip(".")
    if suffix not in FORMATS:
        raise ConfigurationError(
            f"Invalid file format {Path(path).suffix or '(none)'!r}, expected .toml or .json"
        )
    return suffix


def _require(data: dict, key: str, kind: type, where: str):
    if key not in data:
        raise ConfigurationError(f"Missing required field {key!r} in {where}")
    value = data[key]
    if not isinstance(value, kind):
        raise ConfigurationError(
            f"Field {key!r} in {where} must be {kind.__name__}, got {type(value).__name__}"
        )
    return value


def parse_selector(data: dict, where: str) -> SelectorSpec:
    """Parse and validate a selector definition."""
    if not isinstance(data, dict):
        raise ConfigurationError(f"{where} must be a table/object")

    name = _require(data, "name", str, where)
    selector = _require(data, "selector", str, where)

    if not name.strip():
        raise ConfigurationError(f"Empty selector name in {where}")
    validate_selector(selector)

    return SelectorSpec(name=name, selector=selector)


def parse_resource(data: dict, where: str) -> ResourceSpec:
    """Parse and validate a resource definition."""
    if not isinstance(data, dict):
        raise ConfigurationError(f"{where} must be a table/object")

    url = _require(data, "url", str, where)
    raw_selectors = _require(data, "selectors", list, where)

    if not url.strip():
        raise ConfigurationError(f"Empty url in {where}")

    selectors = [
        parse_selector(s, f"{where}, selector {i + 1}")
        for i, s in enumerate(raw_selectors)
    ]
    return ResourceSpec(url_template=url, selectors=selectors)


def parse_config(data: dict) -> Configuration:
    """
    Build a Configuration from its dict form.

    Args:
        data: Parsed TOML/JSON document

    Returns:
        Configuration

    Raises:
        ConfigurationError: If the document does not match the schema
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Config root must be a table/object")

    raw_resources = _require(data, "resources", list, "config")
    resources = [
        parse_resource(r, f"resource {i + 1}")
        for i, r in enumerate(raw_resources)
    ]

    return Configuration(
        resources=resources,
        name=str(data.get("name", "")),
        description=str(data.get("description", "")),
    )


def dumps(config: Configuration, fmt: str) -> str:
    """Serialize configuration to TOML or JSON text."""
    if fmt == "toml":
        return tomli_w.dumps(config.to_dict())
    if fmt == "json":
        return json.dumps(config.to_dict(), ensure_ascii=False, indent=2) + "\n"
    raise ConfigurationError(f"Unknown config format {fmt!r}")


def loads(text: str, fmt: str) -> Configuration:
    """Parse TOML or JSON text into a Configuration."""
    try:
        if fmt == "toml":
            data = tomllib.loads(text)
        elif fmt == "json":
            data = json.loads(text)
        else:
            raise ConfigurationError(f"Unknown config format {fmt!r}")
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Invalid {fmt.upper()}: {e}") from e

    return parse_config(data)


class ConfigLoader:
    """
    Configuration loader for extraction configs.

    Loads TOML/JSON config files and validates against expected schema.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory relative paths are resolved against
                       (defaults to the current directory)
        """
        self.config_dir = Path(config_dir) if config_dir else Path.cwd()

    def resolve_path(self, filename: Union[str, Path]) -> Path:
        path = Path(filename)
        return path if path.is_absolute() else self.config_dir / path

    def load(self, filename: Union[str, Path]) -> Configuration:
        """
        Load and validate a config file.

        Args:
            filename: Config file path (.toml or .json)

        Returns:
            Configuration

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        filepath = self.resolve_path(filename)
        fmt = detect_format(filepath)

        if not filepath.exists():
            raise ConfigurationError(f"Config file not found: {filepath}")

        logger.info("loading_config", file=str(filepath), format=fmt)

        try:
            content = filepath.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Cannot read config file {filepath}: {e}") from e

        # Substitute environment variables
        content = substitute_env_vars(content)

        config = loads(content, fmt)
        logger.info(
            "config_loaded",
            file=str(filepath),
            resources=len(config.resources),
            needs_parameters=config.needs_parameters,
        )
        return config

    def save(
        self,
        config: Configuration,
        filename: Union[str, Path],
        fmt: Optional[str] = None,
    ) -> Path:
        """
        Write configuration to file.

        Args:
            config: Configuration to save
            filename: Target path
            fmt: "toml" or "json" (defaults to the file extension)

        Returns:
            Path written
        """
        filepath = self.resolve_path(filename)
        fmt = fmt or detect_format(filepath)

        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(dumps(config, fmt), encoding="utf-8")

        logger.info("config_saved", file=str(filepath), format=fmt)
        return filepath


def load_config(config_path: Union[str, Path]) -> Configuration:
    """
    Convenience function to load a config file.

    Args:
        config_path: Path to .toml or .json config

    Returns:
        Configuration
    """
    return ConfigLoader().load(config_path)
