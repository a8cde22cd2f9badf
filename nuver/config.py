"""Configuration: registry endpoints and layered user settings."""

import logging
import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "https://api.nuget.org/v3/index.json"

# Service index resource types, keyed by the endpoint name the client uses.
ENDPOINT_TYPES: Dict[str, str] = {
    "package_content": "PackageBaseAddress/3.0.0",
    "registration": "RegistrationsBaseUrl/3.6.0",
    "search": "SearchQueryService/3.5.0",
    "publish": "PackagePublish/2.0.0",
    "catalog": "Catalog/3.0.0",
    "signatures": "RepositorySignatures/5.0.0",
    "autocomplete": "SearchAutocompleteService/3.5.0",
    "symbol_publish": "SymbolPackagePublish/4.9.0",
}

# URL patterns relative to the endpoint base addresses
URL_PATTERNS = {
    "versions": "{base}{id}/index.json",
    "registration": "{base}{id}/index.json",
}

GLOBAL_CONFIG_FILE = Path("~/.config/nuver/nuverrc.toml")

# Read in this order from --root; later files win.
PROJECT_CONFIG_FILES = ["nuverrc", ".nuverrc", "nuverrc.toml", ".nuverrc.toml"]

ENV_PREFIX = "NUVER_CONFIG_"

LOG_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Settings:
    """Effective settings after every configuration layer is applied."""

    source: str = DEFAULT_SOURCE
    loglevel: str = "warning"
    quiet: bool = False
    json: bool = False
    color: bool = True
    timeout: float = 30.0

    @property
    def log_level(self) -> int:
        return LOG_LEVELS[self.loglevel]


def _coerce(key: str, value: Any, origin: str) -> Any:
    """Check and convert a raw value for ``key``; strings from the environment are converted."""
    if key in ("quiet", "json", "color"):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _TRUE | _FALSE:
            return value.strip().lower() in _TRUE
        raise ConfigError(f"{origin}: '{key}' must be a boolean, got {value!r}")

    if key == "timeout":
        if isinstance(value, bool):
            raise ConfigError(f"{origin}: 'timeout' must be a number, got {value!r}")
        try:
            timeout = float(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{origin}: 'timeout' must be a number, got {value!r}") from e
        if timeout <= 0:
            raise ConfigError(f"{origin}: 'timeout' must be positive, got {value!r}")
        return timeout

    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{origin}: '{key}' must be a non-empty string, got {value!r}")
    if key == "loglevel":
        level = value.strip().lower()
        if level not in LOG_LEVELS:
            raise ConfigError(
                f"{origin}: 'loglevel' must be one of {', '.join(LOG_LEVELS)}, got {value!r}"
            )
        return level
    return value.strip()


def _known_keys() -> Dict[str, None]:
    return {f.name: None for f in fields(Settings)}


def read_config_file(path: Path) -> Dict[str, Any]:
    """Read one TOML config file; a missing file yields an empty layer."""
    if not path.is_file():
        logger.debug(f"No config file at {path}")
        return {}

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read {path}: {e}") from e

    known = _known_keys()
    layer = {}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"Ignoring unknown config key '{key}' in {path}")
            continue
        layer[key] = _coerce(key, value, str(path))
    logger.debug(f"Loaded {len(layer)} settings from {path}")
    return layer


def read_environment(environ: Mapping[str, str]) -> Dict[str, Any]:
    layer = {}
    for key in _known_keys():
        name = ENV_PREFIX + key.upper()
        if name in environ:
            layer[key] = _coerce(key, environ[name], name)
    return layer


def load_settings(
    config_file: Optional[Path] = None,
    root: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Settings:
    """Merge defaults, the global file, the environment, project files and CLI overrides.

    Args:
        config_file: Replaces the global config file when given.
        root: Directory searched for project config files.
        environ: Environment to read NUVER_CONFIG_* variables from (default os.environ).
        overrides: Explicit values from the command line; None values are skipped.
    """
    merged: Dict[str, Any] = {}

    global_file = config_file if config_file is not None else GLOBAL_CONFIG_FILE.expanduser()
    if config_file is not None and not config_file.is_file():
        raise ConfigError(f"Config file not found: {config_file}")
    merged.update(read_config_file(global_file))

    merged.update(read_environment(os.environ if environ is None else environ))

    if root is not None:
        for name in PROJECT_CONFIG_FILES:
            merged.update(read_config_file(root / name))

    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = _coerce(key, value, "command line")

    return Settings(**merged)
