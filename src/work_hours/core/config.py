"""YAML settings for Work Hours, validated with JSON Schema.

Settings are read with dot-separated keys such as ``export.locale``. A file
that fails validation is moved aside and replaced by the defaults.
"""

import copy
import os
import secrets
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml  # type: ignore[import-untyped]
from jsonschema import ValidationError, validate  # type: ignore[import-untyped]

# Overrides the default settings file; also how API workers find the file
CONFIG_ENV_VAR = "WORK_HOURS_CONFIG"

DEFAULT_CONFIG_PATH = Path.home() / ".work-hours" / "config.yml"

_MISSING = object()

_BOOL = {"type": "boolean"}
_TEXT = {"type": "string"}
_OPTIONAL_TEXT = {"type": ["string", "null"]}


def _section(**properties: Any) -> dict[str, Any]:
    return {"type": "object", "properties": properties}


def _int_range(low: int, high: int) -> dict[str, Any]:
    return {"type": "integer", "minimum": low, "maximum": high}


def default_config_path() -> Path:
    """``$WORK_HOURS_CONFIG`` if set, else ``~/.work-hours/config.yml``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override).expanduser() if override else DEFAULT_CONFIG_PATH


class ConfigManager:
    """Load, validate and persist the settings file."""

    DEFAULT_CONFIG: dict[str, Any] = {
        "version": "1.0",
        "general": {
            "data_dir": "~/.work-hours/data",
            "user_id": "local",
            "date_format": "%d.%m.%Y",
            "time_format": "%H:%M",
        },
        "export": {
            "default_format": "excel",
            "locale": "en",
            "currency_symbol": "₪",
            "filename_prefix": None,
        },
        "display": {
            "show_seconds": True,
        },
        "advanced": {
            "backup_on_start": False,
            "log_level": "INFO",
            "log_file": None,
        },
        "api": {
            "enabled": False,
            "host": "localhost",
            "port": 8000,
            "workers": 1,
            "authentication": {
                "enabled": True,
                "token_expiry_hours": 24,
                "secret_key": None,
            },
            "cors": {
                "enabled": True,
                "origins": ["http://localhost:3000", "http://localhost:5173"],
            },
            "advanced": {
                "reload": False,
                "log_level": "info",
                "access_log": True,
            },
        },
    }

    CONFIG_SCHEMA: dict[str, Any] = {
        **_section(
            version=_TEXT,
            general=_section(
                data_dir=_TEXT,
                user_id={"type": "string", "minLength": 1},
                date_format=_TEXT,
                time_format=_TEXT,
            ),
            export=_section(
                default_format={"type": "string", "enum": ["excel", "json"]},
                locale={"type": "string", "enum": ["en", "he"]},
                currency_symbol=_TEXT,
                filename_prefix=_OPTIONAL_TEXT,
            ),
            display=_section(show_seconds=_BOOL),
            advanced=_section(
                backup_on_start=_BOOL,
                log_level={"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR"]},
                log_file=_OPTIONAL_TEXT,
            ),
            api=_section(
                enabled=_BOOL,
                host=_TEXT,
                port=_int_range(1, 65535),
                workers=_int_range(1, 16),
                authentication=_section(
                    enabled=_BOOL,
                    token_expiry_hours=_int_range(1, 8760),
                    secret_key=_OPTIONAL_TEXT,
                ),
                cors=_section(
                    enabled=_BOOL,
                    origins={"type": "array", "items": _TEXT},
                ),
                advanced=_section(reload=_BOOL, log_level=_TEXT, access_log=_BOOL),
            ),
        ),
        "required": ["version"],
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Open the settings file, creating it with defaults when absent.

        Args:
            config_path: Settings file. Defaults to ``default_config_path()``

        Raises:
            ValueError: If the existing file was invalid. It is renamed to
                ``*.yml.backup`` and the defaults are written in its place.
        """
        self.config_path = Path(config_path) if config_path else default_config_path()
        self._config: dict[str, Any] = copy.deepcopy(self.DEFAULT_CONFIG)

        if not self.config_path.exists():
            self.save()
            return

        with open(self.config_path, encoding="utf-8") as f:
            _deep_merge(self._config, yaml.safe_load(f) or {})

        try:
            self.validate()
        except ValueError as e:
            backup_path = self.config_path.with_suffix(".yml.backup")
            self.config_path.replace(backup_path)
            self.reset()
            raise ValueError(
                f"Config validation failed, backed up to {backup_path}. Using defaults. {e}"
            )

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dot-separated key.

        Missing keys and keys set to null both give ``default``.

        Example:
            >>> config.get('export.locale')
            'en'
        """
        node: Any = self._config
        for part in key.split("."):
            node = node.get(part, _MISSING) if isinstance(node, dict) else _MISSING
            if node is _MISSING or node is None:
                return default
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a dot-separated key and save, creating missing sections.

        Raises:
            ValueError: If the result fails validation. Nothing is changed.
        """
        candidate = copy.deepcopy(self._config)
        *parents, leaf = key.split(".")
        node = candidate
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value

        _check(candidate, self.CONFIG_SCHEMA)
        self._config = candidate
        self.save()

    def validate(self) -> bool:
        """Check the current settings against ``CONFIG_SCHEMA``.

        Raises:
            ValueError: If a value is out of range or of the wrong type
        """
        _check(self._config, self.CONFIG_SCHEMA)
        return True

    def save(self) -> None:
        """Write the settings through a temp file in the same directory."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            dir=self.config_path.parent, prefix=".config.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(self._config, f, sort_keys=False, allow_unicode=True)
            os.replace(temp_name, self.config_path)
        except Exception:
            Path(temp_name).unlink(missing_ok=True)
            raise

    def reset(self) -> None:
        """Restore and save the defaults."""
        self._config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.save()

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._config)

    def get_all_keys(self, prefix: str = "") -> list[str]:
        """Dot-separated keys of every leaf setting, in file order."""
        node = self.get(prefix, {}) if prefix else self._config
        keys: list[str] = []
        for name, value in node.items():
            full_key = f"{prefix}.{name}" if prefix else name
            if isinstance(value, dict):
                keys.extend(self.get_all_keys(full_key))
            else:
                keys.append(full_key)
        return keys

    @property
    def data_dir(self) -> Path:
        """Data directory with ``~`` expanded."""
        return Path(self.get("general.data_dir", "~/.work-hours/data")).expanduser()

    def ensure_api_secret_key(self) -> str:
        """Return the token signing key, generating and saving one if unset."""
        secret_key: Optional[str] = self.get("api.authentication.secret_key")
        if not secret_key:
            secret_key = secrets.token_urlsafe(32)
            self.set("api.authentication.secret_key", secret_key)
        return secret_key


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    for key, value in override.items():
        if isinstance(base.get(key), dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def _check(config: dict[str, Any], schema: dict[str, Any]) -> None:
    try:
        validate(instance=config, schema=schema)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e.message}")
