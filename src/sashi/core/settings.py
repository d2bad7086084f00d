"""Settings management for sashi with environment variable override support."""

import json
import logging
import os
import stat
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from sashi.core.exceptions import SettingsError

logger = logging.getLogger(__name__)


class RuntimeSettings(BaseModel):
    """Workflow execution configuration."""

    timeout_seconds: Optional[float] = Field(
        default=None, description="Deadline for a whole workflow execution; None disables it"
    )
    validate_returns: bool = Field(
        default=False, description="Check function results against their declared return types"
    )

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError(f"Invalid timeout_seconds: {v}. Must be positive")
        return v


class LLMSettings(BaseModel):
    """Model configuration for the default generation hook.

    Resolution order: explicit ``LLMGenerator(model=...)`` -> ``default_model``
    -> the ``llm`` library's own default model.
    """

    default_model: Optional[str] = Field(default=None, description="Model used for _generate/_transform")
    temperature: Optional[float] = Field(default=None, description="Sampling temperature, when supported")


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3000)
    session_secret: Optional[str] = Field(
        default=None, description="HMAC key for session tokens; None disables the session check"
    )


class SashiSettings(BaseModel):
    """Main settings configuration."""

    version: str = Field(default="1.0.0")
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)


# env var -> (section, field)
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "SASHI_TIMEOUT_SECONDS": ("runtime", "timeout_seconds"),
    "SASHI_VALIDATE_RETURNS": ("runtime", "validate_returns"),
    "SASHI_LLM_MODEL": ("llm", "default_model"),
    "SASHI_SESSION_SECRET": ("server", "session_secret"),
}

_SECRET_KEYS = {"server.session_secret"}


class SettingsManager:
    """Manages sashi settings with environment variable override support."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = settings_path or Path.home() / ".sashi" / "settings.json"
        self._settings: Optional[SashiSettings] = None
        # Lock for load-modify-save sequences
        self._lock = threading.Lock()

    def load(self) -> SashiSettings:
        """Load settings from file (cached) and apply environment overrides."""
        if self._settings is None:
            self._settings = self._load_from_file()
            self._validate_permissions(self._settings)
        return self._apply_env_overrides(self._settings)

    def reload(self) -> SashiSettings:
        """Force reload settings from file."""
        self._settings = None
        return self.load()

    def _load_from_file(self) -> SashiSettings:
        if not self.settings_path.exists():
            return SashiSettings()
        try:
            with open(self.settings_path, encoding="utf-8") as f:
                data = json.load(f)
            return SashiSettings(**data)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Failed to load settings from {self.settings_path} ({e}); using defaults")
            return SashiSettings()

    def _apply_env_overrides(self, settings: SashiSettings) -> SashiSettings:
        """Return a copy of ``settings`` with environment overrides applied.

        The cached file settings are never mutated, so overrides stay
        ephemeral and are never persisted by ``save``.
        """
        overrides: dict[str, dict[str, Any]] = {}
        for env_name, (section, field_name) in _ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value is None:
                continue
            overrides.setdefault(section, {})[field_name] = value

        if not overrides:
            return settings

        data = settings.model_dump()
        for section, values in overrides.items():
            data[section].update(values)
        try:
            return SashiSettings(**data)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid environment overrides: {e}")
            return settings

    def save(self, settings: Optional[SashiSettings] = None) -> None:
        """Save settings to file with atomic operations and secure permissions."""
        if settings is None:
            settings = self._settings or self._load_from_file()

        self.settings_path.parent.mkdir(parents=True, exist_ok=True)
        temp_fd, temp_path = tempfile.mkstemp(dir=self.settings_path.parent, prefix=".settings.", suffix=".tmp")

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                json.dump(settings.model_dump(), f, indent=2)
            os.replace(temp_path, self.settings_path)
            os.chmod(self.settings_path, stat.S_IRUSR | stat.S_IWUSR)  # 0o600
            self._settings = None
        except Exception:
            Path(temp_path).unlink(missing_ok=True)
            raise

    def get_value(self, key: str) -> Any:
        """Read a dotted key such as ``runtime.timeout_seconds``.

        Raises:
            SettingsError: If the key does not exist
        """
        section, _, field_name = key.partition(".")
        data = self.load().model_dump()
        if section not in data or not isinstance(data[section], dict) or field_name not in data[section]:
            raise SettingsError(f"Unknown setting '{key}'")
        return data[section][field_name]

    def set_value(self, key: str, value: Any) -> SashiSettings:
        """Persist a dotted key, validating the result.

        Raises:
            SettingsError: Unknown key or invalid value
        """
        section, _, field_name = key.partition(".")
        with self._lock:
            current = self._settings or self._load_from_file()
            data = current.model_dump()
            if section not in data or not isinstance(data[section], dict) or field_name not in data[section]:
                raise SettingsError(f"Unknown setting '{key}'")
            data[section][field_name] = value
            try:
                updated = SashiSettings(**data)
            except ValidationError as e:
                raise SettingsError(f"Invalid value for '{key}': {e.errors()[0]['msg']}") from e
            self.save(updated)
        return updated

    def reset(self) -> None:
        """Remove the settings file, falling back to defaults."""
        with self._lock:
            self.settings_path.unlink(missing_ok=True)
            self._settings = None

    def masked_dump(self) -> dict[str, Any]:
        """Settings as a dict with secrets masked (show first 3 chars + ***)."""
        data = self.load().model_dump()
        for key in _SECRET_KEYS:
            section, _, field_name = key.partition(".")
            value = data[section].get(field_name)
            if value:
                data[section][field_name] = "***" if len(value) <= 3 else value[:3] + "***"
        return data

    def _validate_permissions(self, settings: SashiSettings) -> None:
        """Warn when a settings file holding a session secret is group/world readable."""
        if not self.settings_path.exists() or not settings.server.session_secret:
            return
        try:
            mode = stat.S_IMODE(os.stat(self.settings_path).st_mode)
        except OSError as e:
            logger.debug(f"Permission validation failed: {e}")
            return
        if mode & (stat.S_IROTH | stat.S_IRGRP):
            logger.warning(
                f"Settings file {self.settings_path} contains secrets "
                f"but has insecure permissions {oct(mode)}. "
                f"Run: chmod 600 {self.settings_path}"
            )
