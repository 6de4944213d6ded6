"""
Persistent settings for WireView.

Settings hold the server URL and the custom headers and are stored as YAML.
Interested parties subscribe to the store and are called with the new
settings after every change, so a client can be reconnected on the fly.
"""

import json
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "wireview" / "config.yaml"

_UNSET = object()

logger = logging.getLogger("wireview.settings")


class SettingsError(Exception):
    """Exception raised when settings cannot be read, validated or written."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class Settings(BaseModel):
    """User-facing settings."""

    server_url: Optional[str] = Field(None, description="MCP server endpoint URL")
    custom_headers: Dict[str, str] = Field(
        default_factory=dict, description="Headers added to every request"
    )

    @field_validator("server_url")
    @classmethod
    def validate_server_url(cls, value: Optional[str]) -> Optional[str]:
        """Validate that the URL is an absolute http(s) URL; blank means unset."""
        if value is None or not value.strip():
            return None

        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid URL format: {value}")
        return value

    @field_validator("custom_headers", mode="before")
    @classmethod
    def validate_custom_headers(cls, value):
        """Validate that all header values are strings."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("Custom headers must be a mapping")
        for name, header_value in value.items():
            if not isinstance(header_value, str):
                raise ValueError(f"All header values must be strings (got {name!r})")
        return value


def parse_headers_text(text: Optional[str]) -> Dict[str, str]:
    """
    Parse custom headers typed as a JSON object.

    Args:
        text: JSON object text; empty or blank text clears the headers

    Returns:
        Header mapping

    Raises:
        SettingsError: If the text is not a JSON object of strings
    """
    if text is None or not text.strip():
        return {}

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        raise SettingsError("Invalid JSON format")

    if not isinstance(parsed, dict):
        raise SettingsError("Must be a JSON object")

    for value in parsed.values():
        if not isinstance(value, str):
            raise SettingsError("All header values must be strings")

    return parsed


SettingsListener = Callable[[Settings], None]


class SettingsStore:
    """
    YAML-backed settings store with change notifications.

    The file is read lazily on first access. ``update`` validates, saves and
    then notifies every subscriber with the new settings.
    """

    def __init__(self, path: Optional[Path] = None):
        """
        Initialize the settings store.

        Args:
            path: Path to the YAML file (defaults to ~/.config/wireview/config.yaml)
        """
        self.path = Path(path) if path else DEFAULT_CONFIG_PATH
        self._settings: Optional[Settings] = None
        self._listeners: List[SettingsListener] = []

    @property
    def settings(self) -> Settings:
        """Get the current settings, loading them on first access."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> Settings:
        """
        Load settings from the YAML file.

        Returns:
            Loaded settings, or empty settings if the file does not exist

        Raises:
            SettingsError: If the file cannot be read or is invalid
        """
        if not self.path.exists():
            logger.debug(f"Settings file not found, using defaults: {self.path}")
            self._settings = Settings()
            return self._settings

        try:
            with open(self.path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise SettingsError(f"Error loading settings from {self.path}: {str(e)}")

        if not isinstance(data, dict):
            raise SettingsError(f"Settings file {self.path} must contain a mapping")

        try:
            self._settings = Settings(**data)
        except ValidationError as e:
            raise SettingsError(f"Invalid settings in {self.path}: {str(e)}")

        return self._settings

    def save(self) -> None:
        """
        Write the current settings to the YAML file.

        Raises:
            SettingsError: If the file cannot be written
        """
        self._write(self.settings)

    def _write(self, settings: Settings) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                yaml.safe_dump(settings.model_dump(), f, default_flow_style=False)
        except OSError as e:
            raise SettingsError(f"Error writing settings to {self.path}: {str(e)}")

    def update(self, server_url=_UNSET, custom_headers=_UNSET) -> Settings:
        """
        Change one or both settings, save them and notify subscribers.

        Args:
            server_url: New server URL (unchanged when omitted)
            custom_headers: New header set, replacing the old one (unchanged when omitted)

        Returns:
            The new settings

        Raises:
            SettingsError: If the new values are invalid or cannot be saved
        """
        data = self.settings.model_dump()
        if server_url is not _UNSET:
            data["server_url"] = server_url
        if custom_headers is not _UNSET:
            data["custom_headers"] = custom_headers

        try:
            settings = Settings(**data)
        except ValidationError as e:
            raise SettingsError(f"Invalid settings: {str(e)}")

        # Kept in memory only once it is on disk
        self._write(settings)
        self._settings = settings
        self._notify()
        return settings

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        """
        Register a change listener.

        Args:
            listener: Called with the new settings after every update

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._settings)
