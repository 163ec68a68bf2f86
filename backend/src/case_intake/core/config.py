"""Configuration loading utilities for the case intake service."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .fields import FieldCatalogueError, load_field_catalogue
from .normalize import normalize_database_id

PACKAGE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = PACKAGE_DIR / "config" / "app.yaml"
DEFAULT_FIELDS_PATH = PACKAGE_DIR / "contracts" / "case_fields.yaml"


class HttpSettings(BaseModel):
    timeout_seconds: float = Field(default=30.0, gt=0)


class Settings(BaseModel):
    """Process-wide settings sourced from YAML + environment overrides.

    Treated as read-only once loaded. Notion credentials are optional here:
    a missing token or database id is reported per request, not at startup.
    """

    notion_token: Optional[str] = None
    notion_database_id: Optional[str] = None
    notion_version: str = Field(default="2022-06-28", min_length=1)
    api_base_url: str = Field(default="https://api.notion.com/v1", min_length=1)
    required_fields: List[str] = Field(
        default_factory=lambda: ["CaseID", "Status", "Urgency", "Specialty"],
        min_length=1,
    )
    fields_path: Path = DEFAULT_FIELDS_PATH
    log_level: str = "INFO"
    http: HttpSettings = Field(default_factory=HttpSettings)

    model_config = {"frozen": True}

    @field_validator("notion_token", "notion_database_id")
    @classmethod
    def _blank_is_missing(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("required_fields")
    @classmethod
    def _strip_required(cls, value: List[str]) -> List[str]:
        cleaned = [name.strip() for name in value if name and name.strip()]
        if not cleaned:
            raise ValueError("required_fields must name at least one field")
        return cleaned

    @property
    def database_id(self) -> Optional[str]:
        """Normalised database id, or ``None`` when missing or malformed."""
        return normalize_database_id(self.notion_database_id)


class SettingsError(RuntimeError):
    """Raised when configuration cannot be loaded."""


class ConfigurationError(RuntimeError):
    """Raised per request when credentials or the target database are unusable."""

    def __init__(self, error: str, *, message: str | None = None, value_seen: str | None = None):
        super().__init__(error)
        self.error = error
        self.message = message
        self.value_seen = value_seen


def _load_yaml_config() -> Dict[str, Any]:
    load_dotenv()

    config_path = os.getenv("APP_CONFIG")
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if not path.exists():
        raise SettingsError(f"APP_CONFIG path not found: {path}")

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    if not isinstance(data, dict):
        raise SettingsError(f"APP_CONFIG must contain a mapping: {path}")

    # Secrets only ever come from the environment.
    data["notion_token"] = os.getenv("NOTION_TOKEN")
    data["notion_database_id"] = os.getenv("NOTION_DATABASE_ID")

    if "NOTION_VERSION" in os.environ:
        data["notion_version"] = os.environ["NOTION_VERSION"]

    if "NOTION_API_BASE_URL" in os.environ:
        data["api_base_url"] = os.environ["NOTION_API_BASE_URL"]

    if "REQUIRED_FIELDS" in os.environ:
        data["required_fields"] = [name.strip() for name in os.environ["REQUIRED_FIELDS"].split(",")]

    if "APP_FIELDS_PATH" in os.environ:
        data["fields_path"] = os.environ["APP_FIELDS_PATH"]

    if "LOG_LEVEL" in os.environ:
        data["log_level"] = os.environ["LOG_LEVEL"]

    if "HTTP_TIMEOUT_SECONDS" in os.environ:
        http: Dict[str, Any] = data.get("http") or {}
        http["timeout_seconds"] = os.environ["HTTP_TIMEOUT_SECONDS"]
        data["http"] = http

    return data


_CACHED_SETTINGS: Optional[Settings] = None


def load_settings(force_reload: bool = False) -> Settings:
    """Load application settings and cache the result."""

    global _CACHED_SETTINGS

    if _CACHED_SETTINGS is not None and not force_reload:
        return _CACHED_SETTINGS

    raw = _load_yaml_config()

    try:
        settings = Settings.model_validate(raw)
    except (ValidationError, ValueError) as exc:
        raise SettingsError(f"Invalid configuration: {exc}") from exc

    try:
        catalogue = load_field_catalogue(settings.fields_path)
    except FieldCatalogueError as exc:
        raise SettingsError(str(exc)) from exc

    problems = catalogue.unrequirable(settings.required_fields)
    if problems:
        raise SettingsError(f"required_fields cannot require: {', '.join(problems)}")

    _CACHED_SETTINGS = settings
    return settings


__all__ = [
    "ConfigurationError",
    "HttpSettings",
    "Settings",
    "SettingsError",
    "load_settings",
]
