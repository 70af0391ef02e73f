"""
config.py

Responsibility: Persisted settings, last input per tool, and the GitHub token.

Settings live in a YAML file validated by the `Settings` model. Older files are
migrated on load. The store is read once when a tool starts and written once
after its prompts are answered; concurrent runs are not coordinated.

The GitHub token is kept in the OS keychain via keyring, never in the YAML file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional

import keyring
import yaml
from keyring.errors import KeyringError
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wpscaffold.textcase import snake_case

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2
CONFIG_ENV_VAR = "WPSCAFFOLD_CONFIG"
REPO_PATTERN = r"^[a-zA-Z0-9-]+/[a-zA-Z0-9.-]+$"


class ConfigError(ValueError):
    pass


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    schema_version: int = SCHEMA_VERSION
    plugin_template_repo: str = Field("wearerequired/wordpress-plugin-boilerplate", pattern=REPO_PATTERN)
    theme_template_repo: str = Field("wearerequired/wordpress-theme-boilerplate", pattern=REPO_PATTERN)
    project_template_repo: str = Field("wearerequired/wordpress-project-boilerplate", pattern=REPO_PATTERN)
    github_organization: str = Field("wearerequired", pattern=r"^[a-zA-Z0-9-]+$")
    skip_intros: bool = False
    ready_max_attempts: Optional[int] = Field(None, ge=1)
    last_input: dict[str, dict[str, Any]] = Field(default_factory=dict)


_V1_KEYS = {
    "pluginTemplateRepo": "plugin_template_repo",
    "themeTemplateRepo": "theme_template_repo",
    "projectTemplateRepo": "project_template_repo",
    "githubOrganization": "github_organization",
    "skipIntros": "skip_intros",
}
_V1_LAST_INPUT = {
    "pluginLastInput": "wordpress-plugin",
    "themeLastInput": "wordpress-theme",
    "mergePRLastInput": "merge-pr",
    "lastInput": "update-file",
}


def _migrate_v1(raw: dict[str, Any]) -> dict[str, Any]:
    """camelCase keys, one top-level `<tool>LastInput` entry per tool."""
    migrated: dict[str, Any] = {}
    last_input: dict[str, Any] = dict(raw.get("last_input") or {})
    for key, value in raw.items():
        if key in _V1_KEYS:
            migrated[_V1_KEYS[key]] = value
        elif key in _V1_LAST_INPUT and isinstance(value, dict):
            last_input[_V1_LAST_INPUT[key]] = {snake_case(k): v for k, v in value.items()}
        else:
            migrated[key] = value
    migrated["last_input"] = last_input
    return migrated


# from_version -> transform producing from_version + 1
MIGRATIONS: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    1: _migrate_v1,
}


def migrate(raw: dict[str, Any]) -> dict[str, Any]:
    version = int(raw.get("schema_version", 1))
    while version < SCHEMA_VERSION:
        step = MIGRATIONS.get(version)
        if step is None:
            raise ConfigError(f"No migration from config schema version {version}.")
        raw = step(raw)
        version += 1
        raw["schema_version"] = version
        logger.info("migrated config to schema version %s", version)
    return raw


def default_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "wpscaffold" / "config.yml"


class ConfigStore:
    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else default_config_path()
        self.settings = Settings()

    def load(self) -> Settings:
        if not self.path.exists():
            self.settings = Settings()
            return self.settings

        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file is not valid YAML: {self.path}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file must contain a mapping: {self.path}")

        try:
            self.settings = Settings.model_validate(migrate(raw))
        except ValidationError as e:
            raise ConfigError(f"Invalid config file {self.path}:\n{e}") from e
        return self.settings

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = self.settings.model_dump(mode="json")
        self.path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8")

    def last_input(self, tool: str) -> dict[str, Any] | None:
        return self.settings.last_input.get(tool)

    def remember(self, tool: str, answers: dict[str, Any]) -> None:
        last_input = dict(self.settings.last_input)
        last_input[tool] = dict(answers)
        self.settings.last_input = last_input


class CredentialStore:
    """GitHub token in the OS keychain, keyed by service name and account."""

    def __init__(self, service: str, account: str = "github") -> None:
        self.service = service
        self.account = account

    def get(self) -> str | None:
        try:
            return keyring.get_password(self.service, self.account)
        except KeyringError as e:
            logger.warning("could not read token from keychain: %s", e)
            return None

    def set(self, token: str) -> None:
        try:
            keyring.set_password(self.service, self.account, token)
        except KeyringError as e:
            logger.warning("could not store token in keychain: %s", e)

    def update(self, stored: str | None, token: str) -> None:
        if stored != token:
            self.set(token)
