"""Server configuration -- environment variables first, then TOML files."""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import tomli_w
from platformdirs import user_config_dir
from pydantic import (
    BaseModel,
    ConfigDict,
    StrictBool,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from jenkinsls.errors import ConfigError

logger = logging.getLogger(__name__)

APP_NAME = "jenkinsfile-ls"
CONFIG_FILENAME = "config.toml"

URL_ENV_VARS = ("JENKINS_URL", "JENKINS_HOST")
USERNAME_ENV_VARS = ("JENKINS_USER_ID", "JENKINS_USERNAME")
TOKEN_ENV_VARS = ("JENKINS_API_TOKEN", "JENKINS_TOKEN", "JENKINS_PASSWORD")
INSECURE_ENV_VAR = "JENKINS_INSECURE"


class Config(BaseModel):
    """Connection settings for the Jenkins controller. Immutable once loaded."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    jenkins_url: str
    username: str
    api_token: str
    insecure: StrictBool = False

    @field_validator("jenkins_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value:
            raise ValueError("jenkins_url cannot be empty")
        if not value.startswith(("http://", "https://")):
            raise ValueError("jenkins_url must start with http:// or https://")
        return value

    @field_validator("username", "api_token")
    @classmethod
    def _check_not_empty(cls, value: str, info: ValidationInfo) -> str:
        if not value:
            raise ValueError(f"{info.field_name} cannot be empty")
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Config | None:
        """Build a Config from environment variables.

        Returns None unless the URL, username and token are all set. Each
        setting accepts several variable names; the first one present wins.
        """
        env = os.environ if environ is None else environ

        jenkins_url = _first_env(env, URL_ENV_VARS)
        username = _first_env(env, USERNAME_ENV_VARS)
        api_token = _first_env(env, TOKEN_ENV_VARS)
        if jenkins_url is None or username is None or api_token is None:
            return None

        insecure_raw = env.get(INSECURE_ENV_VAR, "")
        insecure = insecure_raw == "1" or insecure_raw.lower() == "true"

        try:
            return cls(
                jenkins_url=jenkins_url,
                username=username,
                api_token=api_token,
                insecure=insecure,
            )
        except ValidationError as e:
            raise ConfigError(f"invalid environment: {_describe(e)}") from e

    @classmethod
    def from_file(cls, path: Path) -> Config:
        """Load and validate a TOML config file."""
        try:
            contents = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to read config file {path}: {e}") from e

        try:
            data = tomllib.loads(contents)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Failed to parse config file {path}: {e}") from e

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"invalid config file {path}: {_describe(e)}") from e

    def to_toml(self) -> str:
        """Serialise to TOML text that from_file reads back unchanged."""
        return tomli_w.dumps(self.model_dump())

    def redacted(self) -> dict[str, Any]:
        """Settings safe to log (no token)."""
        return self.model_dump(exclude={"api_token"})


def _first_env(env: Mapping[str, str], names: tuple[str, ...]) -> str | None:
    for name in names:
        if name in env:
            return env[name]
    return None


def _describe(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"])
        msg = err["msg"].removeprefix("Value error, ")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def default_config_path() -> Path:
    """Return the platform config file location, e.g. ~/.config/jenkinsfile-ls/config.toml."""
    return Path(user_config_dir(APP_NAME)) / CONFIG_FILENAME


def load_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """Resolve configuration.

    Priority: environment variables, then config_path (when it exists), then
    the default config file (when it exists).
    """
    config = Config.from_env(environ)
    if config is not None:
        logger.debug("Configuration loaded from environment")
        return config

    if config_path is not None:
        if config_path.exists():
            logger.debug("Configuration loaded from %s", config_path)
            return Config.from_file(config_path)
        logger.warning("Config file %s does not exist, trying default location", config_path)

    default_path = default_config_path()
    if default_path.exists():
        logger.debug("Configuration loaded from %s", default_path)
        return Config.from_file(default_path)

    raise ConfigError(
        "No configuration found. Set environment variables "
        "(JENKINS_URL, JENKINS_USER_ID, JENKINS_API_TOKEN) or create a config file."
    )
