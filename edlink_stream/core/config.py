"""Client configuration loaded from environment variables.

Required:
    EDLINK_CLIENT_ID
    EDLINK_CLIENT_SECRET       sent as the bearer token

Optional:
    EDLINK_API_BASE_URL        default: https://ed.link/api
    EDLINK_DEFAULT_MAX_PAGES   default: 3
    EXAMPLE                    example to run from the CLI, 1-8 (default: 1)

Variables in ``.env.local`` (if present) are loaded first and take
precedence over the process environment.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from edlink_stream.exceptions import ConfigurationError

DEFAULT_API_BASE_URL = "https://ed.link/api"
DEFAULT_MAX_PAGES = 3
DEFAULT_ENV_FILE = ".env.local"

_GRAPH_PREFIX = "/v2/graph"


class EdlinkConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    client_id: str = Field(min_length=1)
    client_secret: SecretStr
    api_base_url: str = DEFAULT_API_BASE_URL
    default_max_pages: int = Field(default=DEFAULT_MAX_PAGES, ge=0)
    example_number: int = 1

    @field_validator("client_secret")
    @classmethod
    def _secret_not_empty(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            raise ValueError("must not be empty")
        return v

    @field_validator("api_base_url")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("must not be empty")
        return v

    @property
    def graph_url(self) -> str:
        """Root of the Graph API, e.g. ``https://ed.link/api/v2/graph``."""
        return f"{self.api_base_url}{_GRAPH_PREFIX}"


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from None


def load_config(env_file: str | Path | None = DEFAULT_ENV_FILE) -> EdlinkConfig:
    """Build an :class:`EdlinkConfig` from the environment.

    Raises :class:`ConfigurationError` if a required variable is missing
    or a value is malformed.  Pass ``env_file=None`` to skip the file.
    """
    if env_file is not None and Path(env_file).is_file():
        load_dotenv(env_file, override=True)

    missing = [
        key for key in ("EDLINK_CLIENT_ID", "EDLINK_CLIENT_SECRET") if not os.environ.get(key)
    ]
    if missing:
        raise ConfigurationError(f"missing required environment variables: {', '.join(missing)}")

    try:
        return EdlinkConfig(
            client_id=os.environ["EDLINK_CLIENT_ID"],
            client_secret=SecretStr(os.environ["EDLINK_CLIENT_SECRET"]),
            api_base_url=os.environ.get("EDLINK_API_BASE_URL") or DEFAULT_API_BASE_URL,
            default_max_pages=_env_int("EDLINK_DEFAULT_MAX_PAGES", DEFAULT_MAX_PAGES),
            example_number=_env_int("EXAMPLE", 1),
        )
    except ValidationError as exc:
        raise ConfigurationError(f"invalid configuration: {exc}") from exc
