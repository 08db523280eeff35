"""Configuration management for Scheduler Client."""

import json
import logging
from pathlib import Path
from typing import Optional, Any

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# Base API v1 path
API_URL_PREFIX = "/api/v1/"
JOB_PATH = "job/"
API_JOB_PATH = API_URL_PREFIX + JOB_PATH
STATS_PATH = "stats"

JSON_CONTENT_TYPE = "application/json;charset=UTF-8"

DEFAULT_ENDPOINT = "http://127.0.0.1:8000"


def normalize_endpoint(endpoint: str) -> str:
    """Strip a single trailing path separator from the endpoint."""
    if endpoint.endswith("/"):
        endpoint = endpoint[:-1]
    return endpoint


class HTTPTimeoutsConfig(BaseModel):
    """Per-phase HTTP timeouts in seconds."""

    connect: float = Field(default=10.0, description="Connect timeout in seconds")
    read: float = Field(default=30.0, description="Read timeout in seconds")
    write: float = Field(default=10.0, description="Write timeout in seconds")
    pool: float = Field(default=5.0, description="Pool acquire timeout in seconds")


class ClientConfig(BaseModel):
    """Configuration for a scheduler client instance."""

    endpoint: str = Field(
        default=DEFAULT_ENDPOINT, description="Base URL of the scheduler service"
    )
    max_redirects: int = Field(
        default=10,
        gt=0,
        description="Maximum requests in one redirect chain, original request included",
    )
    user_agent: Optional[str] = Field(
        default=None,
        description="Client identifier sent on cross-host redirects (library default if unset)",
    )
    timeouts: HTTPTimeoutsConfig = Field(default_factory=HTTPTimeoutsConfig)
    total_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Deadline in seconds for a whole call, redirects included",
    )

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Require an absolute http(s) URL."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Endpoint must be an http(s) URL, got {v!r}")
        return v

    @property
    def api_base_url(self) -> str:
        """Endpoint with the API prefix appended exactly once."""
        return normalize_endpoint(self.endpoint) + API_URL_PREFIX


class ConfigManager:
    """Manages client configuration loading and saving."""

    DEFAULT_CONFIG_PATH = Path(".scheduler-client/config.json")

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: Optional[ClientConfig] = None

    def load(self) -> ClientConfig:
        """Load configuration from file or create default."""
        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    data = json.load(f)
                self._config = ClientConfig(**data)
            except Exception as e:
                raise ValueError(f"Failed to load config from {self.config_path}: {e}")
        else:
            logger.debug(f"No config at {self.config_path}, using defaults")
            self._config = ClientConfig()

        return self._config

    def save(self, config: Optional[ClientConfig] = None) -> None:
        """Save configuration to file."""
        if config is None:
            config = self._config

        if config is None:
            raise ValueError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            json.dump(config.model_dump(), f, indent=2)

    def get_config(self) -> ClientConfig:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            return self.load()
        return self._config

    def update_config(self, **kwargs: Any) -> ClientConfig:
        """Update configuration with new values."""
        config = self.get_config()
        self._config = ClientConfig(**{**config.model_dump(), **kwargs})
        return self._config
