"""
Pydantic models for YAML configuration validation.
Provides schema validation with clear error messages for mirror configurations.
"""

from __future__ import annotations
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from chaos_mirror.core.models import DEFAULT_PLATFORM
from chaos_mirror.fetch.index import DEFAULT_INDEX_URL
from chaos_mirror.http.client import DEFAULT_USER_AGENT


class HttpConfig(BaseModel):
    """HTTP client settings."""
    timeout_s: int = Field(60, ge=1, le=3600, description="Timeout for each request in seconds")
    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent header sent with every request")


class MirrorConfig(BaseModel):
    """Root configuration model for a mirror run."""
    index_url: str = Field(DEFAULT_INDEX_URL, description="URL of the published program index")
    output_root: str = Field(".", description="Directory holding the per-platform snapshot and delta trees")
    state_dir: str = Field("data", description="Directory holding the last-run marker")
    default_platform: str = Field(DEFAULT_PLATFORM, description="Platform used for programs without one")
    skip_unchanged: bool = Field(True, description="Skip programs not updated since the last run")
    delay_ms: int = Field(0, ge=0, le=60000, description="Delay between program downloads in milliseconds")
    http: HttpConfig = Field(default_factory=HttpConfig)
    logging_config: str = Field("configs/logging.yaml", description="Path to the logging dictConfig YAML")

    @field_validator('index_url')
    @classmethod
    def validate_index_url(cls, v):
        if not v.startswith(('http://', 'https://')):
            raise ValueError('index_url must be a valid HTTP/HTTPS URL')
        return v

    @field_validator('default_platform')
    @classmethod
    def validate_default_platform(cls, v):
        if not v.strip() or any(c in v for c in ' /\\'):
            raise ValueError('default_platform must be a non-empty name without spaces or path separators')
        return v

    @property
    def last_run_path(self) -> Path:
        return Path(self.state_dir) / "last_run.txt"


def load_and_validate_config(config_path: str, required: bool = True) -> MirrorConfig:
    """
    Load and validate a mirror configuration from YAML file.

    Args:
        config_path: Path to the YAML configuration file
        required: When False, a missing file yields the default configuration

    Returns:
        Validated MirrorConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist and is required
        ValueError: If YAML is malformed or the configuration is invalid
    """
    path = Path(config_path)
    if not path.exists():
        if required:
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        return MirrorConfig()

    try:
        with path.open('r', encoding='utf-8') as f:
            raw_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}")

    try:
        return MirrorConfig(**raw_config)
    except ValidationError as e:
        # Format validation errors nicely
        error_messages = []
        for error in e.errors():
            field_path = '.'.join(str(loc) for loc in error['loc'])
            error_messages.append(f"  {field_path}: {error['msg']}")

        raise ValueError(
            f"Configuration validation failed for {config_path}:\n" +
            '\n'.join(error_messages)
        ) from e
