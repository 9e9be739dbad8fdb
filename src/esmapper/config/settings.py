"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file (if specified)
  2. Environment variables (ESMAPPER_ prefix)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

RefreshPolicy = Literal["true", "false", "wait_for"]


class ConnectionSettings(BaseModel):
    """Elasticsearch connection configuration."""

    hosts: list[str] = Field(default_factory=lambda: ["http://localhost:9200"], description="Cluster node URLs")
    username: str | None = Field(default=None, description="HTTP basic-auth username")
    password: str | None = Field(default=None, description="HTTP basic-auth password")
    api_key: str | None = Field(default=None, description="Encoded API key")
    verify_certs: bool = Field(default=True, description="Verify TLS certificates")
    ca_certs: str | None = Field(default=None, description="Path to a CA bundle")
    request_timeout: float = Field(default=60.0, description="Seconds to wait for a response")
    connections_per_node: int = Field(default=10, description="Size of the connection pool per node")
    max_retries: int = Field(default=3, description="Retries performed by the transport")
    min_tls_version: str = Field(default="TLSv1_2", description="Minimum TLS version for https hosts")

    @field_validator("hosts", mode="before")
    @classmethod
    def _parse_hosts(cls, v: Any) -> list[str]:
        """Parse hosts from JSON string (env var) or list."""
        if isinstance(v, str):
            import json

            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return [str(h) for h in parsed]
            except (json.JSONDecodeError, TypeError):
                pass
            # Single host as plain string
            return [v] if v else []
        return list(v)


class BulkSettings(BaseModel):
    """Bulk indexer configuration."""

    thread_count: int = Field(default=4, description="Concurrent bulk requests in flight")
    chunk_size: int = Field(default=500, description="Documents per bulk request")
    queue_size: int = Field(default=1000, description="Items buffered between submitter and workers")
    refresh: RefreshPolicy = Field(default="false", description="Refresh policy for bulk requests")


class WriteSettings(BaseModel):
    """Single-document write configuration."""

    refresh: RefreshPolicy = Field(default="true", description="Refresh policy for single writes")


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root settings.

    Configuration is loaded from environment variables with the ESMAPPER_ prefix.
    Nested settings use double underscores: ESMAPPER_BULK__THREAD_COUNT=8

    Example:
        ESMAPPER_ELASTICSEARCH__HOSTS='["https://es1:9200","https://es2:9200"]'
        ESMAPPER_ELASTICSEARCH__API_KEY=...
        ESMAPPER_WRITE__REFRESH=wait_for
    """

    model_config = {
        "env_prefix": "ESMAPPER_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    elasticsearch: ConnectionSettings = Field(default_factory=ConnectionSettings)
    bulk: BulkSettings = Field(default_factory=BulkSettings)
    write: WriteSettings = Field(default_factory=WriteSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Keys present in the YAML file are passed as init arguments and win
        over environment variables; missing keys still fall back to env.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
