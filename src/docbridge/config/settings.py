"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. Environment variables (DOCBRIDGE_ prefix)
  2. YAML config file (if specified)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class StoreSettings(BaseModel):
    """Document store connection configuration."""

    hosts: list[str] = Field(default_factory=lambda: ["http://localhost:9200"], description="Elasticsearch node URLs")
    username: str | None = Field(default=None, description="Basic-auth username")
    password: str | None = Field(default=None, description="Basic-auth password")
    api_key: str | None = Field(default=None, description="API key authentication")
    verify_certs: bool = Field(default=True, description="Verify TLS certificates")
    request_timeout: float = Field(default=30.0, gt=0, description="Default request timeout in seconds")
    refresh: Literal["true", "false", "wait_for"] = Field(
        default="true",
        description="Refresh policy for writes: true, false, wait_for",
    )
    indices: dict[str, str] = Field(default_factory=dict, description="Model class name to index name overrides")
    extra: dict[str, Any] = Field(default_factory=dict, description="Extra AsyncElasticsearch options")

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


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root settings.

    Configuration is loaded from environment variables with the DOCBRIDGE_ prefix.
    Nested settings use double underscores: DOCBRIDGE_STORE__REFRESH=wait_for

    Example:
        DOCBRIDGE_STORE__HOSTS='["https://es-1:9200","https://es-2:9200"]'
        DOCBRIDGE_STORE__API_KEY=...
        DOCBRIDGE_OBSERVABILITY__LOG_FORMAT=console
    """

    model_config = {
        "env_prefix": "DOCBRIDGE_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    app_name: str = Field(default="docbridge", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    store: StoreSettings = Field(default_factory=StoreSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Values from the YAML file are used as defaults; environment variables
        still take precedence.

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
