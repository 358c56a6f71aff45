from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic.networks import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

from zendesk_ticket_viewer.config.env_aliases import get_flat_env_settings_source

# Zendesk hosts every account under its own subdomain.
ZENDESK_BASE_URL_TEMPLATE = "https://{subdomain}.zendesk.com/api/v2"


class _BaseSection(BaseModel):
    model_config = {"extra": "forbid"}


class ServerSettings(_BaseSection):
    host: str = "0.0.0.0"
    port: int = Field(default=5000, ge=1, le=65535)


class ZendeskSettings(_BaseSection):
    subdomain: str | None = None
    # Overrides the subdomain template (self-hosted proxies, local mocks).
    base_url: AnyHttpUrl | None = None
    email: str
    api_token: SecretStr
    timeout_seconds: float = Field(default=5.0, gt=0)
    verify_tls: bool = True
    max_retries: int = Field(default=2, ge=0, le=10)
    retry_backoff_seconds: float = Field(default=0.2, ge=0)

    @field_validator("subdomain")
    @classmethod
    def _normalize_subdomain(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip().lower().removesuffix(".zendesk.com")
        if not normalized:
            return None
        if "/" in normalized or "." in normalized or ":" in normalized:
            raise ValueError("zendesk.subdomain must be a bare account name, e.g. 'acme'")
        return normalized

    @model_validator(mode="after")
    def _require_subdomain_or_base_url(self) -> ZendeskSettings:
        if self.subdomain is None and self.base_url is None:
            raise ValueError("Either zendesk.subdomain or zendesk.base_url must be set")
        return self

    @property
    def api_base_url(self) -> str:
        if self.base_url is not None:
            return str(self.base_url).rstrip("/")
        return ZENDESK_BASE_URL_TEMPLATE.format(subdomain=self.subdomain)


class TicketsSettings(_BaseSection):
    # A one-ticket page makes pagination meaningless.
    display_limit: int = Field(default=25, ge=2, le=100)


class ObservabilitySettings(_BaseSection):
    log_level: str = "INFO"
    # Wins over LOG_FORMAT and json_logs when set.
    log_format: Literal["json", "human"] | None = None
    json_logs: bool = False
    metrics_enabled: bool = False
    # Bearer token required by GET /metrics; open when unset.
    metrics_bearer_token: SecretStr | None = None
    # Drop service name and version from GET /healthz.
    healthz_omit_version: bool = False

    @field_validator("log_format", mode="before")
    @classmethod
    def _normalize_log_format(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value


class TransportHardeningSettings(_BaseSection):
    """Opt-outs from the secure defaults for the Zendesk connection."""

    # Let httpx honor HTTP_PROXY/HTTPS_PROXY/NO_PROXY.
    trust_env: bool = False
    allow_insecure_http: bool = False
    allow_insecure_tls: bool = False
    # Mock servers on localhost during development.
    allow_local_upstreams: bool = False


class HardeningSettings(_BaseSection):
    transport: TransportHardeningSettings = Field(default_factory=TransportHardeningSettings)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        extra="forbid",
    )

    server: ServerSettings = Field(default_factory=ServerSettings)
    zendesk: ZendeskSettings
    tickets: TicketsSettings = Field(default_factory=TicketsSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    hardening: HardeningSettings = Field(default_factory=HardeningSettings)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Settings:
        """Build Settings from nested dicts only; the environment is not consulted."""
        class _InitOnlySettings(Settings):
            @classmethod
            def settings_customise_sources(
                cls,
                settings_cls,
                init_settings,
                env_settings,
                dotenv_settings,
                file_secret_settings,
            ):
                return (init_settings,)

        return _InitOnlySettings(**dict(data))

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # `.env` is loaded into os.environ by config.load, so it reaches us via env sources.
        return (
            env_settings,
            get_flat_env_settings_source,
            init_settings,
            file_secret_settings,
        )
