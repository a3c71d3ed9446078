"""Configuration for aliasgate components."""

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ResolutionOverrides(BaseModel):
    """Deployment references for one alias; unset fields use development defaults."""

    provider_id: str | None = None
    provider_model_id: str | None = None
    endpoint_ref: str | None = None
    key_ref: str | None = None


class AliasgateConfig(BaseSettings):
    environment: str = "development"

    orbit: ResolutionOverrides = Field(default_factory=ResolutionOverrides)
    codemax: ResolutionOverrides = Field(default_factory=ResolutionOverrides)
    vision: ResolutionOverrides = Field(default_factory=ResolutionOverrides)
    echo: ResolutionOverrides = Field(default_factory=ResolutionOverrides)

    live_ws_url: str | None = None
    deployment_host: str | None = Field(
        default=None,
        validation_alias=AliasChoices("aliasgate_deployment_host", "vercel_url"),
    )
    live_path: str = "/aliasgate/live"
    default_alias_id: str = "echo-v1.0"

    redis_url: str | None = None
    telemetry_list: str = "aliasgate:telemetry"
    telemetry_list_max_len: int = 10_000
    telemetry_queue_size: int = 1_000

    open_timeout_seconds: float = 12.0

    model_config = SettingsConfigDict(
        env_prefix="aliasgate_",
        env_nested_delimiter="__",
        populate_by_name=True,
    )

    def overrides_for(self, alias_name: str) -> ResolutionOverrides:
        overrides = getattr(self, alias_name, None)
        if isinstance(overrides, ResolutionOverrides):
            return overrides
        return ResolutionOverrides()

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def live_url(self) -> str:
        """Live channel URL handed to clients: explicit override, deployment host, same origin."""
        if self.live_ws_url:
            return self.live_ws_url
        if self.deployment_host:
            return f"wss://{self.deployment_host}{self.live_path}"
        return self.live_path
