"""Messaging platform configuration."""

from typing import Literal

from pydantic import (
    BaseModel,
    Field,
    SecretStr,
    ValidationInfo,
    field_validator,
    model_validator,
)

from threadwarden.config.models.policy import validate_snowflake

PlatformBackend = Literal["discord", "inmemory"]


class DiscordConfig(BaseModel):
    """Discord connection and channel configuration."""

    backend: PlatformBackend = Field(
        default="discord",
        description="Platform adapter (inmemory for local runs and tests)",
    )
    token: SecretStr | None = Field(
        default=None,
        description="Bot token (from THREADWARDEN_DISCORD__TOKEN env var)",
    )
    api_base_url: str = Field(
        default="https://discord.com/api/v10",
        description="Discord REST API base URL",
    )
    guild_id: str = Field(
        default="", description="Community (guild) id, enables the startup kick check"
    )
    managed_channel_id: str = Field(
        default="", description="Channel where support threads are opened"
    )
    logging_channel_id: str = Field(
        default="", description="Channel that receives notifications"
    )
    request_timeout_seconds: float = Field(
        default=10.0, gt=0, description="HTTP timeout for REST calls"
    )
    thread_auto_archive_minutes: int = Field(
        default=1440, description="Auto-archive hint sent when opening a thread"
    )

    @field_validator("guild_id", "managed_channel_id", "logging_channel_id")
    @classmethod
    def check_snowflake_ids(cls, value: str, info: ValidationInfo) -> str:
        if not value:
            return value
        return validate_snowflake(value, info.field_name or "id")

    @model_validator(mode="after")
    def check_required(self) -> "DiscordConfig":
        if self.backend != "discord":
            return self
        if self.token is None or not self.token.get_secret_value().strip():
            raise ValueError(
                "Missing required setting discord.token "
                "(set THREADWARDEN_DISCORD__TOKEN)"
            )
        for name in ("managed_channel_id", "logging_channel_id"):
            if not getattr(self, name):
                raise ValueError(
                    f"Missing required setting discord.{name} "
                    f"(set THREADWARDEN_DISCORD__{name.upper()})"
                )
        return self
