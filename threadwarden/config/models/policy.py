"""Thread lifecycle policy configuration."""

import re
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import NoDecode

SNOWFLAKE_PATTERN = re.compile(r"^\d{17,19}$")

KickMode = Literal["exceeds", "reaches"]


def validate_snowflake(value: str, name: str) -> str:
    """Validate a Discord snowflake id (17-19 digit numeric string)."""
    value = value.strip()
    if not SNOWFLAKE_PATTERN.match(value):
        raise ValueError(
            f"Invalid Discord ID for {name}: {value!r}. "
            "Discord IDs should be numeric strings of 17-19 digits."
        )
    return value


class PolicyConfig(BaseModel):
    """Thread lifetime and escalation policy.

    kick_mode selects the removal boundary:
    - "exceeds": remove once the attempt count is strictly above kick_threshold
    - "reaches": remove as soon as the attempt count reaches kick_threshold
    """

    ttl_hours: float = Field(default=24.0, gt=0, description="Thread time-to-live")
    kick_threshold: int = Field(default=10, ge=1, description="Removal threshold")
    warning_threshold: int = Field(
        default=7, ge=1, description="Attempt count at which warnings start"
    )
    kick_mode: KickMode = Field(default="exceeds", description="Removal boundary")
    # Comma-separated in the environment, split by split_role_ids
    exempt_role_ids: Annotated[list[str], NoDecode] = Field(
        default_factory=list, description="Roles that bypass thread management"
    )

    @field_validator("exempt_role_ids", mode="before")
    @classmethod
    def split_role_ids(cls, value: object) -> object:
        """Accept a comma-separated string as well as a list."""
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("exempt_role_ids")
    @classmethod
    def check_role_ids(cls, value: list[str]) -> list[str]:
        return [validate_snowflake(role_id, "exempt_role_ids") for role_id in value]

    @model_validator(mode="after")
    def check_thresholds(self) -> "PolicyConfig":
        if self.warning_threshold > self.kick_threshold:
            raise ValueError(
                "warning_threshold must not exceed kick_threshold "
                f"({self.warning_threshold} > {self.kick_threshold})"
            )
        return self


class SweeperConfig(BaseModel):
    """Expiry sweeper scheduling."""

    enabled: bool = Field(default=True, description="Run the periodic sweeper")
    interval_seconds: float = Field(
        default=300.0, gt=0, description="Seconds between sweeps"
    )
    shutdown_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="How long stop() waits for an in-flight sweep",
    )
