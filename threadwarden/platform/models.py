"""Platform-facing data models: thread snapshots and inbound events."""

from pydantic import BaseModel, ConfigDict, Field


class ThreadInfo(BaseModel):
    """Snapshot of a thread as the platform reports it."""

    model_config = ConfigDict(frozen=True)

    thread_id: str = Field(..., description="Platform thread id")
    name: str = Field(default="", description="Thread title")
    parent_id: str | None = Field(default=None, description="Channel the thread lives in")
    archived: bool = Field(default=False, description="Archived flag")
    locked: bool = Field(default=False, description="Locked flag")

    @property
    def is_open(self) -> bool:
        """A thread that is neither archived nor locked."""
        return not (self.archived or self.locked)


class MessageEvent(BaseModel):
    """A new message posted in a channel the service watches."""

    message_id: str = Field(..., description="Platform message id")
    channel_id: str = Field(..., description="Channel the message was posted in")
    guild_id: str = Field(..., description="Community (guild) id")
    author_id: str = Field(..., description="Author user id")
    author_name: str = Field(default="", description="Author username")
    display_name: str | None = Field(default=None, description="Member display name")
    author_is_bot: bool = Field(default=False, description="Posted by a bot account")
    has_member: bool = Field(
        default=True, description="Whether member info (roles) accompanied the event"
    )
    role_ids: list[str] = Field(default_factory=list, description="Author's role ids")

    @property
    def visible_name(self) -> str:
        """Display name when present, otherwise the username."""
        return self.display_name or self.author_name or self.author_id


class ThreadDeletedEvent(BaseModel):
    """A thread was removed out-of-band."""

    thread_id: str = Field(..., description="Deleted thread id")
    guild_id: str | None = Field(default=None, description="Community (guild) id")
    parent_id: str | None = Field(default=None, description="Parent channel id")
    name: str | None = Field(default=None, description="Thread title when known")
