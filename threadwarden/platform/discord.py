"""Discord REST adapter.

Talks to the Discord HTTP API with httpx and classifies every failure:
only the Discord error codes for unknown resources and missing
access/permissions are permanent. Everything else (network errors,
timeouts, rate limits, 5xx and any other 4xx) is transient.
"""

from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

import httpx

from threadwarden.observability.logging import get_logger
from threadwarden.platform.client import ThreadPlatform
from threadwarden.platform.errors import DirectMessagesDisabled, FaultKind, PlatformError
from threadwarden.platform.models import ThreadInfo

logger = get_logger(__name__)

# Discord JSON error codes that will never succeed on retry
PERMANENT_ERROR_CODES: dict[int, str] = {
    10003: "unknown_channel",
    10004: "unknown_guild",
    10008: "unknown_message",
    50001: "missing_access",
    50013: "missing_permissions",
}
CANNOT_MESSAGE_USER = 50007

# Channel types for announcement, public and private threads
THREAD_CHANNEL_TYPES = frozenset({10, 11, 12})

# Permission bits
ADMINISTRATOR = 1 << 3
KICK_MEMBERS = 1 << 1
VIEW_CHANNEL = 1 << 10
SEND_MESSAGES = 1 << 11
MANAGE_MESSAGES = 1 << 13
READ_MESSAGE_HISTORY = 1 << 16
MANAGE_THREADS = 1 << 34
CREATE_PUBLIC_THREADS = 1 << 35

REQUIRED_CHANNEL_PERMISSIONS: dict[str, int] = {
    "VIEW_CHANNEL": VIEW_CHANNEL,
    "SEND_MESSAGES": SEND_MESSAGES,
    "MANAGE_MESSAGES": MANAGE_MESSAGES,
    "MANAGE_THREADS": MANAGE_THREADS,
    "CREATE_PUBLIC_THREADS": CREATE_PUBLIC_THREADS,
    "READ_MESSAGE_HISTORY": READ_MESSAGE_HISTORY,
}

ALL_PERMISSIONS = (1 << 53) - 1


class DiscordRestPlatform(ThreadPlatform):
    """ThreadPlatform backed by the Discord REST API (v10)."""

    def __init__(
        self,
        token: str,
        api_base_url: str = "https://discord.com/api/v10",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            token: Bot token
            api_base_url: REST API base URL
            timeout: Per-request timeout in seconds
            client: Pre-built client (tests inject one with a MockTransport)
        """
        self._client = client or httpx.AsyncClient(
            base_url=api_base_url,
            timeout=timeout,
        )
        self._headers = {
            "Authorization": f"Bot {token}",
            "User-Agent": "threadwarden (https://github.com/threadwarden, 1.0)",
        }
        self._bot_user_id: str | None = None

    @property
    def platform_name(self) -> str:
        return "discord"

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        json: dict[str, Any] | None = None,
        reason: str | None = None,
    ) -> Any:
        headers = dict(self._headers)
        if reason:
            headers["X-Audit-Log-Reason"] = quote(reason, safe="")

        try:
            response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException as e:
            raise PlatformError(
                f"{operation} timed out: {e}",
                FaultKind.TRANSIENT,
                reason="timeout",
                operation=operation,
            ) from e
        except httpx.TransportError as e:
            raise PlatformError(
                f"{operation} failed: {e}",
                FaultKind.TRANSIENT,
                reason="network",
                operation=operation,
            ) from e

        if response.status_code >= 400:
            raise self._classify(response, operation)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _classify(response: httpx.Response, operation: str) -> PlatformError:
        """Translate an error response into a PlatformError."""
        status = response.status_code
        code: int | None = None
        message = response.reason_phrase
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            raw_code = body.get("code")
            code = raw_code if isinstance(raw_code, int) else None
            message = str(body.get("message", message))

        if status == 429 or status >= 500:
            return PlatformError(
                f"{operation}: {message}",
                FaultKind.TRANSIENT,
                reason="rate_limited" if status == 429 else "service_unavailable",
                code=code,
                status=status,
                operation=operation,
            )
        if code == CANNOT_MESSAGE_USER:
            return DirectMessagesDisabled(
                f"{operation}: {message}", code=code, status=status, operation=operation
            )
        if code in PERMANENT_ERROR_CODES:
            return PlatformError(
                f"{operation}: {message}",
                FaultKind.PERMANENT,
                reason=PERMANENT_ERROR_CODES[code],
                code=code,
                status=status,
                operation=operation,
            )

        # Any other rejection is retried on the next attempt
        if status == 404:
            reason = "unknown_resource"
        elif status == 403:
            reason = "missing_permissions"
        elif status == 401:
            reason = "unauthorized"
        else:
            reason = "rejected"
        return PlatformError(
            f"{operation}: {message}",
            FaultKind.TRANSIENT,
            reason=reason,
            code=code,
            status=status,
            operation=operation,
        )

    async def open_thread(
        self,
        channel_id: str,
        message_id: str,
        name: str,
        auto_archive_minutes: int,
    ) -> str:
        data = await self._request(
            "POST",
            f"/channels/{channel_id}/messages/{message_id}/threads",
            "open_thread",
            json={"name": name[:100], "auto_archive_duration": auto_archive_minutes},
            reason="New support request",
        )
        return str(data["id"])

    async def delete_thread(self, thread_id: str, reason: str | None = None) -> None:
        await self._request("DELETE", f"/channels/{thread_id}", "delete_thread", reason=reason)

    async def lock_thread(self, thread_id: str, reason: str | None = None) -> None:
        await self._request(
            "PATCH",
            f"/channels/{thread_id}",
            "lock_thread",
            json={"locked": True},
            reason=reason,
        )

    async def archive_thread(self, thread_id: str, reason: str | None = None) -> None:
        await self._request(
            "PATCH",
            f"/channels/{thread_id}",
            "archive_thread",
            json={"archived": True},
            reason=reason,
        )

    async def close_thread(self, thread_id: str, reason: str | None = None) -> None:
        # An archived thread only accepts edits that also keep it archived
        await self._request(
            "PATCH",
            f"/channels/{thread_id}",
            "close_thread",
            json={"locked": True, "archived": True},
            reason=reason,
        )

    async def fetch_thread(self, thread_id: str) -> ThreadInfo | None:
        try:
            data = await self._request("GET", f"/channels/{thread_id}", "fetch_thread")
        except PlatformError as e:
            if e.status == 404 or e.reason == "unknown_channel":
                logger.debug("thread_not_found", thread_id=thread_id)
                return None
            raise

        if data.get("type") not in THREAD_CHANNEL_TYPES:
            logger.debug("channel_is_not_thread", thread_id=thread_id, type=data.get("type"))
            return None

        metadata = data.get("thread_metadata") or {}
        return ThreadInfo(
            thread_id=str(data["id"]),
            name=data.get("name") or "",
            parent_id=data.get("parent_id"),
            archived=bool(metadata.get("archived", False)),
            locked=bool(metadata.get("locked", False)),
        )

    async def remove_member(self, guild_id: str, user_id: str, reason: str) -> None:
        await self._request(
            "DELETE",
            f"/guilds/{guild_id}/members/{user_id}",
            "remove_member",
            reason=reason,
        )

    async def _get_bot_user_id(self) -> str:
        if self._bot_user_id is None:
            data = await self._request("GET", "/users/@me", "get_current_user")
            self._bot_user_id = str(data["id"])
        return self._bot_user_id

    async def _guild_permissions(self, guild_id: str) -> tuple[int, list[str], str]:
        """Return (base permissions, member role ids, bot user id) in a guild."""
        bot_id = await self._get_bot_user_id()
        member = await self._request(
            "GET", f"/guilds/{guild_id}/members/{bot_id}", "get_member"
        )
        roles = await self._request("GET", f"/guilds/{guild_id}/roles", "get_roles")

        member_roles = [str(r) for r in member.get("roles", [])]
        wanted = set(member_roles) | {guild_id}  # @everyone shares the guild id
        permissions = 0
        for role in roles:
            if str(role["id"]) in wanted:
                permissions |= int(role.get("permissions", "0"))
        if permissions & ADMINISTRATOR:
            permissions = ALL_PERMISSIONS
        return permissions, member_roles, bot_id

    async def can_remove_members(self, guild_id: str) -> bool:
        permissions, _, _ = await self._guild_permissions(guild_id)
        return bool(permissions & KICK_MEMBERS)

    async def send_direct(self, user_id: str, text: str) -> None:
        channel = await self._request(
            "POST",
            "/users/@me/channels",
            "send_direct",
            json={"recipient_id": user_id},
        )
        await self._request(
            "POST",
            f"/channels/{channel['id']}/messages",
            "send_direct",
            json={"content": text[:2000]},
        )

    async def delete_message(self, channel_id: str, message_id: str) -> None:
        await self._request(
            "DELETE",
            f"/channels/{channel_id}/messages/{message_id}",
            "delete_message",
        )

    async def post_log(
        self,
        channel_id: str,
        title: str,
        description: str,
        details: str | None = None,
        color: int | None = None,
    ) -> None:
        embed: dict[str, Any] = {
            "title": title[:256],
            "description": description[:4096],
            "timestamp": datetime.now(UTC).isoformat(),
        }
        if color is not None:
            embed["color"] = color
        if details:
            embed["fields"] = [{"name": "Details", "value": details[:1024]}]
        await self._request(
            "POST",
            f"/channels/{channel_id}/messages",
            "post_log",
            json={"embeds": [embed]},
        )

    async def check_channel_access(self, channel_id: str) -> list[str]:
        try:
            channel = await self._request("GET", f"/channels/{channel_id}", "get_channel")
        except PlatformError as e:
            if e.is_permanent:
                return ["VIEW_CHANNEL"]
            raise

        guild_id = str(channel.get("guild_id", ""))
        permissions, member_roles, bot_id = await self._guild_permissions(guild_id)
        if permissions != ALL_PERMISSIONS:
            permissions = _apply_overwrites(
                permissions,
                channel.get("permission_overwrites", []),
                guild_id=guild_id,
                role_ids=member_roles,
                member_id=bot_id,
            )

        return [
            name
            for name, bit in REQUIRED_CHANNEL_PERMISSIONS.items()
            if not permissions & bit
        ]

    def thread_link(self, guild_id: str, thread_id: str) -> str:
        return f"https://discord.com/channels/{guild_id}/{thread_id}"

    async def health_check(self) -> bool:
        try:
            await self._get_bot_user_id()
            return True
        except PlatformError as e:
            logger.warning("discord_health_check_failed", error=str(e))
            return False

    async def aclose(self) -> None:
        await self._client.aclose()


def _apply_overwrites(
    permissions: int,
    overwrites: list[dict[str, Any]],
    *,
    guild_id: str,
    role_ids: list[str],
    member_id: str,
) -> int:
    """Apply channel permission overwrites in Discord's order.

    @everyone first, then the union of role overwrites, then the member.
    """
    by_id = {str(o["id"]): o for o in overwrites}

    everyone = by_id.get(guild_id)
    if everyone:
        permissions &= ~int(everyone.get("deny", "0"))
        permissions |= int(everyone.get("allow", "0"))

    allow = deny = 0
    for role_id in role_ids:
        overwrite = by_id.get(role_id)
        if overwrite:
            allow |= int(overwrite.get("allow", "0"))
            deny |= int(overwrite.get("deny", "0"))
    permissions &= ~deny
    permissions |= allow

    member = by_id.get(member_id)
    if member:
        permissions &= ~int(member.get("deny", "0"))
        permissions |= int(member.get("allow", "0"))

    return permissions
