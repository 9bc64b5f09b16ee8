"""
Core types for the Rocket.Chat REST API.

These dataclasses provide type safety and IDE support for API responses.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

# =============================================================================
# Pagination
# =============================================================================


T = TypeVar("T")


@dataclass
class PaginatedResponse(Generic[T]):
    """Paginated API response."""

    data: list[T]
    total_count: int
    offset: int = 0
    limit: int = 50

    @property
    def has_more(self) -> bool:
        """Check if there are more results."""
        return self.offset + len(self.data) < self.total_count


# =============================================================================
# Credentials
# =============================================================================


@dataclass(frozen=True)
class Token:
    """Credentials sent with every request."""

    auth_token: str | None = None
    user_id: str | None = None

    @property
    def is_present(self) -> bool:
        return bool(self.auth_token and self.user_id)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Token":
        """Create from a login response's ``data`` dict."""
        return cls(auth_token=data.get("authToken"), user_id=data.get("userId"))


# =============================================================================
# Room Types
# =============================================================================


@dataclass(frozen=True)
class RoomKind:
    """
    Describes one room type's REST surface.

    ``prefix`` is the endpoint prefix (``channels.create``), ``collection`` the
    key holding list results, and ``field`` both the key holding a single room
    in responses and the word used for the room type in messages.
    """

    name: str
    prefix: str
    collection: str
    field: str
    room_type: str
    settable_attributes: frozenset[str] = frozenset()
    create_param: str = "name"
    joinable: bool = False

    def api_path(self, action: str) -> str:
        """Build the endpoint path for an action (e.g. ``create``)."""
        return f"{self.prefix}.{action}"


CHANNELS = RoomKind(
    name="channels",
    prefix="channels",
    collection="channels",
    field="channel",
    room_type="c",
    settable_attributes=frozenset({"description", "join_code", "purpose", "read_only", "topic", "type"}),
    joinable=True,
)

GROUPS = RoomKind(
    name="groups",
    prefix="groups",
    collection="groups",
    field="group",
    room_type="p",
    settable_attributes=frozenset({"description", "purpose", "read_only", "topic", "type"}),
)

DIRECT_MESSAGES = RoomKind(
    name="ims",
    prefix="im",
    collection="ims",
    field="room",
    room_type="d",
    settable_attributes=frozenset({"topic"}),
    create_param="username",
)

ROOM_KINDS = {kind.name: kind for kind in (CHANNELS, GROUPS, DIRECT_MESSAGES)}


@dataclass(frozen=True)
class Room:
    """A room (channel, private group or direct message)."""

    id: Any
    name: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def type(self) -> str | None:
        """Room type discriminator: c (public), p (private) or d (direct)."""
        return self.data.get("t")

    @property
    def topic(self) -> str | None:
        return self.data.get("topic")

    @property
    def description(self) -> str | None:
        return self.data.get("description")

    @property
    def purpose(self) -> str | None:
        return self.data.get("purpose")

    @property
    def read_only(self) -> bool | None:
        return self.data.get("ro")

    @property
    def archived(self) -> bool | None:
        return self.data.get("archived")

    @property
    def owner(self) -> dict[str, Any] | None:
        return self.data.get("u")

    @property
    def members(self) -> list[str] | None:
        """Usernames, when the server includes them."""
        return self.data.get("usernames")

    @property
    def created_at(self) -> str | None:
        return self.data.get("ts")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Room":
        """Create from API response dict."""
        return cls(id=data.get("_id"), name=data.get("name"), data=dict(data))


# =============================================================================
# User Types
# =============================================================================


@dataclass(frozen=True)
class User:
    """A user, as returned in room member listings."""

    id: Any
    username: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str | None:
        return self.data.get("name")

    @property
    def status(self) -> str | None:
        return self.data.get("status")

    @property
    def active(self) -> bool | None:
        return self.data.get("active")

    @property
    def roles(self) -> list[str] | None:
        return self.data.get("roles")

    @property
    def email(self) -> str | None:
        """First email address, if any."""
        emails = self.data.get("emails") or []
        if not emails:
            return None
        return emails[0].get("address")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        """Create from API response dict."""
        return cls(id=data.get("_id"), username=data.get("username"), data=dict(data))
