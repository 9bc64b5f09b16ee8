"""
Rocket.Chat SDK - High-level client with nice ergonomics.

This layer provides a clean, typed interface for room operations.
Built on top of the core APIClient.
"""

import builtins
from collections.abc import Iterator
from typing import Any

from rocketchat_cli.core.client import APIClient, ValidationError
from rocketchat_cli.core.types import (
    CHANNELS,
    DIRECT_MESSAGES,
    GROUPS,
    PaginatedResponse,
    Room,
    RoomKind,
    Token,
    User,
)

ROOM_NOT_FOUND = "error-room-not-found"


def camelize(name: str) -> str:
    """Convert snake_case to camelCase (``read_only`` -> ``readOnly``)."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def room_params(room_id: str | None, name: str | None) -> dict[str, Any]:
    """Identify a room by ID, falling back to its name; neither is sent as a null roomId."""
    if room_id:
        return {"roomId": room_id}
    if name:
        return {"roomName": name}
    return {"roomId": None}


def user_params(user_id: str | None, username: str | None) -> dict[str, Any]:
    """Identify a user by ID, falling back to username; neither is sent as a null username."""
    if user_id:
        return {"userId": user_id}
    if username:
        return {"username": username}
    return {"username": None}


class RocketChatClient:
    """
    High-level Rocket.Chat API client with typed methods and nice ergonomics.

    Example:
        client = RocketChatClient("https://chat.example.com", auth_token="...", user_id="...")

        room = client.channels.create("general-2")
        client.channels.set_attr(room_id=room.id, topic="Everything else")
        members = client.channels.members(name="general-2")

    """

    def __init__(
        self,
        base_url: str | None = None,
        auth_token: str | None = None,
        user_id: str | None = None,
        timeout: int | None = None,
        token: Token | None = None,
    ):
        """
        Initialize the Rocket.Chat client.

        Args:
            base_url: Server URL (or ROCKETCHAT_URL env var)
            auth_token: Auth token (or ROCKETCHAT_AUTH_TOKEN env var)
            user_id: User ID owning the token (or ROCKETCHAT_USER_ID env var)
            timeout: Request timeout in seconds
            token: A ready-made Token

        """
        self._client = APIClient(
            base_url=base_url,
            auth_token=auth_token,
            user_id=user_id,
            timeout=timeout,
            token=token,
        )

        # One scope per room type
        self.channels = RoomOperations(self._client, CHANNELS)
        self.groups = RoomOperations(self._client, GROUPS)
        self.ims = RoomOperations(self._client, DIRECT_MESSAGES)

    @property
    def token(self) -> Token:
        """Get the current credentials."""
        return self._client.token

    @token.setter
    def token(self, value: Token) -> None:
        """Swap credentials (e.g. after a fresh login)."""
        self._client.token = value

    def scope(self, kind_name: str) -> "RoomOperations":
        """Look up a room scope by name (channels, groups, ims)."""
        scopes = {"channels": self.channels, "groups": self.groups, "ims": self.ims}
        if kind_name not in scopes:
            raise ValidationError(f"Unknown room type: {kind_name}", details={"available": sorted(scopes)})
        return scopes[kind_name]


# =============================================================================
# Room Operations
# =============================================================================


class RoomOperations:
    """Room lifecycle operations for one room type."""

    def __init__(self, client: APIClient, kind: RoomKind):
        self._client = client
        self.kind = kind

    @property
    def field(self) -> str:
        return self.kind.field

    @property
    def collection(self) -> str:
        return self.kind.collection

    def _room_from_response(self, result: dict[str, Any]) -> Room:
        return Room.from_dict(result[self.kind.field])

    def create(
        self,
        name: str,
        members: builtins.list[str] | None = None,
        read_only: bool | None = None,
    ) -> Room:
        """
        Create a room.

        Args:
            name: Room name (the other user's username for direct messages)
            members: Optional usernames to add on creation
            read_only: Optional read-only flag

        Returns:
            The created Room

        """
        data: dict[str, Any] = {self.kind.create_param: name}
        if members is not None:
            data["members"] = members
        if read_only is not None:
            data["readOnly"] = read_only

        result = self._client.post(self.kind.api_path("create"), data)
        return self._room_from_response(result)

    def delete(self, room_id: str | None = None, name: str | None = None) -> bool:
        """
        Delete a room.

        Returns:
            True on success, False if the room does not exist

        """
        result = self._client.post(
            self.kind.api_path("delete"),
            room_params(room_id, name),
            upstreamed_errors=(ROOM_NOT_FOUND,),
        )
        return bool(result.get("success"))

    def info(self, room_id: str | None = None, name: str | None = None) -> Room | None:
        """
        Get a room by ID or name.

        Returns:
            The Room, or None if it does not exist

        """
        result = self._client.get(
            self.kind.api_path("info"),
            room_params(room_id, name),
            upstreamed_errors=(ROOM_NOT_FOUND,),
        )
        if not result.get("success"):
            return None
        return self._room_from_response(result)

    def _list_params(
        self,
        query: dict[str, Any] | None,
        sort: dict[str, Any] | None,
        fields: dict[str, Any] | None,
    ) -> dict[str, Any]:
        return {"query": query, "sort": sort, "fields": fields}

    def list(
        self,
        query: dict[str, Any] | None = None,
        offset: int | None = None,
        count: int | None = None,
        sort: dict[str, Any] | None = None,
        fields: dict[str, Any] | None = None,
    ) -> builtins.list[Room]:
        """
        List rooms, in server order.

        Args:
            query: Optional filter, e.g. {"name": "general"}
            offset: Pagination offset
            count: Maximum number of results
            sort: Optional sort spec, e.g. {"name": 1}
            fields: Optional field projection

        Returns:
            List of Rooms

        """
        params = {**self._list_params(query, sort, fields), "offset": offset, "count": count}
        result = self._client.get(self.kind.api_path("list"), params)
        return [Room.from_dict(item) for item in result.get(self.kind.collection, [])]

    def list_page(
        self,
        offset: int = 0,
        count: int = 50,
        query: dict[str, Any] | None = None,
        sort: dict[str, Any] | None = None,
        fields: dict[str, Any] | None = None,
    ) -> PaginatedResponse[Room]:
        """
        Fetch one page of rooms.

        Returns:
            PaginatedResponse containing Rooms

        """
        return self._client.paginate_response(
            self.kind.api_path("list"),
            self.kind.collection,
            params=self._list_params(query, sort, fields),
            limit=count,
            offset=offset,
            parser=Room.from_dict,
        )

    def iterate(
        self,
        query: dict[str, Any] | None = None,
        count: int = 100,
        sort: dict[str, Any] | None = None,
    ) -> Iterator[Room]:
        """
        Iterate through every room, page by page.

        Yields:
            Room objects

        """
        return self._client.paginate(
            self.kind.api_path("list"),
            self.kind.collection,
            params=self._list_params(query, sort, None),
            limit=count,
            parser=Room.from_dict,
        )

    def list_all(
        self,
        query: dict[str, Any] | None = None,
        count: int = 100,
        sort: dict[str, Any] | None = None,
    ) -> builtins.list[Room]:
        """List all rooms across every page."""
        return builtins.list(self.iterate(query=query, count=count, sort=sort))

    def rename(self, room_id: str | None, new_name: str | None) -> bool:
        """
        Rename a room.

        Both keys are always sent, so the server reports which one is missing.

        Returns:
            True on success

        """
        result = self._client.post(
            self.kind.api_path("rename"),
            {"roomId": room_id, "name": new_name},
        )
        return bool(result.get("success"))

    def invite(
        self,
        room_id: str | None = None,
        name: str | None = None,
        user_id: str | None = None,
        username: str | None = None,
    ) -> bool:
        """Invite a user to a room."""
        return self._post_member_action("invite", room_id, name, user_id, username)

    def leave(self, room_id: str | None = None, name: str | None = None) -> bool:
        """Leave a room."""
        return self._post_room_action("leave", room_id, name)

    def members(self, room_id: str | None = None, name: str | None = None) -> builtins.list[User]:
        """
        List a room's members.

        Returns:
            List of Users (empty for an empty room)

        """
        result = self._client.get(self.kind.api_path("members"), room_params(room_id, name))
        return [User.from_dict(item) for item in result.get("members", [])]

    def set_attr(self, room_id: str | None = None, name: str | None = None, **setting: Any) -> bool:
        """
        Set one room attribute, e.g. ``set_attr(room_id="abc", topic="Hello")``.

        Raises:
            ValidationError: For anything but exactly one settable attribute;
                no request is made

        """
        if len(setting) != 1:
            raise ValidationError(
                f"Exactly one {self.kind.field} attribute must be given",
                details={"attributes": sorted(setting)},
            )
        attribute, value = next(iter(setting.items()))
        if attribute not in self.kind.settable_attributes:
            raise ValidationError(
                f"Unsettable {self.kind.field} attribute: {attribute}",
                details={"settable": sorted(self.kind.settable_attributes)},
            )

        key = camelize(attribute)
        result = self._client.post(
            self.kind.api_path("set" + key[0].upper() + key[1:]),
            {**room_params(room_id, name), key: value},
        )
        return bool(result.get("success"))

    # =========================================================================
    # Moderation
    # =========================================================================

    def archive(self, room_id: str | None = None, name: str | None = None) -> bool:
        """Archive a room."""
        return self._post_room_action("archive", room_id, name)

    def unarchive(self, room_id: str | None = None, name: str | None = None) -> bool:
        """Unarchive a room."""
        return self._post_room_action("unarchive", room_id, name)

    def kick(
        self,
        room_id: str | None = None,
        name: str | None = None,
        user_id: str | None = None,
        username: str | None = None,
    ) -> bool:
        """Remove a user from a room."""
        return self._post_member_action("kick", room_id, name, user_id, username)

    def add_owner(
        self,
        room_id: str | None = None,
        name: str | None = None,
        user_id: str | None = None,
        username: str | None = None,
    ) -> bool:
        """Give a member the owner role."""
        return self._post_member_action("addOwner", room_id, name, user_id, username)

    def remove_owner(
        self,
        room_id: str | None = None,
        name: str | None = None,
        user_id: str | None = None,
        username: str | None = None,
    ) -> bool:
        return self._post_member_action("removeOwner", room_id, name, user_id, username)

    def add_moderator(
        self,
        room_id: str | None = None,
        name: str | None = None,
        user_id: str | None = None,
        username: str | None = None,
    ) -> bool:
        """Give a member the moderator role."""
        return self._post_member_action("addModerator", room_id, name, user_id, username)

    def remove_moderator(
        self,
        room_id: str | None = None,
        name: str | None = None,
        user_id: str | None = None,
        username: str | None = None,
    ) -> bool:
        return self._post_member_action("removeModerator", room_id, name, user_id, username)

    def join(self, room_id: str | None = None, name: str | None = None, join_code: str | None = None) -> bool:
        """
        Join a public room.

        Raises:
            ValidationError: If this room type cannot be joined

        """
        if not self.kind.joinable:
            raise ValidationError(f"A {self.kind.field} cannot be joined, ask to be invited instead")
        data = room_params(room_id, name)
        if join_code is not None:
            data["joinCode"] = join_code
        result = self._client.post(self.kind.api_path("join"), data)
        return bool(result.get("success"))

    def _post_room_action(self, action: str, room_id: str | None, name: str | None) -> bool:
        result = self._client.post(self.kind.api_path(action), room_params(room_id, name))
        return bool(result.get("success"))

    def _post_member_action(
        self,
        action: str,
        room_id: str | None,
        name: str | None,
        user_id: str | None,
        username: str | None,
    ) -> bool:
        data = {**room_params(room_id, name), **user_params(user_id, username)}
        result = self._client.post(self.kind.api_path(action), data)
        return bool(result.get("success"))
