"""
Core layer - Raw types and HTTP client.

This layer provides:
- Typed dataclasses for rooms, users and credentials
- Low-level HTTP client with auth and error handling
"""

from rocketchat_cli.core.client import APIClient, APIError, CLIError, StatusError, ValidationError
from rocketchat_cli.core.types import (
    CHANNELS,
    DIRECT_MESSAGES,
    GROUPS,
    ROOM_KINDS,
    PaginatedResponse,
    Room,
    RoomKind,
    Token,
    User,
)

__all__ = [
    "APIClient",
    "APIError",
    "CHANNELS",
    "CLIError",
    "DIRECT_MESSAGES",
    "GROUPS",
    "PaginatedResponse",
    "ROOM_KINDS",
    "Room",
    "RoomKind",
    "StatusError",
    "Token",
    "User",
    "ValidationError",
]
