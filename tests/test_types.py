"""Tests for value objects and room kind descriptors."""

import dataclasses

import pytest

from rocketchat_cli.core.types import (
    CHANNELS,
    DIRECT_MESSAGES,
    GROUPS,
    ROOM_KINDS,
    PaginatedResponse,
    Room,
    Token,
    User,
)
from rocketchat_cli.sdk import camelize


class TestRoom:
    def test_from_dict_keeps_server_fields(self):
        data = {
            "_id": "GENERAL",
            "name": "general",
            "t": "c",
            "topic": "Anything goes",
            "ro": False,
            "usernames": ["alice", "bob"],
            "u": {"_id": "u1", "username": "alice"},
            "ts": "2024-01-01T00:00:00.000Z",
            "customField": 1,
        }
        room = Room.from_dict(data)

        assert room.id == "GENERAL"
        assert room.name == "general"
        assert room.type == "c"
        assert room.topic == "Anything goes"
        assert room.read_only is False
        assert room.members == ["alice", "bob"]
        assert room.owner["username"] == "alice"
        assert room.created_at == "2024-01-01T00:00:00.000Z"
        assert room.data == data

    def test_missing_fields_are_none(self):
        room = Room.from_dict({"_id": 5})

        assert room.id == 5
        assert room.name is None
        assert room.topic is None
        assert room.description is None
        assert room.purpose is None
        assert room.archived is None

    def test_is_immutable(self):
        room = Room.from_dict({"_id": "1", "name": "a"})
        with pytest.raises(dataclasses.FrozenInstanceError):
            room.name = "b"

    def test_data_is_a_copy(self):
        data = {"_id": "1", "name": "a"}
        room = Room.from_dict(data)
        data["name"] = "changed"
        assert room.data["name"] == "a"


class TestUser:
    def test_from_dict(self):
        user = User.from_dict(
            {
                "_id": "u1",
                "username": "alice",
                "name": "Alice",
                "status": "online",
                "active": True,
                "roles": ["user", "admin"],
                "emails": [{"address": "alice@example.com", "verified": True}],
            }
        )

        assert user.id == "u1"
        assert user.username == "alice"
        assert user.name == "Alice"
        assert user.status == "online"
        assert user.active is True
        assert user.roles == ["user", "admin"]
        assert user.email == "alice@example.com"

    def test_without_emails(self):
        assert User.from_dict({"_id": "u2", "username": "bob"}).email is None


class TestToken:
    def test_from_login_payload(self):
        token = Token.from_dict({"authToken": "abc", "userId": "u1", "me": {}})
        assert token == Token(auth_token="abc", user_id="u1")
        assert token.is_present

    @pytest.mark.parametrize(
        "token",
        [Token(), Token(auth_token="abc"), Token(user_id="u1"), Token(auth_token="", user_id="u1")],
    )
    def test_incomplete_tokens(self, token):
        assert not token.is_present


class TestRoomKinds:
    def test_registry(self):
        assert ROOM_KINDS == {"channels": CHANNELS, "groups": GROUPS, "ims": DIRECT_MESSAGES}

    @pytest.mark.parametrize(
        "kind,path",
        [
            (CHANNELS, "channels.setTopic"),
            (GROUPS, "groups.setTopic"),
            (DIRECT_MESSAGES, "im.setTopic"),
        ],
    )
    def test_api_path(self, kind, path):
        assert kind.api_path("setTopic") == path

    def test_descriptor_fields(self):
        assert (CHANNELS.collection, CHANNELS.field, CHANNELS.room_type) == ("channels", "channel", "c")
        assert (GROUPS.collection, GROUPS.field, GROUPS.room_type) == ("groups", "group", "p")
        assert DIRECT_MESSAGES.create_param == "username"
        assert CHANNELS.joinable and not GROUPS.joinable


def test_paginated_response_has_more():
    assert PaginatedResponse(data=[1, 2], total_count=5, offset=0, limit=2).has_more
    assert not PaginatedResponse(data=[5], total_count=5, offset=4, limit=2).has_more


@pytest.mark.parametrize(
    "name,expected",
    [("topic", "topic"), ("read_only", "readOnly"), ("join_code", "joinCode")],
)
def test_camelize(name, expected):
    assert camelize(name) == expected
