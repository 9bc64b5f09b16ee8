"""
Rocket.Chat CLI - Opinionated command-line interface.

This layer provides the user-facing CLI commands, using the SDK layer
for all operations. It handles:
- Argument parsing
- TTY detection for human vs machine output
- Pretty formatting for human output
- JSON output for piping/automation
"""

import argparse
import json
import sys
from typing import Any

from rocketchat_cli.core.client import CLIError, ValidationError
from rocketchat_cli.core.logging import setup_logging
from rocketchat_cli.core.types import ROOM_KINDS, Room, User
from rocketchat_cli.sdk import RocketChatClient, RoomOperations

# =============================================================================
# Output Helpers
# =============================================================================


HUMAN_LIMIT = 20  # Default limit for human-readable output


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def json_output(data: Any) -> None:
    """Print JSON output, indented on a TTY."""
    indent = 2 if is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: CLIError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def success_output(data: Any) -> None:
    """Print success output."""
    json_output(data)


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    # Header
    header_line = "  ".join(h.ljust(w) if i < len(widths) else h for i, (h, w) in enumerate(zip(headers, widths)))
    print(header_line)
    print("-" * len(header_line))

    # Rows
    for row in rows:
        row_line = "  ".join(
            str(v)[:w].ljust(w) if i < len(widths) else str(v) for i, (v, w) in enumerate(zip(row, widths))
        )
        print(row_line)


def room_dict(room: Room) -> dict[str, Any]:
    return {"id": room.id, "name": room.name, "type": room.type, "topic": room.topic}


def user_dict(user: User) -> dict[str, Any]:
    return {"id": user.id, "username": user.username, "name": user.name}


def parse_json_arg(value: str | None, flag: str) -> Any:
    """Parse a JSON command-line value (or - for stdin)."""
    if value is None:
        return None
    if value == "-":
        value = sys.stdin.read()
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON for {flag}: {e}")


def parse_value(value: str) -> Any:
    """Interpret a value as JSON when it parses, else keep the raw string."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_create(scope: RoomOperations, args: argparse.Namespace) -> None:
    """Create a room."""
    members = args.members.split(",") if args.members else None
    room = scope.create(args.name, members=members, read_only=True if args.read_only else None)
    success_output(room_dict(room))


def cmd_delete(scope: RoomOperations, args: argparse.Namespace) -> None:
    """Delete a room."""
    if scope.delete(room_id=args.room_id, name=args.room_name):
        success_output({"success": True, "message": f"{scope.field.capitalize()} deleted"})
    else:
        json_output({"success": False, "error": f"{scope.field.capitalize()} not found"})
        sys.exit(1)


def cmd_info(scope: RoomOperations, args: argparse.Namespace) -> None:
    """Get room details."""
    room = scope.info(room_id=args.room_id, name=args.room_name)
    if room is None:
        json_output({"error": f"{scope.field.capitalize()} not found"})
        sys.exit(1)

    if is_tty():
        print(f"ID: {room.id}")
        print(f"Name: {room.name}")
        print(f"Type: {room.type}")
        if room.topic:
            print(f"Topic: {room.topic}")
        if room.description:
            print(f"Description: {room.description}")
    else:
        success_output(room.data)


def cmd_list(scope: RoomOperations, args: argparse.Namespace) -> None:
    """List rooms."""
    query = parse_json_arg(args.query, "--query")

    if args.all:
        rooms = scope.list_all(query=query)
    elif is_tty() and args.count is None:
        response = scope.list_page(offset=args.offset or 0, count=HUMAN_LIMIT, query=query)
        rooms = response.data
        if response.has_more:
            print(f"Showing {len(rooms)} of {response.total_count} {scope.collection}\n")
    else:
        rooms = scope.list(query=query, offset=args.offset, count=args.count)

    if is_tty():
        if not rooms:
            print(f"No {scope.collection} found.")
            return
        table_output(
            ["ID", "Name", "Topic"],
            [[str(r.id), r.name or "", r.topic or ""] for r in rooms],
            [24, 30, 40],
        )
    else:
        success_output({"data": [room_dict(r) for r in rooms], "total_count": len(rooms)})


def cmd_rename(scope: RoomOperations, args: argparse.Namespace) -> None:
    """Rename a room."""
    scope.rename(args.room_id, args.new_name)
    success_output({"success": True, "message": f"Renamed to {args.new_name}"})


def cmd_invite(scope: RoomOperations, args: argparse.Namespace) -> None:
    """Invite a user to a room."""
    scope.invite(room_id=args.room_id, name=args.room_name, username=args.username)
    success_output({"success": True, "message": f"Invited {args.username}"})


def cmd_kick(scope: RoomOperations, args: argparse.Namespace) -> None:
    """Remove a user from a room."""
    scope.kick(room_id=args.room_id, name=args.room_name, username=args.username)
    success_output({"success": True, "message": f"Removed {args.username}"})


def cmd_leave(scope: RoomOperations, args: argparse.Namespace) -> None:
    """Leave a room."""
    scope.leave(room_id=args.room_id, name=args.room_name)
    success_output({"success": True})


def cmd_archive(scope: RoomOperations, args: argparse.Namespace) -> None:
    """Archive a room."""
    scope.archive(room_id=args.room_id, name=args.room_name)
    success_output({"success": True})


def cmd_unarchive(scope: RoomOperations, args: argparse.Namespace) -> None:
    """Unarchive a room."""
    scope.unarchive(room_id=args.room_id, name=args.room_name)
    success_output({"success": True})


def cmd_members(scope: RoomOperations, args: argparse.Namespace) -> None:
    """List room members."""
    members = scope.members(room_id=args.room_id, name=args.room_name)

    if is_tty():
        if not members:
            print("No members.")
            return
        table_output(
            ["ID", "Username", "Name"],
            [[str(m.id), m.username or "", m.name or ""] for m in members],
            [24, 25, 30],
        )
    else:
        success_output({"data": [user_dict(m) for m in members]})


def cmd_set(scope: RoomOperations, args: argparse.Namespace) -> None:
    """Set a room attribute."""
    scope.set_attr(room_id=args.room_id, name=args.room_name, **{args.attribute: parse_value(args.value)})
    success_output({"success": True, "attribute": args.attribute})


# =============================================================================
# Parser
# =============================================================================


def add_room_args(parser: argparse.ArgumentParser) -> None:
    """Room selection: positional ID, or --name."""
    parser.add_argument("room_id", nargs="?", help="Room ID")
    parser.add_argument("--name", "-n", dest="room_name", help="Room name (instead of ID)")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="rocketchat",
        description="Rocket.Chat CLI - manage channels, private groups and direct messages",
    )
    parser.add_argument("--url", help="Server URL (default: ROCKETCHAT_URL env var)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log HTTP requests to stderr")

    subparsers = parser.add_subparsers(dest="command")

    for kind in ROOM_KINDS.values():
        scope_parser = subparsers.add_parser(kind.name, help=f"Manage {kind.collection}")
        scope_parser.set_defaults(func=None, help_parser=scope_parser)
        scope_sub = scope_parser.add_subparsers(dest="subcommand")

        p_create = scope_sub.add_parser("create", help=f"Create a {kind.field}")
        p_create.add_argument("name", help="Username" if kind.create_param == "username" else "Room name")
        p_create.add_argument("--members", "-m", help="Comma-separated usernames to add")
        p_create.add_argument("--read-only", action="store_true", help="Create as read-only")
        p_create.set_defaults(func=cmd_create)

        p_delete = scope_sub.add_parser("delete", help=f"Delete a {kind.field}")
        add_room_args(p_delete)
        p_delete.set_defaults(func=cmd_delete)

        p_info = scope_sub.add_parser("info", help=f"Get {kind.field} details")
        add_room_args(p_info)
        p_info.set_defaults(func=cmd_info)

        p_list = scope_sub.add_parser("list", help=f"List {kind.collection}")
        p_list.add_argument("--query", "-q", help="JSON filter, e.g. '{\"name\": \"general\"}' (or - for stdin)")
        p_list.add_argument("--count", "-l", type=int, help="Max results")
        p_list.add_argument("--offset", "-o", type=int, help="Offset for pagination")
        p_list.add_argument("--all", "-a", action="store_true", help="Fetch every page")
        p_list.set_defaults(func=cmd_list)

        p_rename = scope_sub.add_parser("rename", help=f"Rename a {kind.field}")
        p_rename.add_argument("room_id", help="Room ID")
        p_rename.add_argument("new_name", help="New name")
        p_rename.set_defaults(func=cmd_rename)

        p_invite = scope_sub.add_parser("invite", help="Invite a user")
        add_room_args(p_invite)
        p_invite.add_argument("--user", "-u", dest="username", required=True, help="Username to invite")
        p_invite.set_defaults(func=cmd_invite)

        p_kick = scope_sub.add_parser("kick", help="Remove a user")
        add_room_args(p_kick)
        p_kick.add_argument("--user", "-u", dest="username", required=True, help="Username to remove")
        p_kick.set_defaults(func=cmd_kick)

        p_leave = scope_sub.add_parser("leave", help=f"Leave a {kind.field}")
        add_room_args(p_leave)
        p_leave.set_defaults(func=cmd_leave)

        p_archive = scope_sub.add_parser("archive", help=f"Archive a {kind.field}")
        add_room_args(p_archive)
        p_archive.set_defaults(func=cmd_archive)

        p_unarchive = scope_sub.add_parser("unarchive", help=f"Unarchive a {kind.field}")
        add_room_args(p_unarchive)
        p_unarchive.set_defaults(func=cmd_unarchive)

        p_members = scope_sub.add_parser("members", help="List members")
        add_room_args(p_members)
        p_members.set_defaults(func=cmd_members)

        p_set = scope_sub.add_parser("set", help="Set an attribute")
        add_room_args(p_set)
        p_set.add_argument(
            "--attr",
            dest="attribute",
            required=True,
            choices=sorted(kind.settable_attributes),
            help="Attribute to set",
        )
        p_set.add_argument("--value", required=True, help="Value (JSON or string)")
        p_set.set_defaults(func=cmd_set)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.func is None:
        args.help_parser.print_help()
        sys.exit(0)

    setup_logging(args.verbose)

    try:
        client = RocketChatClient(base_url=args.url)
        scope = client.scope(args.command)
        args.func(scope, args)
    except CLIError as e:
        error_output(e)


if __name__ == "__main__":
    main()
