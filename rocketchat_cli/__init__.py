"""
Rocket.Chat CLI - Three-layer architecture for the Rocket.Chat REST API.

Layers:
- core: Raw types and HTTP client
- sdk: High-level RocketChatClient with one scope per room type
- cli: Opinionated command-line interface
"""

from rocketchat_cli.sdk import RocketChatClient

__version__ = "0.1.0"
__all__ = ["RocketChatClient"]
