"""
Core HTTP client for the Rocket.Chat REST API.

Handles authentication, request/response, pagination, and error handling.
"""

import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeVar

from rocketchat_cli.core.types import PaginatedResponse, Token

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_TIMEOUT = 60
API_PREFIX = "/api/v1"

NOT_LOGGED_IN_MESSAGE = "You must be logged in to do this."

T = TypeVar("T")


class CLIError(Exception):
    """Base error class for CLI errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class APIError(CLIError):
    """Transport-level error (connection, timeout, unreadable response)."""

    def __init__(self, message: str, status: int = 0, details: dict | None = None):
        super().__init__(message, details)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


class StatusError(APIError):
    """The server answered but reported failure; message is the server's own text."""

    def __init__(
        self,
        message: str,
        status: int = 0,
        error_type: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, status, details)
        self.error_type = error_type

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.error_type:
            result["error_type"] = self.error_type
        return result


class ValidationError(CLIError):
    """Validation error for local input/data issues (not API errors)."""


def check_payload(payload: dict[str, Any], status: int = 0) -> None:
    """
    Raise a StatusError if a decoded response body reports failure.

    Rocket.Chat answers with either ``{"success": bool, "error": ...}`` or,
    for authentication failures, ``{"status": "error", "message": ...}``.
    """
    if "success" in payload:
        if not payload["success"]:
            raise StatusError(
                payload.get("error") or "Request failed",
                status=status,
                error_type=payload.get("errorType"),
                details=payload,
            )
    elif "status" in payload and payload["status"] != "success":
        raise StatusError(
            payload.get("message") or "Request failed",
            status=status,
            error_type=payload.get("errorType"),
            details=payload,
        )


def encode_params(params: dict[str, Any]) -> dict[str, Any]:
    """Drop None values and JSON-encode structured values for a query string."""
    encoded = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (dict, list)):
            encoded[key] = json.dumps(value, separators=(",", ":"))
        elif isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        else:
            encoded[key] = value
    return encoded


class APIClient:
    """
    Low-level HTTP client for the Rocket.Chat REST API.

    Handles:
    - Authentication via auth token + user id headers
    - HTTP methods (GET, POST)
    - Error handling and response parsing
    - Offset/count pagination for list endpoints
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
        Initialize the API client.

        Args:
            base_url: Server URL (or ROCKETCHAT_URL env var)
            auth_token: Auth token (or ROCKETCHAT_AUTH_TOKEN env var)
            user_id: User ID owning the token (or ROCKETCHAT_USER_ID env var)
            timeout: Request timeout in seconds (or ROCKETCHAT_TIMEOUT env var)
            token: A ready-made Token; takes precedence over auth_token/user_id

        """
        self.base_url = (base_url or os.environ.get("ROCKETCHAT_URL", DEFAULT_BASE_URL)).rstrip("/")
        if token is None:
            token = Token(
                auth_token=auth_token or os.environ.get("ROCKETCHAT_AUTH_TOKEN"),
                user_id=user_id or os.environ.get("ROCKETCHAT_USER_ID"),
            )
        self.token = token
        self.timeout = timeout or self._timeout_from_env()

    @staticmethod
    def _timeout_from_env() -> int:
        """Read ROCKETCHAT_TIMEOUT, which must be a whole number of seconds."""
        raw = os.environ.get("ROCKETCHAT_TIMEOUT")
        if not raw:
            return DEFAULT_TIMEOUT
        try:
            return int(raw)
        except ValueError:
            raise ValidationError(f"ROCKETCHAT_TIMEOUT must be a number of seconds, got {raw!r}")

    def _ensure_token(self) -> Token:
        """Ensure credentials are configured; the server would reject us anyway."""
        if not self.token.is_present:
            raise StatusError(NOT_LOGGED_IN_MESSAGE, status=401)
        return self.token

    def _build_url(self, path: str) -> str:
        """Build full URL from path."""
        if path.startswith("http"):
            return path
        if not path.startswith(API_PREFIX):
            path = f"{API_PREFIX}/{path.lstrip('/')}"
        return f"{self.base_url}{path}"

    def _make_request(
        self,
        method: str,
        path: str,
        data: dict | None = None,
    ) -> dict[str, Any]:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST)
            path: API path (e.g., channels.info?roomId=abc)
            data: Request body for POST

        Returns:
            Parsed JSON response

        Raises:
            StatusError: When the server reports failure
            APIError: On transport or parsing errors

        """
        token = self._ensure_token()

        url = self._build_url(path)
        headers = {
            "X-Auth-Token": token.auth_token,
            "X-User-Id": token.user_id,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        body = json.dumps(data).encode("utf-8") if data is not None else None
        request_timeout = self.timeout

        logger.debug("%s %s", method, url)
        try:
            req = urllib.request.Request(url, data=body, headers=headers, method=method)
            with urllib.request.urlopen(req, timeout=request_timeout) as response:
                response_data = response.read()
                status = response.status
        except urllib.error.HTTPError as e:
            try:
                error_data = json.loads(e.read().decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError):
                raise APIError(str(e), status=e.code)
            if not isinstance(error_data, dict):
                raise APIError(str(e), status=e.code)
            check_payload(error_data, status=e.code)
            # A failing status code with a body that does not say why
            raise APIError(str(e), status=e.code, details=error_data)

        except urllib.error.URLError as e:
            raise APIError(f"Connection error: {e.reason}")

        except TimeoutError:
            raise APIError(f"Request timed out after {request_timeout} seconds")

        if not response_data:
            return {"success": True}
        try:
            payload = json.loads(response_data.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise APIError(f"Invalid JSON response: {e}", status=status)
        if not isinstance(payload, dict):
            raise APIError(f"Invalid JSON response: expected an object, got {type(payload).__name__}", status=status)
        check_payload(payload, status=status)
        return payload

    def request_json(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        data: dict | None = None,
        upstreamed_errors: Iterable[str] = (),
    ) -> dict[str, Any]:
        """
        Make a request, handing selected server failures back as payloads.

        Args:
            method: HTTP method
            path: API path
            params: Query parameters (GET)
            data: Request body (POST)
            upstreamed_errors: ``errorType`` values returned instead of raised

        Returns:
            Parsed JSON response, or the failure payload for upstreamed errors

        """
        if params:
            query_string = urllib.parse.urlencode(encode_params(params))
            if query_string:
                separator = "&" if "?" in path else "?"
                path = f"{path}{separator}{query_string}"
        try:
            return self._make_request(method, path, data)
        except StatusError as e:
            if e.error_type and e.error_type in upstreamed_errors:
                logger.debug("%s %s: upstreamed %s", method, path, e.error_type)
                return e.details
            logger.warning("%s %s failed: %s (%s)", method, path, e.message, e.error_type or e.status)
            raise

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        upstreamed_errors: Iterable[str] = (),
    ) -> dict[str, Any]:
        """Make a GET request."""
        return self.request_json("GET", path, params=params, upstreamed_errors=upstreamed_errors)

    def post(
        self,
        path: str,
        data: dict | None = None,
        upstreamed_errors: Iterable[str] = (),
    ) -> dict[str, Any]:
        """Make a POST request."""
        return self.request_json("POST", path, data=data, upstreamed_errors=upstreamed_errors)

    # =========================================================================
    # Pagination
    # =========================================================================

    def paginate(
        self,
        path: str,
        collection: str,
        params: dict[str, Any] | None = None,
        limit: int = 100,
        parser: Callable[[dict[str, Any]], T] | None = None,
    ) -> Iterator[T]:
        """
        Iterate through all pages of an offset/count list endpoint.

        Args:
            path: API path
            collection: Key holding the items in each page
            params: Extra query parameters (query, sort, fields)
            limit: Items per page
            parser: Optional function to parse each item

        Yields:
            Items from all pages (parsed if parser provided)

        """
        offset = 0

        while True:
            result = self.get(path, {**(params or {}), "offset": offset, "count": limit})

            data = result.get(collection, [])
            for item in data:
                if parser:
                    yield parser(item)
                else:
                    yield item

            total = result.get("total", 0)
            offset += len(data)

            if offset >= total or not data:
                break

    def paginate_response(
        self,
        path: str,
        collection: str,
        params: dict[str, Any] | None = None,
        limit: int = 50,
        offset: int = 0,
        parser: Callable[[dict[str, Any]], T] | None = None,
    ) -> PaginatedResponse[T]:
        """
        Fetch a single page and return a PaginatedResponse.

        Args:
            path: API path
            collection: Key holding the items in the page
            params: Extra query parameters (query, sort, fields)
            limit: Items per page
            offset: Starting offset
            parser: Optional function to parse each item

        Returns:
            PaginatedResponse with data and metadata

        """
        result = self.get(path, {**(params or {}), "offset": offset, "count": limit})

        data = result.get(collection, [])
        if parser:
            data = [parser(item) for item in data]

        return PaginatedResponse(
            data=data,
            total_count=result.get("total", len(data)),
            offset=offset,
            limit=limit,
        )
