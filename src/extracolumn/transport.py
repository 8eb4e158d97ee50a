"""Transport layer for reading spreadsheet values.

Defines the Transport protocol and implementations:
- GoogleSheetsTransport: Production transport using the Sheets API values endpoint
- LocalFileTransport: Test transport reading from local golden files
"""

from __future__ import annotations

import json
import ssl
import urllib.parse
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

import certifi
import httpx
from loguru import logger

# API constants
API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
DEFAULT_TIMEOUT = 60


class TransportError(Exception):
    """Base exception for transport errors."""


class AuthenticationError(TransportError):
    """Raised when authentication fails (401/403)."""


class NotFoundError(TransportError):
    """Raised when spreadsheet is not found (404)."""


class APIError(TransportError):
    """Raised when the API returns an error."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidRangeRequestError(APIError):
    """Raised when the API rejects the requested range (400)."""


@dataclass(frozen=True)
class ValueRange:
    """Cell values returned for a single range.

    ``values`` is empty when the API omits the field, which it does for
    ranges without any data.
    """

    range: str
    major_dimension: str
    values: tuple[tuple[Any, ...], ...]
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_response(cls, response: Any, requested_range: str) -> ValueRange:
        """Build a ValueRange from a ``spreadsheets.values.get`` response.

        Raises:
            TransportError: If the body is not a value range object
        """
        if not isinstance(response, dict):
            raise TransportError(
                f"Malformed API response: expected an object, got {type(response).__name__}"
            )
        rows = response.get("values") or []
        if not isinstance(rows, list):
            raise TransportError(
                f"Malformed API response: 'values' is {type(rows).__name__}, not a list"
            )
        values: list[tuple[Any, ...]] = []
        for row in rows:
            # A null row is an empty row
            if row is None:
                row = []
            if not isinstance(row, list):
                raise TransportError(
                    f"Malformed API response: row is {type(row).__name__}, not a list"
                )
            values.append(tuple(row))
        return cls(
            range=response.get("range", requested_range),
            major_dimension=response.get("majorDimension", "ROWS"),
            values=tuple(values),
            raw=response,
        )


class Transport(ABC):
    """Abstract base class for spreadsheet value transport.

    Implementations must provide a single read of a range from a
    spreadsheet source (Google API, local files, etc.).
    """

    @abstractmethod
    async def get_values(self, spreadsheet_id: str, range_reference: str) -> ValueRange:
        """Fetch the values of one range, row by row.

        Args:
            spreadsheet_id: The spreadsheet identifier
            range_reference: A1 reference, e.g. ``Diagnostics!F:F``

        Returns:
            ValueRange with rows in source order
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        ...


class GoogleSheetsTransport(Transport):
    """Production transport that reads values from the Google Sheets API.

    Handles authentication, SSL, and HTTP communication.
    """

    def __init__(
        self,
        access_token: str,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the transport.

        Args:
            access_token: OAuth2 access token with spreadsheets.readonly scope
            timeout: Request timeout in seconds
        """
        self._access_token = access_token
        self._timeout = timeout
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        self._client = httpx.AsyncClient(
            timeout=timeout,
            verify=ssl_context,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        )

    async def get_values(self, spreadsheet_id: str, range_reference: str) -> ValueRange:
        """Fetch values from Google Sheets API."""
        quoted_id = urllib.parse.quote(spreadsheet_id, safe="")
        quoted_range = urllib.parse.quote(range_reference, safe="")
        url = f"{API_BASE}/{quoted_id}/values/{quoted_range}?majorDimension=ROWS"
        logger.debug("GET values {} from {}", range_reference, spreadsheet_id)
        response = await self._request(url)
        return ValueRange.from_response(response, range_reference)

    async def _request(self, url: str) -> dict[str, Any]:
        """Make an authenticated GET request."""
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            result: dict[str, Any] = response.json()
            return result
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 401:
                raise AuthenticationError("Invalid or expired access token") from e
            if status == 403:
                raise AuthenticationError(
                    "Access denied. Check your scopes and permissions."
                ) from e
            if status == 404:
                raise NotFoundError(
                    "Spreadsheet not found. Check the ID and sharing permissions."
                ) from e
            message = _error_message(e.response)
            if status == 400:
                raise InvalidRangeRequestError(
                    f"Invalid request ({status}): {message}", status_code=status
                ) from e
            raise APIError(f"API error ({status}): {message}", status_code=status) from e
        except httpx.RequestError as e:
            raise TransportError(f"Network error: {e}") from e
        except ValueError as e:
            raise TransportError(f"Malformed API response: {e}") from e

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()


class LocalFileTransport(Transport):
    """Test transport that reads from local golden files.

    Expected directory structure:
        golden_dir/
            <spreadsheet_id>/
                values.json

    Every requested range is appended to ``requests``.
    """

    def __init__(self, golden_dir: Path) -> None:
        """Initialize the transport.

        Args:
            golden_dir: Directory containing golden test files
        """
        self._golden_dir = golden_dir
        self.requests: list[tuple[str, str]] = []

    async def get_values(self, spreadsheet_id: str, range_reference: str) -> ValueRange:
        """Read values from local file."""
        self.requests.append((spreadsheet_id, range_reference))
        path = self._golden_dir / spreadsheet_id / "values.json"
        if not path.exists():
            raise NotFoundError(f"Golden file not found: {path}")
        try:
            response = json.loads(path.read_text(encoding="utf-8"))
        except ValueError as e:
            raise TransportError(f"Malformed golden file {path}: {e}") from e
        return ValueRange.from_response(response, range_reference)

    async def close(self) -> None:
        """No-op for local file transport."""
        pass


def _error_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of a Google API error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.text
