"""Credential providers for Google API access.

The exporter never runs a login flow of its own. It asks a provider for a
token from a credential context that was established beforehand:

1. Application default credentials (``gcloud auth application-default login``
   or ``GOOGLE_APPLICATION_CREDENTIALS``)
2. Service account file - direct credentials from JSON key file
3. Keyring - a token cached in the OS keyring by another tool
4. Static token - an access token passed in explicitly
"""

from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

import google.auth
import keyring
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from keyring.errors import KeyringError
from loguru import logger

if TYPE_CHECKING:
    from extracolumn.config import Settings

READONLY_SCOPES = ("https://www.googleapis.com/auth/spreadsheets.readonly",)

# Keyring entry used when none is configured
KEYRING_SERVICE = "extracolumn"
KEYRING_USERNAME = "token"


class CredentialsError(Exception):
    """Raised when no valid credential can be obtained."""


@dataclass
class Token:
    """Access token for Google API calls.

    Attributes:
        access_token: The OAuth2 access token for API calls.
        expires_at: Unix timestamp when the token expires, 0 if unknown.
        account: Account the token belongs to, if known.
    """

    access_token: str
    expires_at: float = 0
    account: str = ""

    def is_valid(self, buffer_seconds: int = 60) -> bool:
        """Check if token is still valid with a safety buffer.

        Tokens without a known expiry are assumed valid.
        """
        if not self.expires_at:
            return True
        return time.time() < self.expires_at - buffer_seconds

    def expires_in_seconds(self) -> int:
        """Return seconds until token expires."""
        return max(0, int(self.expires_at - time.time()))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "access_token": self.access_token,
            "expires_at": self.expires_at,
            "account": self.account,
            "token_type": "Bearer",
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Token:
        """Create Token from dictionary."""
        return cls(
            access_token=data["access_token"],
            expires_at=float(data.get("expires_at", 0)),
            account=data.get("account", data.get("service_account_email", "")),
        )


class CredentialProvider(ABC):
    """Source of a valid access token."""

    @abstractmethod
    def get_token(self) -> Token:
        """Return a valid token.

        Raises:
            CredentialsError: If no valid credential context is available.
        """
        ...


class ApplicationDefaultCredentials(CredentialProvider):
    """Token from Google application default credentials."""

    def __init__(self, scopes: tuple[str, ...] = READONLY_SCOPES) -> None:
        self._scopes = list(scopes)

    def get_token(self) -> Token:
        try:
            credentials, project = google.auth.default(scopes=self._scopes)
            credentials.refresh(Request())
        except GoogleAuthError as e:
            raise CredentialsError(f"Application default credentials unavailable: {e}") from e
        logger.debug("Using application default credentials (project: {})", project)
        return _token_from_credentials(credentials)


class ServiceAccountCredentials(CredentialProvider):
    """Token from a service account JSON key file."""

    def __init__(self, path: str | Path, scopes: tuple[str, ...] = READONLY_SCOPES) -> None:
        self._path = Path(path).expanduser()
        self._scopes = list(scopes)

    def get_token(self) -> Token:
        if not self._path.exists():
            raise CredentialsError(f"Service account file not found: {self._path}")

        logger.debug("Loading credentials from {}", self._path)
        try:
            credentials = service_account.Credentials.from_service_account_file(
                str(self._path),
                scopes=self._scopes,
            )
            credentials.refresh(Request())
        except (GoogleAuthError, ValueError) as e:
            raise CredentialsError(f"Service account authentication failed: {e}") from e

        token = _token_from_credentials(credentials)
        token.account = credentials.service_account_email
        return token


class KeyringCredentials(CredentialProvider):
    """Token cached in the OS keyring by a previous login.

    Read only: an expired or missing entry is an error, the provider never
    refreshes or stores tokens.
    """

    def __init__(
        self,
        service: str = KEYRING_SERVICE,
        username: str = KEYRING_USERNAME,
    ) -> None:
        self._service = service
        self._username = username

    def get_token(self) -> Token:
        try:
            token_json = keyring.get_password(self._service, self._username)
        except KeyringError as e:
            raise CredentialsError(f"Cannot read OS keyring: {e}") from e
        if not token_json:
            raise CredentialsError(
                f"No cached token in keyring entry '{self._service}/{self._username}'"
            )

        try:
            token = Token.from_dict(json.loads(token_json))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise CredentialsError(f"Invalid cached token: {e}") from e

        if not token.is_valid():
            raise CredentialsError("Cached token expired, log in again")
        logger.debug("Using cached token (expires in {} seconds)", token.expires_in_seconds())
        return token


class StaticTokenCredentials(CredentialProvider):
    """Wraps an access token supplied by the caller."""

    def __init__(self, access_token: str) -> None:
        self._access_token = access_token

    def get_token(self) -> Token:
        if not self._access_token:
            raise CredentialsError("Access token is empty")
        return Token(access_token=self._access_token)


def create_provider(settings: Settings) -> CredentialProvider:
    """Pick the credential provider configured in ``settings``."""
    mode = settings.auth_mode
    if mode == "token":
        return StaticTokenCredentials(settings.access_token or "")
    if mode == "service_account":
        if not settings.service_account_path:
            raise CredentialsError(
                "auth_mode 'service_account' requires a service account path"
            )
        return ServiceAccountCredentials(settings.service_account_path)
    if mode == "keyring":
        return KeyringCredentials(settings.keyring_service, settings.keyring_username)
    return ApplicationDefaultCredentials()


def _token_from_credentials(credentials: Any) -> Token:
    if not credentials.token:
        raise CredentialsError("Credentials did not yield an access token")
    expiry = credentials.expiry
    return Token(
        access_token=credentials.token,
        # google-auth reports expiry as a naive UTC datetime
        expires_at=expiry.replace(tzinfo=timezone.utc).timestamp() if expiry else 0,
    )
