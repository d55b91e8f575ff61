"""
Storage for the calendar access token using the OS keyring.

Signing in happens elsewhere (any OAuth tool able to mint a Google token
with the ``calendar.readonly`` scope); this module only keeps the
resulting bearer token between runs.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from ..domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


KEYRING_SERVICE_NAME = "freeslots"
TOKEN_ENV_VAR = "FREESLOTS_ACCESS_TOKEN"


class AccessTokenStore:
    """
    Keeps one access token per account in the keyring.

    The ``FREESLOTS_ACCESS_TOKEN`` environment variable takes precedence
    over the stored value.
    """

    def __init__(self, account: str = "default", environ: Optional[Mapping[str, str]] = None):
        self.account = account
        self._environ = os.environ if environ is None else environ

    def get_access_token(self) -> str:
        """
        Return the current access token.

        Raises:
            AuthenticationError: If no token is available
        """
        token = self._environ.get(TOKEN_ENV_VAR)
        if token:
            logger.debug("Using access token from %s", TOKEN_ENV_VAR)
            return token

        try:
            token = keyring.get_password(KEYRING_SERVICE_NAME, self.account)
        except KeyringError as exc:  # pragma: no cover - environment dependent
            raise AuthenticationError(f"Reading credentials failed: {exc}") from exc

        if not token:
            raise AuthenticationError(
                "No access token stored. Run 'freeslots set-token' or set "
                f"{TOKEN_ENV_VAR}."
            )
        return token

    def save_access_token(self, token: str) -> None:
        """Persist a token in the keyring."""
        token = token.strip()
        if not token:
            raise AuthenticationError("Refusing to store an empty access token.")

        try:
            keyring.set_password(KEYRING_SERVICE_NAME, self.account, token)
        except KeyringError as exc:  # pragma: no cover - environment dependent
            raise AuthenticationError(f"Writing credentials failed: {exc}") from exc

    def clear(self) -> None:
        """Remove the stored token (sign in again next time)."""
        try:
            keyring.delete_password(KEYRING_SERVICE_NAME, self.account)
        except PasswordDeleteError:
            logger.debug("No stored token for account %s", self.account)
        except KeyringError as exc:  # pragma: no cover - environment dependent
            logger.warning("Could not remove credentials from keyring: %s", exc)
