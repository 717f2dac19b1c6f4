"""
Verifies credentials against the player API before a refresh is allowed to run.
"""

import asyncio
import logging

import aiohttp
from pydantic import ValidationError

from iptv_catalog.exceptions import AuthError
from iptv_catalog.models.account import AccountInfo
from iptv_catalog.models.catalog import Credentials

from .client import XtreamClient

log = logging.getLogger(__name__)


class AccountValidator:
    """
    Fetches the account snapshot for a set of credentials and gates the
    refresh pipeline on the server's authentication flag.
    """

    def __init__(self, client: XtreamClient):
        self._client = client

    async def fetch_account_info(self, credentials: Credentials) -> AccountInfo:
        """
        Retrieves the account snapshot without checking the auth flag.

        Raises:
            AuthError: If the endpoint cannot be reached or answers with
            something that is not an account document.
        """
        url = self._client.account_url(credentials)
        try:
            data = await self._client.get_json(url)
        except aiohttp.ClientResponseError as e:
            raise AuthError(
                f"Account endpoint returned HTTP {e.status} for {credentials.server}."
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AuthError(
                f"Could not reach account endpoint at {credentials.server}: {e}"
            ) from e
        except ValueError as e:
            raise AuthError("Account endpoint did not return valid JSON.") from e

        if not isinstance(data, dict):
            raise AuthError("Account endpoint returned an unexpected document.")

        try:
            return AccountInfo.model_validate(data)
        except ValidationError as e:
            raise AuthError(f"Malformed account information: {e}") from e

    async def validate(self, credentials: Credentials) -> AccountInfo:
        """
        Verifies the credentials.

        Args:
            credentials: The account to verify.

        Returns:
            The account snapshot when the server reports the user as authenticated.

        Raises:
            AuthError: If the request fails or the auth flag is not set.
        """
        log.info(f"Verifying account '{credentials.username}'...")
        info = await self.fetch_account_info(credentials)

        if not info.user_info.is_authenticated:
            log.debug(
                f"Account '{credentials.username}' rejected "
                f"(auth={info.user_info.auth}, status={info.user_info.status!r})"
            )
            raise AuthError("Invalid credentials")

        log.info(
            f"Account '{credentials.username}' verified "
            f"(status: {info.user_info.status or 'unknown'})."
        )
        return info
