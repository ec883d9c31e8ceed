# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Microsoft Graph profile fetcher.

Retrieves the signed-in user from the Graph ``/me`` endpoint and maps the
JSON response to a normalized profile.
"""

import json
from typing import Any, Dict, List, Optional

from .config import DEFAULT_API_ENTRY_POINT, DEFAULT_API_VERSION
from .logger import Logger, create_logger
from .models import NormalizedProfile, ProfileEmail, ProfileName
from .oauth2 import OAuth2Client, OAuthHTTPError
from .provider import InternalOAuthError, ProfileCallback, ProfileFetcher

default_logger = create_logger(logger_type="stdout", level="INFO", name="microsoft_strategy.graph")


def _is_present(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class GraphProfileFetcher(ProfileFetcher):
    """Profile fetcher backed by the Microsoft Graph REST API.

    Attributes:
        api_entry_point: Graph base URL
        api_version: Graph API version segment
        add_upn_as_email: Also report userPrincipalName as a work email
    """

    def __init__(
        self,
        oauth2: OAuth2Client,
        api_entry_point: str = DEFAULT_API_ENTRY_POINT,
        api_version: str = DEFAULT_API_VERSION,
        add_upn_as_email: bool = False,
        logger: Optional[Logger] = None,
    ):
        self._oauth2 = oauth2
        self.api_entry_point = api_entry_point.rstrip("/")
        self.api_version = api_version
        self.add_upn_as_email = add_upn_as_email
        self._logger = logger or default_logger

    @property
    def profile_url(self) -> str:
        return f"{self.api_entry_point}/{self.api_version}/me/"

    async def fetch_profile(self, access_token: str, done: ProfileCallback) -> None:
        """Fetch the Graph ``/me`` resource for the token's owner.

        Transport and HTTP failures are wrapped in InternalOAuthError. A body
        that is not valid JSON is reported with the decoder's own exception,
        unwrapped.
        """
        try:
            _, body = await self._oauth2.get(self.profile_url, access_token)
        except OAuthHTTPError as e:
            self._logger.warning(
                "Graph profile request failed",
                url=self.profile_url,
                status_code=e.status_code,
                error=str(e),
            )
            done(InternalOAuthError("Failed to fetch user profile", e), None)
            return

        try:
            data = json.loads(body)
        except ValueError as e:
            self._logger.warning("Graph profile response is not valid JSON", error=str(e))
            done(e, None)
            return

        try:
            profile = self.map_profile(data, body)
        except (AttributeError, TypeError) as e:
            self._logger.warning("Graph profile response is not a user object", error=str(e))
            done(InternalOAuthError("Failed to parse user profile", e), None)
            return

        self._logger.debug("Fetched Graph profile", user_id=profile.id)
        done(None, profile)

    def map_profile(self, data: Dict[str, Any], body: str) -> NormalizedProfile:
        """Map a Graph user object to a NormalizedProfile.

        Args:
            data: Decoded Graph user object
            body: Raw response body

        Returns:
            NormalizedProfile with trimmed emails ordered mail first, UPN second
        """
        emails: List[ProfileEmail] = []
        if _is_present(data.get("mail")):
            emails.append(ProfileEmail(value=data["mail"].strip()))
        if self.add_upn_as_email and _is_present(data.get("userPrincipalName")):
            emails.append(ProfileEmail(value=data["userPrincipalName"].strip()))

        return NormalizedProfile(
            id=data.get("id"),
            display_name=data.get("displayName"),
            name=ProfileName(
                given_name=data.get("givenName"),
                family_name=data.get("surname"),
            ),
            emails=emails,
            user_principal_name=data.get("userPrincipalName"),
            raw=body,
            json=data,
        )
