# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Generic OAuth 2.0 client used by the Microsoft strategy.

This module covers the provider-independent parts of the authorization-code
flow: building the authorization redirect, exchanging a code for tokens and
issuing authenticated GET requests with the resulting access token.
"""

import json
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx

from .models import TokenResponse


class OAuthHTTPError(Exception):
    """Raised when an OAuth endpoint responds with an error or is unreachable.

    Attributes:
        status_code: HTTP status, or None for transport failures
        data: Response body text, or None for transport failures
    """

    def __init__(self, message: str, status_code: Optional[int] = None, data: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.data = data


class OAuth2Client:
    """OAuth 2.0 authorization-code client.

    Attributes:
        client_id: OAuth client ID
        client_secret: OAuth client secret
        authorization_url: Authorization endpoint
        token_url: Token endpoint
        custom_headers: Extra headers sent with token requests
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        authorization_url: str,
        token_url: str,
        custom_headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.authorization_url = authorization_url
        self.token_url = token_url
        self.custom_headers = dict(custom_headers or {})
        self._transport = transport
        self._timeout = timeout
        self._use_authorization_header_for_get = False

    def use_authorization_header_for_get(self, enabled: bool) -> None:
        """Send the access token as a bearer header rather than a query parameter."""
        self._use_authorization_header_for_get = enabled

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self._timeout)

    def build_authorization_redirect(self, params: Optional[Mapping[str, Any]] = None) -> str:
        """Build the URL the user agent is redirected to for authorization.

        Args:
            params: Additional query parameters (prompt, scope, redirect_uri...)

        Returns:
            Authorization URL with encoded query string
        """
        query: Dict[str, Any] = dict(params or {})
        query["response_type"] = "code"
        query["client_id"] = self.client_id

        url = httpx.URL(self.authorization_url)
        return str(url.copy_merge_params(query))

    async def exchange_code_for_token(
        self,
        code: str,
        options: Optional[Mapping[str, Any]] = None,
    ) -> TokenResponse:
        """Exchange an authorization code for tokens.

        Args:
            code: Authorization code from the callback
            options: Extra form fields (grant_type, redirect_uri)

        Returns:
            TokenResponse with access and refresh tokens

        Raises:
            OAuthHTTPError: If the token endpoint fails or returns an error
        """
        form: Dict[str, Any] = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "authorization_code",
            "code": code,
        }
        form.update({key: value for key, value in (options or {}).items() if value is not None})
        headers = {"Accept": "application/json", **self.custom_headers}

        try:
            async with self._client() as client:
                response = await client.post(self.token_url, data=form, headers=headers)
        except httpx.HTTPError as e:
            raise OAuthHTTPError(f"Token endpoint unavailable: {e}") from e

        if response.status_code >= 400:
            raise OAuthHTTPError(
                f"Token endpoint returned HTTP {response.status_code}",
                status_code=response.status_code,
                data=response.text,
            )

        params = _decode_token_body(response.text)
        access_token = params.get("access_token")
        if not access_token:
            raise OAuthHTTPError(
                "Token response missing access_token",
                status_code=response.status_code,
                data=response.text,
            )

        return TokenResponse(
            access_token=access_token,
            refresh_token=params.get("refresh_token"),
            params=params,
        )

    async def get(self, url: str, access_token: str) -> Tuple[int, str]:
        """Issue an authenticated GET request.

        Args:
            url: Resource URL
            access_token: OAuth access token

        Returns:
            Tuple of (status_code, body text)

        Raises:
            OAuthHTTPError: On transport failure or a non-2xx status
        """
        headers: Dict[str, str] = {}
        params: Dict[str, str] = {}
        if self._use_authorization_header_for_get:
            headers["Authorization"] = f"Bearer {access_token}"
        else:
            params["access_token"] = access_token

        try:
            async with self._client() as client:
                response = await client.get(url, headers=headers, params=params or None)
        except httpx.HTTPError as e:
            raise OAuthHTTPError(f"Request to {url} failed: {e}") from e

        if response.status_code >= 400:
            raise OAuthHTTPError(
                f"{url} returned HTTP {response.status_code}",
                status_code=response.status_code,
                data=response.text,
            )
        return response.status_code, response.text


def _decode_token_body(body: str) -> Dict[str, Any]:
    """Decode a token response, accepting JSON or form-encoded bodies."""
    try:
        decoded = json.loads(body)
    except ValueError:
        return dict(httpx.QueryParams(body))
    return decoded if isinstance(decoded, dict) else {}
