# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Microsoft OAuth 2.0 authentication strategy.

The strategy authenticates requests by delegating to Microsoft using the
OAuth 2.0 authorization-code flow. It is composed of a validated
configuration, a generic OAuth2 client and a profile fetcher chosen by the
configuration.

Applications supply a ``verify`` callable that receives the access token,
refresh token and normalized profile and returns the application's user
(or a falsy value when the credentials are not acceptable). ``verify`` may
be a plain function or a coroutine function.

Example:
    >>> strategy = MicrosoftStrategy(
    ...     {
    ...         "clientID": "123-456-789",
    ...         "clientSecret": "shhh-its-a-secret",
    ...         "callbackURL": "https://www.example.net/auth/microsoft/callback",
    ...     },
    ...     lambda access_token, refresh_token, profile: find_or_create(profile),
    ... )
    >>> result = await strategy.authenticate(request.query_params)
"""

import inspect
import json
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import httpx

from .config import StrategyConfig
from .factory import create_profile_fetcher
from .logger import Logger, create_logger
from .models import PROVIDER_NAME, AuthenticationResult, NormalizedProfile
from .oauth2 import OAuth2Client, OAuthHTTPError
from .provider import (
    AuthorizationError,
    ConfigurationError,
    InternalOAuthError,
    ProfileCallback,
    TokenError,
)

default_logger = create_logger(logger_type="stdout", level="INFO", name="microsoft_strategy.strategy")

AUTHORIZATION_PARAM_NAMES = ("locale", "display", "prompt", "login_hint", "domain_hint")

VerifyCallback = Callable[[str, Optional[str], NormalizedProfile], Any]


def build_auth_params(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Select the Microsoft-specific authorization query parameters.

    Only ``locale``, ``display``, ``prompt``, ``login_hint`` and
    ``domain_hint`` are kept, and only when their value is truthy.

    Args:
        options: Caller-supplied authenticate options

    Returns:
        New dict of recognized parameters, possibly empty
    """
    params: Dict[str, Any] = {}
    if not options:
        return params

    for name in AUTHORIZATION_PARAM_NAMES:
        value = options.get(name)
        if value:
            params[name] = value
    return params


class MicrosoftStrategy:
    """Authentication strategy for Microsoft identity platform logins.

    Attributes:
        name: Strategy name, always "microsoft"
        config: Frozen StrategyConfig
        oauth2: OAuth2 client used for the redirect and token exchange
        profile_fetcher: Fetcher selected by the configuration
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        options: Optional[Mapping[str, Any]],
        verify: VerifyCallback,
        logger: Optional[Logger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the strategy.

        Args:
            options: Strategy options (clientID, clientSecret, callbackURL,
                tenant, developerToken or apiEntryPoint/apiVersion...)
            verify: Callable mapping (access_token, refresh_token, profile)
                to the application's user
            logger: Optional logger
            transport: Optional httpx transport used for all outbound calls

        Raises:
            ConfigurationError: If options are absent or invalid, or verify
                is not callable
        """
        self.config = StrategyConfig.from_options(options)
        if not callable(verify):
            raise ConfigurationError("Microsoft strategy requires a verify callback")

        self._verify = verify
        self._logger = logger or default_logger
        self.oauth2 = OAuth2Client(
            client_id=self.config.client_id,
            client_secret=self.config.client_secret,
            authorization_url=self.config.authorization_url,
            token_url=self.config.token_url,
            custom_headers=self.config.custom_headers,
            transport=transport,
        )
        self.profile_fetcher = create_profile_fetcher(
            self.config,
            self.oauth2,
            logger=self._logger,
            transport=transport,
        )

        self._logger.info(
            "Microsoft strategy configured",
            tenant=self.config.tenant,
            profile_source=self.config.profile_source,
        )

    def authorization_params(self, options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Return provider-specific parameters for the authorization request."""
        return build_auth_params(options)

    async def user_profile(self, access_token: str, done: ProfileCallback) -> None:
        """Retrieve the normalized profile for ``access_token``.

        ``done(error, profile)`` is invoked exactly once.
        """
        await self.profile_fetcher.fetch_profile(access_token, done)

    async def load_user_profile(self, access_token: str) -> Tuple[Optional[BaseException], Optional[NormalizedProfile]]:
        """Await ``user_profile`` and return its ``(error, profile)`` pair."""
        outcome: Dict[str, Tuple[Optional[BaseException], Optional[NormalizedProfile]]] = {}

        def done(error: Optional[BaseException], profile: Optional[NormalizedProfile]) -> None:
            outcome["result"] = (error, profile)

        await self.user_profile(access_token, done)
        return outcome["result"]

    @staticmethod
    def parse_error_response(body: Optional[str], status: Optional[int] = None) -> Optional[TokenError]:
        """Parse an error body returned by the token endpoint.

        Microsoft has returned both the OAuth 2.0 shape
        (``{"error": "...", "error_description": "..."}``) and a nested
        ``{"error": {"message": ..., "type": ..., "code": ...}}`` shape.

        Returns:
            TokenError, or None if the body is not a recognizable error
        """
        try:
            data = json.loads(body) if body else None
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None

        error = data.get("error")
        status = status or 500
        if isinstance(error, dict):
            code = error.get("type") or error.get("code")
            return TokenError(error.get("message"), str(code) if code is not None else None, status=status)
        if error:
            return TokenError(data.get("error_description"), error, data.get("error_uri"), status=status)
        return None

    def _redirect_uri(self, options: Mapping[str, Any]) -> Optional[str]:
        return options.get("callback_url") or options.get("callbackURL") or self.config.callback_url

    async def authenticate(
        self,
        query: Optional[Mapping[str, Any]],
        options: Optional[Mapping[str, Any]] = None,
    ) -> AuthenticationResult:
        """Run one step of the authorization-code flow.

        Args:
            query: Query parameters of the incoming request
            options: Per-request options (display, prompt, scope, callbackURL...)

        Returns:
            AuthenticationResult: ``redirect`` when starting the flow,
            ``fail`` when the user denied access or verify rejected the user,
            ``success`` with the verified user, or ``error``
        """
        query = dict(query or {})
        options = dict(options or {})

        if query.get("error"):
            return self._handle_authorization_error(query)

        code = query.get("code")
        if code:
            return await self._handle_callback(code, options)

        params = self.authorization_params(options)
        redirect_uri = self._redirect_uri(options)
        if redirect_uri:
            params["redirect_uri"] = redirect_uri

        scope = options.get("scope")
        if isinstance(scope, (list, tuple)):
            scope = self.config.scope_separator.join(scope)
        scope = scope or self.config.joined_scope()
        if scope:
            params["scope"] = scope

        url = self.oauth2.build_authorization_redirect(params)
        self._logger.debug("Redirecting to Microsoft authorization endpoint", url=url)
        return AuthenticationResult(kind="redirect", url=url)

    def _handle_authorization_error(self, query: Dict[str, Any]) -> AuthenticationResult:
        error = query["error"]
        description = query.get("error_description")

        if error == "access_denied":
            self._logger.info("User denied Microsoft authorization", reason=query.get("error_reason"))
            return AuthenticationResult(kind="fail", info={**query, "message": description})

        self._logger.warning("Microsoft authorization returned an error", error=error)
        return AuthenticationResult(
            kind="error",
            error=AuthorizationError(description, error, query.get("error_uri")),
        )

    async def _handle_callback(self, code: str, options: Dict[str, Any]) -> AuthenticationResult:
        try:
            token = await self.oauth2.exchange_code_for_token(
                code,
                {"grant_type": "authorization_code", "redirect_uri": self._redirect_uri(options)},
            )
        except OAuthHTTPError as e:
            error = self.parse_error_response(e.data, e.status_code) or InternalOAuthError(
                "Failed to obtain access token", e
            )
            self._logger.warning("Token exchange failed", status_code=e.status_code, error=str(error))
            return AuthenticationResult(kind="error", error=error)

        profile_error, profile = await self.load_user_profile(token.access_token)
        if profile_error is not None:
            return AuthenticationResult(kind="error", error=profile_error)

        try:
            user = self._verify(token.access_token, token.refresh_token, profile)
            if inspect.isawaitable(user):
                user = await user
        except Exception as e:
            self._logger.exception("Verify callback raised", user_id=profile.id)
            return AuthenticationResult(kind="error", error=e)

        if not user:
            self._logger.info("Verify callback rejected user", user_id=profile.id)
            return AuthenticationResult(kind="fail", info={"message": "User rejected by verify callback"})

        self._logger.info("Microsoft authentication succeeded", user_id=profile.id)
        return AuthenticationResult(kind="success", user=user)
