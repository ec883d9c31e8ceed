# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Profile fetcher interface and strategy errors.

A profile fetcher turns an access token into a normalized profile. There
are two implementations (Microsoft Graph over REST and Bing Ads over SOAP);
a deployment picks one at configuration time.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from .models import NormalizedProfile

ProfileCallback = Callable[[Optional[BaseException], Optional[NormalizedProfile]], None]


class StrategyError(Exception):
    """Base class for errors raised or reported by the strategy."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(StrategyError, ValueError):
    """Raised synchronously when strategy options are absent or invalid."""
    pass


class InternalOAuthError(StrategyError):
    """Wraps a failure talking to an upstream Microsoft API.

    Attributes:
        message: Description of what failed
        cause: The original exception, also chained as ``__cause__``
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
        self.__cause__ = cause


class TokenError(StrategyError):
    """Raised when the token endpoint reports an OAuth error.

    Attributes:
        code: OAuth error code (e.g. "invalid_grant")
        uri: Optional error documentation URI
        status: HTTP status returned by the token endpoint
    """

    def __init__(
        self,
        message: Optional[str],
        code: Optional[str] = None,
        uri: Optional[str] = None,
        status: int = 500,
    ):
        super().__init__(message or "")
        self.code = code or "server_error"
        self.uri = uri
        self.status = status


class AuthorizationError(StrategyError):
    """Raised when the authorization endpoint redirects back with an error."""

    def __init__(self, message: Optional[str], code: Optional[str] = None, uri: Optional[str] = None):
        super().__init__(message or "")
        self.code = code or "server_error"
        self.uri = uri


class SoapFaultError(StrategyError):
    """A fault reported in a SOAP response body, flattened to its message."""
    pass


class ProfileFetcher(ABC):
    """Abstract base class for profile fetchers.

    Implementations perform exactly one upstream call per invocation and
    report the outcome through ``done``.
    """

    @abstractmethod
    async def fetch_profile(self, access_token: str, done: ProfileCallback) -> None:
        """Fetch and normalize the profile of the token's owner.

        ``done(error, profile)`` is invoked exactly once: with ``(None, profile)``
        on success or ``(error, None)`` on failure. Nothing is raised to the
        caller.

        Args:
            access_token: OAuth access token for the user
            done: Completion callback
        """
        pass
