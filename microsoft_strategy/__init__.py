# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Microsoft OAuth 2.0 authentication strategy.

Delegates user login to the Microsoft identity platform using the
authorization-code flow and normalizes the user's profile from either the
Microsoft Graph REST API or the Microsoft Advertising (Bing Ads) SOAP API.
"""

__version__ = "0.1.0"

from .bingads_provider import BingAdsProfileFetcher
from .config import StrategyConfig
from .factory import create_profile_fetcher
from .graph_provider import GraphProfileFetcher
from .logger import Logger, SilentLogger, StdoutLogger, create_logger
from .models import AuthenticationResult, NormalizedProfile, ProfileEmail, ProfileName, TokenResponse
from .oauth2 import OAuth2Client, OAuthHTTPError
from .provider import (
    AuthorizationError,
    ConfigurationError,
    InternalOAuthError,
    ProfileFetcher,
    SoapFaultError,
    StrategyError,
    TokenError,
)
from .strategy import MicrosoftStrategy, build_auth_params

Strategy = MicrosoftStrategy

__all__ = [
    # Version
    "__version__",
    # Strategy
    "MicrosoftStrategy",
    "Strategy",
    "StrategyConfig",
    "build_auth_params",
    # Models
    "AuthenticationResult",
    "NormalizedProfile",
    "ProfileEmail",
    "ProfileName",
    "TokenResponse",
    # Profile fetchers
    "ProfileFetcher",
    "GraphProfileFetcher",
    "BingAdsProfileFetcher",
    "create_profile_fetcher",
    # OAuth2
    "OAuth2Client",
    "OAuthHTTPError",
    # Logging
    "Logger",
    "StdoutLogger",
    "SilentLogger",
    "create_logger",
    # Exceptions
    "StrategyError",
    "ConfigurationError",
    "InternalOAuthError",
    "TokenError",
    "AuthorizationError",
    "SoapFaultError",
]
