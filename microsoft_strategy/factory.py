# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Factory for the profile fetcher matching a strategy configuration.

A configured developer token selects the Bing Ads SOAP fetcher; otherwise
the Microsoft Graph REST fetcher is used.
"""

from typing import Optional

import httpx

from .bingads_provider import BingAdsProfileFetcher
from .config import PROFILE_SOURCE_BINGADS, PROFILE_SOURCE_GRAPH, StrategyConfig
from .graph_provider import GraphProfileFetcher
from .logger import Logger
from .oauth2 import OAuth2Client
from .provider import ConfigurationError, ProfileFetcher


def create_profile_fetcher(
    config: StrategyConfig,
    oauth2: OAuth2Client,
    logger: Optional[Logger] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ProfileFetcher:
    """Create the profile fetcher selected by ``config.profile_source``.

    Args:
        config: Validated strategy configuration
        oauth2: OAuth2 client used for authenticated GETs (Graph only)
        logger: Optional logger passed to the fetcher
        transport: Optional httpx transport (Bing Ads only; Graph requests
            go through ``oauth2``)

    Returns:
        ProfileFetcher instance

    Raises:
        ConfigurationError: If the profile source is unknown
    """
    source = config.profile_source

    if source == PROFILE_SOURCE_BINGADS:
        return BingAdsProfileFetcher(
            developer_token=config.developer_token,
            transport=transport,
            logger=logger,
        )

    elif source == PROFILE_SOURCE_GRAPH:
        # Graph expects the token in the Authorization header
        oauth2.use_authorization_header_for_get(True)
        return GraphProfileFetcher(
            oauth2=oauth2,
            api_entry_point=config.api_entry_point,
            api_version=config.api_version,
            add_upn_as_email=config.add_upn_as_email,
            logger=logger,
        )

    else:
        raise ConfigurationError(
            f"Unknown profile source: {source}. "
            f"Supported sources: {PROFILE_SOURCE_GRAPH}, {PROFILE_SOURCE_BINGADS}"
        )
