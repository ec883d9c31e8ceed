# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Strategy configuration.

Options are validated into an immutable pydantic model. Endpoint URLs are
derived from the tenant unless the caller supplies them explicitly. Both
snake_case names and the camelCase option names common to OAuth middleware
(``clientID``, ``callbackURL``, ``developerToken``...) are accepted.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .provider import ConfigurationError

AUTHORITY_HOST = "https://login.microsoftonline.com"
DEFAULT_TENANT = "common"
DEFAULT_API_ENTRY_POINT = "https://graph.microsoft.com"
DEFAULT_API_VERSION = "v1.0"

PROFILE_SOURCE_GRAPH = "graph"
PROFILE_SOURCE_BINGADS = "bingads"


def authorization_url_for(tenant: str) -> str:
    return f"{AUTHORITY_HOST}/{tenant}/oauth2/v2.0/authorize"


def token_url_for(tenant: str) -> str:
    return f"{AUTHORITY_HOST}/{tenant}/oauth2/v2.0/token"


class StrategyConfig(BaseModel):
    """Validated settings for one Microsoft strategy instance.

    Attributes:
        client_id: Application (client) ID registered with Microsoft
        client_secret: Application client secret
        callback_url: Redirect URI registered for the application
        tenant: Directory tenant, "common" for any account type
        authorization_url: Authorization endpoint (derived from tenant)
        token_url: Token endpoint (derived from tenant)
        scope: Requested scopes, as a string or list
        scope_separator: Separator used when joining a scope list
        custom_headers: Extra headers sent to the token endpoint (read-only)
        developer_token: Microsoft Advertising developer token (SOAP profile)
        api_entry_point: Graph API base URL (REST profile)
        api_version: Graph API version (REST profile)
        add_upn_as_email: Also report userPrincipalName as a work email
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    client_id: str = Field(alias="clientID", min_length=1)
    client_secret: str = Field(default="", alias="clientSecret")
    callback_url: Optional[str] = Field(default=None, alias="callbackURL")
    tenant: str = DEFAULT_TENANT
    authorization_url: Optional[str] = Field(default=None, alias="authorizationURL")
    token_url: Optional[str] = Field(default=None, alias="tokenURL")
    scope: Optional[Union[str, List[str]]] = None
    scope_separator: str = Field(default=" ", alias="scopeSeparator")
    custom_headers: Mapping[str, str] = Field(default_factory=dict, alias="customHeaders", validate_default=True)
    developer_token: str = Field(default="", alias="developerToken")
    api_entry_point: str = Field(default=DEFAULT_API_ENTRY_POINT, alias="apiEntryPoint")
    api_version: str = Field(default=DEFAULT_API_VERSION, alias="apiVersion")
    add_upn_as_email: bool = Field(default=False, alias="addUPNAsEmail")

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data: Any) -> Any:
        # Falsy values fall back to defaults, the same as omitting the option
        if not isinstance(data, Mapping):
            return data
        data = {key: value for key, value in data.items() if value is not None and value != ""}
        tenant = data.get("tenant") or DEFAULT_TENANT
        data["tenant"] = tenant
        if not (data.get("authorization_url") or data.get("authorizationURL")):
            data["authorization_url"] = authorization_url_for(tenant)
        if not (data.get("token_url") or data.get("tokenURL")):
            data["token_url"] = token_url_for(tenant)
        return data

    @field_validator("custom_headers", mode="after")
    @classmethod
    def _freeze_headers(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @property
    def profile_source(self) -> str:
        """Which upstream API supplies the profile.

        A developer token selects the Bing Ads SOAP API, otherwise the
        Graph REST API is used.
        """
        return PROFILE_SOURCE_BINGADS if self.developer_token else PROFILE_SOURCE_GRAPH

    def joined_scope(self) -> Optional[str]:
        """Return the scope parameter for the authorization request."""
        if not self.scope:
            return None
        if isinstance(self.scope, str):
            return self.scope
        return self.scope_separator.join(self.scope)

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]]) -> "StrategyConfig":
        """Validate a caller-supplied options mapping.

        Args:
            options: Strategy options; must be a mapping containing a client ID

        Returns:
            Frozen StrategyConfig

        Raises:
            ConfigurationError: If options are absent or invalid
        """
        if options is None:
            raise ConfigurationError(
                "Microsoft strategy requires options. "
                "Provide at least clientID (client_id) explicitly"
            )
        if not isinstance(options, Mapping):
            raise ConfigurationError(
                f"Microsoft strategy options must be a mapping, got {type(options).__name__}"
            )
        if not (options.get("client_id") or options.get("clientID")):
            raise ConfigurationError(
                "clientID parameter is required for Microsoft strategy. "
                "Provide the Microsoft OAuth client ID explicitly"
            )

        try:
            return cls.model_validate(dict(options))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid Microsoft strategy options: {e}") from e
