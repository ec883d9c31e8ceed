# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Profile and token models produced by the Microsoft strategy.

The normalized profile is the provider-agnostic user representation handed
to the hosting application after a successful login.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

PROVIDER_NAME = "microsoft"


@dataclass
class ProfileName:
    """Given and family name of the authenticated user."""
    given_name: Optional[str] = None
    family_name: Optional[str] = None


@dataclass
class ProfileEmail:
    """A typed email address attached to a profile."""
    value: str
    type: str = "work"


@dataclass
class NormalizedProfile:
    """User profile normalized from a Microsoft API response.

    Attributes:
        id: Provider-specific user identifier
        display_name: Human-readable name
        name: Given/family name pair
        emails: Ordered email addresses, possibly empty
        raw: Response body exactly as received
        json: Parsed response (JSON object or XML tree)
        user_principal_name: Microsoft UPN, when the API returns one
        provider: Always "microsoft"
    """
    id: Optional[str]
    display_name: Optional[str]
    name: ProfileName = field(default_factory=ProfileName)
    emails: List[ProfileEmail] = field(default_factory=list)
    raw: str = ""
    json: Any = None
    user_principal_name: Optional[str] = None
    provider: str = PROVIDER_NAME

    def to_dict(self) -> Dict[str, Any]:
        """Convert the profile to the camelCase shape used by OAuth middleware.

        ``userPrincipalName`` is omitted when the API did not supply one.

        Returns:
            Dictionary representation of the profile
        """
        data: Dict[str, Any] = {
            "provider": self.provider,
            "id": self.id,
            "displayName": self.display_name,
            "name": {
                "givenName": self.name.given_name,
                "familyName": self.name.family_name,
            },
            "emails": [{"type": email.type, "value": email.value} for email in self.emails],
        }
        if self.user_principal_name is not None:
            data["userPrincipalName"] = self.user_principal_name
        data["raw"] = self.raw
        data["json"] = self.json
        return data


@dataclass
class TokenResponse:
    """Result of exchanging an authorization code at the token endpoint.

    Attributes:
        access_token: OAuth access token
        refresh_token: Refresh token, if the provider issued one
        params: Full decoded token response
    """
    access_token: str
    refresh_token: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AuthenticationResult:
    """Outcome of one ``MicrosoftStrategy.authenticate`` call.

    ``kind`` is one of ``redirect``, ``fail``, ``success`` or ``error``; the
    matching attribute (``url``, ``info``, ``user``, ``error``) is populated.
    """
    kind: str
    url: Optional[str] = None
    user: Any = None
    info: Optional[Dict[str, Any]] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.kind == "success"
