# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Microsoft Advertising (Bing Ads) profile fetcher.

Calls the Customer Management SOAP service's ``GetUser`` operation with the
user's access token and the application's developer token, then maps the
returned ``User`` entity to a normalized profile.
"""

from typing import Any, Dict, Optional

import httpx
from lxml import etree

from .logger import Logger, create_logger
from .models import NormalizedProfile, ProfileEmail, ProfileName
from .provider import InternalOAuthError, ProfileCallback, ProfileFetcher, SoapFaultError
from .soap import build_get_user_envelope, extract_fault_message, node_text, parse_xml_tree

default_logger = create_logger(logger_type="stdout", level="INFO", name="microsoft_strategy.bingads")

CUSTOMER_MANAGEMENT_URL = (
    "https://clientcenter.api.bingads.microsoft.com"
    "/Api/CustomerManagement/v13/CustomerManagementService.svc"
)

SOAP_HEADERS = {
    "Content-Type": "text/xml; charset=utf-8",
    "SOAPAction": "GetUser",
}


class BingAdsProfileFetcher(ProfileFetcher):
    """Profile fetcher backed by the Customer Management SOAP API.

    Attributes:
        developer_token: Microsoft Advertising developer token
        endpoint: Customer Management service URL
    """

    def __init__(
        self,
        developer_token: str,
        endpoint: str = CUSTOMER_MANAGEMENT_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
        logger: Optional[Logger] = None,
    ):
        self.developer_token = developer_token
        self.endpoint = endpoint
        self._transport = transport
        self._timeout = timeout
        self._logger = logger or default_logger

    async def fetch_profile(self, access_token: str, done: ProfileCallback) -> None:
        """Call ``GetUser`` and report the mapped profile.

        Every failure, including SOAP faults and responses missing expected
        nodes, is reported as an InternalOAuthError.
        """
        try:
            envelope = build_get_user_envelope(access_token, self.developer_token)
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(self.endpoint, content=envelope, headers=SOAP_HEADERS)
                body = response.text
        except (httpx.HTTPError, ValueError) as e:
            self._logger.warning("GetUser SOAP request failed", endpoint=self.endpoint, error=str(e))
            done(InternalOAuthError("Failed to fetch user profile via SOAP request", e), None)
            return

        try:
            tree = parse_xml_tree(response.content)
        except (etree.XMLSyntaxError, ValueError) as e:
            self._logger.warning(
                "GetUser SOAP response is not valid XML",
                status_code=response.status_code,
                error=str(e),
            )
            done(InternalOAuthError("Error parsing SOAP response", e), None)
            return

        try:
            soap_body = tree["s:Envelope"]["s:Body"]
            fault_message = extract_fault_message(soap_body)
            if fault_message is not None:
                raise SoapFaultError(fault_message)
            profile = self.map_profile(soap_body, body, tree)
        except SoapFaultError as e:
            self._logger.warning("GetUser returned a SOAP fault", fault=e.message)
            done(InternalOAuthError(e.message, e), None)
            return
        except (KeyError, TypeError, AttributeError) as e:
            self._logger.warning("GetUser SOAP response missing user fields", error=repr(e))
            done(InternalOAuthError("Failed to fetch user profile", e), None)
            return

        self._logger.debug("Fetched Bing Ads profile", user_id=profile.id)
        done(None, profile)

    def map_profile(self, soap_body: Dict[str, Any], body: str, tree: Dict[str, Any]) -> NormalizedProfile:
        """Map the ``GetUserResponse`` User entity to a NormalizedProfile.

        Leaves are read as text; a nil or empty leaf maps to ``""``.

        Raises:
            KeyError: If an expected node is missing
            TypeError: If a node has an unexpected shape
        """
        user = soap_body["GetUserResponse"]["User"]
        name = user["a:Name"]
        first_name = node_text(name["a:FirstName"]) or ""
        last_name = node_text(name["a:LastName"]) or ""
        email = node_text(user["a:ContactInfo"]["a:Email"]) or ""

        return NormalizedProfile(
            id=node_text(user["a:Id"]) or "",
            display_name=f"{first_name} {last_name}",
            name=ProfileName(given_name=first_name, family_name=last_name),
            emails=[ProfileEmail(value=email)],
            raw=body,
            json=tree,
        )
