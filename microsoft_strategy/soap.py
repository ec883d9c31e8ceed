# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""SOAP envelope building and parsing for the Customer Management service.

Envelopes are built with ``lxml.etree`` so token values are escaped as text
rather than interpolated into markup. Responses are parsed into a nested
dict keyed by element names as written on the wire, prefix included
(``s:Envelope``, ``a:Name``). Attribute names lose their prefix.
"""

from typing import Any, Dict, Optional, Union

from lxml import etree

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
CUSTOMER_NS = "https://bingads.microsoft.com/Customer/v13"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"

DEFAULT_FAULT_MESSAGE = "Error in response of SOAP request"

TEXT_KEY = "#text"


def _tag(namespace: str, name: str) -> str:
    return f"{{{namespace}}}{name}"


def _nil(element: etree._Element) -> None:
    element.set(_tag(XSI_NS, "nil"), "true")


def build_get_user_envelope(access_token: str, developer_token: str) -> bytes:
    """Build the ``GetUser`` request envelope.

    The request asks for the user that owns ``access_token`` (``UserId`` is
    nil).

    Args:
        access_token: OAuth access token, sent as AuthenticationToken
        developer_token: Microsoft Advertising developer token

    Returns:
        UTF-8 encoded XML document with declaration

    Raises:
        ValueError: If a token contains characters that are not valid XML
    """
    envelope = etree.Element(_tag(SOAP_ENV_NS, "Envelope"), nsmap={"s": SOAP_ENV_NS})

    header = etree.SubElement(envelope, _tag(SOAP_ENV_NS, "Header"))
    application_token = etree.SubElement(
        header,
        _tag(CUSTOMER_NS, "ApplicationToken"),
        nsmap={"h": CUSTOMER_NS, "i": XSI_NS},
    )
    _nil(application_token)

    authentication_token = etree.SubElement(
        header, _tag(CUSTOMER_NS, "AuthenticationToken"), nsmap={"h": CUSTOMER_NS}
    )
    authentication_token.text = str(access_token)

    developer_token_element = etree.SubElement(
        header, _tag(CUSTOMER_NS, "DeveloperToken"), nsmap={"h": CUSTOMER_NS}
    )
    developer_token_element.text = str(developer_token)

    body = etree.SubElement(envelope, _tag(SOAP_ENV_NS, "Body"))
    request = etree.SubElement(body, _tag(CUSTOMER_NS, "GetUserRequest"), nsmap={None: CUSTOMER_NS})
    user_id = etree.SubElement(request, _tag(CUSTOMER_NS, "UserId"), nsmap={"i": XSI_NS})
    _nil(user_id)

    return etree.tostring(envelope, xml_declaration=True, encoding="utf-8")


def _qualified_name(element: etree._Element) -> str:
    local_name = etree.QName(element).localname
    return f"{element.prefix}:{local_name}" if element.prefix else local_name


def _element_value(element: etree._Element) -> Union[str, Dict[str, Any]]:
    children = [child for child in element if isinstance(child.tag, str)]
    attributes = {etree.QName(key).localname: value for key, value in element.attrib.items()}
    text = (element.text or "").strip()

    if not children and not attributes:
        return text

    node: Dict[str, Any] = dict(attributes)
    for child in children:
        key = _qualified_name(child)
        value = _element_value(child)
        if key not in node:
            node[key] = value
        elif isinstance(node[key], list):
            node[key].append(value)
        else:
            node[key] = [node[key], value]

    if text:
        node[TEXT_KEY] = text
    return node


def parse_xml_tree(body: Union[str, bytes]) -> Dict[str, Any]:
    """Parse an XML document into a nested dict.

    Repeated sibling elements become lists, leaf elements become their
    trimmed text, and empty elements become ``""``.

    Args:
        body: XML document

    Returns:
        Dict with a single key, the root element's qualified name

    Raises:
        etree.XMLSyntaxError: If the document is not well-formed
    """
    if isinstance(body, str):
        body = body.encode("utf-8")

    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
    root = etree.fromstring(body, parser)
    return {_qualified_name(root): _element_value(root)}


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def node_text(value: Any) -> Optional[str]:
    """Return the text of a parsed node, whether a leaf or an attributed element."""
    value = _first(value)
    if isinstance(value, dict):
        value = value.get(TEXT_KEY)
    return value if isinstance(value, str) else None


def extract_fault_message(soap_body: Dict[str, Any]) -> Optional[str]:
    """Return the flattened fault message of a SOAP body, if it holds a fault.

    The nested ``AdApiFaultDetail`` error message wins over ``faultstring``.

    Args:
        soap_body: The parsed ``s:Body`` node

    Returns:
        Fault message, or None when the body carries no fault. An empty
        ``s:Fault`` element is not treated as a fault.
    """
    fault = soap_body.get("s:Fault") if isinstance(soap_body, dict) else None
    if not fault:
        return None
    if not isinstance(fault, dict):
        return DEFAULT_FAULT_MESSAGE

    message = node_text(fault.get("faultstring")) or DEFAULT_FAULT_MESSAGE

    node: Any = fault
    for key in ("detail", "AdApiFaultDetail", "Errors", "AdApiError"):
        node = _first(node.get(key)) if isinstance(node, dict) else None
    if isinstance(node, dict):
        message = node_text(node.get("Message")) or message

    return message
