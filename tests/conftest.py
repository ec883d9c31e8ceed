# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Shared fixtures for microsoft_strategy tests.

HTTP is faked with ``httpx.MockTransport``; no test reaches the network.
"""

import json

import httpx
import pytest

from microsoft_strategy import SilentLogger

GRAPH_USER = {
    "id": "1",
    "displayName": "A B",
    "surname": "B",
    "givenName": "A",
    "mail": "a@b.com",
    "userPrincipalName": "ab@contoso.onmicrosoft.com",
}

GET_USER_RESPONSE = """<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/">
  <s:Header>
    <h:TrackingId xmlns:h="https://bingads.microsoft.com/Customer/v13">7f3e2a</h:TrackingId>
  </s:Header>
  <s:Body>
    <GetUserResponse xmlns="https://bingads.microsoft.com/Customer/v13">
      <User xmlns:a="https://bingads.microsoft.com/Customer/v13/Entities" xmlns:i="http://www.w3.org/2001/XMLSchema-instance">
        <a:ContactInfo>
          <a:Email>a@b.com</a:Email>
          <a:Phone1 i:nil="true"/>
        </a:ContactInfo>
        <a:Id>99</a:Id>
        <a:Name>
          <a:FirstName>A</a:FirstName>
          <a:LastName>B</a:LastName>
          <a:MiddleInitial i:nil="true"/>
        </a:Name>
        <a:UserName>ab_user</a:UserName>
      </User>
    </GetUserResponse>
  </s:Body>
</s:Envelope>"""

FAULT_RESPONSE = """<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/">
  <s:Body>
    <s:Fault>
      <faultcode>s:Server</faultcode>
      <faultstring xml:lang="en-US">Permission denied</faultstring>
    </s:Fault>
  </s:Body>
</s:Envelope>"""

DETAILED_FAULT_RESPONSE = """<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/">
  <s:Body>
    <s:Fault>
      <faultcode>s:Server</faultcode>
      <faultstring xml:lang="en-US">Invalid client data. Check the SOAP fault details for more information.</faultstring>
      <detail>
        <AdApiFaultDetail xmlns="https://adapi.microsoft.com" xmlns:i="http://www.w3.org/2001/XMLSchema-instance">
          <TrackingId>7f3e2a</TrackingId>
          <Errors>
            <AdApiError>
              <Code>105</Code>
              <Detail i:nil="true"/>
              <ErrorCode>InvalidCredentials</ErrorCode>
              <Message>Invalid token</Message>
            </AdApiError>
          </Errors>
        </AdApiFaultDetail>
      </detail>
    </s:Fault>
  </s:Body>
</s:Envelope>"""


class RecordingCallback:
    """Completion callback that records every invocation."""

    def __init__(self):
        self.calls = []

    def __call__(self, error, profile):
        self.calls.append((error, profile))

    @property
    def error(self):
        return self.calls[0][0]

    @property
    def profile(self):
        return self.calls[0][1]


@pytest.fixture
def done():
    """Recording completion callback."""
    return RecordingCallback()


@pytest.fixture
def silent_logger():
    """Logger that keeps records in memory."""
    return SilentLogger(level="DEBUG", name="test")


@pytest.fixture
def graph_user():
    """A Graph /me payload (copy, safe to mutate)."""
    return dict(GRAPH_USER)


def json_transport(payload, status_code=200, requests=None):
    """MockTransport answering every request with a JSON body."""
    def handler(request):
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, text=json.dumps(payload))

    return httpx.MockTransport(handler)


def text_transport(body, status_code=200, requests=None):
    """MockTransport answering every request with a text body."""
    def handler(request):
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, text=body)

    return httpx.MockTransport(handler)


def failing_transport(requests=None):
    """MockTransport that fails every request at the connection level."""
    def handler(request):
        if requests is not None:
            requests.append(request)
        raise httpx.ConnectError("Connection refused", request=request)

    return httpx.MockTransport(handler)
