"""Tests for the provisioning request/response exchange."""

import json

import httpx
import pytest

from amnezia_provision.services.management.exceptions import RequestError, RequestErrorKind
from amnezia_provision.services.management.provisioning_client import ProvisioningClient

PUBLIC_KEY = "hSDwCYkwp1R0i33ctD73Wg2/Og0mOBr066SpjqqbTmo="


def test_successful_exchange_returns_config(settings, make_transport):
    transport = make_transport(json_body={"config": "vpn-config-payload"})
    client = ProvisioningClient(settings, transport=transport)

    response = client.provision("https://mock/api/v1/config", "K", PUBLIC_KEY)

    assert response.config == "vpn-config-payload"
    assert len(transport.requests) == 1


def test_request_carries_headers_and_body(settings, make_transport):
    transport = make_transport(json_body={"config": "x"})
    ProvisioningClient(settings, transport=transport).provision("https://mock", "K", PUBLIC_KEY)

    request = transport.requests[0]
    assert request.method == "POST"
    assert request.url.host == "mock"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Authorization"] == "Api-Key K"

    body = json.loads(request.content)
    assert set(body) == {"public_key", "os_version", "app_version", "uuid"}
    assert body["public_key"] == PUBLIC_KEY
    assert body["os_version"] == "macOS"
    assert body["app_version"] == "4.8.2.3"


def test_labels_follow_settings(settings, make_transport):
    settings = settings.model_copy(update={"os_version": "Linux", "app_version": "4.9.0"})
    transport = make_transport(json_body={"config": "x"})
    ProvisioningClient(settings, transport=transport).provision("https://mock", "K", PUBLIC_KEY)

    body = json.loads(transport.requests[0].content)
    assert body["os_version"] == "Linux"
    assert body["app_version"] == "4.9.0"


def test_request_id_is_fresh_per_request(settings, make_transport):
    transport = make_transport(json_body={"config": "x"})
    client = ProvisioningClient(settings, transport=transport)
    client.provision("https://mock", "K", PUBLIC_KEY)
    client.provision("https://mock", "K", PUBLIC_KEY)

    first, second = (json.loads(r.content)["uuid"] for r in transport.requests)
    assert first != second


@pytest.mark.parametrize("endpoint, credential", [("", "K"), ("https://mock", "")])
def test_empty_input_is_rejected_before_sending(settings, make_transport, endpoint, credential):
    transport = make_transport(json_body={"config": "x"})
    with pytest.raises(RequestError) as excinfo:
        ProvisioningClient(settings, transport=transport).provision(endpoint, credential, PUBLIC_KEY)

    assert excinfo.value.kind is RequestErrorKind.INVALID_INPUT
    assert transport.requests == []


def test_endpoint_without_scheme_is_invalid_input(settings, make_transport):
    transport = make_transport(json_body={"config": "x"})
    with pytest.raises(RequestError) as excinfo:
        ProvisioningClient(settings, transport=transport).provision("mock/api", "K", PUBLIC_KEY)
    assert excinfo.value.kind is RequestErrorKind.INVALID_INPUT


def test_server_rejection_carries_status_and_body(settings, make_transport):
    transport = make_transport(403, text="forbidden")
    with pytest.raises(RequestError) as excinfo:
        ProvisioningClient(settings, transport=transport).provision("https://mock", "K", PUBLIC_KEY)

    error = excinfo.value
    assert error.kind is RequestErrorKind.SERVER_REJECTED
    assert error.status_code == 403
    assert error.body == "forbidden"
    assert len(transport.requests) == 1


@pytest.mark.parametrize("status_code", [300, 404, 500, 503])
def test_non_success_statuses_are_rejected(settings, make_transport, status_code):
    transport = make_transport(status_code, text="nope")
    with pytest.raises(RequestError) as excinfo:
        ProvisioningClient(settings, transport=transport).provision("https://mock", "K", PUBLIC_KEY)
    assert excinfo.value.status_code == status_code


def test_transport_failure_is_not_retried(settings):
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    client = ProvisioningClient(settings, transport=httpx.MockTransport(handler))
    with pytest.raises(RequestError) as excinfo:
        client.provision("https://mock", "K", PUBLIC_KEY)

    assert excinfo.value.kind is RequestErrorKind.TRANSPORT
    assert len(attempts) == 1


def test_timeout_is_reported_as_transport_error(settings):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = ProvisioningClient(settings, transport=httpx.MockTransport(handler))
    with pytest.raises(RequestError) as excinfo:
        client.provision("https://mock", "K", PUBLIC_KEY)
    assert excinfo.value.kind is RequestErrorKind.TRANSPORT


@pytest.mark.parametrize(
    "body",
    ['{"configuration": "x"}', '{"config": 12}', '["config"]', "<html>ok</html>", ""],
)
def test_malformed_success_body(settings, make_transport, body):
    transport = make_transport(200, text=body)
    with pytest.raises(RequestError) as excinfo:
        ProvisioningClient(settings, transport=transport).provision("https://mock", "K", PUBLIC_KEY)
    assert excinfo.value.kind is RequestErrorKind.MALFORMED_RESPONSE


def test_redirect_is_followed(settings):
    def handler(request):
        if request.url.path == "/old":
            return httpx.Response(307, headers={"Location": "https://mock/new"})
        return httpx.Response(200, json={"config": "moved"})

    client = ProvisioningClient(settings, transport=httpx.MockTransport(handler))
    assert client.provision("https://mock/old", "K", PUBLIC_KEY).config == "moved"
