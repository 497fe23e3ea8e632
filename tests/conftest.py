"""Shared fixtures: settings, link builders and mocked provisioning servers."""

from __future__ import annotations

import json
from typing import Callable

import logging

import httpx
import pytest

from amnezia_provision.management.logger import ROOT_LOGGER_NAME, component_loggers
from amnezia_provision.management.settings import Settings
from amnezia_provision.services.management.link_codec import encode_link, encode_payload

TEMPLATE = (
    "[Interface]\n"
    "Address = 10.8.1.5/32\n"
    "DNS = 1.1.1.1, 1.0.0.1\n"
    "PrivateKey = $WIREGUARD_CLIENT_PRIVATE_KEY\n"
    "\n"
    "[Peer]\n"
    "PublicKey = c2VydmVyLXB1YmxpYy1rZXktcGxhY2Vob2xkZXI=\n"
    "AllowedIPs = 0.0.0.0/0, ::/0\n"
    "Endpoint = vpn.example.com:51820\n"
    "PersistentKeepalive = 25\n"
)


def build_server_document(template: str = TEMPLATE, protocol: str = "awg") -> dict:
    last_config = {
        "client_ip": "10.8.1.5",
        "config": template,
        "hostName": "vpn.example.com",
        "port": 51820,
    }
    return {
        "containers": [
            {
                protocol: {
                    "last_config": json.dumps(last_config, indent=4),
                    "port": "51820",
                    "transport_proto": "udp",
                },
                "container": "amnezia-awg",
            }
        ],
        "defaultContainer": "amnezia-awg",
        "dns1": "1.1.1.1",
        "dns2": "1.0.0.1",
        "hostName": "vpn.example.com",
    }


def encode_document(document: object) -> str:
    return encode_payload(json.dumps(document).encode("utf-8"))


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def subscription_link() -> str:
    return encode_link({"api_endpoint": "https://mock", "api_key": "K"})


@pytest.fixture
def server_config() -> str:
    return encode_document(build_server_document())


@pytest.fixture
def make_transport() -> Callable[..., httpx.MockTransport]:
    """Build a mock transport answering every request with a fixed response.

    Received requests are appended to ``transport.requests``.
    """

    def factory(status_code: int = 200, *, json_body=None, text: str | None = None):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if json_body is not None:
                return httpx.Response(status_code, json=json_body)
            return httpx.Response(status_code, text=text or "")

        transport = httpx.MockTransport(handler)
        transport.requests = requests
        return transport

    return factory


@pytest.fixture
def captured_logs(caplog):
    """caplog wired to the package logger, which does not propagate to root.

    Every component logger is lowered to DEBUG for the duration of the test.
    """
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.addHandler(caplog.handler)
    for logger in component_loggers():
        caplog.set_level(logging.DEBUG, logger=logger.name)
    try:
        yield caplog
    finally:
        package_logger.removeHandler(caplog.handler)
