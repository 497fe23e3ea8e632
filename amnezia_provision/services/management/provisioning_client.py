import uuid

import httpx
from pydantic import ValidationError

from amnezia_provision.management.constants import AUTHORIZATION_SCHEME
from amnezia_provision.management.logger import configure_logger
from amnezia_provision.management.settings import Settings, get_settings
from amnezia_provision.services.management.exceptions import (
    invalid_input,
    malformed_response,
    server_rejected,
    transport_failed,
)
from amnezia_provision.services.management.schemas import (
    ProvisioningRequest,
    ProvisioningResponse,
)


logger = configure_logger("ProvisioningClient", "cyan")


class ProvisioningClient:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    def build_request(self, public_key: str) -> ProvisioningRequest:
        return ProvisioningRequest(
            public_key=public_key,
            os_version=self.settings.os_version,
            app_version=self.settings.app_version,
            uuid=str(uuid.uuid4()),
        )

    def provision(self, endpoint: str, credential: str, public_key: str) -> ProvisioningResponse:
        """
        Send a single provisioning request and return the server response.

        Args:
            endpoint: API endpoint recovered from the subscription link
            credential: API key sent as ``Authorization: Api-Key <credential>``
            public_key: base64 X25519 public key of this client

        Raises:
            RequestError: kind INVALID_INPUT, TRANSPORT, SERVER_REJECTED
                or MALFORMED_RESPONSE. No retry is attempted.
        """
        if not endpoint:
            raise invalid_input("URL cannot be empty")
        if not credential:
            raise invalid_input("API key cannot be empty")

        self._validate_endpoint(endpoint)

        request = self.build_request(public_key)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"{AUTHORIZATION_SCHEME} {credential}",
        }

        logger.info(f"Requesting configuration from {endpoint} (request {request.uuid})")

        try:
            with self._create_client() as client:
                response = client.post(
                    endpoint,
                    content=request.model_dump_json(),
                    headers=headers,
                )
        except httpx.TimeoutException as exc:
            logger.error(f"Provisioning request timed out after {self.settings.request_timeout_seconds}s")
            raise transport_failed(f"request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.error(f"Provisioning request failed: {exc}")
            raise transport_failed(str(exc)) from exc

        if not response.is_success:
            logger.error(f"Provisioning server rejected the request with HTTP {response.status_code}")
            raise server_rejected(response.status_code, response.text)

        try:
            result = ProvisioningResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise malformed_response("expected a JSON object with a string 'config' field") from exc

        logger.info(f"Provisioning server answered HTTP {response.status_code}")
        return result

    def _create_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.settings.request_timeout_seconds),
            follow_redirects=True,
            transport=self._transport,
        )

    def _validate_endpoint(self, endpoint: str) -> None:
        try:
            url = httpx.URL(endpoint)
        except httpx.InvalidURL as exc:
            raise invalid_input(f"unusable endpoint '{endpoint}': {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise invalid_input(f"endpoint '{endpoint}' is not an absolute http(s) URL")
