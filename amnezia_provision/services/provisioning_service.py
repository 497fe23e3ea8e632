from functools import lru_cache
from urllib.parse import urlparse

from amnezia_provision.management.logger import configure_logger
from amnezia_provision.management.settings import Settings, get_settings
from amnezia_provision.services.management.config_assembler import ConfigAssembler
from amnezia_provision.services.management.key_generator import generate_key_pair
from amnezia_provision.services.management.link_codec import (
    decode_link,
    parse_endpoint_and_credential,
)
from amnezia_provision.services.management.provisioning_client import ProvisioningClient
from amnezia_provision.services.management.schemas import ProvisioningResult


logger = configure_logger("ProvisioningService", "yellow")


class ProvisioningService:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: ProvisioningClient | None = None,
        assembler: ConfigAssembler | None = None,
    ):
        self.settings = settings or get_settings()
        self.client = client or ProvisioningClient(self.settings)
        self.assembler = assembler or ConfigAssembler(self.settings)

    def provision(self, link: str) -> ProvisioningResult:
        """
        Turn a subscription link into a ready-to-use client configuration.

        Steps:
        1. Decode the link into api_endpoint + api_key
        2. Generate a fresh X25519 key pair
        3. Exchange the public key for a templated configuration
        4. Substitute the private key into the template

        Raises:
            ProvisioningError: The first failing stage's error, unchanged.
        """
        params = parse_endpoint_and_credential(decode_link(link, self.settings.link_prefix))
        host = urlparse(params.endpoint).netloc or params.endpoint
        logger.info(f"Subscription link decoded, provisioning host: {host}")

        key_pair = generate_key_pair()

        response = self.client.provision(params.endpoint, params.credential, key_pair.public_key)

        config = self.assembler.assemble(
            response.config,
            key_pair.private_key.get_secret_value(),
        )
        logger.info("Client configuration assembled")

        return ProvisioningResult(config=config, key_pair=key_pair)


@lru_cache
def get_provisioning_service() -> ProvisioningService:
    return ProvisioningService()
