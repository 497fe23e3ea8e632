import json

from pydantic import ValidationError

from amnezia_provision.management.constants import PRIVATE_KEY_PLACEHOLDER
from amnezia_provision.management.logger import configure_logger
from amnezia_provision.management.settings import Settings, get_settings
from amnezia_provision.services.management.exceptions import (
    StructureError,
    missing_config_field,
    missing_template,
    no_containers,
)
from amnezia_provision.services.management.link_codec import decode_payload
from amnezia_provision.services.management.schemas import LastConfig, ServerConfigDocument


logger = configure_logger("ConfigAssembler", "green")


class ConfigAssembler:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    @property
    def tunnel_protocol(self) -> str:
        return self.settings.tunnel_protocol

    def assemble(self, response_config: str, private_key: str) -> str:
        payload = decode_payload(response_config)
        template = self.extract_template(payload)
        occurrences = template.count(PRIVATE_KEY_PLACEHOLDER)
        if not occurrences:
            logger.warning("Template has no private key placeholder, returning it unchanged")
        else:
            logger.debug(f"Substituting {occurrences} private key placeholder(s)")
        return substitute_private_key(template, private_key)

    def extract_template(self, payload: bytes) -> str:
        document = self._load_document(payload)

        container = document.first_container()
        if container is None:
            raise no_containers()

        last_config = self._find_last_config(container)
        if not last_config:
            raise missing_template(self.tunnel_protocol)

        try:
            return LastConfig.model_validate_json(last_config).config
        except ValidationError as exc:
            raise missing_config_field(exc.errors()[0]["msg"]) from exc

    def _load_document(self, payload: bytes) -> ServerConfigDocument:
        try:
            raw = json.loads(payload)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise StructureError(f"Server configuration is not valid JSON: {exc}") from exc
        if not isinstance(raw, dict):
            raise StructureError("Server configuration is not a JSON object")

        try:
            return ServerConfigDocument.model_validate(raw)
        except ValidationError as exc:
            raise no_containers() from exc

    def _find_last_config(self, container) -> str | None:
        if not isinstance(container, dict):
            return None
        protocol_config = container.get(self.tunnel_protocol)
        if not isinstance(protocol_config, dict):
            return None
        last_config = protocol_config.get("last_config")
        if not isinstance(last_config, str):
            return None
        return last_config


def substitute_private_key(template: str, private_key: str) -> str:
    return template.replace(PRIVATE_KEY_PLACEHOLDER, private_key)
