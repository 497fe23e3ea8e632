import base64
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, StrictStr


class ProvisioningParams(BaseModel):
    """Fields carried by a decoded subscription link."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    endpoint: StrictStr = Field(..., alias="api_endpoint", min_length=1)
    credential: StrictStr = Field(..., alias="api_key", min_length=1)


class KeyPair(BaseModel):
    """X25519 key pair, both halves as standard base64 with padding."""

    model_config = ConfigDict(frozen=True)

    public_key: str
    private_key: SecretStr

    @property
    def public_key_bytes(self) -> bytes:
        return base64.b64decode(self.public_key)


class ProvisioningRequest(BaseModel):
    public_key: str
    os_version: str
    app_version: str
    uuid: str


class ProvisioningResponse(BaseModel):
    config: StrictStr


class ServerConfigDocument(BaseModel):
    """Loose view of the server document, only the container list is typed."""

    model_config = ConfigDict(extra="allow")

    containers: list[Any] | None = None

    def first_container(self) -> Any:
        if not self.containers:
            return None
        return self.containers[0]


class LastConfig(BaseModel):
    config: StrictStr


class ProvisioningResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    config: str
    key_pair: KeyPair
