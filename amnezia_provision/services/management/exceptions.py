from enum import Enum


class ProvisioningError(Exception):
    """Base class for every failure of the provisioning pipeline."""


class DecodeError(ProvisioningError):
    pass


class EncodingError(DecodeError):
    pass


class TruncatedPayloadError(DecodeError):
    pass


class DecompressionError(DecodeError):
    pass


class StructureError(ProvisioningError):
    pass


class CryptoError(ProvisioningError):
    pass


class RequestErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    TRANSPORT = "transport"
    SERVER_REJECTED = "server_rejected"
    MALFORMED_RESPONSE = "malformed_response"


class RequestError(ProvisioningError):
    def __init__(
        self,
        kind: RequestErrorKind,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.body = body


class AssemblyErrorKind(str, Enum):
    NO_CONTAINERS = "no_containers"
    MISSING_TEMPLATE = "missing_template"
    MISSING_CONFIG_FIELD = "missing_config_field"


class AssemblyError(ProvisioningError):
    def __init__(self, kind: AssemblyErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


def invalid_input(reason: str) -> RequestError:
    return RequestError(RequestErrorKind.INVALID_INPUT, f"Invalid request input: {reason}")


def transport_failed(reason: str) -> RequestError:
    return RequestError(
        RequestErrorKind.TRANSPORT,
        f"Failed to send provisioning request: {reason}",
    )


def server_rejected(status_code: int, body: str) -> RequestError:
    return RequestError(
        RequestErrorKind.SERVER_REJECTED,
        f"Unexpected HTTP status code: {status_code}, response: {body}",
        status_code=status_code,
        body=body,
    )


def malformed_response(reason: str) -> RequestError:
    return RequestError(
        RequestErrorKind.MALFORMED_RESPONSE,
        f"Failed to parse provisioning response: {reason}",
    )


def no_containers() -> AssemblyError:
    return AssemblyError(
        AssemblyErrorKind.NO_CONTAINERS,
        "Server configuration has no containers",
    )


def missing_template(protocol: str) -> AssemblyError:
    return AssemblyError(
        AssemblyErrorKind.MISSING_TEMPLATE,
        f"First container has no '{protocol}.last_config' template",
    )


def missing_config_field(reason: str = "field is missing") -> AssemblyError:
    return AssemblyError(
        AssemblyErrorKind.MISSING_CONFIG_FIELD,
        f"Template has no usable 'config' field: {reason}",
    )
