import base64
import binascii
import json
import re
import struct
import zlib
from typing import Any

from pydantic import ValidationError

from amnezia_provision.management.constants import (
    PAYLOAD_COMPRESSION_LEVEL,
    PAYLOAD_HEADER_SIZE,
    VPN_LINK_PREFIX,
)
from amnezia_provision.management.logger import configure_logger
from amnezia_provision.services.management.exceptions import (
    DecompressionError,
    EncodingError,
    StructureError,
    TruncatedPayloadError,
)
from amnezia_provision.services.management.schemas import ProvisioningParams


logger = configure_logger("LinkCodec", "blue")

_URLSAFE_BASE64 = re.compile(r"^[A-Za-z0-9_-]*={0,2}$")


def strip_link_prefix(link: str, prefix: str = VPN_LINK_PREFIX) -> str:
    link = link.strip()
    if link.startswith(prefix):
        return link[len(prefix):]
    return link


def decode_link(link: str, prefix: str = VPN_LINK_PREFIX) -> bytes:
    return decode_payload(strip_link_prefix(link, prefix))


def decode_payload(encoded: str) -> bytes:
    """
    Decode URL-safe base64 text framed as a 4-byte length header followed by
    a zlib stream, and return the decompressed bytes.

    Padding is optional. The header is only compared against the result,
    a mismatch is reported but does not fail the decode.
    """
    raw = _urlsafe_b64decode(encoded.strip())

    if len(raw) < PAYLOAD_HEADER_SIZE:
        raise TruncatedPayloadError(
            f"Payload is {len(raw)} byte(s) long, expected at least {PAYLOAD_HEADER_SIZE}"
        )

    (expected_len,) = struct.unpack(">I", raw[:PAYLOAD_HEADER_SIZE])
    try:
        decompressed = zlib.decompress(raw[PAYLOAD_HEADER_SIZE:])
    except zlib.error as exc:
        raise DecompressionError(f"Failed to decompress payload: {exc}") from exc

    if len(decompressed) != expected_len:
        logger.warning(
            f"Payload header announces {expected_len} bytes, got {len(decompressed)}"
        )

    logger.debug(f"Decoded payload: {len(raw)} encoded bytes -> {len(decompressed)} bytes")
    return decompressed


def encode_payload(data: bytes) -> str:
    header = struct.pack(">I", len(data))
    compressed = zlib.compress(data, level=PAYLOAD_COMPRESSION_LEVEL)
    return base64.urlsafe_b64encode(header + compressed).decode("ascii").rstrip("=")


def encode_link(document: dict[str, Any], prefix: str = VPN_LINK_PREFIX) -> str:
    json_bytes = json.dumps(document, indent=4).encode("utf-8")
    return f"{prefix}{encode_payload(json_bytes)}"


def parse_endpoint_and_credential(payload: bytes) -> ProvisioningParams:
    try:
        params = ProvisioningParams.model_validate_json(payload)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        reason = f"invalid field(s): {', '.join(fields)}" if fields else "not a JSON object"
        raise StructureError(f"Failed to parse link payload, {reason}") from exc

    logger.debug("Link payload contains api_endpoint and api_key")
    return params


def _urlsafe_b64decode(encoded: str) -> bytes:
    if not _URLSAFE_BASE64.match(encoded):
        raise EncodingError("Payload contains characters outside the URL-safe base64 alphabet")

    unpadded = encoded.rstrip("=")
    if len(unpadded) % 4 == 1:
        raise EncodingError(f"Invalid base64 length: {len(unpadded)}")
    if encoded != unpadded and len(encoded) % 4 != 0:
        raise EncodingError("Invalid base64 padding")

    padded = unpadded + "=" * (-len(unpadded) % 4)
    try:
        return base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as exc:
        raise EncodingError(f"Failed to decode base64 payload: {exc}") from exc
