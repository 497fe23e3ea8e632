import base64
import binascii
import secrets

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from amnezia_provision.management.constants import X25519_KEY_SIZE
from amnezia_provision.management.logger import configure_logger
from amnezia_provision.services.management.exceptions import CryptoError
from amnezia_provision.services.management.schemas import KeyPair


logger = configure_logger("KeyGenerator", "magenta")


def clamp_private_key(seed: bytes) -> bytes:
    if len(seed) != X25519_KEY_SIZE:
        raise CryptoError(f"X25519 scalar must be {X25519_KEY_SIZE} bytes, got {len(seed)}")

    scalar = bytearray(seed)
    scalar[0] &= 248
    scalar[31] &= 127
    scalar[31] |= 64
    return bytes(scalar)


def public_key_from_private_bytes(private_key: bytes) -> bytes:
    try:
        key = X25519PrivateKey.from_private_bytes(private_key)
    except (UnsupportedAlgorithm, ValueError) as exc:
        raise CryptoError(f"Failed to compute public key: {exc}") from exc
    return key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)


def derive_public_key(private_key: str) -> str:
    try:
        private_bytes = base64.b64decode(private_key, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CryptoError("Private key is not valid base64") from exc
    if len(private_bytes) != X25519_KEY_SIZE:
        raise CryptoError(f"Private key must be {X25519_KEY_SIZE} bytes, got {len(private_bytes)}")
    return _b64(public_key_from_private_bytes(private_bytes))


def generate_key_pair() -> KeyPair:
    try:
        seed = secrets.token_bytes(X25519_KEY_SIZE)
    except (OSError, NotImplementedError) as exc:
        raise CryptoError(f"Failed to generate private key: {exc}") from exc

    private_bytes = clamp_private_key(seed)
    public_bytes = public_key_from_private_bytes(private_bytes)

    key_pair = KeyPair(public_key=_b64(public_bytes), private_key=_b64(private_bytes))
    logger.debug(f"Generated X25519 key pair, public key {key_pair.public_key[:16]}...")
    return key_pair


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")
