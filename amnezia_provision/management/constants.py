VPN_LINK_PREFIX = "vpn://"

# qCompress framing: big-endian uncompressed length ahead of the zlib stream
PAYLOAD_HEADER_SIZE = 4
PAYLOAD_COMPRESSION_LEVEL = 8

X25519_KEY_SIZE = 32

AUTHORIZATION_SCHEME = "Api-Key"
PRIVATE_KEY_PLACEHOLDER = "$WIREGUARD_CLIENT_PRIVATE_KEY"

DEFAULT_OS_VERSION = "macOS"
DEFAULT_APP_VERSION = "4.8.2.3"
DEFAULT_TUNNEL_PROTOCOL = "awg"
