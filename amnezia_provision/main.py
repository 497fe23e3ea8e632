import argparse
import sys

from amnezia_provision.management.logger import configure_logger, set_log_level
from amnezia_provision.services.management.exceptions import ProvisioningError
from amnezia_provision.services.provisioning_service import get_provisioning_service


logger = configure_logger("MAIN", "cyan")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="amnezia-provision",
        description="Exchange a vpn:// subscription link for a WireGuard client configuration",
    )
    parser.add_argument("--key", required=True, help="The vpn:// subscription link to process")
    parser.add_argument(
        "--show-private-key",
        action="store_true",
        help="Also print the generated client private key",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if not args.key.strip():
        print("Error: The --key parameter is required.", file=sys.stderr)
        return 2

    if args.log_level:
        set_log_level(args.log_level)

    try:
        result = get_provisioning_service().provision(args.key)
    except ProvisioningError as exc:
        kind = getattr(exc, "kind", None)
        label = f"{type(exc).__name__}({kind.value})" if kind else type(exc).__name__
        logger.error(f"{label}: {exc}")
        return 1

    if args.show_private_key:
        print(f"Private key: {result.key_pair.private_key.get_secret_value()}\n")
    print(result.config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
