"""Command-line entry point for verifying and importing contracts on Etherscan.

Examples:
    etherscan-tools verify --network goerli --build-file out/contracts.json \\
        --contract contracts/Counter.sol:Counter --address 0xABC... --constructor-args 0x...

    etherscan-tools import 0xABC... 0xDEF... --network mainnet --out build/imported.json

    etherscan-tools networks
"""

import argparse
import json
import logging
import sys

from web3 import Web3

from etherscan_tools.commands.import_contract import import_contract
from etherscan_tools.commands.verify import License, verify_contract
from etherscan_tools.config.logging_config import get_cli_logger
from etherscan_tools.config.network import NETWORKS
from etherscan_tools.config.settings import Settings
from etherscan_tools.errors import EtherscanToolsError
from etherscan_tools.helpers.api import EtherscanHttpClient
from etherscan_tools.helpers.build_file import get_contract_json, load_build_file

logger = logging.getLogger(__name__)


def _address(value: str) -> str:
    if not Web3.is_address(value):
        raise argparse.ArgumentTypeError(f"Invalid address: {value}")
    return value


def _license(value: str) -> License:
    try:
        return License[value.upper()]
    except KeyError:
        raise argparse.ArgumentTypeError(
            f"Unknown license {value}. Choose from: {', '.join(l.name for l in License)}"
        )


def _api_key(args, settings: Settings) -> str:
    api_key = args.api_key or settings.api_key
    if not api_key:
        raise EtherscanToolsError("Missing API key: set ETHERSCAN_API_KEY or pass --api-key")
    return api_key


def run_verify(args, settings: Settings) -> int:
    build = load_build_file(args.build_file)
    contract_json = get_contract_json(build, args.contract)
    client = EtherscanHttpClient(timeout_s=settings.http_timeout_s)

    result = verify_contract(
        contract_json,
        args.network if args.network is not None else settings.network,
        _api_key(args, settings),
        args.address,
        constructor_args=args.constructor_args or "",
        license_type=args.license,
        client=client,
        timeout_ms=args.timeout_ms if args.timeout_ms is not None else settings.verify_timeout_ms,
        poll_interval_ms=settings.poll_interval_ms,
    )

    if result.already_verified:
        logger.info("Contract at %s was already verified: %s", args.address, result.url)
    else:
        logger.info("Contract at %s verified: %s", args.address, result.url)
    print(json.dumps(result.to_json(), indent=2))
    return 0


def run_import(args, settings: Settings) -> int:
    if args.constructor_args is not None and len(args.addresses) > 1:
        raise EtherscanToolsError("--constructor-args can only be used with a single address")

    client = EtherscanHttpClient(timeout_s=settings.http_timeout_s)
    build = import_contract(
        args.network if args.network is not None else settings.network,
        args.addresses,
        args.out,
        api_key=args.api_key or settings.api_key or "",
        constructor_args=args.constructor_args,
        client=client,
    )
    print(f"Imported {len(build.contracts)} contract(s) into {args.out}")
    return 0


def run_networks(args, settings: Settings) -> int:
    for name, config in NETWORKS.items():
        marker = "*" if name == settings.network else " "
        print(f"{marker} {name:10} {config['explorer']['url']:36} {config['explorer']['api_url']}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="etherscan-tools",
        description="Verify contracts on Etherscan and import verified contracts into build files.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", help="Also write logs to this file inside ETHERSCAN_TOOLS_LOG_DIR")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--network", help="Network name (default: ETHERSCAN_NETWORK or mainnet)")
    common.add_argument("--api-key", help="Etherscan API key (default: ETHERSCAN_API_KEY)")

    verify_parser = subparsers.add_parser("verify", parents=[common], help="Verify a deployed contract")
    verify_parser.add_argument("--build-file", required=True, help="Build file holding the contract metadata")
    verify_parser.add_argument("--contract", required=True, help="Contract key, e.g. contracts/Foo.sol:Foo or Foo")
    verify_parser.add_argument("--address", required=True, type=_address, help="Deployed contract address")
    verify_parser.add_argument("--constructor-args", default="", help="ABI-encoded constructor arguments (hex)")
    verify_parser.add_argument("--license", type=_license, default=License.NO_LICENSE, help="License name, e.g. MIT")
    verify_parser.add_argument("--timeout-ms", type=int, help="Wall-clock budget for submit + polling")
    verify_parser.set_defaults(func=run_verify)

    import_parser = subparsers.add_parser("import", parents=[common], help="Import verified contracts")
    import_parser.add_argument("addresses", nargs="+", type=_address, help="Contract addresses")
    import_parser.add_argument("--out", required=True, help="Build file to write")
    import_parser.add_argument("--constructor-args", help="ABI-encoded constructor arguments (single address only)")
    import_parser.set_defaults(func=run_import)

    networks_parser = subparsers.add_parser("networks", help="List known networks")
    networks_parser.set_defaults(func=run_networks)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    get_cli_logger(verbose=args.verbose, log_file=args.log_file)
    try:
        settings = Settings.from_env()
    except ValueError as e:
        parser.error(str(e))

    try:
        return args.func(args, settings)
    except EtherscanToolsError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
