"""
Import already-verified contracts from Etherscan into a build file.

For each address we read the ``getsourcecode`` API, scrape the verified
bytecode from the contract page, strip the constructor arguments off the
end and rebuild a standard metadata object around the source.

CLI:
    python -m etherscan_tools import 0xABC... 0xDEF... --network mainnet --out build/imported.json
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from web3 import Web3

from etherscan_tools.config.network import get_explorer_api_url
from etherscan_tools.errors import BytecodeMismatchError, EtherscanApiError, SourceNotVerifiedError
from etherscan_tools.helpers.api import EtherscanHttpClient
from etherscan_tools.helpers.build_file import BuildFile, write_build_file
from etherscan_tools.helpers.contract import Metadata, Source
from etherscan_tools.helpers.responses import EtherscanResponse, is_not_verified_abi
from etherscan_tools.helpers.scraper import EtherscanPageScraper

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EtherscanSource:
    source: str
    abi: list[Any]
    contract: str
    compiler: str
    optimized: bool
    optimization_runs: int
    # None when the API record does not carry the field at all
    constructor_args: str | None
    evm_version: str | None = None


def get_etherscan_api_data(
    network: str,
    address: str,
    api_key: str,
    client: EtherscanHttpClient | None = None,
) -> EtherscanSource:
    client = client or EtherscanHttpClient()
    url = get_explorer_api_url(network)
    response = EtherscanResponse.from_json(client.get(url, {
        "module": "contract",
        "action": "getsourcecode",
        "address": address,
        "apikey": api_key,
    }))

    if not response.ok:
        raise EtherscanApiError(response.message, response.result_text)
    if not isinstance(response.result, list) or not response.result or not isinstance(response.result[0], dict):
        raise EtherscanApiError("Unexpected getsourcecode result", response.result_text[:500])

    s = response.result[0]
    if is_not_verified_abi(s.get("ABI")):
        raise SourceNotVerifiedError(address)

    try:
        abi = json.loads(s.get("ABI") or "")
    except json.JSONDecodeError as e:
        raise EtherscanApiError("Could not decode ABI", str(e)) from e

    evm_version = (s.get("EVMVersion") or "").strip()
    return EtherscanSource(
        source=s.get("SourceCode") or "",
        abi=abi,
        contract=s.get("ContractName") or "",
        compiler=s.get("CompilerVersion") or "",
        optimized=str(s.get("OptimizationUsed", "0")) != "0",
        optimization_runs=int(s.get("Runs") or 0),
        constructor_args=s.get("ConstructorArguments") if "ConstructorArguments" in s else None,
        evm_version=evm_version if evm_version and evm_version.lower() != "default" else None,
    )


# =============================================================================
# SOURCES & METADATA
# =============================================================================

def keccak256_hex(content: str) -> str:
    return Web3.to_hex(Web3.keccak(text=content))


def _standard_json_input(source_code: str) -> dict[str, Any] | None:
    """Decode a standard-JSON ``SourceCode``, which may be wrapped in an extra pair of braces."""
    sc = source_code.strip()
    if sc.startswith("{{") and sc.endswith("}}"):
        sc = sc[1:-1].strip()
    if not sc.startswith("{"):
        return None
    try:
        data = json.loads(sc)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def decode_source_files(source_code: str, contract: str) -> dict[str, str]:
    """Expand Etherscan's SourceCode field into ``{path: content}``.

    Multi-file contracts come back as a standard-JSON input; single-file
    contracts are the raw source.
    """
    data = _standard_json_input(source_code)
    sources = data.get("sources") if data is not None else None
    if isinstance(sources, dict) and sources:
        out: dict[str, str] = {}
        for filename, entry in sources.items():
            if isinstance(entry, dict):
                out[str(filename)] = str(entry.get("content") or "")
            else:
                out[str(filename)] = str(entry or "")
        return out

    return {f"contracts/{contract}.sol": source_code}


def decode_source_settings(source_code: str) -> dict[str, Any]:
    """Compiler settings embedded in a standard-JSON ``SourceCode``, else ``{}``."""
    data = _standard_json_input(source_code)
    settings = data.get("settings") if data is not None else None
    return settings if isinstance(settings, dict) else {}


def find_target_file(sources: dict[str, str], contract: str) -> str:
    declaration = re.compile(
        rf"^\s*(?:abstract\s+)?(?:contract|library|interface)\s+{re.escape(contract)}\b", re.MULTILINE
    )
    for path, content in sources.items():
        if declaration.search(content):
            return path
    return next(iter(sources))


def build_import_metadata(api_data: EtherscanSource) -> tuple[str, Metadata]:
    """Return ``(target_file, metadata)`` for an imported contract."""
    files = decode_source_files(api_data.source, api_data.contract)
    target_file = find_target_file(files, api_data.contract)
    sources: dict[str, Source] = {
        path: {"content": content, "keccak256": keccak256_hex(content)}
        for path, content in files.items()
    }

    settings: dict[str, Any] = {
        "remappings": [],
        "optimizer": {
            "enabled": api_data.optimized,
            "runs": api_data.optimization_runs,
        },
        "metadata": {
            "useLiteralContent": False,
        },
        "compilationTarget": {
            target_file: api_data.contract,
        },
        "libraries": {},
    }
    # The getsourcecode record decides optimizer enabled/runs; everything else
    # the record cannot express comes from the submitted standard-JSON input.
    input_settings = decode_source_settings(api_data.source)
    if isinstance(input_settings.get("remappings"), list):
        settings["remappings"] = list(input_settings["remappings"])
    input_optimizer = input_settings.get("optimizer")
    if isinstance(input_optimizer, dict) and isinstance(input_optimizer.get("details"), dict):
        settings["optimizer"]["details"] = input_optimizer["details"]
    if "viaIR" in input_settings:
        settings["viaIR"] = bool(input_settings["viaIR"])

    evm_version = api_data.evm_version or input_settings.get("evmVersion")
    if evm_version:
        settings["evmVersion"] = evm_version

    metadata: Metadata = {
        "version": "1",
        "language": "Solidity",
        "compiler": {"version": api_data.compiler},
        "sources": sources,
        "settings": settings,
        "output": {
            "abi": api_data.abi,
            "userdoc": [],
            "devdoc": [],
        },
    }
    return target_file, metadata


# =============================================================================
# BYTECODE
# =============================================================================

def _strip_0x(value: str) -> str:
    return value[2:] if value[:2].lower() == "0x" else value


def strip_constructor_args(bytecode: str, constructor_args: str) -> str:
    """Creation bytecode: ``bytecode`` minus the trailing ABI-encoded constructor args."""
    bytecode = _strip_0x(bytecode)
    constructor_args = _strip_0x(constructor_args)
    if not bytecode.lower().endswith(constructor_args.lower()):
        raise BytecodeMismatchError(bytecode, constructor_args)
    return bytecode[:len(bytecode) - len(constructor_args)]


def get_contract_creation_code(
    scraper: EtherscanPageScraper,
    address: str,
    api_constructor_args: str | None = None,
    constructor_args: str | None = None,
) -> str:
    if constructor_args is None:
        constructor_args = api_constructor_args
    if constructor_args is None:
        constructor_args = scraper.fetch_constructor_args(address)

    bytecode = scraper.fetch_verified_bytecode(address)
    return strip_constructor_args(bytecode, constructor_args)


# =============================================================================
# IMPORT
# =============================================================================

def import_contracts(
    network: str,
    addresses: str | Iterable[str],
    api_key: str = "",
    constructor_args: str | None = None,
    client: EtherscanHttpClient | None = None,
    scraper: EtherscanPageScraper | None = None,
) -> BuildFile:
    """Fold each address into a new BuildFile, in order."""
    client = client or EtherscanHttpClient()
    scraper = scraper or EtherscanPageScraper(network, client)
    if isinstance(addresses, str):
        addresses = [addresses]

    build = BuildFile()
    for address in addresses:
        logger.info("Importing %s from %s", address, network)
        api_data = get_etherscan_api_data(network, address, api_key, client)
        creation_code = get_contract_creation_code(
            scraper, address, api_data.constructor_args, constructor_args
        )
        target_file, metadata = build_import_metadata(api_data)
        contract_source = f"{target_file}:{api_data.contract}"

        if build.version and api_data.compiler != build.version:
            logger.warning(
                "Contracts differ in compiler version %s vs %s. This makes the build file lightly invalid.",
                build.version, api_data.compiler,
            )

        build = build.with_contract(
            contract_source,
            {"abi": api_data.abi, "bin": creation_code, "metadata": metadata},
            api_data.compiler,
        )
        logger.debug("Imported %s as %s (%d bytes)", address, contract_source, len(creation_code) // 2)

    return build


def import_contract(
    network: str,
    addresses: str | Iterable[str],
    outfile: str | Path,
    api_key: str = "",
    constructor_args: str | None = None,
    client: EtherscanHttpClient | None = None,
) -> BuildFile:
    build = import_contracts(network, addresses, api_key, constructor_args, client)
    write_build_file(outfile, build)
    return build
