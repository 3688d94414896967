"""
Solidity metadata shapes and extraction from build-file contract records.

Public API
----------
extract_metadata(contract_json)
    Return the compiler metadata embedded in a contract record. The record's
    ``metadata`` field may be a JSON string or an already decoded dict.
"""
from __future__ import annotations

import json
import logging
from typing import Any, TypedDict

from etherscan_tools.errors import (
    InvalidMetadataTypeError,
    MetadataParseError,
    MissingMetadataError,
)

__all__ = [
    "Optimizer",
    "CompilerSettings",
    "Source",
    "Output",
    "Metadata",
    "ContractJson",
    "extract_metadata",
]

logger = logging.getLogger(__name__)


class Optimizer(TypedDict, total=False):
    enabled: bool
    runs: int
    # peephole, jumpdestRemover, orderLiterals, deduplicate, cse,
    # constantOptimizer, yul, yulDetails
    details: dict[str, Any]


class CompilerSettings(TypedDict, total=False):
    remappings: list[str]
    optimizer: Optimizer
    # {"useLiteralContent": bool, "bytecodeHash": "ipfs" | "bzzr1" | "none"}
    metadata: dict[str, Any]
    # exactly one {file: contract name} entry
    compilationTarget: dict[str, str]
    libraries: dict[str, str]
    evmVersion: str


class Source(TypedDict, total=False):
    keccak256: str
    content: str
    urls: list[str]


class Output(TypedDict):
    abi: list[Any]
    userdoc: Any
    devdoc: Any


class Metadata(TypedDict, total=False):
    version: str
    language: str
    # {"version": "0.8.4+commit.c7e474f2", "keccak256": optional}
    compiler: dict[str, str]
    settings: CompilerSettings
    sources: dict[str, Source]
    output: Output


class ContractJson(TypedDict, total=False):
    abi: list[Any]
    bin: str
    metadata: str | Metadata


def extract_metadata(contract_json: dict[str, Any]) -> Metadata:
    if "metadata" not in contract_json:
        raise MissingMetadataError(
            f"Verification requires contract JSON with metadata, keys: {json.dumps(list(contract_json.keys()))}"
        )

    metadata = contract_json["metadata"]

    if isinstance(metadata, str):
        try:
            decoded = json.loads(metadata)
        except json.JSONDecodeError as e:
            logger.error("Error parsing contract metadata: %s", e)
            logger.debug("Metadata Contents\n-----------------\n%s\n-----------------", metadata)
            raise MetadataParseError(metadata, e) from e
        if not isinstance(decoded, dict):
            raise InvalidMetadataTypeError(
                f"Invalid metadata, JSON-string must decode to an object, got {type(decoded).__name__}"
            )
        return decoded
    if isinstance(metadata, dict):
        return metadata

    raise InvalidMetadataTypeError(
        f"Invalid metadata, expected JSON-string or object, got {json.dumps(metadata, default=repr)}"
    )
