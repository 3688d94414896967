"""
Build files: ``{"contracts": {"<path>:<Name>": {abi, bin, metadata}}, "version": ...}``.

A BuildFile value is never mutated; ``with_contract`` returns a new one.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from etherscan_tools.errors import BuildFileError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildFile:
    contracts: Mapping[str, dict[str, Any]] = field(default_factory=lambda: MappingProxyType({}))
    version: str | None = None

    def with_contract(self, name: str, record: dict[str, Any], version: str | None) -> "BuildFile":
        contracts = dict(self.contracts)
        contracts[name] = record
        return BuildFile(contracts=MappingProxyType(contracts), version=version)

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {"contracts": dict(self.contracts)}
        if self.version is not None:
            out["version"] = self.version
        return out

    @classmethod
    def from_json(cls, data: Any) -> "BuildFile":
        if not isinstance(data, dict) or not isinstance(data.get("contracts"), dict):
            raise BuildFileError("Build file must be an object with a 'contracts' mapping")
        version = data.get("version")
        return cls(
            contracts=MappingProxyType(dict(data["contracts"])),
            version=version if isinstance(version, str) else None,
        )


def load_build_file(path: str | Path) -> BuildFile:
    p = Path(path)
    try:
        with open(p, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise BuildFileError(f"Build file not found: {p}")
    except (OSError, json.JSONDecodeError) as e:
        raise BuildFileError(f"Could not read build file {p}: {e}") from e
    return BuildFile.from_json(data)


def get_contract_json(build: BuildFile, name: str) -> dict[str, Any]:
    """Find a contract record by full ``<path>:<Name>`` key or by bare ``Name``."""
    if name in build.contracts:
        return build.contracts[name]

    matches = [key for key in build.contracts if key.rsplit(":", 1)[-1] == name]
    if len(matches) == 1:
        logger.debug("Resolved contract %s to %s", name, matches[0])
        return build.contracts[matches[0]]
    if not matches:
        raise BuildFileError(
            f"Contract {name} not found in build file, available: {sorted(build.contracts.keys())}"
        )
    raise BuildFileError(f"Contract name {name} is ambiguous, candidates: {sorted(matches)}")


def write_build_file(path: str | Path, build: BuildFile) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(build.to_json(), indent=2) + "\n", encoding="utf-8")
    logger.info("Wrote %d contract(s) to %s", len(build.contracts), p)
    return p
