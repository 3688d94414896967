"""
Submit a compiled contract's standard-JSON input to Etherscan and poll the
verification job until it passes or fails.

Flow
----
    SUBMITTING --already verified--> ALREADY_VERIFIED
    SUBMITTING --not indexed yet---> AWAITING_INDEXING --wait--> SUBMITTING
    SUBMITTING --guid--------------> POLLING --pending, wait--> POLLING
    POLLING    --pass--------------> VERIFIED
    any other answer, or the deadline running out -> FAILED (raises)

One ``Deadline`` covers the whole sequence; retries in both phases draw on
the same budget.
"""
from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Callable, NoReturn

from etherscan_tools.config.network import get_contract_url, get_explorer_api_url
from etherscan_tools.config.settings import DEFAULT_POLL_INTERVAL_MS, DEFAULT_VERIFY_TIMEOUT_MS
from etherscan_tools.errors import (
    ContractMetadataError,
    MultiTargetUnsupportedError,
    VerificationFailedError,
    VerificationTimeoutError,
)
from etherscan_tools.helpers.api import EtherscanHttpClient
from etherscan_tools.helpers.contract import extract_metadata
from etherscan_tools.helpers.responses import (
    EtherscanResponse,
    StatusKind,
    SubmitKind,
    classify_status_response,
    classify_submit_response,
)

logger = logging.getLogger(__name__)

CODE_FORMAT = "solidity-standard-json-input"
_COMMIT_SUFFIX_RE = re.compile(r"\+commit\.([0-9a-fA-F]+)\..*", re.IGNORECASE)


class License(IntEnum):
    """Etherscan license codes, from https://etherscan.io/contract-license-types"""
    NO_LICENSE = 1
    THE_UNLICENSE = 2
    MIT = 3
    GPLv2 = 4
    GPLv3 = 5
    LGPLv2_1 = 6
    LGPLv3 = 7
    BSD2 = 8
    BSD3 = 9
    MPL2 = 10
    OSL3 = 11
    APACHE2 = 12


class VerifyState(Enum):
    SUBMITTING = "submitting"
    ALREADY_VERIFIED = "already_verified"
    AWAITING_INDEXING = "awaiting_indexing"
    POLLING = "polling"
    VERIFIED = "verified"
    FAILED = "failed"


@dataclass(frozen=True)
class VerificationResult:
    verified: bool
    url: str
    already_verified: bool

    def to_json(self) -> dict[str, Any]:
        return {"verified": self.verified, "url": self.url, "alreadyVerified": self.already_verified}


@dataclass(frozen=True)
class VerificationRequest:
    api_key: str
    address: str
    source_code: str
    contract_name: str
    compiler_version: str
    constructor_args: str
    license_type: License = License.NO_LICENSE

    def as_form(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "module": "contract",
            "action": "verifysourcecode",
            "codeformat": CODE_FORMAT,
            "contractaddress": self.address,
            "sourceCode": self.source_code,
            "contractname": self.contract_name,
            "compilerversion": f"v{self.compiler_version}",
            # Etherscan's spelling
            "constructorArguements": self.constructor_args,
            "licenseType": str(int(self.license_type)),
        }


class Deadline:
    """Absolute expiry instant on a monotonic clock."""

    def __init__(self, budget_ms: int, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.expires_at = clock() + budget_ms / 1000.0

    def remaining_ms(self) -> float:
        return max(0.0, (self.expires_at - self._clock()) * 1000.0)

    def expired(self) -> bool:
        return self.remaining_ms() <= 0


# =============================================================================
# REQUEST CONSTRUCTION
# =============================================================================

def normalize_compiler_version(version: str) -> str:
    """``0.8.4+commit.c7e474f2.Linux.gcc`` -> ``0.8.4+commit.c7e474f2``

    A leading ``v`` (as Etherscan reports versions) is dropped too, since the
    request adds its own.
    """
    version = version.strip()
    if version[:1] in ("v", "V"):
        version = version[1:]
    return _COMMIT_SUFFIX_RE.sub(r"+commit.\1", version)


def split_compilation_target(settings: dict[str, Any]) -> tuple[tuple[str, str], dict[str, Any]]:
    """Return ``((file, contract), settings_without_target)``."""
    rest = {k: v for k, v in settings.items() if k != "compilationTarget"}
    target = settings.get("compilationTarget")
    entries = list(target.items()) if isinstance(target, dict) else []
    if len(entries) != 1:
        raise MultiTargetUnsupportedError(
            f"Expected exactly one compilation target, got {len(entries)}: {json.dumps(target)}"
        )
    return entries[0], rest


def _strip_hex_prefix(value: str) -> str:
    return value[2:] if value[:2].lower() == "0x" else value


def build_verification_request(
    contract_json: dict[str, Any],
    api_key: str,
    address: str,
    constructor_args: str = "",
    license_type: License = License.NO_LICENSE,
) -> VerificationRequest:
    metadata = extract_metadata(contract_json)
    compiler = metadata.get("compiler") or {}
    if not isinstance(compiler, dict):
        raise ContractMetadataError(f"Metadata compiler must be an object, got {type(compiler).__name__}")
    version = compiler.get("version")
    if not isinstance(version, str) or not version:
        raise ContractMetadataError("Metadata has no compiler.version")
    compiler_version = normalize_compiler_version(version)
    compiler_settings = metadata.get("settings") or {}
    if not isinstance(compiler_settings, dict):
        raise ContractMetadataError(
            f"Metadata settings must be an object, got {type(compiler_settings).__name__}"
        )
    (target_file, target_name), settings = split_compilation_target(compiler_settings)

    source_code = json.dumps({
        "language": metadata.get("language"),
        "settings": settings,
        "sources": metadata.get("sources"),
    })

    return VerificationRequest(
        api_key=api_key,
        address=address,
        source_code=source_code,
        contract_name=f"{target_file}:{target_name}",
        compiler_version=compiler_version,
        constructor_args=_strip_hex_prefix(constructor_args or ""),
        license_type=license_type,
    )


# =============================================================================
# SUBMISSION & POLLING
# =============================================================================

class ContractVerifier:
    """Drives one address through Etherscan's asynchronous verification."""

    def __init__(
        self,
        network: str,
        api_key: str,
        client: EtherscanHttpClient | None = None,
        timeout_ms: int = DEFAULT_VERIFY_TIMEOUT_MS,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.network = network
        self.api_key = api_key
        self.api_url = get_explorer_api_url(network)
        self.client = client or EtherscanHttpClient()
        self.timeout_ms = timeout_ms
        self.poll_interval_ms = poll_interval_ms
        self._sleep = sleep
        self._clock = clock
        self.state = VerifyState.SUBMITTING

    def verify(
        self,
        contract_json: dict[str, Any],
        address: str,
        constructor_args: str = "",
        license_type: License = License.NO_LICENSE,
    ) -> VerificationResult:
        request = build_verification_request(
            contract_json, self.api_key, address, constructor_args, license_type
        )
        logger.info(
            "Verifying contract %s at %s with compiler version %s...",
            request.contract_name, address, request.compiler_version,
        )

        deadline = Deadline(self.timeout_ms, self._clock)
        self.state = VerifyState.SUBMITTING
        guid = self._submit(request, deadline)
        if guid is not None:
            self._poll(guid, deadline)

        return VerificationResult(
            verified=True,
            url=get_contract_url(self.network, address),
            already_verified=self.state is VerifyState.ALREADY_VERIFIED,
        )

    def _wait(self, deadline: Deadline) -> None:
        logger.debug("Waiting %sms (%.0fms left)", self.poll_interval_ms, deadline.remaining_ms())
        self._sleep(self.poll_interval_ms / 1000.0)

    def _fail(self, message: str, result: str, timed_out: bool = False) -> NoReturn:
        self.state = VerifyState.FAILED
        logger.error("Verification failed: %s %s", message, result)
        if timed_out:
            raise VerificationTimeoutError(message, result)
        raise VerificationFailedError(message, result)

    def _submit(self, request: VerificationRequest, deadline: Deadline) -> str | None:
        """Returns the poll guid, or None when the contract was already verified."""
        form = request.as_form()
        while True:
            response = EtherscanResponse.from_json(self.client.post(self.api_url, form))
            logger.debug("Submit response: %s", response)
            outcome = classify_submit_response(response)

            if outcome.kind is SubmitKind.ALREADY_VERIFIED:
                self.state = VerifyState.ALREADY_VERIFIED
                logger.info("Contract source code already verified")
                return None
            if outcome.kind is SubmitKind.ACCEPTED:
                self.state = VerifyState.POLLING
                logger.info("Verification submitted, guid %s", outcome.guid)
                return outcome.guid
            if outcome.kind is SubmitKind.NOT_INDEXED:
                self.state = VerifyState.AWAITING_INDEXING
                if deadline.expired():
                    self._fail(outcome.message, outcome.result, timed_out=True)
                logger.info("Contract not indexed by Etherscan yet, retrying...")
                self._wait(deadline)
                self.state = VerifyState.SUBMITTING
                continue

            self._fail(outcome.message, outcome.result)

    def _poll(self, guid: str, deadline: Deadline) -> None:
        params = {
            "apikey": self.api_key,
            "guid": guid,
            "module": "contract",
            "action": "checkverifystatus",
        }
        while True:
            logger.debug("Checking status of %s...", guid)
            response = EtherscanResponse.from_json(self.client.get(self.api_url, params))
            logger.debug("Status response: %s", response)
            outcome = classify_status_response(response)

            if outcome.kind is StatusKind.PASSED:
                self.state = VerifyState.VERIFIED
                logger.info("Verification result %s", outcome.result)
                return
            if outcome.kind is StatusKind.PENDING:
                if deadline.expired():
                    self._fail(outcome.message, outcome.result, timed_out=True)
                self._wait(deadline)
                continue

            self._fail(outcome.message, outcome.result)


def verify_contract(
    contract_json: dict[str, Any],
    network: str,
    api_key: str,
    address: str,
    constructor_args: str = "",
    license_type: License = License.NO_LICENSE,
    client: EtherscanHttpClient | None = None,
    timeout_ms: int = DEFAULT_VERIFY_TIMEOUT_MS,
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
) -> VerificationResult:
    verifier = ContractVerifier(
        network,
        api_key,
        client=client,
        timeout_ms=timeout_ms,
        poll_interval_ms=poll_interval_ms,
    )
    return verifier.verify(contract_json, address, constructor_args, license_type)
