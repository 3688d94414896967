"""
Etherscan response envelope and classification of its free-text results.

Etherscan answers every endpoint with ``{status, message, result}`` and
overloads ``result``: a payload, a human message or a poll token depending
on the endpoint. The verify endpoints only tell us what happened through
English substrings, so all of that matching lives here. If Etherscan
rewords a message, this module is the one place to change.

Observed shapes:
    {"status": "0", "message": "NOTOK", "result": "Contract source code already verified"}
    {"status": "0", "message": "NOTOK", "result": "Unable to locate ContractCode at 0x..."}
    {"status": "1", "message": "OK", "result": "usjpiyvmxtgwyee59wnycyiet7m3dba4ccdi6acdp8eddlzdde"}
    {"status": "0", "message": "NOTOK", "result": "Pending in queue"}
    {"status": "0", "message": "NOTOK", "result": "Fail - Unable to verify"}
    {"status": "1", "message": "OK", "result": "Pass - Verified"}
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from etherscan_tools.errors import EtherscanApiError

ALREADY_VERIFIED_MARKER = "Contract source code already verified"
NOT_INDEXED_MARKER = "Unable to locate ContractCode at"
PENDING_RESULT = "Pending in queue"
FAIL_PREFIX = "Fail"
NOT_VERIFIED_ABI = "Contract source code not verified"


@dataclass(frozen=True)
class EtherscanResponse:
    status: str
    message: str
    result: Any

    @property
    def ok(self) -> bool:
        return self.status == "1"

    @property
    def result_text(self) -> str:
        return self.result if isinstance(self.result, str) else str(self.result)

    @classmethod
    def from_json(cls, data: Any) -> "EtherscanResponse":
        if not isinstance(data, dict) or "status" not in data or "result" not in data:
            raise EtherscanApiError("Unexpected response shape", repr(data)[:500])
        return cls(
            status=str(data.get("status")),
            message=str(data.get("message") or ""),
            result=data.get("result"),
        )


class SubmitKind(Enum):
    ACCEPTED = "accepted"
    ALREADY_VERIFIED = "already_verified"
    NOT_INDEXED = "not_indexed"
    ERROR = "error"


class StatusKind(Enum):
    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmitOutcome:
    kind: SubmitKind
    message: str
    result: str

    @property
    def guid(self) -> str:
        if self.kind is not SubmitKind.ACCEPTED:
            raise ValueError(f"No poll token on a {self.kind.value} outcome")
        return self.result


@dataclass(frozen=True)
class StatusOutcome:
    kind: StatusKind
    message: str
    result: str


def classify_submit_response(response: EtherscanResponse) -> SubmitOutcome:
    """Decode a ``verifysourcecode`` envelope."""
    text = response.result_text
    if response.ok and response.message == "OK":
        return SubmitOutcome(SubmitKind.ACCEPTED, response.message, text)
    if ALREADY_VERIFIED_MARKER in text:
        return SubmitOutcome(SubmitKind.ALREADY_VERIFIED, response.message, text)
    if NOT_INDEXED_MARKER in text:
        return SubmitOutcome(SubmitKind.NOT_INDEXED, response.message, text)
    return SubmitOutcome(SubmitKind.ERROR, response.message, text)


def classify_status_response(response: EtherscanResponse) -> StatusOutcome:
    """Decode a ``checkverifystatus`` envelope."""
    text = response.result_text
    if text == PENDING_RESULT:
        return StatusOutcome(StatusKind.PENDING, response.message, text)
    if text.startswith(FAIL_PREFIX):
        return StatusOutcome(StatusKind.FAILED, response.message, text)
    if not response.ok:
        return StatusOutcome(StatusKind.FAILED, response.message, text)
    return StatusOutcome(StatusKind.PASSED, response.message, text)


def is_not_verified_abi(abi_field: Any) -> bool:
    return abi_field == NOT_VERIFIED_ABI
