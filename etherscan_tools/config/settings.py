"""Runtime settings read from the environment (and a .env file, if present)."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from etherscan_tools.config.network import DEFAULT_NETWORK


# Wall-clock budget for one submit + poll sequence
DEFAULT_VERIFY_TIMEOUT_MS: int = 180_000
# Fixed wait between "not indexed yet" / "pending" retries
DEFAULT_POLL_INTERVAL_MS: int = 5_000
DEFAULT_HTTP_TIMEOUT_S: float = 30.0


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = field(default=None, repr=False)
    network: str = DEFAULT_NETWORK
    verify_timeout_ms: int = DEFAULT_VERIFY_TIMEOUT_MS
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()

        return cls(
            api_key=os.getenv("ETHERSCAN_API_KEY") or None,
            network=os.getenv("ETHERSCAN_NETWORK", DEFAULT_NETWORK),
            verify_timeout_ms=_env_int("ETHERSCAN_VERIFY_TIMEOUT_MS", DEFAULT_VERIFY_TIMEOUT_MS),
            poll_interval_ms=_env_int("ETHERSCAN_POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS),
            http_timeout_s=_env_float("ETHERSCAN_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT_S),
        )
