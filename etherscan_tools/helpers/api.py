"""Blocking JSON/text HTTP client for Etherscan endpoints, built on requests."""
import logging
from typing import Any

import requests

from etherscan_tools.config.settings import DEFAULT_HTTP_TIMEOUT_S
from etherscan_tools.errors import TransportError

USER_AGENT = "etherscan-tools/0.1"

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------

logger = logging.getLogger(__name__)


class EtherscanHttpClient:
    """Form-encoded GET/POST against Etherscan-style endpoints.

    Only transport problems are raised here (as ``TransportError``);
    application-level ``status=0`` envelopes are returned to the caller.
    """

    def __init__(self, timeout_s: float = DEFAULT_HTTP_TIMEOUT_S, session: requests.Session | None = None):
        self.timeout_s = timeout_s
        self.session = session or requests.Session()
        self.headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/json, text/html;q=0.9",
        }

    # ---------- core ----------

    def post(self, url: str, data: dict[str, Any]) -> Any:
        logger.debug("POST %s action=%s", url, data.get("action"))
        response = self._send("POST", url, data=data)
        return self._decode_json(url, response)

    def get(self, url: str, params: dict[str, Any] | None = None, parse_json: bool = True) -> Any:
        """GET ``url``; returns decoded JSON, or the raw body text when ``parse_json`` is False."""
        logger.debug("GET %s action=%s", url, (params or {}).get("action"))
        response = self._send("GET", url, params=params or {})
        if not parse_json:
            return response.text
        return self._decode_json(url, response)

    # ---------- helpers ----------

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            response = self.session.request(
                method,
                url,
                headers=self.headers,
                timeout=self.timeout_s,
                **kwargs,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        logger.debug("Status Code: %s", response.status_code)
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise TransportError(f"{method} {url} returned HTTP {response.status_code}") from e
        return response

    @staticmethod
    def _decode_json(url: str, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            # requests' JSONDecodeError subclasses ValueError
            raise TransportError(f"Failed to decode JSON from {url}: {e}") from e

    def close(self) -> None:
        self.session.close()
