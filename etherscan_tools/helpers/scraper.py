"""
Scrape the verified bytecode and constructor arguments from an Etherscan
contract page.

The regexes below are coupled to Etherscan's page layout. When they stop
matching we raise ``ScrapeError`` rather than guess.
"""
from __future__ import annotations

import logging
import re

from etherscan_tools.config.network import get_contract_code_url
from etherscan_tools.errors import ScrapeError
from etherscan_tools.helpers.api import EtherscanHttpClient

logger = logging.getLogger(__name__)

VERIFIED_BYTECODE_REGEX = re.compile(r"<div id='verifiedbytecode2'>\s*([0-9a-fA-F]*)\s*</div>")
ENCODED_ARGS_REGEX = re.compile(
    r"-{3,}\s*Encoded View\s*-{3,}\s*(?:<br\s*/?>\s*)*(?:0x)?([0-9a-fA-F]+)"
)


def find_verified_bytecode(html: str) -> str | None:
    match = VERIFIED_BYTECODE_REGEX.search(html)
    return match.group(1) if match else None


def find_constructor_args(html: str) -> str | None:
    match = ENCODED_ARGS_REGEX.search(html)
    return match.group(1) if match else None


class EtherscanPageScraper:
    """Reads an address's ``#code`` page; each page is fetched once per instance."""

    def __init__(self, network: str, client: EtherscanHttpClient):
        self.network = network
        self.client = client
        self._pages: dict[str, str] = {}

    def _page(self, address: str) -> str:
        key = address.lower()
        if key not in self._pages:
            url = get_contract_code_url(self.network, address)
            logger.debug("Fetching contract page %s", url)
            self._pages[key] = self.client.get(url, parse_json=False)
        return self._pages[key]

    def fetch_verified_bytecode(self, address: str) -> str:
        bytecode = find_verified_bytecode(self._page(address))
        if bytecode is None:
            raise ScrapeError(f"Failed to pull deployed contract code from Etherscan for {address}")
        return bytecode

    def fetch_constructor_args(self, address: str) -> str:
        args = find_constructor_args(self._page(address))
        if args is None:
            raise ScrapeError(f"Failed to pull constructor arguments from Etherscan for {address}")
        return args
