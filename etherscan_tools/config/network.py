"""
Network configuration for etherscan_tools.

Maps a logical network name to its Etherscan API endpoint and to the
human-facing explorer site.
"""

import os
from typing import Any

from etherscan_tools.errors import UnknownNetworkError


# =============================================================================
# NETWORK CONFIGURATIONS
# =============================================================================

NETWORKS: dict[str, dict[str, Any]] = {
    "mainnet": {
        "chain_id": 1,
        "name": "Ethereum Mainnet",
        "explorer": {
            "name": "Etherscan",
            "url": "https://etherscan.io",
            "api_url": "https://api.etherscan.io/api",
        },
    },
    "ropsten": {
        "chain_id": 3,
        "name": "Ropsten Testnet",
        "explorer": {
            "name": "Etherscan Ropsten",
            "url": "https://ropsten.etherscan.io",
            "api_url": "https://api-ropsten.etherscan.io/api",
        },
    },
    "rinkeby": {
        "chain_id": 4,
        "name": "Rinkeby Testnet",
        "explorer": {
            "name": "Etherscan Rinkeby",
            "url": "https://rinkeby.etherscan.io",
            "api_url": "https://api-rinkeby.etherscan.io/api",
        },
    },
    "goerli": {
        "chain_id": 5,
        "name": "Goerli Testnet",
        "explorer": {
            "name": "Etherscan Goerli",
            "url": "https://goerli.etherscan.io",
            "api_url": "https://api-goerli.etherscan.io/api",
        },
    },
    "kovan": {
        "chain_id": 42,
        "name": "Kovan Testnet",
        "explorer": {
            "name": "Etherscan Kovan",
            "url": "https://kovan.etherscan.io",
            "api_url": "https://api-kovan.etherscan.io/api",
        },
    },
    "sepolia": {
        "chain_id": 11155111,
        "name": "Sepolia Testnet",
        "explorer": {
            "name": "Etherscan Sepolia",
            "url": "https://sepolia.etherscan.io",
            "api_url": "https://api-sepolia.etherscan.io/api",
        },
    },
}

DEFAULT_NETWORK: str = "mainnet"


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_network_config(network: str | None = None) -> dict[str, Any]:
    """Get configuration for a network.

    Args:
        network: Network name (e.g., 'mainnet', 'goerli').
                 If None, uses ETHERSCAN_NETWORK or defaults to 'mainnet'.

    Raises:
        UnknownNetworkError: If the network is not supported.
    """
    if network is None:
        network = os.getenv("ETHERSCAN_NETWORK", DEFAULT_NETWORK)

    key = network.strip().lower()
    if key not in NETWORKS:
        raise UnknownNetworkError(
            f"Unknown etherscan host for network {network}. Supported: {list(NETWORKS.keys())}"
        )

    return NETWORKS[key]


def get_explorer_api_url(network: str | None = None) -> str:
    """Get the Etherscan API URL for a network."""
    return get_network_config(network)["explorer"]["api_url"]


def get_explorer_url(network: str | None = None) -> str:
    """Get the block explorer URL for a network."""
    return get_network_config(network)["explorer"]["url"]


def get_contract_url(network: str | None, address: str) -> str:
    return f"{get_explorer_url(network)}/address/{address}"


def get_contract_code_url(network: str | None, address: str) -> str:
    """Page that carries the verified bytecode and constructor arguments."""
    return f"{get_contract_url(network, address)}#code"
