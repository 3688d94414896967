"""
Configuration package for etherscan_tools.
"""

from etherscan_tools.config.network import (
    NETWORKS,
    DEFAULT_NETWORK,
    get_network_config,
    get_explorer_api_url,
    get_explorer_url,
    get_contract_url,
    get_contract_code_url,
)

from etherscan_tools.config.settings import (
    DEFAULT_VERIFY_TIMEOUT_MS,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_HTTP_TIMEOUT_S,
    Settings,
)

from etherscan_tools.config.logging_config import (
    setup_logger,
    get_cli_logger,
)

__all__ = [
    # Network
    'NETWORKS',
    'DEFAULT_NETWORK',
    'get_network_config',
    'get_explorer_api_url',
    'get_explorer_url',
    'get_contract_url',
    'get_contract_code_url',

    # Settings
    'DEFAULT_VERIFY_TIMEOUT_MS',
    'DEFAULT_POLL_INTERVAL_MS',
    'DEFAULT_HTTP_TIMEOUT_S',
    'Settings',

    # Logging
    'setup_logger',
    'get_cli_logger',
]
