"""
Etherscan contract tools: verify locally compiled contracts and import
verified contracts into build files.
"""

from etherscan_tools.commands.import_contract import import_contract, import_contracts
from etherscan_tools.commands.verify import (
    ContractVerifier,
    License,
    VerificationResult,
    verify_contract,
)
from etherscan_tools.helpers.contract import extract_metadata

__version__ = "0.1.0"

__all__ = [
    "ContractVerifier",
    "License",
    "VerificationResult",
    "extract_metadata",
    "import_contract",
    "import_contracts",
    "verify_contract",
]
