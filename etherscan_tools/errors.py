"""
Exception types raised by etherscan_tools.

Every fatal condition has its own class so callers (and the CLI) can tell
input problems, upstream API problems and verification failures apart.
Upstream message/result text is kept verbatim on the exception.
"""


class EtherscanToolsError(Exception):
    """Base exception for all etherscan_tools errors"""
    pass


# ---------- input shape ----------

class ContractMetadataError(EtherscanToolsError):
    """Base for problems with the metadata field of a contract record"""
    pass


class MissingMetadataError(ContractMetadataError):
    pass


class MetadataParseError(ContractMetadataError):
    """Metadata string could not be decoded as JSON"""

    def __init__(self, raw: str, cause: Exception):
        self.raw = raw
        self.cause = cause
        super().__init__(f"Error parsing contract metadata: {cause}")


class InvalidMetadataTypeError(ContractMetadataError):
    pass


class BuildFileError(EtherscanToolsError):
    pass


class UnknownNetworkError(EtherscanToolsError, ValueError):
    pass


# ---------- business rules ----------

class MultiTargetUnsupportedError(EtherscanToolsError):
    pass


class ScrapeError(EtherscanToolsError):
    pass


class BytecodeMismatchError(EtherscanToolsError):
    def __init__(self, bytecode: str, constructor_args: str):
        self.bytecode = bytecode
        self.constructor_args = constructor_args
        super().__init__(
            "Expected verified bytecode to end with constructor args, but did not: "
            f"constructor_args={constructor_args!r} bytecode_tail={bytecode[-len(constructor_args) - 8:]!r}"
        )


# ---------- remote ----------

class TransportError(EtherscanToolsError):
    """HTTP-level failure: connection, timeout, bad status or undecodable body"""
    pass


class EtherscanApiError(EtherscanToolsError):
    """Etherscan answered, but not with the envelope or status we need"""

    def __init__(self, message: str, result: str = ""):
        self.message = message
        self.result = result
        super().__init__(f"Etherscan Error: {message} {result}".rstrip())


class SourceNotVerifiedError(EtherscanApiError):
    def __init__(self, address: str):
        self.address = address
        super().__init__("Contract source code not verified", address)


class VerificationFailedError(EtherscanToolsError):
    def __init__(self, message: str, result: str):
        self.message = message
        self.result = result
        super().__init__(f"Etherscan failed to verify contract: {message} \"{result}\"")


class VerificationTimeoutError(VerificationFailedError):
    """The wall-clock budget ran out while Etherscan was still busy"""
    pass
