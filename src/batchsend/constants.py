from typing import Final
from enum import StrEnum

# Single fixed endpoint, not configurable.
RPC_URL: Final = "https://testnet.saharalabs.ai"

# Placeholders written to the failure log when the sender address is not known.
FROM_UNRESOLVED: Final = "unresolved"
FROM_UNKNOWN: Final = "unknown"
FROM_PROCESSING_ERROR: Final = "processing error"

BLOCK_IDENTIFIER: Final = "latest"


class FailureKind(StrEnum):
    SIGNER_CONSTRUCTION  = "SIGNER_CONSTRUCTION"
    INVALID_DESTINATION  = "INVALID_DESTINATION"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    MAX_ATTEMPTS         = "MAX_ATTEMPTS"
    UNCLASSIFIED         = "UNCLASSIFIED"


class FailureReason(StrEnum):
    SIGNER_CONSTRUCTION  = "signer construction failed"
    INVALID_DESTINATION  = "invalid destination address"
    INSUFFICIENT_BALANCE = "insufficient balance"
    MAX_ATTEMPTS         = "max attempts exceeded"


class SubmitState(StrEnum):
    INIT            = "INIT"
    BUILD_SIGNER    = "BUILD_SIGNER"
    PREPARE_ATTEMPT = "PREPARE_ATTEMPT"
    BROADCAST       = "BROADCAST"
    CONFIRM         = "CONFIRM"
    SUCCESS         = "SUCCESS"
    FAILURE         = "FAILURE"


__all__ = [
    "BLOCK_IDENTIFIER",
    "FROM_PROCESSING_ERROR",
    "FROM_UNKNOWN",
    "FROM_UNRESOLVED",
    "RPC_URL",

    ######
    "FailureKind",
    "FailureReason",
    "SubmitState",
]
