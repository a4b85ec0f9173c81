"""Exceptions raised across the dispatch engine.

Per-pair end states are reported as ``PairOutcome`` values (see models.py);
these exceptions only cross the seams where something is actually raised.
"""


class BatchSendError(Exception):
    """Base class for batchsend errors."""


class ConfigError(BatchSendError):
    """Missing or malformed input (pairs file, wallet selector, bundled config). Fatal."""


class SignerConstructionError(BatchSendError):
    """Key material could not be turned into a signer. Terminal for the pair."""


class TransientSubmissionError(BatchSendError):
    """A single send attempt failed in a way that is worth retrying."""
