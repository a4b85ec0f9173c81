"""Randomized, throttled batch value transfers against a single EVM endpoint."""

__version__ = "0.1.0"
