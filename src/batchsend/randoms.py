"""Bounded-uniform randomness for amounts, delays, and submission order.

Everything here draws from an injected ``RandomSource`` so a run can be made
deterministic. ``random.Random`` satisfies the protocol.
"""

import math
import random
from collections.abc import MutableSequence
from typing import Protocol, TypeVar

from web3 import Web3

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float: ...


def default_source() -> RandomSource:
    # Unseeded on purpose, production runs are not reproducible.
    return random.Random()


def uniform_int(rng: RandomSource, lo: int, hi: int) -> int:
    """Integer in [lo, hi] inclusive."""
    return math.floor(rng.random() * (hi - lo + 1)) + lo


def fisher_yates(items: MutableSequence[T], rng: RandomSource) -> MutableSequence[T]:
    """Shuffle ``items`` in place and return it."""
    for i in range(len(items) - 1, 0, -1):
        j = math.floor(rng.random() * (i + 1))
        items[i], items[j] = items[j], items[i]
    return items


class AmountPicker:
    """Transfer amounts in wei, drawn as a whole number of gwei in [lo_gwei, hi_gwei]."""

    def __init__(self, rng: RandomSource, lo_gwei: int = 10, hi_gwei: int = 10000):
        self.rng = rng
        self.lo_gwei = lo_gwei
        self.hi_gwei = hi_gwei

    def pick(self) -> int:
        return Web3.to_wei(uniform_int(self.rng, self.lo_gwei, self.hi_gwei), "gwei")


class DelayPicker:
    """Pause between pairs in milliseconds, whole seconds in [lo, hi]."""

    def __init__(self, rng: RandomSource, lo: int = 60, hi: int = 360):
        self.rng = rng
        self.lo = lo
        self.hi = hi

    def pick_ms(self) -> int:
        return math.floor(self.rng.random() * (self.hi - self.lo + 1) + self.lo) * 1000
