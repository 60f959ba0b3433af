"""Seeded Mulberry32 uniform stream used by the Monte Carlo engine.

The generator keeps an explicit 32-bit integer state. Every draw adds a fixed
odd increment to the state and mixes the result through two xor-shift/multiply
rounds, so the i-th draw depends only on ``seed + i * INCREMENT``. That makes
the stream reproducible across implementations and lets :func:`uniform_block`
produce a whole block of draws with vectorised ``uint32`` arithmetic.
"""

from __future__ import annotations

from typing import Iterator, List, Tuple

import numpy as np

MASK_32 = 0xFFFFFFFF
INCREMENT = 0x6D2B79F5
SCALE = 4294967296.0  # 2**32


def seed_state(seed: int) -> int:
    """Reduce an arbitrary integer seed to the 32-bit generator state."""
    return int(seed) & MASK_32


def next_uniform(state: int) -> Tuple[float, int]:
    """Return ``(value, new_state)`` for one draw in ``[0, 1)``.

    Pure function: the caller owns the state and threads it through
    successive calls.
    """
    new_state = (seed_state(state) + INCREMENT) & MASK_32
    t = new_state
    t = ((t ^ (t >> 15)) * (t | 1)) & MASK_32
    t ^= (t + ((t ^ (t >> 7)) * (t | 61))) & MASK_32
    t = (t ^ (t >> 14)) & MASK_32
    return t / SCALE, new_state


def uniform_block(state: int, count: int) -> Tuple[np.ndarray, int]:
    """Return ``count`` consecutive draws starting after ``state``.

    Equivalent to calling :func:`next_uniform` ``count`` times; returns the
    draws as a float64 array together with the final state.
    """
    if count < 0:
        raise ValueError("count must be non-negative")
    start = seed_state(state)
    steps = np.arange(1, count + 1, dtype=np.uint64)
    states = ((steps * np.uint64(INCREMENT) + np.uint64(start)) & np.uint64(MASK_32)).astype(np.uint32)

    t = states
    t = (t ^ (t >> np.uint32(15))) * (t | np.uint32(1))
    t = t ^ (t + (t ^ (t >> np.uint32(7))) * (t | np.uint32(61)))
    t = t ^ (t >> np.uint32(14))

    values = t.astype(np.float64) / SCALE
    final_state = (start + count * INCREMENT) & MASK_32
    return values, final_state


class Mulberry32:
    """Stateful convenience wrapper around :func:`next_uniform`.

    Each instance owns its own state; two instances built from the same seed
    yield identical sequences.
    """

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)
        self.state = seed_state(seed)

    def random(self) -> float:
        value, self.state = next_uniform(self.state)
        return value

    def take(self, count: int) -> np.ndarray:
        """Draw ``count`` values at once and advance the state."""
        values, self.state = uniform_block(self.state, count)
        return values

    def sample(self, count: int) -> List[float]:
        return [self.random() for _ in range(count)]

    def __iter__(self) -> Iterator[float]:
        while True:
            yield self.random()


__all__ = ["MASK_32", "INCREMENT", "Mulberry32", "next_uniform", "seed_state", "uniform_block"]
