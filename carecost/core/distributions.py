"""Normal and lognormal variate generation from uniform draws."""

from __future__ import annotations

import math
from typing import Callable, Union

import numpy as np

# Smallest positive value the 32-bit uniform stream can emit.
MIN_UNIFORM = 2.0 ** -32

ArrayLike = Union[float, np.ndarray]


def box_muller(u1: ArrayLike, u2: ArrayLike) -> ArrayLike:
    """Map two uniform draws to one standard-normal draw.

    ``sqrt(-2 ln u1) * cos(2 pi u2)``. A ``u1`` of exactly zero is replaced
    by :data:`MIN_UNIFORM` so the logarithm stays finite. Accepts scalars or
    numpy arrays of equal shape.
    """
    if isinstance(u1, np.ndarray) or isinstance(u2, np.ndarray):
        first = np.asarray(u1, dtype=float)
        first = np.where(first > 0.0, first, MIN_UNIFORM)
        return np.sqrt(-2.0 * np.log(first)) * np.cos(2.0 * np.pi * np.asarray(u2, dtype=float))

    first = float(u1) if u1 > 0.0 else MIN_UNIFORM
    return math.sqrt(-2.0 * math.log(first)) * math.cos(2.0 * math.pi * float(u2))


def standard_normal(random: Callable[[], float]) -> float:
    """Draw one normal variate by consuming two uniforms (``u1`` then ``u2``)."""
    u1 = random()
    u2 = random()
    return box_muller(u1, u2)


def lognormal_location(median: float) -> float:
    """Return ``mu`` so that the lognormal median equals ``median``."""
    if not median > 0 or not math.isfinite(median):
        raise ValueError("lognormal median must be a positive finite number")
    return math.log(median)


def sample_lognormal(mu: float, sigma: float, z: ArrayLike) -> ArrayLike:
    """Transform standard-normal draw(s) ``z`` into ``exp(mu + sigma * z)``."""
    if isinstance(z, np.ndarray):
        return np.exp(mu + sigma * z)
    return math.exp(mu + sigma * z)


__all__ = ["MIN_UNIFORM", "box_muller", "lognormal_location", "sample_lognormal", "standard_normal"]
