"""Deterministic samplers driven by an injected uniform source."""

import hashlib
import math
from typing import Callable, Union

import numpy as np

# Any zero-argument callable returning a float in [0, 1)
UniformSource = Callable[[], float]


def seed_to_int(seed: Union[str, int]) -> int:
    """Map a string or integer seed to a 128-bit integer, stable across platforms."""
    digest = hashlib.sha256(str(seed).encode("utf-8")).digest()
    return int.from_bytes(digest[:16], "big")


class SeededRandom:
    """Uniform [0, 1) stream backed by a numpy Generator built from a seed."""

    def __init__(self, seed: Union[str, int]):
        self.seed = seed
        self._generator = np.random.default_rng(seed_to_int(seed))

    def __call__(self) -> float:
        return float(self._generator.random())

    def derive(self, suffix: str) -> "SeededRandom":
        """Independent stream whose seed is derived from this one."""
        return SeededRandom(f"{self.seed}-{suffix}")

    def __repr__(self) -> str:
        return f"SeededRandom(seed={self.seed!r})"


def normal_sample(rng: UniformSource) -> float:
    """Standard normal draw (Box-Muller). 1 - u1 keeps log() away from 0."""
    u1 = 1 - rng()
    u2 = rng()
    return math.sqrt(-2 * math.log(u1)) * math.cos(2 * math.pi * u2)


def sample_gamma(shape: float, rate: float, rng: UniformSource) -> float:
    """Gamma(shape, rate) draw.

    Marsaglia-Tsang rejection for shape >= 1. Below 1 the draw is boosted
    from Gamma(1 + shape) and scaled by u**(1/shape).
    """
    if shape < 1:
        boosted = sample_gamma(1 + shape, rate, rng)
        return boosted * rng() ** (1 / shape)

    d = shape - 1 / 3
    c = 1 / math.sqrt(9 * d)

    while True:
        x = normal_sample(rng)
        v = 1 + c * x
        while v <= 0:
            x = normal_sample(rng)
            v = 1 + c * x

        v = v * v * v
        u = rng()

        if u < 1 - 0.0331 * (x * x) * (x * x):
            return d * v / rate
        if u > 0 and math.log(u) < 0.5 * x * x + d * (1 - v + math.log(v)):
            return d * v / rate


def sample_beta(alpha: float, beta: float, rng: UniformSource) -> float:
    """Beta(alpha, beta) draw as X / (X + Y) with X, Y independent unit-rate Gammas."""
    x = sample_gamma(alpha, 1, rng)
    y = sample_gamma(beta, 1, rng)
    total = x + y
    if total <= 0:
        return alpha / (alpha + beta)
    return x / total
