"""
Mesh Overlay — Seeded Random Number Generator
Mulberry32 PRNG: deterministic random floats from a single integer seed.

Given the same seed, always produces the same sequence, bit-identical to the
browser overlay, so every viewer of a shared overlay sees the same mesh.
"""

from typing import Callable

RandomFn = Callable[[], float]

_MASK32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply (result as unsigned 32-bit pattern)."""
    return (a * b) & _MASK32


def create_seeded_random(seed: int) -> RandomFn:
    """
    Create an independent generator keyed by ``seed``.

    Returns a closure; each call advances the internal state and returns
    the next float in [0, 1).
    """
    state = int(seed) & _MASK32

    def _next() -> float:
        nonlocal state
        state = (state + _INCREMENT) & _MASK32
        t = _imul(state ^ (state >> 15), 1 | state)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & _MASK32) ^ t
        return ((t ^ (t >> 14)) & _MASK32) / _TWO_POW_32

    return _next


def seeded_float(rng: RandomFn, min_val: float, max_val: float) -> float:
    """Map one draw into [min_val, max_val)."""
    return min_val + rng() * (max_val - min_val)


def seeded_int(rng: RandomFn, min_val: int, max_val: int) -> int:
    """Map one draw into the inclusive integer range [min_val, max_val]."""
    return int(rng() * (max_val - min_val + 1)) + min_val
