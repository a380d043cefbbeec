# dynurg_gen/utils/seeding.py
from __future__ import annotations
import numpy as np

SEED_BITS = 63


def derive_seed(master_seed: int, *keys: int) -> int:
    """
    Deterministic seed keyed by counters, e.g. (master, configuration, attempt).
    The same keys always give the same seed, independent of any other draw.
    """
    ss = np.random.SeedSequence([int(master_seed), *(int(k) for k in keys)])
    hi, lo = ss.generate_state(2, dtype=np.uint32)
    return ((int(hi) << 32) | int(lo)) & ((1 << SEED_BITS) - 1)


def next_seed(rng: np.random.Generator) -> int:
    """Draw a sub-seed from `rng` (the equivalent of nextLong())."""
    return int(rng.integers(0, (1 << SEED_BITS) - 1))
