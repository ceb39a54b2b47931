"""Walker/Vose alias method: O(n) table construction, O(1) sampling.

A sampler owns its random generator. It is not safe to call ``sample`` on
one instance from several threads at once; give each thread its own
sampler with ``spawn``. The table itself is immutable and shared.
"""
import math
import operator
from typing import NamedTuple, Hashable

import numpy as np

SEED_MASK = (1 << 64) - 1


class InvalidDistribution(ValueError):
    """Raised when a weight mapping cannot be turned into a distribution."""


class Bucket(NamedTuple):
    threshold: float
    primary_key: Hashable
    alias_key: Hashable = None
    has_alias: bool = False


class AliasTable:
    """Immutable sequence of buckets, one per key."""

    def __init__(self, buckets, donations=0):
        self._buckets = tuple(buckets)
        self.donations = donations

    def __len__(self):
        return len(self._buckets)

    def __getitem__(self, i):
        return self._buckets[i]

    def __iter__(self):
        return iter(self._buckets)

    def keys(self):
        return [b.primary_key for b in self._buckets]

    def probabilities(self):
        """Reconstructs {key: probability} from thresholds and aliases."""
        n = len(self._buckets)
        probs = {b.primary_key: 0.0 for b in self._buckets}
        for b in self._buckets:
            probs[b.primary_key] += b.threshold / n
            if b.has_alias:
                probs[b.alias_key] += (1.0 - b.threshold) / n
        return probs


def validate_weights(weights):
    """Checks a {key: weight} mapping.

    Returns:
        (keys, ws, total): keys in sorted order, their float weights and
        the weight sum.
    """
    if not weights:
        raise InvalidDistribution("weight mapping is empty")
    try:
        keys = sorted(weights)
    except TypeError as err:
        raise InvalidDistribution(
            "keys must be mutually comparable; map labels to ids first"
            ) from err
    ws = []
    for k in keys:
        w = float(weights[k])
        if math.isnan(w) or math.isinf(w) or w < 0:
            raise InvalidDistribution(f"invalid weight {w!r} for key {k!r}")
        ws.append(w)
    total = sum(ws)
    if not total > 0 or math.isinf(total):
        raise InvalidDistribution(f"total weight must be positive and finite, got {total}")
    return keys, ws, total


def make_rng(seed):
    """Dedicated generator for a 64-bit (possibly negative) integer seed."""
    seed = operator.index(seed) & SEED_MASK
    return np.random.Generator(np.random.PCG64(np.random.SeedSequence(seed)))


def build_table(weights):
    keys, ws, total = validate_weights(weights)
    n = len(keys)
    q = [w / total * n for w in ws]
    J = [None] * n
    underfull, overfull = [], []

    for i, qi in enumerate(q):
        if qi < 1.0:
            underfull.append(i)
        elif qi > 1.0:
            overfull.append(i)

    donations = 0
    while underfull and overfull:
        u = underfull.pop()
        o = overfull[-1]
        J[u] = o
        q[o] = q[o] - (1.0 - q[u])
        donations += 1
        if q[o] < 1.0:
            overfull.pop()
            underfull.append(o)

    # Rounding leftovers sit at ~1 and have no alias.
    for leftover in underfull + overfull:
        q[leftover] = 1.0

    buckets = []
    for i, k in enumerate(keys):
        if J[i] is None:
            buckets.append(Bucket(q[i], k))
        else:
            buckets.append(Bucket(q[i], k, keys[J[i]], True))
    return AliasTable(buckets, donations)


def build(weights, seed):
    """Builds the alias table for ``weights`` and a generator bound to it."""
    return build_table(weights), make_rng(seed)


class AliasSampler:
    def __init__(self, weights, seed):
        """
        Args:
            weights (dict): key -> non-negative weight. Weights need not sum
                to 1.
            seed (int): 64-bit seed for this sampler's own generator.
        """
        table, rng = build(weights, seed)
        self._init(table, rng)

    @classmethod
    def from_table(cls, table, rng):
        sampler = cls.__new__(cls)
        sampler._init(table, rng)
        return sampler

    def _init(self, table, rng):
        self.table = table
        self._rng = rng
        self._n = len(table)
        self._keys = table.keys()
        self._thresholds = [b.threshold for b in table]
        self._aliases = [b.alias_key for b in table]
        # Positional arrays for vectorised draws; a bucket without an alias
        # points at itself.
        pos = {k: i for i, k in enumerate(self._keys)}
        self._q = np.array(self._thresholds, dtype=np.float64)
        self._J = np.array(
            [pos[b.alias_key] if b.has_alias else i for i, b in enumerate(table)],
            dtype=np.int64,
            )

    def __len__(self):
        return self._n

    def sample(self):
        i = int(self._rng.integers(self._n))
        if self._rng.random() <= self._thresholds[i]:
            return self._keys[i]
        return self._aliases[i]

    def _draw_positions(self, size):
        ii = self._rng.integers(self._n, size=size)
        tt = self._rng.random(size)
        return np.where(tt <= self._q[ii], ii, self._J[ii])

    def sample_batch(self, size):
        """Draws ``size`` keys at once."""
        return [self._keys[i] for i in self._draw_positions(size)]

    def sample_counts(self, size):
        counts = np.bincount(self._draw_positions(size), minlength=self._n)
        return {k: int(c) for k, c in zip(self._keys, counts)}

    def spawn(self, n_children):
        """Independent samplers sharing this table, one per thread/task.

        Child streams are derived from this sampler's seed, so they are
        reproducible and do not overlap with the parent's stream.
        """
        seed_seq = self._rng.bit_generator.seed_seq
        return [
            AliasSampler.from_table(self.table, np.random.Generator(np.random.PCG64(child)))
            for child in seed_seq.spawn(n_children)
            ]
