"""Reference samplers used to check and benchmark the alias sampler.

They take the same ``(weights, seed)`` arguments and answer ``sample()``
the same way, but pay O(n) or O(log n) per draw.
"""
import bisect

import torch

from alias_sampler import validate_weights, make_rng, SEED_MASK


class _CumulativeSampler:
    def __init__(self, weights, seed):
        keys, ws, _ = validate_weights(weights)
        self.keys = keys
        self.cum = []
        acc = 0.0
        for w in ws:
            acc += w
            self.cum.append(acc)
        self.total = acc
        # Index of the last key with positive weight, for draws that round
        # up to the total.
        self._last = max(i for i, w in enumerate(ws) if w > 0)
        self._rng = make_rng(seed)

    def __len__(self):
        return len(self.keys)

    def _target(self):
        return self._rng.random() * self.total


class LinearScanSampler(_CumulativeSampler):
    """O(n) scan over cumulative weights."""

    def sample(self):
        r = self._target()
        for i, c in enumerate(self.cum):
            if r < c:
                return self.keys[i]
        return self.keys[self._last]


class BinarySearchSampler(_CumulativeSampler):
    """O(log n) search over the (sorted) cumulative partitions."""

    def sample(self):
        idx = bisect.bisect_right(self.cum, self._target())
        return self.keys[min(idx, self._last)]


class MultinomialSampler:
    """Draws with torch.multinomial over a weight tensor.

    Input:
    ------
    weights: key -> non-negative weight
    seed: seed for a dedicated torch.Generator
    device: torch device holding the weight tensor
    """
    def __init__(self, weights, seed, device="cpu"):
        keys, ws, _ = validate_weights(weights)
        self.keys = keys
        self.device = torch.device(device)
        self.word_dist = torch.tensor(ws, dtype=torch.float64, device=self.device)
        self.generator = torch.Generator(device=self.device)
        self.generator.manual_seed(seed & SEED_MASK)

    def __len__(self):
        return len(self.keys)

    def sample(self):
        idx = torch.multinomial(self.word_dist, 1, generator=self.generator)
        return self.keys[idx.item()]

    def sample_batch(self, size):
        idx = torch.multinomial(
            self.word_dist,
            size,
            replacement=True,
            generator=self.generator
            )
        return [self.keys[i] for i in idx.tolist()]
