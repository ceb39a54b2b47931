"""Translation between arbitrary labels and dense integer ids.

The alias sampler wants comparable keys; labels here only need to be
hashable.
"""
from alias_sampler import AliasSampler


class InvalidKey(KeyError):
    pass


class LabelIndex:
    """Assigns ids 0..n-1 to labels in first-seen order."""

    def __init__(self, labels=()):
        self._labels = []
        self._ids = {}
        for label in labels:
            self.add(label)

    def add(self, label):
        if label not in self._ids:
            self._ids[label] = len(self._labels)
            self._labels.append(label)
        return self._ids[label]

    def __len__(self):
        return len(self._labels)

    def __contains__(self, label):
        return label in self._ids

    def id_of(self, label):
        try:
            return self._ids[label]
        except KeyError:
            raise InvalidKey(label) from None

    def label_of(self, idx):
        if not isinstance(idx, int) or not 0 <= idx < len(self._labels):
            raise InvalidKey(idx)
        return self._labels[idx]

    def encode(self, weights_by_label):
        return {self.id_of(label): w for label, w in weights_by_label.items()}

    def decode(self, ids):
        return [self.label_of(i) for i in ids]


class LabeledSampler:
    def __init__(self, weights_by_label, seed):
        """
        Args:
            weights_by_label (dict): hashable label -> non-negative weight.
            seed (int): seed for the underlying alias sampler.
        """
        self.index = LabelIndex(weights_by_label)
        self.sampler = AliasSampler(self.index.encode(weights_by_label), seed)

    def __len__(self):
        return len(self.index)

    def sample(self):
        return self.index.label_of(self.sampler.sample())

    def sample_batch(self, size):
        return self.index.decode(self.sampler.sample_batch(size))
