import pytest

from key_mapping import InvalidKey, LabelIndex, LabeledSampler


def test_ids_follow_first_seen_order():
    index = LabelIndex(["b", "a", "b", "c"])
    assert len(index) == 3
    assert [index.id_of(x) for x in "bac"] == [0, 1, 2]
    assert index.decode([2, 0]) == ["c", "b"]
    assert "a" in index and "z" not in index


def test_add_returns_existing_id():
    index = LabelIndex()
    assert index.add("x") == 0
    assert index.add("y") == 1
    assert index.add("x") == 0


def test_unmapped_lookups_raise_invalid_key():
    index = LabelIndex(["a"])
    with pytest.raises(InvalidKey):
        index.id_of("missing")
    with pytest.raises(InvalidKey):
        index.label_of(1)
    with pytest.raises(InvalidKey):
        index.label_of(-1)
    with pytest.raises(InvalidKey):
        index.encode({"a": 1, "b": 2})
    with pytest.raises(KeyError):
        index.label_of("a")


def test_encode_maps_weights_to_ids():
    index = LabelIndex(["x", "y"])
    assert index.encode({"y": 2.0, "x": 1.0}) == {1: 2.0, 0: 1.0}


def test_labeled_sampler_returns_labels():
    weights = {"first": 3.5, "second": 6.5, "third": 10}
    sampler = LabeledSampler(weights, seed=42)
    assert len(sampler) == 3
    draws = sampler.sample_batch(200000)
    for label, w in weights.items():
        assert abs(draws.count(label) / len(draws) - w / 20) < 0.01
    assert sampler.sample() in weights


def test_labeled_sampler_accepts_non_comparable_labels():
    weights = {"x": 1, 2: 1, (1, 2): 2, None: 0}
    sampler = LabeledSampler(weights, seed=0)
    seen = {sampler.sample() for _ in range(2000)}
    assert seen == {"x", 2, (1, 2)}
