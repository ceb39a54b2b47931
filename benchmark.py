import os
import json
import time
from datetime import datetime

import numpy as np

from alias_sampler import AliasSampler, validate_weights
from baselines import LinearScanSampler, BinarySearchSampler, MultinomialSampler
from key_mapping import LabeledSampler

SAMPLERS = {
    "alias": AliasSampler,
    "linear_scan": LinearScanSampler,
    "binary_search": BinarySearchSampler,
    "torch_multinomial": MultinomialSampler,
}


def get_logger(log_file_path, print_to_console=True):
    """
    Returns a logger that writes JSON-formatted logs to file (1 per line).

    Args:
        log_file_path (str): File to append logs to.
        print_to_console (bool): If True, also prints log entries to stdout.

    Returns:
        log_fn (callable): log_fn(message_dict: dict)
    """
    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    def log_fn(message_dict):
        message_dict["timestamp"] = datetime.now().isoformat()
        line = json.dumps(message_dict)
        with open(log_file_path, "a") as f:
            f.write(line + "\n")
        if print_to_console:
            print(line)

    return log_fn


def empirical_distribution(sampler, n_draws):
    """Observed frequency of each key over ``n_draws`` draws."""
    if hasattr(sampler, "sample_counts"):
        counts = sampler.sample_counts(n_draws)
    else:
        counts = {}
        for _ in range(n_draws):
            k = sampler.sample()
            counts[k] = counts.get(k, 0) + 1
    return {k: c / n_draws for k, c in counts.items()}


def max_deviation(weights, freqs):
    """Largest |observed - expected| probability over all keys."""
    keys, ws, total = validate_weights(weights)
    return max(abs(freqs.get(k, 0.0) - w / total) for k, w in zip(keys, ws))


def time_sampler(sampler, n_draws):
    """Seconds per ``sample()`` call, averaged over ``n_draws`` calls."""
    start = time.perf_counter()
    for _ in range(n_draws):
        sampler.sample()
    return (time.perf_counter() - start) / n_draws


def run_benchmark(
    weights,
    n_draws=100000,
    seed=0,
    samplers=None,
    log_fn=None,
    ):
    """Builds each sampler on ``weights``, times it and checks its output.

    Input:
    ------
    weights: key -> weight
    n_draws: number of ``sample()`` calls to time and to count
    seed: seed handed to every sampler
    samplers: name -> class taking (weights, seed); defaults to SAMPLERS
    log_fn: callable receiving one dict per sampler, see get_logger
    """
    if n_draws <= 0:
        raise ValueError(f"n_draws must be positive, got {n_draws}")
    if samplers is None:
        samplers = SAMPLERS

    results = []
    for name, cls in samplers.items():
        start = time.perf_counter()
        sampler = cls(weights, seed)
        build_s = time.perf_counter() - start
        per_draw_s = time_sampler(sampler, n_draws)
        freqs = empirical_distribution(sampler, n_draws)

        record = {
            "sampler": name,
            "n_keys": len(sampler),
            "n_draws": n_draws,
            "build_s": build_s,
            "ns_per_draw": per_draw_s * 1e9,
            "max_deviation": max_deviation(weights, freqs),
        }
        if log_fn is not None:
            log_fn(record)
        results.append(record)

    return results


def demo(n_draws=1000000, seed=None):
    """Maps sampled ids back to labels and prints observed frequencies.

    Expect roughly first 0.175, second 0.325, third 0.5.
    """
    if seed is None:
        seed = time.time_ns()
    sampler = LabeledSampler({"first": 3.5, "second": 6.5, "third": 10}, seed)
    labels, counts = np.unique(np.array(sampler.sample_batch(n_draws)), return_counts=True)
    freqs = {str(label): int(c) / n_draws for label, c in zip(labels, counts)}
    for label, f in freqs.items():
        print(label, f)
    return freqs


if __name__ == "__main__":
    demo()
    cur_time = datetime.now().strftime("%Y%m%d_%H%M%S")
    logger = get_logger(f"logs/benchmark_log_{cur_time}.json")
    run_benchmark(
        {i: float(i) for i in range(1, 10001)},
        n_draws=100000,
        seed=time.time_ns(),
        log_fn=logger,
    )
