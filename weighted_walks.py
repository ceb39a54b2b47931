import networkx as nx
import numpy as np
from alias_sampler import make_rng, SEED_MASK
from key_mapping import LabeledSampler


def build_graph(edge_list, directed=False):
    """Edges are (u, v) or (u, v, weight); missing weights default to 1."""
    G = nx.DiGraph() if directed else nx.Graph()
    for edge in edge_list:
        if len(edge) == 3:
            G.add_edge(edge[0], edge[1], weight=float(edge[2]))
        else:
            G.add_edge(edge[0], edge[1], weight=1.0)
    return G


def _child_seeds(seed, n):
    children = np.random.SeedSequence(seed & SEED_MASK).spawn(n)
    return [int(c.generate_state(1, dtype=np.uint64)[0]) for c in children]


def preprocess_transition_samplers(G, seed=0, weight="weight"):
    """One sampler per node over its neighbours, weighted by edge weight.

    Nodes with no neighbours, or whose edges all weigh 0, get no sampler
    and end any walk that reaches them.
    """
    nodes = list(G.nodes())
    seeds = _child_seeds(seed, len(nodes))
    samplers = {}

    for node, node_seed in zip(nodes, seeds):
        nbr_weights = {
            nbr: G[node][nbr].get(weight, 1.0) for nbr in G.neighbors(node)
            }
        if any(w != 0 for w in nbr_weights.values()):
            samplers[node] = LabeledSampler(nbr_weights, node_seed)

    return samplers


def weighted_walk(walk_length, start_node, samplers):
    walk = [start_node]

    while len(walk) < walk_length:
        sampler = samplers.get(walk[-1])
        if sampler is None:
            break
        walk.append(sampler.sample())
    return walk


def simulate_walks(G, num_walks, walk_length, seed=0, weight="weight"):
    samplers = preprocess_transition_samplers(G, seed, weight)
    rng = make_rng(seed)
    nodes = list(G.nodes())
    walks = []

    for _ in range(num_walks):
        order = rng.permutation(len(nodes))
        for i in order:
            walks.append(weighted_walk(walk_length, nodes[i], samplers))

    return walks
