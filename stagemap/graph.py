"""
Graph utilities for stage maps.

Converts a stage list into a NetworkX graph for analysis and checks the
invariants the editor maintains on the neighbor relation.
"""

from typing import List, Sequence

import networkx as nx

from stagemap.model import Stage


def to_networkx(stages: Sequence[Stage]) -> nx.Graph:
    """
    Build an undirected graph keyed by stage index.

    Node attributes: id, label, x, y, width, height. One-sided neighbor
    references still produce an edge; use check_invariants() to find them.
    """
    G = nx.Graph()
    for stage in stages:
        t = stage.telemetry
        G.add_node(stage.index, id=stage.id, label=stage.label,
                   x=t.x, y=t.y, width=t.width, height=t.height)
    for stage in stages:
        for neighbor in stage.neighbor_indices():
            if neighbor in G:
                G.add_edge(stage.index, neighbor)
    return G


def check_invariants(stages: Sequence[Stage]) -> List[str]:
    """
    Return a list of invariant violations (empty if the stage list is sound).

    Checks index density, unique ids, self references, dangling references,
    duplicate references and symmetry of the neighbor relation.
    """
    problems = []
    count = len(stages)

    indices = [stage.index for stage in stages]
    if indices != list(range(count)):
        problems.append(f"indices {indices} are not 0..{count - 1} in order")

    ids = [stage.id for stage in stages]
    if len(set(ids)) != len(ids):
        problems.append("stage ids are not unique")

    for position, stage in enumerate(stages):
        refs = stage.neighbor_indices()
        if len(set(refs)) != len(refs):
            problems.append(f"stage {position} lists a neighbor twice")
        for ref in refs:
            if ref == position:
                problems.append(f"stage {position} references itself")
            elif not 0 <= ref < count:
                problems.append(f"stage {position} references missing stage {ref}")
            elif str(position) not in stages[ref].neighbors:
                problems.append(f"stage {position} -> {ref} has no back-reference")
    return problems
