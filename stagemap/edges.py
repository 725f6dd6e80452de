"""
Path derivation.

Paths are never stored on their own: they are derived from the neighbor
references on the stages. Because the relation is symmetric, every edge
shows up twice while scanning (once from each end) and is deduplicated by
its canonical "min-max" key.

Output order is first-seen order: stages in index order, then each stage's
neighbors in their stored (ascending) order. Nothing depends on the order
semantically, but it is deterministic.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from stagemap.geometry import compute_path_telemetry
from stagemap.model import Path, PathTelemetry, Stage, path_key

logger = logging.getLogger(__name__)

Pair = Tuple[int, int]


def derive_all(stages: Sequence[Stage]) -> List[Pair]:
    """Every unordered neighbor pair exactly once, as (min, max)."""
    seen = set()
    pairs: List[Pair] = []
    for index, stage in enumerate(stages):
        for neighbor in stage.neighbor_indices():
            key = path_key(index, neighbor)
            if key in seen:
                continue
            seen.add(key)
            pairs.append((min(index, neighbor), max(index, neighbor)))
    return pairs


def derive_incremental(stages: Sequence[Stage], changed_index: Optional[int] = None) -> List[Pair]:
    """
    Pairs with at least one endpoint equal to changed_index.

    Relies on the neighbor relation being symmetric: only the changed
    stage's own neighbor list is read, so the cost is O(degree). Without a
    changed_index this is derive_all().
    """
    if changed_index is None:
        return derive_all(stages)

    return [
        (min(changed_index, n), max(changed_index, n))
        for n in stages[changed_index].neighbor_indices()
    ]


class PathCache:
    """
    Current paths with their cached telemetry.

    `update(stages)` re-derives the path list and recomputes telemetry for
    every path. `update(stages, limit=k)` re-derives the list but recomputes
    telemetry only for paths touching stage k; every other path keeps the
    PathTelemetry object it already had.
    """

    def __init__(self, aspect_ratio: float = 1.0):
        self.aspect_ratio = aspect_ratio
        self._paths: Dict[str, Path] = {}

    @property
    def paths(self) -> List[Path]:
        return list(self._paths.values())

    def get(self, a: int, b: int) -> Optional[Path]:
        return self._paths.get(path_key(a, b))

    def __len__(self) -> int:
        return len(self._paths)

    def _telemetry(self, stages: Sequence[Stage], pair: Pair) -> PathTelemetry:
        return compute_path_telemetry(
            stages[pair[0]].telemetry, stages[pair[1]].telemetry, self.aspect_ratio
        )

    def update(self, stages: Sequence[Stage], limit: Optional[int] = None) -> List[Path]:
        """
        Rebuild the path list from the stage neighbor relation.

        Args:
            stages: Stage list in index order
            limit: Index of the only stage whose paths need fresh telemetry

        Returns:
            The updated path list
        """
        previous = self._paths
        updated: Dict[str, Path] = {}
        recomputed = 0

        for pair in derive_all(stages):
            key = path_key(*pair)
            old = previous.get(key)
            if limit is None or limit in pair or old is None or old.telemetry is None:
                telemetry = self._telemetry(stages, pair)
                recomputed += 1
            else:
                telemetry = old.telemetry
            updated[key] = Path(pair[0], pair[1], telemetry)

        self._paths = updated
        logger.debug(f"Updated {len(updated)} paths, recomputed telemetry for {recomputed} (limit={limit})")
        return self.paths

    def update_touching(self, stages: Sequence[Stage], index: int) -> List[Path]:
        """
        Recompute telemetry only for the paths that touch `index`.

        The neighbor relation must be unchanged since the last update (a
        pure move); this is the drag path and costs O(degree(index)).

        Returns:
            The paths whose telemetry was recomputed
        """
        touched = []
        for pair in derive_incremental(stages, index):
            path = Path(pair[0], pair[1], self._telemetry(stages, pair))
            self._paths[path.key] = path
            touched.append(path)
        logger.debug(f"Recomputed telemetry for {len(touched)} paths touching stage {index}")
        return touched
