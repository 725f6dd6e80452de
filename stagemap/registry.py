"""
Stage registry: the ordered, authoritative list of stages.

Owns index assignment. Indices are always exactly 0..N-1 in list order, and
neighbor references are index strings, so removing a stage from the middle of
the list shifts every later index and every reference to it. That rewrite
lives in one place, shift_references().
"""

import logging
import uuid
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from stagemap.errors import InvalidIndex
from stagemap.model import Stage, sort_neighbors, stage_from_params

logger = logging.getLogger(__name__)

DEFAULT_UNNAMED_PREFIX = "Unnamed stage"


def unnamed_label(labels: Iterable[str], prefix: str = DEFAULT_UNNAMED_PREFIX) -> str:
    """
    Next auto-generated label, e.g. "Unnamed stage 3".

    Counts the current labels that start with the prefix followed by a space,
    so the number follows the stages that still exist rather than a counter
    that only ever grows.
    """
    marker = f"{prefix} "
    count = sum(1 for label in labels if label.startswith(marker))
    return f"{prefix} {count + 1}"


def shift_references(neighbors: Iterable[str], removed_index: int) -> List[str]:
    """
    Rewrite neighbor references after the stage at removed_index is gone.

    References to the removed stage are dropped, references above it move
    down by one, references below it are kept.
    """
    shifted = []
    for neighbor in neighbors:
        value = int(neighbor)
        if value == removed_index:
            continue
        shifted.append(str(value - 1) if value > removed_index else str(value))
    return shifted


class StageRegistry:
    """
    Ordered stage storage with dense 0-based indices.

    Callers get Stage objects back and may read them freely; all writes go
    through the registry so index and neighbor bookkeeping stays consistent.
    """

    def __init__(self, unnamed_prefix: str = DEFAULT_UNNAMED_PREFIX,
                 id_factory: Optional[Callable[[], str]] = None):
        self.unnamed_prefix = unnamed_prefix
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._stages: List[Stage] = []

    def __len__(self) -> int:
        return len(self._stages)

    def __iter__(self) -> Iterator[Stage]:
        # Iterate over a copy so callers can mutate while looping
        return iter(list(self._stages))

    @property
    def stages(self) -> List[Stage]:
        """Snapshot of the stage list (the Stage objects are shared)."""
        return list(self._stages)

    def count(self) -> int:
        return len(self._stages)

    def labels(self) -> List[str]:
        return [stage.label for stage in self._stages]

    def _check_index(self, index: Any) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidIndex(index, len(self._stages))
        if not 0 <= index < len(self._stages):
            raise InvalidIndex(index, len(self._stages))
        return index

    def get(self, index: int) -> Stage:
        return self._stages[self._check_index(index)]

    def find(self, stage_id: str) -> Optional[Stage]:
        """Look a stage up by its stable id."""
        for stage in self._stages:
            if stage.id == stage_id:
                return stage
        return None

    def next_unnamed_label(self) -> str:
        return unnamed_label(self.labels(), self.unnamed_prefix)

    # -----------------
    # MUTATIONS
    # -----------------

    def add(self, params: Optional[Dict[str, Any]] = None) -> Stage:
        """
        Append a stage built from element params.

        The new stage gets index = current count. A fresh id is generated
        unless params carry one; the label defaults to the next unnamed label.
        Neighbor references that point at the stage itself or past the end
        of the list are dropped.
        """
        params = params or {}
        index = len(self._stages)
        stage = stage_from_params(params, index)

        if stage.id:
            if self.find(stage.id) is not None:
                raise ValueError(f"Stage '{stage.id}' already exists.")
        else:
            stage.id = self._id_factory()

        if not stage.label:
            stage.label = self.next_unnamed_label()

        valid = [n for n in stage.neighbor_indices() if 0 <= n < index]
        if len(valid) != len(stage.neighbors):
            logger.warning(
                f"Dropped invalid neighbor references {sorted(set(stage.neighbor_indices()) - set(valid))} "
                f"from new stage {index}"
            )
        stage.neighbors = sort_neighbors(valid)

        self._stages.append(stage)
        logger.info(f"Added stage {index} '{stage.label}' ({stage.id})")
        return stage

    def set_label(self, index: int, label: str) -> None:
        self.get(index).label = label

    def set_position(self, index: int, x: float, y: float) -> None:
        telemetry = self.get(index).telemetry
        telemetry.x = float(x)
        telemetry.y = float(y)

    def set_size(self, index: int, width: float, height: float) -> None:
        telemetry = self.get(index).telemetry
        telemetry.width = float(width)
        telemetry.height = float(height)

    def set_neighbors(self, index: int, neighbors: Iterable[Any]) -> bool:
        """
        Make `neighbors` the neighbor set of stage `index`, symmetrically.

        One pass over all stages: each stage k gets `index` added to its own
        neighbors if k is in the requested set, removed otherwise. Self
        references and out-of-range references are ignored.

        Returns:
            False if the call was a no-op because there are fewer than two
            stages, True otherwise.
        """
        self._check_index(index)
        if len(self._stages) <= 1:
            return False

        # Resolve the whole request before touching any stage
        requested = set()
        for neighbor in neighbors:
            value = int(neighbor)
            if value == index or not 0 <= value < len(self._stages):
                logger.warning(f"Ignoring neighbor reference {neighbor!r} for stage {index}")
                continue
            requested.add(value)

        own_ref = str(index)
        for stage in self._stages:
            if stage.index == index:
                stage.neighbors = sort_neighbors(requested)
            elif stage.index in requested:
                if own_ref not in stage.neighbors:
                    stage.neighbors = sort_neighbors(stage.neighbors + [own_ref])
            elif own_ref in stage.neighbors:
                stage.neighbors = [n for n in stage.neighbors if n != own_ref]
        return True

    def remove(self, index: int) -> Stage:
        """
        Remove the stage at `index` and re-index everything after it.

        Every remaining stage's neighbor references are rewritten first, then
        the stage indices are reassigned from list order.
        """
        self._check_index(index)
        removed = self._stages.pop(index)

        for stage in self._stages:
            stage.neighbors = shift_references(stage.neighbors, index)

        self.reindex()
        logger.info(f"Removed stage {index} '{removed.label}' ({removed.id}); {len(self._stages)} remaining")
        return removed

    def reindex(self) -> None:
        for position, stage in enumerate(self._stages):
            stage.index = position

    def load(self, elements: Iterable[Dict[str, Any]]) -> List[Stage]:
        """
        Replace the stage list with stages built from saved element params.

        Indices follow list order. Missing ids and labels are generated,
        duplicate ids are regenerated, and references that are out of range
        or point at the stage itself are dropped. Symmetry is restored.
        """
        stages: List[Stage] = []
        seen_ids = set()
        for index, params in enumerate(elements):
            stage = stage_from_params(params, index)
            if not stage.id or stage.id in seen_ids:
                if stage.id:
                    logger.warning(f"Duplicate stage id '{stage.id}' at index {index}, assigning a new one")
                stage.id = self._id_factory()
            seen_ids.add(stage.id)
            stages.append(stage)

        count = len(stages)
        for stage in stages:
            valid = [n for n in stage.neighbor_indices() if 0 <= n < count and n != stage.index]
            if len(valid) != len(stage.neighbors):
                logger.warning(f"Dropped invalid neighbor references from stage {stage.index}")
            stage.neighbors = sort_neighbors(valid)

        self._stages = []
        for stage in stages:
            if not stage.label:
                stage.label = self.next_unnamed_label()
            self._stages.append(stage)

        added = self.restore_symmetry()
        if added:
            logger.warning(f"Restored {added} missing back-references while loading")
        logger.info(f"Loaded {count} stages")
        return self.stages

    def restore_symmetry(self) -> int:
        """
        Add the missing back-reference for every one-sided neighbor entry.

        Used after loading params that were written by hand or by an older
        editor. Returns the number of references added.
        """
        added = 0
        for stage in self._stages:
            for neighbor in stage.neighbor_indices():
                other = self._stages[neighbor]
                if not other.has_neighbor(stage.index):
                    other.neighbors = sort_neighbors(other.neighbors + [str(stage.index)])
                    added += 1
        return added
