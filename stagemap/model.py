"""
Data model for the stage map: stages (nodes) and paths (undirected edges).

Positions and sizes are percentages of the map bounds. Neighbor references
are stored the way the host stores them: as index strings ("0", "3", ...)
kept in ascending numeric order. They are positional, so any structural
change to the stage list must rewrite them (see StageRegistry.remove).

Element params format (what the host persists and what on_changed receives):
{
  "id": "3f0c...",
  "type": "stage",
  "label": "Unnamed stage 1",
  "telemetry": {"x": "47.5", "y": "41.1", "width": "5", "height": "8.9"},
  "neighbors": ["1", "4"]
}
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

STAGE_TYPE = "stage"

# Element params keys owned by the model; anything else is passed through.
_OWN_KEYS = frozenset(["id", "type", "label", "telemetry", "neighbors", "content"])


def sort_neighbors(neighbors: Iterable[Any]) -> List[str]:
    """Normalize neighbor references to unique index strings in numeric order."""
    unique = {int(n) for n in neighbors}
    return [str(n) for n in sorted(unique)]


def path_key(a: int, b: int) -> str:
    """Canonical dedup key of the unordered pair (a, b)."""
    return f"{min(a, b)}-{max(a, b)}"


def _to_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    return float(value)


def _format_number(value: float) -> str:
    # "50" rather than "50.0", matching how the host writes telemetry
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


@dataclass
class StageTelemetry:
    """Position (top-left corner) and size of a stage in map percent."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def to_params(self) -> Dict[str, str]:
        return {
            "x": _format_number(self.x),
            "y": _format_number(self.y),
            "width": _format_number(self.width),
            "height": _format_number(self.height),
        }

    @classmethod
    def from_params(cls, data: Optional[Dict[str, Any]]) -> "StageTelemetry":
        """Build telemetry from params; values may be numbers or numeric strings."""
        data = data or {}
        return cls(
            x=_to_float(data.get("x")),
            y=_to_float(data.get("y")),
            width=_to_float(data.get("width")),
            height=_to_float(data.get("height")),
        )


@dataclass
class Stage:
    """
    A labeled, positioned point of interest on the map.

    `id` is stable for the stage's lifetime. `index` is its current position
    in the stage list and changes whenever an earlier stage is removed.
    """
    id: str
    index: int
    label: str
    telemetry: StageTelemetry = field(default_factory=StageTelemetry)
    neighbors: List[str] = field(default_factory=list)
    type: str = STAGE_TYPE
    content: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def neighbor_indices(self) -> List[int]:
        return [int(n) for n in self.neighbors]

    def has_neighbor(self, index: int) -> bool:
        return str(index) in self.neighbors

    def to_params(self) -> Dict[str, Any]:
        params = dict(self.extra)
        params.update({
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "telemetry": self.telemetry.to_params(),
            "neighbors": list(self.neighbors),
        })
        return params


@dataclass(frozen=True)
class PathTelemetry:
    """
    Rendering data for a path between two stages.

    (x, y) is the anchor on the `from` stage's boundary, (end_x, end_y) the
    anchor on the `to` stage's boundary, all in map percent. `length` is
    measured in horizontal map percent units and `angle` is in degrees,
    clockwise from the positive x axis (screen coordinates, y pointing down).
    """
    x: float
    y: float
    end_x: float
    end_y: float
    length: float
    angle: float

    def to_params(self) -> Dict[str, str]:
        return {
            "x": _format_number(self.x),
            "y": _format_number(self.y),
            "length": _format_number(self.length),
            "angle": _format_number(self.angle),
        }


@dataclass
class Path:
    """Undirected connection between two stages, stored with from < to."""
    from_index: int
    to_index: int
    telemetry: Optional[PathTelemetry] = None

    @property
    def key(self) -> str:
        return path_key(self.from_index, self.to_index)


def stage_from_params(params: Dict[str, Any], index: int) -> Stage:
    """
    Build a Stage from element params. Missing id/label are left empty for
    the caller (StageRegistry) to fill in.
    """
    return Stage(
        id=params.get("id") or "",
        index=index,
        label=params.get("label") or "",
        telemetry=StageTelemetry.from_params(params.get("telemetry")),
        neighbors=sort_neighbors(params.get("neighbors") or []),
        type=params.get("type") or STAGE_TYPE,
        content=params.get("content"),
        extra={k: v for k, v in params.items() if k not in _OWN_KEYS},
    )


def stages_to_params(stages: Iterable[Stage]) -> List[Dict[str, Any]]:
    """Export a stage list as the element params list the host persists."""
    return [stage.to_params() for stage in stages]
