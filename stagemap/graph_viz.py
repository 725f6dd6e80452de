"""
Renderer that turns editor snapshots into an ECharts-compatible option dict.

The stage map has fixed positions, so the ECharts graph series uses
layout 'none' with each stage placed at its center (map percent, y axis
pointing down). Path endpoints come from the cached path telemetry, which
the option carries per link so a custom renderer can draw the clipped line.

Draw order follows z-order, not index: bring_to_front/send_to_back move a
stage within the draw order only.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import networkx as nx

from stagemap.model import Path, Stage

logger = logging.getLogger(__name__)

LINE_STYLE = {
    "color": "#bdbdbd",
    "width": 2,
    "opacity": 0.9,
}

HIGHLIGHT_LINE_STYLE = {
    "color": "#ffd700",
    "width": 4,
    "opacity": 1.0,
}


class EChartsRenderer:
    """
    Renderer collaborator keeping the latest ECharts option in `option`.

    Partial updates (limit=k) still rebuild the option from the full
    snapshot; `last_limit` records which stage the update was scoped to.
    """

    def __init__(self):
        self.G = nx.Graph()
        self.option: Dict[str, Any] = {}
        self.visible = True
        self.last_limit: Optional[int] = None
        self.update_count = 0
        self._stages: List[Stage] = []
        self._paths: List[Path] = []
        # Stage ids in draw order, bottom first
        self._draw_order: List[str] = []

    def _sync_draw_order(self, stages: Sequence[Stage]) -> None:
        ids = {stage.id for stage in stages}
        self._draw_order = [sid for sid in self._draw_order if sid in ids]
        known = set(self._draw_order)
        for stage in stages:
            if stage.id not in known:
                self._draw_order.append(stage.id)

    def draw_order(self) -> List[str]:
        return list(self._draw_order)

    def update(self, stages: Sequence[Stage], paths: Sequence[Path], limit: Optional[int] = None) -> None:
        self._sync_draw_order(stages)
        self.last_limit = limit
        self.update_count += 1
        self._stages = list(stages)
        self._paths = list(paths)
        self.option = self.generate_echarts(stages, paths, highlight=limit)

    def generate_echarts(self, stages: Sequence[Stage], paths: Sequence[Path],
                         highlight: Optional[int] = None) -> Dict[str, Any]:
        """Build the ECharts option dict for a stage list and its paths."""
        self.G = nx.Graph()
        for stage in stages:
            cx, cy = stage.telemetry.center
            self.G.add_node(stage.index, id=stage.id, label=stage.label, x=cx, y=cy,
                            size=stage.telemetry.width)

        for path in paths:
            if path.from_index in self.G and path.to_index in self.G:
                self.G.add_edge(path.from_index, path.to_index, telemetry=path.telemetry)

        by_id = {attrs["id"]: (n, attrs) for n, attrs in self.G.nodes(data=True)}
        data = []
        for stage_id in self._draw_order:
            if stage_id not in by_id:
                continue
            n, attrs = by_id[stage_id]
            data.append({
                "id": str(n),
                "name": attrs["label"],
                "x": attrs["x"],
                "y": attrs["y"],
                "symbolSize": attrs["size"],
                "label": {"show": True, "formatter": attrs["label"]},
                "stageId": stage_id,
            })

        links = []
        for src, tgt, attrs in self.G.edges(data=True):
            a, b = min(src, tgt), max(src, tgt)
            telemetry = attrs.get("telemetry")
            touched = highlight is not None and highlight in (a, b)
            links.append({
                "source": str(a),
                "target": str(b),
                "lineStyle": dict(HIGHLIGHT_LINE_STYLE if touched else LINE_STYLE),
                "pathTelemetry": telemetry.to_params() if telemetry else None,
            })

        return {
            "series": [
                {
                    "type": "graph",
                    "layout": "none",
                    "roam": False,
                    "data": data,
                    "links": links,
                    "emphasis": {"focus": "adjacency"},
                }
            ]
        }

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    def bring_to_front(self, stage: Stage) -> None:
        if stage.id in self._draw_order:
            self._draw_order.remove(stage.id)
        self._draw_order.append(stage.id)
        self.option = self.generate_echarts(self._stages, self._paths)
        logger.debug(f"Stage {stage.id} drawn on top")

    def send_to_back(self, stage: Stage) -> None:
        if stage.id in self._draw_order:
            self._draw_order.remove(stage.id)
        self._draw_order.insert(0, stage.id)
        self.option = self.generate_echarts(self._stages, self._paths)
        logger.debug(f"Stage {stage.id} drawn at the bottom")
