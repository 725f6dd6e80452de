"""
Path geometry: turns two stage telemetries into the data needed to draw the
line that connects them.

Stage positions are map percentages on both axes, so a vertical percent is
not the same length as a horizontal one on a non-square map. All math is
done in horizontal percent units (y is scaled by height / width) and the
anchors are converted back to map percent at the end.

Stages are drawn as ellipses inscribed in their bounding box, so anchors sit
on that ellipse along the center-to-center line.
"""

import math

from stagemap.model import PathTelemetry, StageTelemetry


def _boundary_offset(telemetry: StageTelemetry, ux: float, uy: float, y_scale: float) -> float:
    """
    Distance from the stage center to its boundary along unit vector (ux, uy).

    Zero-area stages anchor at their center.
    """
    a = telemetry.width / 2
    b = telemetry.height / 2 * y_scale
    if a <= 0 or b <= 0:
        return 0.0
    return 1 / math.sqrt((ux / a) ** 2 + (uy / b) ** 2)


def compute_path_telemetry(
    from_telemetry: StageTelemetry,
    to_telemetry: StageTelemetry,
    aspect_ratio: float = 1.0,
) -> PathTelemetry:
    """
    Compute anchors, length and angle of the path between two stages.

    Args:
        from_telemetry: Telemetry of the stage the path starts at
        to_telemetry: Telemetry of the stage the path ends at
        aspect_ratio: Map width / map height

    Returns:
        PathTelemetry. Coincident or overlapping stages yield a zero-length
        path anchored halfway between the two centers.
    """
    if aspect_ratio <= 0:
        raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")

    y_scale = 1 / aspect_ratio

    fx, fy = from_telemetry.center
    tx, ty = to_telemetry.center
    fy *= y_scale
    ty *= y_scale

    dx, dy = tx - fx, ty - fy
    distance = math.hypot(dx, dy)

    if distance == 0:
        return PathTelemetry(
            x=fx, y=fy / y_scale, end_x=tx, end_y=ty / y_scale, length=0.0, angle=0.0
        )

    ux, uy = dx / distance, dy / distance
    angle = math.degrees(math.atan2(dy, dx))

    start_offset = _boundary_offset(from_telemetry, ux, uy, y_scale)
    end_offset = _boundary_offset(to_telemetry, ux, uy, y_scale)

    if start_offset + end_offset >= distance:
        mid_x, mid_y = (fx + tx) / 2, (fy + ty) / 2
        return PathTelemetry(
            x=mid_x, y=mid_y / y_scale, end_x=mid_x, end_y=mid_y / y_scale,
            length=0.0, angle=angle
        )

    start_x, start_y = fx + ux * start_offset, fy + uy * start_offset
    end_x, end_y = tx - ux * end_offset, ty - uy * end_offset

    return PathTelemetry(
        x=start_x,
        y=start_y / y_scale,
        end_x=end_x,
        end_y=end_y / y_scale,
        length=distance - start_offset - end_offset,
        angle=angle,
    )
