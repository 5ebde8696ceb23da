"""
Room export: polygon vertices to SVG path data and the room object format.

The exported room object matches what the floor-plan front end stores:

    {name, svg_path, vertices: [{x, y}], wall_height, installations: [],
     pathHistory: [{x, y, theta, timestamp}]}

Coordinates are metres. Numbers in SVG path data are written the way the
browser writes them, so integral values carry no decimal point ("M 0,0"
rather than "M 0.0,0.0").
"""

import logging
import math
from decimal import Decimal
from typing import Any, Iterable, Optional

from roommap.mapping.convex_hull import point_xy
from roommap.mapping.types import DEFAULT_WALL_HEIGHT, RoomExport

logger = logging.getLogger(__name__)

DEFAULT_ROOM_NAME = "Mapped Room"


def format_svg_number(value: float) -> str:
    """
    Shortest round-trip text for a coordinate, in browser number notation.

    Fixed notation is used while the decimal exponent lies in [-6, 20];
    outside that range the exponent form is written with an explicit sign
    and no zero padding ("1.5e-7", "1e+21").

    Example:
        >>> format_svg_number(1.0), format_svg_number(-0.5), format_svg_number(-0.0)
        ('1', '-0.5', '0')
        >>> format_svg_number(2.5e-06), format_svg_number(1.5e-07)
        ('0.0000025', '1.5e-7')
    """
    value = float(value)
    if value == 0:
        return "0"
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))

    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    exponent = int(exponent)
    if -6 <= exponent <= 20:
        return format(Decimal(text), "f")
    sign = "+" if exponent > 0 else "-"
    return f"{mantissa}e{sign}{abs(exponent)}"


def vertices_to_svg_path(vertices: Iterable[Any]) -> str:
    """
    Closed SVG path through the vertices: "M x0,y0 L x1,y1 ... Z".

    Args:
        vertices: Points with .x/.y or (x, y) pairs.

    Returns:
        Path data string, or "" for no vertices.

    Example:
        >>> vertices_to_svg_path([(0, 0), (1, 0), (1, 1)])
        'M 0,0 L 1,0 L 1,1 Z'
    """
    parts = []
    for i, vertex in enumerate(vertices):
        x, y = point_xy(vertex)
        command = "M" if i == 0 else "L"
        parts.append(f"{command} {format_svg_number(x)},{format_svg_number(y)}")

    if not parts:
        return ""
    parts.append("Z")
    return " ".join(parts)


def export_to_room_format(
    path: Any,
    room_name: str = DEFAULT_ROOM_NAME,
    margin: Optional[float] = None,
    rng: Any = None,
    wall_height: float = DEFAULT_WALL_HEIGHT,
) -> Optional[RoomExport]:
    """
    Build the room object from a path using the convex hull strategy.

    Args:
        path: PathAccumulator or sequence of path points.
        room_name: Name of the exported room.
        margin: Jitter margin for the hull (m); default of the hull strategy
                when None.
        rng: Random source for the hull jitter (see generate_convex_hull_map).
        wall_height: Reported wall height (m).

    Returns:
        RoomExport, or None when the path has fewer than 2 points.
    """
    # Import here to avoid circular dependency
    from roommap.mapping.polygon import generate_convex_hull_map, DEFAULT_HULL_MARGIN

    map_data = generate_convex_hull_map(
        path,
        margin=DEFAULT_HULL_MARGIN if margin is None else margin,
        rng=rng,
        wall_height=wall_height,
    )
    if map_data is None:
        logger.debug("export skipped: path too short")
        return None

    return RoomExport(
        name=room_name,
        svg_path=map_data.svg_path,
        vertices=list(map_data.vertices),
        wall_height=map_data.wall_height,
        path_history=list(map_data.path_history),
    )
