"""Path accumulation, room polygon extraction and export.

Main components:
    - PathAccumulator: bounded pose history (metres)
    - graham_scan, cross_product: convex hull primitive
    - generate_simple_map / generate_convex_hull_map /
      generate_wall_detection_map: polygon strategies
    - extract_polygon: strategy dispatch by MapStrategy
    - vertices_to_svg_path, export_to_room_format: room export
    - RoomBounds, point_in_polygon, polygon_area: room geometry

Example usage:
    >>> from roommap.mapping import PathAccumulator, extract_polygon, MapStrategy
    >>> path = PathAccumulator()
    >>> for x, y in [(0, 0), (3, 0), (3, 2), (0, 2)]:
    ...     _ = path.add_point(x, y, 0.0, timestamp=0)
    >>> room = extract_polygon(MapStrategy.BOUNDING_BOX, path, margin=0.5)
    >>> len(room.vertices)
    4
"""

from .types import (
    DEFAULT_MAX_PATH_HISTORY,
    DEFAULT_WALL_HEIGHT,
    MapStrategy,
    MappingConfig,
    PathPoint,
    RoomExport,
    RoomMapData,
    Vertex,
)
from .path import PathAccumulator, now_ms
from .convex_hull import cross_product, graham_scan, point_xy
from .export import (
    DEFAULT_ROOM_NAME,
    export_to_room_format,
    format_svg_number,
    vertices_to_svg_path,
)
from .polygon import (
    DEFAULT_ANGLE_THRESHOLD,
    DEFAULT_HULL_MARGIN,
    DEFAULT_SIMPLE_MARGIN,
    detect_wall_points,
    extract_polygon,
    generate_convex_hull_map,
    generate_simple_map,
    generate_wall_detection_map,
    jitter_points,
)
from .bounds import (
    RoomBounds,
    bounding_box_area,
    point_in_polygon,
    polygon_area,
    polygon_centroid,
)

__all__ = [
    # Types
    "DEFAULT_MAX_PATH_HISTORY",
    "DEFAULT_WALL_HEIGHT",
    "MapStrategy",
    "MappingConfig",
    "PathPoint",
    "RoomExport",
    "RoomMapData",
    "Vertex",
    # Path
    "PathAccumulator",
    "now_ms",
    # Hull
    "cross_product",
    "graham_scan",
    "point_xy",
    # Strategies
    "DEFAULT_ANGLE_THRESHOLD",
    "DEFAULT_HULL_MARGIN",
    "DEFAULT_SIMPLE_MARGIN",
    "detect_wall_points",
    "extract_polygon",
    "generate_convex_hull_map",
    "generate_simple_map",
    "generate_wall_detection_map",
    "jitter_points",
    # Export
    "DEFAULT_ROOM_NAME",
    "export_to_room_format",
    "format_svg_number",
    "vertices_to_svg_path",
    # Room geometry
    "RoomBounds",
    "bounding_box_area",
    "point_in_polygon",
    "polygon_area",
    "polygon_centroid",
]
