"""
Mapping session: encoder counts in, room polygons out.

Composes the pieces explicitly instead of keeping them in one controller
singleton:

    OdometryEstimator  -> (optional PoseKalmanFilter) -> PathAccumulator
    PathAccumulator    -> extract_polygon / export_to_room_format

The session is single-writer: a transport adapter should call observe() or
handle_message() from one context at a time.
"""

import logging
from typing import Any, Callable, Optional, Sequence

import numpy as np

from roommap.mapping.bounds import RoomBounds
from roommap.mapping.export import DEFAULT_ROOM_NAME, export_to_room_format
from roommap.mapping.path import PathAccumulator, now_ms
from roommap.mapping.polygon import extract_polygon
from roommap.mapping.types import MapStrategy, MappingConfig, RoomExport, RoomMapData, StrategyLike
from roommap.odometry.differential_drive import OdometryEstimator
from roommap.odometry.pose_filter import PoseKalmanFilter
from roommap.odometry.types import EncoderCounts, OdometryConfig, Pose
from roommap.protocol.messages import ControlMessage, Message, OdometryReport, parse_message
from roommap.utils.angles import normalize_angle
from roommap.utils.units import cm_to_m

logger = logging.getLogger(__name__)


class MappingSession:
    """
    Feeds encoder observations through odometry into a path and extracts rooms.

    Args:
        estimator: Odometry estimator (cm). A default one is created if None.
        path: Path accumulator (m). A default one is created if None.
        pose_filter: Optional filter applied to every raw pose.
        room_bounds: Optional room polygon for collision checks.
        mapping_config: Strategy parameters used by extract()/export().
        clock: Callable returning the current time in ms.
        rng: Random source for hull jitter.

    Example:
        >>> session = MappingSession()
        >>> for k in range(1, 5):
        ...     _ = session.observe(50 * k, 50 * k, timestamp=k)
        >>> len(session.path)
        4
    """

    def __init__(
        self,
        estimator: Optional[OdometryEstimator] = None,
        path: Optional[PathAccumulator] = None,
        pose_filter: Optional[PoseKalmanFilter] = None,
        room_bounds: Optional[RoomBounds] = None,
        mapping_config: Optional[MappingConfig] = None,
        clock: Optional[Callable[[], int]] = None,
        rng: Any = None,
    ):
        self.mapping_config = mapping_config if mapping_config is not None else MappingConfig()
        self.estimator = estimator if estimator is not None else OdometryEstimator()
        self.path = (
            path
            if path is not None
            else PathAccumulator(self.mapping_config.max_path_history)
        )
        self.pose_filter = pose_filter
        self.room_bounds = room_bounds
        self.clock = clock if clock is not None else now_ms
        self.rng = rng

        self.pose = Pose.origin()
        self.encoder_counts = EncoderCounts(left=0, right=0)
        self.collision_detected = False
        self.ready = False

    @classmethod
    def from_config(
        cls,
        odometry_config: Optional[OdometryConfig] = None,
        mapping_config: Optional[MappingConfig] = None,
        use_filter: bool = False,
        rng: Any = None,
    ) -> "MappingSession":
        """Build a session with freshly constructed components."""
        mapping_config = mapping_config if mapping_config is not None else MappingConfig()
        return cls(
            estimator=OdometryEstimator(odometry_config),
            path=PathAccumulator(mapping_config.max_path_history),
            pose_filter=PoseKalmanFilter() if use_filter else None,
            mapping_config=mapping_config,
            rng=rng,
        )

    def _record(self, pose_cm: Pose, timestamp: Optional[int]) -> None:
        self.pose = pose_cm
        self.path.add_point(
            cm_to_m(pose_cm.x),
            cm_to_m(pose_cm.y),
            pose_cm.theta,
            timestamp=self.clock() if timestamp is None else timestamp,
        )
        if self.room_bounds is not None:
            self.collision_detected = self.room_bounds.check_collision(pose_cm)
            if self.collision_detected:
                logger.debug("pose (%.1f, %.1f) cm outside room bounds", pose_cm.x, pose_cm.y)

    def _filter(self, previous: Pose, raw: Pose) -> Pose:
        delta_theta = normalize_angle(raw.theta - previous.theta)
        self.pose_filter.predict_delta(raw.x - previous.x, raw.y - previous.y, delta_theta)

        # Keep the heading measurement on the filter's branch of the angle
        state_theta = self.pose_filter.state[2]
        z_theta = state_theta + normalize_angle(raw.theta - state_theta)
        self.pose_filter.update(np.array([raw.x, raw.y, z_theta]))

        filtered = self.pose_filter.get_pose()
        return Pose(x=filtered.x, y=filtered.y, theta=normalize_angle(filtered.theta))

    def observe(self, left_count: int, right_count: int, timestamp: Optional[int] = None) -> Pose:
        """
        Integrate cumulative encoder counts and append the pose to the path.

        Returns:
            Pose in cm (filtered when a pose filter is configured).
        """
        previous = self.estimator.get_position()
        pose = self.estimator.update(left_count, right_count)
        if self.pose_filter is not None:
            pose = self._filter(previous, pose)

        self.encoder_counts = EncoderCounts(left=left_count, right=right_count)
        self._record(pose, timestamp)
        return pose

    def observe_many(self, counts: Sequence[Sequence[int]]) -> Pose:
        """Feed a sequence of (left, right) pairs; returns the last pose."""
        pose = self.pose
        for left, right in counts:
            pose = self.observe(int(left), int(right))
        return pose

    def handle_message(self, line: str, timestamp: Optional[int] = None) -> Optional[Message]:
        """
        Apply one firmware line.

        ODOM reports carry a pose already integrated on the car; it is stored
        as-is (the local estimator is not involved). ODOMETRY_RESET clears the
        session.
        """
        message = parse_message(line)
        if isinstance(message, OdometryReport):
            self.encoder_counts = message.counts
            self._record(message.pose, timestamp)
        elif message is ControlMessage.ODOMETRY_RESET:
            self.reset()
        elif message is ControlMessage.READY:
            self.ready = True
        return message

    def reset(self) -> None:
        """Zero odometry, clear the path and the filter."""
        self.estimator.reset()
        self.path.reset()
        if self.pose_filter is not None:
            self.pose_filter = PoseKalmanFilter(Q=self.pose_filter.Q, R=self.pose_filter.R)
        self.pose = Pose.origin()
        self.encoder_counts = EncoderCounts(left=0, right=0)
        self.collision_detected = False

    def set_room_bounds(self, vertices: Optional[Sequence[Any]]) -> Optional[RoomBounds]:
        """Set the room polygon (m); fewer than 3 vertices clears it."""
        self.room_bounds = RoomBounds.from_vertices(vertices) if vertices else None
        if self.room_bounds is None:
            self.collision_detected = False
        return self.room_bounds

    def _strategy_params(self, strategy: MapStrategy) -> dict:
        cfg = self.mapping_config
        params = {"wall_height": cfg.wall_height}
        if strategy is MapStrategy.BOUNDING_BOX:
            params["margin"] = cfg.simple_margin
        elif strategy is MapStrategy.CONVEX_HULL:
            params["margin"] = cfg.hull_margin
            params["rng"] = self.rng
        else:
            params["angle_threshold"] = cfg.angle_threshold
            params["rng"] = self.rng
        return params

    def extract(self, strategy: StrategyLike = MapStrategy.CONVEX_HULL, **params: Any) -> Optional[RoomMapData]:
        """Room polygon of the current path; keyword args override the config."""
        strategy = MapStrategy(strategy)
        merged = self._strategy_params(strategy)
        merged.update(params)
        return extract_polygon(strategy, self.path, **merged)

    def export(self, room_name: str = DEFAULT_ROOM_NAME) -> Optional[RoomExport]:
        """Room object of the current path (convex hull strategy)."""
        return export_to_room_format(
            self.path,
            room_name,
            margin=self.mapping_config.hull_margin,
            rng=self.rng,
            wall_height=self.mapping_config.wall_height,
        )
