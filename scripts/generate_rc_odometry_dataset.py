"""
Generate RC Car Encoder Odometry Dataset.

Simulates a differential-drive RC car driving laps around a rectangular room
(straight sides, in-place 90 degree turns) and records what the firmware
would report: cumulative integer encoder counts per wheel. The counts are
then run through the odometry/mapping session to produce estimated poses,
a serial log and the extracted room polygons.

Error sources:
    - Per-wheel scale error (wrong wheel diameter)
    - Count quantization and noise
    - Random wheel slip events (wheel spins, car does not move)

Saves to: data/sim/rc_odometry_<preset>/

Outputs:
    - time_ms.txt              sample timestamps
    - encoder_counts.txt       cumulative left/right counts
    - ground_truth_pose.txt    true x, y (cm), theta (rad)
    - estimated_pose.txt       odometry x, y (cm), theta (rad)
    - serial_log.txt           ODOM lines as streamed by the firmware
    - rooms.json               polygons from all three extraction strategies
    - config.json              generation parameters and error summary
"""

import argparse
import json
from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np
from tqdm import tqdm

from roommap.mapping import MapStrategy, MappingConfig, polygon_area
from roommap.odometry import EncoderCounts, OdometryConfig
from roommap.pipeline import MappingSession
from roommap.protocol import format_odometry
from roommap.utils import m_to_cm, normalize_angle


# ============================================================================
# PRESET CONFIGURATIONS
# ============================================================================

PRESETS = {
    'baseline': {
        'description': 'Small room, ideal encoders (quantization only)',
        'room_width': 4.0,
        'room_depth': 3.0,
        'laps': 1,
        'count_noise': 0.0,
        'left_scale_error': 0.0,
        'right_scale_error': 0.0,
        'slip_probability': 0.0,
    },
    'slippy': {
        'description': 'Small room, mismatched wheels and frequent slip',
        'room_width': 4.0,
        'room_depth': 3.0,
        'laps': 2,
        'count_noise': 0.3,
        'left_scale_error': 0.02,
        'right_scale_error': -0.01,
        'slip_probability': 0.05,
        'slip_magnitude': 0.5,
    },
    'large_room': {
        'description': 'Large hall, mild encoder errors',
        'room_width': 10.0,
        'room_depth': 7.0,
        'laps': 1,
        'count_noise': 0.1,
        'left_scale_error': 0.005,
        'right_scale_error': 0.0,
        'slip_probability': 0.01,
    },
}


# ============================================================================
# DATA GENERATION FUNCTIONS
# ============================================================================

def simulate_room_drive(
    room_width: float,
    room_depth: float,
    odometry_config: OdometryConfig,
    laps: int = 1,
    step_cm: float = 5.0,
    turn_steps: int = 6,
    sample_period_ms: int = 100,
    count_noise: float = 0.0,
    left_scale_error: float = 0.0,
    right_scale_error: float = 0.0,
    slip_probability: float = 0.0,
    slip_magnitude: float = 0.5,
    seed: int = 42,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, int]:
    """
    Drive counter-clockwise laps around a rectangle starting at the origin.

    Args:
        room_width: Rectangle side along x (m).
        room_depth: Rectangle side along y (m).
        odometry_config: Wheel geometry used to convert travel to counts.
        laps: Number of laps.
        step_cm: Forward travel per sample on straight sides (cm).
        turn_steps: Samples per 90 degree turn.
        sample_period_ms: Time between samples (ms).
        count_noise: Std of additive count noise per wheel per sample.
        left_scale_error: Relative over-count of the left encoder.
        right_scale_error: Relative over-count of the right encoder.
        slip_probability: Chance per sample that a wheel slips.
        slip_magnitude: Extra (phantom) travel of a slipping wheel, as a
                        fraction of its commanded travel.
        seed: Random seed.

    Returns:
        Tuple of (t_ms, counts, poses_true, num_slips):
            - t_ms: Timestamps [N] in ms
            - counts: Cumulative encoder counts [N, 2] (left, right)
            - poses_true: True poses [N, 3] (x cm, y cm, theta rad)
            - num_slips: Number of slip events injected
    """
    rng = np.random.default_rng(seed)
    cm_per_pulse = odometry_config.cm_per_pulse
    arc_per_turn = (np.pi / 2) * odometry_config.wheelbase / 2.0

    segments = []
    for side_m in (room_width, room_depth) * 2:
        steps = max(1, int(round(m_to_cm(side_m) / step_cm)))
        segments.append(('straight', steps, m_to_cm(side_m) / steps))
        segments.append(('turn', turn_steps, arc_per_turn / turn_steps))
    segments = segments * laps

    total = sum(steps for _, steps, _ in segments)
    t_ms = np.zeros(total, dtype=np.int64)
    counts = np.zeros((total, 2), dtype=np.int64)
    poses_true = np.zeros((total, 3))

    x = y = theta = 0.0
    left_pulses = right_pulses = 0.0
    num_slips = 0
    k = 0

    with tqdm(total=total, desc="Simulating drive", unit="sample") as pbar:
        for kind, steps, travel in segments:
            for _ in range(steps):
                if kind == 'straight':
                    d_left = d_right = travel
                    x += travel * np.cos(theta)
                    y += travel * np.sin(theta)
                else:
                    d_left, d_right = -travel, travel
                    theta = normalize_angle(theta + 2.0 * travel / odometry_config.wheelbase)

                wheel_travel = np.array([d_left * (1.0 + left_scale_error),
                                         d_right * (1.0 + right_scale_error)])
                slips = rng.random(2) < slip_probability
                num_slips += int(np.sum(slips))
                wheel_travel[slips] *= (1.0 + slip_magnitude)

                pulses = wheel_travel / cm_per_pulse + rng.normal(0.0, count_noise, 2)
                left_pulses += pulses[0]
                right_pulses += pulses[1]

                t_ms[k] = (k + 1) * sample_period_ms
                counts[k] = (int(round(left_pulses)), int(round(right_pulses)))
                poses_true[k] = (x, y, theta)
                k += 1
                pbar.update(1)

    return t_ms, counts, poses_true, num_slips


def run_mapping_session(
    t_ms: np.ndarray,
    counts: np.ndarray,
    odometry_config: OdometryConfig,
    mapping_config: MappingConfig,
    use_filter: bool = False,
    seed: int = 42,
) -> Tuple[MappingSession, np.ndarray, list]:
    """
    Feed the encoder stream through a mapping session.

    Returns:
        Tuple of (session, poses_est [N, 3], serial_lines).
    """
    session = MappingSession.from_config(
        odometry_config,
        mapping_config,
        use_filter=use_filter,
        rng=np.random.default_rng(seed),
    )
    poses_est = np.zeros((len(t_ms), 3))
    serial_lines = []

    for k in tqdm(range(len(t_ms)), desc="Running odometry", unit="sample"):
        left, right = int(counts[k, 0]), int(counts[k, 1])
        pose = session.observe(left, right, timestamp=int(t_ms[k]))
        poses_est[k] = pose.to_array()
        serial_lines.append(format_odometry(pose, EncoderCounts(left=left, right=right)))

    return session, poses_est, serial_lines


def save_dataset(
    output_dir: Path,
    t_ms: np.ndarray,
    counts: np.ndarray,
    poses_true: np.ndarray,
    poses_est: np.ndarray,
    serial_lines: list,
    rooms: Dict,
    config: Dict,
) -> None:
    """Save dataset to disk."""
    output_dir.mkdir(parents=True, exist_ok=True)

    np.savetxt(output_dir / "time_ms.txt", t_ms, fmt="%d", header="time (ms)")
    np.savetxt(
        output_dir / "encoder_counts.txt",
        counts,
        fmt="%d",
        header="left_count, right_count (cumulative pulses)",
    )
    np.savetxt(
        output_dir / "ground_truth_pose.txt",
        poses_true,
        fmt="%.6f",
        header="x (cm), y (cm), theta (rad)",
    )
    np.savetxt(
        output_dir / "estimated_pose.txt",
        poses_est,
        fmt="%.6f",
        header="x (cm), y (cm), theta (rad)",
    )

    with open(output_dir / "serial_log.txt", "w") as f:
        f.write("RC_CAR_READY\n")
        for line in serial_lines:
            f.write(line + "\n")

    with open(output_dir / "rooms.json", "w") as f:
        json.dump(rooms, f, indent=2)

    with open(output_dir / "config.json", "w") as f:
        json.dump(config, f, indent=2)

    print(f"\n  Saved dataset to: {output_dir}")
    print(f"    Files: 7 files (time, counts, GT pose, est pose, serial log, rooms, config)")
    print(f"    Samples: {len(t_ms)}")


def load_config_file(path: Optional[str]) -> Tuple[OdometryConfig, MappingConfig]:
    """
    Read wheel geometry and mapping parameters from a JSON file.

    The file may contain an "odometry" object (OdometryConfig fields, snake
    or camel case) and a "mapping" object (MappingConfig fields).
    """
    if path is None:
        return OdometryConfig(), MappingConfig()
    with open(path) as f:
        data = json.load(f)
    return (
        OdometryConfig.from_dict(data.get("odometry", {})),
        MappingConfig(**data.get("mapping", {})),
    )


def generate_dataset(
    output_dir: str,
    preset: Optional[str] = None,
    odometry_config: Optional[OdometryConfig] = None,
    mapping_config: Optional[MappingConfig] = None,
    room_width: float = 4.0,
    room_depth: float = 3.0,
    laps: int = 1,
    step_cm: float = 5.0,
    count_noise: float = 0.0,
    left_scale_error: float = 0.0,
    right_scale_error: float = 0.0,
    slip_probability: float = 0.0,
    slip_magnitude: float = 0.5,
    use_filter: bool = False,
    seed: int = 42,
) -> Dict:
    """
    Generate an RC car encoder odometry dataset.

    Args:
        output_dir: Output directory path.
        preset: Preset name (recorded in config.json).
        odometry_config: Wheel geometry (default RC car if None).
        mapping_config: Path cap and extraction parameters.
        room_width: Room side along x (m).
        room_depth: Room side along y (m).
        laps: Number of laps around the room.
        step_cm: Forward travel per sample (cm).
        count_noise: Encoder count noise std (pulses).
        left_scale_error: Left encoder relative scale error.
        right_scale_error: Right encoder relative scale error.
        slip_probability: Slip chance per wheel per sample.
        slip_magnitude: Slip extra travel fraction.
        use_filter: Run the pose Kalman filter in the loop.
        seed: Random seed.

    Returns:
        The config dictionary written to config.json.
    """
    odometry_config = odometry_config if odometry_config is not None else OdometryConfig()
    mapping_config = mapping_config if mapping_config is not None else MappingConfig()

    print("\n" + "=" * 70)
    print(f"Generating RC Car Odometry Dataset: {Path(output_dir).name}")
    print("=" * 70)

    print("\nStep 1: Simulating room drive...")
    print(f"  Room: {room_width:.1f} m x {room_depth:.1f} m, {laps} lap(s)")
    print(f"  Wheel: d={odometry_config.wheel_diameter} cm, "
          f"L={odometry_config.wheelbase} cm, "
          f"{odometry_config.encoder_pulses_per_revolution} pulses/rev")
    t_ms, counts, poses_true, num_slips = simulate_room_drive(
        room_width,
        room_depth,
        odometry_config,
        laps=laps,
        step_cm=step_cm,
        count_noise=count_noise,
        left_scale_error=left_scale_error,
        right_scale_error=right_scale_error,
        slip_probability=slip_probability,
        slip_magnitude=slip_magnitude,
        seed=seed,
    )
    total_distance = float(np.sum(np.linalg.norm(np.diff(poses_true[:, :2], axis=0), axis=1)))
    print(f"  Samples: {len(t_ms)}")
    print(f"  Distance: {total_distance / 100.0:.1f} m")
    print(f"  Slip events: {num_slips}")

    print("\nStep 2: Running odometry and mapping...")
    session, poses_est, serial_lines = run_mapping_session(
        t_ms, counts, odometry_config, mapping_config, use_filter=use_filter, seed=seed
    )

    error_cm = np.linalg.norm(poses_est[:, :2] - poses_true[:, :2], axis=1)
    drift = session.estimator.estimate_error()
    print(f"  Final error: {error_cm[-1]:.1f} cm")
    print(f"  Max error: {np.max(error_cm):.1f} cm")
    print(f"  Drift heuristic: {drift.estimated_error:.1f} cm "
          f"({drift.error_rate:.0%} of {drift.total_distance:.1f} cm)")

    print("\nStep 3: Extracting room polygons...")
    rooms = {}
    true_area = room_width * room_depth
    for strategy in MapStrategy:
        room = session.extract(strategy)
        if room is None:
            print(f"  {strategy.value}: path too short")
            continue
        area = polygon_area(room.vertices)
        rooms[strategy.value] = room.to_dict()
        print(f"  {strategy.value:15s} -> {room.strategy.value:15s} "
              f"{len(room.vertices):3d} vertices, area {area:6.2f} m^2 (true {true_area:.2f})")
    exported = session.export()
    if exported is not None:
        rooms["export"] = exported.to_dict()

    config = {
        "dataset": "rc_odometry_room",
        "preset": preset,
        "room": {"width_m": room_width, "depth_m": room_depth, "laps": laps},
        "odometry": odometry_config.to_dict(),
        "mapping": {
            "max_path_history": mapping_config.max_path_history,
            "simple_margin": mapping_config.simple_margin,
            "hull_margin": mapping_config.hull_margin,
            "angle_threshold": mapping_config.angle_threshold,
            "wall_height": mapping_config.wall_height,
        },
        "step_cm": step_cm,
        "num_samples": int(len(t_ms)),
        "encoder": {
            "count_noise": count_noise,
            "left_scale_error": left_scale_error,
            "right_scale_error": right_scale_error,
        },
        "slip": {
            "probability": slip_probability,
            "magnitude": slip_magnitude,
            "num_events": int(num_slips),
        },
        "pose_filter": use_filter,
        "performance": {
            "total_distance_cm": total_distance,
            "final_error_cm": float(error_cm[-1]),
            "max_error_cm": float(np.max(error_cm)),
            "drift_rate_percent": float(error_cm[-1] / total_distance * 100) if total_distance > 0 else 0.0,
        },
        "seed": seed,
    }

    save_dataset(Path(output_dir), t_ms, counts, poses_true, poses_est, serial_lines, rooms, config)

    print("\n" + "=" * 70)
    print("Dataset generation complete!")
    print("=" * 70)
    return config


def main():
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Generate RC car encoder odometry and room mapping dataset",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate with default parameters
  python %(prog)s

  # Use a preset configuration
  python %(prog)s --preset slippy

  # Custom wheel geometry from JSON ({"odometry": {...}, "mapping": {...}})
  python %(prog)s --config my_car.json --room-width 5 --room-depth 4

  # Compare raw and filtered odometry
  python %(prog)s --preset slippy --output data/sim/rc_slippy_raw
  python %(prog)s --preset slippy --use-filter --output data/sim/rc_slippy_kf

Available presets: """ + ", ".join(PRESETS.keys())
    )

    parser.add_argument(
        '--preset',
        type=str,
        choices=PRESETS.keys(),
        help='Use preset configuration (overrides individual parameters)'
    )
    parser.add_argument(
        '--output',
        type=str,
        default=None,
        help='Output directory (default: data/sim/rc_odometry_<preset or custom>)'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='JSON file with "odometry" and/or "mapping" parameters'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=42,
        help='Random seed for reproducibility (default: 42)'
    )

    room_group = parser.add_argument_group('Room Parameters')
    room_group.add_argument('--room-width', type=float, default=4.0,
                            help='Room side along x in meters (default: 4.0)')
    room_group.add_argument('--room-depth', type=float, default=3.0,
                            help='Room side along y in meters (default: 3.0)')
    room_group.add_argument('--laps', type=int, default=1,
                            help='Number of laps (default: 1)')
    room_group.add_argument('--step-cm', type=float, default=5.0,
                            help='Forward travel per sample in cm (default: 5.0)')

    enc_group = parser.add_argument_group('Encoder Error Parameters')
    enc_group.add_argument('--count-noise', type=float, default=0.0,
                           help='Count noise std in pulses (default: 0.0)')
    enc_group.add_argument('--left-scale-error', type=float, default=0.0,
                           help='Left encoder relative scale error (default: 0.0)')
    enc_group.add_argument('--right-scale-error', type=float, default=0.0,
                           help='Right encoder relative scale error (default: 0.0)')
    enc_group.add_argument('--slip-probability', type=float, default=0.0,
                           help='Slip chance per wheel per sample (default: 0.0)')
    enc_group.add_argument('--slip-magnitude', type=float, default=0.5,
                           help='Slip extra travel fraction (default: 0.5)')

    parser.add_argument('--use-filter', action='store_true',
                        help='Run the pose Kalman filter on the odometry output')

    args = parser.parse_args()

    if args.preset:
        preset_config = PRESETS[args.preset]
        print(f"\nUsing preset: '{args.preset}'")
        print(f"Description: {preset_config['description']}")
        for key, value in preset_config.items():
            if key != 'description' and hasattr(args, key):
                setattr(args, key, value)

    if args.room_width <= 0 or args.room_depth <= 0:
        parser.error("Room dimensions must be positive")
    if args.laps < 1:
        parser.error("Laps must be at least 1")
    if args.step_cm <= 0:
        parser.error("Step must be positive")
    if not 0.0 <= args.slip_probability <= 1.0:
        parser.error("Slip probability must be in [0, 1]")

    try:
        odometry_config, mapping_config = load_config_file(args.config)
    except (OSError, TypeError, ValueError) as exc:
        parser.error(f"Invalid configuration: {exc}")

    output_dir = args.output or f"data/sim/rc_odometry_{args.preset or 'custom'}"

    generate_dataset(
        output_dir=output_dir,
        preset=args.preset,
        odometry_config=odometry_config,
        mapping_config=mapping_config,
        room_width=args.room_width,
        room_depth=args.room_depth,
        laps=args.laps,
        step_cm=args.step_cm,
        count_noise=args.count_noise,
        left_scale_error=args.left_scale_error,
        right_scale_error=args.right_scale_error,
        slip_probability=args.slip_probability,
        slip_magnitude=args.slip_magnitude,
        use_filter=args.use_filter,
        seed=args.seed,
    )


if __name__ == "__main__":
    main()
