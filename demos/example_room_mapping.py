"""
Example: Room Mapping from Wheel Encoder Odometry

Drives a simulated RC car around an L-shaped room, integrates its wheel
encoder counts into a pose path, and extracts the room outline with the
three polygon strategies:

    - bounding_box:   axis-aligned box of the path plus a margin
    - convex_hull:    Graham scan hull of the jittered path
    - wall_detection: hull of the points where the car turned

Runs twice: with ideal encoders and with a mismatched left wheel, to show
how a small scale error bends the path and the extracted room.

Key Insight: Convex strategies cannot represent the concave corner of an
            L-shaped room; the mapped area always overestimates it.
"""

import json
import time
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from tqdm import tqdm

from roommap.mapping import MapStrategy, MappingConfig, polygon_area
from roommap.odometry import OdometryConfig
from roommap.pipeline import MappingSession

# Room outline (m), counter-clockwise, starting at the origin
L_ROOM = [(0.0, 0.0), (5.0, 0.0), (5.0, 2.0), (2.5, 2.0), (2.5, 4.0), (0.0, 4.0)]


def generate_encoder_counts(corners, config, step_cm=5.0, turn_steps=8, left_scale=1.0):
    """
    Encoder counts for driving the polygon edges with in-place turns.

    Returns: counts [N, 2] (cumulative left/right), true_xy [N, 2] in metres
    """
    cm_per_pulse = config.cm_per_pulse
    left = right = 0.0
    x, y = corners[0]
    counts, true_xy = [], []

    n = len(corners)
    heading = np.arctan2(corners[1][1] - corners[0][1], corners[1][0] - corners[0][0])
    for i in range(n):
        x0, y0 = corners[i]
        x1, y1 = corners[(i + 1) % n]
        length_cm = np.hypot(x1 - x0, y1 - y0) * 100.0
        steps = max(1, int(round(length_cm / step_cm)))
        for k in range(1, steps + 1):
            travel = length_cm / steps / cm_per_pulse
            left += travel * left_scale
            right += travel
            x = x0 + (x1 - x0) * k / steps
            y = y0 + (y1 - y0) * k / steps
            counts.append((int(round(left)), int(round(right))))
            true_xy.append((x, y))

        # Turn towards the next edge (signed, shortest way)
        x2, y2 = corners[(i + 2) % n]
        next_heading = np.arctan2(y2 - y1, x2 - x1)
        turn = np.arctan2(np.sin(next_heading - heading), np.cos(next_heading - heading))
        heading = next_heading
        arc = turn * config.wheelbase / 2.0 / cm_per_pulse
        for _ in range(turn_steps):
            left -= arc / turn_steps * left_scale
            right += arc / turn_steps
            counts.append((int(round(left)), int(round(right))))
            true_xy.append((x, y))

    return np.array(counts), np.array(true_xy)


def run_session(counts, odometry_config, mapping_config, use_filter=False, seed=7):
    """Feed counts into a mapping session; returns (session, est_xy [N, 2] m)."""
    session = MappingSession.from_config(
        odometry_config, mapping_config, use_filter=use_filter, rng=np.random.default_rng(seed)
    )
    est = np.zeros((len(counts), 2))
    for k, (left, right) in enumerate(tqdm(counts, desc="Odometry", unit="sample")):
        pose = session.observe(int(left), int(right), timestamp=100 * k)
        est[k] = (pose.x / 100.0, pose.y / 100.0)
    return session, est


def closed(vertices):
    xs = [v.x for v in vertices] + [vertices[0].x]
    ys = [v.y for v in vertices] + [vertices[0].y]
    return xs, ys


def plot_rooms(true_xy, runs, figs_dir):
    """One panel per run: true room, estimated path, extracted polygons."""
    styles = {
        MapStrategy.BOUNDING_BOX: ('tab:gray', ':'),
        MapStrategy.CONVEX_HULL: ('tab:blue', '-'),
        MapStrategy.WALL_DETECTION: ('tab:red', '--'),
    }
    fig, axes = plt.subplots(1, len(runs), figsize=(7 * len(runs), 7))
    axes = np.atleast_1d(axes)

    for ax, (label, (session, est, rooms)) in zip(axes, runs.items()):
        room_x, room_y = zip(*(L_ROOM + [L_ROOM[0]]))
        ax.fill(room_x, room_y, color='k', alpha=0.08, label='True room')
        ax.plot(true_xy[:, 0], true_xy[:, 1], 'k-', linewidth=2, label='True path')
        ax.plot(est[:, 0], est[:, 1], color='tab:green', linewidth=1.5, label='Odometry path')
        for strategy, room in rooms.items():
            color, ls = styles[strategy]
            xs, ys = closed(room.vertices)
            ax.plot(xs, ys, color=color, linestyle=ls, linewidth=2, label=strategy.value)
            if room.wall_points:
                ax.scatter([p.x for p in room.wall_points], [p.y for p in room.wall_points],
                           c=color, s=40, marker='x', zorder=5)
        ax.set_xlabel('x [m]', fontsize=12)
        ax.set_ylabel('y [m]', fontsize=12)
        ax.set_title(f'Room Mapping: {label}', fontsize=14, fontweight='bold')
        ax.legend(fontsize=9, loc='upper right')
        ax.grid(True, alpha=0.3)
        ax.axis('equal')

    plt.tight_layout()
    fig.savefig(figs_dir / 'room_mapping_polygons.svg', dpi=300, bbox_inches='tight')
    fig.savefig(figs_dir / 'room_mapping_polygons.pdf', bbox_inches='tight')
    print(f"  [OK] Saved: {figs_dir / 'room_mapping_polygons.svg'}")

    fig2, ax = plt.subplots(figsize=(12, 5))
    for label, (session, est, rooms) in runs.items():
        err = np.linalg.norm(est - true_xy, axis=1)
        ax.plot(err, linewidth=2, label=label)
    ax.set_xlabel('Sample', fontsize=12)
    ax.set_ylabel('Position Error [m]', fontsize=12)
    ax.set_title('Odometry Position Error', fontsize=14, fontweight='bold')
    ax.legend(fontsize=11)
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    fig2.savefig(figs_dir / 'room_mapping_error.svg', dpi=300, bbox_inches='tight')
    fig2.savefig(figs_dir / 'room_mapping_error.pdf', bbox_inches='tight')
    print(f"  [OK] Saved: {figs_dir / 'room_mapping_error.svg'}")

    plt.close('all')


def main():
    """Main execution."""
    print("\n" + "=" * 70)
    print("Room Mapping from Differential-Drive Wheel Odometry")
    print("=" * 70)

    odometry_config = OdometryConfig()
    mapping_config = MappingConfig(max_path_history=2000)

    print("\nConfiguration:")
    print(f"  Wheel diameter:  {odometry_config.wheel_diameter} cm")
    print(f"  Wheelbase:       {odometry_config.wheelbase} cm")
    print(f"  Pulses/rev:      {odometry_config.encoder_pulses_per_revolution}")
    print(f"  cm per pulse:    {odometry_config.cm_per_pulse:.3f}")
    print(f"  True room area:  {polygon_area(L_ROOM):.2f} m^2\n")

    cases = {
        'Ideal encoders': dict(left_scale=1.0, use_filter=False),
        'Left wheel +3%': dict(left_scale=1.03, use_filter=False),
        'Left wheel +3%, filtered': dict(left_scale=1.03, use_filter=True),
    }

    runs = {}
    true_xy = None
    for label, case in cases.items():
        print(f"Running: {label}")
        start = time.time()
        counts, true_xy = generate_encoder_counts(L_ROOM, odometry_config, left_scale=case['left_scale'])
        session, est = run_session(counts, odometry_config, mapping_config, use_filter=case['use_filter'])
        rooms = {s: session.extract(s) for s in MapStrategy}
        runs[label] = (session, est, rooms)
        print(f"  Samples: {len(counts)}, time: {time.time() - start:.3f} s")

    figs_dir = Path(__file__).parent / 'figs'
    figs_dir.mkdir(exist_ok=True)

    print("\nGenerating plots...")
    plot_rooms(true_xy, runs, figs_dir)

    export = runs['Ideal encoders'][0].export("L-shaped Lab")
    export_path = figs_dir / 'room_export.json'
    with open(export_path, 'w') as f:
        json.dump(export.to_dict(), f, indent=2)
    print(f"  [OK] Saved: {export_path}")

    print("\n" + "=" * 70)
    print("RESULTS")
    print("=" * 70)
    for label, (session, est, rooms) in runs.items():
        final_err = np.linalg.norm(est[-1] - true_xy[-1])
        drift = session.estimator.estimate_error()
        print(f"{label}:")
        print(f"  Final error:      {final_err:.2f} m (heuristic {drift.estimated_error / 100.0:.2f} m)")
        for strategy, room in rooms.items():
            print(f"  {strategy.value:15s} {len(room.vertices):3d} vertices, "
                  f"area {polygon_area(room.vertices):5.2f} m^2 ({room.strategy.value})")
        print()
    print(f"Figures saved to: {figs_dir}/")
    print()
    print("=" * 70)
    print("KEY INSIGHT: Convex extraction overestimates concave rooms, and a")
    print("             few percent of wheel scale error visibly bends the walls.")
    print("=" * 70)
    print()


if __name__ == "__main__":
    main()
