import csv
import logging
import os
import time

import pandas as pd

from geo import Point, project_onto_polyline
from guidance import InstructionMapper, remaining_distance, remaining_minutes
from hazards import CongestionZone, Obstacle, Severity
from routing import CandidateKind, OSRMClient, RouteSynthesizer, TravelMode
from tracking import PositionFix, Tracker


def load_trace(filepath="mock_trace.csv"):
    # Resolve the correct path depending on where the user runs the script from.
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    absolute_path = filepath if os.path.isabs(filepath) else os.path.join(base_dir, filepath)

    df = pd.read_csv(absolute_path)
    fixes = []
    for row in df.itertuples(index=False):
        heading = None if pd.isna(row.heading) else float(row.heading)
        fixes.append(PositionFix(float(row.lat), float(row.lon), float(row.timestamp_ms), heading_hint=heading))
    return fixes


def run_simulation(trace_file="mock_trace.csv"):
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print("=== STARTING NAVIGATION SIMULATION ===")

    fixes = load_trace(trace_file)
    start = Point(37.4979, 127.0276)
    goal = Point(37.5045, 127.0490)
    print(f"Loaded {len(fixes)} fixes.\n")

    # 1. Hazards along the way
    obstacles = [Obstacle(Point(37.5010, 127.0378), influence_radius_m=50.0)]
    zones = [CongestionZone.from_severity(Point(37.5030, 127.0440), Severity.HEAVY)]

    # 2. Synthesize candidates
    synthesizer = RouteSynthesizer(OSRMClient())
    route_service = synthesizer.route_service

    started = time.time()
    candidates = synthesizer.synthesize(start, goal, obstacles, zones, TravelMode.WALKING)
    print(f"Synthesized {len(candidates)} candidates in {time.time() - started:.2f}s.\n")

    print("--- Candidates ---")
    for c in candidates:
        flag = " (fallback)" if c.is_fallback else ""
        print(f"  {c.kind.value:<17} {c.distance_m:7.0f} m  {c.eta_minutes:5.1f} min{flag}")

    chosen = next(c for c in candidates if c.kind is CandidateKind.RECOMMENDED)

    # 3. Replay the trace through the tracker
    tracker = Tracker.with_route_service(route_service, clock=lambda: 0.0)
    mapper = InstructionMapper()
    tracker.start(chosen)

    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    output_path = os.path.join(base_dir, "navigation_results.csv")

    print("\n--- Replay ---")
    with open(output_path, "w", newline='') as file:
        writer = csv.writer(file)
        writer.writerow(["timestamp_ms", "display_lat", "display_lon", "heading", "state",
                         "distance_m", "threshold_m", "instruction", "remaining_m", "remaining_min"])

        previous_state = None
        for fix in fixes:
            state = tracker.on_fix(fix, now_ms=fix.timestamp_ms)
            # half-way through the animation window
            state = tracker.on_animation_tick(fix.timestamp_ms + tracker.policy.animation_duration_ms / 2)

            # a reroute may have landed since the fix, so match against the active route
            route = tracker.session.active_route
            here = project_onto_polyline(tracker.session.raw_position, route.points)
            instruction = mapper.next_instruction(route, here)
            left_m = remaining_distance(route, here)
            left_min = remaining_minutes(route, left_m)

            writer.writerow([
                int(fix.timestamp_ms),
                round(state.display_position.lat, 7),
                round(state.display_position.lng, 7),
                round(state.heading, 1),
                state.tracking_state.value,
                round(state.debug_metrics.get("distance_m", 0.0), 1),
                round(state.debug_metrics.get("threshold_m", 0.0), 1),
                instruction.text,
                round(left_m),
                left_min,
            ])

            if state.tracking_state != previous_state:
                print(f"[{fix.timestamp_ms / 1000:6.1f}s] {state.tracking_state.value:<20} "
                      f"{instruction.icon} {instruction.text} in {instruction.distance_m:.0f} m "
                      f"({left_min} min left)")
                previous_state = state.tracking_state

            # let the background reroute land
            if state.off_route:
                time.sleep(0.05)

    tracker.stop()

    print("\n=== SIMULATION COMPLETE ===")
    print(f"Results written to '{output_path}'.")


if __name__ == "__main__":
    run_simulation()
