import threading

import pytest

from conftest import FakeRoutingProvider, RecordingRequester
from geo import Point, haversine_distance, initial_bearing, interpolate_linear, path_length
from routing import CandidateKind, RouteCandidate, RouteService, TravelMode
from tracking import (
    DisplayAnimation,
    FrameScheduler,
    PositionFix,
    RerouteRequest,
    Tracker,
    TrackingPolicy,
    TrackingState,
    TrackingStateError,
    ThreadedRerouteRequester,
    default_tracking_policy,
    evaluate_breach,
    look_ahead_origin,
    off_route_threshold,
    smoothed_speed,
)

# 0.001 deg of latitude is ~111 m
ON_ROUTE = (37.5, 127.005)
OFF_ROUTE = (37.501, 127.005)


def candidate_from(points, kind=CandidateKind.RECOMMENDED):
    distance = path_length(points)
    return RouteCandidate(kind=kind, points=list(points), distance_m=distance,
                          eta_minutes=distance / 67.0, mode=TravelMode.WALKING)


@pytest.fixture
def requester():
    return RecordingRequester()


@pytest.fixture
def tracker(requester, east_route):
    t = Tracker(requester=requester, clock=lambda: 0.0)
    t.start(east_route)
    return t


def feed(tracker, positions, start_ms=0.0, step_ms=60_000.0):
    """Fixes one minute apart so the speed estimate stays near walking pace."""
    states = []
    for i, (lat, lng) in enumerate(positions):
        t = start_ms + i * step_ms
        states.append(tracker.on_fix(PositionFix(lat, lng, t), now_ms=t))
    return states


# ---------- pure helpers ----------

def test_dynamic_threshold():
    policy = default_tracking_policy()
    assert off_route_threshold(20.0, policy) == 60.0
    assert off_route_threshold(1.0, policy) == 30.0
    assert off_route_threshold(0.0, policy) == 30.0


def test_speed_smoothing_and_non_positive_dt():
    policy = default_tracking_policy()
    prev = PositionFix(37.5, 127.0, 0.0)
    cur = PositionFix(37.5009, 127.0, 10_000.0)  # ~100 m in 10 s

    assert smoothed_speed(0.0, None, cur, policy) == 0.0
    assert smoothed_speed(0.0, prev, cur, policy) == pytest.approx(0.3 * 10.0, rel=0.01)
    assert smoothed_speed(5.0, prev, cur, policy) == pytest.approx(0.7 * 5.0 + 0.3 * 10.0, rel=0.01)

    same_time = PositionFix(37.5009, 127.0, 0.0)
    assert smoothed_speed(4.0, prev, same_time, policy) == 4.0


def test_evaluate_breach_counts_and_confirms():
    policy = default_tracking_policy()
    assert evaluate_breach(0, 40.0, 30.0, policy) == (1, None)
    assert evaluate_breach(1, 40.0, 30.0, policy) == (2, None)
    assert evaluate_breach(2, 40.0, 30.0, policy) == (0, True)
    assert evaluate_breach(2, 10.0, 30.0, policy) == (0, False)


def test_look_ahead_projects_fast_users_forward():
    policy = default_tracking_policy()
    here = Point(37.5, 127.0)

    ahead = look_ahead_origin(here, 10.0, 90.0, policy)
    assert haversine_distance(here, ahead) == pytest.approx(30.0, rel=0.01)
    assert initial_bearing(here, ahead) == pytest.approx(90.0, abs=0.1)
    assert ahead.lng > here.lng

    assert look_ahead_origin(here, 1.0, 90.0, policy) is here
    assert look_ahead_origin(here, 2.0, 90.0, policy) is here


def test_animation_interpolates_and_settles():
    a, b = Point(37.5, 127.0), Point(37.502, 127.004)
    animation = DisplayAnimation(start=a, target=b, started_ms=1000.0, duration_ms=1000.0)

    assert animation.position_at(500.0) == a
    half = animation.position_at(1500.0)
    assert half.lat == pytest.approx(37.501)
    assert half.lng == pytest.approx(127.002)
    assert animation.position_at(2000.0) is b
    assert animation.position_at(9000.0) is b
    assert animation.finished(2000.0)
    assert not animation.finished(1999.0)


def test_policy_validation():
    with pytest.raises(ValueError):
        TrackingPolicy(debounce_count=0).validate()
    with pytest.raises(ValueError):
        TrackingPolicy(speed_smoothing=1.0).validate()


# ---------- transitions ----------

def test_first_fix_sets_display_directly(tracker):
    state = tracker.on_fix(PositionFix(*ON_ROUTE, 0.0), now_ms=0.0)

    assert state.display_position == Point(*ON_ROUTE)
    assert not state.off_route
    assert state.tracking_state is TrackingState.ON_ROUTE
    assert state.debug_metrics["threshold_m"] == 30.0


def test_single_breach_never_reroutes(tracker, requester):
    states = feed(tracker, [ON_ROUTE, OFF_ROUTE, ON_ROUTE])

    assert states[1].tracking_state is TrackingState.OFF_ROUTE_PENDING
    assert states[1].debug_metrics["breaches"] == 1.0
    assert not states[2].off_route
    assert states[2].tracking_state is TrackingState.ON_ROUTE
    assert requester.requests == []


def test_pending_breach_still_targets_the_route(tracker):
    feed(tracker, [ON_ROUTE, OFF_ROUTE])
    matched = tracker.session.projection.point

    assert tracker.session.target_position == matched
    assert matched.lat == pytest.approx(37.5, abs=1e-9)


def test_three_breaches_issue_exactly_one_reroute(tracker, requester):
    states = feed(tracker, [ON_ROUTE, OFF_ROUTE, OFF_ROUTE, OFF_ROUTE])

    assert len(requester.requests) == 1
    assert states[-1].off_route
    assert states[-1].tracking_state is TrackingState.OFF_ROUTE_CONFIRMED
    assert tracker.session.consecutive_breaches == 0
    # the display heads for the raw fix, not the abandoned route
    assert tracker.session.target_position == Point(*OFF_ROUTE)

    request = requester.requests[0]
    assert request.generation == tracker.generation
    assert request.destination == Point(37.5, 127.02)
    assert request.mode is TravelMode.WALKING
    # slow walker: no look-ahead
    assert request.origin == Point(*OFF_ROUTE)

    # two more breaches are not a new confirmation
    feed(tracker, [OFF_ROUTE, OFF_ROUTE], start_ms=240_000.0)
    assert len(requester.requests) == 1
    feed(tracker, [OFF_ROUTE], start_ms=360_000.0)
    assert len(requester.requests) == 2


def test_fast_user_reroute_starts_ahead(requester, east_route):
    tracker = Tracker(requester=requester, clock=lambda: 0.0)
    tracker.start(east_route)

    # heading north at ~20 m/s, about 100 m off the route
    tracker.on_fix(PositionFix(37.4991, 127.005, 0.0), now_ms=0.0)
    for i in range(1, 8):
        lat = 37.4991 + i * 0.00018  # ~20 m per second
        tracker.on_fix(PositionFix(lat, 127.005, i * 1000.0, heading_hint=0.0), now_ms=i * 1000.0)
        if requester.requests:
            break

    assert requester.requests
    request = requester.requests[0]
    fix = tracker.session.raw_position
    assert tracker.session.speed_estimate_mps > 2.0
    assert request.origin.lat > fix.lat
    assert haversine_distance(fix, request.origin) == pytest.approx(
        tracker.session.speed_estimate_mps * 3.0, rel=0.01
    )


def test_display_settles_on_target_after_animation_window(tracker):
    tracker.on_fix(PositionFix(*ON_ROUTE, 0.0), now_ms=0.0)
    tracker.on_fix(PositionFix(37.5, 127.006, 1000.0), now_ms=1000.0)
    target = tracker.session.target_position

    mid = tracker.on_animation_tick(1500.0)
    assert mid.display_position != target
    assert ON_ROUTE[1] < mid.display_position.lng < 127.006

    settled = tracker.on_animation_tick(2000.0)
    assert settled.display_position == target
    assert tracker.on_animation_tick(5000.0).display_position == target


def test_new_fix_restarts_animation_from_current_display(tracker):
    tracker.on_fix(PositionFix(*ON_ROUTE, 0.0), now_ms=0.0)
    tracker.on_fix(PositionFix(37.5, 127.006, 1000.0), now_ms=1000.0)
    displayed = tracker.on_animation_tick(1500.0).display_position

    tracker.on_fix(PositionFix(37.5, 127.007, 1500.0), now_ms=1500.0)

    animation = tracker.session.animation
    assert animation.start == displayed
    assert animation.started_ms == 1500.0


def test_heading_follows_motion_or_hint(tracker):
    tracker.on_fix(PositionFix(*ON_ROUTE, 0.0), now_ms=0.0)
    state = tracker.on_fix(PositionFix(37.5, 127.006, 1000.0), now_ms=1000.0)
    assert state.heading == pytest.approx(90.0, abs=0.5)

    state = tracker.on_fix(PositionFix(37.5, 127.007, 2000.0, heading_hint=93.0), now_ms=2000.0)
    assert state.heading == 93.0


def test_sentinel_fix_is_ignored(tracker):
    tracker.on_fix(PositionFix(*ON_ROUTE, 0.0), now_ms=0.0)
    state = tracker.on_fix(PositionFix(0.0, 0.0, 1000.0), now_ms=1000.0)

    assert state.display_position == Point(*ON_ROUTE)
    assert tracker.session.raw_position == Point(*ON_ROUTE)


def test_on_fix_without_session_raises():
    with pytest.raises(TrackingStateError):
        Tracker().on_fix(PositionFix(*ON_ROUTE, 0.0), now_ms=0.0)


# ---------- rerouting ----------

def confirm_departure(tracker, start_ms=0.0):
    feed(tracker, [OFF_ROUTE, OFF_ROUTE, OFF_ROUTE], start_ms=start_ms)


def test_reroute_result_installs_route_with_approach_segment(tracker, requester):
    confirm_departure(tracker)
    request = requester.requests[0]
    # new route begins ~110 m from the request origin
    new_points = interpolate_linear(Point(37.502, 127.005), Point(37.5, 127.02), 20)

    assert tracker.on_reroute_result(request, candidate_from(new_points))

    session = tracker.session
    assert session.active_route.points[0] == request.origin
    assert session.active_route.points[1:] == new_points
    assert session.active_route.distance_m == pytest.approx(path_length(session.active_route.points))
    assert not session.off_route
    assert session.consecutive_breaches == 0


def test_reroute_close_to_origin_is_not_prefixed(tracker, requester):
    confirm_departure(tracker)
    request = requester.requests[0]
    new_points = interpolate_linear(Point(37.50105, 127.005), Point(37.5, 127.02), 20)  # ~6 m away

    assert tracker.on_reroute_result(request, candidate_from(new_points))
    assert tracker.session.active_route.points == new_points


def test_stale_generation_is_discarded(tracker, requester):
    confirm_departure(tracker)
    confirm_departure(tracker, start_ms=180_000.0)
    older, newer = requester.requests
    assert newer.generation == older.generation + 1

    newer_route = candidate_from(interpolate_linear(Point(*OFF_ROUTE), Point(37.5, 127.02), 10))
    older_route = candidate_from(interpolate_linear(Point(*OFF_ROUTE), Point(37.51, 127.02), 10))

    assert tracker.on_reroute_result(newer, newer_route)
    # G arrives after G+1 was issued (and installed)
    assert not tracker.on_reroute_result(older, older_route)
    assert tracker.session.active_route.route_id == newer_route.route_id


def test_stale_generation_discarded_even_if_it_arrives_first(tracker, requester):
    confirm_departure(tracker)
    confirm_departure(tracker, start_ms=180_000.0)
    older, newer = requester.requests
    original_id = tracker.session.active_route.route_id

    assert not tracker.on_reroute_result(older, candidate_from([Point(*OFF_ROUTE), Point(37.5, 127.02)]))
    assert tracker.session.active_route.route_id == original_id


def test_stop_discards_late_reroutes(tracker, requester):
    confirm_departure(tracker)
    request = requester.requests[0]

    tracker.stop()

    assert not tracker.on_reroute_result(request, candidate_from([Point(*OFF_ROUTE), Point(37.5, 127.02)]))
    assert tracker.display_state() is None
    assert tracker.on_animation_tick(10_000.0) is None


def test_restart_invalidates_previous_session_requests(tracker, requester, east_route):
    confirm_departure(tracker)
    request = requester.requests[0]

    tracker.start(east_route)

    assert not tracker.on_reroute_result(request, candidate_from([Point(*OFF_ROUTE), Point(37.5, 127.02)]))


def test_display_listener_receives_every_commit(requester, east_route):
    seen = []
    tracker = Tracker(requester=requester, clock=lambda: 0.0, on_display=seen.append)
    tracker.start(east_route)

    tracker.on_fix(PositionFix(*ON_ROUTE, 0.0), now_ms=0.0)
    tracker.on_animation_tick(500.0)

    assert len(seen) == 2
    assert seen[-1].active_route_id == east_route.route_id


def test_threaded_requester_routes_and_installs(east_route):
    service = RouteService(FakeRoutingProvider())
    tracker = Tracker.with_route_service(service, clock=lambda: 0.0)
    tracker.start(east_route)

    request = RerouteRequest(
        generation=tracker.generation,
        origin=Point(*OFF_ROUTE),
        destination=Point(37.5, 127.02),
        mode=TravelMode.WALKING,
    )
    future = tracker.requester(request)

    assert future.result(timeout=5) is True
    assert tracker.session.active_route.points[0] == Point(*OFF_ROUTE)
    assert tracker.session.active_route.points[-1] == Point(37.5, 127.02)
    tracker.stop()


def reroute_for(tracker, mode=TravelMode.WALKING):
    return RerouteRequest(
        generation=tracker.generation,
        origin=Point(*OFF_ROUTE),
        destination=Point(37.5, 127.02),
        mode=mode,
    )


def test_transit_session_reroutes_on_foot(east_route):
    tracker = Tracker.with_route_service(RouteService(FakeRoutingProvider()), clock=lambda: 0.0)
    tracker.start(east_route, mode=TravelMode.TRANSIT)

    assert tracker.requester(reroute_for(tracker, TravelMode.TRANSIT)).result(timeout=5) is True

    installed = tracker.session.active_route
    assert installed.mode is TravelMode.WALKING
    assert installed.is_fallback
    assert installed.eta_minutes == pytest.approx(installed.distance_m / 67.0)
    tracker.stop()


def test_stop_shuts_down_the_requester_it_created(east_route):
    tracker = Tracker.with_route_service(RouteService(FakeRoutingProvider()), clock=lambda: 0.0)
    tracker.start(east_route)
    assert tracker.requester(reroute_for(tracker)).result(timeout=5) is True
    assert tracker.requester.running

    tracker.stop()
    assert not tracker.requester.running

    # a new session gets a fresh worker
    tracker.start(east_route)
    assert tracker.requester(reroute_for(tracker)).result(timeout=5) is True
    tracker.stop()


def test_stop_leaves_a_caller_owned_requester_alone(east_route):
    requester = ThreadedRerouteRequester(RouteService(FakeRoutingProvider()))
    tracker = Tracker(requester=requester, clock=lambda: 0.0)
    requester.deliver = tracker.on_reroute_result
    tracker.start(east_route)
    assert requester(reroute_for(tracker)).result(timeout=5) is True

    tracker.stop()

    assert requester.running
    requester.shutdown()
    assert not requester.running


def test_frame_scheduler_ticks_until_stopped():
    ticks = []
    enough = threading.Event()

    def on_tick(now_ms):
        ticks.append(now_ms)
        if len(ticks) >= 3:
            enough.set()

    frames = FrameScheduler(on_tick, rate_hz=200.0)
    frames.start()
    assert enough.wait(timeout=5)
    frames.stop()

    assert not frames.running
    count = len(ticks)
    threading.Event().wait(timeout=0.05)
    assert len(ticks) == count


def test_tracker_frame_loop_start_and_stop(tracker):
    tracker.on_fix(PositionFix(*ON_ROUTE, 0.0), now_ms=0.0)
    tracker.start_frames()
    tracker.stop()
    assert tracker.display_state() is None
