"""
Purpose: The live navigation state machine.
What it does:

Turns a stream of raw position fixes into display states, one transition at a time:

on_fix              speed EMA -> map-match -> dynamic threshold -> debounced breach
                    -> (maybe) look-ahead reroute -> heading -> restart animation
on_animation_tick   interpolate the display toward the latest target
on_reroute_result   install a new route unless its generation is stale
stop                cancel animation and invalidate every outstanding reroute

Concurrency:
- fix processing and ticks run under one lock, so a frame never sees half a fix
- reroutes are dispatched and listeners notified after the lock is released
- every reroute carries the generation current at dispatch; only that generation installs

Rule: No routing here. The Tracker asks a RerouteRequester and waits for on_reroute_result.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Callable, Optional

from geo import InvalidCoordinateError, Point, haversine_distance, initial_bearing, path_length, project_onto_polyline, require_valid
from routing import RouteCandidate, RouteService, TravelMode
from .animation import DisplayAnimation
from .lookahead import look_ahead_origin
from .policy import TrackingPolicy, default_tracking_policy
from .reroute import RerouteRequest, RerouteRequester, ThreadedRerouteRequester
from .scheduler import FrameScheduler, monotonic_ms
from .session import DisplayState, NavigationSession, PositionFix
from .state_machine import TrackingStateError, evaluate_breach, off_route_threshold, smoothed_speed

logger = logging.getLogger(__name__)

DisplayListener = Callable[[DisplayState], object]


class Tracker:
    """
    One navigation session at a time.

    Usage:
        tracker = Tracker.with_route_service(RouteService(OSRMClient()))
        tracker.start(candidate)
        state = tracker.on_fix(PositionFix(lat, lng, timestamp_ms))
    """

    def __init__(
            self,
            requester: Optional[RerouteRequester] = None,
            policy: Optional[TrackingPolicy] = None,
            clock: Callable[[], float] = monotonic_ms,
            on_display: Optional[DisplayListener] = None,
    ):
        self.requester = requester
        self.policy = policy or default_tracking_policy()
        self.clock = clock
        self.on_display = on_display

        self._lock = threading.Lock()
        self._session: Optional[NavigationSession] = None
        self._generation = 0
        self._frames: Optional[FrameScheduler] = None
        self._owned_requester: Optional[ThreadedRerouteRequester] = None

    @classmethod
    def with_route_service(cls, route_service: RouteService, policy: Optional[TrackingPolicy] = None, **kwargs) -> Tracker:
        """
        Tracker whose reroutes run on a background ThreadedRerouteRequester.
        The tracker owns that requester and shuts its worker down on stop().
        """
        requester = ThreadedRerouteRequester(route_service)
        tracker = cls(requester=requester, policy=policy, **kwargs)
        requester.deliver = tracker.on_reroute_result
        tracker._owned_requester = requester
        return tracker

    @property
    def session(self) -> Optional[NavigationSession]:
        return self._session

    @property
    def generation(self) -> int:
        return self._generation

    # ---------- lifecycle ----------

    def start(self, route: RouteCandidate, destination: Optional[Point] = None, mode: Optional[TravelMode] = None) -> None:
        if not route.points:
            raise ValueError("Cannot track an empty route")

        with self._lock:
            self._generation += 1
            self._session = NavigationSession(
                active_route=route,
                destination=destination or route.goal,
                mode=mode or route.mode,
                reroute_generation=self._generation,
            )
        logger.info(f"Tracking started on route {route.route_id} ({route.kind.value}, {len(route.points)} points)")

    def start_frames(self) -> None:
        """Drive on_animation_tick from a background FrameScheduler."""
        if self._frames is None:
            self._frames = FrameScheduler(self.on_animation_tick, rate_hz=self.policy.frame_rate_hz, clock=self.clock)
        self._frames.start()

    def stop(self) -> None:
        """
        End the session. A requester passed in by the caller stays the caller's to shut down.
        """
        if self._frames is not None:
            self._frames.stop()
            self._frames = None
        if self._owned_requester is not None:
            self._owned_requester.shutdown()

        with self._lock:
            self._generation += 1
            if self._session is not None:
                self._session.animation = None
                self._session.active = False
            self._session = None
        logger.info("Tracking stopped")

    def display_state(self) -> Optional[DisplayState]:
        with self._lock:
            return self._session.snapshot() if self._session else None

    # ---------- transitions ----------

    def on_fix(self, fix: PositionFix, now_ms: Optional[float] = None) -> DisplayState:
        """
        Process one raw fix and commit its outcome atomically.

        Raises:
            TrackingStateError: no session is active.
        """
        now = self.clock() if now_ms is None else now_ms
        request: Optional[RerouteRequest] = None

        with self._lock:
            s = self._session
            if s is None:
                raise TrackingStateError("on_fix called without an active session")

            cur = fix.point
            try:
                require_valid(cur, "fix")
            except InvalidCoordinateError as e:
                logger.warning(f"Ignoring fix: {e}")
                return s.snapshot()

            # 1. speed
            s.speed_estimate_mps = smoothed_speed(s.speed_estimate_mps, s.last_fix, fix, self.policy)
            s.last_fix = fix
            s.raw_position = cur

            # 2. map-match
            s.projection = project_onto_polyline(cur, s.active_route.points)
            distance = s.projection.distance_m

            # 3. threshold
            threshold = off_route_threshold(s.speed_estimate_mps, self.policy)

            # 4. breach
            previous_heading = s.heading
            breaches, off_route = evaluate_breach(s.consecutive_breaches, distance, threshold, self.policy)
            s.consecutive_breaches = breaches
            confirmed = off_route is True
            if off_route is not None:
                s.off_route = off_route

            if confirmed:
                logger.info(f"Off-route confirmed: {distance:.1f} m > {threshold:.1f} m")
            elif breaches:
                logger.debug(f"Off-route warning {breaches}/{self.policy.debounce_count}: {distance:.1f} m > {threshold:.1f} m")

            # raw position while a confirmed departure waits for its new route
            if s.off_route and distance > threshold:
                target = cur
            else:
                target = s.projection.point

            # 5. look-ahead reroute
            if confirmed:
                self._generation += 1
                s.reroute_generation = self._generation
                origin = look_ahead_origin(cur, s.speed_estimate_mps, previous_heading, self.policy)
                request = RerouteRequest(
                    generation=self._generation,
                    origin=origin,
                    destination=s.destination,
                    mode=s.mode,
                )

            # 6. heading
            if s.display_position is None:
                s.display_position = cur
            elif s.animation is not None:
                s.display_position = s.animation.position_at(now)

            if fix.heading_hint is not None:
                s.heading = fix.heading_hint % 360.0
            elif haversine_distance(s.display_position, target) > 0:
                s.heading = initial_bearing(s.display_position, target)

            # 7. animate
            s.target_position = target
            s.animation = DisplayAnimation(
                start=s.display_position,
                target=target,
                started_ms=now,
                duration_ms=self.policy.animation_duration_ms,
            )
            s.last_metrics = {
                "distance_m": distance,
                "threshold_m": threshold,
                "speed_mps": s.speed_estimate_mps,
                "breaches": float(s.consecutive_breaches),
            }
            state = s.snapshot()

        if request is not None:
            self._dispatch(request)
        self._notify(state)
        return state

    def on_animation_tick(self, now_ms: float) -> Optional[DisplayState]:
        with self._lock:
            s = self._session
            if s is None:
                return None
            if s.animation is not None:
                s.display_position = s.animation.position_at(now_ms)
                if s.animation.finished(now_ms):
                    s.animation = None
            state = s.snapshot()

        self._notify(state)
        return state

    def on_reroute_result(self, request: RerouteRequest, candidate: RouteCandidate) -> bool:
        """
        Install a reroute. Returns False if it was discarded as stale.
        """
        with self._lock:
            s = self._session
            if s is None or not s.active or request.generation != self._generation:
                logger.warning(
                    f"Discarding stale reroute (generation {request.generation}, current {self._generation})"
                )
                return False

            points = list(candidate.points)
            if not points:
                logger.warning(f"Discarding empty reroute (generation {request.generation})")
                return False

            if haversine_distance(request.origin, points[0]) > self.policy.approach_gap_m:
                points.insert(0, request.origin)

            s.active_route = replace(candidate, points=points, distance_m=path_length(points))
            s.off_route = False
            s.consecutive_breaches = 0
            route_id = s.active_route.route_id

        logger.info(f"Reroute installed: route {route_id} (generation {request.generation})")
        return True

    # ---------- helpers ----------

    def _dispatch(self, request: RerouteRequest) -> None:
        if self.requester is None:
            logger.warning(f"No reroute requester; generation {request.generation} not sent")
            return
        self.requester(request)

    def _notify(self, state: DisplayState) -> None:
        if self.on_display is not None:
            self.on_display(state)
