"""
Purpose: Reroute requests and the background requester that serves them.
What it does:
- RerouteRequest carries the generation current at dispatch time
- ThreadedRerouteRequester runs RouteService off the fix path (one worker)
  and hands the result back to the tracker, which decides whether it is stale

Rule: The requester never touches the session; only Tracker.on_reroute_result does.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional

from geo import Point
from routing import RouteCandidate, RouteService, TravelMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RerouteRequest:
    generation: int
    origin: Point
    destination: Point
    mode: TravelMode


RerouteRequester = Callable[[RerouteRequest], object]
RerouteDelivery = Callable[[RerouteRequest, RouteCandidate], bool]


class ThreadedRerouteRequester:
    """
    Non-blocking reroute queries on a single background worker.
    """

    def __init__(self, route_service: RouteService, deliver: Optional[RerouteDelivery] = None):
        self.route_service = route_service
        self.deliver = deliver
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()

    def __call__(self, request: RerouteRequest) -> Future:
        # the worker is (re)created on demand, so a requester survives shutdown()
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="reroute")
            future = self._executor.submit(self._run, request)
        future.add_done_callback(self._log_failure)
        return future

    def _run(self, request: RerouteRequest) -> bool:
        candidate = self.route_service.route_candidate(request.origin, request.destination, request.mode)
        if self.deliver is None:
            logger.warning(f"Reroute generation {request.generation} computed but nothing to deliver it to")
            return False
        return self.deliver(request, candidate)

    @staticmethod
    def _log_failure(future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Reroute failed: {error}")

    @property
    def running(self) -> bool:
        return self._executor is not None

    def shutdown(self) -> None:
        """Shutdown background executor. Queries already running still deliver."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            logger.info("Shutting down reroute requester...")
            executor.shutdown(wait=False)
