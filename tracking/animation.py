from dataclasses import dataclass

from geo import Point


@dataclass(frozen=True)
class DisplayAnimation:
    """
    Linear lat/lng blend from start to target over duration_ms.

    position_at() is pure; at or after the end of the window it returns
    target itself, so the display settles with no residual drift.
    """
    start: Point
    target: Point
    started_ms: float
    duration_ms: float

    def progress_at(self, now_ms: float) -> float:
        elapsed = now_ms - self.started_ms
        if elapsed <= 0:
            return 0.0
        return min(elapsed / self.duration_ms, 1.0)

    def finished(self, now_ms: float) -> bool:
        return self.progress_at(now_ms) >= 1.0

    def position_at(self, now_ms: float) -> Point:
        t = self.progress_at(now_ms)
        if t >= 1.0:
            return self.target
        return Point(
            lat=self.start.lat + (self.target.lat - self.start.lat) * t,
            lng=self.start.lng + (self.target.lng - self.start.lng) * t,
        )
