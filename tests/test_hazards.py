import pytest

from geo import Point, interpolate_linear
from hazards import (
    CongestionZone,
    HazardSnapshot,
    Obstacle,
    Severity,
    anchor_attempts,
    detour_anchor,
    first_conflict,
)


@pytest.fixture
def straight_path():
    # ~1.4 km diagonal, 51 points
    return interpolate_linear(Point(37.50, 127.00), Point(37.51, 127.01), 50)


def test_no_hazards_no_conflict(straight_path):
    assert first_conflict(straight_path, [], [], 100.0) is None


def test_obstacle_on_path_is_found(straight_path):
    obstacle = Obstacle(Point(37.505, 127.005), influence_radius_m=100.0)
    conflict = first_conflict(straight_path, [obstacle], [], 60.0)

    assert conflict is not None
    assert conflict.hazard == obstacle
    assert conflict.is_obstacle
    assert conflict.center == obstacle.point
    assert conflict.sample_index % 5 == 0


def test_far_obstacle_is_ignored(straight_path):
    far = Obstacle(Point(37.52, 126.99), influence_radius_m=100.0)
    assert first_conflict(straight_path, [far], [], 100.0) is None


def test_obstacle_influence_radius_beats_small_detection_radius(straight_path):
    # ~125 m from the nearest sample: outside a 60 m detection radius but inside a 300 m influence
    wide = Obstacle(Point(37.5068, 127.005), influence_radius_m=300.0)
    narrow = Obstacle(Point(37.5068, 127.005), influence_radius_m=50.0)
    assert first_conflict(straight_path, [wide], [], 60.0) is not None
    assert first_conflict(straight_path, [narrow], [], 60.0) is None


def test_zone_uses_detection_plus_zone_radius(straight_path):
    # ~120 m from the nearest sample
    zone = CongestionZone(Point(37.5063, 127.0047), radius_m=80.0)
    assert first_conflict(straight_path, [], [zone], 100.0) is not None
    assert first_conflict(straight_path, [], [zone], 10.0) is None


def test_earliest_hazard_along_path_wins(straight_path):
    late = Obstacle(Point(37.509, 127.009), influence_radius_m=50.0)
    early_zone = CongestionZone(Point(37.501, 127.001), radius_m=50.0)

    conflict = first_conflict(straight_path, [late], [early_zone], 50.0)
    assert conflict.hazard == early_zone
    assert not conflict.is_obstacle


def test_final_point_is_always_sampled():
    path = interpolate_linear(Point(37.50, 127.00), Point(37.50, 127.006), 6)  # 7 points, stride 5
    at_goal = Obstacle(Point(37.50, 127.006), influence_radius_m=10.0)

    conflict = first_conflict(path, [at_goal], [], 10.0, stride=5)
    assert conflict is not None
    assert conflict.sample_index == len(path) - 1


def test_detour_anchor_rotates_quadrants():
    center = Point(37.5, 127.0)
    anchors = [detour_anchor(center, delta_deg=0.003, attempt=i) for i in range(anchor_attempts())]

    expected = [(37.503, 127.003), (37.503, 126.997), (37.497, 127.003), (37.497, 126.997)]
    for anchor, (lat, lng) in zip(anchors, expected):
        assert anchor.lat == pytest.approx(lat)
        assert anchor.lng == pytest.approx(lng)
    assert len(set(anchors)) == 4
    # wraps around
    assert detour_anchor(center, 0.003, attempt=4) == anchors[0]


@pytest.mark.parametrize("percent, expected", [
    (20, Severity.LIGHT),
    (51, Severity.MODERATE),
    (75, Severity.MODERATE),
    (76, Severity.HEAVY),
    (100, Severity.HEAVY),
    (130, Severity.SEVERE),
])
def test_severity_from_occupancy(percent, expected):
    assert Severity.from_occupancy(percent) is expected


def test_zone_from_severity_uses_default_radius():
    zone = CongestionZone.from_severity(Point(37.5, 127.0), Severity.SEVERE)
    assert zone.radius_m == 300.0
    assert Severity.LIGHT < Severity.SEVERE


def test_snapshot_views():
    obstacle = Obstacle(Point(37.5, 127.0))
    zone = CongestionZone(Point(37.6, 127.1), radius_m=100.0)
    snapshot = HazardSnapshot.of([obstacle], [zone])

    assert snapshot.obstacles == (obstacle,)
    assert snapshot.obstacles_only().congestion_zones == ()
    assert snapshot.congestion_only().obstacles == ()
    assert not snapshot.is_empty
    assert HazardSnapshot().is_empty
