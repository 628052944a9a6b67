from __future__ import annotations

from travlr.domain.models import AnchorLocation, ClusterMember, Coordinates
from travlr.planner.cluster import (
    cluster_centroid,
    cluster_for,
    cluster_locations,
    geographic_coverage,
)
from travlr.planner.distance import haversine_km

_KM_LAT = 1 / 111.0
HOTEL = Coordinates(lat=48.8566, lng=2.3522)


def _north(name: str, km: float) -> ClusterMember:
    return ClusterMember(name=name, coordinates=Coordinates(lat=HOTEL.lat + km * _KM_LAT, lng=HOTEL.lng))


def test_far_activity_gets_its_own_cluster():
    anchor = AnchorLocation(name="Hotel", coordinates=HOTEL)
    points = [anchor, _north("A", 1.0), _north("B", 1.5), _north("Far", 8.0)]

    clusters = cluster_locations(points, radius_km=2.0)

    assert [c.id for c in clusters] == ["cluster_1", "cluster_2"]
    assert [m.name for m in clusters[0].members] == ["Hotel", "A", "B"]
    assert [m.name for m in clusters[1].members] == ["Far"]
    assert geographic_coverage(clusters, len(points)) == 75


def test_every_member_within_cluster_radius():
    points = [_north(f"p{i}", i * 0.7) for i in range(8)]
    for cluster in cluster_locations(points, radius_km=2.0):
        for member in cluster.members:
            assert haversine_km(cluster.center, member.coordinates) <= cluster.radius_km + 1e-9


def test_single_point_cluster_has_zero_radius():
    clusters = cluster_locations([_north("solo", 0.0)])
    assert len(clusters) == 1
    assert clusters[0].radius_km == 0.0


def test_points_without_coordinates_are_ignored():
    clusters = cluster_locations([AnchorLocation(name="nowhere"), _north("A", 0.0), object()])
    assert len(clusters) == 1


def test_coverage_edge_cases():
    assert geographic_coverage([], 4) == 0
    clusters = cluster_locations([_north("A", 0.0)])
    assert geographic_coverage(clusters, 0) == 0
    assert geographic_coverage(clusters, 1) == 100


def test_centroid_is_mean_of_points():
    center = cluster_centroid([Coordinates(lat=0, lng=0), Coordinates(lat=2, lng=4)])
    assert center == Coordinates(lat=1, lng=2)


def test_cluster_for_finds_owner():
    a, far = _north("A", 0.0), _north("Far", 9.0)
    clusters = cluster_locations([a, far])
    assert cluster_for(far, clusters).id == "cluster_2"
    assert cluster_for(_north("Other", 3.0), clusters) is None
