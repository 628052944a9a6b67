"""Greedy distance-threshold clustering of trip locations."""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from travlr.domain.constants import DEFAULT_CLUSTER_RADIUS_KM
from travlr.domain.models import (
    AnchorLocation,
    CanonicalRecommendation,
    ClusterMember,
    Coordinates,
    GeoCluster,
)
from travlr.planner.distance import haversine_km


def as_cluster_member(point: Any, kind: str = "") -> Optional[ClusterMember]:
    """Coerce a location-bearing object into a member; ``None`` without coordinates."""
    if isinstance(point, ClusterMember):
        return point
    if isinstance(point, CanonicalRecommendation):
        if point.location.coordinates is None:
            return None
        return ClusterMember(
            name=point.name,
            coordinates=point.location.coordinates,
            kind=kind or point.category.value,
            address=point.location.address,
        )
    if isinstance(point, AnchorLocation):
        if point.coordinates is None:
            return None
        return ClusterMember(
            name=point.name,
            coordinates=point.coordinates,
            kind=kind or "anchor",
            address=point.address,
        )
    return None


def cluster_centroid(points: Sequence[Coordinates]) -> Coordinates:
    if not points:
        raise ValueError("centroid of an empty point set")
    lat = sum(p.lat for p in points) / len(points)
    lng = sum(p.lng for p in points) / len(points)
    return Coordinates(lat=lat, lng=lng)


def cluster_radius(center: Coordinates, points: Sequence[Coordinates]) -> float:
    if len(points) <= 1:
        return 0.0
    return max(haversine_km(center, p) for p in points)


def cluster_locations(
    points: Iterable[Any],
    radius_km: float = DEFAULT_CLUSTER_RADIUS_KM,
) -> list[GeoCluster]:
    """Single-pass greedy clustering.

    Each unclustered point opens a cluster; every later unclustered point whose
    distance to the running centroid is within ``radius_km`` joins it. Points
    without coordinates are ignored.
    """
    members = [m for m in (as_cluster_member(p) for p in points) if m is not None]
    taken = [False] * len(members)
    clusters: list[GeoCluster] = []

    for i, seed in enumerate(members):
        if taken[i]:
            continue
        taken[i] = True
        group = [seed]
        center = seed.coordinates
        for j in range(i + 1, len(members)):
            if taken[j]:
                continue
            if haversine_km(center, members[j].coordinates) <= radius_km:
                taken[j] = True
                group.append(members[j])
                center = cluster_centroid([m.coordinates for m in group])

        coords = [m.coordinates for m in group]
        clusters.append(
            GeoCluster(
                id=f"cluster_{len(clusters) + 1}",
                center=center,
                radius_km=cluster_radius(center, coords),
                members=tuple(group),
            )
        )
    return clusters


def geographic_coverage(clusters: Sequence[GeoCluster], location_count: int) -> int:
    """Spread efficiency in percent: fewer clusters per location scores higher."""
    if not clusters or location_count <= 0:
        return 0
    efficiency = max(0.0, 1 - (len(clusters) - 1) / location_count)
    return int(round(efficiency * 100))


def cluster_for(point: Any, clusters: Sequence[GeoCluster]) -> Optional[GeoCluster]:
    member = as_cluster_member(point)
    if member is None:
        return None
    for cluster in clusters:
        for candidate in cluster.members:
            if candidate.name == member.name and candidate.coordinates == member.coordinates:
                return cluster
    return None


__all__ = [
    "as_cluster_member",
    "cluster_centroid",
    "cluster_for",
    "cluster_locations",
    "cluster_radius",
    "geographic_coverage",
]
