"""
Spatial analysis module for detecting incident hotspots.

Runs a single density-based clustering pass (DBSCAN-like) over the
coordinates of incident records and scores each cluster by size,
severity and recency.
"""

import logging
import math
from collections import deque
from datetime import datetime, timezone
from typing import Any, Optional

import numpy as np
from sklearn.neighbors import BallTree

from streetpaws.core.config import (
    EARTH_RADIUS_KM,
    HOTSPOT_CONFIG,
    KM_PER_DEGREE,
    PRIORITY_WEIGHTS,
    RISK_WEIGHTS,
)
from streetpaws.data.processor import DataProcessor

logger = logging.getLogger(__name__)


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance between two points in km."""
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.asin(math.sqrt(min(1.0, a)))
    return EARTH_RADIUS_KM * c


class HotspotDetector:
    """
    Groups geotagged incidents into hotspots.

    Args:
        min_points: Neighbour count (self included) a record needs to seed
            or extend a cluster.
        eps: Neighbourhood radius in decimal degrees.
        max_distance: Optional cap on the neighbourhood radius, in km.
        now: Reference time for recency scoring. Defaults to the current
            UTC time at detection.
    """

    def __init__(self, min_points: int = HOTSPOT_CONFIG["min_points"],
                 eps: float = HOTSPOT_CONFIG["eps"],
                 max_distance: Optional[float] = None,
                 now: Optional[datetime] = None):
        self.min_points = min_points
        self.eps = eps
        self.max_distance = max_distance
        self.now = now
        self.processor = DataProcessor()

    @property
    def radius_km(self) -> float:
        radius = float(self.eps) * KM_PER_DEGREE
        if self.max_distance is not None:
            radius = min(radius, float(self.max_distance))
        return max(0.0, radius)

    def detect(self, records: Any) -> list[dict]:
        """Return hotspots sorted by descending priority, or [] on bad input."""
        if not isinstance(records, (list, tuple)) or not records:
            logger.warning("No records provided for hotspot detection")
            return []

        try:
            min_points = max(1, int(self.min_points))
            radius_km = self.radius_km
        except (TypeError, ValueError) as e:
            logger.error(
                f"Invalid detection parameters min_points={self.min_points!r}, "
                f"eps={self.eps!r}, max_distance={self.max_distance!r}: {e}"
            )
            return []

        try:
            return self._detect(records, min_points, radius_km)
        except Exception:
            logger.exception(f"Hotspot detection failed for {len(records)} records")
            return []

    def _detect(self, records, min_points: int, radius_km: float) -> list[dict]:
        now = self._reference_time()

        # Keep each original object next to its parsed form; indices into
        # this list are the record identities used during clustering.
        valid = []
        for raw in records:
            parsed = self.processor.parse_record(raw)
            if parsed is not None and parsed.has_coordinates:
                valid.append((raw, parsed))

        logger.info(f"Processing {len(valid)} valid records for hotspot detection")
        if len(valid) < min_points:
            return []

        clusters = self._cluster([parsed for _, parsed in valid], min_points, radius_km)

        hotspots = []
        for members in clusters:
            hotspot = self._score_cluster([valid[i] for i in members], now)
            if hotspot["risk"] > HOTSPOT_CONFIG["min_risk"]:
                hotspots.append(hotspot)

        hotspots.sort(key=lambda h: h["priority"], reverse=True)
        for rank, hotspot in enumerate(hotspots, start=1):
            hotspot["id"] = f"hotspot_{rank}"

        logger.info(f"Detected {len(hotspots)} hotspots")
        return hotspots

    def _cluster(self, points, min_points: int, radius_km: float) -> list[list[int]]:
        """Breadth-first density expansion over record indices."""
        coords = np.radians([[p.latitude, p.longitude] for p in points])
        tree = BallTree(coords, metric="haversine")
        neighborhoods = tree.query_radius(coords, r=radius_km / EARTH_RADIUS_KM)
        neighbors = [sorted(int(i) for i in hood) for hood in neighborhoods]

        visited: set[int] = set()
        clusters = []
        for seed in range(len(points)):
            if seed in visited or len(neighbors[seed]) < min_points:
                continue

            visited.add(seed)
            members = [seed]
            queue = deque(neighbors[seed])
            while queue:
                idx = queue.popleft()
                if idx in visited:
                    continue
                visited.add(idx)
                members.append(idx)
                # only core records propagate the cluster
                if len(neighbors[idx]) >= min_points:
                    queue.extend(neighbors[idx])

            if len(members) >= min_points:
                clusters.append(members)

        return clusters

    def _score_cluster(self, members: list[tuple], now: datetime) -> dict:
        parsed = [p for _, p in members]
        size = len(parsed)

        center_lat = float(np.mean([p.latitude for p in parsed]))
        center_lon = float(np.mean([p.longitude for p in parsed]))
        radius = max(
            haversine_distance(center_lat, center_lon, p.latitude, p.longitude)
            for p in parsed
        )

        severity = sum(1 for p in parsed if p.is_severe) / size
        recency = self._recency(parsed, now)
        risk = self.risk_score(size, severity, recency)
        priority = self.priority_score(size, severity, risk)

        return {
            "id": None,
            "center": {"latitude": center_lat, "longitude": center_lon},
            "size": size,
            "severity": round(severity, 2),
            "risk": round(risk, 2),
            "recency": round(recency, 2),
            "priority": round(priority, 4),
            "radius_km": round(radius, 3),
            "markers": [raw for raw, _ in members],
        }

    @staticmethod
    def _recency(parsed, now: datetime) -> float:
        """1 for brand-new activity, decaying to 0 over the recency window."""
        ages = []
        for p in parsed:
            if p.created_at is None:
                ages.append(0.0)
            else:
                ages.append(max(0.0, (now - p.created_at).total_seconds() / 86400))
        avg_age = sum(ages) / len(ages)
        return min(1.0, max(0.0, 1 - avg_age / HOTSPOT_CONFIG["recency_window_days"]))

    @staticmethod
    def risk_score(size: int, severity: float, recency: float) -> float:
        # size is not normalised here, so risk can exceed 1
        return (
            size * RISK_WEIGHTS["size"]
            + severity * RISK_WEIGHTS["severity"]
            + recency * RISK_WEIGHTS["recency"]
        )

    @staticmethod
    def priority_score(size: int, severity: float, risk: float) -> float:
        return (
            severity * PRIORITY_WEIGHTS["severity"]
            + min(size / HOTSPOT_CONFIG["size_normalizer"], 1) * PRIORITY_WEIGHTS["size"]
            + min(risk, 1.0) * PRIORITY_WEIGHTS["risk"]
        )

    def _reference_time(self) -> datetime:
        if self.now is None:
            return datetime.now(timezone.utc)
        if self.now.tzinfo is None:
            return self.now.replace(tzinfo=timezone.utc)
        return self.now


def detect_hotspots(records: Any, min_points: int = HOTSPOT_CONFIG["min_points"],
                    eps: float = HOTSPOT_CONFIG["eps"],
                    max_distance: Optional[float] = None,
                    now: Optional[datetime] = None) -> list[dict]:
    """Detect hotspots in ``records``; see :class:`HotspotDetector`."""
    return HotspotDetector(min_points, eps, max_distance, now).detect(records)
