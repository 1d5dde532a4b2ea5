"""
Analytics report generator that runs the full pipeline once and assembles
the predictive and prescriptive dashboard payload.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError

from streetpaws.analysis.spatial import detect_hotspots
from streetpaws.analysis.temporal import analyze_trend, forecast, monthly_counts
from streetpaws.core.config import HOTSPOT_CONFIG
from streetpaws.models.recommender import generate_strategic_recommendations
from streetpaws.models.resource_allocator import ResourceAllocator, to_resource_pool

logger = logging.getLogger(__name__)


class ReportGenerator:
    """Generates the combined analytics report for the admin dashboard."""

    def __init__(self, records: list[dict], now: Optional[datetime] = None):
        self.records = list(records or [])
        self.now = now

    def generate_analytics_report(self, pool: Any = None, year: Optional[int] = None,
                                  min_points: int = HOTSPOT_CONFIG["min_points"],
                                  eps: float = HOTSPOT_CONFIG["eps"]) -> dict:
        """
        Run aggregation, forecasting, hotspot detection, allocation and
        strategy in one pass.

        Hotspots are reported without their member records; ``marker_ids``
        lists the ids of the members instead.
        """
        now = self.now or datetime.now(timezone.utc)
        try:
            resources = to_resource_pool(pool)
        except (TypeError, ValidationError) as e:
            logger.error(f"Invalid resource pool {pool!r}: {e}")
            resources = None

        series = monthly_counts(self.records, year=year, now=now)
        forecast_points = forecast(series, now=now)
        trend = analyze_trend(series)

        hotspots = detect_hotspots(self.records, min_points=min_points, eps=eps, now=now)
        if resources is None:
            remaining, allocations = None, []
            strategic = generate_strategic_recommendations([])
        else:
            remaining, allocations = ResourceAllocator().run(hotspots, resources)
            strategic = generate_strategic_recommendations(hotspots, resources)

        report = {
            "report_type": "ANALYTICS",
            "generated_at": now.isoformat(),
            "year": year or now.year,
            "record_count": len(self.records),
            "executive_summary": self._executive_summary(hotspots, trend, forecast_points, strategic),
            "predictive": {
                "monthly_series": series,
                "forecast": forecast_points,
                "trend": trend,
                "hotspots": [self._strip_markers(h) for h in hotspots],
            },
            "prescriptive": {
                "available_resources": resources.as_dict() if resources is not None else None,
                "allocations": allocations,
                "remaining_pool": remaining.as_dict() if remaining is not None else None,
                "strategic": strategic,
            },
        }

        logger.info(
            f"Analytics report: {len(self.records)} records, {len(hotspots)} hotspots, "
            f"{len(allocations)} allocations"
        )
        return report

    @staticmethod
    def _strip_markers(hotspot: dict) -> dict:
        summary = {k: v for k, v in hotspot.items() if k != "markers"}
        summary["marker_ids"] = [
            m.get("id") if isinstance(m, dict) else getattr(m, "id", None)
            for m in hotspot.get("markers", [])
        ]
        return summary

    @staticmethod
    def _executive_summary(hotspots: list[dict], trend: dict,
                           forecast_points: list[dict], strategic: dict) -> list[str]:
        lines = []

        if hotspots:
            top = hotspots[0]
            lines.append(
                f"{len(hotspots)} hotspot(s) detected; highest priority {top['id']} "
                f"with {top['size']} reports (severity {top['severity']:.0%})."
            )
        else:
            lines.append("No hotspots detected in the current data.")

        if trend.get("trend") == "insufficient_data":
            lines.append("Not enough monthly history to establish a trend.")
        else:
            lines.append(
                f"Monthly reports are {trend['trend']} "
                f"(slope {trend['slope']}, confidence {trend['confidence']}%)."
            )

        if forecast_points:
            total = sum(p["predicted"] for p in forecast_points)
            lines.append(
                f"About {total} reports expected over the next {len(forecast_points)} months."
            )

        critical = strategic["summary"].get("critical_hotspots", 0)
        if critical:
            lines.append(f"{critical} critical hotspot(s) need immediate response.")

        return lines
