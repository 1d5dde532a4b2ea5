"""
Portfolio-level strategic recommendations derived from all hotspots and
the full (undecremented) resource pool.
"""

import logging
import math
from typing import Any

from pydantic import ValidationError

from streetpaws.analysis.temporal import round_half_up
from streetpaws.core.config import STRATEGY_CONFIG
from streetpaws.models.resource_allocator import to_resource_pool

logger = logging.getLogger(__name__)


class StrategicRecommender:
    """
    Applies independent threshold rules to hotspot aggregates:
    - critical hotspots present
    - staffing shortfall
    - funding shortfall
    - high average severity
    - many hotspots to coordinate
    """

    def recommend(self, hotspots: Any, pool: Any = None) -> dict:
        if not isinstance(hotspots, (list, tuple)) or not hotspots:
            return self._empty_result()

        try:
            resources = to_resource_pool(pool)
        except (TypeError, ValidationError) as e:
            logger.error(f"Invalid resource pool {pool!r}: {e}")
            return self._empty_result()

        try:
            summary = self.summarize(hotspots, resources)
            recommendations = self._apply_rules(summary, resources, self.mean_severity(hotspots))
        except Exception:
            logger.exception(f"Strategic recommendations failed for {len(hotspots)} hotspots")
            return self._empty_result()

        logger.info(
            f"Generated {len(recommendations)} strategic recommendations "
            f"for {summary['total_hotspots']} hotspots"
        )
        return {"recommendations": recommendations, "summary": summary}

    @staticmethod
    def summarize(hotspots: list[dict], resources) -> dict:
        cfg = STRATEGY_CONFIG
        total = len(hotspots)
        total_incidents = sum(h.get("size", 0) for h in hotspots)
        capacity = resources.volunteers * cfg["incidents_per_volunteer"]

        return {
            "total_hotspots": total,
            "critical_hotspots": sum(1 for h in hotspots if h.get("priority", 0) > cfg["critical_priority"]),
            "high_priority_hotspots": sum(1 for h in hotspots if h.get("priority", 0) > cfg["high_priority"]),
            "total_incidents": int(total_incidents),
            "avg_severity": round(StrategicRecommender.mean_severity(hotspots), 2),
            "resource_utilization": (
                round_half_up(total_incidents / capacity * 100) if capacity > 0 else 0
            ),
        }

    @staticmethod
    def mean_severity(hotspots: list[dict]) -> float:
        return sum(h.get("severity", 0) for h in hotspots) / len(hotspots)

    @staticmethod
    def _apply_rules(summary: dict, resources, avg_severity: float) -> list[dict]:
        cfg = STRATEGY_CONFIG
        recommendations = []
        total_incidents = summary["total_incidents"]
        volunteers = resources.volunteers
        budget = resources.budget

        if summary["critical_hotspots"] > 0:
            recommendations.append({
                "type": "Resource Allocation",
                "priority": "Critical",
                "recommendation": (
                    f"Focus {cfg['critical_resource_share']}% of resources on "
                    f"{summary['critical_hotspots']} critical hotspots"
                ),
                "rationale": "Critical hotspots require immediate attention to prevent escalation",
                "timeframe": "Immediate",
            })

        required_staff = math.ceil(total_incidents / cfg["incidents_per_volunteer"])
        if required_staff > volunteers:
            shortfall = required_staff - volunteers
            recommendations.append({
                "type": "Staffing",
                "priority": "High",
                "recommendation": f"Recruit {shortfall:g} additional volunteers",
                "rationale": (
                    f"Current staff can handle {volunteers * cfg['incidents_per_volunteer']:g} "
                    f"reports, but {total_incidents} reports detected"
                ),
                "timeframe": "2-4 weeks",
                "shortfall": shortfall,
            })

        estimated_budget = total_incidents * cfg["budget_per_incident"]
        if estimated_budget > budget:
            shortfall = estimated_budget - budget
            recommendations.append({
                "type": "Budget",
                "priority": "High",
                "recommendation": f"Seek additional funding of {shortfall:,.0f}",
                "rationale": "Current budget insufficient for optimal response",
                "timeframe": "1-2 months",
                "shortfall": shortfall,
            })

        # raw mean, not the rounded summary value
        if avg_severity > cfg["emergency_severity"]:
            recommendations.append({
                "type": "Operations",
                "priority": "High",
                "recommendation": "Implement emergency response protocol",
                "rationale": "High average severity indicates need for rapid response procedures",
                "timeframe": "1 week",
            })

        if summary["total_hotspots"] > cfg["zone_management_hotspots"]:
            recommendations.append({
                "type": "Operations",
                "priority": "Medium",
                "recommendation": "Establish zone-based management system",
                "rationale": "Large number of hotspots requires organized management approach",
                "timeframe": "2-3 weeks",
            })

        return recommendations

    @staticmethod
    def _empty_result() -> dict:
        return {
            "recommendations": [],
            "summary": {
                "total_hotspots": 0,
                "critical_hotspots": 0,
                "high_priority_hotspots": 0,
                "total_incidents": 0,
                "avg_severity": 0.0,
                "resource_utilization": 0,
            },
        }


def generate_strategic_recommendations(hotspots: Any, pool: Any = None) -> dict:
    """Strategic recommendations and summary; see :class:`StrategicRecommender`."""
    return StrategicRecommender().recommend(hotspots, pool)
