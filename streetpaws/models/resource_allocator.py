"""
Greedy resource allocation across ranked hotspots.

Hotspots are served strictly in descending priority. The pool is an
immutable value folded through the ranked list, so each call works on its
own copy and earlier grants are never revisited.
"""

import logging
import math
from functools import reduce
from typing import Any, Optional

from pydantic import ValidationError

from streetpaws.core.config import ALLOCATION_CONFIG, DEFAULT_RESOURCE_POOL, PRIORITY_LEVELS
from streetpaws.data.schemas import ResourcePool

logger = logging.getLogger(__name__)

LIMITED_RESOURCES_NOTE = "Limited resources available"


def priority_level(priority: float) -> str:
    """Map a 0-1 priority score to its label."""
    for label, threshold in PRIORITY_LEVELS:
        if priority > threshold:
            return label
    return "Low"


def to_resource_pool(pool: Any) -> ResourcePool:
    """Build a pool from a ResourcePool, a mapping or None (configured defaults)."""
    if isinstance(pool, ResourcePool):
        return pool
    if pool is None:
        return ResourcePool(**DEFAULT_RESOURCE_POOL)
    if isinstance(pool, dict):
        values = {**DEFAULT_RESOURCE_POOL, **{k: v for k, v in pool.items() if v is not None}}
        return ResourcePool.model_validate(values)
    raise TypeError(f"Unsupported resource pool type: {type(pool).__name__}")


class ResourceAllocator:
    """
    Plans field resources for hotspots, highest priority first.

    The running pool is threaded through ``functools.reduce`` as part of
    the accumulator; nothing is stored on the instance between calls.
    """

    def allocate(self, hotspots: Any, pool: Any = None) -> list[dict]:
        """Return one allocation plan per hotspot, or [] on bad input."""
        _, allocations = self.run(hotspots, pool)
        return allocations

    def run(self, hotspots: Any, pool: Any = None) -> tuple[Optional[ResourcePool], list[dict]]:
        """Fold the ranked hotspots, returning ``(remaining_pool, allocations)``."""
        try:
            initial = to_resource_pool(pool)
        except (TypeError, ValidationError) as e:
            logger.error(f"Invalid resource pool {pool!r}: {e}")
            return None, []

        if not isinstance(hotspots, (list, tuple)) or not hotspots:
            logger.warning("No hotspots provided for resource allocation")
            return initial, []

        try:
            ranked = sorted(
                (h for h in hotspots if isinstance(h, dict)),
                key=lambda h: h.get("priority", 0),
                reverse=True,
            )
            remaining, allocations = reduce(self._step, ranked, (initial, []))
        except Exception:
            logger.exception(f"Resource allocation failed for {len(hotspots)} hotspots")
            return None, []

        logger.info(f"Generated {len(allocations)} resource allocation recommendations")
        return remaining, allocations

    def _step(self, state: tuple[ResourcePool, list[dict]], hotspot: dict):
        pool, allocations = state
        required = self.required_resources(hotspot)

        if pool.covers(required):
            granted = required
            plan = self._full_plan(hotspot, required)
        else:
            granted = ResourcePool(
                volunteers=min(1, pool.volunteers),
                budget=min(1000, pool.budget),
                vehicles=0,
                equipment=min(1, pool.equipment),
            )
            plan = self._limited_plan()

        allocation = {
            "id": f"rec_{len(allocations) + 1}",
            "hotspot_id": hotspot.get("id"),
            "zone": hotspot.get("center"),
            "priority": hotspot.get("priority", 0),
            "priority_level": priority_level(hotspot.get("priority", 0)),
            "resource_allocation": granted.as_dict(),
            "required_resources": required.as_dict(),
            **plan,
        }
        return pool.minus(granted), allocations + [allocation]

    @staticmethod
    def required_resources(hotspot: dict) -> ResourcePool:
        """Resources a hotspot needs, scaled up by severity (and risk for budget)."""
        cfg = ALLOCATION_CONFIG
        size = hotspot.get("size", 0)
        severity = hotspot.get("severity", 0)
        risk = hotspot.get("risk", 0)

        base_volunteers = min(cfg["max_volunteers"],
                              max(cfg["min_volunteers"], math.ceil(size * cfg["volunteers_per_incident"])))
        base_budget = min(cfg["max_budget"], max(cfg["min_budget"], size * cfg["budget_per_incident"]))
        base_vehicles = min(cfg["max_vehicles"], math.ceil(size / cfg["incidents_per_vehicle"]))
        base_equipment = min(cfg["max_equipment"], math.ceil(size / cfg["incidents_per_equipment"]))

        severity_multiplier = 1 + severity * cfg["severity_multiplier"]
        risk_multiplier = 1 + risk * cfg["risk_budget_multiplier"]

        return ResourcePool(
            volunteers=math.ceil(base_volunteers * severity_multiplier),
            budget=math.ceil(base_budget * severity_multiplier * risk_multiplier),
            vehicles=math.ceil(base_vehicles * severity_multiplier),
            equipment=math.ceil(base_equipment * severity_multiplier),
        )

    def _full_plan(self, hotspot: dict, resources: ResourcePool) -> dict:
        return {
            "recommended_actions": self.action_plan(hotspot),
            "expected_impact": self.expected_impact(hotspot, resources),
            "timeline": self.timeline(hotspot),
            "cost_benefit": self.cost_benefit(hotspot, resources),
            "success_probability": round(self.success_probability(hotspot, resources), 4),
        }

    def _limited_plan(self) -> dict:
        return {
            "recommended_actions": self.basic_action_plan(),
            "expected_impact": "Limited",
            "timeline": "Extended",
            "cost_benefit": "Low",
            "success_probability": ALLOCATION_CONFIG["limited_success_probability"],
            "note": LIMITED_RESOURCES_NOTE,
        }

    @staticmethod
    def action_plan(hotspot: dict) -> list[dict]:
        """Tiered actions: severity-driven first, then size-driven, then standard."""
        severity = hotspot.get("severity", 0)
        size = hotspot.get("size", 0)
        actions = []

        if severity > 0.8:
            actions.append({
                "action": "Emergency Response",
                "priority": "Critical",
                "description": "Deploy emergency rescue team immediately",
                "timeframe": "0-2 hours",
                "resources": "2 volunteers, 1 vehicle, emergency equipment",
            })
        if severity > 0.6:
            actions.append({
                "action": "Intensive Patrol",
                "priority": "High",
                "description": "Increase patrol frequency to 3x daily",
                "timeframe": "1-3 days",
                "resources": "3 volunteers, 1 vehicle",
            })
        if size > 15:
            actions.append({
                "action": "Mass Sterilization Campaign",
                "priority": "High",
                "description": "Organize community sterilization drive",
                "timeframe": "1-2 weeks",
                "resources": "5 volunteers, 2 vehicles, medical equipment",
            })
        if size > 10:
            actions.append({
                "action": "Temporary Shelter Setup",
                "priority": "Medium",
                "description": "Set up temporary holding facility",
                "timeframe": "3-5 days",
                "resources": "3 volunteers, shelter materials",
            })

        actions.append({
            "action": "Community Awareness",
            "priority": "Medium",
            "description": "Conduct community education campaign",
            "timeframe": "1 week",
            "resources": "2 volunteers, educational materials",
        })
        actions.append({
            "action": "Regular Monitoring",
            "priority": "Low",
            "description": "Establish regular monitoring schedule",
            "timeframe": "Ongoing",
            "resources": "1 volunteer, basic equipment",
        })
        return actions

    @staticmethod
    def basic_action_plan() -> list[dict]:
        return [
            {
                "action": "Basic Monitoring",
                "priority": "Medium",
                "description": "Regular check-ins with available resources",
                "timeframe": "Ongoing",
                "resources": "1 volunteer",
            },
            {
                "action": "Community Outreach",
                "priority": "Low",
                "description": "Inform community about the situation",
                "timeframe": "1-2 weeks",
                "resources": "Educational materials",
            },
        ]

    @staticmethod
    def expected_impact(hotspot: dict, resources: ResourcePool) -> str:
        resource_score = (
            resources.volunteers * 0.3
            + resources.budget / 1000 * 0.2
            + resources.vehicles * 0.3
            + resources.equipment * 0.2
        )
        hotspot_score = hotspot.get("severity", 0) * 0.4 + hotspot.get("risk", 0) * 0.6
        impact = resource_score * hotspot_score
        if impact > 0.7:
            return "High"
        if impact > 0.4:
            return "Medium"
        return "Low"

    @staticmethod
    def timeline(hotspot: dict) -> str:
        severity = hotspot.get("severity", 0)
        if severity > 0.8:
            return "1-3 days"
        if severity > 0.6:
            return "1-2 weeks"
        if hotspot.get("size", 0) > 15:
            return "2-4 weeks"
        return "1-2 weeks"

    @staticmethod
    def cost_benefit(hotspot: dict, resources: ResourcePool) -> str:
        if resources.budget <= 0:
            return "High"
        ratio = hotspot.get("size", 0) * ALLOCATION_CONFIG["benefit_per_incident"] / resources.budget
        if ratio > 3:
            return "High"
        if ratio > 1.5:
            return "Medium"
        return "Low"

    @staticmethod
    def success_probability(hotspot: dict, resources: ResourcePool) -> float:
        adequacy = min(1.0, (
            resources.volunteers / 5 * 0.4
            + resources.budget / 5000 * 0.3
            + resources.vehicles / 2 * 0.2
            + resources.equipment / 3 * 0.1
        ))
        difficulty = 1 - (hotspot.get("severity", 0) + hotspot.get("risk", 0)) / 2
        return max(ALLOCATION_CONFIG["success_floor"],
                   min(ALLOCATION_CONFIG["success_ceiling"], adequacy * difficulty))


def allocate_resources(hotspots: Any, pool: Any = None) -> list[dict]:
    """Greedy per-hotspot allocation; see :class:`ResourceAllocator`."""
    return ResourceAllocator().allocate(hotspots, pool)


def remaining_pool(hotspots: Any, pool: Any = None) -> Optional[dict]:
    """Pool left over after :func:`allocate_resources` on the same inputs."""
    remaining, _ = ResourceAllocator().run(hotspots, pool)
    return remaining.as_dict() if remaining is not None else None
