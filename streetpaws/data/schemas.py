"""
Pydantic schemas for incident records, resource pools and analytics output.
"""

import math
from datetime import datetime, timezone
from typing import Any, Optional

from dateutil import parser as dateparser
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from streetpaws.core.config import SEVERE_CONDITIONS


def _to_float(value: Any) -> Optional[float]:
    """Coerce a coordinate-like value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


class IncidentRecord(BaseModel):
    """A single incident as read by the analytics engine."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    condition: Optional[str] = None
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("createdAt", "created_at"),
    )
    animal_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("animalType", "animal_type"),
    )
    status: Optional[str] = None
    collection: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value):
        return None if value is None else str(value)

    @field_validator("latitude", mode="before")
    @classmethod
    def _check_latitude(cls, value):
        lat = _to_float(value)
        return lat if lat is not None and -90 <= lat <= 90 else None

    @field_validator("longitude", mode="before")
    @classmethod
    def _check_longitude(cls, value):
        lon = _to_float(value)
        return lon if lon is not None and -180 <= lon <= 180 else None

    @field_validator("condition", "status", "animal_type", "collection", mode="before")
    @classmethod
    def _clean_text(cls, value):
        if value is None:
            return None
        return str(value).strip().lower() or None

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_timestamp(cls, value):
        if value is None or value == "":
            return None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            # epoch milliseconds, as written by the browser client
            try:
                return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                return None
        if isinstance(value, datetime):
            parsed = value
        else:
            try:
                parsed = dateparser.parse(str(value))
            except (ValueError, OverflowError):
                return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def is_severe(self) -> bool:
        return self.condition in SEVERE_CONDITIONS


class ResourcePool(BaseModel):
    """Finite resources available for a single allocation pass."""

    model_config = ConfigDict(frozen=True)

    volunteers: float = Field(default=0, ge=0)
    budget: float = Field(default=0, ge=0)
    vehicles: float = Field(default=0, ge=0)
    equipment: float = Field(default=0, ge=0)

    def covers(self, other: "ResourcePool") -> bool:
        """True when every quantity in ``other`` fits inside this pool."""
        return (
            other.volunteers <= self.volunteers
            and other.budget <= self.budget
            and other.vehicles <= self.vehicles
            and other.equipment <= self.equipment
        )

    def minus(self, other: "ResourcePool") -> "ResourcePool":
        """Return the pool left after granting ``other`` (never negative)."""
        return ResourcePool(
            volunteers=max(0, self.volunteers - other.volunteers),
            budget=max(0, self.budget - other.budget),
            vehicles=max(0, self.vehicles - other.vehicles),
            equipment=max(0, self.equipment - other.equipment),
        )

    def as_dict(self) -> dict:
        """Plain dict with whole numbers rendered as ints."""
        return {
            name: int(value) if float(value).is_integer() else value
            for name, value in self.model_dump().items()
        }


class HotspotCenter(BaseModel):
    latitude: float
    longitude: float


class Hotspot(BaseModel):
    """A density cluster of incident records."""

    id: str
    center: HotspotCenter
    size: int = Field(ge=1)
    severity: float = Field(ge=0.0, le=1.0)
    risk: float
    recency: float = Field(ge=0.0, le=1.0)
    priority: float
    radius_km: float = 0.0
    markers: list[dict] = []


class ForecastPoint(BaseModel):
    month: str
    predicted: int = Field(ge=0)
    confidence: int = Field(ge=0, le=100)
    trend: str


class TrendSummary(BaseModel):
    trend: str
    slope: float = 0.0
    confidence: int = Field(default=0, ge=0, le=100)
    direction: str = "flat"


class ActionItem(BaseModel):
    action: str
    priority: str
    description: str
    timeframe: str
    resources: str


class ResourceAllocation(BaseModel):
    """Per-hotspot allocation plan."""

    id: str
    hotspot_id: Optional[str] = None
    zone: Optional[HotspotCenter] = None
    priority: float
    priority_level: str
    recommended_actions: list[ActionItem]
    resource_allocation: dict[str, float]
    required_resources: dict[str, float] = {}
    expected_impact: str
    timeline: str
    cost_benefit: str
    success_probability: float = Field(ge=0.1, le=0.95)
    note: Optional[str] = None


class StrategicRecommendation(BaseModel):
    type: str
    priority: str
    recommendation: str
    rationale: str
    timeframe: str
    shortfall: Optional[float] = None


class StrategicSummary(BaseModel):
    total_hotspots: int = 0
    critical_hotspots: int = 0
    high_priority_hotspots: int = 0
    total_incidents: int = 0
    avg_severity: float = 0.0
    resource_utilization: int = 0


class StrategicPlan(BaseModel):
    recommendations: list[StrategicRecommendation] = []
    summary: StrategicSummary = StrategicSummary()
