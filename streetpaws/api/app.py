"""
FastAPI application exposing the StreetPaws analytics engine.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI
from pydantic import BaseModel, Field

from streetpaws.analysis.spatial import detect_hotspots
from streetpaws.analysis.temporal import analyze_trend, forecast, monthly_counts
from streetpaws.core.config import HOTSPOT_CONFIG
from streetpaws.data.processor import DataProcessor
from streetpaws.data.schemas import (
    ForecastPoint,
    Hotspot,
    ResourceAllocation,
    ResourcePool,
    StrategicPlan,
    TrendSummary,
)
from streetpaws.models.recommender import generate_strategic_recommendations
from streetpaws.models.resource_allocator import allocate_resources
from streetpaws.reports.report_generator import ReportGenerator

logger = logging.getLogger(__name__)

app = FastAPI(
    title="StreetPaws Analytics",
    description="Hotspot detection, incident forecasting and resource planning "
                "for stray-animal incident reports.",
    version="0.1.0",
)


class RecordsRequest(BaseModel):
    """Incident records, either flat or grouped by collection."""

    records: list[dict[str, Any]] = []
    collections: dict[str, Any] = {}

    def merged(self) -> list[dict]:
        merged = list(self.records)
        if self.collections:
            merged.extend(DataProcessor().merge_collections(self.collections))
        return merged


class HotspotRequest(RecordsRequest):
    min_points: int = Field(default=HOTSPOT_CONFIG["min_points"], ge=1)
    eps: float = Field(default=HOTSPOT_CONFIG["eps"], gt=0)
    max_distance: Optional[float] = Field(default=None, gt=0)


class SeriesRequest(BaseModel):
    series: list[dict[str, Any]] = []


class MonthlyRequest(RecordsRequest):
    year: Optional[int] = None


class PlanningRequest(BaseModel):
    hotspots: list[dict[str, Any]] = []
    resources: Optional[ResourcePool] = None


class ReportRequest(RecordsRequest):
    resources: Optional[ResourcePool] = None
    year: Optional[int] = None


@app.get("/api/health", tags=["System"])
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.post("/api/analytics/hotspots", response_model=list[Hotspot], tags=["Predictive"])
def hotspots(request: HotspotRequest):
    """Detect incident hotspots."""
    return detect_hotspots(
        request.merged(),
        min_points=request.min_points,
        eps=request.eps,
        max_distance=request.max_distance,
    )


@app.post("/api/analytics/monthly", tags=["Predictive"])
def monthly(request: MonthlyRequest):
    """Aggregate records into a twelve-month UTC series."""
    return {"series": monthly_counts(request.merged(), year=request.year)}


@app.post("/api/analytics/forecast", response_model=list[ForecastPoint], tags=["Predictive"])
def forecast_reports(request: SeriesRequest):
    """Six-month incident forecast from a monthly series."""
    return forecast(request.series)


@app.post("/api/analytics/trend", response_model=TrendSummary, tags=["Predictive"])
def trend(request: SeriesRequest):
    """Trend direction and confidence of a monthly series."""
    return analyze_trend(request.series)


@app.post("/api/analytics/allocations", response_model=list[ResourceAllocation],
          tags=["Prescriptive"])
def allocations(request: PlanningRequest):
    """Greedy resource allocation across hotspots."""
    return allocate_resources(request.hotspots, request.resources)


@app.post("/api/analytics/strategy", response_model=StrategicPlan, tags=["Prescriptive"])
def strategy(request: PlanningRequest):
    """Portfolio-level strategic recommendations."""
    return generate_strategic_recommendations(request.hotspots, request.resources)


@app.post("/api/analytics/report", tags=["Reports"])
def report(request: ReportRequest):
    """Full predictive and prescriptive analytics report."""
    generator = ReportGenerator(request.merged())
    return generator.generate_analytics_report(pool=request.resources, year=request.year)
