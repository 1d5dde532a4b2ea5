"""
Temporal analysis module: monthly aggregation, linear trend analysis and
a six-month incident forecast.

The forecast is an ordinary least squares extrapolation with a heuristic
confidence score, not a statistical prediction interval.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Optional

import numpy as np
import pandas as pd

from streetpaws.core.config import FORECAST_CONFIG, MONTH_NAMES, TREND_CONFIG
from streetpaws.data.processor import DataProcessor

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def _series_values(series: Any) -> Optional[np.ndarray]:
    """Extract numeric values from ``[{"value": n}, ...]`` or bare numbers."""
    if not isinstance(series, (list, tuple)):
        return None
    values = []
    for item in series:
        raw = item.get("value") if isinstance(item, dict) else item
        try:
            value = float(raw) if raw is not None and not isinstance(raw, bool) else 0.0
        except (TypeError, ValueError):
            value = 0.0
        values.append(value if math.isfinite(value) else 0.0)
    return np.array(values, dtype=float)


def _least_squares(values: np.ndarray) -> tuple[float, float]:
    """Slope and intercept of ``values`` against their index."""
    n = len(values)
    x = np.arange(n, dtype=float)
    denominator = n * np.sum(x * x) - np.sum(x) ** 2
    if n == 0 or denominator == 0:
        return 0.0, float(values.mean()) if n else 0.0
    slope = (n * np.sum(x * values) - np.sum(x) * np.sum(values)) / denominator
    intercept = (np.sum(values) - slope * np.sum(x)) / n
    return float(slope), float(intercept)


def _trend_label(slope: float, threshold: float = 0.0) -> str:
    if slope > threshold:
        return "increasing"
    if slope < -threshold:
        return "decreasing"
    return "stable"


def confidence_heuristic(series: Any, step: int) -> float:
    """
    Confidence (0.1-1.0) for the forecast ``step`` periods ahead.

    Starts from ``max(0.3, 1 - variance / 100)`` and loses 10% of that
    baseline per step, never dropping below 0.1.
    """
    values = _series_values(series)
    variance = float(values.var()) if values is not None and len(values) else 0.0
    baseline = max(
        FORECAST_CONFIG["baseline_floor"],
        1 - variance / FORECAST_CONFIG["variance_scale"],
    )
    decayed = baseline * (1 - step * FORECAST_CONFIG["decay_per_step"])
    return max(FORECAST_CONFIG["confidence_floor"], decayed)


def forecast(series: Any, now: Optional[datetime] = None) -> list[dict]:
    """
    Forecast incident counts for the next six months.

    Args:
        series: Monthly observations, oldest first, as ``{"value": n}``.
        now: Reference time for month labels (UTC now by default).

    Returns:
        Six forecast points, or [] when fewer than two observations exist.
    """
    values = _series_values(series)
    if values is None or len(values) < FORECAST_CONFIG["min_points"]:
        logger.warning("Insufficient historical data for forecasting")
        return []

    try:
        slope, intercept = _least_squares(values)
        trend = _trend_label(slope)
        current_month = (now or datetime.now(timezone.utc)).month - 1
        n = len(values)

        points = []
        for step in range(FORECAST_CONFIG["horizon"]):
            predicted = max(0.0, slope * (n + step) + intercept)
            points.append({
                "month": MONTH_NAMES[(current_month + step + 1) % 12],
                "predicted": round_half_up(predicted),
                "confidence": round_half_up(confidence_heuristic(series, step) * 100),
                "trend": trend,
            })
    except Exception:
        logger.exception(f"Forecast failed for a series of {len(values)} points")
        return []

    logger.info(f"Forecast generated: slope={slope:.3f}, trend={trend}")
    return points


def analyze_trend(series: Any) -> dict:
    """Direction and strength (R-squared) of the trend in ``series``."""
    values = _series_values(series)
    if values is None or len(values) < TREND_CONFIG["min_points"]:
        return _insufficient_trend()

    try:
        slope, intercept = _least_squares(values)
        x = np.arange(len(values), dtype=float)
        ss_res = float(np.sum((values - (slope * x + intercept)) ** 2))
        ss_tot = float(np.sum((values - values.mean()) ** 2))
        r_squared = 0.0 if ss_tot == 0 else 1 - ss_res / ss_tot
    except Exception:
        logger.exception(f"Trend analysis failed for a series of {len(values)} points")
        return _insufficient_trend()

    return {
        "trend": _trend_label(slope, TREND_CONFIG["slope_threshold"]),
        "slope": round(slope, 2),
        "confidence": min(100, max(0, round_half_up(r_squared * 100))),
        "direction": "up" if slope > 0 else "down" if slope < 0 else "flat",
    }


def _insufficient_trend() -> dict:
    return {"trend": "insufficient_data", "slope": 0.0, "confidence": 0, "direction": "flat"}


def monthly_counts(records: Any, year: Optional[int] = None,
                   now: Optional[datetime] = None) -> list[dict]:
    """
    Count records per calendar month of ``year``, in UTC.

    Always returns twelve ``{"month": 0-11, "value": count}`` slots;
    records without a readable timestamp are ignored.
    """
    if year is None:
        year = (now or datetime.now(timezone.utc)).year

    series = [{"month": month, "value": 0} for month in range(12)]
    if not isinstance(records, (list, tuple)):
        return series

    df = DataProcessor().to_dataframe(records)
    df = df.dropna(subset=["created_at"])
    if df.empty:
        return series

    df = df[df["created_at"].dt.year == year]
    counts = df["created_at"].dt.month.value_counts()
    for month, count in counts.items():
        series[int(month) - 1]["value"] = int(count)
    return series
