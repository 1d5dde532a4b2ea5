"""
Central configuration for the StreetPaws analytics engine.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Base paths
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Load .env file if present (must happen before reading env vars)
load_dotenv(BASE_DIR / ".env")

LOG_LEVEL = os.getenv("STREETPAWS_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Logical categories the portal stores incident records under
INCIDENT_COLLECTIONS = [
    "reports",
    "approvedReports",
    "rejectedReports",
    "lostPets",
    "foundPets",
]

# Conditions that count toward hotspot severity
SEVERE_CONDITIONS = ("abuse", "fighting")

# Great-circle conversion for the degree-based clustering radius
EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111.32

HOTSPOT_CONFIG = {
    "min_points": int(os.getenv("STREETPAWS_MIN_POINTS", "2")),
    "eps": float(os.getenv("STREETPAWS_EPS", "0.01")),  # decimal degrees, ~1 km
    "recency_window_days": 30,
    "min_risk": 0.1,
    "size_normalizer": 20,
}

RISK_WEIGHTS = {
    "size": 0.3,
    "severity": 0.5,
    "recency": 0.2,
}

PRIORITY_WEIGHTS = {
    "severity": 0.4,
    "size": 0.3,
    "risk": 0.3,
}

FORECAST_CONFIG = {
    "horizon": 6,
    "min_points": 2,
    "variance_scale": 100.0,
    "baseline_floor": 0.3,
    "decay_per_step": 0.1,
    "confidence_floor": 0.1,
}

TREND_CONFIG = {
    "min_points": 3,
    "slope_threshold": 0.1,
}

MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

# Resource pool used when the caller does not supply one
DEFAULT_RESOURCE_POOL = {
    "volunteers": int(os.getenv("STREETPAWS_VOLUNTEERS", "10")),
    "budget": float(os.getenv("STREETPAWS_BUDGET", "50000")),
    "vehicles": int(os.getenv("STREETPAWS_VEHICLES", "2")),
    "equipment": int(os.getenv("STREETPAWS_EQUIPMENT", "5")),
}

# Lower bounds (exclusive) for each priority label, checked in order
PRIORITY_LEVELS = [
    ("Critical", 0.8),
    ("High", 0.6),
    ("Medium", 0.4),
]

ALLOCATION_CONFIG = {
    "volunteers_per_incident": 1 / 3,
    "min_volunteers": 2,
    "max_volunteers": 8,
    "budget_per_incident": 500,
    "min_budget": 1000,
    "max_budget": 10000,
    "incidents_per_vehicle": 10,
    "max_vehicles": 2,
    "incidents_per_equipment": 5,
    "max_equipment": 3,
    "severity_multiplier": 0.5,
    "risk_budget_multiplier": 0.3,
    "benefit_per_incident": 1000,
    "success_floor": 0.1,
    "success_ceiling": 0.95,
    "limited_success_probability": 0.3,
}

STRATEGY_CONFIG = {
    "critical_priority": 0.8,
    "high_priority": 0.6,
    "incidents_per_volunteer": 5,
    "budget_per_incident": 500,
    "critical_resource_share": 70,
    "emergency_severity": 0.7,
    "zone_management_hotspots": 10,
}
