"""
Record source adapter: merges the portal's incident categories into the
flat record list the analytics engine works on.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

import pandas as pd
from pydantic import ValidationError

from streetpaws.core.config import INCIDENT_COLLECTIONS
from streetpaws.data.schemas import IncidentRecord

logger = logging.getLogger(__name__)

FRAME_COLUMNS = [
    "id", "collection", "latitude", "longitude",
    "condition", "animal_type", "status", "created_at",
]


class DataProcessor:
    """Turns document-store exports into incident records."""

    def merge_collections(self, collections: dict[str, Any]) -> list[dict]:
        """
        Flatten a per-collection export into one list of records.

        Each collection may be a mapping keyed by record id (the shape the
        realtime database returns) or a plain list. Every record comes back
        as a new dict carrying ``id`` and ``collection``; inputs are not
        modified.
        """
        if not isinstance(collections, dict):
            logger.warning(f"Expected a mapping of collections, got {type(collections).__name__}")
            return []

        merged = []
        for name, items in collections.items():
            if name not in INCIDENT_COLLECTIONS:
                logger.warning(f"Merging records from unknown collection '{name}'")
            for key, item in self._iter_items(items):
                if not isinstance(item, dict):
                    continue
                record = dict(item)
                record.setdefault("id", key)
                record["collection"] = name
                merged.append(record)

        logger.info(f"Merged {len(merged)} records from {len(collections)} collections")
        return merged

    def load_json_file(self, file_path: str | Path) -> list[dict]:
        """Load records from a JSON export file."""
        path = Path(file_path)
        if not path.exists():
            logger.error(f"File not found: {path}")
            return []

        with open(path) as f:
            data = json.load(f)

        return self.normalize_payload(data)

    def normalize_payload(self, data: Any) -> list[dict]:
        """Accept a record list, ``{"records": [...]}`` or a collection mapping."""
        if isinstance(data, list):
            return [dict(item) for item in data if isinstance(item, dict)]
        if isinstance(data, dict):
            if isinstance(data.get("records"), list):
                return self.normalize_payload(data["records"])
            return self.merge_collections(data)
        logger.warning(f"Unsupported payload type {type(data).__name__}")
        return []

    def parse_records(self, records: Optional[Iterable[Any]]) -> list[IncidentRecord]:
        """Validate raw records, dropping the ones that cannot be read at all."""
        parsed = []
        for raw in records or []:
            record = self.parse_record(raw)
            if record is not None:
                parsed.append(record)
        return parsed

    @staticmethod
    def parse_record(raw: Any) -> Optional[IncidentRecord]:
        if isinstance(raw, IncidentRecord):
            return raw
        if not isinstance(raw, dict):
            return None
        try:
            return IncidentRecord.model_validate(raw)
        except ValidationError as e:
            logger.debug(f"Skipping unreadable record {raw.get('id')}: {e}")
            return None

    def to_dataframe(self, records: Optional[Iterable[Any]]) -> pd.DataFrame:
        """Normalised frame of the fields the engine reads."""
        rows = [
            {column: getattr(record, column) for column in FRAME_COLUMNS}
            for record in self.parse_records(records)
        ]
        if not rows:
            return pd.DataFrame(columns=FRAME_COLUMNS)
        df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
        df["created_at"] = pd.to_datetime(df["created_at"], utc=True)
        return df

    @staticmethod
    def _iter_items(items: Any):
        if isinstance(items, dict):
            yield from ((str(key), value) for key, value in items.items())
        elif isinstance(items, list):
            yield from ((None, value) for value in items)
