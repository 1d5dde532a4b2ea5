"""Tests for the data processing module."""

import json
from datetime import datetime, timezone

import pytest

from streetpaws.data.processor import FRAME_COLUMNS, DataProcessor
from streetpaws.data.schemas import IncidentRecord, ResourcePool


@pytest.fixture
def processor():
    return DataProcessor()


@pytest.fixture
def export():
    return {
        "reports": {
            "-Nabc1": {"latitude": 14.05, "longitude": 121.16, "condition": "Abuse"},
            "-Nabc2": {"latitude": 14.06, "longitude": 121.17, "condition": "normal"},
        },
        "lostPets": [
            {"id": "lp1", "latitude": 14.1, "longitude": 121.2, "animalType": "Cat"},
        ],
        "foundPets": {},
    }


def test_merge_collections(processor, export):
    records = processor.merge_collections(export)
    assert len(records) == 3
    assert {r["id"] for r in records} == {"-Nabc1", "-Nabc2", "lp1"}
    assert [r["collection"] for r in records] == ["reports", "reports", "lostPets"]
    # inputs are left untouched
    assert "collection" not in export["reports"]["-Nabc1"]


def test_merge_keeps_existing_ids(processor):
    records = processor.merge_collections({"reports": {"key": {"id": "own-id"}}})
    assert records[0]["id"] == "own-id"


def test_merge_skips_non_dict_items(processor):
    records = processor.merge_collections({"reports": [None, "x", {"latitude": 1}]})
    assert len(records) == 1


def test_merge_rejects_non_mapping(processor):
    assert processor.merge_collections(["not", "a", "mapping"]) == []


def test_normalize_payload(processor, export):
    assert len(processor.normalize_payload([{"id": 1}, "junk"])) == 1
    assert len(processor.normalize_payload({"records": [{"id": 1}, {"id": 2}]})) == 2
    assert len(processor.normalize_payload(export)) == 3
    assert processor.normalize_payload("nope") == []


def test_load_json_file(processor, tmp_path, export):
    path = tmp_path / "export.json"
    path.write_text(json.dumps(export))
    records = processor.load_json_file(path)
    assert len(records) == 3


def test_load_missing_file(processor, tmp_path):
    assert processor.load_json_file(tmp_path / "missing.json") == []


def test_parse_records_drops_unreadable(processor):
    parsed = processor.parse_records([
        {"id": 7, "latitude": "14.5", "longitude": 121},
        "not a record",
        None,
    ])
    assert len(parsed) == 1
    assert parsed[0].id == "7"
    assert parsed[0].latitude == 14.5
    assert parsed[0].has_coordinates
    assert processor.parse_records(None) == []


def test_to_dataframe(processor, export):
    df = processor.to_dataframe(processor.merge_collections(export))
    assert list(df.columns) == FRAME_COLUMNS
    assert len(df) == 3
    assert df.iloc[0]["condition"] == "abuse"
    assert df.iloc[2]["animal_type"] == "cat"


def test_to_dataframe_empty(processor):
    df = processor.to_dataframe([])
    assert df.empty
    assert list(df.columns) == FRAME_COLUMNS


class TestIncidentRecord:
    def test_coordinates_validated(self):
        assert IncidentRecord(latitude=95, longitude=10).latitude is None
        assert IncidentRecord(latitude=10, longitude=-190).longitude is None
        assert IncidentRecord(latitude="abc").latitude is None
        assert IncidentRecord(latitude=True).latitude is None
        assert not IncidentRecord(latitude=10).has_coordinates

    def test_equator_is_valid(self):
        record = IncidentRecord(latitude=0, longitude=0)
        assert record.has_coordinates

    def test_timestamps(self):
        iso = IncidentRecord.model_validate({"createdAt": "2024-03-01T23:30:00-05:00"})
        assert iso.created_at == datetime(2024, 3, 2, 4, 30, tzinfo=timezone.utc)

        naive = IncidentRecord.model_validate({"createdAt": "2024-03-01 10:00"})
        assert naive.created_at.tzinfo is not None
        assert naive.created_at.hour == 10

        epoch = IncidentRecord.model_validate({"createdAt": 1704067200000})
        assert epoch.created_at == datetime(2024, 1, 1, tzinfo=timezone.utc)

        assert IncidentRecord.model_validate({"createdAt": "garbage"}).created_at is None

    def test_severity(self):
        assert IncidentRecord(condition="ABUSE").is_severe
        assert IncidentRecord(condition=" fighting ").is_severe
        assert not IncidentRecord(condition="injured").is_severe
        assert not IncidentRecord().is_severe

    def test_extra_fields_kept(self):
        record = IncidentRecord.model_validate({"id": "1", "reporter": "anon"})
        assert record.model_extra == {"reporter": "anon"}


class TestResourcePool:
    def test_covers_and_minus(self):
        pool = ResourcePool(volunteers=5, budget=1000, vehicles=1, equipment=2)
        need = ResourcePool(volunteers=2, budget=400, vehicles=1, equipment=2)
        assert pool.covers(need)
        assert not need.covers(pool)

        left = pool.minus(need)
        assert left.as_dict() == {"volunteers": 3, "budget": 600, "vehicles": 0, "equipment": 0}
        assert pool.volunteers == 5

    def test_minus_never_negative(self):
        left = ResourcePool(volunteers=1).minus(ResourcePool(volunteers=3))
        assert left.volunteers == 0

    def test_rejects_negative(self):
        with pytest.raises(ValueError):
            ResourcePool(budget=-1)
