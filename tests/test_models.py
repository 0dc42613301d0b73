"""Tests for the source record models."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from dayone_obsidian.models import MediaCategory, RawEntry


class TestRawEntry:
    def test_reads_camel_case_keys(self) -> None:
        entry = RawEntry.model_validate(
            {
                "uuid": "ABC",
                "creationDate": "2024-01-15T10:00:00Z",
                "modifiedDate": "2024-01-16T10:00:00Z",
                "timeZone": "Europe/Paris",
                "isPinned": True,
                "creationOSName": "iOS",
                "weather": {"pressureMB": 1012, "windSpeedKPH": 3.5, "visibilityKM": 10},
                "userActivity": {"activityName": "Walking", "stepCount": 4200},
            }
        )
        assert entry.time_zone == "Europe/Paris"
        assert entry.is_pinned is True
        assert entry.creation_os_name == "iOS"
        assert entry.weather is not None
        assert entry.weather.pressure_mb == 1012
        assert entry.weather.wind_speed_kph == 3.5
        assert entry.user_activity is not None
        assert entry.user_activity.step_count == 4200

    def test_accepts_field_names(self) -> None:
        entry = RawEntry(uuid="ABC", creation_date="2024-01-15T10:00:00Z", starred=True)
        assert entry.creation_date == "2024-01-15T10:00:00Z"
        assert entry.starred is True

    def test_nulls_fall_back_to_defaults(self) -> None:
        entry = RawEntry.model_validate(
            {
                "creationDate": "2024-01-15T10:00:00Z",
                "uuid": None,
                "tags": None,
                "starred": None,
                "photos": None,
            }
        )
        assert entry.uuid == ""
        assert entry.tags == []
        assert entry.starred is False
        assert entry.photos == []

    def test_integer_numbers_stay_integers(self) -> None:
        entry = RawEntry.model_validate(
            {
                "creationDate": "2024-01-15T10:00:00Z",
                "weather": {"temperatureCelsius": 20, "windBearing": 180.5},
            }
        )
        assert entry.weather is not None
        assert entry.weather.temperature_celsius == 20
        assert isinstance(entry.weather.temperature_celsius, int)
        assert entry.weather.wind_bearing == 180.5

    def test_unknown_keys_are_ignored(self) -> None:
        entry = RawEntry.model_validate(
            {"creationDate": "2024-01-15T10:00:00Z", "richText": "{}", "duration": 0}
        )
        assert not hasattr(entry, "richText")

    def test_creation_date_is_required(self) -> None:
        with pytest.raises(ValidationError):
            RawEntry.model_validate({"uuid": "ABC"})

    def test_creation_date_must_be_a_timestamp(self) -> None:
        with pytest.raises(ValidationError):
            RawEntry.model_validate({"uuid": "ABC", "creationDate": "last tuesday"})

    def test_created_at_keeps_offset(self) -> None:
        entry = RawEntry(creation_date="2024-01-15T23:30:00Z")
        assert entry.created_at == datetime(2024, 1, 15, 23, 30, tzinfo=timezone.utc)

    def test_entries_are_immutable(self) -> None:
        entry = RawEntry(creation_date="2024-01-15T10:00:00Z")
        with pytest.raises(ValidationError):
            entry.text = "changed"  # type: ignore[misc]

    def test_media_by_category(self) -> None:
        entry = RawEntry.model_validate(
            {
                "creationDate": "2024-01-15T10:00:00Z",
                "videos": [{"identifier": "V1", "md5": "v"}],
                "audios": [{"identifier": "A1", "md5": "a"}],
                "pdfAttachments": [{"identifier": "P1", "md5": "p"}],
            }
        )
        assert [r.identifier for r in entry.media(MediaCategory.VIDEO)] == ["V1"]
        assert [r.identifier for r in entry.media(MediaCategory.AUDIO)] == ["A1"]
        assert [r.identifier for r in entry.media(MediaCategory.PDF)] == ["P1"]
        assert entry.media(MediaCategory.PHOTO) == []
