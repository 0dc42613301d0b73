"""Pure data models for the conversion pipeline.

All Pydantic models and enums live here. No I/O, no business logic.
Source records mirror the Day One JSON export (camelCase keys); fields
are snake_case with camelCase aliases, and unknown keys are ignored.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Numbers are kept as the export wrote them (20 stays 20, 20.5 stays 20.5).
Number = int | float

# ---------------------------------------------------------------------------
# Media categories
# ---------------------------------------------------------------------------


class MediaCategory(StrEnum):
    """Attachment categories recognized in an export bundle."""

    PHOTO = "photo"
    VIDEO = "video"
    AUDIO = "audio"
    PDF = "pdf"


# Sub-collection folder names per category. An export may use any of them.
MEDIA_FOLDERS: dict[MediaCategory, tuple[str, ...]] = {
    MediaCategory.PHOTO: ("photos",),
    MediaCategory.VIDEO: ("videos",),
    MediaCategory.AUDIO: ("audios",),
    MediaCategory.PDF: ("pdfAttachments", "pdfs"),
}

# Extension used when a media record carries no ``type``.
DEFAULT_EXTENSIONS: dict[MediaCategory, str] = {
    MediaCategory.PHOTO: "jpeg",
    MediaCategory.VIDEO: "mov",
    MediaCategory.AUDIO: "m4a",
    MediaCategory.PDF: "pdf",
}


# ---------------------------------------------------------------------------
# Source records (RawEntry and its sub-records)
# ---------------------------------------------------------------------------


class _SourceRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        """Treat explicit JSON nulls like absent keys so defaults apply."""
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Location(_SourceRecord):
    place_name: str | None = None
    locality_name: str | None = None
    administrative_area: str | None = None
    country: str | None = None
    latitude: Number | None = None
    longitude: Number | None = None


class Weather(_SourceRecord):
    conditions_description: str | None = None
    weather_code: str | None = None
    temperature_celsius: Number | None = None
    relative_humidity: Number | None = None
    pressure_mb: Number | None = Field(default=None, alias="pressureMB")
    wind_speed_kph: Number | None = Field(default=None, alias="windSpeedKPH")
    wind_bearing: Number | None = None
    visibility_km: Number | None = Field(default=None, alias="visibilityKM")
    moon_phase_code: str | None = None


class UserActivity(_SourceRecord):
    activity_name: str | None = None
    step_count: int | None = None


class Photo(_SourceRecord):
    """Photo metadata attached to an entry."""

    identifier: str | None = None
    md5: str | None = None
    type: str | None = None
    camera_make: str | None = None
    camera_model: str | None = None
    lens_model: str | None = None
    date: str | None = None
    width: int | None = None
    height: int | None = None


class MediaRecord(_SourceRecord):
    """Video, audio or PDF attachment metadata."""

    identifier: str | None = None
    md5: str | None = None
    type: str | None = None
    title: str | None = None
    date: str | None = None
    duration: Number | None = None


class RawEntry(_SourceRecord):
    """One journal record as decoded from the export JSON."""

    uuid: str = ""
    creation_date: str
    modified_date: str | None = None
    time_zone: str | None = None
    text: str | None = None
    starred: bool = False
    is_pinned: bool = False
    is_all_day: bool = False
    editing_time: Number | None = None
    tags: list[str] = Field(default_factory=list)
    location: Location | None = None
    weather: Weather | None = None
    user_activity: UserActivity | None = None
    creation_device: str | None = None
    creation_device_type: str | None = None
    creation_device_model: str | None = None
    creation_os_name: str | None = Field(default=None, alias="creationOSName")
    creation_os_version: str | None = Field(default=None, alias="creationOSVersion")
    photos: list[Photo] = Field(default_factory=list)
    videos: list[MediaRecord] = Field(default_factory=list)
    audios: list[MediaRecord] = Field(default_factory=list)
    pdf_attachments: list[MediaRecord] = Field(default_factory=list)

    @field_validator("creation_date")
    @classmethod
    def _check_timestamp(cls, value: str) -> str:
        """Keep the string verbatim, but only if it is a real ISO-8601 instant."""
        datetime.fromisoformat(value)
        return value

    @property
    def created_at(self) -> datetime:
        return datetime.fromisoformat(self.creation_date)

    def media(self, category: MediaCategory) -> list[MediaRecord]:
        """Non-photo attachment records for *category*."""
        return {
            MediaCategory.VIDEO: self.videos,
            MediaCategory.AUDIO: self.audios,
            MediaCategory.PDF: self.pdf_attachments,
        }.get(category, [])


# ---------------------------------------------------------------------------
# Pipeline output
# ---------------------------------------------------------------------------


class ConvertedEntry(BaseModel):
    """Frontmatter map plus cleaned body for one entry. Never mutated."""

    model_config = ConfigDict(frozen=True)

    uuid: str = ""
    frontmatter: dict[str, Any] = Field(default_factory=dict)
    body: str = ""


class LoadedJournal(BaseModel):
    """Entries gathered from every JSON document of an export."""

    entries: list[RawEntry] = Field(default_factory=list)
    documents: list[str] = Field(default_factory=list)
    invalid: int = 0


class MediaReport(BaseModel):
    """Outcome of copying attachments into the vault."""

    copied: int = 0
    skipped: int = 0
    by_category: dict[str, int] = Field(default_factory=dict)


class ConversionResult(BaseModel):
    """Counters reported at the end of a conversion run."""

    output_dir: Path
    converted: int = 0
    duplicates: int = 0
    invalid: int = 0
    documents: int = 0
    attachments_copied: int = 0
    attachments_skipped: int = 0
    written: list[Path] = Field(default_factory=list)
