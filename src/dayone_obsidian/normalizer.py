"""Map one Day One entry to Obsidian frontmatter and a cleaned Markdown body.

Frontmatter only carries fields the export actually filled in: every
group is assembled with :func:`compact`, which drops absent values. The
body goes through three ordered passes: unescape Day One's backslash
escapes, rewrite ``dayone-moment`` embeds to wiki embeds, strip
zero-width spaces.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any

from dayone_obsidian.models import (
    DEFAULT_EXTENSIONS,
    ConvertedEntry,
    Location,
    MediaCategory,
    MediaRecord,
    Photo,
    RawEntry,
    UserActivity,
    Weather,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

WEATHER_CODES: dict[str, str] = {
    "clear": "Clear",
    "clear-day": "Clear",
    "clear-night": "Clear Night",
    "cloudy": "Cloudy",
    "cloudy-night": "Cloudy Night",
    "partly-cloudy": "Partly Cloudy",
    "partly-cloudy-day": "Partly Cloudy",
    "partly-cloudy-night": "Partly Cloudy Night",
    "rain": "Rain",
    "snow": "Snow",
    "sleet": "Sleet",
    "wind": "Windy",
    "fog": "Fog",
    "hail": "Hail",
    "thunderstorm": "Thunderstorm",
}

MOON_PHASES: dict[str, str] = {
    "new": "New Moon",
    "waxing-crescent": "Waxing Crescent",
    "first-quarter": "First Quarter",
    "waxing-gibbous": "Waxing Gibbous",
    "full": "Full Moon",
    "waning-gibbous": "Waning Gibbous",
    "last-quarter": "Last Quarter",
    "waning-crescent": "Waning Crescent",
}

# Characters Day One escapes with a backslash to protect them from its renderer.
ESCAPED_PUNCTUATION = ".-()[]#>_*`~!"

# Ordered (pattern, replacement) table applied by unescape_markdown().
# The leading group swallows escaped backslashes pairwise, so ``\\.`` is
# left alone and a second pass never changes the output of the first.
UNESCAPE_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(?<!\\)((?:\\\\)*)\\" + re.escape(char)), r"\g<1>" + char)
    for char in ESCAPED_PUNCTUATION
]

PHOTO_EMBED_RE = re.compile(r"!\[\]\(dayone-moment://([A-Fa-f0-9]+)\)")
MEDIA_EMBED_RE = re.compile(r"!\[\]\(dayone-moment:/(video|audio|pdfAttachment)/([A-Fa-f0-9]+)\)")
# Any embed marker, whatever it points at. Used when deriving titles.
ANY_EMBED_RE = re.compile(r"!\[\]\(dayone-moment:/[^)]*\)")

MEDIA_SCHEMES: dict[str, MediaCategory] = {
    "video": MediaCategory.VIDEO,
    "audio": MediaCategory.AUDIO,
    "pdfAttachment": MediaCategory.PDF,
}

ZERO_WIDTH_SPACE = "\u200b"

# ---------------------------------------------------------------------------
# Compact map builder
# ---------------------------------------------------------------------------


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict)):
        return bool(value)
    return True


def compact(*pairs: tuple[str, Any]) -> dict[str, Any]:
    """Build an ordered map from ``(key, value)`` pairs, skipping absent values.

    ``None``, blank strings, and empty lists or maps are dropped. Zero and
    ``False`` are kept; wrap a value in :func:`positive` when zero means
    "not recorded".
    """
    return {key: value for key, value in pairs if _has_value(value)}


def positive(value: int | float | None) -> int | float | None:
    """Return *value* when it is greater than zero, else ``None``."""
    if value is None or value <= 0:
        return None
    return value


# ---------------------------------------------------------------------------
# Photo index
# ---------------------------------------------------------------------------


class PhotoIndex:
    """Photo identifier → content hash for a single entry.

    Identifiers are only unique within one entry's photo list, so an
    index is built per entry and never shared.
    """

    def __init__(self, hashes: dict[str, str] | None = None) -> None:
        self._hashes = {key.upper(): value for key, value in (hashes or {}).items()}

    @classmethod
    def from_entry(cls, entry: RawEntry) -> PhotoIndex:
        return cls({p.identifier: p.md5 for p in entry.photos if p.identifier and p.md5})

    def lookup(self, identifier: str) -> str | None:
        return self._hashes.get(identifier.upper())

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and identifier.upper() in self._hashes

    def __len__(self) -> int:
        return len(self._hashes)


def attachment_filename(record: Photo | MediaRecord, category: MediaCategory) -> str | None:
    """Attachment basename for a media record, ``<md5>.<type>``."""
    if not record.md5:
        return None
    return f"{record.md5}.{record.type or DEFAULT_EXTENSIONS[category]}"


def _attachment_index(entry: RawEntry) -> dict[tuple[MediaCategory, str], str]:
    index: dict[tuple[MediaCategory, str], str] = {}
    for category in (MediaCategory.VIDEO, MediaCategory.AUDIO, MediaCategory.PDF):
        for record in entry.media(category):
            filename = attachment_filename(record, category)
            if record.identifier and filename:
                index[(category, record.identifier.upper())] = filename
    return index


# ---------------------------------------------------------------------------
# Frontmatter
# ---------------------------------------------------------------------------


def sanitize_tag(tag: str) -> str:
    """Turn a Day One tag into an Obsidian tag.

    Lower-cased, whitespace runs become one hyphen, anything other than
    word characters and hyphens is removed.
    """
    tag = tag.strip().lower()
    tag = re.sub(r"\s+", "-", tag)
    return re.sub(r"[^\w-]", "", tag)


def sanitize_tags(tags: list[str]) -> list[str]:
    cleaned = (sanitize_tag(tag) for tag in tags)
    return list(dict.fromkeys(tag for tag in cleaned if tag))


def _location(loc: Location | None) -> dict[str, Any] | None:
    if loc is None:
        return None
    return compact(
        ("name", loc.place_name),
        ("locality", loc.locality_name),
        ("region", loc.administrative_area),
        ("country", loc.country),
        ("latitude", loc.latitude),
        ("longitude", loc.longitude),
    )


def _weather(w: Weather | None) -> dict[str, Any] | None:
    if w is None:
        return None
    conditions = w.conditions_description or WEATHER_CODES.get(w.weather_code or "")
    return compact(
        ("conditions", conditions),
        ("temperature_c", w.temperature_celsius),
        ("humidity", positive(w.relative_humidity)),
        ("pressure_mb", w.pressure_mb),
        ("wind_speed_kph", w.wind_speed_kph),
        ("wind_bearing", w.wind_bearing),
        ("visibility_km", positive(w.visibility_km)),
        ("moon_phase", MOON_PHASES.get(w.moon_phase_code or "")),
    )


def _activity(activity: UserActivity | None) -> dict[str, Any] | None:
    if activity is None:
        return None
    return compact(("type", activity.activity_name), ("steps", activity.step_count))


def _device(entry: RawEntry) -> dict[str, Any]:
    return compact(
        ("name", entry.creation_device),
        ("type", entry.creation_device_type),
        ("model", entry.creation_device_model),
        ("os", entry.creation_os_name),
        ("os_version", entry.creation_os_version),
    )


def _photo(photo: Photo) -> dict[str, Any]:
    camera = " ".join(part for part in (photo.camera_make, photo.camera_model) if part)
    dimensions = f"{photo.width}x{photo.height}" if photo.width and photo.height else None
    return compact(
        ("file", attachment_filename(photo, MediaCategory.PHOTO)),
        ("identifier", photo.identifier),
        ("camera", camera),
        ("lens", photo.lens_model),
        ("date", photo.date),
        ("dimensions", dimensions),
    )


def _media(record: MediaRecord, category: MediaCategory) -> dict[str, Any]:
    return compact(
        ("file", attachment_filename(record, category)),
        ("identifier", record.identifier),
        ("title", record.title),
        ("date", record.date),
        ("duration", positive(record.duration)),
    )


def _editing_seconds(editing_time: int | float | None) -> int | None:
    if editing_time is None:
        return None
    # Half-up: 2.5 s becomes 3.
    return positive(math.floor(editing_time + 0.5))


def build_frontmatter(entry: RawEntry) -> dict[str, Any]:
    """Ordered frontmatter map for *entry*; absent fields never appear."""
    return compact(
        ("uuid", entry.uuid),
        ("created", entry.creation_date),
        ("modified", entry.modified_date),
        ("timezone", entry.time_zone),
        ("starred", entry.starred or None),
        ("pinned", entry.is_pinned or None),
        ("all_day", entry.is_all_day or None),
        ("tags", sanitize_tags(entry.tags)),
        ("location", _location(entry.location)),
        ("weather", _weather(entry.weather)),
        ("activity", _activity(entry.user_activity)),
        ("device", _device(entry)),
        ("photos", [m for m in (_photo(p) for p in entry.photos) if m]),
        ("videos", [m for m in (_media(r, MediaCategory.VIDEO) for r in entry.videos) if m]),
        ("audios", [m for m in (_media(r, MediaCategory.AUDIO) for r in entry.audios) if m]),
        ("pdfs", [m for m in (_media(r, MediaCategory.PDF) for r in entry.pdf_attachments) if m]),
        ("editing_time_seconds", _editing_seconds(entry.editing_time)),
    )


# ---------------------------------------------------------------------------
# Body
# ---------------------------------------------------------------------------


def unescape_markdown(text: str) -> str:
    """Undo Day One's backslash escaping of Markdown punctuation."""
    for pattern, replacement in UNESCAPE_RULES:
        text = pattern.sub(replacement, text)
    return text


def rewrite_embeds(
    text: str,
    photos: PhotoIndex,
    attachments: dict[tuple[MediaCategory, str], str] | None = None,
    *,
    entry_id: str = "",
) -> str:
    """Replace ``dayone-moment`` embed markers with Obsidian wiki embeds.

    Photos become ``![[<md5>.jpeg]]``. Videos, audio and PDFs become
    ``![[<md5>.<ext>]]``. A marker whose identifier is unknown is replaced
    by an HTML comment naming the identifier.
    """
    attachments = attachments or {}

    def _photo_embed(match: re.Match[str]) -> str:
        identifier = match.group(1)
        md5 = photos.lookup(identifier)
        if md5:
            return f"![[{md5}.jpeg]]"
        logger.warning("Entry %s references missing photo %s", entry_id or "?", identifier)
        return f"<!-- Missing photo: {identifier} -->"

    def _media_embed(match: re.Match[str]) -> str:
        category = MEDIA_SCHEMES[match.group(1)]
        identifier = match.group(2)
        filename = attachments.get((category, identifier.upper()))
        if filename:
            return f"![[{filename}]]"
        logger.warning(
            "Entry %s references missing %s %s", entry_id or "?", category.value, identifier
        )
        return f"<!-- Missing {category.value}: {identifier} -->"

    text = PHOTO_EMBED_RE.sub(_photo_embed, text)
    return MEDIA_EMBED_RE.sub(_media_embed, text)


def normalize_body(
    text: str | None,
    photos: PhotoIndex,
    attachments: dict[tuple[MediaCategory, str], str] | None = None,
    *,
    entry_id: str = "",
) -> str:
    """Unescape, rewrite embeds, then strip zero-width spaces."""
    body = unescape_markdown(text or "")
    body = rewrite_embeds(body, photos, attachments, entry_id=entry_id)
    return body.replace(ZERO_WIDTH_SPACE, "")


def normalize_entry(entry: RawEntry) -> ConvertedEntry:
    """Convert one raw entry into frontmatter plus a cleaned body."""
    photos = PhotoIndex.from_entry(entry)
    body = normalize_body(
        entry.text, photos, _attachment_index(entry), entry_id=entry.uuid
    )
    return ConvertedEntry(uuid=entry.uuid, frontmatter=build_frontmatter(entry), body=body)
