"""Journal export loading from a ZIP archive or an extracted directory."""

from __future__ import annotations

import json
import logging
import shutil
import zipfile
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import IO, Any

from pydantic import ValidationError

from dayone_obsidian.errors import MalformedInputError, ParseError
from dayone_obsidian.models import MEDIA_FOLDERS, LoadedJournal, MediaCategory, RawEntry

logger = logging.getLogger(__name__)

_ALL_MEDIA_FOLDERS = frozenset(
    folder for folders in MEDIA_FOLDERS.values() for folder in folders
)


def _is_junk(name: str) -> bool:
    """macOS archive artefacts that are never part of the export."""
    parts = PurePosixPath(name).parts
    return "__MACOSX" in parts or parts[-1].startswith("._") or parts[-1] == ".DS_Store"


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MediaFile:
    """One attachment file inside a source, addressed by its relative path."""

    name: str
    category: MediaCategory

    @property
    def basename(self) -> str:
        return PurePosixPath(self.name).name


class JournalSource(ABC):
    """Base class for the two shapes an export bundle can take.

    Subclasses list their files as POSIX-style paths relative to the
    bundle root and know how to read them. Discovery of JSON documents
    and media files is shared.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def __enter__(self) -> JournalSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release any open handle on the bundle."""

    @abstractmethod
    def file_names(self) -> list[str]:
        """Relative paths of every regular file in the bundle."""

    @abstractmethod
    def read(self, name: str) -> bytes:
        """Read a whole file."""

    @abstractmethod
    def open(self, name: str) -> IO[bytes]:
        """Open a file for streaming binary reads."""

    def copy(self, name: str, dest: Path) -> None:
        """Stream one file to *dest*."""
        with self.open(name) as src, dest.open("wb") as dst:
            shutil.copyfileobj(src, dst)

    def json_documents(self) -> list[str]:
        """Journal JSON documents, preferring top-level ones.

        Falls back to a recursive search when the bundle root holds no
        JSON file. JSON files inside media folders are never journals.
        """
        candidates = []
        for name in self.file_names():
            if _is_junk(name) or not name.lower().endswith(".json"):
                continue
            if _ALL_MEDIA_FOLDERS.intersection(PurePosixPath(name).parts[:-1]):
                continue
            candidates.append(name)

        top_level = [name for name in candidates if "/" not in name]
        return sorted(top_level or candidates)

    def media_files(self, category: MediaCategory) -> Iterator[MediaFile]:
        """Every file beneath a folder named for *category*, at any depth."""
        folders = set(MEDIA_FOLDERS[category])
        for name in self.file_names():
            if _is_junk(name):
                continue
            if folders.intersection(PurePosixPath(name).parts[:-1]):
                yield MediaFile(name=name, category=category)


class ZipJournalSource(JournalSource):
    """Export bundle read straight from a ZIP archive."""

    def __init__(self, path: Path) -> None:
        super().__init__(path)
        try:
            self._zip = zipfile.ZipFile(path)
        except (zipfile.BadZipFile, OSError) as exc:
            raise MalformedInputError(f"Cannot open archive {path}: {exc}") from exc

    def close(self) -> None:
        self._zip.close()

    def file_names(self) -> list[str]:
        return [info.filename for info in self._zip.infolist() if not info.is_dir()]

    def read(self, name: str) -> bytes:
        try:
            return self._zip.read(name)
        except zipfile.BadZipFile as exc:
            raise MalformedInputError(f"Corrupt archive member {name}: {exc}") from exc

    def open(self, name: str) -> IO[bytes]:
        try:
            return self._zip.open(name)
        except zipfile.BadZipFile as exc:
            raise MalformedInputError(f"Corrupt archive member {name}: {exc}") from exc

    def copy(self, name: str, dest: Path) -> None:
        # A bad CRC only surfaces once the member has been read to the end.
        try:
            super().copy(name, dest)
        except zipfile.BadZipFile as exc:
            dest.unlink(missing_ok=True)
            raise MalformedInputError(f"Corrupt archive member {name}: {exc}") from exc


class DirectoryJournalSource(JournalSource):
    """Export bundle that has already been extracted to disk."""

    def file_names(self) -> list[str]:
        return sorted(
            p.relative_to(self.path).as_posix() for p in self.path.rglob("*") if p.is_file()
        )

    def read(self, name: str) -> bytes:
        return (self.path / name).read_bytes()

    def open(self, name: str) -> IO[bytes]:
        return (self.path / name).open("rb")


def open_source(input_path: str | Path) -> JournalSource:
    """Pick the source type for *input_path*.

    Raises:
        MalformedInputError: The path is missing, or is a file that is
            not a ZIP archive.
    """
    path = Path(input_path)
    if not path.exists():
        raise MalformedInputError(f"Input not found: {path}")
    if path.is_dir():
        return DirectoryJournalSource(path)
    if zipfile.is_zipfile(path):
        return ZipJournalSource(path)
    raise MalformedInputError(f"Input is neither a ZIP archive nor a directory: {path}")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_document(name: str, raw: bytes) -> list[dict[str, Any]]:
    """Decode one JSON document and return its raw entry records.

    Raises:
        ParseError: The content is not JSON, or has no ``entries`` list.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(name, f"invalid JSON ({exc})") from exc

    if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
        raise ParseError(name, "no 'entries' list")
    return data["entries"]


def build_entries(records: list[Any], document: str) -> tuple[list[RawEntry], int]:
    """Model raw records, skipping the ones that cannot be modelled.

    Returns:
        The valid entries and the number of records skipped.
    """
    entries: list[RawEntry] = []
    invalid = 0
    for position, record in enumerate(records):
        if not isinstance(record, dict):
            logger.warning("%s: entry #%d is not an object, skipping", document, position)
            invalid += 1
            continue
        try:
            entries.append(RawEntry.model_validate(record))
        except ValidationError as exc:
            logger.warning(
                "%s: entry #%d (%s) is unusable, skipping: %s",
                document,
                position,
                record.get("uuid", "no uuid"),
                exc.errors()[0]["msg"] if exc.errors() else exc,
            )
            invalid += 1
    return entries, invalid


def load_journal(source: JournalSource) -> LoadedJournal:
    """Collect entries from every journal document in *source*.

    A document that fails to parse contributes no entries and the run
    carries on: partial exports are tolerated on purpose.

    Raises:
        MalformedInputError: No JSON document exists, or none parses.
    """
    names = source.json_documents()
    if not names:
        raise MalformedInputError(f"No journal JSON document found in {source.path}")

    journal = LoadedJournal()
    for name in names:
        try:
            records = parse_document(name, source.read(name))
        except (ParseError, MalformedInputError) as exc:
            logger.warning("Skipping unreadable journal document %s", exc)
            continue

        entries, invalid = build_entries(records, name)
        journal.documents.append(name)
        journal.entries.extend(entries)
        journal.invalid += invalid
        logger.info("Read %d entries from %s", len(entries), name)

    if not journal.documents:
        raise MalformedInputError(f"No parseable journal document found in {source.path}")

    logger.info(
        "Loaded %d entries from %d document(s)", len(journal.entries), len(journal.documents)
    )
    return journal
