"""Tests for copying attachments into the vault."""

from __future__ import annotations

from pathlib import Path

import pytest

from dayone_obsidian.errors import MalformedInputError
from dayone_obsidian.loader import open_source
from dayone_obsidian.media import materialize_media

MEDIA = {
    "photos/p1.jpeg": b"photo",
    "videos/v1.mov": b"video",
    "audios/a1.m4a": b"audio",
    "pdfAttachments/d1.pdf": b"pdf-1",
    "pdfs/d2.pdf": b"pdf-2",
}


@pytest.mark.parametrize("as_zip", [False, True])
def test_copies_every_category_flat(build_export, tmp_path: Path, as_zip: bool) -> None:
    bundle = build_export(media=MEDIA, as_zip=as_zip)
    dest = tmp_path / "vault" / "attachments"

    with open_source(bundle) as source:
        report = materialize_media(source, dest)

    assert sorted(p.name for p in dest.iterdir()) == [
        "a1.m4a",
        "d1.pdf",
        "d2.pdf",
        "p1.jpeg",
        "v1.mov",
    ]
    assert (dest / "p1.jpeg").read_bytes() == b"photo"
    assert report.copied == 5
    assert report.skipped == 0
    assert report.by_category == {"photo": 1, "video": 1, "audio": 1, "pdf": 2}


def test_rerun_skips_existing_files(build_export, tmp_path: Path) -> None:
    bundle = build_export(media=MEDIA)
    dest = tmp_path / "attachments"

    with open_source(bundle) as source:
        materialize_media(source, dest)
        report = materialize_media(source, dest)

    assert report.copied == 0
    assert report.skipped == 5


def test_first_file_with_a_basename_wins(build_export, tmp_path: Path) -> None:
    bundle = build_export(
        media={"A/photos/same.jpeg": b"first", "B/photos/same.jpeg": b"second"}
    )
    dest = tmp_path / "attachments"

    with open_source(bundle) as source:
        report = materialize_media(source, dest)

    assert (dest / "same.jpeg").read_bytes() == b"first"
    assert report.copied == 1
    assert report.skipped == 1


def test_existing_destination_is_not_overwritten(build_export, tmp_path: Path) -> None:
    bundle = build_export(media={"photos/p1.jpeg": b"new"})
    dest = tmp_path / "attachments"
    dest.mkdir()
    (dest / "p1.jpeg").write_bytes(b"old")

    with open_source(bundle) as source:
        materialize_media(source, dest)

    assert (dest / "p1.jpeg").read_bytes() == b"old"


def test_export_without_media(build_export, tmp_path: Path) -> None:
    bundle = build_export()
    dest = tmp_path / "attachments"

    with open_source(bundle) as source:
        report = materialize_media(source, dest)

    assert dest.is_dir()
    assert report.copied == 0


def test_corrupt_member_fails_without_leaving_a_partial_file(
    build_export, corrupt_zip, tmp_path: Path
) -> None:
    bundle = build_export(media={"photos/p1.jpeg": b"photo-payload"}, as_zip=True)
    corrupt_zip(bundle, b"photo-payload")
    dest = tmp_path / "attachments"

    with open_source(bundle) as source, pytest.raises(MalformedInputError, match="p1.jpeg"):
        materialize_media(source, dest)

    assert not (dest / "p1.jpeg").exists()
