"""Copy export attachments into the vault's flat attachments folder."""

from __future__ import annotations

import logging
from pathlib import Path

from dayone_obsidian.loader import JournalSource
from dayone_obsidian.models import MediaCategory, MediaReport

logger = logging.getLogger(__name__)


def materialize_media(source: JournalSource, attachments_dir: Path) -> MediaReport:
    """Copy every photo, video, audio and PDF file by basename.

    A file whose basename already exists in *attachments_dir* is left
    alone, so re-running over overlapping inputs is cheap. Files are not
    compared by content: when two different sources share a basename the
    first one copied wins.

    Args:
        source: Open export bundle.
        attachments_dir: Flat destination folder (created if missing).

    Returns:
        Copy/skip counters.

    Raises:
        MalformedInputError: An archive member is corrupt. The partial
            copy is removed so a re-run does not skip it.
    """
    attachments_dir.mkdir(parents=True, exist_ok=True)
    report = MediaReport()

    for category in MediaCategory:
        copied = 0
        for media in source.media_files(category):
            dest = attachments_dir / media.basename
            if dest.exists():
                logger.debug("Attachment %s already present, skipping %s", dest.name, media.name)
                report.skipped += 1
                continue
            source.copy(media.name, dest)
            logger.debug("Copied %s -> %s", media.name, dest)
            copied += 1
        if copied:
            report.by_category[category.value] = copied
        report.copied += copied

    logger.info(
        "Attachments: %d copied, %d already present", report.copied, report.skipped
    )
    return report
