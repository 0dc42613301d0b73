"""Duplicate entry detection within one conversion run."""

from __future__ import annotations

import hashlib
import logging

from dayone_obsidian.models import RawEntry

logger = logging.getLogger(__name__)


def fingerprint(text: str | None) -> str:
    """Short SHA-256 digest of an entry body."""
    return hashlib.sha256((text or "").encode("utf-8")).hexdigest()[:16]


class DedupIndex:
    """Entry uuid → body fingerprints already converted this run.

    Only a repeat of the same uuid with identical text counts as a
    duplicate. An edited copy (same uuid, different text) is converted
    too, and entries with different uuids are never compared.
    """

    def __init__(self) -> None:
        self._seen: dict[str, set[str]] = {}

    def __len__(self) -> int:
        return len(self._seen)

    def is_duplicate(self, entry: RawEntry) -> bool:
        """Check *entry* against the index, recording it when it is new."""
        if not entry.uuid:
            return False

        digest = fingerprint(entry.text)
        seen = self._seen.setdefault(entry.uuid, set())
        if digest in seen:
            logger.debug("Entry %s already converted (fingerprint %s)", entry.uuid, digest)
            return True
        if seen:
            logger.info("Entry %s appears again with different text, converting both", entry.uuid)
        seen.add(digest)
        return False
