"""Human-readable, collision-free note filenames."""

from __future__ import annotations

import re

from dayone_obsidian.models import RawEntry
from dayone_obsidian.normalizer import ANY_EMBED_RE, ZERO_WIDTH_SPACE, unescape_markdown

MAX_TITLE_LENGTH = 50
ID_FRAGMENT_LENGTH = 8

_HEADING_RE = re.compile(r"^#\s+(.+)$")
_LEADING_HASHES_RE = re.compile(r"^#+\s*")
# Reserved on common filesystems, plus control characters other than whitespace.
_RESERVED_CHARS_RE = re.compile(r'[/\\:*?"<>|\x00-\x08\x0e-\x1f\x7f]')


class FilenameRegistry:
    """Filenames handed out during one conversion run.

    Names are compared case-insensitively so two notes never collide on
    a case-insensitive filesystem.
    """

    def __init__(self) -> None:
        self._taken: set[str] = set()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.casefold() in self._taken

    def __len__(self) -> int:
        return len(self._taken)

    def add(self, name: str) -> None:
        self._taken.add(name.casefold())


def extract_title(text: str | None) -> str | None:
    """Pick a note title from the entry body.

    Priority:
    1. The first non-blank line, when it is a level-1 heading.
    2. The first line that still has text once embed markers and
       leading ``#`` markers are removed.

    Returns:
        The unescaped title, or None when the body has no usable text.
    """
    if not text:
        return None

    lines = [line.replace(ZERO_WIDTH_SPACE, "").strip() for line in text.splitlines()]
    first = next((line for line in lines if line), None)
    if first is None:
        return None

    heading = _HEADING_RE.match(first)
    if heading:
        title = unescape_markdown(heading.group(1)).strip()
        if title:
            return title

    for line in lines:
        candidate = _LEADING_HASHES_RE.sub("", ANY_EMBED_RE.sub("", line).strip()).strip()
        if candidate:
            return unescape_markdown(candidate).strip() or None
    return None


def sanitize_title(title: str) -> str:
    """Make *title* safe for a filename and cap it at 50 characters."""
    title = _RESERVED_CHARS_RE.sub("-", title)
    title = re.sub(r"\s+", " ", title).strip()
    return title[:MAX_TITLE_LENGTH]


def derive_filename(entry: RawEntry, registry: FilenameRegistry) -> str:
    """Allocate ``YYYY-MM-DD Title.md`` for *entry* and record it.

    The title falls back to the first 8 characters of the entry uuid.
    A name already handed out this run gets the uuid fragment appended in
    parentheses; if the same uuid is converted more than once a counter
    follows the fragment.
    """
    date_str = entry.created_at.strftime("%Y-%m-%d")
    fragment = entry.uuid[:ID_FRAGMENT_LENGTH]
    title = sanitize_title(extract_title(entry.text) or "") or fragment or "untitled"
    stem = f"{date_str} {title}"

    filename = f"{stem}.md"
    if filename in registry:
        label = fragment or "1"
        filename = f"{stem} ({label}).md"
        counter = 2
        while filename in registry:
            filename = f"{stem} ({label}-{counter}).md" if fragment else f"{stem} ({counter}).md"
            counter += 1

    registry.add(filename)
    return filename
