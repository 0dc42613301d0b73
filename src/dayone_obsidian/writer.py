"""Run a full conversion and write the vault to disk.

``VaultWriter`` is the entry point for callers (the CLI, or anything
embedding the converter). One ``convert()`` call owns the per-run state:
the filename registry and the dedup index live for that call only.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from dayone_obsidian.dedup import DedupIndex
from dayone_obsidian.filenames import FilenameRegistry, derive_filename
from dayone_obsidian.loader import load_journal, open_source
from dayone_obsidian.media import materialize_media
from dayone_obsidian.models import ConversionResult, ConvertedEntry
from dayone_obsidian.normalizer import normalize_entry

logger = logging.getLogger(__name__)

ENTRIES_DIRNAME = "entries"
ATTACHMENTS_DIRNAME = "attachments"


def render_note(converted: ConvertedEntry) -> str:
    """Serialize frontmatter and body into one Markdown document."""
    if converted.frontmatter:
        fm = yaml.safe_dump(
            converted.frontmatter,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    else:
        fm = ""
    return f"---\n{fm}---\n\n{converted.body}"


class VaultWriter:
    """Convert a Day One export into ``entries/`` and ``attachments/``.

    Args:
        input_path: ZIP archive or extracted export directory.
        output_dir: Vault root; created if missing.
        deduplicate: Skip exact repeats of an entry (same uuid, same text).
        entries_dirname: Folder for entry notes under *output_dir*.
        attachments_dirname: Folder for media under *output_dir*.
    """

    def __init__(
        self,
        input_path: str | Path,
        output_dir: str | Path,
        deduplicate: bool = True,
        *,
        entries_dirname: str = ENTRIES_DIRNAME,
        attachments_dirname: str = ATTACHMENTS_DIRNAME,
    ) -> None:
        self.input_path = Path(input_path)
        self.output_dir = Path(output_dir)
        self.deduplicate = deduplicate
        self.entries_dir = self.output_dir / entries_dirname
        self.attachments_dir = self.output_dir / attachments_dirname

    def convert(self) -> ConversionResult:
        """Run the whole conversion.

        Raises:
            MalformedInputError: No usable journal document in the input.
            OSError: Copying an attachment or writing a note failed. Notes
                written before the failure stay on disk.
        """
        self.entries_dir.mkdir(parents=True, exist_ok=True)
        self.attachments_dir.mkdir(parents=True, exist_ok=True)

        result = ConversionResult(output_dir=self.output_dir)
        registry = FilenameRegistry()
        dedup = DedupIndex() if self.deduplicate else None

        with open_source(self.input_path) as source:
            journal = load_journal(source)
            media = materialize_media(source, self.attachments_dir)

        result.documents = len(journal.documents)
        result.invalid = journal.invalid
        result.attachments_copied = media.copied
        result.attachments_skipped = media.skipped

        for entry in journal.entries:
            if dedup is not None and dedup.is_duplicate(entry):
                result.duplicates += 1
                continue

            converted = normalize_entry(entry)
            filename = derive_filename(entry, registry)
            path = self.entries_dir / filename
            path.write_text(render_note(converted), encoding="utf-8")
            logger.debug("Wrote %s", path)

            result.written.append(path)
            result.converted += 1

        logger.info(
            "Converted %d entries (%d duplicates skipped, %d invalid) into %s",
            result.converted,
            result.duplicates,
            result.invalid,
            self.output_dir,
        )
        return result
