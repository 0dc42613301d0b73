"""Convert Day One journal exports into an Obsidian vault.

The pipeline loads the export JSON, copies attachments, maps each entry
to YAML frontmatter plus a cleaned Markdown body, and writes one note per
entry. ``VaultWriter`` runs the whole thing.
"""

from dayone_obsidian.errors import ConversionError, MalformedInputError, ParseError
from dayone_obsidian.models import ConversionResult, ConvertedEntry, RawEntry
from dayone_obsidian.writer import VaultWriter

__version__ = "0.1.0"

__all__ = [
    "ConversionError",
    "ConversionResult",
    "ConvertedEntry",
    "MalformedInputError",
    "ParseError",
    "RawEntry",
    "VaultWriter",
    "__version__",
]
