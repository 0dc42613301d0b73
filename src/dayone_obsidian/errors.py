"""Errors raised by the conversion pipeline."""

from __future__ import annotations


class ConversionError(Exception):
    """Base error for a failed conversion."""


class MalformedInputError(ConversionError):
    """The input holds no usable journal document.

    Fatal: raised before any entry is written.
    """


class ParseError(ConversionError):
    """A single JSON document could not be read as a journal.

    The loader catches this and treats the document as having no entries.
    """

    def __init__(self, document: str, reason: str) -> None:
        self.document = document
        self.reason = reason
        super().__init__(f"{document}: {reason}")
