"""
Parser capability interface shared by all supported file formats.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import IO

Row = dict[str, str]


@dataclass(frozen=True)
class ParsedFile:
    """
    Ordered header and row sequence produced by a parser.

    ``headers`` keeps duplicates and blanks exactly as read so the schema
    gate can reject them. ``rows`` only holds rows whose cell count matched
    the header count; the rest are tallied in ``malformed_rows``.
    """

    headers: tuple[str, ...]
    rows: list[Row] = field(default_factory=list)
    malformed_rows: int = 0

    @property
    def total_rows(self) -> int:
        return len(self.rows) + self.malformed_rows


class FileParser(ABC):
    """Turns a binary stream into a ``ParsedFile``."""

    #: Lower-cased extensions (with leading dot) handled by this parser.
    extensions: tuple[str, ...] = ()

    @abstractmethod
    def parse(
        self,
        stream: IO[bytes],
        cancel_event: threading.Event | None = None,
    ) -> ParsedFile:
        """Parse the whole stream.

        Args:
            stream: Readable binary stream positioned at the start of the file.
            cancel_event: Optional event; when set, parsing stops with
                ``ProcessingCancelledError``.

        Returns:
            The parsed header and rows.
        """


def build_row(headers: tuple[str, ...], cells: list[str]) -> Row:
    return {header: cell for header, cell in zip(headers, cells)}
