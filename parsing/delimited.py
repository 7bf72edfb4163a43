"""
Streaming parser for delimited text files (CSV, semicolon, tab).
"""

from __future__ import annotations

import csv
import io
import itertools
import logging
import threading
from typing import IO, Iterator

from parsing.base import FileParser, ParsedFile, Row, build_row
from signals.errors import FileParseError, raise_if_cancelled

logger = logging.getLogger(__name__)

# Candidate delimiters in detection priority order.
_DELIMITER_CANDIDATES: tuple[str, ...] = (";", "\t")
_DEFAULT_DELIMITER = ","
_CANCEL_CHECK_INTERVAL = 1000


def detect_delimiter(header_line: str) -> str:
    """
    Pick the delimiter for a header line.

    Semicolon wins over tab, and a header with neither is comma separated,
    so "Name;Amount,EUR" splits on the semicolon only.
    """

    for candidate in _DELIMITER_CANDIDATES:
        if candidate in header_line:
            return candidate
    return _DEFAULT_DELIMITER


def _is_blank_line(line: str) -> bool:
    return line.strip() == ""


class DelimitedTextParser(FileParser):
    """
    Parses delimited text line by line without buffering the whole file.

    The first non-blank line is the header. Blank lines are skipped. Cells are
    trimmed; rows whose cell count differs from the header are not repaired.
    """

    extensions = (".csv", ".tsv", ".txt")

    def parse(
        self,
        stream: IO[bytes],
        cancel_event: threading.Event | None = None,
    ) -> ParsedFile:
        text_stream = io.TextIOWrapper(stream, encoding="utf-8-sig", newline="")
        try:
            return self._parse_text(text_stream, cancel_event)
        except UnicodeDecodeError as exc:
            raise FileParseError("Delimited file must be UTF-8 encoded.") from exc
        except csv.Error as exc:
            raise FileParseError(f"Invalid delimited format: {exc}") from exc
        finally:
            try:
                text_stream.detach()
            except ValueError:
                pass

    def _parse_text(
        self,
        text_stream: io.TextIOWrapper,
        cancel_event: threading.Event | None,
    ) -> ParsedFile:
        header_line = self._first_non_blank_line(text_stream)
        if header_line is None:
            return ParsedFile(headers=())

        delimiter = detect_delimiter(header_line)
        reader = csv.reader(itertools.chain([header_line], text_stream), delimiter=delimiter)
        headers = tuple(cell.strip() for cell in next(reader))

        rows: list[Row] = []
        malformed_rows = 0
        for index, cells in enumerate(self._non_blank_records(reader), start=1):
            if index % _CANCEL_CHECK_INTERVAL == 0:
                raise_if_cancelled(cancel_event, "parsing")
            if len(cells) != len(headers):
                malformed_rows += 1
                continue
            rows.append(build_row(headers, [cell.strip() for cell in cells]))

        raise_if_cancelled(cancel_event, "parsing")
        if malformed_rows:
            logger.info(
                "Skipped %d delimited row(s) with mismatched cell count (delimiter=%r)",
                malformed_rows,
                delimiter,
            )
        return ParsedFile(headers=headers, rows=rows, malformed_rows=malformed_rows)

    @staticmethod
    def _first_non_blank_line(text_stream: io.TextIOWrapper) -> str | None:
        for line in text_stream:
            if not _is_blank_line(line):
                return line
        return None

    @staticmethod
    def _non_blank_records(reader: Iterator[list[str]]) -> Iterator[list[str]]:
        for cells in reader:
            # csv yields [] for an empty line and one blank cell for whitespace.
            if not cells or (len(cells) == 1 and cells[0].strip() == ""):
                continue
            yield cells
