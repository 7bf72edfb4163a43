"""
Selects the parser for a source file by its extension.

Keeps format-specific logic out of the extraction pipeline; supporting a new
format means registering another ``FileParser`` here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import PurePosixPath

from parsing.base import FileParser
from parsing.delimited import DelimitedTextParser
from parsing.spreadsheet import SpreadsheetParser
from signals.errors import UnsupportedFormatError

logger = logging.getLogger(__name__)

ParserBuilder = Callable[[str], FileParser]


def _delimited(_: str) -> FileParser:
    return DelimitedTextParser()


def _spreadsheet(extension: str) -> FileParser:
    return SpreadsheetParser(extension)


_DEFAULT_REGISTRY: dict[str, ParserBuilder] = {
    **{extension: _delimited for extension in DelimitedTextParser.extensions},
    **{extension: _spreadsheet for extension in SpreadsheetParser.extensions},
}


def extension_of(source_path: str) -> str:
    return PurePosixPath(source_path.replace("\\", "/")).suffix.lower()


class FileParserFactory:
    def __init__(self, registry: dict[str, ParserBuilder] | None = None) -> None:
        self._registry = dict(registry or _DEFAULT_REGISTRY)

    @property
    def supported_extensions(self) -> tuple[str, ...]:
        return tuple(sorted(self._registry))

    def create(self, source_path: str) -> FileParser:
        """
        Return the parser for ``source_path``.

        Raises:
            ValueError: If the path is blank.
            UnsupportedFormatError: If no parser handles the extension.
        """

        if not source_path or not source_path.strip():
            raise ValueError("Source path cannot be empty.")

        extension = extension_of(source_path)
        logger.info("Selecting parser for extension %s", extension or "<none>")

        builder = self._registry.get(extension)
        if builder is None:
            raise UnsupportedFormatError(extension)
        return builder(extension)
