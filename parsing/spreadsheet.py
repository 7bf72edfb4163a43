"""
Spreadsheet parser backed by pandas (openpyxl / xlrd engines).
"""

from __future__ import annotations

import io
import logging
import math
import threading
from datetime import date, datetime, time
from decimal import Decimal
from typing import IO, Any

import pandas as pd

from parsing.base import FileParser, ParsedFile, Row, build_row
from signals.errors import FileParseError, raise_if_cancelled

logger = logging.getLogger(__name__)

_ENGINE_BY_EXTENSION: dict[str, str] = {
    ".xlsx": "openpyxl",
    ".xlsm": "openpyxl",
    ".xls": "xlrd",
}


def cell_to_text(value: Any) -> str:
    """
    Render one spreadsheet cell as the raw string the pipeline works on.
    """

    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if math.isinf(value):
            return repr(float(value))
        if value.is_integer():
            return str(int(value))
        # Positional notation; repr switches to exponents below 1e-4.
        return format(Decimal(repr(float(value))), "f")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            return ""
        return value.to_pydatetime().isoformat()
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value).strip()


class SpreadsheetParser(FileParser):
    """
    Reads the first sheet of a workbook.

    The first row is the header and every remaining row is data. The frame is
    rectangular, so every data row matches the header width.
    """

    extensions = tuple(_ENGINE_BY_EXTENSION)

    def __init__(self, extension: str = ".xlsx") -> None:
        self._engine = _ENGINE_BY_EXTENSION.get(extension.lower(), "openpyxl")

    def parse(
        self,
        stream: IO[bytes],
        cancel_event: threading.Event | None = None,
    ) -> ParsedFile:
        raise_if_cancelled(cancel_event, "spreadsheet read")
        payload = stream.read()
        try:
            with io.BytesIO(payload) as buffer:
                frame = pd.read_excel(
                    buffer,
                    sheet_name=0,
                    header=None,
                    dtype=object,
                    engine=self._engine,
                )
        except ImportError:
            raise
        except Exception as exc:
            raise FileParseError(f"Unable to read spreadsheet: {exc}") from exc

        raise_if_cancelled(cancel_event, "parsing")
        if frame.empty:
            return ParsedFile(headers=())

        records = frame.itertuples(index=False, name=None)
        headers = tuple(cell_to_text(value) for value in next(records))

        rows: list[Row] = []
        for values in records:
            rows.append(build_row(headers, [cell_to_text(value) for value in values]))

        raise_if_cancelled(cancel_event, "parsing")
        logger.debug("Parsed spreadsheet with %d header(s) and %d row(s)", len(headers), len(rows))
        return ParsedFile(headers=headers, rows=rows)
