"""
Fail-fast structural gate applied to parsed files before any statistics.
"""

from __future__ import annotations

from parsing.base import ParsedFile
from signals.errors import SchemaError


class SchemaValidator:
    """
    Validates minimum schema requirements. Never repairs headers.
    """

    def validate(self, parsed: ParsedFile) -> None:
        if not parsed.headers:
            raise SchemaError("No headers detected.")

        blank = [index + 1 for index, header in enumerate(parsed.headers) if not header.strip()]
        if blank:
            positions = ", ".join(str(position) for position in blank)
            raise SchemaError(f"Empty column name detected at position(s) {positions}.")

        seen: set[str] = set()
        duplicates: list[str] = []
        for header in parsed.headers:
            if header in seen and header not in duplicates:
                duplicates.append(header)
            seen.add(header)
        if duplicates:
            raise SchemaError(f"Duplicate column name(s) detected: {', '.join(duplicates)}.")

        if parsed.total_rows == 0:
            raise SchemaError("File contains no data rows.")
