"""
tests/test_storage.py

Local source storage and the offline profiling script.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from db.repositories.errors import InvalidSourcePathError
from db.repositories.storage import LocalFileStorage, normalize_source_path
from scripts.profile_file import main as profile_main
from signals.errors import SourceNotFoundError


class TestNormalizeSourcePath:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("sales.csv", "sales.csv"),
            ("  q1/sales.csv ", "q1/sales.csv"),
            ("q1\\sales.csv", "q1/sales.csv"),
            ("./q1/sales.csv", "q1/sales.csv"),
        ],
    )
    def test_valid(self, raw: str, expected: str) -> None:
        assert normalize_source_path(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "/etc/passwd", "../up.csv", "a/../../b.csv"])
    def test_rejected(self, raw: str) -> None:
        with pytest.raises(InvalidSourcePathError):
            normalize_source_path(raw)


class TestLocalFileStorage:
    def test_open_reads_bytes(
        self,
        storage: LocalFileStorage,
        write_upload: Callable[[str, str | bytes], str],
    ) -> None:
        write_upload("nested/data.csv", b"A\n1\n")

        with storage.open("uploads", "nested/data.csv") as stream:
            assert stream.read() == b"A\n1\n"

    def test_missing_file(self, storage: LocalFileStorage) -> None:
        with pytest.raises(SourceNotFoundError) as exc_info:
            storage.open("uploads", "absent.csv")

        assert exc_info.value.container == "uploads"
        assert exc_info.value.path == "absent.csv"

    def test_directory_is_not_a_source(self, storage: LocalFileStorage, storage_root: Path) -> None:
        (storage_root / "uploads" / "folder.csv").mkdir()

        with pytest.raises(SourceNotFoundError):
            storage.open("uploads", "folder.csv")

    def test_resolve_stays_inside_container(self, storage: LocalFileStorage, storage_root: Path) -> None:
        resolved = storage.resolve("uploads", "a/b.csv")

        assert resolved == (storage_root / "uploads" / "a" / "b.csv").resolve()


class TestProfileScript:
    def test_prints_signals_and_summary(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        source = tmp_path / "sales.csv"
        source.write_text("Region,Revenue\nUS,100\nEU,200\nUS,150\n", encoding="utf-8")

        exit_code = profile_main([str(source), "--summary"])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["signals"]["record_count"] == 3
        assert output["signals"]["numeric_totals"] == {"Revenue": "450"}
        assert output["summary"]["category_highlights"][0]["value"] == "US"

    def test_missing_file_exit_code(self, tmp_path: Path) -> None:
        assert profile_main([str(tmp_path / "absent.csv")]) == 2

    def test_invalid_file_exit_code(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        source = tmp_path / "empty.csv"
        source.write_text("A,B\n", encoding="utf-8")

        assert profile_main([str(source)]) == 1
        assert "SchemaError" in capsys.readouterr().err
