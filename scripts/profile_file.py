"""
Profile a local data file from the CLI without touching the database.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from signals.errors import SignalExtractionError
from signals.extraction import SignalExtractionPipeline
from signals.summarizer import SignalSummarizer


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Extract deterministic signals from a CSV or spreadsheet.")
    parser.add_argument("path", help="Path to a .csv, .tsv, .txt, .xlsx, .xlsm or .xls file.")
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Also print the bounded summary that would be sent to the reasoning layer.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default="WARNING",
        help="Logging level (default: WARNING).",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.strip().upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    source = Path(args.path)
    if not source.is_file():
        print(f"File not found: {source}", file=sys.stderr)
        return 2

    pipeline = SignalExtractionPipeline()
    try:
        with source.open("rb") as stream:
            signals = pipeline.extract_from_stream(source.name, stream)
    except SignalExtractionError as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 1

    payload: dict = {"signals": signals.model_dump(mode="json")}
    if args.summary:
        payload["summary"] = SignalSummarizer().summarize(signals).model_dump(mode="json")
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
