#!/usr/bin/env python3
"""Compute distances for a local CSV/XLSX file and write the results next to it."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from geodist.config import settings
from geodist.services.bulk import BulkSession
from geodist.services.errors import BulkProcessingError, InvalidUploadError, NoValidRowsError
from geodist.services.outputs.formatter import results_filename, results_to_csv


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("input", type=Path, help="CSV or XLSX file with from/to columns or coordinates")
    parser.add_argument("--mode", choices=("air", "road"), default="air")
    parser.add_argument("--output-dir", type=Path, default=None, help="Defaults to the input file's directory")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    if not args.input.exists():
        print(f"Input file not found: {args.input}", file=sys.stderr)
        return 1

    session = BulkSession()
    try:
        outcome = await session.process_upload(args.input.name, args.input.read_bytes(), args.mode)
    except (InvalidUploadError, NoValidRowsError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except BulkProcessingError as exc:
        print(f"Error processing file: {exc}", file=sys.stderr)
        return 1

    output_dir = args.output_dir or args.input.parent
    output_dir.mkdir(parents=True, exist_ok=True)
    destination = output_dir / results_filename(outcome.mode)
    destination.write_text(results_to_csv(outcome.results, outcome.mode), encoding="utf-8")

    failed = sum(1 for resolved in outcome.results if resolved.error)
    print(f"Wrote {len(outcome.results)} rows ({failed} with errors) to {destination}")
    return 0


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run(parse_args(sys.argv[1:] if argv is None else argv)))


if __name__ == "__main__":
    sys.exit(main())
