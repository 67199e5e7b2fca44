"""Readers that turn uploaded CSV/XLSX files into column-keyed rows."""

from __future__ import annotations

import csv
import io
import zipfile
from pathlib import Path
from typing import Iterable

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..services.errors import InvalidUploadError, UnsupportedFileTypeError

SUPPORTED_SUFFIXES = {".csv", ".xlsx"}


def _normalize_header(header: object) -> str:
    return str(header if header is not None else "").strip().lower()


def _normalize_value(value: object) -> str:
    return "" if value is None else str(value).strip()


def _rows_from_records(headers: list[str], records: Iterable[Iterable[object]]) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for record in records:
        values = list(record)
        if not any(_normalize_value(value) for value in values):
            continue  # blank line
        row = {
            header: _normalize_value(values[position]) if position < len(values) else ""
            for position, header in enumerate(headers)
            if header
        }
        rows.append(row)
    return rows


def parse_csv(text: str) -> list[dict[str, str]]:
    """Parse CSV text; headers are lowercased and trimmed, values trimmed."""
    try:
        reader = csv.reader(io.StringIO(text))
        header_row = next(reader, None)
        if not header_row or not any(cell.strip() for cell in header_row):
            raise InvalidUploadError("CSV file is missing a header row.")
        headers = [_normalize_header(cell) for cell in header_row]
        return _rows_from_records(headers, reader)
    except csv.Error as exc:
        raise InvalidUploadError(f"Error reading file. Please ensure it is a valid CSV file: {exc}") from exc


def parse_xlsx(payload: bytes) -> list[dict[str, str]]:
    """Parse the active worksheet of an XLSX workbook with the same normalisation as CSV."""
    try:
        workbook = load_workbook(filename=io.BytesIO(payload), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
        raise InvalidUploadError(f"Error reading file. Please ensure it is a valid XLSX file: {exc}") from exc
    try:
        worksheet = workbook.active
        records = worksheet.iter_rows(values_only=True)
        header_row = next(records, None)
        if not header_row or not any(_normalize_value(cell) for cell in header_row):
            raise InvalidUploadError("Worksheet is missing a header row.")
        headers = [_normalize_header(cell) for cell in header_row]
        return _rows_from_records(headers, records)
    finally:
        workbook.close()


def parse_upload(filename: str, payload: bytes) -> list[dict[str, str]]:
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise UnsupportedFileTypeError("Only .csv and .xlsx files are supported.")
    if suffix == ".xlsx":
        return parse_xlsx(payload)
    try:
        text = payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise InvalidUploadError("CSV file must be UTF-8 encoded.") from exc
    return parse_csv(text)
