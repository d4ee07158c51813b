"""Streaming ingestion of uploaded delimited/spreadsheet files.

Files are read chunk by chunk with pandas so memory stays proportional to
one chunk plus any distinct-value sets being collected. Every cell is kept
as text; empty cells come back as ``None``, never as the literal string.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import IO, Optional

import pandas as pd

from fieldmap.core.exceptions import ParseError
from fieldmap.core.types import RawRow
from fieldmap.models.upload import IngestResult

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 10_000
SPREADSHEET_EXTENSIONS: tuple[str, ...] = (".xlsx", ".xlsm")


def is_spreadsheet(filename: Optional[str]) -> bool:
    return bool(filename) and filename.lower().endswith(SPREADSHEET_EXTENSIONS)


def _raw_header_row(stream: IO[bytes], read) -> list[str]:
    """First row exactly as written; *read* is a pandas reader with ``header=None``."""
    start = stream.tell()
    try:
        first = read(stream)
    finally:
        stream.seek(start)
    if first.empty:
        return []
    return ["" if pd.isna(value) else str(value) for value in first.iloc[0]]


def _restore_headers(parsed: list[str], raw: list[str]) -> list[str]:
    """Undo pandas' ``Unnamed: N`` labels for header cells that were empty.

    Repeated empty cells are suffixed the way pandas suffixes other
    duplicates (``""``, ``".1"``).
    """
    headers: list[str] = []
    for index, name in enumerate(parsed):
        if index < len(raw) and raw[index] == "":
            name, n = "", 0
            while name in headers:
                n += 1
                name = f".{n}"
        headers.append(name)
    return headers


def _read_csv_chunks(
    stream: IO[bytes], chunk_size: int, encoding: str, delimiter: str
) -> Iterator[pd.DataFrame]:
    options = {"sep": delimiter, "encoding": encoding, "dtype": str, "skip_blank_lines": True}
    try:
        raw = _raw_header_row(
            stream,
            lambda s: pd.read_csv(s, header=None, nrows=1, keep_default_na=False, **options),
        )
        reader = pd.read_csv(
            stream,
            keep_default_na=False,
            na_values=[""],
            chunksize=chunk_size,
            **options,
        )
        with reader:
            for chunk in reader:
                # pandas turns the first column into the index when the
                # first data row has one field more than the header
                if len(chunk) and not isinstance(chunk.index, pd.RangeIndex):
                    raise ParseError("Data row has more fields than the header row")
                chunk.columns = _restore_headers([str(c) for c in chunk.columns], raw)
                yield chunk
    except ParseError:
        raise
    except pd.errors.EmptyDataError as exc:
        raise ParseError("File has no header row") from exc
    except Exception as exc:
        raise ParseError(f"Could not parse delimited file: {exc}") from exc


def _read_spreadsheet_chunks(stream: IO[bytes], chunk_size: int) -> Iterator[pd.DataFrame]:
    try:
        raw = _raw_header_row(
            stream, lambda s: pd.read_excel(s, sheet_name=0, header=None, nrows=1, dtype=str)
        )
        frame = pd.read_excel(
            stream, sheet_name=0, dtype=str, keep_default_na=False, na_values=[""]
        )
    except Exception as exc:
        raise ParseError(f"Could not parse spreadsheet: {exc}") from exc

    if len(frame.columns) == 0:
        raise ParseError("File has no header row")
    frame.columns = _restore_headers([str(c) for c in frame.columns], raw)

    frame = frame.dropna(how="all")
    if frame.empty:
        yield frame
        return
    for start in range(0, len(frame), chunk_size):
        yield frame.iloc[start:start + chunk_size]


def _chunks(
    stream: IO[bytes],
    filename: Optional[str],
    chunk_size: int,
    encoding: str,
    delimiter: str,
) -> Iterator[tuple[list[str], pd.DataFrame]]:
    """Yield ``(headers, chunk)``; raises ParseError if no header row is found."""
    if is_spreadsheet(filename):
        source = _read_spreadsheet_chunks(stream, chunk_size)
    else:
        source = _read_csv_chunks(stream, chunk_size, encoding, delimiter)

    headers: Optional[list[str]] = None
    for chunk in source:
        if headers is None:
            headers = [str(column) for column in chunk.columns]
            if not headers:
                raise ParseError("File has no header row")
        chunk.columns = headers
        yield headers, chunk

    if headers is None:
        raise ParseError("File has no header row")


def _rows(headers: list[str], chunk: pd.DataFrame) -> Iterator[RawRow]:
    for values in chunk.itertuples(index=False, name=None):
        yield {
            header: (None if pd.isna(value) else str(value))
            for header, value in zip(headers, values)
        }


def iter_rows(
    stream: IO[bytes],
    *,
    filename: Optional[str] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    encoding: str = "utf-8",
    delimiter: str = ",",
) -> Iterator[RawRow]:
    """Yield one RawRow per data row, keyed by header name."""
    for headers, chunk in _chunks(stream, filename, chunk_size, encoding, delimiter):
        yield from _rows(headers, chunk)


def ingest(
    stream: IO[bytes],
    *,
    filename: Optional[str] = None,
    collect_values: bool = True,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    encoding: str = "utf-8",
    delimiter: str = ",",
) -> IngestResult:
    """Headers, record count and (optionally) distinct values per column.

    Distinct values keep first-seen order and are not capped.
    """
    headers: list[str] = []
    record_count = 0
    seen: dict[str, dict[str, None]] = {}

    for headers, chunk in _chunks(stream, filename, chunk_size, encoding, delimiter):
        record_count += len(chunk)
        if not collect_values:
            continue
        for header in headers:
            bucket = seen.setdefault(header, {})
            for value in chunk[header].dropna():
                if value != "":
                    bucket[str(value)] = None

    result = IngestResult(
        headers=headers,
        record_count=record_count,
        column_values={header: list(values) for header, values in seen.items()},
    )
    logger.info(
        f"Ingested {filename or '<stream>'}: {len(result.headers)} columns, "
        f"{result.record_count} records"
    )
    return result
