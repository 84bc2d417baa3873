from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, Sequence

from csv_records.config import ParseOptions
from csv_records.errors import CsvRecordError, ReadError
from csv_records.ingest.readers import CsvRowSource, open_csv_source
from csv_records.parsing.schema import RecordShape, RowDecoder, resolve_plan

logger = logging.getLogger(__name__)


def _read_header(rows: Iterator[Sequence[str]]) -> tuple[str, ...]:
    """
    Consume the first row as lower-cased column names.
    Leading rows with zero cells are skipped, like everywhere else.
    A failed or missing first row gives an empty header, never an error.
    """
    try:
        first = next(rows)
        while len(first) == 0:
            first = next(rows)
    except StopIteration:
        logger.debug("no header row: input is empty")
        return ()
    except ReadError as e:
        logger.debug("header row unreadable, continuing without header: %s", e)
        return ()
    return tuple(h.lower() for h in first)


def parse_rows(
    rows: Iterable[Sequence[str]],
    shape: RecordShape,
    options: Optional[ParseOptions] = None,
) -> list[Any]:
    """
    Decode every row of an already split row source into records of `shape`.

    - `skip_first_line`: the first row becomes the (lower-cased) header,
    - rows with zero cells are skipped,
    - the first error aborts the whole parse and no records are returned.

    Raises only `CsvRecordError` subclasses for bad input or bad field tags.
    """
    opts = options or ParseOptions()
    it = iter(rows)

    header: tuple[str, ...] = ()
    if opts.skip_first_line:
        header = _read_header(it)
        logger.debug("header: %s", list(header))

    plan = resolve_plan(shape, header, match_field_names=opts.match_field_names)
    decoder = RowDecoder(
        shape=shape,
        plan=plan,
        skip_empty_values=opts.skip_empty_values,
        allow_incomplete_rows=opts.allow_incomplete_rows,
    )

    records: list[Any] = []
    skipped = 0
    try:
        for row in it:
            if len(row) == 0:
                skipped += 1
                continue
            records.append(decoder.decode(row))
    except CsvRecordError as e:
        logger.debug("parse aborted after %d record(s): %s %s", len(records), e.code.value, e)
        raise

    logger.info("parsed %d record(s), skipped %d empty row(s)", len(records), skipped)
    return records


def parse_from_source(
    source: Iterable[str],
    shape: RecordShape,
    options: Optional[ParseOptions] = None,
) -> list[Any]:
    """
    Split `source` into rows with the configured delimiter and decode them.
    `source` is any iterable of text lines (open file, `io.StringIO`, socket file, ...).
    """
    opts = options or ParseOptions()
    return parse_rows(CsvRowSource(source, delimiter=opts.delimiter), shape, opts)


def parse_file(
    path: str | Path,
    shape: RecordShape,
    options: Optional[ParseOptions] = None,
) -> list[Any]:
    """
    Open `path`, decode it, and close it again whether parsing succeeds or not.
    Raises `SourceOpenError` when the file cannot be opened.
    """
    with open_csv_source(path) as f:
        return parse_from_source(f, shape, options)


@dataclass(frozen=True)
class CsvParser:
    """Holds one set of `ParseOptions` for repeated parses."""
    options: ParseOptions = field(default_factory=ParseOptions)

    def parse(self, path: str | Path, shape: RecordShape) -> list[Any]:
        """Return the records decoded from the file at `path`."""
        return parse_file(path, shape, self.options)

    def parse_with_reader(self, source: Iterable[str], shape: RecordShape) -> list[Any]:
        """Return the records decoded from an iterable of text lines."""
        return parse_from_source(source, shape, self.options)
