from __future__ import annotations

import csv
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, TextIO

from csv_records.errors import ReadError, SourceOpenError

logger = logging.getLogger(__name__)

# csv caps cells at 128 KiB by default; 2**31 - 1 fits a C long on every platform
MAX_FIELD_SIZE = min(sys.maxsize, 2**31 - 1)


class CsvRowSource:
    """
    Yields each row of `lines` as a list of cells.

    `lines` is anything yielding text lines: an open file, `io.StringIO`, a list of strings.
    Blank lines come out as `[]`.

    Malformed quoting or undecodable bytes raise `ReadError` with the 1-based
    line the reader stopped on. The source stays usable after a `ReadError`,
    so a caller may keep reading past a bad row.

    A quote inside an unquoted cell (`a"b`) is kept as text: `csv` has no
    bare-quote check.
    """

    def __init__(self, lines: Iterable[str], *, delimiter: str = ",") -> None:
        # process-wide setting of the csv module
        if csv.field_size_limit() < MAX_FIELD_SIZE:
            csv.field_size_limit(MAX_FIELD_SIZE)
        self._reader = csv.reader(lines, delimiter=delimiter, strict=True)

    @property
    def line_num(self) -> int:
        """Physical lines consumed so far."""
        return self._reader.line_num

    def read(self) -> list[str] | None:
        """Next row, or `None` at end of input. Raises `ReadError` on a read failure."""
        try:
            return next(self._reader)
        except StopIteration:
            return None
        except (csv.Error, UnicodeDecodeError) as e:
            raise ReadError(self._reader.line_num, str(e)) from e

    def __iter__(self) -> Iterator[list[str]]:
        return self

    def __next__(self) -> list[str]:
        row = self.read()
        if row is None:
            raise StopIteration
        return row


@contextmanager
def open_csv_source(path: str | Path) -> Iterator[TextIO]:
    """
    Open `path` for CSV reading, closing it on every exit path.
    Raises `SourceOpenError` when the file cannot be opened.
    """
    p = Path(path)
    try:
        f = p.open("r", encoding="utf-8-sig", newline="")
    except OSError as e:
        raise SourceOpenError(str(p), e.strerror or str(e)) from e

    logger.debug("opened %s", p)
    with f:
        yield f
