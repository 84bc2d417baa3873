from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, ClassVar

from csv_records.parsing.types import DeclaredType, ErrorCode


class CsvRecordError(Exception):
    """
    Base for every error raised while mapping CSV rows onto records.

    Each subclass carries an `ErrorCode` so callers can branch on the kind of
    failure (e.g. retry with `allow_incomplete_rows`) without string matching.
    """
    code: ClassVar[ErrorCode]

    @property
    def detail(self) -> str:
        """Human readable message, also used as `str(error)`."""
        return str(self)

    def __reduce__(self) -> tuple[Any, ...]:
        # rebuild from the dataclass fields, `args` only holds the message
        return (type(self), tuple(getattr(self, f.name) for f in dataclasses.fields(self)))


@dataclass(eq=False)
class SourceOpenError(CsvRecordError):
    """The input file could not be opened (missing, permission denied, ...)."""
    code: ClassVar[ErrorCode] = ErrorCode.source_open
    path: str
    reason: str

    def __post_init__(self) -> None:
        super().__init__(f"cannot open {self.path}: {self.reason}")


@dataclass(eq=False)
class ReadError(CsvRecordError):
    """The row source failed for a reason other than end of input."""
    code: ClassVar[ErrorCode] = ErrorCode.read_error
    line: int           # 1-based physical line where the reader stopped
    reason: str

    def __post_init__(self) -> None:
        super().__init__(f"line {self.line}: {self.reason}")


@dataclass(eq=False)
class MetadataError(CsvRecordError):
    """A field's tags are malformed: bad index, missing date format, unknown type."""
    code: ClassVar[ErrorCode] = ErrorCode.metadata
    field: str
    reason: str

    def __post_init__(self) -> None:
        super().__init__(f"{self.field}: {self.reason}")


@dataclass(eq=False)
class MissingColumnError(CsvRecordError):
    """A resolved column index lies past the end of the current row."""
    code: ClassVar[ErrorCode] = ErrorCode.missing_column
    index: int
    field: str
    cell_count: int

    def __post_init__(self) -> None:
        super().__init__(
            f"trying to access column {self.index} for field {self.field}, "
            f"but the row has only {self.cell_count} column(s)"
        )


@dataclass(eq=False)
class ConversionError(CsvRecordError):
    """A cell's text could not be converted into the field's declared type."""
    code: ClassVar[ErrorCode] = ErrorCode.conversion
    field: str
    raw: str
    target: DeclaredType
    reason: str = ""

    def __post_init__(self) -> None:
        msg = f"{self.field}: invalid {self.target.value} value {self.raw!r}"
        if self.reason:
            msg = f"{msg} ({self.reason})"
        super().__init__(msg)
