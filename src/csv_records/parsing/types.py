from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Typed failure classifications, one per error class."""
    source_open = "source_open"
    read_error = "read_error"
    metadata = "metadata"
    missing_column = "missing_column"
    conversion = "conversion"


class DeclaredType(str, Enum):
    """The closed set of field types a cell can be converted into."""
    boolean = "bool"
    uint8 = "uint8"
    uint16 = "uint16"
    uint32 = "uint32"
    uint64 = "uint64"
    int8 = "int8"
    int16 = "int16"
    int32 = "int32"
    int64 = "int64"
    float32 = "float32"
    float64 = "float64"
    string = "string"
    date_time = "datetime"

    @property
    def bits(self) -> int | None:
        """Bit width of the numeric types, `None` for everything else."""
        return _BIT_WIDTHS.get(self)


_BIT_WIDTHS: dict[DeclaredType, int] = {
    DeclaredType.uint8: 8,
    DeclaredType.uint16: 16,
    DeclaredType.uint32: 32,
    DeclaredType.uint64: 64,
    DeclaredType.int8: 8,
    DeclaredType.int16: 16,
    DeclaredType.int32: 32,
    DeclaredType.int64: 64,
    DeclaredType.float32: 32,
    DeclaredType.float64: 64,
}


class ColumnBinding(str, Enum):
    """Where a field's column index comes from."""
    header = "header"           # looked up by name in the header row
    index = "index"             # explicit numeric column index
    order = "order"             # the field's position in the shape
