from __future__ import annotations

import math
import re
import struct
from datetime import datetime
from typing import Any, Callable, Optional

from csv_records.errors import ConversionError, MetadataError
from .types import DeclaredType


# Cells are converted verbatim: no trimming, no NULL synonyms.
_UNSIGNED_RE = re.compile(r"[0-9]+")
_SIGNED_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)

_TRUE_STRINGS = {"1", "t", "true", "y", "yes"}
_FALSE_STRINGS = {"0", "f", "false", "n", "no"}


## -- bool

def parse_bool(s: str, *, field: str) -> bool:
    """Parse the accepted boolean literals, case-insensitive."""
    v = s.lower()
    if v in _TRUE_STRINGS:
        return True
    if v in _FALSE_STRINGS:
        return False
    raise ConversionError(field, s, DeclaredType.boolean, "expected true/false, t/f, yes/no or 1/0")



## -- integers (width checked against the declared type)

def parse_unsigned(s: str, *, field: str, target: DeclaredType = DeclaredType.uint64) -> int:
    """
    Parse base-10 digits with no sign.
    Raises on a sign, any non-digit, or a value that does not fit `target`'s width.
    """
    if not _UNSIGNED_RE.fullmatch(s):
        raise ConversionError(field, s, target, "expected unsigned base-10 digits")
    n = int(s)
    if n >= 1 << target.bits:
        raise ConversionError(field, s, target, "value out of range")
    return n


def parse_signed(s: str, *, field: str, target: DeclaredType = DeclaredType.int64) -> int:
    """
    Parse base-10 digits with an optional `+`/`-` sign.
    Raises on any non-digit, or a value outside `target`'s signed range.
    """
    if not _SIGNED_RE.fullmatch(s):
        raise ConversionError(field, s, target, "expected base-10 integer")
    n = int(s)
    limit = 1 << (target.bits - 1)
    if not -limit <= n < limit:
        raise ConversionError(field, s, target, "value out of range")
    return n



## -- floats

def _to_float32(x: float) -> float:
    """Round to the nearest single precision value. `OverflowError` when it does not fit."""
    # standard size "<f" is range checked, native "f" silently gives inf
    return struct.unpack("<f", struct.pack("<f", x))[0]


def parse_float(s: str, *, field: str, target: DeclaredType = DeclaredType.float64) -> float:
    """
    Parse decimal or scientific notation (plus inf/nan).
    `float32` targets are rounded to single precision.
    Finite text that overflows the target width is rejected.
    """
    if not _FLOAT_RE.fullmatch(s):
        raise ConversionError(field, s, target, "malformed number")
    x = float(s)
    if math.isinf(x) and "inf" not in s.lower():
        raise ConversionError(field, s, target, "value out of range")
    if target is DeclaredType.float32 and math.isfinite(x):
        try:
            x = _to_float32(x)
        except OverflowError:
            raise ConversionError(field, s, target, "value out of range")
        if math.isinf(x):
            raise ConversionError(field, s, target, "value out of range")
    return x



## -- text / datetime

def parse_string(s: str, *, field: str) -> str:
    """Strings are taken verbatim and never fail."""
    return s


def parse_datetime(s: str, *, field: str, date_format: str | None) -> datetime:
    """Parse `s` against a `strptime` pattern. Raise when the text does not match."""
    if not date_format:
        raise MetadataError(field, "datetime field needs a date format")
    try:
        return datetime.strptime(s, date_format)
    except ValueError as e:
        raise ConversionError(field, s, DeclaredType.date_time, str(e)) from e



## -- dispatch

# (raw text, field name, date format) -> converted value
Converter = Callable[[str, str, Optional[str]], Any]

_CONVERTERS: dict[DeclaredType, Converter] = {
    DeclaredType.boolean: lambda s, f, _: parse_bool(s, field=f),
    DeclaredType.uint8: lambda s, f, _: parse_unsigned(s, field=f, target=DeclaredType.uint8),
    DeclaredType.uint16: lambda s, f, _: parse_unsigned(s, field=f, target=DeclaredType.uint16),
    DeclaredType.uint32: lambda s, f, _: parse_unsigned(s, field=f, target=DeclaredType.uint32),
    DeclaredType.uint64: lambda s, f, _: parse_unsigned(s, field=f, target=DeclaredType.uint64),
    DeclaredType.int8: lambda s, f, _: parse_signed(s, field=f, target=DeclaredType.int8),
    DeclaredType.int16: lambda s, f, _: parse_signed(s, field=f, target=DeclaredType.int16),
    DeclaredType.int32: lambda s, f, _: parse_signed(s, field=f, target=DeclaredType.int32),
    DeclaredType.int64: lambda s, f, _: parse_signed(s, field=f, target=DeclaredType.int64),
    DeclaredType.float32: lambda s, f, _: parse_float(s, field=f, target=DeclaredType.float32),
    DeclaredType.float64: lambda s, f, _: parse_float(s, field=f, target=DeclaredType.float64),
    DeclaredType.string: lambda s, f, _: parse_string(s, field=f),
    DeclaredType.date_time: lambda s, f, fmt: parse_datetime(s, field=f, date_format=fmt),
}

# every declared type must have a converter
_unhandled = set(DeclaredType) - set(_CONVERTERS)
if _unhandled:
    raise RuntimeError(f"no converter for declared types: {sorted(t.value for t in _unhandled)}")


def convert_cell(s: str, declared_type: DeclaredType, *, field: str, date_format: str | None = None) -> Any:
    """Convert one raw cell into `declared_type`. Raises `ConversionError` on bad text."""
    return _CONVERTERS[declared_type](s, field, date_format)


_ZERO_VALUES: dict[DeclaredType, Any] = {
    DeclaredType.boolean: False,
    DeclaredType.float32: 0.0,
    DeclaredType.float64: 0.0,
    DeclaredType.string: "",
    DeclaredType.date_time: datetime.min,
}


def zero_value(declared_type: DeclaredType) -> Any:
    """The value a field keeps when its cell is never converted."""
    return _ZERO_VALUES.get(declared_type, 0)
