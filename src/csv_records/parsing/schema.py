from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from csv_records.errors import MetadataError, MissingColumnError
from .primitives import convert_cell, zero_value
from .types import ColumnBinding, DeclaredType

# Factory builds one record from keyword field values, e.g. a dataclass.
Factory = Callable[..., Any]

_INDEX_TAG_RE = re.compile(r"[+-]?[0-9]+")

NO_DEFAULT: Any = object()


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One record field's mapping and conversion rules."""
    name: str                           # keyword passed to the record factory.
    declared_type: DeclaredType         # what the cell text converts into.
    header: str | None = None           # header-name tag, matched case-insensitively.
    index: int | str | None = None      # explicit column index tag.
    date_format: str | None = None      # `strptime` pattern, datetime fields only.
    default: Any = field(default=NO_DEFAULT, compare=False)

    @property
    def binding(self) -> ColumnBinding:
        """The primary column source declared by this field's tags."""
        if self.header is not None:
            return ColumnBinding.header
        if self.index is not None:
            return ColumnBinding.index
        return ColumnBinding.order

    def default_value(self) -> Any:
        """Value kept when the cell is skipped or the row is truncated."""
        if self.default is NO_DEFAULT:
            return zero_value(self.declared_type)
        return self.default

    def explicit_index(self) -> int | None:
        """
        Parse the `index` tag.
        Raises `MetadataError` when it is not a base-10 integer or is negative.
        """
        if self.index is None:
            return None
        if isinstance(self.index, int) and not isinstance(self.index, bool):
            idx = self.index
        elif isinstance(self.index, str) and _INDEX_TAG_RE.fullmatch(self.index):
            idx = int(self.index)
        else:
            raise MetadataError(self.name, f"column index tag {self.index!r} is not an integer")
        if idx < 0:
            raise MetadataError(self.name, f"column index {idx} must be non-negative")
        return idx


@dataclass(frozen=True, slots=True)
class RecordShape:
    """An ordered, immutable description of a target record type."""
    factory: Factory                    # called with `**{field.name: value}` per row.
    fields: tuple[FieldSpec, ...]

    def __post_init__(self) -> None:
        # accept any sequence, store a tuple
        object.__setattr__(self, "fields", tuple(self.fields))
        seen: set[str] = set()
        for f in self.fields:
            if f.name in seen:
                raise MetadataError(f.name, "duplicate field name")
            seen.add(f.name)


## -- Column resolution

def _header_lookup(header: Sequence[str], name: str) -> int:
    """First header cell equal to `name`, or -1."""
    for idx, text in enumerate(header):
        if text == name:
            return idx
    return -1


def resolve_column(
    spec: FieldSpec,
    ordinal: int,
    header: Sequence[str] = (),
    *,
    match_field_names: bool = False,
) -> int:
    """
    Resolve the zero-based column feeding `spec`. First match wins:
    - 1st: the `header` tag (lower-cased) found in `header`,
    - 2nd: the explicit `index` tag,
    - 3rd: `ordinal`, the field's position in the shape.

    With `match_field_names`, an untagged field also tries its own name in step 1.
    `header` is expected to be lower-cased already. Pure: safe to call per row.
    """
    if header:
        name = spec.header
        if name is None and match_field_names and spec.index is None:
            name = spec.name
        if name is not None:
            by_header = _header_lookup(header, name.lower())
            if by_header >= 0:
                return by_header

    idx = spec.explicit_index()
    if idx is None:
        return ordinal
    return idx


def resolve_plan(
    shape: RecordShape,
    header: Sequence[str] = (),
    *,
    match_field_names: bool = False,
) -> tuple[int, ...]:
    """Resolve every field's column once. Raises `MetadataError` on bad tags."""
    plan: list[int] = []
    for ordinal, spec in enumerate(shape.fields):
        if spec.declared_type is DeclaredType.date_time and not spec.date_format:
            raise MetadataError(spec.name, "datetime field needs a date format")
        plan.append(resolve_column(spec, ordinal, header, match_field_names=match_field_names))
    return tuple(plan)


## -- Row decoding

@dataclass(frozen=True, slots=True)
class RowDecoder:
    """
    Decode a single row into one record of `shape`.

    Fields are processed in declared order. Failure order is always:
    - 1st: a negative column index (`MetadataError`)
    - 2nd: a column past the end of the row (`MissingColumnError`),
      unless `allow_incomplete_rows`, which stops at that field
    - 3rd: the first conversion error (`ConversionError`)
    """
    shape: RecordShape
    plan: Sequence[int]                     # resolved column per field, same order as `shape.fields`.
    skip_empty_values: bool = False         # keep the default for `""` cells.
    allow_incomplete_rows: bool = False     # truncate short rows instead of failing.

    def decode(self, row: Sequence[str]) -> Any:
        """Return the record built from `row`. Raises on the first failing field."""
        values: dict[str, Any] = {f.name: f.default_value() for f in self.shape.fields}

        for spec, idx in zip(self.shape.fields, self.plan):
            if idx < 0:
                raise MetadataError(spec.name, f"column index {idx} must be non-negative")

            if idx >= len(row):
                # every later field keeps its default, even if its own column exists
                if self.allow_incomplete_rows:
                    break
                raise MissingColumnError(idx, spec.name, len(row))

            cell = row[idx]
            if cell == "" and self.skip_empty_values:
                continue

            values[spec.name] = convert_cell(
                cell, spec.declared_type, field=spec.name, date_format=spec.date_format
            )

        return self.shape.factory(**values)
