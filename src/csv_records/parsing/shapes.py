from __future__ import annotations

import dataclasses
import typing
from datetime import datetime
from typing import Any

from csv_records.errors import MetadataError
from .schema import FieldSpec, RecordShape, NO_DEFAULT
from .types import DeclaredType

# `dataclasses.field(metadata=...)` keys
HEADER_KEY = "csv_column"       # header name
INDEX_KEY = "csv"               # explicit column index
DATE_FORMAT_KEY = "csv_date"    # `strptime` pattern
TYPE_KEY = "csv_type"           # explicit `DeclaredType` (or its value), overrides the annotation

_ANNOTATION_TYPES: dict[Any, DeclaredType] = {
    bool: DeclaredType.boolean,
    int: DeclaredType.int64,
    float: DeclaredType.float64,
    str: DeclaredType.string,
    datetime: DeclaredType.date_time,
}


def _declared_type(f: dataclasses.Field, hint: Any) -> DeclaredType:
    """The field's `DeclaredType`, from metadata first, then from the annotation."""
    explicit = f.metadata.get(TYPE_KEY)
    if explicit is not None:
        try:
            return DeclaredType(explicit)
        except ValueError:
            raise MetadataError(f.name, f"unknown csv_type {explicit!r}")

    declared = _ANNOTATION_TYPES.get(hint)
    if declared is None:
        raise MetadataError(f.name, f"unsupported field type {hint!r}")
    return declared


def _default(f: dataclasses.Field) -> Any:
    if f.default is not dataclasses.MISSING:
        return f.default
    if f.default_factory is not dataclasses.MISSING:
        return f.default_factory()
    return NO_DEFAULT


def shape_from_dataclass(cls: type) -> RecordShape:
    """
    Build a `RecordShape` from a dataclass, once, at definition time.

    Field tags come from `dataclasses.field(metadata=...)`:
      `{"csv_column": "email", "csv": "2", "csv_date": "%Y-%m-%d", "csv_type": "uint8"}`

    Fields declared with `init=False` are not mapped.
    """
    if not dataclasses.is_dataclass(cls) or not isinstance(cls, type):
        raise TypeError(f"expected a dataclass type, got {cls!r}")

    hints = typing.get_type_hints(cls)
    specs: list[FieldSpec] = []
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        specs.append(
            FieldSpec(
                name=f.name,
                declared_type=_declared_type(f, hints.get(f.name)),
                header=f.metadata.get(HEADER_KEY),
                index=f.metadata.get(INDEX_KEY),
                date_format=f.metadata.get(DATE_FORMAT_KEY),
                default=_default(f),
            )
        )
    return RecordShape(factory=cls, fields=tuple(specs))
