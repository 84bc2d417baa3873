from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

import pytest

from csv_records.errors import MetadataError
from csv_records.parsing.schema import RecordShape
from csv_records.parsing.shapes import shape_from_dataclass
from csv_records.parsing.types import ColumnBinding, DeclaredType


@dataclass
class Tagged:
    title: str = field(default="", metadata={"csv_column": "Job Title"})
    age: int = field(default=0, metadata={"csv": "3"})
    days: int = field(default=0, metadata={"csv_type": "uint16"})
    score: float = 0.0
    active: bool = False
    born: datetime = field(default=datetime.min, metadata={"csv_date": "%d.%m.%Y"})
    internal: str = field(default="x", init=False)


@dataclass
class Unsupported:
    tags: list = field(default_factory=list)


@dataclass
class BadType:
    n: int = field(default=0, metadata={"csv_type": "int128"})


def test_shape_from_dataclass_reads_tags_and_types() -> None:
    """Annotations pick the declared type unless `csv_type` overrides it."""
    shape = shape_from_dataclass(Tagged)
    assert isinstance(shape, RecordShape)
    assert shape.factory is Tagged

    by_name = {f.name: f for f in shape.fields}
    assert list(by_name) == ["title", "age", "days", "score", "active", "born"]

    assert by_name["title"].header == "Job Title"
    assert by_name["title"].binding == ColumnBinding.header
    assert by_name["age"].index == "3"
    assert by_name["age"].declared_type == DeclaredType.int64
    assert by_name["days"].declared_type == DeclaredType.uint16
    assert by_name["score"].declared_type == DeclaredType.float64
    assert by_name["active"].declared_type == DeclaredType.boolean
    assert by_name["born"].declared_type == DeclaredType.date_time
    assert by_name["born"].date_format == "%d.%m.%Y"


def test_dataclass_defaults_become_field_defaults() -> None:
    shape = shape_from_dataclass(Tagged)
    by_name = {f.name: f for f in shape.fields}
    assert by_name["title"].default_value() == ""
    assert by_name["born"].default_value() == datetime.min


def test_unsupported_annotation_is_metadata_error() -> None:
    with pytest.raises(MetadataError) as e:
        shape_from_dataclass(Unsupported)
    assert e.value.field == "tags"


def test_unknown_csv_type_is_metadata_error() -> None:
    with pytest.raises(MetadataError):
        shape_from_dataclass(BadType)


def test_non_dataclass_rejected() -> None:
    with pytest.raises(TypeError):
        shape_from_dataclass(int)
    with pytest.raises(TypeError):
        shape_from_dataclass(Tagged())
