from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pytest

from csv_records.parsing.schema import FieldSpec, RecordShape
from csv_records.parsing.shapes import shape_from_dataclass
from csv_records.parsing.types import DeclaredType


CONTACTS_CSV = (
    'Tom,Jones,true,56,42000.32,42000.64,10,Senior Director,buyer@mymail.com,1999-03-01,'
    '"Self-described as ""the top"" branding guru on the West Coast"\n'
    'Ada,Lovelace,false,36,1.5,2.5,30,Analyst,ada@example.com,1815-12-10,Mathematician\n'
)

CONTACTS_HEADER = (
    "First Name,Last Name,Working,Age,Salary32,Salary64,Vacation Days,Title,Email,Birthdate,Description\n"
)


@dataclass
class Contact:
    """Untagged contact: every field maps by declaration order."""
    first_name: str
    last_name: str
    working: bool
    age: int
    salary32: float = field(metadata={"csv_type": "float32"})
    salary64: float = 0.0
    vacation_days: int = field(default=0, metadata={"csv_type": "uint8"})
    title: str = ""
    email: str = ""
    birthdate: datetime = field(default=datetime.min, metadata={"csv_date": "%Y-%m-%d"})
    description: str = ""


@dataclass
class HeaderContact:
    """Contact mapped by header names, declared in a different order than the file."""
    email: str = field(default="", metadata={"csv_column": "EMAIL"})
    first_name: str = field(default="", metadata={"csv_column": "first name"})
    age: int = field(default=0, metadata={"csv_column": "Age"})
    birthdate: datetime = field(
        default=datetime.min, metadata={"csv_column": "birthdate", "csv_date": "%Y-%m-%d"}
    )


@dataclass
class Pair:
    """Two-column record used by the small inline tests."""
    name: str = ""
    count: int = 0


@pytest.fixture(scope="session")
def contact_shape() -> RecordShape:
    """Shape derived from `Contact`."""
    return shape_from_dataclass(Contact)


@pytest.fixture(scope="session")
def header_contact_shape() -> RecordShape:
    """Shape derived from `HeaderContact`."""
    return shape_from_dataclass(HeaderContact)


@pytest.fixture(scope="session")
def pair_shape() -> RecordShape:
    """Hand-built shape for `Pair`: name (string), count (int64)."""
    return RecordShape(
        factory=Pair,
        fields=(
            FieldSpec("name", DeclaredType.string),
            FieldSpec("count", DeclaredType.int64),
        ),
    )


@pytest.fixture()
def contacts_file(tmp_path: Path) -> Path:
    """Two contact rows, no header."""
    p = tmp_path / "contacts.csv"
    p.write_text(CONTACTS_CSV, encoding="utf-8")
    return p


@pytest.fixture()
def contacts_with_header_file(tmp_path: Path) -> Path:
    """Header row followed by the first contact row."""
    p = tmp_path / "contacts_header.csv"
    p.write_text(CONTACTS_HEADER + CONTACTS_CSV.splitlines(keepends=True)[0], encoding="utf-8")
    return p
