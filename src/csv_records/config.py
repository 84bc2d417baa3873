from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "CSV_RECORDS_"

_TRUE_STRINGS = {"1", "t", "true", "y", "yes"}
_FALSE_STRINGS = {"0", "f", "false", "n", "no"}


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    """Read a boolean env variable. Unset or empty keeps `default`."""
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    v = raw.strip().lower()
    if v in _TRUE_STRINGS:
        return True
    if v in _FALSE_STRINGS:
        return False
    raise ValueError(f"{name}: invalid boolean {raw!r}")


@dataclass(frozen=True, slots=True)
class ParseOptions:
    """How rows are split and how short or empty cells are treated."""
    delimiter: str = ","                    # single column separator character.
    skip_first_line: bool = False           # row 0 is the header, not data.
    skip_empty_values: bool = False         # `""` cells keep the field's default.
    allow_incomplete_rows: bool = False     # short rows are truncated instead of failing.
    match_field_names: bool = False         # untagged fields are looked up in the header by name.

    def __post_init__(self) -> None:
        if not isinstance(self.delimiter, str) or len(self.delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got {self.delimiter!r}")
        if self.delimiter in ('"', "\r", "\n"):
            raise ValueError(f"invalid delimiter {self.delimiter!r}")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> ParseOptions:
        """
        Options from `CSV_RECORDS_*` environment variables, falling back to the defaults:
        - `CSV_RECORDS_DELIMITER`
        - `CSV_RECORDS_SKIP_FIRST_LINE`
        - `CSV_RECORDS_SKIP_EMPTY_VALUES`
        - `CSV_RECORDS_ALLOW_INCOMPLETE_ROWS`
        - `CSV_RECORDS_MATCH_FIELD_NAMES`
        """
        env = os.environ if env is None else env
        return cls(
            delimiter=env.get(f"{ENV_PREFIX}DELIMITER") or ",",
            skip_first_line=_env_flag(env, f"{ENV_PREFIX}SKIP_FIRST_LINE", False),
            skip_empty_values=_env_flag(env, f"{ENV_PREFIX}SKIP_EMPTY_VALUES", False),
            allow_incomplete_rows=_env_flag(env, f"{ENV_PREFIX}ALLOW_INCOMPLETE_ROWS", False),
            match_field_names=_env_flag(env, f"{ENV_PREFIX}MATCH_FIELD_NAMES", False),
        )
