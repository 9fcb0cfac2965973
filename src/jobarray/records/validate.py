from __future__ import annotations

import re
from typing import List, Sequence

from jobarray.errors import SchemaError

FIELD_SEP = "\t"
FIELD_NAME_RE = re.compile(r"[A-Za-z0-9_]+")


def is_field_name(name: str) -> bool:
    return FIELD_NAME_RE.fullmatch(name) is not None


def split_fields(line: str) -> List[str]:
    """Split on TAB exactly; empty fields are kept."""
    return line.split(FIELD_SEP)


def validate_header(fields: Sequence[str]) -> None:
    """Every header field must be usable as the suffix of `_<name>`."""
    for col, name in enumerate(fields, start=1):
        if not is_field_name(name):
            raise SchemaError(
                f"invalid header field {name!r} in column {col}: "
                "only letters, digits and underscore are allowed"
            )


def validate_rows(header: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
    """Fail on the first data row whose width differs from the header's."""
    width = len(header)
    for rownum, row in enumerate(rows, start=1):
        if len(row) != width:
            raise SchemaError(
                f"row {rownum} has {len(row)} field(s), header has {width}"
            )
