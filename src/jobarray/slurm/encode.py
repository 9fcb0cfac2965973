"""
jobarray | encode.py

Task Binding Encoder: maps each task index to the argv (line mode) or the
`_<field>` environment (table mode) that the target receives.

All quoting goes through shlex.quote; nothing here concatenates raw
record text into shell source.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from jobarray.errors import SchemaError
from jobarray.records.types import RecordSet, Table

ENV_PREFIX = "_"


# ---------------------------------------------------------------------------
# Line mode
# ---------------------------------------------------------------------------
def split_line(line: str) -> List[str]:
    """
    Split one record into argument words using POSIX shlex rules.

    No expansion of any kind is performed and `#` is literal. Only space
    and TAB separate words, matching the shell's default IFS.
    """
    lex = shlex.shlex(line, posix=True)
    lex.whitespace = " \t"
    lex.whitespace_split = True
    lex.commenters = ""
    return list(lex)


def encode_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(arg) for arg in argv)


# ---------------------------------------------------------------------------
# Table mode
# ---------------------------------------------------------------------------
def env_name(field: str) -> str:
    return f"{ENV_PREFIX}{field}"


def encode_assignment(field: str, value: str) -> str:
    """`_<field>='<value>'`, safe for arbitrary bytes in `value`."""
    return f"{env_name(field)}={shlex.quote(value)}"


# ---------------------------------------------------------------------------
# Bindings
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class TaskBinding:
    index: int
    argv: Tuple[str, ...] = ()
    env: Tuple[Tuple[str, str], ...] = ()

    def shell_args(self) -> str:
        return encode_argv(self.argv)

    def shell_exports(self) -> str:
        return " ".join(encode_assignment(k, v) for k, v in self.env)


def bind_lines(records: RecordSet) -> List[TaskBinding]:
    out: List[TaskBinding] = []
    for rec in records:
        try:
            argv = split_line(rec.text)
        except ValueError as exc:
            raise SchemaError(f"{records.source}: line {rec.lineno}: {exc}") from exc
        out.append(TaskBinding(index=rec.index, argv=tuple(argv)))
    return out


def bind_table(table: Table) -> List[TaskBinding]:
    return [
        TaskBinding(index=i, env=tuple(zip(table.header, row)))
        for i, row in enumerate(table.rows, start=1)
    ]
