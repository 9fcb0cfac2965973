from __future__ import annotations

import logging
import os
import sys
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator, List, Optional, Tuple, Union

from jobarray.errors import InputError
from jobarray.records.types import Record, RecordSet, Table
from jobarray.records.validate import split_fields, validate_header, validate_rows

logger = logging.getLogger(__name__)

STDIN_MARKER = "-"
COMMENT_MARKER = "#"
# same separators as the line splitter
BLANKS = " \t"
ENCODING = "utf-8"
ERRORS = "surrogateescape"

Pathish = Union[str, Path]


def source_label(source: Pathish) -> str:
    return "<stdin>" if str(source) == STDIN_MARKER else str(source)


@contextmanager
def open_source(source: Pathish, stream: Optional[IO] = None) -> Iterator[Path]:
    """
    Yield a readable path for `source`.

    "-" stages standard input (or `stream`) into a private temporary file
    that is removed on every exit path.
    """
    if str(source) != STDIN_MARKER:
        path = Path(source)
        if not path.exists():
            raise InputError(f"input not found: {source}")
        if path.is_dir():
            raise InputError(f"input is a directory: {source}")
        yield path
        return

    stream = sys.stdin if stream is None else stream
    fd, tmp = tempfile.mkstemp(prefix="jobarray-", suffix=".stdin")
    try:
        with os.fdopen(fd, "wb") as f:
            buf = getattr(stream, "buffer", None)
            if buf is not None:
                f.write(buf.read())
            else:
                f.write(stream.read().encode(ENCODING, ERRORS))
        logger.debug("staged stdin at %s", tmp)
        yield Path(tmp)
    finally:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass


def is_ignored(line: str) -> bool:
    """Blank/whitespace-only lines and `#` comments do not count as records."""
    stripped = line.strip(BLANKS)
    return not stripped or stripped.startswith(COMMENT_MARKER)


def read_lines(path: Path) -> List[Tuple[int, str]]:
    """Return (lineno, text) for every retained line of `path`."""
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise InputError(f"cannot read {path}: {exc.strerror}") from exc

    kept: List[Tuple[int, str]] = []
    for lineno, line in enumerate(raw.decode(ENCODING, ERRORS).split("\n"), start=1):
        if line.endswith("\r"):
            line = line[:-1]
        if is_ignored(line):
            continue
        if "\x00" in line:
            raise InputError(f"line {lineno} contains a NUL byte")
        kept.append((lineno, line))
    return kept


def read_records(source: Pathish, stream: Optional[IO] = None) -> RecordSet:
    """Input Reader for line mode."""
    label = source_label(source)
    with open_source(source, stream) as path:
        lines = read_lines(path)

    if not lines:
        raise InputError(f"no records in {label}")

    records = tuple(
        Record(index=i, lineno=lineno, text=text)
        for i, (lineno, text) in enumerate(lines, start=1)
    )
    logger.info("read %d record(s) from %s", len(records), label)
    return RecordSet(source=label, records=records)


def read_table(source: Pathish, stream: Optional[IO] = None) -> Table:
    """Input Reader + Record Validator for table mode."""
    label = source_label(source)
    with open_source(source, stream) as path:
        lines = read_lines(path)

    if not lines:
        raise InputError(f"no header in {label}")

    header = split_fields(lines[0][1])
    validate_header(header)

    rows = [split_fields(text) for _, text in lines[1:]]
    if not rows:
        raise InputError(f"no data rows in {label}")
    validate_rows(header, rows)

    logger.info("read %d row(s) x %d field(s) from %s", len(rows), len(header), label)
    return Table(
        source=label,
        header=tuple(header),
        rows=tuple(tuple(r) for r in rows),
    )
