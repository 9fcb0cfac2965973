from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Tuple


@dataclass(frozen=True)
class Record:
    index: int                  # 1-based task index
    lineno: int                 # 1-based line number in the source
    text: str


@dataclass(frozen=True)
class RecordSet:
    """
    Ordered, immutable records that survived comment/blank filtering.

    Record order is the task order: task index i binds to records[i - 1].
    """

    source: str
    records: Tuple[Record, ...]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def get(self, index: int) -> Record:
        if not 1 <= index <= len(self.records):
            raise IndexError(f"task index {index} out of range 1..{len(self.records)}")
        return self.records[index - 1]


@dataclass(frozen=True)
class Table:
    """A validated TSV table: header plus equal-width data rows."""

    source: str
    header: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]

    def __len__(self) -> int:
        return len(self.rows)

    def row(self, index: int) -> Dict[str, str]:
        if not 1 <= index <= len(self.rows):
            raise IndexError(f"task index {index} out of range 1..{len(self.rows)}")
        return dict(zip(self.header, self.rows[index - 1]))
