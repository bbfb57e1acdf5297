"""
Column schema for one export.

A schema is either declared by the caller (explicit mode) or taken from
the first exported record (inferred mode). It is built once and never
changes during the export; fields that only appear in later records are
not exported in inferred mode.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Mapping, Tuple

from .exceptions import BadRequestError
from .serializers import NULL_CELL, Cell


@dataclass(frozen=True)
class ColumnSchema:
    """
    Ordered, distinct column names shared by the header and every row.

    Attributes:
        columns: Column names in output order
        explicit: True when the columns came from a caller field list
    """

    columns: Tuple[str, ...]
    explicit: bool = False

    @classmethod
    def explicit_from(cls, fields: Iterable[str]) -> "ColumnSchema":
        """
        Build a schema from a caller-supplied field list.

        Order is preserved verbatim; a repeated name keeps its first
        position. Fields are not checked against the data.
        """
        seen: List[str] = []
        for field in fields:
            if field not in seen:
                seen.append(field)
        return cls(tuple(seen), explicit=True)

    @classmethod
    def parse(cls, field_list: str) -> "ColumnSchema":
        """
        Parse a comma-separated field list such as ``"aaa,eee.ggg"``.

        Raises:
            BadRequestError: If the list is blank or contains an empty entry
        """
        return cls.explicit_from(parse_field_list(field_list))

    @classmethod
    def infer(cls, first_row: Mapping[str, Cell]) -> "ColumnSchema":
        """Take the columns from the first flattened record, in flatten order."""
        return cls(tuple(first_row.keys()), explicit=False)

    @classmethod
    def empty(cls) -> "ColumnSchema":
        return cls(())

    def project(self, row: Mapping[str, Cell]) -> List[Cell]:
        """
        Project a flattened row onto the schema.

        Returns one cell per column in schema order. Columns missing from
        the row become null cells; row keys outside the schema are ignored.
        """
        return [row.get(column, NULL_CELL) for column in self.columns]

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self) -> Iterator[str]:
        return iter(self.columns)


def parse_field_list(field_list: str) -> Tuple[str, ...]:
    """
    Split a comma-separated field list, stripping whitespace around names.

    Raises:
        BadRequestError: If the list is blank or contains an empty entry
    """
    if field_list is None or not field_list.strip():
        raise BadRequestError("Field list must not be empty")

    fields = tuple(name.strip() for name in field_list.split(","))
    if any(not name for name in fields):
        raise BadRequestError(f"Malformed field list: {field_list!r}")
    return fields
