from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from rdflib.term import Node

from rdf_workbench.compact import PrefixMap, compact_term

ColumnRef = Union[int, str]


class ResultTable:
    """
    Sparse string table holding the bindings of one SPARQL SELECT.

    Rows and columns are 1-based. A cell that was never set is absent and
    reads back as None, which is distinct from an empty string. Columns are
    ordered by first assignment. Tables returned by `convert_bindings` are
    frozen.
    """

    def __init__(self) -> None:
        self._columns: List[str] = []
        self._column_index: Dict[str, int] = {}
        self._cells: Dict[Tuple[int, int], str] = {}
        self._row_count = 0
        self._frozen = False

    # -- construction -------------------------------------------------------

    def _check_mutable(self) -> None:
        if self._frozen:
            raise TypeError("ResultTable is read-only once returned from a query.")

    def add_column(self, name: str) -> int:
        """Return the index of column `name`, allocating the next one if new."""

        self._check_mutable()
        idx = self._column_index.get(name)
        if idx is None:
            self._columns.append(name)
            idx = len(self._columns)
            self._column_index[name] = idx
        return idx

    def set(self, row: int, column: ColumnRef, value: str) -> None:
        self._check_mutable()
        if row < 1:
            raise IndexError(f"Row indices start at 1, got {row}.")
        col = self._resolve(column)
        self._cells[(row, col)] = value
        self._row_count = max(self._row_count, row)

    def ensure_rows(self, count: int) -> None:
        """Grow the row count to `count`; rows without any bound cell still count."""

        self._check_mutable()
        self._row_count = max(self._row_count, count)

    def freeze(self) -> "ResultTable":
        self._frozen = True
        return self

    # -- access -------------------------------------------------------------

    @property
    def row_count(self) -> int:
        return self._row_count

    @property
    def column_count(self) -> int:
        return len(self._columns)

    @property
    def column_names(self) -> List[str]:
        return list(self._columns)

    def has_column(self, name: str) -> bool:
        return name in self._column_index

    def column_number(self, name: str) -> int:
        try:
            return self._column_index[name]
        except KeyError:
            raise KeyError(f"No column named '{name}'.") from None

    def column_name(self, index: int) -> str:
        if not 1 <= index <= len(self._columns):
            raise IndexError(f"Column index {index} out of range 1..{len(self._columns)}.")
        return self._columns[index - 1]

    def _resolve(self, column: ColumnRef) -> int:
        if isinstance(column, str):
            return self.column_number(column)
        if not 1 <= column <= len(self._columns):
            raise IndexError(f"Column index {column} out of range 1..{len(self._columns)}.")
        return column

    def get(self, row: int, column: ColumnRef) -> Optional[str]:
        """Return the cell value, or None when the cell is absent."""

        return self._cells.get((row, self._resolve(column)))

    def is_set(self, row: int, column: ColumnRef) -> bool:
        return (row, self._resolve(column)) in self._cells

    def column(self, column: ColumnRef) -> List[Optional[str]]:
        col = self._resolve(column)
        return [self._cells.get((row, col)) for row in range(1, self._row_count + 1)]

    def row(self, row: int) -> Dict[str, str]:
        """Return the present cells of `row` keyed by column name."""

        return {
            name: self._cells[(row, idx)]
            for idx, name in enumerate(self._columns, start=1)
            if (row, idx) in self._cells
        }

    def to_rows(self) -> List[Dict[str, str]]:
        return [self.row(r) for r in range(1, self._row_count + 1)]

    def __len__(self) -> int:
        return self._row_count

    def __repr__(self) -> str:
        return f"ResultTable(rows={self._row_count}, columns={self._columns!r})"

    def render(self, width: int = 30) -> str:
        """Plain-text rendering with one line per row."""

        lines = [" | ".join(f"{name[:width]:{width}}" for name in self._columns)]
        lines.append("-" * len(lines[0]))
        for r in range(1, self._row_count + 1):
            values = [self._cells.get((r, c)) or "" for c in range(1, len(self._columns) + 1)]
            lines.append(" | ".join(f"{v[:width]:{width}}" for v in values))
        return "\n".join(lines)


def convert_bindings(
    bindings: Iterable[Mapping[Any, Optional[Node]]],
    prefixes: Optional[PrefixMap],
    variables: Optional[Sequence[Any]] = None,
) -> ResultTable:
    """
    Convert SPARQL solution rows into a frozen ResultTable.

    Each row maps variables to RDF terms. Within a row, variables are visited
    in `variables` order when given, otherwise in the row's own order; only
    bound variables allocate columns, so column order follows the first row
    in which each variable is bound.
    """

    table = ResultTable()
    order = [str(v) for v in variables] if variables is not None else None
    row_number = 0
    for binding in bindings:
        row_number += 1
        table.ensure_rows(row_number)
        values = {str(k): v for k, v in binding.items()}
        if order is None:
            names = list(values)
        else:
            names = order + [n for n in values if n not in order]
        for name in names:
            term = values.get(name)
            if term is None:
                continue
            col = table.add_column(name)
            table.set(row_number, col, compact_term(term, prefixes))
    return table.freeze()


__all__ = [
    "ResultTable",
    "convert_bindings",
]
