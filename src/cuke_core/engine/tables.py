"""Relational view over step data tables.

`DataTable` wraps an immutable row-major string matrix whose first row
is treated as the header by the relational views. Every view is computed
from the matrix and returns fresh containers, so callers may mutate the
results freely.
"""

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from cuke_core.errors import MissingColumnsError, StructuralError
from cuke_core.schema import DataTableTemplate
from cuke_core.values import normalize_matrix

if TYPE_CHECKING:
    from collections.abc import Iterator

if TYPE_CHECKING:
    from cuke_core.values import Converters, Matrix

#: Accepted table sources: a string matrix, a step data table, or a
#: mapping in the Gherkin pickle table shape `{'rows': [{'cells': [...]}]}`.
type TableSource = Sequence[Sequence[Any]] | DataTableTemplate | Mapping[str, Any]


def _from_pickle_table(source: Mapping[str, Any]) -> list[list[Any]]:
    """Extract cell values from a pickle table mapping.

    Raises:
        TypeError: If the mapping does not have the pickle table shape.
    """
    try:
        return [
            [cell['value'] for cell in row['cells']]
            for row in source['rows']
        ]

    except (KeyError, TypeError) as base:
        raise TypeError('Mapping is not a pickle table') from base


class DataTable:
    """Immutable data table.

    Example:
        ```
        | id | name |
        | 1  | Ann  |
        | 2  | Bo   |
        ```
        `hashes()` gives `[{'id': '1', 'name': 'Ann'}, {'id': '2', 'name': 'Bo'}]`.
    """

    __slots__ = ('_matrix',)

    def __init__(self, source: TableSource) -> None:
        """Initialize a data table.

        Args:
            source: A string matrix, a step data table, or a pickle
                table mapping.

        Raises:
            TypeError: If the source has an unsupported shape.
        """
        if isinstance(source, DataTableTemplate):
            rows: Sequence[Sequence[Any]] = source.values
        elif isinstance(source, Mapping):
            rows = _from_pickle_table(source)
        else:
            rows = source

        self._matrix: tuple[tuple[str, ...], ...] = tuple(
            tuple(row)
            for row in normalize_matrix(rows)
        )

    def __repr__(self) -> str:
        """String representation."""
        return f'{type(self).__name__}({self.raw()!r})'

    def __eq__(self, other: object) -> bool:
        """Compare tables by content."""
        if not isinstance(other, DataTable):
            return NotImplemented

        return self._matrix == other._matrix

    def __hash__(self) -> int:
        """Hash by content."""
        return hash(self._matrix)

    def __len__(self) -> int:
        """Number of body rows."""
        return max(len(self._matrix) - 1, 0)

    def __iter__(self) -> 'Iterator[dict[str, str]]':
        """Iterate over body rows as header-keyed mappings."""
        return iter(self.hashes())

    @property
    def header(self) -> list[str]:
        """Copy of the first row, or an empty list for an empty table."""
        if not self._matrix:
            return []

        return list(self._matrix[0])

    def raw(self) -> 'Matrix':
        """Return a deep copy of the whole matrix, header included."""
        return [list(row) for row in self._matrix]

    def rows(self) -> 'Matrix':
        """Return a copy of all rows except the header."""
        return [list(row) for row in self._matrix[1:]]

    def hashes(self) -> list[dict[str, str]]:
        """Zip the header with each body row.

        Returns:
            One mapping per body row, keyed by column name.
        """
        if not self._matrix:
            return []

        header = self._matrix[0]

        return [
            dict(zip(header, row, strict=False))
            for row in self._matrix[1:]
        ]

    def rows_hash(self) -> dict[str, str]:
        """Convert a two-column table into a mapping.

        The first column gives keys, the second column gives values. The
        first row is not treated as a header.

        Returns:
            Mapping of first column values to second column values.

        Raises:
            StructuralError: If any row does not have exactly two columns.
        """
        if any(len(row) != 2 for row in self._matrix):  # noqa: PLR2004
            raise StructuralError(
                'rows_hash can only be called on a data table '
                'where all rows have exactly two columns',
            )

        return {key: value for key, value in self._matrix}

    def transpose(self) -> 'DataTable':
        """Return a new table with rows and columns swapped."""
        return DataTable([list(column) for column in zip(*self._matrix, strict=False)])

    def columns(self, names: Sequence[str]) -> 'DataTable':
        """Return a new table restricted to the named columns.

        Args:
            names: Column names to keep, in the order to keep them.

        Returns:
            A new data table with only the requested columns.

        Raises:
            MissingColumnsError: If any name is absent from the header.
        """
        header = self.header

        if missing := [name for name in names if name not in header]:
            raise MissingColumnsError(missing)

        indices = [header.index(name) for name in names]

        return DataTable([
            [row[index] for index in indices]
            for row in self._matrix
        ])

    def typed_raw(self, converters: 'Converters | None' = None) -> list[list[Any]]:
        """Return body rows with per-column conversions applied.

        Args:
            converters: Mapping of column names to conversion functions.
                Columns without a converter keep their string value.

        Returns:
            Body rows (header excluded) with converted cells.
        """
        converters = converters or {}
        header = self.header

        return [
            [
                self._convert(converters, header[index] if index < len(header) else None, cell)
                for index, cell in enumerate(row)
            ]
            for row in self._matrix[1:]
        ]

    def typed_hashes(self, converters: 'Converters | None' = None) -> list[dict[str, Any]]:
        """Return body rows as mappings with per-column conversions applied.

        Args:
            converters: Mapping of column names to conversion functions.
                Columns without a converter keep their string value.

        Returns:
            One mapping per body row, keyed by column name.
        """
        converters = converters or {}

        return [
            {
                key: self._convert(converters, key, value)
                for key, value in row.items()
            }
            for row in self.hashes()
        ]

    @staticmethod
    def _convert(converters: 'Converters', column: str | None, cell: str) -> Any:  # noqa: ANN401
        if column is not None and (converter := converters.get(column)):
            return converter(cell)

        return cell
