"""Core type definitions for the engine runtime.

This module defines the foundational types shared by the engine: table
cells and matrices, cell converters, step and hook handlers, and the
distinction between resolved handler results and deferred (awaitable)
ones that must be settled before the next handler runs.
"""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from datetime import date, datetime, timedelta
from inspect import isawaitable
from typing import Any

#: A single data table or examples cell. Cells are always strings;
#: typed values appear only after an explicit conversion.
type Cell = str

#: Row-major matrix of cells.
type Matrix = list[list[Cell]]

#: Per-column conversion function applied to a cell.
type Converter = Callable[[Cell], Any]

#: Mapping of column names to converters.
type Converters = Mapping[str, Converter]

#: A value produced by a handler may be available immediately or
#: deferred behind an awaitable (a coroutine, task or future).
type HandlerResult = Any | Awaitable[Any]

#: Step handlers receive the scenario context followed by the
#: typed values extracted from the step text.
type StepHandler = Callable[..., HandlerResult]

#: Hook handlers receive the scenario (or suite) context only.
type HookHandler = Callable[[Any], HandlerResult]

MAPPINGS = (dict,)
SCALARS = (date, datetime, timedelta, str, bytes, int, float, bool)
SEQUENCES = (list, tuple, set)


def normalize_cell(value: Any) -> Cell:  # noqa: ANN401
    """Normalize a raw cell value into a string cell.

    Args:
        value: Candidate cell value.

    Returns:
        The cell value as a string.

    Raises:
        TypeError: If the value is a container or `None`.
    """
    if isinstance(value, str):
        return value

    if value is None or not isinstance(value, SCALARS):
        raise TypeError(f'Can not use {value!r} as table cell')

    return str(value)


def normalize_matrix(rows: Sequence[Sequence[Any]]) -> Matrix:
    """Normalize a sequence of rows into a fresh string matrix.

    Args:
        rows: Row-major sequence of cell values.

    Returns:
        A new matrix that shares no lists with the input.

    Raises:
        TypeError: If a row is not a sequence or a cell is unsupported.
    """
    matrix: Matrix = []
    for row in rows:
        if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
            raise TypeError(f'Can not use {row!r} as table row')
        matrix.append([normalize_cell(cell) for cell in row])

    return matrix


async def settle(result: HandlerResult) -> Any:  # noqa: ANN401
    """Settle a handler result.

    Awaitable results are awaited to completion; any other value
    is returned as is.

    Args:
        result: Value returned by a step or hook handler.

    Returns:
        The resolved value.
    """
    if isawaitable(result):
        return await result

    return result
