from __future__ import annotations

from typing import Optional


class EinlogicError(Exception):
    """Base class for einlogic-specific exceptions."""


class ParseError(EinlogicError, ValueError):
    def __init__(
        self,
        message: str,
        *,
        column: Optional[int] = None,
        notation: Optional[str] = None,
    ):
        detail = _format_location(column, notation)
        super().__init__(f"{message}{detail}")
        self.column = column
        self.notation = notation


class ShapeError(EinlogicError, ValueError):
    def __init__(
        self,
        message: str,
        *,
        operand: Optional[int] = None,
        notation: Optional[str] = None,
    ):
        prefix = f"operand {operand}: " if operand is not None else ""
        suffix = f" (in '{notation}')" if notation else ""
        super().__init__(f"{prefix}{message}{suffix}")
        self.operand = operand
        self.notation = notation


class AlgebraError(EinlogicError, TypeError):
    pass


class ResourceLimitError(EinlogicError, RuntimeError):
    pass


class BackendError(EinlogicError, RuntimeError):
    pass


class LinearityError(EinlogicError, RuntimeError):
    """A modal tensor was used or discarded against its usage discipline."""


def _format_location(column: Optional[int], notation: Optional[str]) -> str:
    if column is None:
        return ""
    location_str = f" (col {column})"
    if notation is None or column < 1:
        return location_str
    caret = " " * (column - 1) + "^"
    return f"{location_str}\n  {notation}\n  {caret}"