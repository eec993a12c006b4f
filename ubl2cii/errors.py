"""Error collection shared by the reader, the converter and the writer.

Nothing in the conversion path raises for bad input; problems are recorded
in a caller supplied :class:`ErrorList` and the affected step returns
``None``.  The caller decides whether collected errors abort a batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator


class ErrorLevel(str, Enum):
    """Severity of a collected entry."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def log_level(self) -> int:
        return {
            ErrorLevel.INFO: logging.INFO,
            ErrorLevel.WARN: logging.WARNING,
            ErrorLevel.ERROR: logging.ERROR,
        }[self]


@dataclass(frozen=True)
class ConversionError:
    level: ErrorLevel
    text: str
    location: str | None = None

    @property
    def is_error(self) -> bool:
        return self.level is ErrorLevel.ERROR

    def __str__(self) -> str:
        prefix = f"[{self.level.value}]"
        if self.location:
            return f"{prefix} {self.location}: {self.text}"
        return f"{prefix} {self.text}"


class ErrorList:
    """Ordered, mutable collection of :class:`ConversionError` entries."""

    def __init__(self) -> None:
        self._items: list[ConversionError] = []

    def add(self, error: ConversionError) -> None:
        self._items.append(error)

    def add_error(self, text: str, location: str | None = None) -> None:
        self.add(ConversionError(ErrorLevel.ERROR, text, location))

    def add_warning(self, text: str, location: str | None = None) -> None:
        self.add(ConversionError(ErrorLevel.WARN, text, location))

    def add_info(self, text: str, location: str | None = None) -> None:
        self.add(ConversionError(ErrorLevel.INFO, text, location))

    def contains_error(self) -> bool:
        return any(e.is_error for e in self._items)

    def contains_no_error(self) -> bool:
        return not self.contains_error()

    @property
    def errors(self) -> list[ConversionError]:
        return [e for e in self._items if e.is_error]

    def __iter__(self) -> Iterator[ConversionError]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"ErrorList({self._items!r})"
