"""Accumulate validation errors so a run can report every problem at once."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationError:
    file: str
    type: str
    message: str
    line: int | None = None
    field: str | None = None
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ErrorCollector:
    def __init__(self) -> None:
        self._errors: list[ValidationError] = []

    def add_error(
        self,
        file: str,
        type: str,
        message: str,
        line: int | None = None,
        field: str | None = None,
        suggestion: str | None = None,
    ) -> ValidationError:
        error = ValidationError(
            file=str(file),
            type=type,
            message=message,
            line=line,
            field=field,
            suggestion=suggestion,
        )
        self._errors.append(error)
        return error

    @property
    def errors(self) -> list[ValidationError]:
        return list(self._errors)

    def any(self) -> bool:
        return bool(self._errors)

    @property
    def count(self) -> int:
        return len(self._errors)

    def files(self) -> list[str]:
        """Files with at least one error, in first-seen order."""
        return list(dict.fromkeys(e.file for e in self._errors))

    def clear(self) -> None:
        self._errors.clear()
