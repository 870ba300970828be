"""
Human-readable rendering of collected validation errors.

Errors are grouped per file (files sorted), each with its location, type,
an optional ±2-line context snippet and the fix suggestion.  The formatter
builds a :class:`rich.text.Text`; printing it through a rich ``Console``
gives colour on a terminal and plain text on pipes or with ``NO_COLOR``.

Examples:
    >>> formatter = ErrorFormatter()
    >>> print(formatter.render(collector.errors, {"docs/tenets/a.md": text}))
    Validation failed with 1 error in 1 file:
    <BLANKLINE>
    docs/tenets/a.md:
      [ERROR] Invalid ID format 'Bad_ID' in YAML front-matter
        line 2, field 'id'
        type: invalid_id_format
    ...

Tags:
    leyline, validation, formatting, rich
"""

from __future__ import annotations

from collections.abc import Iterable

from rich.text import Text

from leyline.validation.collector import ValidationError

CONTEXT_BEFORE = 2
CONTEXT_AFTER = 2
MAX_CONTEXT_LINE = 80


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


class ErrorFormatter:
    def render(
        self, errors: Iterable[ValidationError], file_contents: dict[str, str] | None = None
    ) -> str:
        return self.render_text(errors, file_contents).plain

    def render_text(
        self, errors: Iterable[ValidationError], file_contents: dict[str, str] | None = None
    ) -> Text:
        errors = list(errors)
        text = Text()
        if not errors:
            return text

        grouped: dict[str, list[ValidationError]] = {}
        for error in errors:
            grouped.setdefault(error.file, []).append(error)

        lines: list[tuple[str, str]] = [
            (
                f"Validation failed with {_plural(len(errors), 'error')} "
                f"in {_plural(len(grouped), 'file')}:",
                "bold red",
            ),
            ("", ""),
        ]
        for file in sorted(grouped):
            lines.append((f"{file}:", "bold"))
            content = (file_contents or {}).get(file)
            for error in grouped[file]:
                lines.extend(self._error_lines(error, content))
            lines.append(("", ""))
        lines.pop()

        for index, (line, style) in enumerate(lines):
            if index:
                text.append("\n")
            text.append(line, style=style or None)
        return text

    def _error_lines(self, error: ValidationError, content: str | None) -> list[tuple[str, str]]:
        lines = [(f"  [ERROR] {error.message}", "red")]

        location = []
        if error.line:
            location.append(f"line {error.line}")
        if error.field:
            location.append(f"field '{error.field}'")
        if location:
            lines.append((f"    {', '.join(location)}", "bright_black"))
        if error.type:
            lines.append((f"    type: {error.type}", "bright_black"))

        if error.line and content:
            snippet = context_snippet(error.line, content)
            if snippet:
                lines.append(("", ""))
                lines.append(("    context:", "blue"))
                lines.extend(snippet)

        if error.suggestion:
            lines.append(("    suggestion:", "cyan"))
            lines.extend((f"      {part}", "cyan") for part in error.suggestion.split("\n"))
        return lines


def context_snippet(line_number: int, content: str) -> list[tuple[str, str]]:
    """Lines around ``line_number`` (1-based); the error line is marked ``>``."""
    lines = content.split("\n")
    index = line_number - 1
    if not lines or index < 0 or index >= len(lines):
        return []

    start = max(0, index - CONTEXT_BEFORE)
    end = min(len(lines) - 1, index + CONTEXT_AFTER)
    snippet = []
    for i in range(start, end + 1):
        body = lines[i]
        if len(body) > MAX_CONTEXT_LINE:
            body = body[:77] + "..."
        if i == index:
            snippet.append((f"      {i + 1:3d} > {body}", "red"))
        else:
            snippet.append((f"      {i + 1:3d} │ {body}", "bright_black"))
    return snippet
