"""YAML parsing that remembers where each top-level key was defined."""

from __future__ import annotations

import re
from typing import Any

import yaml

_TOP_LEVEL_KEY_RE = re.compile(r"^([a-zA-Z_][a-zA-Z0-9_-]*)\s*:")


def parse_with_lines(yaml_text: str | None) -> dict[str, Any]:
    """Parse ``yaml_text`` into ``{data, line_map, errors}``.

    ``line_map`` maps each top-level key of the parsed mapping to its 1-based
    line.  Parse failures never raise; they are returned as error dicts with
    ``type`` ``yaml_syntax`` (with line/column) or ``yaml_parse``.
    """
    result: dict[str, Any] = {"data": None, "line_map": {}, "errors": []}
    if not yaml_text:
        return result

    try:
        result["data"] = yaml.safe_load(yaml_text)
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        line = mark.line + 1 if mark else None
        column = mark.column + 1 if mark else None
        result["errors"].append(
            {
                "type": "yaml_syntax",
                "line": line,
                "column": column,
                "message": f"YAML syntax error: {e.problem or e}",
                "suggestion": (
                    f"Check YAML syntax around line {line}. Common issues: unquoted colons, "
                    "incorrect indentation, missing quotes around strings with special characters."
                ),
            }
        )
        return result
    except yaml.YAMLError as e:
        result["errors"].append(
            {
                "type": "yaml_parse",
                "line": None,
                "column": None,
                "message": f"YAML parsing failed: {e}",
                "suggestion": "Ensure the content is valid YAML format between --- delimiters.",
            }
        )
        return result

    if isinstance(result["data"], dict):
        result["line_map"] = build_line_map(yaml_text, result["data"])
    return result


def build_line_map(yaml_text: str, data: dict[str, Any]) -> dict[str, int]:
    line_map: dict[str, int] = {}
    for number, line in enumerate(yaml_text.split("\n"), start=1):
        match = _TOP_LEVEL_KEY_RE.match(line)
        if match and match.group(1) in data:
            line_map[match.group(1)] = number
    return line_map
