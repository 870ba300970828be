"""Corpus validation and index generation.

Architecture::

    collector.py         ErrorCollector / ValidationError
    formatter.py         ErrorFormatter: grouped, snippet-annotated report
    yaml_lines.py        parse_with_lines(): YAML + top-level key line numbers
    front_matter.py      FrontMatterValidator → ValidationReport
    cross_references.py  CrossReferenceValidator → CrossReferenceReport
    doc_length.py        DocLengthChecker → LengthReport (tenet/binding line limits)
    reindex.py           Reindexer → ReindexResult (00-index.md files)
"""

from .collector import ErrorCollector, ValidationError
from .cross_references import BrokenLink, CrossReferenceReport, CrossReferenceValidator
from .doc_length import LIMITS, DocLengthChecker, LengthIssue, LengthReport
from .formatter import ErrorFormatter
from .front_matter import REQUIRED_KEYS, FrontMatterValidator, ValidationReport
from .reindex import Reindexer, ReindexResult
from .yaml_lines import parse_with_lines

__all__ = [
    "LIMITS",
    "REQUIRED_KEYS",
    "BrokenLink",
    "CrossReferenceReport",
    "CrossReferenceValidator",
    "DocLengthChecker",
    "ErrorCollector",
    "ErrorFormatter",
    "FrontMatterValidator",
    "LengthIssue",
    "LengthReport",
    "ReindexResult",
    "Reindexer",
    "ValidationError",
    "ValidationReport",
    "parse_with_lines",
]
