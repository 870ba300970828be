"""Document discovery: front-matter parsing, scanning and the search index."""

from .front_matter import extract_front_matter, split_front_matter
from .metadata_cache import MetadataCache, SearchResult, resolve_docs_root
from .scanner import Document, DocumentScanner

__all__ = [
    "Document",
    "DocumentScanner",
    "MetadataCache",
    "SearchResult",
    "extract_front_matter",
    "resolve_docs_root",
    "split_front_matter",
]
