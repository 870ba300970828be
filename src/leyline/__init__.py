"""
leyline - synchronize, inspect, and validate leyline development standards.

Tenets and bindings live as markdown documents with YAML front-matter in
the upstream leyline repository. This package pulls a selected set of them
into a project (``docs/leyline``), reports drift against the last sync,
searches the corpus, and validates it.

Architecture::

    categories.py     Category catalogue, sparse paths, search patterns
    core/             Errors, logging, hashing, platform, settings
    cache/            Content-addressed file cache + stats + health
    sync/             Git sparse checkout, file syncer, sync state
    discovery/        Front-matter scanning, metadata cache, search
    detection/        Project language detection (package.json)
    commands/         sync / status / diff / update orchestration
    validation/       Front-matter, cross-reference, reindex tools
    cli/              Typer application

Tags:
    leyline, standards, sync, cli
"""

__version__ = "0.1.0"
