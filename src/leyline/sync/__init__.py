"""Synchronization: fetch upstream standards and keep a project in step.

Architecture::

    git_client.py   GitClient: sparse checkout + fetch of the leyline repo
    remote.py       fetch_remote_docs(): temp checkout as a context manager
    file_syncer.py  FileSyncer / SyncResult: cache-aware copy into a project
    state.py        SyncState: manifest of the last sync (sync_state.yaml)
    comparator.py   FileComparator: hashes, manifest comparison, unified diffs
"""

from .comparator import FileComparator
from .file_syncer import FileSyncer, SyncResult
from .git_client import GitClient
from .remote import fetch_remote_docs
from .state import SCHEMA_VERSION, SyncState

__all__ = [
    "SCHEMA_VERSION",
    "FileComparator",
    "FileSyncer",
    "GitClient",
    "SyncResult",
    "SyncState",
    "fetch_remote_docs",
]
