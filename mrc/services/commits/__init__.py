"""Commit enrichment, filtering and the pipeline tying them together."""

from .enricher import ChangedFilesCache, CommitFileEnricher, FileLookup
from .filters import (
    combine,
    filter_dependents,
    filter_own_package,
    is_within_package,
    modified_dependency,
    path_segments,
)
from .service import CommitFilterService, FilterMode, FilterReport

__all__ = [
    "ChangedFilesCache",
    "CommitFileEnricher",
    "CommitFilterService",
    "FileLookup",
    "FilterMode",
    "FilterReport",
    "combine",
    "filter_dependents",
    "filter_own_package",
    "is_within_package",
    "modified_dependency",
    "path_segments",
]
