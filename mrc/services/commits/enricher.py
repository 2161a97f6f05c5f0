"""Attach changed-file lists to commits.

Each lookup is a git subprocess, so lookups run on a bounded thread pool
and are memoized by commit sha for the lifetime of the enricher.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor

from mrc.core.config import DEFAULT_MAX_CONCURRENCY
from mrc.core.result import Err, Ok, Result
from mrc.git.commit import Commit, EnrichedCommit
from mrc.git.repository import GitError

__all__ = ["ChangedFilesCache", "CommitFileEnricher", "FileLookup"]

LOG = logging.getLogger(__name__)

type FileLookup = Callable[[str], Result[tuple[str, ...], GitError]]


class ChangedFilesCache:
    """Memoized changed-file lookups keyed by commit sha.

    The first caller for a sha performs the lookup; concurrent callers for
    the same sha wait on the same pending slot instead of querying git
    again. Failed lookups are evicted so a later run can retry them.
    """

    def __init__(self, lookup: FileLookup) -> None:
        self._lookup = lookup
        self._slots: dict[str, Future[Result[tuple[str, ...], GitError]]] = {}
        self._lock = threading.Lock()

    def __contains__(self, sha: object) -> bool:
        with self._lock:
            return sha in self._slots

    def get(self, sha: str) -> Result[tuple[str, ...], GitError]:
        with self._lock:
            slot = self._slots.get(sha)
            owner = slot is None
            if slot is None:
                slot = Future()
                self._slots[sha] = slot

        if not owner:
            return slot.result()

        try:
            result = self._lookup(sha)
        except BaseException as e:
            self._evict(sha)
            slot.set_exception(e)
            raise

        if isinstance(result, Err):
            self._evict(sha)
        slot.set_result(result)
        return result

    def _evict(self, sha: str) -> None:
        with self._lock:
            self._slots.pop(sha, None)


class CommitFileEnricher:
    """Bounded, order-preserving fan-out of changed-file lookups.

    Attributes:
        max_concurrency: Maximum number of lookups in flight.
    """

    def __init__(self, lookup: FileLookup, max_concurrency: int = DEFAULT_MAX_CONCURRENCY) -> None:
        if max_concurrency <= 0:
            raise ValueError(f"max_concurrency must be positive, got {max_concurrency}")
        self.max_concurrency = max_concurrency
        self._cache = ChangedFilesCache(lookup)

    def enrich(self, commits: Sequence[Commit]) -> Result[list[EnrichedCommit], GitError]:
        """Return the commits with their changed files, in input order.

        The first failing lookup (in input order) aborts the whole batch;
        lookups not yet started are cancelled.
        """
        if not commits:
            return Ok([])

        workers = min(self.max_concurrency, len(commits))
        LOG.debug("looking up files for %d commits (%d workers)", len(commits), workers)

        enriched: list[EnrichedCommit] = []
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mrc-files") as pool:
            futures = [pool.submit(self._cache.get, commit.hash) for commit in commits]
            for commit, future in zip(commits, futures):
                result = future.result()
                if isinstance(result, Err):
                    for pending in futures:
                        pending.cancel()
                    LOG.debug("lookup failed for %s: %s", commit.hash, result.error.message)
                    return result
                enriched.append(EnrichedCommit.from_commit(commit, result.value))

        return Ok(enriched)
