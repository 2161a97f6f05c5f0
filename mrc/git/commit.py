"""Commit records handed between the git layer and the filters."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Commit", "EnrichedCommit"]


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit as supplied by the release host.

    Attributes:
        hash: Full commit sha
        subject: First line of the commit message
        body: Remainder of the commit message
        author: Author name, when known
        date: Author date (ISO 8601), when known
    """

    hash: str
    subject: str
    body: str = ""
    author: str | None = None
    date: str | None = None

    @property
    def short_hash(self) -> str:
        return self.hash[:8]


@dataclass(frozen=True, slots=True)
class EnrichedCommit(Commit):
    """A commit plus the repository-relative paths it touched.

    ``files`` is exactly what git reported for the commit, in git's order.
    """

    files: tuple[str, ...] = ()

    @classmethod
    def from_commit(cls, commit: Commit, files: tuple[str, ...]) -> EnrichedCommit:
        return cls(
            hash=commit.hash,
            subject=commit.subject,
            body=commit.body,
            author=commit.author,
            date=commit.date,
            files=files,
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "hash": self.hash,
            "subject": self.subject,
            "author": self.author,
            "date": self.date,
            "files": list(self.files),
        }
