# Data model for tracked git network operations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class CloningRepository:
    """A repository which is currently being cloned.

    The id is handed out by the store that tracks the clone and is unique
    for that store's lifetime.
    """

    id: int
    path: Path
    url: str

    @property
    def name(self) -> str:
        return Path(self.path).name


@dataclass(frozen=True)
class CloningRepositoryState:
    """The cloning progress of a repository.

    ``output`` is the latest raw progress line from git. ``progress_value``
    is between 0 and 1, or None while progress is indeterminate.

    The value may loop from 0 to 1 several times during a clone: it tracks
    the individual steps (fetch, deltas, checkout) rather than the clone as
    a whole.
    """

    output: str
    progress_value: Optional[float] = None


@dataclass(frozen=True)
class Remote:
    name: str
    url: str


@dataclass(frozen=True)
class Branch:
    """A local branch, optionally tracking an upstream such as ``origin/main``."""

    name: str
    upstream: Optional[str] = None
    tip: Optional[str] = None


@dataclass(frozen=True)
class FetchProgress:
    """A progress update emitted while fetching from a remote."""

    title: str
    value: float
    remote: str
    description: Optional[str] = None
    kind: str = "fetch"
