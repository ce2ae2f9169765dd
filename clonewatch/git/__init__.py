"""
Git network operations for clonewatch.

This package runs the git executable for clone, fetch and fast-forward
operations and turns git's free-form stderr output into progress values.

Layout:
    - args: ordered argument lists for every operation
    - progress: weighted, step-based progress line parsing
    - fastforward: parsing of the fast-forward batch output
    - runner: process execution with per-line streaming
    - operations: clone, fetch, fetch_refspec, fast_forward_branches

Everything that matches git's text output lives in ``progress`` and
``fastforward``, so changes in git's output format stay contained there.
"""

from .exceptions import ExternalProcessError, GitError, GitNotFoundError
from .operations import (
    CloneOptions,
    clone,
    fast_forward_branches,
    fetch,
    fetch_refspec,
)
from .progress import (
    CloneProgressParser,
    FetchProgressParser,
    GitContext,
    GitProgress,
    GitProgressParser,
    ProgressStep,
)
from .runner import ExecutionOptions, GitResult, git

__all__ = [
    "CloneOptions",
    "CloneProgressParser",
    "ExecutionOptions",
    "ExternalProcessError",
    "FetchProgressParser",
    "GitContext",
    "GitError",
    "GitNotFoundError",
    "GitProgress",
    "GitProgressParser",
    "GitResult",
    "ProgressStep",
    "clone",
    "fast_forward_branches",
    "fetch",
    "fetch_refspec",
    "git",
]
