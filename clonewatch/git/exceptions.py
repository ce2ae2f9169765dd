"""
Exception classes for git operations.
"""

from typing import Iterable, Sequence


class GitError(Exception):
    """Base exception for all git-related errors."""

    pass


class ExternalProcessError(GitError):
    """Raised when git exits with a code outside the operation's allowed set."""

    def __init__(
        self,
        name: str,
        args: Sequence[str],
        exit_code: int,
        stderr: str = "",
        stdout: str = "",
        allowed_exit_codes: Iterable[int] = (0,),
    ):
        self.name = name
        self.git_args = list(args)
        self.exit_code = exit_code
        self.stderr = stderr
        self.stdout = stdout
        self.allowed_exit_codes = frozenset(allowed_exit_codes)

        message = f"git {name} failed with exit code {exit_code}"
        last_line = _last_line(stderr)
        if last_line:
            message += f": {last_line}"
        super().__init__(message)


class GitNotFoundError(GitError):
    """Raised when the git executable cannot be started."""

    def __init__(self, executable: str, reason: str = ""):
        self.executable = executable
        if reason:
            super().__init__(f"Unable to run git executable '{executable}': {reason}")
        else:
            super().__init__(f"Unable to run git executable '{executable}'")


def _last_line(text: str) -> str:
    for line in reversed(text.splitlines()):
        if line.strip():
            return line.strip()
    return ""
