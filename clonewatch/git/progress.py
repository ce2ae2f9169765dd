"""
Parsing of git's human-readable progress output.

git reports network progress on stderr as free text, one phase after the
other, each phase restarting at 0%::

    remote: Enumerating objects: 1093, done.
    remote: Counting objects: 100% (1093/1093), done.
    remote: Compressing objects:  45% (243/540)
    Receiving objects:  23% (251/1093), 1.20 MiB | 1.13 MiB/s
    Resolving deltas:  50% (302/604)
    Checking out files: 100% (412/412), done.

A parser is configured with an ordered list of weighted steps. Each step owns
a slice of the overall [0, 1] bar, so a percentage reported for a step is
mapped into that slice. Lines that don't belong to a known step are returned
as context (indeterminate progress) with their raw text preserved.

The format isn't a stable interface and drifts between git versions, so
everything here is best-effort: malformed input never raises.
"""

import re
from dataclasses import dataclass
from typing import Optional, Sequence, Union

PROGRESS_RE = re.compile(
    r"^(?P<title>.+?):\s+(?P<percent>\d{1,3})%\s+\((?P<value>\d+)/(?P<total>\d+)\)(?P<rest>.*)$"
)
# Steps that only count, without knowing the total
COUNT_RE = re.compile(r"^(?P<title>.+?):\s+(?P<value>\d+)(?P<rest>(?:,.*)?)$")


@dataclass(frozen=True)
class ProgressStep:
    """A phase of a git operation and its share of the overall progress."""

    title: str
    weight: float


@dataclass(frozen=True)
class ProgressDetails:
    title: str
    text: str
    value: int
    total: Optional[int]
    percent: int
    done: bool


@dataclass(frozen=True)
class GitProgress:
    """A line that reports progress of a known step."""

    percent: float
    details: ProgressDetails
    kind: str = "progress"

    @property
    def text(self) -> str:
        return self.details.text


@dataclass(frozen=True)
class GitContext:
    """A line that doesn't report progress of a known step.

    ``percent`` repeats the last known overall value, if any.
    """

    text: str
    percent: Optional[float] = None
    kind: str = "context"


GitParsedLine = Union[GitProgress, GitContext]


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


class GitProgressParser:
    """
    Stateful parser turning successive progress lines into an overall value.

    Within a step the reported value never goes backwards (git repeats
    percentages and occasionally restarts a count); switching to another step
    starts that step from its own reported percentage. Exact monotonic global
    progress is not promised: if git reports steps out of order the bar moves
    back to the earlier step's slice.
    """

    def __init__(self, steps: Sequence[ProgressStep]):
        if not steps:
            raise ValueError("At least one progress step is required")

        total_weight = sum(step.weight for step in steps)
        if total_weight <= 0:
            raise ValueError("Progress step weights must add up to more than zero")

        self.steps = [
            ProgressStep(step.title, step.weight / total_weight) for step in steps
        ]
        self._offsets = []
        offset = 0.0
        for step in self.steps:
            self._offsets.append(offset)
            offset += step.weight

        self._step_index: Optional[int] = None
        self._step_percent = 0
        self._last_percent: Optional[float] = None

    def _find_step(self, title: str) -> Optional[int]:
        for index, step in enumerate(self.steps):
            if step.title == title:
                return index
        return None

    def parse(self, line: str) -> GitParsedLine:
        """
        Parse a single line of git's stderr output.

        Args:
            line: A raw line, with or without its line terminator

        Returns:
            GitProgress for lines of a known step, GitContext otherwise
        """
        if not isinstance(line, str):
            return GitContext(text="", percent=self._last_percent)

        text = line.strip("\r\n")
        match = PROGRESS_RE.match(text.strip()) or COUNT_RE.match(text.strip())
        if match is None:
            return GitContext(text=text, percent=self._last_percent)

        index = self._find_step(match.group("title").strip())
        if index is None:
            return GitContext(text=text, percent=self._last_percent)

        if "total" in match.groupdict():
            step_percent = min(100, int(match.group("percent")))
            total = int(match.group("total"))
        else:
            # A bare count says nothing about how far along the step is
            step_percent = 0
            total = None
        if index == self._step_index:
            step_percent = max(step_percent, self._step_percent)
        self._step_index = index
        self._step_percent = step_percent

        step = self.steps[index]
        percent = _clamp(self._offsets[index] + step.weight * step_percent / 100)
        self._last_percent = percent

        details = ProgressDetails(
            title=step.title,
            text=text,
            value=int(match.group("value")),
            total=total,
            percent=step_percent,
            done="done" in match.group("rest"),
        )
        return GitProgress(percent=percent, details=details)


class CloneProgressParser(GitProgressParser):
    """Progress parser for ``git clone``."""

    STEPS = (
        ProgressStep("remote: Compressing objects", 0.1),
        ProgressStep("Receiving objects", 0.6),
        ProgressStep("Resolving deltas", 0.1),
        ProgressStep("Checking out files", 0.2),
    )

    def __init__(self):
        super().__init__(self.STEPS)


class FetchProgressParser(GitProgressParser):
    """Progress parser for ``git fetch``."""

    STEPS = (
        ProgressStep("remote: Compressing objects", 0.1),
        ProgressStep("Receiving objects", 0.7),
        ProgressStep("Resolving deltas", 0.2),
    )

    def __init__(self):
        super().__init__(self.STEPS)


def parse_progress_value(parser: GitProgressParser, line: str) -> Optional[float]:
    """Feed a line to the parser, returning a value in [0, 1] or None if indeterminate."""
    result = parser.parse(line)
    if isinstance(result, GitProgress):
        return result.percent
    return None
