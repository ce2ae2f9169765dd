"""
Network operations: clone, fetch, fetch a refspec and fast-forward branches.

Authentication is somebody else's concern: callers pass the leading
``network_arguments`` and any environment variables the remote needs.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from clonewatch.config import recurse_submodules_enabled
from clonewatch.git.args import (
    CLONE_EXIT_CODES,
    FAST_FORWARD_EXIT_CODES,
    FETCH_EXIT_CODES,
    FETCH_REFSPEC_EXIT_CODES,
    branch_pair,
    clone_args,
    fast_forward_args,
    fetch_args,
    fetch_refspec_args,
)
from clonewatch.git.fastforward import parse_fast_forward_output
from clonewatch.git.progress import FetchProgressParser, GitProgress
from clonewatch.git.runner import ExecutionOptions, GitResult, git
from clonewatch.model import Branch, FetchProgress, Remote

logger = logging.getLogger(__name__)

# Context lines that are still worth showing while fetching
FETCH_CONTEXT_PREFIX = "remote: Counting objects"


@dataclass
class CloneOptions:
    network_arguments: Sequence[str] = ()
    env: Dict[str, str] = field(default_factory=dict)
    branch: Optional[str] = None


async def clone(
    url: str,
    path: Union[str, Path],
    options: Optional[CloneOptions] = None,
    progress_callback: Optional[Callable[[str], None]] = None,
) -> GitResult:
    """
    Clone the repository at the URL into the path.

    Args:
        url: Remote repository URL
        path: Directory to clone into; its parent must exist
        options: Network arguments, environment and branch to check out
        progress_callback: Called with every raw progress line from git.
            When provided this enables ``--progress``.

    Returns:
        The git result
    """
    if options is None:
        options = CloneOptions()

    path = Path(path).absolute()
    args = clone_args(
        options.network_arguments,
        url,
        str(path),
        progress=progress_callback is not None,
        branch=options.branch,
    )
    opts = ExecutionOptions(
        success_exit_codes=CLONE_EXIT_CODES,
        env=dict(options.env),
        stderr_line_callback=progress_callback,
    )

    logger.info(f"Cloning {url} into {path}")
    # The target may not exist yet, so run from its parent
    return await git(args, path.parent, "clone", opts)


async def fetch(
    repository: Union[str, Path],
    remote: Remote,
    progress_callback: Optional[Callable[[FetchProgress], None]] = None,
    network_arguments: Sequence[str] = (),
    env: Optional[Dict[str, str]] = None,
    recurse_submodules: Optional[bool] = None,
) -> GitResult:
    """
    Fetch from the given remote.

    Args:
        repository: Path of the repository to fetch into
        remote: The remote to fetch from
        progress_callback: An optional function invoked with the progress of
            the fetch. When provided this enables ``--progress``.
        network_arguments: Leading arguments for authenticating with the remote
        env: Extra environment variables for the remote operation
        recurse_submodules: Fetch submodules on demand; defaults to the
            ``[features] recurse_submodules`` setting

    Returns:
        The git result
    """
    if recurse_submodules is None:
        recurse_submodules = recurse_submodules_enabled()

    opts = ExecutionOptions(success_exit_codes=FETCH_EXIT_CODES, env=env)

    if progress_callback is not None:
        title = f"Fetching {remote.name}"
        parser = FetchProgressParser()

        def on_line(line: str):
            progress = parser.parse(line)

            # Besides transfer progress, stderr carries ref update lines
            # which don't belong in the progress stream
            if progress.kind == "context" and not progress.text.startswith(
                FETCH_CONTEXT_PREFIX
            ):
                return

            if isinstance(progress, GitProgress):
                description = progress.details.text
            else:
                description = progress.text

            progress_callback(
                FetchProgress(
                    title=title,
                    description=description,
                    value=progress.percent or 0.0,
                    remote=remote.name,
                )
            )

        opts.stderr_line_callback = on_line

        # Initial progress
        progress_callback(FetchProgress(title=title, value=0.0, remote=remote.name))

    args = fetch_args(
        network_arguments,
        remote.name,
        progress=progress_callback is not None,
        recurse_submodules=recurse_submodules,
    )
    return await git(args, repository, "fetch", opts)


async def fetch_refspec(
    repository: Union[str, Path],
    remote: Remote,
    refspec: str,
    network_arguments: Sequence[str] = (),
    env: Optional[Dict[str, str]] = None,
) -> GitResult:
    """Fetch a given refspec from the given remote.

    A refspec the remote doesn't have is not an error; check
    ``result.is_partial`` to tell it apart from a successful fetch.
    """
    opts = ExecutionOptions(success_exit_codes=FETCH_REFSPEC_EXIT_CODES, env=env)
    args = fetch_refspec_args(network_arguments, remote.name, refspec)
    result = await git(args, repository, "fetch_refspec", opts)
    if result.is_partial:
        logger.info(f"Refspec {refspec} not found on {remote.name}")
    return result


async def fast_forward_branches(
    repository: Union[str, Path], branches: Sequence[Branch]
) -> List[Branch]:
    """
    Fast-forward local branches to their upstreams without checking them out.

    Branches without an upstream are skipped.

    Args:
        repository: Path of the repository
        branches: Branches to fast-forward

    Returns:
        The branches that were updated, in the given order, with ``tip`` set
        to their new object id
    """
    candidates = [branch for branch in branches if branch.upstream]
    if not candidates:
        return []

    opts = ExecutionOptions(
        success_exit_codes=FAST_FORWARD_EXIT_CODES,
        env={"GIT_REFLOG_ACTION": "pull"},
    )
    args = fast_forward_args(branch_pair(branch) for branch in candidates)
    result = await git(args, repository, "fastForwardBranches", opts)

    updated = parse_fast_forward_output(
        result.combined_output, [branch.name for branch in candidates]
    )
    logger.debug(f"Fast-forwarded {len(updated)} of {len(candidates)} branches")

    return [
        Branch(name=branch.name, upstream=branch.upstream, tip=updated[branch.name])
        for branch in candidates
        if branch.name in updated
    ]
