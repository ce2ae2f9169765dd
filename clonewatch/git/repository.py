"""Reading remotes and branches of a local repository with GitPython."""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from git import Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from clonewatch.git.exceptions import GitError
from clonewatch.model import Branch, Remote

logger = logging.getLogger(__name__)


def _open_repo(path: Union[str, Path]) -> Repo:
    try:
        return Repo(str(path))
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise GitError(f"Not a git repository: {path}") from e


def load_remote(path: Union[str, Path], name: str = "origin") -> Remote:
    """
    Look up a remote of the repository.

    Raises:
        GitError: If the path is not a repository or the remote doesn't exist
    """
    repo = _open_repo(path)
    try:
        remote = repo.remotes[name]
    except IndexError as e:
        raise GitError(f"Remote '{name}' not found in {path}") from e
    return Remote(name=remote.name, url=remote.url)


def load_branches(
    path: Union[str, Path],
    names: Optional[Sequence[str]] = None,
    exclude_current: bool = True,
) -> List[Branch]:
    """
    List local branches with their upstreams.

    Args:
        path: Repository path
        names: Only these branches, in this order (default: all local branches)
        exclude_current: Skip the checked out branch, git refuses to fetch into it

    Returns:
        Branches; ``upstream`` is None for branches that don't track anything
    """
    repo = _open_repo(path)

    current = None
    if exclude_current and not repo.head.is_detached:
        current = repo.active_branch.name

    heads = {head.name: head for head in repo.heads}
    if names is None:
        names = list(heads)

    branches = []
    for name in names:
        head = heads.get(name)
        if head is None:
            logger.warning(f"Branch '{name}' not found in {path}")
            continue
        if name == current:
            logger.debug(f"Skipping checked out branch '{name}'")
            continue
        tracking = head.tracking_branch()
        branches.append(
            Branch(
                name=name,
                upstream=tracking.name if tracking is not None else None,
                tip=head.commit.hexsha,
            )
        )
    return branches
