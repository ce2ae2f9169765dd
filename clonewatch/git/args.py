"""
Argument lists for git network operations.

git is sensitive to argument position, so every builder returns the tokens in
a fixed order. ``network_arguments`` are the leading ``-c key=value`` options
supplied by whoever sets up authentication for the remote; they always come
first.
"""

from typing import Iterable, List, Optional, Sequence

from clonewatch.model import Branch

CLONE_EXIT_CODES = frozenset({0})
FETCH_EXIT_CODES = frozenset({0})
# 128: the refspec doesn't exist on the remote
FETCH_REFSPEC_EXIT_CODES = frozenset({0, 128})
# 1: some of the branches could not be fast-forwarded
FAST_FORWARD_EXIT_CODES = frozenset({0, 1})

RECURSE_SUBMODULES_FLAG = "--recurse-submodules=on-demand"


def clone_args(
    network_arguments: Sequence[str],
    url: str,
    path: str,
    progress: bool,
    branch: Optional[str] = None,
) -> List[str]:
    args = [*network_arguments, "clone", "--recursive"]
    if progress:
        args.append("--progress")
    if branch:
        args.extend(["-b", branch])
    args.extend(["--", url, str(path)])
    return args


def fetch_args(
    network_arguments: Sequence[str],
    remote: str,
    progress: bool,
    recurse_submodules: bool,
) -> List[str]:
    """
    Build the arguments for fetching from a remote.

    Always prunes. ``--progress`` is only passed when somebody listens to
    progress, since git suppresses progress when stderr isn't a terminal.
    The remote name is always the last token.
    """
    args = [*network_arguments, "fetch"]
    if progress:
        args.append("--progress")
    args.append("--prune")
    if recurse_submodules:
        args.append(RECURSE_SUBMODULES_FLAG)
    args.append(remote)
    return args


def fetch_refspec_args(
    network_arguments: Sequence[str], remote: str, refspec: str
) -> List[str]:
    return [*network_arguments, "fetch", remote, refspec]


def branch_pair(branch: Branch) -> str:
    """Map a branch onto the ``<upstream-ref>:<local-ref>`` pair used to fast-forward it."""
    if not branch.upstream:
        raise ValueError(f"Branch '{branch.name}' has no upstream to fast-forward to")
    return f"refs/remotes/{branch.upstream}:refs/heads/{branch.name}"


def fast_forward_args(branch_pairs: Iterable[str]) -> List[str]:
    """
    Build the arguments for fast-forwarding local branches in one go.

    Fetches from the repository itself (``.``), with verbose ref-update lines
    and full object ids so the output can be parsed afterwards.
    """
    return [
        "-c",
        "fetch.output=full",
        "-c",
        "core.abbrev=40",
        "fetch",
        ".",
        "--show-forced-updates",
        "-v",
        *branch_pairs,
    ]
