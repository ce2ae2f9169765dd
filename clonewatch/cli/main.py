"""clonewatch CLI"""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click

from clonewatch import __version__
from clonewatch.config import get_clones_dir
from clonewatch.git import (
    CloneOptions,
    GitError,
    fast_forward_branches,
    fetch as git_fetch,
    fetch_refspec,
)
from clonewatch.git.remote import repo_dir_name
from clonewatch.git.repository import load_branches, load_remote
from clonewatch.store import CloningRepositoriesStore

from .debug import add_debug_option
from .progress import CloneProgressView, ProgressDisplay
from .utils.logging import logger

repository_argument = click.argument(
    "repository",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
)


@click.group()
@click.version_option(__version__, prog_name="clonewatch")
@click.pass_context
def cli(ctx):
    """
    Run git network operations and watch their progress.
    """
    ctx.ensure_object(dict)


async def _clone_all(
    targets: List[Tuple[str, Path]], options: CloneOptions, display: ProgressDisplay
) -> List[Tuple[str, Optional[BaseException]]]:
    store = CloningRepositoriesStore(options=options)
    with CloneProgressView(store, display.console):
        tasks = [store.clone(url, path) for url, path in targets]
        results = await asyncio.gather(*tasks, return_exceptions=True)

    return [
        (url, result if isinstance(result, BaseException) else None)
        for (url, _), result in zip(targets, results)
    ]


@cli.command()
@click.argument("urls", nargs=-1, required=True)
@click.option(
    "--dest",
    "-d",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory to clone into (default: the configured clones directory).",
)
@click.option("--branch", "-b", default=None, help="Branch to check out.")
def clone(urls: Tuple[str, ...], dest: Optional[Path], branch: Optional[str]):
    """Clone one or more repositories at the same time.

    Example:

      clonewatch clone https://github.com/user/repo git@host:org/other.git
    """
    base = dest or get_clones_dir()
    base.mkdir(parents=True, exist_ok=True)

    targets = []
    for url in urls:
        try:
            targets.append((url, base / repo_dir_name(url)))
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="URLS")

    display = ProgressDisplay()
    outcomes = asyncio.run(_clone_all(targets, CloneOptions(branch=branch), display))

    failed = 0
    for (url, error), (_, path) in zip(outcomes, targets):
        if error is None:
            display.success(f"Cloned {url} into {path}")
        else:
            failed += 1
            display.error(f"Failed to clone {url}: {error}")

    if failed:
        sys.exit(1)


@cli.command()
@repository_argument
@click.option("--remote", "-r", "remote_name", default="origin", show_default=True)
@click.option("--refspec", default=None, help="Fetch only this refspec.")
@click.option(
    "--recurse-submodules/--no-recurse-submodules",
    default=None,
    help="Fetch submodules on demand (default: [features] recurse_submodules).",
)
def fetch(
    repository: Path,
    remote_name: str,
    refspec: Optional[str],
    recurse_submodules: Optional[bool],
):
    """Fetch from a remote, showing progress."""
    display = ProgressDisplay()
    try:
        remote = load_remote(repository, remote_name)

        if refspec:
            result = asyncio.run(fetch_refspec(repository, remote, refspec))
            if result.is_partial:
                display.status(f"{refspec} not found on {remote.name}")
            else:
                display.success(f"Fetched {refspec} from {remote.name}")
            return

        display.start_task(f"Fetching {remote.name}")
        try:
            asyncio.run(
                git_fetch(
                    repository,
                    remote,
                    progress_callback=display.on_fetch_progress,
                    recurse_submodules=recurse_submodules,
                )
            )
        finally:
            display.finish()
    except GitError as e:
        logger.error(f"Fetch failed: {e}")
        sys.exit(1)

    display.success(f"Fetched {remote.name}")


@cli.command("fast-forward")
@repository_argument
@click.argument("branches", nargs=-1)
def fast_forward(repository: Path, branches: Tuple[str, ...]):
    """Fast-forward local branches to their upstreams.

    Without BRANCHES, every local branch that tracks an upstream is
    fast-forwarded, except the checked out one.
    """
    display = ProgressDisplay()
    try:
        candidates = load_branches(repository, list(branches) or None)
        without_upstream = [b.name for b in candidates if not b.upstream]
        for name in without_upstream:
            logger.info(f"Skipping '{name}': no upstream")

        updated = asyncio.run(fast_forward_branches(repository, candidates))
    except GitError as e:
        logger.error(f"Fast-forward failed: {e}")
        sys.exit(1)

    if not updated:
        display.status("No branches were fast-forwarded")
        return

    display.summary({branch.name: branch.tip for branch in updated})


add_debug_option(cli)
for command in cli.commands.values():
    add_debug_option(command)

if __name__ == "__main__":
    cli(obj={})
