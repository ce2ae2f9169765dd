"""
The store in charge of repositories that are currently being cloned.

Notifications carry no payload. Listeners are expected to re-read
``repositories`` and ``get_repository_state()`` whenever they're called, so
they always see the current state rather than a copy that may already be
stale.
"""

import asyncio
import itertools
import logging
import threading
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Union

from clonewatch.git.operations import CloneOptions, clone as git_clone
from clonewatch.git.progress import CloneProgressParser, parse_progress_value
from clonewatch.model import CloningRepository, CloningRepositoryState

logger = logging.getLogger(__name__)

CloneFunction = Callable[..., Awaitable[object]]


class Subscription:
    """Handle returned by ``on_did_update``; ``dispose()`` stops the notifications."""

    def __init__(self, store: "CloningRepositoriesStore", fn: Callable[[], None]):
        self._store = store
        self._fn = fn

    def dispose(self) -> None:
        self._store.unsubscribe(self._fn)


class CloningRepositoriesStore:
    """
    Tracks in-flight clones and the latest progress of each.

    Every state change (clone started, progress line, clone settled, removal)
    emits a notification. The list of repositories and the state map are
    always updated together, so a listener never sees a repository without a
    state or the other way around.

    Usage:
        store = CloningRepositoriesStore()
        store.on_did_update(lambda: render(store.repositories))
        task = store.clone("https://github.com/user/repo", Path("repo"))
        await task
    """

    def __init__(
        self,
        clone_fn: Optional[CloneFunction] = None,
        options: Optional[CloneOptions] = None,
    ):
        self._clone_fn = clone_fn or git_clone
        self._options = options
        self._ids = itertools.count(1)
        self._repositories: List[CloningRepository] = []
        self._state_by_id: Dict[int, CloningRepositoryState] = {}
        self._listeners: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    def _emit_update(self) -> None:
        for fn in list(self._listeners):
            try:
                fn()
            except Exception:
                logger.exception("Update listener failed")

    def on_did_update(self, fn: Callable[[], None]) -> Subscription:
        """Register a function to be called when the store updates."""
        with self._lock:
            self._listeners.append(fn)
        return Subscription(self, fn)

    def unsubscribe(self, fn: Callable[[], None]) -> None:
        with self._lock:
            if fn in self._listeners:
                self._listeners.remove(fn)

    def clone(self, url: str, path: Union[str, Path]) -> "asyncio.Task":
        """
        Clone the repository at the URL to the path.

        Returns immediately with a task for the clone. The repository is
        tracked until the task is done, whether it succeeded, failed or was
        cancelled; the task then carries the git result or the error. Must be
        called from a running event loop.
        """
        loop = asyncio.get_running_loop()
        path = Path(path)
        with self._lock:
            repository = CloningRepository(id=next(self._ids), path=path, url=url)
            self._repositories.append(repository)
            self._state_by_id[repository.id] = CloningRepositoryState(
                output=f"Cloning into {path}"
            )

        logger.debug(f"Tracking clone #{repository.id} of {url} into {path}")
        task = loop.create_task(self._run_clone(repository))
        # Runs for every outcome, including a task cancelled before it started
        task.add_done_callback(lambda _: self.remove(repository))
        self._emit_update()
        return task

    async def _run_clone(self, repository: CloningRepository):
        parser = CloneProgressParser()

        def on_progress(line: str) -> None:
            progress_value = parse_progress_value(parser, line)
            with self._lock:
                # A removed repository stays removed, even though git keeps running
                if repository.id not in self._state_by_id:
                    return
                self._state_by_id[repository.id] = CloningRepositoryState(
                    output=line, progress_value=progress_value
                )
            self._emit_update()

        try:
            return await self._clone_fn(
                repository.url,
                repository.path,
                self._options,
                progress_callback=on_progress,
            )
        except Exception as e:
            logger.debug(f"Clone #{repository.id} of {repository.url} failed: {e}")
            raise

    @property
    def repositories(self) -> List[CloningRepository]:
        """Get the repositories currently being cloned, in the order they started."""
        with self._lock:
            return list(self._repositories)

    def get_repository_state(
        self, repository: CloningRepository
    ) -> Optional[CloningRepositoryState]:
        """Get the state of the repository, or None if it isn't tracked."""
        with self._lock:
            return self._state_by_id.get(repository.id)

    def remove(self, repository: CloningRepository) -> None:
        """
        Stop tracking the repository.

        Removing an unknown repository is a no-op, but still notifies. This
        doesn't stop a running clone.
        """
        with self._lock:
            self._state_by_id.pop(repository.id, None)
            self._repositories = [
                r for r in self._repositories if r.id != repository.id
            ]
        self._emit_update()
