"""Tests against real repositories, built with GitPython in a temp dir."""

import asyncio

import pytest
from git import Actor, Repo

from clonewatch.git.exceptions import GitError
from clonewatch.git.operations import fast_forward_branches, fetch, fetch_refspec
from clonewatch.git.repository import load_branches, load_remote
from clonewatch.store import CloningRepositoriesStore

AUTHOR = Actor("Test User", "test@example.com")


def commit_file(repo: Repo, name: str, content: str, message: str) -> str:
    path = repo.working_tree_dir + "/" + name
    with open(path, "w") as f:
        f.write(content)
    repo.index.add([name])
    return repo.index.commit(message, author=AUTHOR, committer=AUTHOR).hexsha


@pytest.fixture(autouse=True)
def git_identity(monkeypatch):
    for prefix in ("GIT_AUTHOR", "GIT_COMMITTER"):
        monkeypatch.setenv(f"{prefix}_NAME", AUTHOR.name)
        monkeypatch.setenv(f"{prefix}_EMAIL", AUTHOR.email)


@pytest.fixture
def origin(tmp_path):
    repo = Repo.init(tmp_path / "origin")
    commit_file(repo, "README.md", "hello\n", "initial")
    repo.git.branch("-M", "main")
    repo.create_head("dev")
    return repo


@pytest.fixture
def working_copy(origin, tmp_path):
    repo = Repo.clone_from(origin.working_tree_dir, tmp_path / "clone")
    dev = repo.create_head("dev", repo.remotes.origin.refs.dev)
    dev.set_tracking_branch(repo.remotes.origin.refs.dev)
    repo.create_head("local-only")
    return repo


@pytest.mark.integration
class TestLoadRemote:
    def test_origin(self, working_copy, origin):
        remote = load_remote(working_copy.working_tree_dir)
        assert remote.name == "origin"
        assert remote.url == origin.working_tree_dir

    def test_missing_remote(self, working_copy):
        with pytest.raises(GitError, match="Remote 'upstream' not found"):
            load_remote(working_copy.working_tree_dir, "upstream")

    def test_not_a_repository(self, tmp_path):
        with pytest.raises(GitError, match="Not a git repository"):
            load_remote(tmp_path)


@pytest.mark.integration
class TestLoadBranches:
    def test_skips_checked_out_branch(self, working_copy):
        branches = {b.name: b for b in load_branches(working_copy.working_tree_dir)}

        assert "main" not in branches
        assert branches["dev"].upstream == "origin/dev"
        assert branches["local-only"].upstream is None
        assert len(branches["dev"].tip) == 40

    def test_named_branches_in_order(self, working_copy):
        branches = load_branches(
            working_copy.working_tree_dir, ["local-only", "missing", "dev"]
        )
        assert [b.name for b in branches] == ["local-only", "dev"]

    def test_include_current(self, working_copy):
        branches = load_branches(
            working_copy.working_tree_dir, ["main"], exclude_current=False
        )
        assert branches[0].upstream == "origin/main"


@pytest.mark.integration
class TestRealGit:
    @pytest.mark.asyncio
    async def test_fast_forward(self, origin, working_copy):
        origin.heads.dev.checkout()
        new_tip = commit_file(origin, "dev.txt", "dev\n", "dev work")
        origin.heads.main.checkout()
        working_copy.remotes.origin.fetch()

        branches = load_branches(working_copy.working_tree_dir)
        updated = await fast_forward_branches(working_copy.working_tree_dir, branches)

        assert [(b.name, b.tip) for b in updated] == [("dev", new_tip)]
        assert working_copy.heads.dev.commit.hexsha == new_tip

    @pytest.mark.asyncio
    async def test_fast_forward_nothing_new(self, working_copy):
        branches = load_branches(working_copy.working_tree_dir)
        assert await fast_forward_branches(working_copy.working_tree_dir, branches) == []

    @pytest.mark.asyncio
    async def test_fetch(self, origin, working_copy):
        new_tip = commit_file(origin, "more.txt", "more\n", "more")
        events = []

        remote = load_remote(working_copy.working_tree_dir)
        await fetch(
            working_copy.working_tree_dir,
            remote,
            progress_callback=events.append,
            recurse_submodules=False,
        )

        assert events[0].value == 0.0
        assert all(0.0 <= e.value <= 1.0 for e in events)
        assert working_copy.remotes.origin.refs.main.commit.hexsha == new_tip

    @pytest.mark.asyncio
    async def test_fetch_missing_refspec(self, working_copy):
        remote = load_remote(working_copy.working_tree_dir)
        result = await fetch_refspec(
            working_copy.working_tree_dir, remote, "refs/heads/does-not-exist"
        )
        assert result.exit_code == 128

    @pytest.mark.asyncio
    async def test_store_clones_concurrently(self, origin, tmp_path):
        store = CloningRepositoriesStore()
        notifications = []
        store.on_did_update(lambda: notifications.append(len(store.repositories)))

        targets = [tmp_path / "clones" / name for name in ("first", "second")]
        targets[0].parent.mkdir()
        tasks = [store.clone(origin.working_tree_dir, target) for target in targets]
        assert len(store.repositories) == 2

        await asyncio.gather(*tasks)

        assert store.repositories == []
        assert notifications[-1] == 0
        for target in targets:
            assert (target / "README.md").read_text() == "hello\n"
