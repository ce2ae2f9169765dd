"""Tests for the clonewatch command line."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner
from git import Repo

from clonewatch import __version__
from clonewatch.cli.main import cli
from clonewatch.model import Branch

from ..conftest import read_args

CLONE_SCRIPT = r"""
for target; do :; done
mkdir -p "$target"
printf "Cloning into '%s'...\n" "$target" >&2
printf 'Receiving objects:  50%% (1/2)\rReceiving objects: 100%% (2/2), done.\n' >&2
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def repo_with_origin(tmp_path):
    repo = Repo.init(tmp_path / "repo")
    repo.create_remote("origin", "https://example.com/repo.git")
    return repo


@pytest.mark.short
def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


@pytest.mark.short
def test_clone(runner, tmp_path, fake_git):
    args_file = fake_git(CLONE_SCRIPT)
    dest = tmp_path / "dest"

    result = runner.invoke(
        cli, ["clone", "https://example.com/user/repo.git", "--dest", str(dest)]
    )

    assert result.exit_code == 0, result.output
    assert (dest / "repo").is_dir()
    assert "Cloned https://example.com/user/repo.git" in result.output
    assert read_args(args_file)[-1] == str((dest / "repo").absolute())


@pytest.mark.short
def test_clone_many(runner, tmp_path, fake_git):
    fake_git(CLONE_SCRIPT)
    dest = tmp_path / "dest"

    result = runner.invoke(
        cli,
        [
            "clone",
            "https://example.com/user/first.git",
            "git@example.com:user/second.git",
            "--dest",
            str(dest),
        ],
    )

    assert result.exit_code == 0, result.output
    assert (dest / "first").is_dir()
    assert (dest / "second").is_dir()


@pytest.mark.short
def test_clone_failure(runner, tmp_path, fake_git):
    fake_git("printf 'fatal: repository not found\\n' >&2\nexit 128\n")

    result = runner.invoke(
        cli, ["clone", "https://example.com/missing.git", "--dest", str(tmp_path)]
    )

    assert result.exit_code == 1
    assert "Failed to clone https://example.com/missing.git" in result.output


@pytest.mark.short
def test_clone_with_debug(runner, tmp_path, fake_git):
    fake_git(CLONE_SCRIPT)
    result = runner.invoke(
        cli,
        ["clone", "--debug", "https://example.com/user/repo.git", "--dest", str(tmp_path)],
    )
    assert result.exit_code == 0, result.output


@pytest.mark.short
def test_fetch(runner, repo_with_origin, fake_git):
    args_file = fake_git(
        r"""
        printf 'Receiving objects: 100%% (2/2), done.\n' >&2
        """
    )

    result = runner.invoke(
        cli, ["fetch", repo_with_origin.working_tree_dir, "--no-recurse-submodules"]
    )

    assert result.exit_code == 0, result.output
    assert "Fetched origin" in result.output
    assert read_args(args_file) == ["fetch", "--progress", "--prune", "origin"]


@pytest.mark.short
def test_fetch_missing_refspec(runner, repo_with_origin, fake_git):
    fake_git("exit 128\n")

    result = runner.invoke(
        cli,
        ["fetch", repo_with_origin.working_tree_dir, "--refspec", "refs/pull/1/head"],
    )

    assert result.exit_code == 0, result.output
    assert "refs/pull/1/head not found on origin" in result.output


@pytest.mark.short
def test_fetch_unknown_remote(runner, repo_with_origin):
    result = runner.invoke(
        cli, ["fetch", repo_with_origin.working_tree_dir, "--remote", "upstream"]
    )
    assert result.exit_code == 1


@pytest.mark.short
def test_fetch_failure(runner, repo_with_origin, fake_git):
    fake_git("exit 128\n")
    result = runner.invoke(cli, ["fetch", repo_with_origin.working_tree_dir])
    assert result.exit_code == 1


@pytest.mark.short
def test_fast_forward(runner, tmp_path, fake_git):
    old, new = "a" * 40, "b" * 40
    fake_git(
        f"""
        printf 'From .\\n' >&2
        printf '   {old}..{new}  refs/remotes/origin/dev -> dev\\n' >&2
        """
    )
    branches = [Branch("dev", "origin/dev", old), Branch("topic", "origin/topic", old)]

    with patch("clonewatch.cli.main.load_branches", return_value=branches) as load:
        result = runner.invoke(cli, ["fast-forward", str(tmp_path), "dev", "topic"])

    assert result.exit_code == 0, result.output
    load.assert_called_once_with(tmp_path, ["dev", "topic"])
    assert "dev" in result.output
    assert new in result.output
    assert "topic" not in result.output


@pytest.mark.short
def test_fast_forward_nothing(runner, tmp_path):
    with patch("clonewatch.cli.main.load_branches", return_value=[Branch("local")]):
        result = runner.invoke(cli, ["fast-forward", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "No branches were fast-forwarded" in result.output
