import io
import logging
import stat
import textwrap

import pytest

from pathlib import Path


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("clonewatch")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    log_stream.close()


@pytest.fixture
def fake_git(tmp_path, monkeypatch):
    """
    Factory for a stand-in git executable.

    The returned function takes a shell script body, writes it as an
    executable and makes the runner use it. Every invocation records its
    arguments, one per line, in the returned ``args_file``.
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    args_file = tmp_path / "git-args.txt"

    def install(body: str) -> Path:
        script = bin_dir / "git"
        script.write_text(
            "#!/bin/sh\n"
            f"printf '%s\\n' \"$@\" > '{args_file}'\n" + textwrap.dedent(body)
        )
        script.chmod(script.stat().st_mode | stat.S_IEXEC)
        monkeypatch.setattr(
            "clonewatch.git.runner.get_git_executable", lambda: str(script)
        )
        return args_file

    return install


def read_args(args_file: Path) -> list:
    return args_file.read_text().splitlines()
