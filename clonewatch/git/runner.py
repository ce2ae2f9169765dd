"""
Running the git executable and streaming its output.

git writes progress to stderr, rewriting the current line with carriage
returns, so stderr is split on both ``\\r`` and ``\\n``. Each line is handed to
the caller's callback in the order git wrote it, and the next line isn't read
until the callback returns.
"""

import asyncio
import codecs
import inspect
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Dict, FrozenSet, List, Optional, Sequence, Union

from clonewatch.config import get_git_executable
from clonewatch.git.exceptions import ExternalProcessError, GitNotFoundError

logger = logging.getLogger(__name__)

READ_SIZE = 4096
LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")

LineCallback = Callable[[str], Union[None, Awaitable[None]]]


@dataclass
class ExecutionOptions:
    """
    How to run a git command.

    Attributes:
        success_exit_codes: Exit codes that count as success. An empty set
            accepts any exit code.
        env: Extra environment variables, merged over the current environment.
        stderr_line_callback: Called with every stderr line as it arrives.
        executable: git executable to run, defaults to the configured one.
    """

    success_exit_codes: FrozenSet[int] = frozenset({0})
    env: Optional[Dict[str, str]] = None
    stderr_line_callback: Optional[LineCallback] = None
    executable: Optional[str] = None


@dataclass(frozen=True)
class GitResult:
    stdout: str
    stderr: str
    combined_output: str
    exit_code: int

    @property
    def is_partial(self) -> bool:
        """True when git exited with an allowed, non-zero code.

        Such exits signal an expected condition (a missing refspec, branches
        that couldn't be fast-forwarded); callers inspect the output to find
        out what actually happened.
        """
        return self.exit_code != 0


async def _read_stream(
    stream: asyncio.StreamReader,
    chunks: List[str],
    combined: List[str],
    on_line: Optional[LineCallback] = None,
) -> None:
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""

    async def emit(lines):
        for line in lines:
            if not line or on_line is None:
                continue
            result = on_line(line)
            if inspect.isawaitable(result):
                await result

    while True:
        data = await stream.read(READ_SIZE)
        if not data:
            break
        text = decoder.decode(data)
        chunks.append(text)
        combined.append(text)

        buffer += text
        lines = LINE_SPLIT_RE.split(buffer)
        buffer = lines.pop()
        await emit(lines)

    tail = decoder.decode(b"", final=True)
    if tail:
        chunks.append(tail)
        combined.append(tail)
        buffer += tail
    await emit(LINE_SPLIT_RE.split(buffer))


async def git(
    args: Sequence[str],
    path: Union[str, Path],
    name: str,
    options: Optional[ExecutionOptions] = None,
) -> GitResult:
    """
    Run git with the given arguments and wait for it to exit.

    Args:
        args: Arguments passed to git
        path: Working directory
        name: Name of the operation, used in logs and errors
        options: Execution options (allowed exit codes, env, line callback)

    Returns:
        GitResult with the captured output and exit code

    Raises:
        ExternalProcessError: If the exit code is not in the allowed set
        GitNotFoundError: If the git executable cannot be started
    """
    if options is None:
        options = ExecutionOptions()

    executable = options.executable or get_git_executable()
    env = dict(os.environ)
    if options.env:
        env.update(options.env)

    logger.debug(f"Running git {name}: {executable} {' '.join(args)} (in {path})")

    try:
        process = await asyncio.create_subprocess_exec(
            executable,
            *args,
            cwd=str(path),
            env=env,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, PermissionError) as e:
        raise GitNotFoundError(executable, str(e)) from e

    stdout_chunks: List[str] = []
    stderr_chunks: List[str] = []
    combined: List[str] = []

    try:
        await asyncio.gather(
            _read_stream(process.stdout, stdout_chunks, combined),
            _read_stream(
                process.stderr, stderr_chunks, combined, options.stderr_line_callback
            ),
        )
        exit_code = await process.wait()
    finally:
        # Don't leave git running if reading or a callback failed
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()

    result = GitResult(
        stdout="".join(stdout_chunks),
        stderr="".join(stderr_chunks),
        combined_output="".join(combined),
        exit_code=exit_code,
    )

    if options.success_exit_codes and exit_code not in options.success_exit_codes:
        logger.debug(f"git {name} failed with exit code {exit_code}")
        raise ExternalProcessError(
            name,
            args,
            exit_code,
            stderr=result.stderr,
            stdout=result.stdout,
            allowed_exit_codes=options.success_exit_codes,
        )

    if result.is_partial:
        logger.info(f"git {name} exited with expected code {exit_code}")

    return result
