"""Running parsed commands: redirections, heredocs, builtins and pipelines."""

from __future__ import annotations

import io
import os
import subprocess
import sys
import threading
from collections.abc import Callable, Sequence
from typing import BinaryIO

from .builtins import ExitRequested, is_builtin, requires_parent, run_builtin
from .environment import Environment, resolve_path
from .parser import Command, Redirection, RedirectType
from .splitting import is_all_whitespace

_HEREDOC_PROMPT = "heredoc > "


class RedirectionError(Exception):
    """Raised when the redirections of a command cannot be set up."""


def _read_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def _close(stream: object) -> None:
    if stream is not None and not isinstance(stream, bytes):
        stream.close()


def _feed(pipe: BinaryIO, data: bytes) -> None:
    try:
        pipe.write(data)
    except BrokenPipeError:
        pass
    finally:
        try:
            pipe.close()
        except BrokenPipeError:
            pass


class _Streams:
    """Files opened for a command's standard input and output."""

    def __init__(self) -> None:
        self.stdin: BinaryIO | None = None
        self.stdout: BinaryIO | None = None

    def replace_stdin(self, stream: BinaryIO) -> None:
        _close(self.stdin)
        self.stdin = stream

    def replace_stdout(self, stream: BinaryIO) -> None:
        _close(self.stdout)
        self.stdout = stream

    def close(self) -> None:
        _close(self.stdin)
        _close(self.stdout)
        self.stdin = None
        self.stdout = None

    def __enter__(self) -> "_Streams":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class Executor:
    """Runs pipelines of commands against an environment.

    ``last_status`` holds the exit status of the last command run.
    """

    def __init__(
        self,
        env: Environment,
        read_line: Callable[[str], str | None] | None = None,
        heredoc_dir: str | os.PathLike[str] | None = None,
    ) -> None:
        self.env = env
        self.read_line = read_line or _read_line
        self.heredoc_dir = os.curdir if heredoc_dir is None else heredoc_dir
        self.last_status = 0
        self._heredoc_count = 0

    def write_heredoc(self, redirection: Redirection) -> str:
        """Read heredoc lines up to the delimiter into a file; return its path."""
        path = os.path.join(self.heredoc_dir, f"file_{self._heredoc_count}")
        self._heredoc_count += 1
        try:
            handle = open(path, "w", encoding="utf-8")
        except OSError as exc:
            message = f"open: {exc.strerror}"
            sys.stderr.write(message + "\n")
            raise RedirectionError(message) from exc
        with handle:
            while True:
                line = self.read_line(_HEREDOC_PROMPT)
                if line is None or line == redirection.target:
                    break
                handle.write(line + "\n")
        redirection.heredoc_file = path
        return path

    def _open_file(self, redirection: Redirection, streams: _Streams) -> bool:
        kind = redirection.type
        if kind is RedirectType.OUTPUT:
            flags, mode = os.O_CREAT | os.O_WRONLY | os.O_TRUNC, "wb"
        elif kind is RedirectType.APPEND:
            flags, mode = os.O_CREAT | os.O_WRONLY | os.O_APPEND, "ab"
        else:
            flags, mode = os.O_RDONLY, "rb"
        try:
            fd = os.open(redirection.target, flags, 0o644)
        except OSError as exc:
            if kind is RedirectType.INPUT:
                sys.stderr.write(f"Dash@Ameed: {redirection.target}: {exc.strerror}\n")
            elif kind is RedirectType.APPEND:
                sys.stderr.write(f"minishell: {redirection.target}: {exc.strerror}\n")
            return False
        stream = os.fdopen(fd, mode)
        if kind is RedirectType.INPUT:
            streams.replace_stdin(stream)
        else:
            streams.replace_stdout(stream)
        return True

    def open_redirections(self, redirections: Sequence[Redirection]) -> _Streams:
        """Open a command's redirections in order and return the resulting streams.

        Heredocs are read first; the last one becomes standard input. A failed
        file is skipped, and RedirectionError is raised only when the last file
        redirection failed or a heredoc could not be written or reopened.
        """
        streams = _Streams()
        ok = True
        try:
            last_heredoc: Redirection | None = None
            for redirection in redirections:
                if redirection.type is RedirectType.HEREDOC:
                    self.write_heredoc(redirection)
                    last_heredoc = redirection
            for redirection in redirections:
                if redirection.type is not RedirectType.HEREDOC:
                    ok = self._open_file(redirection, streams)
            if last_heredoc is not None and last_heredoc.heredoc_file is not None:
                try:
                    streams.replace_stdin(open(last_heredoc.heredoc_file, "rb"))
                except OSError as exc:
                    message = f"open heredoc: {exc.strerror}"
                    sys.stderr.write(message + "\n")
                    raise RedirectionError(message) from exc
        except BaseException:
            streams.close()
            raise
        if not ok:
            streams.close()
            raise RedirectionError("redirection failed")
        return streams

    @staticmethod
    def _emit(text: str, target: BinaryIO | None) -> None:
        if target is not None:
            target.write(text.encode())
            target.flush()
        else:
            sys.stdout.write(text)
            sys.stdout.flush()

    def _builtin_in_child(self, args: Sequence[str]) -> tuple[int, str]:
        out = io.StringIO()
        try:
            status = run_builtin(args, Environment(self.env), out, sys.stderr, self.last_status)
        except ExitRequested as exc:
            status = exc.status
        return status, out.getvalue()

    def _launch(self, args, stdin, stdout, feeders):
        """Start one stage; return its outcome and what the next stage reads."""
        if is_builtin(args):
            status, text = self._builtin_in_child(args)
            if stdout is subprocess.PIPE:
                return status, text.encode()
            self._emit(text, stdout)
            return status, b""
        if not args or is_all_whitespace(args[0]):
            return 0, b""
        path = resolve_path(args[0], self.env)
        if path is None:
            sys.stderr.write(f"Dash@Ameed: {args[0]}: command not found\n")
            return 127, b""
        feed = stdin if isinstance(stdin, bytes) else None
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            proc = subprocess.Popen(
                list(args),
                executable=path,
                stdin=subprocess.PIPE if feed is not None else stdin,
                stdout=stdout,
                env=self.env.to_mapping(),
            )
        except OSError as exc:
            sys.stderr.write(f"execve: {exc.strerror}\n")
            return 126, b""
        if feed is not None:
            thread = threading.Thread(target=_feed, args=(proc.stdin, feed), daemon=True)
            thread.start()
            feeders.append(thread)
        downstream = proc.stdout if stdout is subprocess.PIPE else b""
        return proc, downstream

    def _run_pipeline(self, commands: Sequence[Command], strict: bool) -> int:
        outcomes: list = []
        feeders: list[threading.Thread] = []
        upstream = None
        last_index = len(commands) - 1
        try:
            for index, command in enumerate(commands):
                try:
                    streams = self.open_redirections(command.redirections)
                except RedirectionError:
                    if strict:
                        return 1
                    streams = _Streams()
                with streams:
                    stdin = streams.stdin if streams.stdin is not None else upstream
                    if streams.stdout is not None:
                        stdout = streams.stdout
                    else:
                        stdout = None if index == last_index else subprocess.PIPE
                    outcome, downstream = self._launch(command.args, stdin, stdout, feeders)
                _close(upstream)
                upstream = downstream
                outcomes.append(outcome)
        finally:
            _close(upstream)
            for outcome in outcomes:
                if isinstance(outcome, subprocess.Popen):
                    outcome.wait()
            for thread in feeders:
                thread.join()
        final = outcomes[-1]
        if isinstance(final, subprocess.Popen):
            return final.returncode if final.returncode >= 0 else self.last_status
        return final & 0xFF

    def _run_parent_builtin(self, command: Command) -> int:
        try:
            streams = self.open_redirections(command.redirections)
        except RedirectionError:
            return 1
        out = io.StringIO()
        with streams:
            try:
                return run_builtin(command.args, self.env, out, sys.stderr, self.last_status)
            finally:
                self._emit(out.getvalue(), streams.stdout)

    def run(self, commands: Sequence[Command]) -> int:
        """Run the commands as one pipeline and return the new exit status.

        A lone ``cd``, ``export``, ``unset`` or ``exit`` runs in this process;
        ``exit`` then raises ExitRequested.
        """
        if not commands:
            return self.last_status
        if len(commands) == 1 and requires_parent(commands[0].args):
            status = self._run_parent_builtin(commands[0])
        else:
            status = self._run_pipeline(commands, strict=len(commands) == 1)
        self.last_status = status
        return status