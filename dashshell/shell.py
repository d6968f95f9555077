"""The interactive shell: prompt, line handling and the command entry point."""

from __future__ import annotations

import os
import signal
import sys
from collections.abc import Callable, Mapping

from .builtins import ExitRequested
from .environment import Environment
from .executor import Executor
from .parser import ShellSyntaxError, parse_line

PROMPT = "\033[32mDash@Ameed$ \033[0m"


def _read_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


class Shell:
    """Holds the environment and exit status across command lines."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self.env = Environment.from_mapping(os.environ if environ is None else environ)
        self.executor = Executor(self.env)

    @property
    def status(self) -> int:
        return self.executor.last_status

    @status.setter
    def status(self, value: int) -> None:
        self.executor.last_status = value

    def run_line(self, line: str) -> int:
        """Parse and run one command line; return the resulting status.

        ExitRequested propagates when the line runs ``exit``.
        """
        try:
            commands = parse_line(line, self.env, self.status)
        except ShellSyntaxError as exc:
            sys.stderr.write(f"Dash@Ameed: {exc}\n")
            if exc.status is not None:
                self.status = exc.status
            commands = exc.commands
        if commands:
            self.executor.run(commands)
        return self.status

    def loop(self, read_line: Callable[[str], str | None] | None = None) -> int:
        """Read and run lines until end of input or ``exit``; return the exit status."""
        reader = read_line or _read_line
        self.executor.read_line = reader
        while True:
            try:
                line = reader(PROMPT)
            except KeyboardInterrupt:
                sys.stdout.write("\n")
                sys.stdout.flush()
                self.status = 130
                continue
            if line is None:
                return 0
            try:
                self.run_line(line)
            except ExitRequested as exc:
                return exc.status
            except KeyboardInterrupt:
                sys.stdout.write("\n")
                sys.stdout.flush()
                self.status = 130


def main(argv: list[str] | None = None) -> int:
    """Start the interactive shell and return its exit status."""
    if hasattr(signal, "SIGQUIT"):
        signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    try:
        import readline  # noqa: F401  (enables line editing and history for input())
    except ImportError:
        pass
    shell = Shell()
    return shell.loop() & 0xFF


if __name__ == "__main__":
    sys.exit(main())