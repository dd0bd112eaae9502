"""Command execution on top of invoke."""

import contextlib
import os
import platform
import shlex
import signal
from collections.abc import Sequence
from pathlib import Path
from subprocess import PIPE, Popen
from typing import Any

from invoke import Config, Context, Local, Result
from invoke.exceptions import CommandTimedOut

from postcheck.core.log import logger

# Exit code recorded for commands killed by the timeout
TIMED_OUT = -1


def render_command(command: str | Sequence[str]) -> str:
    """Join an argument vector into one shell-safe command line.

    Every argument is quoted on its own, so values such as package
    names are never interpreted by the shell.
    """
    if isinstance(command, str):
        return command
    return shlex.join(str(arg) for arg in command)


class LocalRunner(Local):
    """invoke's local runner that owns the whole process tree.

    On POSIX each command leads its own session, so a timeout or an
    interrupt reaches every process it started. Otherwise a surviving
    grandchild (npm -> sh -> node) keeps the output pipes open and
    invoke waits for it.
    """

    def start(self, command: str, shell: str, env: dict[str, Any]) -> None:
        if self.using_pty or platform.system() == "Windows":
            # pty.fork() already starts a new session
            super().start(command, shell, env)
            return

        self.process = Popen(
            command,
            shell=True,
            executable=shell,
            env=env,
            stdout=PIPE,
            stderr=PIPE,
            stdin=PIPE,
            start_new_session=True,
        )

    def send_interrupt(self, interrupt: KeyboardInterrupt) -> None:
        # The child no longer shares our terminal's process group
        if platform.system() == "Windows":
            super().send_interrupt(interrupt)
            return
        with contextlib.suppress(ProcessLookupError):
            os.killpg(self.get_pid(), signal.SIGINT)

    def kill(self) -> None:
        """Kill the running subprocess and everything it started.

        invoke kills with signal.SIGKILL, which does not exist on
        Windows. os.kill() there passes the number to
        TerminateProcess() as the exit code, so 9 is used directly.
        """
        if platform.system() == "Windows":
            with contextlib.suppress(ProcessLookupError):
                os.kill(self.get_pid(), 9)
            return

        # The session leader's pid is also the process group id
        with contextlib.suppress(ProcessLookupError):
            os.killpg(self.get_pid(), signal.SIGKILL)


class Runner(Context):
    """invoke.Context with an execute() that never raises on failure."""

    def __init__(self, config: Config | None = None):
        super().__init__(
            config=config or Config(overrides={"runners": {"local": LocalRunner}})
        )

    def execute(
        self,
        command: str | Sequence[str],
        cwd: Path | None = None,
        timeout: int | None = None,
        log_file: Path | None = None,
        log_level: str | None = None,
        env: dict[str, str] | None = None,
    ) -> Result:
        """Run a command, capturing stdout and stderr separately.

        Args:
            command: Argument vector (quoted per argument) or a
                ready command line
            cwd: Working directory for the command
            timeout: Maximum execution time in seconds
            log_file: Path to write combined stdout/stderr output
            log_level: Level at which output lines are logged
            env: Variables added to the inherited environment

        Returns:
            invoke.Result; exited is TIMED_OUT if the timeout fired

        Raises:
            OSError: If the shell process cannot be started
        """
        line = render_command(command)
        if not isinstance(command, str) and platform.system() != "Windows":
            # The program replaces the shell, so a timeout kill
            # reaches it rather than an intermediate shell
            line = f"exec {line}"

        kwargs = {
            "hide": True,
            "warn": True,
            "in_stream": False,
        }
        if timeout:
            kwargs["timeout"] = timeout
        if env:
            kwargs["env"] = env

        logger.debug("Executing", command=line, cwd=str(cwd or "."))

        try:
            if cwd:
                with self.cd(str(cwd)):
                    result = self.run(line, **kwargs)
            else:
                result = self.run(line, **kwargs)
        except CommandTimedOut as e:
            result = e.result
            result.exited = TIMED_OUT

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            log_file.write_text(result.stdout + result.stderr, encoding="utf-8")

        if log_level:
            for out in (result.stdout, result.stderr):
                for output_line in out.splitlines():
                    logger.log(log_level, "{line}", line=output_line.rstrip())

        return result
