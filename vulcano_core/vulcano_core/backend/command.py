"""
Local command execution.

A command is handed over as a single string. Plain commands are executed
directly; anything using shell syntax goes through the host shell.
"""

from __future__ import annotations
import re
import shlex
import subprocess
from dataclasses import dataclass
from typing import List, Union

from ..obs.logging import get_logger

logger = get_logger("vulcano.backend.command")

# Characters that need a shell to be interpreted.
_SHELL_META = re.compile(r"[*?{}\[\]<>()~&|\\$;'`\"\n#]")


@dataclass(frozen=True)
class CommandResult:
    """Captured output and exit status of one command run."""
    stdout: str
    stderr: str
    exit_status: int

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


def needs_shell(cmd: str) -> bool:
    """Check if `cmd` uses shell syntax (metacharacters or a leading VAR=value)."""
    if not cmd.strip() or _SHELL_META.search(cmd):
        return True
    return "=" in cmd.split(None, 1)[0]


def _argv(cmd: str) -> Union[str, List[str]]:
    return cmd if needs_shell(cmd) else shlex.split(cmd)


def run_command(cmd: str) -> CommandResult:
    """
    Run a command and wait for it to finish.

    Both output streams are read to the end before the exit status is
    collected. There is no timeout.

    Args:
        cmd: Command line; quoting is the caller's responsibility

    Returns:
        CommandResult. A missing executable gives exit_status 1 and empty
        output instead of an exception.
    """
    argv = _argv(cmd)
    try:
        proc = subprocess.Popen(
            argv,
            shell=isinstance(argv, str),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except FileNotFoundError:
        logger.debug(f"Command not found: {cmd}", extra={"cmd": cmd, "exit_status": 1})
        return CommandResult(stdout="", stderr="", exit_status=1)

    out, err = proc.communicate()
    result = CommandResult(
        stdout=out.decode("utf-8", errors="replace"),
        stderr=err.decode("utf-8", errors="replace"),
        exit_status=proc.returncode,
    )
    logger.debug(f"Command finished: {cmd}", extra={"cmd": cmd, "exit_status": result.exit_status})
    return result
