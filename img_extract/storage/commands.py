"""Subprocess runner shared by every external tool invocation.

Two flavours:

- ``read_command`` captures stdout and returns it as UTF-8 text.
- ``run_command`` lets the program write straight to our stdout/stderr.

Both raise ``CommandError`` when the program cannot be launched or exits
non-zero, so every tool failure has the same shape.
"""

from __future__ import annotations

import os
import subprocess
from typing import Optional, Sequence, Union

from img_extract.config.settings import get_tool_path
from img_extract.logging import LoggerFactory

from .exceptions import CommandError


log = LoggerFactory.for_disk()

PathLike = Union[str, "os.PathLike[str]"]


def _build_command(command: Sequence[PathLike]) -> list[str]:
    if not command:
        raise ValueError("command must not be empty")
    args = [os.fspath(arg) for arg in command]
    args[0] = get_tool_path(args[0])
    return args


def _program_name(command: Sequence[PathLike]) -> str:
    return os.path.basename(os.fspath(command[0]))


def read_command(
    command: Sequence[PathLike],
    *,
    cwd: Optional[PathLike] = None,
    context: str = "command failed",
) -> str:
    """Run a command and return its stdout decoded as UTF-8.

    Surrounding whitespace (including the trailing newline) is stripped.

    Args:
        command: Program and arguments
        cwd: Working directory for the program
        context: Human-readable description used in the error message

    Raises:
        CommandError: If the program cannot be launched, exits non-zero or
            writes output that is not valid UTF-8
    """
    args = _build_command(command)
    program = _program_name(command)
    log.debug(f"Running command: {' '.join(args)}")
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as error:
        raise CommandError(program, f"{context}: unable to launch", cause=error) from error

    stderr = result.stderr.decode("utf-8", errors="replace").strip() if result.stderr else ""
    if result.returncode != 0:
        if stderr:
            log.debug(f"stderr: {stderr}")
        raise CommandError(program, context, returncode=result.returncode, stderr=stderr)

    try:
        return result.stdout.decode("utf-8").strip()
    except UnicodeDecodeError as error:
        raise CommandError(program, f"{context}: output is not valid UTF-8", cause=error) from error


def run_command(
    command: Sequence[PathLike],
    *,
    cwd: Optional[PathLike] = None,
    extra_args: Optional[Sequence[PathLike]] = None,
    context: str = "command failed",
) -> None:
    """Run a command, inheriting stdout and stderr.

    Args:
        command: Program and fixed arguments
        cwd: Working directory for the program
        extra_args: Additional arguments appended verbatim after ``command``
        context: Human-readable description used in the error message

    Raises:
        CommandError: If the program cannot be launched or exits non-zero
    """
    args = _build_command(list(command) + list(extra_args or ()))
    program = _program_name(command)
    log.debug(f"Running command: {' '.join(args)}" + (f" (cwd={cwd})" if cwd else ""))
    try:
        result = subprocess.run(args, cwd=cwd)
    except OSError as error:
        raise CommandError(program, f"{context}: unable to launch", cause=error) from error
    if result.returncode != 0:
        raise CommandError(program, context, returncode=result.returncode)
    log.debug(f"Command completed with return code {result.returncode}")


__all__ = ["read_command", "run_command"]
