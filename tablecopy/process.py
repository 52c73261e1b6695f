"""
process
=======

External bulk-copy command execution.

Commands run as an argument vector with the parent's stdin/stdout/stderr, so
the bulk-copy tool's progress output streams straight to the terminal. No
timeout is applied: the transfer blocks until the command exits.
"""

from __future__ import annotations

import shlex
import subprocess
from typing import List, Sequence

from .errors import EXIT_SPAWN_FAILED, ExternalProcessError


def split_command(command: str) -> List[str]:
    """Split a rendered command line into an argument vector."""
    return shlex.split(command)


def format_command(argv: Sequence[str]) -> str:
    """Return a shell-quoted, printable form of *argv*."""
    return " ".join(shlex.quote(a) for a in argv)


def run_command(argv: Sequence[str]) -> None:
    """Run *argv* to completion with inherited standard streams.

    Raises
    ------
    ExternalProcessError
        If the command cannot be started (exit code 127) or exits non-zero
        (exit code propagated).
    """
    if not argv:
        raise ExternalProcessError("Empty command", EXIT_SPAWN_FAILED)
    try:
        proc = subprocess.run(list(argv), check=False)
    except OSError as e:
        raise ExternalProcessError(f"Failed to start {argv[0]}: {e}", EXIT_SPAWN_FAILED) from e

    if proc.returncode != 0:
        raise ExternalProcessError(f"Command exited with code {proc.returncode}.", proc.returncode)
