"""
errors
======

Exception types raised while preparing or running a table transfer.

Every error carries the process exit code the CLI should return, so the
orchestration code can simply raise and let :func:`tablecopy.cli.main`
translate the failure.

Exit codes
----------
- ``1``: usage, configuration, validation or DDL failures
- ``2``: schema mismatch between source and destination
- ``3``: destination table already contains rows
- external process exit code when export/import fails
"""

from __future__ import annotations

from typing import List, Sequence

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_SCHEMA_MISMATCH = 2
EXIT_NOT_EMPTY = 3
EXIT_SPAWN_FAILED = 127


class TransferError(Exception):
    """Base class for all failures that abort a transfer."""

    def __init__(self, message: str, exit_code: int = EXIT_FAILURE) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class UsageError(TransferError):
    """Missing or invalid command-line arguments."""


class ConfigError(TransferError):
    """Configuration file missing, unreadable or incomplete."""


class ValidationError(TransferError):
    """A pre-transfer check failed (endpoints, files, tables, row counts)."""


class SchemaMismatchError(TransferError):
    """Source and destination columns are incompatible."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("\n".join(self.errors), EXIT_SCHEMA_MISMATCH)


class DDLError(TransferError):
    """A CREATE TABLE statement could not be synthesized."""


class MissingDataType(DDLError):
    """A column has no data type to render."""

    def __init__(self, column_name: str) -> None:
        self.column_name = column_name
        super().__init__(f"Data type not found for column {column_name}")


class DatabaseError(TransferError):
    """A database driver call failed."""


class ExternalProcessError(TransferError):
    """An export/import command exited non-zero or could not be started."""

    def __init__(self, message: str, returncode: int) -> None:
        self.returncode = returncode
        super().__init__(message, returncode if returncode > 0 else EXIT_FAILURE)
