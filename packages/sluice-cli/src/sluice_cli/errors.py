"""CLI error handling for sluice-cli.

Wraps sluice-core, pydantic and YAML exceptions in user-friendly
messages with a process exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
from pydantic import ValidationError as PydanticValidationError

from sluice_cli.output import error

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails
    from sluice_core.errors import SluiceError


# Exit codes following sysexits.h convention
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Invalid pipeline or configuration
EXIT_SYSTEM_ERROR = 2  # Missing input file, unwritable output


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        error(self.format_message())


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format a pydantic validation error as one line per field.

    Args:
        err: Pydantic ValidationError instance.

    Returns:
        Formatted error message with field paths and issues.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - steps.0.kind: Input should be a valid string"
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]

    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        lines.append(f"  - {loc}: {e['msg']}")

    return "\n".join(lines)


def handle_yaml_error(err: Exception, file_path: str) -> NoReturn:
    """Raise a CLIError for a YAML parse failure, with position if known.

    Args:
        err: YAML parsing exception.
        file_path: Path to the file being parsed.

    Raises:
        CLIError: Always.
    """
    error_msg = str(err)
    mark = getattr(err, "problem_mark", None)
    if mark is not None:
        problem = getattr(err, "problem", None)
        error_msg = f"YAML syntax error at line {mark.line + 1}, column {mark.column + 1}: {problem}"

    raise CLIError(f"Invalid YAML in {file_path}: {error_msg}")


def handle_validation_error(err: PydanticValidationError, file_path: str) -> NoReturn:
    """Raise a CLIError for a schema validation failure.

    Args:
        err: Pydantic ValidationError instance.
        file_path: Path to the file being validated.

    Raises:
        CLIError: Always.
    """
    formatted = format_pydantic_error(err)
    raise CLIError(f"Invalid configuration in {file_path}:\n{formatted}")


def handle_sluice_error(err: SluiceError, action: str) -> NoReturn:
    """Raise a CLIError for a sluice-core failure.

    Args:
        err: The sluice-core exception.
        action: What was being attempted ("Compilation", "Validation").

    Raises:
        CLIError: Always, with the error kind in the message.
    """
    raise CLIError(f"{action} failed ({type(err).__name__}): {err.user_message}")


def handle_file_not_found(file_path: str, option: str = "--file") -> NoReturn:
    """Raise a CLIError for a missing input file.

    Args:
        file_path: Path to the missing file.
        option: Command-line option that selects the file.

    Raises:
        CLIError: Always, with exit code 2.
    """
    raise CLIError(
        f"File not found: {file_path}\n\nUse {option} to specify the file path.",
        exit_code=EXIT_SYSTEM_ERROR,
    )


def handle_permission_error(path: str, operation: str = "access") -> NoReturn:
    """Raise a CLIError for a permission failure.

    Args:
        path: Path that caused the permission error.
        operation: Operation that failed (read, write, etc.).

    Raises:
        CLIError: Always, with exit code 2.
    """
    raise CLIError(
        f"Permission denied: Cannot {operation} {path}",
        exit_code=EXIT_SYSTEM_ERROR,
    )


def handle_write_error(err: OSError, path: str) -> NoReturn:
    """Raise a CLIError for a failed output write.

    Args:
        err: The OS error raised while writing.
        path: Output directory being written to.

    Raises:
        CLIError: Always, with exit code 2.
    """
    if isinstance(err, PermissionError):
        handle_permission_error(path, "write to")
    reason = err.strerror or str(err)
    raise CLIError(
        f"Cannot write manifests to {path}: {reason}",
        exit_code=EXIT_SYSTEM_ERROR,
    )
