"""Custom exception hierarchy for sluice-core.

This module defines the exception classes used throughout sluice:
- SluiceError: Base exception for all sluice-related errors
- ValidationError: The pipeline definition is structurally invalid
- CompilationError: A node cannot be synthesized for the active target
- ConfigurationError: The deployment configuration is incomplete or invalid

Every error aborts the current compilation run. There is no retry policy:
these are pipeline or configuration defects.

Design:
- User-facing messages are safe to display
- Technical details are logged internally via structlog
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

logger = structlog.get_logger(__name__)


class SluiceError(Exception):
    """Base exception for sluice.

    All sluice exceptions inherit from this class. User-facing messages
    are safe to display; technical details are logged internally.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but never part of the user message.

    Example:
        >>> raise SluiceError(
        ...     "Pipeline invalid",
        ...     internal_details="step #3 has no 'kind' key",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize SluiceError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "sluice_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ValidationError(SluiceError):
    """Raised when the pipeline definition is structurally invalid.

    Use this exception when:
    - A required step attribute is missing
    - Node names collide or reference unknown nodes
    - Connections violate the source -> processor -> sink rules
    - The connection graph contains a cycle
    """

    pass


class CompilationError(SluiceError):
    """Raised when artifact synthesis fails for a node.

    Use this exception when:
    - A processor is wired to a neighbor kind the target cannot realize
    - The requested deployment target does not exist
    """

    pass


class ConfigurationError(SluiceError):
    """Raised when the deployment configuration cannot be used.

    Provides file path and field context for actionable error messages.

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Dot-separated path to the invalid field (e.g., "source_topics.s1").
        line_number: Line number in the file where error occurred (if available).

    Example:
        >>> raise ConfigurationError(
        ...     "Missing topic mapping",
        ...     file_path="deployment.yaml",
        ...     field_path="source_topics.orders",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        line_number: int | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ConfigurationError with context.

        Args:
            user_message: Safe message to display to the user.
            file_path: Path to the configuration file (optional).
            field_path: Dot-separated path to the field (optional).
            line_number: Line number in the file (optional).
            internal_details: Technical details for internal logging only.
        """
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if line_number:
            context_parts.append(f"line {line_number}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path
        self.line_number = line_number


# =============================================================================
# Topology errors
# =============================================================================


class MissingFieldError(ValidationError):
    """Raised when a required step attribute is absent.

    Attributes:
        field_name: Name of the missing attribute (e.g., "connectsTo").
        node_name: Name of the node being declared, if known.

    Example:
        >>> raise MissingFieldError("connectsTo", node_name="ingest")
        # User sees: "Required field 'connectsTo' missing for 'ingest'"
    """

    def __init__(self, field_name: str, *, node_name: str | None = None) -> None:
        if node_name:
            user_message = f"Required field '{field_name}' missing for '{node_name}'"
        else:
            user_message = f"Required field '{field_name}' missing"
        super().__init__(user_message)
        self.field_name = field_name
        self.node_name = node_name


class DuplicateNameError(ValidationError):
    """Raised when a node name is declared twice, under any kind.

    Attributes:
        name: The duplicated node name.
        existing_kind: Kind under which the name was first declared.
    """

    def __init__(self, name: str, existing_kind: str) -> None:
        super().__init__(f"Node '{name}' is already declared as a {existing_kind}")
        self.name = name
        self.existing_kind = existing_kind


class UnknownComponentError(ValidationError):
    """Raised when no node exists for a (name, kind) pair.

    Attributes:
        name: The requested node name.
        kind: The requested node kind.
    """

    def __init__(self, name: str, kind: str) -> None:
        super().__init__(f"No {kind} named '{name}' is declared")
        self.name = name
        self.kind = kind


class InvalidKindError(ValidationError):
    """Raised when a node kind is outside {source, processor, sink}.

    Attributes:
        kind: The rejected kind value.
        allowed: The accepted kind values.
    """

    def __init__(self, kind: object, allowed: Iterable[str]) -> None:
        self.allowed = list(allowed)
        super().__init__(f"Invalid step kind '{kind}': must be one of {'|'.join(self.allowed)}")
        self.kind = kind


# =============================================================================
# Graph errors
# =============================================================================


class InvalidEdgeError(ValidationError):
    """Raised when a connection targets a missing node or a disallowed kind.

    Attributes:
        origin: Node declaring the connection.
        target: Connection target name.
        expected: Human-readable description of the allowed target kinds.
    """

    def __init__(self, origin: str, target: str, expected: str) -> None:
        super().__init__(
            f"'{origin}' connects to '{target}', which does not exist or is not a {expected}"
        )
        self.origin = origin
        self.target = target
        self.expected = expected


class CyclicGraphError(ValidationError):
    """Raised when the connection graph is not acyclic.

    Attributes:
        node: The vertex that was reached again while still in progress.
    """

    def __init__(self, node: str) -> None:
        super().__init__(f"The pipeline graph contains a cycle through '{node}'")
        self.node = node


# =============================================================================
# Synthesis errors
# =============================================================================


class InvalidInputKindError(CompilationError):
    """Raised when a processor's predecessor is neither a source nor a processor."""

    def __init__(self, processor: str, input_name: str | None, input_kind: str | None) -> None:
        if input_name is None:
            user_message = f"Processor '{processor}' has no input stream"
        else:
            user_message = (
                f"Invalid input stream kind to processor '{processor}': "
                f"'{input_name}' is a {input_kind}"
            )
        super().__init__(user_message)
        self.processor = processor
        self.input_name = input_name
        self.input_kind = input_kind


class InvalidOutputKindError(CompilationError):
    """Raised when a processor's successor is neither a processor nor a sink."""

    def __init__(self, processor: str, output_name: str, output_kind: str | None) -> None:
        super().__init__(
            f"Invalid output stream kind from processor '{processor}': "
            f"'{output_name}' is a {output_kind}"
        )
        self.processor = processor
        self.output_name = output_name
        self.output_kind = output_kind


class UnmappedTopicError(ConfigurationError):
    """Raised when a source or sink has no non-empty topic mapping.

    Attributes:
        node_name: Source or sink whose topic could not be resolved.
        mapping: Name of the mapping consulted ("source_topics" or "sink_topics").
        available: Names that do have a mapping entry.

    Example:
        >>> raise UnmappedTopicError("orders", "source_topics", ["payments"])
        # User sees: "No topic mapped for 'orders'. Mapped: payments
        #            (field 'source_topics.orders')"
    """

    def __init__(self, node_name: str, mapping: str, available: Iterable[str]) -> None:
        self.available = sorted(available)
        available_str = ", ".join(self.available) if self.available else "none"
        super().__init__(
            f"No topic mapped for '{node_name}'. Mapped: {available_str}",
            field_path=f"{mapping}.{node_name}",
        )
        self.node_name = node_name
        self.mapping = mapping
