"""
errors.py

Structured error system for propath.

Design principles:
- Every error names the property (or path) that failed
- Explain what went wrong in plain language
- Offer close matches for mistyped property names
- Keep the original cause reachable for programmatic handling
"""

from typing import Any, Iterator, List, Optional, Sequence, Tuple


def _type_name(owner: Any) -> str:
    if owner is None:
        return "<unknown>"
    if isinstance(owner, type):
        return owner.__qualname__
    return type(owner).__qualname__


class PropertyAccessError(Exception):
    """
    Base class for all propath errors.

    Errors are designed to be rendered by a caller-owned presentation layer:
    - A short single-line message with an error code
    - An optional explanation
    - Optional hints for fixing the problem
    """

    def __init__(
        self,
        message: str,
        *,
        explanation: str = "",
        suggestions: Optional[List[str]] = None,
        error_code: str = "P000",
    ):
        self.message = message
        self.explanation = explanation
        self.suggestions = suggestions or []
        self.error_code = error_code
        super().__init__(self.format_short())

    def format_short(self) -> str:
        """Format as single-line error message."""
        return f"[{self.error_code}] {self.message}"

    def format_full(self) -> str:
        """Format as multi-line human-readable error."""
        lines = [f"Error {self.error_code}", "", f"  {self.message}"]

        if self.explanation:
            lines.append("")
            lines.append(f"  {self.explanation}")

        if self.suggestions:
            lines.append("")
            if len(self.suggestions) == 1:
                lines.append(f"  Suggestion: {self.suggestions[0]}")
            else:
                lines.append("  Suggestions:")
                for suggestion in self.suggestions:
                    lines.append(f"    - {suggestion}")

        return "\n".join(lines)


# === Path Errors (P1xx) ===

class MalformedPathError(PropertyAccessError):
    """Raised when a property path cannot be parsed."""

    def __init__(self, path: str, position: Optional[int], reason: str):
        self.path = path
        self.position = position
        self.reason = reason

        where = f" at position {position}" if position is not None else ""
        super().__init__(
            message=f"Malformed property path '{path}'{where}: {reason}",
            explanation="Paths are dot-separated names with optional [key] "
                        "or ['quoted key'] segments.",
            error_code="P101",
        )


# === Property Errors (P2xx) ===

class InvalidPropertyError(PropertyAccessError):
    """Raised when a property path does not resolve against the target."""

    def __init__(
        self,
        property_name: str,
        owner: Any,
        message: str,
        *,
        explanation: str = "",
        suggestions: Optional[List[str]] = None,
        error_code: str = "P200",
    ):
        self.property_name = property_name
        self.owner = owner
        super().__init__(
            message=f"Invalid property '{property_name}' of {_type_name(owner)}: {message}",
            explanation=explanation,
            suggestions=suggestions,
            error_code=error_code,
        )


class NotReadablePropertyError(InvalidPropertyError):
    """Raised when a property has no read capability."""

    def __init__(self, property_name: str, owner: Any, message: str = ""):
        super().__init__(
            property_name,
            owner,
            message or "property is not readable or has an invalid getter",
            error_code="P201",
        )


class NotWritablePropertyError(InvalidPropertyError):
    """
    Raised when a property has no write capability or does not exist.

    ``possible_matches`` holds close property names on the owning type; it is
    ``None`` when no lookup was possible at all (e.g. the path never parsed).
    """

    def __init__(
        self,
        property_name: str,
        owner: Any,
        message: str = "",
        possible_matches: Optional[Sequence[str]] = None,
    ):
        self.possible_matches: Optional[Tuple[str, ...]] = (
            tuple(possible_matches) if possible_matches is not None else None
        )

        hints = []
        if self.possible_matches:
            if len(self.possible_matches) == 1:
                hints.append(f"Did you mean '{self.possible_matches[0]}'?")
            else:
                quoted = ", ".join(f"'{m}'" for m in self.possible_matches)
                hints.append(f"Did you mean one of: {quoted}?")

        super().__init__(
            property_name,
            owner,
            message or "property is not writable or has an invalid setter",
            suggestions=hints,
            error_code="P202",
        )


class NullValueInNestedPathError(InvalidPropertyError):
    """Raised when navigation hits an absent intermediate value."""

    def __init__(
        self,
        property_name: str,
        owner: Any,
        message: str = "",
        *,
        error_code: str = "P203",
    ):
        super().__init__(
            property_name,
            owner,
            message or "value of nested property is None",
            error_code=error_code,
        )


class AutoGrowFailedError(NullValueInNestedPathError):
    """Raised when an absent intermediate value cannot be created on write."""

    def __init__(self, property_name: str, owner: Any, reason: str):
        self.reason = reason
        super().__init__(
            property_name,
            owner,
            f"could not auto-grow nested path: {reason}",
            error_code="P204",
        )


# === Value Errors (P3xx) ===

class TypeMismatchError(PropertyAccessError):
    """Raised when a value cannot be converted to the declared type."""

    def __init__(
        self,
        value: Any,
        target_type: Any,
        cause: Optional[BaseException] = None,
        property_name: Optional[str] = None,
    ):
        self.value = value
        self.target_type = target_type
        self.cause = cause
        self.property_name = property_name

        target = getattr(target_type, "__name__", None) or str(target_type)
        prefix = f"Property '{property_name}': c" if property_name else "C"
        message = f"{prefix}annot convert {value!r} ({type(value).__name__}) to {target}"
        if cause is not None:
            message += f": {cause}"

        super().__init__(
            message=message,
            suggestions=[f"Provide a value convertible to {target}"],
            error_code="P301",
        )

    def with_property(self, property_name: str) -> "TypeMismatchError":
        """Return a copy bound to the property that rejected the value."""
        err = TypeMismatchError(self.value, self.target_type, self.cause, property_name)
        err.__cause__ = self.cause
        return err


class PropertyInvocationError(PropertyAccessError):
    """Raised when a user-defined getter or setter raises."""

    def __init__(self, property_name: str, value: Any, cause: BaseException):
        self.property_name = property_name
        self.value = value
        self.cause = cause
        super().__init__(
            message=f"Property '{property_name}' threw {type(cause).__name__}: {cause}",
            error_code="P302",
        )


class ConstructionError(PropertyAccessError):
    """Raised when a type cannot be instantiated without arguments."""

    def __init__(self, target_type: Any, cause: Optional[BaseException] = None):
        self.target_type = target_type
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            message=f"Cannot construct {_type_name(target_type)} without arguments{detail}",
            error_code="P303",
        )


# === Batch Errors (P4xx) ===

class BatchUpdateError(PropertyAccessError):
    """
    Raised after a batch update when one or more assignments failed.

    Successful assignments stay applied; the outcome lists every result in
    the order it was applied.
    """

    def __init__(self, outcome: Any):
        self.outcome = outcome
        self.failures = list(outcome.failures)
        self.failure_count = len(self.failures)

        details = [
            f"{failure.path}: {failure.error.format_short()}"
            for failure in self.failures
        ]
        super().__init__(
            message=f"Failed properties ({self.failure_count}): {'; '.join(details)}",
            error_code="P401",
        )

    def error_for(self, path: str) -> Optional[PropertyAccessError]:
        """Return the error recorded for ``path``, if any."""
        for failure in self.failures:
            if failure.path == path:
                return failure.error
        return None

    def __iter__(self) -> Iterator:
        return iter(self.failures)


# === Utility Functions ===

def format_error_for_user(error: BaseException) -> str:
    """
    Format any exception for user display.

    For PropertyAccessError instances, returns the human-friendly format.
    For other exceptions, returns a generic message without stack trace.
    """
    if isinstance(error, PropertyAccessError):
        return error.format_full()

    return (
        "Error P000\n"
        "\n"
        "  An unexpected error occurred.\n"
        "\n"
        "  If this persists, please report it as a bug."
    )
