"""Unified engine exception taxonomy.

Every domain exception inherits from ``SafeZoneError`` and carries
structured context fields so the calling sync job can decide whether to
abort, alert, or skip a city.

Taxonomy categories
-------------------
- ``ValidationError``: bad input values or malformed geometry, never retryable.
- ``ConfigurationError``: missing or invalid configuration (unknown city,
  no land geometry registered, out-of-range settings). Fatal for the caller.
- ``PermanentError``: unrecoverable computation failure (e.g. the
  clipping library rejected a geometry).

Degenerate inputs (empty land, no restricted places, everything filtered
out) are *results*, not errors, and never raise.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for job history and logging.
"""

from __future__ import annotations


class SafeZoneError(Exception):
    """Base exception for all engine-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Engine stage where the error occurred
            (e.g. ``"land_mask"``, ``"polygon_set"``).
        code: Machine-readable error code (e.g. ``"LAND_GEOMETRY_NOT_FOUND"``).
        retryable: Whether the caller may retry the operation.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ConfigurationError):
            return "configuration"
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, PermanentError):
            return "permanent"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(SafeZoneError):
    """Input or domain-model validation failure. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class ConfigurationError(SafeZoneError):
    """Missing or invalid configuration. Fatal, surfaced to the caller."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PermanentError(SafeZoneError):
    """Unrecoverable computation failure. Not retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Geometry boundary
# ---------------------------------------------------------------------------


class GeometryOperationError(PermanentError):
    """A polygon set operation failed inside the clipping library.

    Library-specific exceptions are caught at the ``PolygonSet`` boundary
    and re-raised as this single kind.

    Attributes:
        operation: Name of the failed operation (``"union"``, ``"difference"``).
    """

    default_stage = "polygon_set"
    default_code = "GEOMETRY_OPERATION_FAILED"

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")
