"""
Exceptions raised by the cleaning pipeline.

Hierarchy:
    PipelineError
    ├── MalformedRecordError   (missing key field or required column)
    └── AmbiguousStatusError   (country with both statuses, "raise" policy only)

Missing values are the pipeline's normal input and never raise.
"""

from typing import Any


class PipelineError(Exception):
    """
    Base exception for pipeline failures.

    Attributes:
        message: Human-readable error message
        context: Structured details for logging
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.context:
            return self.message
        context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} | {context_str}"

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class MalformedRecordError(PipelineError):
    """Raised when records lack a key field (country or year) or a required column."""

    def __init__(
        self,
        message: str,
        row_ids: list[int] | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.row_ids = list(row_ids or [])
        context = dict(context or {})
        if self.row_ids:
            context["row_ids"] = self.row_ids[:20]
            context["malformed_count"] = len(self.row_ids)
        super().__init__(message, context)


class AmbiguousStatusError(PipelineError):
    """Raised when a country carries both Developing and Developed statuses."""

    def __init__(self, countries: list[str]):
        self.countries = sorted(countries)
        super().__init__(
            f"{len(self.countries)} countries have conflicting statuses",
            {"countries": self.countries[:20]},
        )
