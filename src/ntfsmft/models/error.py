"""Structured error model for ntfsmft."""

from typing import Any

from pydantic import BaseModel, Field


class StructuredError(BaseModel):
    """Structured error response format.

    Every error surfaced by the CLI follows this schema so batch consumers
    can tell which entry or attribute failed and why.
    """

    code: str = Field(
        ...,
        pattern=r"^[A-Z][A-Z0-9_]*$",
        description="Error code (e.g., INVALID_ENTRY_SIGNATURE)",
        examples=[
            "INVALID_ENTRY_SIGNATURE",
            "UNKNOWN_ATTRIBUTE_TYPE",
            "FAILED_TO_DECODE_DATA_RUNS",
            "FAILED_TO_APPLY_FIXUP",
            "IO_ERROR",
        ],
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
    )

    remediation: str = Field(
        ...,
        description="Suggested fix or next step",
    )

    retryable: bool = Field(
        ...,
        description="Whether retry may succeed",
    )

    context: dict[str, Any] | None = Field(
        default=None,
        description="Additional context (entry number, offset, bytes, etc.)",
    )

    model_config = {"extra": "forbid"}


class ErrorCode:
    """Standard error codes for ntfsmft."""

    INVALID_ENTRY_SIGNATURE = "INVALID_ENTRY_SIGNATURE"
    UNKNOWN_ATTRIBUTE_TYPE = "UNKNOWN_ATTRIBUTE_TYPE"
    UNHANDLED_RESIDENT_FLAG = "UNHANDLED_RESIDENT_FLAG"
    UNKNOWN_NAMESPACE = "UNKNOWN_NAMESPACE"
    UNKNOWN_COLLATION_TYPE = "UNKNOWN_COLLATION_TYPE"
    FAILED_TO_DECODE_DATA_RUNS = "FAILED_TO_DECODE_DATA_RUNS"
    FAILED_TO_APPLY_FIXUP = "FAILED_TO_APPLY_FIXUP"
    INVALID_FILENAME = "INVALID_FILENAME"
    UNEXPECTED_END_OF_DATA = "UNEXPECTED_END_OF_DATA"
    INVALID_RECORD_LENGTH = "INVALID_RECORD_LENGTH"
    ENTRY_SIZE_NOT_FOUND = "ENTRY_SIZE_NOT_FOUND"
    CONFIG_ERROR = "CONFIG_ERROR"
    IO_ERROR = "IO_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
