"""Run metrics models for ntfsmft."""

from uuid import UUID

from pydantic import BaseModel, Field


class StepMetrics(BaseModel):
    """Metrics for one command invocation.

    Emitted to stderr at the end of a dump.
    """

    run_id: UUID = Field(
        ...,
        description="Correlation ID for this run",
    )

    step_name: str = Field(
        ...,
        description="Step identifier (e.g., 'dump', 'entry')",
    )

    duration_ms: int = Field(
        ...,
        ge=0,
        description="Execution time in milliseconds",
    )

    entries_processed: int = Field(
        default=0,
        ge=0,
        description="Number of entries read",
    )

    entries_output: int = Field(
        default=0,
        ge=0,
        description="Number of entries written",
    )

    bytes_read: int = Field(
        default=0,
        ge=0,
        description="Bytes read from the input",
    )

    streams_extracted: int = Field(
        default=0,
        ge=0,
        description="Resident data streams written with --extract-resident-streams",
    )

    errors: int = Field(
        default=0,
        ge=0,
        description="Entries that failed to decode",
    )

    cache_hits: int = Field(
        default=0,
        ge=0,
        description="Path cache hits",
    )

    cache_misses: int = Field(
        default=0,
        ge=0,
        description="Path cache misses",
    )

    model_config = {"extra": "forbid"}
