"""Flat entry row used for CSV output."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal


class FlatMftEntry(BaseModel):
    """One MFT entry flattened to a single row.

    Serialized with PascalCase column names (``EntryId``, ``FullPath``...).
    Standard information and file name columns are empty for entries
    without the corresponding attribute.
    """

    model_config = ConfigDict(extra="forbid", alias_generator=to_pascal, populate_by_name=True)

    signature: str = Field(..., description="FILE, BAAD or empty for zeroed entries")

    entry_id: int = Field(..., ge=0)
    sequence: int = Field(..., ge=0)

    base_entry_id: int = Field(..., ge=0)
    base_entry_sequence: int = Field(..., ge=0)

    hard_link_count: int = Field(..., ge=0)
    flags: str = Field(..., description="Entry flags as 'A | B'")

    used_entry_size: int = Field(..., ge=0)
    total_entry_size: int = Field(..., ge=0)

    file_size: int = Field(
        default=0,
        ge=0,
        description="Size from the first $DATA attribute, 0 when there is none",
    )

    is_a_directory: bool
    is_deleted: bool = Field(..., description="ALLOCATED bit is clear")
    has_alternate_data_streams: bool

    standard_info_flags: str | None = None
    standard_info_last_modified: datetime | None = None
    standard_info_last_access: datetime | None = None
    standard_info_created: datetime | None = None

    file_name_flags: str | None = None
    file_name_last_modified: datetime | None = None
    file_name_last_access: datetime | None = None
    file_name_created: datetime | None = None

    full_path: str = ""

    @classmethod
    def csv_columns(cls) -> list[str]:
        return [field.alias or name for name, field in cls.model_fields.items()]
