"""$OBJECT_ID (0x40)."""

from dataclasses import dataclass
from typing import Any, BinaryIO
from uuid import UUID

from ntfsmft.mft.utils import read_guid

OBJECT_ID_ONLY_SIZE = 16


@dataclass(frozen=True)
class ObjectIdAttr:
    """Link-tracking identifiers; the birth ids are absent in the 16-byte form."""

    object_id: UUID
    birth_volume_id: UUID | None = None
    birth_object_id: UUID | None = None
    domain_id: UUID | None = None

    @classmethod
    def from_stream(cls, stream: BinaryIO, data_size: int) -> "ObjectIdAttr":
        object_id = read_guid(stream)
        if data_size == OBJECT_ID_ONLY_SIZE:
            return cls(object_id=object_id)
        return cls(
            object_id=object_id,
            birth_volume_id=read_guid(stream),
            birth_object_id=read_guid(stream),
            domain_id=read_guid(stream),
        )

    def to_dict(self) -> dict[str, Any]:
        def fmt(value: UUID | None) -> str | None:
            return str(value).upper() if value else None

        return {
            "object_id": fmt(self.object_id),
            "birth_volume_id": fmt(self.birth_volume_id),
            "birth_object_id": fmt(self.birth_object_id),
            "domain_id": fmt(self.domain_id),
        }
