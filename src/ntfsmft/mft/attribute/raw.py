"""Resident $DATA and undecoded resident attributes."""

from dataclasses import dataclass
from typing import Any, BinaryIO

from ntfsmft.mft.attribute.flags import MftAttributeType
from ntfsmft.mft.utils import read_exact, to_hex_string


@dataclass(frozen=True)
class DataAttr:
    """Resident $DATA (0x80) stream content."""

    data: bytes

    @classmethod
    def from_stream(cls, stream: BinaryIO, data_size: int) -> "DataAttr":
        return cls(read_exact(stream, data_size))

    def to_dict(self) -> dict[str, Any]:
        return {"data": to_hex_string(self.data)}


@dataclass(frozen=True)
class RawAttribute:
    """Placeholder for resident attributes without a dedicated decoder."""

    attribute_type: MftAttributeType
    data: bytes

    @classmethod
    def from_stream(
        cls, stream: BinaryIO, attribute_type: MftAttributeType, data_size: int
    ) -> "RawAttribute":
        return cls(attribute_type, read_exact(stream, data_size))

    def to_dict(self) -> dict[str, Any]:
        return {"attribute_type": self.attribute_type.name, "data": to_hex_string(self.data)}
