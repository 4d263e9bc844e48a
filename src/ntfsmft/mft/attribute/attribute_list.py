"""$ATTRIBUTE_LIST (0x20).

Lists every attribute of a file together with the MFT record that holds
it. Entries are variable-sized (named attributes carry their name), so
the list is walked by record length until its content is exhausted.
"""

import io
import struct
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from ntfsmft.core.errors import InvalidRecordLengthError
from ntfsmft.mft.reference import MftReference
from ntfsmft.mft.utils import read_exact, read_struct, read_utf16_name

# type, record_length, name_length, name_offset, lowest_vcn, segment_reference, reserved
_ENTRY = struct.Struct("<IHBBQQH")


@dataclass(frozen=True)
class AttributeListEntry:
    attribute_type: int
    record_length: int
    name_length: int
    name_offset: int
    lowest_vcn: int
    segment_reference: MftReference
    reserved: int
    name: str

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "AttributeListEntry":
        start_offset = stream.tell()
        (
            attribute_type,
            record_length,
            name_length,
            name_offset,
            lowest_vcn,
            segment_reference,
            reserved,
        ) = read_struct(stream, _ENTRY)

        name = ""
        if name_length > 0:
            stream.seek(start_offset + name_offset)
            name = read_utf16_name(stream, name_length)

        return cls(
            attribute_type=attribute_type,
            record_length=record_length,
            name_length=name_length,
            name_offset=name_offset,
            lowest_vcn=lowest_vcn,
            segment_reference=MftReference.from_int(segment_reference),
            reserved=reserved,
            name=name,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "attribute_type": self.attribute_type,
            "record_length": self.record_length,
            "name_length": self.name_length,
            "name_offset": self.name_offset,
            "lowest_vcn": self.lowest_vcn,
            "segment_reference": self.segment_reference.to_dict(),
            "reserved": self.reserved,
            "name": self.name,
        }


@dataclass(frozen=True)
class AttributeListAttr:
    entries: list[AttributeListEntry] = field(default_factory=list)

    @classmethod
    def from_stream(cls, stream: BinaryIO, data_size: int) -> "AttributeListAttr":
        """Read ``data_size`` bytes of list content and decode its entries.

        Raises:
            InvalidRecordLengthError: An entry declares a zero record length
        """
        content = io.BytesIO(read_exact(stream, data_size))

        entries: list[AttributeListEntry] = []
        offset = 0
        while offset < data_size:
            content.seek(offset)
            entry = AttributeListEntry.from_stream(content)
            if entry.record_length == 0:
                raise InvalidRecordLengthError(
                    "Attribute list entry has a zero record length", offset=offset
                )
            entries.append(entry)
            offset += entry.record_length

        return cls(entries=entries)

    def to_dict(self) -> dict[str, Any]:
        return {"entries": [entry.to_dict() for entry in self.entries]}
