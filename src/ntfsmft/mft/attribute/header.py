"""Attribute record header and its resident / non-resident sub-headers."""

import struct
from dataclasses import dataclass
from typing import Any, BinaryIO

from ntfsmft.core.errors import (
    InvalidRecordLengthError,
    UnhandledResidentFlagError,
    UnknownAttributeTypeError,
)
from ntfsmft.mft.attribute.flags import AttributeDataFlags, MftAttributeType, truncate_flags
from ntfsmft.mft.utils import read_struct, read_u32, read_u64, read_utf16_name

END_OF_ATTRIBUTES = 0xFFFFFFFF

# type, record_length, form, name_size, name_offset, data_flags, instance
_COMMON = struct.Struct("<IBBHHH")
_RESIDENT = struct.Struct("<IHBB")
_NON_RESIDENT = struct.Struct("<QQHHIQQQ")

RESIDENT_HEADER_SIZE = 4 + _COMMON.size + _RESIDENT.size
NON_RESIDENT_HEADER_SIZE = 4 + _COMMON.size + _NON_RESIDENT.size


@dataclass(frozen=True)
class ResidentHeader:
    data_size: int
    data_offset: int
    index_flag: int
    padding: int

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "ResidentHeader":
        return cls(*read_struct(stream, _RESIDENT))

    def to_dict(self) -> dict[str, Any]:
        return {"index_flag": self.index_flag, "padding": self.padding}


@dataclass(frozen=True)
class NonResidentHeader:
    vnc_first: int
    vnc_last: int
    datarun_offset: int
    unit_compression_size: int
    padding: int
    allocated_length: int
    file_size: int
    valid_data_length: int
    total_allocated: int | None = None

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "NonResidentHeader":
        fields = read_struct(stream, _NON_RESIDENT)
        total_allocated = read_u64(stream) if fields[3] > 0 else None
        return cls(*fields, total_allocated=total_allocated)

    def to_dict(self) -> dict[str, Any]:
        return {
            "vnc_first": self.vnc_first,
            "vnc_last": self.vnc_last,
            "unit_compression_size": self.unit_compression_size,
            "allocated_length": self.allocated_length,
            "file_size": self.file_size,
            "valid_data_length": self.valid_data_length,
            "total_allocated": self.total_allocated,
        }


@dataclass(frozen=True)
class MftAttributeHeader:
    """Common attribute record header.

    Attributes:
        type_code: Attribute type
        record_length: Size of the whole attribute record in bytes
        form_code: 0 for resident, 1 for non-resident
        residential_header: Form-specific sub-header
        name_size: Name length in UTF-16 code units
        name_offset: Offset of the name from the record start, None if unnamed
        data_flags: Compression / encryption / sparse bits
        instance: Attribute id, unique within the entry
        name: Attribute (stream) name, empty if unnamed
        start_offset: Offset of the record inside the entry buffer
    """

    type_code: MftAttributeType
    record_length: int
    form_code: int
    residential_header: ResidentHeader | NonResidentHeader
    name_size: int
    name_offset: int | None
    data_flags: AttributeDataFlags
    instance: int
    name: str
    start_offset: int

    @property
    def is_resident(self) -> bool:
        return self.form_code == 0

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "MftAttributeHeader | None":
        """Decode an attribute header at the current stream position.

        Args:
            stream: Entry buffer stream positioned at the attribute record

        Returns:
            The decoded header, or None at the end-of-attributes marker

        Raises:
            UnknownAttributeTypeError: Type code is not a known attribute type
            UnhandledResidentFlagError: Form code is neither 0 nor 1
            InvalidRecordLengthError: Record length is shorter than the header
        """
        start_offset = stream.tell()

        type_value = read_u32(stream)
        if type_value == END_OF_ATTRIBUTES:
            return None

        try:
            type_code = MftAttributeType(type_value)
        except ValueError as e:
            raise UnknownAttributeTypeError(type_value) from e

        record_length, form_code, name_size, raw_name_offset, data_flags, instance = read_struct(
            stream, _COMMON
        )

        if form_code == 0:
            residential_header: ResidentHeader | NonResidentHeader = ResidentHeader.from_stream(stream)
            minimum = RESIDENT_HEADER_SIZE
        elif form_code == 1:
            residential_header = NonResidentHeader.from_stream(stream)
            minimum = NON_RESIDENT_HEADER_SIZE
        else:
            raise UnhandledResidentFlagError(form_code, stream.tell())

        if record_length < minimum:
            raise InvalidRecordLengthError(
                f"Attribute record length {record_length} is smaller than its header ({minimum})",
                offset=start_offset,
            )

        name_offset = raw_name_offset if name_size > 0 else None
        name = ""
        if name_offset is not None:
            stream.seek(start_offset + name_offset)
            name = read_utf16_name(stream, name_size)

        return cls(
            type_code=type_code,
            record_length=record_length,
            form_code=form_code,
            residential_header=residential_header,
            name_size=name_size,
            name_offset=name_offset,
            data_flags=truncate_flags(AttributeDataFlags, data_flags),
            instance=instance,
            name=name,
            start_offset=start_offset,
        )
