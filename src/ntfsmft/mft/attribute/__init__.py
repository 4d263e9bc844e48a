"""MFT attributes: header, content decoders and dispatch."""

from dataclasses import dataclass
from typing import Any, BinaryIO

from ntfsmft.mft.attribute.attribute_list import AttributeListAttr, AttributeListEntry
from ntfsmft.mft.attribute.data_run import DataRun, RunType, decode_data_runs
from ntfsmft.mft.attribute.file_name import FileNameAttr
from ntfsmft.mft.attribute.flags import (
    AttributeDataFlags,
    FileAttributeFlags,
    FileNamespace,
    IndexCollationRules,
    IndexEntryFlags,
    MftAttributeType,
    flag_names,
)
from ntfsmft.mft.attribute.header import MftAttributeHeader, NonResidentHeader, ResidentHeader
from ntfsmft.mft.attribute.index_root import IndexEntryHeader, IndexNodeHeader, IndexRootAttr
from ntfsmft.mft.attribute.non_resident import NonResidentAttr
from ntfsmft.mft.attribute.object_id import ObjectIdAttr
from ntfsmft.mft.attribute.raw import DataAttr, RawAttribute
from ntfsmft.mft.attribute.standard_info import StandardInfoAttr

MftAttributeContent = (
    StandardInfoAttr
    | AttributeListAttr
    | FileNameAttr
    | ObjectIdAttr
    | DataAttr
    | IndexRootAttr
    | NonResidentAttr
    | RawAttribute
    | None
)

__all__ = [
    "AttributeDataFlags",
    "AttributeListAttr",
    "AttributeListEntry",
    "DataAttr",
    "DataRun",
    "FileAttributeFlags",
    "FileNameAttr",
    "FileNamespace",
    "IndexCollationRules",
    "IndexEntryFlags",
    "IndexEntryHeader",
    "IndexNodeHeader",
    "IndexRootAttr",
    "MftAttribute",
    "MftAttributeContent",
    "MftAttributeHeader",
    "MftAttributeType",
    "NonResidentAttr",
    "NonResidentHeader",
    "ObjectIdAttr",
    "RawAttribute",
    "ResidentHeader",
    "RunType",
    "StandardInfoAttr",
    "decode_content",
    "decode_data_runs",
    "decode_resident_content",
]


def decode_resident_content(
    stream: BinaryIO, header: MftAttributeHeader, resident: ResidentHeader
) -> MftAttributeContent:
    """Decode resident attribute content according to its type.

    Args:
        stream: Entry buffer stream
        header: Decoded attribute header
        resident: Its resident sub-header

    Returns:
        The typed content, or a RawAttribute for types without a decoder
    """
    stream.seek(header.start_offset + resident.data_offset)
    type_code = header.type_code

    if type_code == MftAttributeType.STANDARD_INFORMATION:
        return StandardInfoAttr.from_stream(stream, resident.data_size)
    if type_code == MftAttributeType.ATTRIBUTE_LIST:
        return AttributeListAttr.from_stream(stream, resident.data_size)
    if type_code == MftAttributeType.FILE_NAME:
        return FileNameAttr.from_stream(stream)
    if type_code == MftAttributeType.OBJECT_ID:
        return ObjectIdAttr.from_stream(stream, resident.data_size)
    if type_code == MftAttributeType.DATA:
        return DataAttr.from_stream(stream, resident.data_size)
    if type_code == MftAttributeType.INDEX_ROOT:
        return IndexRootAttr.from_stream(stream)
    return RawAttribute.from_stream(stream, type_code, resident.data_size)


def decode_content(stream: BinaryIO, header: MftAttributeHeader) -> MftAttributeContent:
    """Decode the content of any attribute, resident or not."""
    sub_header = header.residential_header
    if isinstance(sub_header, ResidentHeader):
        return decode_resident_content(stream, header, sub_header)
    return NonResidentAttr.from_stream(stream, header, sub_header)


@dataclass(frozen=True)
class MftAttribute:
    header: MftAttributeHeader
    data: MftAttributeContent

    def to_dict(self) -> dict[str, Any]:
        header = self.header
        header_dict: dict[str, Any] = {
            "type_code": header.type_code.name,
            "record_length": header.record_length,
            "form_code": header.form_code,
            "residential_header": header.residential_header.to_dict(),
            "name_size": header.name_size,
            "name_offset": header.name_offset,
            "data_flags": flag_names(header.data_flags),
            "instance": header.instance,
            "name": header.name,
        }
        return {
            "header": header_dict,
            "data": self.data.to_dict() if self.data is not None else None,
        }
