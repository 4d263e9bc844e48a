"""Tests for attribute headers and content decoders."""

import io
import struct
from datetime import UTC, datetime
from uuid import UUID

import pytest

from conftest import align8, file_name_content, resident_attribute
from ntfsmft.core.errors import (
    InvalidFilenameError,
    UnexpectedEndOfDataError,
    UnhandledResidentFlagError,
    UnknownCollationTypeError,
    UnknownNamespaceError,
)
from ntfsmft.mft.attribute import (
    AttributeListAttr,
    DataAttr,
    DataRun,
    FileAttributeFlags,
    FileNameAttr,
    FileNamespace,
    IndexCollationRules,
    IndexEntryFlags,
    IndexRootAttr,
    MftAttributeHeader,
    MftAttributeType,
    NonResidentAttr,
    NonResidentHeader,
    ObjectIdAttr,
    RawAttribute,
    ResidentHeader,
    StandardInfoAttr,
    decode_content,
)
from ntfsmft.mft.attribute.flags import flag_names, truncate_flags
from ntfsmft.mft.reference import MftReference
from ntfsmft.mft.utils import filetime_to_datetime, read_utf16_name

RESIDENT_HEADER = bytes.fromhex("100000006000000000000000000000004800000018000000")

STANDARD_INFO = bytes.fromhex(
    "2f6db66f0c97ce01"
    "56cd1a7573b5ce01"
    "56cd1a7573b5ce01"
    "56cd1a7573b5ce01"
    "20000000"
    "000000000000000000000000"
    "00000000"
    "b0050000"
    "0000000000000000"
    "6858a00a02000000"
)

FILE_NAME = bytes.fromhex(
    "0500000000000500"
    "d52d4858435fce01"
    "d52d4858435fce01"
    "d52d4858435fce01"
    "d52d4858435fce01"
    "0000000400000000"
    "0000000400000000"
    "0600000000000000"
    "0803"
    "24004c006f006700460069006c006500"
)

NON_RESIDENT_DATA = bytes.fromhex(
    "80000000500000000100400000000600"
    "0000000000000000"
    "bf1e010000000000"
    "4000000000000000"
    "0000ec1100000000"
    "0000ec1100000000"
    "0000ec1100000000"
    "3320c80000000c32a056e3e62400ffff"
)

ATTRIBUTE_LIST = bytes.fromhex(
    "100000002000001A000000000000000023270000000001000000120780F8FFFF"
    "300000002000001A000000000000000023270000000001000300000069006E00"
    "300000002000001A00000000000000000FCF01000000020000008A0CA0F8FFFF"
    "900000002800041A00000000000000000FCF0100000002000100240049003300"
    "300079007300ADEFA00000002800041A00000000000000000FCF010000000200"
    "02002400490033003000000000007856B00000002800041A0000000000000000"
    "0FCF01000000020003002400490033003000000000006500000100003000091A"
    "00000000000000002327000000000100080024005400580046005F0044004100"
    "5400410000000000"
)


def decode(record: bytes):
    stream = io.BytesIO(record)
    header = MftAttributeHeader.from_stream(stream)
    return header, decode_content(stream, header)


def test_resident_header():
    header = MftAttributeHeader.from_stream(io.BytesIO(RESIDENT_HEADER))

    assert header.type_code == MftAttributeType.STANDARD_INFORMATION
    assert header.record_length == 96
    assert header.form_code == 0
    assert header.is_resident
    assert header.name_offset is None
    assert header.name == ""
    assert header.residential_header == ResidentHeader(
        data_size=72, data_offset=24, index_flag=0, padding=0
    )


def test_header_decoding_is_deterministic():
    first = MftAttributeHeader.from_stream(io.BytesIO(RESIDENT_HEADER))
    second = MftAttributeHeader.from_stream(io.BytesIO(RESIDENT_HEADER))
    assert first == second

    record = resident_attribute(MftAttributeType.FILE_NAME, file_name_content("hello.txt"))
    assert decode(record) == decode(record)


def test_end_marker_returns_none():
    assert MftAttributeHeader.from_stream(io.BytesIO(b"\xff\xff\xff\xff")) is None


def test_named_attribute_header():
    header, content = decode(resident_attribute(MftAttributeType.DATA, b"hidden", name="ads"))

    assert header.name == "ads"
    assert header.name_size == 3
    assert header.name_offset == 24
    assert content == DataAttr(b"hidden")


def test_unhandled_form_code():
    record = bytearray(RESIDENT_HEADER)
    record[8] = 2

    with pytest.raises(UnhandledResidentFlagError) as exc_info:
        MftAttributeHeader.from_stream(io.BytesIO(bytes(record)))

    assert exc_info.value.flag == 2


def test_truncated_header():
    with pytest.raises(UnexpectedEndOfDataError):
        MftAttributeHeader.from_stream(io.BytesIO(RESIDENT_HEADER[:12]))


def test_standard_information():
    header, content = decode(RESIDENT_HEADER + STANDARD_INFO)

    assert isinstance(content, StandardInfoAttr)
    assert content.created == datetime(2013, 8, 12, 3, 31, 30, 995127, tzinfo=UTC)
    assert content.file_flags == FileAttributeFlags.ARCHIVE
    assert content.security_id == 1456
    assert content.usn == 8768215144
    assert content.to_dict()["file_flags"] == "ARCHIVE"
    assert content.to_dict()["created"] == "2013-08-12T03:31:30.995127+00:00"


def test_standard_information_short_form():
    content = StandardInfoAttr.from_stream(io.BytesIO(STANDARD_INFO[:48]), data_size=48)

    assert content.file_flags == FileAttributeFlags.ARCHIVE
    assert content.security_id == 0
    assert content.usn == 0


def test_file_name():
    content = FileNameAttr.from_stream(io.BytesIO(FILE_NAME))

    assert content.parent == MftReference(5, 5)
    assert content.created == datetime(2013, 6, 2, 3, 43, 28, 889595, tzinfo=UTC)
    assert content.logical_size == 67108864
    assert content.physical_size == 67108864
    assert content.flags == FileAttributeFlags.HIDDEN | FileAttributeFlags.SYSTEM
    assert content.namespace == FileNamespace.WIN32_AND_DOS
    assert content.is_win32
    assert content.name == "$LogFile"
    assert content.to_dict()["flags"] == "HIDDEN | SYSTEM"


def test_file_name_unknown_namespace():
    record = bytearray(FILE_NAME)
    record[65] = 9

    with pytest.raises(UnknownNamespaceError) as exc_info:
        FileNameAttr.from_stream(io.BytesIO(bytes(record)))

    assert exc_info.value.namespace == 9


def test_invalid_utf16_name():
    with pytest.raises(InvalidFilenameError):
        read_utf16_name(io.BytesIO(b"\x00\xd8\x41\x00"), 2)


def test_attribute_list():
    content = AttributeListAttr.from_stream(io.BytesIO(ATTRIBUTE_LIST), len(ATTRIBUTE_LIST))

    assert len(content.entries) == 7
    first = content.entries[0]
    assert first.attribute_type == 0x10
    assert first.record_length == 32
    assert first.name_offset == 26
    assert first.segment_reference == MftReference(10019, 1)
    assert content.entries[3].name == "$I30"
    assert content.entries[6].attribute_type == 0x100
    assert content.entries[6].name == "$TXF_DATA"


def test_object_id_only():
    object_id = UUID("3FCE8F1D-A2B2-11E3-9D6B-000C29B9AE9E")

    header, content = decode(resident_attribute(MftAttributeType.OBJECT_ID, object_id.bytes_le))

    assert content == ObjectIdAttr(object_id=object_id)
    assert content.to_dict()["object_id"] == "3FCE8F1D-A2B2-11E3-9D6B-000C29B9AE9E"
    assert content.to_dict()["birth_volume_id"] is None


def test_object_id_with_birth_ids():
    ids = [UUID(int=n) for n in (1, 2, 3, 4)]
    data = b"".join(value.bytes_le for value in ids)

    _, content = decode(resident_attribute(MftAttributeType.OBJECT_ID, data))

    assert content.object_id == ids[0]
    assert content.birth_volume_id == ids[1]
    assert content.birth_object_id == ids[2]
    assert content.domain_id == ids[3]


def _index_root(collation: int = 1) -> bytes:
    key = file_name_content("c.txt", parent=38)
    entry_length = align8(16 + len(key))
    entry = struct.pack("<QHHI", (2 << 48) | 40, entry_length, len(key), 0) + key
    entry = entry.ljust(entry_length, b"\x00")
    terminator = struct.pack("<QHHI", 0, 16, 0, IndexEntryFlags.END)
    node_length = 16 + len(entry) + len(terminator)

    root = struct.pack("<IIIB3s", MftAttributeType.FILE_NAME, collation, 4096, 1, b"\x00" * 3)
    node = struct.pack("<IIII", 16, node_length, node_length, 0)
    return root + node + entry + terminator


def test_index_root():
    _, content = decode(resident_attribute(MftAttributeType.INDEX_ROOT, _index_root(), name="$I30"))

    assert isinstance(content, IndexRootAttr)
    assert content.collation_rule == IndexCollationRules.FILENAME
    assert content.index_entry_size == 4096
    assert len(content.index_entries) == 1
    entry = content.index_entries[0]
    assert entry.mft_reference == MftReference(40, 2)
    assert entry.fname_info.name == "c.txt"
    assert entry.fname_info.parent.entry == 38


def test_index_root_unknown_collation():
    with pytest.raises(UnknownCollationTypeError) as exc_info:
        IndexRootAttr.from_stream(io.BytesIO(_index_root(collation=0x99)))

    assert exc_info.value.collation_type == 0x99


def test_unhandled_type_kept_raw():
    volume_name = "DATA".encode("utf-16-le")

    _, content = decode(resident_attribute(MftAttributeType.VOLUME_NAME, volume_name))

    assert content == RawAttribute(MftAttributeType.VOLUME_NAME, volume_name)
    assert content.to_dict() == {
        "attribute_type": "VOLUME_NAME",
        "data": "4400410054004100",
    }


def test_non_resident_data():
    header, content = decode(NON_RESIDENT_DATA)

    assert not header.is_resident
    assert header.record_length == 80
    assert header.instance == 6
    assert header.name_offset is None
    non_resident = header.residential_header
    assert isinstance(non_resident, NonResidentHeader)
    assert non_resident.vnc_last == 0x11EBF
    assert non_resident.datarun_offset == 64
    assert non_resident.allocated_length == 0x11EC0000
    assert non_resident.file_size == 0x11EC0000
    assert non_resident.total_allocated is None
    assert isinstance(content, NonResidentAttr)
    assert content.data_runs == [DataRun(0x0C0000, 0xC820), DataRun(0x30E6E3, 0x56A0)]


def test_filetime_conversion():
    assert filetime_to_datetime(0) is None
    assert filetime_to_datetime(0x7FFF_FFFF_FFFF_FFFF) is None
    assert filetime_to_datetime(0x01CE5F4358482DD5) == datetime(
        2013, 6, 2, 3, 43, 28, 889595, tzinfo=UTC
    )


def test_flag_helpers():
    assert truncate_flags(FileAttributeFlags, 0x10020) == FileAttributeFlags.ARCHIVE
    assert flag_names(FileAttributeFlags(0)) == ""
    assert flag_names(FileAttributeFlags.READONLY | FileAttributeFlags.ARCHIVE) == "READONLY | ARCHIVE"
