"""Builders for synthetic MFT entries and images."""

import io
import struct

import pytest

from ntfsmft.core import logging
from ntfsmft.mft.attribute import MftAttributeType
from ntfsmft.mft.entry import EntryFlags

UPDATE_SEQUENCE = b"\x01\x00"

# 2013-06-02 03:43:28.889595 UTC
SAMPLE_FILETIME = 0x01CE5F4358482DD5


def align8(value: int) -> int:
    return (value + 7) & ~7


def resident_attribute(
    type_code: int,
    content: bytes,
    name: str = "",
    instance: int = 0,
) -> bytes:
    """Resident attribute record: 24-byte header, optional name, content."""
    name_bytes = name.encode("utf-16-le")
    data_offset = align8(24 + len(name_bytes))
    record_length = align8(data_offset + len(content))

    record = struct.pack(
        "<IIBBHHH",
        type_code,
        record_length,
        0,
        len(name),
        24 if name else 0,
        0,
        instance,
    )
    record += struct.pack("<IHBB", len(content), data_offset, 0, 0)
    record += name_bytes
    record = record.ljust(data_offset, b"\x00") + content
    return record.ljust(record_length, b"\x00")


def non_resident_attribute(
    type_code: int,
    mapping_pairs: bytes,
    name: str = "",
    file_size: int = 0,
    instance: int = 0,
) -> bytes:
    """Non-resident attribute record: 64-byte header, optional name, mapping pairs."""
    name_bytes = name.encode("utf-16-le")
    datarun_offset = align8(64 + len(name_bytes))
    record_length = align8(datarun_offset + len(mapping_pairs))

    record = struct.pack(
        "<IIBBHHH",
        type_code,
        record_length,
        1,
        len(name),
        64 if name else 0,
        0,
        instance,
    )
    record += struct.pack(
        "<QQHHIQQQ",
        0,
        0,
        datarun_offset,
        0,
        0,
        align8(file_size),
        file_size,
        file_size,
    )
    record += name_bytes
    record = record.ljust(datarun_offset, b"\x00") + mapping_pairs
    return record.ljust(record_length, b"\x00")


def file_name_content(
    name: str,
    parent: int = 5,
    parent_sequence: int = 5,
    namespace: int = 1,
    flags: int = 0x20,
    logical_size: int = 0,
    filetime: int = SAMPLE_FILETIME,
) -> bytes:
    parent_reference = (parent_sequence << 48) | parent
    return struct.pack(
        "<QQQQQQQIIBB",
        parent_reference,
        filetime,
        filetime,
        filetime,
        filetime,
        logical_size,
        align8(logical_size),
        flags,
        0,
        len(name),
        namespace,
    ) + name.encode("utf-16-le")


def file_name_attribute(name: str, parent: int = 5, namespace: int = 1, **kwargs) -> bytes:
    return resident_attribute(
        MftAttributeType.FILE_NAME, file_name_content(name, parent, namespace=namespace, **kwargs)
    )


def standard_info_content(flags: int = 0x20, filetime: int = SAMPLE_FILETIME) -> bytes:
    return struct.pack(
        "<QQQQIIIIIIQQ",
        filetime,
        filetime,
        filetime,
        filetime,
        flags,
        0,
        0,
        0,
        0,
        0x100,
        0,
        0x1234,
    )


def build_entry(
    attributes: list[bytes],
    entry_size: int = 1024,
    flags: int = EntryFlags.ALLOCATED,
    sequence: int = 1,
    base_reference: int = 0,
    signature: bytes = b"FILE",
    record_number: int = 0,
) -> bytes:
    """Assemble an entry buffer with attributes, end marker and fixups applied."""
    usa_size = entry_size // 512 + 1
    first_attribute_offset = align8(48 + usa_size * 2)
    body = b"".join(attributes) + b"\xff\xff\xff\xff" + b"\x00" * 4
    used = first_attribute_offset + len(body)
    assert used <= entry_size, "attributes do not fit in the entry"

    buffer = bytearray(entry_size)
    buffer[0:48] = signature + struct.pack(
        "<HHQHHHHIIQHHI",
        48,
        usa_size,
        0x0C847DB3CC,
        sequence,
        1,
        first_attribute_offset,
        flags,
        used,
        entry_size,
        base_reference,
        len(attributes),
        0,
        record_number,
    )
    buffer[first_attribute_offset:used] = body

    usa = bytearray(UPDATE_SEQUENCE)
    for stride in range(usa_size - 1):
        sector_end = stride * 512 + 510
        usa += buffer[sector_end : sector_end + 2]
        buffer[sector_end : sector_end + 2] = UPDATE_SEQUENCE
    buffer[48 : 48 + len(usa)] = usa
    return bytes(buffer)


def named_entry(
    name: str,
    parent: int = 5,
    namespace: int = 1,
    directory: bool = False,
    extra: list[bytes] | None = None,
    entry_size: int = 1024,
) -> bytes:
    flags = EntryFlags.ALLOCATED | (EntryFlags.INDEX_PRESENT if directory else 0)
    attributes = [
        resident_attribute(MftAttributeType.STANDARD_INFORMATION, standard_info_content()),
        file_name_attribute(name, parent, namespace),
    ]
    attributes.extend(extra or [])
    return build_entry(attributes, flags=flags, entry_size=entry_size)


def build_mft(entries: dict[int, bytes], count: int, entry_size: int = 1024) -> bytes:
    """Concatenate entries; missing slots are left zeroed."""
    image = bytearray(count * entry_size)
    for number, data in entries.items():
        image[number * entry_size : (number + 1) * entry_size] = data
    return bytes(image)


class CountingBytesIO(io.BytesIO):
    """BytesIO that counts read calls."""

    def __init__(self, data: bytes):
        super().__init__(data)
        self.reads = 0

    def read(self, size: int | None = -1) -> bytes:
        self.reads += 1
        return super().read(size)


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset the global logging switches around each test."""
    logging.configure_logging(log_format="text", quiet=False, verbose=False)
    yield
    logging.configure_logging(log_format="text", quiet=False, verbose=False)


@pytest.fixture
def sample_tree() -> dict[int, bytes]:
    """A small directory tree with orphans, a cycle and an extension record.

    5   .            (root)
    30  Users/
    31  Users/docs/
    32  Users/docs/report.txt
    33  self.txt     parent is itself
    34  zero.txt     parent is entry 0
    35  lost.txt     parent lies past the end of the MFT
    36  extension record of 32 (no $FILE_NAME)
    37  unnamed, no base entry
    38  a/  and  39  b/  each other's parent
    40  c.txt in a/
    41  DOS name first, then the Win32 name
    42  DOS name only
    43  z.txt        parent slot 10 is zeroed
    """
    return {
        0: named_entry("$MFT"),
        5: named_entry(".", parent=5, directory=True),
        30: named_entry("Users", parent=5, directory=True),
        31: named_entry("docs", parent=30, directory=True),
        32: named_entry("report.txt", parent=31),
        33: named_entry("self.txt", parent=33),
        34: named_entry("zero.txt", parent=0),
        35: named_entry("lost.txt", parent=200),
        36: build_entry(
            [resident_attribute(MftAttributeType.DATA, b"extension", name="ads")],
            base_reference=(1 << 48) | 32,
        ),
        37: build_entry(
            [resident_attribute(MftAttributeType.STANDARD_INFORMATION, standard_info_content())]
        ),
        38: named_entry("a", parent=39, directory=True),
        39: named_entry("b", parent=38, directory=True),
        40: named_entry("c.txt", parent=38),
        41: build_entry(
            [
                file_name_attribute("REPORT~1.TXT", namespace=2),
                file_name_attribute("Report Long.txt", namespace=1),
            ]
        ),
        42: build_entry([file_name_attribute("ONLY~1", namespace=2)]),
        43: named_entry("z.txt", parent=10),
    }


@pytest.fixture
def sample_mft(sample_tree) -> bytes:
    return build_mft(sample_tree, count=64)
