"""Attribute type codes and bit flag sets."""

from enum import IntEnum, IntFlag


class MftAttributeType(IntEnum):
    """Attribute type codes, as stored in the attribute record header."""

    STANDARD_INFORMATION = 0x10
    ATTRIBUTE_LIST = 0x20
    FILE_NAME = 0x30
    OBJECT_ID = 0x40
    SECURITY_DESCRIPTOR = 0x50
    VOLUME_NAME = 0x60
    VOLUME_INFORMATION = 0x70
    DATA = 0x80
    INDEX_ROOT = 0x90
    INDEX_ALLOCATION = 0xA0
    BITMAP = 0xB0
    REPARSE_POINT = 0xC0
    EA_INFORMATION = 0xD0
    EA = 0xE0
    LOGGED_UTILITY_STREAM = 0x100


class AttributeDataFlags(IntFlag):
    IS_COMPRESSED = 0x0001
    COMPRESSION_MASK = 0x00FF
    ENCRYPTED = 0x4000
    SPARSE = 0x8000


class FileAttributeFlags(IntFlag):
    """Windows file attribute bits carried by $STANDARD_INFORMATION and $FILE_NAME."""

    READONLY = 0x0001
    HIDDEN = 0x0002
    SYSTEM = 0x0004
    ARCHIVE = 0x0020
    DEVICE = 0x0040
    NORMAL = 0x0080
    TEMPORARY = 0x0100
    SPARSE_FILE = 0x0200
    REPARSE_POINT = 0x0400
    COMPRESSED = 0x0800
    OFFLINE = 0x1000
    NOT_CONTENT_INDEXED = 0x2000
    ENCRYPTED = 0x4000


class FileNamespace(IntEnum):
    POSIX = 0
    WIN32 = 1
    DOS = 2
    WIN32_AND_DOS = 3


class IndexCollationRules(IntEnum):
    BINARY = 0x00
    FILENAME = 0x01
    UNICODE = 0x02
    NTOFS_ULONG = 0x10
    NTOFS_SID = 0x11
    NTOFS_SECURITY_HASH = 0x12
    NTOFS_ULONGS = 0x13


class IndexEntryFlags(IntFlag):
    NODE = 0x01
    END = 0x02


def truncate_flags(flag_type: type[IntFlag], value: int) -> IntFlag:
    """Build a flag value keeping only the known bits."""
    known = 0
    for member in flag_type.__members__.values():
        known |= member.value
    return flag_type(value & known)


def flag_names(value: IntFlag) -> str:
    """Render set flags as ``A | B``, or an empty string when none are set."""
    names = [
        member.name
        for member in type(value).__members__.values()
        if member.name and member.value and (value & member.value) == member.value
    ]
    return " | ".join(names)
