"""Little-endian read helpers and FILETIME conversion.

All decoders read from a seekable binary stream positioned at the start
of the structure they decode. Short reads raise UnexpectedEndOfDataError.
"""

import struct
from datetime import UTC, datetime, timedelta
from typing import BinaryIO
from uuid import UUID

from ntfsmft.core.errors import InvalidFilenameError, UnexpectedEndOfDataError

FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=UTC)

_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes or raise UnexpectedEndOfDataError."""
    offset = stream.tell()
    data = stream.read(size)
    if len(data) != size:
        raise UnexpectedEndOfDataError(offset, size, len(data))
    return data


def read_u32(stream: BinaryIO) -> int:
    return _U32.unpack(read_exact(stream, 4))[0]


def read_u64(stream: BinaryIO) -> int:
    return _U64.unpack(read_exact(stream, 8))[0]


def read_struct(stream: BinaryIO, layout: struct.Struct) -> tuple:
    """Unpack a precompiled layout from the stream."""
    return layout.unpack(read_exact(stream, layout.size))


def read_guid(stream: BinaryIO) -> UUID:
    """Read a 16-byte GUID in its on-disk (mixed-endian) form."""
    return UUID(bytes_le=read_exact(stream, 16))


def read_utf16_name(stream: BinaryIO, length: int) -> str:
    """Read ``length`` UTF-16LE code units as a string.

    Raises:
        InvalidFilenameError: If the bytes are not valid UTF-16LE
    """
    raw = read_exact(stream, length * 2)
    try:
        return raw.decode("utf-16-le")
    except UnicodeDecodeError as e:
        raise InvalidFilenameError(raw) from e


def filetime_to_datetime(filetime: int) -> datetime | None:
    """Convert a Windows FILETIME to an aware UTC datetime.

    FILETIME counts 100-nanosecond intervals since 1601-01-01. Zero means
    "not set" and values past datetime's range are treated the same way.
    """
    if filetime <= 0:
        return None
    try:
        return FILETIME_EPOCH + timedelta(microseconds=filetime // 10)
    except OverflowError:
        return None


def to_hex_string(data: bytes) -> str:
    """Lowercase hex with no separators."""
    return data.hex()
