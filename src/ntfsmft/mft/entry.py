"""MFT entries: header decoding, fixup application and attribute iteration."""

import io
import struct
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import IntFlag
from typing import BinaryIO

from ntfsmft.core import logging
from ntfsmft.core.errors import FailedToApplyFixupError, InvalidEntrySignatureError, MftError
from ntfsmft.mft.attribute import (
    FileNameAttr,
    MftAttribute,
    MftAttributeHeader,
    MftAttributeType,
    decode_content,
)
from ntfsmft.mft.attribute.flags import truncate_flags
from ntfsmft.mft.fixup import apply_fixups
from ntfsmft.mft.reference import MftReference
from ntfsmft.mft.utils import read_exact, read_struct

FILE_SIGNATURE = b"FILE"
BAAD_SIGNATURE = b"BAAD"
ZERO_SIGNATURE = b"\x00\x00\x00\x00"

ENTRY_HEADER_SIZE = 48

# usa_offset, usa_size, lsn, sequence, hard_links, first_attribute_offset, flags,
# used, total, base_reference, first_attribute_id, padding, record_number
_HEADER = struct.Struct("<HHQHHHHIIQHHI")


class EntryFlags(IntFlag):
    ALLOCATED = 0x01
    INDEX_PRESENT = 0x02
    UNKNOWN_1 = 0x04
    UNKNOWN_2 = 0x08


@dataclass(frozen=True)
class EntryHeader:
    """Fixed 48-byte header at the start of every MFT entry."""

    signature: bytes
    usa_offset: int
    usa_size: int
    logfile_sequence_number: int
    sequence: int
    hard_link_count: int
    first_attribute_record_offset: int
    flags: EntryFlags
    used_entry_size: int
    total_entry_size: int
    base_reference: MftReference
    first_attribute_id: int
    record_number: int

    @classmethod
    def zero(cls, entry_number: int) -> "EntryHeader":
        """Header for an all-zero (never used) entry."""
        return cls(
            signature=ZERO_SIGNATURE,
            usa_offset=0,
            usa_size=0,
            logfile_sequence_number=0,
            sequence=0,
            hard_link_count=0,
            first_attribute_record_offset=0,
            flags=EntryFlags(0),
            used_entry_size=0,
            total_entry_size=0,
            base_reference=MftReference(0, 0),
            first_attribute_id=0,
            record_number=entry_number,
        )

    @classmethod
    def from_stream(cls, stream: BinaryIO, entry_number: int) -> "EntryHeader":
        """Decode an entry header.

        The record number stored on disk is ignored; ``entry_number`` is
        authoritative.

        Raises:
            InvalidEntrySignatureError: Signature is not FILE, BAAD or zero
            UnexpectedEndOfDataError: Header is truncated
        """
        signature = read_exact(stream, 4)
        if signature == ZERO_SIGNATURE:
            return cls.zero(entry_number)
        if signature not in (FILE_SIGNATURE, BAAD_SIGNATURE):
            raise InvalidEntrySignatureError(signature)

        (
            usa_offset,
            usa_size,
            lsn,
            sequence,
            hard_link_count,
            first_attribute_offset,
            flags,
            used,
            total,
            base_reference,
            first_attribute_id,
            _padding,
            _record_number,
        ) = read_struct(stream, _HEADER)

        return cls(
            signature=signature,
            usa_offset=usa_offset,
            usa_size=usa_size,
            logfile_sequence_number=lsn,
            sequence=sequence,
            hard_link_count=hard_link_count,
            first_attribute_record_offset=first_attribute_offset,
            flags=truncate_flags(EntryFlags, flags),
            used_entry_size=used,
            total_entry_size=total,
            base_reference=MftReference.from_int(base_reference),
            first_attribute_id=first_attribute_id,
            record_number=entry_number,
        )

    def is_zero(self) -> bool:
        return self.signature == ZERO_SIGNATURE


class AttributeIterator:
    """Lazy iterator over the attributes of one entry.

    The cursor moves past each record before its content is decoded, so a
    content error never stalls the walk. Any error ends iteration: it is
    raised once and every later ``next()`` raises StopIteration.
    """

    def __init__(
        self,
        entry: "MftEntry",
        types: Iterable[MftAttributeType] | None = None,
    ):
        self._stream = io.BytesIO(entry.data)
        self._offset = entry.header.first_attribute_record_offset
        self._types = frozenset(types) if types is not None else None
        self._exhausted = entry.header.is_zero()

    def __iter__(self) -> "AttributeIterator":
        return self

    def __next__(self) -> MftAttribute:
        while not self._exhausted:
            try:
                attribute = self._step()
            except MftError:
                self._exhausted = True
                raise
            if attribute is not None:
                return attribute
        raise StopIteration

    def _step(self) -> MftAttribute | None:
        self._stream.seek(self._offset)
        header = MftAttributeHeader.from_stream(self._stream)
        if header is None:
            self._exhausted = True
            return None

        self._offset = header.start_offset + header.record_length

        if self._types is not None and header.type_code not in self._types:
            return None

        return MftAttribute(header=header, data=decode_content(self._stream, header))


@dataclass(frozen=True)
class MftEntry:
    """An MFT entry after fixups.

    Attributes:
        header: Decoded entry header
        data: Entry bytes with fixups applied
        valid_fixup: False when a sector failed fixup validation, None when
            fixups were not applicable (zeroed entry)
    """

    header: EntryHeader
    data: bytes = field(repr=False)
    valid_fixup: bool | None

    @classmethod
    def from_buffer(cls, buffer: bytes, entry_number: int) -> "MftEntry":
        """Decode an entry from its raw on-disk bytes.

        A fixup mismatch is logged and recorded in ``valid_fixup`` rather
        than raised.

        Raises:
            InvalidEntrySignatureError: Signature is not FILE, BAAD or zero
            UnexpectedEndOfDataError: Buffer is shorter than a header
        """
        header = EntryHeader.from_stream(io.BytesIO(buffer), entry_number)
        if header.is_zero():
            return cls(header=header, data=bytes(buffer), valid_fixup=None)

        fixed = bytearray(buffer)
        valid_fixup = True
        try:
            apply_fixups(header, fixed)
        except FailedToApplyFixupError as e:
            logging.warning(
                f"Fixup verification failed for entry {entry_number}",
                entry=entry_number,
                stride=e.stride,
            )
            valid_fixup = False

        return cls(header=header, data=bytes(fixed), valid_fixup=valid_fixup)

    @property
    def entry_number(self) -> int:
        return self.header.record_number

    def iter_attributes(self) -> AttributeIterator:
        return AttributeIterator(self)

    def iter_attributes_matching(self, types: Iterable[MftAttributeType]) -> AttributeIterator:
        """Iterate attributes of the given types only; others are not decoded."""
        return AttributeIterator(self, types)

    def is_allocated(self) -> bool:
        return EntryFlags.ALLOCATED in self.header.flags

    def is_dir(self) -> bool:
        return EntryFlags.INDEX_PRESENT in self.header.flags

    def iter_file_names(self) -> Iterator[FileNameAttr]:
        """Yield decodable $FILE_NAME attributes; a decode error ends the walk."""
        attributes = self.iter_attributes_matching([MftAttributeType.FILE_NAME])
        while True:
            try:
                attribute = next(attributes)
            except StopIteration:
                return
            except MftError as e:
                logging.debug(
                    f"Stopped reading file names of entry {self.entry_number}: {e}",
                    entry=self.entry_number,
                )
                return
            if isinstance(attribute.data, FileNameAttr):
                yield attribute.data

    def find_best_name_attribute(self) -> FileNameAttr | None:
        """First Win32 (or Win32AndDos) name, else the first name of any namespace."""
        first: FileNameAttr | None = None
        for file_name in self.iter_file_names():
            if file_name.is_win32:
                return file_name
            if first is None:
                first = file_name
        return first
