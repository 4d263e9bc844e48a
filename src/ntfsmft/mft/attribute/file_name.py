"""$FILE_NAME (0x30)."""

import struct
from dataclasses import dataclass
from datetime import datetime
from typing import Any, BinaryIO

from ntfsmft.core.errors import UnknownNamespaceError
from ntfsmft.mft.attribute.flags import FileAttributeFlags, FileNamespace, flag_names, truncate_flags
from ntfsmft.mft.reference import MftReference
from ntfsmft.mft.utils import filetime_to_datetime, read_struct, read_utf16_name

# parent, 4 timestamps, logical, physical, flags, reparse, name_length, namespace
_FIXED = struct.Struct("<QQQQQQQIIBB")


@dataclass(frozen=True)
class FileNameAttr:
    parent: MftReference
    created: datetime | None
    modified: datetime | None
    mft_modified: datetime | None
    accessed: datetime | None
    logical_size: int
    physical_size: int
    flags: FileAttributeFlags
    reparse_value: int
    name_length: int
    namespace: FileNamespace
    name: str

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "FileNameAttr":
        """Decode a $FILE_NAME structure at the current stream position.

        Also used for the file name keys embedded in index entries.

        Raises:
            UnknownNamespaceError: Namespace byte is not 0-3
            InvalidFilenameError: Name is not valid UTF-16LE
        """
        (
            parent,
            created,
            modified,
            mft_modified,
            accessed,
            logical_size,
            physical_size,
            flags,
            reparse_value,
            name_length,
            namespace,
        ) = read_struct(stream, _FIXED)

        try:
            file_namespace = FileNamespace(namespace)
        except ValueError as e:
            raise UnknownNamespaceError(namespace) from e

        name = read_utf16_name(stream, name_length)

        return cls(
            parent=MftReference.from_int(parent),
            created=filetime_to_datetime(created),
            modified=filetime_to_datetime(modified),
            mft_modified=filetime_to_datetime(mft_modified),
            accessed=filetime_to_datetime(accessed),
            logical_size=logical_size,
            physical_size=physical_size,
            flags=truncate_flags(FileAttributeFlags, flags),
            reparse_value=reparse_value,
            name_length=name_length,
            namespace=file_namespace,
            name=name,
        )

    @property
    def is_win32(self) -> bool:
        return self.namespace in (FileNamespace.WIN32, FileNamespace.WIN32_AND_DOS)

    def to_dict(self) -> dict[str, Any]:
        return {
            "parent": self.parent.to_dict(),
            "created": self.created.isoformat() if self.created else None,
            "modified": self.modified.isoformat() if self.modified else None,
            "mft_modified": self.mft_modified.isoformat() if self.mft_modified else None,
            "accessed": self.accessed.isoformat() if self.accessed else None,
            "logical_size": self.logical_size,
            "physical_size": self.physical_size,
            "flags": flag_names(self.flags),
            "reparse_value": self.reparse_value,
            "name_length": self.name_length,
            "namespace": self.namespace.name,
            "name": self.name,
        }
