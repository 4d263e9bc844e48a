"""$STANDARD_INFORMATION (0x10)."""

import struct
from dataclasses import dataclass
from datetime import datetime
from typing import Any, BinaryIO

from ntfsmft.mft.attribute.flags import FileAttributeFlags, flag_names, truncate_flags
from ntfsmft.mft.utils import filetime_to_datetime, read_struct

# NTFS 1.2 layout: timestamps, flags, max_version, version, class_id
_BASE = struct.Struct("<QQQQIIII")
# NTFS 3.x extension: owner_id, security_id, quota, usn
_EXTENDED = struct.Struct("<IIQQ")

SHORT_FORM_SIZE = _BASE.size


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class StandardInfoAttr:
    created: datetime | None
    modified: datetime | None
    mft_modified: datetime | None
    accessed: datetime | None
    file_flags: FileAttributeFlags
    max_version: int
    version: int
    class_id: int
    owner_id: int = 0
    security_id: int = 0
    quota: int = 0
    usn: int = 0

    @classmethod
    def from_stream(cls, stream: BinaryIO, data_size: int | None = None) -> "StandardInfoAttr":
        """Decode the attribute; a 48-byte short form leaves the 3.x fields zeroed."""
        created, modified, mft_modified, accessed, flags, max_version, version, class_id = (
            read_struct(stream, _BASE)
        )

        owner_id = security_id = quota = usn = 0
        if data_size is None or data_size > SHORT_FORM_SIZE:
            owner_id, security_id, quota, usn = read_struct(stream, _EXTENDED)

        return cls(
            created=filetime_to_datetime(created),
            modified=filetime_to_datetime(modified),
            mft_modified=filetime_to_datetime(mft_modified),
            accessed=filetime_to_datetime(accessed),
            file_flags=truncate_flags(FileAttributeFlags, flags),
            max_version=max_version,
            version=version,
            class_id=class_id,
            owner_id=owner_id,
            security_id=security_id,
            quota=quota,
            usn=usn,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "created": _isoformat(self.created),
            "modified": _isoformat(self.modified),
            "mft_modified": _isoformat(self.mft_modified),
            "accessed": _isoformat(self.accessed),
            "file_flags": flag_names(self.file_flags),
            "max_version": self.max_version,
            "version": self.version,
            "class_id": self.class_id,
            "owner_id": self.owner_id,
            "security_id": self.security_id,
            "quota": self.quota,
            "usn": self.usn,
        }
