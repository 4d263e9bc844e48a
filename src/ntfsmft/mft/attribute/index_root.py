"""$INDEX_ROOT (0x90).

The root node of a directory (or other) index. Small directories keep all
their entries here; large ones spill into $INDEX_ALLOCATION, which is
non-resident and not decoded.
"""

import struct
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from ntfsmft.core.errors import UnknownCollationTypeError
from ntfsmft.mft.attribute.file_name import FileNameAttr
from ntfsmft.mft.attribute.flags import (
    IndexCollationRules,
    IndexEntryFlags,
    flag_names,
    truncate_flags,
)
from ntfsmft.mft.reference import MftReference
from ntfsmft.mft.utils import read_struct

# attribute_type, collation_rule, index_entry_size, clusters_per_block, padding
_ROOT = struct.Struct("<IIIB3s")
_NODE = struct.Struct("<IIII")
# mft_reference, index_record_length, attr_fname_length, flags
_ENTRY = struct.Struct("<QHHI")


@dataclass(frozen=True)
class IndexNodeHeader:
    index_values_offset: int
    index_node_length: int
    index_node_allocated_length: int
    index_node_flags: int

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "IndexNodeHeader":
        return cls(*read_struct(stream, _NODE))

    def to_dict(self) -> dict[str, int]:
        return {
            "index_values_offset": self.index_values_offset,
            "index_node_length": self.index_node_length,
            "index_node_allocated_length": self.index_node_allocated_length,
            "index_node_flags": self.index_node_flags,
        }


@dataclass(frozen=True)
class IndexEntryHeader:
    mft_reference: MftReference
    index_record_length: int
    attr_fname_length: int
    flags: IndexEntryFlags
    fname_info: FileNameAttr | None = None

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "IndexEntryHeader | None":
        """Decode one index entry, or return None at a terminating entry."""
        reference, record_length, fname_length, flags = read_struct(stream, _ENTRY)
        if reference == 0 or record_length == 0:
            return None
        fname_info = FileNameAttr.from_stream(stream) if fname_length > 0 else None
        return cls(
            mft_reference=MftReference.from_int(reference),
            index_record_length=record_length,
            attr_fname_length=fname_length,
            flags=truncate_flags(IndexEntryFlags, flags),
            fname_info=fname_info,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "mft_reference": self.mft_reference.to_dict(),
            "index_record_length": self.index_record_length,
            "attr_fname_length": self.attr_fname_length,
            "flags": flag_names(self.flags),
            "fname_info": self.fname_info.to_dict() if self.fname_info else None,
        }


@dataclass(frozen=True)
class IndexRootAttr:
    attribute_type: int
    collation_rule: IndexCollationRules
    index_entry_size: int
    index_entry_number_of_cluster_blocks: int
    node_header: IndexNodeHeader
    index_entries: list[IndexEntryHeader] = field(default_factory=list)

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "IndexRootAttr":
        """Decode the index root and the entries of its node.

        Entry walking stops at a zero file reference, a zero record length
        or the node's declared end, whichever comes first.

        Raises:
            UnknownCollationTypeError: Collation rule is not a known rule
        """
        attribute_type, collation, entry_size, clusters, _padding = read_struct(stream, _ROOT)
        try:
            collation_rule = IndexCollationRules(collation)
        except ValueError as e:
            raise UnknownCollationTypeError(collation) from e

        node_start = stream.tell()
        node_header = IndexNodeHeader.from_stream(stream)
        end_offset = node_start + node_header.index_node_length

        entries: list[IndexEntryHeader] = []
        offset = node_start + node_header.index_values_offset
        while offset < end_offset:
            stream.seek(offset)
            entry = IndexEntryHeader.from_stream(stream)
            if entry is None:
                break
            entries.append(entry)
            offset += entry.index_record_length

        return cls(
            attribute_type=attribute_type,
            collation_rule=collation_rule,
            index_entry_size=entry_size,
            index_entry_number_of_cluster_blocks=clusters,
            node_header=node_header,
            index_entries=entries,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "attribute_type": self.attribute_type,
            "collation_rule": self.collation_rule.name,
            "index_entry_size": self.index_entry_size,
            "index_entry_number_of_cluster_blocks": self.index_entry_number_of_cluster_blocks,
            "node_header": self.node_header.to_dict(),
            "index_entries": [entry.to_dict() for entry in self.index_entries],
        }
