"""Decoding of raw $MFT entries and full path reconstruction."""

from ntfsmft.mft.entry import AttributeIterator, EntryFlags, EntryHeader, MftEntry
from ntfsmft.mft.parser import MftParser, probe_entry_size
from ntfsmft.mft.reference import MftReference

__all__ = [
    "AttributeIterator",
    "EntryFlags",
    "EntryHeader",
    "MftEntry",
    "MftParser",
    "MftReference",
    "probe_entry_size",
]
