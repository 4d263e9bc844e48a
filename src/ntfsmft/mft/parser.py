"""MFT parser and full path resolution.

MftParser reads fixed-size entries from a seekable stream holding a raw
$MFT and rebuilds each entry's full path by walking $FILE_NAME parent
references up to the root directory, memoizing resolved directories in a
bounded LRU cache.
"""

import io
import os
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import BinaryIO

from ntfsmft.core import logging
from ntfsmft.core.cache import DEFAULT_CACHE_SIZE, CacheStats, PathCache
from ntfsmft.core.config import ParserConfig
from ntfsmft.core.errors import ConfigError, EntrySizeNotFoundError, MftError, ReadError
from ntfsmft.mft.entry import ENTRY_HEADER_SIZE, EntryHeader, MftEntry

ROOT_ENTRY = 5
PROBE_STRIDE = 1024

ORPHANED = "[Orphaned]"
UNKNOWN = "[Unknown]"


def probe_entry_size(stream: BinaryIO) -> int:
    """Find the entry size from the first self-consistent entry header.

    Candidates are taken every 1024 bytes from the start of the stream. A
    header is consistent when its allocated size is non-zero and matches
    the number of sectors its update sequence array protects.

    Raises:
        EntrySizeNotFoundError: If the stream ends without a match
    """
    scanned = 0
    offset = 0
    while True:
        stream.seek(offset)
        candidate = stream.read(ENTRY_HEADER_SIZE)
        if len(candidate) < ENTRY_HEADER_SIZE:
            raise EntrySizeNotFoundError(scanned)
        scanned += 1

        try:
            header = EntryHeader.from_stream(io.BytesIO(candidate), offset // PROBE_STRIDE)
        except MftError:
            header = None

        if header is not None:
            total = header.total_entry_size
            if total != 0 and total == (header.usa_size - 1) * 512:
                logging.debug(f"Probed entry size {total}", offset=offset)
                return total

        offset += PROBE_STRIDE


class MftParser:
    """Random and sequential access to the entries of a raw $MFT.

    Args:
        stream: Seekable binary stream positioned anywhere
        size: Stream size in bytes; measured when omitted
        entry_size: Fixed entry size; probed when omitted
        cache_size: Capacity of the resolved-path cache

    Raises:
        ConfigError: If entry_size is not positive
    """

    def __init__(
        self,
        stream: BinaryIO,
        size: int | None = None,
        entry_size: int | None = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ) -> None:
        self._stream = stream
        self._owns_stream = False

        if size is None:
            size = stream.seek(0, os.SEEK_END)
        self.size = size

        if entry_size is not None and entry_size <= 0:
            raise ConfigError(f"Entry size must be positive, got {entry_size}")
        self.entry_size = entry_size if entry_size is not None else probe_entry_size(stream)
        self._cache = PathCache(cache_size)

        self.bytes_read = 0
        self.skipped_entries = 0

    @classmethod
    def from_path(
        cls,
        path: Path | str,
        entry_size: int | None = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ) -> "MftParser":
        """Open a raw $MFT file; the parser closes it on close()."""
        try:
            stream = open(path, "rb")
        except OSError as e:
            raise ReadError(f"Cannot open MFT: {e}", path=str(path)) from e

        try:
            parser = cls(stream, entry_size=entry_size, cache_size=cache_size)
        except BaseException:
            stream.close()
            raise
        parser._owns_stream = True
        return parser

    @classmethod
    def from_buffer(
        cls,
        data: bytes,
        entry_size: int | None = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ) -> "MftParser":
        return cls(io.BytesIO(data), size=len(data), entry_size=entry_size, cache_size=cache_size)

    @classmethod
    def from_config(cls, path: Path | str, config: ParserConfig) -> "MftParser":
        return cls.from_path(path, entry_size=config.entry_size, cache_size=config.path_cache_size)

    def close(self) -> None:
        if self._owns_stream:
            self._stream.close()

    def __enter__(self) -> "MftParser":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_entry_count(self) -> int:
        return self.size // self.entry_size

    def get_entry(self, entry_number: int) -> MftEntry:
        """Read and decode one entry.

        Raises:
            ReadError: If the entry lies outside the stream
            InvalidEntrySignatureError: If the entry is not an MFT record
        """
        if entry_number < 0:
            raise ReadError(f"Invalid entry number {entry_number}")

        offset = entry_number * self.entry_size
        self._stream.seek(offset)
        buffer = self._stream.read(self.entry_size)
        if len(buffer) != self.entry_size:
            raise ReadError(
                f"Short read for entry {entry_number}: got {len(buffer)} of {self.entry_size} bytes",
                offset=offset,
            )
        self.bytes_read += len(buffer)
        return MftEntry.from_buffer(buffer, entry_number)

    def iter_entries(
        self,
        skip_errors: bool = True,
        entry_numbers: Iterable[int] | None = None,
    ) -> Iterator[MftEntry]:
        """Yield entries in order.

        Args:
            skip_errors: Log and skip entries that fail to decode
            entry_numbers: Restrict the scan to these entries

        Raises:
            ReadError: Always propagated, even when skipping errors
        """
        numbers = entry_numbers if entry_numbers is not None else range(self.get_entry_count())
        for entry_number in numbers:
            try:
                entry = self.get_entry(entry_number)
            except ReadError:
                raise
            except MftError as e:
                if not skip_errors:
                    raise
                self.skipped_entries += 1
                logging.error(
                    f"Failed to parse entry {entry_number}: {e}",
                    entry=entry_number,
                    code=e.error.code,
                )
                continue
            yield entry

    def get_full_path_for_entry(self, entry: MftEntry) -> str | None:
        """Reconstruct the full path of an entry.

        Paths are relative to the volume root and joined with ``/``. Entries
        whose parent chain loops back on itself are rooted at ``[Orphaned]``,
        parents that cannot be read become ``[Unknown]``.

        Returns:
            The path, or None for an entry with neither a name nor a base entry
        """
        path, _ = self._resolve_path(entry, set())
        return path

    def cache_stats(self) -> CacheStats:
        return self._cache.get_stats()

    def _resolve_path(self, entry: MftEntry, visited: set[int]) -> tuple[str | None, bool]:
        # The flag is set when the path was cut short by a parent cycle.
        entry_number = entry.entry_number
        visited.add(entry_number)

        file_name = entry.find_best_name_attribute()
        if file_name is None:
            base_entry = entry.header.base_reference.entry
            if base_entry == 0:
                return None, False
            return self._lookup_path(base_entry, visited)

        parent = file_name.parent.entry
        if parent == ROOT_ENTRY:
            return file_name.name, False
        if parent == entry_number:
            logging.debug(f"Entry {entry_number} is its own parent", entry=entry_number)
            return f"{ORPHANED}/{file_name.name}", False

        parent_path, in_cycle = self._lookup_path(parent, visited)
        return f"{parent_path}/{file_name.name}", in_cycle

    def _lookup_path(self, entry_number: int, visited: set[int]) -> tuple[str, bool]:
        cached = self._cache.get(entry_number)
        if cached is not None:
            return cached, False

        if entry_number in visited:
            logging.warning(
                f"Parent reference cycle through entry {entry_number}", entry=entry_number
            )
            return ORPHANED, True

        try:
            parent_entry = self.get_entry(entry_number)
        except MftError as e:
            logging.debug(f"Cannot read parent entry {entry_number}: {e}", entry=entry_number)
            path, in_cycle = None, False
        else:
            path, in_cycle = self._resolve_path(parent_entry, visited)

        if path is None:
            path = UNKNOWN
        # Paths cut by a cycle depend on where the walk started.
        if not in_cycle:
            self._cache.put(entry_number, path)
        return path, in_cycle
