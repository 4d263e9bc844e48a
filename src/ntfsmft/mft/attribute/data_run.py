"""Mapping pairs (data run) decoding for non-resident attributes."""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum

U64_MASK = 0xFFFF_FFFF_FFFF_FFFF


class RunType(IntEnum):
    STANDARD = 0
    SPARSE = 1


@dataclass(frozen=True)
class DataRun:
    """A contiguous extent of clusters.

    Attributes:
        lcn_offset: Absolute logical cluster number (0 for sparse runs)
        lcn_length: Length of the run in clusters
        run_type: STANDARD or SPARSE
    """

    lcn_offset: int
    lcn_length: int
    run_type: RunType = RunType.STANDARD

    def to_dict(self) -> dict[str, int | str]:
        return {
            "lcn_offset": self.lcn_offset,
            "lcn_length": self.lcn_length,
            "run_type": self.run_type.name.capitalize(),
        }


def decode_run_value(it: Iterator[int], width: int) -> int | None:
    """Read a little-endian unsigned value of ``width`` bytes.

    Returns:
        The value, or None if the iterator runs out first
    """
    value = 0
    for shift in range(width):
        byte = next(it, None)
        if byte is None:
            return None
        value |= byte << (8 * shift)
    return value


def decode_run_svalue(it: Iterator[int], width: int) -> int | None:
    """Read a little-endian two's complement value of ``width`` bytes."""
    value = decode_run_value(it, width)
    if value is None or width == 0:
        return value
    sign_bit = 1 << (8 * width - 1)
    if value & sign_bit:
        value -= 1 << (8 * width)
    return value


def decode_data_runs(data: bytes) -> list[DataRun] | None:
    """Decode a mapping pairs array.

    Each run starts with a header byte whose low nibble is the width of the
    length field and whose high nibble is the width of the offset field.
    The first run's offset is absolute; later offsets are signed deltas from
    the previous run. A zero offset width marks a sparse run.

    Args:
        data: Raw mapping pairs bytes

    Returns:
        The decoded runs, or None if the bytes are malformed or truncated
    """
    it = iter(data)
    runs: list[DataRun] = []

    while True:
        header = next(it, None)
        if header is None:
            return None
        if header == 0:
            break

        offset_size = header >> 4
        length_size = header & 0x0F
        if offset_size > 8 or length_size > 8:
            return None

        length = decode_run_value(it, length_size)
        if length is None:
            return None

        if offset_size == 0:
            runs.append(DataRun(0, length, RunType.SPARSE))
            continue

        if runs:
            delta = decode_run_svalue(it, offset_size)
            if delta is None:
                return None
            offset = (runs[-1].lcn_offset + delta) & U64_MASK
        else:
            offset = decode_run_value(it, offset_size)
            if offset is None:
                return None

        runs.append(DataRun(offset, length, RunType.STANDARD))

    return runs
