"""Update sequence array (fixup) handling.

NTFS protects multi-sector records against torn writes by replacing the
last two bytes of every 512-byte sector with an update sequence number
and stashing the original bytes in the update sequence array (USA).
"""

from typing import TYPE_CHECKING

from ntfsmft.core.errors import FailedToApplyFixupError

if TYPE_CHECKING:
    from ntfsmft.mft.entry import EntryHeader

SECTOR_SIZE = 512


def apply_fixups(header: "EntryHeader", buffer: bytearray) -> None:
    """Validate and undo the fixups of an entry buffer in place.

    Strides patched before a mismatch stay patched.

    Args:
        header: Decoded header of the entry
        buffer: Raw entry bytes, modified in place

    Raises:
        FailedToApplyFixupError: If a sector's trailing bytes do not match
            the update sequence or lie outside the buffer
    """
    if header.is_zero():
        return

    usa_start = header.usa_offset
    stride_count = header.usa_size - 1
    expected = bytes(buffer[usa_start : usa_start + 2])

    for stride in range(stride_count):
        sector_end = stride * SECTOR_SIZE + SECTOR_SIZE - 2
        observed = bytes(buffer[sector_end : sector_end + 2])
        original_start = usa_start + 2 * (stride + 1)
        original = bytes(buffer[original_start : original_start + 2])

        if len(expected) != 2 or len(original) != 2 or observed != expected:
            raise FailedToApplyFixupError(stride, observed, expected)

        buffer[sector_end : sector_end + 2] = original
