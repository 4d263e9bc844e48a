"""MFT file references."""

from dataclasses import dataclass

ENTRY_MASK = 0x0000_FFFF_FFFF_FFFF


@dataclass(frozen=True)
class MftReference:
    """Reference to an MFT entry: 48-bit entry number + 16-bit sequence."""

    entry: int
    sequence: int

    @classmethod
    def from_int(cls, value: int) -> "MftReference":
        return cls(entry=value & ENTRY_MASK, sequence=(value >> 48) & 0xFFFF)

    def to_dict(self) -> dict[str, int]:
        return {"entry": self.entry, "sequence": self.sequence}
