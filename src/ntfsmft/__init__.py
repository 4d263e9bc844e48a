"""ntfsmft: NTFS Master File Table parser."""

__version__ = "0.1.0"
