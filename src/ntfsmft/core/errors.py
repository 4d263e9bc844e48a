"""Structured error handling for ntfsmft."""

import sys
from typing import Any, NoReturn

from ntfsmft.models.error import ErrorCode, StructuredError


class MftError(Exception):
    """Base exception for ntfsmft errors.

    Wraps a StructuredError for consistent error handling.
    """

    def __init__(
        self,
        code: str,
        message: str,
        remediation: str,
        retryable: bool = False,
        context: dict[str, Any] | None = None,
    ):
        self.error = StructuredError(
            code=code,
            message=message,
            remediation=remediation,
            retryable=retryable,
            context=context,
        )
        super().__init__(message)

    def to_structured(self) -> StructuredError:
        """Convert to StructuredError."""
        return self.error

    def to_structured_error(self) -> dict:
        """Convert to JSON-serializable dict for output."""
        return self.error.model_dump(mode="json", exclude_none=True)


class InvalidEntrySignatureError(MftError):
    """Entry signature is neither FILE, BAAD nor zeroed."""

    def __init__(self, signature: bytes):
        self.signature = signature
        super().__init__(
            code=ErrorCode.INVALID_ENTRY_SIGNATURE,
            message=f"Bad signature: {signature.hex().upper()}",
            remediation="The entry is not an MFT record; check the entry size or input file",
            retryable=False,
            context={"signature": signature.hex()},
        )


class UnknownAttributeTypeError(MftError):
    """Attribute type code outside the known NTFS types."""

    def __init__(self, attribute_type: int):
        self.attribute_type = attribute_type
        super().__init__(
            code=ErrorCode.UNKNOWN_ATTRIBUTE_TYPE,
            message=f"Unknown attribute type: 0x{attribute_type:X}",
            remediation="The entry is likely corrupt; remaining attributes are skipped",
            retryable=False,
            context={"attribute_type": attribute_type},
        )


class UnhandledResidentFlagError(MftError):
    """Attribute form code is neither resident (0) nor non-resident (1)."""

    def __init__(self, flag: int, offset: int):
        self.flag = flag
        self.offset = offset
        super().__init__(
            code=ErrorCode.UNHANDLED_RESIDENT_FLAG,
            message=f"Unhandled resident flag: {flag} (offset: {offset})",
            remediation="The entry is likely corrupt; remaining attributes are skipped",
            retryable=False,
            context={"flag": flag, "offset": offset},
        )


class UnknownNamespaceError(MftError):
    """File name namespace outside POSIX/Win32/DOS/Win32AndDos."""

    def __init__(self, namespace: int):
        self.namespace = namespace
        super().__init__(
            code=ErrorCode.UNKNOWN_NAMESPACE,
            message=f"Unknown file name namespace: {namespace}",
            remediation="The $FILE_NAME attribute is likely corrupt",
            retryable=False,
            context={"namespace": namespace},
        )


class UnknownCollationTypeError(MftError):
    """Index root collation rule outside the known rules."""

    def __init__(self, collation_type: int):
        self.collation_type = collation_type
        super().__init__(
            code=ErrorCode.UNKNOWN_COLLATION_TYPE,
            message=f"Unknown collation type: 0x{collation_type:X}",
            remediation="The $INDEX_ROOT attribute is likely corrupt",
            retryable=False,
            context={"collation_type": collation_type},
        )


class FailedToDecodeDataRunsError(MftError):
    """Mapping pairs could not be decoded."""

    def __init__(self, bad_data_runs: bytes):
        self.bad_data_runs = bad_data_runs
        super().__init__(
            code=ErrorCode.FAILED_TO_DECODE_DATA_RUNS,
            message=f"Failed to decode data runs: {bad_data_runs.hex()}",
            remediation="Skip the attribute; the rest of the entry is still usable",
            retryable=False,
            context={"bytes": bad_data_runs.hex()},
        )


class FailedToApplyFixupError(MftError):
    """A sector's trailing bytes do not match the update sequence."""

    def __init__(self, stride: int, observed: bytes, expected: bytes):
        self.stride = stride
        self.observed = observed
        self.expected = expected
        super().__init__(
            code=ErrorCode.FAILED_TO_APPLY_FIXUP,
            message=(
                f"Failed to apply fixup at stride {stride}: "
                f"found {observed.hex()}, expected {expected.hex()}"
            ),
            remediation="The entry has a torn sector write; its data may be partially stale",
            retryable=False,
            context={
                "stride": stride,
                "observed": observed.hex(),
                "expected": expected.hex(),
            },
        )


class InvalidFilenameError(MftError):
    """UTF-16 name could not be decoded."""

    def __init__(self, raw_name: bytes):
        super().__init__(
            code=ErrorCode.INVALID_FILENAME,
            message="Error while decoding name in filename attribute",
            remediation="The name bytes are not valid UTF-16LE",
            retryable=False,
            context={"bytes": raw_name.hex()},
        )


class UnexpectedEndOfDataError(MftError):
    """A structure was truncated."""

    def __init__(self, offset: int, wanted: int, got: int):
        super().__init__(
            code=ErrorCode.UNEXPECTED_END_OF_DATA,
            message=f"Unexpected end of data at offset {offset}: wanted {wanted} bytes, got {got}",
            remediation="The structure is truncated; check the entry size",
            retryable=False,
            context={"offset": offset, "wanted": wanted, "got": got},
        )


class InvalidRecordLengthError(MftError):
    """A length field would make iteration stall or overrun its record."""

    def __init__(self, message: str, offset: int | None = None):
        super().__init__(
            code=ErrorCode.INVALID_RECORD_LENGTH,
            message=message,
            remediation="The entry is likely corrupt; remaining attributes are skipped",
            retryable=False,
            context={"offset": offset} if offset is not None else None,
        )


class EntrySizeNotFoundError(MftError):
    """No self-consistent entry header was found while probing."""

    def __init__(self, scanned: int):
        super().__init__(
            code=ErrorCode.ENTRY_SIZE_NOT_FOUND,
            message=f"Could not determine MFT entry size after scanning {scanned} candidates",
            remediation="Pass the entry size explicitly (--entry-size or entry_size in config)",
            retryable=False,
            context={"scanned": scanned},
        )


class ReadError(MftError):
    """I/O error while reading the MFT."""

    def __init__(self, message: str, path: str | None = None, offset: int | None = None):
        context: dict[str, Any] = {}
        if path:
            context["path"] = path
        if offset is not None:
            context["offset"] = offset
        super().__init__(
            code=ErrorCode.IO_ERROR,
            message=message,
            remediation="Check file permissions, path accessibility and that the file is complete",
            retryable=False,
            context=context or None,
        )


class ConfigError(MftError):
    """Configuration file could not be loaded or validated."""

    def __init__(self, message: str, path: str | None = None, errors: list[str] | None = None):
        context: dict[str, Any] = {}
        if path:
            context["path"] = path
        if errors:
            context["errors"] = errors
        super().__init__(
            code=ErrorCode.CONFIG_ERROR,
            message=message,
            remediation="Fix the configuration file and try again",
            retryable=False,
            context=context or None,
        )


def handle_error(error: MftError | Exception, exit_code: int = 1) -> NoReturn:
    """Handle an error by outputting it and exiting.

    Args:
        error: The error to handle
        exit_code: Exit code to use
    """
    from ntfsmft.cli.output import output_error

    if isinstance(error, MftError):
        output_error(error.to_structured())
    else:
        structured = StructuredError(
            code=ErrorCode.INTERNAL_ERROR,
            message=str(error),
            remediation="This is an unexpected error. Please report it.",
            retryable=False,
            context={"type": type(error).__name__},
        )
        output_error(structured)

    sys.exit(exit_code)
