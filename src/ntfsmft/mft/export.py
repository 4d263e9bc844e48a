"""Conversion of decoded entries to JSON documents and flat CSV rows."""

from collections.abc import Iterable
from typing import Any

from ntfsmft.core import logging
from ntfsmft.core.errors import MftError
from ntfsmft.mft.attribute import (
    FileNameAttr,
    MftAttribute,
    MftAttributeType,
    ResidentHeader,
    StandardInfoAttr,
    flag_names,
)
from ntfsmft.mft.entry import EntryFlags, MftEntry
from ntfsmft.mft.parser import MftParser
from ntfsmft.models.record import FlatMftEntry

_FLAT_TYPES = (
    MftAttributeType.STANDARD_INFORMATION,
    MftAttributeType.FILE_NAME,
    MftAttributeType.DATA,
)


def _signature(entry: MftEntry) -> str:
    if entry.header.is_zero():
        return ""
    return entry.header.signature.decode("ascii")


def collect_attributes(
    entry: MftEntry, types: Iterable[MftAttributeType] | None = None
) -> tuple[list[MftAttribute], MftError | None]:
    """Drain the attribute iterator, keeping what decoded before any error."""
    iterator = entry.iter_attributes() if types is None else entry.iter_attributes_matching(types)
    attributes: list[MftAttribute] = []
    try:
        for attribute in iterator:
            attributes.append(attribute)
    except MftError as e:
        logging.warning(
            f"Attribute error in entry {entry.entry_number}: {e}",
            entry=entry.entry_number,
            code=e.error.code,
        )
        return attributes, e
    return attributes, None


def entry_to_dict(entry: MftEntry, full_path: str | None = None) -> dict[str, Any]:
    """Nested JSON form of an entry: header plus decoded attributes.

    An attribute decode error is reported under ``attribute_error`` next to
    the attributes that decoded before it.
    """
    header = entry.header
    attributes, error = collect_attributes(entry)

    document: dict[str, Any] = {
        "header": {
            "signature": _signature(entry),
            "logfile_sequence_number": header.logfile_sequence_number,
            "sequence": header.sequence,
            "hard_link_count": header.hard_link_count,
            "flags": flag_names(header.flags),
            "used_entry_size": header.used_entry_size,
            "total_entry_size": header.total_entry_size,
            "base_reference": header.base_reference.to_dict(),
            "first_attribute_id": header.first_attribute_id,
            "record_number": header.record_number,
        },
        "valid_fixup": entry.valid_fixup,
        "attributes": [attribute.to_dict() for attribute in attributes],
    }
    if full_path is not None:
        document["full_path"] = full_path
    if error is not None:
        document["attribute_error"] = error.to_structured_error()
    return document


def flatten_entry(entry: MftEntry, parser: MftParser) -> FlatMftEntry:
    """Build the CSV row for an entry, resolving its full path through ``parser``."""
    attributes, _ = collect_attributes(entry, _FLAT_TYPES)

    standard_info = next(
        (a.data for a in attributes if isinstance(a.data, StandardInfoAttr)), None
    )
    file_name = next((a.data for a in attributes if isinstance(a.data, FileNameAttr)), None)
    data_attributes = [a for a in attributes if a.header.type_code == MftAttributeType.DATA]

    file_size = 0
    if data_attributes:
        sub_header = data_attributes[0].header.residential_header
        if isinstance(sub_header, ResidentHeader):
            file_size = sub_header.data_size
        else:
            file_size = sub_header.file_size

    header = entry.header
    return FlatMftEntry(
        signature=_signature(entry),
        entry_id=header.record_number,
        sequence=header.sequence,
        base_entry_id=header.base_reference.entry,
        base_entry_sequence=header.base_reference.sequence,
        hard_link_count=header.hard_link_count,
        flags=flag_names(header.flags),
        used_entry_size=header.used_entry_size,
        total_entry_size=header.total_entry_size,
        file_size=file_size,
        is_a_directory=entry.is_dir(),
        is_deleted=EntryFlags.ALLOCATED not in header.flags,
        has_alternate_data_streams=any(a.header.name for a in data_attributes),
        standard_info_flags=flag_names(standard_info.file_flags) if standard_info else None,
        standard_info_last_modified=standard_info.modified if standard_info else None,
        standard_info_last_access=standard_info.accessed if standard_info else None,
        standard_info_created=standard_info.created if standard_info else None,
        file_name_flags=flag_names(file_name.flags) if file_name else None,
        file_name_last_modified=file_name.modified if file_name else None,
        file_name_last_access=file_name.accessed if file_name else None,
        file_name_created=file_name.created if file_name else None,
        full_path=parser.get_full_path_for_entry(entry) or "",
    )
