"""Tests for mapping pairs decoding."""

import io

import pytest

from ntfsmft.core.errors import FailedToDecodeDataRunsError, InvalidRecordLengthError
from ntfsmft.mft.attribute import (
    AttributeDataFlags,
    MftAttributeHeader,
    MftAttributeType,
    NonResidentAttr,
    NonResidentHeader,
)
from ntfsmft.mft.attribute.data_run import (
    DataRun,
    RunType,
    decode_data_runs,
    decode_run_svalue,
    decode_run_value,
)


def test_value_decode():
    assert decode_run_value(iter([0x34, 0x56]), 2) == 0x5634
    assert decode_run_svalue(iter([0xE0]), 1) == -0x20
    assert decode_run_svalue(iter([0xE0]), 2) is None


def test_zero_width_value_is_zero():
    assert decode_run_value(iter([]), 0) == 0


def test_single_run():
    assert decode_data_runs(bytes([0x21, 0x18, 0x34, 0x56, 0x00])) == [DataRun(0x5634, 0x18)]


def test_sparse_run_between_standard_runs():
    runs = decode_data_runs(bytes([0x11, 0x30, 0x20, 0x01, 0x60, 0x11, 0x10, 0x30, 0x00]))

    assert runs == [
        DataRun(0x20, 0x30, RunType.STANDARD),
        DataRun(0, 0x60, RunType.SPARSE),
        DataRun(0x30, 0x10, RunType.STANDARD),
    ]


def test_relative_offsets():
    data = bytes(
        [
            0x31, 0x38, 0x73, 0x25, 0x34,
            0x32, 0x14, 0x01, 0xE5, 0x11, 0x02,
            0x31, 0x42, 0xAA, 0x00, 0x03,
            0x00,
        ]
    )

    assert decode_data_runs(data) == [
        DataRun(0x342573, 0x38),
        DataRun(0x363758, 0x114),
        DataRun(0x393802, 0x42),
    ]


def test_negative_delta():
    # second run lies 0x20 clusters before the first
    runs = decode_data_runs(bytes([0x11, 0x04, 0x40, 0x11, 0x04, 0xE0, 0x00]))

    assert [run.lcn_offset for run in runs] == [0x40, 0x20]


def test_sparse_only():
    assert decode_data_runs(bytes([0x01, 0x08, 0x00])) == [DataRun(0, 8, RunType.SPARSE)]


def test_empty_list_for_immediate_terminator():
    assert decode_data_runs(b"\x00") == []


@pytest.mark.parametrize(
    "data",
    [
        b"",  # no terminator
        bytes([0x21, 0x18, 0x34]),  # truncated offset
        bytes([0x21, 0x18, 0x34, 0x56]),  # missing terminator
        bytes([0x91, 0x01]),  # offset width above 8
        bytes([0x19, 0x01]),  # length width above 8
    ],
)
def test_malformed_runs(data):
    assert decode_data_runs(data) is None


def _non_resident(datarun_offset: int, valid_data_length: int = 0) -> NonResidentHeader:
    return NonResidentHeader(
        vnc_first=0,
        vnc_last=0,
        datarun_offset=datarun_offset,
        unit_compression_size=0,
        padding=0,
        allocated_length=4096,
        file_size=4096,
        valid_data_length=valid_data_length,
    )


def _header(non_resident: NonResidentHeader, record_length: int) -> MftAttributeHeader:
    return MftAttributeHeader(
        type_code=MftAttributeType.DATA,
        record_length=record_length,
        form_code=1,
        residential_header=non_resident,
        name_size=0,
        name_offset=None,
        data_flags=AttributeDataFlags(0),
        instance=0,
        name="",
        start_offset=0,
    )


def test_sparse_run_decoded_when_valid_length_zero():
    data = bytes([0x01, 0x08, 0x00])
    non_resident = _non_resident(datarun_offset=0, valid_data_length=0)

    attr = NonResidentAttr.from_stream(io.BytesIO(data), _header(non_resident, len(data)), non_resident)

    assert attr.data_runs == [DataRun(0, 8, RunType.SPARSE)]


def test_empty_mapping_pairs():
    non_resident = _non_resident(datarun_offset=8)

    attr = NonResidentAttr.from_stream(io.BytesIO(b""), _header(non_resident, 8), non_resident)

    assert attr.data_runs == []


def test_datarun_offset_past_record():
    non_resident = _non_resident(datarun_offset=72)

    with pytest.raises(InvalidRecordLengthError):
        NonResidentAttr.from_stream(io.BytesIO(bytes(80)), _header(non_resident, 64), non_resident)


def test_undecodable_mapping_pairs():
    data = bytes([0x21, 0x18, 0x34])
    non_resident = _non_resident(datarun_offset=0)

    with pytest.raises(FailedToDecodeDataRunsError) as exc_info:
        NonResidentAttr.from_stream(io.BytesIO(data), _header(non_resident, len(data)), non_resident)

    assert exc_info.value.bad_data_runs == data
