"""Content of non-resident attributes: the decoded data run list."""

from dataclasses import dataclass, field
from typing import Any, BinaryIO

from ntfsmft.core.errors import FailedToDecodeDataRunsError, InvalidRecordLengthError
from ntfsmft.mft.attribute.data_run import DataRun, decode_data_runs
from ntfsmft.mft.attribute.header import MftAttributeHeader, NonResidentHeader
from ntfsmft.mft.utils import read_exact


@dataclass(frozen=True)
class NonResidentAttr:
    data_runs: list[DataRun] = field(default_factory=list)

    @classmethod
    def from_stream(
        cls,
        stream: BinaryIO,
        header: MftAttributeHeader,
        non_resident: NonResidentHeader,
    ) -> "NonResidentAttr":
        """Read and decode the mapping pairs that follow the header.

        Runs are decoded even when ``valid_data_length`` is zero.

        Raises:
            InvalidRecordLengthError: Mapping pairs offset lies past the record
            FailedToDecodeDataRunsError: Mapping pairs are malformed
        """
        if non_resident.datarun_offset > header.record_length:
            raise InvalidRecordLengthError(
                f"datarun offset ({non_resident.datarun_offset}) exceeds "
                f"record length ({header.record_length})",
                offset=header.start_offset,
            )

        run_bytes_count = header.record_length - non_resident.datarun_offset
        if run_bytes_count == 0:
            return cls()

        stream.seek(header.start_offset + non_resident.datarun_offset)
        run_bytes = read_exact(stream, run_bytes_count)

        data_runs = decode_data_runs(run_bytes)
        if data_runs is None:
            raise FailedToDecodeDataRunsError(run_bytes)
        return cls(data_runs=data_runs)

    def to_dict(self) -> dict[str, Any]:
        return {"data_runs": [run.to_dict() for run in self.data_runs]}
