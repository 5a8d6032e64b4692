import csv
from pathlib import Path
from typing import IO, Sequence

from minicel.errors import EngineError


class RecordWriter:
    """CSV sink that quotes only when needed and flushes every `flush_every`
    records."""

    def __init__(self, stream: IO[str], flush_every: int = 100) -> None:
        self.stream = stream
        self.flush_every = flush_every
        self._writer = csv.writer(stream, lineterminator="\n")

    @classmethod
    def open(cls, path: str | Path, flush_every: int = 100) -> "RecordWriter":
        try:
            stream = open(path, "w", newline="", encoding="utf-8")
        except OSError as e:
            raise EngineError(f"Write CSV file error `{e}`")
        return cls(stream, flush_every=flush_every)

    def write(self, record: Sequence[str], row: int) -> None:
        """Write the record of `row`, flushing on every `flush_every`-th row."""
        try:
            self._writer.writerow(record)
        except (OSError, csv.Error) as e:
            raise EngineError(f"Write CSV record error `{e}`", row + 1)
        if self.flush_every > 0 and row % self.flush_every == 0:
            self.flush(row + 1)

    def flush(self, line_number: int = 0) -> None:
        try:
            self.stream.flush()
        except OSError as e:
            raise EngineError(f"Flush CSV file error `{e}`", line_number)

    def close(self) -> None:
        self.flush()
        self.stream.close()

    def __enter__(self) -> "RecordWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
