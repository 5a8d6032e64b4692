from pathlib import Path
from typing import Iterator

from typing_extensions import Self

from minicel.errors import EngineError


def split_lines(text: str) -> list[str]:
    """Split text into lines on `\\n`, dropping a trailing `\\r` from each
    line and the empty remainder after a final newline."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class Sheet:
    """The raw CSV grid: one comma separated record per line.

    Index 0 is the header line, so a field like `A1` addresses index 1 and
    `row_count` excludes the header.
    """

    def __init__(self, lines: list[str], path: Path | None = None) -> None:
        self.lines = lines
        self.path = path

    @classmethod
    def from_text(cls, text: str) -> Self:
        return cls(split_lines(text))

    @classmethod
    def from_path(cls, path: str | Path) -> Self:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise EngineError(f"IO error: Cannot read the input file `{e}`")
        sheet = cls.from_text(text)
        sheet.path = path
        return sheet

    @property
    def row_count(self) -> int:
        return max(len(self.lines) - 1, 0)

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[tuple[int, str]]:
        return iter(enumerate(self.lines))

    def raw_record(self, row: int) -> list[str]:
        """Return the fields of a line, untrimmed."""
        return self.lines[row].split(",")

    def record(self, row: int) -> list[str]:
        """Return the trimmed fields of a line."""
        return [field.strip() for field in self.raw_record(row)]
