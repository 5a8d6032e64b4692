import logging
import re
from decimal import Decimal
from pathlib import Path
from typing import Sequence

from openpyxl.utils import column_index_from_string, get_column_letter

from minicel.ast import Number, String

# Same shape as the numbers accepted by the tokenizer
NUMBER_REGEX = re.compile(r"-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


def col_number_from_alpha(alpha: str) -> int:
    """Return the 0-based column index of a column label.

    `A` -> 0, `Z` -> 25, `AA` -> 26. Labels are case-insensitive and have no
    length limit.
    """
    alpha = alpha.upper()
    if len(alpha) <= 3:
        col = column_index_from_string(alpha) - 1
    else:
        # openpyxl stops at ZZZ, longer labels keep folding in base 26
        if not (alpha.isascii() and alpha.isalpha()):
            raise ValueError(f"Invalid column letters {alpha}")
        col = column_index_from_string(alpha[:3]) - 1
        for char in alpha[3:]:
            col = (col + 1) * 26 + ord(char) - ord("A")
    logging.debug(f"Converted column {alpha} to index {col}")
    return col


def col_alpha_from_number(col: int) -> str:
    """Inverse of col_number_from_alpha."""
    return get_column_letter(col + 1)


def parse_string_to_expression(value: str) -> Number | String:
    """Interpret a computed value: a Number if it lexes as one, else a String."""
    if NUMBER_REGEX.fullmatch(value):
        return Number(Decimal(value))
    return String(value)


def compare_records(
    static_record: Sequence[str],
    old_record: Sequence[str],
    new_record: Sequence[str],
) -> list[str]:
    """Merge a new partial update of a row with the previous one.

    `new_record` is the static record with one column replaced. A column that
    this update did not touch (equal to the static value) but that a previous
    update did change keeps the previous value:

        static: ["=print(A1)", "=print(B2)", "=print(C3)"]
        old:    ["=print(A1)", "32",         "=print(C3)"]
        new:    ["=print(A1)", "=print(B2)", "Male"]
        result: ["=print(A1)", "32",         "Male"]
    """
    merged = []
    for static_field, old_field, new_field in zip(
        static_record, old_record, new_record
    ):
        static_field, old_field, new_field = (
            static_field.strip(),
            old_field.strip(),
            new_field.strip(),
        )
        if new_field == static_field and new_field != old_field:
            merged.append(old_field)
        else:
            merged.append(new_field)
    return merged


def check_csv_file_path(path: Path, exists: bool) -> None:
    """Validate a CSV path, raising ValueError with a readable message.

    With `exists=True` the file must already exist. Otherwise a missing file
    is created so it can be written to.
    """
    if exists and not path.exists():
        raise ValueError(f"{path} does not exist")
    if path.exists() and not path.is_file():
        raise ValueError(f"{path} is not a file")
    if path.suffix and path.suffix.lower() != ".csv":
        raise ValueError(f"{path} is not a CSV file")
    if not exists and not path.exists():
        path.touch()
