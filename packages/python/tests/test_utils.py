from decimal import Decimal

import pytest

from minicel.ast import Number, String
from minicel.utils import (
    check_csv_file_path,
    col_alpha_from_number,
    col_number_from_alpha,
    compare_records,
    parse_string_to_expression,
)


class TestColumns:
    def test_col_number_from_alpha(self):
        assert col_number_from_alpha("A") == 0
        assert col_number_from_alpha("Z") == 25
        assert col_number_from_alpha("AA") == 26
        assert col_number_from_alpha("AB") == 27

    def test_lowercase_labels(self):
        assert col_number_from_alpha("a") == 0
        assert col_number_from_alpha("aa") == 26

    def test_round_trip_label(self):
        assert col_alpha_from_number(0) == "A"
        assert col_alpha_from_number(26) == "AA"

    def test_labels_longer_than_three_letters(self):
        assert col_number_from_alpha("ZZZ") == 18277
        assert col_number_from_alpha("AAAA") == 18278
        assert col_number_from_alpha("abcd") == 19009
        assert col_number_from_alpha("ABCDE") == 494264

    def test_invalid_label(self):
        with pytest.raises(ValueError):
            col_number_from_alpha("A1B2")
        with pytest.raises(ValueError):
            col_number_from_alpha("")


class TestParseStringToExpression:
    def test_numbers(self):
        for text in ["5", "-2.5", "0.10", "3."]:
            value = parse_string_to_expression(text)
            assert isinstance(value, Number), text
            assert value.value == Decimal(text)

    def test_strings(self):
        for text in ["abc", "", "1, 2", "1E3", "NaN", " 1", "--1"]:
            value = parse_string_to_expression(text)
            assert isinstance(value, String), text
            assert value.value == text


class TestCompareRecords:
    def test_keeps_previous_updates(self):
        static = ["=print(A1)", "=print(B2)", "=print(C3)", "=print(D4)"]
        old = ["=print(A1)", "32", "=print(C3)", "=print(D4)"]
        new = ["=print(A1)", "=print(B2)", "Male", "=print(D4)"]
        assert compare_records(static, old, new) == [
            "=print(A1)",
            "32",
            "Male",
            "=print(D4)",
        ]

    def test_independent_columns(self):
        static = ["=f(A1)", "=f(B1)"]
        old = ["X", "=f(B1)"]
        new = ["=f(A1)", "Y"]
        assert compare_records(static, old, new) == ["X", "Y"]

    def test_unchanged_recompute_preserves_old_value(self):
        static = ["=a()", "=b()"]
        old = ["=a()", "V1"]
        # Recomputing column 0 produced the static text again
        new = ["=a()", "=b()"]
        assert compare_records(static, old, new) == ["=a()", "V1"]

    def test_new_value_wins_over_old(self):
        assert compare_records(["=x()"], ["1"], ["2"]) == ["2"]

    def test_fields_are_trimmed(self):
        assert compare_records([" a "], [" b "], ["a"]) == ["b"]


class TestCheckCsvFilePath:
    def test_existing_input(self, tmp_path):
        path = tmp_path / "in.csv"
        path.write_text("a\n")
        check_csv_file_path(path, exists=True)

    def test_missing_input(self, tmp_path):
        with pytest.raises(ValueError, match="does not exist"):
            check_csv_file_path(tmp_path / "missing.csv", exists=True)

    def test_directory(self, tmp_path):
        directory = tmp_path / "dir.csv"
        directory.mkdir()
        with pytest.raises(ValueError, match="is not a file"):
            check_csv_file_path(directory, exists=True)

    def test_wrong_extension(self, tmp_path):
        path = tmp_path / "in.txt"
        path.write_text("a\n")
        with pytest.raises(ValueError, match="is not a CSV file"):
            check_csv_file_path(path, exists=True)

    def test_uppercase_extension(self, tmp_path):
        path = tmp_path / "IN.CSV"
        path.write_text("a\n")
        check_csv_file_path(path, exists=True)

    def test_output_is_created(self, tmp_path):
        path = tmp_path / "out.csv"
        check_csv_file_path(path, exists=False)
        assert path.is_file()
