from decimal import Decimal

import pytest
from minicel.errors import TokenizerError
from minicel.tokenizer import MinicelTokenizer, Token, TokenType


def tokenize(formula: str, line_number: int = 1) -> list[Token]:
    """Helper function to tokenize a formula."""
    tokenizer = MinicelTokenizer(formula, line_number)
    return tokenizer.tokenize()


def assert_tokens(formula: str, expected: list[tuple[TokenType, object]]):
    """Helper function to assert tokens match expected types and values."""
    tokens = tokenize(formula)
    assert len(tokens) == len(expected), (
        f"Expected {len(expected)} tokens, got {len(tokens)}\n"
        f"Expected: {expected}\n"
        f"Got: {[(t.type, t.value) for t in tokens]}"
    )
    for token, (exp_type, exp_value) in zip(tokens, expected):
        assert token.type == exp_type, f"Expected {exp_type}, got {token.type}"
        assert token.value == exp_value, f"Expected {exp_value}, got {token.value}"


class TestMinicelTokenizer:
    def test_function_call(self):
        assert_tokens(
            'add(a1;2.5;"hi")',
            [
                (TokenType.IDENTIFIER, "add"),
                (TokenType.LPAREN, "("),
                (TokenType.IDENTIFIER, "a1"),
                (TokenType.SEMICOLON, ";"),
                (TokenType.NUMBER, Decimal("2.5")),
                (TokenType.SEMICOLON, ";"),
                (TokenType.STRING, "hi"),
                (TokenType.RPAREN, ")"),
            ],
        )

    def test_arrays(self):
        assert_tokens(
            "[1; b2]",
            [
                (TokenType.LBRACKET, "["),
                (TokenType.NUMBER, Decimal("1")),
                (TokenType.SEMICOLON, ";"),
                (TokenType.IDENTIFIER, "b2"),
                (TokenType.RBRACKET, "]"),
            ],
        )

    def test_whitespace_is_skipped(self):
        assert_tokens(
            "  sum ( 1 ;\t2 )  ",
            [
                (TokenType.IDENTIFIER, "sum"),
                (TokenType.LPAREN, "("),
                (TokenType.NUMBER, Decimal("1")),
                (TokenType.SEMICOLON, ";"),
                (TokenType.NUMBER, Decimal("2")),
                (TokenType.RPAREN, ")"),
            ],
        )

    def test_numbers(self):
        assert_tokens("-3", [(TokenType.NUMBER, Decimal("-3"))])
        assert_tokens("1.10", [(TokenType.NUMBER, Decimal("1.10"))])
        assert_tokens("-0.5", [(TokenType.NUMBER, Decimal("-0.5"))])
        # Numbers are exact decimals, the scale is preserved
        token = tokenize("1.10")[0]
        assert str(token.value) == "1.10"

    def test_identifiers(self):
        assert_tokens("_my_var2", [(TokenType.IDENTIFIER, "_my_var2")])
        assert_tokens("AA10", [(TokenType.IDENTIFIER, "AA10")])
        # A digit always starts a number, never an identifier
        assert_tokens(
            "1a",
            [(TokenType.NUMBER, Decimal("1")), (TokenType.IDENTIFIER, "a")],
        )

    def test_strings(self):
        assert_tokens('"hello world"', [(TokenType.STRING, "hello world")])
        assert_tokens('""', [(TokenType.STRING, "")])
        # No escape sequences
        assert_tokens(
            r'"a\"',
            [(TokenType.STRING, "a\\")],
        )

    def test_unclosed_string(self):
        with pytest.raises(TokenizerError, match="String is not closed"):
            tokenize('print("hi)')

    def test_invalid_numbers(self):
        with pytest.raises(TokenizerError, match="Invalid float number"):
            tokenize("1.2.3")
        with pytest.raises(TokenizerError, match="Invalid negative number"):
            tokenize("1-2")
        with pytest.raises(TokenizerError, match="Invalid negative number"):
            tokenize("--1")
        with pytest.raises(TokenizerError, match="Invalid number"):
            tokenize("-")

    def test_unknown_character(self):
        with pytest.raises(TokenizerError, match="Unknown character: #"):
            tokenize("print(#)")
        with pytest.raises(TokenizerError, match="Unknown character: ,"):
            tokenize("sum(1,2)")

    def test_error_carries_line_number(self):
        with pytest.raises(TokenizerError) as exc_info:
            tokenize('"open', line_number=7)
        assert exc_info.value.line_number == 7
        assert str(exc_info.value) == 'TokenizerError: "String is not closed" at line: 7'
