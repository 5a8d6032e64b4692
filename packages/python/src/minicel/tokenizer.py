from decimal import Decimal, InvalidOperation
from enum import Enum, auto
from typing import Any, List, NamedTuple

from minicel.errors import TokenizerError

DIGITS = "0123456789"


class TokenType(Enum):
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()
    SEMICOLON = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()


class Token(NamedTuple):
    type: TokenType
    value: Any


PUNCTUATION = {
    ";": TokenType.SEMICOLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
}


def is_identifier_start(char: str) -> bool:
    return char == "_" or (char.isascii() and char.isalpha())


class MinicelTokenizer:
    """Tokenizer for the body of a formula cell (without the leading `=`)."""

    def __init__(self, formula: str, line_number: int = 0):
        self.formula = formula.strip()
        self.line_number = line_number
        self.pos = 0
        self.length = len(self.formula)

    def tokenize(self) -> List[Token]:
        """Tokenize the formula and return list of tokens."""
        tokens = []
        while self.pos < self.length:
            char = self.formula[self.pos]

            if char.isspace():
                self.pos += 1
                continue
            elif char in PUNCTUATION:
                tokens.append(Token(PUNCTUATION[char], char))
                self.pos += 1
            elif char == '"':
                tokens.append(self._tokenize_string())
            elif char in DIGITS or char == "-":
                tokens.append(self._tokenize_number())
            elif is_identifier_start(char):
                tokens.append(self._tokenize_identifier())
            else:
                raise TokenizerError(f"Unknown character: {char}", self.line_number)

        return tokens

    def _tokenize_string(self) -> Token:
        """Tokenize a string literal. There are no escape sequences, the
        string ends at the next double quote."""
        self.pos += 1  # Skip opening quote
        end = self.formula.find('"', self.pos)
        if end == -1:
            raise TokenizerError("String is not closed", self.line_number)
        value = self.formula[self.pos : end]
        self.pos = end + 1
        return Token(TokenType.STRING, value)

    def _tokenize_number(self) -> Token:
        """Tokenize an exact decimal number, optionally negative."""
        start = self.pos
        seen_decimal = False

        while self.pos < self.length:
            char = self.formula[self.pos]

            if char in DIGITS:
                self.pos += 1
            elif char == ".":
                if seen_decimal:
                    raise TokenizerError("Invalid float number", self.line_number)
                seen_decimal = True
                self.pos += 1
            elif char == "-":
                # Only allowed as the very first character
                if self.pos != start:
                    raise TokenizerError("Invalid negative number", self.line_number)
                self.pos += 1
            else:
                break

        value = self.formula[start : self.pos]
        try:
            return Token(TokenType.NUMBER, Decimal(value))
        except InvalidOperation:
            raise TokenizerError(f"Invalid number `{value}`", self.line_number)

    def _tokenize_identifier(self) -> Token:
        """Tokenize an identifier (function name, field or boolean)."""
        start = self.pos
        while self.pos < self.length:
            char = self.formula[self.pos]
            if not (is_identifier_start(char) or char in DIGITS):
                break
            self.pos += 1

        return Token(TokenType.IDENTIFIER, self.formula[start : self.pos])


def tokenize(formula: str, line_number: int = 0) -> List[Token]:
    """Helper function to tokenize a formula body."""
    return MinicelTokenizer(formula, line_number).tokenize()
