import logging
from typing import List, Optional

from minicel.errors import ParseError
from .tokenizer import MinicelTokenizer, Token, TokenType
from .ast import (
    Array,
    Ast,
    Boolean,
    Expression,
    Field,
    FunctionCall,
    Number,
    String,
)


# Helper function to parse a formula body into an AST.
def parse_formula(formula: str, line_number: int = 0) -> Ast:
    """Helper function to parse a formula body (without `=`) into an AST."""
    tokens = MinicelTokenizer(formula, line_number).tokenize()
    return MinicelParser(tokens, line_number).parse()


def describe(token: Optional[Token]) -> str:
    return token.type.name if token is not None else "EOF"


class MinicelParser:
    def __init__(self, tokens: List[Token], line_number: int = 0):
        self.tokens = tokens
        self.line_number = line_number
        self.current = 0

    def error(self, message: str) -> ParseError:
        logging.error(message)
        return ParseError(message, self.line_number)

    def parse(self) -> Ast:
        """Parse tokens into an AST rooted at a single function call."""
        self.current = 0
        function = self.parse_function_call()
        if (token := self.peek()) is not None:
            raise self.error(
                f"Expected end of formula after `{function.name}(...)`, "
                f"found {describe(token)}"
            )
        return Ast(function)

    def peek(self, offset: int = 0) -> Optional[Token]:
        """Look ahead without consuming; offset 1 is the second token."""
        index = self.current + offset
        if index >= len(self.tokens):
            return None
        return self.tokens[index]

    def read(self) -> Token:
        """Consume and return the current token."""
        if self.current >= len(self.tokens):
            raise self.error("Unexpected end of formula")
        tok = self.tokens[self.current]
        self.current += 1
        return tok

    def expect(self, type: TokenType, what: str) -> Token:
        """Read the current token if it has the given type, otherwise error."""
        token = self.peek()
        if token is None or token.type != type:
            raise self.error(f"Expected {what}, found {describe(token)}")
        self.current += 1
        return token

    def parse_expression(self) -> Expression:
        token = self.peek()
        if token is None:
            raise self.error("Expected expression, found EOF")

        if token.type == TokenType.IDENTIFIER:
            next_token = self.peek(1)
            if next_token is not None and next_token.type == TokenType.LPAREN:
                return self.parse_function_call()
            if token.value in ("true", "false"):
                self.read()
                return Boolean(token.value == "true")
            return self.parse_field()

        if token.type == TokenType.NUMBER:
            self.read()
            return Number(token.value)

        if token.type == TokenType.STRING:
            self.read()
            return String(token.value)

        if token.type == TokenType.LBRACKET:
            return self.parse_array()

        raise self.error(f"Expected expression, found {describe(token)}")

    def parse_function_call(self) -> FunctionCall:
        """Parse `name(arg; arg; ...)`."""
        name = self.expect(TokenType.IDENTIFIER, "identifier").value
        self.expect(TokenType.LPAREN, "left parenthesis")
        arguments = self._parse_sequence(TokenType.RPAREN, "right parenthesis")
        logging.debug(f"Parsed function call {name} with {len(arguments)} arguments")
        return FunctionCall(name, arguments, self.line_number)

    def parse_array(self) -> Array:
        """Parse an array literal like [1; 2; a1]."""
        self.expect(TokenType.LBRACKET, "left bracket")
        return Array(self._parse_sequence(TokenType.RBRACKET, "right bracket"))

    def _parse_sequence(
        self, closer: TokenType, closer_name: str
    ) -> "tuple[Expression, ...]":
        # Semicolons are separators but are not enforced: `f(1 2)`, `f(;1;;2;)`
        # are all accepted.
        elements = []
        while (token := self.peek()) is not None:
            if token.type == closer:
                self.read()
                return tuple(elements)
            if token.type == TokenType.SEMICOLON:
                self.read()
                continue
            elements.append(self.parse_expression())
        raise self.error(f"Expected {closer_name}, found EOF")

    def parse_field(self) -> Field:
        """Parse a field such as `a1` or `AB20` into column and row."""
        identifier = self.read().value
        split = 0
        while split < len(identifier) and identifier[split].isalpha():
            split += 1
        column, row = identifier[:split], identifier[split:]

        if not (row.isascii() and row.isdigit()):
            raise self.error(
                f"Invalid field identifier `{identifier}`, expected a row number "
                f"after the column `{column}` but found `{row}`"
            )
        if int(row) == 0:
            raise self.error(
                f"Invalid field identifier `{identifier}`, "
                "row number starts from 1, found 0"
            )
        return Field(column=column, row=int(row), value=identifier)
