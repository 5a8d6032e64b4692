class MinicelError(Exception):
    """Base class for every error raised while evaluating a sheet.

    Carries a human readable message and the 1-based line number of the
    offending cell.
    """

    kind = "Minicel"

    def __init__(self, message: str, line_number: int = 0):
        super().__init__(message)
        self.message = message
        self.line_number = line_number

    def __str__(self) -> str:
        return f'{self.kind}Error: "{self.message}" at line: {self.line_number}'


class TokenizerError(MinicelError):
    kind = "Tokenizer"


class ParseError(MinicelError):
    kind = "Parse"


class EngineError(MinicelError):
    kind = "Engine"


class CycleError(EngineError):
    """A cell depends on itself, directly or through other cells."""


class BuiltinError(Exception):
    """Raised by builtin functions, wrapped into an EngineError by the engine."""
