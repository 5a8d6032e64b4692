from minicel.errors import (
    CycleError,
    EngineError,
    MinicelError,
    ParseError,
    TokenizerError,
)
from minicel.interpreter import MinicelEngine, RunContext
from minicel.sheet import Sheet

__version__ = "0.1.0"

__all__ = [
    "CycleError",
    "EngineError",
    "MinicelEngine",
    "MinicelError",
    "ParseError",
    "RunContext",
    "Sheet",
    "TokenizerError",
]
