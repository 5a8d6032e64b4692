import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from minicel.ast import Array, Ast, Expression, Field, FunctionCall, Value
from minicel.errors import BuiltinError, CycleError, EngineError
from minicel.functions import call_builtin, suggest_builtin
from minicel.parser import MinicelParser
from minicel.sheet import Sheet
from minicel.tokenizer import MinicelTokenizer
from minicel.utils import (
    col_alpha_from_number,
    col_number_from_alpha,
    compare_records,
    parse_string_to_expression,
)
from minicel.writer import RecordWriter


def _format_cell(row: int, col: int) -> str:
    return f"{col_alpha_from_number(col)}{row}"


class EvaluationStack:
    """Tracks the cells currently being evaluated, to detect cycles."""

    def __init__(self):
        self.stack: List[Tuple[int, int]] = []

    def push(self, row: int, col: int) -> None:
        self.stack.append((row, col))

    def pop(self) -> None:
        self.stack.pop()

    def contains(self, row: int, col: int) -> bool:
        return (row, col) in self.stack

    def format_cycle_path(self, row: int, col: int) -> str:
        """Format the evaluation stack into a readable cycle path."""
        path = [_format_cell(r, c) for r, c in self.stack]
        path.append(_format_cell(row, col))
        return " -> ".join(path)

    @contextmanager
    def visit(self, row: int, col: int, line_number: int) -> Iterator[None]:
        if self.contains(row, col):
            cycle_path = self.format_cycle_path(row, col)
            raise CycleError(
                f"Circular reference detected: {cycle_path}", line_number
            )
        self.push(row, col)
        try:
            yield
        finally:
            self.pop()


@dataclass
class RunContext:
    """State of a single evaluation pass over a sheet."""

    # Row index -> full record reflecting every column edit applied so far
    pending: dict[int, list[str]] = field(default_factory=dict)
    stack: EvaluationStack = field(default_factory=EvaluationStack)


class MinicelEngine:
    def __init__(
        self, sheet: Sheet, flush_every: int = 100, detect_cycles: bool = True
    ):
        self.sheet = sheet
        self.flush_every = flush_every
        self.detect_cycles = detect_cycles

    @property
    def rows(self) -> int:
        return self.sheet.row_count

    def get_record(self, row: int) -> list[str]:
        """Return the static record of a row, fields trimmed."""
        logging.info(f"Getting record Row: {row}")
        if row > self.rows:
            raise EngineError(
                f"Invalid row number {row}, the rows is {self.rows}", row + 1
            )
        return self.sheet.record(row)

    def get_field(
        self, col: int, row: int, line_number: int, context: RunContext
    ) -> str:
        """Return the value of a cell.

        A row with pending updates answers from its snapshot as is. Otherwise
        the static field is evaluated when it holds a formula.

        Nothing is cached: evaluating the same cell twice does the work twice.
        """
        logging.info(f"Getting field Col: {col}, Row: {row}")

        updated = context.pending.get(row)
        if updated is not None:
            logging.debug(f"Found the record as an updated record: {updated}")
            if col >= len(updated):
                raise EngineError(
                    f"CSV error: Record {row} has only {len(updated)} columns, "
                    f"cannot get column {col}",
                    line_number,
                )
            return updated[col]

        record = self.get_record(row)
        if col >= len(record):
            raise EngineError(
                f"CSV error: Record {row} has only {len(record)} columns, "
                f"cannot get column {col}",
                row + 1,
            )
        return self.evaluate_cell(record[col], row, col, context)

    def evaluate_cell(
        self, text: str, row: int, col: int, context: RunContext
    ) -> str:
        """Evaluate the text of the cell at (row, col)."""
        if not self.detect_cycles:
            return self.execute_field(text, row + 1, context)
        with context.stack.visit(row, col, row + 1):
            return self.execute_field(text, row + 1, context)

    def execute_field(
        self, text: str, line_number: int, context: Optional[RunContext] = None
    ) -> str:
        """Evaluate a cell's text. Plain data is returned verbatim."""
        logging.info(f'Executing field "{text}" at line {line_number}')
        if not text.startswith("="):
            return text
        if context is None:
            context = RunContext()

        tokens = MinicelTokenizer(text.lstrip("=").strip(), line_number).tokenize()
        logging.debug(f"Field tokens: {tokens}")
        ast = MinicelParser(tokens, line_number).parse()
        ast = self.resolve(ast, line_number, context)
        return self.function_call(ast.function, context)

    def resolve(self, ast: Ast, line_number: int, context: RunContext) -> Ast:
        """First pass: replace every field reference with its concrete value.

        Function calls are left in place, only their arguments are resolved.
        """
        return ast.map_leaves(
            lambda leaf: self._resolve_leaf(leaf, line_number, context)
        )

    def _resolve_leaf(
        self, leaf: Expression, line_number: int, context: RunContext
    ) -> Expression:
        if not isinstance(leaf, Field):
            return leaf
        try:
            col = col_number_from_alpha(leaf.column)
        except ValueError:
            raise EngineError(
                f"Invalid column `{leaf.column}` in field `{leaf.value}`",
                line_number,
            )
        logging.info(f"Resolving field Col: {leaf.column}, Row: {leaf.row}")
        value = self.get_field(col, leaf.row, line_number, context)
        return parse_string_to_expression(value)

    def function_call(self, call: FunctionCall, context: RunContext) -> str:
        """Second pass: evaluate a resolved call tree bottom-up."""
        logging.info(f"Running function call: {call.name}")
        arguments = [self._reduce(arg, context) for arg in call.arguments]

        try:
            result = call_builtin(call.name, arguments)
        except BuiltinError as e:
            logging.error(f"Builtin function error: {e}")
            raise EngineError(f"Builtin function error: {e}", call.line_number)

        if result is None:
            message = f"Unknown function {call.name}"
            if suggestion := suggest_builtin(call.name):
                message += f", did you mean `{suggestion}`?"
            raise EngineError(message, call.line_number)

        logging.debug(f"Builtin function returned: {result}")
        return result

    def _reduce(self, expr: Expression, context: RunContext) -> Value:
        if isinstance(expr, FunctionCall):
            return parse_string_to_expression(self.function_call(expr, context))
        if isinstance(expr, Array):
            return Array(
                tuple(self._reduce(element, context) for element in expr.elements)
            )
        assert not isinstance(expr, Field), "resolve() must run before function_call()"
        return expr

    def update_field(
        self, col: int, row: int, value: str, line_number: int, context: RunContext
    ) -> None:
        """Store the new value of a cell in the pending snapshot of its row."""
        logging.debug(f"Updating field Col: {col}, Row: {row} with value: {value}")

        static_record = self.get_record(row)
        if col >= len(static_record):
            raise EngineError(
                f"CSV error: Record {row} has only {len(static_record)} columns, "
                f"cannot update column {col + 1}",
                line_number,
            )

        new_record = list(static_record)
        new_record[col] = value

        old_record = context.pending.get(row)
        if old_record is None:
            context.pending[row] = new_record
        else:
            context.pending[row] = compare_records(
                static_record, old_record, new_record
            )

    def evaluate_rows(
        self, context: Optional[RunContext] = None
    ) -> Iterator[tuple[int, list[str]]]:
        """Evaluate the sheet row by row, yielding (row, output record).

        Empty lines are skipped.
        """
        if context is None:
            context = RunContext()

        for row, line in self.sheet:
            if not line:
                continue
            for col, raw in enumerate(line.split(",")):
                value = self.evaluate_cell(raw.strip(), row, col, context)
                if value != raw:
                    self.update_field(col, row, value, row + 1, context)
            yield row, context.pending.get(row, line.split(","))

    def run(self, out_file: str | Path) -> None:
        """Evaluate the whole sheet and write the result to `out_file`."""
        with RecordWriter.open(out_file, flush_every=self.flush_every) as writer:
            for row, record in self.evaluate_rows():
                writer.write(record, row)
