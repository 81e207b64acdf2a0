"""
Bach Diagnostics - Error kinds reported by name analysis and the default sink.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DiagnosticKind(Enum):
    MULTIPLY_DECLARED = "Identifier multiply-declared"
    UNDECLARED_IDENTIFIER = "Identifier undeclared"
    INVALID_STRUCT_TYPE_NAME = "Name of struct type invalid"
    NON_FUNCTION_DECLARED_VOID = "Non-function declared void"
    INVALID_STRUCT_FIELD_NAME = "Name of struct field invalid"
    NON_STRUCT_COLON_ACCESS = "Colon-access of non-struct type"

    @property
    def message(self) -> str:
        return self.value


@dataclass
class Diagnostic:
    """A semantic error found during analysis."""

    kind: DiagnosticKind
    line: Optional[int] = None
    col: Optional[int] = None

    @property
    def message(self) -> str:
        return self.kind.message

    def __str__(self) -> str:
        location = ""
        if self.line is not None and self.col is not None:
            location = f"(line {self.line}, col {self.col}) "
        elif self.line is not None:
            location = f"(line {self.line}) "
        return f"{location}{self.message}"


class DiagnosticCollector:
    """
    Sink that keeps every reported diagnostic, in report order.

    Any object with a matching report() method can stand in for it.
    """

    def __init__(self):
        self.diagnostics: list[Diagnostic] = []

    def report(self, line: int, col: int, kind: DiagnosticKind) -> None:
        self.diagnostics.append(Diagnostic(kind, line, col))

    def __len__(self) -> int:
        return len(self.diagnostics)
