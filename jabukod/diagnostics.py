"""Reporting of lexical, syntax and semantic errors."""

from __future__ import annotations

import sys
from enum import Enum
from typing import Optional, TextIO

BOLD = "\033[1m"
DIM = "\033[2m"
DEFAULT = "\033[0m"
RED = "\033[31m"
YELLOW = "\033[33m"
MAGENTA = "\033[35m"
CYAN = "\033[36m"
ORANGE = "\033[38;5;208m"


class Phase(Enum):
    """Which phase parser errors belong to."""

    SYNTAX = "syntax"
    SEMANTIC = "semantic"


class ErrorReporter:
    """Writes coloured error messages and counts them."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream if stream is not None else sys.stderr
        self.phase = Phase.SYNTAX
        self.lexical_errors = 0
        self.syntax_errors = 0

    def _location(self, line: int, column: int, message: str) -> str:
        return f"at line {BOLD}{line}:{column}{DEFAULT}\t{DIM}{message}{DEFAULT}\n"

    def lexical_error(self, line: int, column: int, message: str) -> None:
        """Report an error found by the lexer."""
        self.lexical_errors += 1
        self.stream.write(f"{BOLD}{MAGENTA}Lexical error\t{DEFAULT}")
        self.stream.write(self._location(line, column, message))
        self.stream.flush()

    def syntax_error(self, line: int, column: int, message: str) -> None:
        """Report a parser error, labelled by the current phase."""
        self.syntax_errors += 1
        if self.phase is Phase.SYNTAX:
            header = f"{RED}Syntax error\t"
        else:
            header = f"{ORANGE}Semantic error\t"
        self.stream.write(f"{BOLD}{header}{DEFAULT}")
        self.stream.write(self._location(line, column, message))
        self.stream.flush()

    def set_semantic_phase(self) -> None:
        """Label further parser errors as semantic."""
        self.phase = Phase.SEMANTIC