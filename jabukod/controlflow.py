"""Unique label sets for structured control flow."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LoopKind(Enum):
    """The kinds of loop the language has."""

    WHILE = "while"
    FOR = "for"
    FOREACH = "foreach"


@dataclass(frozen=True)
class IfLabels:
    """Labels of an if statement."""

    else_label: str
    end: str


@dataclass(frozen=True)
class LoopLabels:
    """Labels of one loop, with the jump targets of loop statements."""

    kind: LoopKind
    body: str
    end: str
    start: Optional[str] = None
    init: Optional[str] = None
    update: Optional[str] = None
    step: Optional[str] = None

    @property
    def break_target(self) -> str:
        """Where a break jumps to."""
        return self.end

    @property
    def continue_target(self) -> str:
        """Where a continue jumps to."""
        if self.kind is LoopKind.FOR:
            return self.update
        if self.kind is LoopKind.FOREACH:
            return self.step
        return self.start

    @property
    def redo_target(self) -> str:
        """Where a redo jumps to."""
        return self.body

    @property
    def restart_target(self) -> str:
        """Where a restart jumps to."""
        if self.kind is LoopKind.WHILE:
            return self.start
        return self.init


class LabelFactory:
    """Hands out label sets numbered uniquely."""

    def __init__(self) -> None:
        self._counter = 0

    def next_unique(self) -> str:
        """The next four digit suffix."""
        unique = f"{self._counter:04d}"
        self._counter += 1
        return unique

    def if_labels(self) -> IfLabels:
        unique = self.next_unique()
        return IfLabels(else_label=f"__else_{unique}", end=f"__if_end_{unique}")

    def while_labels(self) -> LoopLabels:
        unique = self.next_unique()
        return LoopLabels(
            kind=LoopKind.WHILE,
            start=f"__while_start_{unique}",
            body=f"__while_body_{unique}",
            end=f"__while_end_{unique}",
        )

    def for_labels(self) -> LoopLabels:
        unique = self.next_unique()
        return LoopLabels(
            kind=LoopKind.FOR,
            init=f"__for_init_{unique}",
            start=f"__for_start_{unique}",
            body=f"__for_body_{unique}",
            update=f"__for_update_{unique}",
            end=f"__for_end_{unique}",
        )

    def foreach_labels(self) -> LoopLabels:
        unique = self.next_unique()
        return LoopLabels(
            kind=LoopKind.FOREACH,
            init=f"__foreach_init_{unique}",
            body=f"__foreach_body_{unique}",
            step=f"__foreach_step_{unique}",
            end=f"__foreach_end_{unique}",
        )