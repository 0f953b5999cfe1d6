"""A single line of generated assembly."""

from __future__ import annotations

from dataclasses import dataclass

from .opcodes import CALL, flip_jump_sign, is_jump


@dataclass
class Instruction:
    """An opcode (or a label) with up to two operands and a comment."""

    opcode: str
    arg1: str = ""
    arg2: str = ""
    comment: str = ""

    def render(self) -> str:
        """The instruction as an assembly source line, without indentation."""
        text = self.opcode
        if self.arg1:
            text += f" {self.arg1}"
            if self.arg2:
                text += f", {self.arg2}"
        if self.comment:
            text += f" #{self.comment}"
        return text

    def __str__(self) -> str:
        return self.render()

    def add_comment(self, comment: str) -> None:
        """Append a comment to the instruction."""
        self.comment += f"# {comment} "

    def flip_jump_sign(self) -> None:
        """Swap a signed jump for its unsigned counterpart; other opcodes stay."""
        if is_jump(self.opcode):
            self.opcode = flip_jump_sign(self.opcode)

    def set_call_target(self, target: str) -> None:
        """Redirect a call to another function; other opcodes stay."""
        if self.opcode == CALL:
            self.arg1 = target