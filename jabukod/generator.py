"""Generation of a complete assembly program from a syntax tree."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .astnode import ASTNode
from .instruction import Instruction
from .nodedata import FunctionData
from .statements import NodeGenerators
from .symbols import GlobalSymbols, StorageSpecifier, Variable
from .transform import (
    default_value_initializer,
    identifier_to_label,
    is_label,
    type_to_directive,
)


@dataclass
class GeneratorOptions:
    """Settings that shape the generated program."""

    output_file: str
    use_rdtsc: bool = False
    annotate_obfuscations: bool = False


class Generator:
    """Turns a checked syntax tree into x86-64 assembly."""

    def __init__(
        self, options: GeneratorOptions, root: ASTNode, symbols: GlobalSymbols
    ) -> None:
        if options.output_file.endswith("/"):
            raise ValueError(f"{options.output_file} is a path")
        self.options = options
        self.root = root
        self.symbols = symbols
        self.instructions: list[Instruction] = []
        self.current_function: Optional[FunctionData] = None
        self._nodes = NodeGenerators(self)

    def generate(self) -> None:
        """Emit the instructions of the whole program."""
        self.generate_node(self.root)

    def generate_node(self, node: ASTNode) -> None:
        """Emit the instructions of one node and its subtree."""
        self._nodes.generate(node)

    def emit(self, *args: str) -> Instruction:
        """Append an instruction built from an opcode and its operands."""
        instruction = Instruction(*args)
        self.instructions.append(instruction)
        return instruction

    def set_current_function(self, data: FunctionData) -> None:
        """Mark the function whose body is being generated."""
        self.current_function = data

    def reset_current_function(self) -> None:
        """Leave the current function."""
        self.current_function = None

    def is_in_main(self) -> bool:
        """True while generating the body of main."""
        return self.current_function is not None and self.current_function.name == "main"

    # Output

    @staticmethod
    def _variable_line(variable: Variable) -> str:
        return "\t".join(
            (
                identifier_to_label(variable.name),
                type_to_directive(variable.type),
                default_value_initializer(variable),
            )
        )

    def _data_section(self) -> Iterable[str]:
        yield "\t.data"
        if self.options.use_rdtsc:
            yield "__rdtsc:\t.quad\t0"
        for variable in self.symbols.variables:
            if variable.specifier is not StorageSpecifier.CONST:
                yield self._variable_line(variable)
        yield ""

    def _rodata_section(self) -> Iterable[str]:
        yield "\t.section .rodata"
        for variable in self.symbols.variables:
            if variable.specifier is StorageSpecifier.CONST:
                yield self._variable_line(variable)
        for item in self.symbols.enum_items:
            yield self._variable_line(item)
        yield ""

    def _text_section(self) -> Iterable[str]:
        yield "\t.text"
        yield "\t.globl _start"
        yield "_start:"
        if self.options.use_rdtsc:
            yield "\trdtsc"
            yield "\tmovq %rax, __rdtsc(%rip)"
        yield "\tmovq $1, %r10"
        yield "\tjmp main"

        for instruction in self.instructions:
            indent = "" if is_label(instruction) else "\t"
            yield indent + instruction.render()

        yield ""
        if self.options.use_rdtsc:
            yield "\trdtsc"
            yield "\tmovq __rdtsc(%rip), %rbx"
            yield "\tsubq %rbx, %rax"
            yield "\tmovq %rax, %rdi"
            yield "\tcall writeInt"
        yield "\tmov $0, %rdi"
        yield "\tmov $60, %rax"
        yield "\tsyscall"

    def render(self) -> str:
        """The complete assembly source: data, read-only data and text sections."""
        lines = [*self._data_section(), *self._rodata_section(), *self._text_section()]
        return "\n".join(lines) + "\n"

    def write(self) -> Path:
        """Write the assembly source to ``<output_file>.s`` and return its path."""
        path = Path(f"{self.options.output_file}.s")
        try:
            path.write_text(self.render(), encoding="utf-8")
        except OSError as error:
            raise OSError(f"failed to open file {path}") from error
        return path