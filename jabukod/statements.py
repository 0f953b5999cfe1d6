"""Code generation for statements, control flow and functions."""

from __future__ import annotations

from typing import Any, Callable, Optional

from .astnode import ASTNode
from .controlflow import LabelFactory, LoopLabels
from .expressions import ExpressionGenerator
from .nodekind import NodeKind
from .opcodes import (
    CMP,
    COMISS,
    INCQ,
    JE,
    JMP,
    JZ,
    LEA,
    MOV,
    MOVQ,
    MOVSS,
    POP,
    PUSH,
    R12,
    RAX,
    RBP,
    RBX,
    RDI,
    RSI,
    STDOUT,
    SYSCALL,
    SYSCALL_WRITE,
    TEST,
    XMM6,
)
from .snippets import (
    FLOAT_DECLARATION,
    STRING_DECLARATION,
    backup_scratch_registers,
    calculate_string_length,
    declare_default,
    epilog,
    exit_sequence,
    prolog,
    push_register,
    restore_scratch_registers,
)
from .symbols import DEFAULT_FLOAT, DEFAULT_STRING, Type
from .transform import (
    condition_to_jump,
    identifier_to_label,
    int_to_immediate,
    is_register,
    list_access_to_location,
    variable_to_location,
)

_COMPARISONS = frozenset(
    {
        NodeKind.LESS,
        NodeKind.LESS_EQUAL,
        NodeKind.GREATER,
        NodeKind.GREATER_EQUAL,
        NodeKind.EQUAL,
        NodeKind.NOT_EQUAL,
    }
)

_ARITHMETIC = (
    NodeKind.ADDITION,
    NodeKind.SUBTRACTION,
    NodeKind.MULTIPLICATION,
    NodeKind.BIT_OR,
    NodeKind.BIT_XOR,
    NodeKind.BIT_AND,
    NodeKind.OR,
    NodeKind.AND,
)

_CONVERSIONS = (
    NodeKind.INT2FLOAT,
    NodeKind.FLOAT2INT,
    NodeKind.BOOL2INT,
    NodeKind.INT2BOOL,
    NodeKind.FLOAT2BOOL,
    NodeKind.BOOL2FLOAT,
)

_LOOP_JUMPS = (NodeKind.BREAK, NodeKind.CONTINUE, NodeKind.REDO, NodeKind.RESTART)


class NodeGenerators:
    """Emits instructions for every kind of syntax tree node.

    The generator passed in provides ``emit``, ``instructions``,
    ``generate_node``, ``symbols``, ``current_function``, ``options``
    (with ``use_rdtsc`` and ``annotate_obfuscations``),
    ``set_current_function``, ``reset_current_function`` and ``is_in_main``.
    """

    def __init__(self, generator: Any) -> None:
        self.gen = generator
        self.expressions = ExpressionGenerator(generator)
        self.labels = LabelFactory()
        self._loops: list[LoopLabels] = []
        self._write_count = 0

        expr = self.expressions
        handlers: dict[NodeKind, Callable[[ASTNode], None]] = {
            NodeKind.PROGRAM: self.generate_program,
            NodeKind.FUNCTION: self.generate_function,
            NodeKind.WRITE: self.generate_write,
            NodeKind.VARIABLE: expr.generate_variable,
            NodeKind.LITERAL: expr.generate_literal,
            NodeKind.ASSIGNMENT: expr.generate_assignment,
            NodeKind.VARIABLE_DEFINITION: self.generate_variable_definition,
            NodeKind.VARIABLE_DECLARATION: self.generate_variable_declaration,
            NodeKind.LIST: lambda node: None,
            NodeKind.LIST_ACCESS: expr.generate_list_access,
            NodeKind.DIVISION: expr.generate_division,
            NodeKind.MODULO: expr.generate_modulo,
            NodeKind.LEFT_SHIFT: expr.generate_shift,
            NodeKind.RIGHT_SHIFT: expr.generate_shift,
            NodeKind.UNARY_MINUS: expr.generate_unary_minus,
            NodeKind.BIT_NOT: expr.generate_bit_not,
            NodeKind.NOT: expr.generate_not,
            NodeKind.IF: self.generate_if,
            NodeKind.BODY: self.generate_body,
            NodeKind.WHILE: self.generate_while,
            NodeKind.FOR: self.generate_for,
            NodeKind.FOR_HEADER1: self._generate_first_child,
            NodeKind.FOR_HEADER2: self._generate_for_condition,
            NodeKind.FOR_HEADER3: self._generate_first_child,
            NodeKind.FOREACH: self.generate_foreach,
            NodeKind.FUNCTION_CALL: expr.generate_function_call,
            NodeKind.RETURN: self.generate_return,
            NodeKind.EXIT: self.generate_exit,
        }
        handlers.update({kind: expr.generate_arithmetic for kind in _ARITHMETIC})
        handlers.update({kind: expr.generate_comparison for kind in _COMPARISONS})
        handlers.update({kind: expr.generate_conversion for kind in _CONVERSIONS})
        handlers.update({kind: self.generate_loop_jump for kind in _LOOP_JUMPS})
        self._handlers = handlers

    def generate(self, node: ASTNode) -> None:
        """Emit the code of a node; kinds without code emit nothing."""
        handler = self._handlers.get(node.kind)
        if handler is not None:
            handler(node)

    def _generate_children(self, node: ASTNode) -> None:
        for child in node.children:
            self.gen.generate_node(child)

    def _generate_first_child(self, node: ASTNode) -> None:
        self.gen.generate_node(node.child(0))

    def _generate_for_condition(self, node: ASTNode) -> None:
        self._evaluate_condition(node.child(0), self._current_loop().break_target)

    # Program structure

    def generate_program(self, node: ASTNode) -> None:
        """Emit every function of the program."""
        self._generate_children(node)

    def generate_function(self, node: ASTNode) -> None:
        """Emit a function with its prolog and a fallback epilog."""
        function = node.data
        self.gen.set_current_function(function)

        self.gen.emit(identifier_to_label(function.name))
        self.gen.instructions.extend(prolog(function.needed_stack_space))
        self._take_over_arguments(function)
        self.gen.emit(PUSH, RBX)
        self.gen.emit(PUSH, R12)

        self._generate_children(node)

        if self.gen.is_in_main():
            self.gen.emit(MOVQ, int_to_immediate(0), RAX)
            self.gen.instructions.extend(exit_sequence(RAX, self.gen.options.use_rdtsc))
        else:
            self.gen.instructions.extend(epilog())

        self.gen.reset_current_function()

    def _take_over_arguments(self, function: Any) -> None:
        for order in range(function.parameter_count):
            source = function.parameter_slot(order)
            type = function.parameter_type(order)
            if is_register(source):
                self.gen.instructions.extend(push_register(type, source))
            else:
                self.gen.emit(MOVQ, source, RAX)
                self.gen.emit(PUSH, RAX)

    def generate_body(self, node: ASTNode) -> None:
        """Emit the statements of a block."""
        self._generate_children(node)

    # Statements

    def generate_write(self, node: ASTNode) -> None:
        """Write a string to standard output."""
        data = node.child(0).data

        self.gen.instructions.extend(backup_scratch_registers())

        opcode = LEA if data.is_global else MOV
        self.gen.emit(opcode, variable_to_location(data, self.gen.current_function), RSI)
        self.gen.instructions.extend(calculate_string_length(self._write_count))
        self._write_count += 1

        self.gen.emit(MOVQ, int_to_immediate(STDOUT), RDI)
        self.gen.emit(MOVQ, int_to_immediate(SYSCALL_WRITE), RAX)
        self.gen.emit(SYSCALL)

        self.gen.instructions.extend(restore_scratch_registers())

    def _add_declaration_data(self, type: Type) -> None:
        scalar = type.scalar_equivalent()
        symbols = self.gen.symbols
        if scalar == Type.FLOAT and symbols.get(FLOAT_DECLARATION) is None:
            symbols.add_global_literal(FLOAT_DECLARATION, Type.FLOAT, DEFAULT_FLOAT)
        if scalar == Type.STRING and symbols.get(STRING_DECLARATION) is None:
            symbols.add_global_literal(STRING_DECLARATION, Type.STRING, DEFAULT_STRING)

    def generate_variable_definition(self, node: ASTNode) -> None:
        """Initialise a local scalar or array from its definition."""
        if node.data.type.is_array():
            self._define_array(node)
        else:
            self.expressions.generate_assignment(node)

    def _define_array(self, node: ASTNode) -> None:
        target = node.data
        listed = node.child(0)
        items = listed.children if listed is not None else []
        item_type = target.type.scalar_equivalent()

        if item_type == Type.FLOAT:
            opcode, source, scale = MOVSS, XMM6, "4"
        else:
            opcode, source, scale = MOVQ, RAX, "8"
        address = f"{target.stack_offset}({RBP}, {RBX}, {scale})"

        for index in range(target.type.size):
            if index >= len(items):
                self._add_declaration_data(item_type)
                self.gen.emit(MOVQ, int_to_immediate(index), RBX)
                self.gen.instructions.extend(declare_default(item_type, address))
            else:
                self.gen.generate_node(items[index])
                self.gen.emit(MOVQ, int_to_immediate(index), RBX)
                self.gen.emit(opcode, source, address)

    def generate_variable_declaration(self, node: ASTNode) -> None:
        """Give a declared local variable its default value."""
        data = node.data
        type = data.type
        self._add_declaration_data(type)

        if not type.is_array():
            location = variable_to_location(data, self.gen.current_function)
            self.gen.instructions.extend(declare_default(type, location))
            return

        item_type = type.scalar_equivalent()
        for index in range(type.size):
            self.gen.emit(MOVQ, int_to_immediate(index), RAX)
            location = list_access_to_location(data.variable)
            self.gen.instructions.extend(declare_default(item_type, location))

    # Control flow

    def _evaluate_condition(self, condition: ASTNode, false_label: str) -> None:
        if condition.kind in _COMPARISONS:
            self.expressions.evaluate_operands(condition)
            comparison_type = condition.operand_type(0)
            if comparison_type == Type.FLOAT:
                self.gen.emit(COMISS, "%xmm7", XMM6)
            else:
                self.gen.emit(CMP, RBX, RAX)
            jump = condition_to_jump(condition.kind, comparison_type)
        else:
            self.gen.generate_node(condition)
            self.gen.emit(TEST, RAX, RAX)
            jump = JZ
        self.gen.emit(jump, false_label)

    def generate_if(self, node: ASTNode) -> None:
        """An if statement with an optional else branch."""
        labels = self.labels.if_labels()
        has_else = node.child(2) is not None

        self._evaluate_condition(node.child(0), labels.else_label if has_else else labels.end)
        self.gen.generate_node(node.child(1))

        if has_else:
            self.gen.emit(JMP, labels.end)
            self.gen.emit(identifier_to_label(labels.else_label))
            self.gen.generate_node(node.child(2))

        self.gen.emit(identifier_to_label(labels.end))

    def generate_while(self, node: ASTNode) -> None:
        """A while loop."""
        labels = self.labels.while_labels()
        self._loops.append(labels)

        self.gen.emit(identifier_to_label(labels.start))
        self._evaluate_condition(node.child(0), labels.end)

        self.gen.emit(identifier_to_label(labels.body))
        self.gen.generate_node(node.child(1))

        self.gen.emit(JMP, labels.start)
        self.gen.emit(identifier_to_label(labels.end))

        self._loops.pop()

    def generate_for(self, node: ASTNode) -> None:
        """A for loop with optional init, condition and update sections."""
        labels = self.labels.for_labels()
        self._loops.append(labels)

        sections: dict[NodeKind, ASTNode] = {}
        body: Optional[ASTNode] = None
        for child in node.children:
            if child.kind in (NodeKind.FOR_HEADER1, NodeKind.FOR_HEADER2, NodeKind.FOR_HEADER3):
                sections[child.kind] = child
            else:
                body = child

        self.gen.emit(identifier_to_label(labels.init))
        if NodeKind.FOR_HEADER1 in sections:
            self.gen.generate_node(sections[NodeKind.FOR_HEADER1])

        self.gen.emit(identifier_to_label(labels.start))
        if NodeKind.FOR_HEADER2 in sections:
            self.gen.generate_node(sections[NodeKind.FOR_HEADER2])

        self.gen.emit(identifier_to_label(labels.body))
        if body is not None:
            self.gen.generate_node(body)

        self.gen.emit(identifier_to_label(labels.update))
        if NodeKind.FOR_HEADER3 in sections:
            self.gen.generate_node(sections[NodeKind.FOR_HEADER3])

        self.gen.emit(JMP, labels.start)
        self.gen.emit(identifier_to_label(labels.end))

        self._loops.pop()

    def generate_foreach(self, node: ASTNode) -> None:
        """A loop over every item of an array, indexed by %r12."""
        iterated = node.child(1).data
        count = iterated.type.size
        restructured = iterated.variable.restructure

        labels = self.labels.foreach_labels()
        self._loops.append(labels)

        self.gen.emit(identifier_to_label(labels.init))
        self.gen.emit(PUSH, R12)
        self.gen.emit(MOVQ, int_to_immediate(0), R12)

        self.gen.emit(identifier_to_label(labels.body))
        self.gen.generate_node(node.child(2))

        self.gen.emit(identifier_to_label(labels.step))
        correction = 2 if restructured else 1  # a restructured array has an extra item
        self.gen.emit(CMP, int_to_immediate(count - correction), R12)
        self.gen.emit(JE, labels.end)
        self.gen.emit(INCQ, R12)

        if restructured:
            self.gen.emit(INCQ, R12)
            if self.gen.options.annotate_obfuscations:
                self.gen.instructions[-1].add_comment(
                    "Double increment - restructured array access"
                )

        self.gen.emit(JMP, labels.body)
        self.gen.emit(POP, R12)
        self.gen.emit(identifier_to_label(labels.end))

        self._loops.pop()

    def _current_loop(self) -> LoopLabels:
        if not self._loops:
            raise ValueError("loop statement outside of a loop")
        return self._loops[-1]

    def generate_loop_jump(self, node: ASTNode) -> None:
        """A break, continue, redo or restart statement."""
        loop = self._current_loop()
        targets = {
            NodeKind.BREAK: loop.break_target,
            NodeKind.CONTINUE: loop.continue_target,
            NodeKind.REDO: loop.redo_target,
            NodeKind.RESTART: loop.restart_target,
        }
        try:
            target = targets[node.kind]
        except KeyError:
            raise ValueError(f"{node.kind.name} is not a loop statement") from None
        self.gen.emit(JMP, target)

    def generate_return(self, node: ASTNode) -> None:
        """Return from a function; returning from main exits the program."""
        value = node.child(0)
        if value is not None:
            self.gen.generate_node(value)

        if self.gen.is_in_main():
            self.gen.instructions.extend(exit_sequence(RAX, self.gen.options.use_rdtsc))
        else:
            self.gen.instructions.extend(epilog())

    def generate_exit(self, node: ASTNode) -> None:
        """Exit the program with the value of the expression."""
        self.gen.generate_node(node.child(0))
        self.gen.instructions.extend(exit_sequence(RAX, self.gen.options.use_rdtsc))