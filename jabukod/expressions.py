"""Code generation for expressions."""

from __future__ import annotations

from typing import Any, Iterable

from .astnode import ASTNode
from .instruction import Instruction
from .nodekind import NodeKind
from .opcodes import (
    ADD,
    ADDQ,
    ANDi,
    BL,
    CALL,
    CL,
    CMOVNZ,
    CMP,
    COMISS,
    CQO,
    CVTSI2SS,
    CVTTSS2SI,
    GPR,
    IDIV,
    IMUL,
    LEA,
    MOV,
    MOVQ,
    MOVSS,
    NEGQ,
    NOTQ,
    ORi,
    POP,
    PUSH,
    R10,
    R12,
    RAX,
    RBP,
    RBX,
    RCX,
    RDX,
    RSP,
    SHL,
    SHR,
    SSE,
    SUB,
    TEST,
    XMM6,
    XMM7,
    XOR,
    XORPS,
    XORQ,
)
from .snippets import (
    BIT_NOT_MASK,
    NOT_MASK,
    SIGN_MASK,
    pop_register,
    push_register,
)
from .symbols import BaseType, Type
from .transform import (
    condition_to_cmove,
    global_to_address,
    int_to_immediate,
    is_register,
    list_access_to_location,
    literal_to_immediate,
    variable_to_location,
)

# Mask values as the 32-bit signed integers the assembler receives.
_SIGN_MASK_VALUE = -0x80000000
_BIT_NOT_MASK_VALUE = -1
_NOT_MASK_VALUE = 0x00000001

_ARITHMETIC_OPCODES = {
    NodeKind.ADDITION: ADD,
    NodeKind.SUBTRACTION: SUB,
    NodeKind.MULTIPLICATION: IMUL,
    NodeKind.BIT_OR: ORi,
    NodeKind.BIT_XOR: XOR,
    NodeKind.BIT_AND: ANDi,
    NodeKind.OR: ORi,
    NodeKind.AND: ANDi,
}

_SHIFT_OPCODES = {
    NodeKind.LEFT_SHIFT: SHL,
    NodeKind.RIGHT_SHIFT: SHR,
}

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


def _result_register(type: Type) -> str:
    return XMM6 if type == Type.FLOAT else RAX


class ExpressionGenerator:
    """Emits instructions for expression nodes.

    Results end up in %rax, or in %xmm6 for floats. The generator passed in
    provides ``emit``, ``instructions``, ``generate_node``, ``symbols`` and
    ``current_function``.
    """

    def __init__(self, generator: Any) -> None:
        self.gen = generator

    def _extend(self, sequence: Iterable[Instruction]) -> None:
        self.gen.instructions.extend(sequence)

    def _declare_mask(self, name: str, value: int) -> None:
        if self.gen.symbols.get(name) is None:
            self.gen.symbols.add_global_literal(name, Type.INT, value)

    # Operands

    def evaluate_operands(self, node: ASTNode) -> None:
        """Leave the left operand in %rax/%xmm6 and the right in %rbx/%xmm7."""
        self.gen.generate_node(node.child(0))

        left_type = node.operand_type(0)
        left_result = _result_register(left_type)
        self._extend(push_register(left_type, left_result))

        self.gen.generate_node(node.child(1))

        if node.operand_type(1) == Type.FLOAT:
            self.gen.emit(MOVSS, XMM6, XMM7)
        else:
            self.gen.emit(MOVQ, RAX, RBX)

        self._extend(pop_register(left_type, left_result))

    def _evaluate_current(self, node: ASTNode, opcode: str) -> None:
        if node.data.type == Type.FLOAT:
            try:
                self.gen.emit(SSE[opcode], XMM7, XMM6)
            except KeyError:
                raise ValueError(f"{node.kind.name} has no float form") from None
        else:
            self.gen.emit(GPR[opcode], RBX, RAX)

    def _control_variable_access(self, node: ASTNode) -> str:
        array = node.data.variable.iterated_array
        if array.is_global:
            self.gen.emit(LEA, global_to_address(array.name), RBX)
        return list_access_to_location(array, R12)

    # Operands that are leaves

    def generate_variable(self, node: ASTNode) -> None:
        """Load a variable's value (or a string's address)."""
        data = node.data
        if data.is_foreach_control_variable:
            source = self._control_variable_access(node)
        else:
            source = variable_to_location(data, self.gen.current_function)

        base = data.type.base
        if base in (BaseType.INT, BaseType.BOOL):
            self.gen.emit(MOVQ, source, RAX)
        elif base is BaseType.FLOAT:
            self.gen.emit(MOVSS, source, XMM6)
        elif base is BaseType.STRING:
            self.gen.emit(LEA if data.is_global else MOV, source, RAX)

    def generate_literal(self, node: ASTNode) -> None:
        """Load an int or bool immediate value."""
        self.gen.emit(MOVQ, literal_to_immediate(node.data), RAX)

    # Assignment

    def generate_assignment(self, node: ASTNode) -> None:
        """Assign to a variable or array item, or initialise a scalar definition."""
        if node.kind is NodeKind.VARIABLE_DEFINITION:
            self._assign(node, node.child(0), node.operand_type(0))
        else:
            self._assign(node.child(0), node.child(1), node.operand_type(1))

    def _assign(self, target_node: ASTNode, value: ASTNode, value_type: Type) -> None:
        if value.kind is NodeKind.LITERAL:
            opcode = MOVQ
            source = literal_to_immediate(value.data)
        else:
            self.gen.generate_node(value)
            opcode = MOVSS if value_type == Type.FLOAT else MOVQ
            source = _result_register(value_type)

        if target_node.kind is NodeKind.LIST_ACCESS:
            self._assign_to_array(target_node, opcode, source)
            return

        data = target_node.data
        if data.is_foreach_control_variable:
            target = self._control_variable_access(target_node)
        else:
            target = variable_to_location(data, self.gen.current_function)
        self.gen.emit(opcode, source, target)

    def _assign_to_array(self, access: ASTNode, opcode: str, source: str) -> None:
        self.gen.emit(PUSH, RAX)
        self.gen.generate_node(access.child(1))  # the index is always an int
        self.gen.emit(MOVQ, RAX, RBX)
        self.gen.emit(POP, RAX)

        data = access.child(0).data
        scale = "4" if data.type.scalar_equivalent() == Type.FLOAT else "8"

        if data.is_global:
            self.gen.emit(PUSH, RCX)
            self.gen.emit(LEA, global_to_address(data.name), RCX)
            self.gen.emit(opcode, source, f"({RCX}, {RBX}, {scale})")
            self.gen.emit(POP, RCX)
        else:
            self.gen.emit(opcode, source, f"{data.stack_offset}({RBP}, {RBX}, {scale})")

    def generate_list_access(self, node: ASTNode) -> None:
        """Load an array item; the index is computed into %rax first."""
        self.gen.generate_node(node.child(1))

        array = node.child(0).data
        if array.is_global:
            # indexed addressing cannot be %rip relative
            self.gen.emit(LEA, global_to_address(array.name), RBX)

        source = list_access_to_location(array.variable)
        if node.data.type == Type.FLOAT:
            self.gen.emit(MOVSS, source, XMM6)
        else:
            self.gen.emit(MOVQ, source, RAX)

    # Binary operators

    def generate_arithmetic(self, node: ASTNode) -> None:
        """Addition, subtraction, multiplication and the bitwise and logical operators."""
        try:
            opcode = _ARITHMETIC_OPCODES[node.kind]
        except KeyError:
            raise ValueError(f"{node.kind.name} is not an arithmetic operator") from None
        self.evaluate_operands(node)
        self._evaluate_current(node, opcode)

    def generate_division(self, node: ASTNode) -> None:
        """Integer or float division."""
        self.evaluate_operands(node)

        type = node.data.type
        if type != Type.FLOAT:
            self._extend(push_register(type, RDX))
            self.gen.emit(CQO)

        self._evaluate_current(node, IDIV)

        if type != Type.FLOAT:
            self._extend(pop_register(type, RDX))

    def generate_modulo(self, node: ASTNode) -> None:
        """Integer remainder; float operands are rejected earlier."""
        self.evaluate_operands(node)

        type = node.data.type
        self._extend(push_register(type, RDX))
        self.gen.emit(CQO)

        self._evaluate_current(node, IDIV)

        self.gen.emit(MOVQ, RDX, RAX)
        self._extend(pop_register(type, RDX))

    def generate_shift(self, node: ASTNode) -> None:
        """Left or right shift by the right operand."""
        try:
            opcode = _SHIFT_OPCODES[node.kind]
        except KeyError:
            raise ValueError(f"{node.kind.name} is not a shift") from None
        self.evaluate_operands(node)

        type = node.data.type
        self._extend(push_register(type, RCX))
        self.gen.emit(MOV, BL, CL)
        self.gen.emit(GPR[opcode], CL, RAX)
        self._extend(pop_register(type, RCX))

    def generate_comparison(self, node: ASTNode) -> None:
        """A relational operator producing 0 or 1 in %rax."""
        if node.kind not in _COMPARISONS:
            raise ValueError(f"{node.kind.name} is not a comparison")
        self.evaluate_operands(node)

        # both operands share a type after implicit conversions
        comparison_type = node.operand_type(0)
        if comparison_type == Type.FLOAT:
            self.gen.emit(COMISS, XMM7, XMM6)
        else:
            self.gen.emit(CMP, RBX, RAX)

        self.gen.emit(MOVQ, int_to_immediate(0), RAX)  # xor would clobber the flags
        self.gen.emit(condition_to_cmove(node.kind, comparison_type), R10, RAX)

    # Unary operators

    def generate_unary_minus(self, node: ASTNode) -> None:
        """Negate an int or a float."""
        self.gen.generate_node(node.child(0))

        if node.data.type == Type.FLOAT:
            self._declare_mask(SIGN_MASK, _SIGN_MASK_VALUE)
            self.gen.emit(MOVSS, global_to_address(SIGN_MASK), XMM7)
            self.gen.emit(XORPS, XMM7, XMM6)
        else:
            self.gen.emit(NEGQ, RAX)

    def generate_bit_not(self, node: ASTNode) -> None:
        """Flip every bit of the operand."""
        self.gen.generate_node(node.child(0))

        if node.data.type == Type.FLOAT:
            self._declare_mask(BIT_NOT_MASK, _BIT_NOT_MASK_VALUE)
            self.gen.emit(MOVSS, global_to_address(BIT_NOT_MASK), XMM7)
            self.gen.emit(XORPS, XMM7, XMM6)
        else:
            self.gen.emit(NOTQ, RAX)

    def generate_not(self, node: ASTNode) -> None:
        """Logical negation of a bool."""
        self.gen.generate_node(node.child(0))
        self._declare_mask(NOT_MASK, _NOT_MASK_VALUE)

        if node.data.type == Type.FLOAT:
            self.gen.emit(MOVSS, global_to_address(NOT_MASK), XMM7)
            self.gen.emit(XORPS, XMM7, XMM6)
        else:
            self.gen.emit(MOVQ, global_to_address(NOT_MASK), RBX)
            self.gen.emit(XORQ, RBX, RAX)

    def generate_conversion(self, node: ASTNode) -> None:
        """An implicit conversion between int, float and bool."""
        kind = node.kind
        if not kind.is_conversion():
            raise ValueError(f"{kind.name} is not a conversion")

        self.gen.generate_node(node.child(0))

        if kind in (NodeKind.INT2FLOAT, NodeKind.BOOL2FLOAT):
            self.gen.emit(CVTSI2SS, RAX, XMM6)
        elif kind is NodeKind.FLOAT2INT:
            self.gen.emit(CVTTSS2SI, XMM6, RAX)
        elif kind is NodeKind.INT2BOOL:
            self.gen.emit(TEST, RAX, RAX)
            self.gen.emit(CMOVNZ, R10, RAX)
        elif kind is NodeKind.FLOAT2BOOL:
            self.gen.emit(XORPS, XMM7, XMM7)
            self.gen.emit(COMISS, XMM7, XMM6)
            self.gen.emit(MOVQ, int_to_immediate(0), RAX)
            self.gen.emit(CMOVNZ, R10, RAX)
        # BOOL2INT: 0 and 1 already serve as both

    # Calls

    def generate_function_call(self, node: ASTNode) -> None:
        """Evaluate the arguments into their slots and call the function."""
        data = node.data
        count = len(node.children)
        slots = [data.argument_slot(i) for i in range(count)]
        types = [data.argument_type(i) for i in range(count)]
        stack_space = 0

        # stack arguments first, so register values live as briefly as possible
        for i in reversed(range(count)):
            if not is_register(slots[i]):
                self.gen.generate_node(node.child(i))
                self._extend(push_register(types[i], _result_register(types[i])))
                stack_space += 8

        for i in reversed(range(count)):
            if is_register(slots[i]):
                self.gen.generate_node(node.child(i))
                self._extend(push_register(types[i], _result_register(types[i])))

        for slot, type in zip(slots, types):
            if is_register(slot):
                self._extend(pop_register(type, slot))

        self.gen.emit(CALL, data.name)

        if stack_space:
            self.gen.emit(ADDQ, int_to_immediate(stack_space), RSP)