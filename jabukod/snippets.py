"""Reusable instruction sequences."""

from __future__ import annotations

from .instruction import Instruction
from .opcodes import (
    ADDQ,
    CALL,
    CMPB,
    INCQ,
    JE,
    JMP,
    LEA,
    MOV,
    MOVQ,
    MOVSS,
    POP,
    PUSH,
    R8,
    R9,
    R12,
    RAX,
    RBP,
    RBX,
    RCX,
    RDI,
    RDTSC,
    RDX,
    RET,
    RSI,
    RSP,
    SUB,
    SUBQ,
    SYSCALL,
    SYSCALL_EXIT,
    XMM6,
)
from .symbols import DEFAULT_INT, BaseType, Type
from .transform import global_to_address, int_to_immediate, register_to_address

FLOAT_DECLARATION = "__declfloat"
STRING_DECLARATION = "__declstring"
SIGN_MASK = "__signMask"
BIT_NOT_MASK = "__bitNotMask"
NOT_MASK = "__notMask"

_SCRATCH_REGISTERS = (RDI, RSI, RDX, RCX, R8, R9)


def prolog(bytes_to_reserve: int) -> list[Instruction]:
    """Set up a stack frame and reserve space for locals."""
    sequence = [Instruction(PUSH, RBP), Instruction(MOV, RSP, RBP)]
    if bytes_to_reserve != 0:
        sequence.append(Instruction(SUB, int_to_immediate(bytes_to_reserve), RSP))
    # %rbx and %r12 are saved after the arguments are taken over
    return sequence


def epilog() -> list[Instruction]:
    """Restore saved registers, tear down the frame and return."""
    return [
        Instruction(POP, R12),
        Instruction(POP, RBX),
        Instruction(MOV, RBP, RSP),
        Instruction(POP, RBP),
        Instruction(RET),
    ]


def exit_sequence(register: str, use_rdtsc: bool = False) -> list[Instruction]:
    """Exit the program with the code held in a general purpose register."""
    sequence = []
    if use_rdtsc:
        sequence += [
            Instruction(PUSH, register),
            Instruction(RDTSC),
            Instruction(MOVQ, "__rdtsc(%rip)", RBX),
            Instruction(SUBQ, RBX, RAX),
            Instruction(MOVQ, RAX, RDI),
            Instruction(CALL, "writeInt"),
            Instruction(POP, register),
        ]
    sequence += [
        Instruction(MOV, register, RDI),
        Instruction(MOV, int_to_immediate(SYSCALL_EXIT), RAX),
        Instruction(SYSCALL),
    ]
    return sequence


def declare_default(type: Type, target: str) -> list[Instruction]:
    """Store the default value of a scalar type at ``target``."""
    if type.base in (BaseType.INT, BaseType.BOOL):
        return [Instruction(MOVQ, int_to_immediate(DEFAULT_INT), target)]
    if type.base is BaseType.FLOAT:
        return [
            Instruction(MOVSS, global_to_address(FLOAT_DECLARATION), XMM6),
            Instruction(MOVSS, XMM6, target),
        ]
    if type.base is BaseType.STRING:
        return [
            Instruction(LEA, global_to_address(STRING_DECLARATION), RAX),
            Instruction(MOV, RAX, target),
        ]
    return []


def push_register(type: Type, register: str) -> list[Instruction]:
    """Push a register; SSE registers are stored through a reserved slot."""
    if type == Type.FLOAT:
        return [
            Instruction(SUBQ, int_to_immediate(8), RSP),
            Instruction(MOVSS, register, register_to_address(RSP)),
        ]
    return [Instruction(PUSH, register)]


def pop_register(type: Type, register: str) -> list[Instruction]:
    """Pop a register pushed by :func:`push_register`."""
    if type == Type.FLOAT:
        return [
            Instruction(MOVSS, register_to_address(RSP), register),
            Instruction(ADDQ, int_to_immediate(8), RSP),
        ]
    return [Instruction(POP, register)]


def backup_scratch_registers() -> list[Instruction]:
    """Push the argument passing registers."""
    return [Instruction(PUSH, register) for register in _SCRATCH_REGISTERS]


def restore_scratch_registers() -> list[Instruction]:
    """Pop the registers pushed by :func:`backup_scratch_registers`."""
    return [Instruction(POP, register) for register in reversed(_SCRATCH_REGISTERS)]


def calculate_string_length(number: int) -> list[Instruction]:
    """Count the bytes of the string at (%rsi) into %rdx.

    ``number`` makes the loop labels unique.
    """
    unique = f"{number:04d}"
    start = f"__write_start_{unique}"
    end = f"__write_end_{unique}"
    current_character = f"({RSI}, {RDX}, 1)"

    return [
        Instruction(MOVQ, int_to_immediate(0), RDX),
        Instruction(f"{start}:"),
        Instruction(CMPB, int_to_immediate(0), current_character),
        Instruction(JE, end),
        Instruction(INCQ, RDX),
        Instruction(JMP, start),
        Instruction(f"{end}:"),
    ]