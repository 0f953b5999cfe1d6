"""Assembly mnemonics, register names and their lookup tables."""

from __future__ import annotations

from types import MappingProxyType

# General purpose instructions
MOV = "mov"
MOVQ = "movq"
LEA = "lea"
PUSH = "push"
POP = "pop"
CALL = "call"
RET = "ret"
SYSCALL = "syscall"
RDTSC = "rdtsc"
CQO = "cqo"
TEST = "test"
CMP = "cmp"
CMPB = "cmpb"
INCQ = "incq"
NEGQ = "negq"
NOTQ = "notq"

ADD = "add"
SUB = "sub"
IMUL = "imul"
IDIV = "idiv"
ORi = "or"
ANDi = "and"
XOR = "xor"
SHL = "shl"
SHR = "shr"

ADDQ = "addq"
SUBQ = "subq"
IMULQ = "imulq"
IDIVQ = "idivq"
ORQ = "orq"
ANDQ = "andq"
XORQ = "xorq"
SHLQ = "shlq"
SHRQ = "shrq"

# SSE instructions
MOVSS = "movss"
ADDSS = "addss"
SUBSS = "subss"
MULSS = "mulss"
DIVSS = "divss"
XORPS = "xorps"
COMISS = "comiss"
CVTSI2SS = "cvtsi2ss"
CVTTSS2SI = "cvttss2si"

# Conditional moves
CMOVNZ = "cmovnz"
CMOVLQ = "cmovlq"
CMOVLEQ = "cmovleq"
CMOVGQ = "cmovgq"
CMOVGEQ = "cmovgeq"
CMOVBQ = "cmovbq"
CMOVBEQ = "cmovbeq"
CMOVAQ = "cmovaq"
CMOVAEQ = "cmovaeq"
CMOVEQ = "cmoveq"
CMOVNEQ = "cmovneq"

# Jumps
JMP = "jmp"
JZ = "jz"
JE = "je"
JNE = "jne"
JL = "jl"
JLE = "jle"
JG = "jg"
JGE = "jge"
JB = "jb"
JBE = "jbe"
JA = "ja"
JAE = "jae"

# Registers
RAX = "%rax"
RBX = "%rbx"
RCX = "%rcx"
RDX = "%rdx"
RSI = "%rsi"
RDI = "%rdi"
RSP = "%rsp"
RBP = "%rbp"
RIP = "%rip"
R8 = "%r8"
R9 = "%r9"
R10 = "%r10"
R12 = "%r12"
BL = "%bl"
CL = "%cl"
XMM0 = "%xmm0"
XMM1 = "%xmm1"
XMM2 = "%xmm2"
XMM3 = "%xmm3"
XMM4 = "%xmm4"
XMM5 = "%xmm5"
XMM6 = "%xmm6"
XMM7 = "%xmm7"

# System interface
STDOUT = 1
SYSCALL_WRITE = 1
SYSCALL_EXIT = 60

GPR = MappingProxyType(
    {
        ADD: ADDQ,
        SUB: SUBQ,
        IMUL: IMULQ,
        IDIV: IDIVQ,
        ORi: ORQ,
        ANDi: ANDQ,
        SHL: SHLQ,
        SHR: SHRQ,
        XOR: XORQ,
    }
)

SSE = MappingProxyType(
    {
        ADD: ADDSS,
        SUB: SUBSS,
        IMUL: MULSS,
        IDIV: DIVSS,
    }
)

# Signed jumps swap with their unsigned counterparts; the rest stay put.
_FLIPPED_JUMPS = MappingProxyType(
    {
        JZ: JZ,
        JMP: JMP,
        JLE: JBE,
        JGE: JAE,
        JG: JA,
        JL: JB,
        JNE: JNE,
        JE: JE,
        JBE: JLE,
        JAE: JGE,
        JA: JG,
        JB: JL,
    }
)

_NORMAL_PARAMETERS = (RDI, RSI, RDX, RCX, R8, R9)
_FLOAT_PARAMETERS = (XMM0, XMM1, XMM2, XMM3, XMM4, XMM5)


def is_jump(opcode: str) -> bool:
    """True if the opcode is a jump instruction."""
    return opcode in _FLIPPED_JUMPS


def flip_jump_sign(opcode: str) -> str:
    """Swap a signed jump for the unsigned one and vice versa."""
    try:
        return _FLIPPED_JUMPS[opcode]
    except KeyError:
        raise ValueError(f"not a jump opcode: {opcode!r}") from None


def _parameter(registers: tuple[str, ...], order: int) -> str:
    if not 0 <= order < len(registers):
        raise ValueError(f"no parameter register for position {order}")
    return registers[order]


def normal_parameter(order: int) -> str:
    """The general purpose register carrying the order-th integer argument."""
    return _parameter(_NORMAL_PARAMETERS, order)


def float_parameter(order: int) -> str:
    """The SSE register carrying the order-th floating point argument."""
    return _parameter(_FLOAT_PARAMETERS, order)