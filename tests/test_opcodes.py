import pytest

from jabukod import opcodes
from jabukod.opcodes import (
    ADD,
    ADDQ,
    ADDSS,
    IMUL,
    MULSS,
    flip_jump_sign,
    float_parameter,
    is_jump,
    normal_parameter,
)

JUMPS = [
    opcodes.JZ,
    opcodes.JMP,
    opcodes.JLE,
    opcodes.JGE,
    opcodes.JG,
    opcodes.JL,
    opcodes.JNE,
    opcodes.JE,
    opcodes.JBE,
    opcodes.JAE,
    opcodes.JA,
    opcodes.JB,
]


@pytest.mark.parametrize("jump", JUMPS)
def test_jumps_are_jumps(jump):
    assert is_jump(jump)


@pytest.mark.parametrize("opcode", [opcodes.MOVQ, opcodes.CALL, opcodes.CMP])
def test_non_jumps(opcode):
    assert not is_jump(opcode)


@pytest.mark.parametrize("jump", JUMPS)
def test_flip_is_involution(jump):
    assert flip_jump_sign(flip_jump_sign(jump)) == jump


def test_flip_signed_to_unsigned():
    assert flip_jump_sign(opcodes.JL) == opcodes.JB
    assert flip_jump_sign(opcodes.JGE) == opcodes.JAE
    assert flip_jump_sign(opcodes.JE) == opcodes.JE


def test_flip_non_jump_raises():
    with pytest.raises(ValueError):
        flip_jump_sign(opcodes.MOVQ)


def test_operation_tables_hold_no_jumps():
    assert opcodes.GPR[ADD] == ADDQ
    assert opcodes.SSE[ADD] == ADDSS
    assert opcodes.SSE[IMUL] == MULSS
    assert set(opcodes.SSE) < set(opcodes.GPR)
    assert not any(is_jump(op) for op in opcodes.GPR.values())
    assert not any(is_jump(op) for op in opcodes.SSE.values())


def test_parameter_registers_in_abi_order():
    assert [normal_parameter(i) for i in range(6)] == [
        opcodes.RDI,
        opcodes.RSI,
        opcodes.RDX,
        opcodes.RCX,
        opcodes.R8,
        opcodes.R9,
    ]
    assert [float_parameter(i) for i in range(6)] == [
        opcodes.XMM0,
        opcodes.XMM1,
        opcodes.XMM2,
        opcodes.XMM3,
        opcodes.XMM4,
        opcodes.XMM5,
    ]


@pytest.mark.parametrize("order", [-1, 6])
def test_parameter_out_of_range(order):
    with pytest.raises(ValueError):
        normal_parameter(order)
    with pytest.raises(ValueError):
        float_parameter(order)