from types import SimpleNamespace

import pytest

from jabukod.astnode import ASTNode
from jabukod.instruction import Instruction
from jabukod.nodedata import (
    BodyData,
    ExpressionData,
    Function,
    FunctionData,
    LiteralData,
    VariableData,
)
from jabukod.nodekind import NodeKind
from jabukod.snippets import FLOAT_DECLARATION, epilog, exit_sequence
from jabukod.statements import NodeGenerators
from jabukod.symbols import GlobalSymbols, Type, Variable


class FakeGenerator:
    def __init__(self, use_rdtsc=False, annotate=False):
        self.options = SimpleNamespace(use_rdtsc=use_rdtsc, annotate_obfuscations=annotate)
        self.instructions = []
        self.symbols = GlobalSymbols()
        self.current_function = None
        self.nodes = NodeGenerators(self)

    def emit(self, *args):
        self.instructions.append(Instruction(*args))

    def generate_node(self, node):
        self.nodes.generate(node)

    def set_current_function(self, data):
        self.current_function = data

    def reset_current_function(self):
        self.current_function = None

    def is_in_main(self):
        return self.current_function.name == "main"

    def lines(self):
        return [instruction.render() for instruction in self.instructions]


def literal(value, type=Type.INT):
    return ASTNode(NodeKind.LITERAL, LiteralData(type, value))


def node(kind, *children, data=None):
    result = ASTNode(kind, data)
    for child in children:
        result.append_child(child)
    return result


def body(*children):
    return node(NodeKind.BODY, *children, data=BodyData())


def in_function(gen, name="main"):
    gen.set_current_function(FunctionData(Function(name)))


def test_main_function_without_statements():
    gen = FakeGenerator()
    gen.generate_node(node(NodeKind.FUNCTION, data=FunctionData(Function("main"))))
    assert gen.lines() == [
        "main:",
        "push %rbp",
        "mov %rsp, %rbp",
        "push %rbx",
        "push %r12",
        "movq $0, %rax",
        "mov %rax, %rdi",
        "mov $60, %rax",
        "syscall",
    ]
    assert gen.current_function is None


def test_other_function_ends_with_epilog_and_reserves_stack():
    gen = FakeGenerator()
    function = Function("helper", needed_stack_space=16)
    gen.generate_node(node(NodeKind.FUNCTION, data=FunctionData(function)))
    lines = gen.lines()
    assert "sub $16, %rsp" in lines
    assert lines[-5:] == [i.render() for i in epilog()]


def test_function_takes_over_register_argument():
    gen = FakeGenerator()
    parameter = Variable("a", Type.INT, parameter_order=0)
    function = Function("f", parameters=[parameter])
    gen.generate_node(node(NodeKind.FUNCTION, data=FunctionData(function)))
    lines = gen.lines()
    assert lines[3] == "push %rdi"
    assert lines[4:6] == ["push %rbx", "push %r12"]


def test_if_without_else():
    gen = FakeGenerator()
    in_function(gen)
    gen.generate_node(node(NodeKind.IF, literal(True, Type.BOOL), body()))
    assert gen.lines() == [
        "movq $1, %rax",
        "test %rax, %rax",
        "jz __if_end_0000",
        "__if_end_0000:",
    ]


def test_if_with_else_orders_labels():
    gen = FakeGenerator()
    in_function(gen)
    gen.generate_node(
        node(NodeKind.IF, literal(True, Type.BOOL), body(literal(1)), body(literal(2)))
    )
    lines = gen.lines()
    assert "jz __else_0000" in lines
    assert lines.index("jmp __if_end_0000") < lines.index("__else_0000:")
    assert lines[-1] == "__if_end_0000:"


def test_while_with_comparison_condition():
    gen = FakeGenerator()
    in_function(gen)
    condition = node(
        NodeKind.LESS, literal(1), literal(2), data=ExpressionData(Type.BOOL)
    )
    gen.generate_node(node(NodeKind.WHILE, condition, body()))
    lines = gen.lines()
    assert lines[0] == "__while_start_0000:"
    assert "cmp %rbx, %rax" in lines
    assert "jge __while_end_0000" in lines
    assert lines[-2:] == ["jmp __while_start_0000", "__while_end_0000:"]


@pytest.mark.parametrize(
    "kind, target",
    [
        (NodeKind.BREAK, "__while_end_0000"),
        (NodeKind.CONTINUE, "__while_start_0000"),
        (NodeKind.REDO, "__while_body_0000"),
        (NodeKind.RESTART, "__while_start_0000"),
    ],
)
def test_loop_jumps_in_while(kind, target):
    gen = FakeGenerator()
    in_function(gen)
    gen.generate_node(node(NodeKind.WHILE, literal(True, Type.BOOL), body(node(kind))))
    assert f"jmp {target}" in gen.lines()


@pytest.mark.parametrize(
    "kind, target",
    [
        (NodeKind.BREAK, "__for_end_0000"),
        (NodeKind.CONTINUE, "__for_update_0000"),
        (NodeKind.REDO, "__for_body_0000"),
        (NodeKind.RESTART, "__for_init_0000"),
    ],
)
def test_loop_jumps_in_for(kind, target):
    gen = FakeGenerator()
    in_function(gen)
    gen.generate_node(node(NodeKind.FOR, body(node(kind)), data=BodyData()))
    assert f"jmp {target}" in gen.lines()


def test_for_header_condition_jumps_to_end():
    gen = FakeGenerator()
    in_function(gen)
    header = node(NodeKind.FOR_HEADER2, literal(True, Type.BOOL))
    gen.generate_node(node(NodeKind.FOR, header, body(), data=BodyData()))
    lines = gen.lines()
    assert lines.index("__for_start_0000:") < lines.index("jz __for_end_0000")
    assert lines.index("jz __for_end_0000") < lines.index("__for_body_0000:")


def test_loop_jump_outside_loop_raises():
    gen = FakeGenerator()
    in_function(gen)
    with pytest.raises(ValueError):
        gen.generate_node(node(NodeKind.BREAK))


def test_label_numbers_increase():
    gen = FakeGenerator()
    in_function(gen)
    gen.generate_node(node(NodeKind.IF, literal(True, Type.BOOL), body()))
    gen.generate_node(node(NodeKind.IF, literal(True, Type.BOOL), body()))
    assert gen.lines()[-1] == "__if_end_0001:"


def test_scalar_declaration_and_float_default_data():
    gen = FakeGenerator()
    in_function(gen)
    integer = Variable("a", Type.INT, stack_offset=-8)
    gen.generate_node(node(NodeKind.VARIABLE_DECLARATION, data=VariableData(integer)))
    assert gen.lines() == ["movq $0, -8(%rbp)"]

    real = Variable("b", Type.FLOAT, stack_offset=-16)
    gen.generate_node(node(NodeKind.VARIABLE_DECLARATION, data=VariableData(real)))
    gen.generate_node(node(NodeKind.VARIABLE_DECLARATION, data=VariableData(real)))
    names = [v.name for v in gen.symbols.variables]
    assert names.count(FLOAT_DECLARATION) == 1


def test_array_declaration_fills_every_item():
    gen = FakeGenerator()
    in_function(gen)
    array = Variable("xs", Type.array(Type.INT, 2), stack_offset=-16)
    gen.generate_node(node(NodeKind.VARIABLE_DECLARATION, data=VariableData(array)))
    assert gen.lines() == [
        "movq $0, %rax",
        "movq $0, -16(%rbp, %rax, 8)",
        "movq $1, %rax",
        "movq $0, -16(%rbp, %rax, 8)",
    ]


def test_scalar_definition_stores_literal():
    gen = FakeGenerator()
    in_function(gen)
    variable = Variable("a", Type.INT, stack_offset=-8)
    gen.generate_node(
        node(NodeKind.VARIABLE_DEFINITION, literal(5), data=VariableData(variable))
    )
    assert gen.lines() == ["movq $5, -8(%rbp)"]


def test_array_definition_with_short_list():
    gen = FakeGenerator()
    in_function(gen)
    array_type = Type.array(Type.INT, 2)
    array = Variable("xs", array_type, stack_offset=-16)
    items = node(NodeKind.LIST, literal(7), data=ExpressionData(array_type))
    gen.generate_node(node(NodeKind.VARIABLE_DEFINITION, items, data=VariableData(array)))
    assert gen.lines() == [
        "movq $7, %rax",
        "movq $0, %rbx",
        "movq %rax, -16(%rbp, %rbx, 8)",
        "movq $1, %rbx",
        "movq $0, -16(%rbp, %rbx, 8)",
    ]


def test_write_global_string():
    gen = FakeGenerator()
    in_function(gen)
    message = Variable("msg", Type.STRING, is_global=True)
    write = node(NodeKind.WRITE, node(NodeKind.VARIABLE, data=VariableData(message)))
    gen.generate_node(write)
    gen.generate_node(write)
    lines = gen.lines()
    assert lines[:6] == ["push %rdi", "push %rsi", "push %rdx", "push %rcx", "push %r8", "push %r9"]
    assert lines[6] == "lea msg(%rip), %rsi"
    assert "__write_start_0000:" in lines
    assert "__write_start_0001:" in lines
    assert lines.count("syscall") == 2


def test_return_in_main_and_elsewhere():
    gen = FakeGenerator()
    in_function(gen, "main")
    gen.generate_node(node(NodeKind.RETURN, literal(3)))
    assert gen.lines() == ["movq $3, %rax"] + [i.render() for i in exit_sequence("%rax")]

    other = FakeGenerator()
    in_function(other, "helper")
    other.generate_node(node(NodeKind.RETURN))
    assert other.lines() == [i.render() for i in epilog()]


def test_exit_with_rdtsc_reports_time():
    gen = FakeGenerator(use_rdtsc=True)
    in_function(gen)
    gen.generate_node(node(NodeKind.EXIT, literal(1)))
    lines = gen.lines()
    assert "call writeInt" in lines
    assert lines[-1] == "syscall"


def _foreach(restructure):
    array = Variable("xs", Type.array(Type.INT, 3), is_global=True, restructure=restructure)
    control = Variable("x", Type.INT, stack_offset=-8)
    return node(
        NodeKind.FOREACH,
        node(NodeKind.VARIABLE_DECLARATION, data=VariableData(control)),
        node(NodeKind.VARIABLE, data=VariableData(array)),
        body(),
        data=BodyData(),
    )


def test_foreach_loop_bounds():
    gen = FakeGenerator()
    in_function(gen)
    gen.generate_node(_foreach(False))
    lines = gen.lines()
    assert lines[:3] == ["__foreach_init_0000:", "push %r12", "movq $0, %r12"]
    assert "cmp $2, %r12" in lines
    assert "je __foreach_end_0000" in lines
    assert lines.count("incq %r12") == 1
    assert lines[-1] == "__foreach_end_0000:"


def test_foreach_restructured_double_increment_annotated():
    gen = FakeGenerator(annotate=True)
    in_function(gen)
    gen.generate_node(_foreach(True))
    lines = gen.lines()
    assert "cmp $1, %r12" in lines
    assert lines.count("incq %r12") == 1
    annotated = [i for i in gen.instructions if i.comment]
    assert len(annotated) == 1
    assert "Double increment" in annotated[0].comment


def test_program_generates_every_function():
    gen = FakeGenerator()
    program = node(
        NodeKind.PROGRAM,
        node(NodeKind.FUNCTION, data=FunctionData(Function("helper"))),
        node(NodeKind.FUNCTION, data=FunctionData(Function("main"))),
    )
    gen.generate_node(program)
    lines = gen.lines()
    assert lines.index("helper:") < lines.index("main:")
    assert lines.count("push %rbp") == 2