# jabukod

The back end of a compiler for Jabukod, a small statically typed language.
It holds the annotated abstract syntax tree and turns that tree into x86-64
assembly in AT&T syntax. The assembly is then assembled and linked with the
GNU toolchain (`as`, `ld`).

## What is inside

- `jabukod.nodekind`: `NodeKind`, the kinds of tree node (operators,
  statements, implicit conversions such as `INT2FLOAT`), with
  `node_kind_from_sign` to map an operator sign to its kind.
- `jabukod.symbols`: data types (`Type`, `BaseType`), `StorageSpecifier`,
  `Variable`, `Scope`, and `GlobalSymbols`, whose variables, literal constants
  and enum items end up in `.data` and `.rodata`.
- `jabukod.nodedata`: the data attached to tree nodes: `BodyData` (with a
  scope), `ForData`, `ForeachData`, `ExpressionData`, `LiteralData`,
  `VariableData`, `Function`, `FunctionData` and `FunctionCallData`, including
  the System V registers or stack slots that arguments are passed in.
- `jabukod.astnode`: `ASTNode`, with preorder and postorder walks, child
  insertion, plucking and planting, and a one-line tree view per node
  (`render`).
- `jabukod.instruction`, `jabukod.opcodes`, `jabukod.transform`,
  `jabukod.snippets`, `jabukod.controlflow`: single instructions, opcode and
  register tables, operand formatting, reusable instruction sequences
  (prologue, epilogue, exit, register save and restore, string length) and
  unique label sets for `if`, `while`, `for` and `foreach`.
- `jabukod.expressions`, `jabukod.statements`: code generation for
  expressions and for statements, functions and loops.
- `jabukod.generator`: `Generator` and `GeneratorOptions`, which walk a whole
  program and produce the `.s` text.
- `jabukod.assembler`: `assemble`, `link` and `debug`, which run `as`, `ld`
  and `gdb`; a failing or missing tool raises `ToolchainError`.
- `jabukod.diagnostics`: `ErrorReporter`, which prints coloured lexical,
  syntax and semantic errors with their line and column and counts them.

## Using it

Build the tree out of `ASTNode` objects carrying node data, then hand it to a
`Generator` together with a `GeneratorOptions` and the program's
`GlobalSymbols`:

```python
from jabukod.astnode import ASTNode
from jabukod.generator import Generator, GeneratorOptions
from jabukod.nodedata import Function, FunctionData, LiteralData
from jabukod.nodekind import NodeKind
from jabukod.symbols import GlobalSymbols, Type

root = ASTNode(NodeKind.PROGRAM)
main = root.append_child(
    ASTNode(NodeKind.FUNCTION, FunctionData(Function("main", Type.INT)))
)
leave = main.append_child(ASTNode(NodeKind.EXIT))
leave.append_child(ASTNode(NodeKind.LITERAL, LiteralData(Type.INT, 3)))

generator = Generator(GeneratorOptions("program"), root, GlobalSymbols())
generator.generate()
print(generator.render())   # the assembly as text
generator.write()           # the same text, written to program.s
```

Then turn the assembly into an executable:

```python
from jabukod.assembler import assemble, link

assemble("program", False)  # program.s -> program.o
link("program", False)      # program.o -> program
```

Smaller pieces work on their own as well:

```python
from jabukod.opcodes import flip_jump_sign, is_jump
from jabukod.transform import global_to_address, int_to_immediate

is_jump("jle")                  # True
flip_jump_sign("jle")           # "jbe"
int_to_immediate(8)             # "$8"
global_to_address("counter")    # "counter(%rip)"
```

The generated program starts at `_start`, sets `%r10` to 1, jumps to `main`
and leaves through the `exit` system call: with the value of an `exit` or of a
`return` in `main`, or with 0 when `main` runs to its end. With
`GeneratorOptions(use_rdtsc=True)` the program also measures its run time with
`rdtsc` and passes it to a `writeInt` function before exiting.

## What it does not do

The package has no lexer, parser or semantic analysis: it does not read
Jabukod source text, and the caller builds the checked, type-annotated tree
and the global symbols. It has no command-line program either; it is used as
a library.