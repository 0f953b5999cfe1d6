"""Assembling, linking and debugging generated programs with external tools."""

from __future__ import annotations

import subprocess

from .diagnostics import BOLD, DEFAULT


class ToolchainError(Exception):
    """An external tool failed."""


def _run(command: list[str], failure: str) -> int:
    try:
        completed = subprocess.run(command, check=False)
    except OSError as error:
        raise ToolchainError(failure) from error
    if completed.returncode != 0:
        raise ToolchainError(failure)
    return completed.returncode


def assemble(output_path: str, debug_symbols: bool = False) -> int:
    """Assemble ``<output_path>.s`` into ``<output_path>.o``."""
    command = ["as", *(["-g"] if debug_symbols else []), "-o", f"{output_path}.o", f"{output_path}.s"]
    result = _run(command, f"failed to assemble file {output_path}.s")
    print(f"{BOLD}Assembled {DEFAULT}{output_path}.o from {output_path}.s")
    return result


def link(output_path: str, debug_symbols: bool = False) -> int:
    """Link ``<output_path>.o`` into the executable ``<output_path>``."""
    command = ["ld", *(["-g"] if debug_symbols else []), "-o", output_path, f"{output_path}.o"]
    result = _run(command, f"failed to link file {output_path}.o")
    print(f"{BOLD}Linked {DEFAULT}{output_path} from {output_path}.o")
    return result


def debug(output_path: str) -> int:
    """Run the executable in the debugger, stopped at main."""
    command = [
        "gdb",
        "-ex",
        "tui enable",
        "-ex",
        "layout regs",
        "-ex",
        "b main",
        f"./{output_path}",
    ]
    return _run(command, f"failed to debug {output_path}")