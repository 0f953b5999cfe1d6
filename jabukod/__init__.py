"""Syntax tree, node data and x86-64 assembly generation for the Jabukod language."""

__version__ = "0.1.0"