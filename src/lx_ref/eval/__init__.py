"""Evaluator helper modules for the lx runtime."""

__all__ = [
    "common",
    "control",
    "expr",
    "fn",
    "let",
]
