"""Evaluator helper modules for the Eucalyptus runtime."""

__all__ = [
    "blocks",
    "common",
    "expr",
    "fn",
]
