"""Directive recognition and expression evaluation."""
__all__ = [
    "expression",
    "matcher",
]
