"""Public API surface for ifdef.processing."""
__all__ = [
    "block_parser",
    "envctx",
    "formatter",
]
