"""Integration layer: settings, wiring and the file plugin."""
__all__ = [
    "plugin",
    "settings",
    "wiring",
]
