"""Logging helpers scoped to the 'ifdef' namespace."""
