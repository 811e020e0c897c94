from __future__ import annotations

"""Project-wide constants used across modules.

This module isolates public constants to reduce cross-module coupling.
"""

# Directive grammars. Both patterns are searched (not anchored) in a line.
TRIPLE_SLASH_PATTERN: str = r'///\s*#(?P<token>.*?)(?:\s+(?P<expression>.*?))?\s*$'
DOUBLE_SLASH_PATTERN: str = r'//\s*#(?P<token>.*?)(?:\s+(?P<expression>.*?))?\s*$'

# Prefix written in front of suppressed lines when not filling with spaces.
COMMENT_PREFIX: str = '//'

# Files the plugin accepts by default (searched in the path).
DEFAULT_FILE_FILTER: str = r'\.[jt]sx?'

LOADERS: tuple[str, ...] = ('tsx', 'jsx', 'ts', 'js')
DEFAULT_LOADER: str = 'js'
