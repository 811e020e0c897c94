from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Pattern, Union

from ifdef.constants import COMMENT_PREFIX, DEFAULT_FILE_FILTER
from ifdef.parsing.matcher import compile_pattern
from ifdef.processing.envctx import EnvContext


@dataclass(frozen=True)
class PreprocessorSettings:
    """Immutable configuration for one preprocessor instance.

    Attributes:
        verbose: Log every included line and every expression result.
        pattern: Custom directive pattern with named groups `token` and
            (optionally) `expression`. Overrides `require_triple_slash`.
        file_filter: Pattern searched in a path to decide whether the
            plugin processes the file.
        require_triple_slash: Use the `///#` grammar (else `//#`).
        fill_with_spaces: Blank suppressed lines instead of commenting them.
        variables: Expression environment. None means a snapshot of the
            process environment taken when the settings are resolved.
        comment_prefix: Prefix written in front of suppressed lines.
    """
    verbose: bool = False
    pattern: Union[str, Pattern[str], None] = None
    file_filter: Union[str, Pattern[str]] = DEFAULT_FILE_FILTER
    require_triple_slash: bool = True
    fill_with_spaces: bool = False
    variables: Optional[Mapping[str, Any]] = None
    comment_prefix: str = COMMENT_PREFIX

    def resolve_pattern(self) -> Pattern[str]:
        return compile_pattern(self.pattern, require_triple_slash=self.require_triple_slash)

    def resolve_file_filter(self) -> Pattern[str]:
        if isinstance(self.file_filter, str):
            return re.compile(self.file_filter)
        return self.file_filter

    def resolve_variables(self, env_ctx: Optional[EnvContext] = None) -> Mapping[str, Any]:
        ctx = env_ctx or EnvContext()
        if self.variables is None:
            return ctx.freeze(ctx.snapshot_process_env())
        return ctx.freeze(self.variables)
