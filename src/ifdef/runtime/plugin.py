from __future__ import annotations

"""
plugin – file-level entry point for build pipelines.

`IfdefPlugin` is what a bundler hook or the CLI talks to: it decides which
files to process, reads them, runs the formatter and packages the outcome
as a `LoadResult`. Fatal preprocessing errors reject the file (no
contents, one error diagnostic); I/O errors propagate to the host.
"""

from pathlib import Path
from typing import Optional, Union

from ifdef.constants import DEFAULT_LOADER, LOADERS
from ifdef.core.errors import IfdefError
from ifdef.core.interfaces.logging import LoggerLikeProtocol
from ifdef.core.models import LoadResult
from ifdef.logging.helpers import get_logger, trace_io
from ifdef.processing.formatter import Formatter
from ifdef.runtime.settings import PreprocessorSettings
from ifdef.runtime.wiring import build_formatter

PathLike = Union[str, Path]


def detect_loader(path: PathLike) -> str:
    """Loader name for *path*: its extension when known, else 'js'."""
    ext = Path(path).suffix.lstrip('.')
    return ext if ext in LOADERS else DEFAULT_LOADER


class IfdefPlugin:
    name = 'ifdef'

    def __init__(
        self,
        settings: Optional[PreprocessorSettings] = None,
        *,
        formatter: Optional[Formatter] = None,
        logger: Optional[LoggerLikeProtocol] = None,
    ) -> None:
        self._settings = settings or PreprocessorSettings()
        self._log = logger or get_logger('plugin')
        self._filter = self._settings.resolve_file_filter()
        self._formatter = formatter or build_formatter(self._settings, logger=get_logger('ifdef'))

    @property
    def settings(self) -> PreprocessorSettings:
        return self._settings

    def accepts(self, path: PathLike) -> bool:
        return bool(self._filter.search(str(path)))

    def process_text(self, text: str, path: PathLike) -> LoadResult:
        file = str(path)
        loader = detect_loader(path)
        try:
            result = self._formatter.format(text, file=file)
        except IfdefError as exc:
            diag = exc.to_diagnostic().with_file(file)
            self._log.debug('%s rejected: %s', file, exc.message)
            return LoadResult(contents=None, loader=loader, errors=[diag])
        return LoadResult(contents=result.text, loader=loader, warnings=list(result.diagnostics))

    def load(self, path: PathLike) -> LoadResult:
        """Read *path* as UTF-8 and preprocess it."""
        p = Path(path)
        trace_io(self._log, 'reading source', path=str(p))
        with p.open('r', encoding='utf-8', newline='') as fp:
            text = fp.read()
        trace_io(self._log, 'read source', path=str(p), chars=len(text))
        return self.process_text(text, p)
