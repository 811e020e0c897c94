from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, NoReturn, Optional, Sequence

from ifdef.core.interfaces.logging import LoggerFactoryProtocol
from ifdef.core.models import Diagnostic
from ifdef.logging.factory import DefaultLoggerFactory
from ifdef.logging.helpers import get_logger, log_diagnostic
from ifdef.processing.envctx import EnvContext
from ifdef.runtime.plugin import IfdefPlugin
from ifdef.runtime.settings import PreprocessorSettings

logger = get_logger('cli')


def _configure_logging(factory: LoggerFactoryProtocol) -> None:
    """Route the module logger through *factory*, which applies the output mode."""
    global logger
    logger = factory.get_logger('cli')


class _UsageError(Exception):
    pass


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog='ifdef',
        formatter_class=argparse.RawTextHelpFormatter,
        description=(
            'ifdef – conditional-compilation preprocessor\n'
            'Lines inside inactive ///#if branches are commented out (or blanked);\n'
            'the line count of every file is preserved.'
        ),
    )
    p.add_argument('files', metavar='FILE', nargs='+', help='Source files to preprocess.')

    g_env = p.add_argument_group('Variables')
    g_env.add_argument(
        '-D', '--define',
        metavar='NAME[=VALUE]',
        action='append',
        dest='defines',
        help=(
            'Bind NAME in the expression environment. Repeatable. VALUE is read as\n'
            'true/false, an integer or a float when it looks like one, else a string.\n'
            'A bare NAME binds true.'
        ),
    )
    g_env.add_argument(
        '--no-env',
        action='store_true',
        help='Do not expose process environment variables to expressions.',
    )

    g_gram = p.add_argument_group('Grammar')
    g_gram.add_argument(
        '--double-slash',
        action='store_true',
        help='Accept //#directive instead of requiring ///#directive.',
    )
    g_gram.add_argument(
        '--pattern',
        metavar='REGEX',
        help="Custom directive pattern with named groups 'token' and 'expression'.",
    )
    g_gram.add_argument(
        '--filter',
        metavar='REGEX',
        dest='file_filter',
        help='Only process files whose path matches REGEX (default: \\.[jt]sx?).',
    )

    g_out = p.add_argument_group('Output')
    g_out.add_argument(
        '--fill-spaces',
        action='store_true',
        help='Replace suppressed lines with spaces instead of commenting them out.',
    )
    g_out.add_argument(
        '--comment-prefix',
        metavar='TEXT',
        help='Prefix used to comment out suppressed lines (default: //).',
    )
    dest = g_out.add_mutually_exclusive_group()
    dest.add_argument('-o', '--out-dir', metavar='DIR', help='Write results into DIR (same file names).')
    dest.add_argument('--in-place', action='store_true', help='Overwrite the input files.')

    g_misc = p.add_argument_group('Miscellaneous')
    g_misc.add_argument('-v', '--verbose', action='store_true', help='Log included lines and expression results.')
    g_misc.add_argument('--json-logs', action='store_true', help='Emit logs as JSON lines.')
    return p


def _settings_from_args(ns: argparse.Namespace) -> PreprocessorSettings:
    errors: List[str] = []
    variables = EnvContext(logger=get_logger('processing.env')).build(
        ns.defines, inherit=not ns.no_env, on_error=errors.append
    )
    if errors:
        raise _UsageError('; '.join(errors))
    kwargs = {}
    if ns.file_filter:
        kwargs['file_filter'] = ns.file_filter
    if ns.comment_prefix is not None:
        kwargs['comment_prefix'] = ns.comment_prefix
    return PreprocessorSettings(
        verbose=ns.verbose,
        pattern=ns.pattern,
        require_triple_slash=not ns.double_slash,
        fill_with_spaces=ns.fill_spaces,
        variables=variables,
        **kwargs,
    )


def _report(diags: Sequence[Diagnostic]) -> None:
    for d in diags:
        log_diagnostic(logger, d)


def _output_collisions(paths: Sequence[Path]) -> List[str]:
    """Base names shared by more than one of *paths*."""
    seen: Dict[str, Path] = {}
    clashes: List[str] = []
    for p in paths:
        prev = seen.setdefault(p.name, p)
        if prev != p and p.name not in clashes:
            clashes.append(p.name)
    return clashes


class Ifdef:
    """Top-level façade for command-style execution."""

    @staticmethod
    def run(argv: Sequence[str], *, logger_factory: Optional[LoggerFactoryProtocol] = None) -> int:
        """Preprocess the files named in *argv*; return the exit status.

        *logger_factory* defaults to a `DefaultLoggerFactory` honouring
        `--json-logs` and IFDEF_JSON_LOGS=1.
        """
        ns = _build_parser().parse_args(list(argv))
        if logger_factory is None:
            json_logs = ns.json_logs or os.getenv('IFDEF_JSON_LOGS') == '1'
            logger_factory = DefaultLoggerFactory(json_logs=json_logs, level=logging.INFO)
        _configure_logging(logger_factory)

        try:
            settings = _settings_from_args(ns)
            plugin = IfdefPlugin(settings)
        except (_UsageError, ValueError) as exc:
            logger.error('%s', exc)
            return 2

        out_dir: Optional[Path] = Path(ns.out_dir) if ns.out_dir else None
        if out_dir is not None:
            clashes = _output_collisions([Path(n) for n in ns.files if plugin.accepts(n)])
            if clashes:
                logger.error('several inputs would be written to the same file in %s: %s',
                             out_dir, ', '.join(clashes))
                return 2
            out_dir.mkdir(parents=True, exist_ok=True)

        failed = False
        for name in ns.files:
            path = Path(name)
            if not plugin.accepts(path):
                logger.warning('⚠  skipping %s (does not match file filter)', path)
                continue
            try:
                result = plugin.load(path)
            except OSError as exc:
                logger.error('cannot read %s: %s', path, exc)
                failed = True
                continue
            _report(result.warnings)
            if not result.ok:
                _report(result.errors)
                failed = True
                continue
            contents = result.contents or ''
            if ns.in_place:
                target: Optional[Path] = path
            elif out_dir is not None:
                target = out_dir / path.name
            else:
                target = None
            if target is None:
                sys.stdout.write(contents)
            else:
                with target.open('w', encoding='utf-8', newline='') as fp:
                    fp.write(contents)
                logger.info('✔ %s → %s', path, target)
        return 1 if failed else 0


def main() -> NoReturn:
    """Entry point for the `ifdef` console script."""
    try:
        raise SystemExit(Ifdef.run(sys.argv[1:]))
    except KeyboardInterrupt:
        logger.error('Interrupted by user.')
        raise SystemExit(130)
    except BrokenPipeError:
        raise SystemExit(0)


if __name__ == '__main__':
    main()
