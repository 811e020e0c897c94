import os
import re
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from ifdef.core.interfaces.logging import LoggerLikeProtocol
from ifdef.logging.helpers import get_logger

_INT_RX = re.compile(r'^[+-]?\d+$')
_FLOAT_RX = re.compile(r'^[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?$')


def coerce_value(raw: str) -> Any:
    """Turn a `-D NAME=VALUE` string into the value the expressions see."""
    if raw in ('true', 'false'):
        return raw == 'true'
    if _INT_RX.match(raw):
        return int(raw)
    if _FLOAT_RX.match(raw):
        return float(raw)
    return raw


class EnvContext:
    """Builds the read-only variable environment expressions run against.

    The core never looks at `os.environ`; snapshotting the process
    environment is a policy applied here, at the integration boundary.
    """

    def __init__(self, *, logger: Optional[LoggerLikeProtocol] = None) -> None:
        self._log = logger or get_logger('processing.env')

    def _fatal(self, msg: str, on_error: Optional[Callable[[str], None]]) -> None:
        if on_error is not None:
            on_error(msg)
        else:
            raise ValueError(msg)

    @staticmethod
    def freeze(variables: Mapping[str, Any]) -> Mapping[str, Any]:
        """Return a read-only copy of *variables*."""
        return MappingProxyType(dict(variables))

    def snapshot_process_env(self) -> Dict[str, str]:
        env = dict(os.environ)
        self._log.debug('snapshot of %d process environment variables', len(env))
        return env

    def parse_items(self, items: Optional[List[str]], *, on_error: Optional[Callable[[str], None]] = None) -> Dict[
        str, Any]:
        """Parse `NAME=VALUE` / `NAME` definitions; a bare NAME binds True."""
        env_map: Dict[str, Any] = {}
        for itm in items or []:
            key, sep, val = itm.partition('=')
            key = key.strip()
            if not key or not key.isidentifier():
                self._fatal(f"--define expects NAME[=VALUE] (got '{itm}')", on_error)
                continue
            env_map[key] = coerce_value(val) if sep else True
        return env_map

    def build(self, definitions: Optional[List[str]] = None, *, inherit: bool = True,
              on_error: Optional[Callable[[str], None]] = None) -> Mapping[str, Any]:
        """Layer parsed definitions over (optionally) the process environment."""
        base: Dict[str, Any] = self.snapshot_process_env() if inherit else {}
        return self.freeze({**base, **self.parse_items(definitions, on_error=on_error)})
