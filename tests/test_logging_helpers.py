"""Logger naming, JSON formatting, diagnostics context and IO tracing."""
from __future__ import annotations

import io
import json
import logging
import os
import sys
import unittest
from unittest.mock import patch

import ifdef
from ifdef.core.interfaces import LoggerFactoryProtocol
from ifdef.core.models import Diagnostic
from ifdef.logging.factory import DefaultLoggerFactory
from ifdef.logging.helpers import (
    BASE_LOGGER,
    JsonLogFormatter,
    diagnostic_context,
    get_logger,
    log_diagnostic,
    setup_base_logger,
    trace_io,
)


def _capture_json(name: str) -> tuple[logging.Logger, io.StringIO, logging.Handler]:
    buf = io.StringIO()
    handler = logging.StreamHandler(buf)
    handler.setFormatter(JsonLogFormatter())
    lg = logging.getLogger(name)
    lg.addHandler(handler)
    lg.setLevel(logging.DEBUG)
    return lg, buf, handler


class LoggerNamingTests(unittest.TestCase):
    def test_names_are_namespaced(self) -> None:
        self.assertEqual(get_logger().name, "ifdef")
        self.assertEqual(get_logger("ifdef").name, "ifdef")
        self.assertEqual(get_logger("parser").name, "ifdef.parser")
        self.assertEqual(get_logger("ifdef.expr").name, "ifdef.expr")

    def test_factory_returns_scoped_loggers(self) -> None:
        factory = DefaultLoggerFactory(stream=io.StringIO())
        self.assertIsInstance(factory, LoggerFactoryProtocol)
        self.assertEqual(factory.get_logger("formatter").name, "ifdef.formatter")


class BaseLoggerSetupTests(unittest.TestCase):
    def test_switching_modes_reuses_one_handler(self) -> None:
        base = logging.getLogger(BASE_LOGGER)
        saved = list(base.handlers)
        try:
            setup_base_logger(json_logs=False, stream=io.StringIO())
            count = len(base.handlers)
            buf = io.StringIO()
            setup_base_logger(json_logs=True, stream=buf)
            self.assertEqual(len(base.handlers), count)
            get_logger("tests.mode").warning("switched")
            payload = json.loads(buf.getvalue().strip().splitlines()[-1])
            self.assertEqual(payload["msg"], "switched")
            self.assertEqual(payload["logger"], "ifdef.tests.mode")
        finally:
            setup_base_logger(json_logs=False, stream=sys.stderr)
            for h in list(base.handlers):
                if h not in saved:
                    base.removeHandler(h)


class JsonFormatterTests(unittest.TestCase):
    def test_payload_fields(self) -> None:
        record = logging.LogRecord("ifdef.parser", logging.WARNING, __file__, 1, "hello %s", ("world",), None)
        record.context = {"file": "a.ts"}
        payload = json.loads(JsonLogFormatter().format(record))
        self.assertEqual(payload["level"], "WARNING")
        self.assertEqual(payload["logger"], "ifdef.parser")
        self.assertEqual(payload["msg"], "hello world")
        self.assertEqual(payload["version"], ifdef.__version__)
        self.assertEqual(payload["ctx"], {"file": "a.ts"})
        self.assertTrue(payload["ts"].endswith("Z"))

    def test_no_ctx_without_context(self) -> None:
        record = logging.LogRecord("ifdef", logging.INFO, __file__, 1, "plain", (), None)
        self.assertNotIn("ctx", json.loads(JsonLogFormatter().format(record)))


class DiagnosticLoggingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.diag = Diagnostic(
            severity="warning",
            message="legacy path",
            line=4,
            column=2,
            length=20,
            line_text="  ///#warning legacy path",
            file="src/app.ts",
        )

    def test_context_fields(self) -> None:
        self.assertEqual(
            diagnostic_context(self.diag),
            {"severity": "warning", "file": "src/app.ts", "line": 4, "column": 2, "length": 20},
        )

    def test_context_leaves_out_unknown_location(self) -> None:
        diag = Diagnostic(severity="error", message="boom", line=1)
        self.assertEqual(diagnostic_context(diag), {"severity": "error", "line": 1})

    def test_json_log_carries_structured_location(self) -> None:
        lg, buf, handler = _capture_json("ifdef.tests.diag")
        try:
            log_diagnostic(lg, self.diag)
        finally:
            lg.removeHandler(handler)
        payload = json.loads(buf.getvalue())
        self.assertEqual(payload["level"], "WARNING")
        self.assertEqual(payload["msg"], "src/app.ts:4:3: warning: legacy path")
        self.assertEqual(payload["ctx"]["file"], "src/app.ts")
        self.assertEqual(payload["ctx"]["line"], 4)
        self.assertEqual(payload["ctx"]["column"], 2)

    def test_error_severity_logs_at_error(self) -> None:
        lg = get_logger("tests.diag")
        diag = Diagnostic(severity="error", message="unsupported", line=2, file="x.ts")
        with self.assertLogs(lg, level="ERROR") as cm:
            log_diagnostic(lg, diag)
        self.assertEqual(cm.records[0].levelno, logging.ERROR)
        self.assertEqual(cm.records[0].context["file"], "x.ts")


class TraceIoTests(unittest.TestCase):
    def test_trace_disabled_by_default(self) -> None:
        lg = get_logger("tests.trace")
        with patch.dict(os.environ, {"IFDEF_TRACE_IO": "0"}):
            with self.assertRaises(AssertionError):
                with self.assertLogs(lg, level="DEBUG"):
                    trace_io(lg, "quiet")

    def test_trace_enabled(self) -> None:
        lg = get_logger("tests.trace")
        with patch.dict(os.environ, {"IFDEF_TRACE_IO": "1"}):
            with self.assertLogs(lg, level="DEBUG") as cm:
                trace_io(lg, "loud", path="x.ts")
        self.assertIn("loud", cm.output[0])
        self.assertEqual(cm.records[0].context, {"path": "x.ts"})


if __name__ == "__main__":
    unittest.main()
