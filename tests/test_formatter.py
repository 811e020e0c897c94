"""Whole-file formatting: rendering, line preservation and error enrichment."""
from __future__ import annotations

import unittest
from typing import Any, Dict

import ifdef
from ifdef.core.errors import DirectiveError, ExpressionError, IfdefError, UnterminatedBlockError
from ifdef.parsing.expression import ExpressionEvaluator
from ifdef.parsing.matcher import DirectiveMatcher
from ifdef.processing.block_parser import BlockParser
from ifdef.processing.formatter import Formatter
from ifdef.runtime.settings import PreprocessorSettings


def _formatter(variables: Dict[str, Any] | None = None, **kwargs: Any) -> Formatter:
    matcher = DirectiveMatcher()
    parser = BlockParser(matcher=matcher, evaluator=ExpressionEvaluator(), variables=variables or {})
    return Formatter(matcher=matcher, block_parser=parser, **kwargs)


EXAMPLE = "///#if false\na\n///#else\nb\n///#endif"


class RenderingTests(unittest.TestCase):
    def test_if_else_example(self) -> None:
        out = _formatter().format(EXAMPLE).text.split("\n")
        self.assertEqual(len(out), 5)
        self.assertEqual(out[1], "//a")
        self.assertEqual(out[3], "b")
        self.assertEqual(out[0], "/////#if false")
        self.assertEqual(out[4], "/////#endif")

    def test_fill_with_spaces(self) -> None:
        out = _formatter(fill_with_spaces=True).format(EXAMPLE).text.split("\n")
        self.assertEqual(out[1], " ")
        self.assertEqual(out[0], " " * len("///#if false"))
        self.assertEqual(out[3], "b")
        self.assertTrue(all(not ln.strip() for i, ln in enumerate(out) if i != 3))

    def test_fill_with_spaces_keeps_carriage_return(self) -> None:
        text = "///#if false\r\nabc\r\n///#endif\r\nkeep\r\n"
        out = _formatter(fill_with_spaces=True).format(text).text
        self.assertEqual(out, " " * 12 + "\r\n   \r\n         \r\nkeep\r\n")

    def test_custom_comment_prefix(self) -> None:
        out = _formatter(comment_prefix="# ").format(EXAMPLE).text.split("\n")
        self.assertEqual(out[1], "# a")

    def test_strict_equality_on_injected_value(self) -> None:
        text = "///#if X === 1\ncontent\n///#endif"
        self.assertEqual(_formatter({"X": 1}).format(text).text.split("\n")[1], "content")
        self.assertEqual(_formatter({"X": "1"}).format(text).text.split("\n")[1], "//content")

    def test_text_without_directives_is_untouched(self) -> None:
        text = "a\n\n  b\n// c\n"
        res = _formatter().format(text)
        self.assertEqual(res.text, text)
        self.assertEqual(res.diagnostics, [])

    def test_multiple_top_level_blocks_are_merged(self) -> None:
        text = "///#if A\na\n///#endif\nmid\n///#if !A\nb\n///#endif\nend"
        out = _formatter({"A": True}).format(text).text.split("\n")
        self.assertEqual(out[1], "a")
        self.assertEqual(out[3], "mid")
        self.assertEqual(out[5], "//b")
        self.assertEqual(out[7], "end")

    def test_stray_directives_outside_blocks_are_content(self) -> None:
        text = "///#endif\n///#error not inside a block\nx"
        self.assertEqual(_formatter().format(text).text, text)

    def test_line_count_is_preserved(self) -> None:
        samples = [
            EXAMPLE,
            EXAMPLE + "\n",
            "",
            "\n\n",
            "x\n///#if true\n///#if false\ny\n///#endif\n///#endif\n",
            "///#if false\n///#elseif true\n\n///#else\n///#endif",
        ]
        for fill in (False, True):
            fmt = _formatter(fill_with_spaces=fill)
            for text in samples:
                with self.subTest(text=text, fill=fill):
                    self.assertEqual(fmt.format(text).text.count("\n"), text.count("\n"))


class DiagnosticsTests(unittest.TestCase):
    def test_warning_collected_with_file(self) -> None:
        text = "a\n///#if true\n///#warning \"x\"\n///#endif"
        res = _formatter().format(text, file="src/app.ts")
        self.assertEqual(len(res.diagnostics), 1)
        d = res.diagnostics[0]
        self.assertEqual(d.message, '"x"')
        self.assertEqual(d.line, 3)
        self.assertEqual(d.file, "src/app.ts")
        self.assertEqual(res.warnings, [d])
        self.assertEqual(d.format(), 'src/app.ts:3:1: warning: "x"')

    def test_warnings_keep_order(self) -> None:
        text = "///#if true\n///#warn one\n///#endif\n///#if true\n///#warn two\n///#endif"
        res = _formatter().format(text)
        self.assertEqual([d.message for d in res.diagnostics], ["one", "two"])

    def test_warning_in_inactive_branch(self) -> None:
        text = "///#if false\n///#warning \"x\"\n///#endif"
        self.assertEqual(_formatter().format(text).diagnostics, [])


class FatalErrorTests(unittest.TestCase):
    def test_directive_error_is_enriched(self) -> None:
        text = "a\n///#if true\n  ///#error \"x\"\n///#endif"
        with self.assertRaises(DirectiveError) as cm:
            _formatter().format(text, file="f.js")
        loc = cm.exception.location
        self.assertEqual(cm.exception.message, '"x"')
        self.assertEqual(loc.line, 3)
        self.assertEqual(loc.line_text, '  ///#error "x"')
        self.assertEqual(loc.column, 2)
        self.assertEqual(loc.length, len('///#error "x"'))
        self.assertEqual(loc.file, "f.js")
        self.assertEqual(str(cm.exception), 'f.js:3:3: "x"')

    def test_unterminated_located_at_opening_line(self) -> None:
        text = "a\n///#if true\nb\n///#if false\nc\n///#endif\nd"
        with self.assertRaises(UnterminatedBlockError) as cm:
            _formatter().format(text)
        loc = cm.exception.location
        self.assertEqual(loc.line, 2)
        self.assertEqual(loc.line_text, "///#if true")
        self.assertEqual(loc.column, 0)

    def test_expression_error_located_at_directive(self) -> None:
        text = "x\n///#if UNKNOWN\n///#endif"
        with self.assertRaises(ExpressionError) as cm:
            _formatter().format(text)
        self.assertEqual(cm.exception.location.line, 2)
        self.assertEqual(cm.exception.location.length, len("///#if UNKNOWN"))

    def test_error_converts_to_diagnostic(self) -> None:
        with self.assertRaises(IfdefError) as cm:
            _formatter().format("///#if true\n///#err boom\n///#endif", file="m.ts")
        d = cm.exception.to_diagnostic()
        self.assertEqual((d.severity, d.message, d.line, d.file), ("error", "boom", 2, "m.ts"))


class FormatTextHelperTests(unittest.TestCase):
    def test_format_text_uses_injected_variables(self) -> None:
        settings = PreprocessorSettings(variables={"TARGET": "web"})
        res = ifdef.format_text("///#if TARGET === 'web'\nweb\n///#else\nnode\n///#endif", settings)
        self.assertEqual(res.text.split("\n")[1:4], ["web", "/////#else", "//node"])

    def test_format_text_double_slash_grammar(self) -> None:
        settings = PreprocessorSettings(variables={}, require_triple_slash=False)
        res = ifdef.format_text("//#if false\nx\n//#endif", settings)
        self.assertEqual(res.text, "////#if false\n//x\n////#endif")

    def test_verbose_inclusion_names_the_file(self) -> None:
        settings = PreprocessorSettings(variables={"ON": True}, verbose=True)
        text = "head\n///#if ON\nbody\n///#endif"
        with self.assertLogs("ifdef.parser", level="INFO") as cm:
            ifdef.format_text(text, settings, file="lib/mod.ts")
        self.assertEqual([r.getMessage() for r in cm.records], ["Including line lib/mod.ts:3"])


if __name__ == "__main__":
    unittest.main()
