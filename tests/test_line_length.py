from sv_formatter.engine import FormatterEngine
from sv_formatter.models import FormatterConfig, Severity
from sv_formatter.renderer import Renderer

SOURCE = 'module m;\n  initial $display("aaaaaaaaaa", "bbbbbbbbbb");\nendmodule\n'


def format_source(source, **options):
    engine = FormatterEngine.default(FormatterConfig(**options))
    return engine.format_string(source)


def long_lines(result):
    return [d for d in result.diagnostics if d.rule_id == "F009"]


def test_long_line_reported():
    result = format_source(SOURCE, max_line_length=40)
    assert result.source == SOURCE
    [diagnostic] = long_lines(result)
    assert diagnostic.severity == Severity.WARNING
    assert diagnostic.line == 2
    assert diagnostic.message == "line 2 has 47 columns (max 40)"


def test_line_length_check_disabled():
    assert long_lines(format_source(SOURCE, max_line_length=0)) == []


def test_auto_wrap_breaks_after_comma():
    result = format_source(SOURCE, max_line_length=40, auto_wrap_long_lines=True)
    expected = ('module m;\n  initial $display("aaaaaaaaaa",\n'
                '                   "bbbbbbbbbb");\nendmodule\n')
    assert result.source == expected
    assert long_lines(result) == []


def test_auto_wrap_output_is_stable():
    once = format_source(SOURCE, max_line_length=40, auto_wrap_long_lines=True).source
    again = format_source(once, max_line_length=40, auto_wrap_long_lines=True)
    assert again.source == once
    assert again.modified is False


def test_auto_wrap_without_split_point():
    source = "module m;\n  initial $display(abcdefghijklmnopqrstuvwxyz);\nendmodule\n"
    result = format_source(source, max_line_length=20, auto_wrap_long_lines=True)
    assert result.source == source
    [diagnostic] = long_lines(result)
    assert diagnostic.message == "line 2 has 47 columns (max 20); no safe split point"


def test_leading_tabs_count_as_indent_width():
    source = "module m;\n\twire [7:0] abc;\nendmodule\n"
    result = format_source(source, use_tabs=True, indent_width=4, max_line_length=12)
    assert result.source == source
    [diagnostic] = long_lines(result)
    assert diagnostic.message == "line 2 has 19 columns (max 12)"


def test_renderer_measure():
    renderer = Renderer(FormatterConfig(indent_width=3))
    assert renderer.measure("\t\tab") == 8
    assert renderer.measure("  a\tb") == 5
