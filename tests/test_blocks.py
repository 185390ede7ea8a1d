from sv_formatter.engine import FormatterEngine
from sv_formatter.models import FormatterConfig, Severity


def wrap(*lines):
    body = "".join(f"    {line}\n" if line else "\n" for line in lines)
    return f"module m;\n  initial begin\n{body}  end\nendmodule\n"


def format_source(source, **options):
    engine = FormatterEngine.default(FormatterConfig(**options))
    return engine.format_string(source)


def test_wrap_two_statement_body():
    source = wrap("if (a)", "  x = 1;", "  y = 2;")
    expected = wrap("if (a) begin", "  x = 1;", "  y = 2;", "end")
    assert format_source(source).source == expected


def test_single_statement_body_not_wrapped():
    source = wrap("if (a)", "  x = 1;", "y = 2;")
    result = format_source(source)
    assert result.source == source
    assert result.modified is False


def test_wrap_disabled():
    source = wrap("if (a)", "  x = 1;", "  y = 2;")
    expected = wrap("if (a)", "  x = 1;", "y = 2;")
    assert format_source(source, wrap_multiline_blocks=False).source == expected


def test_wrap_loop_body():
    source = wrap("for (int i = 0; i < 4; i++)", "  a[i] = 0;", "  b[i] = 1;")
    expected = wrap("for (int i = 0; i < 4; i++) begin", "  a[i] = 0;", "  b[i] = 1;", "end")
    assert format_source(source).source == expected


def test_wrap_nested_dangling_bodies():
    source = wrap("if (a)", "  if (b)", "    x = 1;", "    y = 2;", "  z = 3;")
    expected = wrap("if (a) begin", "  if (b) begin", "    x = 1;", "    y = 2;", "  end", "  z = 3;", "end")
    result = format_source(source)
    assert result.source == expected
    assert format_source(result.source).source == expected


def test_wrap_inner_level_only():
    source = wrap("if (a)", "  if (b)", "    x = 1;", "    y = 2;", "z = 3;")
    expected = wrap("if (a)", "  if (b) begin", "    x = 1;", "    y = 2;", "  end", "z = 3;")
    assert format_source(source).source == expected


def test_wrap_else_body():
    source = wrap("if (a)", "  x = 1;", "else", "  x = 0;", "  y = 0;")
    expected = wrap("if (a)", "  x = 1;", "else begin", "  x = 0;", "  y = 0;", "end")
    assert format_source(source).source == expected


def test_wrap_keeps_trailing_comment_inside():
    source = wrap("if (a)", "  x = 1;", "  y = 2; // last")
    expected = wrap("if (a) begin", "  x = 1;", "  y = 2; // last", "end")
    assert format_source(source).source == expected


def test_wrap_output_is_stable():
    source = wrap("if (a)", "  x = 1;", "  y = 2;")
    once = format_source(source).source
    assert format_source(once).source == once


def test_wrap_across_directive_is_reported():
    source = ("module m;\n  initial begin\n    if (a)\n      x = 1;\n"
              "`ifdef SIM\n      y = 2;\n`endif\n  end\nendmodule\n")
    result = format_source(source)
    assert "begin\n      x" not in result.source
    warnings = [d for d in result.diagnostics if d.rule_id == "F004"]
    assert len(warnings) == 1
    assert warnings[0].severity == Severity.WARNING
    assert warnings[0].line == 3


def test_end_else_joined():
    source = wrap("if (a) begin", "  x = 1;", "end", "else begin", "  x = 0;", "end")
    expected = wrap("if (a) begin", "  x = 1;", "end else begin", "  x = 0;", "end")
    assert format_source(source).source == expected


def test_end_else_join_keeps_block_comment():
    source = wrap("if (a) begin", "  x = 1;", "end", "/* other */ else begin", "  x = 0;", "end")
    expected = wrap("if (a) begin", "  x = 1;", "end /* other */ else begin", "  x = 0;", "end")
    assert format_source(source).source == expected


def test_end_else_not_joined_after_line_comment():
    source = wrap("if (a) begin", "  x = 1;", "end // done", "else begin", "  x = 0;", "end")
    assert format_source(source).source == source


def test_end_else_join_disabled():
    source = wrap("if (a) begin", "  x = 1;", "end", "else begin", "  x = 0;", "end")
    assert format_source(source, inline_end_else=False).source == source
