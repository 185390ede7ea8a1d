from sv_formatter.engine import FormatterEngine
from sv_formatter.models import FormatterConfig
from sv_formatter.rules.blank_lines import BlankLineRule


def format_source(source, **options):
    engine = FormatterEngine.default(FormatterConfig(**options))
    return engine.format_string(source)


def test_blank_line_runs_collapse():
    engine = FormatterEngine(FormatterConfig())
    engine.add_rule(BlankLineRule(engine.config))
    result = engine.format_string("\n\nmodule m;\n\n\n\nwire a;\nendmodule\n")
    assert result.source == "module m;\n\nwire a;\nendmodule\n"


def test_block_comment_surrounded_by_blank_lines():
    source = "module m;\ninitial begin\na = 1;\n/* block comment */\nb = 2;\nend\nendmodule\n"
    expected = ("module m;\n  initial begin\n    a = 1;\n\n    /* block comment */\n\n"
                "    b = 2;\n  end\nendmodule\n")
    result = format_source(source)
    assert result.source == expected
    assert format_source(expected).modified is False


def test_block_comment_at_file_start():
    result = format_source("/* header */\nmodule m;\nendmodule\n")
    assert result.source == "/* header */\n\nmodule m;\nendmodule\n"


def test_multiline_block_comment_spacing():
    source = "module m;\nwire a;\n/* first\n   second */\nwire b;\nendmodule\n"
    expected = "module m;\n  wire a;\n\n  /* first\n   second */\n\n  wire b;\nendmodule\n"
    assert format_source(source).source == expected


def test_block_comment_stays_with_class():
    source = "package p;\nendpackage\n/* bus transaction */\nclass c;\nendclass\n"
    expected = "package p;\nendpackage\n\n/* bus transaction */\nclass c;\nendclass\n"
    assert format_source(source).source == expected


def test_trailing_block_comment_untouched():
    source = "module m;\nwire a; /* note */\nwire b;\nendmodule\n"
    expected = "module m;\n  wire a; /* note */\n  wire b;\nendmodule\n"
    assert format_source(source).source == expected


def test_line_comment_keeps_neighbours():
    source = "module m;\nwire a;\n// note\nwire b;\nendmodule\n"
    expected = "module m;\n  wire a;\n  // note\n  wire b;\nendmodule\n"
    assert format_source(source).source == expected
