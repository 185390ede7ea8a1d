from sv_formatter.engine import FormatterEngine
from sv_formatter.models import FormatterConfig
from sv_formatter.rules.blank_lines import BlankLineRule
from sv_formatter.rules.declarations import DeclarationSeparatorRule
from sv_formatter.rules.indentation import IndentationRule


def format_source(source):
    config = FormatterConfig()
    engine = FormatterEngine(config)
    engine.add_rule(BlankLineRule(config))
    engine.add_rule(IndentationRule(config))
    engine.add_rule(DeclarationSeparatorRule(config))
    return engine.format_string(source).source


def test_blank_line_before_class():
    source = "package p;\nendpackage\nclass A;\nendclass\n"
    expected = "package p;\nendpackage\n\nclass A;\nendclass\n"
    assert format_source(source) == expected


def test_blank_line_goes_above_comment_block():
    source = "module m;\nendmodule\n// first line\n// second line\ninterface bus;\nendinterface\n"
    expected = "module m;\nendmodule\n\n// first line\n// second line\ninterface bus;\nendinterface\n"
    assert format_source(source) == expected


def test_extra_blank_lines_collapsed():
    source = "package p;\nendpackage\n\n\n\n\nclass A;\nendclass\n"
    expected = "package p;\nendpackage\n\nclass A;\nendclass\n"
    assert format_source(source) == expected


def test_declaration_at_file_start_untouched():
    source = "// header\nclass A;\nendclass\n"
    assert format_source(source) == source


def test_leading_blank_lines_removed():
    source = "\n\n\npackage p;\nendpackage\n"
    assert format_source(source) == "package p;\nendpackage\n"
