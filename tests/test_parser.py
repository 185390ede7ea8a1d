import pytest
from sv_tree_sitter import VerilogParser


@pytest.fixture
def parser():
    return VerilogParser()


@pytest.mark.parametrize("source", [
    "module m;\ninitial begin\n  a[i] = 0;\nend\nendmodule\n",
    "module m;\ninitial begin\n  foreach (a[i]) a[i] = 0;\nend\nendmodule\n",
    "module m;\nalways_ff @(posedge clk) begin\n"
    "  assert property (@(posedge clk) req |-> ##1 ack) else $error(\"no ack\");\nend\nendmodule\n",
])
def test_common_constructs_parse_cleanly(parser, source):
    result = parser.parse_string(source)
    assert result.ok, result.errors


def test_indexed_loop_body_parses(parser):
    source = "module m;\ninitial begin\n  for (int i = 0; i < 4; i++)\n    a[i] = 0;\nend\nendmodule\n"
    assert parser.parse_string(source).errors == []


def test_syntax_error_is_reported(parser):
    result = parser.parse_string("module m;\n  assign = ;\nendmodule\n")
    assert not result.ok
    assert result.errors[0].line >= 1


def test_macro_call_parses(parser):
    source = "module m;\ninitial begin\n  `CHECK(a, b);\nend\nendmodule\n"
    assert parser.parse_string(source).ok
