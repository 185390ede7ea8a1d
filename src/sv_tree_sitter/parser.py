import logging

import tree_sitter_systemverilog as tssv
from tree_sitter import Language, Parser

from .ast_walker import ASTWalker
from .node_types import ParseResult
from .preprocessor import mask_preprocessor

logger = logging.getLogger(__name__)


class VerilogParser:
    """Thin wrapper around the tree-sitter SystemVerilog grammar.

    Parser objects are not thread-safe; create one per worker thread.
    """

    def __init__(self):
        self.language = Language(tssv.language())
        self.parser = Parser(self.language)

    def parse_string(self, source: str) -> ParseResult:
        """Parse source text; syntax problems are reported, not raised"""
        tree = self.parser.parse(mask_preprocessor(source))
        errors = ASTWalker.collect_errors(tree.root_node)
        if errors:
            logger.debug("parser reported %d problem(s), first at line %d", len(errors), errors[0].line)
        return ParseResult(tree=tree, source=source, errors=errors)
