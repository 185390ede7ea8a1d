from .ast_walker import ASTWalker
from .node_types import ParseResult, SyntaxIssue
from .parser import VerilogParser

__all__ = ["ASTWalker", "ParseResult", "SyntaxIssue", "VerilogParser"]
