from dataclasses import dataclass
from typing import List
from tree_sitter import Tree


@dataclass
class SyntaxIssue:
    """A malformed-input report from the parser (1-based position)"""
    line: int
    column: int
    message: str


@dataclass
class ParseResult:
    """Result of a tree-sitter parse operation"""
    tree: Tree
    source: str
    errors: List[SyntaxIssue]

    @property
    def ok(self) -> bool:
        return not self.errors
