from tree_sitter import Node
from typing import Iterator, List

from .node_types import SyntaxIssue


class ASTWalker:
    """Utilities for traversing the Verilog AST"""

    @staticmethod
    def is_atomic(node: Node) -> bool:
        """Nodes whose text must never be split into separate tokens"""
        if node.child_count == 0:
            return True
        return "comment" in node.type or "string" in node.type

    @staticmethod
    def leaves(node: Node) -> Iterator[Node]:
        """Yield the token-level nodes of a subtree in source order.

        Uses an explicit stack; deeply nested expressions would otherwise
        hit the recursion limit.
        """
        stack = [node]
        while stack:
            current = stack.pop()
            if ASTWalker.is_atomic(current):
                yield current
            else:
                stack.extend(reversed(current.children))

    @staticmethod
    def collect_errors(node: Node, limit: int = 10) -> List[SyntaxIssue]:
        """Find ERROR and missing nodes, outermost first"""
        issues: List[SyntaxIssue] = []
        if not node.has_error:
            return issues
        stack = [node]
        while stack and len(issues) < limit:
            current = stack.pop()
            row, col = current.start_point
            if current.is_missing:
                issues.append(SyntaxIssue(row + 1, col + 1, f"missing '{current.type}'"))
                continue
            if current.type == "ERROR":
                issues.append(SyntaxIssue(row + 1, col + 1, "syntax error"))
                continue
            if current.has_error:
                stack.extend(reversed(current.children))
        issues.sort(key=lambda issue: (issue.line, issue.column))
        return issues
