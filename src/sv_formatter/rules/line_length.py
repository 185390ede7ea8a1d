import logging
from typing import Dict, List, Optional

from ..renderer import Renderer
from ..stream import CLOSERS, OPENERS, Entry, TokenKind
from .base import FormattingContext, FormattingRule, ReplaceTrivia, Transformation

logger = logging.getLogger(__name__)

BINARY_OPERATORS = frozenset({
    "=", "<=", "+", "-", "*", "/", "%", "&", "|", "^", "~^", "^~", "&&", "||",
    "==", "!=", "===", "!==", "==?", "!=?", "<", ">", ">=", "<<", ">>", "<<<",
    ">>>", "->", "<->", "|->", "|=>",
})
OPERAND_KINDS = (TokenKind.IDENTIFIER, TokenKind.NUMBER, TokenKind.STRING, TokenKind.SYSTEM, TokenKind.MACRO)


def split_lines(entries) -> List[List[Entry]]:
    """Group entries by the output line they start on"""
    lines: List[List[Entry]] = []
    for i, entry in enumerate(entries):
        if i == 0 or entry.newlines > 0:
            lines.append([])
        lines[-1].append(entry)
    return lines


class AutoWrapRule(FormattingRule):
    """Breaks overlong code lines after a comma or a top-level binary operator.

    The new line keeps the depth the indentation stage computed for its
    first entry, so it lands under the open bracket or one level deeper
    than the statement.
    """

    @property
    def rule_id(self) -> str: return "F008"
    @property
    def name(self) -> str: return "auto-wrap"

    def analyze(self, context: FormattingContext) -> List[Transformation]:
        limit = self.config.max_line_length
        if not self.config.auto_wrap_long_lines or limit <= 0:
            return []
        renderer = Renderer(self.config)
        layout = renderer.layout(context.stream)
        starts = {key: p.start for key, p in layout.placements.items()}
        ends = {key: p.end for key, p in layout.placements.items()}

        transformations: List[Transformation] = []
        for line in split_lines(context.stream):
            if line[0].token.transparent or any("\n" in e.text for e in line):
                continue
            if ends[id(line[-1])] <= limit:
                continue
            for entry in self._wrap_line(renderer, line, starts, ends, limit):
                transformations.append(ReplaceTrivia(entry, newlines=1))
        return transformations

    def _wrap_line(self, renderer: Renderer, line: List[Entry], starts: Dict[int, int],
                   ends: Dict[int, int], limit: int) -> List[Entry]:
        breaks = []
        s = 0
        while ends[id(line[-1])] > limit:
            j = self._break_point(line, s, ends, limit)
            if j is None:
                break
            entry = line[j]
            hang_column = starts[id(entry.hang)] + 1 if entry.hang is not None and id(entry.hang) in starts else None
            new_start = renderer.measure(renderer.indentation(entry.depth, hang_column))
            shift = new_start - starts[id(entry)]
            if shift >= 0:
                break
            for moved in line[j:]:
                starts[id(moved)] += shift
                ends[id(moved)] += shift
            breaks.append(entry)
            s = j
        if breaks:
            logger.debug("wrapped line starting with %r at %d point(s)", line[0].text, len(breaks))
        return breaks

    def _break_point(self, line: List[Entry], s: int, ends: Dict[int, int], limit: int) -> Optional[int]:
        """Right-most index j such that a break before line[j] fits the limit"""
        best = None
        depth = 0
        for j in range(1, len(line)):
            before = line[j - 1]
            if j - 1 > s and ends[id(before)] <= limit and self._breakable(line, j, depth):
                best = j
            if before.text in OPENERS:
                depth += 1
            elif before.text in CLOSERS:
                depth -= 1
        return best

    def _breakable(self, line: List[Entry], j: int, depth: int) -> bool:
        before = line[j - 1]
        if line[j].token.kind == TokenKind.COMMENT or before.token.kind == TokenKind.COMMENT:
            return False
        if before.text == ",":
            return True
        if before.text not in BINARY_OPERATORS or depth > 0 or j < 2:
            return False
        operand = line[j - 2]
        return operand.token.kind in OPERAND_KINDS or operand.text in CLOSERS


class LineLengthRule(FormattingRule):
    """Reports output lines wider than max_line_length"""

    @property
    def rule_id(self) -> str: return "F009"
    @property
    def name(self) -> str: return "line-length"

    def analyze(self, context: FormattingContext) -> List[Transformation]:
        limit = self.config.max_line_length
        if limit <= 0:
            return []
        renderer = Renderer(self.config)
        text = renderer.render(context.stream)
        for number, line in enumerate(text.split("\n"), start=1):
            width = renderer.measure(line)
            if width <= limit:
                continue
            message = f"line {number} has {width} columns (max {limit})"
            if self.config.auto_wrap_long_lines:
                message += "; no safe split point"
            context.report(self.rule_id, message, line=number, column=limit + 1)
        return []
