import logging
from typing import Dict, List, Tuple

from ..stream import Entry, Token, TokenKind, TokenStream
from ..structure import Clause, Statement
from .base import (FormattingContext, FormattingRule, InsertToken, ReplaceTrivia,
                   ShiftDepth, Transformation)

logger = logging.getLogger(__name__)

WRAP_KEYWORDS = frozenset({"if", "else", "for", "foreach", "while", "repeat", "forever"})


class BodyWrapper:
    """Encloses multi-statement dangling bodies in a synthesized begin/end.

    A body counts as multi-statement when the statements following the
    construct were written on lines indented deeper than the construct's
    header. Nested dangling constructs are resolved innermost first; each
    level takes the deeper statements left over by the level inside it.
    """

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        self._out: List[Transformation] = []
        # extra depth applied to a statement by an enclosing wrap
        self._extra: Dict[int, int] = {}

    def run(self, context: FormattingContext) -> List[Transformation]:
        self._visit_list(context, context.structure.statements, 0)
        return self._out

    def _visit_list(self, context: FormattingContext, statements: List[Statement], shift: int) -> None:
        i = 0
        while i < len(statements):
            statement = statements[i]
            rest = statements[i + 1:]
            plan, taken = self._plan(context, self._chain(statement), rest)
            level_shift = shift
            for clause, absorbed, body_end in reversed(plan):
                if absorbed:
                    level_shift = self._wrap(context, clause, absorbed, body_end, level_shift)
            self._descend(context, statement, shift)
            i += 1 + taken

    def _descend(self, context: FormattingContext, statement: Statement, shift: int) -> None:
        shift += self._extra.get(id(statement), 0)
        if statement.children:
            self._visit_list(context, statement.children, shift)
        for clause in statement.clauses:
            if clause.body is not None:
                self._descend(context, clause.body, shift)
        for arm in statement.arms:
            if arm.body is not None:
                self._descend(context, arm.body, shift)

    def _chain(self, statement: Statement) -> List[Clause]:
        """Dangling clauses from the outermost construct inward"""
        levels = []
        current = statement
        while current.kind in ("conditional", "loop") and current.clauses:
            clause = current.clauses[-1]
            body = clause.body
            if body is None or clause.keyword.text not in WRAP_KEYWORDS:
                break
            if clause.keyword.text == "else" and body.kind == "conditional":
                current = body
                continue
            if body.is_block:
                break
            levels.append(clause)
            current = body
        return levels

    def _plan(self, context: FormattingContext, levels: List[Clause],
              rest: List[Statement]) -> Tuple[List[Tuple[Clause, List[Statement], Entry]], int]:
        stream = context.stream
        if not levels:
            return [], 0
        plan = []
        taken = 0
        reach = levels[-1].body.last
        for clause in reversed(levels):
            indent = stream.line_start_of(clause.keyword).source_indent or 0
            absorbed = []
            while taken < len(rest) and self._deeper(rest[taken], indent):
                absorbed.append(rest[taken])
                taken += 1
            plan.append((clause, absorbed, reach))
            if absorbed:
                reach = absorbed[-1].last

        for clause, absorbed, _ in plan:
            if absorbed and not self._delimitable(stream, clause, absorbed):
                context.report(
                    self.rule_id,
                    f"could not delimit the body of '{clause.keyword.text}'; left unwrapped",
                    entry=clause.keyword,
                )
                return [], 0
        return plan, taken

    def _deeper(self, statement: Statement, indent: int) -> bool:
        first = statement.first
        return first.newlines > 0 and first.source_indent is not None and first.source_indent > indent

    def _delimitable(self, stream: TokenStream, clause: Clause, absorbed: List[Statement]) -> bool:
        if not clause.body.complete or not all(s.complete for s in absorbed):
            return False
        span = stream.between(clause.header_last, absorbed[-1].last) + [absorbed[-1].last]
        return not any(e.token.kind == TokenKind.DIRECTIVE for e in span)

    def _wrap(self, context: FormattingContext, clause: Clause, absorbed: List[Statement],
              body_end: Entry, shift: int) -> int:
        """Emit the edits for one level; returns the shift seen inside its body"""
        stream = context.stream
        body = clause.body
        header_depth = stream.line_start_of(clause.keyword).depth
        target = header_depth + 1
        logger.debug("wrapping '%s' body with %d extra statement(s)", clause.keyword.text, len(absorbed))

        self._out.append(InsertToken(
            clause.header_last,
            Entry(Token(TokenKind.KEYWORD, "begin"), newlines=0, spaces=1, depth=header_depth + shift),
        ))
        if body.first.newlines == 0:
            self._out.append(ReplaceTrivia(body.first, newlines=1))

        body_delta = target - body.first.depth
        if body_delta:
            self._out.append(ShiftDepth(body.first, body_end, body_delta))
            self._extra[id(body)] = body_delta

        absorbed_delta = target - absorbed[0].first.depth
        if absorbed_delta:
            self._out.append(ShiftDepth(stream.next(body_end), absorbed[-1].last, absorbed_delta))

        anchor = absorbed[-1].last
        following = stream.next(anchor)
        while following is not None and following.newlines == 0 and following.token.kind == TokenKind.COMMENT:
            anchor = following
            following = stream.next(anchor)
        end_depth = header_depth + shift
        self._out.append(InsertToken(
            anchor,
            Entry(Token(TokenKind.KEYWORD, "end"), newlines=1, depth=end_depth),
            priority=end_depth,
        ))
        if following is not None and following.newlines == 0:
            self._out.append(ReplaceTrivia(following, newlines=1))

        self._visit_list(context, absorbed, shift + absorbed_delta)
        return shift + body_delta


class BlockWrapRule(FormattingRule):
    """Wraps dangling bodies that span several statements in begin/end"""

    @property
    def rule_id(self) -> str: return "F004"
    @property
    def name(self) -> str: return "block-wrap"

    def analyze(self, context: FormattingContext) -> List[Transformation]:
        if not self.config.wrap_multiline_blocks:
            return []
        return BodyWrapper(self.rule_id).run(context)


class EndElseJoinRule(FormattingRule):
    """Puts `else` on the same line as the `end` that closes the preceding branch."""

    @property
    def rule_id(self) -> str: return "F005"
    @property
    def name(self) -> str: return "end-else"

    def analyze(self, context: FormattingContext) -> List[Transformation]:
        if not self.config.inline_end_else:
            return []
        stream = context.stream
        transformations = []
        for statement in context.structure.walk():
            if statement.kind not in ("conditional", "assertion") or len(statement.clauses) < 2:
                continue
            then_body = statement.clauses[0].body
            else_kw = statement.clauses[1].keyword
            if then_body is None or not then_body.is_block or then_body.closer is None:
                continue
            if then_body.keyword.text != "begin":
                continue
            between = stream.between(then_body.last, else_kw)
            if else_kw.newlines == 0 and all(e.newlines == 0 for e in between):
                continue
            # a line comment after `end` has to stay last on its line
            if any(e.token.kind == TokenKind.DIRECTIVE or e.text.startswith("//") or "\n" in e.text
                   for e in between):
                continue
            for entry in between + [else_kw]:
                transformations.append(ReplaceTrivia(entry, newlines=0, spaces=1))
        return transformations
