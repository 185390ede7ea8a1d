from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..stream import CLOSERS, OPENERS, Entry, TokenKind, TokenStream
from ..structure import Statement
from .base import FormattingContext, FormattingRule, ReplaceTrivia, Transformation


@dataclass(eq=False)
class NestingScope:
    """One level of the nesting stack: active from first through last"""
    kind: str
    first: Entry
    last: Entry
    delta: int = 1


class IndentationRule(FormattingRule):
    """Assigns a nesting depth to every entry.

    The statement tree is flattened into NestingScope ranges; a single
    pass then pushes and pops them while tracking open brackets, so the
    depth of a line depends only on structure and configuration.
    """

    @property
    def rule_id(self) -> str: return "F002"
    @property
    def name(self) -> str: return "indentation"

    def analyze(self, context: FormattingContext) -> List[Transformation]:
        stream = context.stream
        scopes: List[NestingScope] = []
        for statement in context.structure.statements:
            self._statement_scopes(stream, statement, scopes)
        return self._assign(stream, scopes)

    # scope collection

    def _add(self, stream: TokenStream, scopes: List[NestingScope], kind: str,
             after: Entry, last: Optional[Entry]) -> None:
        """Scope covering the entries after `after` up to `last`"""
        first = stream.next(after)
        if first is None or last is None or stream.index_of(first) > stream.index_of(last):
            return
        scopes.append(NestingScope(kind, first, last))

    def _statement_scopes(self, stream: TokenStream, statement: Statement, scopes: List[NestingScope]) -> None:
        kind = statement.kind
        if kind in ("simple", "macro", "stray"):
            self._add(stream, scopes, "statement", statement.first, statement.last)
            return

        if kind == "block":
            inner_last = stream.prev(statement.closer) if statement.closer else statement.last
            self._add(stream, scopes, "block", statement.opener_last, inner_last)
            for child in statement.children:
                self._statement_scopes(stream, child, scopes)
            return

        self._add(stream, scopes, "statement", statement.first, statement.header_last)

        if kind == "declaration":
            inner_last = stream.prev(statement.closer) if statement.closer else statement.last
            self._add(stream, scopes, "declaration", statement.header_last, inner_last)
            for child in statement.children:
                self._statement_scopes(stream, child, scopes)
            return

        if kind == "case":
            inner_last = stream.prev(statement.closer) if statement.closer else statement.last
            self._add(stream, scopes, "case", statement.header_last, inner_last)
            for arm in statement.arms:
                if arm.colon is not None:
                    self._add(stream, scopes, "statement", arm.label_first, arm.colon)
                    anchor = arm.colon
                elif arm.body is not None and arm.body.first is not arm.label_first:
                    anchor = arm.label_first
                else:
                    anchor = None
                if arm.body is not None:
                    if anchor is None:
                        self._statement_scopes(stream, arm.body, scopes)
                    else:
                        self._body_scopes(stream, anchor, arm.body, scopes)
            return

        for i, clause in enumerate(statement.clauses):
            if i > 0 and clause.header_last is not clause.keyword:
                self._add(stream, scopes, "statement", clause.keyword, clause.header_last)
            if clause.body is not None:
                self._body_scopes(stream, clause.header_last, clause.body, scopes)
        if kind == "do" and statement.clauses and statement.clauses[0].body is not None:
            tail = stream.next(statement.clauses[0].body.last)
            while tail is not None and tail.token.transparent:
                tail = stream.next(tail)
            if tail is not None and tail.text == "while":
                self._add(stream, scopes, "statement", tail, statement.last)

    def _body_scopes(self, stream: TokenStream, anchor: Entry, body: Statement, scopes: List[NestingScope]) -> None:
        # a body on its own line is indented one level unless it is a begin/end block
        if not body.is_block and not stream.same_line(anchor, body.first):
            self._add(stream, scopes, "body", anchor, body.last)
        self._statement_scopes(stream, body, scopes)

    # depth assignment

    def _hangs(self, stream: TokenStream, opener: Entry) -> bool:
        following = stream.next(opener)
        if following is None or following.newlines > 0:
            return False
        return not following.text.startswith("//")

    def _assign(self, stream: TokenStream, scopes: List[NestingScope]) -> List[Transformation]:
        pushes: Dict[int, List[NestingScope]] = defaultdict(list)
        pops: Dict[int, int] = defaultdict(int)
        for scope in scopes:
            pushes[id(scope.first)].append(scope)
            pops[id(scope.last)] += 1

        transformations: List[Transformation] = []
        stack: List[NestingScope] = []
        brackets: List[Tuple[Entry, int, bool]] = []
        base = 0
        line_depth = 0
        for i, entry in enumerate(stream):
            for scope in pushes.get(id(entry), ()):
                stack.append(scope)
                base += scope.delta

            line_start = i == 0 or entry.newlines > 0
            hang = None
            if brackets:
                opener, opener_depth, hanging = brackets[-1]
                if entry.text in CLOSERS:
                    depth = opener_depth
                else:
                    depth = opener_depth + 1
                    hang = opener if hanging else None
            else:
                depth = base
            if line_start and entry.token.kind == TokenKind.DIRECTIVE and self.config.align_preprocessor:
                depth, hang = 0, None
            if line_start:
                line_depth = depth

            transformations.append(ReplaceTrivia(entry, depth=depth, hang=hang))

            if not entry.token.transparent:
                if entry.text in OPENERS:
                    brackets.append((entry, line_depth, self._hangs(stream, entry)))
                elif entry.text in CLOSERS and brackets:
                    brackets.pop()

            for _ in range(pops.get(id(entry), 0)):
                scope = stack.pop()
                base -= scope.delta
                if scope.kind == "statement":
                    brackets.clear()
        return transformations
