from typing import Dict, List, Set

from ..stream import Entry, TokenKind, TokenStream
from .base import FormattingContext, FormattingRule, ReplaceTrivia, Transformation
from .declarations import SEPARATED_DECLARATIONS


class BlankLineRule(FormattingRule):
    """Normalizes vertical whitespace.

    Runs of blank lines collapse to one, blank lines at the top of the file
    are dropped, and a block comment standing on its own lines gets a blank
    line above and below it. A block comment directly above a package,
    class or interface declaration stays attached to it.
    """

    MAX_NEWLINES = 2

    @property
    def rule_id(self) -> str: return "F001"
    @property
    def name(self) -> str: return "blank-lines"

    def analyze(self, context: FormattingContext) -> List[Transformation]:
        stream = context.stream
        documented = self._declaration_starts(context)
        wanted: Dict[int, int] = {}
        for i, entry in enumerate(stream):
            if not self._standalone_block_comment(stream, entry):
                continue
            wanted[i] = self.MAX_NEWLINES
            following = stream.next(entry)
            if following is not None and id(following) not in documented:
                wanted[i + 1] = self.MAX_NEWLINES

        transformations = []
        for i, entry in enumerate(stream):
            if i == 0:
                newlines = 0
            else:
                newlines = wanted.get(i, min(entry.newlines, self.MAX_NEWLINES))
            if entry.newlines != newlines:
                transformations.append(ReplaceTrivia(entry, newlines=newlines))
        return transformations

    def _standalone_block_comment(self, stream: TokenStream, entry: Entry) -> bool:
        if entry.token.kind != TokenKind.COMMENT or not entry.text.startswith("/*"):
            return False
        if not stream.is_line_start(entry):
            return False
        following = stream.next(entry)
        return following is None or following.newlines > 0

    def _declaration_starts(self, context: FormattingContext) -> Set[int]:
        starts = set()
        for statement in context.structure.walk():
            if (statement.kind == "declaration" and statement.keyword is not None
                    and statement.keyword.text in SEPARATED_DECLARATIONS):
                starts.add(id(statement.first))
        return starts
