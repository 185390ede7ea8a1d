from typing import List

from ..stream import TokenKind
from .base import FormattingContext, FormattingRule, ReplaceTrivia, Transformation

SEPARATED_DECLARATIONS = frozenset({"package", "class", "interface"})


class DeclarationSeparatorRule(FormattingRule):
    """Keeps one blank line in front of package, class and interface declarations.

    Comments written directly above the declaration move with it.
    """

    @property
    def rule_id(self) -> str: return "F006"
    @property
    def name(self) -> str: return "declaration-separator"

    def analyze(self, context: FormattingContext) -> List[Transformation]:
        stream = context.stream
        transformations = []
        for statement in context.structure.walk():
            if statement.kind != "declaration" or statement.keyword is None:
                continue
            if statement.keyword.text not in SEPARATED_DECLARATIONS:
                continue
            target = statement.first
            while target.newlines == 1:
                previous = stream.prev(target)
                if previous is None or previous.token.kind != TokenKind.COMMENT:
                    break
                if not stream.is_line_start(previous):
                    break
                target = previous
            if stream.index_of(target) == 0:
                continue
            if target.newlines != 2:
                transformations.append(ReplaceTrivia(target, newlines=2))
        return transformations
