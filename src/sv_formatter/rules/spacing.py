from typing import List, Optional

from ..stream import CLOSERS, Entry, TokenKind
from .base import FormattingContext, FormattingRule, ReplaceTrivia, Transformation

CONTROL_KEYWORDS = frozenset({
    "if", "for", "foreach", "while", "repeat", "case", "casex", "casez",
    "wait",
})
# macros are left alone: `W (x) and `W(x) expand differently
CALLABLE_KINDS = (TokenKind.IDENTIFIER, TokenKind.SYSTEM)


class SpacingRule(FormattingRule):
    """Token-pair spacing: comma spacing, call parentheses and space collapsing.

    Works only on whitespace inside a line; line breaks are never touched.
    """

    @property
    def rule_id(self) -> str: return "F003"
    @property
    def name(self) -> str: return "spacing"

    def analyze(self, context: FormattingContext) -> List[Transformation]:
        transformations = []
        previous: Optional[Entry] = None
        for entry in context.stream:
            if previous is not None and entry.newlines == 0:
                spaces = self._spaces(previous, entry)
                if spaces != entry.spaces:
                    transformations.append(ReplaceTrivia(entry, spaces=spaces))
            previous = entry
        return transformations

    def _spaces(self, left: Entry, right: Entry) -> int:
        current = min(right.spaces, 1)
        # an escaped identifier ends at whitespace
        if left.text.startswith("\\") and left.token.kind == TokenKind.IDENTIFIER:
            return max(current, 1)
        if right.token.kind == TokenKind.COMMENT:
            return 1
        if left.token.kind == TokenKind.COMMENT:
            return current

        if self.config.space_after_comma:
            if right.text == ",":
                return 0
            if left.text == ",":
                return 0 if right.text in CLOSERS else 1

        if right.text == "(":
            if left.token.kind == TokenKind.KEYWORD and left.text in CONTROL_KEYWORDS:
                return 1
            if self.config.remove_call_space and (left.token.kind in CALLABLE_KINDS or left.text == "new"):
                return 0
        return current
