from typing import List, Tuple

from ..models import Severity
from ..stream import Entry, TokenStream
from ..structure import CaseArm
from .base import FormattingContext, FormattingRule, ReplaceTrivia, Transformation


class CaseAlignmentRule(FormattingRule):
    """Aligns the colons of the case items in one case statement."""

    @property
    def rule_id(self) -> str: return "F007"
    @property
    def name(self) -> str: return "case-alignment"

    def analyze(self, context: FormattingContext) -> List[Transformation]:
        if not self.config.align_case_colon:
            return []
        stream = context.stream
        transformations: List[Transformation] = []
        for statement in context.structure.walk():
            if statement.kind != "case":
                continue
            labels: List[Tuple[Entry, int]] = []
            for arm in statement.arms:
                if arm.colon is None:
                    continue
                if (not stream.same_line(arm.label_first, arm.colon)
                        or any("\n" in e.text for e in stream.between(arm.label_first, arm.colon))):
                    context.report(self.rule_id, "case item label spans lines; colon not aligned",
                                   entry=arm.label_first, severity=Severity.INFO)
                    continue
                labels.append((arm.colon, self._label_width(stream, arm)))
            if len(labels) < 2:
                continue
            widest = max(width for _, width in labels)
            for colon, width in labels:
                spaces = widest - width + 1
                if colon.spaces != spaces:
                    transformations.append(ReplaceTrivia(colon, spaces=spaces))
        return transformations

    def _label_width(self, stream: TokenStream, arm: CaseArm) -> int:
        width = len(arm.label_first.text)
        for entry in stream.between(arm.label_first, arm.colon):
            width += entry.spaces + len(entry.text)
        return width
