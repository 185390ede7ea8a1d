from .base import (FormattingContext, FormattingRule, InsertToken, ReplaceTrivia, ShiftDepth,
                   Transformation)
from .blank_lines import BlankLineRule
from .blocks import BlockWrapRule, EndElseJoinRule
from .case_alignment import CaseAlignmentRule
from .declarations import DeclarationSeparatorRule
from .indentation import IndentationRule
from .line_length import AutoWrapRule, LineLengthRule
from .spacing import SpacingRule

__all__ = [
    "FormattingRule",
    "FormattingContext",
    "Transformation",
    "ReplaceTrivia",
    "InsertToken",
    "ShiftDepth",
    "BlankLineRule",
    "IndentationRule",
    "SpacingRule",
    "BlockWrapRule",
    "EndElseJoinRule",
    "DeclarationSeparatorRule",
    "CaseAlignmentRule",
    "AutoWrapRule",
    "LineLengthRule",
]
