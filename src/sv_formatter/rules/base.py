from abc import ABC, abstractmethod
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import List, Optional, Union

from ..models import FormatterConfig, FormattingDiagnostic, Severity
from ..stream import Entry, TokenStream
from ..structure import Structure

UNSET = object()


@dataclass
class ReplaceTrivia:
    """Overwrite trivia or layout fields of one entry; None leaves a field alone"""
    entry: Entry
    newlines: Optional[int] = None
    spaces: Optional[int] = None
    depth: Optional[int] = None
    hang: object = UNSET
    priority: int = 0


@dataclass
class InsertToken:
    """Insert a synthetic entry after an anchor entry"""
    anchor: Entry
    entry: Entry
    priority: int = 0


@dataclass
class ShiftDepth:
    """Add delta to the depth of every entry from first to last"""
    first: Entry
    last: Entry
    delta: int
    priority: int = 0


Transformation = Union[ReplaceTrivia, InsertToken, ShiftDepth]


@dataclass
class FormattingContext:
    stream: TokenStream
    structure: Structure
    config: FormatterConfig
    source: str = ""
    file_path: str = ""
    diagnostics: List[FormattingDiagnostic] = field(default_factory=list)
    _line_starts: Optional[List[int]] = field(default=None, repr=False)

    def source_position(self, entry: Entry) -> tuple:
        """1-based (line, column) of an entry in the input"""
        if entry.token.synthetic:
            return 0, 0
        if self._line_starts is None:
            data = self.source.encode("utf8")
            self._line_starts = [0] + [i + 1 for i, b in enumerate(data) if b == 0x0A]
        row = bisect_right(self._line_starts, entry.token.offset) - 1
        return row + 1, entry.token.offset - self._line_starts[row] + 1

    def report(self, rule_id: str, message: str, entry: Optional[Entry] = None,
               severity: Severity = Severity.WARNING, line: int = 0, column: int = 0) -> None:
        if entry is not None:
            line, column = self.source_position(entry)
        self.diagnostics.append(FormattingDiagnostic(line, column, severity, message, rule_id))


class FormattingRule(ABC):
    """One stage of the formatting pipeline"""

    def __init__(self, config: FormatterConfig):
        self.config = config

    @property
    @abstractmethod
    def rule_id(self) -> str:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def analyze(self, context: FormattingContext) -> List[Transformation]:
        """Inspect the stream and return the edits this stage wants"""
        pass
