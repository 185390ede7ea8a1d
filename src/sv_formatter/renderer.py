from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .models import FormatterConfig
from .stream import TokenStream


@dataclass
class Placement:
    """Where an entry lands in the output (0-based row, columns)"""
    row: int
    start: int
    end: int


@dataclass
class Layout:
    text: str
    placements: Dict[int, Placement] = field(default_factory=dict)


class Renderer:
    """Turns a token stream back into text"""

    def __init__(self, config: FormatterConfig):
        self.config = config

    def indentation(self, depth: int, column: Optional[int] = None) -> str:
        """Leading whitespace for a line at `depth`, or aligned to `column` for hanging lines"""
        width = self.config.indent_width
        if column is None:
            return "\t" * depth if self.config.use_tabs else " " * (width * depth)
        if not self.config.use_tabs:
            return " " * column
        tabs = min(depth, column // width)
        return "\t" * tabs + " " * (column - tabs * width)

    def measure(self, line: str) -> int:
        """Display width of a line; each leading tab is one indentation level"""
        stripped = line.lstrip("\t")
        return (len(line) - len(stripped)) * self.config.indent_width + len(stripped)

    def layout(self, stream: TokenStream) -> Layout:
        parts: List[str] = []
        placements: Dict[int, Placement] = {}
        row = 0
        column = 0
        for i, entry in enumerate(stream):
            if i == 0 or entry.newlines > 0:
                if i > 0:
                    parts.append("\n" * entry.newlines)
                    row += entry.newlines
                hang_column = None
                if entry.hang is not None and id(entry.hang) in placements:
                    hang_column = placements[id(entry.hang)].start + 1
                indent = self.indentation(entry.depth, hang_column)
                parts.append(indent)
                column = self.measure(indent)
            else:
                parts.append(" " * entry.spaces)
                column += entry.spaces

            start = column
            text = entry.text
            parts.append(text)
            if "\n" in text:
                row += text.count("\n")
                column = len(text.rsplit("\n", 1)[1])
            else:
                column += len(text)
            placements[id(entry)] = Placement(row - text.count("\n"), start, column)

        lines = "".join(parts).split("\n")
        text = "\n".join(line.rstrip() for line in lines).rstrip("\n") + "\n"
        return Layout(text, placements)

    def render(self, stream: TokenStream) -> str:
        return self.layout(stream).text
