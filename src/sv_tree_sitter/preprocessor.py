"""Compiler-directive handling for the parser front end.

The grammar has no notion of the preprocessor, so directive lines are
blanked out and macro usages are turned into plain identifiers before the
text reaches tree-sitter. Every replacement keeps the byte length, which
means node offsets still index the original text.
"""
import re
from typing import Optional

DIRECTIVES = frozenset({
    "ifdef", "ifndef", "elsif", "else", "endif", "define", "undef",
    "undefineall", "include", "timescale", "default_nettype", "resetall",
    "celldefine", "endcelldefine", "pragma", "line", "begin_keywords",
    "end_keywords", "unconnected_drive", "nounconnected_drive",
})

_LEXICAL = re.compile(
    rb'//[^\n]*|/\*.*?\*/|"(?:\\.|[^"\\\n])*"|`([A-Za-z_][A-Za-z0-9_$]*)',
    re.S,
)
_DIRECTIVE_HEAD = re.compile(rb"`([A-Za-z_][A-Za-z0-9_]*)")


def directive_name(data: bytes, pos: int) -> Optional[str]:
    """Name of the directive starting at pos, or None for a macro usage"""
    match = _DIRECTIVE_HEAD.match(data, pos)
    if not match:
        return None
    name = match.group(1).decode("ascii")
    return name if name in DIRECTIVES else None


def _comment_start(line: bytes) -> Optional[int]:
    in_string = False
    i = 0
    while i < len(line):
        ch = line[i:i + 1]
        if in_string:
            if ch == b"\\":
                i += 1
            elif ch == b'"':
                in_string = False
        elif ch == b'"':
            in_string = True
        elif line.startswith(b"//", i) or line.startswith(b"/*", i):
            return i
        i += 1
    return None


def directive_end(data: bytes, start: int) -> int:
    """End offset of the directive starting at start.

    A directive runs to the end of its line, continued by a trailing
    backslash. A comment on the last line is not part of it.
    """
    pos = start
    while True:
        newline = data.find(b"\n", pos)
        if newline == -1:
            newline = len(data)
        line = data[pos:newline]
        if line.rstrip().endswith(b"\\") and newline < len(data):
            pos = newline + 1
            continue
        cut = _comment_start(line)
        end = pos + cut if cut is not None else newline
        while end > start and data[end - 1:end] in (b" ", b"\t", b"\r"):
            end -= 1
        return end


def mask_preprocessor(source: str) -> bytes:
    """Return the UTF-8 text with directives blanked and macro ticks replaced"""
    data = bytearray(source.encode("utf8"))
    pos = 0
    while True:
        match = _LEXICAL.search(data, pos)
        if not match:
            break
        if match.group(1) is None:
            pos = match.end()
            continue
        start = match.start()
        if directive_name(data, start) is not None:
            end = directive_end(data, start)
            for i in range(start, end):
                if data[i] != 0x0A:
                    data[i] = 0x20
            pos = end
        else:
            data[start] = ord("_")
            pos = match.end()
    return bytes(data)
