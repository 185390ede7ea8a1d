import logging
from typing import List, Tuple

from sv_tree_sitter import ASTWalker, ParseResult
from sv_tree_sitter.preprocessor import directive_end, directive_name

from .errors import ParseError
from .stream import Entry, Token, TokenKind, TokenStream, classify
from .structure import Structure, StructureScanner

logger = logging.getLogger(__name__)

_WHITESPACE = b" \t\r\n\f\v"

Piece = Tuple[int, int, TokenKind]


def _indent_width(whitespace: bytes) -> int:
    return len(whitespace.decode("utf8").expandtabs(8))


class SyntaxModelAdapter:
    """Turns a tree-sitter parse into the token/trivia stream and its structure"""

    def adapt(self, parse_result: ParseResult) -> Tuple[TokenStream, Structure]:
        if not parse_result.ok:
            issue = parse_result.errors[0]
            raise ParseError(issue.message, issue.line, issue.column)
        data = parse_result.source.encode("utf8")
        stream = TokenStream(self._entries(data, self._pieces(data, parse_result)))
        structure = StructureScanner(stream).scan()
        logger.debug("adapted %d tokens into %d top-level statements", len(stream), len(structure.statements))
        return stream, structure

    def _pieces(self, data: bytes, parse_result: ParseResult) -> List[Piece]:
        pieces: List[Piece] = []
        pos = 0
        for node in ASTWalker.leaves(parse_result.tree.root_node):
            start, end = node.start_byte, node.end_byte
            while start < end and data[start] in _WHITESPACE:
                start += 1
            while end > start and data[end - 1] in _WHITESPACE:
                end -= 1
            # zero-width (missing) nodes and nodes overlapping a previous leaf
            if end <= start or start < pos:
                continue
            pieces.extend(self._lex_gap(data, pos, start))
            pieces.append((start, end, classify(data[start:end].decode("utf8"))))
            pos = end
        pieces.extend(self._lex_gap(data, pos, len(data)))
        return pieces

    def _lex_gap(self, data: bytes, pos: int, stop: int) -> List[Piece]:
        """Tokens found in text the tree does not cover (directives, stray text)"""
        pieces: List[Piece] = []
        while pos < stop:
            if data[pos] in _WHITESPACE:
                pos += 1
                continue
            if data.startswith(b"`", pos) and directive_name(data, pos):
                end = min(directive_end(data, pos), stop)
                kind = TokenKind.DIRECTIVE
            elif data.startswith(b"//", pos):
                end = data.find(b"\n", pos, stop)
                end = stop if end == -1 else end
                kind = TokenKind.COMMENT
            elif data.startswith(b"/*", pos):
                end = data.find(b"*/", pos + 2, stop)
                end = stop if end == -1 else end + 2
                kind = TokenKind.COMMENT
            else:
                end = pos
                while end < stop and data[end] not in _WHITESPACE:
                    end += 1
                kind = TokenKind.OTHER
            while end > pos and data[end - 1] in _WHITESPACE:
                end -= 1
            pieces.append((pos, end, kind))
            pos = end
        return pieces

    def _entries(self, data: bytes, pieces: List[Piece]) -> List[Entry]:
        entries: List[Entry] = []
        previous_end = 0
        for start, end, kind in pieces:
            trivia = data[previous_end:start]
            newlines = trivia.count(b"\n")
            tail = trivia[trivia.rfind(b"\n") + 1:]
            is_line_start = newlines > 0 or not entries
            entries.append(Entry(
                token=Token(kind, data[start:end].decode("utf8"), start),
                newlines=newlines,
                spaces=0 if newlines else len(trivia),
                source_indent=_indent_width(tail) if is_line_start else None,
            ))
            previous_end = end
        if entries:
            entries[0].newlines = 0
        return entries
