"""Statement structure recovered from the token stream.

The scanner is a small recursive-descent pass over significant tokens
(comments and directives are skipped). It only needs to know where
statements, bodies, blocks and case arms begin and end; it never
validates the input, which the parser has already done.
"""
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from .stream import CLOSERS, OPENERS, Entry, TokenKind, TokenStream

DECLARATION_CLOSERS = {
    "module": "endmodule",
    "macromodule": "endmodule",
    "program": "endprogram",
    "interface": "endinterface",
    "package": "endpackage",
    "class": "endclass",
    "function": "endfunction",
    "task": "endtask",
    "covergroup": "endgroup",
    "property": "endproperty",
    "sequence": "endsequence",
    "clocking": "endclocking",
    "checker": "endchecker",
    "config": "endconfig",
    "specify": "endspecify",
    "primitive": "endprimitive",
    "table": "endtable",
    "generate": "endgenerate",
    "randsequence": "endsequence",
}
BLOCK_CLOSERS = {
    "begin": frozenset({"end"}),
    "fork": frozenset({"join", "join_any", "join_none"}),
}
ALL_CLOSERS = frozenset(DECLARATION_CLOSERS.values()) | frozenset(
    {"end", "join", "join_any", "join_none", "endcase"})

CASE_KEYWORDS = frozenset({"case", "casex", "casez", "randcase"})
LOOP_KEYWORDS = frozenset({"for", "foreach", "while", "repeat", "forever"})
PROCEDURE_KEYWORDS = frozenset({"always", "always_comb", "always_ff", "always_latch", "initial", "final"})
ASSERTION_KEYWORDS = frozenset({"assert", "assume", "cover", "restrict", "expect"})
PROTOTYPE_QUALIFIERS = frozenset({"extern", "pure", "typedef", "import", "export"})
QUALIFIERS = frozenset({
    "unique", "unique0", "priority", "extern", "pure", "virtual", "static",
    "protected", "local", "automatic", "typedef", "import", "export",
    "default", "global", "rand", "randc", "const",
})
LABEL_TARGETS = (frozenset({"begin", "fork", "if", "do", "unique", "unique0", "priority"})
                 | CASE_KEYWORDS | LOOP_KEYWORDS | ASSERTION_KEYWORDS)


@dataclass(eq=False)
class Clause:
    """One keyword-introduced part of a compound statement (if, else, for ...)"""
    keyword: Entry
    header_last: Entry
    body: Optional["Statement"] = None


@dataclass(eq=False)
class CaseArm:
    label_first: Entry
    colon: Optional[Entry]
    body: Optional["Statement"] = None


@dataclass(eq=False)
class Statement:
    kind: str
    first: Entry
    last: Entry
    keyword: Optional[Entry] = None
    header_last: Optional[Entry] = None
    opener_last: Optional[Entry] = None
    closer: Optional[Entry] = None
    complete: bool = True
    clauses: List[Clause] = field(default_factory=list)
    children: List["Statement"] = field(default_factory=list)
    arms: List[CaseArm] = field(default_factory=list)

    @property
    def is_block(self) -> bool:
        return self.kind == "block"

    def nested_statements(self) -> Iterator["Statement"]:
        """Statements directly contained in this one"""
        yield from self.children
        for clause in self.clauses:
            if clause.body is not None:
                yield clause.body
        for arm in self.arms:
            if arm.body is not None:
                yield arm.body


@dataclass
class Structure:
    statements: List[Statement]

    def walk(self) -> Iterator[Statement]:
        """Every statement, outermost first"""
        stack = list(reversed(self.statements))
        while stack:
            statement = stack.pop()
            yield statement
            stack.extend(reversed(list(statement.nested_statements())))


class StructureScanner:
    """Recursive-descent statement scanner over significant tokens"""

    def __init__(self, stream: TokenStream):
        self.stream = stream
        self.sig: List[Entry] = [e for e in stream if not e.token.transparent]
        self.p = 0

    def scan(self) -> Structure:
        statements = []
        while not self._at_end():
            statements.append(self._statement())
        return Structure(statements)

    # token access

    def _at_end(self) -> bool:
        return self.p >= len(self.sig)

    def _text(self, offset: int = 0) -> str:
        i = self.p + offset
        return self.sig[i].token.text if i < len(self.sig) else ""

    def _entry(self, offset: int = 0) -> Entry:
        return self.sig[self.p + offset]

    def _take(self) -> Entry:
        entry = self.sig[self.p]
        self.p += 1
        return entry

    def _take_label(self, last: Entry) -> Entry:
        """Consume an optional ': name' after a block keyword"""
        if self._text() == ":" and self._text(1) and self.sig[self.p + 1].token.kind == TokenKind.IDENTIFIER:
            self.p += 2
            return self.sig[self.p - 1]
        return last

    def _balanced(self) -> Optional[Entry]:
        """Consume a bracketed group starting at the current token"""
        depth = 0
        while not self._at_end():
            entry = self._take()
            if entry.text in OPENERS:
                depth += 1
            elif entry.text in CLOSERS:
                depth -= 1
                if depth <= 0:
                    return entry
        return None

    def _paren_header(self, keyword: Entry) -> Entry:
        if self._text() == "(":
            closing = self._balanced()
            if closing is not None:
                return closing
            return self.sig[-1]
        return keyword

    # statements

    def _items(self) -> List[Statement]:
        items = []
        while not self._at_end() and self._text() not in ALL_CLOSERS:
            items.append(self._statement())
        return items

    def _statement(self) -> Statement:
        start = self.p
        first = self._entry()
        text = first.token.text

        if text in ALL_CLOSERS or text == "else":
            entry = self._take()
            return Statement("stray", entry, entry, complete=False)

        if first.token.kind == TokenKind.IDENTIFIER and self._text(1) == ":" and self._text(2) in LABEL_TARGETS:
            self.p += 2
            statement = self._statement()
            statement.first = first
            return statement

        qualifiers = set()
        while self._text() in QUALIFIERS and self._text(1):
            # `default:` is a case label
            if self._text() == "default" and self._text(1) == ":":
                break
            qualifiers.add(self._take().token.text)
        keyword = self._text()

        if keyword == "interface" and self._text(1) == "class":
            return self._declaration(first, "endclass", skip=1)
        if keyword in DECLARATION_CLOSERS:
            if self._is_prototype(keyword, qualifiers):
                return self._simple(first)
            return self._declaration(first, DECLARATION_CLOSERS[keyword])
        if qualifiers - {"unique", "unique0", "priority"}:
            return self._simple(first)
        if keyword in BLOCK_CLOSERS:
            return self._block(first)
        if keyword == "if":
            return self._conditional(first)
        if keyword in CASE_KEYWORDS:
            return self._case(first)
        if keyword in LOOP_KEYWORDS:
            return self._loop(first)
        if keyword == "do":
            return self._do_while(first)
        if keyword in PROCEDURE_KEYWORDS:
            kw = self._take()
            return self._guarded("procedure", first, kw, self._timing(kw))
        if keyword in ("@", "#", "##"):
            return self._guarded("timing", first, self._entry(), self._timing(None))
        if keyword == "wait" and self._text(1) not in ("fork", ""):
            kw = self._take()
            return self._guarded("timing", first, kw, self._paren_header(kw))
        if keyword in ASSERTION_KEYWORDS:
            return self._assertion(first)
        if self._entry().token.kind == TokenKind.MACRO:
            return self._macro(first)
        self.p = start
        return self._simple(first)

    def _is_prototype(self, keyword: str, qualifiers: set) -> bool:
        if qualifiers & PROTOTYPE_QUALIFIERS:
            return True
        if keyword == "interface" and "virtual" in qualifiers:
            return True
        if keyword == "clocking" and qualifiers & {"default", "global"} and self._text(2) == ";":
            return True
        if keyword in ("property", "sequence") and self.p > 0:
            # `assert property`, `cover sequence` and friends
            return self.sig[self.p - 1].token.text in ASSERTION_KEYWORDS
        return False

    def _simple(self, first: Entry) -> Statement:
        depth = 0
        last = first
        complete = False
        while not self._at_end():
            text = self._text()
            if depth == 0 and self._entry() is not first and (text in ALL_CLOSERS or text == "else"):
                break
            last = self._take()
            if text in OPENERS:
                depth += 1
            elif text in CLOSERS:
                depth = max(0, depth - 1)
                if text == "}" and depth == 0 and (self._at_end() or self._entry().newlines > 0):
                    complete = True
                    break
            elif text == ";" and depth == 0:
                complete = True
                break
        return Statement("simple", first, last, complete=complete)

    def _macro(self, first: Entry) -> Statement:
        macro = self._take()
        last = macro
        with_args = False
        if self._text() == "(" and self._entry().newlines == 0 and self._entry().spaces == 0:
            closing = self._balanced()
            last = closing if closing is not None else self.sig[-1]
            with_args = True
        if self._text() == ";":
            return Statement("macro", first, self._take(), keyword=macro)
        if with_args or self._at_end() or self._entry().newlines > 0 or self._text() in ALL_CLOSERS:
            return Statement("macro", first, last, keyword=macro)
        # a macro standing in for a type or a prefix, e.g. `WORD data;
        rest = self._simple(self._entry())
        return Statement("simple", first, rest.last, complete=rest.complete)

    def _body(self) -> Optional[Statement]:
        if self._at_end() or self._text() in ALL_CLOSERS or self._text() == "else":
            return None
        return self._statement()

    def _block(self, first: Entry) -> Statement:
        opener = self._take()
        opener_last = self._take_label(opener)
        closers = BLOCK_CLOSERS[opener.token.text]
        children = self._items()
        if self._text() in closers:
            closer = self._take()
            last = self._take_label(closer)
            return Statement("block", first, last, keyword=opener, opener_last=opener_last,
                             closer=closer, children=children)
        last = children[-1].last if children else opener_last
        return Statement("block", first, last, keyword=opener, opener_last=opener_last,
                         children=children, complete=False)

    def _declaration(self, first: Entry, closer_text: str, skip: int = 0) -> Statement:
        keyword = self._take()
        self.p += skip
        header_last = self.sig[self.p - 1]
        if keyword.token.text == "randsequence":
            header_last = self._paren_header(header_last)
        elif keyword.token.text != "generate":
            depth = 0
            while not self._at_end():
                text = self._text()
                if depth == 0 and text in ALL_CLOSERS:
                    break
                header_last = self._take()
                if text in OPENERS:
                    depth += 1
                elif text in CLOSERS:
                    depth = max(0, depth - 1)
                elif text == ";" and depth == 0:
                    break
        children = self._items()
        if self._text() == closer_text:
            closer = self._take()
            last = self._take_label(closer)
            return Statement("declaration", first, last, keyword=keyword, header_last=header_last,
                             closer=closer, children=children)
        last = children[-1].last if children else header_last
        return Statement("declaration", first, last, keyword=keyword, header_last=header_last,
                         children=children, complete=False)

    def _conditional(self, first: Entry) -> Statement:
        keyword = self._take()
        header_last = self._paren_header(keyword)
        clauses = [Clause(keyword, header_last, self._body())]
        if self._text() == "else":
            else_kw = self._take()
            clauses.append(Clause(else_kw, else_kw, self._body()))
        return self._compound("conditional", first, keyword, clauses)

    def _loop(self, first: Entry) -> Statement:
        keyword = self._take()
        header_last = keyword if keyword.token.text == "forever" else self._paren_header(keyword)
        return self._compound("loop", first, keyword, [Clause(keyword, header_last, self._body())])

    def _do_while(self, first: Entry) -> Statement:
        keyword = self._take()
        clause = Clause(keyword, keyword, self._body())
        statement = self._compound("do", first, keyword, [clause])
        if self._text() == "while":
            tail = self._simple(self._entry())
            statement.last = tail.last
            statement.complete = statement.complete and tail.complete
        else:
            statement.complete = False
        return statement

    def _compound(self, kind: str, first: Entry, keyword: Entry, clauses: List[Clause]) -> Statement:
        last_clause = clauses[-1]
        body = last_clause.body
        last = body.last if body is not None else last_clause.header_last
        complete = all(c.body is not None and c.body.complete for c in clauses)
        return Statement(kind, first, last, keyword=keyword, header_last=clauses[0].header_last,
                         clauses=clauses, complete=complete)

    def _guarded(self, kind: str, first: Entry, keyword: Entry, header_last: Entry) -> Statement:
        """A header followed by a body or a bare semicolon"""
        if self._text() == ";":
            semicolon = self._take()
            return Statement(kind, first, semicolon, keyword=keyword, header_last=header_last,
                             clauses=[Clause(keyword, header_last, None)])
        return self._compound(kind, first, keyword, [Clause(keyword, header_last, self._body())])

    def _timing(self, keyword: Optional[Entry]) -> Entry:
        """Consume an optional event or delay control, return the last header token"""
        last = keyword
        while self._text() in ("@", "#", "##"):
            last = self._take()
            if self._text() in ("(", "["):
                closing = self._balanced()
                last = closing if closing is not None else self.sig[-1]
            elif not self._at_end():
                last = self._take()
                while self._text() == "." and self._text(1):
                    self.p += 1
                    last = self._take()
        return last

    def _case(self, first: Entry) -> Statement:
        keyword = self._take()
        header_last = keyword if keyword.token.text == "randcase" else self._paren_header(keyword)
        if self._text() in ("inside", "matches"):
            header_last = self._take()
        arms = []
        while not self._at_end() and self._text() not in ALL_CLOSERS:
            arms.append(self._case_arm())
        statement = Statement("case", first, header_last, keyword=keyword, header_last=header_last, arms=arms)
        if self._text() == "endcase":
            statement.closer = self._take()
            statement.last = statement.closer
        else:
            statement.complete = False
            if arms:
                statement.last = arms[-1].body.last if arms[-1].body else arms[-1].colon or arms[-1].label_first
        return statement

    def _case_arm(self) -> CaseArm:
        label_first = self._entry()
        colon = None
        if self._text() == "default":
            self.p += 1
            if self._text() == ":":
                colon = self._take()
        else:
            depth = 0
            scan = self.p
            while scan < len(self.sig):
                text = self.sig[scan].token.text
                if text in OPENERS:
                    depth += 1
                elif text in CLOSERS:
                    depth -= 1
                elif depth == 0 and (text == ";" or text in ALL_CLOSERS):
                    break
                elif depth == 0 and text == ":":
                    colon = self.sig[scan]
                    break
                scan += 1
            if colon is None:
                return CaseArm(label_first, None, self._statement())
            self.p = scan + 1
        return CaseArm(label_first, colon, self._body())

    def _assertion(self, first: Entry) -> Statement:
        keyword = self._take()
        if self._text() in ("property", "sequence", "final"):
            self.p += 1
        elif self._text() == "#":
            self.p += 2
        header_last = self._paren_header(keyword)
        if self._text() == ";":
            semicolon = self._take()
            return Statement("assertion", first, semicolon, keyword=keyword, header_last=header_last,
                             clauses=[Clause(keyword, header_last, None)])
        body = None if self._text() == "else" else self._body()
        clauses = [Clause(keyword, header_last, body)]
        last = body.last if body is not None else header_last
        if self._text() == "else":
            else_kw = self._take()
            else_body = self._body()
            clauses.append(Clause(else_kw, else_kw, else_body))
            last = else_body.last if else_body is not None else else_kw
        complete = all(c.body is None or c.body.complete for c in clauses)
        return Statement("assertion", first, last, keyword=keyword, header_last=header_last,
                         clauses=clauses, complete=complete)
