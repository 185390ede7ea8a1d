"""Token/trivia stream the formatting rules operate on."""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional


class TokenKind(str, Enum):
    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    SYSTEM = "system"
    NUMBER = "number"
    STRING = "string"
    PUNCT = "punct"
    COMMENT = "comment"
    DIRECTIVE = "directive"
    MACRO = "macro"
    OTHER = "other"


KEYWORDS = frozenset("""
accept_on alias always always_comb always_ff always_latch and assert assign
assume automatic before begin bind bins binsof bit break buf bufif0 bufif1
byte case casex casez cell chandle checker class clocking cmos config const
constraint context continue cover covergroup coverpoint cross deassign
default defparam design disable dist do edge else end endcase endchecker
endclass endclocking endconfig endfunction endgenerate endgroup endinterface
endmodule endpackage endprimitive endprogram endproperty endspecify
endsequence endtable endtask enum event eventually expect export extends
extern final first_match for force foreach forever fork forkjoin function
generate genvar global highz0 highz1 if iff ifnone ignore_bins illegal_bins
implements implies import incdir include initial inout input inside instance
int integer interconnect interface intersect join join_any join_none large
let liblist library local localparam logic longint macromodule matches
medium modport module nand negedge nettype new nexttime nmos nor
noshowcancelled not notif0 notif1 null or output package packed parameter
pmos posedge primitive priority program property protected pull0 pull1
pulldown pullup pulsestyle_ondetect pulsestyle_onevent pure rand randc
randcase randsequence rcmos real realtime ref reg reject_on release repeat
restrict return rnmos rpmos rtran rtranif0 rtranif1 s_always s_eventually
s_nexttime s_until s_until_with scalared sequence shortint shortreal
showcancelled signed small soft solve specify specparam static string strong
strong0 strong1 struct super supply0 supply1 sync_accept_on sync_reject_on
table tagged task this throughout time timeprecision timeunit tran tranif0
tranif1 tri tri0 tri1 triand trior trireg type typedef union unique unique0
unsigned until until_with untyped use uwire var vectored virtual void wait
wait_order wand weak weak0 weak1 while wildcard wire with within wor xnor xor
""".split())

OPENERS = frozenset({"(", "[", "{"})
CLOSERS = frozenset({")", "]", "}"})

_WORD = re.compile(r"[A-Za-z_][A-Za-z0-9_$]*\Z")
_NUMBER = re.compile(r"(\d|'[sS]?[bBoOdDhH]|'[01xXzZ]\Z)")


def classify(text: str) -> TokenKind:
    """Lexical kind of a token's text"""
    if text.startswith("//") or text.startswith("/*"):
        return TokenKind.COMMENT
    if text.startswith("`"):
        return TokenKind.MACRO
    if text.startswith('"'):
        return TokenKind.STRING
    if text.startswith("$") and len(text) > 1:
        return TokenKind.SYSTEM
    if text.startswith("\\") and len(text) > 1:
        return TokenKind.IDENTIFIER
    if _WORD.match(text):
        return TokenKind.KEYWORD if text in KEYWORDS else TokenKind.IDENTIFIER
    if _NUMBER.match(text):
        return TokenKind.NUMBER
    return TokenKind.PUNCT


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    offset: int = -1

    @property
    def synthetic(self) -> bool:
        return self.offset < 0

    @property
    def transparent(self) -> bool:
        """Comments and directives do not take part in statement structure"""
        return self.kind in (TokenKind.COMMENT, TokenKind.DIRECTIVE)


@dataclass(eq=False)
class Entry:
    """A token together with the trivia that precedes it.

    Entries compare by identity so rules can hold references to them
    across insertions.
    """
    token: Token
    newlines: int = 0
    spaces: int = 0
    depth: int = 0
    hang: Optional["Entry"] = None
    source_indent: Optional[int] = None

    @property
    def text(self) -> str:
        return self.token.text

    def __repr__(self) -> str:
        return f"Entry({self.token.text!r}, nl={self.newlines}, sp={self.spaces}, depth={self.depth})"


class TokenStream:
    """Ordered entries of one file plus identity-based lookup"""

    def __init__(self, entries: List[Entry]):
        self.entries = entries
        self._positions: Optional[Dict[int, int]] = None

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> Entry:
        return self.entries[index]

    def replace(self, entries: List[Entry]) -> None:
        self.entries = entries
        self._positions = None

    def index_of(self, entry: Entry) -> int:
        if self._positions is None:
            self._positions = {id(e): i for i, e in enumerate(self.entries)}
        return self._positions[id(entry)]

    def is_line_start(self, entry: Entry) -> bool:
        return entry.newlines > 0 or self.index_of(entry) == 0

    def next(self, entry: Entry) -> Optional[Entry]:
        i = self.index_of(entry) + 1
        return self.entries[i] if i < len(self.entries) else None

    def prev(self, entry: Entry) -> Optional[Entry]:
        i = self.index_of(entry) - 1
        return self.entries[i] if i >= 0 else None

    def span(self, first: Entry, last: Entry) -> List[Entry]:
        """Entries from first to last, both inclusive"""
        return self.entries[self.index_of(first):self.index_of(last) + 1]

    def between(self, first: Entry, last: Entry) -> List[Entry]:
        """Entries strictly between first and last"""
        return self.entries[self.index_of(first) + 1:self.index_of(last)]

    def line_start_of(self, entry: Entry) -> Entry:
        i = self.index_of(entry)
        while i > 0 and self.entries[i].newlines == 0:
            i -= 1
        return self.entries[i]

    def same_line(self, first: Entry, last: Entry) -> bool:
        """True when no line break occurs after first up to and including last"""
        return all(e.newlines == 0 for e in self.span(first, last)[1:])
