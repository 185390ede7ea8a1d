import logging
import os
import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from sv_tree_sitter import VerilogParser

from .adapter import SyntaxModelAdapter
from .errors import ParseError
from .models import FormatterConfig, FormatResult, FormatResults, FormattingDiagnostic, Severity
from .renderer import Renderer
from .rules import (AutoWrapRule, BlankLineRule, BlockWrapRule, CaseAlignmentRule, DeclarationSeparatorRule,
                    EndElseJoinRule, IndentationRule, LineLengthRule, SpacingRule)
from .rules.base import (UNSET, FormattingContext, FormattingRule, InsertToken, ReplaceTrivia, ShiftDepth,
                         Transformation)
from .stream import Entry, TokenStream

logger = logging.getLogger(__name__)

DEFAULT_PIPELINE = (
    BlankLineRule,
    IndentationRule,
    SpacingRule,
    BlockWrapRule,
    EndElseJoinRule,
    DeclarationSeparatorRule,
    CaseAlignmentRule,
    AutoWrapRule,
    LineLengthRule,
)

_TRIVIA_FIELDS = ("newlines", "spaces", "depth")


def normalize_source(source: str) -> str:
    """Drop a UTF-8 byte order mark and turn CRLF/CR line endings into LF"""
    if source.startswith("\ufeff"):
        source = source[1:]
    return source.replace("\r\n", "\n").replace("\r", "\n")


def read_source(path: Path) -> str:
    return path.read_bytes().decode("utf-8")


class FormatterEngine:
    """Core engine for formatting SystemVerilog files.

    Each rule analyzes the shared token stream and returns transformations;
    the engine commits one rule's edits before the next rule runs.
    """

    def __init__(self, config: FormatterConfig):
        self.config = config
        self.rules: List[FormattingRule] = []
        self.adapter = SyntaxModelAdapter()
        self.renderer = Renderer(config)
        self._local = threading.local()

    @classmethod
    def default(cls, config: FormatterConfig) -> "FormatterEngine":
        """Engine with the full formatting pipeline registered"""
        engine = cls(config)
        for rule_class in DEFAULT_PIPELINE:
            engine.add_rule(rule_class(config))
        return engine

    def add_rule(self, rule: FormattingRule) -> None:
        """Register a new formatting rule."""
        self.rules.append(rule)

    @property
    def parser(self) -> VerilogParser:
        # tree-sitter parsers must not be shared between threads
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = self._local.parser = VerilogParser()
        return parser

    def format_string(self, source: str, file_path: str = "") -> FormatResult:
        """Formats one SystemVerilog source text.

        Invalid input is returned unchanged together with an ERROR diagnostic.
        """
        text = normalize_source(source)
        try:
            stream, structure = self.adapter.adapt(self.parser.parse_string(text))
        except ParseError as e:
            logger.debug("not formatting %s: %s", file_path or "<string>", e)
            diagnostic = FormattingDiagnostic(e.line, e.column, Severity.ERROR, f"cannot format: {e.args[0]}", "E001")
            return FormatResult(source=source, modified=False, file_path=file_path, diagnostics=[diagnostic])

        context = FormattingContext(stream, structure, self.config, source=text, file_path=file_path)
        for rule in self.rules:
            transforms = rule.analyze(context)
            if transforms:
                self._apply_transformations(stream, transforms)
            logger.debug("%s [%s]: %d edit(s)", rule.name, rule.rule_id, len(transforms))

        output = self.renderer.render(stream)
        # BOM and line endings alone do not count as a change
        return FormatResult(source=output, modified=output != text, file_path=file_path,
                            diagnostics=context.diagnostics)

    def _apply_transformations(self, stream: TokenStream, transforms: List[Transformation]) -> None:
        """Commits one rule's edits: trivia first, then depth shifts, then insertions."""
        ordered = sorted(transforms, key=lambda t: -t.priority)
        claimed: Set[Tuple[int, str]] = set()
        after: Dict[int, List[Entry]] = defaultdict(list)

        for t in ordered:
            if not isinstance(t, ReplaceTrivia):
                continue
            # first edit of a field wins
            for name in _TRIVIA_FIELDS:
                value = getattr(t, name)
                if value is not None and (id(t.entry), name) not in claimed:
                    claimed.add((id(t.entry), name))
                    setattr(t.entry, name, value)
            if t.hang is not UNSET and (id(t.entry), "hang") not in claimed:
                claimed.add((id(t.entry), "hang"))
                t.entry.hang = t.hang

        for t in ordered:
            if isinstance(t, ShiftDepth):
                for entry in stream.span(t.first, t.last):
                    entry.depth += t.delta

        inserts = [t for t in ordered if isinstance(t, InsertToken)]
        if not inserts:
            return
        for t in inserts:
            after[id(t.anchor)].append(t.entry)
        entries: List[Entry] = []
        for entry in stream:
            entries.append(entry)
            entries.extend(after.get(id(entry), ()))
        stream.replace(entries)

    def format_file(self, path: Path) -> FormatResult:
        try:
            source = read_source(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("cannot read %s: %s", path, e)
            diagnostic = FormattingDiagnostic(0, 0, Severity.ERROR, f"cannot read file: {e}", "E002")
            return FormatResult(source="", modified=False, file_path=str(path), diagnostics=[diagnostic])
        return self.format_string(source, str(path))

    def format_files(self, files: List[Path], jobs: Optional[int] = None) -> FormatResults:
        """Formats files on a thread pool; results come back sorted by path."""
        results: List[FormatResult] = []
        interrupted = False
        executor = ThreadPoolExecutor(max_workers=jobs or os.cpu_count() or 1)
        try:
            futures = [executor.submit(self.format_file, path) for path in files]
            for future in as_completed(futures):
                results.append(future.result())
        except KeyboardInterrupt:
            logger.warning("interrupted; %d of %d file(s) formatted", len(results), len(files))
            executor.shutdown(wait=True, cancel_futures=True)
            interrupted = True
        else:
            executor.shutdown(wait=True)

        results.sort(key=lambda r: r.file_path)
        return FormatResults(
            results=results,
            total_files=len(files),
            modified_files=sum(1 for r in results if r.modified and not r.errors),
            error_files=sum(1 for r in results if r.errors),
            interrupted=interrupted,
        )
