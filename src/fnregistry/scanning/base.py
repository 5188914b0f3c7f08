"""Base extractor and the line-scanning helpers shared by every language.

Extractors never build a syntax tree. Each one walks the file line by line
over a *code view* of the text (string literals and comments blanked out),
recognises declarations with ordered regular expressions, and measures
bodies by brace depth or, for Python, indentation.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Pattern, Sequence, Tuple, Union

from ..exceptions import FileAccessError
from ..logging_config import get_logger
from ..models import ExtractionResult, Function
from .languages import LANGUAGES

logger = get_logger(__name__)

PathLike = Union[str, Path]

_CHAR_LITERAL = re.compile(r"'(?:\\[^']{1,8}|[^'\\])'")
_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}


# ── Source reading ────────────────────────────────────────────────


def read_source(path: PathLike) -> str:
    """Read a source file as text, replacing undecodable bytes.

    Raises:
        FileAccessError: if the file cannot be opened or read.
    """
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise FileAccessError(Path(path), e.strerror or str(e)) from e


# ── Code view ─────────────────────────────────────────────────────


def strip_literals(
    lines: Sequence[str],
    line_comment: Optional[str] = "//",
    block_comments: Sequence[Tuple[str, str]] = (("/*", "*/"),),
    single_quote_strings: bool = False,
) -> List[str]:
    """Blank out comments and string contents, one output line per input line.

    String literals collapse to ``""`` so brace counting and call scanning
    never see their contents. Block comments and triple-quoted strings may
    span lines.
    """
    out: List[str] = []
    open_block: Optional[str] = None
    for line in lines:
        buf: List[str] = []
        i = 0
        n = len(line)
        while i < n:
            if open_block is not None:
                j = line.find(open_block, i)
                if j < 0:
                    i = n
                    break
                i = j + len(open_block)
                open_block = None
                buf.append(" ")
                continue

            started = False
            for start, end in block_comments:
                if line.startswith(start, i):
                    open_block = end
                    i += len(start)
                    started = True
                    break
            if started:
                continue

            if line_comment and line.startswith(line_comment, i):
                break

            ch = line[i]
            if ch == '"' or (ch == "'" and single_quote_strings):
                i = _skip_string(line, i, ch)
                buf.append('""')
                continue
            if ch == "'":
                m = _CHAR_LITERAL.match(line, i)
                if m:
                    buf.append("' '")
                    i = m.end()
                    continue

            buf.append(ch)
            i += 1
        out.append("".join(buf))
    return out


def _skip_string(line: str, start: int, quote: str) -> int:
    i = start + 1
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1
    return len(line)


# ── Bracket helpers ───────────────────────────────────────────────


def find_closing(text: str, open_index: int) -> int:
    """Index of the bracket closing the one at ``open_index``, or -1."""
    opener = text[open_index]
    closer = _OPENERS.get(opener, ">" if opener == "<" else "")
    depth = 0
    for i in range(open_index, len(text)):
        ch = text[i]
        if ch == opener:
            depth += 1
        elif ch == closer:
            if opener == "<" and i > 0 and text[i - 1] == "-":
                continue
            depth -= 1
            if depth == 0:
                return i
    return -1


def split_top_level(text: str, sep: str = ",") -> List[str]:
    """Split on ``sep`` ignoring separators nested in brackets.

    Angle brackets count as nesting; the ``>`` of an ``->`` arrow does not.
    """
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    prev = ""
    for ch in text:
        if ch in _OPENERS or ch == "<":
            depth += 1
        elif ch in _CLOSERS or (ch == ">" and prev != "-"):
            depth = max(depth - 1, 0)
        if ch == sep and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        prev = ch
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def brace_span(code_lines: Sequence[str], start_line: int, start_col: int = 0) -> Tuple[int, bool]:
    """Find the line on which the brace block opened at or after a position closes.

    Counting starts at ``start_col`` of ``start_line``. Returns the closing
    line index and whether the block balanced; an unbalanced block runs to
    the last line.
    """
    depth = 0
    opened = False
    for idx in range(start_line, len(code_lines)):
        text = code_lines[idx]
        if idx == start_line:
            text = text[start_col:]
        for ch in text:
            if ch == "{":
                depth += 1
                opened = True
            elif ch == "}":
                depth -= 1
                if opened and depth <= 0:
                    return idx, True
    return max(len(code_lines) - 1, start_line), False


def indent_of(line: str) -> int:
    return len(line.expandtabs(4)) - len(line.expandtabs(4).lstrip())


# ── Context tracking ──────────────────────────────────────────────


@dataclass
class Frame:
    """An enclosing scope: type, trait, namespace, class or function body."""

    name: str
    kind: str
    depth: int = 0
    access: str = "public"
    meta: Dict[str, str] = field(default_factory=dict)


class ContextStack:
    """Brace-driven stack of enclosing scopes.

    ``open()`` registers a pending frame; it is committed by the next ``{``
    and discarded by a ``;`` seen first. A later ``open()`` replaces a
    pending frame. Committed frames pop when depth returns to the depth at
    which they opened.
    """

    def __init__(self) -> None:
        self.depth = 0
        self.frames: List[Frame] = []
        self._pending: Optional[Frame] = None

    def open(self, frame: Frame) -> None:
        self._pending = frame

    def feed(self, code: str) -> None:
        for ch in code:
            if ch == "{":
                if self._pending is not None:
                    self._pending.depth = self.depth
                    self.frames.append(self._pending)
                    self._pending = None
                self.depth += 1
            elif ch == "}":
                self.depth = max(self.depth - 1, 0)
                while self.frames and self.depth <= self.frames[-1].depth:
                    self.frames.pop()
            elif ch == ";" and self._pending is not None:
                self._pending = None

    @property
    def in_function(self) -> bool:
        return any(f.kind == "function" for f in self.frames)

    def innermost(self, kinds: Iterable[str]) -> Optional[Frame]:
        wanted = set(kinds)
        for frame in reversed(self.frames):
            if frame.kind in wanted:
                return frame
        return None

    def qualifier(self, sep: str) -> str:
        names = [f.name for f in self.frames if f.kind != "function" and f.name]
        return sep.join(names)


# ── Declarations ──────────────────────────────────────────────────


@dataclass
class Signature:
    """A declaration head whose parameter list has been closed."""

    params: str
    close_line: int
    close_col: int
    tail: str
    terminator: str  # "{", ";" or ""
    body_line: int = -1
    body_col: int = -1


class BaseExtractor(ABC):
    """Common skeleton for per-language extractors.

    Subclasses set the class attributes below and implement ``extract``.
    """

    language: str = ""
    line_comment: Optional[str] = "//"
    block_comments: Tuple[Tuple[str, str], ...] = (("/*", "*/"),)
    single_quote_strings: bool = False
    qualifier_sep: str = "::"
    max_signature_lines: int = 8

    builtins: FrozenSet[str] = frozenset()
    keywords: FrozenSet[str] = frozenset()
    complexity_tokens: Tuple[str, ...] = ()
    call_pattern: Pattern[str] = re.compile(r"\b([A-Za-z_]\w*)\s*\(")

    def __init__(self) -> None:
        spec = LANGUAGES[self.language]
        self.extensions: Tuple[str, ...] = spec.extensions
        self.header_extensions: Tuple[str, ...] = spec.header_extensions
        self._complexity_re = (
            re.compile("|".join(self.complexity_tokens)) if self.complexity_tokens else None
        )

    # -- public surface ------------------------------------------------

    @abstractmethod
    def extract(self, text: str, path: str) -> ExtractionResult:
        """Extract declarations and call sites from one file's text."""

    def parse_file(self, path: PathLike) -> ExtractionResult:
        """Read and extract one file.

        Raises:
            FileAccessError: if the file cannot be read.
        """
        return self.extract(read_source(path), str(path))

    def find_calls(self, text: str) -> Dict[str, int]:
        """Call-site identifiers in ``text`` with their occurrence counts."""
        return self.scan_calls(self.code_view(text.splitlines()))

    def accepts(self, path: PathLike) -> bool:
        return Path(path).suffix.lower() in self.extensions

    def is_header_file(self, path: PathLike) -> bool:
        return Path(path).suffix.lower() in self.header_extensions

    # -- shared machinery ------------------------------------------------

    def code_view(self, lines: Sequence[str]) -> List[str]:
        return strip_literals(
            lines,
            line_comment=self.line_comment,
            block_comments=self.block_comments,
            single_quote_strings=self.single_quote_strings,
        )

    def scan_calls(
        self, code_lines: Sequence[str], masks: Optional[Dict[int, int]] = None
    ) -> Dict[str, int]:
        """Count call identifiers, skipping the masked prefix of declaration lines.

        ``masks`` maps a line index to the column up to which that line is
        ignored, so a declaration never counts as a call of itself.
        """
        masks = masks or {}
        counts: Dict[str, int] = {}
        for idx, code in enumerate(code_lines):
            cut = masks.get(idx)
            if cut:
                code = " " * cut + code[cut:]
            for match in self.call_pattern.finditer(code):
                name = self._call_name(match)
                if not name or self.is_excluded_call(name):
                    continue
                counts[name] = counts.get(name, 0) + 1
        return counts

    def _call_name(self, match: "re.Match[str]") -> str:
        return match.group(1)

    def is_excluded_call(self, name: str) -> bool:
        return name in self.builtins or name in self.keywords

    def complexity(self, code_lines: Sequence[str], start: int, end: int) -> int:
        """1 plus the branching tokens found between two lines inclusive."""
        if self._complexity_re is None:
            return 1
        score = 1
        for idx in range(start, min(end, len(code_lines) - 1) + 1):
            score += len(self._complexity_re.findall(code_lines[idx]))
        return score

    def close_signature(
        self,
        code_lines: Sequence[str],
        line: int,
        paren_col: int,
        allow_next_line_brace: bool = True,
        multiline_tail: bool = False,
    ) -> Optional[Signature]:
        """Close a parameter list starting at ``(`` and classify what follows.

        The list may continue over up to ``max_signature_lines`` lines. The
        terminator is the first ``{`` or ``;`` after the closing paren; a
        ``{`` opening the next non-blank line also counts when allowed. With
        ``multiline_tail`` the text after the paren may itself run over
        several lines (``where`` clauses, initializer lists) before the
        terminator. Returns None when the paren never closes within the
        window.
        """
        last = min(len(code_lines), line + self.max_signature_lines) - 1
        depth = 0
        params: List[str] = []
        close_line = close_col = -1
        for idx in range(line, last + 1):
            text = code_lines[idx]
            begin = paren_col if idx == line else 0
            for col in range(begin, len(text)):
                ch = text[col]
                if ch == "(":
                    depth += 1
                    if depth == 1:
                        continue
                elif ch == ")":
                    depth -= 1
                    if depth == 0:
                        close_line, close_col = idx, col
                        break
                params.append(ch)
            if close_line >= 0:
                break
            params.append(" ")
        if close_line < 0:
            return None

        sig = Signature(
            params=" ".join("".join(params).split()),
            close_line=close_line,
            close_col=close_col,
            tail="",
            terminator="",
        )
        tail = code_lines[close_line][close_col + 1:]
        term = _first_of(tail, "{;")
        if term >= 0:
            sig.tail = tail[:term].strip()
            sig.terminator = tail[term]
            sig.body_line, sig.body_col = close_line, close_col + 1 + term
            return sig

        sig.tail = tail.strip()
        if multiline_tail:
            pieces = [sig.tail]
            for idx in range(close_line + 1, last + 1):
                text = code_lines[idx]
                term = _first_of(text, "{;")
                if term >= 0:
                    pieces.append(text[:term])
                    sig.tail = " ".join(" ".join(pieces).split())
                    sig.terminator = text[term]
                    sig.body_line, sig.body_col = idx, term
                    return sig
                pieces.append(text)
            return sig
        if allow_next_line_brace:
            nxt = _next_code_line(code_lines, close_line + 1)
            if nxt is not None and code_lines[nxt].lstrip().startswith("{"):
                sig.terminator = "{"
                sig.body_line = nxt
                sig.body_col = code_lines[nxt].index("{")
        return sig

    def body_size(self, code_lines: Sequence[str], decl_line: int, sig: Signature) -> Tuple[int, int]:
        """(size, end line) of a braced body that opens at ``sig.body_line``."""
        end, balanced = brace_span(code_lines, sig.body_line, sig.body_col)
        if not balanced:
            logger.debug(f"Unbalanced braces for declaration at line {decl_line + 1}")
            end = len(code_lines) - 1
        return end - decl_line + 1, end

    def preceding_comments(
        self, lines: Sequence[str], before: int, line_comment: Optional[str] = None
    ) -> str:
        """Comment text directly above line index ``before``, joined in source order.

        Blank lines between the comment and the declaration are skipped; the
        walk stops at the first line that is neither blank nor a comment.
        ``line_comment`` overrides the extractor's own marker.
        """
        marker = line_comment if line_comment is not None else self.line_comment
        collected: List[str] = []
        idx = before - 1
        while idx >= 0 and not lines[idx].strip():
            idx -= 1
        while idx >= 0:
            stripped = lines[idx].strip()
            if not stripped:
                break
            if stripped.endswith("*/"):
                block: List[str] = []
                while idx >= 0:
                    block.append(lines[idx].strip())
                    if "/*" in lines[idx]:
                        break
                    idx -= 1
                collected.extend(block)
                idx -= 1
                continue
            if marker and stripped.startswith(marker):
                collected.append(stripped)
                idx -= 1
                continue
            break
        bodies = [_comment_body(c) for c in reversed(collected)]
        return " ".join(b for b in bodies if b)


def _first_of(text: str, chars: str) -> int:
    positions = [text.find(c) for c in chars]
    positions = [p for p in positions if p >= 0]
    return min(positions) if positions else -1


def _next_code_line(code_lines: Sequence[str], start: int) -> Optional[int]:
    for idx in range(start, len(code_lines)):
        if code_lines[idx].strip():
            return idx
    return None


_COMMENT_MARKERS = re.compile(r"^(?://!|///?|/\*\*?|\*/|\*|#+)\s?")


def _comment_body(text: str) -> str:
    text = text.strip()
    if text.endswith("*/"):
        text = text[:-2]
    text = _COMMENT_MARKERS.sub("", text, count=1)
    return " ".join(text.split())


def normalize_type(text: str) -> str:
    """Collapse whitespace and attach pointer/reference marks to the type."""
    text = " ".join(text.split())
    text = re.sub(r"\s*([*&]+)\s*", r"\1 ", text).strip()
    return re.sub(r"\s+([*&])", r"\1", text)


@dataclass
class Match:
    """A recognised declaration, before location and body are filled in."""

    function: Function
    signature: Signature
    name_end: int


class BracedExtractor(BaseExtractor):
    """Extractor for languages whose bodies are delimited by braces.

    Subclasses implement ``match_declaration`` and, where the language has
    them, ``match_context`` and ``match_attribute``.
    """

    nested_functions: bool = True
    skip_preprocessor: bool = False

    def extract(self, text: str, path: str) -> ExtractionResult:
        lines = text.splitlines()
        code = self.code_view(lines)
        ctx = ContextStack()
        functions: List[Function] = []
        masks: Dict[int, int] = {}
        attrs: List[str] = []
        attr_line: Optional[int] = None
        skip_until = -1
        pending_body: Optional[Tuple[int, int, Frame]] = None

        in_macro = False
        for idx, line in enumerate(code):
            stripped = line.strip()
            if self.skip_preprocessor:
                if in_macro or stripped.startswith("#"):
                    in_macro = stripped.endswith("\\")
                    continue
            if not stripped:
                continue

            if idx > skip_until:
                attr = self.match_attribute(stripped)
                if attr is not None:
                    if attr_line is None:
                        attr_line = idx
                    attrs.append(attr)
                    ctx.feed(line)
                    continue

                found = None
                if self.nested_functions or not ctx.in_function:
                    found = self.match_declaration(lines, code, idx, ctx, attrs)

                if found is not None:
                    fn = self._complete(found, lines, code, idx, path, attr_line)
                    functions.append(fn)
                    masks[idx] = found.name_end
                    skip_until = found.signature.close_line
                    if found.signature.terminator == "{":
                        pending_body = (
                            found.signature.body_line,
                            found.signature.body_col,
                            Frame(fn.name, "function"),
                        )
                    attrs, attr_line = [], None
                else:
                    frame = self.match_context(stripped, ctx)
                    if frame is not None:
                        ctx.open(frame)
                    else:
                        self.handle_line(stripped, ctx)
                    attrs, attr_line = [], None

            if pending_body is not None and pending_body[0] == idx:
                col = pending_body[1]
                ctx.feed(line[:col])
                ctx.open(pending_body[2])
                ctx.feed(line[col:])
                pending_body = None
            else:
                ctx.feed(line)

        return ExtractionResult(functions=functions, call_sites=self.scan_calls(code, masks))

    def _complete(
        self,
        found: Match,
        lines: Sequence[str],
        code: Sequence[str],
        idx: int,
        path: str,
        attr_line: Optional[int],
    ) -> Function:
        fn = found.function
        sig = found.signature
        fn.file = path
        fn.line = idx + 1
        if not fn.language:
            fn.language = self.language
        fn.signature = " ".join(l.strip() for l in lines[idx:sig.close_line + 1])
        if sig.terminator == "{":
            fn.size, end = self.body_size(code, idx, sig)
            fn.metadata["definition"] = "true"
            if self.complexity_tokens:
                fn.complexity = self.complexity(code, sig.body_line, end)
        else:
            fn.size = 1
            fn.metadata["declaration"] = "true"
        fn.comments = self.preceding_comments(lines, attr_line if attr_line is not None else idx)
        return fn

    # -- hooks -----------------------------------------------------------

    @abstractmethod
    def match_declaration(
        self,
        lines: Sequence[str],
        code: Sequence[str],
        idx: int,
        ctx: ContextStack,
        attrs: List[str],
    ) -> Optional[Match]:
        """Recognise a function declaration starting on line ``idx``."""

    def match_context(self, stripped: str, ctx: ContextStack) -> Optional[Frame]:
        return None

    def match_attribute(self, stripped: str) -> Optional[str]:
        return None

    def handle_line(self, stripped: str, ctx: ContextStack) -> None:
        """Inspect a line that is neither a declaration nor a scope opener."""

    # -- helpers for subclasses -------------------------------------------

    def qualify(self, name: str, ctx: ContextStack) -> str:
        prefix = ctx.qualifier(self.qualifier_sep)
        return f"{prefix}{self.qualifier_sep}{name}" if prefix else name

    @staticmethod
    def context_metadata(metadata: Dict[str, str], ctx: ContextStack) -> None:
        frame = ctx.innermost(k for k in ("namespace", "class", "struct", "impl", "trait", "interface", "union"))
        if frame is not None and frame.name:
            metadata["context"] = frame.name
            metadata["context_kind"] = frame.kind
