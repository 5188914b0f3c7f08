"""Rust extractor.

Recognises ``fn`` items with their modifiers, qualifies methods with the
type of the enclosing ``impl`` (``Type::method``) or the enclosing trait,
and keeps ``#[...]`` attributes for test detection.
"""

import re
from typing import List, Optional, Sequence

from ..models import Function, Visibility
from .base import BracedExtractor, ContextStack, Frame, Match, find_closing, split_top_level

_FN = re.compile(
    r"^\s*(?P<inline_attrs>(?:#\[[^\]]*\]\s*)*)"
    r"(?P<vis>pub(?:\s*\([^)]*\))?\s+|public\s+)?"
    r"(?P<mods>(?:(?:default|const|async|unsafe)\s+|extern\s+(?:\"\"\s+)?)*)"
    r"fn\s+(?P<name>[A-Za-z_]\w*)\s*"
)
_ABI = re.compile(r'\bextern\s+"([^"]*)"')
_ATTRIBUTE = re.compile(r"^#\[(.*)\]$")
_INLINE_ATTR = re.compile(r"#\[([^\]]*)\]")
_IMPL = re.compile(r"^\s*(?:unsafe\s+)?impl\b(?P<rest>.*)$")
_TRAIT = re.compile(
    r"^\s*(?:pub(?:\s*\([^)]*\))?\s+)?(?:unsafe\s+)?(?:auto\s+)?trait\s+(?P<name>[A-Za-z_]\w*)"
)
_TYPE_NAME = re.compile(r"\s*&?\s*(?:mut\s+)?(?:dyn\s+)?(?:[A-Za-z_]\w*::)*(?P<name>[A-Za-z_]\w*)")
_SELF_PARAM = re.compile(r"^&?\s*(?:'\w+\s+)?(?:mut\s+)?self\b")
_WHERE = re.compile(r"\bwhere\b")
_PARAM_NAME = re.compile(r"(?<!:):(?!:)")


class RustExtractor(BracedExtractor):
    """Heuristic extractor for ``.rs`` files."""

    language = "rust"
    qualifier_sep = "::"
    nested_functions = True

    call_pattern = re.compile(r"\b((?:[A-Za-z_]\w*::)*[A-Za-z_]\w*)(!?)\s*\(")

    builtins = frozenset({
        "println", "print", "eprintln", "eprint", "panic", "assert", "assert_eq", "assert_ne",
        "debug_assert", "format", "write", "writeln", "vec", "todo", "unimplemented",
        "unreachable", "matches", "Some", "None", "Ok", "Err", "Box", "Rc", "Arc",
        "clone", "copy", "drop", "len", "is_empty", "push", "pop", "insert", "remove",
        "iter", "into_iter", "collect", "map", "filter", "fold", "reduce", "find",
        "unwrap", "expect", "unwrap_or", "unwrap_or_else", "is_some", "is_none", "is_ok", "is_err",
        "Fn", "FnMut", "FnOnce",
    })
    keywords = frozenset({
        "if", "else", "while", "for", "loop", "match", "return", "fn", "let", "mut", "in",
        "as", "impl", "where", "move", "async", "await", "unsafe", "pub", "use", "mod",
        "struct", "enum", "trait", "type", "const", "static", "ref", "self", "Self", "super",
        "crate", "dyn",
    })
    complexity_tokens = (
        r"\bif\b", r"\bmatch\b", r"\bfor\b", r"\bwhile\b", r"\bloop\b", r"\?", r"&&", r"\|\|",
    )

    def match_attribute(self, stripped: str) -> Optional[str]:
        m = _ATTRIBUTE.match(stripped)
        return m.group(1).strip() if m else None

    def match_context(self, stripped: str, ctx: ContextStack) -> Optional[Frame]:
        m = _TRAIT.match(stripped)
        if m:
            return Frame(m.group("name"), "trait")
        m = _IMPL.match(stripped)
        if m:
            return _impl_frame(m.group("rest"))
        return None

    def match_declaration(
        self,
        lines: Sequence[str],
        code: Sequence[str],
        idx: int,
        ctx: ContextStack,
        attrs: List[str],
    ) -> Optional[Match]:
        line = code[idx]
        m = _FN.match(line)
        if not m:
            return None

        pos = m.end()
        generic = ""
        if pos < len(line) and line[pos] == "<":
            close = find_closing(line, pos)
            if close < 0:
                return None
            generic = line[pos + 1:close].strip()
            pos = close + 1
        while pos < len(line) and line[pos].isspace():
            pos += 1
        if pos >= len(line) or line[pos] != "(":
            return None

        sig = self.close_signature(code, idx, pos, multiline_tail=True)
        if sig is None or not sig.terminator:
            return None

        name = m.group("name")
        mods = m.group("mods").split()
        attributes = list(attrs) + [a.strip() for a in _INLINE_ATTR.findall(m.group("inline_attrs"))]

        metadata = {}
        for flag in ("async", "unsafe", "const"):
            if flag in mods:
                metadata[flag] = "true"
        if "extern" in mods:
            abi = _ABI.search(lines[idx])
            metadata["extern"] = abi.group(1) if abi else "true"
        if generic:
            metadata["generic"] = generic
        if attributes:
            metadata["attributes"] = "; ".join(attributes)

        impl = ctx.innermost(("impl", "trait"))
        if impl is not None and impl.meta.get("trait"):
            metadata["trait"] = impl.meta["trait"]
        self.context_metadata(metadata, ctx)

        qualified = self.qualify(name, ctx)
        fn = Function(
            name=qualified,
            file="",
            line=0,
            visibility=Visibility.PUBLIC if m.group("vis") else Visibility.PRIVATE,
            return_type=_return_type(sig.tail),
            parameters=_parameters(sig.params),
            is_test=any("test" in a for a in attributes),
            is_main=name == "main" and impl is None,
            metadata=metadata,
        )
        return Match(fn, sig, m.end("name"))


def _impl_frame(rest: str) -> Optional[Frame]:
    rest = rest.strip()
    if rest.startswith("<"):
        close = find_closing(rest, 0)
        if close < 0:
            return None
        rest = rest[close + 1:]
    rest = rest.split("{", 1)[0]
    rest = _WHERE.split(rest, 1)[0]
    trait = ""
    target = rest
    parts = re.split(r"\s+for\s+", rest, maxsplit=1)
    if len(parts) == 2:
        trait, target = parts[0].strip(), parts[1]
    m = _TYPE_NAME.match(target)
    if not m:
        return None
    meta = {"trait": trait} if trait else {}
    return Frame(m.group("name"), "impl", meta=meta)


def _return_type(tail: str) -> str:
    tail = tail.strip()
    if not tail.startswith("->"):
        return "()"
    ret = _WHERE.split(tail[2:], 1)[0].strip()
    return ret or "()"


def _parameters(params: str) -> List[str]:
    names = []
    for token in split_top_level(params):
        if _SELF_PARAM.match(token):
            names.append("self")
            continue
        name = _PARAM_NAME.split(token, 1)[0].strip()
        if name.startswith("mut "):
            name = name[4:].strip()
        if name:
            names.append(name)
    return names
