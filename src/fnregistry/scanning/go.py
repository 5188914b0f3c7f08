"""Go extractor.

Methods are named after their receiver type (``Server.Start``); interface
method sets are reported as declarations of ``Interface.Method``.
"""

import re
from typing import Dict, List, Optional, Sequence

from ..models import Function, Visibility
from .base import BracedExtractor, ContextStack, Frame, Match, find_closing, split_top_level

_FUNC = re.compile(r"^\s*func\s*(?:\((?P<recv>[^)]*)\)\s*)?(?P<name>[A-Za-z_]\w*)\s*")
_INTERFACE = re.compile(
    r"^(?:type\s+)?(?P<name>[A-Za-z_]\w*)(?:\[[^\]]*\])?\s+interface\s*\{"
)
_IFACE_METHOD = re.compile(r"^\s*(?P<name>[A-Za-z_]\w*)\s*\(")
_RECEIVER_TYPE = re.compile(r"\*?\s*(?P<type>[A-Za-z_]\w*)\s*(?:\[[^\]]*\])?\s*$")
_EMPTY_TYPE = re.compile(r"\b(interface|struct)\s*\{\s*\}")
_BARE_EMPTY_TYPE = re.compile(r"\b(interface|struct)\b(?!\s*\{)")
_WORD = re.compile(r"[A-Za-z_]\w*")

_TEST_PREFIXES = ("Test", "Benchmark", "Example", "Fuzz")


class GoExtractor(BracedExtractor):
    """Heuristic extractor for ``.go`` files."""

    language = "go"
    qualifier_sep = "."
    block_comments = (("/*", "*/"), ("`", "`"))
    nested_functions = False

    builtins = frozenset({
        "append", "cap", "clear", "close", "complex", "copy", "delete", "imag", "len",
        "make", "max", "min", "new", "panic", "print", "println", "real", "recover",
        "bool", "byte", "complex64", "complex128", "error", "float32", "float64",
        "int", "int8", "int16", "int32", "int64", "rune", "string",
        "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
        "true", "false", "iota", "nil",
    })
    keywords = frozenset({
        "break", "case", "chan", "const", "continue", "default", "defer", "else",
        "fallthrough", "for", "func", "go", "goto", "if", "import", "interface", "map",
        "package", "range", "return", "select", "struct", "switch", "type", "var",
    })
    complexity_tokens = (r"\bif\b", r"\bfor\b", r"\bcase\b", r"&&", r"\|\|")

    def code_view(self, lines: Sequence[str]) -> List[str]:
        # ``interface{}`` and ``struct{}`` would otherwise read as a body brace
        return [
            _EMPTY_TYPE.sub(lambda m: m.group(1) + " " * (len(m.group(0)) - len(m.group(1))), line)
            for line in super().code_view(lines)
        ]

    def match_context(self, stripped: str, ctx: ContextStack) -> Optional[Frame]:
        m = _INTERFACE.match(stripped)
        if m:
            return Frame(m.group("name"), "interface")
        return None

    def match_declaration(
        self,
        lines: Sequence[str],
        code: Sequence[str],
        idx: int,
        ctx: ContextStack,
        attrs: List[str],
    ) -> Optional[Match]:
        if ctx.frames and ctx.frames[-1].kind == "interface":
            return self._interface_method(code, idx, ctx.frames[-1])

        line = code[idx]
        m = _FUNC.match(line)
        if not m:
            return None
        pos = m.end()
        generic = ""
        if pos < len(line) and line[pos] == "[":
            close = find_closing(line, pos)
            if close < 0:
                return None
            generic = line[pos + 1:close].strip()
            pos = close + 1
            while pos < len(line) and line[pos].isspace():
                pos += 1
        if pos >= len(line) or line[pos] != "(":
            return None

        sig = self.close_signature(code, idx, pos, allow_next_line_brace=False)
        if sig is None:
            return None

        name = m.group("name")
        metadata: Dict[str, str] = {}
        if generic:
            metadata["generic"] = generic
        qualified = name
        recv = (m.group("recv") or "").strip()
        if recv:
            rt = _RECEIVER_TYPE.search(recv)
            if rt:
                qualified = f"{rt.group('type')}.{name}"
            metadata["receiver"] = " ".join(recv.split())
            metadata["method"] = "true"
            if "*" in recv:
                metadata["pointer_receiver"] = "true"

        fn = Function(
            name=qualified,
            file="",
            line=0,
            visibility=_visibility(name),
            return_type=_result_type(sig.tail),
            parameters=_parameters(sig.params),
            is_test=name.startswith(_TEST_PREFIXES),
            is_main=name == "main" and not recv,
            metadata=metadata,
        )
        return Match(fn, sig, m.end("name"))

    def _interface_method(self, code: Sequence[str], idx: int, frame: Frame) -> Optional[Match]:
        m = _IFACE_METHOD.match(code[idx])
        if not m:
            return None
        sig = self.close_signature(code, idx, m.end() - 1, allow_next_line_brace=False)
        if sig is None:
            return None
        name = m.group("name")
        fn = Function(
            name=f"{frame.name}.{name}",
            file="",
            line=0,
            visibility=_visibility(name),
            return_type=_result_type(sig.tail),
            parameters=_parameters(sig.params),
            metadata={"interface": frame.name, "context": frame.name, "context_kind": "interface"},
        )
        return Match(fn, sig, m.end("name"))


def _visibility(name: str) -> Visibility:
    return Visibility.PUBLIC if name[:1].isupper() else Visibility.PRIVATE


def _result_type(tail: str) -> str:
    result = " ".join(tail.split())
    return _BARE_EMPTY_TYPE.sub(r"\1{}", result)


def _parameters(params: str) -> List[str]:
    names = []
    for token in split_top_level(params):
        word = _WORD.match(token.strip())
        if word:
            names.append(word.group(0))
    return names
