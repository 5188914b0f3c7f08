"""Python extractor.

Bodies are measured by indentation rather than braces. Methods are named
``Class.method`` and nested functions ``outer.inner``; the docstring, when
present, is used as the comment.
"""

import re
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import ExtractionResult, Function, Visibility
from .base import BaseExtractor, find_closing, indent_of, split_top_level

_DEF = re.compile(
    r"^(?P<indent>\s*)(?P<async>async\s+)?def\s+(?P<name>[A-Za-z_]\w*)\s*(?P<tparams>\[)?"
)
_CLASS = re.compile(r"^(?P<indent>\s*)class\s+(?P<name>[A-Za-z_]\w*)")
_DECORATOR = re.compile(r"^\s*@\s*(?P<expr>.+?)\s*$")
_RETURN = re.compile(r"^\s*->\s*(?P<type>.+?)\s*:")
_QUOTED_RETURN = re.compile(r"->\s*(['\"])(?P<type>.*?)\1")
_DOC_START = re.compile(r"^(?:[rRuUbB]{0,2})(\"\"\"|''')")

_SPECIAL_DECORATORS = ("staticmethod", "classmethod", "property")


class PythonExtractor(BaseExtractor):
    """Heuristic extractor for ``.py`` and ``.pyi`` files."""

    language = "python"
    line_comment = "#"
    block_comments = (('"""', '"""'), ("'''", "'''"))
    single_quote_strings = True
    qualifier_sep = "."

    builtins = frozenset({
        "print", "len", "range", "str", "int", "float", "bool", "list", "dict", "tuple", "set",
        "open", "type", "isinstance", "hasattr", "getattr", "setattr", "delattr",
        "min", "max", "sum", "abs", "round", "sorted", "reversed", "enumerate", "zip",
        "map", "filter", "any", "all", "next", "iter", "super", "property", "staticmethod",
        "classmethod",
    })
    keywords = frozenset({
        "if", "elif", "else", "while", "for", "in", "not", "and", "or", "is", "return",
        "yield", "lambda", "assert", "del", "except", "with", "def", "class", "await",
        "async", "import", "from", "raise", "print", "global", "nonlocal",
    })
    complexity_tokens = (
        r"\bif\b", r"\belif\b", r"\bfor\b", r"\bwhile\b", r"\bexcept\b", r"\band\b", r"\bor\b",
    )

    def extract(self, text: str, path: str) -> ExtractionResult:
        lines = text.splitlines()
        code = self.code_view(lines)
        functions: List[Function] = []
        masks: Dict[int, int] = {}
        # (name, indent, kind) for every enclosing class or def
        scopes: List[Tuple[str, int, str]] = []
        decorators: List[str] = []
        decorator_line: Optional[int] = None
        skip_until = -1

        for idx, line in enumerate(code):
            if idx <= skip_until:
                continue
            stripped = line.strip()
            if not stripped:
                continue
            indent = indent_of(lines[idx])
            while scopes and indent <= scopes[-1][1]:
                scopes.pop()

            deco = _DECORATOR.match(line)
            if deco:
                if decorator_line is None:
                    decorator_line = idx
                decorators.append(self._decorator_text(code, idx))
                skip_until = self._decorator_end(code, idx)
                continue

            m = _DEF.match(line)
            if m:
                fn, end = self._function(lines, code, idx, m, scopes, decorators, decorator_line)
                if fn is not None:
                    fn.file = path
                    functions.append(fn)
                    masks[idx] = m.end("name")
                    scopes.append((m.group("name"), indent, "function"))
                    skip_until = end
                decorators, decorator_line = [], None
                continue

            c = _CLASS.match(line)
            if c:
                scopes.append((c.group("name"), indent, "class"))
            decorators, decorator_line = [], None

        return ExtractionResult(functions=functions, call_sites=self.scan_calls(code, masks))

    def _function(
        self,
        lines: Sequence[str],
        code: Sequence[str],
        idx: int,
        m: "re.Match[str]",
        scopes: List[Tuple[str, int, str]],
        decorators: List[str],
        decorator_line: Optional[int],
    ) -> Tuple[Optional[Function], int]:
        line = code[idx]
        pos = m.end()
        type_params = ""
        if m.group("tparams"):
            close = find_closing(line, pos - 1)
            if close < 0:
                return None, idx
            type_params = line[pos:close].strip()
            pos = close + 1
        while pos < len(line) and line[pos].isspace():
            pos += 1
        if pos >= len(line) or line[pos] != "(":
            return None, idx

        sig = self.close_signature(code, idx, pos, allow_next_line_brace=False)
        if sig is None:
            return None, idx

        def_indent = indent_of(lines[idx])
        body_end = sig.close_line
        for j in range(sig.close_line + 1, len(code)):
            if not code[j].strip():
                continue
            if indent_of(lines[j]) <= def_indent:
                break
            body_end = j

        name = m.group("name")
        dunder = name.startswith("__") and name.endswith("__") and len(name) > 4
        owner, owner_kind = (scopes[-1][0], scopes[-1][2]) if scopes else ("", "")
        test_class = owner if owner_kind == "class" else ""

        metadata: Dict[str, str] = {}
        if m.group("async"):
            metadata["async"] = "true"
        if decorators:
            metadata["decorators"] = "; ".join(decorators)
            for special in _SPECIAL_DECORATORS:
                if any(d == special or d.endswith("." + special) for d in decorators):
                    metadata[special] = "true"
        if dunder:
            metadata["dunder"] = "true"
        if type_params:
            metadata["generic"] = type_params
        if owner:
            metadata["context"] = owner
            metadata["context_kind"] = owner_kind

        qualified = ".".join([s[0] for s in scopes] + [name])
        doc = _docstring(lines, sig.close_line, body_end)
        anchor = decorator_line if decorator_line is not None else idx

        fn = Function(
            name=qualified,
            file="",
            line=idx + 1,
            visibility=Visibility.PRIVATE if name.startswith("_") and not dunder else Visibility.PUBLIC,
            return_type=_return_type(lines[sig.close_line], code[sig.close_line], sig.close_col),
            parameters=_parameters(sig.params),
            language=self.language,
            signature=" ".join(l.strip() for l in lines[idx:sig.close_line + 1]),
            is_test=_is_test(name, test_class, decorators),
            is_main=name == "main" and not scopes and def_indent == 0,
            size=body_end - idx + 1,
            complexity=self.complexity(code, idx, body_end),
            comments=doc if doc else self.preceding_comments(lines, anchor),
            metadata=metadata,
        )
        return fn, sig.close_line

    @staticmethod
    def _decorator_text(code: Sequence[str], idx: int) -> str:
        text = code[idx].strip()[1:].strip()
        return text.split("(", 1)[0].strip()

    @staticmethod
    def _decorator_end(code: Sequence[str], idx: int) -> int:
        """Last line of a decorator whose argument list may span lines."""
        depth = 0
        for j in range(idx, len(code)):
            for ch in code[j]:
                if ch in "([{":
                    depth += 1
                elif ch in ")]}":
                    depth -= 1
            if depth <= 0:
                return j
        return idx


def _return_type(raw: str, code: str, close_col: int) -> str:
    m = _RETURN.match(code[close_col + 1:])
    if not m:
        return "None"
    ret = " ".join(m.group("type").split())
    if '""' in ret:
        quoted = _QUOTED_RETURN.search(raw)
        if quoted:
            return quoted.group("type")
    return ret


def _parameters(params: str) -> List[str]:
    names = []
    for token in split_top_level(params):
        if token in ("*", "/"):
            continue
        name = re.split(r"[:=]", token, maxsplit=1)[0].strip()
        if name:
            names.append(name)
    return names


def _is_test(name: str, owner: str, decorators: Sequence[str]) -> bool:
    if name.startswith("test_") or name.endswith("_test"):
        return True
    if owner.startswith("Test") and name.startswith("test"):
        return True
    for deco in decorators:
        root = deco.split(".", 1)[0]
        if root in ("pytest", "unittest") or "test" in deco.lower():
            return True
    return False


def _docstring(lines: Sequence[str], after: int, body_end: int) -> str:
    """Docstring opening the body, collapsed to one line; empty if none."""
    for j in range(after + 1, body_end + 1):
        stripped = lines[j].strip()
        if not stripped:
            continue
        m = _DOC_START.match(stripped)
        if not m:
            return ""
        quote = m.group(1)
        rest = stripped[m.end():]
        if quote in rest:
            return " ".join(rest.split(quote, 1)[0].split())
        parts = [rest]
        for k in range(j + 1, body_end + 1):
            piece = lines[k].strip()
            if quote in piece:
                parts.append(piece.split(quote, 1)[0])
                break
            parts.append(piece)
        return " ".join(" ".join(parts).split())
    return ""
