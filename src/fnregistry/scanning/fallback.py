"""Generic fallback extractor.

Used when no dedicated extractor is requested. It picks one declaration
pattern per file from the file's extension, so a mixed tree can be scanned
in a single pass. Results are shallower than the dedicated extractors: no
scope qualification and no complexity score.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Sequence, Tuple

from ..models import ExtractionResult, Function, Visibility
from .base import BaseExtractor, brace_span, indent_of, split_top_level, strip_literals
from .languages import detect_language

_C_STYLE = ("//", (("/*", "*/"),), False)
_HASH_STYLE = ("#", (('"""', '"""'), ("'''", "'''")), True)
_SCRIPT_STYLE = ("//", (("/*", "*/"),), True)

_WORD = re.compile(r"[A-Za-z_$][\w$]*")
_ANNOTATION = re.compile(r"^(?:@[\w.]+(?:\(.*\))?|#\[.*\])$")
_PYTHON_RETURN = re.compile(r"^\s*->\s*(?P<type>.+?)\s*:")

_MODIFIERS = frozenset({
    "public", "private", "protected", "internal", "static", "final", "abstract",
    "synchronized", "native", "virtual", "override", "async", "inline", "extern",
    "export", "default", "open", "sealed", "suspend", "operator", "infix", "tailrec",
    "mutating", "fileprivate", "implicit", "lazy", "transient", "strictfp", "readonly",
    "unsafe", "const", "pub", "partial", "new",
})
_STATEMENTS = frozenset({
    "return", "else", "new", "throw", "await", "case", "yield", "goto", "typedef",
    "using", "import", "package", "delete", "if", "while", "for", "switch", "do",
})


@dataclass(frozen=True)
class _Family:
    pattern: Pattern[str]
    style: Tuple[str, Tuple[Tuple[str, str], ...], bool]
    params: str  # "before_colon", "first_word" or "last_word"
    indent_bodies: bool = False


_FAMILIES: Dict[str, _Family] = {
    "python": _Family(
        re.compile(r"^\s*(?P<mods>async\s+)?def\s+(?P<name>[A-Za-z_]\w*)\s*\("),
        _HASH_STYLE,
        "before_colon",
        indent_bodies=True,
    ),
    "rust": _Family(
        re.compile(
            r"^\s*(?P<mods>(?:(?:pub(?:\([^)]*\))?|public)\s+)?(?:(?:async|unsafe|const|extern(?:\s+\"\")?)\s+)*)"
            r"fn\s+(?P<name>[A-Za-z_]\w*)\s*(?:<[^()]*>)?\s*\("
        ),
        _C_STYLE,
        "before_colon",
    ),
    "go": _Family(
        re.compile(r"^\s*func\s+(?:\([^)]*\)\s*)?(?P<name>[A-Za-z_]\w*)\s*(?:\[[^\]]*\])?\s*\("),
        _C_STYLE,
        "first_word",
    ),
    "script": _Family(
        re.compile(
            r"^\s*(?P<mods>(?:(?:export|default|async|public|private|protected|static|abstract|final)\s+)*)"
            r"function\s*\*?\s*&?\s*(?P<name>[A-Za-z_$][\w$]*)\s*(?:<[^()]*>)?\s*\("
        ),
        _SCRIPT_STYLE,
        "before_colon",
    ),
    "kotlin": _Family(
        re.compile(
            r"^\s*(?P<mods>(?:\w+\s+)*)fun\s+(?:<[^>]*>\s*)?(?:[A-Za-z_][\w.]*\.)?"
            r"(?P<name>[A-Za-z_]\w*)\s*\("
        ),
        _C_STYLE,
        "before_colon",
    ),
    "swift": _Family(
        re.compile(r"^\s*(?P<mods>(?:[\w@]+\s+)*)func\s+(?P<name>[A-Za-z_]\w*)\s*(?:<[^()]*>)?\s*\("),
        _C_STYLE,
        "before_colon",
    ),
    "scala": _Family(
        re.compile(r"^\s*(?P<mods>(?:\w+\s+)*)def\s+(?P<name>[A-Za-z_]\w*)\s*(?:\[[^\]]*\])?\s*\("),
        _C_STYLE,
        "before_colon",
    ),
    "c_like": _Family(
        re.compile(
            r"^\s*(?P<mods>(?:[A-Za-z_][\w<>\[\],.*&:?]*\s+)+)(?P<name>[A-Za-z_]\w*)\s*\("
        ),
        _C_STYLE,
        "last_word",
    ),
}

_LANGUAGE_FAMILY = {
    "python": "python",
    "rust": "rust",
    "go": "go",
    "javascript": "script",
    "typescript": "script",
    "php": "script",
    "kotlin": "kotlin",
    "swift": "swift",
    "scala": "scala",
    "c": "c_like",
    "cpp": "c_like",
    "java": "c_like",
    "csharp": "c_like",
}


class GenericExtractor(BaseExtractor):
    """Pattern-per-extension extractor covering languages without a dedicated one."""

    language = "generic"

    builtins = frozenset({
        "print", "printf", "println", "len", "size", "count", "max", "min",
        "sort", "map", "filter", "reduce", "sum", "abs", "round",
        "open", "close", "read", "write", "file", "input", "output",
        "assert", "expect", "panic", "error", "throw", "catch",
        "new", "delete", "malloc", "free", "alloc",
        "true", "false", "null", "nil", "undefined",
    })
    keywords = frozenset({
        "if", "else", "elif", "while", "for", "do", "switch", "case", "default",
        "break", "continue", "return", "goto", "try", "catch", "finally",
        "class", "struct", "enum", "interface", "trait", "impl", "type",
        "var", "let", "const", "static", "extern", "inline", "virtual",
        "public", "private", "protected", "internal",
        "import", "export", "include", "use", "from", "namespace", "package",
        "int", "float", "double", "char", "string", "bool", "void",
        "this", "self", "super", "base", "function", "func", "fn", "def", "fun",
        "sizeof", "typeof", "not", "and", "or", "in", "await", "yield", "lambda",
    })

    def extract(self, text: str, path: str) -> ExtractionResult:
        language = detect_language(path)
        family = _FAMILIES.get(_LANGUAGE_FAMILY.get(language, "c_like"))
        line_comment, blocks, single_quotes = family.style
        lines = text.splitlines()
        code = strip_literals(lines, line_comment, blocks, single_quotes)

        functions: List[Function] = []
        masks: Dict[int, int] = {}
        annotations: List[str] = []
        anchor: Optional[int] = None

        for idx, line in enumerate(code):
            stripped = line.strip()
            if not stripped:
                continue
            if _ANNOTATION.match(stripped):
                if anchor is None:
                    anchor = idx
                annotations.append(stripped)
                continue

            m = family.pattern.match(line)
            fn = self._declaration(lines, code, idx, m, family, language) if m else None
            if fn is not None:
                fn.file = path
                fn.is_test = fn.is_test or any(
                    "Test" in a or a.strip("#[]@") == "test" for a in annotations
                )
                fn.comments = self.preceding_comments(
                    lines, anchor if anchor is not None else idx, line_comment
                )
                functions.append(fn)
                masks[idx] = m.end("name")
            annotations, anchor = [], None

        return ExtractionResult(functions=functions, call_sites=self.scan_calls(code, masks))

    def _declaration(
        self,
        lines: Sequence[str],
        code: Sequence[str],
        idx: int,
        m: "re.Match[str]",
        family: _Family,
        language: str,
    ) -> Optional[Function]:
        name = m.group("name")
        if name in self.keywords:
            return None
        mods_text = m.groupdict().get("mods") or ""
        mod_words = _WORD.findall(mods_text)
        if set(mod_words) & _STATEMENTS:
            return None
        if family.params == "last_word" and "=" in code[idx] and "{" not in code[idx]:
            return None

        sig = self.close_signature(code, idx, m.end() - 1, allow_next_line_brace=True)
        if sig is None:
            return None
        if family.params == "last_word" and not sig.terminator:
            return None

        metadata: Dict[str, str] = {}
        if sig.terminator == "{":
            end, balanced = brace_span(code, sig.body_line, sig.body_col)
            if not balanced:
                end = len(code) - 1
            size = end - idx + 1
            metadata["definition"] = "true"
        elif family.indent_bodies:
            size = _indented_size(lines, code, idx, sig.close_line)
        else:
            size = 1
            if sig.terminator == ";":
                metadata["declaration"] = "true"

        if family.params == "last_word":
            return_type = " ".join(w for w in mods_text.split() if w not in _MODIFIERS)
        else:
            return_type = _tail_return(sig.tail, code[sig.close_line][sig.close_col + 1:], language)

        return Function(
            name=name,
            file="",
            line=idx + 1,
            visibility=_visibility(name, mod_words, language),
            return_type=return_type,
            parameters=_parameters(sig.params, family.params),
            language=language,
            signature=" ".join(l.strip() for l in lines[idx:sig.close_line + 1]),
            is_test=_looks_like_test(name),
            is_main=name == "main",
            size=size,
            metadata=metadata,
        )


def _indented_size(lines: Sequence[str], code: Sequence[str], idx: int, close_line: int) -> int:
    base = indent_of(lines[idx])
    end = close_line
    for j in range(close_line + 1, len(code)):
        if not code[j].strip():
            continue
        if indent_of(lines[j]) <= base:
            break
        end = j
    return end - idx + 1


def _tail_return(tail: str, after_paren: str, language: str) -> str:
    if language == "python":
        m = _PYTHON_RETURN.match(after_paren)
        return " ".join(m.group("type").split()) if m else ""
    text = " ".join(tail.split())
    if language == "go":
        return text
    if text.startswith("->"):
        text = re.split(r"\bwhere\b", text[2:], maxsplit=1)[0]
        return text.strip()
    if text.startswith(":"):
        return text[1:].split("=", 1)[0].strip()
    return ""


def _visibility(name: str, mod_words: List[str], language: str) -> Visibility:
    if language == "python":
        private = name.startswith("_") and not (name.startswith("__") and name.endswith("__"))
    elif language == "go":
        private = not name[:1].isupper()
    elif language == "rust":
        private = not {"pub", "public"} & set(mod_words)
    else:
        private = "private" in mod_words or "fileprivate" in mod_words
    return Visibility.PRIVATE if private else Visibility.PUBLIC


def _parameters(params: str, style: str) -> List[str]:
    names = []
    for token in split_top_level(params):
        if token == "void":
            continue
        token = token.split("=", 1)[0].strip()
        if style == "before_colon":
            name = re.split(r"(?<!:):(?!:)", token, maxsplit=1)[0].strip()
            words = _WORD.findall(name)
            name = words[-1] if words and not name.startswith("*") else name
        elif style == "first_word":
            words = _WORD.findall(token)
            name = words[0] if words else ""
        else:
            token = re.sub(r"\[[^\]]*\]\s*$", "", token)
            words = _WORD.findall(token)
            name = words[-1] if words else ""
        name = name.lstrip("$").strip()
        if name and name not in ("*", "/"):
            names.append(name)
    return names


def _looks_like_test(name: str) -> bool:
    return any(p in name for p in ("test_", "_test", "Test", "TEST"))
