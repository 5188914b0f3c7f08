"""C and C++ extractors.

Both recognise ``<return type> <name>(<params>)`` followed by ``{`` (a
definition, possibly with the brace on the next line) or ``;`` (a
prototype). C++ additionally tracks namespaces, classes and access
specifiers, and accepts constructors, destructors and operators.
"""

import re
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import Function, Visibility
from .base import (
    BracedExtractor,
    ContextStack,
    Frame,
    Match,
    Signature,
    find_closing,
    normalize_type,
    split_top_level,
)

_C_HEAD = re.compile(r"^\s*(?P<head>(?:[A-Za-z_]\w*[\s*]+)+?)(?P<name>[A-Za-z_]\w*)\s*\(")
_CPP_HEAD = re.compile(
    r"\s*(?P<head>(?:[A-Za-z_][\w:]*(?:\s*<[^;{}()]*?>)?[\s*&]+)*?)"
    r"(?P<name>(?:[A-Za-z_]\w*(?:<[^;{}()]*?>)?::)*(?:~\s*)?"
    r"(?:operator\s*(?:\(\)|\[\]|[^\s\w(]{1,3}|\s+[A-Za-z_][\w:]*[\s*&]*)|[A-Za-z_]\w*))\s*\("
)
_TEMPLATE_PREFIX = re.compile(r"\s*template\s*<")
_CPP_ATTR_PREFIX = re.compile(r"\s*(?:\[\[[^\]]*\]\]\s*)+")
_CLASS = re.compile(
    r"^(?:template\s*<.*>\s*)?(?P<kind>class|struct|union)\s+"
    r"(?:\[\[[^\]]*\]\]\s*)?(?:alignas\([^)]*\)\s*)?(?:[A-Z_][A-Z0-9_]*\s+)?"
    r"(?P<name>[A-Za-z_]\w*)(?P<rest>[^;]*)$"
)
_NAMESPACE = re.compile(r"^(?:inline\s+)?namespace\s*(?P<name>[A-Za-z_][\w:]*)?\s*(?:\{.*)?$")
_ACCESS = re.compile(r"^(?P<access>public|private|protected)\b[^:]*:(?!:)")
_FUNC_POINTER = re.compile(r"\(\s*[*&^]\s*([A-Za-z_]\w*)\s*\)")
_WORD = re.compile(r"[A-Za-z_]\w*")

_C_MODIFIERS = frozenset({
    "static", "extern", "inline", "__inline", "__inline__", "register", "_Noreturn",
    "__extension__",
})
_CPP_MODIFIERS = _C_MODIFIERS | frozenset({
    "virtual", "explicit", "constexpr", "consteval", "friend", "thread_local",
})
_FLAGGED_MODIFIERS = ("static", "extern", "inline", "virtual", "explicit", "constexpr", "friend")
_STATEMENT_WORDS = frozenset({
    "return", "else", "case", "goto", "typedef", "using", "new", "delete", "throw",
    "co_return", "co_yield", "co_await", "sizeof", "namespace", "template", "do",
    "if", "while", "for", "switch",
})

_C_BUILTINS = frozenset({
    "printf", "scanf", "fprintf", "fscanf", "sprintf", "sscanf", "snprintf",
    "malloc", "calloc", "realloc", "free",
    "strlen", "strcpy", "strncpy", "strcat", "strncat", "strcmp", "strncmp",
    "memcpy", "memmove", "memset", "memcmp",
    "fopen", "fclose", "fread", "fwrite", "fseek", "ftell", "rewind",
    "getchar", "putchar", "gets", "puts", "fgets", "fputs",
    "atoi", "atof", "atol", "strtol", "strtof", "strtod",
    "abs", "labs", "fabs", "ceil", "floor", "sqrt", "pow", "sin", "cos", "tan",
    "exit", "abort", "atexit", "system", "getenv",
    "assert",
})
_C_KEYWORDS = frozenset({
    "if", "else", "while", "for", "do", "switch", "case", "default",
    "break", "continue", "return", "goto",
    "sizeof", "typedef", "struct", "union", "enum",
    "static", "extern", "register", "auto", "volatile", "const",
    "signed", "unsigned", "short", "long",
    "int", "char", "float", "double", "void",
})
_CPP_BUILTINS = _C_BUILTINS | frozenset({
    "cout", "cin", "cerr", "clog", "endl", "flush",
    "string", "vector", "list", "map", "set", "unordered_map", "unordered_set",
    "shared_ptr", "unique_ptr", "weak_ptr", "make_shared", "make_unique",
    "thread", "mutex", "lock_guard", "unique_lock",
    "begin", "end", "size", "empty", "clear", "push_back", "pop_back",
    "insert", "erase", "find", "count", "at", "front", "back",
})
_CPP_KEYWORDS = _C_KEYWORDS | frozenset({
    "alignas", "alignof", "and", "and_eq", "asm", "bitand", "bitor",
    "bool", "catch", "char16_t", "char32_t", "class",
    "compl", "concept", "constexpr", "const_cast",
    "decltype", "delete", "dynamic_cast",
    "explicit", "export", "false", "friend", "inline", "mutable",
    "namespace", "new", "noexcept", "not", "not_eq", "nullptr", "operator",
    "or", "or_eq", "private", "protected", "public", "reinterpret_cast",
    "requires", "static_assert", "static_cast", "template", "this", "thread_local",
    "throw", "true", "try", "typeid", "typename", "using", "virtual", "wchar_t",
    "xor", "xor_eq", "override", "final",
})


class CFamilyExtractor(BracedExtractor):
    """Parameter parsing and test detection shared by C and C++."""

    nested_functions = False
    skip_preprocessor = True
    complexity_tokens = (r"\bif\b", r"\bfor\b", r"\bwhile\b", r"\bcase\b", r"&&", r"\|\|", r"\?")

    @staticmethod
    def parameters(params: str) -> List[str]:
        text = params.strip()
        if not text or text == "void":
            return []
        names = []
        for token in split_top_level(text):
            if token == "void":
                continue
            pointer = _FUNC_POINTER.search(token)
            if pointer:
                names.append(pointer.group(1))
                continue
            token = split_top_level(token, "=")[0] if "=" in token else token
            token = re.sub(r"\[[^\]]*\]\s*$", "", token).strip()
            if token.endswith("..."):
                names.append("...")
                continue
            words = _WORD.findall(token)
            if words:
                names.append(words[-1])
        return names

    @staticmethod
    def looks_like_test(name: str) -> bool:
        return name.startswith("test_") or name.endswith("_test") or "Test" in name

    @staticmethod
    def split_head(head: str, modifiers: frozenset) -> Tuple[List[str], str]:
        """Separate storage/function modifiers from the return type text."""
        words = head.replace("*", " * ").replace("&", " & ").split()
        mods = [w for w in words if w in modifiers]
        rest = [w for w in words if w not in modifiers]
        return mods, normalize_type(" ".join(rest))


class CExtractor(CFamilyExtractor):
    """Heuristic extractor for C sources and headers."""

    language = "c"
    builtins = _C_BUILTINS
    keywords = _C_KEYWORDS

    def match_declaration(
        self,
        lines: Sequence[str],
        code: Sequence[str],
        idx: int,
        ctx: ContextStack,
        attrs: List[str],
    ) -> Optional[Match]:
        line = code[idx]
        if "=" in line and "{" not in line:
            return None
        m = _C_HEAD.match(line)
        if not m:
            return None
        name = m.group("name")
        head_words = set(_WORD.findall(m.group("head")))
        if name in _C_KEYWORDS or head_words & _STATEMENT_WORDS:
            return None

        mods, return_type = self.split_head(m.group("head"), _C_MODIFIERS)
        if not return_type:
            return None

        sig = self.close_signature(code, idx, m.end() - 1)
        if sig is None or not sig.terminator:
            return None

        metadata: Dict[str, str] = {flag: "true" for flag in _FLAGGED_MODIFIERS if flag in mods}
        fn = Function(
            name=name,
            file="",
            line=0,
            visibility=Visibility.PRIVATE if "static" in mods else Visibility.PUBLIC,
            return_type=return_type,
            parameters=self.parameters(sig.params),
            is_test=self.looks_like_test(name),
            is_main=name == "main",
            metadata=metadata,
        )
        return Match(fn, sig, m.end("name"))


class CppExtractor(CFamilyExtractor):
    """Heuristic extractor for C++ sources and headers."""

    language = "cpp"
    qualifier_sep = "::"
    builtins = _CPP_BUILTINS
    keywords = _CPP_KEYWORDS
    complexity_tokens = CFamilyExtractor.complexity_tokens + (r"\bcatch\b",)
    call_pattern = re.compile(r"\b((?:[A-Za-z_]\w*::)*[A-Za-z_]\w*)\s*\(")

    def is_excluded_call(self, name: str) -> bool:
        return name.startswith("std::") or super().is_excluded_call(name)

    def match_attribute(self, stripped: str) -> Optional[str]:
        if _TEMPLATE_PREFIX.match(stripped):
            open_at = stripped.index("<")
            close = find_closing(stripped, open_at)
            if close >= 0 and not stripped[close + 1:].strip():
                return stripped
        if _CPP_ATTR_PREFIX.fullmatch(stripped):
            return stripped
        return None

    def match_context(self, stripped: str, ctx: ContextStack) -> Optional[Frame]:
        m = _NAMESPACE.match(stripped)
        if m:
            return Frame(m.group("name") or "", "namespace")
        m = _CLASS.match(stripped)
        if m and "(" not in m.group("rest"):
            kind = m.group("kind")
            return Frame(m.group("name"), kind, access="private" if kind == "class" else "public")
        return None

    def handle_line(self, stripped: str, ctx: ContextStack) -> None:
        m = _ACCESS.match(stripped)
        if m:
            frame = ctx.innermost(("class", "struct", "union"))
            if frame is not None:
                frame.access = m.group("access")

    def match_declaration(
        self,
        lines: Sequence[str],
        code: Sequence[str],
        idx: int,
        ctx: ContextStack,
        attrs: List[str],
    ) -> Optional[Match]:
        line = code[idx]
        pos = 0
        template = ""
        t = _TEMPLATE_PREFIX.match(line)
        if t:
            close = find_closing(line, t.end() - 1)
            if close < 0:
                return None
            template = line[t.end():close].strip()
            pos = close + 1
        a = _CPP_ATTR_PREFIX.match(line, pos)
        if a:
            pos = a.end()

        m = _CPP_HEAD.match(line, pos)
        if not m:
            return None
        head = m.group("head")
        raw_name = m.group("name")
        name = re.sub(r"\s+", "", raw_name) if "operator" not in raw_name else " ".join(raw_name.split())
        last = name.rsplit("::", 1)[-1]
        if "=" in line[:m.start("name")]:
            return None
        if last in _CPP_KEYWORDS - {"operator"} and not last.startswith("operator"):
            return None
        if set(_WORD.findall(head)) & _STATEMENT_WORDS:
            return None

        mods, return_type = self.split_head(head, _CPP_MODIFIERS)
        constructor = destructor = False
        owner = ctx.innermost(("class", "struct", "union"))
        if last.startswith("~"):
            destructor = True
        elif "::" in name and name.rsplit("::", 2)[-2].split("<")[0] == last:
            constructor = True
        elif not return_type and owner is not None and owner.name == last:
            constructor = True
        if not return_type and not (constructor or destructor or last.startswith("operator")):
            return None

        sig = self.close_signature(code, idx, m.end() - 1)
        if sig is None:
            return None
        if sig.tail.startswith(":") or (not sig.terminator and _next_starts_with(code, sig.close_line, ":")):
            if not _initializer_body(code, sig, self.max_signature_lines):
                return None
        if not sig.terminator:
            return None

        metadata: Dict[str, str] = {flag: "true" for flag in _FLAGGED_MODIFIERS if flag in mods}
        metadata.update(_tail_flags(sig.tail))
        if return_type == "auto" and "->" in sig.tail:
            return_type = _trailing_return(sig.tail)
        if constructor:
            metadata["constructor"] = "true"
        if destructor:
            metadata["destructor"] = "true"
        template = template or next((a for a in attrs if a.startswith("template")), "")
        if template:
            metadata["template"] = template.strip()
        extra = [a for a in attrs if not a.startswith("template")]
        if extra:
            metadata["attributes"] = "; ".join(extra)
        self.context_metadata(metadata, ctx)

        visibility = Visibility.PUBLIC
        if owner is not None and "::" not in name:
            metadata["access"] = owner.access
            if owner.access != "public":
                visibility = Visibility.PRIVATE
        elif "static" in mods or any(f.kind == "namespace" and not f.name for f in ctx.frames):
            visibility = Visibility.PRIVATE

        fn = Function(
            name=self.qualify(name, ctx),
            file="",
            line=0,
            visibility=visibility,
            return_type=return_type,
            parameters=self.parameters(sig.params),
            is_test=self.looks_like_test(last) or last.lower().startswith("test"),
            is_main=name == "main" and owner is None,
            metadata=metadata,
        )
        return Match(fn, sig, m.end("name"))


def _next_starts_with(code: Sequence[str], line: int, prefix: str) -> bool:
    for idx in range(line + 1, len(code)):
        stripped = code[idx].strip()
        if stripped:
            return stripped.startswith(prefix)
    return False


def _initializer_body(code: Sequence[str], sig: Signature, window: int) -> bool:
    """Locate the body brace after a constructor initializer list.

    A ``{`` directly after an identifier or ``>`` is brace-initialisation of
    a member and is skipped together with its contents.
    """
    depth = 0
    skip = 0
    prev = ""
    last = min(len(code), sig.close_line + window)
    for idx in range(sig.close_line, last):
        start = sig.close_col + 1 if idx == sig.close_line else 0
        text = code[idx]
        for col in range(start, len(text)):
            ch = text[col]
            if skip:
                if ch == "{":
                    skip += 1
                elif ch == "}":
                    skip -= 1
            elif ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
            elif ch == "{" and depth == 0:
                if prev and (prev.isalnum() or prev in "_>"):
                    skip = 1
                else:
                    sig.terminator = "{"
                    sig.body_line, sig.body_col = idx, col
                    return True
            elif ch == ";" and depth == 0:
                return False
            if not ch.isspace():
                prev = ch
    return False


def _tail_flags(tail: str) -> Dict[str, str]:
    flags: Dict[str, str] = {}
    words = set(_WORD.findall(tail.split("->", 1)[0]))
    for flag in ("const", "override", "final", "noexcept"):
        if flag in words:
            flags[flag] = "true"
    compact = tail.replace(" ", "")
    if compact.endswith("=0"):
        flags["pure_virtual"] = "true"
    elif compact.endswith("=default"):
        flags["defaulted"] = "true"
    elif compact.endswith("=delete"):
        flags["deleted"] = "true"
    return flags


def _trailing_return(tail: str) -> str:
    ret = tail.split("->", 1)[1]
    ret = re.split(r"\b(?:override|final|noexcept)\b|=", ret, maxsplit=1)[0]
    return normalize_type(ret)
