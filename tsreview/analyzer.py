"""Structural model of a tokenized TypeScript/JavaScript file.

``analyze`` turns a token stream into a SourceUnit: bracket matches,
control-flow nesting, declarations, functions, imports, hook calls, JSX
attributes, props types and inline suppressions. It is a heuristic model
rather than a full parser, built to answer the questions the review rules
ask about real-world code.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path

from tsreview.errors import LexError
from tsreview.lexer import KEYWORDS, Token, tokenize

JSX_EXTENSIONS = {".tsx", ".jsx"}
TYPED_EXTENSIONS = {".ts", ".tsx", ".mts", ".cts"}

CONTROL_HEADS = {"if", "for", "while", "switch", "catch", "with"}
CONTROL_BLOCKS = {"else", "try", "finally", "do", "catch"}

# Names that begin a new statement when they start a line after a complete expression
STATEMENT_KEYWORDS = {
    "const", "let", "var", "function", "class", "return", "if", "for", "while",
    "do", "switch", "try", "throw", "export", "import", "interface", "type",
    "enum", "async", "declare", "abstract",
}
BINARY_KEYWORDS = {"as", "satisfies", "in", "instanceof", "of", "extends", "keyof"}

# Tokens after which a `{` in a return type is a type literal, not the body
TYPE_OPERATORS = {":", "|", "&", "<", ",", "(", "[", "?", "keyof", "typeof"}

HOC_WRAPPERS = {"memo", "forwardRef", "observer"}
DECLARATION_MODIFIERS = {"export", "default", "declare", "abstract", "async", "const"}

PASCAL_CASE_RE = re.compile(r"^[A-Z][A-Za-z0-9]*$")
HOOK_NAME_RE = re.compile(r"^use[A-Z0-9]")
HOC_NAME_RE = re.compile(r"^with[A-Z]")
_SUPPRESS_RE = re.compile(r"tsreview-disable(-next-line|-line)?\b([^\n]*)")
_RULE_ID_RE = re.compile(r"\b[A-Z]{2,5}-\d{2}\b")


# --- Data structures ---

@dataclass
class Param:
    name: str
    line: int
    type_tokens: list[Token] = field(default_factory=list)
    default_tokens: list[Token] = field(default_factory=list)
    destructured: bool = False
    rest: bool = False


@dataclass
class Declaration:
    name: str
    kind: str  # "const", "let", "var", "function", "class", "interface", "type", "enum"
    line: int
    index: int  # code index of the name token
    stmt_index: int  # code index where the statement starts, `export` included
    exported: bool = False
    top_level: bool = False
    in_for_header: bool = False
    pattern: str = ""  # "array" or "object" for destructured bindings
    type_tokens: list[Token] = field(default_factory=list)
    init_start: int = -1
    init_end: int = -1
    body: tuple[int, int] | None = None  # braces of class/interface/enum bodies


@dataclass
class FunctionInfo:
    name: str | None
    kind: str  # "function", "arrow", "method"
    line: int
    end_line: int
    start: int
    body_span: tuple[int, int]  # inclusive code indices; braces included for block bodies
    params: list[Param] = field(default_factory=list)
    block_body: bool = True
    exported: bool = False
    default_export: bool = False
    top_level: bool = False
    has_jsx: bool = False
    max_nesting: int = 0
    nesting_line: int = 0
    callee: str | None = None  # call this function is passed to, e.g. "map"
    stmt_index: int = -1

    @property
    def length(self) -> int:
        return self.end_line - self.line + 1

    def contains(self, index: int) -> bool:
        return self.body_span[0] <= index <= self.body_span[1]


@dataclass
class Import:
    module: str
    line: int
    index: int
    type_only: bool = False
    reexport: bool = False


@dataclass
class HookCall:
    name: str
    line: int
    index: int
    arg_count: int


@dataclass
class JsxAttribute:
    name: str
    line: int
    index: int
    value: list[Token] = field(default_factory=list)


@dataclass
class PropsType:
    name: str
    line: int
    member_count: int


@dataclass
class SourceUnit:
    path: Path
    rel: str
    text: str
    lines: list[str]
    tokens: list[Token]
    code: list[Token]
    comments: list[Token]
    is_jsx: bool = False
    is_typed: bool = False
    match: list[int] = field(default_factory=list)
    control_depth: list[int] = field(default_factory=list)
    brace_depth: list[int] = field(default_factory=list)
    token_index: list[int] = field(default_factory=list)  # code index -> tokens index
    declarations: list[Declaration] = field(default_factory=list)
    functions: list[FunctionInfo] = field(default_factory=list)
    imports: list[Import] = field(default_factory=list)
    hook_calls: list[HookCall] = field(default_factory=list)
    jsx_attributes: list[JsxAttribute] = field(default_factory=list)
    props_types: list[PropsType] = field(default_factory=list)
    line_suppressions: dict[int, set[str]] = field(default_factory=dict)
    file_suppressions: set[str] = field(default_factory=set)

    def value(self, index: int) -> str:
        """Token text at a code index, or "" past either end."""
        if 0 <= index < len(self.code):
            return self.code[index].value
        return ""

    @property
    def components(self) -> list[FunctionInfo]:
        """Top-level functions that render JSX and can be used as components."""
        return [
            f for f in self.functions
            if f.has_jsx and f.top_level and (
                (f.name and PASCAL_CASE_RE.match(f.name))
                or (f.name is None and f.default_export)
            )
        ]

    def enclosing_function(self, index: int) -> FunctionInfo | None:
        """Innermost function whose body contains the code index."""
        best = None
        for f in self.functions:
            if f.contains(index) and (best is None or f.body_span[0] >= best.body_span[0]):
                best = f
        return best

    def is_suppressed(self, rule_id: str, line: int) -> bool:
        for rules in (self.file_suppressions, self.line_suppressions.get(line, set())):
            if "*" in rules or rule_id in rules:
                return True
        return False


# --- Token helpers ---

def _is_punct(tok: Token, *values: str) -> bool:
    return tok.kind == "punct" and tok.value in values


def _ends_expression(tok: Token) -> bool:
    if tok.kind == "punct":
        return tok.value in (")", "]", "}")
    if tok.kind == "name":
        return tok.value not in KEYWORDS or tok.value in ("this", "super", "true", "false", "null")
    return True


def _starts_statement(unit: SourceUnit, t: int) -> bool:
    """ASI heuristic: token t begins a new statement on a new line."""
    if t == 0:
        return True
    tok, prev = unit.code[t], unit.code[t - 1]
    if tok.line <= prev.end_line or not _ends_expression(prev):
        return False
    if tok.kind == "name":
        return tok.value not in BINARY_KEYWORDS
    return tok.kind in ("string", "number", "template")


def _skip_angles(unit: SourceUnit, i: int) -> int:
    """Index just past the `>` closing the `<` at i, or i when unbalanced."""
    code = unit.code
    depth = 0
    t = i
    while t < len(code):
        tok = code[t]
        if tok.kind == "punct":
            if tok.value == "<":
                depth += 1
            elif tok.value in (">", ">>", ">>>"):
                depth -= len(tok.value)
                if depth <= 0:
                    return t + 1
            elif tok.value in ("(", "[", "{"):
                t = unit.match[t]
            elif tok.value in (";", ")", "]", "}"):
                return i
        t += 1
    return i


def _skip_type(unit: SourceUnit, t: int, stops: set[str], for_header: bool = False) -> int:
    """Skip a type annotation starting at t; return the index of the stop token."""
    code = unit.code
    angle = 0
    start = t
    while t < len(code):
        tok = code[t]
        if t > start and angle == 0 and _starts_statement(unit, t):
            return t
        if tok.kind == "punct":
            if tok.value == "<":
                angle += 1
            elif tok.value in (">", ">>", ">>>"):
                angle = max(0, angle - len(tok.value))
            elif tok.value in stops and angle == 0:
                return t
            elif tok.value in ("(", "[", "{"):
                t = unit.match[t]
            elif tok.value in (")", "]", "}"):
                return t
        elif for_header and tok.kind == "name" and tok.value in ("of", "in"):
            return t
        t += 1
    return t


def _expression_end(unit: SourceUnit, s: int) -> int:
    """Index of the last token of the expression starting at s."""
    code = unit.code
    t = s
    last = s - 1
    while t < len(code):
        tok = code[t]
        if t > s and _starts_statement(unit, t):
            break
        if tok.kind == "punct":
            if tok.value in ("(", "[", "{"):
                last = unit.match[t]
                t = last + 1
                continue
            if tok.value in (")", "]", "}", ";", ","):
                break
            if tok.value == "<" and t > 0 and code[t - 1].kind == "name":
                after = _skip_angles(unit, t)
                if after != t and _is_punct(code[after] if after < len(code) else tok, "("):
                    t = after
                    continue
        last = t
        t += 1
    return max(last, s)


def _signature_end(unit: SourceUnit, k: int) -> int:
    """Skip an optional `: ReturnType` after a parameter list.

    Returns the index of the token that follows the annotation: the body
    brace, `=>`, or whatever ends the signature.
    """
    code = unit.code
    if k >= len(code) or not _is_punct(code[k], ":"):
        return k
    t = k + 1
    angle = 0
    while t < len(code):
        tok = code[t]
        if tok.kind == "punct":
            v = tok.value
            if v == "<":
                angle += 1
            elif v in (">", ">>", ">>>"):
                angle = max(0, angle - len(v))
            elif v == "=>" and angle == 0:
                return t
            elif v == "{":
                if angle == 0 and code[t - 1].value not in TYPE_OPERATORS:
                    return t
                t = unit.match[t]
            elif v in ("(", "["):
                t = unit.match[t]
            elif v in (";", ",", ")", "]", "}", "=") and angle == 0:
                return t
        t += 1
    return t


def _statement_start(unit: SourceUnit, i: int) -> tuple[int, bool, bool]:
    """Walk back over declaration modifiers. Returns (start, exported, default)."""
    code = unit.code
    k = i
    while k > 0 and code[k - 1].kind == "name" and code[k - 1].value in DECLARATION_MODIFIERS:
        k -= 1
    words = {code[j].value for j in range(k, i)}
    return k, "export" in words, "default" in words


# --- Passes ---

def _match_brackets(unit: SourceUnit) -> None:
    pairs = {")": "(", "]": "[", "}": "{"}
    unit.match = [-1] * len(unit.code)
    stack: list[int] = []
    for i, tok in enumerate(unit.code):
        if tok.kind != "punct":
            continue
        if tok.value in ("(", "[", "{"):
            stack.append(i)
        elif tok.value in pairs:
            if not stack or unit.code[stack[-1]].value != pairs[tok.value]:
                raise LexError(f"unexpected '{tok.value}'", tok.line)
            opener = stack.pop()
            unit.match[opener] = i
            unit.match[i] = opener
    if stack:
        tok = unit.code[stack[-1]]
        raise LexError(f"unclosed '{tok.value}'", tok.line)


def _is_control_brace(unit: SourceUnit, i: int) -> bool:
    if i == 0:
        return False
    prev = unit.code[i - 1]
    if prev.kind == "name" and prev.value in CONTROL_BLOCKS:
        return True
    if _is_punct(prev, ")"):
        opener = unit.match[i - 1]
        if opener <= 0:
            return False
        head = opener - 1
        if unit.value(head) == "await":
            head -= 1
        return head >= 0 and unit.code[head].kind == "name" and unit.code[head].value in CONTROL_HEADS
    return False


def _compute_nesting(unit: SourceUnit) -> None:
    n = len(unit.code)
    unit.control_depth = [0] * n
    unit.brace_depth = [0] * n
    stack: list[bool] = []
    control = 0
    for i, tok in enumerate(unit.code):
        if _is_punct(tok, "}") and stack:
            control -= stack.pop()
        unit.control_depth[i] = control
        unit.brace_depth[i] = len(stack)
        if _is_punct(tok, "{"):
            is_control = _is_control_brace(unit, i)
            stack.append(is_control)
            control += is_control


def _pattern_bindings(unit: SourceUnit, open_index: int) -> list[int]:
    """Code indices of the names bound by a destructuring pattern (top level only)."""
    code = unit.code
    close = unit.match[open_index]
    names = []
    t = open_index + 1
    while t < close:
        tok = code[t]
        if _is_punct(tok, "(", "[", "{"):
            t = unit.match[t] + 1
            continue
        if (tok.kind == "name"
                and code[t - 1].value in ("[", "{", ",", ":", "...")
                and code[t + 1].value in (",", "]", "}", "=")):
            names.append(t)
        t += 1
    return names


def _collect_variables(unit: SourceUnit, i: int) -> None:
    code = unit.code
    kind = code[i].value
    stmt, exported, _ = _statement_start(unit, i)
    in_for = i >= 2 and _is_punct(code[i - 1], "(") and code[i - 2].value in ("for", "await")
    top_level = unit.brace_depth[i] == 0 and not in_for
    j = i + 1
    while j < len(code):
        tok = code[j]
        pattern = ""
        if tok.kind == "name":
            name_indices = [j]
            j += 1
        elif _is_punct(tok, "[", "{"):
            pattern = "array" if tok.value == "[" else "object"
            name_indices = _pattern_bindings(unit, j)
            j = unit.match[j] + 1
        else:
            break
        if j < len(code) and _is_punct(code[j], "!"):
            j += 1
        type_tokens: list[Token] = []
        if j < len(code) and _is_punct(code[j], ":"):
            end = _skip_type(unit, j + 1, {"=", ",", ";"}, for_header=in_for)
            type_tokens = code[j + 1:end]
            j = end
        init_start = init_end = -1
        if j < len(code) and _is_punct(code[j], "="):
            init_start = j + 1
            init_end = _expression_end(unit, init_start)
            j = init_end + 1
        for idx in name_indices:
            unit.declarations.append(Declaration(
                name=code[idx].value, kind=kind, line=code[idx].line, index=idx,
                stmt_index=stmt, exported=exported, top_level=top_level,
                in_for_header=in_for, pattern=pattern, type_tokens=type_tokens,
                init_start=init_start, init_end=init_end,
            ))
        if j < len(code) and _is_punct(code[j], ","):
            j += 1
            continue
        break


def _find_body(unit: SourceUnit, j: int) -> tuple[int, int] | None:
    """Braces of the body that follows a class/interface/enum header at j."""
    code = unit.code
    t = j
    while t < len(code):
        tok = code[t]
        if _is_punct(tok, "{"):
            return t, unit.match[t]
        if _is_punct(tok, "(", "["):
            t = unit.match[t]
        elif _is_punct(tok, ";", "=", ")", "]", "}"):
            return None
        t += 1
    return None


def _collect_declarations(unit: SourceUnit) -> None:
    code = unit.code
    for i, tok in enumerate(code):
        if tok.kind != "name" or (i > 0 and code[i - 1].value in (".", "?.")):
            continue
        v = tok.value
        if v in ("const", "let", "var"):
            nxt = unit.value(i + 1)
            if nxt and nxt != "enum" and (code[i + 1].kind == "name" or nxt in ("[", "{")):
                _collect_variables(unit, i)
            continue
        if v not in ("class", "interface", "enum", "type", "function"):
            continue
        name_index = i + 2 if v == "function" and unit.value(i + 1) == "*" else i + 1
        if name_index >= len(code) or code[name_index].kind != "name":
            continue
        name_tok = code[name_index]
        if name_tok.value in KEYWORDS:
            continue
        after = unit.value(name_index + 1)
        kind = None
        if v == "class":
            kind = "class"
        elif v == "interface" and after in ("{", "<", "extends"):
            kind = "interface"
        elif v == "enum" and after == "{":
            kind = "enum"
        elif v == "type" and after in ("=", "<"):
            kind = "type"
        elif v == "function" and after in ("(", "<"):
            kind = "function"
        if kind is None:
            continue
        stmt, exported, _ = _statement_start(unit, i)
        decl = Declaration(
            name=name_tok.value, kind=kind, line=name_tok.line, index=name_index,
            stmt_index=stmt, exported=exported, top_level=unit.brace_depth[i] == 0,
        )
        if kind in ("class", "interface", "enum"):
            decl.body = _find_body(unit, name_index + 1)
        elif kind == "type":
            t = name_index + 1
            if unit.value(t) == "<":
                t = _skip_angles(unit, t)
            if unit.value(t) == "=":
                decl.init_start = t + 1
                decl.init_end = _expression_end(unit, t + 1)
        unit.declarations.append(decl)


def _parse_params(unit: SourceUnit, open_index: int, close: int) -> list[Param]:
    code = unit.code
    groups: list[list[int]] = []
    current: list[int] = []
    angle = 0
    t = open_index + 1
    while t < close:
        tok = code[t]
        if _is_punct(tok, "(", "[", "{"):
            current.extend(range(t, unit.match[t] + 1))
            t = unit.match[t] + 1
            continue
        if _is_punct(tok, "<"):
            angle += 1
        elif _is_punct(tok, ">", ">>"):
            angle = max(0, angle - len(tok.value))
        if _is_punct(tok, ",") and angle == 0:
            groups.append(current)
            current = []
        else:
            current.append(t)
        t += 1
    if current:
        groups.append(current)

    params = []
    for group in groups:
        toks = [code[k] for k in group]
        while toks and toks[0].kind == "name" and toks[0].value in (
                "public", "private", "protected", "readonly", "override"):
            toks = toks[1:]
        if not toks:
            continue
        rest = toks[0].value == "..."
        if rest:
            toks = toks[1:]
        if not toks or toks[0].value == "this":
            continue
        param = Param(name=toks[0].value, line=toks[0].line, rest=rest,
                      destructured=_is_punct(toks[0], "[", "{"))
        # split on the first top-level `:` and `=`
        depth = 0
        colon = equals = -1
        for k, tok in enumerate(toks):
            if _is_punct(tok, "(", "[", "{", "<"):
                depth += 1
            elif _is_punct(tok, ")", "]", "}", ">"):
                depth -= 1
            elif depth == 0 and _is_punct(tok, ":") and colon < 0 and equals < 0:
                colon = k
            elif depth == 0 and _is_punct(tok, "=") and equals < 0:
                equals = k
        if colon >= 0:
            param.type_tokens = toks[colon + 1:equals if equals >= 0 else len(toks)]
        if equals >= 0:
            param.default_tokens = toks[equals + 1:]
        params.append(param)
    return params


def _enclosing_paren(unit: SourceUnit, j: int) -> int:
    """Index of the `(` whose group contains code index j, or -1."""
    t = j - 1
    while t >= 0:
        tok = unit.code[t]
        if _is_punct(tok, ")", "]", "}"):
            t = unit.match[t] - 1
            continue
        if _is_punct(tok, "("):
            return t
        if _is_punct(tok, "[", "{", ";"):
            return -1
        t -= 1
    return -1


def _export_flags(unit: SourceUnit, anchor: int) -> tuple[bool, bool]:
    k = anchor - 1
    if unit.value(k) == "async":
        k -= 1
    if unit.value(k) == "default" and unit.value(k - 1) == "export":
        return True, True
    return unit.value(k) == "export", False


def _infer_name(unit: SourceUnit, start: int, owners: dict[int, Declaration]):
    """Name an anonymous function from its surroundings.

    Returns (name, callee, exported, default_export, stmt_index).
    """
    code = unit.code
    decl = owners.get(start)
    if decl:
        return decl.name, None, decl.exported, False, decl.stmt_index
    exported, default = _export_flags(unit, start)
    prev = unit.value(start - 1)
    if prev == "=" and start >= 2 and code[start - 2].kind == "name":
        return code[start - 2].value, None, exported, default, start - 2
    if prev == ":" and start >= 2 and code[start - 2].kind in ("name", "string"):
        return code[start - 2].value.strip("'\""), None, exported, default, start - 2
    if prev in ("(", ","):
        o = start - 1 if prev == "(" else _enclosing_paren(unit, start - 1)
        if o <= 0 or code[o - 1].kind != "name":
            return None, None, exported, default, start
        callee = code[o - 1].value
        chain = o - 1
        while chain >= 2 and code[chain - 1].value in (".", "?.") and code[chain - 2].kind == "name":
            chain -= 2
        if callee in HOC_WRAPPERS or HOC_NAME_RE.match(callee):
            decl = owners.get(chain)
            if decl:
                return decl.name, callee, decl.exported, False, decl.stmt_index
            exported, default = _export_flags(unit, chain)
            return None, callee, exported, default, chain
        return None, callee, False, False, start
    return None, None, exported, default, start


def _add_function(unit, owners, name, kind, start, params, body_span, block_body):
    code = unit.code
    callee = None
    exported = default = False
    stmt = start
    if kind == "method":
        pass
    elif name is None:
        name, callee, exported, default, stmt = _infer_name(unit, start, owners)
    else:
        stmt, exported, default = _statement_start(unit, start)
    unit.functions.append(FunctionInfo(
        name=name, kind=kind, line=code[start].line,
        end_line=code[body_span[1]].end_line, start=start, body_span=body_span,
        params=params, block_body=block_body, exported=exported,
        default_export=default, top_level=unit.brace_depth[start] == 0,
        callee=callee, stmt_index=stmt,
    ))


def _collect_functions(unit: SourceUnit) -> None:
    code = unit.code
    n = len(code)
    owners = {d.init_start: d for d in unit.declarations if d.init_start >= 0}

    for i, tok in enumerate(code):
        prev = unit.value(i - 1)
        if tok.kind == "name" and tok.value == "function" and prev not in (".", "?."):
            j = i + 1
            if unit.value(j) == "*":
                j += 1
            name = None
            if j < n and code[j].kind == "name":
                name = code[j].value
                j += 1
            if unit.value(j) == "<":
                j = _skip_angles(unit, j)
            if unit.value(j) != "(":
                continue
            close = unit.match[j]
            body = _signature_end(unit, close + 1)
            if body >= n or not _is_punct(code[body], "{"):
                continue  # overload signature or `declare function`
            start = i - 1 if prev == "async" else i
            _add_function(unit, owners, name, "function", start,
                          _parse_params(unit, j, close), (body, unit.match[body]), True)

        elif _is_punct(tok, "("):
            close = unit.match[i]
            arrow = _signature_end(unit, close + 1)
            if arrow >= n or not _is_punct(code[arrow], "=>"):
                continue
            if i > 0 and code[i - 1].kind == "name" and prev != "async" and prev not in KEYWORDS:
                continue  # call followed by `:` inside a conditional
            start = i - 1 if prev == "async" else i
            _add_arrow(unit, owners, start, _parse_params(unit, i, close), arrow)

        elif tok.kind == "name" and unit.value(i + 1) == "=>" and tok.value not in KEYWORDS:
            start = i - 1 if prev == "async" else i
            _add_arrow(unit, owners, start, [Param(name=tok.value, line=tok.line)], i + 1)

        elif tok.kind == "name" and unit.value(i + 1) in ("(", "<") and tok.value not in KEYWORDS:
            if prev in (".", "?.", "new", "function") or (prev == "*" and unit.value(i - 2) == "function"):
                continue
            j = i + 1
            if unit.value(j) == "<":
                j = _skip_angles(unit, j)
            if unit.value(j) != "(":
                continue
            close = unit.match[j]
            body = _signature_end(unit, close + 1)
            if body < n and _is_punct(code[body], "{"):
                _add_function(unit, owners, tok.value, "method", i,
                              _parse_params(unit, j, close), (body, unit.match[body]), True)


def _add_arrow(unit: SourceUnit, owners, start: int, params: list[Param], arrow: int) -> None:
    body = arrow + 1
    if body >= len(unit.code):
        return
    if _is_punct(unit.code[body], "{"):
        span = (body, unit.match[body])
        block = True
    else:
        span = (body, _expression_end(unit, body))
        block = False
    _add_function(unit, owners, None, "arrow", start, params, span, block)


def _measure_functions(unit: SourceUnit) -> None:
    """Fill has_jsx and max_nesting; nested function bodies are measured on their own."""
    code = unit.code
    for f in unit.functions:
        lo, hi = f.body_span
        f.has_jsx = any(code[t].kind.startswith("jsx") for t in range(lo, hi + 1))
        children = sorted(
            g.body_span for g in unit.functions
            if g is not f and lo < g.body_span[0] and g.body_span[1] <= hi
        )
        base = unit.control_depth[lo]
        best, best_line = 0, f.line
        t = lo
        k = 0
        while t <= hi:
            while k < len(children) and children[k][0] < t:
                k += 1
            if k < len(children) and children[k][0] == t:
                t = children[k][1] + 1
                continue
            depth = unit.control_depth[t] - base
            if depth > best:
                best, best_line = depth, code[t].line
            t += 1
        f.max_nesting = best
        f.nesting_line = best_line


def _module_specifier(unit: SourceUnit, j: int) -> int:
    code = unit.code
    t = j
    while t < len(code):
        tok = code[t]
        if tok.kind == "string":
            if t == j or unit.value(t - 1) == "from":
                return t
            return -1
        if _is_punct(tok, "{"):
            t = unit.match[t] + 1
            continue
        if _is_punct(tok, ";") or (t > j and tok.kind == "name" and tok.value in STATEMENT_KEYWORDS):
            return -1
        t += 1
    return -1


def _collect_imports(unit: SourceUnit) -> None:
    code = unit.code
    for i, tok in enumerate(code):
        if tok.kind != "name" or unit.brace_depth[i] != 0 or unit.value(i - 1) in (".", "?."):
            continue
        nxt = unit.value(i + 1)
        if tok.value == "import" and nxt not in ("(", "."):
            reexport = False
        elif tok.value == "export" and nxt in ("{", "*", "type"):
            reexport = True
        else:
            continue
        source = _module_specifier(unit, i + 1)
        if source < 0:
            continue
        type_only = nxt == "type" and unit.value(i + 2) != "from"
        unit.imports.append(Import(
            module=code[source].value[1:-1], line=tok.line, index=i,
            type_only=type_only, reexport=reexport,
        ))


def _count_args(unit: SourceUnit, open_index: int, close: int) -> int:
    if close == open_index + 1:
        return 0
    count = 1
    t = open_index + 1
    while t < close:
        tok = unit.code[t]
        if _is_punct(tok, "(", "[", "{"):
            t = unit.match[t] + 1
            continue
        if _is_punct(tok, ",") and t + 1 < close:
            count += 1
        t += 1
    return count


def _collect_hook_calls(unit: SourceUnit) -> None:
    code = unit.code
    definitions = {f.start for f in unit.functions if f.kind == "method"}
    for i, tok in enumerate(code):
        if tok.kind != "name" or not HOOK_NAME_RE.match(tok.value) or i in definitions:
            continue
        prev = unit.value(i - 1)
        if prev in (".", "?.") and unit.value(i - 2) != "React":
            continue
        if prev == "function":
            continue
        j = i + 1
        if unit.value(j) == "<":
            j = _skip_angles(unit, j)
        if unit.value(j) != "(":
            continue
        close = unit.match[j]
        unit.hook_calls.append(HookCall(
            name=tok.value, line=tok.line, index=i,
            arg_count=_count_args(unit, j, close),
        ))


def _collect_jsx_attributes(unit: SourceUnit) -> None:
    code = unit.code
    for i, tok in enumerate(code):
        if tok.kind != "jsx_attr":
            continue
        value: list[Token] = []
        if i + 2 < len(code) and code[i + 1].kind == "jsx_punct" and code[i + 1].value == "=":
            v = code[i + 2]
            if _is_punct(v, "{"):
                value = code[i + 3:unit.match[i + 2]]
            else:
                value = [v]
        unit.jsx_attributes.append(JsxAttribute(name=tok.value, line=tok.line, index=i, value=value))


def count_members(unit: SourceUnit, open_index: int) -> int:
    """Count the members of an object type literal or interface body."""
    code = unit.code
    close = unit.match[open_index]
    count = 0
    t = open_index + 1
    while t < close:
        tok = code[t]
        if _is_punct(tok, "(", "[", "{"):
            t = unit.match[t] + 1
            continue
        if tok.kind in ("name", "string"):
            prev = code[t - 1]
            at_member_start = prev.value in ("{", ";", ",", "readonly") or prev.end_line < tok.line
            if at_member_start and unit.value(t + 1) in (":", "?", "("):
                count += 1
        t += 1
    return count


def _collect_props_types(unit: SourceUnit) -> None:
    for decl in unit.declarations:
        if not decl.name.endswith("Props"):
            continue
        if decl.kind == "interface" and decl.body:
            open_index = decl.body[0]
        elif decl.kind == "type" and decl.init_start >= 0 and unit.value(decl.init_start) == "{":
            open_index = decl.init_start
        else:
            continue
        unit.props_types.append(PropsType(
            name=decl.name, line=decl.line, member_count=count_members(unit, open_index),
        ))


def _collect_suppressions(unit: SourceUnit) -> None:
    for tok in unit.comments:
        for m in _SUPPRESS_RE.finditer(tok.value):
            mode, rest = m.group(1), m.group(2)
            ids = set(_RULE_ID_RE.findall(rest)) or {"*"}
            if mode == "-next-line":
                unit.line_suppressions.setdefault(tok.end_line + 1, set()).update(ids)
            elif mode == "-line":
                unit.line_suppressions.setdefault(tok.line, set()).update(ids)
            else:
                unit.file_suppressions.update(ids)


# --- Entry point ---

def analyze(path: Path, text: str, rel: str = "") -> SourceUnit:
    """Tokenize and model one source file. Raises LexError on malformed input."""
    suffix = path.suffix.lower()
    tokens = tokenize(text, jsx=suffix in JSX_EXTENSIONS)
    code_indices = [k for k, tok in enumerate(tokens) if tok.kind != "comment"]
    unit = SourceUnit(
        path=path,
        rel=rel or path.name,
        text=text,
        lines=text.splitlines(),
        tokens=tokens,
        code=[tokens[k] for k in code_indices],
        comments=[tok for tok in tokens if tok.kind == "comment"],
        is_jsx=suffix in JSX_EXTENSIONS,
        is_typed=suffix in TYPED_EXTENSIONS,
        token_index=code_indices,
    )
    _match_brackets(unit)
    _compute_nesting(unit)
    _collect_declarations(unit)
    _collect_functions(unit)
    _measure_functions(unit)
    _collect_imports(unit)
    _collect_hook_calls(unit)
    _collect_jsx_attributes(unit)
    _collect_props_types(unit)
    _collect_suppressions(unit)
    return unit
