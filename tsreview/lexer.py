"""Tokenizer for TypeScript and JavaScript sources, JSX included.

Comments stay in the token stream so the comment rules can inspect them.
JSX embedded expressions (``{...}`` children and attribute values) are
tokenized as ordinary code between balanced ``{``/``}`` punctuators, so
hooks, arrows and nested elements inside them are visible to the analyzer.
Template literals are emitted as a single token; their ``${...}``
expressions are scanned only to find where the literal ends.
"""

import re
from dataclasses import dataclass

from tsreview.errors import LexError


@dataclass
class Token:
    kind: str  # "name", "number", "string", "template", "regex", "punct", "comment", "jsx_*"
    value: str
    line: int
    end_line: int = 0

    def __post_init__(self):
        if not self.end_line:
            self.end_line = self.line


# --- Lexical grammar ---

KEYWORDS = frozenset({
    "await", "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "import", "in", "instanceof", "let",
    "new", "null", "return", "static", "super", "switch", "this", "throw",
    "true", "try", "typeof", "var", "void", "while", "with", "yield",
})

# Keywords after which an expression (and so a regex or JSX) may start
EXPRESSION_KEYWORDS = frozenset({
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
    "throw", "case", "do", "else", "yield", "await", "default", "extends",
})

PUNCTUATORS = sorted([
    ">>>=", "...", "===", "!==", "**=", "<<=", ">>=", ">>>", "&&=", "||=", "??=",
    "=>", "==", "!=", "<=", ">=", "&&", "||", "??", "?.", "++", "--", "+=", "-=",
    "*=", "/=", "%=", "&=", "|=", "^=", "**", "<<", ">>",
    "{", "}", "(", ")", "[", "]", ";", ",", "<", ">", "+", "-", "*", "/", "%",
    "&", "|", "^", "!", "~", "?", ":", "=", ".", "@",
], key=len, reverse=True)

_PUNCT_RE = re.compile("|".join(re.escape(p) for p in PUNCTUATORS))
_NAME_RE = re.compile(r"#?[A-Za-z_$\u0080-\uffff][\w$\u0080-\uffff]*")
_NUMBER_RE = re.compile(
    r"0[xX][0-9a-fA-F_]+n?|0[oO][0-7_]+n?|0[bB][01_]+n?"
    r"|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d[\d_]*)?n?"
)
_REGEX_FLAGS_RE = re.compile(r"[a-z]*")
_JSX_NAME_RE = re.compile(r"[A-Za-z_$][\w$.:-]*")
_JSX_CLOSE_RE = re.compile(r"<\s*/\s*([A-Za-z_$][\w$.:-]*)?\s*>")
_GENERIC_PARAMS_RE = re.compile(r"\s*(?:,|extends\b)")
_SIGNATURE_OPEN_RE = re.compile(r"\s*>\s*\(")
_SIGNATURE_TAIL_RE = re.compile(r"\s*(?:=>|:)")


class Lexer:
    """Single-pass tokenizer over one source text."""

    def __init__(self, text: str, jsx: bool = False, pos: int = 0, line: int = 1):
        self.text = text
        self.jsx = jsx
        self.pos = pos
        self.line = line
        self.tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        if self.text.startswith("#!"):
            end = self.text.find("\n")
            self.pos = len(self.text) if end < 0 else end
        self._lex_code(nested=False)
        return self.tokens

    # --- helpers ---

    def _emit(self, kind: str, value: str, line: int) -> None:
        self.tokens.append(Token(kind, value, line, self.line))

    def _advance_to(self, end: int) -> None:
        self.line += self.text.count("\n", self.pos, end)
        self.pos = end

    def _last_significant(self) -> Token | None:
        for tok in reversed(self.tokens):
            if tok.kind != "comment":
                return tok
        return None

    def _expression_allowed(self) -> bool:
        """True when the next token may begin an expression (regex, JSX)."""
        prev = self._last_significant()
        if prev is None:
            return True
        if prev.kind == "punct":
            return prev.value not in (")", "]", "}", "++", "--")
        if prev.kind == "name":
            return prev.value in EXPRESSION_KEYWORDS
        return False

    # --- code ---

    def _lex_code(self, nested: bool) -> None:
        text = self.text
        depth = 0
        while self.pos < len(text):
            ch = text[self.pos]
            if ch == "\n":
                self.line += 1
                self.pos += 1
                continue
            if ch.isspace() or ch == "\ufeff":
                self.pos += 1
                continue
            start_line = self.line
            if ch == "/":
                nxt = text[self.pos + 1:self.pos + 2]
                if nxt == "/":
                    self._lex_line_comment()
                    continue
                if nxt == "*":
                    self._lex_block_comment()
                    continue
                if self._expression_allowed():
                    self._lex_regex()
                    continue
            if ch in ("'", '"'):
                self._lex_string(ch)
                continue
            if ch == "`":
                self._lex_template()
                continue
            if ch.isdigit() or (ch == "." and text[self.pos + 1:self.pos + 2].isdigit()):
                m = _NUMBER_RE.match(text, self.pos)
                if not m:
                    raise LexError(f"unexpected character {ch!r}", self.line)
                self.pos = m.end()
                self._emit("number", m.group(), start_line)
                continue
            m = _NAME_RE.match(text, self.pos)
            if m:
                self.pos = m.end()
                self._emit("name", m.group(), start_line)
                continue
            if ch == "<" and self.jsx and self._jsx_starts_here():
                self._lex_jsx_element()
                continue
            if ch == "}" and nested and depth == 0:
                return
            m = _PUNCT_RE.match(text, self.pos)
            if not m:
                raise LexError(f"unexpected character {ch!r}", self.line)
            value = m.group()
            if value == "?." and text[m.end():m.end() + 1].isdigit():
                value = "?"  # `a?.5:1` is a conditional
            if value == "{":
                depth += 1
            elif value == "}":
                depth -= 1
            self.pos += len(value)
            self._emit("punct", value, start_line)
        if nested:
            raise LexError("unterminated expression", self.line)

    def _lex_line_comment(self) -> None:
        end = self.text.find("\n", self.pos)
        if end < 0:
            end = len(self.text)
        self._emit("comment", self.text[self.pos:end], self.line)
        self.pos = end

    def _lex_block_comment(self) -> None:
        start_line = self.line
        end = self.text.find("*/", self.pos + 2)
        if end < 0:
            raise LexError("unterminated block comment", start_line)
        value = self.text[self.pos:end + 2]
        self._advance_to(end + 2)
        self._emit("comment", value, start_line)

    def _lex_string(self, quote: str) -> None:
        text = self.text
        start_line = self.line
        i = self.pos + 1
        while i < len(text):
            c = text[i]
            if c == "\\":
                i += 2
                continue
            if c == quote:
                break
            if c == "\n":
                raise LexError("unterminated string literal", start_line)
            i += 1
        else:
            raise LexError("unterminated string literal", start_line)
        value = text[self.pos:i + 1]
        self._advance_to(i + 1)
        self._emit("string", value, start_line)

    def _lex_template(self) -> None:
        text = self.text
        start_line = self.line
        start = self.pos
        i = self.pos + 1
        while True:
            if i >= len(text):
                raise LexError("unterminated template literal", start_line)
            c = text[i]
            if c == "\\":
                i += 2
                continue
            if c == "`":
                i += 1
                break
            if c == "$" and text[i + 1:i + 2] == "{":
                line = self.line + text.count("\n", start, i)
                sub = Lexer(text, self.jsx, pos=i + 2, line=line)
                sub._lex_code(nested=True)
                i = sub.pos + 1
                continue
            i += 1
        self._advance_to(i)
        self._emit("template", text[start:i], start_line)

    def _lex_regex(self) -> None:
        text = self.text
        start_line = self.line
        i = self.pos + 1
        in_class = False
        while True:
            if i >= len(text) or text[i] == "\n":
                raise LexError("unterminated regular expression", start_line)
            c = text[i]
            if c == "\\":
                i += 2
                continue
            if c == "[":
                in_class = True
            elif c == "]":
                in_class = False
            elif c == "/" and not in_class:
                i += 1
                break
            i += 1
        end = _REGEX_FLAGS_RE.match(text, i).end()
        self._emit("regex", text[self.pos:end], start_line)
        self.pos = end

    # --- JSX ---

    def _jsx_starts_here(self) -> bool:
        if not self._expression_allowed():
            return False
        if self.text[self.pos + 1:self.pos + 2] == ">":
            return True
        m = _JSX_NAME_RE.match(self.text, self.pos + 1)
        if not m:
            return False
        # `<T,>(x) =>` and `<T extends U>(x) =>` are generic parameters
        if _GENERIC_PARAMS_RE.match(self.text, m.end()):
            return False
        return not self._is_generic_signature(m.end())

    def _is_generic_signature(self, pos: int) -> bool:
        """`<T>(value: T) => T` and `<T>(value: T): T` in a type position."""
        text = self.text
        m = _SIGNATURE_OPEN_RE.match(text, pos)
        if not m:
            return False
        depth = 1
        i = m.end()
        while i < len(text) and depth:
            if text[i] == "(":
                depth += 1
            elif text[i] == ")":
                depth -= 1
            i += 1
        return depth == 0 and bool(_SIGNATURE_TAIL_RE.match(text, i))

    def _skip_jsx_space(self) -> None:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch == "\n":
                self.line += 1
                self.pos += 1
            elif ch.isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                self._lex_line_comment()
            elif text.startswith("/*", self.pos):
                self._lex_block_comment()
            else:
                return

    def _lex_jsx_element(self) -> None:
        text = self.text
        start_line = self.line
        self.pos += 1
        if text[self.pos:self.pos + 1] == ">":
            self.pos += 1
            self._emit("jsx_punct", "<>", start_line)
            self._lex_jsx_children("", start_line)
            return
        m = _JSX_NAME_RE.match(text, self.pos)
        if not m:
            raise LexError(
                f"unexpected character {text[self.pos:self.pos + 1]!r} after '<' in JSX", self.line
            )
        tag = m.group()
        self.pos = m.end()
        self._emit("jsx_tag", tag, start_line)
        while True:
            self._skip_jsx_space()
            if self.pos >= len(text):
                raise LexError(f"unterminated JSX element <{tag}>", start_line)
            ch = text[self.pos]
            line = self.line
            if text.startswith("/>", self.pos):
                self.pos += 2
                self._emit("jsx_punct", "/>", line)
                return
            if ch == ">":
                self.pos += 1
                self._emit("jsx_punct", ">", line)
                self._lex_jsx_children(tag, start_line)
                return
            if ch == "{":
                self._lex_jsx_expression()
                continue
            m = _JSX_NAME_RE.match(text, self.pos)
            if not m:
                raise LexError(f"unexpected character {ch!r} in JSX element <{tag}>", line)
            self.pos = m.end()
            self._emit("jsx_attr", m.group(), line)
            self._skip_jsx_space()
            if text[self.pos:self.pos + 1] != "=":
                continue
            self.pos += 1
            self._emit("jsx_punct", "=", self.line)
            self._skip_jsx_space()
            ch = text[self.pos:self.pos + 1]
            if ch in ("'", '"'):
                self._lex_jsx_string(ch)
            elif ch == "{":
                self._lex_jsx_expression()
            elif ch == "<":
                self._lex_jsx_element()
            else:
                raise LexError(f"missing value for JSX attribute {m.group()!r}", self.line)

    def _lex_jsx_string(self, quote: str) -> None:
        start_line = self.line
        end = self.text.find(quote, self.pos + 1)
        if end < 0:
            raise LexError("unterminated JSX attribute string", start_line)
        value = self.text[self.pos:end + 1]
        self._advance_to(end + 1)
        self._emit("string", value, start_line)

    def _lex_jsx_expression(self) -> None:
        self._emit("punct", "{", self.line)
        self.pos += 1
        self._lex_code(nested=True)
        self._emit("punct", "}", self.line)
        self.pos += 1

    def _lex_jsx_children(self, tag: str, start_line: int) -> None:
        text = self.text
        while True:
            if self.pos >= len(text):
                raise LexError(f"unterminated JSX element <{tag}>", start_line)
            ch = text[self.pos]
            if ch == "<":
                m = _JSX_CLOSE_RE.match(text, self.pos)
                if m:
                    line = self.line
                    closing = m.group(1) or ""
                    self._advance_to(m.end())
                    self._emit("jsx_close", closing, line)
                    if closing != tag:
                        raise LexError(f"expected </{tag}> but found </{closing}>", line)
                    return
                self._lex_jsx_element()
                continue
            if ch == "{":
                self._lex_jsx_expression()
                continue
            ends = [i for i in (text.find("<", self.pos), text.find("{", self.pos)) if i >= 0]
            end = min(ends) if ends else len(text)
            chunk = text[self.pos:end]
            line = self.line
            self._advance_to(end)
            if chunk.strip():
                self._emit("jsx_text", chunk.strip(), line)


def tokenize(text: str, jsx: bool = False) -> list[Token]:
    """Tokenize a source text. Raises LexError on malformed input."""
    return Lexer(text, jsx).tokenize()
