"""Style checks (STY-01 through STY-08)."""

from tsreview.analyzer import STATEMENT_KEYWORDS, SourceUnit
from tsreview.checks.naming import UPPER_SNAKE_RE
from tsreview.config import Config
from tsreview.lexer import KEYWORDS
from tsreview.report import Finding

CONSOLE_METHODS = {"log", "debug", "info", "trace", "dir", "table"}
ALLOWED_NUMBERS = {"0", "1", "2"}
ARITHMETIC = {"+", "-", "*", "/", "%", "**", "(", ")"}

# A postfix `!` is followed by member access, a call, or the end of an expression
NON_NULL_FOLLOWERS = {".", "?.", "[", "(", ")", "]", "}", ";", ",", ":", "="}
# Tokens that can precede the name in `let total!: number` or a `field!: T` class member
DECLARATION_LEADERS = {
    "let", "var", "const", "{", "}", ";", ",",
    "private", "public", "protected", "readonly", "static", "declare", "override", "accessor",
}


def _is_operand(tok) -> bool:
    if tok.kind in ("number", "template"):
        return True
    if tok.kind == "name":
        return tok.value not in KEYWORDS or tok.value in ("this", "true", "false", "null")
    return tok.kind == "punct" and tok.value in (")", "]")


def _is_definite_assignment(unit: SourceUnit, i: int) -> bool:
    """`name!: Type` declares a field or variable; it does not assert non-null."""
    code = unit.code
    if unit.value(i + 1) != ":" or code[i - 1].kind != "name":
        return False
    if i < 2:
        return True
    return code[i - 2].value in DECLARATION_LEADERS or code[i - 2].end_line < code[i - 1].line


def _is_test_file(unit: SourceUnit) -> bool:
    name = unit.path.name
    return ".test." in name or ".spec." in name or "__tests__" in unit.path.parts


def _named_number_spans(unit: SourceUnit) -> set[int]:
    """Code indices where a literal number is already given a name."""
    exempt = set()
    for decl in unit.declarations:
        if decl.kind == "enum" and decl.body:
            exempt.update(range(decl.body[0], decl.body[1] + 1))
        elif decl.kind == "type" and decl.init_start >= 0:
            exempt.update(range(decl.init_start, decl.init_end + 1))
        elif decl.kind == "const" and decl.init_start >= 0:
            span = range(decl.init_start, decl.init_end + 1)
            numeric = all(
                unit.code[t].kind == "number" or unit.code[t].value in ARITHMETIC for t in span
            )
            if numeric or (decl.top_level and UPPER_SNAKE_RE.match(decl.name)):
                exempt.update(span)
    return exempt


def _is_magic(unit: SourceUnit, i: int, defaults: set[int]) -> bool:
    tok = unit.code[i]
    if tok.value.replace("_", "").rstrip("n") in ALLOWED_NUMBERS or id(tok) in defaults:
        return False
    prev, nxt = unit.value(i - 1), unit.value(i + 1)
    if prev == "-" and i >= 2 and not _is_operand(unit.code[i - 2]):
        prev = unit.value(i - 2)
    if prev == "[" and nxt == "]":
        return False  # array index
    if prev == ":":
        return False  # object property value or literal type
    if prev == "{" and i >= 2 and unit.code[i - 2].kind == "jsx_punct":
        return False  # JSX attribute value
    if prev == "=" and i >= 2 and unit.code[i - 2].kind == "name" and (
            nxt in (";", "}", "") or unit.code[i + 1].line > tok.line):
        return False  # class field or plain assignment names the value
    return True


def _nested_ternary_lines(unit: SourceUnit) -> list[int]:
    lines = []
    pending = [0]  # open ternaries per bracket depth
    for i, tok in enumerate(unit.code):
        if tok.kind == "punct":
            v = tok.value
            if v == "(":
                # a grouping paren inside a ternary branch keeps the outer ternary open
                grouping = i == 0 or not _is_operand(unit.code[i - 1])
                pending.append(1 if grouping and pending[-1] else 0)
            elif v in ("[", "{"):
                pending.append(0)
            elif v in (")", "]", "}"):
                if len(pending) > 1:
                    pending.pop()
            elif v == "?":
                if unit.value(i + 1) in (":", ")", ",", "=", ";"):
                    continue  # optional member or parameter
                if pending[-1] and tok.line not in lines:
                    lines.append(tok.line)
                pending[-1] += 1
            elif v in (";", ",", "=", "=>"):
                pending[-1] = 0
        elif tok.kind == "name" and tok.value in STATEMENT_KEYWORDS:
            pending[-1] = 0
    return lines


def check_style(unit: SourceUnit, config: Config) -> list[Finding]:
    """Check token-level style: var, loose equality, debug leftovers, magic numbers."""
    findings = []
    rel = unit.rel
    code = unit.code
    defaults = {
        id(t) for f in unit.functions for p in f.params for t in p.default_tokens
    }
    exempt = _named_number_spans(unit)
    skip_numbers = _is_test_file(unit)
    number_lines = set()
    concat_lines = set()

    for i, tok in enumerate(code):
        prev = unit.value(i - 1)
        after_dot = prev in (".", "?.")

        if tok.kind == "name" and not after_dot:
            # STY-01: var
            if tok.value == "var" and i + 1 < len(code) and (
                    code[i + 1].kind == "name" or code[i + 1].value in ("[", "{")):
                findings.append(Finding(
                    rule_id="STY-01", severity="error",
                    title="`var` declaration",
                    message="Use `const`, or `let` when the binding is reassigned",
                    file=rel, line=tok.line,
                    guide_says="Never use var; it is function-scoped and hoisted.",
                ))
            # STY-04: debugger
            elif tok.value == "debugger" and unit.value(i + 1) != ":":
                findings.append(Finding(
                    rule_id="STY-04", severity="error",
                    title="`debugger` statement",
                    message="Remove the debugger statement before merging",
                    file=rel, line=tok.line,
                    guide_says="Debugging leftovers never reach the main branch.",
                ))
            # STY-03: console output
            elif (tok.value == "console" and unit.value(i + 1) == "."
                    and unit.value(i + 2) in CONSOLE_METHODS):
                findings.append(Finding(
                    rule_id="STY-03", severity="warning",
                    title="Console debugging output",
                    message=f"Remove `console.{unit.value(i + 2)}` or use the project logger",
                    file=rel, line=tok.line,
                    guide_says="No console.log in committed code; console.warn/error are fine.",
                ))

        elif tok.kind == "punct":
            # STY-02: loose equality
            if tok.value in ("==", "!=") and "null" not in (prev, unit.value(i + 1)):
                strict = tok.value + "="
                findings.append(Finding(
                    rule_id="STY-02", severity="warning",
                    title="Loose equality",
                    message=f"Use `{strict}` instead of `{tok.value}`",
                    file=rel, line=tok.line,
                    guide_says="Always use === and !==; `== null` is the only exception.",
                ))
            # STY-07: non-null assertion
            elif (tok.value == "!" and unit.is_typed and i > 0
                    and code[i - 1].end_line == tok.line and _is_operand(code[i - 1])
                    and code[i - 1].kind != "number"
                    and unit.value(i + 1) in NON_NULL_FOLLOWERS
                    and not _is_definite_assignment(unit, i)):
                findings.append(Finding(
                    rule_id="STY-07", severity="warning",
                    title="Non-null assertion",
                    message="Narrow the value with a check instead of asserting it with `!`",
                    file=rel, line=tok.line,
                    guide_says="Avoid the non-null assertion operator; handle the null case.",
                ))
            # STY-08: string concatenation
            elif tok.value == "+" and 0 < i < len(code) - 1 and tok.line not in concat_lines:
                left, right = code[i - 1], code[i + 1]
                if (left.kind == "string") != (right.kind == "string"):
                    other = right if left.kind == "string" else left
                    if _is_operand(other) and other.kind != "template":
                        concat_lines.add(tok.line)
                        findings.append(Finding(
                            rule_id="STY-08", severity="note",
                            title="String concatenation",
                            message="Build the string with a template literal",
                            file=rel, line=tok.line,
                            guide_says="Prefer template literals over string concatenation.",
                        ))

        # STY-05: magic numbers
        elif (tok.kind == "number" and not skip_numbers and i not in exempt
                and tok.line not in number_lines and _is_magic(unit, i, defaults)):
            number_lines.add(tok.line)
            findings.append(Finding(
                rule_id="STY-05", severity="note",
                title="Magic number",
                message=f"Give `{tok.value}` a name with a constant",
                file=rel, line=tok.line,
                guide_says="Literal numbers other than 0, 1 and 2 go into named constants.",
            ))

    # STY-06: nested ternaries
    for line in _nested_ternary_lines(unit):
        findings.append(Finding(
            rule_id="STY-06", severity="warning",
            title="Nested ternary",
            message="Replace the nested conditional expression with if/else or a lookup",
            file=rel, line=line,
            guide_says="Never nest ternary operators.",
        ))

    return findings
