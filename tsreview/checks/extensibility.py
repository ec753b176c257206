"""Extensibility checks (EXT-01 through EXT-05)."""

from tsreview.analyzer import SourceUnit
from tsreview.checks.naming import is_framework_entry
from tsreview.config import Config
from tsreview.report import Finding

# Tokens that put a following `any` in a type position
ANY_TYPE_CONTEXT = {":", "as", "|", "&", "<", "=>", ","}


def _is_any_type(unit: SourceUnit, i: int) -> bool:
    prev, nxt = unit.value(i - 1), unit.value(i + 1)
    if prev in (".", "?."):
        return False
    if prev in ANY_TYPE_CONTEXT or nxt in (">", "|", "&"):
        return True
    return nxt == "[" and unit.value(i + 2) == "]"


def _count_cases(unit: SourceUnit, open_index: int) -> int:
    close = unit.match[open_index]
    count = 0
    t = open_index + 1
    while t < close:
        tok = unit.code[t]
        if tok.kind == "punct" and tok.value in ("(", "[", "{"):
            t = unit.match[t] + 1
            continue
        if tok.kind == "name" and tok.value == "case":
            count += 1
        t += 1
    return count


def check_extensibility(unit: SourceUnit, config: Config) -> list[Finding]:
    """Check for code that resists change: any, flag params, long switches."""
    findings = []
    rel = unit.rel
    code = unit.code

    # EXT-01: any
    if unit.is_typed:
        seen = set()
        for i, tok in enumerate(code):
            if tok.kind != "name" or tok.value != "any" or tok.line in seen:
                continue
            if _is_any_type(unit, i):
                seen.add(tok.line)
                findings.append(Finding(
                    rule_id="EXT-01", severity="warning",
                    title="`any` type used",
                    message=f"Replace `any` with a specific type, a generic or `unknown`: "
                            f"`{unit.lines[tok.line - 1].strip()[:80]}`",
                    file=rel, line=tok.line,
                    guide_says="Never use any; model the data or use unknown and narrow it.",
                ))

    # EXT-02: long switch statements
    for i, tok in enumerate(code):
        if tok.kind != "name" or tok.value != "switch" or unit.value(i + 1) != "(":
            continue
        brace = unit.match[i + 1] + 1
        if unit.value(brace) != "{":
            continue
        cases = _count_cases(unit, brace)
        if cases > config.max_switch_cases:
            findings.append(Finding(
                rule_id="EXT-02", severity="note",
                title="Switch with many cases",
                message=f"switch has {cases} cases (limit {config.max_switch_cases}); "
                        f"consider a lookup map or strategy object",
                file=rel, line=tok.line,
                guide_says="Replace growing switch/if-else chains with maps or polymorphism.",
            ))

    for f in unit.functions:
        if f.name is None or f.callee:
            continue  # callbacks have their signature imposed by the caller
        is_setter = f.kind == "method" and unit.value(f.start - 1) == "set"

        # EXT-03: boolean flag parameters
        for p in f.params:
            if p.destructured or is_setter:
                continue
            type_values = [t.value for t in p.type_tokens]
            default_values = [t.value for t in p.default_tokens]
            if type_values == ["boolean"] or default_values in (["true"], ["false"]):
                findings.append(Finding(
                    rule_id="EXT-03", severity="warning",
                    title="Boolean flag parameter",
                    message=f"`{f.name}({p.name})` takes a boolean flag; split the function "
                            f"or pass an options object",
                    file=rel, line=p.line,
                    guide_says="Boolean parameters hide intent at the call site; prefer options objects.",
                ))

        # EXT-04: long positional parameter lists
        positional = [p for p in f.params if not p.rest]
        if len(positional) > config.max_params:
            findings.append(Finding(
                rule_id="EXT-04", severity="warning",
                title="Too many positional parameters",
                message=f"`{f.name}` takes {len(positional)} parameters (limit {config.max_params}); "
                        f"group them into an options object",
                file=rel, line=f.line,
                guide_says="Functions with more than three parameters take a single options object.",
            ))

    # EXT-05: default exports
    if not is_framework_entry(unit.path):
        for i, tok in enumerate(code):
            if (tok.kind == "name" and tok.value == "export" and unit.value(i + 1) == "default"
                    and unit.brace_depth[i] == 0):
                findings.append(Finding(
                    rule_id="EXT-05", severity="note",
                    title="Default export",
                    message="Use a named export so imports stay consistent and refactors are safe",
                    file=rel, line=tok.line,
                    guide_says="Prefer named exports over default exports.",
                ))

    return findings
