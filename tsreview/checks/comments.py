"""Comment checks (CMT-01 through CMT-04)."""

import re

from tsreview.analyzer import SourceUnit
from tsreview.config import Config
from tsreview.lexer import Token
from tsreview.report import Finding

TODO_RE = re.compile(r"\b(TODO|FIXME|HACK|XXX)\b(.*)")
# TODO(alice), TODO: ABC-123, TODO #42, TODO @bob, or a link to the tracker
TODO_OWNER_RE = re.compile(r"^\s*\(\s*[\w.@-]+\s*\)|\b[A-Z][A-Z0-9]+-\d+\b|#\d+|@\w+|https?://")

DIRECTIVE_RE = re.compile(r"(eslint-disable(?:-next-line|-line)?|@ts-ignore|@ts-expect-error|@ts-nocheck)\b(.*)")

NON_CODE_PREFIXES = (
    "eslint", "@", "tsreview-", "prettier-ignore", "istanbul", "webpack", "/", "#region",
    "#endregion", "c8 ", "global ",
)

CODE_PATTERNS = [re.compile(p) for p in (
    r"^(?:const|let|var)\s+[\w$\[\]{}, ]+\s*(?::[^=]+)?=\s*\S",
    r"^import\s.+\sfrom\s+['\"]",
    r"^import\s+['\"]",
    r"^export\s+(?:default\s+)?(?:const|let|function|class|interface|type)\b",
    r"^(?:async\s+)?function\s*\*?\s*[\w$]*\s*\(",
    r"^return\b.*;$",
    r"^(?:if|for|while|switch)\s*\(.*\)\s*\{?$",
    r"^\}\s*(?:else\b.*)?$",
    r"^[\w$.\[\]'\"]+\s*\(.*\)\s*;$",
    r"^[\w$.\[\]]+\s*(?:[-+*/%]|\?\?|\|\||&&)?=\s*[^=].*;$",
    r"^</?[A-Za-z][\w.]*(?:\s[^>]*)?/?>$",
    r"^await\s+[\w$.]+\(.*\);?$",
)]


def comment_lines(tok: Token):
    """Yield (line, text) for each line of a comment, markers stripped."""
    body = tok.value
    if body.startswith("//"):
        yield tok.line, body[2:].strip()
        return
    body = body[2:-2]
    for offset, line in enumerate(body.split("\n")):
        line = line.strip()
        if line.startswith("*"):
            line = line[1:].strip()
        yield tok.line + offset, line


def looks_like_code(text: str) -> bool:
    if not text or text.startswith(NON_CODE_PREFIXES):
        return False
    return any(p.match(text) for p in CODE_PATTERNS)


def _documented_targets(unit: SourceUnit) -> list[tuple[int, str]]:
    """(statement index, name) for exported top-level functions and classes."""
    targets = {}
    for decl in unit.declarations:
        if decl.kind == "class" and decl.exported and decl.top_level:
            targets.setdefault(decl.stmt_index, decl.name)
    for f in unit.functions:
        if f.exported and f.top_level and f.name and f.stmt_index >= 0:
            targets.setdefault(f.stmt_index, f.name)
    return sorted(targets.items())


def check_comments(unit: SourceUnit, config: Config) -> list[Finding]:
    """Check TODO hygiene, commented-out code, JSDoc and lint suppressions."""
    findings = []
    rel = unit.rel
    last_code_line = -2

    for tok in unit.comments:
        is_jsdoc = tok.value.startswith("/**")
        for lnum, text in comment_lines(tok):
            # CMT-01: TODO without owner or ticket
            m = TODO_RE.search(text)
            if m and not TODO_OWNER_RE.search(m.group(2)):
                findings.append(Finding(
                    rule_id="CMT-01", severity="warning",
                    title=f"{m.group(1)} without owner or ticket",
                    message=f"Attach an owner or ticket: `{text[:80]}`",
                    file=rel, line=lnum,
                    guide_says="TODOs name an owner or a ticket, e.g. TODO(alice) or TODO: ABC-123.",
                ))

            # CMT-02: commented-out code, reported once per block
            if is_jsdoc or not looks_like_code(text):
                continue
            if lnum != last_code_line + 1:
                findings.append(Finding(
                    rule_id="CMT-02", severity="warning",
                    title="Commented-out code",
                    message=f"Delete dead code instead of commenting it out: `{text[:80]}`",
                    file=rel, line=lnum,
                    guide_says="Version control remembers old code; do not keep it in comments.",
                ))
            last_code_line = lnum

        # CMT-04: suppression directives without a reason
        m = DIRECTIVE_RE.search(tok.value)
        if m:
            directive, rest = m.group(1), m.group(2)
            if directive.startswith("eslint"):
                reason = rest.split("--", 1)[1] if "--" in rest else ""
            else:
                reason = rest
            reason = reason.replace("*/", "").strip(" \t:-*")
            if not reason:
                findings.append(Finding(
                    rule_id="CMT-04", severity="warning",
                    title=f"`{directive}` without justification",
                    message="Explain why the check is suppressed"
                            + (" (`-- reason`)" if directive.startswith("eslint") else ""),
                    file=rel, line=tok.line,
                    guide_says="Every lint or type-check suppression carries a reason.",
                ))

    # CMT-03: exported API without JSDoc
    for stmt, name in _documented_targets(unit):
        full = unit.token_index[stmt]
        prev = unit.tokens[full - 1] if full > 0 else None
        if prev is not None and prev.kind == "comment" and prev.value.startswith("/**"):
            continue
        findings.append(Finding(
            rule_id="CMT-03", severity="note",
            title="Exported API without JSDoc",
            message=f"Document `{name}` with a /** ... */ block",
            file=rel, line=unit.code[stmt].line,
            guide_says="Exported functions and classes carry JSDoc describing intent.",
        ))

    return findings
