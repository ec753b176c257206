"""Naming checks (NAME-01 through NAME-06)."""

import re
from pathlib import Path

from tsreview.analyzer import PASCAL_CASE_RE, Declaration, SourceUnit
from tsreview.config import Config
from tsreview.report import Finding

CAMEL_CASE_RE = re.compile(r"^[a-z$][A-Za-z0-9$]*$")
UPPER_SNAKE_RE = re.compile(r"^[A-Z][A-Z0-9]*(?:_[A-Z0-9]+)*$")
INTERFACE_PREFIX_RE = re.compile(r"^I[A-Z][a-z]")

BOOLEAN_PREFIXES = (
    "is", "has", "should", "can", "did", "will", "was", "are", "needs", "show",
    "enable", "allow", "include",
)
BOOLEAN_NAME_RE = re.compile(r"^(?:%s)[A-Z0-9_]" % "|".join(BOOLEAN_PREFIXES))

ABBREVIATIONS = {
    "arr", "btn", "cb", "cnt", "ctr", "fn", "mgr", "num", "obj", "str", "temp",
    "tmp", "usr", "val",
}

# Files whose names are dictated by a framework (Next.js routes, configs, stories)
FRAMEWORK_ENTRY_STEMS = {
    "page", "layout", "loading", "error", "global-error", "not-found", "template",
    "default", "route", "middleware", "_app", "_document", "_error",
}


def is_framework_entry(path: Path) -> bool:
    """True for files whose name or default export a framework prescribes."""
    name = path.name.lower()
    stem = name.split(".")[0]
    if stem in FRAMEWORK_ENTRY_STEMS or "pages" in path.parts:
        return True
    return any(marker in name for marker in (".config.", ".stories.", ".story."))


def _is_boolean(unit: SourceUnit, decl: Declaration) -> bool:
    if [t.value for t in decl.type_tokens] == ["boolean"]:
        return True
    if decl.init_start < 0:
        return False
    init = unit.code[decl.init_start:decl.init_end + 1]
    if decl.pattern == "array":
        return unit.value(decl.index - 1) == "[" and _is_boolean_state(init)
    if decl.pattern:
        return False
    return len(init) == 1 and init[0].kind == "name" and init[0].value in ("true", "false")


def _is_boolean_state(init) -> bool:
    """`useState(false)`, `React.useState(true)` or `useState<boolean>(...)`."""
    values = [t.value for t in init]
    if "useState" not in values:
        return False
    k = values.index("useState") + 1
    if values[k:k + 3] == ["<", "boolean", ">"]:
        return True
    return values[k:] in (["(", "true", ")"], ["(", "false", ")"])


def _valid_binding_name(kind: str, bare: str) -> bool:
    if CAMEL_CASE_RE.match(bare):
        return True
    if kind in ("const", "function"):
        return bool(UPPER_SNAKE_RE.match(bare) or PASCAL_CASE_RE.match(bare))
    return False


def _is_cryptic(bare: str) -> bool:
    return (len(bare) == 1 and bare != "$") or bare.lower() in ABBREVIATIONS


def check_naming(unit: SourceUnit, config: Config) -> list[Finding]:
    """Check identifier and file naming conventions."""
    findings = []
    rel = unit.rel

    for decl in unit.declarations:
        bare = decl.name.lstrip("_")
        if not bare:
            continue

        if decl.kind in ("class", "interface", "type", "enum"):
            # NAME-02: PascalCase types
            if not PASCAL_CASE_RE.match(bare):
                findings.append(Finding(
                    rule_id="NAME-02", severity="error",
                    title="Type name not in PascalCase",
                    message=f"{decl.kind} `{decl.name}` should be PascalCase",
                    file=rel, line=decl.line,
                    guide_says="Classes, interfaces, types and enums use PascalCase.",
                ))
            # NAME-04: Hungarian I-prefix on interfaces
            if decl.kind == "interface" and INTERFACE_PREFIX_RE.match(decl.name):
                findings.append(Finding(
                    rule_id="NAME-04", severity="note",
                    title="Interface name has an I prefix",
                    message=f"Rename `{decl.name}` to `{decl.name[1:]}`",
                    file=rel, line=decl.line,
                    guide_says="Do not prefix interfaces with I; name them after what they describe.",
                ))
            continue

        if decl.pattern == "object":
            continue  # bindings mirror the keys of the destructured object

        # NAME-01: booleans read as predicates
        if _is_boolean(unit, decl) and not UPPER_SNAKE_RE.match(bare) and not BOOLEAN_NAME_RE.match(bare):
            findings.append(Finding(
                rule_id="NAME-01", severity="warning",
                title="Boolean name lacks a predicate prefix",
                message=f"`{decl.name}` holds a boolean; name it like `is{bare[:1].upper()}{bare[1:]}`",
                file=rel, line=decl.line,
                guide_says="Booleans start with is/has/should/can (isLoading, hasError).",
            ))

        # NAME-03: camelCase bindings
        if not _valid_binding_name(decl.kind, bare):
            findings.append(Finding(
                rule_id="NAME-03", severity="warning",
                title="Identifier not in camelCase",
                message=f"`{decl.name}` should be camelCase",
                file=rel, line=decl.line,
                guide_says="Variables and functions use camelCase; constants may use UPPER_SNAKE_CASE.",
            ))

        # NAME-05: single letters and abbreviations
        if not decl.in_for_header and _is_cryptic(bare):
            findings.append(Finding(
                rule_id="NAME-05", severity="note",
                title="Cryptic identifier",
                message=f"`{decl.name}` does not say what it holds; use a descriptive name",
                file=rel, line=decl.line,
                guide_says="Avoid single-letter names and abbreviations outside short loops.",
            ))

    for f in unit.functions:
        if f.kind == "method" and f.name:
            bare = f.name.lstrip("#_")
            if bare and bare != "constructor" and not CAMEL_CASE_RE.match(bare):
                findings.append(Finding(
                    rule_id="NAME-03", severity="warning",
                    title="Identifier not in camelCase",
                    message=f"Method `{f.name}` should be camelCase",
                    file=rel, line=f.line,
                    guide_says="Variables and functions use camelCase; constants may use UPPER_SNAKE_CASE.",
                ))
        if f.kind == "arrow" and (f.name is None or f.callee):
            continue  # callback parameters follow the caller's conventions
        for p in f.params:
            bare = p.name.lstrip("_")
            if p.destructured or not bare:
                continue
            if _is_cryptic(bare):
                findings.append(Finding(
                    rule_id="NAME-05", severity="note",
                    title="Cryptic identifier",
                    message=f"Parameter `{p.name}` of `{f.name or 'anonymous function'}` needs a descriptive name",
                    file=rel, line=p.line,
                    guide_says="Avoid single-letter names and abbreviations outside short loops.",
                ))

    # NAME-06: component files in PascalCase
    components = unit.components
    if unit.is_jsx and components:
        stem = unit.path.name.split(".")[0]
        if stem != "index" and not is_framework_entry(unit.path) and not PASCAL_CASE_RE.match(stem):
            findings.append(Finding(
                rule_id="NAME-06", severity="note",
                title="Component file not in PascalCase",
                message=f"`{unit.path.name}` defines component `{components[0].name or 'default'}`; "
                        f"name the file in PascalCase",
                file=rel, line=components[0].line,
                guide_says="Component files are named after the component, in PascalCase.",
            ))

    return findings
