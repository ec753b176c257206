"""Structure checks (STR-01 through STR-05)."""

from tsreview.analyzer import SourceUnit
from tsreview.config import Config
from tsreview.report import Finding


def check_structure(unit: SourceUnit, config: Config) -> list[Finding]:
    """Check file size, function size, nesting and import hygiene."""
    findings = []
    rel = unit.rel

    # STR-01: file length
    line_count = len(unit.lines)
    if line_count > config.max_file_lines:
        findings.append(Finding(
            rule_id="STR-01", severity="warning",
            title="File too long",
            message=f"{line_count} lines (limit {config.max_file_lines}); split it into focused modules",
            file=rel, line=1,
            guide_says="Keep files small enough to read in one sitting.",
        ))

    for f in unit.functions:
        label = f.name or "anonymous function"

        # STR-02: function length
        if f.length > config.max_function_lines:
            findings.append(Finding(
                rule_id="STR-02", severity="warning",
                title="Function too long",
                message=f"`{label}` spans {f.length} lines (limit {config.max_function_lines})",
                file=rel, line=f.line,
                guide_says="Functions do one thing; extract helpers when they grow.",
            ))

        # STR-03: nesting depth
        if f.max_nesting > config.max_nesting_depth:
            findings.append(Finding(
                rule_id="STR-03", severity="warning",
                title="Deep nesting",
                message=f"`{label}` nests control flow {f.max_nesting} levels deep "
                        f"(limit {config.max_nesting_depth}); use early returns",
                file=rel, line=f.nesting_line,
                guide_says="Prefer guard clauses and early returns over deep nesting.",
            ))

    # STR-04: deep relative imports
    seen = set()
    for imp in unit.imports:
        ups = imp.module.split("/").count("..")
        if ups > config.max_relative_depth:
            findings.append(Finding(
                rule_id="STR-04", severity="note",
                title="Deep relative import",
                message=f"`{imp.module}` climbs {ups} directories; use a path alias",
                file=rel, line=imp.line,
                guide_says="Use path aliases instead of long ../../ chains.",
            ))

        # STR-05: duplicate imports
        if imp.reexport:
            continue
        key = (imp.module, imp.type_only)
        if key in seen:
            findings.append(Finding(
                rule_id="STR-05", severity="warning",
                title="Duplicate import",
                message=f"`{imp.module}` is imported more than once; merge the imports",
                file=rel, line=imp.line,
                guide_says="Import each module once.",
            ))
        seen.add(key)

    return findings
