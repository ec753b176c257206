"""Rule catalog and evaluation."""

from tsreview.analyzer import SourceUnit
from tsreview.checks.comments import check_comments
from tsreview.checks.extensibility import check_extensibility
from tsreview.checks.naming import check_naming
from tsreview.checks.react import check_react
from tsreview.checks.structure import check_structure
from tsreview.checks.style import check_style
from tsreview.config import Config
from tsreview.report import Finding

# rule id -> (default severity, title)
RULES = {
    "NAME-01": ("warning", "Boolean name lacks a predicate prefix"),
    "NAME-02": ("error", "Type name not in PascalCase"),
    "NAME-03": ("warning", "Identifier not in camelCase"),
    "NAME-04": ("note", "Interface name has an I prefix"),
    "NAME-05": ("note", "Cryptic identifier"),
    "NAME-06": ("note", "Component file not in PascalCase"),
    "EXT-01": ("warning", "`any` type used"),
    "EXT-02": ("note", "Switch with many cases"),
    "EXT-03": ("warning", "Boolean flag parameter"),
    "EXT-04": ("warning", "Too many positional parameters"),
    "EXT-05": ("note", "Default export"),
    "CMT-01": ("warning", "TODO without owner or ticket"),
    "CMT-02": ("warning", "Commented-out code"),
    "CMT-03": ("note", "Exported API without JSDoc"),
    "CMT-04": ("warning", "Suppression directive without justification"),
    "STY-01": ("error", "`var` declaration"),
    "STY-02": ("warning", "Loose equality"),
    "STY-03": ("warning", "Console debugging output"),
    "STY-04": ("error", "`debugger` statement"),
    "STY-05": ("note", "Magic number"),
    "STY-06": ("warning", "Nested ternary"),
    "STY-07": ("warning", "Non-null assertion"),
    "STY-08": ("note", "String concatenation"),
    "STR-01": ("warning", "File too long"),
    "STR-02": ("warning", "Function too long"),
    "STR-03": ("warning", "Deep nesting"),
    "STR-04": ("note", "Deep relative import"),
    "STR-05": ("warning", "Duplicate import"),
    "RCT-01": ("error", "Hook called conditionally or outside a component"),
    "RCT-02": ("warning", "Component not in PascalCase"),
    "RCT-03": ("note", "Inline style object"),
    "RCT-04": ("warning", "Array index used as key"),
    "RCT-05": ("note", "Event handler not named handleX"),
    "RCT-06": ("warning", "Effect without dependency array"),
    "RCT-07": ("warning", "Too many props"),
    "RCT-08": ("note", "Multiple components in one file"),
    "SRC-01": ("error", "File could not be parsed"),
}

ALL_CHECKS = [
    check_naming,
    check_extensibility,
    check_comments,
    check_style,
    check_structure,
    check_react,
]


def run_rules(unit: SourceUnit, config: Config) -> list[Finding]:
    """Run every check on one file, then apply suppressions and configured levels."""
    findings = []
    for check in ALL_CHECKS:
        for f in check(unit, config):
            if unit.is_suppressed(f.rule_id, f.line):
                continue
            level = config.level(f.rule_id, f.severity)
            if level == "off":
                continue
            f.severity = level
            findings.append(f)
    return findings
