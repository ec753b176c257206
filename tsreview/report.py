"""Findings and how they are reported.

Findings are grouped per file and per category; the console report ends
with a Markdown summary table so it can be pasted into a pull request.
"""

import json
from dataclasses import asdict, dataclass


# --- Data structures ---

@dataclass
class Finding:
    rule_id: str
    severity: str  # "error", "warning", "note"
    title: str
    message: str
    file: str = ""
    line: int = 0
    guide_says: str = ""

    @property
    def category(self) -> str:
        return CATEGORY_BY_PREFIX.get(self.rule_id.split("-", 1)[0], "other")


CATEGORIES = ["naming", "extensibility", "comments", "style", "structure", "react", "source"]
CATEGORY_BY_PREFIX = {
    "NAME": "naming",
    "EXT": "extensibility",
    "CMT": "comments",
    "STY": "style",
    "STR": "structure",
    "RCT": "react",
    "SRC": "source",
}
CATEGORY_TITLES = {
    "naming": "Naming",
    "extensibility": "Extensibility",
    "comments": "Comments",
    "style": "Style",
    "structure": "Structure",
    "react": "React",
    "source": "Source",
}

SEVERITY_ORDER = {"error": 0, "warning": 1, "note": 2}
SEVERITY_EMOJI = {"error": "❌", "warning": "⚠️", "note": "ℹ️"}
SEVERITY_GH = {"error": "error", "warning": "warning", "note": "notice"}


# --- Aggregation ---

def sort_key(f: Finding):
    category = CATEGORIES.index(f.category) if f.category in CATEGORIES else len(CATEGORIES)
    return (f.file, category, f.line, SEVERITY_ORDER[f.severity], f.rule_id)


def aggregate(findings: list[Finding]) -> dict[str, dict[str, list[Finding]]]:
    """Group findings as {file: {category: [findings by line]}}."""
    grouped: dict[str, dict[str, list[Finding]]] = {}
    for f in sorted(findings, key=sort_key):
        grouped.setdefault(f.file, {}).setdefault(f.category, []).append(f)
    return grouped


def count_by_severity(findings: list[Finding]) -> dict[str, int]:
    counts = {"error": 0, "warning": 0, "note": 0}
    for f in findings:
        counts[f.severity] += 1
    return counts


def count_by_category(findings: list[Finding]) -> dict[str, int]:
    counts = {c: 0 for c in CATEGORIES}
    for f in findings:
        counts[f.category] = counts.get(f.category, 0) + 1
    return counts


# --- Formatting ---

def format_github_annotation(f: Finding) -> str:
    """Format as GitHub Actions annotation."""
    level = SEVERITY_GH[f.severity]
    location = ""
    if f.file:
        location += f"file={f.file}"
        if f.line:
            location += f",line={f.line}"
    title = f"[{f.rule_id}] {f.title}"
    msg = f.message
    if f.guide_says:
        msg += f" | Guide: {f.guide_says}"
    if location:
        return f"::{level} {location}::{title}: {msg}"
    return f"::{level} ::{title}: {msg}"


def format_console(f: Finding) -> str:
    """Format for console output."""
    emoji = SEVERITY_EMOJI[f.severity]
    loc = ""
    if f.file:
        loc = f" ({f.file}"
        if f.line:
            loc += f":{f.line}"
        loc += ")"
    return f"  {emoji} [{f.rule_id}] {f.title}{loc}\n     {f.message}"


def _table_categories(findings: list[Finding]) -> list[str]:
    # `source` only gets a column when a file failed to load
    return [c for c in CATEGORIES if c != "source" or any(f.category == "source" for f in findings)]


def format_summary_table(findings: list[Finding], files_reviewed: int) -> str:
    """Markdown table of finding counts per file and category."""
    categories = _table_categories(findings)
    header = "| File | " + " | ".join(CATEGORY_TITLES[c] for c in categories) + " | Total |"
    divider = "|" + "---|" * (len(categories) + 2)
    rows = [header, divider]
    for file, by_category in aggregate(findings).items():
        cells = [str(len(by_category.get(c, []))) for c in categories]
        total = sum(len(v) for v in by_category.values())
        rows.append(f"| {file or '(project)'} | " + " | ".join(cells) + f" | {total} |")
    totals = count_by_category(findings)
    rows.append(
        "| **Total** | " + " | ".join(f"**{totals[c]}**" for c in categories)
        + f" | **{len(findings)}** |"
    )
    files_with_findings = len({f.file for f in findings})
    clean = max(files_reviewed - files_with_findings, 0)
    rows.append("")
    rows.append(f"{files_reviewed} file(s) reviewed, {clean} without findings.")
    return "\n".join(rows)


def format_json(findings: list[Finding], files_reviewed: int) -> str:
    """Machine-readable report."""
    ordered = sorted(findings, key=sort_key)
    payload = {
        "files_reviewed": files_reviewed,
        "counts": count_by_severity(findings),
        "by_category": count_by_category(findings),
        "findings": [dict(asdict(f), category=f.category) for f in ordered],
    }
    return json.dumps(payload, indent=2)


def format_report(findings: list[Finding], files_reviewed: int) -> str:
    """Console report: per file, per category, then the summary table."""
    out = []
    for file, by_category in aggregate(findings).items():
        out.append(f"{file or '(project)'}")
        for category in CATEGORIES:
            items = by_category.get(category)
            if not items:
                continue
            out.append(f"  {CATEGORY_TITLES[category]}:")
            for f in items:
                out.append("  " + format_console(f).replace("\n", "\n  "))
        out.append("")
    out.append(format_summary_table(findings, files_reviewed))
    return "\n".join(out)
