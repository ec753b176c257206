"""Tests for the tsreview command line, report formats, config and file selection.

Tests are organized into:
1. Integration tests against fixture projects
2. Output format tests
3. Config and source selection tests
4. CLI tests
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from tsreview.check import build_parser, collect_files, review, review_file
from tsreview.checks import RULES
from tsreview.config import CONFIG_FILENAME, Config, load_config, parse_config
from tsreview.errors import ConfigError, SourceError
from tsreview.report import (
    Finding,
    aggregate,
    count_by_category,
    count_by_severity,
    format_console,
    format_github_annotation,
    format_json,
    format_report,
    format_summary_table,
    sort_key,
)
from tsreview.sources import changed_files, find_source_files, read_source, resolve_paths

REPO_ROOT = Path(__file__).parent.parent


def run_cli(*args, env=None):
    return subprocess.run(
        [sys.executable, "-m", "tsreview", *args],
        capture_output=True, text=True, cwd=REPO_ROOT, env=env,
    )


def found(findings, rule_id, file_suffix=""):
    """Lines reported for a rule, optionally limited to one file."""
    return sorted(
        f.line for f in findings
        if f.rule_id == rule_id and f.file.endswith(file_suffix)
    )


# ============================================================================
# Integration Tests: Clean project
# ============================================================================


class TestCleanProject:
    """The clean fixture follows every rule."""

    def test_no_findings(self, clean_project):
        files = find_source_files(clean_project, Config())
        assert len(files) == 5
        findings = review(clean_project, files, Config())
        assert [f for f in findings if f.severity in ("error", "warning")] == []

    def test_full_check_via_cli(self, clean_project):
        result = run_cli("--path", str(clean_project), "--severity", "note", "--fail-on", "note")
        assert result.returncode == 0
        assert "0 errors, 0 warnings" in result.stdout

    @pytest.mark.parametrize("source", [
        "interface ListProps {\n  renderItem: <T>(item: T) => string;\n}\n",
        "export type Mapper = <T>(value: T) => T;\n",
    ])
    def test_generic_signatures_in_tsx(self, tmp_path, source):
        path = tmp_path / "List.tsx"
        path.write_text(source)
        assert "SRC-01" not in {f.rule_id for f in review_file(path, tmp_path, Config())}


# ============================================================================
# Integration Tests: Problematic project
# ============================================================================


class TestProblematicProject:
    """Each rule the problematic fixture breaks is reported on the right line."""

    @pytest.fixture
    def findings(self, problematic_project):
        files = find_source_files(problematic_project, Config())
        return review(problematic_project, files, Config())

    def test_relative_paths(self, findings):
        files = {f.file for f in findings}
        assert "src/legacy.js" in files
        assert "src/api/client.ts" in files

    def test_legacy_javascript(self, findings):
        assert found(findings, "CMT-01", "legacy.js") == [1]
        assert found(findings, "STY-01", "legacy.js") == [2]
        assert found(findings, "EXT-04", "legacy.js") == [4]
        assert found(findings, "NAME-05", "legacy.js") == [4, 4, 4, 4]
        assert found(findings, "STY-04", "legacy.js") == [5]
        assert found(findings, "STY-02", "legacy.js") == [6]
        assert found(findings, "STY-03", "legacy.js") == [7]
        assert found(findings, "CMT-02", "legacy.js") == [12]

    def test_api_client(self, findings):
        assert found(findings, "STR-04", "client.ts") == [1, 2]
        assert found(findings, "STR-05", "client.ts") == [2]
        assert found(findings, "NAME-04", "client.ts") == [4]
        assert found(findings, "EXT-01", "client.ts") == [5, 16]
        assert found(findings, "NAME-02", "client.ts") == [8]
        assert found(findings, "CMT-03", "client.ts") == [12]
        assert found(findings, "CMT-04", "client.ts") == [15]
        assert found(findings, "STY-08", "client.ts") == [17]
        assert found(findings, "STY-07", "client.ts") == [18]
        assert found(findings, "NAME-01", "client.ts") == [20]
        assert found(findings, "STY-05", "client.ts") == [21]

    def test_react_component(self, findings):
        assert found(findings, "RCT-07", "user-list.tsx") == [3]
        assert found(findings, "NAME-06", "user-list.tsx") == [14]
        assert found(findings, "EXT-05", "user-list.tsx") == [14]
        assert found(findings, "NAME-01", "user-list.tsx") == [15]
        assert found(findings, "RCT-01", "user-list.tsx") == [17]
        assert found(findings, "RCT-06", "user-list.tsx") == [20]
        assert found(findings, "STY-06", "user-list.tsx") == [24]
        assert found(findings, "RCT-03", "user-list.tsx") == [27]
        assert found(findings, "RCT-05", "user-list.tsx") == [28]
        assert found(findings, "RCT-04", "user-list.tsx") == [30]
        assert found(findings, "RCT-02", "user-list.tsx") == [36]
        assert found(findings, "RCT-08", "user-list.tsx") == [40]

    def test_utils(self, findings):
        assert found(findings, "NAME-02", "codes.ts") == [1]
        assert found(findings, "EXT-03", "codes.ts") == [6]
        assert found(findings, "EXT-02", "codes.ts") == [7]
        assert found(findings, "STY-05", "codes.ts") == [12, 14, 16, 18, 26]
        assert found(findings, "STY-08", "codes.ts") == [21]
        assert found(findings, "STR-03", "codes.ts") == [34]

    def test_unparseable_file(self, findings):
        src = [f for f in findings if f.rule_id == "SRC-01"]
        assert len(src) == 1
        assert src[0].file == "src/broken.ts"
        assert src[0].line == 1
        assert src[0].severity == "error"
        assert "unterminated string literal" in src[0].message

    def test_unparseable_file_skips_other_rules(self, findings):
        assert {f.rule_id for f in findings if f.file == "src/broken.ts"} == {"SRC-01"}

    def test_config_turns_rules_off(self, problematic_project):
        config = parse_config({"rules": {"STY-05": "off", "SRC-01": "off"}}, RULES)
        files = find_source_files(problematic_project, config)
        findings = review(problematic_project, files, config)
        assert "STY-05" not in {f.rule_id for f in findings}
        assert "SRC-01" not in {f.rule_id for f in findings}

    def test_review_file_outside_root(self, problematic_project, tmp_path):
        findings = review_file(problematic_project / "src" / "legacy.js", tmp_path, Config())
        assert {f.file for f in findings} == {(problematic_project / "src" / "legacy.js").as_posix()}

    def test_stray_angle_bracket_in_jsx_text(self, tmp_path):
        path = tmp_path / "Price.tsx"
        path.write_text("export const Price = () => <p>a < 5</p>;\n")
        findings = review_file(path, tmp_path, Config())
        assert [(f.rule_id, f.severity, f.file) for f in findings] == [("SRC-01", "error", "Price.tsx")]
        assert "after '<' in JSX" in findings[0].message


# ============================================================================
# Unit Tests: Output formatting
# ============================================================================


def make_finding(**overrides):
    fields = dict(
        rule_id="STY-01",
        severity="error",
        title="`var` declaration",
        message="Use `const`",
        file="src/legacy.js",
        line=2,
        guide_says="Never use var.",
    )
    fields.update(overrides)
    return Finding(**fields)


class TestOutputFormatting:
    """Tests for output formatting functions."""

    def test_finding_defaults(self):
        f = Finding(rule_id="STR-01", severity="warning", title="File too long", message="Split it")
        assert f.file == ""
        assert f.line == 0
        assert f.guide_says == ""
        assert f.category == "structure"

    def test_github_annotation_format(self):
        result = format_github_annotation(make_finding())
        assert result.startswith("::error ")
        assert "file=src/legacy.js" in result
        assert "line=2" in result
        assert "[STY-01]" in result
        assert "Guide: Never use var." in result

    def test_github_annotation_note_is_notice(self):
        result = format_github_annotation(make_finding(severity="note", file="", line=0))
        assert result.startswith("::notice ")
        assert "file=" not in result

    def test_console_format(self):
        result = format_console(make_finding())
        assert "[STY-01]" in result
        assert "src/legacy.js:2" in result
        assert "Use `const`" in result

    def test_console_format_no_file(self):
        result = format_console(make_finding(file="", line=0))
        assert "(" not in result

    def test_sort_and_aggregate(self):
        findings = [
            make_finding(rule_id="STY-03", severity="warning", line=7),
            make_finding(rule_id="NAME-05", severity="note", line=4),
            make_finding(rule_id="STY-01", line=2),
            make_finding(rule_id="CMT-01", severity="warning", file="src/a.ts", line=1),
        ]
        ordered = sorted(findings, key=sort_key)
        assert [f.rule_id for f in ordered] == ["CMT-01", "NAME-05", "STY-01", "STY-03"]
        grouped = aggregate(findings)
        assert list(grouped) == ["src/a.ts", "src/legacy.js"]
        assert list(grouped["src/legacy.js"]) == ["naming", "style"]

    def test_counts(self):
        findings = [make_finding(), make_finding(rule_id="STY-05", severity="note")]
        assert count_by_severity(findings) == {"error": 1, "warning": 0, "note": 1}
        assert count_by_category(findings)["style"] == 2
        assert count_by_category(findings)["react"] == 0

    def test_summary_table(self):
        findings = [
            make_finding(),
            make_finding(rule_id="NAME-05", severity="note"),
            make_finding(rule_id="RCT-04", severity="warning", file="src/List.tsx"),
        ]
        table = format_summary_table(findings, files_reviewed=5)
        lines = table.splitlines()
        assert lines[0] == "| File | Naming | Extensibility | Comments | Style | Structure | React | Total |"
        assert "| src/legacy.js | 1 | 0 | 0 | 1 | 0 | 0 | 2 |" in lines
        assert "| src/List.tsx | 0 | 0 | 0 | 0 | 0 | 1 | 1 |" in lines
        assert lines[-1] == "5 file(s) reviewed, 3 without findings."

    def test_summary_table_source_column_only_when_needed(self):
        table = format_summary_table([make_finding(rule_id="SRC-01")], files_reviewed=1)
        assert "| Source |" in table.splitlines()[0]

    def test_json_format(self):
        payload = json.loads(format_json([make_finding()], files_reviewed=3))
        assert payload["files_reviewed"] == 3
        assert payload["counts"] == {"error": 1, "warning": 0, "note": 0}
        assert payload["findings"][0]["rule_id"] == "STY-01"
        assert payload["findings"][0]["category"] == "style"
        assert payload["findings"][0]["guide_says"] == "Never use var."

    def test_report_groups_by_file_and_category(self):
        report = format_report([make_finding()], files_reviewed=1)
        lines = report.splitlines()
        assert lines[0] == "src/legacy.js"
        assert lines[1] == "  Style:"
        assert "[STY-01]" in lines[2]
        assert "| File |" in report


# ============================================================================
# Unit Tests: Configuration
# ============================================================================


class TestConfig:
    """Tests for parse_config() and load_config()."""

    def test_defaults(self):
        config = Config()
        assert config.max_params == 3
        assert config.max_switch_cases == 5
        assert config.level("STY-01", "error") == "error"

    def test_thresholds_and_levels(self):
        config = parse_config({"max_params": 5, "exclude": ["src/generated/**"],
                               "rules": {"EXT-05": "off"}}, RULES)
        assert config.max_params == 5
        assert config.exclude == ["src/generated/**"]
        assert config.level("EXT-05", "note") == "off"

    @pytest.mark.parametrize("data,message", [
        ([], "JSON object"),
        ({"max_lines": 10}, "unknown config key"),
        ({"max_params": 0}, "positive integer"),
        ({"max_params": True}, "positive integer"),
        ({"exclude": "dist"}, "list of glob patterns"),
        ({"rules": ["STY-01"]}, "rules must be an object"),
        ({"rules": {"STY-99": "off"}}, "unknown rule id"),
        ({"rules": {"STY-01": "fatal"}}, "invalid level"),
    ])
    def test_invalid_config(self, data, message):
        with pytest.raises(ConfigError, match=message):
            parse_config(data, RULES)

    def test_load_from_project_root(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text('{"max_props": 12}')
        assert load_config(tmp_path).max_props == 12

    def test_load_without_file_uses_defaults(self, tmp_path):
        assert load_config(tmp_path) == Config()

    def test_load_invalid_json(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text('{"max_props": }')
        with pytest.raises(ConfigError, match="invalid JSON"):
            load_config(tmp_path)

    def test_explicit_path_must_exist(self, tmp_path):
        with pytest.raises(ConfigError, match="cannot read config"):
            load_config(tmp_path, tmp_path / "missing.json")


# ============================================================================
# Unit Tests: Source selection
# ============================================================================


class TestSources:
    """Tests for find_source_files(), resolve_paths(), changed_files() and read_source()."""

    @pytest.fixture
    def project(self, tmp_path):
        for rel in ("src/App.tsx", "src/util.js", "src/types.d.ts", "src/vendor.min.js",
                    "src/readme.md", "node_modules/lib/index.js", ".cache/tmp.ts",
                    "src/generated/api.ts"):
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("export const value = 0;\n")
        return tmp_path

    def test_find_source_files(self, project):
        files = find_source_files(project, Config())
        assert [p.relative_to(project).as_posix() for p in files] == [
            "src/App.tsx", "src/generated/api.ts", "src/util.js",
        ]

    def test_exclude_globs(self, project):
        files = find_source_files(project, Config(exclude=["src/generated"]))
        assert "src/generated/api.ts" not in [p.relative_to(project).as_posix() for p in files]

    def test_find_source_files_missing_dir(self, tmp_path):
        assert find_source_files(tmp_path / "nope", Config()) == []

    def test_resolve_paths(self, project):
        files = resolve_paths(project, ["src/util.js", "src/generated", "src/readme.md"], Config())
        assert [p.relative_to(project).as_posix() for p in files] == [
            "src/generated/api.ts", "src/util.js",
        ]

    def test_resolve_paths_excludes_relative_to_root(self, project):
        config = Config(exclude=["src/generated"])
        files = resolve_paths(project, ["src"], config)
        assert [p.relative_to(project).as_posix() for p in files] == ["src/App.tsx", "src/util.js"]
        assert resolve_paths(project, ["src/generated"], config) == []

    def test_resolve_missing_path(self, project):
        with pytest.raises(SourceError, match="No such file or directory: src/missing.ts"):
            resolve_paths(project, ["src/missing.ts"], Config())

    def test_changed_files(self, project):
        diff = MagicMock(stdout="src/App.tsx\nsrc/readme.md\nsrc/deleted.ts\n")
        untracked = MagicMock(stdout="src/util.js\n")
        with patch("tsreview.sources.subprocess.run", side_effect=[diff, untracked]) as run:
            files = changed_files(project, "main", Config())
        assert [p.relative_to(project).as_posix() for p in files] == ["src/App.tsx", "src/util.js"]
        assert run.call_args_list[0].args[0][-1] == "main"

    def test_diff_limited_to_paths(self, project):
        diff = MagicMock(stdout="src/App.tsx\nsrc/util.js\n")
        untracked = MagicMock(stdout="")
        args = build_parser().parse_args(["--diff", "main", "src/util.js"])
        with patch("tsreview.sources.subprocess.run", side_effect=[diff, untracked]):
            files = collect_files(project, args, Config())
        assert [p.relative_to(project).as_posix() for p in files] == ["src/util.js"]

    def test_changed_files_git_failure(self, project):
        error = subprocess.CalledProcessError(128, ["git"], stderr="fatal: not a git repository")
        with patch("tsreview.sources.subprocess.run", side_effect=error):
            with pytest.raises(SourceError, match="not a git repository"):
                changed_files(project, "HEAD", Config())

    def test_changed_files_without_git(self, project):
        with patch("tsreview.sources.subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(SourceError, match="git is not installed"):
                changed_files(project, "HEAD", Config())

    def test_read_source_strips_bom(self, tmp_path):
        path = tmp_path / "a.ts"
        path.write_bytes(b"\xef\xbb\xbfconst a = 1;\n")
        assert read_source(path) == "const a = 1;\n"

    def test_read_source_missing(self, tmp_path):
        with pytest.raises(SourceError, match="cannot read"):
            read_source(tmp_path / "missing.ts")


# ============================================================================
# CLI Integration Tests
# ============================================================================


class TestCLI:
    """Tests for command-line interface behavior."""

    def test_list_rules(self):
        result = run_cli("--list-rules")
        assert result.returncode == 0
        assert len(result.stdout.splitlines()) == len(RULES)
        assert "RCT-01" in result.stdout

    def test_output_contains_header_and_summary(self, clean_project):
        result = run_cli("--path", str(clean_project))
        assert "TS Review: clean-project (5 files)" in result.stdout
        assert "errors" in result.stdout
        assert "warnings" in result.stdout
        assert "notes" in result.stdout

    def test_fail_on_error(self, problematic_project):
        result = run_cli("--path", str(problematic_project))
        assert result.returncode == 1
        assert "[STY-01]" in result.stdout

    def test_severity_error_hides_warnings(self, problematic_project):
        result = run_cli("--path", str(problematic_project), "--severity", "error")
        assert "[STY-01]" in result.stdout
        assert "[STY-03]" not in result.stdout

    def test_fail_on_note_with_clean_warnings(self, tmp_path):
        (tmp_path / "timer.ts").write_text("export const timer = () => setTimeout(tick, 5000);\n")
        assert run_cli("--path", str(tmp_path)).returncode == 0
        assert run_cli("--path", str(tmp_path), "--severity", "note", "--fail-on", "note").returncode == 1

    def test_explicit_paths(self, problematic_project):
        result = run_cli("--path", str(problematic_project), "--format", "json",
                         "--severity", "note", "src/legacy.js")
        payload = json.loads(result.stdout)
        assert payload["files_reviewed"] == 1
        assert {f["file"] for f in payload["findings"]} == {"src/legacy.js"}

    def test_json_format(self, problematic_project):
        result = run_cli("--path", str(problematic_project), "--format", "json", "--severity", "note")
        payload = json.loads(result.stdout)
        assert payload["files_reviewed"] == 5
        assert payload["counts"]["error"] > 0
        assert any(f["rule_id"] == "SRC-01" for f in payload["findings"])

    def test_markdown_format(self, problematic_project):
        result = run_cli("--path", str(problematic_project), "--format", "markdown")
        assert result.stdout.startswith("| File |")

    def test_missing_root(self, tmp_path):
        result = run_cli("--path", str(tmp_path / "nope"))
        assert result.returncode == 1
        assert "::error::Project root" in result.stdout

    def test_missing_path_argument(self, clean_project):
        result = run_cli("--path", str(clean_project), "src/nope.ts")
        assert result.returncode == 1
        assert "::error::No such file or directory" in result.stdout

    def test_invalid_config(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text('{"rules": {"STY-01": "fatal"}}')
        result = run_cli("--path", str(tmp_path))
        assert result.returncode == 1
        assert "::error::invalid level" in result.stdout

    def test_github_annotations_and_outputs_in_ci(self, problematic_project, tmp_path):
        output = tmp_path / "github_output"
        env = os.environ.copy()
        env["CI"] = "true"
        env["GITHUB_OUTPUT"] = str(output)
        result = run_cli("--path", str(problematic_project), env=env)
        assert "::error file=src/legacy.js,line=2::[STY-01]" in result.stdout
        outputs = dict(line.split("=", 1) for line in output.read_text().splitlines())
        assert set(outputs) == {"issues", "errors", "warnings", "notes", "files"}
        assert outputs["files"] == "5"
        assert int(outputs["errors"]) > 0
        assert outputs["notes"] == "0"
