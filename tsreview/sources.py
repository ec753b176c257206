"""Source loader: decide which files are reviewed and read them."""

import fnmatch
import logging
import os
import subprocess
from pathlib import Path

from tsreview.config import Config
from tsreview.errors import SourceError

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS = {".ts", ".tsx", ".js", ".jsx", ".mts", ".cts", ".mjs", ".cjs"}

IGNORED_DIRS = {
    "node_modules", "dist", "build", "coverage", "out", "vendor", "__generated__",
}


def is_source_file(path: Path) -> bool:
    """Supported extension, excluding declaration and minified bundles."""
    name = path.name.lower()
    if name.endswith((".d.ts", ".d.mts", ".d.cts", ".min.js")):
        return False
    return path.suffix.lower() in SOURCE_EXTENSIONS


def is_excluded(rel: str, config: Config) -> bool:
    """Match a root-relative POSIX path against the config exclude globs."""
    return any(
        fnmatch.fnmatch(rel, pattern) or fnmatch.fnmatch(rel, pattern.rstrip("/") + "/*")
        for pattern in config.exclude
    )


def _relative(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def find_source_files(root: Path, config: Config, base: Path | None = None) -> list[Path]:
    """Recursively collect source files under root.

    Exclude globs match paths relative to base, which defaults to root.
    """
    if not root.is_dir():
        return []
    files = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            d for d in dirnames
            if d not in IGNORED_DIRS and not d.startswith(".")
        )
        for filename in filenames:
            path = Path(dirpath) / filename
            if not is_source_file(path):
                continue
            if is_excluded(_relative(path, base or root), config):
                logger.debug("excluded %s", path)
                continue
            files.append(path)
    return sorted(files)


def resolve_paths(root: Path, paths: list[str], config: Config) -> list[Path]:
    """Expand an explicit list of files and directories."""
    files: set[Path] = set()
    for raw in paths:
        path = Path(raw)
        if not path.is_absolute():
            path = root / path
        if path.is_dir():
            files.update(find_source_files(path, config, root))
        elif path.is_file():
            if is_source_file(path) and not is_excluded(_relative(path, root), config):
                files.add(path)
            else:
                logger.info("skipping unsupported or excluded file %s", path)
        else:
            raise SourceError(f"No such file or directory: {raw}")
    return sorted(files)


def _git(root: Path, *args: str) -> list[str]:
    cmd = ["git", *args]
    logger.debug("running %s in %s", " ".join(cmd), root)
    try:
        result = subprocess.run(cmd, cwd=root, capture_output=True, text=True, check=True)
    except FileNotFoundError as exc:
        raise SourceError("git is not installed or not on PATH") from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
        raise SourceError(f"git {' '.join(args)} failed: {detail}") from exc
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def changed_files(root: Path, base: str, config: Config) -> list[Path]:
    """Files changed against a git base plus untracked files."""
    names = _git(root, "diff", "--name-only", "--relative", "--diff-filter=ACMR", base)
    names += _git(root, "ls-files", "--others", "--exclude-standard")
    files = set()
    for name in names:
        path = root / name
        if path.is_file() and is_source_file(path) and not is_excluded(Path(name).as_posix(), config):
            files.add(path)
    logger.info("%d changed source file(s) against %s", len(files), base)
    return sorted(files)


def read_source(path: Path) -> str:
    """Read a source file as UTF-8, replacing undecodable bytes and dropping a BOM."""
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise SourceError(f"cannot read {path}: {exc.strerror or exc}") from exc
    return text.removeprefix("\ufeff")
