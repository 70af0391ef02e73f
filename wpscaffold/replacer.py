"""
replacer.py

Responsibility: Apply an ordered list of find/replace rules across a set of files.

Rules:
- Globs are expanded relative to a root directory, in sorted order, each file once.
- Within a file, rule i's output is rule i+1's input.
- Only files whose content changed are written; dry runs write nothing.
- Files that are not UTF-8 text are left alone.

This module intentionally does NOT know which placeholders exist; see `rulesets.py`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

logger = logging.getLogger(__name__)


class ReplaceError(RuntimeError):
    pass


@dataclass(frozen=True)
class ReplacementRule:
    pattern: re.Pattern[str]
    replacement: str
    # Literal replacements are inserted verbatim; otherwise `\1` style group
    # references in `replacement` are expanded.
    literal: bool = True
    count: int = 0  # 0 replaces every occurrence

    def apply(self, text: str) -> str:
        if self.literal:
            return self.pattern.sub(lambda _m: self.replacement, text, count=self.count)
        return self.pattern.sub(self.replacement, text, count=self.count)


@dataclass(frozen=True)
class FileChange:
    file: Path
    changed: bool


def rule(
    pattern: str,
    replacement: str,
    *,
    literal: bool = True,
    flags: int = 0,
    count: int = 0,
) -> ReplacementRule:
    return ReplacementRule(re.compile(pattern, flags), replacement, literal, count)


def token(placeholder: str, replacement: str, *, count: int = 0) -> ReplacementRule:
    """Replace occurrences of a literal placeholder (all of them by default)."""
    return rule(re.escape(placeholder), replacement, count=count)


def keep_suffix(placeholder: str, replacement: str) -> ReplacementRule:
    """
    Replace `placeholder` unless it is directly followed by a colon.

    In a header such as "Plugin Name: Plugin Name" only the value is replaced.
    The character after the match is captured and written back.
    """
    escaped = replacement.replace("\\", "\\\\")
    return rule(re.escape(placeholder) + r"([^:]|$)", escaped + r"\1", literal=False)


def expand_globs(root: Path, patterns: Iterable[str]) -> list[Path]:
    found: set[Path] = set()
    for pattern in patterns:
        found.update(p for p in root.glob(pattern) if p.is_file())
    return sorted(found)


def _read_text(path: Path) -> str | None:
    try:
        with path.open(encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError:
        return None


def replace_in_files(
    root: str | Path,
    globs: Sequence[str],
    rules: Sequence[ReplacementRule],
    *,
    dry: bool = False,
    allow_empty: bool = True,
) -> list[FileChange]:
    """
    Apply `rules` in order to every file matched by `globs` under `root`.

    Returns one `FileChange` per matched file. With `dry=True` the same
    `changed` flags are computed but nothing is written.
    """
    base = Path(root)
    files = expand_globs(base, globs)
    if not files and not allow_empty:
        raise ReplaceError(f"No files matched {list(globs)} in {base}")

    changes: list[FileChange] = []
    for path in files:
        original = _read_text(path)
        if original is None:
            logger.debug("skipping non-text file %s", path)
            changes.append(FileChange(path, False))
            continue

        text = original
        for r in rules:
            text = r.apply(text)

        changed = text != original
        if changed and not dry:
            with path.open("w", encoding="utf-8", newline="") as f:
                f.write(text)
        logger.debug("%s %s", "changed" if changed else "unchanged", path)
        changes.append(FileChange(path, changed))
    return changes
