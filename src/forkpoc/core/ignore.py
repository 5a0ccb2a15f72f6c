# src/forkpoc/core/ignore.py
import sys
from pathlib import Path, PurePath
from typing import Iterable, List, Optional

import pathspec

from forkpoc.config import DEFAULT_IGNORE_PATTERNS, IGNORE_FILE_NAME


def load_ignore_spec(
    root_dir: Path,
    base_patterns: Optional[Iterable[str]] = None,
    extra_patterns: Optional[List[str]] = None,
) -> pathspec.PathSpec:
    """
    Builds a PathSpec from the base patterns (DEFAULT_IGNORE_PATTERNS when not given),
    the root's .flattenignore if there is one, and any extra patterns.
    """
    lines = list(DEFAULT_IGNORE_PATTERNS if base_patterns is None else base_patterns)

    ignore_file = root_dir / IGNORE_FILE_NAME
    if ignore_file.exists():
        with open(ignore_file, "r", encoding="utf-8") as f:
            lines.extend(f.read().splitlines())
        # The rules file is never a source
        lines.append(IGNORE_FILE_NAME)

    if extra_patterns:
        lines.extend(extra_patterns)

    try:
        return pathspec.PathSpec.from_lines("gitwildmatch", lines)
    except Exception as e:
        print(f"Warning: could not parse ignore rules ({e}), using defaults", file=sys.stderr)
        return pathspec.PathSpec.from_lines("gitwildmatch", DEFAULT_IGNORE_PATTERNS)


def is_path_ignored(rel_path: PurePath, spec: pathspec.PathSpec, is_directory: bool = False) -> bool:
    """Matches a root-relative path; directories get a trailing slash so 'out/' style rules apply."""
    candidate = rel_path.as_posix()
    if is_directory:
        candidate += "/"
    return spec.match_file(candidate)
