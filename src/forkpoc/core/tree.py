# src/forkpoc/core/tree.py
import os
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional

import pathspec

from forkpoc.core.ignore import is_path_ignored


def list_project_files(root_dir: Path, ignore_spec: pathspec.PathSpec) -> List[str]:
    """Root-relative posix paths of every non-ignored file under root_dir."""
    paths: List[str] = []
    for root, dirs, files in os.walk(root_dir):
        root_path = Path(root)
        for d in list(dirs):
            if is_path_ignored((root_path / d).relative_to(root_dir), ignore_spec, is_directory=True):
                dirs.remove(d)
        for f in files:
            rel_path = (root_path / f).relative_to(root_dir)
            if not is_path_ignored(rel_path, ignore_spec):
                paths.append(rel_path.as_posix())
    return sorted(paths)


def generate_project_tree(file_paths: List[str], root_name: str) -> str:
    """
    Renders root-relative posix paths as a box-drawing tree.
    At every level directories come first, marked with a trailing '/', then files.
    """
    # Directories map to child dicts, files to None
    root: Dict[str, Optional[Dict]] = {}
    for path in file_paths:
        *parents, name = PurePosixPath(path).parts
        node = root
        for part in parents:
            node = node.setdefault(part, {})
        node[name] = None

    lines = [f"{root_name}/"]

    def _render(node: Dict[str, Optional[Dict]], prefix: str) -> None:
        dirs = sorted(k for k, v in node.items() if v is not None)
        files = sorted(k for k, v in node.items() if v is None)
        entries = [(f"{d}/", node[d]) for d in dirs] + [(f, None) for f in files]

        for i, (label, child) in enumerate(entries):
            last = i == len(entries) - 1
            lines.append(f"{prefix}{'└── ' if last else '├── '}{label}")
            if child:
                _render(child, prefix + ("    " if last else "│   "))

    _render(root, "")
    return "\n".join(lines) + "\n"
