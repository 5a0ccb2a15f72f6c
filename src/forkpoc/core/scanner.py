# src/forkpoc/core/scanner.py
import os
import sys
from pathlib import Path
from typing import Iterator, Optional, Set

import pathspec

from forkpoc.config import SOURCE_EXTENSIONS
from forkpoc.core.ignore import is_path_ignored, load_ignore_spec
from forkpoc.models import SourceFile


class SourceScanner:
    def __init__(
        self,
        root_dir: Path,
        ignore_spec: Optional[pathspec.PathSpec] = None,
        extensions: Optional[Set[str]] = None,
    ):
        self.root_dir = root_dir
        self.ignore_spec = ignore_spec if ignore_spec is not None else load_ignore_spec(root_dir)
        self.extensions = extensions or SOURCE_EXTENSIONS

    def _is_binary_file(self, path: Path) -> bool:
        """Null byte in the first 1024 bytes means binary."""
        try:
            with path.open("rb") as f:
                return b"\0" in f.read(1024)
        except OSError:
            return True

    def scan(self) -> Iterator[SourceFile]:
        """
        Walks the tree, pruning ignored directories in place, and yields
        SourceFile objects keyed by their root-relative posix path.
        Files come out in sorted order so repeated runs see the same sequence.
        """
        for root, dirs, files in os.walk(self.root_dir):
            root_path = Path(root)

            for d in list(dirs):
                dir_rel_path = (root_path / d).relative_to(self.root_dir)
                if is_path_ignored(dir_rel_path, self.ignore_spec, is_directory=True):
                    dirs.remove(d)
            dirs.sort()

            for f in sorted(files):
                file_abs_path = root_path / f
                rel_path = file_abs_path.relative_to(self.root_dir)

                if is_path_ignored(rel_path, self.ignore_spec):
                    continue
                if file_abs_path.suffix not in self.extensions:
                    continue
                if self._is_binary_file(file_abs_path):
                    continue

                try:
                    # newline="" keeps CRLF files byte-identical outside rewritten imports
                    with open(file_abs_path, "r", encoding="utf-8", newline="") as fh:
                        content = fh.read()
                except UnicodeDecodeError:
                    print(f"  > [Warning] Skipping {rel_path.as_posix()} (not UTF-8)", file=sys.stderr)
                    continue
                yield SourceFile(path=rel_path.as_posix(), content=content)
