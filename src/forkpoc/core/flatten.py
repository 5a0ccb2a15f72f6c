# src/forkpoc/core/flatten.py
import os
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List

from forkpoc.core.imports import rewrite_source
from forkpoc.core.scanner import SourceScanner
from forkpoc.errors import FlattenCollisionError
from forkpoc.models import SourceFile


def flatten_sources(sources: Iterable[SourceFile]) -> List[SourceFile]:
    """
    Pure transform: rewrites imports and keys every file by its basename.
    Files sharing a basename must be identical after rewriting, otherwise
    FlattenCollisionError is raised before anything reaches disk.
    """
    flat: Dict[str, SourceFile] = {}
    origin: Dict[str, str] = {}

    for source in sources:
        rewritten = rewrite_source(source)
        name = source.name
        if name in flat:
            if flat[name].content != rewritten.content:
                raise FlattenCollisionError(name, origin[name], source.path)
            continue
        flat[name] = SourceFile(path=name, content=rewritten.content)
        origin[name] = source.path

    return list(flat.values())


def write_atomic(path: Path, content: str) -> None:
    """Writes through a temp file in the same directory, then renames it over path."""
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def write_flat_directory(target_dir: Path, files: Iterable[SourceFile]) -> List[Path]:
    target_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for source in files:
        out_path = target_dir / source.name
        write_atomic(out_path, source.content)
        written.append(out_path)
    return written


def flatten_directory(root_dir: Path) -> List[SourceFile]:
    """
    Replaces the tree under root_dir with its flattened sources.
    The flat set is staged in a sibling directory; the original tree is only
    removed once every file has been written there.
    """
    root_dir = root_dir.resolve()
    flat = flatten_sources(SourceScanner(root_dir).scan())

    staging = Path(tempfile.mkdtemp(prefix=f".{root_dir.name}-flat-", dir=root_dir.parent))
    try:
        write_flat_directory(staging, flat)
        os.chmod(staging, root_dir.stat().st_mode & 0o777)
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    shutil.rmtree(root_dir)
    os.replace(staging, root_dir)
    return flat
