# src/forkpoc/core/toolchain.py
import shutil
import subprocess
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from forkpoc.config import REQUIRED_TOOLS
from forkpoc.errors import MissingToolError, ToolchainError


def require_tools(tools: Iterable[str] = REQUIRED_TOOLS) -> None:
    missing = [tool for tool in tools if shutil.which(tool) is None]
    if missing:
        raise MissingToolError(f"Required command(s) not found on PATH: {', '.join(missing)}")


def run_command(
    cmd: Sequence[str],
    description: str,
    input: Optional[str] = None,
    cwd: Optional[Path] = None,
) -> subprocess.CompletedProcess:
    """Runs cmd to completion; a non-zero exit raises ToolchainError."""
    print(f"Running: {description}")
    print(f"Command: {' '.join(str(c) for c in cmd)}")
    result = subprocess.run(
        [str(c) for c in cmd],
        input=input,
        capture_output=True,
        text=True,
        cwd=str(cwd) if cwd else None,
    )
    if result.returncode != 0:
        raise ToolchainError(description, cmd, result.returncode, result.stderr or result.stdout or "")
    return result


class Toolchain:
    """Thin wrappers over forge, cast, surya, sol2uml and dot."""

    def __init__(self, rpc_url: str):
        self.rpc_url = rpc_url

    def forge_init(self, project_dir: Path) -> None:
        run_command(
            ["forge", "init", project_dir.name, "--no-git"],
            "forge project init",
            cwd=project_dir.parent,
        )

    def storage_at(self, address: str, slot: str) -> str:
        result = run_command(
            ["cast", "storage", address, slot, "--rpc-url", self.rpc_url],
            f"storage slot read on {address}",
        )
        return result.stdout.strip()

    def checksum(self, address: str) -> str:
        result = run_command(["cast", "to-check-sum-address", address], "address checksum")
        return result.stdout.strip()

    def call_graph(self, sources: List[Path], output: Path) -> None:
        graph = run_command(["surya", "graph", *sources], "call graph generation")
        run_command(["dot", "-Tpng", "-o", output], "call graph rendering", input=graph.stdout)

    def class_diagram(self, src_dir: Path, output: Path) -> None:
        run_command(["sol2uml", "class", src_dir, "-f", "png", "-o", output], "class diagram generation")

    def storage_diagram(self, src_dir: Path, contract_name: str, data_address: str, output: Path) -> None:
        run_command(
            [
                "sol2uml", "storage", src_dir,
                "-c", contract_name,
                "-d",
                "-s", data_address,
                "-u", self.rpc_url,
                "-f", "png",
                "-o", output,
            ],
            "storage diagram generation",
        )
