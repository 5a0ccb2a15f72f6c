# src/forkpoc/core/project.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from forkpoc.config import (
    ASSETS_DIR,
    CALL_GRAPH_IMAGE,
    CLASS_DIAGRAM_IMAGE,
    FORGE_TEMPLATE_FILES,
    STORAGE_DIAGRAM_IMAGE,
    Settings,
)
from forkpoc.core.explorer import ExplorerClient
from forkpoc.core.flatten import flatten_sources, write_atomic, write_flat_directory
from forkpoc.core.proxy import resolve_target
from forkpoc.core.scaffold import find_primary_file, render_remappings, render_test_file, scaffold_file_name
from forkpoc.core.toolchain import Toolchain
from forkpoc.models import ContractTarget, SourceFile, VerifiedSource


@dataclass
class ScaffoldPlan:
    """Everything the write phase puts on disk, computed without touching it."""
    contract_name: str
    flat_files: List[SourceFile]
    test_name: str
    test_content: str
    remappings: str


@dataclass
class BuildResult:
    project_dir: Path
    target: ContractTarget
    plan: ScaffoldPlan
    images: List[Path] = field(default_factory=list)


class ProjectBuilder:
    """
    Runs the setup as separate phases: resolve -> fetch -> transform -> write -> render.
    Each phase blocks until done; the first failure propagates and stops the run.
    """

    def __init__(
        self,
        settings: Settings,
        toolchain: Optional[Toolchain] = None,
        explorer: Optional[ExplorerClient] = None,
    ):
        self.settings = settings
        self.toolchain = toolchain or Toolchain(settings.rpc_url)
        self.explorer = explorer or ExplorerClient(settings)

    def resolve(self, address: str) -> ContractTarget:
        target = resolve_target(address, self.toolchain)
        if target.is_proxy:
            print(f"Proxy detected: logic {target.logic}, data {target.data}")
        else:
            print(f"No proxy detected: {target.logic}")
        return target

    def fetch(self, target: ContractTarget) -> VerifiedSource:
        return self.explorer.fetch_source(target.logic)

    def transform(self, source: VerifiedSource, target: ContractTarget) -> ScaffoldPlan:
        flat_files = flatten_sources(source.files)
        primary = find_primary_file(flat_files, source.contract_name)
        return ScaffoldPlan(
            contract_name=source.contract_name,
            flat_files=flat_files,
            test_name=scaffold_file_name(source.contract_name),
            test_content=render_test_file(primary, source.contract_name, target, self.settings),
            remappings=render_remappings(),
        )

    def write(self, project_dir: Path, plan: ScaffoldPlan) -> None:
        self.toolchain.forge_init(project_dir)
        remove_template_files(project_dir)

        write_flat_directory(project_dir / "src", plan.flat_files)
        (project_dir / "test").mkdir(exist_ok=True)
        write_atomic(project_dir / "test" / plan.test_name, plan.test_content)
        write_atomic(project_dir / "remappings.txt", plan.remappings)

    def render(self, project_dir: Path, plan: ScaffoldPlan, target: ContractTarget) -> List[Path]:
        assets = project_dir / ASSETS_DIR
        assets.mkdir(exist_ok=True)
        src_dir = project_dir / "src"
        sources = sorted(src_dir / f.name for f in plan.flat_files)

        call_graph = assets / CALL_GRAPH_IMAGE
        class_diagram = assets / CLASS_DIAGRAM_IMAGE
        storage_diagram = assets / STORAGE_DIAGRAM_IMAGE

        self.toolchain.call_graph(sources, call_graph)
        self.toolchain.class_diagram(src_dir, class_diagram)
        self.toolchain.storage_diagram(src_dir, plan.contract_name, target.data, storage_diagram)
        return [call_graph, class_diagram, storage_diagram]

    def build(self, address: str, project_dir: Path) -> BuildResult:
        print("\n[1/5] Resolving proxy delegation...")
        target = self.resolve(address)
        print("\n[2/5] Downloading verified source...")
        source = self.fetch(target)
        print("\n[3/5] Flattening imports and generating scaffold...")
        plan = self.transform(source, target)
        print(f"\n[4/5] Writing project to {project_dir}...")
        self.write(project_dir, plan)
        print("\n[5/5] Rendering diagrams...")
        images = self.render(project_dir, plan, target)
        return BuildResult(project_dir=project_dir, target=target, plan=plan, images=images)


def remove_template_files(project_dir: Path) -> None:
    """Drops the sample contract, test and script forge init generates."""
    for rel in FORGE_TEMPLATE_FILES:
        path = project_dir / rel
        if path.exists():
            path.unlink()

    script_dir = project_dir / "script"
    if script_dir.is_dir() and not any(script_dir.iterdir()):
        script_dir.rmdir()
