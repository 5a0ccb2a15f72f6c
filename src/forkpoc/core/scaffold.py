# src/forkpoc/core/scaffold.py
import re
from typing import Iterable, Optional

from forkpoc.config import REMAPPINGS, Settings
from forkpoc.errors import ScaffoldError
from forkpoc.models import ContractTarget, SourceFile

PRAGMA_RE = re.compile(r"^\s*pragma\s+solidity\s+([^;]+);", re.MULTILINE)

TEST_TEMPLATE = """\
// SPDX-License-Identifier: UNLICENSED
pragma solidity {version};

import "forge-std/Test.sol";
import "../src/{primary_file}";

contract {contract_name}Test is Test {{
    address constant TARGET = {data_address};

    {contract_name} public target;

    function setUp() public {{
        vm.createSelectFork(vm.envString("{rpc_env_var}"){fork_block});
        target = {contract_name}(TARGET);
    }}

    function testTargetAddress() public {{
        assertEq(address(target), TARGET);
    }}
}}
"""


def extract_pragma_version(source: SourceFile) -> str:
    """Version constraint of the first 'pragma solidity' line, verbatim."""
    match = PRAGMA_RE.search(source.content)
    if match is None:
        raise ScaffoldError(f"No 'pragma solidity' line in {source.path}")
    return match.group(1).strip()


def find_primary_file(files: Iterable[SourceFile], contract_name: str) -> SourceFile:
    files = list(files)
    for source in files:
        if source.name == f"{contract_name}.sol":
            return source

    declaration = re.compile(rf"\b(?:abstract\s+)?contract\s+{re.escape(contract_name)}\b")
    for source in files:
        if declaration.search(source.content):
            return source
    raise ScaffoldError(f"No source file declares contract {contract_name}")


def render_test_file(
    primary: SourceFile,
    contract_name: str,
    target: ContractTarget,
    settings: Settings,
    version: Optional[str] = None,
) -> str:
    fork_block = f", {settings.fork_block}" if settings.fork_block is not None else ""
    return TEST_TEMPLATE.format(
        version=version or extract_pragma_version(primary),
        primary_file=primary.name,
        contract_name=contract_name,
        data_address=target.data,
        rpc_env_var=settings.rpc_env_var,
        fork_block=fork_block,
    )


def scaffold_file_name(contract_name: str) -> str:
    return f"{contract_name}.t.sol"


def render_remappings() -> str:
    return "\n".join(REMAPPINGS) + "\n"
