# tests/test_scaffold.py
import pytest

from forkpoc.config import Settings
from forkpoc.core.scaffold import (
    extract_pragma_version,
    find_primary_file,
    render_remappings,
    render_test_file,
    scaffold_file_name,
)
from forkpoc.errors import ScaffoldError
from forkpoc.models import ContractTarget, SourceFile

from conftest import IMPLEMENTATION, PROXY, VAULT_SOL


@pytest.fixture
def settings():
    return Settings(api_key="k", rpc_url="http://localhost:8545")


@pytest.fixture
def proxy_target():
    return ContractTarget(address=PROXY, logic=IMPLEMENTATION, data=PROXY)


def test_pragma_passed_through_verbatim(settings, proxy_target):
    primary = SourceFile("Vault.sol", VAULT_SOL)
    rendered = render_test_file(primary, "Vault", proxy_target, settings)

    pragma_lines = [line for line in rendered.splitlines() if line.startswith("pragma")]
    assert pragma_lines == ["pragma solidity ^0.8.19;"]


def test_first_pragma_wins():
    source = SourceFile("A.sol", "pragma solidity >=0.8.0 <0.9.0;\npragma solidity ^0.7.0;\n")
    assert extract_pragma_version(source) == ">=0.8.0 <0.9.0"


def test_missing_pragma_raises():
    with pytest.raises(ScaffoldError):
        extract_pragma_version(SourceFile("A.sol", "contract A {}\n"))


def test_test_file_structure(settings, proxy_target):
    rendered = render_test_file(SourceFile("Vault.sol", VAULT_SOL), "Vault", proxy_target, settings)
    lines = rendered.splitlines()

    assert lines[0] == "// SPDX-License-Identifier: UNLICENSED"
    assert 'import "forge-std/Test.sol";' in lines
    assert 'import "../src/Vault.sol";' in lines
    assert "contract VaultTest is Test {" in lines
    assert f"    address constant TARGET = {PROXY};" in lines
    assert '        vm.createSelectFork(vm.envString("ETH_RPC_URL"));' in lines
    assert "        target = Vault(TARGET);" in lines
    assert "        assertEq(address(target), TARGET);" in lines
    assert IMPLEMENTATION not in rendered


def test_fork_block_is_pinned_when_configured(proxy_target):
    settings = Settings(api_key="k", rpc_url="http://rpc", fork_block=19000000)
    rendered = render_test_file(SourceFile("Vault.sol", VAULT_SOL), "Vault", proxy_target, settings)
    assert 'vm.createSelectFork(vm.envString("ETH_RPC_URL"), 19000000);' in rendered


def test_find_primary_file_by_name_then_declaration():
    files = [
        SourceFile("IVault.sol", "interface IVault {}\n"),
        SourceFile("Vault.sol", "contract Vault {}\n"),
    ]
    assert find_primary_file(files, "Vault").name == "Vault.sol"

    files = [SourceFile("Main.sol", "abstract contract Base {}\ncontract Vault is Base {}\n")]
    assert find_primary_file(files, "Vault").name == "Main.sol"


def test_find_primary_file_missing_raises():
    with pytest.raises(ScaffoldError):
        find_primary_file([SourceFile("A.sol", "contract VaultV2 {}\n")], "Vault")


def test_names_and_remappings():
    assert scaffold_file_name("Vault") == "Vault.t.sol"
    assert render_remappings() == "forge-std/=lib/forge-std/src/\n"
