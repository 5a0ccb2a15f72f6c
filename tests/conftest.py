# tests/conftest.py
import json
import subprocess
from pathlib import Path

import pytest
import requests

from forkpoc.utils.tokenizer import Tokenizer

PROXY = "0x1111111111111111111111111111111111111111"
IMPLEMENTATION = "0x2222222222222222222222222222222222222222"
ZERO_WORD = "0x" + "0" * 64
IMPLEMENTATION_WORD = "0x" + "0" * 24 + IMPLEMENTATION[2:]

VAULT_SOL = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.19;

import "@openzeppelin/contracts/token/ERC20/IERC20.sol";
import {Math} from "./utils/Math.sol";

contract Vault {
    IERC20 public token;

    function deposit(uint256 amount) external {
        token.transferFrom(msg.sender, address(this), Math.max(amount, 1));
    }
}
"""

IERC20_SOL = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.0;

interface IERC20 {
    function transferFrom(address from, address to, uint256 amount) external returns (bool);
}
"""

MATH_SOL = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.0;

library Math {
    function max(uint256 a, uint256 b) internal pure returns (uint256) {
        return a > b ? a : b;
    }
}
"""


@pytest.fixture(autouse=True)
def offline_tokenizer(monkeypatch):
    """Keeps tiktoken from downloading its BPE file during tests."""
    monkeypatch.setattr(Tokenizer, "_encoding", None)
    monkeypatch.setattr(Tokenizer, "_unavailable", True)


@pytest.fixture
def standard_json_source():
    """SourceCode as the explorer returns it for a standard-JSON verification."""
    payload = {
        "language": "Solidity",
        "sources": {
            "contracts/Vault.sol": {"content": VAULT_SOL},
            "@openzeppelin/contracts/token/ERC20/IERC20.sol": {"content": IERC20_SOL},
            "contracts/utils/Math.sol": {"content": MATH_SOL},
        },
    }
    return "{" + json.dumps(payload) + "}"


class FakeResponse:
    def __init__(self, body, status_code=200):
        self._body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self._body


@pytest.fixture
def fake_explorer(monkeypatch, standard_json_source):
    """Patches requests.get with a verified Vault; returns the list of recorded calls."""
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append({"url": url, "params": dict(params or {})})
        return FakeResponse({
            "status": "1",
            "message": "OK",
            "result": [{
                "ContractName": "Vault",
                "CompilerVersion": "v0.8.19+commit.7dd6d404",
                "SourceCode": standard_json_source,
            }],
        })

    monkeypatch.setattr("forkpoc.core.explorer.requests.get", fake_get)
    return calls


class FakeToolchainProcess:
    """Stands in for subprocess.run, emulating forge, cast, surya, sol2uml and dot."""

    def __init__(self, implementation_word=ZERO_WORD):
        self.implementation_word = implementation_word
        self.checksum = lambda address: address
        self.commands = []

    def __call__(self, cmd, input=None, capture_output=False, text=False, cwd=None):
        self.commands.append(list(cmd))
        tool, *rest = cmd
        stdout = ""

        if tool == "forge" and rest[0] == "init":
            project = Path(cwd) / rest[1]
            for rel in ("src/Counter.sol", "test/Counter.t.sol", "script/Counter.s.sol",
                        "lib/forge-std/src/Test.sol"):
                (project / rel).parent.mkdir(parents=True, exist_ok=True)
                (project / rel).write_text("// template\n")
            (project / "foundry.toml").write_text("[profile.default]\n")
        elif tool == "cast" and rest[0] == "storage":
            stdout = self.implementation_word + "\n"
        elif tool == "cast" and rest[0] == "to-check-sum-address":
            stdout = self.checksum(rest[1]) + "\n"
        elif tool == "surya":
            stdout = "digraph G {}\n"
        elif tool in ("dot", "sol2uml"):
            Path(cmd[cmd.index("-o") + 1]).write_bytes(b"\x89PNG\r\n")

        return subprocess.CompletedProcess(cmd, 0, stdout, "")

    def ran(self, *prefix):
        return [c for c in self.commands if c[:len(prefix)] == list(prefix)]


@pytest.fixture
def fake_tools(monkeypatch):
    process = FakeToolchainProcess()
    monkeypatch.setattr("forkpoc.core.toolchain.subprocess.run", process)
    monkeypatch.setattr("forkpoc.core.toolchain.shutil.which", lambda tool: f"/usr/bin/{tool}")
    return process


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Working directory without a .env file and the two required variables set."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ETHERSCAN_API_KEY", "test-key")
    monkeypatch.setenv("ETH_RPC_URL", "http://localhost:8545")
    for name in ("ETHERSCAN_CHAIN_ID", "ETHERSCAN_API_URL", "FORK_BLOCK_NUMBER"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path
