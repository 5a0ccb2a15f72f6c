# src/forkpoc/config.py
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from forkpoc.errors import ConfigError

DEFAULT_EXPLORER_URL = "https://api.etherscan.io/v2/api"
DEFAULT_CHAIN_ID = 1
REQUEST_TIMEOUT = 30

# keccak256("eip1967.proxy.implementation") - 1
EIP1967_IMPLEMENTATION_SLOT = "0x360894a13ba1a3210667c828492db98dca3e2076cc3735a920a3ca505d382bbc"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

REQUIRED_TOOLS = ["forge", "cast", "surya", "sol2uml", "dot"]

SOURCE_EXTENSIONS = {".sol"}
IGNORE_FILE_NAME = ".flattenignore"

DEFAULT_IGNORE_PATTERNS = [
    "# Default ignore patterns",
    ".git/",
    "node_modules/",
    "cache/",
    "out/",
    "broadcast/",
]

# Listing the generated project also hides installed dependencies
TREE_IGNORE_PATTERNS = DEFAULT_IGNORE_PATTERNS + ["lib/"]

FORGE_TEMPLATE_FILES = [
    "src/Counter.sol",
    "test/Counter.t.sol",
    "script/Counter.s.sol",
]

REMAPPINGS = ["forge-std/=lib/forge-std/src/"]

ASSETS_DIR = "assets"
CALL_GRAPH_IMAGE = "call-graph.png"
CLASS_DIAGRAM_IMAGE = "class-diagram.png"
STORAGE_DIAGRAM_IMAGE = "storage-diagram.png"

ENV_API_KEY = "ETHERSCAN_API_KEY"
ENV_RPC_URL = "ETH_RPC_URL"
ENV_CHAIN_ID = "ETHERSCAN_CHAIN_ID"
ENV_EXPLORER_URL = "ETHERSCAN_API_URL"
ENV_FORK_BLOCK = "FORK_BLOCK_NUMBER"


@dataclass(frozen=True)
class Settings:
    """Run configuration, read once from the environment at startup."""
    api_key: str
    rpc_url: str
    chain_id: int = DEFAULT_CHAIN_ID
    explorer_url: str = DEFAULT_EXPLORER_URL
    fork_block: Optional[int] = None
    rpc_env_var: str = ENV_RPC_URL


def _parse_int(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = (env.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw, 0)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{raw}'")


def load_settings(env: Optional[Mapping[str, str]] = None, dotenv_path: Optional[Path] = None) -> Settings:
    """
    Builds Settings from the environment.
    When no mapping is given, a .env file in the working directory is loaded
    first (existing variables win) and os.environ is used.
    """
    if env is None:
        load_dotenv(dotenv_path or Path.cwd() / ".env", override=False)
        env = os.environ

    missing: List[str] = [name for name in (ENV_API_KEY, ENV_RPC_URL) if not (env.get(name) or "").strip()]
    if missing:
        raise ConfigError(f"Missing required environment variable(s): {', '.join(missing)}")

    chain_id = _parse_int(env, ENV_CHAIN_ID)
    return Settings(
        api_key=env[ENV_API_KEY].strip(),
        rpc_url=env[ENV_RPC_URL].strip(),
        chain_id=DEFAULT_CHAIN_ID if chain_id is None else chain_id,
        explorer_url=(env.get(ENV_EXPLORER_URL) or "").strip() or DEFAULT_EXPLORER_URL,
        fork_block=_parse_int(env, ENV_FORK_BLOCK),
    )
