# src/forkpoc/cli.py
import re
import sys
import argparse
from pathlib import Path
from typing import List, Optional

from forkpoc.config import TREE_IGNORE_PATTERNS, load_settings
from forkpoc.core.flatten import flatten_directory
from forkpoc.core.ignore import load_ignore_spec
from forkpoc.core.project import BuildResult, ProjectBuilder
from forkpoc.core.toolchain import require_tools
from forkpoc.core.tree import generate_project_tree, list_project_files
from forkpoc.errors import DestinationExistsError, ForkPocError, UsageError
from forkpoc.models import SourceFile
from forkpoc.utils.tokenizer import Tokenizer

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


class UsageExitParser(argparse.ArgumentParser):
    """Usage problems exit with status 1 instead of argparse's 2."""

    def error(self, message):
        self.print_usage(sys.stderr)
        print(f"{self.prog}: error: {message}", file=sys.stderr)
        sys.exit(1)


def create_arg_parser():
    parser = UsageExitParser(
        prog="forkpoc",
        description="Set up a Foundry proof-of-concept project for a deployed, verified contract.",
    )
    parser.add_argument("address", type=str, help="Deployed contract address (0x...)")
    parser.add_argument(
        "folder",
        type=str,
        nargs="?",
        default=None,
        help="Destination folder (default: the lowercased address)",
    )
    return parser


def create_flatten_arg_parser():
    parser = UsageExitParser(
        prog="forkpoc-flatten",
        description="Flatten a Solidity source tree in place, rewriting imports to ./<file>.",
    )
    parser.add_argument("root_dir", type=str, help="Directory to flatten")
    return parser


def validate_address(address: str) -> str:
    if not address.startswith("0x"):
        raise UsageError(f"Address must start with 0x, got '{address}'")
    if not ADDRESS_RE.match(address):
        raise UsageError(f"Address must be 0x followed by 40 hex digits, got '{address}'")
    return address


def print_source_summary(files: List[SourceFile], limit: int = 10) -> None:
    ranked = sorted(((Tokenizer.count(f.content), f.name) for f in files), reverse=True)
    total_tokens = sum(tokens for tokens, _ in ranked)

    print(f"\n--- Top {limit} Largest Sources (Est. Tokens) ---")
    print(f"{'Rank':<5} | {'Tokens':<10} | {'File'}")
    print("-" * 60)
    for i, (tokens, name) in enumerate(ranked[:limit]):
        print(f"{i+1:<5} | {tokens:<10} | {name}")
    print("-" * 60)
    print(f"Total files: {len(ranked)}")
    print(f"Total tokens: {total_tokens}")
    print("-" * 60)


def print_project_tree(project_dir: Path) -> None:
    spec = load_ignore_spec(project_dir, base_patterns=TREE_IGNORE_PATTERNS)
    print()
    print(generate_project_tree(list_project_files(project_dir, spec), project_dir.name), end="")


def print_result(result: BuildResult) -> None:
    print_source_summary(result.plan.flat_files)
    print_project_tree(result.project_dir)
    print(f"\nSuccess! Project written to: {result.project_dir}")
    print(f"Run it with: cd {result.project_dir.name} && forge test")


def main(argv: Optional[List[str]] = None):
    parser = create_arg_parser()
    args = parser.parse_args(argv)

    try:
        address = validate_address(args.address)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        require_tools()
        settings = load_settings()

        project_dir = Path(args.folder or address.lower()).resolve()
        if project_dir.exists():
            raise DestinationExistsError(f"Destination '{project_dir}' already exists")

        print("--- forkpoc ---")
        print(f"Target:  {address}")
        print(f"Output:  {project_dir}")
        print(f"Chain:   {settings.chain_id}")

        result = ProjectBuilder(settings).build(address, project_dir)
        print_result(result)

    except ForkPocError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(1)

    except Exception as e:
        print(f"An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(1)


def flatten_main(argv: Optional[List[str]] = None):
    parser = create_flatten_arg_parser()
    args = parser.parse_args(argv)

    root_dir = Path(args.root_dir).resolve()
    if not root_dir.is_dir():
        print(f"Error: Invalid directory '{root_dir}'", file=sys.stderr)
        sys.exit(1)

    try:
        print("--- forkpoc-flatten ---")
        print(f"Flattening: {root_dir}")
        flat = flatten_directory(root_dir)
        print_source_summary(flat)
        print(f"\nSuccess! {len(flat)} file(s) flattened into {root_dir.name}/")

    except ForkPocError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(1)

    except Exception as e:
        print(f"An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
