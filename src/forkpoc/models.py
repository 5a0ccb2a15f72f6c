# src/forkpoc/models.py
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import List, Tuple, Union


@dataclass(frozen=True)
class SourceFile:
    """Immutable source file: the path it was published or found under, and its text."""
    path: str
    content: str

    @property
    def name(self) -> str:
        return PurePosixPath(self.path.replace("\\", "/")).name

    @property
    def lines(self) -> List[str]:
        return self.content.splitlines(keepends=True)


@dataclass(frozen=True)
class ImportDirective:
    """An import statement; text may span several physical lines."""
    path: str
    line_no: int
    text: str

    @property
    def basename(self) -> str:
        return PurePosixPath(self.path.replace("\\", "/")).name


@dataclass(frozen=True)
class Passthrough:
    text: str


Line = Union[ImportDirective, Passthrough]


@dataclass(frozen=True)
class ContractTarget:
    """
    Where the code lives (logic) and where the state lives (data).
    address is the input as typed; logic and data are EIP-55 checksummed,
    so compare them to address case-insensitively.
    """
    address: str
    logic: str
    data: str

    @property
    def is_proxy(self) -> bool:
        return self.logic.lower() != self.data.lower()


@dataclass(frozen=True)
class VerifiedSource:
    contract_name: str
    compiler_version: str
    files: Tuple[SourceFile, ...]
