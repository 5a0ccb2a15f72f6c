# src/forkpoc/core/proxy.py
import string

from forkpoc.config import EIP1967_IMPLEMENTATION_SLOT, ZERO_ADDRESS
from forkpoc.core.toolchain import Toolchain
from forkpoc.errors import ForkPocError
from forkpoc.models import ContractTarget


def decode_address_word(word: str) -> str:
    """Lowercased address held in the low 20 bytes of a 32-byte storage word."""
    raw = word.strip().lower()
    if raw.startswith("0x"):
        raw = raw[2:]
    if len(raw) > 64 or any(c not in string.hexdigits for c in raw):
        raise ForkPocError(f"Unexpected storage word: '{word.strip()}'")
    return "0x" + raw.zfill(64)[-40:]


def resolve_target(address: str, toolchain: Toolchain) -> ContractTarget:
    """
    Reads the EIP-1967 implementation slot of address.
    An empty slot means the address runs its own code; otherwise the code
    comes from the implementation while storage stays at address.
    """
    implementation = decode_address_word(toolchain.storage_at(address, EIP1967_IMPLEMENTATION_SLOT))
    data = toolchain.checksum(address)

    if implementation == ZERO_ADDRESS:
        return ContractTarget(address=address, logic=data, data=data)
    return ContractTarget(address=address, logic=toolchain.checksum(implementation), data=data)
