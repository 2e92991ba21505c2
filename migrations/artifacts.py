import os
import re
import glob
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
from eth_utils import function_abi_to_4byte_selector

from .errors import ArtifactNotFoundError, MigrationError

logger = logging.getLogger(__name__)

FIXED_BYTES = re.compile(r"bytes([0-9]+)$")


def encode_text_args(inputs: Sequence[Dict[str, Any]], args: Sequence[Any]) -> List[Any]:
    """Plain text given for a bytesN parameter is UTF-8 encoded and right padded with zeros."""
    encoded = list(args)
    for i, (abi_input, value) in enumerate(zip(inputs, args)):
        match = FIXED_BYTES.match(abi_input.get("type", ""))
        if match is None or not isinstance(value, str) or value.startswith("0x"):
            continue
        size = int(match.group(1))
        raw = value.encode("utf-8")
        if len(raw) > size:
            raise MigrationError(f"'{value}' does not fit in {abi_input['type']}")
        encoded[i] = raw.ljust(size, b"\0")
    return encoded


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract: ABI plus creation bytecode."""
    name: str
    abi: List[Dict[str, Any]]
    bytecode: Optional[str] = None

    @property
    def deployable(self) -> bool:
        return bool(self.bytecode) and self.bytecode not in ("0x", "0x0")

    def function_abi(self, function: str) -> Dict[str, Any]:
        matches = [
            entry for entry in self.abi
            if entry.get("type", "function") == "function" and entry.get("name") == function
        ]
        if not matches:
            raise MigrationError(f"{self.name} has no function named '{function}'")
        if len(matches) > 1:
            raise MigrationError(f"{self.name}.{function} is overloaded; cannot pick a signature")
        return matches[0]

    def constructor_args(self, args: Sequence[Any]) -> List[Any]:
        inputs = next((e.get("inputs", []) for e in self.abi if e.get("type") == "constructor"), [])
        return encode_text_args(inputs, args)

    def function_args(self, function: str, args: Sequence[Any]) -> List[Any]:
        return encode_text_args(self.function_abi(function).get("inputs", []), args)

    def selector(self, function: str) -> bytes:
        """
        4-byte function signature used as a capability key.

        Args:
            function: Function name as declared in the ABI

        Returns:
            First 4 bytes of keccak256 over the canonical declaration
        """
        return function_abi_to_4byte_selector(self.function_abi(function))


def find_artifact_file(artifacts_dir: str, name: str) -> Optional[str]:
    """Locates <name>.json in a Truffle build dir or a Hardhat artifacts tree."""
    direct = os.path.join(artifacts_dir, f"{name}.json")
    if os.path.isfile(direct):
        return direct
    nested = sorted(glob.glob(os.path.join(artifacts_dir, "**", f"{name}.json"), recursive=True))
    return nested[0] if nested else None


def load_artifact(artifacts_dir: str, name: str) -> ContractArtifact:
    path = find_artifact_file(artifacts_dir, name)
    if path is None:
        raise ArtifactNotFoundError(f"No artifact for {name} under {artifacts_dir}. Compile the contracts first.")

    with open(path, 'r') as f:
        data = json.load(f)
    if 'abi' not in data:
        raise ArtifactNotFoundError(f"Artifact {path} has no ABI")

    bytecode = data.get('bytecode')
    if isinstance(bytecode, dict):
        # solc standard JSON output nests the hex under "object"
        bytecode = bytecode.get('object')
    if bytecode and not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    logger.debug(f"Loaded artifact {name} from {path}")
    return ContractArtifact(name=name, abi=data['abi'], bytecode=bytecode)


class ArtifactStore:
    """Name -> compiled interface lookup, cached for the lifetime of a run."""

    def __init__(self, artifacts_dir: str):
        self.artifacts_dir = artifacts_dir
        self._cache: Dict[str, ContractArtifact] = {}

    def require(self, name: str) -> ContractArtifact:
        if name not in self._cache:
            self._cache[name] = load_artifact(self.artifacts_dir, name)
        return self._cache[name]
