import os
import json
import logging
from typing import Dict, Optional
from web3 import Web3

from .errors import DependencyNotFoundError, MigrationError

logger = logging.getLogger(__name__)


class DeploymentRegistry:
    """
    Deployed contract addresses and migration progress for one network.

    The backing file holds every network side by side:

        {"development": {"contracts": {"Storage": "0x..."}, "lastCompletedMigration": 2}}
    """

    def __init__(self, path: str, network: str, data: Optional[Dict] = None):
        self.path = path
        self.network = network
        self._data = data if data is not None else {}

    @classmethod
    def load(cls, path: str, network: str) -> "DeploymentRegistry":
        data = {}
        if os.path.exists(path):
            with open(path, 'r') as f:
                data = json.load(f)
            logger.info(f"Loaded deployment data from {path}")
        return cls(path, network, data)

    def save(self):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump(self._data, f, indent=2, sort_keys=True)

    def _section(self) -> Dict:
        section = self._data.setdefault(self.network, {})
        section.setdefault("contracts", {})
        section.setdefault("lastCompletedMigration", 0)
        return section

    @property
    def contracts(self) -> Dict[str, str]:
        return dict(self._section()["contracts"])

    def address_of(self, name: str) -> Optional[str]:
        return self._section()["contracts"].get(name)

    def require_address(self, name: str) -> str:
        address = self.address_of(name)
        if address is None:
            raise DependencyNotFoundError(name, self.network)
        return address

    def register(self, name: str, address: str):
        if not Web3.is_address(address):
            raise MigrationError(f"Invalid address for {name}: '{address}'")
        checksum_address = Web3.to_checksum_address(address)
        self._section()["contracts"][name] = checksum_address
        logger.info(f"{name} registered at {checksum_address} on {self.network}")

    @property
    def last_completed(self) -> int:
        return int(self._section()["lastCompletedMigration"])

    def mark_completed(self, number: int):
        self._section()["lastCompletedMigration"] = number

    def reset_progress(self, number: int = 0):
        self._section()["lastCompletedMigration"] = number
