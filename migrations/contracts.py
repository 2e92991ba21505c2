"""
Thin wrappers around the external contracts the migrations talk to.

All permission logic lives on chain; these classes only name the calls.
"""

from enum import IntEnum

from .deployer import ContractHandle


class Roles(IntEnum):
    ADMIN = 2
    MODERATOR = 4
    USER = 11


class StorageManager:
    def __init__(self, handle: ContractHandle):
        self.handle = handle

    @property
    def address(self) -> str:
        return self.handle.address

    def give_access(self, address: str, label: str):
        """Allow `address` to write into the shared storage under `label`."""
        return self.handle.transact("giveAccess", address, label)

    def block_access(self, address: str, label: str):
        return self.handle.transact("blockAccess", address, label)


class EventsHistorySink:
    """Any contract that emits through an EventsHistory/MultiEventsHistory."""

    def __init__(self, handle: ContractHandle):
        self.handle = handle

    @property
    def address(self) -> str:
        return self.handle.address

    def setup_events_history(self, events_history: str):
        return self.handle.transact("setupEventsHistory", events_history)


class RolesLibrary(EventsHistorySink):
    """Roles2Library: account -> role and (role|public, contract, sig) -> allowed."""

    def set_root_user(self, account: str, enabled: bool = True):
        return self.handle.transact("setRootUser", account, enabled)

    def set_public_capability(self, target: str, signature: bytes, enabled: bool = True):
        return self.handle.transact("setPublicCapability", target, signature, enabled)

    def add_role_capability(self, role: int, target: str, signature: bytes):
        return self.handle.transact("addRoleCapability", int(role), target, signature)

    def remove_role_capability(self, role: int, target: str, signature: bytes):
        return self.handle.transact("removeRoleCapability", int(role), target, signature)

    def add_user_role(self, account: str, role: int):
        return self.handle.transact("addUserRole", account, int(role))

    def remove_user_role(self, account: str, role: int):
        return self.handle.transact("removeUserRole", account, int(role))
