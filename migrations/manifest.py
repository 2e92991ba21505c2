"""
Declarative migration steps.

A step is an ordered list of actions. Arguments may be literals or
references that are resolved against the deployment registry and the
account list when the step runs.
"""

import os
import re
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from .contracts import EventsHistorySink, RolesLibrary, StorageManager
from .deployer import Deployer
from .errors import MigrationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Address:
    """Address of a deployed contract."""
    contract: str


@dataclass(frozen=True)
class AccountAt:
    """Entry of the account list handed to the step."""
    index: int


@dataclass(frozen=True)
class Selector:
    """4-byte signature of `function` on a deployed contract."""
    contract: str
    function: str


def references(value: Any) -> List[str]:
    if isinstance(value, (Address, Selector)):
        return [value.contract]
    return []


def resolve(value: Any, deployer: Deployer, accounts: Sequence[str]) -> Any:
    if isinstance(value, Address):
        return deployer.deployed(value.contract).address
    if isinstance(value, Selector):
        return deployer.deployed(value.contract).selector(value.function)
    if isinstance(value, AccountAt):
        if not 0 <= value.index < len(accounts):
            raise MigrationError(f"Account #{value.index} requested but only {len(accounts)} available")
        return accounts[value.index]
    return value


class Action:
    option: Optional[str] = None

    def contracts(self) -> List[str]:
        """Contract names this action reads or calls."""
        raise NotImplementedError

    def deploys(self) -> Optional[str]:
        return None

    def apply(self, deployer: Deployer, accounts: Sequence[str]):
        raise NotImplementedError


@dataclass(frozen=True)
class Deploy(Action):
    contract: str
    args: Tuple[Any, ...] = ()
    option: Optional[str] = None

    def contracts(self):
        return [name for arg in self.args for name in references(arg)]

    def deploys(self):
        return self.contract

    def apply(self, deployer, accounts):
        args = [resolve(arg, deployer, accounts) for arg in self.args]
        return deployer.deploy(self.contract, *args)


@dataclass(frozen=True)
class GiveAccess(Action):
    manager: str
    grantee: Any
    label: str
    option: Optional[str] = None

    def contracts(self):
        return [self.manager] + references(self.grantee)

    def apply(self, deployer, accounts):
        manager = StorageManager(deployer.deployed(self.manager))
        return manager.give_access(resolve(self.grantee, deployer, accounts), self.label)


@dataclass(frozen=True)
class SetupEventsHistory(Action):
    contract: str
    events_history: Any
    option: Optional[str] = None

    def contracts(self):
        return [self.contract] + references(self.events_history)

    def apply(self, deployer, accounts):
        sink = EventsHistorySink(deployer.deployed(self.contract))
        return sink.setup_events_history(resolve(self.events_history, deployer, accounts))


@dataclass(frozen=True)
class SetRootUser(Action):
    library: str
    account: Any
    enabled: bool = True
    option: Optional[str] = None

    def contracts(self):
        return [self.library] + references(self.account)

    def apply(self, deployer, accounts):
        library = RolesLibrary(deployer.deployed(self.library))
        return library.set_root_user(resolve(self.account, deployer, accounts), self.enabled)


@dataclass(frozen=True)
class SetPublicCapability(Action):
    library: str
    target: str
    function: str
    enabled: bool = True
    option: Optional[str] = None

    def contracts(self):
        return [self.library, self.target]

    def apply(self, deployer, accounts):
        library = RolesLibrary(deployer.deployed(self.library))
        signature = resolve(Selector(self.target, self.function), deployer, accounts)
        target = resolve(Address(self.target), deployer, accounts)
        return library.set_public_capability(target, signature, self.enabled)


@dataclass(frozen=True)
class AddRoleCapability(Action):
    library: str
    role: int
    target: str
    function: str
    option: Optional[str] = None

    def contracts(self):
        return [self.library, self.target]

    def apply(self, deployer, accounts):
        library = RolesLibrary(deployer.deployed(self.library))
        signature = resolve(Selector(self.target, self.function), deployer, accounts)
        target = resolve(Address(self.target), deployer, accounts)
        return library.add_role_capability(self.role, target, signature)


@dataclass(frozen=True)
class AddUserRole(Action):
    library: str
    account: Any
    role: int
    option: Optional[str] = None

    def contracts(self):
        return [self.library] + references(self.account)

    def apply(self, deployer, accounts):
        library = RolesLibrary(deployer.deployed(self.library))
        return library.add_user_role(resolve(self.account, deployer, accounts), self.role)


def step_number(filename: str) -> int:
    """Leading integer of a step module name, e.g. `_3_deploy_useradapter.py` -> 3."""
    match = re.match(r"_*(\d+)", os.path.basename(filename))
    if match is None:
        raise MigrationError(f"Cannot parse a migration number from {filename}")
    return int(match.group(1))


@dataclass
class Migration:
    number: int
    label: str
    status: str
    actions: Sequence[Action] = field(default_factory=list)

    def active_actions(self, deployer: Deployer) -> List[Action]:
        return [action for action in self.actions if deployer.enabled(action.option)]

    def dependencies(self, deployer: Deployer) -> List[str]:
        """Contracts that must already be deployed before this step starts."""
        produced = set()
        needed: List[str] = []
        for action in self.active_actions(deployer):
            for name in action.contracts():
                if name not in produced and name not in needed:
                    needed.append(name)
            if action.deploys():
                produced.add(action.deploys())
        return needed

    def __call__(self, deployer: Deployer, network: str, accounts: Sequence[str]):
        if network != deployer.network:
            raise MigrationError(f"Deployer is bound to '{deployer.network}', not '{network}'")

        for name in self.dependencies(deployer):
            deployer.deployed(name)

        results = [action.apply(deployer, accounts) for action in self.active_actions(deployer)]

        logger.info(f"[MIGRATION] [{self.number}] {self.label}: {self.status}")
        return results
