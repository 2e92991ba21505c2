import json
import pytest
from web3 import Web3

from migrations.artifacts import ArtifactStore
from migrations.deployer import Deployer
from migrations.errors import TransactionFailedError
from migrations.registry import DeploymentRegistry


def _fn(name, *inputs):
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": f"_{i}", "type": t} for i, t in enumerate(inputs)],
        "outputs": [],
        "stateMutability": "nonpayable",
    }


def _ctor(*inputs):
    return {"type": "constructor", "inputs": [{"name": f"_{i}", "type": t} for i, t in enumerate(inputs)]}


ABIS = {
    "Storage": [_ctor()],
    "StorageManager": [_ctor(), _fn("giveAccess", "address", "bytes32"), _fn("blockAccess", "address", "bytes32")],
    "Roles2Library": [
        _ctor("address", "bytes32"),
        _fn("setupEventsHistory", "address"),
        _fn("setRootUser", "address", "bool"),
        _fn("setPublicCapability", "address", "bytes4", "bool"),
        _fn("addRoleCapability", "uint8", "address", "bytes4"),
        _fn("removeRoleCapability", "uint8", "address", "bytes4"),
        _fn("addUserRole", "address", "uint8"),
        _fn("removeUserRole", "address", "uint8"),
    ],
    "Roles2LibraryAdapter": [
        _ctor("address"),
        _fn("setRoles2Library", "address"),
        _fn("setupEventsHistory", "address"),
    ],
}


class FakeStorage:
    def __init__(self):
        pass


class FakeStorageManager:
    def __init__(self):
        self.access = {}

    def giveAccess(self, address, label):
        self.access[address] = as_text(label)

    def blockAccess(self, address, label):
        self.access.pop(address, None)


class FakeRoles2Library:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = as_text(name)
        self.events_history = None
        self.root_users = set()
        self.public_capabilities = set()
        self.role_capabilities = set()
        self.user_roles = set()

    def setupEventsHistory(self, address):
        self.events_history = address

    def setRootUser(self, account, enabled):
        if enabled:
            self.root_users.add(account)
        else:
            self.root_users.discard(account)

    def setPublicCapability(self, target, sig, enabled):
        if enabled:
            self.public_capabilities.add((target, bytes(sig)))
        else:
            self.public_capabilities.discard((target, bytes(sig)))

    def addRoleCapability(self, role, target, sig):
        self.role_capabilities.add((role, target, bytes(sig)))

    def removeRoleCapability(self, role, target, sig):
        self.role_capabilities.discard((role, target, bytes(sig)))

    def addUserRole(self, account, role):
        self.user_roles.add((account, role))

    def removeUserRole(self, account, role):
        self.user_roles.discard((account, role))


class FakeRoles2LibraryAdapter:
    def __init__(self, roles2library):
        self.roles2library = roles2library
        self.events_history = None

    def setRoles2Library(self, address):
        self.roles2library = address

    def setupEventsHistory(self, address):
        self.events_history = address


FAKE_CONTRACTS = {
    "Storage": FakeStorage,
    "StorageManager": FakeStorageManager,
    "Roles2Library": FakeRoles2Library,
    "Roles2LibraryAdapter": FakeRoles2LibraryAdapter,
}


def as_text(value):
    if isinstance(value, bytes):
        return value.rstrip(b"\0").decode("utf-8")
    return value


def make_address(n):
    return Web3.to_checksum_address(f"0x{n:040x}")


class FakeChainClient:
    """In-memory stand-in for ChainClient: each contract is a Python object."""

    def __init__(self, accounts):
        self._accounts = list(accounts)
        self.contracts = {}
        self.deployments = []
        self.transactions = []
        self.fail_on = set()

    def accounts(self):
        return list(self._accounts)

    def deploy(self, artifact, args):
        address = make_address(0x1000 + len(self.contracts))
        self.contracts[address] = FAKE_CONTRACTS[artifact.name](*args)
        self.deployments.append((artifact.name, tuple(args)))
        return address

    def transact(self, address, abi, function, args):
        contract = self.contracts.get(address)
        if contract is None or function in self.fail_on or not hasattr(contract, function):
            raise TransactionFailedError(f"{function} on {address}")
        getattr(contract, function)(*args)
        self.transactions.append((address, function, tuple(args)))
        return {"status": 1}

    def contract(self, address):
        return self.contracts[address]


ACCOUNTS = [make_address(0xA0 + i) for i in range(3)]


@pytest.fixture
def artifacts_dir(tmp_path):
    build = tmp_path / "build" / "contracts"
    build.mkdir(parents=True)
    for name, abi in ABIS.items():
        (build / f"{name}.json").write_text(json.dumps({"contractName": name, "abi": abi, "bytecode": "0x6080"}))
    return build


@pytest.fixture
def chain():
    return FakeChainClient(ACCOUNTS)


@pytest.fixture
def registry(tmp_path):
    return DeploymentRegistry.load(str(tmp_path / "deployment.json"), "development")


@pytest.fixture
def make_deployer(chain, registry, artifacts_dir):
    def factory(options=()):
        return Deployer(chain, registry, ArtifactStore(str(artifacts_dir)),
                        aliases={"UserContract": "Roles2LibraryAdapter"}, options=options)
    return factory


@pytest.fixture
def bare_deployer(make_deployer):
    """Deployer on a network where nothing is deployed yet."""
    return make_deployer()


@pytest.fixture
def deployer(make_deployer):
    """Deployer with Storage and StorageManager already on chain."""
    d = make_deployer()
    d.deploy("Storage")
    d.deploy("StorageManager")
    return d


@pytest.fixture
def accounts():
    return list(ACCOUNTS)
